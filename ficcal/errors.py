"""
Typed failures raised by the calibration library.

Configuration errors derive from ValueError, missing data from LookupError and
numerical failures from RuntimeError, so callers can catch either the specific
class or the broad category.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np


class InvalidCurveDefinition(ValueError):
    """Curve nodes or values that cannot form a valid curve."""

    def __init__(self, message: str, curve_name: Optional[str] = None):
        if curve_name:
            message = f"Curve '{curve_name}': {message}"
        super().__init__(message)
        self.curve_name = curve_name


class CurveGroupConfigurationError(ValueError):
    """Curve groups that cannot be calibrated as configured."""


class CyclicCurveDependency(CurveGroupConfigurationError):
    """Curve groups whose dependencies form a cycle."""

    def __init__(self, cycle: Sequence[str]):
        self.cycle = tuple(cycle)
        super().__init__(
            "Curve groups have a cyclic dependency: " + " -> ".join(self.cycle)
        )


class CurveGroupSizeMismatch(CurveGroupConfigurationError):
    """Group with a different number of instruments and curve parameters."""

    def __init__(self, group_name: str, instrument_count: int, parameter_count: int):
        self.group_name = group_name
        self.instrument_count = instrument_count
        self.parameter_count = parameter_count
        super().__init__(
            f"Curve group '{group_name}' has {instrument_count} calibration "
            f"instruments but {parameter_count} curve parameters"
        )


class MissingMarketData(LookupError):
    """A market quote or fixing needed for pricing is not available."""

    def __init__(self, identifier: str, detail: str = ""):
        self.identifier = identifier
        message = f"Market data not found: {identifier}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class MissingCurve(LookupError):
    """A curve for a currency or index is not available."""

    def __init__(self, key: str, available: Sequence[str] = ()):
        self.key = key
        message = f"No curve available for {key}"
        if available:
            message = f"{message}. Available: {sorted(available)}"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class SingularJacobian(RuntimeError):
    """Calibration Jacobian that cannot be inverted."""

    def __init__(self, group_name: str, iteration: int, pivot: float):
        self.group_name = group_name
        self.iteration = iteration
        self.pivot = pivot
        super().__init__(
            f"Singular calibration Jacobian in group '{group_name}' at iteration "
            f"{iteration} (smallest pivot {pivot:.3e})"
        )


class CalibrationDidNotConverge(RuntimeError):
    """Newton iteration exhausted its budget without meeting the tolerance."""

    def __init__(self, group_name: str, iterations: int, residuals: np.ndarray):
        self.group_name = group_name
        self.iterations = iterations
        self.residuals = np.asarray(residuals, dtype=float)
        worst = float(np.max(np.abs(self.residuals))) if self.residuals.size else 0.0
        super().__init__(
            f"Calibration of group '{group_name}' did not converge after "
            f"{iterations} iterations (max |residual| = {worst:.3e})"
        )


class InsufficientSmileData(ValueError):
    """Smile with fewer valid quotes than free model parameters."""

    def __init__(self, points: int, parameters: int, node: str = ""):
        self.points = points
        self.parameters = parameters
        self.node = node
        location = f" at {node}" if node else ""
        super().__init__(
            f"Smile{location} has {points} valid data points, "
            f"at least {parameters} are required"
        )
