"""
Calibration settings.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union


@dataclass(frozen=True)
class CalibrationConfig:
    """Tolerances and iteration budget of the curve calibrator.

    Attributes:
        tolerance_rate: Absolute tolerance of rate residuals (par spread,
            par rate, market quote)
        tolerance_pv: Tolerance of present value residuals per unit of
            trade notional
        max_iterations: Newton steps allowed per curve group
        pivot_tolerance: Relative size under which an LU pivot makes the
            Jacobian singular, as a multiple of machine epsilon times the
            matrix size
    """

    tolerance_rate: float = 1e-9
    tolerance_pv: float = 1e-6
    max_iterations: int = 100
    pivot_tolerance: float = 1.0

    def __post_init__(self):
        if self.tolerance_rate <= 0 or self.tolerance_pv <= 0:
            raise ValueError("Calibration tolerances must be positive")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if self.pivot_tolerance <= 0:
            raise ValueError("pivot_tolerance must be positive")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "CalibrationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown calibration settings: {unknown}")
        return cls(**dict(values))

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "CalibrationConfig":
        with open(path, encoding="utf-8") as handle:
            return cls.from_dict(json.load(handle))

    def to_dict(self) -> dict:
        return asdict(self)
