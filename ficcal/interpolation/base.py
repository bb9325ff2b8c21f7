"""
Base classes for curve interpolators.

An interpolator is a stateless strategy; binding it to node x/y values gives a
``BoundCurveInterpolator`` that evaluates the curve, its slope and the
sensitivity of both to each node value. Queries outside the node range are
routed to the extrapolator configured for that side.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

from ficcal.errors import InvalidCurveDefinition

if TYPE_CHECKING:
    from .extrapolation import CurveExtrapolator


class CurveInterpolator(ABC):
    """Named interpolation scheme."""

    name: str = ""
    min_nodes: int = 2

    def bind(
        self,
        x_values,
        y_values,
        left: "CurveExtrapolator",
        right: "CurveExtrapolator",
    ) -> "BoundCurveInterpolator":
        """Bind the scheme to node values and side extrapolators."""
        x = np.asarray(x_values, dtype=float)
        y = np.asarray(y_values, dtype=float)
        if x.ndim != 1 or y.ndim != 1:
            raise InvalidCurveDefinition("Node values must be one-dimensional")
        if len(x) != len(y):
            raise InvalidCurveDefinition(
                f"x and y must have same length, got {len(x)} and {len(y)}"
            )
        if len(x) == 0:
            raise InvalidCurveDefinition("At least one node is required")
        if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
            raise InvalidCurveDefinition("Node values must be finite")
        if np.any(np.diff(x) <= 0):
            raise InvalidCurveDefinition("x values must be strictly increasing")
        if len(x) == 1:
            return SingleNodeInterpolator(x, y, left, right)
        if len(x) < self.min_nodes:
            raise InvalidCurveDefinition(
                f"{self.name} interpolation needs at least {self.min_nodes} nodes, got {len(x)}"
            )
        return self._bind(x, y, left, right)

    @abstractmethod
    def _bind(self, x: np.ndarray, y: np.ndarray, left, right) -> "BoundCurveInterpolator":
        pass

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BoundCurveInterpolator(ABC):
    """Interpolator bound to node values."""

    def __init__(self, x: np.ndarray, y: np.ndarray, left, right):
        self.x = x
        self.y = y
        self.left = left
        self.right = right
        self.size = len(x)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def value(self, t: float) -> float:
        if t < self.x[0]:
            return self.left.value(self, t, self.x[0], 0)
        if t > self.x[-1]:
            return self.right.value(self, t, self.x[-1], self.size - 1)
        return self.interpolate(t)

    def first_derivative(self, t: float) -> float:
        if t < self.x[0]:
            return self.left.first_derivative(self, t, self.x[0], 0)
        if t > self.x[-1]:
            return self.right.first_derivative(self, t, self.x[-1], self.size - 1)
        return self.interpolate_first_derivative(t)

    def parameter_sensitivity(self, t: float) -> np.ndarray:
        if t < self.x[0]:
            return self.left.parameter_sensitivity(self, t, self.x[0], 0)
        if t > self.x[-1]:
            return self.right.parameter_sensitivity(self, t, self.x[-1], self.size - 1)
        return self.interpolate_parameter_sensitivity(t)

    # ------------------------------------------------------------------
    # In-range behaviour implemented per scheme
    # ------------------------------------------------------------------

    def locate(self, t: float) -> int:
        """Index i of the interval [x_i, x_{i+1}] containing t."""
        i = int(np.searchsorted(self.x, t, side="right")) - 1
        return min(max(i, 0), self.size - 2)

    @abstractmethod
    def interpolate(self, t: float) -> float:
        pass

    @abstractmethod
    def interpolate_first_derivative(self, t: float) -> float:
        pass

    @abstractmethod
    def interpolate_parameter_sensitivity(self, t: float) -> np.ndarray:
        pass

    @abstractmethod
    def first_derivative_sensitivity(self, t: float) -> np.ndarray:
        """Sensitivity of the in-range slope at t to each node value."""


class SingleNodeInterpolator(BoundCurveInterpolator):
    """A curve with one node: the node value, with the side extrapolators outside it.

    The slope at the node is zero, so linear extrapolation stays flat.
    """

    def interpolate(self, t: float) -> float:
        return float(self.y[0])

    def interpolate_first_derivative(self, t: float) -> float:
        return 0.0

    def interpolate_parameter_sensitivity(self, t: float) -> np.ndarray:
        return np.ones(1)

    def first_derivative_sensitivity(self, t: float) -> np.ndarray:
        return np.zeros(1)
