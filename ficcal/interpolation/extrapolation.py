"""
Extrapolators applied outside the node range, one per side of a curve.
"""

import numpy as np

from ficcal.errors import InvalidCurveDefinition


class CurveExtrapolator:
    """Base extrapolator; `boundary` is the nearest node and `index` its position."""

    name: str = ""

    def value(self, bound, t: float, boundary: float, index: int) -> float:
        raise NotImplementedError

    def first_derivative(self, bound, t: float, boundary: float, index: int) -> float:
        raise NotImplementedError

    def parameter_sensitivity(self, bound, t: float, boundary: float, index: int) -> np.ndarray:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FlatExtrapolator(CurveExtrapolator):
    """Hold the boundary node value."""

    name = "FLAT"

    def value(self, bound, t, boundary, index):
        return float(bound.y[index])

    def first_derivative(self, bound, t, boundary, index):
        return 0.0

    def parameter_sensitivity(self, bound, t, boundary, index):
        sensitivity = np.zeros(bound.size)
        sensitivity[index] = 1.0
        return sensitivity


class LinearExtrapolator(CurveExtrapolator):
    """Continue along the interpolator's slope at the boundary node."""

    name = "LINEAR"

    def value(self, bound, t, boundary, index):
        slope = bound.interpolate_first_derivative(boundary)
        return float(bound.y[index] + slope * (t - boundary))

    def first_derivative(self, bound, t, boundary, index):
        return bound.interpolate_first_derivative(boundary)

    def parameter_sensitivity(self, bound, t, boundary, index):
        sensitivity = bound.first_derivative_sensitivity(boundary) * (t - boundary)
        sensitivity[index] += 1.0
        return sensitivity


class ExceptionExtrapolator(CurveExtrapolator):
    """Refuse to evaluate outside the node range."""

    name = "EXCEPTION"

    def _fail(self, bound, t):
        raise InvalidCurveDefinition(
            f"x = {t} is outside the node range [{bound.x[0]}, {bound.x[-1]}] "
            f"and extrapolation is disabled"
        )

    def value(self, bound, t, boundary, index):
        self._fail(bound, t)

    def first_derivative(self, bound, t, boundary, index):
        self._fail(bound, t)

    def parameter_sensitivity(self, bound, t, boundary, index):
        self._fail(bound, t)


FLAT = FlatExtrapolator()
LINEAR = LinearExtrapolator()
EXCEPTION = ExceptionExtrapolator()
