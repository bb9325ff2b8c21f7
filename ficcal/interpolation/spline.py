"""
Natural cubic spline interpolation.

The second derivatives M at the nodes solve a tridiagonal system with
M_0 = M_{n-1} = 0. The system is linear in the node values, so the map
y -> M is a fixed matrix computed once at binding; parameter sensitivities
then follow from the same closed form as the value.
"""

import numpy as np
from scipy.linalg import solve_banded

from .base import BoundCurveInterpolator, CurveInterpolator
from .linear import _BoundLinear


class NaturalCubicSplineInterpolator(CurveInterpolator):
    """Natural cubic spline; two nodes degrade to linear interpolation."""

    name = "NATURAL_CUBIC_SPLINE"

    def _bind(self, x, y, left, right):
        if len(x) == 2:
            return _BoundLinear(x, y, left, right)
        return _BoundNaturalCubicSpline(x, y, left, right)


def _second_derivative_matrix(x: np.ndarray) -> np.ndarray:
    """Matrix S with M = S @ y for the natural spline through (x, y)."""
    n = len(x)
    h = np.diff(x)
    interior = n - 2

    # banded storage of the symmetric tridiagonal system on M_1..M_{n-2}
    bands = np.zeros((3, interior))
    bands[1, :] = 2.0 * (h[:-1] + h[1:])
    bands[0, 1:] = h[1:-1]
    bands[2, :-1] = h[1:-1]

    rhs = np.zeros((interior, n))
    for k in range(interior):
        i = k + 1
        rhs[k, i - 1] = 6.0 / h[i - 1]
        rhs[k, i] = -6.0 / h[i - 1] - 6.0 / h[i]
        rhs[k, i + 1] = 6.0 / h[i]

    matrix = np.zeros((n, n))
    matrix[1:-1, :] = solve_banded((1, 1), bands, rhs)
    return matrix


class _BoundNaturalCubicSpline(BoundCurveInterpolator):

    def __init__(self, x, y, left, right):
        super().__init__(x, y, left, right)
        self.second_derivative_matrix = _second_derivative_matrix(x)
        self.second_derivatives = self.second_derivative_matrix @ y

    def _coefficients(self, t: float):
        i = self.locate(t)
        h = self.x[i + 1] - self.x[i]
        a = (self.x[i + 1] - t) / h
        b = (t - self.x[i]) / h
        return i, h, a, b

    def interpolate(self, t: float) -> float:
        i, h, a, b = self._coefficients(t)
        if b == 0.0:
            return float(self.y[i])
        if a == 0.0:
            return float(self.y[i + 1])
        m = self.second_derivatives
        return float(
            a * self.y[i]
            + b * self.y[i + 1]
            + ((a ** 3 - a) * m[i] + (b ** 3 - b) * m[i + 1]) * h * h / 6.0
        )

    def interpolate_first_derivative(self, t: float) -> float:
        i, h, a, b = self._coefficients(t)
        m = self.second_derivatives
        return float(
            (self.y[i + 1] - self.y[i]) / h
            - (3.0 * a * a - 1.0) * h * m[i] / 6.0
            + (3.0 * b * b - 1.0) * h * m[i + 1] / 6.0
        )

    def interpolate_parameter_sensitivity(self, t: float) -> np.ndarray:
        i, h, a, b = self._coefficients(t)
        s = self.second_derivative_matrix
        sensitivity = ((a ** 3 - a) * s[i] + (b ** 3 - b) * s[i + 1]) * h * h / 6.0
        sensitivity[i] += a
        sensitivity[i + 1] += b
        return sensitivity

    def first_derivative_sensitivity(self, t: float) -> np.ndarray:
        i, h, a, b = self._coefficients(t)
        s = self.second_derivative_matrix
        sensitivity = (
            -(3.0 * a * a - 1.0) * h * s[i] / 6.0
            + (3.0 * b * b - 1.0) * h * s[i + 1] / 6.0
        )
        sensitivity[i] -= 1.0 / h
        sensitivity[i + 1] += 1.0 / h
        return sensitivity
