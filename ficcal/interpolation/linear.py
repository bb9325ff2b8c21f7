"""
Piecewise linear interpolation schemes.

LINEAR interpolates the node values directly, LOG_LINEAR interpolates their
logarithm (positive values only) and PRODUCT_LINEAR interpolates x*y, which on
a zero-rate curve is linear interpolation of log discount factors.
"""

import math

import numpy as np

from ficcal.errors import InvalidCurveDefinition

from .base import BoundCurveInterpolator, CurveInterpolator


class LinearInterpolator(CurveInterpolator):
    """Linear interpolation on node values."""

    name = "LINEAR"

    def _bind(self, x, y, left, right):
        return _BoundLinear(x, y, left, right)


class _BoundLinear(BoundCurveInterpolator):

    def _weight(self, t: float):
        i = self.locate(t)
        h = self.x[i + 1] - self.x[i]
        return i, h, (t - self.x[i]) / h

    def interpolate(self, t: float) -> float:
        i, _, w = self._weight(t)
        if w == 0.0:
            return float(self.y[i])
        if w == 1.0:
            return float(self.y[i + 1])
        return float(self.y[i] + w * (self.y[i + 1] - self.y[i]))

    def interpolate_first_derivative(self, t: float) -> float:
        i, h, _ = self._weight(t)
        return float((self.y[i + 1] - self.y[i]) / h)

    def interpolate_parameter_sensitivity(self, t: float) -> np.ndarray:
        i, _, w = self._weight(t)
        sensitivity = np.zeros(self.size)
        sensitivity[i] = 1.0 - w
        sensitivity[i + 1] = w
        return sensitivity

    def first_derivative_sensitivity(self, t: float) -> np.ndarray:
        i, h, _ = self._weight(t)
        sensitivity = np.zeros(self.size)
        sensitivity[i] = -1.0 / h
        sensitivity[i + 1] = 1.0 / h
        return sensitivity


class LogLinearInterpolator(CurveInterpolator):
    """Linear interpolation on the logarithm of node values.

    Suited to discount-factor curves, where it gives piecewise constant
    forward rates.
    """

    name = "LOG_LINEAR"

    def _bind(self, x, y, left, right):
        if np.any(y <= 0):
            raise InvalidCurveDefinition("LOG_LINEAR interpolation requires positive values")
        return _BoundLogLinear(x, y, left, right)


class _BoundLogLinear(BoundCurveInterpolator):

    def __init__(self, x, y, left, right):
        super().__init__(x, y, left, right)
        self.log_y = np.log(y)

    def _weight(self, t: float):
        i = self.locate(t)
        h = self.x[i + 1] - self.x[i]
        return i, h, (t - self.x[i]) / h

    def interpolate(self, t: float) -> float:
        i, _, w = self._weight(t)
        if w == 0.0:
            return float(self.y[i])
        if w == 1.0:
            return float(self.y[i + 1])
        return math.exp(self.log_y[i] + w * (self.log_y[i + 1] - self.log_y[i]))

    def interpolate_first_derivative(self, t: float) -> float:
        i, h, _ = self._weight(t)
        return self.interpolate(t) * (self.log_y[i + 1] - self.log_y[i]) / h

    def interpolate_parameter_sensitivity(self, t: float) -> np.ndarray:
        i, _, w = self._weight(t)
        value = self.interpolate(t)
        sensitivity = np.zeros(self.size)
        sensitivity[i] = value * (1.0 - w) / self.y[i]
        sensitivity[i + 1] = value * w / self.y[i + 1]
        return sensitivity

    def first_derivative_sensitivity(self, t: float) -> np.ndarray:
        i, h, _ = self._weight(t)
        value = self.interpolate(t)
        slope = (self.log_y[i + 1] - self.log_y[i]) / h
        sensitivity = self.interpolate_parameter_sensitivity(t) * slope
        sensitivity[i] -= value / (h * self.y[i])
        sensitivity[i + 1] += value / (h * self.y[i + 1])
        return sensitivity


class ProductLinearInterpolator(CurveInterpolator):
    """Linear interpolation on x * y.

    On a zero-rate curve x * y is minus the log discount factor, so this is
    the usual log-linear discount factor scheme expressed on zero rates.
    """

    name = "PRODUCT_LINEAR"

    def _bind(self, x, y, left, right):
        return _BoundProductLinear(x, y, left, right)


class _BoundProductLinear(BoundCurveInterpolator):

    def __init__(self, x, y, left, right):
        super().__init__(x, y, left, right)
        self.products = x * y

    def _weight(self, t: float):
        i = self.locate(t)
        h = self.x[i + 1] - self.x[i]
        return i, h, (t - self.x[i]) / h

    def interpolate(self, t: float) -> float:
        i, _, w = self._weight(t)
        if w == 0.0:
            return float(self.y[i])
        if w == 1.0:
            return float(self.y[i + 1])
        if t == 0.0:
            return float(self.y[i] + w * (self.y[i + 1] - self.y[i]))
        product = self.products[i] + w * (self.products[i + 1] - self.products[i])
        return float(product / t)

    def interpolate_first_derivative(self, t: float) -> float:
        i, h, w = self._weight(t)
        if t == 0.0:
            return float((self.y[i + 1] - self.y[i]) / h)
        product = self.products[i] + w * (self.products[i + 1] - self.products[i])
        slope = (self.products[i + 1] - self.products[i]) / h
        return float((slope * t - product) / (t * t))

    def interpolate_parameter_sensitivity(self, t: float) -> np.ndarray:
        i, _, w = self._weight(t)
        sensitivity = np.zeros(self.size)
        if t == 0.0:
            sensitivity[i] = 1.0 - w
            sensitivity[i + 1] = w
        else:
            sensitivity[i] = self.x[i] * (1.0 - w) / t
            sensitivity[i + 1] = self.x[i + 1] * w / t
        return sensitivity

    def first_derivative_sensitivity(self, t: float) -> np.ndarray:
        i, h, w = self._weight(t)
        sensitivity = np.zeros(self.size)
        if t == 0.0:
            sensitivity[i] = -1.0 / h
            sensitivity[i + 1] = 1.0 / h
            return sensitivity
        # d/dy of (P'(t) t - P(t)) / t^2 with P linear in the node products
        sensitivity[i] = (-self.x[i] / h * t - self.x[i] * (1.0 - w)) / (t * t)
        sensitivity[i + 1] = (self.x[i + 1] / h * t - self.x[i + 1] * w) / (t * t)
        return sensitivity
