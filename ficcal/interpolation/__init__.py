"""
Curve interpolation and extrapolation with node sensitivities.

Every scheme reproduces the node values exactly and reports the derivative of
the interpolated value with respect to each node value.
"""

from .base import BoundCurveInterpolator, CurveInterpolator
from .extrapolation import (
    EXCEPTION,
    FLAT,
    LINEAR,
    CurveExtrapolator,
    ExceptionExtrapolator,
    FlatExtrapolator,
    LinearExtrapolator,
)
from .factory import (
    create_extrapolator,
    create_interpolator,
    discount_factor_to_zero_rate,
    zero_rate_to_discount_factor,
)
from .linear import LinearInterpolator, LogLinearInterpolator, ProductLinearInterpolator
from .spline import NaturalCubicSplineInterpolator

__all__ = [
    'CurveInterpolator',
    'BoundCurveInterpolator',
    'LinearInterpolator',
    'LogLinearInterpolator',
    'ProductLinearInterpolator',
    'NaturalCubicSplineInterpolator',
    'CurveExtrapolator',
    'FlatExtrapolator',
    'LinearExtrapolator',
    'ExceptionExtrapolator',
    'FLAT',
    'LINEAR',
    'EXCEPTION',
    'create_interpolator',
    'create_extrapolator',
    'discount_factor_to_zero_rate',
    'zero_rate_to_discount_factor',
]
