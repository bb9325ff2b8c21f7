"""
Name-based lookup of interpolators and extrapolators.
"""

import math
from typing import Dict, Union

from .base import CurveInterpolator
from .extrapolation import EXCEPTION, FLAT, LINEAR, CurveExtrapolator
from .linear import LinearInterpolator, LogLinearInterpolator, ProductLinearInterpolator
from .spline import NaturalCubicSplineInterpolator

INTERPOLATORS: Dict[str, CurveInterpolator] = {
    "LINEAR": LinearInterpolator(),
    "LOG_LINEAR": LogLinearInterpolator(),
    "PRODUCT_LINEAR": ProductLinearInterpolator(),
    "NATURAL_CUBIC_SPLINE": NaturalCubicSplineInterpolator(),
}

EXTRAPOLATORS: Dict[str, CurveExtrapolator] = {
    "FLAT": FLAT,
    "LINEAR": LINEAR,
    "EXCEPTION": EXCEPTION,
}


def create_interpolator(method: Union[str, CurveInterpolator]) -> CurveInterpolator:
    """
    Get an interpolator by method name.

    Args:
        method: LINEAR, LOG_LINEAR, PRODUCT_LINEAR or NATURAL_CUBIC_SPLINE
            (instances pass through)

    Returns:
        Interpolation scheme, unbound
    """
    if isinstance(method, CurveInterpolator):
        return method
    method_upper = method.upper()
    if method_upper not in INTERPOLATORS:
        raise ValueError(
            f"Unknown interpolation method: {method}. "
            f"Available: {', '.join(INTERPOLATORS)}"
        )
    return INTERPOLATORS[method_upper]


def create_extrapolator(method: Union[str, CurveExtrapolator]) -> CurveExtrapolator:
    """Get an extrapolator by name: FLAT, LINEAR or EXCEPTION."""
    if isinstance(method, CurveExtrapolator):
        return method
    method_upper = method.upper()
    if method_upper not in EXTRAPOLATORS:
        raise ValueError(
            f"Unknown extrapolation method: {method}. "
            f"Available: {', '.join(EXTRAPOLATORS)}"
        )
    return EXTRAPOLATORS[method_upper]


def discount_factor_to_zero_rate(df: float, time: float) -> float:
    """Convert discount factor to continuously compounded zero rate."""
    if df <= 0:
        raise ValueError("Discount factor must be positive")
    if time <= 0:
        raise ValueError("Time must be positive")
    return -math.log(df) / time


def zero_rate_to_discount_factor(rate: float, time: float) -> float:
    """Convert zero rate to discount factor."""
    return math.exp(-rate * time)
