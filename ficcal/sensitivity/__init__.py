"""Finite difference sensitivity and cross gamma."""

from .finite_difference import FiniteDifferenceSensitivityCalculator
from .gamma import CurveGammaCalculator

__all__ = ["FiniteDifferenceSensitivityCalculator", "CurveGammaCalculator"]
