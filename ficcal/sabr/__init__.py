"""
SABR smile model: Hagan volatility, smile fitter and swaption surface calibration.
"""

from .fitter import ANALYTIC, BUMP, SabrFitResult, SabrSmileFitter
from .formula import SabrParameters, hagan_volatility
from .swaption import (
    RawOptionData,
    SabrNode,
    SabrParametersSurface,
    SabrSwaptionCalibrator,
    StrikeType,
)

__all__ = [
    "SabrParameters",
    "hagan_volatility",
    "SabrSmileFitter",
    "SabrFitResult",
    "ANALYTIC",
    "BUMP",
    "RawOptionData",
    "StrikeType",
    "SabrNode",
    "SabrParametersSurface",
    "SabrSwaptionCalibrator",
]
