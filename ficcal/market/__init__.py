"""
Market data inputs and sensitivity result types.
"""

from .fx import CurrencyAmount, FxMatrix, MultiCurrencyAmount
from .parameter import (
    CrossGammaParameterSensitivity,
    CurrencyParameterSensitivities,
    CurrencyParameterSensitivity,
)
from .quotes import MarketData
from .sensitivity import (
    DiscountFactorSensitivity,
    IborRateSensitivity,
    OvernightRateSensitivity,
    PointSensitivities,
)

__all__ = [
    "CurrencyAmount",
    "MultiCurrencyAmount",
    "FxMatrix",
    "MarketData",
    "DiscountFactorSensitivity",
    "IborRateSensitivity",
    "OvernightRateSensitivity",
    "PointSensitivities",
    "CurrencyParameterSensitivity",
    "CurrencyParameterSensitivities",
    "CrossGammaParameterSensitivity",
]
