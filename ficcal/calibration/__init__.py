"""
Calibration package: measures, group ordering, Newton calibrator and market
quote sensitivity.
"""

from .calibrator import CurveCalibrator
from .market_quote import MarketQuoteSensitivityCalculator
from .measures import (
    DEFAULT,
    MARKET_QUOTE,
    PAR_RATE,
    PAR_SPREAD,
    PRESENT_VALUE,
    CalibrationMeasure,
    CalibrationMeasures,
    MarketQuoteMeasure,
    MeasureUnit,
    ParRateMeasure,
    ParSpreadMeasure,
    PresentValueMeasure,
)
from .ordering import calibration_order, group_dependencies

__all__ = [
    "CurveCalibrator",
    "MarketQuoteSensitivityCalculator",
    "CalibrationMeasure",
    "CalibrationMeasures",
    "MeasureUnit",
    "ParSpreadMeasure",
    "ParRateMeasure",
    "PresentValueMeasure",
    "MarketQuoteMeasure",
    "PAR_SPREAD",
    "PAR_RATE",
    "PRESENT_VALUE",
    "MARKET_QUOTE",
    "DEFAULT",
    "calibration_order",
    "group_dependencies",
]
