"""Multi-curve rates calibration.

This package builds discount and forward curves from market quotes by
calibrating groups of curves simultaneously, and derives sensitivities to
those quotes.

Key modules:
- conventions: Day counts, calendars, tenors, schedules and rate indices
- interpolation: Curve interpolators and extrapolators
- curves: Nodal and functional curves, calibration nodes, curve groups
- market: Market data, FX rates, point and parameter sensitivities
- instruments: Resolved calibration trades and their conventions
- valuation: Rates provider and discounting pricers
- calibration: Calibration measures, Newton curve calibrator, market quote sensitivity
- sensitivity: Finite difference sensitivity and cross gamma
- sabr: SABR smile fitting and swaption surface calibration
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # Main modules are imported via subpackages
    "conventions",
    "interpolation",
    "curves",
    "market",
    "instruments",
    "valuation",
    "calibration",
    "sensitivity",
    "sabr",
    "config",
    "errors",
]
