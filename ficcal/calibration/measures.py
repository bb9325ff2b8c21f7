"""
Calibration measures: the quantity driven to zero for each calibration trade.

A measure turns a resolved trade and a trial rates provider into a residual,
its sensitivity to curve parameters and its derivative with respect to the
trade's own market quote. Measures are grouped in registries keyed by the
resolved trade type.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, Type

from ficcal.instruments.deposit import ResolvedIborFixingDeposit, ResolvedTermDeposit
from ficcal.instruments.fra import ResolvedFra, ResolvedIborFuture
from ficcal.instruments.fx import ResolvedFxSwap
from ficcal.instruments.swap import ResolvedSwap
from ficcal.market.parameter import CurrencyParameterSensitivities
from ficcal.valuation import ImmutableRatesProvider, get_pricer

logger = logging.getLogger(__name__)


class MeasureUnit(Enum):
    """Unit of a residual, which selects the convergence tolerance."""

    RATE = "RATE"
    CURRENCY = "CURRENCY"


class CalibrationMeasure:
    """Residual of one trade type under one measure.

    The residual is ``value(trade) - target(trade)``. For most measures the
    target is zero; the market quote measure compares the implied quote with
    the quoted one.
    """

    name = ""
    unit = MeasureUnit.RATE

    def __init__(self, trade_type: Type):
        self.trade_type = trade_type

    def value(self, trade, provider: ImmutableRatesProvider) -> float:
        raise NotImplementedError

    def point_sensitivity(self, trade, provider: ImmutableRatesProvider):
        raise NotImplementedError

    def quote_sensitivity(self, trade, provider: ImmutableRatesProvider) -> float:
        """Derivative of the residual with respect to the trade's market quote."""
        return -1.0

    def target(self, trade) -> float:
        return 0.0

    def scale(self, trade) -> float:
        return 1.0

    def residual(self, trade, provider: ImmutableRatesProvider) -> float:
        return self.value(trade, provider) - self.target(trade)

    def sensitivity(self, trade, provider: ImmutableRatesProvider) -> CurrencyParameterSensitivities:
        """Sensitivity of the value to the parameters of every curve in the provider."""
        return provider.parameter_sensitivity(self.point_sensitivity(trade, provider))

    def __repr__(self) -> str:
        return f"{self.name}({self.trade_type.__name__})"


class ParSpreadMeasure(CalibrationMeasure):
    """Par spread: the amount to add to the quote for the trade to be worth zero."""

    name = "ParSpread"

    def value(self, trade, provider):
        return get_pricer(trade).par_spread(trade, provider)

    def point_sensitivity(self, trade, provider):
        return get_pricer(trade).par_spread_sensitivity(trade, provider)


class ParRateMeasure(CalibrationMeasure):
    """Par rate minus the quoted rate, for trades with a fixed rate."""

    name = "ParRate"

    def value(self, trade, provider):
        return get_pricer(trade).par_rate(trade, provider)

    def point_sensitivity(self, trade, provider):
        return get_pricer(trade).par_rate_sensitivity(trade, provider)

    def target(self, trade):
        return trade.market_quote


class PresentValueMeasure(CalibrationMeasure):
    """Present value in the trade's first currency."""

    name = "PresentValue"
    unit = MeasureUnit.CURRENCY

    def value(self, trade, provider):
        return get_pricer(trade).present_value(trade, provider)

    def point_sensitivity(self, trade, provider):
        return get_pricer(trade).present_value_sensitivity(trade, provider)

    def quote_sensitivity(self, trade, provider):
        return get_pricer(trade).pvbp(trade, provider)

    def scale(self, trade):
        return abs(trade.notional)


class MarketQuoteMeasure(CalibrationMeasure):
    """Market-implied quote: rate for rate trades, price for futures, points for FX swaps."""

    name = "MarketQuote"

    def value(self, trade, provider):
        return trade.market_quote + get_pricer(trade).par_spread(trade, provider)

    def point_sensitivity(self, trade, provider):
        return get_pricer(trade).par_spread_sensitivity(trade, provider)

    def target(self, trade):
        return trade.market_quote


class CalibrationMeasures:
    """Registry of calibration measures keyed by resolved trade type."""

    def __init__(self, name: str, measures: Iterable[CalibrationMeasure]):
        self.name = name
        self._measures: Dict[Type, CalibrationMeasure] = {}
        for measure in measures:
            if measure.trade_type in self._measures:
                raise ValueError(
                    f"Measures '{name}' define {measure.trade_type.__name__} more than once"
                )
            self._measures[measure.trade_type] = measure

    @classmethod
    def of(cls, name: str, *measures: CalibrationMeasure) -> "CalibrationMeasures":
        return cls(name, measures)

    @property
    def trade_types(self):
        return tuple(self._measures)

    def measure(self, trade) -> CalibrationMeasure:
        """Measure registered for the trade's type."""
        measure = self._measures.get(type(trade))
        if measure is None:
            raise ValueError(
                f"Calibration measures '{self.name}' have no entry for trade type {type(trade).__name__}"
            )
        return measure

    def value(self, trade, provider: ImmutableRatesProvider) -> float:
        return self.measure(trade).value(trade, provider)

    def residual(self, trade, provider: ImmutableRatesProvider) -> float:
        return self.measure(trade).residual(trade, provider)

    def sensitivity(self, trade, provider: ImmutableRatesProvider) -> CurrencyParameterSensitivities:
        return self.measure(trade).sensitivity(trade, provider)

    def quote_sensitivity(self, trade, provider: ImmutableRatesProvider) -> float:
        return self.measure(trade).quote_sensitivity(trade, provider)

    def __repr__(self) -> str:
        types = ", ".join(t.__name__ for t in self._measures)
        return f"CalibrationMeasures({self.name!r}: {types})"


ALL_TRADE_TYPES = (
    ResolvedTermDeposit,
    ResolvedIborFixingDeposit,
    ResolvedFra,
    ResolvedIborFuture,
    ResolvedSwap,
    ResolvedFxSwap,
)

PAR_SPREAD = CalibrationMeasures("ParSpread", [ParSpreadMeasure(t) for t in ALL_TRADE_TYPES])
PAR_RATE = CalibrationMeasures(
    "ParRate",
    [ParRateMeasure(t) for t in (ResolvedTermDeposit, ResolvedIborFixingDeposit, ResolvedFra, ResolvedSwap)],
)
PRESENT_VALUE = CalibrationMeasures("PresentValue", [PresentValueMeasure(t) for t in ALL_TRADE_TYPES])
MARKET_QUOTE = CalibrationMeasures("MarketQuote", [MarketQuoteMeasure(t) for t in ALL_TRADE_TYPES])
DEFAULT = PAR_SPREAD
