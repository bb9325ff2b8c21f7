"""
Curve nodes: one calibration instrument template tied to one market quote.

A node knows which curves its instrument needs, the date that becomes its
x-value on the curve, how to build the resolved trade at the quoted level and
what starting value to give the curve parameter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, Optional, Union

from ficcal.conventions.dates import Tenor
from ficcal.instruments.conventions import (
    FixedIborSwapConvention,
    FixedOvernightSwapConvention,
    FraConvention,
    FxSwapConvention,
    IborFixingDepositConvention,
    IborFutureConvention,
    IborIborSwapConvention,
    TermDepositConvention,
    XCcyIborIborSwapConvention,
)
from ficcal.market.quotes import MarketData

from .base import CurveKey, ValueType


class CurveNode(ABC):
    """Base class for calibration nodes."""

    quote_id: str

    @property
    @abstractmethod
    def label(self) -> str:
        pass

    @abstractmethod
    def requirements(self) -> FrozenSet[CurveKey]:
        """Curves the node's instrument is priced with."""

    @abstractmethod
    def trade(self, valuation_date: date, market_data: MarketData):
        """Resolved trade at the quoted level, notional one."""

    @abstractmethod
    def _template(self, valuation_date: date):
        """Resolved trade at an arbitrary level, used for dates only."""

    def date(self, valuation_date: date) -> date:
        """Date giving the node's position on the curve (instrument end)."""
        return self._template(valuation_date).end_date

    def initial_guess(self, market_data: MarketData, value_type: ValueType) -> float:
        if value_type == ValueType.DISCOUNT_FACTOR:
            return 1.0
        return self._zero_rate_guess(market_data)

    def _zero_rate_guess(self, market_data: MarketData) -> float:
        return market_data.quote(self.quote_id)


@dataclass(frozen=True)
class TermDepositCurveNode(CurveNode):
    convention: TermDepositConvention
    tenor: Union[str, Tenor]
    quote_id: str
    node_label: Optional[str] = None

    @property
    def label(self) -> str:
        return self.node_label or str(Tenor.parse(self.tenor))

    def requirements(self):
        return frozenset({CurveKey.discount(self.convention.currency)})

    def _template(self, valuation_date):
        return self.convention.to_trade(valuation_date, self.tenor, 0.0)

    def trade(self, valuation_date, market_data):
        return self.convention.to_trade(valuation_date, self.tenor, market_data.quote(self.quote_id))


@dataclass(frozen=True)
class IborFixingDepositCurveNode(CurveNode):
    convention: IborFixingDepositConvention
    quote_id: str
    node_label: Optional[str] = None

    @property
    def label(self) -> str:
        return self.node_label or str(self.convention.index.tenor)

    def requirements(self):
        index = self.convention.index
        return frozenset({CurveKey.discount(index.currency), CurveKey.index(index)})

    def _template(self, valuation_date):
        return self.convention.to_trade(valuation_date, 0.0)

    def trade(self, valuation_date, market_data):
        return self.convention.to_trade(valuation_date, market_data.quote(self.quote_id))


@dataclass(frozen=True)
class FraCurveNode(CurveNode):
    convention: FraConvention
    period_to_start: Union[str, Tenor]
    period_to_end: Union[str, Tenor]
    quote_id: str
    node_label: Optional[str] = None

    @property
    def label(self) -> str:
        return self.node_label or f"{Tenor.parse(self.period_to_start)}x{Tenor.parse(self.period_to_end)}"

    def requirements(self):
        index = self.convention.index
        return frozenset({CurveKey.discount(index.currency), CurveKey.index(index)})

    def _template(self, valuation_date):
        return self.convention.to_trade(valuation_date, self.period_to_start, self.period_to_end, 0.0)

    def trade(self, valuation_date, market_data):
        return self.convention.to_trade(
            valuation_date, self.period_to_start, self.period_to_end, market_data.quote(self.quote_id)
        )


@dataclass(frozen=True)
class IborFutureCurveNode(CurveNode):
    """Future quoted as a decimal price; the node sits at the end of the underlying deposit."""

    convention: IborFutureConvention
    sequence_number: int
    quote_id: str
    node_label: Optional[str] = None

    @property
    def label(self) -> str:
        return self.node_label or f"{self.convention.index.name}-F{self.sequence_number}"

    def requirements(self):
        return frozenset({CurveKey.index(self.convention.index)})

    def _template(self, valuation_date):
        return self.convention.to_trade(valuation_date, self.sequence_number, 1.0)

    def trade(self, valuation_date, market_data):
        return self.convention.to_trade(
            valuation_date, self.sequence_number, market_data.quote(self.quote_id)
        )

    def _zero_rate_guess(self, market_data):
        return 1.0 - market_data.quote(self.quote_id)


@dataclass(frozen=True)
class FixedIborSwapCurveNode(CurveNode):
    convention: FixedIborSwapConvention
    tenor: Union[str, Tenor]
    quote_id: str
    node_label: Optional[str] = None

    @property
    def label(self) -> str:
        return self.node_label or str(Tenor.parse(self.tenor))

    def requirements(self):
        index = self.convention.index
        return frozenset({CurveKey.discount(index.currency), CurveKey.index(index)})

    def _template(self, valuation_date):
        return self.convention.to_trade(valuation_date, self.tenor, 0.0)

    def trade(self, valuation_date, market_data):
        return self.convention.to_trade(valuation_date, self.tenor, market_data.quote(self.quote_id))


@dataclass(frozen=True)
class FixedOvernightSwapCurveNode(CurveNode):
    convention: FixedOvernightSwapConvention
    tenor: Union[str, Tenor]
    quote_id: str
    node_label: Optional[str] = None

    @property
    def label(self) -> str:
        return self.node_label or str(Tenor.parse(self.tenor))

    def requirements(self):
        index = self.convention.index
        return frozenset({CurveKey.discount(index.currency), CurveKey.index(index)})

    def _template(self, valuation_date):
        return self.convention.to_trade(valuation_date, self.tenor, 0.0)

    def trade(self, valuation_date, market_data):
        return self.convention.to_trade(valuation_date, self.tenor, market_data.quote(self.quote_id))


@dataclass(frozen=True)
class IborIborSwapCurveNode(CurveNode):
    """Basis swap quoted as the spread on the first index."""

    convention: IborIborSwapConvention
    tenor: Union[str, Tenor]
    quote_id: str
    node_label: Optional[str] = None

    @property
    def label(self) -> str:
        return self.node_label or str(Tenor.parse(self.tenor))

    def requirements(self):
        c = self.convention
        return frozenset({
            CurveKey.discount(c.spread_index.currency),
            CurveKey.index(c.spread_index),
            CurveKey.index(c.flat_index),
        })

    def _template(self, valuation_date):
        return self.convention.to_trade(valuation_date, self.tenor, 0.0)

    def trade(self, valuation_date, market_data):
        return self.convention.to_trade(valuation_date, self.tenor, market_data.quote(self.quote_id))

    def _zero_rate_guess(self, market_data):
        return 0.0


@dataclass(frozen=True)
class XCcyIborIborSwapCurveNode(CurveNode):
    """Cross-currency basis swap quoted as the spread on the first index."""

    convention: XCcyIborIborSwapConvention
    tenor: Union[str, Tenor]
    quote_id: str
    node_label: Optional[str] = None

    @property
    def label(self) -> str:
        return self.node_label or str(Tenor.parse(self.tenor))

    def requirements(self):
        c = self.convention
        return frozenset({
            CurveKey.discount(c.spread_index.currency),
            CurveKey.discount(c.flat_index.currency),
            CurveKey.index(c.spread_index),
            CurveKey.index(c.flat_index),
        })

    def _template(self, valuation_date):
        return self.convention.to_trade(valuation_date, self.tenor, 0.0, 1.0)

    def trade(self, valuation_date, market_data):
        base, counter = self.convention.currency_pair
        return self.convention.to_trade(
            valuation_date,
            self.tenor,
            market_data.quote(self.quote_id),
            market_data.fx_rate(base, counter),
        )

    def _zero_rate_guess(self, market_data):
        return 0.0


@dataclass(frozen=True)
class FxSwapCurveNode(CurveNode):
    """FX swap quoted as forward points over the spot rate of the market data."""

    convention: FxSwapConvention
    period: Union[str, Tenor]
    quote_id: str
    node_label: Optional[str] = None

    @property
    def label(self) -> str:
        return self.node_label or str(Tenor.parse(self.period))

    def requirements(self):
        c = self.convention
        return frozenset({CurveKey.discount(c.base_currency), CurveKey.discount(c.counter_currency)})

    def _template(self, valuation_date):
        return self.convention.to_trade(valuation_date, self.period, 1.0, 0.0)

    def trade(self, valuation_date, market_data):
        c = self.convention
        return c.to_trade(
            valuation_date,
            self.period,
            market_data.fx_rate(c.base_currency, c.counter_currency),
            market_data.quote(self.quote_id),
        )

    def _zero_rate_guess(self, market_data):
        return 0.0
