"""
Resolved swaps: legs of dated payment periods and notional exchanges.

The first leg is the quoted leg. Its fixed rate (or spread over the index)
is what a market quote sets, and par spreads are measured on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Tuple, Union

from ficcal.conventions.indices import IborRateObservation, OvernightIndex
from ficcal.conventions.types import PayReceive


@dataclass(frozen=True)
class FixedRatePeriod:
    payment_date: date
    start_date: date
    end_date: date
    year_fraction: float
    notional: float
    rate: float


@dataclass(frozen=True)
class IborRatePeriod:
    payment_date: date
    start_date: date
    end_date: date
    year_fraction: float
    notional: float
    observation: IborRateObservation
    spread: float = 0.0


@dataclass(frozen=True)
class OvernightRatePeriod:
    """Daily compounded overnight rate over the accrual period."""

    payment_date: date
    start_date: date
    end_date: date
    year_fraction: float
    notional: float
    index: OvernightIndex
    spread: float = 0.0


PaymentPeriod = Union[FixedRatePeriod, IborRatePeriod, OvernightRatePeriod]


@dataclass(frozen=True)
class NotionalExchange:
    """Notional exchanged on a date, signed as seen by the leg.

    The initial exchange of a leg is negative and the final one positive; the
    leg direction then decides who pays.
    """

    payment_date: date
    amount: float


@dataclass(frozen=True)
class ResolvedSwapLeg:
    currency: str
    pay_receive: PayReceive
    periods: Tuple[PaymentPeriod, ...]
    notional_exchanges: Tuple[NotionalExchange, ...] = field(default=())

    def __post_init__(self):
        if not self.periods:
            raise ValueError("A swap leg needs at least one payment period")
        object.__setattr__(self, "periods", tuple(self.periods))
        object.__setattr__(self, "notional_exchanges", tuple(self.notional_exchanges))

    @property
    def start_date(self) -> date:
        return self.periods[0].start_date

    @property
    def end_date(self) -> date:
        return self.periods[-1].end_date

    @property
    def is_fixed(self) -> bool:
        return all(isinstance(p, FixedRatePeriod) for p in self.periods)

    @property
    def quoted_rate(self) -> float:
        """Fixed rate of a fixed leg or spread of a floating leg."""
        first = self.periods[0]
        return first.rate if isinstance(first, FixedRatePeriod) else first.spread

    def with_quoted_rate(self, value: float) -> "ResolvedSwapLeg":
        periods = tuple(
            replace(p, rate=value) if isinstance(p, FixedRatePeriod) else replace(p, spread=value)
            for p in self.periods
        )
        return replace(self, periods=periods)


@dataclass(frozen=True)
class ResolvedSwap:
    legs: Tuple[ResolvedSwapLeg, ...]

    def __post_init__(self):
        if not self.legs:
            raise ValueError("A swap needs at least one leg")
        object.__setattr__(self, "legs", tuple(self.legs))

    @property
    def quoted_leg(self) -> ResolvedSwapLeg:
        return self.legs[0]

    @property
    def currency(self) -> str:
        return self.legs[0].currency

    @property
    def currencies(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(leg.currency for leg in self.legs))

    @property
    def notional(self) -> float:
        return abs(self.legs[0].periods[0].notional)

    @property
    def start_date(self) -> date:
        return min(leg.start_date for leg in self.legs)

    @property
    def end_date(self) -> date:
        return max(leg.end_date for leg in self.legs)

    @property
    def market_quote(self) -> float:
        return self.quoted_leg.quoted_rate

    def with_quoted_rate(self, value: float) -> "ResolvedSwap":
        return ResolvedSwap((self.legs[0].with_quoted_rate(value),) + self.legs[1:])
