"""
Resolved FX swaps.
"""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class ResolvedFxSwap:
    """Near leg buys the base notional at near_rate, far leg sells it back at near_rate + points.

    Rates are counter currency units per unit of base currency.
    """

    base_currency: str
    counter_currency: str
    notional: float
    near_date: date
    far_date: date
    near_rate: float
    forward_points: float

    def __post_init__(self):
        if self.far_date <= self.near_date:
            raise ValueError(f"FX swap far date {self.far_date} must be after near date {self.near_date}")
        if self.base_currency == self.counter_currency:
            raise ValueError("FX swap currencies must differ")

    @property
    def far_rate(self) -> float:
        return self.near_rate + self.forward_points

    @property
    def currency(self) -> str:
        return self.counter_currency

    @property
    def market_quote(self) -> float:
        return self.forward_points

    @property
    def end_date(self) -> date:
        return self.far_date
