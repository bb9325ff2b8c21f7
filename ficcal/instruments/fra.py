"""
Resolved forward rate agreements and Ibor futures.
"""

from dataclasses import dataclass
from datetime import date

from ficcal.conventions.indices import IborRateObservation
from ficcal.conventions.types import BuySell


@dataclass(frozen=True)
class ResolvedFra:
    """FRA settled at the period start with FRA discounting; the buyer pays fixed."""

    currency: str
    notional: float
    observation: IborRateObservation
    payment_date: date
    start_date: date
    end_date: date
    year_fraction: float
    fixed_rate: float
    buy_sell: BuySell = BuySell.BUY

    @property
    def market_quote(self) -> float:
        return self.fixed_rate


@dataclass(frozen=True)
class ResolvedIborFuture:
    """Futures position valued against a reference price, without convexity adjustment.

    Prices are in decimal form (0.9975 rather than 99.75).
    """

    currency: str
    notional: float
    observation: IborRateObservation
    accrual_factor: float
    reference_price: float
    quantity: float = 1.0

    @property
    def market_quote(self) -> float:
        return self.reference_price

    @property
    def end_date(self) -> date:
        return self.observation.maturity_date
