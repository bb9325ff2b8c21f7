"""
Resolved money market deposits.
"""

from dataclasses import dataclass
from datetime import date

from ficcal.conventions.indices import IborRateObservation
from ficcal.conventions.types import BuySell


@dataclass(frozen=True)
class ResolvedTermDeposit:
    """Fixed rate deposit: the buyer lends the notional at start and is repaid with interest."""

    currency: str
    notional: float
    start_date: date
    end_date: date
    year_fraction: float
    rate: float
    buy_sell: BuySell = BuySell.BUY

    def __post_init__(self):
        if self.end_date <= self.start_date:
            raise ValueError(f"Deposit end {self.end_date} must be after start {self.start_date}")

    @property
    def market_quote(self) -> float:
        return self.rate

    @property
    def interest(self) -> float:
        return self.notional * self.rate * self.year_fraction


@dataclass(frozen=True)
class ResolvedIborFixingDeposit:
    """Deposit exchanging a fixed rate against one Ibor fixing at maturity.

    The buyer pays the fixed rate and receives the fixing.
    """

    currency: str
    notional: float
    observation: IborRateObservation
    start_date: date
    end_date: date
    year_fraction: float
    rate: float
    buy_sell: BuySell = BuySell.BUY

    @property
    def market_quote(self) -> float:
        return self.rate
