"""
Ibor and overnight index definitions and fixing observations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Union

from .calendars import TARGET, USNY, Calendar
from .dates import Tenor, add_tenor
from .daycount import ACT_360, DayCountConvention
from .types import BusinessDayAdjustment


@dataclass(frozen=True)
class IborIndex:
    """Term rate index such as EUR-EURIBOR-3M."""

    name: str
    currency: str
    tenor: Tenor
    day_count: DayCountConvention = field(compare=False)
    calendar: Calendar = field(compare=False)
    spot_lag: int = 2
    adjustment: BusinessDayAdjustment = BusinessDayAdjustment.MODIFIED_FOLLOWING
    end_of_month: bool = True

    def effective_date(self, fixing_date: date) -> date:
        """Start of the deposit period fixed on the given date."""
        return self.calendar.add_business_days(fixing_date, self.spot_lag)

    def fixing_date(self, effective_date: date) -> date:
        """Fixing date of a deposit period starting on the given date."""
        return self.calendar.add_business_days(effective_date, -self.spot_lag)

    def maturity_date(self, effective_date: date) -> date:
        return add_tenor(
            effective_date, self.tenor, self.calendar, self.adjustment, self.end_of_month
        )

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class OvernightIndex:
    """Overnight rate index such as EUR-ESTR."""

    name: str
    currency: str
    day_count: DayCountConvention = field(compare=False)
    calendar: Calendar = field(compare=False)

    def __str__(self) -> str:
        return self.name


Index = Union[IborIndex, OvernightIndex]


@dataclass(frozen=True)
class IborRateObservation:
    """A single fixing of an Ibor index with its resolved deposit period."""

    index: IborIndex
    fixing_date: date
    effective_date: date
    maturity_date: date
    year_fraction: float

    @classmethod
    def of(cls, index: IborIndex, fixing_date: date) -> "IborRateObservation":
        effective = index.effective_date(fixing_date)
        maturity = index.maturity_date(effective)
        return cls(
            index=index,
            fixing_date=fixing_date,
            effective_date=effective,
            maturity_date=maturity,
            year_fraction=index.day_count.year_fraction(effective, maturity),
        )

    @property
    def currency(self) -> str:
        return self.index.currency


# Pre-defined indices
EUR_EURIBOR_3M = IborIndex("EUR-EURIBOR-3M", "EUR", Tenor.parse("3M"), ACT_360, TARGET)
EUR_EURIBOR_6M = IborIndex("EUR-EURIBOR-6M", "EUR", Tenor.parse("6M"), ACT_360, TARGET)
USD_LIBOR_3M = IborIndex("USD-LIBOR-3M", "USD", Tenor.parse("3M"), ACT_360, USNY)
USD_LIBOR_6M = IborIndex("USD-LIBOR-6M", "USD", Tenor.parse("6M"), ACT_360, USNY)
EUR_ESTR = OvernightIndex("EUR-ESTR", "EUR", ACT_360, TARGET)
USD_FED_FUND = OvernightIndex("USD-FED-FUND", "USD", ACT_360, USNY)
USD_SOFR = OvernightIndex("USD-SOFR", "USD", ACT_360, USNY)

INDICES: Dict[str, Index] = {
    index.name: index
    for index in (
        EUR_EURIBOR_3M,
        EUR_EURIBOR_6M,
        USD_LIBOR_3M,
        USD_LIBOR_6M,
        EUR_ESTR,
        USD_FED_FUND,
        USD_SOFR,
    )
}


def get_index(name: Union[str, IborIndex, OvernightIndex]) -> Index:
    """Get an index by name (instances pass through)."""
    if isinstance(name, (IborIndex, OvernightIndex)):
        return name
    key = name.upper()
    if key not in INDICES:
        raise ValueError(f"Unknown index: {name}. Available: {list(INDICES.keys())}")
    return INDICES[key]
