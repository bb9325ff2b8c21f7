"""
Tenor arithmetic, business day adjustment and periodic schedules.
"""

from __future__ import annotations

import calendar as _calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Union

from dateutil.relativedelta import relativedelta

from .calendars import Calendar
from .types import BusinessDayAdjustment, Frequency

_TENOR_PATTERN = re.compile(r"^(\d+)([DWMY])$")


@dataclass(frozen=True)
class Tenor:
    """A period such as '1W', '3M' or '10Y'."""

    amount: int
    unit: str

    @classmethod
    def parse(cls, text: Union[str, "Tenor"]) -> "Tenor":
        if isinstance(text, Tenor):
            return text
        match = _TENOR_PATTERN.match(text.upper().strip())
        if match is None:
            raise ValueError(f"Unsupported tenor: {text}")
        return cls(int(match.group(1)), match.group(2))

    @property
    def is_month_based(self) -> bool:
        return self.unit in ("M", "Y")

    @property
    def months(self) -> int:
        if self.unit == "M":
            return self.amount
        if self.unit == "Y":
            return self.amount * 12
        raise ValueError(f"Tenor {self} is not month based")

    @property
    def days(self) -> int:
        if self.unit == "D":
            return self.amount
        if self.unit == "W":
            return self.amount * 7
        raise ValueError(f"Tenor {self} is not day based")

    def add_to(self, start: date, end_of_month: bool = False) -> date:
        """Unadjusted date one tenor after start."""
        if self.is_month_based:
            return add_months(start, self.months, end_of_month)
        return start + timedelta(days=self.days)

    def __str__(self) -> str:
        return f"{self.amount}{self.unit}"


def is_end_of_month(dt: date) -> bool:
    """Check if date is the last calendar day of its month."""
    return dt.day == _calendar.monthrange(dt.year, dt.month)[1]


def add_months(dt: Union[date, datetime], months: int, end_of_month: bool = False) -> date:
    """Add months; month-end dates stay at month end when the rule applies."""
    if isinstance(dt, datetime):
        dt = dt.date()
    result = dt + relativedelta(months=months)
    if end_of_month and is_end_of_month(dt):
        result = result + relativedelta(day=31)
    return result


def adjust_date(
    dt: Union[date, datetime], adjustment: BusinessDayAdjustment, calendar: Calendar
) -> date:
    """Apply business day adjustment to a date."""
    if isinstance(dt, datetime):
        dt = dt.date()

    if adjustment == BusinessDayAdjustment.NO_ADJUSTMENT:
        return dt

    if adjustment in (BusinessDayAdjustment.FOLLOWING, BusinessDayAdjustment.MODIFIED_FOLLOWING):
        adjusted = dt
        while not calendar.is_business_day(adjusted):
            adjusted += timedelta(days=1)
        if adjustment == BusinessDayAdjustment.FOLLOWING or adjusted.month == dt.month:
            return adjusted
        adjustment = BusinessDayAdjustment.PRECEDING

    if adjustment in (BusinessDayAdjustment.PRECEDING, BusinessDayAdjustment.MODIFIED_PRECEDING):
        adjusted = dt
        while not calendar.is_business_day(adjusted):
            adjusted -= timedelta(days=1)
        if adjustment == BusinessDayAdjustment.PRECEDING or adjusted.month == dt.month:
            return adjusted
        return adjust_date(dt, BusinessDayAdjustment.FOLLOWING, calendar)

    raise ValueError(f"Unknown business day adjustment: {adjustment}")


def add_tenor(
    start: date,
    tenor: Union[str, Tenor],
    calendar: Calendar,
    adjustment: BusinessDayAdjustment = BusinessDayAdjustment.MODIFIED_FOLLOWING,
    end_of_month: bool = False,
) -> date:
    """Adjusted date one tenor after start."""
    return adjust_date(Tenor.parse(tenor).add_to(start, end_of_month), adjustment, calendar)


def get_spot_date(trade_date: Union[date, datetime], calendar: Calendar, spot_lag: int = 2) -> date:
    """Settlement date a number of business days after the trade date."""
    if isinstance(trade_date, datetime):
        trade_date = trade_date.date()
    if spot_lag == 0:
        return adjust_date(trade_date, BusinessDayAdjustment.FOLLOWING, calendar)
    return calendar.add_business_days(trade_date, spot_lag)


@dataclass(frozen=True)
class SchedulePeriod:
    """One accrual period with adjusted and unadjusted boundaries."""

    start_date: date
    end_date: date
    unadjusted_start_date: date
    unadjusted_end_date: date


def generate_schedule(
    start: date,
    end: date,
    frequency: Frequency,
    calendar: Calendar,
    adjustment: BusinessDayAdjustment = BusinessDayAdjustment.MODIFIED_FOLLOWING,
    end_of_month: bool = False,
) -> List[SchedulePeriod]:
    """Roll forward from start by the frequency, ending with a short final stub.

    Dates are generated from the unadjusted start so adjustments never
    accumulate; a TERM frequency yields a single period.
    """
    if end <= start:
        raise ValueError(f"Schedule end {end} must be after start {start}")

    unadjusted = [start]
    if frequency != Frequency.TERM:
        step = 1
        while True:
            candidate = add_months(start, frequency.months() * step, end_of_month)
            # roll dates within a week of the end collapse into the end date
            if candidate >= end - timedelta(days=7):
                break
            unadjusted.append(candidate)
            step += 1
    unadjusted.append(end)

    adjusted = [adjust_date(d, adjustment, calendar) for d in unadjusted]
    return [
        SchedulePeriod(adjusted[i], adjusted[i + 1], unadjusted[i], unadjusted[i + 1])
        for i in range(len(unadjusted) - 1)
    ]
