"""
QuantLib-backed holiday calendars.
"""

from datetime import date, datetime
from typing import Dict, Union

import QuantLib as ql

from .daycount import from_ql_date, to_ql_date


class Calendar:
    """Business day calendar wrapping a QuantLib calendar."""

    def __init__(self, name: str, ql_calendar: ql.Calendar):
        self.name = name
        self._ql_calendar = ql_calendar

    def is_business_day(self, dt: Union[date, datetime]) -> bool:
        """Check if date is a business day (not weekend or holiday)."""
        return self._ql_calendar.isBusinessDay(to_ql_date(dt))

    def is_holiday(self, dt: Union[date, datetime]) -> bool:
        """Check if date is a holiday."""
        return self._ql_calendar.isHoliday(to_ql_date(dt))

    def add_business_days(self, start_date: Union[date, datetime], days: int) -> date:
        """Move by a number of business days (negative moves backwards)."""
        ql_result = self._ql_calendar.advance(to_ql_date(start_date), days, ql.Days)
        return from_ql_date(ql_result)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Calendar({self.name!r})"


def joint_calendar(name: str, *calendars: Calendar) -> Calendar:
    """Calendar whose business days are business days in every input."""
    if len(calendars) < 2:
        raise ValueError("A joint calendar needs at least two calendars")
    joint = calendars[0]._ql_calendar
    for other in calendars[1:]:
        joint = ql.JointCalendar(joint, other._ql_calendar)
    return Calendar(name, joint)


# Pre-defined calendar instances
TARGET = Calendar("TARGET", ql.TARGET())
USNY = Calendar("USNY", ql.UnitedStates(ql.UnitedStates.Settlement))
GBLO = Calendar("GBLO", ql.UnitedKingdom())
WEEKEND_ONLY = Calendar("WEEKEND", ql.WeekendsOnly())
EUTA_USNY = joint_calendar("EUTA+USNY", TARGET, USNY)

# Calendar registry
CALENDARS: Dict[str, Calendar] = {
    "TARGET": TARGET,
    "EUTA": TARGET,
    "EUR": TARGET,
    "USNY": USNY,
    "USD": USNY,
    "GBLO": GBLO,
    "GBP": GBLO,
    "WEEKEND": WEEKEND_ONLY,
    "EUTA+USNY": EUTA_USNY,
}


def get_calendar(name: Union[str, Calendar]) -> Calendar:
    """Get a calendar by name (instances pass through)."""
    if isinstance(name, Calendar):
        return name
    key = name.upper()
    if key not in CALENDARS:
        raise ValueError(
            f"Unknown calendar: {name}. Available: {list(CALENDARS.keys())}"
        )
    return CALENDARS[key]
