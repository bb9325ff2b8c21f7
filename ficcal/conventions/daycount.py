"""
QuantLib-backed day count conventions.

Accrual year fractions of resolved trades and the time axis of every curve go
through these objects, so a curve and the trades calibrated to it agree on how
dates become year fractions.
"""

from datetime import date, datetime
from typing import Dict, Union

import QuantLib as ql


def to_date(dt: Union[date, datetime]) -> date:
    """Convert datetime to date if needed."""
    return dt.date() if isinstance(dt, datetime) else dt


def to_ql_date(dt: Union[date, datetime]) -> ql.Date:
    """Convert Python date/datetime to QuantLib Date."""
    py_date = to_date(dt)
    return ql.Date(py_date.day, py_date.month, py_date.year)


def from_ql_date(ql_date: ql.Date) -> date:
    """Convert QuantLib Date to Python date."""
    return date(ql_date.year(), ql_date.month(), ql_date.dayOfMonth())


class DayCountConvention:
    """Named wrapper around a QuantLib day counter."""

    def __init__(self, name: str, ql_daycount: ql.DayCounter):
        self.name = name
        self._ql_daycount = ql_daycount

    def year_fraction(
        self, start: Union[date, datetime], end: Union[date, datetime]
    ) -> float:
        """Accrual year fraction between two dates; zero when end <= start."""
        if to_date(end) <= to_date(start):
            return 0.0
        return self._ql_daycount.yearFraction(to_ql_date(start), to_ql_date(end))

    def relative_year_fraction(
        self, start: Union[date, datetime], end: Union[date, datetime]
    ) -> float:
        """Signed year fraction, negative when end is before start.

        Curves convert dates into x-values with this function, so a date
        before the valuation date maps to a negative time.
        """
        start_date = to_date(start)
        end_date = to_date(end)
        if end_date == start_date:
            return 0.0
        if end_date < start_date:
            return -self._ql_daycount.yearFraction(
                to_ql_date(end_date), to_ql_date(start_date)
            )
        return self._ql_daycount.yearFraction(
            to_ql_date(start_date), to_ql_date(end_date)
        )

    def day_count(
        self, start: Union[date, datetime], end: Union[date, datetime]
    ) -> int:
        """Number of days between two dates under this convention."""
        return self._ql_daycount.dayCount(to_ql_date(start), to_ql_date(end))

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"DayCountConvention({self.name!r})"


# Pre-defined day count convention instances
ACT_360 = DayCountConvention("ACT/360", ql.Actual360())
ACT_365F = DayCountConvention("ACT/365F", ql.Actual365Fixed())
THIRTY_360E = DayCountConvention("30E/360", ql.Thirty360(ql.Thirty360.European))
THIRTY_360U = DayCountConvention("30U/360", ql.Thirty360(ql.Thirty360.BondBasis))
ACT_ACT = DayCountConvention("ACT/ACT", ql.ActualActual(ql.ActualActual.ISDA))

# Registry
DAY_COUNT_CONVENTIONS: Dict[str, DayCountConvention] = {
    "ACT/360": ACT_360,
    "ACTUAL/360": ACT_360,
    "ACT/365F": ACT_365F,
    "ACT/365": ACT_365F,
    "ACTUAL/365F": ACT_365F,
    "30E/360": THIRTY_360E,
    "30/360E": THIRTY_360E,
    "30/360 EUROPEAN": THIRTY_360E,
    "30U/360": THIRTY_360U,
    "30/360": THIRTY_360U,
    "30/360 US": THIRTY_360U,
    "ACT/ACT": ACT_ACT,
    "ACT/ACT ISDA": ACT_ACT,
}


def get_day_count_convention(
    name: Union[str, DayCountConvention]
) -> DayCountConvention:
    """Get a day count convention by name (instances pass through)."""
    if isinstance(name, DayCountConvention):
        return name
    name_upper = name.upper()
    if name_upper not in DAY_COUNT_CONVENTIONS:
        raise ValueError(
            f"Unknown day count convention: {name}. "
            f"Available: {list(DAY_COUNT_CONVENTIONS.keys())}"
        )
    return DAY_COUNT_CONVENTIONS[name_upper]
