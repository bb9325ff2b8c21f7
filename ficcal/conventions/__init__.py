"""
Market conventions: day counts, calendars, tenors, schedules and indices.
"""

from .calendars import CALENDARS, GBLO, TARGET, USNY, WEEKEND_ONLY, Calendar, get_calendar
from .dates import (
    SchedulePeriod,
    Tenor,
    add_months,
    add_tenor,
    adjust_date,
    generate_schedule,
    get_spot_date,
)
from .daycount import (
    ACT_360,
    ACT_365F,
    ACT_ACT,
    THIRTY_360E,
    THIRTY_360U,
    DayCountConvention,
    get_day_count_convention,
)
from .indices import (
    EUR_ESTR,
    EUR_EURIBOR_3M,
    EUR_EURIBOR_6M,
    USD_FED_FUND,
    USD_LIBOR_3M,
    USD_LIBOR_6M,
    USD_SOFR,
    IborIndex,
    IborRateObservation,
    OvernightIndex,
    get_index,
)
from .types import BusinessDayAdjustment, BuySell, Frequency, PayReceive

__all__ = [
    "Calendar",
    "CALENDARS",
    "TARGET",
    "USNY",
    "GBLO",
    "WEEKEND_ONLY",
    "get_calendar",
    "Tenor",
    "SchedulePeriod",
    "add_months",
    "add_tenor",
    "adjust_date",
    "generate_schedule",
    "get_spot_date",
    "DayCountConvention",
    "ACT_360",
    "ACT_365F",
    "ACT_ACT",
    "THIRTY_360E",
    "THIRTY_360U",
    "get_day_count_convention",
    "IborIndex",
    "OvernightIndex",
    "IborRateObservation",
    "EUR_EURIBOR_3M",
    "EUR_EURIBOR_6M",
    "EUR_ESTR",
    "USD_LIBOR_3M",
    "USD_LIBOR_6M",
    "USD_FED_FUND",
    "USD_SOFR",
    "get_index",
    "BusinessDayAdjustment",
    "BuySell",
    "Frequency",
    "PayReceive",
]
