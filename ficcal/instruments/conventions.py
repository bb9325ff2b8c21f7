"""
Trade conventions that turn a tenor and a quote into a resolved trade.

Every convention resolves dates once, against the valuation date, so pricers
only ever see absolute dates and year fractions. For the swap conventions BUY
means paying the quoted leg (the fixed leg, or the leg carrying the spread).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Union

from ficcal.conventions.calendars import EUTA_USNY, TARGET, USNY, Calendar
from ficcal.conventions.dates import (
    SchedulePeriod,
    Tenor,
    add_tenor,
    adjust_date,
    generate_schedule,
    get_spot_date,
)
from ficcal.conventions.daycount import ACT_360, THIRTY_360E, THIRTY_360U, DayCountConvention
from ficcal.conventions.indices import (
    EUR_ESTR,
    EUR_EURIBOR_3M,
    EUR_EURIBOR_6M,
    USD_FED_FUND,
    USD_LIBOR_3M,
    USD_SOFR,
    IborIndex,
    IborRateObservation,
    OvernightIndex,
)
from ficcal.conventions.types import BusinessDayAdjustment, BuySell, Frequency, PayReceive

from .deposit import ResolvedIborFixingDeposit, ResolvedTermDeposit
from .fra import ResolvedFra, ResolvedIborFuture
from .fx import ResolvedFxSwap
from .swap import (
    FixedRatePeriod,
    IborRatePeriod,
    NotionalExchange,
    OvernightRatePeriod,
    ResolvedSwap,
    ResolvedSwapLeg,
)

MF = BusinessDayAdjustment.MODIFIED_FOLLOWING


# ----------------------------------------------------------------------
# Leg builders
# ----------------------------------------------------------------------

def _payment_date(period: SchedulePeriod, calendar: Calendar, payment_lag: int) -> date:
    if payment_lag == 0:
        return period.end_date
    return calendar.add_business_days(period.end_date, payment_lag)


def fixed_leg(
    currency: str,
    pay_receive: PayReceive,
    schedule: List[SchedulePeriod],
    day_count: DayCountConvention,
    notional: float,
    rate: float,
    calendar: Calendar,
    payment_lag: int = 0,
) -> ResolvedSwapLeg:
    periods = tuple(
        FixedRatePeriod(
            payment_date=_payment_date(p, calendar, payment_lag),
            start_date=p.start_date,
            end_date=p.end_date,
            year_fraction=day_count.year_fraction(p.start_date, p.end_date),
            notional=notional,
            rate=rate,
        )
        for p in schedule
    )
    return ResolvedSwapLeg(currency, pay_receive, periods)


def ibor_leg(
    index: IborIndex,
    pay_receive: PayReceive,
    schedule: List[SchedulePeriod],
    notional: float,
    spread: float = 0.0,
    notional_exchange: bool = False,
) -> ResolvedSwapLeg:
    periods = tuple(
        IborRatePeriod(
            payment_date=p.end_date,
            start_date=p.start_date,
            end_date=p.end_date,
            year_fraction=index.day_count.year_fraction(p.start_date, p.end_date),
            notional=notional,
            observation=IborRateObservation.of(index, index.fixing_date(p.start_date)),
            spread=spread,
        )
        for p in schedule
    )
    exchanges = ()
    if notional_exchange:
        exchanges = (
            NotionalExchange(schedule[0].start_date, -notional),
            NotionalExchange(schedule[-1].end_date, notional),
        )
    return ResolvedSwapLeg(index.currency, pay_receive, periods, exchanges)


def overnight_leg(
    index: OvernightIndex,
    pay_receive: PayReceive,
    schedule: List[SchedulePeriod],
    notional: float,
    calendar: Calendar,
    payment_lag: int = 0,
    spread: float = 0.0,
) -> ResolvedSwapLeg:
    periods = tuple(
        OvernightRatePeriod(
            payment_date=_payment_date(p, calendar, payment_lag),
            start_date=p.start_date,
            end_date=p.end_date,
            year_fraction=index.day_count.year_fraction(p.start_date, p.end_date),
            notional=notional,
            index=index,
            spread=spread,
        )
        for p in schedule
    )
    return ResolvedSwapLeg(index.currency, pay_receive, periods)


def _quoted_leg_direction(buy_sell: BuySell) -> PayReceive:
    return PayReceive.PAY if buy_sell == BuySell.BUY else PayReceive.RECEIVE


# ----------------------------------------------------------------------
# Money market conventions
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class TermDepositConvention:
    name: str
    currency: str
    day_count: DayCountConvention
    calendar: Calendar
    spot_lag: int = 2
    adjustment: BusinessDayAdjustment = MF

    def end_date(self, start: date, tenor: Union[str, Tenor]) -> date:
        tenor = Tenor.parse(tenor)
        if tenor.unit == "D":
            return self.calendar.add_business_days(start, tenor.days)
        return add_tenor(start, tenor, self.calendar, self.adjustment)

    def to_trade(
        self,
        valuation_date: date,
        tenor: Union[str, Tenor],
        rate: float,
        notional: float = 1.0,
        buy_sell: BuySell = BuySell.BUY,
    ) -> ResolvedTermDeposit:
        start = get_spot_date(valuation_date, self.calendar, self.spot_lag)
        end = self.end_date(start, tenor)
        return ResolvedTermDeposit(
            currency=self.currency,
            notional=notional,
            start_date=start,
            end_date=end,
            year_fraction=self.day_count.year_fraction(start, end),
            rate=rate,
            buy_sell=buy_sell,
        )


@dataclass(frozen=True)
class IborFixingDepositConvention:
    """Deposit on one fixing of the index, fixed on the valuation date."""

    index: IborIndex

    @property
    def name(self) -> str:
        return f"{self.index.name}-FIXING-DEPOSIT"

    def to_trade(
        self,
        valuation_date: date,
        rate: float,
        notional: float = 1.0,
        buy_sell: BuySell = BuySell.BUY,
    ) -> ResolvedIborFixingDeposit:
        fixing = adjust_date(valuation_date, BusinessDayAdjustment.FOLLOWING, self.index.calendar)
        observation = IborRateObservation.of(self.index, fixing)
        return ResolvedIborFixingDeposit(
            currency=self.index.currency,
            notional=notional,
            observation=observation,
            start_date=observation.effective_date,
            end_date=observation.maturity_date,
            year_fraction=observation.year_fraction,
            rate=rate,
            buy_sell=buy_sell,
        )


@dataclass(frozen=True)
class FraConvention:
    """FRA on the index, periods measured from the spot date (e.g. 3M x 6M)."""

    index: IborIndex

    @property
    def name(self) -> str:
        return f"{self.index.name}-FRA"

    def to_trade(
        self,
        valuation_date: date,
        period_to_start: Union[str, Tenor],
        period_to_end: Union[str, Tenor],
        rate: float,
        notional: float = 1.0,
        buy_sell: BuySell = BuySell.BUY,
    ) -> ResolvedFra:
        index = self.index
        spot = index.effective_date(adjust_date(valuation_date, BusinessDayAdjustment.FOLLOWING, index.calendar))
        start = add_tenor(spot, period_to_start, index.calendar, index.adjustment, index.end_of_month)
        end = add_tenor(spot, period_to_end, index.calendar, index.adjustment, index.end_of_month)
        if end <= start:
            raise ValueError(f"FRA {period_to_start}x{period_to_end} has no accrual period")
        observation = IborRateObservation.of(index, index.fixing_date(start))
        return ResolvedFra(
            currency=index.currency,
            notional=notional,
            observation=observation,
            payment_date=start,
            start_date=start,
            end_date=end,
            year_fraction=index.day_count.year_fraction(start, end),
            fixed_rate=rate,
            buy_sell=buy_sell,
        )


def imm_date(year: int, month: int) -> date:
    """Third Wednesday of the month."""
    first = date(year, month, 1)
    offset = (2 - first.weekday()) % 7
    return first + timedelta(days=offset + 14)


@dataclass(frozen=True)
class IborFutureConvention:
    """Quarterly IMM futures on the index."""

    index: IborIndex
    notional: float = 1_000_000.0

    @property
    def name(self) -> str:
        return f"{self.index.name}-QUARTERLY-IMM"

    def effective_date(self, valuation_date: date, sequence_number: int) -> date:
        """IMM date of the n-th future whose fixing is on or after the valuation date."""
        if sequence_number < 1:
            raise ValueError("Future sequence number starts at 1")
        year, month = valuation_date.year, valuation_date.month
        month += (3 - month % 3) % 3
        found = 0
        while True:
            if month > 12:
                year, month = year + 1, month - 12
            candidate = imm_date(year, month)
            if self.index.fixing_date(candidate) >= valuation_date:
                found += 1
                if found == sequence_number:
                    return candidate
            month += 3

    def to_trade(
        self,
        valuation_date: date,
        sequence_number: int,
        price: float,
        quantity: float = 1.0,
    ) -> ResolvedIborFuture:
        effective = self.effective_date(valuation_date, sequence_number)
        observation = IborRateObservation.of(self.index, self.index.fixing_date(effective))
        return ResolvedIborFuture(
            currency=self.index.currency,
            notional=self.notional,
            observation=observation,
            accrual_factor=self.index.tenor.months / 12.0,
            reference_price=price,
            quantity=quantity,
        )


# ----------------------------------------------------------------------
# Swap conventions
# ----------------------------------------------------------------------

def _swap_dates(
    valuation_date: date,
    calendar: Calendar,
    spot_lag: int,
    tenor: Union[str, Tenor],
    period_to_start: Optional[Union[str, Tenor]],
    adjustment: BusinessDayAdjustment,
    end_of_month: bool,
):
    start = get_spot_date(valuation_date, calendar, spot_lag)
    if period_to_start is not None:
        start = add_tenor(start, period_to_start, calendar, adjustment, end_of_month)
    end = Tenor.parse(tenor).add_to(start, end_of_month)
    return start, end


@dataclass(frozen=True)
class FixedIborSwapConvention:
    name: str
    fixed_day_count: DayCountConvention
    fixed_frequency: Frequency
    index: IborIndex
    spot_lag: int = 2
    adjustment: BusinessDayAdjustment = MF
    end_of_month: bool = False

    @property
    def currency(self) -> str:
        return self.index.currency

    @property
    def float_frequency(self) -> Frequency:
        return Frequency(self.index.tenor.months)

    def to_trade(
        self,
        valuation_date: date,
        tenor: Union[str, Tenor],
        fixed_rate: float,
        notional: float = 1.0,
        buy_sell: BuySell = BuySell.BUY,
        period_to_start: Optional[Union[str, Tenor]] = None,
    ) -> ResolvedSwap:
        calendar = self.index.calendar
        start, end = _swap_dates(
            valuation_date, calendar, self.spot_lag, tenor, period_to_start,
            self.adjustment, self.end_of_month,
        )
        direction = _quoted_leg_direction(buy_sell)
        fixed_schedule = generate_schedule(
            start, end, self.fixed_frequency, calendar, self.adjustment, self.end_of_month
        )
        float_schedule = generate_schedule(
            start, end, self.float_frequency, calendar, self.adjustment, self.end_of_month
        )
        return ResolvedSwap((
            fixed_leg(self.currency, direction, fixed_schedule, self.fixed_day_count,
                      notional, fixed_rate, calendar),
            ibor_leg(self.index, direction.opposite(), float_schedule, notional),
        ))


@dataclass(frozen=True)
class FixedOvernightSwapConvention:
    name: str
    fixed_day_count: DayCountConvention
    index: OvernightIndex
    frequency: Frequency = Frequency.ANNUAL
    spot_lag: int = 2
    payment_lag: int = 1
    adjustment: BusinessDayAdjustment = MF
    end_of_month: bool = False

    @property
    def currency(self) -> str:
        return self.index.currency

    def to_trade(
        self,
        valuation_date: date,
        tenor: Union[str, Tenor],
        fixed_rate: float,
        notional: float = 1.0,
        buy_sell: BuySell = BuySell.BUY,
        period_to_start: Optional[Union[str, Tenor]] = None,
    ) -> ResolvedSwap:
        calendar = self.index.calendar
        start, end = _swap_dates(
            valuation_date, calendar, self.spot_lag, tenor, period_to_start,
            self.adjustment, self.end_of_month,
        )
        parsed = Tenor.parse(tenor)
        # swaps up to one year pay a single compounded period
        frequency = self.frequency
        if not parsed.is_month_based or parsed.months <= self.frequency.months():
            frequency = Frequency.TERM
        schedule = generate_schedule(start, end, frequency, calendar, self.adjustment, self.end_of_month)
        direction = _quoted_leg_direction(buy_sell)
        return ResolvedSwap((
            fixed_leg(self.currency, direction, schedule, self.fixed_day_count,
                      notional, fixed_rate, calendar, self.payment_lag),
            overnight_leg(self.index, direction.opposite(), schedule, notional,
                          calendar, self.payment_lag),
        ))


@dataclass(frozen=True)
class IborIborSwapConvention:
    """Single currency basis swap; the spread is paid on the first index."""

    name: str
    spread_index: IborIndex
    flat_index: IborIndex
    spot_lag: int = 2
    adjustment: BusinessDayAdjustment = MF
    end_of_month: bool = False

    def to_trade(
        self,
        valuation_date: date,
        tenor: Union[str, Tenor],
        spread: float,
        notional: float = 1.0,
        buy_sell: BuySell = BuySell.BUY,
    ) -> ResolvedSwap:
        if self.spread_index.currency != self.flat_index.currency:
            raise ValueError(f"{self.name}: basis swap indices must share a currency")
        calendar = self.spread_index.calendar
        start, end = _swap_dates(
            valuation_date, calendar, self.spot_lag, tenor, None, self.adjustment, self.end_of_month
        )
        direction = _quoted_leg_direction(buy_sell)
        spread_schedule = generate_schedule(
            start, end, Frequency(self.spread_index.tenor.months), calendar, self.adjustment, self.end_of_month
        )
        flat_schedule = generate_schedule(
            start, end, Frequency(self.flat_index.tenor.months), calendar, self.adjustment, self.end_of_month
        )
        return ResolvedSwap((
            ibor_leg(self.spread_index, direction, spread_schedule, notional, spread),
            ibor_leg(self.flat_index, direction.opposite(), flat_schedule, notional),
        ))


@dataclass(frozen=True)
class XCcyIborIborSwapConvention:
    """Cross-currency basis swap with initial and final notional exchange.

    The spread leg notional is in the spread index currency; the flat leg
    notional is that amount converted at the FX rate of the trade date.
    """

    name: str
    spread_index: IborIndex
    flat_index: IborIndex
    calendar: Calendar
    spot_lag: int = 2
    adjustment: BusinessDayAdjustment = MF
    end_of_month: bool = False

    @property
    def currency_pair(self):
        return (self.spread_index.currency, self.flat_index.currency)

    def to_trade(
        self,
        valuation_date: date,
        tenor: Union[str, Tenor],
        spread: float,
        fx_rate: float,
        notional: float = 1.0,
        buy_sell: BuySell = BuySell.BUY,
    ) -> ResolvedSwap:
        start, end = _swap_dates(
            valuation_date, self.calendar, self.spot_lag, tenor, None, self.adjustment, self.end_of_month
        )
        direction = _quoted_leg_direction(buy_sell)
        spread_schedule = generate_schedule(
            start, end, Frequency(self.spread_index.tenor.months), self.calendar,
            self.adjustment, self.end_of_month,
        )
        flat_schedule = generate_schedule(
            start, end, Frequency(self.flat_index.tenor.months), self.calendar,
            self.adjustment, self.end_of_month,
        )
        return ResolvedSwap((
            ibor_leg(self.spread_index, direction, spread_schedule, notional, spread,
                     notional_exchange=True),
            ibor_leg(self.flat_index, direction.opposite(), flat_schedule, notional * fx_rate,
                     notional_exchange=True),
        ))


@dataclass(frozen=True)
class FxSwapConvention:
    name: str
    base_currency: str
    counter_currency: str
    calendar: Calendar
    spot_lag: int = 2
    adjustment: BusinessDayAdjustment = MF

    def to_trade(
        self,
        valuation_date: date,
        period: Union[str, Tenor],
        near_rate: float,
        forward_points: float,
        notional: float = 1.0,
    ) -> ResolvedFxSwap:
        near = get_spot_date(valuation_date, self.calendar, self.spot_lag)
        far = add_tenor(near, period, self.calendar, self.adjustment)
        return ResolvedFxSwap(
            base_currency=self.base_currency,
            counter_currency=self.counter_currency,
            notional=notional,
            near_date=near,
            far_date=far,
            near_rate=near_rate,
            forward_points=forward_points,
        )


# Predefined conventions
EUR_DEPOSIT_T0 = TermDepositConvention("EUR-DEPOSIT-T0", "EUR", ACT_360, TARGET, spot_lag=0)
EUR_DEPOSIT_T2 = TermDepositConvention("EUR-DEPOSIT-T2", "EUR", ACT_360, TARGET, spot_lag=2)
USD_DEPOSIT_T0 = TermDepositConvention("USD-DEPOSIT-T0", "USD", ACT_360, USNY, spot_lag=0)
USD_DEPOSIT_T2 = TermDepositConvention("USD-DEPOSIT-T2", "USD", ACT_360, USNY, spot_lag=2)

EUR_FIXED_1Y_EURIBOR_3M = FixedIborSwapConvention(
    "EUR-FIXED-1Y-EURIBOR-3M", THIRTY_360E, Frequency.ANNUAL, EUR_EURIBOR_3M
)
EUR_FIXED_1Y_EURIBOR_6M = FixedIborSwapConvention(
    "EUR-FIXED-1Y-EURIBOR-6M", THIRTY_360E, Frequency.ANNUAL, EUR_EURIBOR_6M
)
USD_FIXED_6M_LIBOR_3M = FixedIborSwapConvention(
    "USD-FIXED-6M-LIBOR-3M", THIRTY_360U, Frequency.SEMIANNUAL, USD_LIBOR_3M
)
EUR_FIXED_1Y_ESTR_OIS = FixedOvernightSwapConvention("EUR-FIXED-1Y-ESTR-OIS", ACT_360, EUR_ESTR)
USD_FIXED_1Y_FED_FUND_OIS = FixedOvernightSwapConvention(
    "USD-FIXED-1Y-FED-FUND-OIS", ACT_360, USD_FED_FUND, payment_lag=2
)
USD_FIXED_1Y_SOFR_OIS = FixedOvernightSwapConvention("USD-FIXED-1Y-SOFR-OIS", ACT_360, USD_SOFR, payment_lag=2)
EUR_EURIBOR_3M_EURIBOR_6M = IborIborSwapConvention(
    "EUR-EURIBOR-3M-EURIBOR-6M", EUR_EURIBOR_3M, EUR_EURIBOR_6M
)
EUR_EURIBOR_3M_USD_LIBOR_3M = XCcyIborIborSwapConvention(
    "EUR-EURIBOR-3M-USD-LIBOR-3M", EUR_EURIBOR_3M, USD_LIBOR_3M, EUTA_USNY
)
EUR_USD_FX_SWAP = FxSwapConvention("EUR/USD", "EUR", "USD", EUTA_USNY)
