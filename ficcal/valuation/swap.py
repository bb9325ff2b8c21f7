"""
Discounting swap pricer.

Each leg is valued in its own currency by discounting its period amounts and
notional exchanges on that currency's discount curve. The swap present value
is reported in the currency of the first leg, converting other legs at the
FX rates of the provider. Payments before the valuation date are ignored.
"""

from __future__ import annotations

import logging
from typing import List

from ficcal.instruments.swap import (
    FixedRatePeriod,
    IborRatePeriod,
    OvernightRatePeriod,
    ResolvedSwap,
    ResolvedSwapLeg,
)
from ficcal.market.sensitivity import PointSensitivities

from .base import TradePricer
from .provider import ImmutableRatesProvider

logger = logging.getLogger(__name__)


class DiscountingSwapPricer(TradePricer):
    """Pricer for fixed, Ibor and overnight legs with optional notional exchange."""

    # ------------------------------------------------------------------
    # Legs
    # ------------------------------------------------------------------

    def period_rate(self, period, provider: ImmutableRatesProvider) -> float:
        if isinstance(period, FixedRatePeriod):
            return period.rate
        if isinstance(period, IborRatePeriod):
            return provider.ibor_rate(period.observation) + period.spread
        if isinstance(period, OvernightRatePeriod):
            return provider.overnight_rate(
                period.index, period.start_date, period.end_date, period.year_fraction
            ) + period.spread
        raise TypeError(f"Unsupported payment period: {type(period).__name__}")

    def leg_present_value(self, leg: ResolvedSwapLeg, provider: ImmutableRatesProvider) -> float:
        """Present value of one leg in the leg currency."""
        pv = 0.0
        for period in leg.periods:
            if period.payment_date < provider.valuation_date:
                continue
            amount = period.notional * self.period_rate(period, provider) * period.year_fraction
            pv += amount * provider.discount_factor(leg.currency, period.payment_date)
        for exchange in leg.notional_exchanges:
            if exchange.payment_date < provider.valuation_date:
                continue
            pv += exchange.amount * provider.discount_factor(leg.currency, exchange.payment_date)
        return leg.pay_receive.sign * pv

    def leg_present_value_sensitivity(
        self, leg: ResolvedSwapLeg, provider: ImmutableRatesProvider
    ) -> PointSensitivities:
        sign = leg.pay_receive.sign
        points: List = []
        for period in leg.periods:
            if period.payment_date < provider.valuation_date:
                continue
            df = provider.discount_factor(leg.currency, period.payment_date)
            rate = self.period_rate(period, provider)
            factor = sign * period.notional * period.year_fraction
            points += provider.discount_factor_point_sensitivity(
                leg.currency, period.payment_date, factor * rate
            )
            if isinstance(period, IborRatePeriod):
                points += provider.ibor_rate_point_sensitivity(period.observation, factor * df, leg.currency)
            elif isinstance(period, OvernightRatePeriod):
                points += provider.overnight_rate_point_sensitivity(
                    period.index, period.start_date, period.end_date, period.year_fraction,
                    factor * df, leg.currency,
                )
        for exchange in leg.notional_exchanges:
            if exchange.payment_date < provider.valuation_date:
                continue
            points += provider.discount_factor_point_sensitivity(
                leg.currency, exchange.payment_date, sign * exchange.amount
            )
        return PointSensitivities(points)

    def leg_pvbp(self, leg: ResolvedSwapLeg, provider: ImmutableRatesProvider) -> float:
        """Change in leg value for a unit change of its fixed rate or spread."""
        annuity = sum(
            period.notional * period.year_fraction * provider.discount_factor(leg.currency, period.payment_date)
            for period in leg.periods
            if period.payment_date >= provider.valuation_date
        )
        return leg.pay_receive.sign * annuity

    # ------------------------------------------------------------------
    # Swap
    # ------------------------------------------------------------------

    def present_value(self, trade: ResolvedSwap, provider: ImmutableRatesProvider) -> float:
        currency = trade.currency
        total = 0.0
        for leg in trade.legs:
            pv = self.leg_present_value(leg, provider)
            if leg.currency != currency:
                pv *= provider.fx_rate(leg.currency, currency)
            total += pv
        return total

    def present_value_sensitivity(self, trade, provider):
        result = PointSensitivities.empty()
        for leg in trade.legs:
            result = result + self.leg_present_value_sensitivity(leg, provider)
        return result.converted_to(trade.currency, provider)

    def pvbp(self, trade, provider):
        return self.leg_pvbp(trade.quoted_leg, provider)

    def pvbp_sensitivity(self, trade, provider):
        leg = trade.quoted_leg
        points: List = []
        for period in leg.periods:
            if period.payment_date < provider.valuation_date:
                continue
            points += provider.discount_factor_point_sensitivity(
                leg.currency, period.payment_date,
                leg.pay_receive.sign * period.notional * period.year_fraction,
            )
        return PointSensitivities(points)

    def par_rate(self, trade: ResolvedSwap, provider: ImmutableRatesProvider) -> float:
        """Fixed rate of the first leg that sets the swap value to zero."""
        if not trade.quoted_leg.is_fixed:
            raise ValueError("Par rate needs a swap whose first leg is fixed")
        return super().par_rate(trade, provider)

    def par_rate_sensitivity(self, trade, provider):
        if not trade.quoted_leg.is_fixed:
            raise ValueError("Par rate needs a swap whose first leg is fixed")
        return super().par_rate_sensitivity(trade, provider)
