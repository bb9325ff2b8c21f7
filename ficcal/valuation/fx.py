"""
Discounting FX swap pricer.
"""

from __future__ import annotations

from ficcal.instruments.fx import ResolvedFxSwap
from ficcal.market.sensitivity import PointSensitivities

from .base import TradePricer
from .provider import ImmutableRatesProvider


class DiscountingFxSwapPricer(TradePricer):
    """Values both exchanges of an FX swap in the counter currency.

    Base currency amounts are discounted on the base curve and converted at
    the provider's FX rate; counter amounts are discounted on the counter
    curve. The market quote is the forward points, so

        pvbp = N * DF_counter(far)
    """

    def present_value(self, trade: ResolvedFxSwap, provider: ImmutableRatesProvider) -> float:
        base, counter = trade.base_currency, trade.counter_currency
        fx = provider.fx_rate(base, counter)
        n = trade.notional
        pv = 0.0
        if trade.near_date >= provider.valuation_date:
            pv += n * fx * provider.discount_factor(base, trade.near_date)
            pv -= n * trade.near_rate * provider.discount_factor(counter, trade.near_date)
        pv -= n * fx * provider.discount_factor(base, trade.far_date)
        pv += n * trade.far_rate * provider.discount_factor(counter, trade.far_date)
        return pv

    def present_value_sensitivity(self, trade, provider):
        base, counter = trade.base_currency, trade.counter_currency
        fx = provider.fx_rate(base, counter)
        n = trade.notional
        points = []
        if trade.near_date >= provider.valuation_date:
            points += provider.discount_factor_point_sensitivity(base, trade.near_date, n * fx, counter)
            points += provider.discount_factor_point_sensitivity(
                counter, trade.near_date, -n * trade.near_rate
            )
        points += provider.discount_factor_point_sensitivity(base, trade.far_date, -n * fx, counter)
        points += provider.discount_factor_point_sensitivity(counter, trade.far_date, n * trade.far_rate)
        return PointSensitivities(points)

    def pvbp(self, trade, provider):
        return trade.notional * provider.discount_factor(trade.counter_currency, trade.far_date)

    def pvbp_sensitivity(self, trade, provider):
        return PointSensitivities(provider.discount_factor_point_sensitivity(
            trade.counter_currency, trade.far_date, trade.notional
        ))

    def forward_rate(self, trade: ResolvedFxSwap, provider: ImmutableRatesProvider) -> float:
        """Forward FX rate at the far date implied by the two discount curves."""
        fx = provider.fx_rate(trade.base_currency, trade.counter_currency)
        return fx * provider.discount_factor(trade.base_currency, trade.far_date) / provider.discount_factor(
            trade.counter_currency, trade.far_date
        )

    def par_rate(self, trade, provider):
        raise ValueError("FX swaps are quoted in forward points and have no par rate")
