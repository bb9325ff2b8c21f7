"""
Pricers for forward rate agreements and Ibor futures.
"""

from __future__ import annotations

from ficcal.instruments.fra import ResolvedFra, ResolvedIborFuture
from ficcal.market.sensitivity import PointSensitivities

from .base import TradePricer
from .provider import ImmutableRatesProvider


class DiscountingFraPricer(TradePricer):
    """FRA paid at the period start, discounted at the forward rate.

    PV = N * tau * (F - K) / (1 + tau * F) * DF(payment)
    """

    def present_value(self, trade: ResolvedFra, provider: ImmutableRatesProvider) -> float:
        forward = provider.ibor_rate(trade.observation)
        df = provider.discount_factor(trade.currency, trade.payment_date)
        tau = trade.year_fraction
        return trade.buy_sell.sign * trade.notional * tau * (forward - trade.fixed_rate) * df / (1.0 + tau * forward)

    def present_value_sensitivity(self, trade, provider):
        forward = provider.ibor_rate(trade.observation)
        df = provider.discount_factor(trade.currency, trade.payment_date)
        tau = trade.year_fraction
        factor = trade.buy_sell.sign * trade.notional * tau
        discounting = 1.0 + tau * forward
        d_forward = factor * df * (1.0 + tau * trade.fixed_rate) / (discounting * discounting)
        d_df = factor * (forward - trade.fixed_rate) / discounting
        return PointSensitivities(
            provider.ibor_rate_point_sensitivity(trade.observation, d_forward, trade.currency)
            + provider.discount_factor_point_sensitivity(trade.currency, trade.payment_date, d_df)
        )

    def pvbp(self, trade, provider):
        forward = provider.ibor_rate(trade.observation)
        df = provider.discount_factor(trade.currency, trade.payment_date)
        tau = trade.year_fraction
        return -trade.buy_sell.sign * trade.notional * tau * df / (1.0 + tau * forward)

    def pvbp_sensitivity(self, trade, provider):
        forward = provider.ibor_rate(trade.observation)
        df = provider.discount_factor(trade.currency, trade.payment_date)
        tau = trade.year_fraction
        factor = -trade.buy_sell.sign * trade.notional * tau
        discounting = 1.0 + tau * forward
        return PointSensitivities(
            provider.ibor_rate_point_sensitivity(
                trade.observation, -factor * df * tau / (discounting * discounting), trade.currency
            )
            + provider.discount_factor_point_sensitivity(
                trade.currency, trade.payment_date, factor / discounting
            )
        )

    def par_rate(self, trade, provider):
        return provider.ibor_rate(trade.observation)


class IborFuturePricer(TradePricer):
    """Daily margined future, priced at 1 - forward without convexity adjustment.

    PV = N * accrual * quantity * ((1 - F) - reference_price)
    """

    def _unit(self, trade: ResolvedIborFuture) -> float:
        return trade.notional * trade.accrual_factor * trade.quantity

    def price(self, trade: ResolvedIborFuture, provider: ImmutableRatesProvider) -> float:
        return 1.0 - provider.ibor_rate(trade.observation)

    def present_value(self, trade, provider):
        return self._unit(trade) * (self.price(trade, provider) - trade.reference_price)

    def present_value_sensitivity(self, trade, provider):
        return PointSensitivities(
            provider.ibor_rate_point_sensitivity(trade.observation, -self._unit(trade), trade.currency)
        )

    def pvbp(self, trade, provider):
        return -self._unit(trade)

    def pvbp_sensitivity(self, trade, provider):
        return PointSensitivities.empty()

    def par_rate(self, trade, provider):
        raise ValueError("Ibor futures are quoted by price and have no par rate")
