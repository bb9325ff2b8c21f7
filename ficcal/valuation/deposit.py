"""
Discounting pricers for term deposits and Ibor fixing deposits.
"""

from __future__ import annotations

from ficcal.instruments.deposit import ResolvedIborFixingDeposit, ResolvedTermDeposit
from ficcal.market.sensitivity import PointSensitivities

from .base import TradePricer
from .provider import ImmutableRatesProvider


class DiscountingTermDepositPricer(TradePricer):
    """Buyer pays the notional at start and receives notional plus interest at end.

    PV = -N * DF(start) + N * (1 + r * tau) * DF(end)
    """

    def present_value(self, trade: ResolvedTermDeposit, provider: ImmutableRatesProvider) -> float:
        sign = trade.buy_sell.sign
        df_start = provider.discount_factor(trade.currency, trade.start_date)
        df_end = provider.discount_factor(trade.currency, trade.end_date)
        return sign * (-trade.notional * df_start + (trade.notional + trade.interest) * df_end)

    def present_value_sensitivity(self, trade, provider):
        sign = trade.buy_sell.sign
        return PointSensitivities(
            provider.discount_factor_point_sensitivity(
                trade.currency, trade.start_date, -sign * trade.notional
            )
            + provider.discount_factor_point_sensitivity(
                trade.currency, trade.end_date, sign * (trade.notional + trade.interest)
            )
        )

    def pvbp(self, trade, provider):
        df_end = provider.discount_factor(trade.currency, trade.end_date)
        return trade.buy_sell.sign * trade.notional * trade.year_fraction * df_end

    def pvbp_sensitivity(self, trade, provider):
        return PointSensitivities(provider.discount_factor_point_sensitivity(
            trade.currency, trade.end_date, trade.buy_sell.sign * trade.notional * trade.year_fraction
        ))

    def par_rate(self, trade: ResolvedTermDeposit, provider: ImmutableRatesProvider) -> float:
        df_start = provider.discount_factor(trade.currency, trade.start_date)
        df_end = provider.discount_factor(trade.currency, trade.end_date)
        return (df_start / df_end - 1.0) / trade.year_fraction


class DiscountingIborFixingDepositPricer(TradePricer):
    """Buyer receives the Ibor fixing and pays the fixed rate at maturity.

    PV = N * tau * (F - K) * DF(end)
    """

    def _forward(self, trade: ResolvedIborFixingDeposit, provider: ImmutableRatesProvider) -> float:
        return provider.ibor_rate(trade.observation)

    def present_value(self, trade, provider):
        forward = self._forward(trade, provider)
        df_end = provider.discount_factor(trade.currency, trade.end_date)
        return trade.buy_sell.sign * trade.notional * trade.year_fraction * (forward - trade.rate) * df_end

    def present_value_sensitivity(self, trade, provider):
        factor = trade.buy_sell.sign * trade.notional * trade.year_fraction
        forward = self._forward(trade, provider)
        df_end = provider.discount_factor(trade.currency, trade.end_date)
        return PointSensitivities(
            provider.ibor_rate_point_sensitivity(trade.observation, factor * df_end, trade.currency)
            + provider.discount_factor_point_sensitivity(
                trade.currency, trade.end_date, factor * (forward - trade.rate)
            )
        )

    def pvbp(self, trade, provider):
        df_end = provider.discount_factor(trade.currency, trade.end_date)
        return -trade.buy_sell.sign * trade.notional * trade.year_fraction * df_end

    def pvbp_sensitivity(self, trade, provider):
        return PointSensitivities(provider.discount_factor_point_sensitivity(
            trade.currency, trade.end_date, -trade.buy_sell.sign * trade.notional * trade.year_fraction
        ))

    def par_rate(self, trade, provider):
        return self._forward(trade, provider)
