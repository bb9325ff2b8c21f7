"""
Common pricer interface.

Every pricer values a resolved trade against an ``ImmutableRatesProvider``
and reports, besides the present value, its derivative with respect to the
trade's market quote (``pvbp``). The par spread, the amount to add to the
quote for the trade to be worth zero, follows from both:

    par_spread = -PV / pvbp
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ficcal.market.sensitivity import PointSensitivities

from .provider import ImmutableRatesProvider


class TradePricer(ABC):
    """Discounting pricer of one resolved trade type."""

    @abstractmethod
    def present_value(self, trade, provider: ImmutableRatesProvider) -> float:
        """Present value in the trade currency."""

    @abstractmethod
    def present_value_sensitivity(self, trade, provider: ImmutableRatesProvider) -> PointSensitivities:
        pass

    @abstractmethod
    def pvbp(self, trade, provider: ImmutableRatesProvider) -> float:
        """Derivative of the present value with respect to the market quote."""

    @abstractmethod
    def pvbp_sensitivity(self, trade, provider: ImmutableRatesProvider) -> PointSensitivities:
        pass

    def par_spread(self, trade, provider: ImmutableRatesProvider) -> float:
        pvbp = self.pvbp(trade, provider)
        if pvbp == 0.0:
            raise ValueError(f"{type(trade).__name__} has zero sensitivity to its quote")
        return -self.present_value(trade, provider) / pvbp

    def par_spread_sensitivity(self, trade, provider: ImmutableRatesProvider) -> PointSensitivities:
        """Point sensitivities of the par spread, from the quotient rule."""
        pv = self.present_value(trade, provider)
        pvbp = self.pvbp(trade, provider)
        if pvbp == 0.0:
            raise ValueError(f"{type(trade).__name__} has zero sensitivity to its quote")
        return self.present_value_sensitivity(trade, provider).multiplied_by(-1.0 / pvbp).combined_with(
            self.pvbp_sensitivity(trade, provider).multiplied_by(pv / (pvbp * pvbp))
        )

    def par_rate(self, trade, provider: ImmutableRatesProvider) -> float:
        """Quote at which the trade is worth zero."""
        return trade.market_quote + self.par_spread(trade, provider)

    def par_rate_sensitivity(self, trade, provider: ImmutableRatesProvider) -> PointSensitivities:
        return self.par_spread_sensitivity(trade, provider)
