"""Rates provider and discounting pricers."""

from typing import Dict, Type

from ficcal.instruments.deposit import ResolvedIborFixingDeposit, ResolvedTermDeposit
from ficcal.instruments.fra import ResolvedFra, ResolvedIborFuture
from ficcal.instruments.fx import ResolvedFxSwap
from ficcal.instruments.swap import ResolvedSwap

from .base import TradePricer
from .deposit import DiscountingIborFixingDepositPricer, DiscountingTermDepositPricer
from .fra import DiscountingFraPricer, IborFuturePricer
from .fx import DiscountingFxSwapPricer
from .provider import ImmutableRatesProvider
from .swap import DiscountingSwapPricer

PRICERS: Dict[Type, TradePricer] = {
    ResolvedTermDeposit: DiscountingTermDepositPricer(),
    ResolvedIborFixingDeposit: DiscountingIborFixingDepositPricer(),
    ResolvedFra: DiscountingFraPricer(),
    ResolvedIborFuture: IborFuturePricer(),
    ResolvedSwap: DiscountingSwapPricer(),
    ResolvedFxSwap: DiscountingFxSwapPricer(),
}


def get_pricer(trade) -> TradePricer:
    """Pricer registered for the trade's type."""
    try:
        return PRICERS[type(trade)]
    except KeyError:
        raise ValueError(f"No pricer for trade type {type(trade).__name__}") from None


__all__ = [
    "ImmutableRatesProvider",
    "TradePricer",
    "DiscountingTermDepositPricer",
    "DiscountingIborFixingDepositPricer",
    "DiscountingFraPricer",
    "IborFuturePricer",
    "DiscountingSwapPricer",
    "DiscountingFxSwapPricer",
    "PRICERS",
    "get_pricer",
]
