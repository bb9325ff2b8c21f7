"""
Resolved trades and the conventions that build them from quotes.
"""

from .conventions import (
    EUR_DEPOSIT_T0,
    EUR_DEPOSIT_T2,
    EUR_EURIBOR_3M_EURIBOR_6M,
    EUR_EURIBOR_3M_USD_LIBOR_3M,
    EUR_FIXED_1Y_ESTR_OIS,
    EUR_FIXED_1Y_EURIBOR_3M,
    EUR_FIXED_1Y_EURIBOR_6M,
    EUR_USD_FX_SWAP,
    USD_DEPOSIT_T0,
    USD_DEPOSIT_T2,
    USD_FIXED_1Y_FED_FUND_OIS,
    USD_FIXED_1Y_SOFR_OIS,
    USD_FIXED_6M_LIBOR_3M,
    FixedIborSwapConvention,
    FixedOvernightSwapConvention,
    FraConvention,
    FxSwapConvention,
    IborFixingDepositConvention,
    IborFutureConvention,
    IborIborSwapConvention,
    TermDepositConvention,
    XCcyIborIborSwapConvention,
)
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

__all__ = [
    "ResolvedTermDeposit",
    "ResolvedIborFixingDeposit",
    "ResolvedFra",
    "ResolvedIborFuture",
    "ResolvedFxSwap",
    "ResolvedSwap",
    "ResolvedSwapLeg",
    "FixedRatePeriod",
    "IborRatePeriod",
    "OvernightRatePeriod",
    "NotionalExchange",
    "TermDepositConvention",
    "IborFixingDepositConvention",
    "FraConvention",
    "IborFutureConvention",
    "FixedIborSwapConvention",
    "FixedOvernightSwapConvention",
    "IborIborSwapConvention",
    "XCcyIborIborSwapConvention",
    "FxSwapConvention",
    "EUR_DEPOSIT_T0",
    "EUR_DEPOSIT_T2",
    "USD_DEPOSIT_T0",
    "USD_DEPOSIT_T2",
    "EUR_FIXED_1Y_EURIBOR_3M",
    "EUR_FIXED_1Y_EURIBOR_6M",
    "USD_FIXED_6M_LIBOR_3M",
    "EUR_FIXED_1Y_ESTR_OIS",
    "USD_FIXED_1Y_FED_FUND_OIS",
    "USD_FIXED_1Y_SOFR_OIS",
    "EUR_EURIBOR_3M_EURIBOR_6M",
    "EUR_EURIBOR_3M_USD_LIBOR_3M",
    "EUR_USD_FX_SWAP",
]
