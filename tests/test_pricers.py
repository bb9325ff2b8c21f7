"""Tests for the discounting pricers against bump-and-reprice sensitivities."""

from dataclasses import replace
from datetime import date

import numpy as np
import pytest

from ficcal.conventions.indices import EUR_ESTR, EUR_EURIBOR_3M, EUR_EURIBOR_6M, USD_FED_FUND, USD_LIBOR_3M
from ficcal.curves import InterpolatedNodalCurve
from ficcal.instruments import (
    EUR_DEPOSIT_T2,
    EUR_EURIBOR_3M_EURIBOR_6M,
    EUR_EURIBOR_3M_USD_LIBOR_3M,
    EUR_FIXED_1Y_ESTR_OIS,
    EUR_FIXED_1Y_EURIBOR_3M,
    EUR_USD_FX_SWAP,
    USD_FIXED_1Y_FED_FUND_OIS,
    FraConvention,
    IborFixingDepositConvention,
    IborFutureConvention,
    ResolvedFra,
    ResolvedFxSwap,
    ResolvedIborFuture,
    ResolvedSwap,
)
from ficcal.market import FxMatrix
from ficcal.sensitivity import FiniteDifferenceSensitivityCalculator
from ficcal.valuation import (
    DiscountingFxSwapPricer,
    DiscountingSwapPricer,
    DiscountingTermDepositPricer,
    ImmutableRatesProvider,
    get_pricer,
)

from market_setup import EUR_USD_SPOT, VALUATION_DATE, daily_fixings

TIMES = [0.25, 1.0, 2.0, 5.0, 10.0]


def _curve(name, rates, interpolator="NATURAL_CUBIC_SPLINE"):
    return InterpolatedNodalCurve(name, TIMES, rates, interpolator=interpolator)


@pytest.fixture
def provider():
    eur_ois = _curve("EUR-ESTR", [0.0380, 0.0340, 0.0305, 0.0280, 0.0272])
    usd_ois = _curve("USD-OIS", [0.0530, 0.0495, 0.0455, 0.0425, 0.0418])
    return ImmutableRatesProvider(
        VALUATION_DATE,
        discount_curves={"EUR": eur_ois, "USD": usd_ois},
        index_curves={
            EUR_ESTR: eur_ois,
            USD_FED_FUND: usd_ois,
            EUR_EURIBOR_3M: _curve("EUR-EURIBOR-3M", [0.0395, 0.0362, 0.0330, 0.0305, 0.0298], "LINEAR"),
            EUR_EURIBOR_6M: _curve("EUR-EURIBOR-6M", [0.0400, 0.0370, 0.0340, 0.0315, 0.0309]),
            USD_LIBOR_3M: _curve("USD-LIBOR-3M", [0.0550, 0.0515, 0.0470, 0.0440, 0.0433], "LINEAR"),
        },
        fx_matrix=FxMatrix.parse({"EUR/USD": EUR_USD_SPOT}),
    )


TRADES = {
    "term-deposit": lambda d: EUR_DEPOSIT_T2.to_trade(d, "9M", 0.036, notional=1e6),
    "fixing-deposit": lambda d: IborFixingDepositConvention(EUR_EURIBOR_3M).to_trade(d, 0.038, notional=1e6),
    "fra": lambda d: FraConvention(EUR_EURIBOR_3M).to_trade(d, "6M", "9M", 0.035, notional=1e6),
    "future": lambda d: IborFutureConvention(EUR_EURIBOR_3M).to_trade(d, 3, 0.9660, quantity=5.0),
    "ibor-swap": lambda d: EUR_FIXED_1Y_EURIBOR_3M.to_trade(d, "7Y", 0.031, notional=1e6),
    "eur-ois": lambda d: EUR_FIXED_1Y_ESTR_OIS.to_trade(d, "3Y", 0.030, notional=1e6),
    "usd-ois": lambda d: USD_FIXED_1Y_FED_FUND_OIS.to_trade(d, "18M", 0.047, notional=1e6),
    "basis-swap": lambda d: EUR_EURIBOR_3M_EURIBOR_6M.to_trade(d, "5Y", 0.0008, notional=1e6),
    "xccy-swap": lambda d: EUR_EURIBOR_3M_USD_LIBOR_3M.to_trade(d, "4Y", -0.0020, EUR_USD_SPOT, notional=1e6),
    "fx-swap": lambda d: EUR_USD_FX_SWAP.to_trade(d, "1Y", EUR_USD_SPOT, 0.0180, notional=1e6),
}


@pytest.mark.parametrize("name", list(TRADES))
def test_present_value_sensitivity_matches_finite_difference(name, provider) -> None:
    trade = TRADES[name](VALUATION_DATE)
    pricer = get_pricer(trade)
    analytic = provider.parameter_sensitivity(pricer.present_value_sensitivity(trade, provider)).total_by_curve()
    numeric = FiniteDifferenceSensitivityCalculator().sensitivity(
        provider, lambda p: pricer.present_value(trade, p), currency=trade.currency
    ).total_by_curve()
    for curve_name, values in numeric.items():
        expected = analytic.get(curve_name, np.zeros_like(values))
        np.testing.assert_allclose(expected, values, rtol=1e-6, atol=1e-4, err_msg=curve_name)


@pytest.mark.parametrize("name", list(TRADES))
def test_par_spread_sensitivity_matches_finite_difference(name, provider) -> None:
    trade = TRADES[name](VALUATION_DATE)
    pricer = get_pricer(trade)
    analytic = provider.parameter_sensitivity(pricer.par_spread_sensitivity(trade, provider)).total_by_curve()
    numeric = FiniteDifferenceSensitivityCalculator().sensitivity(
        provider, lambda p: pricer.par_spread(trade, p), currency=trade.currency
    ).total_by_curve()
    for curve_name, values in numeric.items():
        expected = analytic.get(curve_name, np.zeros_like(values))
        np.testing.assert_allclose(expected, values, rtol=1e-6, atol=1e-9, err_msg=curve_name)


@pytest.mark.parametrize("name", list(TRADES))
def test_trade_at_par_spread_is_worth_zero(name, provider) -> None:
    """Moving the quote by the par spread brings the value to zero."""
    trade = TRADES[name](VALUATION_DATE)
    pricer = get_pricer(trade)
    spread = pricer.par_spread(trade, provider)
    at_par = _with_quote(trade, trade.market_quote + spread)
    assert pricer.present_value(at_par, provider) == pytest.approx(0.0, abs=1e-6)


@pytest.mark.parametrize("name", ["term-deposit", "fra", "ibor-swap", "eur-ois"])
def test_pvbp_is_derivative_with_respect_to_quote(name, provider) -> None:
    trade = TRADES[name](VALUATION_DATE)
    pricer = get_pricer(trade)
    shift = 1e-6
    rate = trade.market_quote
    up = pricer.present_value(_with_quote(trade, rate + shift), provider)
    down = pricer.present_value(_with_quote(trade, rate - shift), provider)
    assert pricer.pvbp(trade, provider) == pytest.approx((up - down) / (2 * shift), rel=1e-8)


def _with_quote(trade, value):
    """Same trade with its market quote replaced."""
    if isinstance(trade, ResolvedSwap):
        return trade.with_quoted_rate(value)
    if isinstance(trade, ResolvedFra):
        return replace(trade, fixed_rate=value)
    if isinstance(trade, ResolvedIborFuture):
        return replace(trade, reference_price=value)
    if isinstance(trade, ResolvedFxSwap):
        return replace(trade, forward_points=value)
    return replace(trade, rate=value)


def test_term_deposit_par_rate_reprices(provider) -> None:
    pricer = DiscountingTermDepositPricer()
    trade = TRADES["term-deposit"](VALUATION_DATE)
    par = pricer.par_rate(trade, provider)
    assert pricer.present_value(_with_quote(trade, par), provider) == pytest.approx(0.0, abs=1e-8)
    assert par == pytest.approx(trade.market_quote + pricer.par_spread(trade, provider), abs=1e-14)


def test_ibor_swap_par_rate_of_float_first_leg_is_rejected(provider) -> None:
    trade = TRADES["basis-swap"](VALUATION_DATE)
    with pytest.raises(ValueError, match="first leg is fixed"):
        DiscountingSwapPricer().par_rate(trade, provider)


def test_future_and_fx_swap_have_no_par_rate(provider) -> None:
    for name in ("future", "fx-swap"):
        trade = TRADES[name](VALUATION_DATE)
        with pytest.raises(ValueError, match="no par rate"):
            get_pricer(trade).par_rate(trade, provider)


def test_fx_swap_forward_rate_follows_interest_differential(provider) -> None:
    """EUR rates below USD rates put the EUR/USD forward above spot."""
    trade = TRADES["fx-swap"](VALUATION_DATE)
    forward = DiscountingFxSwapPricer().forward_rate(trade, provider)
    expected = (
        EUR_USD_SPOT
        * provider.discount_factor("EUR", trade.far_date)
        / provider.discount_factor("USD", trade.far_date)
    )
    assert forward == pytest.approx(expected, rel=1e-14)
    assert forward > EUR_USD_SPOT


def test_fx_swap_near_leg_in_the_past_is_ignored(provider) -> None:
    pricer = DiscountingFxSwapPricer()
    trade = EUR_USD_FX_SWAP.to_trade(date(2024, 2, 1), "3M", EUR_USD_SPOT, 0.0050)
    full = pricer.present_value(trade, provider)
    far_only = (
        -EUR_USD_SPOT * provider.discount_factor("EUR", trade.far_date)
        + trade.far_rate * provider.discount_factor("USD", trade.far_date)
    )
    assert full == pytest.approx(far_only, abs=1e-14)


def _seasoned_ois(provider, fixing_rate):
    """2Y ESTR swap started on 2024-01-02 with daily fixings up to the valuation date."""
    trade = EUR_FIXED_1Y_ESTR_OIS.to_trade(date(2023, 12, 28), "2Y", 0.030, notional=1e6)
    fixings = daily_fixings(EUR_ESTR, date(2024, 1, 2), VALUATION_DATE, fixing_rate)
    seasoned = ImmutableRatesProvider(
        VALUATION_DATE,
        provider.discount_curves,
        provider.index_curves,
        provider.fx_matrix,
        time_series={"EUR-ESTR": fixings},
    )
    return trade, seasoned


def test_seasoned_overnight_swap_compounds_past_fixings(provider) -> None:
    trade, seasoned = _seasoned_ois(provider, 0.039)
    _, higher = _seasoned_ois(provider, 0.040)
    first = trade.legs[1].periods[0]
    assert first.start_date == date(2024, 1, 2)

    def first_rate(p):
        return p.overnight_rate(first.index, first.start_date, first.end_date, first.year_fraction)

    assert 0.03 < first_rate(seasoned) < first_rate(higher) < 0.04
    pricer = DiscountingSwapPricer()
    change = pricer.present_value(trade, higher) - pricer.present_value(trade, seasoned)
    expected = (
        first.notional * first.year_fraction * (first_rate(higher) - first_rate(seasoned))
        * seasoned.discount_factor("EUR", first.payment_date)
    )
    assert abs(change) == pytest.approx(abs(expected), rel=1e-9)
    assert abs(change) > 10.0


def test_seasoned_overnight_swap_sensitivity_matches_finite_difference(provider) -> None:
    trade, seasoned = _seasoned_ois(provider, 0.039)
    pricer = DiscountingSwapPricer()
    analytic = seasoned.parameter_sensitivity(pricer.present_value_sensitivity(trade, seasoned)).total_by_curve()
    numeric = FiniteDifferenceSensitivityCalculator().sensitivity(
        seasoned, lambda p: pricer.present_value(trade, p), currency=trade.currency
    ).total_by_curve()
    for curve_name, values in numeric.items():
        expected = analytic.get(curve_name, np.zeros_like(values))
        np.testing.assert_allclose(expected, values, rtol=1e-6, atol=1e-4, err_msg=curve_name)


def test_unknown_trade_type_has_no_pricer() -> None:
    with pytest.raises(ValueError, match="No pricer for trade type str"):
        get_pricer("not a trade")
