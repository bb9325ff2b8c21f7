"""Tests for finite difference sensitivity and cross gamma."""

import numpy as np
import pytest

from ficcal.instruments import EUR_FIXED_1Y_EURIBOR_3M
from ficcal.market import CurrencyAmount, CurrencyParameterSensitivities
from ficcal.sensitivity import CurveGammaCalculator, FiniteDifferenceSensitivityCalculator
from ficcal.valuation import DiscountingSwapPricer

from market_setup import VALUATION_DATE


@pytest.fixture
def swap():
    return EUR_FIXED_1Y_EURIBOR_3M.to_trade(VALUATION_DATE, "8Y", 0.032, notional=10_000.0)


def _pv_sensitivity(trade):
    pricer = DiscountingSwapPricer()
    return lambda p: p.parameter_sensitivity(pricer.present_value_sensitivity(trade, p))


def test_forward_and_central_differences_agree(eur_provider, swap) -> None:
    pricer = DiscountingSwapPricer()

    def value(p):
        return pricer.present_value(swap, p)

    central = FiniteDifferenceSensitivityCalculator(shift=1e-7).sensitivity(eur_provider, value, "EUR")
    forward = FiniteDifferenceSensitivityCalculator(shift=1e-7, central=False).sensitivity(eur_provider, value, "EUR")
    assert central.equal_with_tolerance(forward, 1e-1)
    analytic = _pv_sensitivity(swap)(eur_provider)
    assert analytic.equal_with_tolerance(central, 1e-3)


def test_currency_amount_values_carry_their_currency(eur_provider, swap) -> None:
    pricer = DiscountingSwapPricer()
    result = FiniteDifferenceSensitivityCalculator().sensitivity(
        eur_provider, lambda p: CurrencyAmount("EUR", pricer.present_value(swap, p)), curve_names=["EUR-ESTR"]
    )
    assert [s.key for s in result] == [("EUR-ESTR", "EUR")]
    assert result.get_sensitivity("EUR-ESTR", "EUR").parameter_labels == ("1Y", "2Y", "5Y", "10Y", "30Y")


def test_plain_number_needs_a_currency(eur_provider) -> None:
    with pytest.raises(ValueError, match="currency is needed"):
        FiniteDifferenceSensitivityCalculator().sensitivity(eur_provider, lambda p: 1.0)


def test_shift_must_be_positive() -> None:
    with pytest.raises(ValueError, match="shift must be positive"):
        FiniteDifferenceSensitivityCalculator(shift=0.0)


def test_cross_gamma_is_symmetric(eur_provider, swap) -> None:
    gammas = CurveGammaCalculator().cross_gamma(eur_provider, _pv_sensitivity(swap))
    assert {g.curve_name for g in gammas} == {"EUR-ESTR", "EUR-EURIBOR-3M"}
    for gamma in gammas:
        scale = max(1.0, float(np.max(np.abs(gamma.matrix))))
        np.testing.assert_allclose(gamma.matrix, gamma.matrix.T, rtol=0, atol=1e-4 * scale)
        assert gamma.diagonal().parameter_labels == gamma.parameter_labels


def test_cross_gamma_of_linear_value_vanishes(eur_provider) -> None:
    """A value linear in the parameters has a constant first order sensitivity."""
    curve = eur_provider.curve("EUR-ESTR")
    weights = np.arange(1.0, curve.parameter_count + 1.0)

    def linear(p):
        return CurrencyParameterSensitivities.of(p.curve("EUR-ESTR").create_parameter_sensitivity("EUR", weights))

    gammas = CurveGammaCalculator().cross_gamma(eur_provider, linear)
    assert len(gammas) == 1
    np.testing.assert_allclose(gammas[0].matrix, 0.0, atol=1e-9)


def test_cross_gamma_restricted_to_named_curves(eur_provider, swap) -> None:
    gammas = CurveGammaCalculator(shift=1e-5).cross_gamma(
        eur_provider, _pv_sensitivity(swap), curve_names=["EUR-EURIBOR-3M"]
    )
    assert [g.curve_name for g in gammas] == ["EUR-EURIBOR-3M"]
    assert gammas[0].matrix.shape == (7, 7)
