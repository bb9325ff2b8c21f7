"""Tests for market quote sensitivity on a single calibrated curve group."""

import numpy as np
import pytest

from ficcal.calibration import PAR_SPREAD, CurveCalibrator, MarketQuoteSensitivityCalculator
from ficcal.conventions.indices import EUR_ESTR, EUR_EURIBOR_3M
from ficcal.curves import CurveGroupDefinition, CurveGroupEntry
from ficcal.errors import MissingCurve
from ficcal.instruments import EUR_FIXED_1Y_EURIBOR_3M
from ficcal.market import CurrencyParameterSensitivities, CurrencyParameterSensitivity
from ficcal.valuation import DiscountingSwapPricer, ImmutableRatesProvider

from market_setup import (
    VALUATION_DATE,
    estr_definition,
    euribor_definition,
    quote_sensitivity_by_id,
)


def test_calibration_trades_have_one_hot_quote_sensitivity(eur_provider, eur_group, eur_market_data) -> None:
    """The par spread of each calibration trade moves one for one with its own quote only."""
    calculator = MarketQuoteSensitivityCalculator()
    quote_ids = [node.quote_id for node in eur_group.nodes()]
    for node in eur_group.nodes():
        trade = node.trade(VALUATION_DATE, eur_market_data)
        sensitivity = PAR_SPREAD.sensitivity(trade, eur_provider)
        by_quote = quote_sensitivity_by_id(calculator.sensitivity(sensitivity, eur_provider))
        assert set(by_quote) <= set(quote_ids)
        for quote_id in quote_ids:
            expected = 1.0 if quote_id == node.quote_id else 0.0
            assert by_quote.get(quote_id, 0.0) == pytest.approx(expected, abs=1e-10)


def test_swap_quote_sensitivity_matches_recalibration(eur_group, eur_market_data, eur_provider) -> None:
    """Quote sensitivity of an off-market swap agrees with bumping quotes and recalibrating."""
    pricer = DiscountingSwapPricer()
    swap = EUR_FIXED_1Y_EURIBOR_3M.to_trade(VALUATION_DATE, "7Y", 0.031)
    points = pricer.present_value_sensitivity(swap, eur_provider)
    analytic = quote_sensitivity_by_id(
        MarketQuoteSensitivityCalculator().sensitivity(eur_provider.parameter_sensitivity(points), eur_provider)
    )

    precise = CurveCalibrator.of(tolerance=1e-13)
    shift = 1e-5
    scale = max(1.0, max(abs(v) for v in analytic.values()))
    for quote_id in eur_market_data.quote_ids:
        value = eur_market_data.quote(quote_id)
        up = precise.calibrate(eur_group, eur_market_data.with_quote(quote_id, value + shift))
        down = precise.calibrate(eur_group, eur_market_data.with_quote(quote_id, value - shift))
        numeric = (pricer.present_value(swap, up) - pricer.present_value(swap, down)) / (2.0 * shift)
        assert analytic[quote_id] == pytest.approx(numeric, abs=1e-5 * scale)


def test_swap_quote_sensitivity_is_concentrated_near_maturity(eur_provider) -> None:
    """A 7Y payer swap gains when the 5Y and 10Y swap quotes rise and is mostly exposed to them."""
    pricer = DiscountingSwapPricer()
    swap = EUR_FIXED_1Y_EURIBOR_3M.to_trade(VALUATION_DATE, "7Y", 0.031)
    sensitivity = eur_provider.parameter_sensitivity(pricer.present_value_sensitivity(swap, eur_provider))
    by_quote = quote_sensitivity_by_id(MarketQuoteSensitivityCalculator().sensitivity(sensitivity, eur_provider))
    assert by_quote["EUR-IRS3M-5Y"] > 0
    assert by_quote["EUR-IRS3M-10Y"] > 0
    total = sum(abs(v) for v in by_quote.values())
    assert by_quote["EUR-IRS3M-5Y"] + by_quote["EUR-IRS3M-10Y"] > 0.75 * total


def test_result_is_labelled_with_quote_ids(eur_provider) -> None:
    """Each block carries the quote identifiers of the curve it refers to."""
    swap = EUR_FIXED_1Y_EURIBOR_3M.to_trade(VALUATION_DATE, "3Y", 0.033)
    pricer = DiscountingSwapPricer()
    sensitivity = eur_provider.parameter_sensitivity(pricer.present_value_sensitivity(swap, eur_provider))
    result = MarketQuoteSensitivityCalculator().sensitivity(sensitivity, eur_provider)
    frame = result.to_dataframe()
    assert set(frame["curve"]) == {"EUR-ESTR", "EUR-EURIBOR-3M"}
    ois_labels = list(frame[frame["curve"] == "EUR-ESTR"]["label"])
    assert ois_labels == list(eur_provider.curve("EUR-ESTR").quote_ids)


def test_curve_without_jacobian_is_rejected(eur_market_data) -> None:
    """Curves calibrated without a Jacobian cannot be converted to quote sensitivity."""
    group = CurveGroupDefinition(
        "EUR",
        [
            CurveGroupEntry(estr_definition(), discount_currencies=("EUR",), indices=(EUR_ESTR,)),
            CurveGroupEntry(euribor_definition(), indices=(EUR_EURIBOR_3M,)),
        ],
        compute_jacobian=False,
    )
    provider = CurveCalibrator.of().calibrate(group, eur_market_data)
    swap = EUR_FIXED_1Y_EURIBOR_3M.to_trade(VALUATION_DATE, "3Y", 0.033)
    points = DiscountingSwapPricer().present_value_sensitivity(swap, provider)
    with pytest.raises(ValueError, match="no calibration Jacobian"):
        MarketQuoteSensitivityCalculator().sensitivity(provider.parameter_sensitivity(points), provider)


def test_zero_parameter_sensitivity_gives_zero_quote_sensitivity(eur_provider) -> None:
    """A flat zero vector maps to zeros on every quote."""
    curve = eur_provider.curve("EUR-EURIBOR-3M")
    zero = CurrencyParameterSensitivities.of(curve.create_parameter_sensitivity("EUR", np.zeros(7)))
    result = MarketQuoteSensitivityCalculator().sensitivity(zero, eur_provider)
    assert all(np.all(s.sensitivity == 0.0) for s in result)


def test_provider_lookup_error_for_unknown_curve() -> None:
    """Sensitivities to a curve the provider does not hold are reported."""
    provider = ImmutableRatesProvider(VALUATION_DATE)
    sensitivity = CurrencyParameterSensitivities.of(CurrencyParameterSensitivity("NOPE", "EUR", [1.0]))
    with pytest.raises(MissingCurve, match="NOPE"):
        MarketQuoteSensitivityCalculator().sensitivity(sensitivity, provider)
