"""Tests for the immutable rates provider."""

import math
from datetime import date

import numpy as np
import pytest

from ficcal.conventions.indices import EUR_ESTR, EUR_EURIBOR_3M, IborRateObservation
from ficcal.curves import CurveKey, InterpolatedNodalCurve, ValueType
from ficcal.errors import MissingCurve, MissingMarketData
from ficcal.market import FxMatrix, MarketData, PointSensitivities
from ficcal.valuation import ImmutableRatesProvider

from market_setup import VALUATION_DATE, daily_fixings


@pytest.fixture
def zero_curve():
    return InterpolatedNodalCurve("EUR-ZERO", [1.0, 5.0], [0.03, 0.04])


@pytest.fixture
def provider(zero_curve):
    forward = InterpolatedNodalCurve("EUR-3M", [0.5, 5.0], [0.035, 0.038])
    return ImmutableRatesProvider(
        VALUATION_DATE,
        discount_curves={"eur": zero_curve},
        index_curves={EUR_EURIBOR_3M: forward, EUR_ESTR: zero_curve},
        fx_matrix=FxMatrix.parse({"EUR/USD": 1.10, "GBP/USD": 1.25}),
    )


def test_discount_factor_from_zero_rate(provider, zero_curve) -> None:
    target = date(2026, 3, 4)
    t = zero_curve.year_fraction(VALUATION_DATE, target)
    assert provider.discount_factor("EUR", target) == pytest.approx(math.exp(-zero_curve.value(t) * t), rel=1e-15)


def test_discount_factor_is_one_on_valuation_date(provider) -> None:
    assert provider.discount_factor("EUR", VALUATION_DATE) == 1.0


def test_discount_factor_curve_is_read_directly() -> None:
    curve = InterpolatedNodalCurve(
        "EUR-DF", [1.0, 2.0], [0.97, 0.94], interpolator="LOG_LINEAR", value_type=ValueType.DISCOUNT_FACTOR
    )
    provider = ImmutableRatesProvider(VALUATION_DATE, discount_curves={"EUR": curve})
    target = date(2025, 3, 4)
    t = curve.year_fraction(VALUATION_DATE, target)
    assert provider.discount_factor("EUR", target) == pytest.approx(curve.value(t), rel=1e-15)


def test_ibor_forward_from_discount_factor_ratio(provider) -> None:
    observation = IborRateObservation.of(EUR_EURIBOR_3M, date(2024, 9, 2))
    curve = provider.index_curve(EUR_EURIBOR_3M)
    df_start = math.exp(-curve.value(curve.year_fraction(VALUATION_DATE, observation.effective_date))
                        * curve.year_fraction(VALUATION_DATE, observation.effective_date))
    df_end = math.exp(-curve.value(curve.year_fraction(VALUATION_DATE, observation.maturity_date))
                      * curve.year_fraction(VALUATION_DATE, observation.maturity_date))
    expected = (df_start / df_end - 1.0) / observation.year_fraction
    assert provider.ibor_rate(observation) == pytest.approx(expected, rel=1e-13)


def test_past_fixing_requires_time_series(provider) -> None:
    observation = IborRateObservation.of(EUR_EURIBOR_3M, date(2024, 2, 28))
    with pytest.raises(MissingMarketData, match="EUR-EURIBOR-3M fixing on 2024-02-28"):
        provider.ibor_rate(observation)


def test_past_fixing_from_time_series(provider) -> None:
    observation = IborRateObservation.of(EUR_EURIBOR_3M, date(2024, 2, 28))
    fixed = ImmutableRatesProvider(
        VALUATION_DATE,
        provider.discount_curves,
        provider.index_curves,
        time_series={"EUR-EURIBOR-3M": {date(2024, 2, 28): 0.0391}},
    )
    assert fixed.ibor_rate(observation) == 0.0391
    assert fixed.ibor_rate_point_sensitivity(observation, 1.0, "EUR") == []


def test_fixing_on_valuation_date_is_used_when_published(provider) -> None:
    observation = IborRateObservation.of(EUR_EURIBOR_3M, VALUATION_DATE)
    assert not provider.is_fixed(observation)
    assert provider.ibor_rate(observation) == pytest.approx(0.035, abs=5e-3)
    assert len(provider.ibor_rate_point_sensitivity(observation, 1.0, "EUR")) == 1

    fixed = ImmutableRatesProvider(
        VALUATION_DATE,
        provider.discount_curves,
        provider.index_curves,
        time_series={"EUR-EURIBOR-3M": {VALUATION_DATE: 0.0389}},
    )
    assert fixed.is_fixed(observation)
    assert fixed.ibor_rate(observation) == 0.0389
    assert fixed.ibor_rate_point_sensitivity(observation, 1.0, "EUR") == []


def test_overnight_period_in_the_past_needs_fixings(provider) -> None:
    with pytest.raises(MissingMarketData, match="EUR-ESTR fixing on 2024-03-01"):
        provider.overnight_rate(EUR_ESTR, date(2024, 3, 1), date(2024, 6, 3), 0.25)


def _with_estr_fixings(provider, fixings):
    return ImmutableRatesProvider(
        VALUATION_DATE, provider.discount_curves, provider.index_curves, time_series={"EUR-ESTR": fixings}
    )


def test_overnight_period_in_the_past_compounds_fixings(provider) -> None:
    """Four one-day accruals and a Friday-to-Monday accrual."""
    rate = 0.039
    fixed = _with_estr_fixings(provider, daily_fixings(EUR_ESTR, date(2024, 2, 1), VALUATION_DATE, rate))
    start, end = date(2024, 2, 5), date(2024, 2, 12)
    factor = (1 + rate / 360) ** 4 * (1 + 3 * rate / 360)
    assert fixed.overnight_rate(EUR_ESTR, start, end, 7 / 360) == pytest.approx((factor - 1) / (7 / 360), rel=1e-14)
    assert fixed.overnight_rate_point_sensitivity(EUR_ESTR, start, end, 7 / 360, 1.0, "EUR") == []


def test_overnight_period_started_in_the_past_chains_fixings_and_forward(provider) -> None:
    rate = 0.039
    fixed = _with_estr_fixings(provider, daily_fixings(EUR_ESTR, date(2024, 2, 1), VALUATION_DATE, rate))
    start, end = date(2024, 2, 26), date(2024, 6, 3)
    factor = (1 + rate / 360) ** 4 * (1 + 3 * rate / 360)
    forward = provider.overnight_rate(EUR_ESTR, VALUATION_DATE, end, 91 / 360)
    expected = (factor * (1 + forward * 91 / 360) - 1) / (98 / 360)
    assert fixed.overnight_rate(EUR_ESTR, start, end, 98 / 360) == pytest.approx(expected, rel=1e-13)

    (point,) = fixed.overnight_rate_point_sensitivity(EUR_ESTR, start, end, 98 / 360, 1.0, "EUR")
    assert point.start_date == VALUATION_DATE
    assert point.year_fraction == pytest.approx(91 / 360)
    assert point.sensitivity == pytest.approx(factor * 91 / 98, rel=1e-14)


def test_overnight_sensitivity_covers_only_the_forwarded_days(provider) -> None:
    fixed = _with_estr_fixings(provider, daily_fixings(EUR_ESTR, date(2024, 2, 1), VALUATION_DATE, 0.039))
    start, end, year_fraction = date(2024, 2, 26), date(2024, 6, 3), 98 / 360
    points = PointSensitivities(
        fixed.overnight_rate_point_sensitivity(EUR_ESTR, start, end, year_fraction, 1.0, "EUR")
    )
    analytic = fixed.parameter_sensitivity(points).get_sensitivity("EUR-ZERO", "EUR").sensitivity
    shift = 1e-7
    parameters = fixed.curve("EUR-ZERO").parameters
    numeric = np.zeros(len(parameters))
    for i in range(len(parameters)):
        up, down = parameters.copy(), parameters.copy()
        up[i] += shift
        down[i] -= shift
        numeric[i] = (
            fixed.with_curve_values("EUR-ZERO", up).overnight_rate(EUR_ESTR, start, end, year_fraction)
            - fixed.with_curve_values("EUR-ZERO", down).overnight_rate(EUR_ESTR, start, end, year_fraction)
        ) / (2 * shift)
    np.testing.assert_allclose(analytic, numeric, rtol=1e-6, atol=1e-10)


def test_overnight_fixing_on_valuation_date_is_used_when_published(provider) -> None:
    rate, end = 0.039, date(2024, 6, 3)
    fixed = _with_estr_fixings(provider, {VALUATION_DATE: rate})
    forward = provider.overnight_rate(EUR_ESTR, date(2024, 3, 5), end, 90 / 360)
    expected = ((1 + rate / 360) * (1 + forward * 90 / 360) - 1) / (91 / 360)
    assert fixed.overnight_rate(EUR_ESTR, VALUATION_DATE, end, 91 / 360) == pytest.approx(expected, rel=1e-13)
    (point,) = fixed.overnight_rate_point_sensitivity(EUR_ESTR, VALUATION_DATE, end, 91 / 360, 1.0, "EUR")
    assert point.start_date == date(2024, 3, 5)


def test_missing_overnight_fixing_is_reported(provider) -> None:
    fixings = daily_fixings(EUR_ESTR, date(2024, 2, 1), VALUATION_DATE, 0.039)
    del fixings[date(2024, 2, 28)]
    fixed = _with_estr_fixings(provider, fixings)
    with pytest.raises(MissingMarketData, match="EUR-ESTR fixing on 2024-02-28"):
        fixed.overnight_rate(EUR_ESTR, date(2024, 2, 26), date(2024, 6, 3), 98 / 360)


def test_overnight_rate_from_forward_curve(provider) -> None:
    rate = provider.overnight_rate(EUR_ESTR, VALUATION_DATE, date(2025, 3, 4), 365 / 360)
    df_end = provider.discount_factor("EUR", date(2025, 3, 4))
    assert rate == pytest.approx((1.0 / df_end - 1.0) / (365 / 360), rel=1e-14)


def test_missing_curves_are_reported(provider) -> None:
    with pytest.raises(MissingCurve, match="discounting USD"):
        provider.discount_factor("USD", date(2025, 3, 4))
    with pytest.raises(MissingCurve, match="forwarding EUR-EURIBOR-6M"):
        provider.index_curve("EUR-EURIBOR-6M")
    with pytest.raises(MissingCurve, match="curve NOPE"):
        provider.curve("NOPE")


def test_fx_rates_direct_inverse_and_cross(provider) -> None:
    assert provider.fx_rate("EUR", "USD") == 1.10
    assert provider.fx_rate("USD", "EUR") == pytest.approx(1 / 1.10)
    assert provider.fx_rate("EUR", "GBP") == pytest.approx(1.10 / 1.25)
    with pytest.raises(MissingMarketData, match="EUR/JPY"):
        provider.fx_rate("EUR", "JPY")


def test_curve_roles_and_keys(provider, zero_curve) -> None:
    assert set(provider.curves) == {"EUR-ZERO", "EUR-3M"}
    assert provider.keys() == {
        CurveKey.discount("EUR"),
        CurveKey.index(EUR_EURIBOR_3M),
        CurveKey.index(EUR_ESTR),
    }
    assert provider.discount_curve("EUR") is zero_curve


def test_replacing_a_curve_updates_every_role(provider) -> None:
    bumped = provider.with_curve_values("EUR-ZERO", [0.031, 0.041])
    assert bumped.discount_curve("EUR") is bumped.index_curve(EUR_ESTR)
    np.testing.assert_allclose(bumped.curve("EUR-ZERO").parameters, [0.031, 0.041])
    np.testing.assert_allclose(provider.curve("EUR-ZERO").parameters, [0.03, 0.04])


def test_parameter_sensitivity_chains_discount_factor_points(provider, zero_curve) -> None:
    """d(DF)/d(zero node) = -t * DF * d(zero)/d(node)."""
    target = date(2027, 3, 4)
    points = PointSensitivities(provider.discount_factor_point_sensitivity("EUR", target, 100.0))
    sensitivity = provider.parameter_sensitivity(points).get_sensitivity("EUR-ZERO", "EUR")
    t = zero_curve.year_fraction(VALUATION_DATE, target)
    df = provider.discount_factor("EUR", target)
    np.testing.assert_allclose(sensitivity.sensitivity, -100.0 * t * df * zero_curve.parameter_sensitivity(t))


def test_no_point_sensitivity_on_valuation_date(provider) -> None:
    assert provider.discount_factor_point_sensitivity("EUR", VALUATION_DATE, 1.0) == []


def test_from_market_data_carries_fx_and_fixings() -> None:
    data = MarketData(
        VALUATION_DATE,
        {"Q": 0.01},
        FxMatrix.parse({"EUR/USD": 1.10}),
        {"EUR-EURIBOR-3M": {date(2024, 3, 1): 0.039}},
    )
    provider = ImmutableRatesProvider.from_market_data(data)
    assert provider.valuation_date == VALUATION_DATE
    assert provider.fx_rate("EUR", "USD") == 1.10
    assert provider.time_series["EUR-EURIBOR-3M"][date(2024, 3, 1)] == 0.039
    assert provider.curves == {}
