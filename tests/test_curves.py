"""Tests for curves, curve definitions and calibration nodes."""

import numpy as np
import pytest

from ficcal.conventions.indices import EUR_ESTR, EUR_EURIBOR_3M
from ficcal.curves import (
    CurveKey,
    CurveParameterSize,
    FixedOvernightSwapCurveNode,
    InterpolatedNodalCurve,
    InterpolatedNodalCurveDefinition,
    JacobianCalibrationMatrix,
    ParameterizedFunctionalCurve,
    ParameterizedFunctionalCurveDefinition,
    TermDepositCurveNode,
    ValueType,
)
from ficcal.errors import InvalidCurveDefinition, MissingMarketData
from ficcal.instruments import EUR_DEPOSIT_T0, EUR_FIXED_1Y_ESTR_OIS
from ficcal.market import MarketData

from market_setup import EUR_3M_QUOTES, EUR_OIS_QUOTES, VALUATION_DATE, estr_definition, euribor_definition


def _nelson_siegel_like(parameters, x):
    level, slope = parameters
    return level + slope * np.exp(-x / 3.0)


def _functional_curve():
    return ParameterizedFunctionalCurve(
        "EUR-FUNC",
        [0.03, -0.01],
        _nelson_siegel_like,
        lambda p, x: -p[1] / 3.0 * np.exp(-x / 3.0),
        lambda p, x: np.array([1.0, np.exp(-x / 3.0)]),
        parameter_labels=("level", "slope"),
    )


class TestInterpolatedNodalCurve:

    def test_values_and_labels(self) -> None:
        curve = InterpolatedNodalCurve("EUR", [1.0, 2.0], [0.03, 0.04], parameter_labels=("1Y", "2Y"))
        assert curve.value(1.5) == pytest.approx(0.035)
        assert curve.parameter_count == 2
        sensitivity = curve.create_parameter_sensitivity("EUR", [1.0, 2.0])
        assert sensitivity.parameter_labels == ("1Y", "2Y")
        assert "EUR (ZERO_RATE, LINEAR)" in str(curve)

    def test_parameters_are_read_only(self) -> None:
        curve = InterpolatedNodalCurve("EUR", [1.0, 2.0], [0.03, 0.04])
        with pytest.raises(ValueError):
            curve.parameters[0] = 1.0

    def test_with_parameters_drops_jacobian(self) -> None:
        jacobian = JacobianCalibrationMatrix([CurveParameterSize("EUR", 2)], np.eye(2))
        curve = InterpolatedNodalCurve("EUR", [1.0, 2.0], [0.03, 0.04], jacobian=jacobian)
        assert curve.jacobian is jacobian
        moved = curve.with_parameters([0.031, 0.041])
        assert moved.jacobian is None
        np.testing.assert_array_equal(curve.parameters, [0.03, 0.04])
        assert curve.with_y_value(1, 0.05).value(2.0) == 0.05

    def test_with_jacobian_copies(self) -> None:
        curve = InterpolatedNodalCurve("EUR", [1.0, 2.0], [0.03, 0.04])
        jacobian = JacobianCalibrationMatrix([CurveParameterSize("EUR", 2)], np.eye(2))
        with_jacobian = curve.with_jacobian(jacobian)
        assert with_jacobian.jacobian is jacobian
        assert curve.jacobian is None

    def test_invalid_curves(self) -> None:
        with pytest.raises(InvalidCurveDefinition, match="Curve 'EUR': x values must be strictly increasing"):
            InterpolatedNodalCurve("EUR", [2.0, 1.0], [0.03, 0.04])
        with pytest.raises(InvalidCurveDefinition, match="Expected 2 y-values, got 3"):
            InterpolatedNodalCurve("EUR", [1.0, 2.0], [0.03, 0.04]).with_y_values([1, 2, 3])
        with pytest.raises(InvalidCurveDefinition, match="1 labels for 2 nodes"):
            InterpolatedNodalCurve("EUR", [1.0, 2.0], [0.03, 0.04], parameter_labels=("1Y",))
        with pytest.raises(ValueError, match="name must not be empty"):
            InterpolatedNodalCurve("", [1.0], [0.03])

    def test_discount_factor_curve(self) -> None:
        curve = InterpolatedNodalCurve(
            "EUR-DF", [1.0, 2.0], [0.97, 0.94], interpolator="LOG_LINEAR", value_type=ValueType.DISCOUNT_FACTOR
        )
        assert curve.value_type == ValueType.DISCOUNT_FACTOR
        assert curve.value(1.5) == pytest.approx(np.sqrt(0.97 * 0.94))


class TestParameterizedFunctionalCurve:

    def test_value_derivative_and_sensitivity(self) -> None:
        curve = _functional_curve()
        assert curve.value(0.0) == pytest.approx(0.02)
        np.testing.assert_allclose(curve.parameter_sensitivity(3.0), [1.0, np.exp(-1.0)])
        shift = 1e-6
        numeric = (curve.value(2.0 + shift) - curve.value(2.0 - shift)) / (2 * shift)
        assert curve.first_derivative(2.0) == pytest.approx(numeric, abs=1e-9)

    def test_with_parameters(self) -> None:
        moved = _functional_curve().with_parameters([0.04, 0.0])
        assert moved.value(5.0) == pytest.approx(0.04)
        assert moved.parameter_labels == ("level", "slope")

    def test_sensitivity_shape_is_checked(self) -> None:
        curve = ParameterizedFunctionalCurve(
            "BAD", [0.03], lambda p, x: p[0], lambda p, x: 0.0, lambda p, x: np.ones(2)
        )
        with pytest.raises(InvalidCurveDefinition, match="expected \\(1,\\)"):
            curve.parameter_sensitivity(1.0)

    def test_parameters_must_be_finite(self) -> None:
        with pytest.raises(InvalidCurveDefinition, match="finite"):
            ParameterizedFunctionalCurve("BAD", [float("inf")], None, None, None)


class TestJacobianCalibrationMatrix:

    def test_shape_must_match_order(self) -> None:
        with pytest.raises(ValueError, match="expected 3 columns"):
            JacobianCalibrationMatrix(
                [CurveParameterSize("A", 1), CurveParameterSize("B", 2)], np.ones((2, 2))
            )

    def test_split(self) -> None:
        matrix = np.arange(6.0).reshape(2, 3)
        jacobian = JacobianCalibrationMatrix([CurveParameterSize("A", 1), CurveParameterSize("B", 2)], matrix)
        blocks = jacobian.split_matrix()
        assert [size.name for size, _ in blocks] == ["A", "B"]
        np.testing.assert_array_equal(blocks[1][1], matrix[:, 1:])
        row_blocks = jacobian.split(np.array([1.0, 2.0, 3.0]))
        np.testing.assert_array_equal(row_blocks[1][1], [2.0, 3.0])
        assert jacobian.total_parameter_count == 3


class TestCurveDefinitions:

    def test_nodal_definition_builds_curve_at_node_dates(self) -> None:
        definition = estr_definition()
        x = definition.x_values(VALUATION_DATE)
        assert len(x) == 5
        assert np.all(np.diff(x) > 0)
        assert x[0] == pytest.approx(1.0, abs=0.02)
        curve = definition.curve(VALUATION_DATE, [0.03] * 5)
        assert curve.quote_ids == tuple(EUR_OIS_QUOTES)
        assert curve.parameter_labels == ("1Y", "2Y", "5Y", "10Y", "30Y")

    def test_initial_guess_from_quotes_or_seed(self) -> None:
        data = MarketData(VALUATION_DATE, EUR_OIS_QUOTES)
        assert estr_definition().initial_guess(data) == list(EUR_OIS_QUOTES.values())
        seeded = InterpolatedNodalCurveDefinition("S", estr_definition().nodes, seed=0.02)
        assert seeded.initial_guess(data) == [0.02] * 5
        discount_factors = InterpolatedNodalCurveDefinition(
            "DF", estr_definition().nodes, interpolator="LOG_LINEAR", value_type=ValueType.DISCOUNT_FACTOR
        )
        assert discount_factors.initial_guess(data) == [1.0] * 5

    def test_missing_quote_for_guess(self) -> None:
        with pytest.raises(MissingMarketData, match="EUR-OIS-1Y"):
            estr_definition().initial_guess(MarketData(VALUATION_DATE, {}))

    def test_node_dates_must_increase(self) -> None:
        nodes = list(estr_definition().nodes)
        definition = InterpolatedNodalCurveDefinition("BAD", [nodes[1], nodes[0]])
        with pytest.raises(InvalidCurveDefinition, match="strictly increasing"):
            definition.x_values(VALUATION_DATE)

    def test_definition_validation(self) -> None:
        with pytest.raises(InvalidCurveDefinition, match="at least one node"):
            InterpolatedNodalCurveDefinition("EMPTY", [])
        with pytest.raises(InvalidCurveDefinition, match="Unknown interpolation method"):
            InterpolatedNodalCurveDefinition("BAD", estr_definition().nodes, interpolator="CUBIC")

    def test_functional_definition(self) -> None:
        definition = ParameterizedFunctionalCurveDefinition(
            "EUR-FUNC",
            estr_definition().nodes[:2],
            (0.03, -0.01),
            _nelson_siegel_like,
            lambda p, x: 0.0,
            lambda p, x: np.array([1.0, np.exp(-x / 3.0)]),
        )
        assert definition.parameter_count == 2
        assert definition.labels == ("p0", "p1")
        curve = definition.curve(VALUATION_DATE, [0.03, 0.0])
        assert curve.quote_ids == ("EUR-OIS-1Y", "EUR-OIS-2Y")
        assert curve.value(4.0) == pytest.approx(0.03)


class TestCurveNodes:

    def test_requirements(self) -> None:
        ois = estr_definition().nodes[0]
        assert ois.requirements() == {CurveKey.discount("EUR"), CurveKey.index(EUR_ESTR)}
        assert str(CurveKey.index(EUR_EURIBOR_3M)) == "index EUR-EURIBOR-3M"
        deposit = TermDepositCurveNode(EUR_DEPOSIT_T0, "1D", "EUR-ON")
        assert deposit.requirements() == {CurveKey.discount("EUR")}

    def test_trade_at_quote_and_date(self) -> None:
        data = MarketData(VALUATION_DATE, dict(EUR_OIS_QUOTES, **EUR_3M_QUOTES))
        node = FixedOvernightSwapCurveNode(EUR_FIXED_1Y_ESTR_OIS, "5Y", "EUR-OIS-5Y")
        trade = node.trade(VALUATION_DATE, data)
        assert trade.market_quote == EUR_OIS_QUOTES["EUR-OIS-5Y"]
        assert node.date(VALUATION_DATE) == trade.end_date
        for fra_or_swap in euribor_definition().nodes:
            assert fra_or_swap.trade(VALUATION_DATE, data).market_quote == EUR_3M_QUOTES[fra_or_swap.quote_id]

    def test_overnight_deposit_node_label(self) -> None:
        deposit = TermDepositCurveNode(EUR_DEPOSIT_T0, "1D", "EUR-ON")
        assert deposit.label == "1D"
        assert deposit.date(VALUATION_DATE) > VALUATION_DATE
