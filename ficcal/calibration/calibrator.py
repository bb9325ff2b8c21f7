"""
Newton-Raphson calibration of curve groups.

Each group is a square system: one residual per calibration node, one unknown
per curve parameter. Groups are solved one after the other in dependency
order, each against a provider holding the known curves and the curves of
the groups already calibrated.

Per group the iteration is

    r(y)  residuals of the calibration measures at parameters y
    J(y)  d r / d y restricted to the group's own curve parameters
    y    <- y - J(y)^{-1} r(y)          (LU factorization, no regularization)

until every residual is within the tolerance of its measure unit.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

from ficcal.config import CalibrationConfig
from ficcal.curves.base import BaseCurve, CurveParameterSize, JacobianCalibrationMatrix
from ficcal.curves.group import CurveGroupDefinition
from ficcal.errors import CalibrationDidNotConverge, CurveGroupSizeMismatch, SingularJacobian
from ficcal.market.parameter import CurrencyParameterSensitivities
from ficcal.market.quotes import MarketData
from ficcal.valuation.provider import ImmutableRatesProvider

from .measures import PAR_SPREAD, CalibrationMeasures, MeasureUnit
from .ordering import calibration_order

logger = logging.getLogger(__name__)


@dataclass
class _PreparedGroup:
    """Group with its trades resolved and its starting curves built."""

    group: CurveGroupDefinition
    trades: List
    templates: List[BaseCurve]
    initial: np.ndarray

    def curves(self, parameters: np.ndarray) -> List[BaseCurve]:
        result = []
        start = 0
        for template in self.templates:
            end = start + template.parameter_count
            result.append(template.with_parameters(parameters[start:end]))
            start = end
        return result

    def provider(self, base: ImmutableRatesProvider, curves: Sequence[BaseCurve]) -> ImmutableRatesProvider:
        discount: Dict[str, BaseCurve] = {}
        index: Dict[str, BaseCurve] = {}
        for entry, curve in zip(self.group.entries, curves):
            for currency in entry.discount_currencies:
                discount[currency] = curve
            for idx in entry.indices:
                index[idx.name] = curve
        return base.with_curves(discount, index)


class CurveCalibrator:
    """Calibrates curve groups to market quotes.

    Args:
        config: Tolerances and iteration budget
        measures: Calibration measures giving the residual of each trade type
    """

    def __init__(
        self,
        config: Optional[CalibrationConfig] = None,
        measures: CalibrationMeasures = PAR_SPREAD,
    ):
        self.config = config or CalibrationConfig()
        self.measures = measures

    @classmethod
    def of(
        cls,
        tolerance: float = 1e-9,
        max_iterations: int = 100,
        measures: CalibrationMeasures = PAR_SPREAD,
    ) -> "CurveCalibrator":
        """Calibrator with one rate tolerance and an iteration budget."""
        return cls(CalibrationConfig(tolerance_rate=tolerance, max_iterations=max_iterations), measures)

    @classmethod
    def from_config(
        cls, config: CalibrationConfig, measures: CalibrationMeasures = PAR_SPREAD
    ) -> "CurveCalibrator":
        return cls(config, measures)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def calibrate(
        self,
        groups: Union[CurveGroupDefinition, Sequence[CurveGroupDefinition]],
        market_data: MarketData,
        known: Optional[ImmutableRatesProvider] = None,
    ) -> ImmutableRatesProvider:
        """Calibrate every group and return the provider holding all curves.

        Args:
            groups: One group or several groups, in any order
            market_data: Quotes, FX rates and fixings
            known: Provider whose curves are used as given and kept in the result

        Returns:
            Provider with the known curves and all calibrated curves

        Raises:
            CyclicCurveDependency: Group dependencies form a cycle
            MissingCurve: A node needs a curve nobody provides
            CurveGroupSizeMismatch: Instruments and parameters differ in number
            MissingMarketData: A quote, FX rate or fixing is not available
            SingularJacobian: A Newton step cannot be solved
            CalibrationDidNotConverge: The iteration budget is exhausted
        """
        if isinstance(groups, CurveGroupDefinition):
            groups = [groups]
        provider = self._base_provider(market_data, known)
        ordered = calibration_order(groups, provider.keys())
        prepared = [self._prepare(group, market_data) for group in ordered]

        jacobian_curves: List[BaseCurve] = []
        for item in prepared:
            provider, curves = self._calibrate_group(item, provider, jacobian_curves)
            if item.group.compute_jacobian:
                jacobian_curves.extend(curves)
        logger.info(
            "Calibrated %d curve group(s): %s", len(prepared), ", ".join(p.group.name for p in prepared)
        )
        return provider

    def _base_provider(
        self, market_data: MarketData, known: Optional[ImmutableRatesProvider]
    ) -> ImmutableRatesProvider:
        if known is None:
            return ImmutableRatesProvider.from_market_data(market_data)
        if known.valuation_date != market_data.valuation_date:
            raise ValueError(
                f"Known curves are as of {known.valuation_date}, "
                f"market data as of {market_data.valuation_date}"
            )
        time_series = dict(known.time_series)
        time_series.update(market_data.time_series)
        return ImmutableRatesProvider(
            known.valuation_date,
            known.discount_curves,
            known.index_curves,
            known.fx_matrix.merged_with(market_data.fx_rates),
            time_series,
        )

    def _prepare(self, group: CurveGroupDefinition, market_data: MarketData) -> _PreparedGroup:
        node_count = group.total_node_count
        parameter_count = group.total_parameter_count
        if node_count != parameter_count:
            raise CurveGroupSizeMismatch(group.name, node_count, parameter_count)
        valuation_date = market_data.valuation_date
        trades = [node.trade(valuation_date, market_data) for node in group.nodes()]
        templates = []
        initial = []
        for definition in group.curve_definitions:
            guess = definition.initial_guess(market_data)
            templates.append(definition.curve(valuation_date, guess))
            initial.extend(guess)
        return _PreparedGroup(group, trades, templates, np.array(initial, dtype=float))

    # ------------------------------------------------------------------
    # Newton iteration
    # ------------------------------------------------------------------

    def _tolerances(self, trades: Sequence) -> np.ndarray:
        result = []
        for trade in trades:
            measure = self.measures.measure(trade)
            if measure.unit == MeasureUnit.CURRENCY:
                result.append(self.config.tolerance_pv * measure.scale(trade))
            else:
                result.append(self.config.tolerance_rate)
        return np.array(result)

    def _residuals(self, trades: Sequence, provider: ImmutableRatesProvider) -> np.ndarray:
        return np.array([self.measures.residual(trade, provider) for trade in trades], dtype=float)

    def _jacobian(
        self, trades: Sequence, provider: ImmutableRatesProvider, curves: Sequence[BaseCurve]
    ) -> np.ndarray:
        """d residual / d parameters of the given curves, one row per trade."""
        width = sum(curve.parameter_count for curve in curves)
        matrix = np.zeros((len(trades), width))
        for row, trade in enumerate(trades):
            sensitivities = self.measures.sensitivity(trade, provider)
            matrix[row] = _flatten(sensitivities, curves)
        return matrix

    def _factorize(self, matrix: np.ndarray, group_name: str, iteration: int):
        if not np.all(np.isfinite(matrix)):
            raise SingularJacobian(group_name, iteration, float("nan"))
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", LinAlgWarning)
            lu, piv = lu_factor(matrix, check_finite=False)
        pivots = np.abs(np.diag(lu))
        scale = float(np.max(np.abs(matrix))) if matrix.size else 0.0
        threshold = self.config.pivot_tolerance * np.finfo(float).eps * len(matrix) * scale
        smallest = float(np.min(pivots)) if pivots.size else 0.0
        if scale == 0.0 or smallest <= threshold:
            raise SingularJacobian(group_name, iteration, smallest)
        return lu, piv

    def _calibrate_group(
        self,
        item: _PreparedGroup,
        base: ImmutableRatesProvider,
        jacobian_curves: List[BaseCurve],
    ) -> Tuple[ImmutableRatesProvider, List[BaseCurve]]:
        group = item.group
        logger.info(
            "Calibrating curve group '%s': curves %s, %d instruments",
            group.name, list(group.curve_names), len(item.trades),
        )
        tolerances = self._tolerances(item.trades)
        parameters = item.initial.copy()
        max_iterations = self.config.max_iterations

        iteration = 0
        while True:
            curves = item.curves(parameters)
            trial = item.provider(base, curves)
            residuals = self._residuals(item.trades, trial)
            logger.debug(
                "Group '%s' iteration %d: max |residual| %.3e",
                group.name, iteration, float(np.max(np.abs(residuals))),
            )
            if np.all(np.abs(residuals) < tolerances):
                break
            if iteration >= max_iterations:
                raise CalibrationDidNotConverge(group.name, iteration, residuals)
            jacobian = self._jacobian(item.trades, trial, curves)
            lu_piv = self._factorize(jacobian, group.name, iteration)
            parameters = parameters - lu_solve(lu_piv, residuals)
            iteration += 1

        logger.info("Curve group '%s' converged after %d iteration(s)", group.name, iteration)
        if group.compute_jacobian:
            curves = self._attach_jacobians(item, trial, curves, jacobian_curves, iteration)
            trial = item.provider(base, curves)
        return trial, curves

    # ------------------------------------------------------------------
    # Parameter to quote Jacobian
    # ------------------------------------------------------------------

    def _attach_jacobians(
        self,
        item: _PreparedGroup,
        provider: ImmutableRatesProvider,
        curves: List[BaseCurve],
        earlier: Sequence[BaseCurve],
        iteration: int,
    ) -> List[BaseCurve]:
        """Store d parameters / d quotes on every curve of the group.

        With J the group Jacobian, D the diagonal of residual derivatives to
        the group's own quotes, J_E the residual derivatives to the parameters
        of curves calibrated before and M_E their stored Jacobians:

            dY/dq_group   = -J^{-1} D
            dY/dq_earlier = -J^{-1} J_E M_E
        """
        trades = item.trades
        group_jacobian = self._jacobian(trades, provider, curves)
        lu_piv = self._factorize(group_jacobian, item.group.name, iteration)
        quote_derivatives = np.diag(
            [self.measures.quote_sensitivity(trade, provider) for trade in trades]
        )
        own = -lu_solve(lu_piv, quote_derivatives)

        order = [CurveParameterSize(c.name, len(c.quote_ids)) for c in earlier]
        if earlier:
            earlier_jacobian = self._jacobian(trades, provider, earlier)
            stacked = _stack_jacobians(earlier, order)
            chained = -lu_solve(lu_piv, earlier_jacobian @ stacked)
        else:
            chained = np.zeros((len(own), 0))
        full = np.hstack([chained, own])
        order += [CurveParameterSize(c.name, len(c.quote_ids)) for c in curves]

        result = []
        start = 0
        for curve in curves:
            end = start + curve.parameter_count
            result.append(curve.with_jacobian(JacobianCalibrationMatrix(order, full[start:end])))
            start = end
        return result


def _flatten(sensitivities: CurrencyParameterSensitivities, curves: Sequence[BaseCurve]) -> np.ndarray:
    """Concatenate, curve by curve, the sensitivities summed over currencies."""
    blocks = []
    for curve in curves:
        block = np.zeros(curve.parameter_count)
        for sensitivity in sensitivities:
            if sensitivity.curve_name == curve.name:
                block = block + sensitivity.sensitivity
        blocks.append(block)
    return np.concatenate(blocks) if blocks else np.zeros(0)


def _stack_jacobians(curves: Sequence[BaseCurve], order: Sequence[CurveParameterSize]) -> np.ndarray:
    """Stored Jacobians of the curves, rows stacked and columns aligned to `order`."""
    offsets = {}
    start = 0
    for size in order:
        offsets[size.name] = start
        start += size.size
    rows = []
    for curve in curves:
        block = np.zeros((curve.parameter_count, start))
        for size, columns in curve.jacobian.split_matrix():
            offset = offsets[size.name]
            block[:, offset:offset + size.size] = columns
        rows.append(block)
    return np.vstack(rows)
