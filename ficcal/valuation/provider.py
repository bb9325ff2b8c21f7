"""
Immutable rates provider: the curve bundle pricers read from.

Holds the valuation date, one curve per discounted currency, one curve per
forwarded index, FX spot rates and historic fixings. Deriving a provider with
different curves is cheap (dictionaries of references are copied, curves are
shared), which is how the calibrator builds one trial provider per Newton
iteration.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

import numpy as np

from ficcal.conventions.indices import IborIndex, IborRateObservation, OvernightIndex
from ficcal.curves.base import BaseCurve, CurveKey, ValueType
from ficcal.errors import MissingCurve, MissingMarketData
from ficcal.market.fx import FxMatrix
from ficcal.market.parameter import CurrencyParameterSensitivities
from ficcal.market.quotes import MarketData
from ficcal.market.sensitivity import (
    DiscountFactorSensitivity,
    IborRateSensitivity,
    OvernightRateSensitivity,
    PointSensitivities,
)

logger = logging.getLogger(__name__)

IndexLike = Union[IborIndex, OvernightIndex, str]


def _index_name(index: IndexLike) -> str:
    return index if isinstance(index, str) else index.name


class ImmutableRatesProvider:
    """Valuation date, curves by currency and index, FX rates and fixings."""

    def __init__(
        self,
        valuation_date: date,
        discount_curves: Optional[Mapping[str, BaseCurve]] = None,
        index_curves: Optional[Mapping[IndexLike, BaseCurve]] = None,
        fx_matrix: Optional[FxMatrix] = None,
        time_series: Optional[Mapping[str, Mapping[date, float]]] = None,
    ):
        self.valuation_date = valuation_date
        self._discount_curves: Dict[str, BaseCurve] = {
            ccy.upper(): curve for ccy, curve in (discount_curves or {}).items()
        }
        self._index_curves: Dict[str, BaseCurve] = {
            _index_name(index): curve for index, curve in (index_curves or {}).items()
        }
        self.fx_matrix = fx_matrix or FxMatrix()
        self.time_series: Dict[str, Dict[date, float]] = {
            name: dict(series) for name, series in (time_series or {}).items()
        }

    @classmethod
    def from_market_data(cls, market_data: MarketData) -> "ImmutableRatesProvider":
        """Empty provider carrying the FX rates and fixings of the market data."""
        return cls(
            market_data.valuation_date,
            fx_matrix=market_data.fx_rates,
            time_series=market_data.time_series,
        )

    # ------------------------------------------------------------------
    # Curves
    # ------------------------------------------------------------------

    @property
    def discount_curves(self) -> Dict[str, BaseCurve]:
        return dict(self._discount_curves)

    @property
    def index_curves(self) -> Dict[str, BaseCurve]:
        return dict(self._index_curves)

    @property
    def curves(self) -> Dict[str, BaseCurve]:
        """Every distinct curve, keyed by curve name."""
        found: Dict[str, BaseCurve] = {}
        for curve in list(self._discount_curves.values()) + list(self._index_curves.values()):
            found.setdefault(curve.name, curve)
        return found

    def keys(self) -> Set[CurveKey]:
        return {CurveKey.discount(c) for c in self._discount_curves} | {
            CurveKey.index(i) for i in self._index_curves
        }

    def find_curve(self, name: str) -> Optional[BaseCurve]:
        return self.curves.get(name)

    def curve(self, name: str) -> BaseCurve:
        found = self.find_curve(name)
        if found is None:
            raise MissingCurve(f"curve {name}", list(self.curves))
        return found

    def discount_curve(self, currency: str) -> BaseCurve:
        if currency not in self._discount_curves:
            raise MissingCurve(f"discounting {currency}", list(self._discount_curves))
        return self._discount_curves[currency]

    def index_curve(self, index: IndexLike) -> BaseCurve:
        name = _index_name(index)
        if name not in self._index_curves:
            raise MissingCurve(f"forwarding {name}", list(self._index_curves))
        return self._index_curves[name]

    def with_curves(
        self,
        discount_curves: Optional[Mapping[str, BaseCurve]] = None,
        index_curves: Optional[Mapping[IndexLike, BaseCurve]] = None,
    ) -> "ImmutableRatesProvider":
        """New provider with curves added or replaced."""
        discount = dict(self._discount_curves)
        discount.update({c.upper(): curve for c, curve in (discount_curves or {}).items()})
        index = dict(self._index_curves)
        index.update({_index_name(i): curve for i, curve in (index_curves or {}).items()})
        return ImmutableRatesProvider(
            self.valuation_date, discount, index, self.fx_matrix, self.time_series
        )

    def with_curve_replaced(self, curve: BaseCurve) -> "ImmutableRatesProvider":
        """New provider where every role held by a curve of the same name uses `curve`."""
        discount = {c: curve if v.name == curve.name else v for c, v in self._discount_curves.items()}
        index = {i: curve if v.name == curve.name else v for i, v in self._index_curves.items()}
        if discount == self._discount_curves and index == self._index_curves:
            raise MissingCurve(f"curve {curve.name}", list(self.curves))
        return ImmutableRatesProvider(self.valuation_date, discount, index, self.fx_matrix, self.time_series)

    def with_curve_values(self, name: str, parameters) -> "ImmutableRatesProvider":
        """New provider where the named curve takes new parameter values."""
        return self.with_curve_replaced(self.curve(name).with_parameters(parameters))

    # ------------------------------------------------------------------
    # Market observables
    # ------------------------------------------------------------------

    def _curve_discount_factor(self, curve: BaseCurve, target: date) -> float:
        if target == self.valuation_date:
            return 1.0
        t = curve.year_fraction(self.valuation_date, target)
        if curve.value_type == ValueType.DISCOUNT_FACTOR:
            return curve.value(t)
        return math.exp(-curve.value(t) * t)

    def _curve_discount_factor_sensitivity(self, curve: BaseCurve, target: date) -> np.ndarray:
        """Derivative of the curve's discount factor at a date with respect to its parameters."""
        if target == self.valuation_date:
            return np.zeros(curve.parameter_count)
        t = curve.year_fraction(self.valuation_date, target)
        if curve.value_type == ValueType.DISCOUNT_FACTOR:
            return curve.parameter_sensitivity(t)
        df = math.exp(-curve.value(t) * t)
        return -t * df * curve.parameter_sensitivity(t)

    def discount_factor(self, currency: str, target: date) -> float:
        """Discount factor of the currency; exactly 1 on the valuation date."""
        return self._curve_discount_factor(self.discount_curve(currency), target)

    def fx_rate(self, base: str, counter: str) -> float:
        try:
            return self.fx_matrix.fx_rate(base, counter)
        except ValueError as exc:
            raise MissingMarketData(f"{base}/{counter}", "FX rate") from exc

    def _fixing(self, index_name: str, fixing_date: date) -> Optional[float]:
        return self.time_series.get(index_name, {}).get(fixing_date)

    def is_fixed(self, observation: IborRateObservation) -> bool:
        """Whether the observation uses a published fixing instead of the forward curve."""
        if observation.fixing_date < self.valuation_date:
            return True
        if observation.fixing_date == self.valuation_date:
            return self._fixing(observation.index.name, observation.fixing_date) is not None
        return False

    def ibor_rate(self, observation: IborRateObservation) -> float:
        index = observation.index
        if self.is_fixed(observation):
            fixing = self._fixing(index.name, observation.fixing_date)
            if fixing is None:
                raise MissingMarketData(f"{index.name} fixing on {observation.fixing_date}")
            return fixing
        curve = self.index_curve(index)
        return self._simple_forward(
            curve, observation.effective_date, observation.maturity_date, observation.year_fraction
        )

    def overnight_rate(
        self, index: OvernightIndex, start_date: date, end_date: date, year_fraction: float
    ) -> float:
        """Compounded overnight rate over [start_date, end_date).

        Days before the valuation date compound the published fixings of the
        index, as does the valuation date itself once its fixing is present.
        The remaining days are forwarded on the index curve and chained onto
        the historic accrual.

        Raises:
            MissingMarketData: If a fixing before the valuation date is not
                in the time series
        """
        factor, forward_start = self._overnight_fixed_accrual(index, start_date, end_date)
        if forward_start >= end_date:
            return (factor - 1.0) / year_fraction
        curve = self.index_curve(index)
        df_start = self._curve_discount_factor(curve, forward_start)
        df_end = self._curve_discount_factor(curve, end_date)
        return (factor * df_start / df_end - 1.0) / year_fraction

    def _overnight_fixed_accrual(
        self, index: OvernightIndex, start_date: date, end_date: date
    ) -> Tuple[float, date]:
        """Growth factor of the published fixings and the first date left to forward."""
        factor = 1.0
        current = start_date
        while current < end_date:
            fixing = self._fixing(index.name, current)
            if current > self.valuation_date or (current == self.valuation_date and fixing is None):
                break
            if fixing is None:
                raise MissingMarketData(f"{index.name} fixing on {current}")
            following = min(index.calendar.add_business_days(current, 1), end_date)
            factor *= 1.0 + fixing * index.day_count.year_fraction(current, following)
            current = following
        if start_date < current:
            logger.debug("%s compounded fixings from %s to %s: %.10f", index.name, start_date, current, factor)
        return factor, current

    def _simple_forward(self, curve: BaseCurve, start: date, end: date, year_fraction: float) -> float:
        df_start = self._curve_discount_factor(curve, start)
        df_end = self._curve_discount_factor(curve, end)
        return (df_start / df_end - 1.0) / year_fraction

    def _simple_forward_sensitivity(
        self, curve: BaseCurve, start: date, end: date, year_fraction: float
    ) -> np.ndarray:
        df_start = self._curve_discount_factor(curve, start)
        df_end = self._curve_discount_factor(curve, end)
        d_start = self._curve_discount_factor_sensitivity(curve, start)
        d_end = self._curve_discount_factor_sensitivity(curve, end)
        return (d_start / df_end - df_start * d_end / (df_end * df_end)) / year_fraction

    # ------------------------------------------------------------------
    # Point sensitivity builders
    # ------------------------------------------------------------------

    def discount_factor_point_sensitivity(
        self, currency: str, target: date, amount: float, amount_currency: Optional[str] = None
    ) -> List[DiscountFactorSensitivity]:
        if target == self.valuation_date or amount == 0.0:
            return []
        return [DiscountFactorSensitivity(currency, target, amount_currency or currency, amount)]

    def ibor_rate_point_sensitivity(
        self, observation: IborRateObservation, amount: float, currency: str
    ) -> List[IborRateSensitivity]:
        if self.is_fixed(observation) or amount == 0.0:
            return []
        return [IborRateSensitivity(observation, currency, amount)]

    def overnight_rate_point_sensitivity(
        self,
        index: OvernightIndex,
        start_date: date,
        end_date: date,
        year_fraction: float,
        amount: float,
        currency: str,
    ) -> List[OvernightRateSensitivity]:
        """Sensitivity to the forwarded part of the period only, scaled by the fixed accrual."""
        if amount == 0.0:
            return []
        factor, forward_start = self._overnight_fixed_accrual(index, start_date, end_date)
        if forward_start >= end_date:
            return []
        forward_fraction = index.day_count.year_fraction(forward_start, end_date)
        return [OvernightRateSensitivity(
            index, forward_start, end_date, forward_fraction, currency,
            amount * factor * forward_fraction / year_fraction,
        )]

    # ------------------------------------------------------------------
    # Parameter sensitivity
    # ------------------------------------------------------------------

    def parameter_sensitivity(
        self, sensitivities: Union[PointSensitivities, Iterable]
    ) -> CurrencyParameterSensitivities:
        """Chain point sensitivities onto the parameters of the curves that produce them.

        Raises:
            MissingCurve: If a sensitivity refers to a currency or index
                without a curve in this provider
        """
        accumulated: Dict[tuple, np.ndarray] = {}
        curves: Dict[str, BaseCurve] = {}

        def add(curve: BaseCurve, currency: str, values: np.ndarray) -> None:
            key = (curve.name, currency)
            curves[curve.name] = curve
            if key in accumulated:
                accumulated[key] = accumulated[key] + values
            else:
                accumulated[key] = values

        for point in sensitivities:
            if isinstance(point, DiscountFactorSensitivity):
                curve = self.discount_curve(point.curve_currency)
                add(curve, point.currency,
                    point.sensitivity * self._curve_discount_factor_sensitivity(curve, point.date))
            elif isinstance(point, IborRateSensitivity):
                obs = point.observation
                curve = self.index_curve(obs.index)
                add(curve, point.currency, point.sensitivity * self._simple_forward_sensitivity(
                    curve, obs.effective_date, obs.maturity_date, obs.year_fraction))
            elif isinstance(point, OvernightRateSensitivity):
                curve = self.index_curve(point.index)
                add(curve, point.currency, point.sensitivity * self._simple_forward_sensitivity(
                    curve, point.start_date, point.end_date, point.year_fraction))
            else:
                raise TypeError(f"Unsupported point sensitivity: {type(point).__name__}")

        return CurrencyParameterSensitivities(
            curves[name].create_parameter_sensitivity(currency, values)
            for (name, currency), values in accumulated.items()
        )

    def __repr__(self) -> str:
        return (
            f"ImmutableRatesProvider({self.valuation_date}, "
            f"discount={sorted(self._discount_curves)}, index={sorted(self._index_curves)})"
        )
