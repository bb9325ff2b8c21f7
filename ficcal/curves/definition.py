"""
Curve definitions: the configuration of a curve before calibration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ficcal.conventions.daycount import ACT_365F, DayCountConvention, get_day_count_convention
from ficcal.errors import InvalidCurveDefinition
from ficcal.interpolation import (
    CurveExtrapolator,
    CurveInterpolator,
    create_extrapolator,
    create_interpolator,
)
from ficcal.market.quotes import MarketData

from .base import BaseCurve, ValueType
from .functional import ParameterizedFunctionalCurve
from .nodal import InterpolatedNodalCurve
from .nodes import CurveNode


@dataclass(frozen=True)
class InterpolatedNodalCurveDefinition:
    """Nodal curve configuration: one parameter per node.

    Args:
        name: Curve name
        nodes: Calibration nodes, ordered by date
        interpolator: Interpolation scheme or its name
        extrapolator_left: Extrapolation before the first node
        extrapolator_right: Extrapolation after the last node
        value_type: Whether the nodes hold zero rates or discount factors
        day_count: Day count turning node dates into x-values
        seed: Starting value for every node, overriding the node guesses
    """

    name: str
    nodes: Tuple[CurveNode, ...]
    interpolator: Union[str, CurveInterpolator] = "LINEAR"
    extrapolator_left: Union[str, CurveExtrapolator] = "FLAT"
    extrapolator_right: Union[str, CurveExtrapolator] = "FLAT"
    value_type: ValueType = ValueType.ZERO_RATE
    day_count: Union[str, DayCountConvention] = field(default=ACT_365F)
    seed: Optional[float] = None

    def __post_init__(self):
        if not self.name:
            raise InvalidCurveDefinition("Curve definition needs a name")
        nodes = tuple(self.nodes)
        if not nodes:
            raise InvalidCurveDefinition("Curve definition needs at least one node", self.name)
        object.__setattr__(self, "nodes", nodes)
        try:
            object.__setattr__(self, "interpolator", create_interpolator(self.interpolator))
            object.__setattr__(self, "extrapolator_left", create_extrapolator(self.extrapolator_left))
            object.__setattr__(self, "extrapolator_right", create_extrapolator(self.extrapolator_right))
        except ValueError as exc:
            raise InvalidCurveDefinition(str(exc), self.name) from exc
        object.__setattr__(self, "day_count", get_day_count_convention(self.day_count))

    @property
    def parameter_count(self) -> int:
        return len(self.nodes)

    @property
    def quote_ids(self) -> Tuple[str, ...]:
        return tuple(node.quote_id for node in self.nodes)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(node.label for node in self.nodes)

    def node_dates(self, valuation_date: date) -> List[date]:
        return [node.date(valuation_date) for node in self.nodes]

    def x_values(self, valuation_date: date) -> np.ndarray:
        dates = self.node_dates(valuation_date)
        x = np.array([self.day_count.relative_year_fraction(valuation_date, d) for d in dates])
        if np.any(np.diff(x) <= 0):
            order = ", ".join(f"{label}={d}" for label, d in zip(self.labels, dates))
            raise InvalidCurveDefinition(f"Node dates must be strictly increasing: {order}", self.name)
        return x

    def initial_guess(self, market_data: MarketData) -> List[float]:
        if self.seed is not None:
            return [self.seed] * len(self.nodes)
        return [node.initial_guess(market_data, self.value_type) for node in self.nodes]

    def curve(self, valuation_date: date, parameters: Sequence[float]) -> BaseCurve:
        return InterpolatedNodalCurve(
            self.name,
            self.x_values(valuation_date),
            parameters,
            self.interpolator,
            self.extrapolator_left,
            self.extrapolator_right,
            self.value_type,
            self.day_count,
            parameter_labels=self.labels,
            quote_ids=self.quote_ids,
        )


@dataclass(frozen=True)
class ParameterizedFunctionalCurveDefinition:
    """Functional curve configuration with its own parameter vector.

    Calibration needs as many nodes as parameters; a mismatch is reported
    when the curve group is prepared.
    """

    name: str
    nodes: Tuple[CurveNode, ...]
    initial_parameters: Tuple[float, ...]
    value_function: Callable
    derivative_function: Callable
    sensitivity_function: Callable
    value_type: ValueType = ValueType.ZERO_RATE
    day_count: Union[str, DayCountConvention] = field(default=ACT_365F)
    parameter_labels: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.name:
            raise InvalidCurveDefinition("Curve definition needs a name")
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "initial_parameters", tuple(float(p) for p in self.initial_parameters))
        object.__setattr__(self, "parameter_labels", tuple(self.parameter_labels))
        object.__setattr__(self, "day_count", get_day_count_convention(self.day_count))
        if not self.initial_parameters:
            raise InvalidCurveDefinition("Functional curve needs at least one parameter", self.name)

    @property
    def parameter_count(self) -> int:
        return len(self.initial_parameters)

    @property
    def quote_ids(self) -> Tuple[str, ...]:
        return tuple(node.quote_id for node in self.nodes)

    @property
    def labels(self) -> Tuple[str, ...]:
        if self.parameter_labels:
            return self.parameter_labels
        return tuple(f"p{i}" for i in range(self.parameter_count))

    def initial_guess(self, market_data: MarketData) -> List[float]:
        return list(self.initial_parameters)

    def curve(self, valuation_date: date, parameters: Sequence[float]) -> BaseCurve:
        return ParameterizedFunctionalCurve(
            self.name,
            parameters,
            self.value_function,
            self.derivative_function,
            self.sensitivity_function,
            self.value_type,
            self.day_count,
            parameter_labels=self.labels,
            quote_ids=self.quote_ids,
        )


CurveDefinition = Union[InterpolatedNodalCurveDefinition, ParameterizedFunctionalCurveDefinition]
