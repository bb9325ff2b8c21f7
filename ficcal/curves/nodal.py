"""
Curve defined by nodes and an interpolation scheme.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

from ficcal.conventions.daycount import DayCountConvention
from ficcal.errors import InvalidCurveDefinition
from ficcal.interpolation import (
    CurveExtrapolator,
    CurveInterpolator,
    create_extrapolator,
    create_interpolator,
)

from .base import BaseCurve, JacobianCalibrationMatrix, ValueType


class InterpolatedNodalCurve(BaseCurve):
    """Curve whose parameters are the y-values at fixed x nodes.

    ``value(x_i) == y_i`` at every node; between nodes the interpolator
    applies and outside them the extrapolator of the corresponding side.
    """

    def __init__(
        self,
        name: str,
        x_values: Sequence[float],
        y_values: Sequence[float],
        interpolator: Union[str, CurveInterpolator] = "LINEAR",
        extrapolator_left: Union[str, CurveExtrapolator] = "FLAT",
        extrapolator_right: Union[str, CurveExtrapolator] = "FLAT",
        value_type: ValueType = ValueType.ZERO_RATE,
        day_count: Union[str, DayCountConvention] = "ACT/365F",
        parameter_labels: Sequence[str] = (),
        quote_ids: Sequence[str] = (),
        jacobian: Optional[JacobianCalibrationMatrix] = None,
    ):
        super().__init__(name, value_type, day_count, parameter_labels, quote_ids, jacobian)
        self.interpolator = create_interpolator(interpolator)
        self.extrapolator_left = create_extrapolator(extrapolator_left)
        self.extrapolator_right = create_extrapolator(extrapolator_right)
        x = np.array(x_values, dtype=float)
        y = np.array(y_values, dtype=float)
        try:
            self._bound = self.interpolator.bind(x, y, self.extrapolator_left, self.extrapolator_right)
        except InvalidCurveDefinition as exc:
            raise InvalidCurveDefinition(str(exc), name) from exc
        if self.parameter_labels and len(self.parameter_labels) != len(y):
            raise InvalidCurveDefinition(
                f"{len(self.parameter_labels)} labels for {len(y)} nodes", name
            )
        x.setflags(write=False)
        y.setflags(write=False)
        self.x_values = x
        self.y_values = y

    @property
    def parameters(self) -> np.ndarray:
        return self.y_values

    def value(self, x: float) -> float:
        return self._bound.value(x)

    def first_derivative(self, x: float) -> float:
        return self._bound.first_derivative(x)

    def parameter_sensitivity(self, x: float) -> np.ndarray:
        return self._bound.parameter_sensitivity(x)

    def with_parameters(self, parameters) -> "InterpolatedNodalCurve":
        return self.with_y_values(parameters)

    def with_y_values(self, y_values) -> "InterpolatedNodalCurve":
        """Same nodes and metadata with new y-values; any Jacobian is dropped."""
        y = np.asarray(y_values, dtype=float)
        if len(y) != len(self.x_values):
            raise InvalidCurveDefinition(
                f"Expected {len(self.x_values)} y-values, got {len(y)}", self.name
            )
        return InterpolatedNodalCurve(
            self.name,
            self.x_values,
            y,
            self.interpolator,
            self.extrapolator_left,
            self.extrapolator_right,
            self.value_type,
            self.day_count,
            self.parameter_labels,
            self.quote_ids,
        )

    def with_y_value(self, index: int, value: float) -> "InterpolatedNodalCurve":
        y = self.y_values.copy()
        y[index] = value
        return self.with_y_values(y)

    def __str__(self) -> str:
        lines = [f"{self.name} ({self.value_type.value}, {self.interpolator.name})"]
        labels = self.parameter_labels or [f"{x:.4f}" for x in self.x_values]
        for label, x, y in zip(labels, self.x_values, self.y_values):
            lines.append(f"  {label:>8}  x={x:9.5f}  y={y:.10f}")
        return "\n".join(lines)
