"""
Curve given by a parametric function.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence, Union

import numpy as np

from ficcal.conventions.daycount import DayCountConvention
from ficcal.errors import InvalidCurveDefinition

from .base import BaseCurve, JacobianCalibrationMatrix, ValueType

CurveFunction = Callable[[np.ndarray, float], float]
SensitivityFunction = Callable[[np.ndarray, float], np.ndarray]


class ParameterizedFunctionalCurve(BaseCurve):
    """Curve y = f(parameters, x) with user supplied derivatives.

    The number of parameters is independent of the number of calibration
    nodes, so a group built from these curves must be checked for squareness.
    """

    def __init__(
        self,
        name: str,
        parameters: Sequence[float],
        value_function: CurveFunction,
        derivative_function: CurveFunction,
        sensitivity_function: SensitivityFunction,
        value_type: ValueType = ValueType.ZERO_RATE,
        day_count: Union[str, DayCountConvention] = "ACT/365F",
        parameter_labels: Sequence[str] = (),
        quote_ids: Sequence[str] = (),
        jacobian: Optional[JacobianCalibrationMatrix] = None,
    ):
        super().__init__(name, value_type, day_count, parameter_labels, quote_ids, jacobian)
        values = np.array(parameters, dtype=float)
        if values.ndim != 1 or len(values) == 0:
            raise InvalidCurveDefinition("Parameters must be a non-empty vector", name)
        if not np.all(np.isfinite(values)):
            raise InvalidCurveDefinition("Parameters must be finite", name)
        values.setflags(write=False)
        self._parameters = values
        self.value_function = value_function
        self.derivative_function = derivative_function
        self.sensitivity_function = sensitivity_function

    @property
    def parameters(self) -> np.ndarray:
        return self._parameters

    def value(self, x: float) -> float:
        return float(self.value_function(self._parameters, x))

    def first_derivative(self, x: float) -> float:
        return float(self.derivative_function(self._parameters, x))

    def parameter_sensitivity(self, x: float) -> np.ndarray:
        sensitivity = np.asarray(self.sensitivity_function(self._parameters, x), dtype=float)
        if sensitivity.shape != self._parameters.shape:
            raise InvalidCurveDefinition(
                f"Sensitivity function returned shape {sensitivity.shape}, "
                f"expected {self._parameters.shape}",
                self.name,
            )
        return sensitivity

    def with_parameters(self, parameters) -> "ParameterizedFunctionalCurve":
        return ParameterizedFunctionalCurve(
            self.name,
            parameters,
            self.value_function,
            self.derivative_function,
            self.sensitivity_function,
            self.value_type,
            self.day_count,
            self.parameter_labels,
            self.quote_ids,
        )
