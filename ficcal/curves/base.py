"""
Base curve classes and protocols.

A curve maps a year fraction x to a value y (a zero rate or a discount
factor, per its value type) and reports the sensitivity of that value to each
of its parameters. Calibrated curves also carry the Jacobian of their
parameters with respect to the market quotes they were calibrated to.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, NamedTuple, Optional, Protocol, Sequence, Tuple, Union

import numpy as np

from ficcal.conventions.daycount import DayCountConvention, get_day_count_convention
from ficcal.market.parameter import CurrencyParameterSensitivity


class ValueType(Enum):
    """What the y-values of a curve represent."""

    ZERO_RATE = "ZERO_RATE"
    DISCOUNT_FACTOR = "DISCOUNT_FACTOR"


@dataclass(frozen=True)
class CurveParameterSize:
    """Name of a curve and its number of parameters."""

    name: str
    size: int


class JacobianCalibrationMatrix:
    """Sensitivity of a curve's parameters to market quotes.

    Rows are the curve's parameters; columns are the quotes of every curve
    listed in ``order``, in that order. Curves calibrated in earlier groups
    appear in the order when this curve depends on them.
    """

    def __init__(self, order: Sequence[CurveParameterSize], matrix: np.ndarray):
        self.order: Tuple[CurveParameterSize, ...] = tuple(order)
        matrix = np.array(matrix, dtype=float)
        total = sum(entry.size for entry in self.order)
        if matrix.ndim != 2 or matrix.shape[1] != total:
            raise ValueError(
                f"Jacobian has shape {matrix.shape}, expected {total} columns for order "
                f"{[entry.name for entry in self.order]}"
            )
        matrix.setflags(write=False)
        self.matrix = matrix

    @property
    def total_parameter_count(self) -> int:
        return self.matrix.shape[1]

    def split(self, row: np.ndarray) -> List[Tuple[CurveParameterSize, np.ndarray]]:
        """Cut a vector over all columns into one block per curve in the order."""
        blocks = []
        start = 0
        for entry in self.order:
            blocks.append((entry, np.asarray(row[start:start + entry.size])))
            start += entry.size
        return blocks

    def split_matrix(self) -> List[Tuple[CurveParameterSize, np.ndarray]]:
        """Column blocks of the matrix, one per curve in the order."""
        blocks = []
        start = 0
        for entry in self.order:
            blocks.append((entry, self.matrix[:, start:start + entry.size]))
            start += entry.size
        return blocks

    def __repr__(self) -> str:
        names = [f"{entry.name}({entry.size})" for entry in self.order]
        return f"JacobianCalibrationMatrix({names}, shape={self.matrix.shape})"


class Curve(Protocol):
    """Protocol defining the interface for all calibratable curves."""

    name: str
    value_type: ValueType
    day_count: DayCountConvention

    @property
    def parameters(self) -> np.ndarray: ...

    def value(self, x: float) -> float: ...

    def first_derivative(self, x: float) -> float: ...

    def parameter_sensitivity(self, x: float) -> np.ndarray: ...

    def with_parameters(self, parameters) -> "Curve": ...


class BaseCurve(ABC):
    """Shared metadata and helpers for curve implementations."""

    def __init__(
        self,
        name: str,
        value_type: ValueType = ValueType.ZERO_RATE,
        day_count: Union[str, DayCountConvention] = "ACT/365F",
        parameter_labels: Sequence[str] = (),
        quote_ids: Sequence[str] = (),
        jacobian: Optional[JacobianCalibrationMatrix] = None,
    ):
        """
        Initialize curve metadata.

        Args:
            name: Unique curve name, used to key sensitivities
            value_type: Meaning of the curve values
            day_count: Day count converting dates to curve x-values
            parameter_labels: One label per parameter (node tenors by default)
            quote_ids: Market quote identifiers of the calibration nodes
            jacobian: Parameter-to-quote Jacobian set by calibration
        """
        if not name:
            raise ValueError("Curve name must not be empty")
        self.name = name
        self.value_type = value_type
        self.day_count = get_day_count_convention(day_count)
        self.parameter_labels: Tuple[str, ...] = tuple(parameter_labels)
        self.quote_ids: Tuple[str, ...] = tuple(quote_ids)
        self.jacobian = jacobian

    @property
    @abstractmethod
    def parameters(self) -> np.ndarray:
        pass

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    @abstractmethod
    def value(self, x: float) -> float:
        pass

    @abstractmethod
    def first_derivative(self, x: float) -> float:
        pass

    @abstractmethod
    def parameter_sensitivity(self, x: float) -> np.ndarray:
        pass

    @abstractmethod
    def with_parameters(self, parameters) -> "BaseCurve":
        pass

    def with_jacobian(self, jacobian: Optional[JacobianCalibrationMatrix]) -> "BaseCurve":
        curve = copy.copy(self)
        curve.jacobian = jacobian
        return curve

    def year_fraction(self, valuation_date: date, target: date) -> float:
        """Curve x-value of a date."""
        return self.day_count.relative_year_fraction(valuation_date, target)

    def create_parameter_sensitivity(self, currency: str, values) -> CurrencyParameterSensitivity:
        labels = self.parameter_labels if len(self.parameter_labels) == self.parameter_count else ()
        return CurrencyParameterSensitivity(self.name, currency, values, labels)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.value_type.value}, {self.parameter_count} parameters)"


class CurveKey(NamedTuple):
    """Role a curve plays in a rates provider: discounting a currency or forwarding an index."""

    kind: str
    name: str

    @classmethod
    def discount(cls, currency: str) -> "CurveKey":
        return cls(DISCOUNT, currency)

    @classmethod
    def index(cls, index) -> "CurveKey":
        return cls(INDEX, getattr(index, "name", index))

    def __str__(self) -> str:
        return f"{self.kind.lower()} {self.name}"


DISCOUNT = "DISCOUNT"
INDEX = "INDEX"
