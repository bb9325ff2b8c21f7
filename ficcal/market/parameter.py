"""
Sensitivities to curve parameters or market quotes.

Both are represented the same way: one array per (curve name, currency), with
labels naming each entry (curve node labels for parameter sensitivity, quote
identifiers for market quote sensitivity).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd


@dataclass(frozen=True, eq=False)
class CurrencyParameterSensitivity:
    """Sensitivity of a value to each parameter of one curve, in one currency."""

    curve_name: str
    currency: str
    sensitivity: np.ndarray
    parameter_labels: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        values = np.array(self.sensitivity, dtype=float)
        if values.ndim != 1:
            raise ValueError("Sensitivity must be a one-dimensional array")
        values.setflags(write=False)
        object.__setattr__(self, "sensitivity", values)
        labels = tuple(self.parameter_labels)
        if labels and len(labels) != len(values):
            raise ValueError(
                f"Sensitivity for {self.curve_name} has {len(values)} values "
                f"but {len(labels)} labels"
            )
        object.__setattr__(self, "parameter_labels", labels)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.curve_name, self.currency)

    @property
    def parameter_count(self) -> int:
        return len(self.sensitivity)

    def multiplied_by(self, factor: float) -> "CurrencyParameterSensitivity":
        return CurrencyParameterSensitivity(
            self.curve_name, self.currency, self.sensitivity * factor, self.parameter_labels
        )

    def plus(self, other: Union["CurrencyParameterSensitivity", np.ndarray]) -> "CurrencyParameterSensitivity":
        values = other.sensitivity if isinstance(other, CurrencyParameterSensitivity) else other
        if len(values) != len(self.sensitivity):
            raise ValueError(
                f"Cannot combine sensitivities of length {len(self.sensitivity)} "
                f"and {len(values)} for curve {self.curve_name}"
            )
        return CurrencyParameterSensitivity(
            self.curve_name, self.currency, self.sensitivity + values, self.parameter_labels
        )

    def converted_to(self, currency: str, fx) -> "CurrencyParameterSensitivity":
        if currency == self.currency:
            return self
        rate = fx.fx_rate(self.currency, currency)
        return CurrencyParameterSensitivity(
            self.curve_name, currency, self.sensitivity * rate, self.parameter_labels
        )

    def total(self) -> float:
        return float(np.sum(self.sensitivity))

    def __repr__(self) -> str:
        return (
            f"CurrencyParameterSensitivity({self.curve_name!r}, {self.currency!r}, "
            f"{np.array2string(self.sensitivity, precision=6)})"
        )


class CurrencyParameterSensitivities:
    """Collection of sensitivities, at most one per (curve name, currency)."""

    def __init__(self, sensitivities: Iterable[CurrencyParameterSensitivity] = ()):
        merged: Dict[Tuple[str, str], CurrencyParameterSensitivity] = {}
        for sensitivity in sensitivities:
            existing = merged.get(sensitivity.key)
            merged[sensitivity.key] = sensitivity if existing is None else existing.plus(sensitivity)
        self._sensitivities = merged

    @classmethod
    def empty(cls) -> "CurrencyParameterSensitivities":
        return cls()

    @classmethod
    def of(cls, *sensitivities: CurrencyParameterSensitivity) -> "CurrencyParameterSensitivities":
        return cls(sensitivities)

    @property
    def sensitivities(self) -> Tuple[CurrencyParameterSensitivity, ...]:
        return tuple(self._sensitivities.values())

    def size(self) -> int:
        return len(self._sensitivities)

    def get_sensitivity(self, curve_name: str, currency: str) -> CurrencyParameterSensitivity:
        key = (curve_name, currency)
        if key not in self._sensitivities:
            raise ValueError(
                f"No sensitivity for curve {curve_name} in {currency}. "
                f"Available: {sorted(self._sensitivities)}"
            )
        return self._sensitivities[key]

    def find_sensitivity(self, curve_name: str, currency: str) -> Optional[CurrencyParameterSensitivity]:
        return self._sensitivities.get((curve_name, currency))

    def combined_with(
        self,
        other: Union["CurrencyParameterSensitivities", CurrencyParameterSensitivity],
    ) -> "CurrencyParameterSensitivities":
        """Merge, adding arrays that share a curve name and currency."""
        others = [other] if isinstance(other, CurrencyParameterSensitivity) else other.sensitivities
        return CurrencyParameterSensitivities(list(self.sensitivities) + list(others))

    def multiplied_by(self, factor: float) -> "CurrencyParameterSensitivities":
        return CurrencyParameterSensitivities(s.multiplied_by(factor) for s in self.sensitivities)

    def converted_to(self, currency: str, fx) -> "CurrencyParameterSensitivities":
        return CurrencyParameterSensitivities(s.converted_to(currency, fx) for s in self.sensitivities)

    def total(self, currency: Optional[str] = None, fx=None) -> float:
        """Sum of all entries, converted to one currency when given."""
        total = 0.0
        for s in self.sensitivities:
            rate = 1.0 if currency is None or fx is None else fx.fx_rate(s.currency, currency)
            total += s.total() * rate
        return total

    def total_by_curve(self, fx=None, currency: Optional[str] = None) -> Dict[str, np.ndarray]:
        """Arrays summed across currencies, keyed by curve name."""
        totals: Dict[str, np.ndarray] = {}
        for s in self.sensitivities:
            rate = 1.0 if currency is None or fx is None else fx.fx_rate(s.currency, currency)
            values = s.sensitivity * rate
            totals[s.curve_name] = values if s.curve_name not in totals else totals[s.curve_name] + values
        return totals

    def equal_with_tolerance(self, other: "CurrencyParameterSensitivities", tolerance: float) -> bool:
        keys = set(self._sensitivities) | set(other._sensitivities)
        for key in keys:
            mine = self._sensitivities.get(key)
            theirs = other._sensitivities.get(key)
            if mine is None or theirs is None:
                present = mine if theirs is None else theirs
                if np.max(np.abs(present.sensitivity), initial=0.0) > tolerance:
                    return False
                continue
            if len(mine.sensitivity) != len(theirs.sensitivity):
                return False
            if np.max(np.abs(mine.sensitivity - theirs.sensitivity), initial=0.0) > tolerance:
                return False
        return True

    def to_dataframe(self) -> pd.DataFrame:
        """One row per parameter: curve, currency, label, sensitivity."""
        rows: List[dict] = []
        for s in self.sensitivities:
            labels: Sequence[str] = s.parameter_labels or [str(i) for i in range(s.parameter_count)]
            for label, value in zip(labels, s.sensitivity):
                rows.append(
                    {"curve": s.curve_name, "currency": s.currency, "label": label, "sensitivity": value}
                )
        return pd.DataFrame(rows, columns=["curve", "currency", "label", "sensitivity"])

    def __iter__(self) -> Iterator[CurrencyParameterSensitivity]:
        return iter(self.sensitivities)

    def __len__(self) -> int:
        return len(self._sensitivities)

    def __repr__(self) -> str:
        return f"CurrencyParameterSensitivities({list(self._sensitivities)})"


@dataclass(frozen=True, eq=False)
class CrossGammaParameterSensitivity:
    """Second order sensitivity to pairs of parameters of one curve."""

    curve_name: str
    currency: str
    matrix: np.ndarray
    parameter_labels: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        matrix = np.array(self.matrix, dtype=float)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError("Cross gamma must be a square matrix")
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)
        object.__setattr__(self, "parameter_labels", tuple(self.parameter_labels))

    def diagonal(self) -> CurrencyParameterSensitivity:
        return CurrencyParameterSensitivity(
            self.curve_name, self.currency, np.diag(self.matrix).copy(), self.parameter_labels
        )
