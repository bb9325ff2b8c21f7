"""
Point sensitivities produced by pricers.

A point sensitivity is the derivative of a present value with respect to one
market observable: a discount factor at a date, an Ibor fixing, or a
compounded overnight rate over a period. Pricers accumulate them into a list
and freeze the list as ``PointSensitivities``; the rates provider chains them
onto curve parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, Iterable, Iterator, Tuple, Union

from ficcal.conventions.indices import IborRateObservation, OvernightIndex


@dataclass(frozen=True)
class DiscountFactorSensitivity:
    """d(PV)/d(discount factor of curve_currency at date), expressed in currency."""

    curve_currency: str
    date: date
    currency: str
    sensitivity: float

    def key(self):
        return ("DF", self.curve_currency, self.date, self.currency)


@dataclass(frozen=True)
class IborRateSensitivity:
    """d(PV)/d(forward rate of the observation), expressed in currency."""

    observation: IborRateObservation
    currency: str
    sensitivity: float

    def key(self):
        return ("IBOR", self.observation, self.currency)


@dataclass(frozen=True)
class OvernightRateSensitivity:
    """d(PV)/d(compounded overnight rate over [start_date, end_date))."""

    index: OvernightIndex
    start_date: date
    end_date: date
    year_fraction: float
    currency: str
    sensitivity: float

    def key(self):
        return ("ON", self.index, self.start_date, self.end_date, self.currency)


PointSensitivity = Union[DiscountFactorSensitivity, IborRateSensitivity, OvernightRateSensitivity]


class PointSensitivities:
    """Immutable collection of point sensitivities."""

    def __init__(self, sensitivities: Iterable[PointSensitivity] = ()):
        self._sensitivities: Tuple[PointSensitivity, ...] = tuple(sensitivities)

    @classmethod
    def empty(cls) -> "PointSensitivities":
        return cls()

    @property
    def sensitivities(self) -> Tuple[PointSensitivity, ...]:
        return self._sensitivities

    def combined_with(self, other: "PointSensitivities") -> "PointSensitivities":
        return PointSensitivities(self._sensitivities + other.sensitivities)

    def multiplied_by(self, factor: float) -> "PointSensitivities":
        return PointSensitivities(
            replace(s, sensitivity=s.sensitivity * factor) for s in self._sensitivities
        )

    def converted_to(self, currency: str, fx) -> "PointSensitivities":
        """Re-express every sensitivity in one currency using spot FX rates."""
        return PointSensitivities(
            s if s.currency == currency else replace(
                s, currency=currency, sensitivity=s.sensitivity * fx.fx_rate(s.currency, currency)
            )
            for s in self._sensitivities
        )

    def normalized(self) -> "PointSensitivities":
        """Merge entries that refer to the same observable and currency."""
        merged: Dict[tuple, PointSensitivity] = {}
        for s in self._sensitivities:
            existing = merged.get(s.key())
            merged[s.key()] = s if existing is None else replace(
                existing, sensitivity=existing.sensitivity + s.sensitivity
            )
        return PointSensitivities(merged.values())

    def __add__(self, other: "PointSensitivities") -> "PointSensitivities":
        return self.combined_with(other)

    def __len__(self) -> int:
        return len(self._sensitivities)

    def __iter__(self) -> Iterator[PointSensitivity]:
        return iter(self._sensitivities)

    def __repr__(self) -> str:
        return f"PointSensitivities({len(self._sensitivities)} entries)"
