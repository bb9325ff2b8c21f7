"""
Curve group definitions: curves calibrated together as one square system.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Tuple, Union

from ficcal.conventions.indices import IborIndex, OvernightIndex, get_index
from ficcal.errors import CurveGroupConfigurationError

from .base import CurveKey
from .definition import CurveDefinition
from .nodes import CurveNode


@dataclass(frozen=True)
class CurveGroupEntry:
    """A curve definition and the roles its calibrated curve plays.

    One curve may discount one or more currencies and forward one or more
    indices, e.g. an OIS curve that discounts USD and forwards USD-FED-FUND.
    """

    curve_definition: CurveDefinition
    discount_currencies: Tuple[str, ...] = ()
    indices: Tuple[Union[IborIndex, OvernightIndex], ...] = ()

    def __post_init__(self):
        currencies = tuple(c.upper() for c in self.discount_currencies)
        indices = tuple(get_index(i) for i in self.indices)
        if not currencies and not indices:
            raise CurveGroupConfigurationError(
                f"Curve {self.curve_name} is neither a discount nor a forward curve"
            )
        object.__setattr__(self, "discount_currencies", currencies)
        object.__setattr__(self, "indices", indices)

    @property
    def curve_name(self) -> str:
        return self.curve_definition.name

    def keys(self) -> Tuple[CurveKey, ...]:
        return tuple(CurveKey.discount(c) for c in self.discount_currencies) + tuple(
            CurveKey.index(i) for i in self.indices
        )


class CurveGroupDefinition:
    """Curves solved simultaneously, with the roles each one plays.

    Args:
        name: Group name, reported in calibration errors
        entries: Curve definitions with their currencies and indices
        compute_jacobian: Attach parameter-to-quote Jacobians to the
            calibrated curves, needed for market quote sensitivity
    """

    def __init__(
        self,
        name: str,
        entries: Iterable[CurveGroupEntry],
        compute_jacobian: bool = True,
    ):
        if not name:
            raise CurveGroupConfigurationError("Curve group needs a name")
        self.name = name
        self.entries: Tuple[CurveGroupEntry, ...] = tuple(entries)
        self.compute_jacobian = compute_jacobian
        if not self.entries:
            raise CurveGroupConfigurationError(f"Curve group '{name}' has no curves")

        names = [entry.curve_name for entry in self.entries]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise CurveGroupConfigurationError(
                f"Curve group '{name}' defines curves more than once: {duplicates}"
            )
        self._provided: Dict[CurveKey, str] = {}
        for entry in self.entries:
            for key in entry.keys():
                if key in self._provided:
                    raise CurveGroupConfigurationError(
                        f"Curve group '{name}': {key} is provided by both "
                        f"{self._provided[key]} and {entry.curve_name}"
                    )
                self._provided[key] = entry.curve_name

    @classmethod
    def of(cls, name: str, *entries: CurveGroupEntry, compute_jacobian: bool = True) -> "CurveGroupDefinition":
        return cls(name, entries, compute_jacobian)

    @property
    def curve_definitions(self) -> Tuple[CurveDefinition, ...]:
        return tuple(entry.curve_definition for entry in self.entries)

    @property
    def curve_names(self) -> Tuple[str, ...]:
        return tuple(entry.curve_name for entry in self.entries)

    @property
    def provided_keys(self) -> Dict[CurveKey, str]:
        """Curve name for every currency and index the group calibrates."""
        return dict(self._provided)

    def nodes(self) -> Tuple[CurveNode, ...]:
        return tuple(node for definition in self.curve_definitions for node in definition.nodes)

    def required_keys(self) -> FrozenSet[CurveKey]:
        required = set()
        for node in self.nodes():
            required |= node.requirements()
        return frozenset(required)

    @property
    def total_parameter_count(self) -> int:
        return sum(definition.parameter_count for definition in self.curve_definitions)

    @property
    def total_node_count(self) -> int:
        return len(self.nodes())

    def combined_with(self, other: "CurveGroupDefinition", name: str = "") -> "CurveGroupDefinition":
        """Single group holding the curves of both groups."""
        return CurveGroupDefinition(
            name or f"{self.name}+{other.name}",
            self.entries + other.entries,
            self.compute_jacobian or other.compute_jacobian,
        )

    def __repr__(self) -> str:
        return f"CurveGroupDefinition({self.name!r}, curves={list(self.curve_names)})"
