"""
Ordering of curve groups by their curve dependencies.

A group depends on another when one of its nodes is priced with a curve the
other group calibrates. Groups are calibrated in a topological order of that
graph, so the input order of the groups does not matter.
"""

from __future__ import annotations

import logging
from graphlib import CycleError, TopologicalSorter
from typing import Dict, Iterable, List, Sequence, Set

from ficcal.curves.base import CurveKey
from ficcal.curves.group import CurveGroupDefinition
from ficcal.errors import CurveGroupConfigurationError, CyclicCurveDependency, MissingCurve

logger = logging.getLogger(__name__)


def group_dependencies(
    groups: Sequence[CurveGroupDefinition],
    known_keys: Iterable[CurveKey] = (),
) -> Dict[str, Set[str]]:
    """Names of the groups each group depends on.

    Args:
        groups: Curve groups to calibrate
        known_keys: Currencies and indices already covered by known curves

    Raises:
        CurveGroupConfigurationError: If two groups share a name or calibrate
            the same currency or index
        MissingCurve: If a node needs a curve that no group and no known
            curve provides
    """
    providers: Dict[CurveKey, str] = {}
    names: Set[str] = set()
    for group in groups:
        if group.name in names:
            raise CurveGroupConfigurationError(f"Curve group name '{group.name}' is used more than once")
        names.add(group.name)
        for key in group.provided_keys:
            if key in providers:
                raise CurveGroupConfigurationError(
                    f"{key} is calibrated by both group '{providers[key]}' and group '{group.name}'"
                )
            providers[key] = group.name

    known = set(known_keys)
    dependencies: Dict[str, Set[str]] = {}
    for group in groups:
        depends_on: Set[str] = set()
        for key in sorted(group.required_keys(), key=str):
            owner = providers.get(key)
            if owner is not None:
                if owner != group.name:
                    depends_on.add(owner)
            elif key not in known:
                available = [str(k) for k in list(providers) + list(known)]
                raise MissingCurve(f"{key} required by group '{group.name}'", available)
        dependencies[group.name] = depends_on
    return dependencies


def calibration_order(
    groups: Sequence[CurveGroupDefinition],
    known_keys: Iterable[CurveKey] = (),
) -> List[CurveGroupDefinition]:
    """Groups sorted so that each comes after the groups it depends on.

    Raises:
        CyclicCurveDependency: If the dependencies form a cycle
    """
    dependencies = group_dependencies(groups, known_keys)
    by_name = {group.name: group for group in groups}
    sorter = TopologicalSorter()
    for group in groups:
        sorter.add(group.name, *sorted(dependencies[group.name]))
    try:
        order = list(sorter.static_order())
    except CycleError as exc:
        raise CyclicCurveDependency(exc.args[1]) from exc
    logger.debug("Curve group calibration order: %s", order)
    return [by_name[name] for name in order]
