"""
Curves package: curve objects, calibration nodes, curve and group definitions.

Main APIs:
---------
Curves:
    - InterpolatedNodalCurve: y-values at fixed nodes plus an interpolator
    - ParameterizedFunctionalCurve: y = f(parameters, x)

Configuration:
    - InterpolatedNodalCurveDefinition / ParameterizedFunctionalCurveDefinition
    - CurveGroupEntry / CurveGroupDefinition
    - *CurveNode: calibration instruments tied to market quotes
"""

from .base import (
    BaseCurve,
    Curve,
    CurveKey,
    CurveParameterSize,
    JacobianCalibrationMatrix,
    ValueType,
)
from .definition import (
    CurveDefinition,
    InterpolatedNodalCurveDefinition,
    ParameterizedFunctionalCurveDefinition,
)
from .functional import ParameterizedFunctionalCurve
from .group import CurveGroupDefinition, CurveGroupEntry
from .nodal import InterpolatedNodalCurve
from .nodes import (
    CurveNode,
    FixedIborSwapCurveNode,
    FixedOvernightSwapCurveNode,
    FraCurveNode,
    FxSwapCurveNode,
    IborFixingDepositCurveNode,
    IborFutureCurveNode,
    IborIborSwapCurveNode,
    TermDepositCurveNode,
    XCcyIborIborSwapCurveNode,
)

__all__ = [
    "Curve",
    "BaseCurve",
    "CurveKey",
    "CurveParameterSize",
    "JacobianCalibrationMatrix",
    "ValueType",
    "InterpolatedNodalCurve",
    "ParameterizedFunctionalCurve",
    "CurveDefinition",
    "InterpolatedNodalCurveDefinition",
    "ParameterizedFunctionalCurveDefinition",
    "CurveGroupEntry",
    "CurveGroupDefinition",
    "CurveNode",
    "TermDepositCurveNode",
    "IborFixingDepositCurveNode",
    "FraCurveNode",
    "IborFutureCurveNode",
    "FixedIborSwapCurveNode",
    "FixedOvernightSwapCurveNode",
    "IborIborSwapCurveNode",
    "XCcyIborIborSwapCurveNode",
    "FxSwapCurveNode",
]
