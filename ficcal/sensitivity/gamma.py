"""
Intra-curve cross gamma.

The second order sensitivity of a value to pairs of parameters of the same
curve, computed by finite differences of the analytic first order parameter
sensitivity.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ficcal.market.parameter import CrossGammaParameterSensitivity, CurrencyParameterSensitivities
from ficcal.valuation.provider import ImmutableRatesProvider

from .finite_difference import FiniteDifferenceSensitivityCalculator

logger = logging.getLogger(__name__)


class CurveGammaCalculator:
    """Cross gamma of each curve against its own parameters.

    Args:
        shift: Absolute bump of each parameter
    """

    def __init__(self, shift: float = 1e-4):
        self._calculator = FiniteDifferenceSensitivityCalculator(shift=shift, central=True)

    @property
    def shift(self) -> float:
        return self._calculator.shift

    def cross_gamma(
        self,
        provider: ImmutableRatesProvider,
        sensitivity_function: Callable[[ImmutableRatesProvider], CurrencyParameterSensitivities],
        curve_names: Optional[List[str]] = None,
    ) -> List[CrossGammaParameterSensitivity]:
        """Cross gamma per curve and currency of the first order sensitivity.

        Args:
            provider: Provider holding the curves
            sensitivity_function: First order parameter sensitivity of the value,
                for example ``lambda p: p.parameter_sensitivity(pricer.present_value_sensitivity(trade, p))``
            curve_names: Curves to process, every curve with a sensitivity by default
        """
        base = sensitivity_function(provider)
        result = []
        for sensitivity in base:
            if curve_names is not None and sensitivity.curve_name not in curve_names:
                continue
            matrix = self._calculator.parameter_sensitivity(
                provider, sensitivity_function, sensitivity.curve_name, sensitivity.currency
            )
            result.append(CrossGammaParameterSensitivity(
                sensitivity.curve_name, sensitivity.currency, matrix, sensitivity.parameter_labels
            ))
        logger.debug("Computed cross gamma for %d curve(s)", len(result))
        return result
