"""
Parameter sensitivity by bumping curve parameters and repricing.

Used to check analytic sensitivities and for values without an analytic
sensitivity.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Union

import numpy as np

from ficcal.market.fx import CurrencyAmount
from ficcal.market.parameter import CurrencyParameterSensitivities
from ficcal.valuation.provider import ImmutableRatesProvider

logger = logging.getLogger(__name__)

ValueFunction = Callable[[ImmutableRatesProvider], Union[float, CurrencyAmount]]


def _amount(value: Union[float, CurrencyAmount], currency: Optional[str]):
    if isinstance(value, CurrencyAmount):
        return value.amount, value.currency
    if currency is None:
        raise ValueError("A currency is needed when the value function returns a plain number")
    return float(value), currency


class FiniteDifferenceSensitivityCalculator:
    """Bump-and-reprice sensitivity to every parameter of every curve.

    Args:
        shift: Absolute bump applied to each parameter
        central: Use central differences; forward differences otherwise
    """

    def __init__(self, shift: float = 1e-6, central: bool = True):
        if shift <= 0:
            raise ValueError(f"Finite difference shift must be positive, got {shift}")
        self.shift = shift
        self.central = central

    def sensitivity(
        self,
        provider: ImmutableRatesProvider,
        value_function: ValueFunction,
        currency: Optional[str] = None,
        curve_names: Optional[Iterable[str]] = None,
    ) -> CurrencyParameterSensitivities:
        """Sensitivity of `value_function(provider)` to the curve parameters.

        Args:
            provider: Provider whose curves are bumped
            value_function: Value to differentiate
            currency: Currency of the value when it is a plain number
            curve_names: Curves to bump, all curves of the provider by default
        """
        base, value_currency = _amount(value_function(provider), currency)
        names = list(curve_names) if curve_names is not None else list(provider.curves)
        result = []
        for name in names:
            curve = provider.curve(name)
            parameters = np.array(curve.parameters, dtype=float)
            values = np.zeros(len(parameters))
            for i in range(len(parameters)):
                up = parameters.copy()
                up[i] += self.shift
                value_up, _ = _amount(value_function(provider.with_curve_values(name, up)), value_currency)
                if self.central:
                    down = parameters.copy()
                    down[i] -= self.shift
                    value_down, _ = _amount(
                        value_function(provider.with_curve_values(name, down)), value_currency
                    )
                    values[i] = (value_up - value_down) / (2.0 * self.shift)
                else:
                    values[i] = (value_up - base) / self.shift
            result.append(curve.create_parameter_sensitivity(value_currency, values))
            logger.debug("Bumped %d parameters of curve %s", len(parameters), name)
        return CurrencyParameterSensitivities(result)

    def parameter_sensitivity(
        self,
        provider: ImmutableRatesProvider,
        sensitivity_function: Callable[[ImmutableRatesProvider], CurrencyParameterSensitivities],
        curve_name: str,
        currency: str,
    ) -> np.ndarray:
        """Derivative of one curve's parameter sensitivity with respect to its own parameters.

        Returns a square matrix; element (i, j) is d^2 V / d p_i d p_j.
        """
        curve = provider.curve(curve_name)
        parameters = np.array(curve.parameters, dtype=float)
        n = len(parameters)
        matrix = np.zeros((n, n))

        def first_order(bumped: ImmutableRatesProvider) -> np.ndarray:
            found = sensitivity_function(bumped).find_sensitivity(curve_name, currency)
            return np.zeros(n) if found is None else np.asarray(found.sensitivity)

        base = None if self.central else first_order(provider)
        for j in range(n):
            up = parameters.copy()
            up[j] += self.shift
            row_up = first_order(provider.with_curve_values(curve_name, up))
            if self.central:
                down = parameters.copy()
                down[j] -= self.shift
                row_down = first_order(provider.with_curve_values(curve_name, down))
                matrix[:, j] = (row_up - row_down) / (2.0 * self.shift)
            else:
                matrix[:, j] = (row_up - base) / self.shift
        return matrix

