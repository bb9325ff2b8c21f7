"""
Market quote sensitivity.

Converts sensitivities to curve parameters into sensitivities to the market
quotes the curves were calibrated to, using the Jacobian each calibrated
curve carries. The result uses the quote identifiers as parameter labels.
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from ficcal.market.parameter import CurrencyParameterSensitivities, CurrencyParameterSensitivity
from ficcal.valuation.provider import ImmutableRatesProvider

logger = logging.getLogger(__name__)


class MarketQuoteSensitivityCalculator:
    """Chains parameter sensitivities through the calibration Jacobians."""

    def sensitivity(
        self,
        parameter_sensitivities: CurrencyParameterSensitivities,
        provider: ImmutableRatesProvider,
    ) -> CurrencyParameterSensitivities:
        """Sensitivity to market quotes, one entry per calibrated curve and currency.

        Args:
            parameter_sensitivities: Sensitivities to curve parameters
            provider: Provider holding the calibrated curves with Jacobians

        Raises:
            ValueError: If a curve has no calibration Jacobian
        """
        result: List[CurrencyParameterSensitivity] = []
        for sensitivity in parameter_sensitivities:
            curve = provider.curve(sensitivity.curve_name)
            jacobian = curve.jacobian
            if jacobian is None:
                raise ValueError(
                    f"Curve {curve.name} has no calibration Jacobian; "
                    "calibrate its group with compute_jacobian=True"
                )
            if jacobian.matrix.shape[0] != sensitivity.parameter_count:
                raise ValueError(
                    f"Curve {curve.name} Jacobian has {jacobian.matrix.shape[0]} rows, "
                    f"sensitivity has {sensitivity.parameter_count} parameters"
                )
            row = np.asarray(sensitivity.sensitivity) @ jacobian.matrix
            for entry, block in jacobian.split(row):
                source = provider.curve(entry.name)
                labels = source.quote_ids if len(source.quote_ids) == entry.size else ()
                result.append(CurrencyParameterSensitivity(entry.name, sensitivity.currency, block, labels))
        return CurrencyParameterSensitivities(result)
