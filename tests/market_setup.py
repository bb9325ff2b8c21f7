"""Quotes and curve definitions shared by the calibration tests."""

from datetime import date, timedelta

from ficcal.conventions.indices import EUR_EURIBOR_3M
from ficcal.curves import (
    FixedIborSwapCurveNode,
    FixedOvernightSwapCurveNode,
    FraCurveNode,
    IborFixingDepositCurveNode,
    InterpolatedNodalCurveDefinition,
)
from ficcal.instruments import (
    EUR_FIXED_1Y_ESTR_OIS,
    EUR_FIXED_1Y_EURIBOR_3M,
    FraConvention,
    IborFixingDepositConvention,
)
from ficcal.market import CurrencyParameterSensitivities

VALUATION_DATE = date(2024, 3, 4)

EUR_OIS_QUOTES = {
    "EUR-OIS-1Y": 0.0335,
    "EUR-OIS-2Y": 0.0310,
    "EUR-OIS-5Y": 0.0285,
    "EUR-OIS-10Y": 0.0270,
    "EUR-OIS-30Y": 0.0255,
}

EUR_LOW_OIS_QUOTES = {
    "EUR-OIS-2Y": 0.0010,
    "EUR-OIS-5Y": 0.0020,
    "EUR-OIS-10Y": 0.0030,
    "EUR-OIS-30Y": 0.0040,
}

EUR_3M_QUOTES = {
    "EUR-3M-FIX": 0.0392,
    "EUR-FRA-3x6": 0.0381,
    "EUR-FRA-6x9": 0.0366,
    "EUR-IRS3M-1Y": 0.0372,
    "EUR-IRS3M-2Y": 0.0345,
    "EUR-IRS3M-5Y": 0.0318,
    "EUR-IRS3M-10Y": 0.0302,
}

USD_OIS_QUOTES = {
    "USD-OIS-1Y": 0.0500,
    "USD-OIS-2Y": 0.0470,
    "USD-OIS-5Y": 0.0440,
    "USD-OIS-10Y": 0.0425,
}

EUR_XCCY_QUOTES = {
    "EURUSD-FXSWAP-3M": 0.0050,
    "EURUSD-FXSWAP-6M": 0.0098,
    "EURUSD-FXSWAP-1Y": 0.0192,
    "EURUSD-XCCY-2Y": -0.0020,
    "EURUSD-XCCY-5Y": -0.0025,
}

EUR_USD_SPOT = 1.10


def estr_definition(name="EUR-ESTR", quotes=EUR_OIS_QUOTES):
    nodes = [
        FixedOvernightSwapCurveNode(EUR_FIXED_1Y_ESTR_OIS, quote_id[len("EUR-OIS-"):], quote_id)
        for quote_id in quotes
    ]
    return InterpolatedNodalCurveDefinition(name, nodes)


def euribor_definition():
    nodes = [
        IborFixingDepositCurveNode(IborFixingDepositConvention(EUR_EURIBOR_3M), "EUR-3M-FIX"),
        FraCurveNode(FraConvention(EUR_EURIBOR_3M), "3M", "6M", "EUR-FRA-3x6"),
        FraCurveNode(FraConvention(EUR_EURIBOR_3M), "6M", "9M", "EUR-FRA-6x9"),
    ] + [
        FixedIborSwapCurveNode(EUR_FIXED_1Y_EURIBOR_3M, tenor, f"EUR-IRS3M-{tenor}")
        for tenor in ("1Y", "2Y", "5Y", "10Y")
    ]
    return InterpolatedNodalCurveDefinition("EUR-EURIBOR-3M", nodes)


def quote_sensitivity_by_id(sensitivities):
    """Market quote sensitivities summed per quote identifier."""
    result = {}
    for sensitivity in sensitivities:
        for label, value in zip(sensitivity.parameter_labels, sensitivity.sensitivity):
            result[label] = result.get(label, 0.0) + value
    return result


def with_jacobian_curves_only(sensitivities, provider):
    """Drop sensitivities to curves that were not calibrated with a Jacobian."""
    return CurrencyParameterSensitivities(
        s for s in sensitivities if provider.curve(s.curve_name).jacobian is not None
    )


def daily_fixings(index, start, end, rate):
    """A constant fixing on every business day of the index in [start, end)."""
    fixings = {}
    current = start
    while current < end:
        if index.calendar.is_business_day(current):
            fixings[current] = rate
        current += timedelta(days=1)
    return fixings
