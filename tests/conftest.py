"""Shared market data and curve groups for the calibration tests."""

import pytest

from ficcal.calibration import CurveCalibrator
from ficcal.conventions.indices import EUR_ESTR, EUR_EURIBOR_3M, USD_FED_FUND, USD_LIBOR_3M
from ficcal.curves import (
    CurveGroupDefinition,
    CurveGroupEntry,
    FixedOvernightSwapCurveNode,
    FxSwapCurveNode,
    InterpolatedNodalCurve,
    InterpolatedNodalCurveDefinition,
    XCcyIborIborSwapCurveNode,
)
from ficcal.instruments import EUR_EURIBOR_3M_USD_LIBOR_3M, EUR_USD_FX_SWAP, USD_FIXED_1Y_FED_FUND_OIS
from ficcal.market import FxMatrix, MarketData
from ficcal.valuation import ImmutableRatesProvider

from market_setup import (
    EUR_3M_QUOTES,
    EUR_OIS_QUOTES,
    EUR_USD_SPOT,
    EUR_XCCY_QUOTES,
    USD_OIS_QUOTES,
    VALUATION_DATE,
    estr_definition,
    euribor_definition,
)


@pytest.fixture
def valuation_date():
    return VALUATION_DATE


@pytest.fixture
def eur_market_data():
    quotes = dict(EUR_OIS_QUOTES)
    quotes.update(EUR_3M_QUOTES)
    return MarketData(VALUATION_DATE, quotes)


@pytest.fixture
def eur_group():
    return CurveGroupDefinition.of(
        "EUR",
        CurveGroupEntry(estr_definition(), discount_currencies=("EUR",), indices=(EUR_ESTR,)),
        CurveGroupEntry(euribor_definition(), indices=(EUR_EURIBOR_3M,)),
    )


@pytest.fixture
def calibrator():
    return CurveCalibrator.of(tolerance=1e-11)


@pytest.fixture
def eur_provider(calibrator, eur_group, eur_market_data):
    return calibrator.calibrate(eur_group, eur_market_data)


@pytest.fixture
def usd_group():
    nodes = [
        FixedOvernightSwapCurveNode(USD_FIXED_1Y_FED_FUND_OIS, quote_id[len("USD-OIS-"):], quote_id)
        for quote_id in USD_OIS_QUOTES
    ]
    return CurveGroupDefinition.of(
        "USD-OIS",
        CurveGroupEntry(
            InterpolatedNodalCurveDefinition("USD-OIS", nodes),
            discount_currencies=("USD",),
            indices=(USD_FED_FUND,),
        ),
    )


@pytest.fixture
def eur_dsc_group():
    nodes = [
        FxSwapCurveNode(EUR_USD_FX_SWAP, period, f"EURUSD-FXSWAP-{period}")
        for period in ("3M", "6M", "1Y")
    ] + [
        XCcyIborIborSwapCurveNode(EUR_EURIBOR_3M_USD_LIBOR_3M, tenor, f"EURUSD-XCCY-{tenor}")
        for tenor in ("2Y", "5Y")
    ]
    return CurveGroupDefinition.of(
        "EUR-DSC",
        CurveGroupEntry(InterpolatedNodalCurveDefinition("EUR-DSC", nodes), discount_currencies=("EUR",)),
    )


@pytest.fixture
def xccy_market_data():
    quotes = dict(USD_OIS_QUOTES)
    quotes.update(EUR_XCCY_QUOTES)
    return MarketData(VALUATION_DATE, quotes, FxMatrix.parse({"EUR/USD": EUR_USD_SPOT}))


@pytest.fixture
def libor_provider():
    """Known flat forward curves for the cross-currency swaps."""
    return ImmutableRatesProvider(
        VALUATION_DATE,
        index_curves={
            EUR_EURIBOR_3M: InterpolatedNodalCurve("EUR-EURIBOR-3M", [1.0], [0.033]),
            USD_LIBOR_3M: InterpolatedNodalCurve("USD-LIBOR-3M", [1.0], [0.052]),
        },
    )
