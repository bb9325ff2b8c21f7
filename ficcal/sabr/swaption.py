"""
SABR calibration of a swaption volatility cube.

Raw data is a grid of lognormal volatilities per underlying swap tenor, with
rows by option expiry and columns by strike (absolute, simple moneyness or
log moneyness). For each (expiry, tenor) the forward is the par rate of the
forward-starting swap priced off a calibrated rates provider, and one smile
is fitted. The fitted nodes form a ``SabrParametersSurface`` whose parameters
are interpolated linearly in expiry time per swap tenor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ficcal.conventions.dates import Tenor, add_tenor
from ficcal.conventions.daycount import ACT_365F, DayCountConvention, get_day_count_convention
from ficcal.errors import InsufficientSmileData
from ficcal.instruments.conventions import FixedIborSwapConvention
from ficcal.interpolation import FLAT, create_interpolator
from ficcal.valuation.provider import ImmutableRatesProvider
from ficcal.valuation.swap import DiscountingSwapPricer

from .fitter import SabrFitResult, SabrSmileFitter
from .formula import SabrParameters

logger = logging.getLogger(__name__)


class StrikeType(Enum):
    STRIKE = "STRIKE"
    SIMPLE_MONEYNESS = "SIMPLE_MONEYNESS"
    LOG_MONEYNESS = "LOG_MONEYNESS"


@dataclass(frozen=True)
class RawOptionData:
    """Volatility grid of one swap tenor: rows are expiries, columns strikes.

    Attributes:
        tenor: Underlying swap tenor, e.g. "5Y"
        expiries: Option expiries as tenors from the valuation date
        strikes: Strike axis, interpreted according to ``strike_type``
        volatilities: Lognormal volatilities, NaN where missing
        strike_type: Meaning of the strike axis
    """

    tenor: str
    expiries: Tuple[str, ...]
    strikes: Tuple[float, ...]
    volatilities: np.ndarray
    strike_type: StrikeType = StrikeType.SIMPLE_MONEYNESS

    def __post_init__(self):
        object.__setattr__(self, "tenor", str(Tenor.parse(self.tenor)))
        object.__setattr__(self, "expiries", tuple(str(Tenor.parse(e)) for e in self.expiries))
        object.__setattr__(self, "strikes", tuple(float(k) for k in self.strikes))
        vols = np.array(self.volatilities, dtype=float)
        if vols.shape != (len(self.expiries), len(self.strikes)):
            raise ValueError(
                f"Volatility grid for {self.tenor} has shape {vols.shape}, "
                f"expected {(len(self.expiries), len(self.strikes))}"
            )
        vols.setflags(write=False)
        object.__setattr__(self, "volatilities", vols)
        object.__setattr__(self, "strike_type", StrikeType(self.strike_type))

    def absolute_strikes(self, forward: float) -> np.ndarray:
        axis = np.array(self.strikes)
        if self.strike_type == StrikeType.SIMPLE_MONEYNESS:
            return forward + axis
        if self.strike_type == StrikeType.LOG_MONEYNESS:
            return forward * np.exp(axis)
        return axis

    def smile(self, expiry: str) -> np.ndarray:
        return self.volatilities[self.expiries.index(str(Tenor.parse(expiry)))]


@dataclass(frozen=True)
class SabrNode:
    """Fitted smile of one expiry and swap tenor."""

    expiry: str
    tenor: str
    expiry_date: date
    time: float
    forward: float
    strikes: np.ndarray = field(repr=False)
    fit: SabrFitResult = field(repr=False)

    @property
    def parameters(self) -> SabrParameters:
        return self.fit.parameters

    @property
    def label(self) -> str:
        return f"{self.expiry}x{self.tenor}"


class SabrParametersSurface:
    """SABR parameters by expiry and swap tenor.

    Parameters between expiries of the same tenor are interpolated linearly
    in expiry time and held flat outside the calibrated range.
    """

    def __init__(self, valuation_date: date, nodes: Sequence[SabrNode], day_count=ACT_365F):
        if not nodes:
            raise ValueError("SABR surface needs at least one calibrated node")
        self.valuation_date = valuation_date
        self.day_count: DayCountConvention = get_day_count_convention(day_count)
        self.nodes: Tuple[SabrNode, ...] = tuple(nodes)
        self._by_tenor: Dict[str, List[SabrNode]] = {}
        for node in sorted(self.nodes, key=lambda n: n.time):
            self._by_tenor.setdefault(node.tenor, []).append(node)
        self.shift = self.nodes[0].parameters.shift

    @property
    def tenors(self) -> Tuple[str, ...]:
        return tuple(self._by_tenor)

    def node(self, expiry: str, tenor: str) -> SabrNode:
        expiry, tenor = str(Tenor.parse(expiry)), str(Tenor.parse(tenor))
        for node in self._by_tenor.get(tenor, []):
            if node.expiry == expiry:
                return node
        raise KeyError(f"No SABR node for {expiry}x{tenor}")

    def parameters(self, expiry: Union[float, date], tenor: str) -> SabrParameters:
        """Interpolated parameters at an expiry date or time for one swap tenor."""
        tenor = str(Tenor.parse(tenor))
        if tenor not in self._by_tenor:
            raise KeyError(f"No SABR nodes for swap tenor {tenor}; available {list(self._by_tenor)}")
        time = expiry if isinstance(expiry, (int, float)) else self.day_count.relative_year_fraction(
            self.valuation_date, expiry
        )
        nodes = self._by_tenor[tenor]
        times = [n.time for n in nodes]
        values = {}
        for name in ("alpha", "beta", "rho", "nu"):
            bound = create_interpolator("LINEAR").bind(
                times, [getattr(n.parameters, name) for n in nodes], FLAT, FLAT
            )
            values[name] = float(bound.value(time))
        return SabrParameters(shift=self.shift, **values)

    def volatility(self, expiry: Union[float, date], tenor: str, strike, forward: float):
        """Hagan volatility from the interpolated parameters."""
        time = expiry if isinstance(expiry, (int, float)) else self.day_count.relative_year_fraction(
            self.valuation_date, expiry
        )
        return self.parameters(time, tenor).volatility(forward, strike, time)

    def to_dataframe(self) -> pd.DataFrame:
        rows = [
            {
                "expiry": n.expiry,
                "tenor": n.tenor,
                "time": n.time,
                "forward": n.forward,
                "alpha": n.parameters.alpha,
                "beta": n.parameters.beta,
                "rho": n.parameters.rho,
                "nu": n.parameters.nu,
                "chi_square": n.fit.chi_square,
            }
            for n in self.nodes
        ]
        return pd.DataFrame(rows)

    def __repr__(self) -> str:
        return f"SabrParametersSurface({self.valuation_date}, {len(self.nodes)} nodes)"


class SabrSwaptionCalibrator:
    """Fits SABR smiles to raw swaption volatilities.

    Args:
        convention: Swap convention of the underlying swaps
        fitter: Smile fitter, beta 0.5 fixed without shift by default
        day_count: Day count of the expiry times
    """

    def __init__(
        self,
        convention: FixedIborSwapConvention,
        fitter: Optional[SabrSmileFitter] = None,
        day_count: Union[str, DayCountConvention] = ACT_365F,
    ):
        self.convention = convention
        self.fitter = fitter or SabrSmileFitter()
        self.day_count = get_day_count_convention(day_count)
        self._pricer = DiscountingSwapPricer()

    def expiry_date(self, valuation_date: date, expiry: str) -> date:
        return add_tenor(valuation_date, expiry, self.convention.index.calendar, self.convention.adjustment)

    def forward(self, provider: ImmutableRatesProvider, expiry: str, tenor: str) -> float:
        """Par rate of the swap starting after the expiry period."""
        swap = self.convention.to_trade(provider.valuation_date, tenor, 0.0, period_to_start=expiry)
        return self._pricer.par_rate(swap, provider)

    def calibrate(
        self,
        data: Union[RawOptionData, Sequence[RawOptionData]],
        provider: ImmutableRatesProvider,
        weights: Optional[Mapping[str, Sequence[float]]] = None,
    ) -> SabrParametersSurface:
        """Fit every smile with data and return the surface.

        Smiles without any quote are skipped; smiles with some quotes but
        fewer than the number of free parameters raise.

        Raises:
            InsufficientSmileData: If a smile has too few quotes
        """
        if isinstance(data, RawOptionData):
            data = [data]
        valuation_date = provider.valuation_date
        nodes = []
        for raw in data:
            for row, expiry in enumerate(raw.expiries):
                vols = raw.volatilities[row]
                if not np.any(np.isfinite(vols)):
                    logger.info("Skipping %sx%s: no volatility data", expiry, raw.tenor)
                    continue
                expiry_date = self.expiry_date(valuation_date, expiry)
                time = self.day_count.relative_year_fraction(valuation_date, expiry_date)
                forward = self.forward(provider, expiry, raw.tenor)
                strikes = raw.absolute_strikes(forward)
                label = f"{expiry}x{raw.tenor}"
                fit = self.fitter.fit(
                    forward, time, strikes, vols,
                    weights=None if weights is None else weights.get(label),
                    node=label,
                )
                logger.debug(
                    "SABR %s: forward %.6f alpha %.6f rho %.4f nu %.4f chi2 %.3e",
                    label, forward, fit.parameters.alpha, fit.parameters.rho, fit.parameters.nu, fit.chi_square,
                )
                nodes.append(SabrNode(expiry, raw.tenor, expiry_date, time, forward, strikes, fit))
        if not nodes:
            raise InsufficientSmileData(0, len(self.fitter.free_parameters), "surface")
        logger.info("Calibrated SABR surface with %d nodes", len(nodes))
        return SabrParametersSurface(valuation_date, nodes, self.day_count)
