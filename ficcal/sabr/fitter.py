"""
Least squares fit of SABR parameters to one volatility smile.

The free parameters (alpha, rho, nu, and beta when it is not fixed) minimise
the weighted squared difference between Hagan volatilities and the quoted
volatilities, using scipy's bounded trust region solver from several
starting points. Missing quotes (NaN) are skipped.

The fit also returns the sensitivity of the fitted parameters to each quoted
volatility, either from the Gauss-Newton approximation

    d params / d data = (J^T W J)^{-1} J^T W

with J the derivative of the model volatilities to the free parameters, or
by bumping each quote and refitting.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import least_squares

from ficcal.errors import InsufficientSmileData

from .formula import SabrParameters, hagan_volatility

logger = logging.getLogger(__name__)

PARAMETER_NAMES = ("alpha", "beta", "rho", "nu")
BOUNDS = {
    "alpha": (1e-4, np.inf),
    "beta": (0.0, 1.0),
    "rho": (-0.999, 0.999),
    "nu": (1e-3, np.inf),
}
ANALYTIC = "ANALYTIC"
BUMP = "BUMP"


@dataclass(frozen=True)
class SabrFitResult:
    """Outcome of a smile fit.

    Attributes:
        parameters: Fitted SABR parameters
        chi_square: Weighted sum of squared volatility errors
        free_parameters: Names of the fitted parameters, in row order of
            ``data_sensitivity``
        data_sensitivity: d parameter / d quoted volatility, one row per free
            parameter and one column per input point (zero for skipped points)
        converged: Whether the solver reported success
        valid_points: Number of quotes used
    """

    parameters: SabrParameters
    chi_square: float
    free_parameters: Tuple[str, ...]
    data_sensitivity: np.ndarray
    converged: bool
    valid_points: int

    def sensitivity_of(self, name: str) -> np.ndarray:
        """Row of the data sensitivity for one free parameter."""
        return self.data_sensitivity[self.free_parameters.index(name)]


class SabrSmileFitter:
    """Fits SABR smiles with beta fixed or free.

    Args:
        beta: Fixed beta, or starting beta when ``fix_beta`` is False
        shift: Displacement of forward and strikes
        fix_beta: Keep beta at its given value
        sensitivity_method: ``"ANALYTIC"`` or ``"BUMP"``
        bump: Volatility bump of the bump-and-refit sensitivity
    """

    def __init__(
        self,
        beta: float = 0.5,
        shift: float = 0.0,
        fix_beta: bool = True,
        sensitivity_method: str = ANALYTIC,
        bump: float = 1e-5,
    ):
        if not 0.0 <= beta <= 1.0:
            raise ValueError(f"beta must be in [0, 1], got {beta}")
        if sensitivity_method not in (ANALYTIC, BUMP):
            raise ValueError(f"Unknown sensitivity method {sensitivity_method}")
        self.beta = beta
        self.shift = shift
        self.fix_beta = fix_beta
        self.sensitivity_method = sensitivity_method
        self.bump = bump

    @property
    def free_parameters(self) -> Tuple[str, ...]:
        if self.fix_beta:
            return ("alpha", "rho", "nu")
        return PARAMETER_NAMES

    def _full(self, x: np.ndarray) -> dict:
        values = dict(zip(self.free_parameters, x))
        values.setdefault("beta", self.beta)
        return values

    def _model(self, x: np.ndarray, forward: float, time: float, strikes: np.ndarray) -> np.ndarray:
        p = self._full(x)
        return np.atleast_1d(hagan_volatility(
            forward, strikes, time, p["alpha"], p["beta"], p["rho"], p["nu"], self.shift
        ))

    def _model_jacobian(self, x: np.ndarray, forward: float, time: float, strikes: np.ndarray) -> np.ndarray:
        """d model volatility / d free parameter by central differences."""
        lower, upper = self._bounds()
        jac = np.zeros((len(strikes), len(x)))
        for j in range(len(x)):
            h = 1e-6 * max(1.0, abs(x[j]))
            up = x.copy()
            down = x.copy()
            up[j] = min(x[j] + h, upper[j])
            down[j] = max(x[j] - h, lower[j])
            width = up[j] - down[j]
            jac[:, j] = (self._model(up, forward, time, strikes) - self._model(down, forward, time, strikes)) / width
        return jac

    def _bounds(self):
        names = self.free_parameters
        return (
            np.array([BOUNDS[n][0] for n in names]),
            np.array([BOUNDS[n][1] for n in names]),
        )

    def _starts(self, forward: float, strikes: np.ndarray, vols: np.ndarray, initial: Optional[SabrParameters]):
        if initial is not None:
            yield np.array([getattr(initial, n) for n in self.free_parameters])
        atm_vol = vols[np.argmin(np.abs(strikes - forward))]
        alpha0 = atm_vol * (forward + self.shift) ** (1.0 - self.beta)
        for alpha, nu in itertools.product((alpha0, 2.0 * alpha0), (0.1, 0.5)):
            values = {"alpha": alpha, "beta": self.beta, "rho": 0.0, "nu": nu}
            yield np.array([values[n] for n in self.free_parameters])

    def _solve(self, x0, forward, time, strikes, vols, weights, tight: bool = False):
        lower, upper = self._bounds()
        x0 = np.clip(x0, lower + 1e-12, np.where(np.isfinite(upper), upper - 1e-12, upper))
        sqrt_w = np.sqrt(weights)

        def residuals(x):
            return sqrt_w * (self._model(x, forward, time, strikes) - vols)

        tolerance = 1e-12 if tight else 1e-10
        return least_squares(
            residuals, x0, bounds=(lower, upper), method="trf",
            ftol=tolerance, xtol=tolerance, gtol=tolerance, max_nfev=2000,
        )

    def fit(
        self,
        forward: float,
        time: float,
        strikes: Sequence[float],
        volatilities: Sequence[float],
        weights: Optional[Sequence[float]] = None,
        initial: Optional[SabrParameters] = None,
        node: str = "",
    ) -> SabrFitResult:
        """Fit the smile of one expiry.

        Args:
            forward: Forward rate of the underlying
            time: Time to expiry in years
            strikes: Absolute strikes
            volatilities: Lognormal (shifted) volatilities, NaN where missing
            weights: Weight of each point, one by default
            initial: Extra starting point tried before the default ones
            node: Name of the smile in error messages

        Raises:
            InsufficientSmileData: If fewer valid points than free parameters
        """
        strikes = np.asarray(strikes, dtype=float)
        vols = np.asarray(volatilities, dtype=float)
        if strikes.shape != vols.shape:
            raise ValueError(f"Got {len(strikes)} strikes and {len(vols)} volatilities")
        weights = np.ones(len(vols)) if weights is None else np.asarray(weights, dtype=float)
        if time <= 0:
            raise ValueError(f"Time to expiry must be positive, got {time}")

        valid = np.isfinite(vols) & np.isfinite(strikes) & np.isfinite(weights)
        n_free = len(self.free_parameters)
        if int(valid.sum()) < n_free:
            raise InsufficientSmileData(int(valid.sum()), n_free, node)
        k, v, w = strikes[valid], vols[valid], weights[valid]

        best = None
        for x0 in self._starts(forward, k, v, initial):
            result = self._solve(x0, forward, time, k, v, w)
            if best is None or result.cost < best.cost:
                best = result
        chi_square = 2.0 * float(best.cost)
        logger.debug("SABR fit %s: chi2=%.3e after %d evaluations", node or "", chi_square, best.nfev)

        if self.sensitivity_method == BUMP:
            partial = self._bump_sensitivity(best.x, forward, time, k, v, w)
        else:
            partial = self._analytic_sensitivity(best.x, forward, time, k, w)
        sensitivity = np.zeros((n_free, len(vols)))
        sensitivity[:, valid] = partial

        values = self._full(best.x)
        parameters = SabrParameters(
            values["alpha"], values["beta"], values["rho"], values["nu"], self.shift
        )
        return SabrFitResult(
            parameters, chi_square, self.free_parameters, sensitivity, bool(best.success), int(valid.sum())
        )

    def _analytic_sensitivity(self, x, forward, time, strikes, weights) -> np.ndarray:
        jac = self._model_jacobian(x, forward, time, strikes)
        weighted = jac.T * weights
        return np.linalg.solve(weighted @ jac, weighted)

    def _bump_sensitivity(self, x, forward, time, strikes, vols, weights) -> np.ndarray:
        result = np.zeros((len(x), len(vols)))
        for i in range(len(vols)):
            up = vols.copy()
            up[i] += self.bump
            down = vols.copy()
            down[i] -= self.bump
            x_up = self._solve(x, forward, time, strikes, up, weights, tight=True).x
            x_down = self._solve(x, forward, time, strikes, down, weights, tight=True).x
            result[:, i] = (x_up - x_down) / (2.0 * self.bump)
        return result
