"""
SABR model parameters and the Hagan lognormal implied volatility expansion.

Dynamics of the (optionally shifted) forward F:

    dF     = alpha_t * (F + shift)^beta * dW1
    dalpha = nu * alpha_t * dW2,      dW1 . dW2 = rho dt

The implied Black volatility of the shifted forward and strike is given by
Hagan et al. (2002), Managing Smile Risk, equation (2.17a).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

# |z| under which z / x(z) is replaced by its expansion around zero
Z_CUTOFF = 1e-7


@dataclass(frozen=True)
class SabrParameters:
    """
    SABR parameters of one smile.

    Attributes:
        alpha: Initial volatility level, positive
        beta: CEV exponent in [0, 1]
        rho: Correlation between forward and volatility, in (-1, 1)
        nu: Volatility of volatility, non-negative
        shift: Displacement added to forward and strikes
    """

    alpha: float
    beta: float
    rho: float
    nu: float
    shift: float = 0.0

    def __post_init__(self):
        if self.alpha <= 0:
            raise ValueError(f"alpha must be positive, got {self.alpha}")
        if not 0.0 <= self.beta <= 1.0:
            raise ValueError(f"beta must be in [0, 1], got {self.beta}")
        if not -1.0 < self.rho < 1.0:
            raise ValueError(f"rho must be in (-1, 1), got {self.rho}")
        if self.nu < 0:
            raise ValueError(f"nu must be non-negative, got {self.nu}")

    def volatility(self, forward: float, strike: ArrayLike, time: float) -> ArrayLike:
        return hagan_volatility(forward, strike, time, self.alpha, self.beta, self.rho, self.nu, self.shift)

    def with_values(self, **values) -> "SabrParameters":
        return replace(self, **values)

    def as_array(self) -> np.ndarray:
        return np.array([self.alpha, self.beta, self.rho, self.nu])


def _z_over_x(z: np.ndarray, rho: float) -> np.ndarray:
    small = np.abs(z) < Z_CUTOFF
    safe_z = np.where(small, 1.0, z)
    root = np.sqrt(1.0 - 2.0 * rho * safe_z + safe_z * safe_z)
    x = np.log((root + safe_z - rho) / (1.0 - rho))
    return np.where(small, 1.0 - 0.5 * rho * z, safe_z / x)


def hagan_volatility(
    forward: float,
    strike: ArrayLike,
    time: float,
    alpha: float,
    beta: float,
    rho: float,
    nu: float,
    shift: float = 0.0,
) -> ArrayLike:
    """Hagan lognormal implied volatility of the shifted forward and strikes.

    Args:
        forward: Forward rate
        strike: Strike or array of strikes
        time: Time to expiry in years
        alpha: Initial volatility
        beta: CEV exponent
        rho: Correlation
        nu: Volatility of volatility
        shift: Displacement applied to forward and strikes

    Returns:
        Implied volatility, same shape as ``strike``

    Raises:
        ValueError: If the shifted forward or a shifted strike is not positive
    """
    f = forward + shift
    k = np.asarray(strike, dtype=float) + shift
    if f <= 0 or np.any(k <= 0):
        raise ValueError(f"Shifted forward and strikes must be positive (shift {shift})")
    one_beta = 1.0 - beta
    log_fk = np.log(f / k)
    fk_beta = (f * k) ** (0.5 * one_beta)
    z = nu / alpha * fk_beta * log_fk
    denominator = fk_beta * (
        1.0 + one_beta ** 2 / 24.0 * log_fk ** 2 + one_beta ** 4 / 1920.0 * log_fk ** 4
    )
    correction = 1.0 + (
        one_beta ** 2 / 24.0 * alpha ** 2 / fk_beta ** 2
        + 0.25 * rho * beta * nu * alpha / fk_beta
        + (2.0 - 3.0 * rho ** 2) / 24.0 * nu ** 2
    ) * time
    volatility = alpha / denominator * _z_over_x(z, rho) * correction
    if np.ndim(strike) == 0:
        return float(volatility)
    return volatility
