"""
Phase-function moment utilities.

Moments follow the discrete-ordinate convention

    P(mu) = sum_l (2l + 1) chi_l P_l(mu),    chi_0 = 1

where P_l are Legendre polynomials and mu is the cosine of the scattering
angle. With chi_0 = 1 the phase function averages to one over the sphere and
its integral over mu in [-1, 1] equals 2.
"""

from typing import Sequence, Union

import numpy as np
from scipy.special import eval_legendre

from specrad.core.constants import PHASE_NORM_RTOL
from specrad.core.exceptions import ConfigurationError


def isotropic_moments(count: int) -> np.ndarray:
    """Moments of isotropic scattering: ``[1, 0, ..., 0]``."""
    moments = np.zeros(count + 1)
    moments[0] = 1.0
    return moments


def henyey_greenstein_moments(g: float, count: int) -> np.ndarray:
    """
    Moments of the Henyey-Greenstein phase function, ``chi_l = g^l``.

    Parameters
    ----------
    g : float
        Asymmetry factor in (-1, 1)
    count : int
        Highest moment order
    """
    if not -1.0 < g < 1.0:
        raise ValueError(f"Asymmetry factor must be in (-1, 1), got {g}")
    return np.power(float(g), np.arange(count + 1))


def rayleigh_moments(count: int) -> np.ndarray:
    """Moments of the Rayleigh phase function, P(mu) = 3/4 (1 + mu^2)."""
    moments = isotropic_moments(count)
    if count >= 2:
        moments[2] = 0.1
    return moments


def pad_moments(moments: Sequence[float], count: int) -> np.ndarray:
    """Zero-pad or truncate moments to ``count + 1`` entries."""
    moments = np.asarray(moments, dtype=float).ravel()
    out = np.zeros(count + 1)
    n = min(moments.size, count + 1)
    out[:n] = moments[:n]
    return out


def phase_function(moments: Sequence[float], mu: Union[float, np.ndarray]) -> np.ndarray:
    """Evaluate P(mu) from its moments."""
    moments = np.asarray(moments, dtype=float)
    mu = np.asarray(mu, dtype=float)
    result = np.zeros_like(mu)
    for order, chi in enumerate(moments):
        if chi != 0.0:
            result = result + (2 * order + 1) * chi * eval_legendre(order, mu)
    return result


def normalization_integral(moments: Sequence[float]) -> float:
    """
    Integral of P(mu) over mu in [-1, 1].

    Gauss-Legendre quadrature with enough nodes to be exact for the
    polynomial degree of the expansion.
    """
    moments = np.asarray(moments, dtype=float)
    nodes, weights = np.polynomial.legendre.leggauss(max(moments.size, 2))
    return float(np.sum(weights * phase_function(moments, nodes)))


def check_normalization(moments: Sequence[float], rtol: float = PHASE_NORM_RTOL) -> np.ndarray:
    """
    Validate a moment sequence.

    Returns the moments as an array.

    Raises
    ------
    ConfigurationError
        If chi_0 != 1, the normalization integral differs from 2, or any
        moment lies outside [-1, 1]
    """
    moments = np.asarray(moments, dtype=float).ravel()
    if moments.size == 0:
        raise ConfigurationError("Phase moments must contain at least chi_0")
    if not np.isclose(moments[0], 1.0, rtol=rtol, atol=0.0):
        raise ConfigurationError(f"Zero-order phase moment must be 1, got {moments[0]}")
    if np.any(np.abs(moments) > 1.0 + rtol):
        raise ConfigurationError("Phase moments must lie in [-1, 1]")
    integral = normalization_integral(moments)
    if not np.isclose(integral, 2.0, rtol=rtol, atol=0.0):
        raise ConfigurationError(f"Phase function integrates to {integral:.8g}, expected 2")
    return moments
