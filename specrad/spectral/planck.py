"""
Planck function in wavenumber form.
"""

from typing import Union

import numpy as np
from scipy import integrate

from specrad.core.constants import C1_WAVENUMBER, C2_WAVENUMBER
from specrad.spectral.bins import SpectralBin


def planck_wavenumber(
    wavenumber: Union[float, np.ndarray], temperature: float
) -> Union[float, np.ndarray]:
    """
    Spectral radiance of a blackbody.

    B(nu, T) = C1 nu^3 / (exp(C2 nu / T) - 1)

    Parameters
    ----------
    wavenumber : float or array
        Wavenumber(s) in cm^-1
    temperature : float
        Temperature in K

    Returns
    -------
    float or array
        Radiance in W m^-2 sr^-1 (cm^-1)^-1; zero for T <= 0
    """
    nu = np.asarray(wavenumber, dtype=float)
    if temperature <= 0:
        result = np.zeros_like(nu)
    else:
        x = C2_WAVENUMBER * nu / temperature
        with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
            result = np.where(x > 0, C1_WAVENUMBER * nu**3 / np.expm1(x), 0.0)
        result = np.nan_to_num(result, nan=0.0, posinf=0.0)
    if result.ndim == 0:
        return float(result)
    return result


def planck_bin_average(spectral_bin: SpectralBin, temperature: float) -> float:
    """
    Blackbody radiance averaged over a spectral bin.

    Parameters
    ----------
    spectral_bin : SpectralBin
        Integration interval
    temperature : float
        Temperature in K

    Returns
    -------
    float
        Mean radiance over the bin in W m^-2 sr^-1 (cm^-1)^-1
    """
    if temperature <= 0:
        return 0.0
    value, _ = integrate.quad(
        planck_wavenumber, spectral_bin.wave1, spectral_bin.wave2, args=(temperature,)
    )
    return value / spectral_bin.width
