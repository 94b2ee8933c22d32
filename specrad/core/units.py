"""
Unit conversion utilities for specrad.

The engine works internally in wavenumber (cm^-1), pressure in Pa and
temperature in K; these helpers convert configuration and table inputs.
"""

import numpy as np
from typing import Union

# ============================================================================
# Spectral Conversions
# ============================================================================

_LENGTH_TO_M = {
    "m": 1.0,
    "cm": 1.0e-2,
    "um": 1.0e-6,
    "μm": 1.0e-6,
    "nm": 1.0e-9,
    "a": 1.0e-10,
    "angstrom": 1.0e-10,
}

_WAVENUMBER_UNITS = ["cm^-1", "cm-1", "wavenumber"]


def convert_spectral(
    value: Union[float, np.ndarray], from_unit: str, to_unit: str
) -> Union[float, np.ndarray]:
    """
    Convert a spectral coordinate between wavelength and wavenumber units.

    Parameters
    ----------
    value : float or array
        Spectral coordinate(s) to convert
    from_unit : str
        Source unit: 'm', 'cm', 'um', 'nm', 'A' (Angstrom), 'cm^-1'
    to_unit : str
        Target unit: 'm', 'cm', 'um', 'nm', 'A' (Angstrom), 'cm^-1'

    Returns
    -------
    float or array
        Converted value(s)

    Examples
    --------
    >>> convert_spectral(500.0, 'nm', 'cm^-1')
    20000.0
    >>> convert_spectral(1000.0, 'cm^-1', 'um')
    10.0
    """
    src = from_unit.lower()
    dst = to_unit.lower()

    # Normalize to meters of wavelength
    if src in _WAVENUMBER_UNITS:
        meters = 1.0 / (np.asarray(value, dtype=float) * 100.0)
    elif src in _LENGTH_TO_M:
        meters = np.asarray(value, dtype=float) * _LENGTH_TO_M[src]
    else:
        raise ValueError(f"Unknown source unit: {from_unit}")

    if dst in _WAVENUMBER_UNITS:
        result = 1.0 / (meters * 100.0)
    elif dst in _LENGTH_TO_M:
        result = meters / _LENGTH_TO_M[dst]
    else:
        raise ValueError(f"Unknown target unit: {to_unit}")

    if np.ndim(result) == 0:
        return float(result)
    return result


def wavelength_nm_to_wavenumber(wavelength_nm: Union[float, np.ndarray]):
    """Convert wavelength in nm to wavenumber in cm^-1."""
    return convert_spectral(wavelength_nm, "nm", "cm^-1")


def wavenumber_to_wavelength_nm(wavenumber: Union[float, np.ndarray]):
    """Convert wavenumber in cm^-1 to wavelength in nm."""
    return convert_spectral(wavenumber, "cm^-1", "nm")


# ============================================================================
# Pressure Conversions
# ============================================================================

_PRESSURE_TO_PA = {
    "pa": 1.0,
    "hpa": 100.0,
    "mbar": 100.0,
    "bar": 1.0e5,
    "atm": 101325.0,
}


def convert_pressure(
    value: Union[float, np.ndarray], from_unit: str, to_unit: str
) -> Union[float, np.ndarray]:
    """
    Convert pressure between units.

    Parameters
    ----------
    value : float or array
        Pressure value(s)
    from_unit : str
        Source unit: 'Pa', 'hPa', 'mbar', 'bar', 'atm'
    to_unit : str
        Target unit: 'Pa', 'hPa', 'mbar', 'bar', 'atm'

    Returns
    -------
    float or array
        Converted pressure value(s)
    """
    try:
        factor_in = _PRESSURE_TO_PA[from_unit.lower()]
    except KeyError:
        raise ValueError(f"Unknown source unit: {from_unit}") from None
    try:
        factor_out = _PRESSURE_TO_PA[to_unit.lower()]
    except KeyError:
        raise ValueError(f"Unknown target unit: {to_unit}") from None

    return value * factor_in / factor_out
