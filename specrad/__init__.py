"""
specrad: spectral optical-property engine for atmospheric radiative transfer

Combines the optical properties of many atmospheric absorbers over the spectral
bins of each radiation band, hands the resulting per-layer tensors to a
pluggable radiative-transfer solver and gathers band fluxes and radiances into
shared, column-indexed output arrays.
"""

__version__ = "0.1.0"
__author__ = "specrad developers"

# Core imports for convenience
from specrad.core import constants
from specrad.core import units

__all__ = [
    "constants",
    "units",
]
