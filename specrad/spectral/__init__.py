"""
Spectral discretization.

This module provides:
- SpectralBin: half-open wavenumber interval
- Spectral grids (regular, custom edges, correlated-k) with their
  integration and averaging weights
- Planck function helpers for thermal sources
"""

from specrad.spectral.bins import SpectralBin
from specrad.spectral.grid import (
    SpectralGrid,
    CustomGrid,
    RegularGrid,
    CorrelatedKGrid,
    grid_from_bins,
)
from specrad.spectral.planck import planck_wavenumber, planck_bin_average

__all__ = [
    "SpectralBin",
    "SpectralGrid",
    "CustomGrid",
    "RegularGrid",
    "CorrelatedKGrid",
    "grid_from_bins",
    "planck_wavenumber",
    "planck_bin_average",
]
