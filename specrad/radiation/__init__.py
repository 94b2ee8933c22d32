"""
Radiation bands, the shared-output container and solver adapters.

This module provides:
- RadiationBand: per-bin optical-property aggregation and solver delegation
- Radiation: container owning the flux/radiance arrays of all bands
- Solver adapter types and the Beer-Lambert solver
- Configuration builder and column-parallel batch driver
"""

from specrad.radiation.solver import (
    LayerRange,
    BandOptics,
    SolverOutputs,
    BoundaryConditions,
    BeerLambertSolver,
)
from specrad.radiation.band import RadiationBand
from specrad.radiation.radiation import Radiation
from specrad.radiation.builder import build_radiation, build_band, build_absorber
from specrad.radiation.batch import ColumnResult, compute_flux_columns, compute_radiance_columns

__all__ = [
    "LayerRange",
    "BandOptics",
    "SolverOutputs",
    "BoundaryConditions",
    "BeerLambertSolver",
    "RadiationBand",
    "Radiation",
    "build_radiation",
    "build_band",
    "build_absorber",
    "ColumnResult",
    "compute_flux_columns",
    "compute_radiance_columns",
]
