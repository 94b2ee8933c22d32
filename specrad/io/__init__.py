"""
Input/output utilities.

This module provides:
- Absorber lookup tables (CSV, optional HDF5)
- Atmospheric column CSV files
- Flux and radiance export as pandas tables
"""

from specrad.io.tables import (
    AbsorptionTable,
    ContinuumTable,
    ParticleTable,
    CrossSectionTable,
    load_absorption_table,
    save_absorption_table,
    load_continuum_table,
    load_particle_table,
    load_cross_section_table,
)
from specrad.io.column import column_from_dataframe, load_column, save_column
from specrad.io.output import flux_dataframe, radiance_dataframe, save_dataframe

__all__ = [
    # Tables
    "AbsorptionTable",
    "ContinuumTable",
    "ParticleTable",
    "CrossSectionTable",
    "load_absorption_table",
    "save_absorption_table",
    "load_continuum_table",
    "load_particle_table",
    "load_cross_section_table",
    # Columns
    "column_from_dataframe",
    "load_column",
    "save_column",
    # Results
    "flux_dataframe",
    "radiance_dataframe",
    "save_dataframe",
]
