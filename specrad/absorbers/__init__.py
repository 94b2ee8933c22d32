"""
Absorber implementations.

This module provides:
- ConstantAbsorber: gray absorber with fixed properties
- TabulatedAbsorber: line absorption from (wavenumber, p, T) cross-section tables
- ContinuumAbsorber: collision-induced continuum absorption
- RayleighScatterer: conservative molecular scattering
- ParticleScatterer: clouds and aerosols with Henyey-Greenstein phase moments
- PhotolysisAbsorber: branch-resolved photo-absorption
- Phase-moment helpers
"""

from specrad.absorbers.constant import ConstantAbsorber
from specrad.absorbers.tabulated import TabulatedAbsorber
from specrad.absorbers.continuum import ContinuumAbsorber
from specrad.absorbers.scatterers import RayleighScatterer, ParticleScatterer
from specrad.absorbers.photolysis import PhotolysisAbsorber
from specrad.absorbers.phase import (
    isotropic_moments,
    henyey_greenstein_moments,
    rayleigh_moments,
    pad_moments,
    phase_function,
    normalization_integral,
    check_normalization,
)

__all__ = [
    "ConstantAbsorber",
    "TabulatedAbsorber",
    "ContinuumAbsorber",
    "RayleighScatterer",
    "ParticleScatterer",
    "PhotolysisAbsorber",
    "isotropic_moments",
    "henyey_greenstein_moments",
    "rayleigh_moments",
    "pad_moments",
    "phase_function",
    "normalization_integral",
    "check_normalization",
]
