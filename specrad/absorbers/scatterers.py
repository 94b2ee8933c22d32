"""
Scattering constituents: molecular Rayleigh scattering and cloud/aerosol
particles.
"""

from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from specrad.absorbers.phase import henyey_greenstein_moments, rayleigh_moments
from specrad.core.abc import Absorber
from specrad.core.constants import RAYLEIGH_SIGMA_REF, RAYLEIGH_WAVENUMBER_REF
from specrad.core.interpolation import MultilinearTable, OutOfRangePolicy
from specrad.core.logging_config import get_logger
from specrad.io.tables import ParticleTable, load_particle_table

logger = get_logger("absorbers.scatterers")


class RayleighScatterer(Absorber):
    """
    Conservative Rayleigh scattering.

    sigma(nu) = sigma_ref * (nu / nu_ref)^4, averaged over the bin.

    Parameters
    ----------
    name : str
        Absorber name
    species : str, optional
        Scattering species; if None the whole gas scatters
    sigma_ref : float
        Cross section at ``wavenumber_ref`` in m^2 (air at 550 nm by default)
    wavenumber_ref : float
        Reference wavenumber in cm^-1
    n_samples : int
        Spectral sample points per bin
    """

    absorber_type = "rayleigh"

    def __init__(
        self,
        name: str,
        species: Optional[str] = None,
        sigma_ref: float = RAYLEIGH_SIGMA_REF,
        wavenumber_ref: float = RAYLEIGH_WAVENUMBER_REF,
        n_samples: int = 4,
    ):
        super().__init__(name)
        if sigma_ref < 0 or wavenumber_ref <= 0:
            raise ValueError("Rayleigh reference cross section and wavenumber must be positive")
        if n_samples < 1:
            raise ValueError("n_samples must be at least 1")
        self.species = species
        self.sigma_ref = float(sigma_ref)
        self.wavenumber_ref = float(wavenumber_ref)
        self.n_samples = int(n_samples)

    def cross_section(self, spectral_bin) -> float:
        waves = spectral_bin.sample(self.n_samples)
        return float(self.sigma_ref * np.mean((waves / self.wavenumber_ref) ** 4))

    def _scatterer_density(self, state) -> float:
        if self.species is None:
            return state.number_density
        return state.species_number_density(self.species)

    def attenuation(self, spectral_bin, state) -> float:
        return self.cross_section(spectral_bin) * self._scatterer_density(state)

    def attenuation_column(self, spectral_bin, states: Sequence) -> np.ndarray:
        density = np.array([self._scatterer_density(s) for s in states])
        return self.cross_section(spectral_bin) * density

    def single_scattering_albedo(self, spectral_bin, state) -> float:
        return 1.0

    def phase_moments(self, spectral_bin, state, count: int) -> np.ndarray:
        return rayleigh_moments(count)


class ParticleScatterer(Absorber):
    """
    Cloud or aerosol particles with tabulated single-scattering properties.

    The composition entry of ``species`` is read as particles per air
    molecule, so attenuation = sigma_ext * x_species * n_air. Within a bin the
    extinction is averaged over sample points, the albedo is
    extinction-weighted and the asymmetry factor scattering-weighted. Phase
    moments are Henyey-Greenstein.

    Parameters
    ----------
    name : str
        Absorber name
    table : ParticleTable
        Optical properties versus wavenumber
    species : str, optional
        Composition key (defaults to ``name``)
    n_samples : int
        Spectral sample points per bin
    policy : OutOfRangePolicy or str
        Edge policy for the wavenumber axis
    """

    absorber_type = "particle"

    def __init__(
        self,
        name: str,
        table: ParticleTable,
        species: Optional[str] = None,
        n_samples: int = 1,
        policy: Union[str, OutOfRangePolicy] = OutOfRangePolicy.CLAMP,
    ):
        if n_samples < 1:
            raise ValueError("n_samples must be at least 1")
        super().__init__(name, table.spectral_range)
        self.table = table
        self.species = species or name
        self.n_samples = int(n_samples)

        axes = [table.wavenumber]
        names = ["wavenumber"]
        self._extinction = MultilinearTable(
            axes, table.cross_section, names, policy, name=f"{name} extinction"
        )
        self._ssa = MultilinearTable(axes, table.ssa, names, policy, name=f"{name} albedo")
        self._asymmetry = MultilinearTable(
            axes, table.asymmetry, names, policy, name=f"{name} asymmetry"
        )
        logger.info(f"Created ParticleScatterer {name} ({self.species})")

    @classmethod
    def from_file(cls, name: str, path: Union[str, Path], **kwargs) -> "ParticleScatterer":
        return cls(name, load_particle_table(path), **kwargs)

    def _bin_properties(self, spectral_bin):
        """(extinction cross section, albedo, asymmetry) averaged over the bin."""
        points = spectral_bin.sample(self.n_samples)[:, None]
        ext = np.maximum(self._extinction(points), 0.0)
        ssa = np.clip(self._ssa(points), 0.0, 1.0)
        g = np.clip(self._asymmetry(points), -0.999999, 0.999999)

        ext_mean = float(ext.mean())
        if ext_mean == 0.0:
            return 0.0, float(ssa.mean()), float(g.mean())
        sca = ext * ssa
        ssa_mean = float(sca.sum() / ext.sum())
        g_mean = float((sca * g).sum() / sca.sum()) if sca.sum() > 0 else float(g.mean())
        return ext_mean, ssa_mean, g_mean

    def attenuation(self, spectral_bin, state) -> float:
        ext, _, _ = self._bin_properties(spectral_bin)
        return ext * state.species_number_density(self.species)

    def attenuation_column(self, spectral_bin, states: Sequence) -> np.ndarray:
        ext, _, _ = self._bin_properties(spectral_bin)
        return ext * np.array([s.species_number_density(self.species) for s in states])

    def single_scattering_albedo(self, spectral_bin, state) -> float:
        return self._bin_properties(spectral_bin)[1]

    def single_scattering_albedo_column(self, spectral_bin, states: Sequence) -> np.ndarray:
        return np.full(len(states), self._bin_properties(spectral_bin)[1])

    def asymmetry(self, spectral_bin) -> float:
        return self._bin_properties(spectral_bin)[2]

    def phase_moments(self, spectral_bin, state, count: int) -> np.ndarray:
        return henyey_greenstein_moments(self.asymmetry(spectral_bin), count)

    def phase_moments_column(self, spectral_bin, states: Sequence, count: int) -> np.ndarray:
        moments = henyey_greenstein_moments(self.asymmetry(spectral_bin), count)
        return np.tile(moments, (len(states), 1))
