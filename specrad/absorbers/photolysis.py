"""
Photo-absorbing species with branch-resolved cross sections.
"""

from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from specrad.core.abc import Absorber
from specrad.core.interpolation import MultilinearTable, OutOfRangePolicy
from specrad.core.logging_config import get_logger
from specrad.io.tables import CrossSectionTable, load_cross_section_table

logger = get_logger("absorbers.photolysis")


class PhotolysisAbsorber(Absorber):
    """
    Ultraviolet/visible photo-absorber.

    attenuation = sigma_total(nu) * x_species * n_air

    The branch cross sections are kept so that downstream chemistry can split
    the absorbed photons among product channels.

    Parameters
    ----------
    name : str
        Absorber name
    table : CrossSectionTable
        Per-branch cross sections (normalized at load time)
    species : str, optional
        Composition key (defaults to ``name``)
    n_samples : int
        Spectral sample points per bin
    policy : OutOfRangePolicy or str
        Edge policy for the wavenumber axis
    """

    absorber_type = "photolysis"

    def __init__(
        self,
        name: str,
        table: CrossSectionTable,
        species: Optional[str] = None,
        n_samples: int = 4,
        policy: Union[str, OutOfRangePolicy] = OutOfRangePolicy.CLAMP,
    ):
        if n_samples < 1:
            raise ValueError("n_samples must be at least 1")
        super().__init__(name, table.spectral_range)
        self.table = table
        self.species = species or name
        self.n_samples = int(n_samples)
        self._branches = [
            MultilinearTable(
                [table.wavenumber],
                table.cross_sections[i],
                ["wavenumber"],
                policy,
                name=f"{name}:{branch}",
            )
            for i, branch in enumerate(table.branches)
        ]
        logger.info(
            f"Created PhotolysisAbsorber {name} with branches {', '.join(table.branches)}"
        )

    @classmethod
    def from_file(
        cls, name: str, path: Union[str, Path], format: str = "branches", **kwargs
    ) -> "PhotolysisAbsorber":
        return cls(name, load_cross_section_table(path, format), **kwargs)

    @property
    def branches(self):
        return self.table.branches

    def branch_cross_sections(self, spectral_bin) -> np.ndarray:
        """Bin-averaged cross section of each branch in m^2."""
        points = spectral_bin.sample(self.n_samples)[:, None]
        return np.array([max(float(t(points).mean()), 0.0) for t in self._branches])

    def branch_ratios(self, spectral_bin) -> np.ndarray:
        """Fraction of absorbed photons going to each branch (zeros if nothing absorbs)."""
        xs = self.branch_cross_sections(spectral_bin)
        total = xs.sum()
        if total == 0.0:
            return np.zeros_like(xs)
        return xs / total

    def total_cross_section(self, spectral_bin) -> float:
        return float(self.branch_cross_sections(spectral_bin).sum())

    def attenuation(self, spectral_bin, state) -> float:
        return self.total_cross_section(spectral_bin) * state.species_number_density(self.species)

    def attenuation_column(self, spectral_bin, states: Sequence) -> np.ndarray:
        sigma = self.total_cross_section(spectral_bin)
        return sigma * np.array([s.species_number_density(self.species) for s in states])
