"""
Continuum (collision-induced) absorption.
"""

from pathlib import Path
from typing import Sequence, Tuple, Union

import numpy as np

from specrad.core.abc import Absorber
from specrad.core.interpolation import MultilinearTable, OutOfRangePolicy
from specrad.core.logging_config import get_logger
from specrad.io.tables import ContinuumTable, load_continuum_table

logger = get_logger("absorbers.continuum")


class ContinuumAbsorber(Absorber):
    """
    Binary continuum absorber.

    attenuation = k(nu, T) * n_a * n_b

    where ``k`` is the binary absorption coefficient (m^5) interpolated in
    (wavenumber, T) on ln k, and n_a, n_b are the number densities of the
    collision partners.

    Parameters
    ----------
    name : str
        Absorber name
    table : ContinuumTable
        Coefficient table
    pair : tuple of str
        Composition keys of the two collision partners, e.g. ("N2", "N2")
    n_samples : int
        Spectral sample points per bin
    policy : OutOfRangePolicy or str
        Edge policy
    """

    absorber_type = "continuum"

    def __init__(
        self,
        name: str,
        table: ContinuumTable,
        pair: Tuple[str, str],
        n_samples: int = 1,
        policy: Union[str, OutOfRangePolicy] = OutOfRangePolicy.CLAMP,
    ):
        super().__init__(name, table.spectral_range)
        if len(pair) != 2:
            raise ValueError(f"Continuum absorber {name} needs exactly two collision partners")
        if n_samples < 1:
            raise ValueError("n_samples must be at least 1")

        self.table = table
        self.pair = (str(pair[0]), str(pair[1]))
        self.n_samples = int(n_samples)
        self._lookup = MultilinearTable(
            [table.wavenumber, table.temperature],
            table.ln_coefficient,
            names=["wavenumber", "temperature"],
            policy=policy,
            name=f"{name} continuum",
        )
        logger.info(f"Created ContinuumAbsorber {name} for pair {self.pair[0]}-{self.pair[1]}")

    @classmethod
    def from_file(cls, name: str, path: Union[str, Path], **kwargs) -> "ContinuumAbsorber":
        return cls(name, load_continuum_table(path), **kwargs)

    def coefficient(self, spectral_bin, temperature) -> np.ndarray:
        """Bin-averaged binary coefficient in m^5 for one or many temperatures."""
        temperature = np.atleast_1d(np.asarray(temperature, dtype=float))
        waves = spectral_bin.sample(self.n_samples)
        points = np.empty((temperature.size, waves.size, 2))
        points[..., 0] = waves[None, :]
        points[..., 1] = temperature[:, None]
        return np.exp(self._lookup(points)).mean(axis=1)

    def attenuation(self, spectral_bin, state) -> float:
        n_a = state.species_number_density(self.pair[0])
        n_b = state.species_number_density(self.pair[1])
        if n_a == 0.0 or n_b == 0.0:
            return 0.0
        return float(self.coefficient(spectral_bin, state.temperature)[0] * n_a * n_b)

    def attenuation_column(self, spectral_bin, states: Sequence) -> np.ndarray:
        n_a = np.array([s.species_number_density(self.pair[0]) for s in states])
        n_b = np.array([s.species_number_density(self.pair[1]) for s in states])
        if not np.any(n_a * n_b):
            return np.zeros(len(states))
        temperature = np.array([s.temperature for s in states])
        return self.coefficient(spectral_bin, temperature) * n_a * n_b
