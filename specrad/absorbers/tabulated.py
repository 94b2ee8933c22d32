"""
Line-absorbing gas backed by an interpolated cross-section table.
"""

from pathlib import Path
from typing import Sequence, Union

import numpy as np

from specrad.core.abc import Absorber
from specrad.core.interpolation import MultilinearTable, OutOfRangePolicy
from specrad.core.logging_config import get_logger
from specrad.io.tables import AbsorptionTable, load_absorption_table

logger = get_logger("absorbers.tabulated")


class TabulatedAbsorber(Absorber):
    """
    Purely absorbing gas with cross sections on a (wavenumber, ln p, dT) grid.

    attenuation = sigma(nu, p, T - T_ref(p)) * x_species * n_air

    The cross section is interpolated multi-linearly in (wavenumber, ln p, dT)
    on ln(sigma) and averaged over ``n_samples`` evenly spaced points within
    the spectral bin.

    Parameters
    ----------
    name : str
        Absorber name
    table : AbsorptionTable
        Cross-section table
    species : str, optional
        Composition key of the absorbing gas (defaults to ``name``)
    n_samples : int
        Spectral sample points per bin
    policy : OutOfRangePolicy or str
        Edge policy for the pressure and temperature axes
    """

    absorber_type = "tabulated"

    def __init__(
        self,
        name: str,
        table: AbsorptionTable,
        species: str = None,
        n_samples: int = 1,
        policy: Union[str, OutOfRangePolicy] = OutOfRangePolicy.CLAMP,
    ):
        super().__init__(name, table.spectral_range)
        if n_samples < 1:
            raise ValueError("n_samples must be at least 1")

        self.table = table
        self.species = species or name
        self.n_samples = int(n_samples)

        self._ln_pressure = np.log(table.pressure)
        order = np.argsort(self._ln_pressure)
        self._ref_lnp = self._ln_pressure[order]
        self._ref_temperature = table.reference_temperature[order]

        self._lookup = MultilinearTable(
            [table.wavenumber, self._ln_pressure, table.temperature_anomaly],
            table.ln_cross_section,
            names=["wavenumber", "ln_pressure", "temperature_anomaly"],
            policy=policy,
            name=f"{name} cross sections",
        )

        logger.info(
            f"Created TabulatedAbsorber {name} ({self.species}): "
            f"{table.spectral_range[0]:.1f}-{table.spectral_range[1]:.1f} cm^-1"
        )

    @classmethod
    def from_file(cls, name: str, path: Union[str, Path], **kwargs) -> "TabulatedAbsorber":
        """Load the table from CSV/HDF5 and build the absorber."""
        return cls(name, load_absorption_table(path), **kwargs)

    @property
    def out_of_range_count(self) -> int:
        return self._lookup.out_of_range_count

    def reference_temperature(self, pressure: Union[float, np.ndarray]) -> np.ndarray:
        """Reference temperature at ``pressure`` (linear in ln p, clamped at the ends)."""
        return np.interp(np.log(pressure), self._ref_lnp, self._ref_temperature)

    def cross_section(self, spectral_bin, temperature, pressure) -> np.ndarray:
        """
        Bin-averaged cross section in m^2 for one or many (T, p) pairs.
        """
        temperature = np.atleast_1d(np.asarray(temperature, dtype=float))
        pressure = np.atleast_1d(np.asarray(pressure, dtype=float))
        waves = spectral_bin.sample(self.n_samples)

        lnp = np.log(pressure)
        dT = temperature - self.reference_temperature(pressure)

        points = np.empty((pressure.size, waves.size, 3))
        points[..., 0] = waves[None, :]
        points[..., 1] = lnp[:, None]
        points[..., 2] = dT[:, None]
        return np.exp(self._lookup(points)).mean(axis=1)

    def attenuation(self, spectral_bin, state) -> float:
        x = state.mole_fraction(self.species)
        if x == 0.0:
            return 0.0
        sigma = self.cross_section(spectral_bin, state.temperature, state.pressure)[0]
        return float(sigma * x * state.number_density)

    def attenuation_column(self, spectral_bin, states: Sequence) -> np.ndarray:
        x = np.array([s.mole_fraction(self.species) for s in states])
        if not np.any(x):
            return np.zeros(len(states))
        temperature = np.array([s.temperature for s in states])
        pressure = np.array([s.pressure for s in states])
        n_air = np.array([s.number_density for s in states])
        return self.cross_section(spectral_bin, temperature, pressure) * x * n_air
