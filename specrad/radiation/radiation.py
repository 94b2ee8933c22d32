"""
Radiation container: shared output arenas for a set of bands.

The container allocates one contiguous array per output quantity,

    flxup, flxdn : (nband, ncol, nlevel)
    radiance     : (nband, ncol, ndir)

and hands band ``b`` the views ``arena[b]``. Bands write only into their own
view, and within a band each column writes only its own row, so bands and
columns can be computed independently without locking.
"""

import copy
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from specrad.atmosphere.state import Column
from specrad.core.constants import CP_DRY_AIR
from specrad.core.exceptions import ConfigurationError
from specrad.core.logging_config import get_logger
from specrad.radiation.band import RadiationBand
from specrad.radiation.solver import LayerRange

logger = get_logger("radiation.radiation")


class Radiation:
    """
    Ordered collection of radiation bands with shared flux/radiance storage.

    Parameters
    ----------
    bands : sequence of RadiationBand
        Bands, evaluated in the given order
    nlayer : int
        Number of layers of every column
    ncol : int
        Number of columns held in the output arrays
    directions : sequence of (mu, phi)
        Viewing directions for TOA radiance; mu in (0, 1], phi in degrees

    Raises
    ------
    ConfigurationError
        On duplicate band names, a band already owned by another container,
        or overlapping output views
    """

    def __init__(
        self,
        bands: Sequence[RadiationBand],
        nlayer: int,
        ncol: int = 1,
        directions: Sequence[Sequence[float]] = ((1.0, 0.0),),
        *,
        _arenas: Optional[Tuple[np.ndarray, np.ndarray, np.ndarray]] = None,
    ):
        if nlayer <= 0:
            raise ConfigurationError(f"nlayer must be positive, got {nlayer}")
        if ncol <= 0:
            raise ConfigurationError(f"ncol must be positive, got {ncol}")

        directions = np.atleast_2d(np.asarray(directions, dtype=float))
        if directions.ndim != 2 or directions.shape[1] != 2 or directions.shape[0] == 0:
            raise ConfigurationError("directions must be a non-empty list of (mu, phi) pairs")
        if np.any(directions[:, 0] <= 0) or np.any(directions[:, 0] > 1):
            raise ConfigurationError("direction cosines mu must be in (0, 1]")

        names = [b.name for b in bands]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate band names: {', '.join(duplicates)}")
        for band in bands:
            if band.owner is not None:
                raise ConfigurationError(f"Band {band.name} already belongs to a container")

        self.nlayer = int(nlayer)
        self.ncol = int(ncol)
        self.directions = directions
        self._bands: List[RadiationBand] = list(bands)

        nband, nlevel, ndir = len(self._bands), self.nlayer + 1, directions.shape[0]
        if _arenas is None:
            self.flxup = np.zeros((nband, self.ncol, nlevel))
            self.flxdn = np.zeros((nband, self.ncol, nlevel))
            self.radiance = np.zeros((nband, self.ncol, ndir))
        else:
            self.flxup, self.flxdn, self.radiance = _arenas

        for b, band in enumerate(self._bands):
            band.attach(self, self.flxup[b], self.flxdn[b], self.radiance[b], self.directions)
        self._check_views()

        if _arenas is None:
            logger.info(
                f"Allocated Radiation: {nband} bands, {self.ncol} columns, "
                f"{nlevel} levels, {ndir} directions"
            )

    def _check_views(self) -> None:
        for i, a in enumerate(self._bands):
            for b in self._bands[i + 1 :]:
                for label in ("bflxup", "bflxdn", "btoa"):
                    if np.shares_memory(getattr(a, label), getattr(b, label)):
                        raise ConfigurationError(
                            f"Bands {a.name} and {b.name} share {label} storage"
                        )

    @classmethod
    def from_config(
        cls, config: Dict[str, Any], base_dir: Optional[Union[str, Path]] = None
    ) -> "Radiation":
        """Build a container from a configuration dictionary (see ``build_radiation``)."""
        from specrad.radiation.builder import build_radiation

        return build_radiation(config, base_dir)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def bands(self) -> List[RadiationBand]:
        return list(self._bands)

    @property
    def band_names(self) -> List[str]:
        return [b.name for b in self._bands]

    @property
    def nlevel(self) -> int:
        return self.nlayer + 1

    def band(self, name: str) -> RadiationBand:
        for b in self._bands:
            if b.name == name:
                return b
        raise KeyError(f"No band named {name}")

    def __len__(self) -> int:
        return len(self._bands)

    def __iter__(self) -> Iterator[RadiationBand]:
        return iter(self._bands)

    def _check_column(self, column: Column, column_index: int) -> None:
        if column.nlayer != self.nlayer:
            raise ConfigurationError(
                f"Column has {column.nlayer} layers, Radiation expects {self.nlayer}"
            )
        if not 0 <= column_index < self.ncol:
            raise IndexError(f"Column index {column_index} outside [0, {self.ncol})")

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def cal_flux(
        self,
        column: Column,
        column_index: int = 0,
        layer_range: Optional[LayerRange] = None,
    ) -> "Radiation":
        """Optical properties and band fluxes of one column for every band."""
        self._check_column(column, column_index)
        logger.debug(f"Fluxes for column {column_index}")
        for band in self._bands:
            band.set_spectral_properties(column)
            band.cal_band_flux(column_index, layer_range, column)
        return self

    def cal_radiance(self, column: Column, column_index: int = 0) -> "Radiation":
        """Optical properties and TOA radiances of one column for every band."""
        self._check_column(column, column_index)
        logger.debug(f"Radiances for column {column_index}")
        for band in self._bands:
            band.set_spectral_properties(column)
            band.cal_band_radiance(column_index, None, column)
        return self

    # ------------------------------------------------------------------
    # Derived outputs
    # ------------------------------------------------------------------

    def total_flux_up(self, column_index: int = 0) -> np.ndarray:
        """Upward flux per level summed over bands, W/m^2."""
        return self.flxup[:, column_index].sum(axis=0)

    def total_flux_down(self, column_index: int = 0) -> np.ndarray:
        """Downward flux per level summed over bands, W/m^2."""
        return self.flxdn[:, column_index].sum(axis=0)

    def net_flux(self, column_index: int = 0) -> np.ndarray:
        """Net upward flux per level (up minus down), W/m^2."""
        return self.total_flux_up(column_index) - self.total_flux_down(column_index)

    def heating_rate(
        self, column: Column, column_index: int = 0, cp: Optional[float] = None
    ) -> np.ndarray:
        """
        Radiative heating rate of each layer in K/s.

        dT/dt = (F_net[i + 1] - F_net[i]) / (rho_i * cp * dz_i)

        with F_net the net upward flux and level ``i`` the top of layer ``i``.
        Layers of zero thickness get zero heating.

        Parameters
        ----------
        column : Column
            Column the fluxes were computed for
        column_index : int
            Output row
        cp : float, optional
            Specific heat at constant pressure in J/(kg K); dry air if None
        """
        self._check_column(column, column_index)
        cp = CP_DRY_AIR if cp is None else cp
        net = self.net_flux(column_index)
        rho = np.array([s.mass_density for s in column])
        mass = rho * column.thickness
        divergence = net[1:] - net[:-1]
        rate = np.zeros(self.nlayer)
        np.divide(divergence, mass * cp, out=rate, where=mass > 0)
        return rate

    def spawn_worker(self) -> "Radiation":
        """
        Clone for a column-parallel worker.

        The clone writes into the same output arrays and shares grids and
        absorbers, but has its own band working storage and solver copies.
        Workers must process disjoint column indices.
        """
        bands = [
            RadiationBand(
                b.name,
                b.grid,
                b.absorbers,
                solver=copy.deepcopy(b.solver),
                npmom=b.npmom,
                nlayer=self.nlayer,
            )
            for b in self._bands
        ]
        return Radiation(
            bands,
            self.nlayer,
            self.ncol,
            self.directions,
            _arenas=(self.flxup, self.flxdn, self.radiance),
        )

    def reset(self) -> None:
        """Zero every output array."""
        self.flxup.fill(0.0)
        self.flxdn.fill(0.0)
        self.radiance.fill(0.0)

    def __repr__(self) -> str:
        return (
            f"Radiation(bands={self.band_names}, nlayer={self.nlayer}, ncol={self.ncol}, "
            f"ndir={self.directions.shape[0]})"
        )
