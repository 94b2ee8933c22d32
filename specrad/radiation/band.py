"""
Radiation band: per-bin optical-property aggregation and solver delegation.

For every bin m of the band's grid and every layer i of a column the band
superposes its absorbers:

    tau_[m, i]     += k * dz
    ssa_[m, i]     += w * k * dz
    pmom_[m, i, :] += chi * (w * k * dz)

and then normalizes: the albedo is ``ssa_ / tau_`` and the moments are
``pmom_ / ssa_``, so that the zero-order moment is exactly one. Layers with
zero extinction get albedo 0; layers without scattering get isotropic moments
``[1, 0, ..., 0]``.

Band aggregates ``btau``, ``bssa`` and ``bpmom`` combine the bins with the
grid's normalized weights; the albedo is extinction weighted and the moments
scattering weighted.
"""

from typing import List, Optional, Sequence

import numpy as np

from specrad.atmosphere.state import Column
from specrad.core.abc import Absorber, RTSolver
from specrad.core.exceptions import ConfigurationError, SolverError
from specrad.core.logging_config import get_logger
from specrad.radiation.solver import BandOptics, LayerRange, SolverOutputs
from specrad.spectral.grid import SpectralGrid

logger = get_logger("radiation.band")


class RadiationBand:
    """
    One spectral band: a grid, its absorbers and a solver.

    Parameters
    ----------
    name : str
        Band name, unique within a Radiation container
    grid : SpectralGrid
        Spectral bins of the band
    absorbers : sequence of Absorber
        Constituents contributing to the band's optics
    solver : RTSolver, optional
        Solver used by ``cal_band_flux``/``cal_band_radiance``
    npmom : int
        Highest phase-moment order kept
    nlayer : int, optional
        Layer count; if None it is taken from the first column

    Raises
    ------
    ConfigurationError
        If absorber names repeat or an absorber does not cover the band range
    """

    def __init__(
        self,
        name: str,
        grid: SpectralGrid,
        absorbers: Sequence[Absorber] = (),
        solver: Optional[RTSolver] = None,
        npmom: int = 4,
        nlayer: Optional[int] = None,
    ):
        if not name:
            raise ConfigurationError("Band name must be non-empty")
        if npmom < 0:
            raise ConfigurationError(f"Band {name}: npmom must be non-negative")

        self.name = name
        self.grid = grid
        self.npmom = int(npmom)
        self.solver = solver
        self._absorbers: List[Absorber] = []
        for absorber in absorbers:
            self.add_absorber(absorber)

        self._nlayer: Optional[int] = None
        self.tau_: Optional[np.ndarray] = None
        self.ssa_: Optional[np.ndarray] = None
        self.pmom_: Optional[np.ndarray] = None
        self.btau: Optional[np.ndarray] = None
        self.bssa: Optional[np.ndarray] = None
        self.bpmom: Optional[np.ndarray] = None

        # Output views, attached by Radiation or allocate_outputs
        self.bflxup: Optional[np.ndarray] = None
        self.bflxdn: Optional[np.ndarray] = None
        self.btoa: Optional[np.ndarray] = None
        self.directions = np.array([[1.0, 0.0]])
        self._owner = None
        self._column: Optional[Column] = None

        if nlayer is not None:
            self._resize(nlayer)

        logger.debug(
            f"Created band {name}: {len(grid)} {grid.grid_type} bins "
            f"[{grid.wmin:.6g}, {grid.wmax:.6g}) cm^-1, {len(self._absorbers)} absorbers"
        )

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def add_absorber(self, absorber: Absorber) -> "RadiationBand":
        """Append an absorber after checking its name and spectral coverage."""
        if any(a.name == absorber.name for a in self._absorbers):
            raise ConfigurationError(f"Band {self.name}: duplicate absorber name {absorber.name}")
        if not absorber.covers(self.grid.wmin, self.grid.wmax):
            lo, hi = absorber.spectral_range
            raise ConfigurationError(
                f"Band {self.name}: absorber {absorber.name} covers [{lo:.6g}, {hi:.6g}] "
                f"cm^-1 but the band spans [{self.grid.wmin:.6g}, {self.grid.wmax:.6g}]"
            )
        self._absorbers.append(absorber)
        return self

    @property
    def absorbers(self) -> List[Absorber]:
        return list(self._absorbers)

    def absorber(self, name: str) -> Absorber:
        for a in self._absorbers:
            if a.name == name:
                return a
        raise KeyError(f"Band {self.name} has no absorber {name}")

    @property
    def nbin(self) -> int:
        return len(self.grid)

    @property
    def nlayer(self) -> Optional[int]:
        return self._nlayer

    @property
    def nlevel(self) -> Optional[int]:
        return None if self._nlayer is None else self._nlayer + 1

    def _resize(self, nlayer: int) -> None:
        if nlayer <= 0:
            raise ConfigurationError(f"Band {self.name}: nlayer must be positive")
        if nlayer == self._nlayer:
            return
        nbin, nmom = self.nbin, self.npmom + 1
        self._nlayer = nlayer
        self.tau_ = np.zeros((nbin, nlayer))
        self.ssa_ = np.zeros((nbin, nlayer))
        self.pmom_ = np.zeros((nbin, nlayer, nmom))
        self.btau = np.zeros(nlayer)
        self.bssa = np.zeros(nlayer)
        self.bpmom = np.zeros((nlayer, nmom))

    def _check_column(self, column: Column) -> None:
        if self._nlayer is None:
            self._resize(column.nlayer)
        elif column.nlayer != self._nlayer:
            if self._owner is not None or self.bflxup is not None:
                raise ConfigurationError(
                    f"Band {self.name}: column has {column.nlayer} layers, "
                    f"expected {self._nlayer}"
                )
            self._resize(column.nlayer)

    # ------------------------------------------------------------------
    # Optical properties
    # ------------------------------------------------------------------

    def accumulate(self, column: Column) -> "RadiationBand":
        """
        Reset the per-bin tensors and superpose every absorber's contribution.

        After this call ``ssa_`` and ``pmom_`` hold the scattering-weighted
        accumulators, not yet normalized.
        """
        self._check_column(column)
        self.tau_.fill(0.0)
        self.ssa_.fill(0.0)
        self.pmom_.fill(0.0)

        states = column.layers
        dz = column.thickness
        for m, spectral_bin in enumerate(self.grid):
            for absorber in self._absorbers:
                kdz = absorber.attenuation_column(spectral_bin, states) * dz
                if not np.any(kdz):
                    continue
                self.tau_[m] += kdz
                scat = absorber.single_scattering_albedo_column(spectral_bin, states) * kdz
                if not np.any(scat):
                    continue
                self.ssa_[m] += scat
                moments = absorber.phase_moments_column(spectral_bin, states, self.npmom)
                self.pmom_[m] += moments * scat[:, None]

        self._column = column
        return self

    def normalize(self) -> "RadiationBand":
        """Turn the accumulators into albedo and phase moments in place."""
        tau, scat = self.tau_, self.ssa_.copy()
        has_ext = tau > 0
        has_scat = scat > 0

        np.divide(scat, tau, out=self.ssa_, where=has_ext)
        self.ssa_[~has_ext] = 0.0
        np.clip(self.ssa_, 0.0, 1.0, out=self.ssa_)

        np.divide(self.pmom_, scat[..., None], out=self.pmom_, where=has_scat[..., None])
        self.pmom_[~has_scat] = 0.0
        self.pmom_[~has_scat, 0] = 1.0
        self.pmom_[..., 0] = 1.0
        return self

    def aggregate(self) -> "RadiationBand":
        """Combine the normalized per-bin properties into band aggregates."""
        w = self.grid.normalized_weights
        ext = self.tau_
        sca = self.ssa_ * ext

        self.btau[:] = w @ ext
        bsca = w @ sca
        np.divide(bsca, self.btau, out=self.bssa, where=self.btau > 0)
        self.bssa[self.btau <= 0] = 0.0

        weighted = np.einsum("m,ml,mlk->lk", w, sca, self.pmom_)
        np.divide(weighted, bsca[:, None], out=self.bpmom, where=bsca[:, None] > 0)
        self.bpmom[bsca <= 0] = 0.0
        self.bpmom[:, 0] = 1.0
        return self

    def set_spectral_properties(self, column: Column) -> "RadiationBand":
        """Accumulate, normalize and aggregate the optics of ``column``."""
        logger.debug(f"Band {self.name}: optical properties for {column.nlayer} layers")
        return self.accumulate(column).normalize().aggregate()

    def optics(self) -> BandOptics:
        """The per-bin tensors handed to the solver (references, not copies)."""
        if self.tau_ is None:
            raise ConfigurationError(f"Band {self.name}: no optical properties computed yet")
        return BandOptics(
            tau=self.tau_,
            ssa=self.ssa_,
            pmom=self.pmom_,
            bins=self.grid.bins,
            weights=self.grid.weights,
        )

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def attach(
        self,
        owner,
        flxup: np.ndarray,
        flxdn: np.ndarray,
        toa: np.ndarray,
        directions: np.ndarray,
    ) -> None:
        """Bind output views owned by a Radiation container."""
        if self._owner is not None and self._owner is not owner:
            raise ConfigurationError(f"Band {self.name} already belongs to another container")
        ncol, nlevel = flxup.shape
        self._resize(nlevel - 1)
        self._owner = owner
        self.bflxup = flxup
        self.bflxdn = flxdn
        self.btoa = toa
        self.directions = directions

    def allocate_outputs(self, nlevel: int, ncol: int = 1, ndir: int = 1) -> "RadiationBand":
        """Allocate private output buffers for stand-alone use."""
        if self._owner is not None:
            raise ConfigurationError(f"Band {self.name} outputs are owned by a container")
        self._resize(nlevel - 1)
        self.bflxup = np.zeros((ncol, nlevel))
        self.bflxdn = np.zeros((ncol, nlevel))
        self.btoa = np.zeros((ncol, ndir))
        if self.directions.shape[0] != ndir:
            self.directions = np.column_stack([np.ones(ndir), np.zeros(ndir)])
        return self

    @property
    def owner(self):
        return self._owner

    def _require_outputs(self, column_index: int) -> None:
        if self._nlayer is None:
            raise ConfigurationError(f"Band {self.name}: set_spectral_properties was not called")
        if self.bflxup is None:
            self.allocate_outputs(self.nlevel)
        ncol = self.bflxup.shape[0]
        if not 0 <= column_index < ncol:
            raise IndexError(f"Band {self.name}: column index {column_index} outside [0, {ncol})")

    def _solve(
        self, column: Optional[Column], column_index: int, layer_range, outputs: SolverOutputs
    ) -> None:
        if self.solver is None:
            raise ConfigurationError(f"Band {self.name} has no solver")
        column = column if column is not None else self._column
        if column is None:
            raise ConfigurationError(f"Band {self.name}: set_spectral_properties was not called")
        try:
            self.solver.prepare(self.optics(), column, column_index)
            self.solver.compute(layer_range, outputs)
        except SolverError as exc:
            logger.warning(f"Band {self.name}, column {column_index}: {exc}")
            raise SolverError(exc.code, exc.detail, band=self.name) from exc

    def cal_band_flux(
        self,
        column_index: int = 0,
        layer_range: Optional[LayerRange] = None,
        column: Optional[Column] = None,
    ) -> "RadiationBand":
        """
        Zero the flux views over ``layer_range`` and run the solver.

        Levels outside the range are left untouched. On a solver failure the
        zeroed levels stay zero and the error propagates with the band name.
        """
        self._require_outputs(column_index)
        if layer_range is None:
            layer_range = LayerRange.full(self._nlayer)
        flxup = self.bflxup[column_index]
        flxdn = self.bflxdn[column_index]
        flxup[layer_range.level_slice] = 0.0
        flxdn[layer_range.level_slice] = 0.0

        self._solve(column, column_index, layer_range, SolverOutputs(flxup=flxup, flxdn=flxdn))
        return self

    def cal_band_radiance(
        self,
        column_index: int = 0,
        layer_range: Optional[LayerRange] = None,
        column: Optional[Column] = None,
    ) -> "RadiationBand":
        """Zero the TOA radiance view of the column and run the solver."""
        self._require_outputs(column_index)
        if layer_range is None:
            layer_range = LayerRange.full(self._nlayer)
        toa = self.btoa[column_index]
        toa[:] = 0.0

        self._solve(
            column, column_index, layer_range, SolverOutputs(toa=toa, directions=self.directions)
        )
        return self

    def __repr__(self) -> str:
        return (
            f"RadiationBand(name={self.name!r}, nbin={self.nbin}, "
            f"absorbers={[a.name for a in self._absorbers]})"
        )
