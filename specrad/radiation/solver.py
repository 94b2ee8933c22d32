"""
Solver adapter types and the bundled absorption-only solver.

The band engine talks to a radiative-transfer solver through two calls,
``prepare(optics, column, column_index)`` followed by
``compute(layer_range, outputs)``. Layer ranges are half-open over layers;
inclusive one-based ranges coming from external codes are converted once in
:meth:`LayerRange.from_inclusive`.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from specrad.core.abc import RTSolver
from specrad.core.constants import DIFFUSIVITY
from specrad.core.exceptions import ConfigurationError, SolverError, SolverErrorCode
from specrad.core.logging_config import get_logger
from specrad.spectral.bins import SpectralBin
from specrad.spectral.planck import planck_bin_average

logger = get_logger("radiation.solver")


@dataclass(frozen=True)
class LayerRange:
    """
    Half-open range of layers ``[start, stop)``.

    Fluxes live on levels, so a layer range affects the level slice
    ``[start, stop + 1)``.
    """

    start: int
    stop: int

    def __post_init__(self):
        if self.start < 0 or self.stop <= self.start:
            raise ValueError(f"Invalid layer range [{self.start}, {self.stop})")

    @classmethod
    def full(cls, nlayer: int) -> "LayerRange":
        return cls(0, nlayer)

    @classmethod
    def from_inclusive(cls, first: int, last: int) -> "LayerRange":
        """Convert a one-based inclusive range ``first..last``."""
        return cls(first - 1, last)

    @property
    def nlayer(self) -> int:
        return self.stop - self.start

    @property
    def level_slice(self) -> slice:
        return slice(self.start, self.stop + 1)

    def check(self, nlayer: int) -> None:
        """Raise SolverError if the range does not fit a column of ``nlayer`` layers."""
        if self.stop > nlayer:
            raise SolverError(
                SolverErrorCode.INVALID_RANGE,
                f"layer range [{self.start}, {self.stop}) exceeds {nlayer} layers",
            )


@dataclass
class BandOptics:
    """
    Per-bin optical tensors of one band for one column.

    Attributes
    ----------
    tau : array, (nbin, nlayer)
        Extinction optical depth of each layer
    ssa : array, (nbin, nlayer)
        Single-scattering albedo
    pmom : array, (nbin, nlayer, npmom + 1)
        Phase moments, zero-order element 1
    bins : tuple of SpectralBin
        Spectral bins of the grid
    weights : array, (nbin,)
        Integration weights in cm^-1
    """

    tau: np.ndarray
    ssa: np.ndarray
    pmom: np.ndarray
    bins: Tuple[SpectralBin, ...]
    weights: np.ndarray

    @property
    def nbin(self) -> int:
        return len(self.bins)

    @property
    def nlayer(self) -> int:
        return self.tau.shape[1]


@dataclass
class SolverOutputs:
    """
    Caller-owned views the solver writes into.

    Attributes
    ----------
    flxup, flxdn : array, (nlevel,), optional
        Band-integrated upward/downward flux in W/m^2
    toa : array, (ndir,), optional
        Band-integrated top-of-atmosphere radiance in W m^-2 sr^-1
    directions : array, (ndir, 2), optional
        (mu, phi) of each radiance direction
    """

    flxup: Optional[np.ndarray] = None
    flxdn: Optional[np.ndarray] = None
    toa: Optional[np.ndarray] = None
    directions: Optional[np.ndarray] = None


@dataclass
class BoundaryConditions:
    """
    Boundary conditions of a band solve.

    Attributes
    ----------
    fbeam : float
        Beam spectral flux density at TOA normal to the beam, W m^-2 (cm^-1)^-1
    umu0 : float
        Cosine of the beam zenith angle
    albedo : float
        Lambertian surface albedo
    btemp : float
        Surface temperature in K
    ttemp : float
        Temperature of the isotropic emission incident at the top in K
    planck : bool
        Include thermal emission
    """

    fbeam: float = 0.0
    umu0: float = 1.0
    albedo: float = 0.0
    btemp: float = 0.0
    ttemp: float = 0.0
    planck: bool = False

    def __post_init__(self):
        if self.fbeam < 0:
            raise ConfigurationError(f"Beam flux must be non-negative, got {self.fbeam}")
        if not 0.0 < self.umu0 <= 1.0:
            raise ConfigurationError(f"Beam cosine umu0 must be in (0, 1], got {self.umu0}")
        if not 0.0 <= self.albedo <= 1.0:
            raise ConfigurationError(f"Surface albedo must be in [0, 1], got {self.albedo}")
        if self.btemp < 0 or self.ttemp < 0:
            raise ConfigurationError("Boundary temperatures must be non-negative")


class BeerLambertSolver(RTSolver):
    """
    Absorption-only solver: Beer-Lambert beam plus two-stream thermal emission.

    - Direct beam: F_dn(z) = fbeam * umu0 * exp(-tau(z) / umu0), using
      extinction optical depth.
    - Diffuse streams (thermal emission and surface reflection) travel with
      transmissivity exp(-D (1 - ssa) tau), D = 1.66, and layer sources
      pi B(T_layer) (1 - transmissivity).
    - The surface reflects the total downward flux with albedo ``albedo`` and
      emits (1 - albedo) pi B(btemp).
    - TOA radiance along mu > 0 is the Schwarzschild integral of the layer
      sources plus the attenuated surface radiance.

    Per-bin results are summed with the grid weights. ``prepare`` keeps
    references to the band's tensors; they must not change before ``compute``.

    Parameters
    ----------
    boundary : BoundaryConditions, optional
        Boundary conditions; if None they are built from ``kwargs``
    """

    solver_type = "beer_lambert"

    def __init__(self, boundary: Optional[BoundaryConditions] = None, **kwargs):
        super().__init__()
        self.boundary = boundary if boundary is not None else BoundaryConditions(**kwargs)
        self._planck_cache: Dict[Tuple[SpectralBin, float], float] = {}

    def prepare(self, optics: BandOptics, column, column_index: int = 0) -> None:
        self.check_optics(optics, column)
        self._planck_cache.clear()
        self._optics = optics
        self._column = column
        self._column_index = column_index
        logger.debug(
            f"Prepared column {column_index}: {optics.nbin} bins x {optics.nlayer} layers"
        )

    def compute(self, layer_range: LayerRange, outputs: SolverOutputs) -> None:
        optics = self._require_prepared()
        nlayer = optics.nlayer
        nlevel = nlayer + 1
        layer_range.check(nlayer)

        for label, view in (("flxup", outputs.flxup), ("flxdn", outputs.flxdn)):
            if view is not None and view.shape != (nlevel,):
                raise SolverError(
                    SolverErrorCode.DIMENSION_MISMATCH,
                    f"{label} view has shape {view.shape}, expected ({nlevel},)",
                )

        want_flux = outputs.flxup is not None or outputs.flxdn is not None
        want_radiance = outputs.toa is not None
        if not (want_flux or want_radiance):
            return

        up, dn = self._bin_fluxes(optics)
        sl = layer_range.level_slice

        if outputs.flxdn is not None:
            band_dn = optics.weights @ dn
            self._check_finite(band_dn, "downward flux")
            outputs.flxdn[sl] = band_dn[sl]
        if outputs.flxup is not None:
            band_up = optics.weights @ up
            self._check_finite(band_up, "upward flux")
            outputs.flxup[sl] = band_up[sl]

        if want_radiance:
            directions = outputs.directions
            if directions is None:
                directions = np.array([[1.0, 0.0]])
            directions = np.atleast_2d(np.asarray(directions, dtype=float))
            if outputs.toa.shape != (directions.shape[0],):
                raise SolverError(
                    SolverErrorCode.DIMENSION_MISMATCH,
                    f"toa view has shape {outputs.toa.shape} for {directions.shape[0]} directions",
                )
            mu = directions[:, 0]
            if np.any(mu <= 0) or np.any(mu > 1):
                raise SolverError(
                    SolverErrorCode.INVALID_RANGE, "radiance directions need 0 < mu <= 1"
                )
            radiance = optics.weights @ self._bin_radiance(optics, dn[:, -1], mu)
            self._check_finite(radiance, "radiance")
            outputs.toa[:] = radiance

    def reset(self) -> None:
        super().reset()
        self._planck_cache.clear()

    # ------------------------------------------------------------------
    # Per-bin transfer
    # ------------------------------------------------------------------

    def _planck(self, spectral_bin: SpectralBin, temperature: float) -> float:
        key = (spectral_bin, float(temperature))
        value = self._planck_cache.get(key)
        if value is None:
            value = planck_bin_average(spectral_bin, temperature)
            self._planck_cache[key] = value
        return value

    def _layer_sources(self, optics: BandOptics) -> np.ndarray:
        """pi * B(T_layer) per bin and layer, W m^-2 (cm^-1)^-1."""
        temperatures = self._column.temperatures
        return np.pi * np.array(
            [[self._planck(b, t) for t in temperatures] for b in optics.bins]
        )

    def _boundary_source(self, optics: BandOptics, temperature: float) -> np.ndarray:
        return np.pi * np.array([self._planck(b, temperature) for b in optics.bins])

    def _diffuse_transmissivity(self, optics: BandOptics) -> np.ndarray:
        return np.exp(-DIFFUSIVITY * (1.0 - optics.ssa) * optics.tau)

    def _bin_fluxes(self, optics: BandOptics) -> Tuple[np.ndarray, np.ndarray]:
        """Upward and downward spectral flux densities, each (nbin, nlevel)."""
        bc = self.boundary
        nbin, nlayer = optics.tau.shape

        tau_levels = np.zeros((nbin, nlayer + 1))
        tau_levels[:, 1:] = np.cumsum(optics.tau, axis=1)

        if bc.fbeam > 0:
            direct = bc.fbeam * bc.umu0 * np.exp(-tau_levels / bc.umu0)
        else:
            direct = np.zeros_like(tau_levels)

        trans = self._diffuse_transmissivity(optics)
        if bc.planck:
            sources = self._layer_sources(optics) * (1.0 - trans)
            top = self._boundary_source(optics, bc.ttemp)
            surface_emission = (1.0 - bc.albedo) * self._boundary_source(optics, bc.btemp)
        else:
            sources = np.zeros_like(trans)
            top = np.zeros(nbin)
            surface_emission = np.zeros(nbin)

        diffuse_dn = np.zeros_like(tau_levels)
        diffuse_dn[:, 0] = top
        for i in range(nlayer):
            diffuse_dn[:, i + 1] = diffuse_dn[:, i] * trans[:, i] + sources[:, i]
        dn = direct + diffuse_dn

        up = np.zeros_like(tau_levels)
        up[:, -1] = bc.albedo * dn[:, -1] + surface_emission
        for i in range(nlayer - 1, -1, -1):
            up[:, i] = up[:, i + 1] * trans[:, i] + sources[:, i]

        return up, dn

    def _bin_radiance(
        self, optics: BandOptics, surface_dn: np.ndarray, mu: Sequence[float]
    ) -> np.ndarray:
        """TOA upward radiance per bin and direction, (nbin, ndir)."""
        bc = self.boundary
        tabs = (1.0 - optics.ssa) * optics.tau
        surface = bc.albedo * surface_dn / np.pi
        if bc.planck:
            layer_b = self._layer_sources(optics) / np.pi
            surface = surface + (1.0 - bc.albedo) * self._boundary_source(optics, bc.btemp) / np.pi
        else:
            layer_b = np.zeros_like(tabs)

        tabs_above = np.zeros_like(tabs)
        tabs_above[:, 1:] = np.cumsum(tabs[:, :-1], axis=1)
        total = tabs.sum(axis=1)

        radiance = np.empty((tabs.shape[0], len(mu)))
        for j, m in enumerate(mu):
            emission = layer_b * (1.0 - np.exp(-tabs / m)) * np.exp(-tabs_above / m)
            radiance[:, j] = surface * np.exp(-total / m) + emission.sum(axis=1)
        return radiance

    @staticmethod
    def _check_finite(values: np.ndarray, label: str) -> None:
        if not np.all(np.isfinite(values)):
            raise SolverError(SolverErrorCode.NON_FINITE, f"{label} is not finite")
