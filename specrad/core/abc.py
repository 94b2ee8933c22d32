"""
Base classes for the pluggable capabilities of the engine.

``Absorber`` is a concrete base: every operation has a safe default (no
attenuation, no scattering, isotropic phase moments) so that a variant only
overrides what it models. ``RTSolver`` is an abstract two-phase interface
(``prepare`` then ``compute``) implemented by solver adapters.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

import numpy as np

from specrad.core.exceptions import SolverError, SolverErrorCode

if TYPE_CHECKING:
    from specrad.atmosphere.state import AtmosphericState, Column
    from specrad.radiation.solver import BandOptics, LayerRange, SolverOutputs
    from specrad.spectral.bins import SpectralBin


class Absorber:
    """
    Optical capability of one atmospheric constituent.

    Maps a spectral interval and an atmospheric state to an attenuation
    coefficient (m^-1), a single-scattering albedo in [0, 1] and a sequence of
    phase-function moments whose zero-order element is 1.

    Subclasses override the scalar operations; the ``*_column`` variants loop
    over the layers of a column and may be overridden with vectorized lookups.

    Parameters
    ----------
    name : str
        Absorber name, unique within a band
    spectral_range : tuple of float, optional
        (wmin, wmax) in cm^-1 over which the absorber is defined; None means
        unbounded
    """

    absorber_type = "null"

    def __init__(self, name: str, spectral_range: Optional[Tuple[float, float]] = None):
        if not name:
            raise ValueError("Absorber name must be non-empty")
        if spectral_range is not None:
            wmin, wmax = (float(w) for w in spectral_range)
            if wmax <= wmin:
                raise ValueError(f"Absorber {name}: invalid spectral range {spectral_range}")
            spectral_range = (wmin, wmax)
        self.name = name
        self._spectral_range = spectral_range

    @property
    def spectral_range(self) -> Optional[Tuple[float, float]]:
        return self._spectral_range

    def covers(self, wmin: float, wmax: float) -> bool:
        """True if the absorber's data spans ``[wmin, wmax]``."""
        if self._spectral_range is None:
            return True
        lo, hi = self._spectral_range
        return lo <= wmin and wmax <= hi

    def attenuation(self, spectral_bin: "SpectralBin", state: "AtmosphericState") -> float:
        """Attenuation coefficient in m^-1."""
        return 0.0

    def single_scattering_albedo(
        self, spectral_bin: "SpectralBin", state: "AtmosphericState"
    ) -> float:
        """Fraction of the attenuation due to scattering."""
        return 0.0

    def phase_moments(
        self, spectral_bin: "SpectralBin", state: "AtmosphericState", count: int
    ) -> np.ndarray:
        """
        Phase-function moments ``chi_0 .. chi_count`` with ``chi_0 = 1``.

        The default is isotropic scattering.
        """
        moments = np.zeros(count + 1)
        moments[0] = 1.0
        return moments

    def attenuation_column(
        self, spectral_bin: "SpectralBin", states: Sequence["AtmosphericState"]
    ) -> np.ndarray:
        return np.array([self.attenuation(spectral_bin, s) for s in states], dtype=float)

    def single_scattering_albedo_column(
        self, spectral_bin: "SpectralBin", states: Sequence["AtmosphericState"]
    ) -> np.ndarray:
        return np.array(
            [self.single_scattering_albedo(spectral_bin, s) for s in states], dtype=float
        )

    def phase_moments_column(
        self, spectral_bin: "SpectralBin", states: Sequence["AtmosphericState"], count: int
    ) -> np.ndarray:
        """Moments for every layer, shape (nlayer, count + 1)."""
        out = np.zeros((len(states), count + 1))
        for i, state in enumerate(states):
            moments = np.asarray(self.phase_moments(spectral_bin, state, count), dtype=float)
            n = min(moments.size, count + 1)
            out[i, :n] = moments[:n]
        return out

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class RTSolver(ABC):
    """
    Two-phase radiative-transfer solver interface.

    ``prepare`` hands the band's per-bin optical tensors for one column to the
    solver (by reference or copy, as the adapter chooses); ``compute`` then
    writes fluxes and/or radiances for a layer range into caller-owned views.
    Failures are reported as :class:`SolverError`.
    """

    solver_type = "abstract"

    def __init__(self):
        self._optics: Optional["BandOptics"] = None
        self._column: Optional["Column"] = None
        self._column_index: Optional[int] = None

    @property
    def is_prepared(self) -> bool:
        return self._optics is not None

    @abstractmethod
    def prepare(self, optics: "BandOptics", column: "Column", column_index: int = 0) -> None:
        """Take the per-layer optical tensors of one column."""
        pass

    @abstractmethod
    def compute(self, layer_range: "LayerRange", outputs: "SolverOutputs") -> None:
        """Write fluxes/radiances for ``layer_range`` into ``outputs``."""
        pass

    def reset(self) -> None:
        """Drop the prepared column."""
        self._optics = None
        self._column = None
        self._column_index = None

    def _require_prepared(self) -> "BandOptics":
        if self._optics is None:
            raise SolverError(SolverErrorCode.NOT_PREPARED, "compute called before prepare")
        return self._optics

    @staticmethod
    def check_optics(optics: "BandOptics", column: "Column") -> None:
        """
        Validate tensor shapes against the column and the physical ranges.

        Raises
        ------
        SolverError
            On dimension mismatch, non-finite values, negative optical depth
            or albedo outside [0, 1]
        """
        nbin = len(optics.bins)
        expected = (nbin, column.nlayer)
        if optics.tau.shape != expected or optics.ssa.shape != expected:
            raise SolverError(
                SolverErrorCode.DIMENSION_MISMATCH,
                f"optical tensors {optics.tau.shape}/{optics.ssa.shape} do not match "
                f"(nbin, nlayer) = {expected}",
            )
        if optics.pmom.ndim != 3 or optics.pmom.shape[:2] != expected:
            raise SolverError(
                SolverErrorCode.DIMENSION_MISMATCH,
                f"phase moments {optics.pmom.shape} do not match {expected} + (npmom,)",
            )
        if optics.weights.shape != (nbin,):
            raise SolverError(
                SolverErrorCode.DIMENSION_MISMATCH,
                f"{optics.weights.size} spectral weights for {nbin} bins",
            )
        if not (np.all(np.isfinite(optics.tau)) and np.all(np.isfinite(optics.ssa))):
            raise SolverError(SolverErrorCode.NON_FINITE, "optical properties contain NaN/inf")
        if np.any(optics.tau < 0):
            raise SolverError(
                SolverErrorCode.NEGATIVE_OPTICAL_DEPTH,
                f"minimum optical depth {optics.tau.min():.6g}",
            )
        if np.any(optics.ssa < 0) or np.any(optics.ssa > 1):
            raise SolverError(
                SolverErrorCode.INVALID_ALBEDO,
                f"single-scattering albedo range [{optics.ssa.min():.6g}, "
                f"{optics.ssa.max():.6g}]",
            )
