"""
Spectral grids: the set of bins that subdivide one radiation band.

Every grid carries two weight vectors:

- ``weights`` integrate a per-bin spectral density (per cm^-1) into a band
  total, ``sum(weights * value)``. For bin grids they are the bin widths; for
  correlated-k grids they are the g-point quadrature weights times the band
  width.
- ``normalized_weights`` are ``weights / sum(weights)`` and form band-average
  optical properties (``btau`` and friends). This is the intra-band
  combination rule: width-weighted for bin grids, quadrature-weighted for
  correlated-k grids.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

import numpy as np

from specrad.core.constants import FRACTION_SUM_TOL
from specrad.core.exceptions import ConfigurationError
from specrad.spectral.bins import SpectralBin


class SpectralGrid(ABC):
    """Ordered sequence of spectral bins covering one band."""

    grid_type: str = "abstract"

    def __init__(self, bins: Sequence[SpectralBin], weights: Sequence[float]):
        self._bins: Tuple[SpectralBin, ...] = tuple(bins)
        self._weights = np.array(weights, dtype=float)

        if not self._bins:
            raise ConfigurationError(f"{self.grid_type} grid has no bins")
        if self._weights.shape != (len(self._bins),):
            raise ConfigurationError(
                f"{self.grid_type} grid: {len(self._bins)} bins but "
                f"{self._weights.size} weights"
            )
        if np.any(self._weights <= 0) or not np.all(np.isfinite(self._weights)):
            raise ConfigurationError(f"{self.grid_type} grid weights must be positive")

        self._validate_layout()
        self._weights.setflags(write=False)
        self._normalized = self._weights / self._weights.sum()
        self._normalized.setflags(write=False)

    @abstractmethod
    def _validate_layout(self) -> None:
        """Check the bin arrangement allowed by this grid type."""
        pass

    @property
    def bins(self) -> Tuple[SpectralBin, ...]:
        return self._bins

    @property
    def weights(self) -> np.ndarray:
        """Integration weights in cm^-1."""
        return self._weights

    @property
    def normalized_weights(self) -> np.ndarray:
        """Averaging weights, summing to one."""
        return self._normalized

    @property
    def wmin(self) -> float:
        return min(b.wave1 for b in self._bins)

    @property
    def wmax(self) -> float:
        return max(b.wave2 for b in self._bins)

    @property
    def centers(self) -> np.ndarray:
        return np.array([b.center for b in self._bins])

    def __len__(self) -> int:
        return len(self._bins)

    def __iter__(self):
        return iter(self._bins)

    def __getitem__(self, index: int) -> SpectralBin:
        return self._bins[index]

    def integrate(self, values: np.ndarray, axis: int = 0) -> np.ndarray:
        """Band integral of per-bin spectral densities along ``axis``."""
        values = np.asarray(values, dtype=float)
        return np.tensordot(self._weights, values, axes=([0], [axis]))

    def average(self, values: np.ndarray, axis: int = 0) -> np.ndarray:
        """Band average of per-bin values along ``axis``."""
        values = np.asarray(values, dtype=float)
        return np.tensordot(self._normalized, values, axes=([0], [axis]))

    def _check_disjoint(self) -> None:
        ordered = sorted(self._bins, key=lambda b: b.wave1)
        for left, right in zip(ordered[:-1], ordered[1:]):
            if left.overlaps(right):
                raise ConfigurationError(
                    f"{self.grid_type} grid bins overlap: [{left.wave1}, {left.wave2}) and "
                    f"[{right.wave1}, {right.wave2})"
                )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(nbin={len(self)}, "
            f"range=[{self.wmin:.6g}, {self.wmax:.6g}) cm^-1)"
        )


class CustomGrid(SpectralGrid):
    """
    Grid built from explicit ascending bin edges.

    Parameters
    ----------
    edges : sequence of float
        ``nbin + 1`` strictly ascending wavenumbers in cm^-1
    """

    grid_type = "custom"

    def __init__(self, edges: Sequence[float]):
        edges = np.asarray(edges, dtype=float)
        if edges.ndim != 1 or edges.size < 2:
            raise ConfigurationError("custom grid needs at least two edges")
        if not np.all(np.diff(edges) > 0):
            raise ConfigurationError("custom grid edges must be strictly ascending")
        self.edges = edges
        bins = [SpectralBin(float(a), float(b)) for a, b in zip(edges[:-1], edges[1:])]
        super().__init__(bins, np.diff(edges))

    def _validate_layout(self) -> None:
        self._check_disjoint()


class RegularGrid(CustomGrid):
    """
    Equally spaced bins between ``wmin`` and ``wmax``.

    When ``(wmax - wmin)`` is not a multiple of ``dw`` the last bin is
    narrower so that the band range is covered exactly.
    """

    grid_type = "regular"

    def __init__(self, wmin: float, wmax: float, dw: float):
        if dw <= 0:
            raise ConfigurationError("regular grid spacing dw must be positive")
        if wmax <= wmin:
            raise ConfigurationError("regular grid requires wmax > wmin")
        self.dw = dw
        nbin = int(np.ceil((wmax - wmin) / dw - 1.0e-9))
        edges = wmin + dw * np.arange(nbin + 1)
        edges[-1] = wmax
        super().__init__(edges)


class CorrelatedKGrid(SpectralGrid):
    """
    Correlated-k grid: one pseudo-bin per g-point, all spanning the band.

    Parameters
    ----------
    wmin, wmax : float
        Band edges in cm^-1
    gweights : sequence of float
        Quadrature weights of the g-points, positive and summing to one
    """

    grid_type = "ck"

    def __init__(self, wmin: float, wmax: float, gweights: Sequence[float]):
        gweights = np.asarray(gweights, dtype=float)
        if gweights.ndim != 1 or gweights.size == 0:
            raise ConfigurationError("ck grid needs at least one g-point weight")
        if abs(gweights.sum() - 1.0) > FRACTION_SUM_TOL:
            raise ConfigurationError(f"ck grid g-weights sum to {gweights.sum():.6g}, not 1")
        band = SpectralBin(float(wmin), float(wmax))
        self.gweights = gweights
        super().__init__([band] * gweights.size, gweights * band.width)

    def _validate_layout(self) -> None:
        first = self._bins[0]
        if any(b != first for b in self._bins):
            raise ConfigurationError("ck grid g-points must share the band interval")


def grid_from_bins(bins: List[Tuple[float, float]]) -> CustomGrid:
    """Build a custom grid from contiguous ``(wave1, wave2)`` pairs."""
    edges = [bins[0][0]]
    for (a, b), (c, _) in zip(bins[:-1], bins[1:]):
        if not np.isclose(b, c):
            raise ConfigurationError("bins passed to grid_from_bins must be contiguous")
        edges.append(b)
    edges.append(bins[-1][1])
    return CustomGrid(edges)
