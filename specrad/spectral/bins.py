"""
Spectral bin data structure.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SpectralBin:
    """
    Half-open wavenumber interval ``[wave1, wave2)``.

    Attributes
    ----------
    wave1 : float
        Lower edge in cm^-1
    wave2 : float
        Upper edge in cm^-1 (exclusive)
    """

    wave1: float
    wave2: float

    def __post_init__(self):
        if not (np.isfinite(self.wave1) and np.isfinite(self.wave2)):
            raise ValueError("Spectral bin edges must be finite")
        if self.wave2 <= self.wave1:
            raise ValueError(f"Empty spectral bin [{self.wave1}, {self.wave2})")
        if self.wave1 < 0:
            raise ValueError("Wavenumbers must be non-negative")

    @property
    def center(self) -> float:
        """Bin center in cm^-1."""
        return 0.5 * (self.wave1 + self.wave2)

    @property
    def width(self) -> float:
        """Bin width in cm^-1."""
        return self.wave2 - self.wave1

    def contains(self, wavenumber: float) -> bool:
        return self.wave1 <= wavenumber < self.wave2

    def overlaps(self, other: "SpectralBin") -> bool:
        return self.wave1 < other.wave2 and other.wave1 < self.wave2

    def sample(self, n: int = 1) -> np.ndarray:
        """
        Midpoints of ``n`` equal sub-intervals of the bin.

        ``sample(1)`` is the bin center.
        """
        if n < 1:
            raise ValueError("Number of samples must be at least 1")
        edges = np.linspace(self.wave1, self.wave2, n + 1)
        return 0.5 * (edges[:-1] + edges[1:])
