"""
Gray absorber with fixed optical properties.
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from specrad.absorbers.phase import check_normalization, isotropic_moments, pad_moments
from specrad.core.abc import Absorber
from specrad.core.logging_config import get_logger

logger = get_logger("absorbers.constant")


class ConstantAbsorber(Absorber):
    """
    Absorber whose properties do not depend on wavenumber or state.

    Useful as a gray haze, as a test fixture and for analytic checks.

    Parameters
    ----------
    name : str
        Absorber name
    attenuation : float
        Attenuation coefficient in m^-1
    ssa : float
        Single-scattering albedo in [0, 1]
    pmom : sequence of float, optional
        Phase moments starting with chi_0 = 1 (isotropic if omitted)
    spectral_range : tuple of float, optional
        (wmin, wmax) in cm^-1
    """

    absorber_type = "constant"

    def __init__(
        self,
        name: str,
        attenuation: float = 0.0,
        ssa: float = 0.0,
        pmom: Optional[Sequence[float]] = None,
        spectral_range: Optional[Tuple[float, float]] = None,
    ):
        super().__init__(name, spectral_range)
        if attenuation < 0:
            raise ValueError(f"Absorber {name}: attenuation must be non-negative")
        if not 0.0 <= ssa <= 1.0:
            raise ValueError(f"Absorber {name}: single-scattering albedo must be in [0, 1]")

        self._attenuation = float(attenuation)
        self._ssa = float(ssa)
        self._pmom = check_normalization(pmom if pmom is not None else isotropic_moments(0))

        logger.debug(
            f"Created ConstantAbsorber {name}: k={attenuation:.3e} m^-1, ssa={ssa:.3f}, "
            f"{self._pmom.size} moments"
        )

    def attenuation(self, spectral_bin, state) -> float:
        return self._attenuation

    def single_scattering_albedo(self, spectral_bin, state) -> float:
        return self._ssa

    def phase_moments(self, spectral_bin, state, count: int) -> np.ndarray:
        return pad_moments(self._pmom, count)
