"""
Exception hierarchy for specrad.

Numerical and solver failures are raised as exceptions and never terminate the
host process; callers decide whether to retry, skip a column, or stop the run.
"""

from enum import Enum
from typing import Optional, Tuple


class SpecradError(Exception):
    """Base class for all specrad errors."""


class ConfigurationError(SpecradError, ValueError):
    """Inconsistent setup detected while building bands, absorbers or tables."""


class InterpolationRangeError(SpecradError, ValueError):
    """
    A lookup coordinate fell outside a table axis under the ``error`` policy.

    Attributes
    ----------
    axis : str
        Name of the offending axis
    value : float
        Requested coordinate
    bounds : tuple
        (min, max) of the axis
    """

    def __init__(self, axis: str, value: float, bounds: Tuple[float, float]):
        self.axis = axis
        self.value = value
        self.bounds = bounds
        super().__init__(
            f"Coordinate {axis}={value:.6g} outside table bounds "
            f"[{bounds[0]:.6g}, {bounds[1]:.6g}]"
        )


class SolverErrorCode(Enum):
    """Failure categories reported by radiative-transfer solver adapters."""

    NOT_PREPARED = "not_prepared"
    DIMENSION_MISMATCH = "dimension_mismatch"
    NEGATIVE_OPTICAL_DEPTH = "negative_optical_depth"
    INVALID_ALBEDO = "invalid_albedo"
    INVALID_RANGE = "invalid_range"
    NON_FINITE = "non_finite"


class SolverError(SpecradError, RuntimeError):
    """
    Structured failure reported by a solver adapter.

    The band output views touched by the failed call are left zeroed.
    """

    def __init__(self, code: SolverErrorCode, message: str, band: Optional[str] = None):
        self.code = code
        self.detail = message
        self.band = band
        prefix = f"[{band}] " if band else ""
        super().__init__(f"{prefix}{code.value}: {message}")
