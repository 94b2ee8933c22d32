"""
Core utilities and interfaces.

This module provides:
- Physical constants
- Units and unit conversion
- Configuration and logging
- Exceptions
- Multi-linear table interpolation
- Abstract base classes

Factories live in :mod:`specrad.core.factory` and are imported from there
directly, since they pull in every concrete implementation.
"""

from specrad.core import constants
from specrad.core import units
from specrad.core import config
from specrad.core import logging_config
from specrad.core.exceptions import (
    SpecradError,
    ConfigurationError,
    InterpolationRangeError,
    SolverError,
    SolverErrorCode,
)
from specrad.core.interpolation import MultilinearTable, OutOfRangePolicy
from specrad.core.abc import Absorber, RTSolver

__all__ = [
    # Modules
    "constants",
    "units",
    "config",
    "logging_config",
    # Exceptions
    "SpecradError",
    "ConfigurationError",
    "InterpolationRangeError",
    "SolverError",
    "SolverErrorCode",
    # Interpolation
    "MultilinearTable",
    "OutOfRangePolicy",
    # Abstract base classes
    "Absorber",
    "RTSolver",
]
