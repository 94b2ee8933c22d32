"""
Factory patterns for creating absorbers, spectral grids and solvers from
configuration type names.
"""

from pathlib import Path
from typing import Dict, Optional, Type, Union

from specrad.absorbers.constant import ConstantAbsorber
from specrad.absorbers.continuum import ContinuumAbsorber
from specrad.absorbers.photolysis import PhotolysisAbsorber
from specrad.absorbers.scatterers import ParticleScatterer, RayleighScatterer
from specrad.absorbers.tabulated import TabulatedAbsorber
from specrad.core.abc import Absorber, RTSolver
from specrad.core.exceptions import ConfigurationError
from specrad.core.logging_config import get_logger
from specrad.radiation.solver import BeerLambertSolver
from specrad.spectral.grid import CorrelatedKGrid, CustomGrid, RegularGrid, SpectralGrid

logger = get_logger("core.factory")


class AbsorberFactory:
    """Factory for creating absorber instances."""

    _absorbers: Dict[str, Type[Absorber]] = {}

    @classmethod
    def register(cls, name: str, absorber_class: Type[Absorber]) -> None:
        """
        Register an absorber class.

        Parameters
        ----------
        name : str
            Type name used in configuration files
        absorber_class : Type[Absorber]
            Absorber class
        """
        cls._absorbers[name] = absorber_class
        logger.debug(f"Registered absorber: {name}")

    @classmethod
    def create(
        cls,
        absorber_type: str,
        name: str,
        table_path: Optional[Union[str, Path]] = None,
        **kwargs,
    ) -> Absorber:
        """
        Create an absorber instance.

        Parameters
        ----------
        absorber_type : str
            Registered type name
        name : str
            Absorber name
        table_path : str or Path, optional
            Lookup table; if given the class's ``from_file`` is used
        **kwargs
            Additional arguments for the absorber constructor

        Returns
        -------
        Absorber
            Absorber instance

        Raises
        ------
        ConfigurationError
            If the type name is not registered or does not take a table
        """
        if absorber_type not in cls._absorbers:
            available = ", ".join(cls._absorbers.keys())
            raise ConfigurationError(
                f"Unknown absorber type: {absorber_type}. Available: {available}"
            )

        absorber_class = cls._absorbers[absorber_type]

        if table_path is not None:
            if not hasattr(absorber_class, "from_file"):
                raise ConfigurationError(f"Absorber type {absorber_type} does not use tables")
            return absorber_class.from_file(name, table_path, **kwargs)
        else:
            return absorber_class(name, **kwargs)

    @classmethod
    def list_absorbers(cls) -> list:
        """List available absorber type names."""
        return list(cls._absorbers.keys())


class GridFactory:
    """Factory for creating spectral grids."""

    _grids: Dict[str, Type[SpectralGrid]] = {}

    @classmethod
    def register(cls, name: str, grid_class: Type[SpectralGrid]) -> None:
        cls._grids[name] = grid_class
        logger.debug(f"Registered grid: {name}")

    @classmethod
    def create(cls, grid_type: str, **kwargs) -> SpectralGrid:
        """
        Create a grid instance from its type name and constructor arguments.

        Raises
        ------
        ConfigurationError
            If the grid type is not registered
        """
        if grid_type not in cls._grids:
            available = ", ".join(cls._grids.keys())
            raise ConfigurationError(f"Unknown grid type: {grid_type}. Available: {available}")

        return cls._grids[grid_type](**kwargs)

    @classmethod
    def list_grids(cls) -> list:
        """List available grid type names."""
        return list(cls._grids.keys())


class SolverFactory:
    """Factory for creating radiative-transfer solver instances."""

    _solvers: Dict[str, Type[RTSolver]] = {}

    @classmethod
    def register(cls, name: str, solver_class: Type[RTSolver]) -> None:
        """
        Register a solver class.

        Parameters
        ----------
        name : str
            Solver name
        solver_class : Type[RTSolver]
            Solver class
        """
        cls._solvers[name] = solver_class
        logger.debug(f"Registered solver: {name}")

    @classmethod
    def create(cls, name: str, **kwargs) -> RTSolver:
        """
        Create a solver instance.

        Raises
        ------
        ConfigurationError
            If solver name is not registered
        """
        if name not in cls._solvers:
            available = ", ".join(cls._solvers.keys())
            raise ConfigurationError(f"Unknown solver: {name}. Available: {available}")

        return cls._solvers[name](**kwargs)

    @classmethod
    def list_solvers(cls) -> list:
        """List available solver names."""
        return list(cls._solvers.keys())


# Register default implementations
AbsorberFactory.register("null", Absorber)
AbsorberFactory.register("constant", ConstantAbsorber)
AbsorberFactory.register("tabulated", TabulatedAbsorber)
AbsorberFactory.register("continuum", ContinuumAbsorber)
AbsorberFactory.register("rayleigh", RayleighScatterer)
AbsorberFactory.register("particle", ParticleScatterer)
AbsorberFactory.register("photolysis", PhotolysisAbsorber)
GridFactory.register("regular", RegularGrid)
GridFactory.register("custom", CustomGrid)
GridFactory.register("ck", CorrelatedKGrid)
SolverFactory.register("beer_lambert", BeerLambertSolver)
