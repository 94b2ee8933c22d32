"""
Build bands and a Radiation container from a configuration dictionary.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from specrad.core.config import validate_radiation_config
from specrad.core.exceptions import ConfigurationError
from specrad.core import factory
from specrad.core.interpolation import OutOfRangePolicy
from specrad.core.logging_config import get_logger
from specrad.radiation.band import RadiationBand
from specrad.radiation.radiation import Radiation

logger = get_logger("radiation.builder")


def _resolve(path: Union[str, Path], base_dir: Optional[Path]) -> Path:
    path = Path(path)
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path


def build_absorber(
    absorber_config: Dict[str, Any],
    policy: Union[str, OutOfRangePolicy] = OutOfRangePolicy.CLAMP,
    base_dir: Optional[Path] = None,
):
    """
    Create one absorber from its configuration entry.

    ``type`` and ``name`` select and name the absorber; ``table`` (resolved
    against ``base_dir``) is handed to the class's ``from_file``. Table-backed
    absorbers inherit the interpolation ``policy`` unless they set their own.
    """
    params = dict(absorber_config)
    absorber_type = params.pop("type")
    name = params.pop("name")
    table = params.pop("table", None)

    table_path = None
    if table is not None:
        table_path = _resolve(table, base_dir)
        params.setdefault("policy", policy)
    if "pair" in params:
        params["pair"] = tuple(params["pair"])
    if "spectral_range" in params:
        params["spectral_range"] = tuple(params["spectral_range"])

    try:
        return factory.AbsorberFactory.create(absorber_type, name, table_path, **params)
    except TypeError as exc:
        raise ConfigurationError(f"Absorber {name} ({absorber_type}): {exc}") from exc


def build_band(
    band_config: Dict[str, Any],
    nlayer: Optional[int] = None,
    policy: Union[str, OutOfRangePolicy] = OutOfRangePolicy.CLAMP,
    base_dir: Optional[Path] = None,
) -> RadiationBand:
    """Create a band with its grid, absorbers and solver."""
    name = band_config["name"]

    grid_params = dict(band_config["grid"])
    grid_type = grid_params.pop("type")
    try:
        grid = factory.GridFactory.create(grid_type, **grid_params)
    except TypeError as exc:
        raise ConfigurationError(f"Band {name} grid ({grid_type}): {exc}") from exc

    absorbers = [build_absorber(a, policy, base_dir) for a in band_config["absorbers"]]

    solver_params = dict(band_config.get("solver", {"type": "beer_lambert"}))
    solver_type = solver_params.pop("type", "beer_lambert")
    try:
        solver = factory.SolverFactory.create(solver_type, **solver_params)
    except TypeError as exc:
        raise ConfigurationError(f"Band {name} solver ({solver_type}): {exc}") from exc

    return RadiationBand(
        name,
        grid,
        absorbers,
        solver=solver,
        npmom=int(band_config.get("npmom", 4)),
        nlayer=nlayer,
    )


def build_radiation(
    config: Dict[str, Any], base_dir: Optional[Union[str, Path]] = None
) -> Radiation:
    """
    Build a Radiation container from a configuration dictionary.

    Parameters
    ----------
    config : dict
        Configuration with ``radiation`` and ``bands`` sections
    base_dir : str or Path, optional
        Directory that relative table paths are resolved against

    Returns
    -------
    Radiation
        Container with all bands attached

    Raises
    ------
    ConfigurationError
        If the configuration is invalid
    """
    validate_radiation_config(config)
    base_dir = Path(base_dir) if base_dir is not None else None

    settings = config["radiation"]
    nlayer = int(settings["nlayer"])
    policy = OutOfRangePolicy.parse(settings.get("interpolation", "clamp"))

    bands = [build_band(b, nlayer, policy, base_dir) for b in config["bands"]]
    radiation = Radiation(
        bands,
        nlayer,
        ncol=int(settings.get("ncol", 1)),
        directions=settings.get("directions", [[1.0, 0.0]]),
    )
    logger.info(f"Built Radiation with bands {', '.join(radiation.band_names)}")
    return radiation
