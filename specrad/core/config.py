"""
Configuration management for specrad.

Provides utilities for loading and validating YAML/JSON configuration files
that declare radiation bands, their spectral grids, absorbers and solver
boundary conditions.
"""

import json
from pathlib import Path
from typing import Dict, Any, Union

import yaml

from specrad.core.exceptions import ConfigurationError
from specrad.core.logging_config import get_logger

logger = get_logger("core.config")


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters
    ----------
    config_path : str or Path
        Path to configuration file (.yaml, .yml, or .json)

    Returns
    -------
    dict
        Configuration dictionary

    Raises
    ------
    FileNotFoundError
        If config file does not exist
    ValueError
        If file format is not supported
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, "r") as f:
        if suffix in [".yaml", ".yml"]:
            config = yaml.safe_load(f)
        elif suffix == ".json":
            config = json.load(f)
        else:
            raise ValueError(
                f"Unsupported config file format: {suffix}. " "Use .yaml, .yml, or .json"
            )

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    logger.info(f"Loaded configuration from {config_path}")
    return config


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> Path:
    """
    Save configuration to YAML or JSON file.

    Unknown suffixes are written as YAML with the suffix replaced.

    Parameters
    ----------
    config : dict
        Configuration dictionary
    config_path : str or Path
        Path to output file

    Returns
    -------
    Path
        Path actually written
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower()

    if suffix == ".json":
        with open(config_path, "w") as f:
            json.dump(config, f, indent=2)
    else:
        if suffix not in [".yaml", ".yml"]:
            config_path = config_path.with_suffix(".yaml")
        with open(config_path, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved configuration to {config_path}")
    return config_path


def validate_radiation_config(config: Dict[str, Any]) -> bool:
    """
    Validate the radiation/bands configuration structure.

    Parameters
    ----------
    config : dict
        Configuration dictionary

    Returns
    -------
    bool
        True if valid

    Raises
    ------
    ConfigurationError
        If configuration is invalid
    """
    if "radiation" not in config:
        raise ConfigurationError("Configuration must contain 'radiation' section")

    radiation = config["radiation"]
    if "nlayer" not in radiation:
        raise ConfigurationError("Radiation config missing required field: nlayer")
    if int(radiation["nlayer"]) <= 0:
        raise ConfigurationError("Radiation nlayer must be positive")
    if int(radiation.get("ncol", 1)) <= 0:
        raise ConfigurationError("Radiation ncol must be positive")

    for direction in radiation.get("directions", [[1.0, 0.0]]):
        if len(direction) != 2:
            raise ConfigurationError(f"Direction must be [mu, phi], got {direction}")
        if not 0.0 < float(direction[0]) <= 1.0:
            raise ConfigurationError(f"Direction cosine must be in (0, 1], got {direction[0]}")

    bands = config.get("bands")
    if not bands:
        raise ConfigurationError("Configuration must contain a non-empty 'bands' list")

    names = set()
    for band in bands:
        for field in ["name", "grid", "absorbers"]:
            if field not in band:
                raise ConfigurationError(f"Band config missing required field: {field}")
        if band["name"] in names:
            raise ConfigurationError(f"Duplicate band name: {band['name']}")
        names.add(band["name"])

        if "type" not in band["grid"]:
            raise ConfigurationError(f"Band '{band['name']}' grid missing 'type'")
        if not isinstance(band["absorbers"], list):
            raise ConfigurationError(f"Band '{band['name']}' absorbers must be a list")
        for absorber in band["absorbers"]:
            if "type" not in absorber or "name" not in absorber:
                raise ConfigurationError(
                    f"Band '{band['name']}' absorber entries need 'type' and 'name'"
                )
        if int(band.get("npmom", 4)) < 0:
            raise ConfigurationError(f"Band '{band['name']}' npmom must be non-negative")

    return True
