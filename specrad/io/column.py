"""
I/O utilities for atmospheric columns.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from specrad.atmosphere.state import AtmosphericState, Column
from specrad.core.exceptions import ConfigurationError
from specrad.core.logging_config import get_logger

logger = get_logger("io.column")

REQUIRED_COLUMNS = ["pressure", "temperature", "thickness"]


def column_from_dataframe(df: pd.DataFrame, species: Optional[Sequence[str]] = None) -> Column:
    """
    Build a Column from a table with one row per layer, top layer first.

    Parameters
    ----------
    df : DataFrame
        Columns ``pressure`` (Pa), ``temperature`` (K), ``thickness`` (m) and
        one mole-fraction column per species
    species : sequence of str, optional
        Species columns to read; all remaining columns if None

    Returns
    -------
    Column
        Validated column
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ConfigurationError(f"Column table missing columns {missing}")
    if df.empty:
        raise ConfigurationError("Column table has no layers")

    if species is None:
        species = [c for c in df.columns if c not in REQUIRED_COLUMNS]
    else:
        absent = [s for s in species if s not in df.columns]
        if absent:
            raise ConfigurationError(f"Column table missing species {absent}")

    layers: List[AtmosphericState] = []
    for values in df.to_dict("records"):
        composition = {s: float(values[s]) for s in species}
        layers.append(
            AtmosphericState(float(values["temperature"]), float(values["pressure"]), composition)
        )

    column = Column(layers, df["thickness"].to_numpy(dtype=float))
    column.validate()
    return column


def load_column(file_path: Union[str, Path], species: Optional[Sequence[str]] = None) -> Column:
    """
    Load a column from CSV.

    Parameters
    ----------
    file_path : str or Path
        CSV file; ``#`` starts a comment line
    species : sequence of str, optional
        Species columns to read

    Returns
    -------
    Column
        Column with row 0 as the top-of-atmosphere layer
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Column file not found: {file_path}")

    df = pd.read_csv(file_path, comment="#", skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]
    column = column_from_dataframe(df, species)

    logger.info(f"Loaded column from {file_path}: {column.nlayer} layers")
    return column


def save_column(column: Column, file_path: Union[str, Path]) -> None:
    """Write a column to CSV in the layout read by ``load_column``."""
    species = sorted({s for layer in column for s in layer.composition})
    data = {
        "pressure": column.pressures,
        "temperature": column.temperatures,
        "thickness": np.asarray(column.thickness),
    }
    for s in species:
        data[s] = column.mole_fractions(s)
    pd.DataFrame(data).to_csv(file_path, index=False)
    logger.info(f"Saved column to {file_path}")
