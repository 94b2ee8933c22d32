"""
Export of band fluxes and radiances as pandas tables.
"""

from pathlib import Path
from typing import Optional, Union

import pandas as pd

from specrad.core.logging_config import get_logger

logger = get_logger("io.output")


def flux_dataframe(radiation, column_index: int = 0) -> pd.DataFrame:
    """
    Fluxes of one column, one row per level (level 0 at the top).

    Columns: ``level``, ``<band>_up``, ``<band>_down`` for each band, then
    ``total_up``, ``total_down`` and ``net`` (up minus down), all in W/m^2.
    """
    data = {"level": range(radiation.nlevel)}
    for b, name in enumerate(radiation.band_names):
        data[f"{name}_up"] = radiation.flxup[b, column_index]
        data[f"{name}_down"] = radiation.flxdn[b, column_index]
    data["total_up"] = radiation.total_flux_up(column_index)
    data["total_down"] = radiation.total_flux_down(column_index)
    data["net"] = radiation.net_flux(column_index)
    return pd.DataFrame(data)


def radiance_dataframe(radiation, column_index: int = 0) -> pd.DataFrame:
    """
    TOA radiances of one column, one row per (band, direction).

    Columns: ``band``, ``mu``, ``phi``, ``radiance`` (W m^-2 sr^-1).
    """
    rows = []
    for b, name in enumerate(radiation.band_names):
        for d, (mu, phi) in enumerate(radiation.directions):
            rows.append(
                {
                    "band": name,
                    "mu": float(mu),
                    "phi": float(phi),
                    "radiance": float(radiation.radiance[b, column_index, d]),
                }
            )
    return pd.DataFrame(rows, columns=["band", "mu", "phi", "radiance"])


def save_dataframe(
    df: pd.DataFrame, file_path: Union[str, Path], header: Optional[str] = None
) -> None:
    """
    Save a result table to CSV.

    Parameters
    ----------
    df : DataFrame
        Table to write
    file_path : str or Path
        Output file path
    header : str, optional
        Comment written as ``#`` lines before the table
    """
    file_path = Path(file_path)
    with open(file_path, "w") as f:
        if header:
            for line in header.splitlines():
                f.write(f"# {line}\n")
        df.to_csv(f, index=False)

    logger.info(f"Saved {len(df)} rows to {file_path}")
