"""
Lookup-table I/O for absorbers.

Tables are read once at model setup and are immutable afterwards. Supported
containers:

- CSV in long form (one row per grid node), read with pandas and pivoted to a
  dense array. Missing grid nodes are a configuration error.
- HDF5 (optional, requires h5py) with one dataset per axis and one for the
  values.

Photolysis cross sections come in two layouts distinguished by a ``format``
tag and are normalized into a single :class:`CrossSectionTable`:

- ``branches``: one cross-section column per product branch.
- ``total``: a ``total`` column plus ``ratio_<branch>`` branching-ratio columns.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple, Union

import numpy as np
import pandas as pd

try:
    import h5py

    HAS_H5PY = True
except ImportError:
    HAS_H5PY = False
    h5py = None

from specrad.core.constants import FRACTION_SUM_TOL
from specrad.core.exceptions import ConfigurationError
from specrad.core.logging_config import get_logger
from specrad.core.units import wavelength_nm_to_wavenumber

logger = get_logger("io.tables")

# Floor applied before taking logarithms of non-negative table values
LOG_FLOOR = 1.0e-99

HDF5_SUFFIXES = [".h5", ".hdf5", ".hdf"]


def _require_h5py() -> None:
    if not HAS_H5PY:
        raise ImportError("h5py is required for HDF5 tables. Install with: pip install h5py")


def _read_csv(path: Path, required: Sequence[str]) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Table file not found: {path}")
    df = pd.read_csv(path, comment="#", skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ConfigurationError(f"{path.name}: missing columns {missing}")
    if df.empty:
        raise ConfigurationError(f"{path.name}: table is empty")
    return df


def _dense_from_long(
    df: pd.DataFrame, axis_columns: Sequence[str], value_column: str, source: str
) -> Tuple[List[np.ndarray], np.ndarray]:
    """Pivot a long-form table into sorted axes and a dense value array."""
    axes = [np.sort(df[c].unique()).astype(float) for c in axis_columns]
    series = df.set_index(list(axis_columns))[value_column]
    if series.index.has_duplicates:
        raise ConfigurationError(f"{source}: duplicate grid nodes in table")
    full_index = pd.MultiIndex.from_product(axes, names=list(axis_columns))
    dense = series.reindex(full_index)
    if dense.isna().any():
        n_missing = int(dense.isna().sum())
        raise ConfigurationError(
            f"{source}: {n_missing} grid nodes missing; table must be a full product grid"
        )
    return axes, dense.to_numpy(dtype=float).reshape([a.size for a in axes])


def _spectral_axis(df: pd.DataFrame, source: str) -> np.ndarray:
    if "wavenumber" in df.columns:
        return df["wavenumber"].to_numpy(dtype=float)
    if "wavelength_nm" in df.columns:
        return np.asarray(wavelength_nm_to_wavenumber(df["wavelength_nm"].to_numpy(dtype=float)))
    raise ConfigurationError(f"{source}: needs a 'wavenumber' or 'wavelength_nm' column")


# ============================================================================
# Gas absorption (wavenumber x pressure x temperature anomaly)
# ============================================================================


@dataclass(frozen=True)
class AbsorptionTable:
    """
    Molecular absorption cross sections on a (wavenumber, pressure, dT) grid.

    The temperature axis is an anomaly relative to a reference temperature
    profile tabulated on the pressure axis.

    Attributes
    ----------
    wavenumber : array, (nw,)
        Wavenumber in cm^-1
    pressure : array, (np,)
        Pressure in Pa
    temperature_anomaly : array, (nt,)
        Temperature deviation from the reference profile in K
    reference_temperature : array, (np,)
        Reference temperature at each pressure node in K
    ln_cross_section : array, (nw, np, nt)
        Natural log of the absorption cross section in m^2
    """

    wavenumber: np.ndarray
    pressure: np.ndarray
    temperature_anomaly: np.ndarray
    reference_temperature: np.ndarray
    ln_cross_section: np.ndarray

    def __post_init__(self):
        shape = (self.wavenumber.size, self.pressure.size, self.temperature_anomaly.size)
        if self.ln_cross_section.shape != shape:
            raise ConfigurationError(
                f"Absorption table values have shape {self.ln_cross_section.shape}, "
                f"axes imply {shape}"
            )
        if self.reference_temperature.shape != (self.pressure.size,):
            raise ConfigurationError("Reference temperature must be tabulated on the pressure axis")
        if np.any(self.pressure <= 0):
            raise ConfigurationError("Absorption table pressures must be positive")

    @property
    def spectral_range(self) -> Tuple[float, float]:
        return float(self.wavenumber.min()), float(self.wavenumber.max())


def load_absorption_table(path: Union[str, Path]) -> AbsorptionTable:
    """
    Load a gas absorption table from CSV or HDF5.

    CSV columns: ``wavenumber, pressure, temperature_anomaly,
    reference_temperature, cross_section``.

    HDF5 datasets: ``wavenumber, pressure, temperature_anomaly,
    reference_temperature`` and ``ln_cross_section`` (or ``cross_section``).
    """
    path = Path(path)

    if path.suffix.lower() in HDF5_SUFFIXES:
        _require_h5py()
        if not path.exists():
            raise FileNotFoundError(f"Table file not found: {path}")
        with h5py.File(path, "r") as f:
            if "ln_cross_section" in f:
                ln_xs = f["ln_cross_section"][:]
            else:
                ln_xs = np.log(np.maximum(f["cross_section"][:], LOG_FLOOR))
            table = AbsorptionTable(
                wavenumber=f["wavenumber"][:].astype(float),
                pressure=f["pressure"][:].astype(float),
                temperature_anomaly=f["temperature_anomaly"][:].astype(float),
                reference_temperature=f["reference_temperature"][:].astype(float),
                ln_cross_section=np.asarray(ln_xs, dtype=float),
            )
    else:
        columns = [
            "wavenumber",
            "pressure",
            "temperature_anomaly",
            "reference_temperature",
            "cross_section",
        ]
        df = _read_csv(path, columns)
        if (df["cross_section"] < 0).any():
            raise ConfigurationError(f"{path.name}: negative cross sections")

        reference = df.groupby("pressure")["reference_temperature"]
        if (reference.nunique() > 1).any():
            raise ConfigurationError(
                f"{path.name}: reference_temperature must be unique per pressure"
            )

        axes, values = _dense_from_long(
            df, ["wavenumber", "pressure", "temperature_anomaly"], "cross_section", path.name
        )
        table = AbsorptionTable(
            wavenumber=axes[0],
            pressure=axes[1],
            temperature_anomaly=axes[2],
            reference_temperature=reference.first().reindex(axes[1]).to_numpy(dtype=float),
            ln_cross_section=np.log(np.maximum(values, LOG_FLOOR)),
        )

    logger.info(
        f"Loaded absorption table {path.name}: {table.wavenumber.size} wavenumbers x "
        f"{table.pressure.size} pressures x {table.temperature_anomaly.size} dT"
    )
    return table


def save_absorption_table(table: AbsorptionTable, path: Union[str, Path]) -> None:
    """Write an absorption table as long-form CSV or HDF5."""
    path = Path(path)

    if path.suffix.lower() in HDF5_SUFFIXES:
        _require_h5py()
        with h5py.File(path, "w") as f:
            f.create_dataset("wavenumber", data=table.wavenumber)
            f.create_dataset("pressure", data=table.pressure)
            f.create_dataset("temperature_anomaly", data=table.temperature_anomaly)
            f.create_dataset("reference_temperature", data=table.reference_temperature)
            f.create_dataset("ln_cross_section", data=table.ln_cross_section)
    else:
        w, p, t = np.meshgrid(
            table.wavenumber, table.pressure, table.temperature_anomaly, indexing="ij"
        )
        tref = np.broadcast_to(table.reference_temperature[None, :, None], w.shape)
        df = pd.DataFrame(
            {
                "wavenumber": w.ravel(),
                "pressure": p.ravel(),
                "temperature_anomaly": t.ravel(),
                "reference_temperature": tref.ravel(),
                "cross_section": np.exp(table.ln_cross_section).ravel(),
            }
        )
        df.to_csv(path, index=False)

    logger.info(f"Saved absorption table to {path}")


# ============================================================================
# Continuum / collision-induced absorption (wavenumber x temperature)
# ============================================================================


@dataclass(frozen=True)
class ContinuumTable:
    """
    Binary absorption coefficients on a (wavenumber, temperature) grid.

    Attributes
    ----------
    wavenumber : array, (nw,)
        Wavenumber in cm^-1
    temperature : array, (nt,)
        Temperature in K
    ln_coefficient : array, (nw, nt)
        Natural log of the binary coefficient in m^5
    """

    wavenumber: np.ndarray
    temperature: np.ndarray
    ln_coefficient: np.ndarray

    @property
    def spectral_range(self) -> Tuple[float, float]:
        return float(self.wavenumber.min()), float(self.wavenumber.max())


def load_continuum_table(path: Union[str, Path]) -> ContinuumTable:
    """
    Load a continuum table from long-form CSV.

    Columns: ``wavenumber`` (or ``wavelength_nm``), ``temperature``,
    ``coefficient`` (m^5).
    """
    path = Path(path)
    df = _read_csv(path, ["temperature", "coefficient"])
    df = df.assign(wavenumber=_spectral_axis(df, path.name))
    if (df["coefficient"] < 0).any():
        raise ConfigurationError(f"{path.name}: negative continuum coefficients")

    axes, values = _dense_from_long(df, ["wavenumber", "temperature"], "coefficient", path.name)
    table = ContinuumTable(
        wavenumber=axes[0],
        temperature=axes[1],
        ln_coefficient=np.log(np.maximum(values, LOG_FLOOR)),
    )
    logger.info(
        f"Loaded continuum table {path.name}: {axes[0].size} wavenumbers x "
        f"{axes[1].size} temperatures"
    )
    return table


# ============================================================================
# Particle (cloud / aerosol) single-scattering properties
# ============================================================================


@dataclass(frozen=True)
class ParticleTable:
    """
    Per-particle optical properties versus wavenumber.

    Attributes
    ----------
    wavenumber : array, (nw,)
        Wavenumber in cm^-1, ascending
    cross_section : array, (nw,)
        Extinction cross section per particle in m^2
    ssa : array, (nw,)
        Single-scattering albedo
    asymmetry : array, (nw,)
        Asymmetry factor g
    """

    wavenumber: np.ndarray
    cross_section: np.ndarray
    ssa: np.ndarray
    asymmetry: np.ndarray

    def __post_init__(self):
        if np.any(self.cross_section < 0):
            raise ConfigurationError("Particle extinction cross sections must be non-negative")
        if np.any((self.ssa < 0) | (self.ssa > 1)):
            raise ConfigurationError("Particle single-scattering albedo must be in [0, 1]")
        if np.any(np.abs(self.asymmetry) >= 1):
            raise ConfigurationError("Particle asymmetry factor must be in (-1, 1)")

    @property
    def spectral_range(self) -> Tuple[float, float]:
        return float(self.wavenumber.min()), float(self.wavenumber.max())


def load_particle_table(path: Union[str, Path]) -> ParticleTable:
    """
    Load particle optics from CSV.

    Columns: ``wavenumber`` (or ``wavelength_nm``), ``cross_section``, ``ssa``,
    ``asymmetry``.
    """
    path = Path(path)
    df = _read_csv(path, ["cross_section", "ssa", "asymmetry"])
    df = df.assign(wavenumber=_spectral_axis(df, path.name)).sort_values("wavenumber")
    if df["wavenumber"].duplicated().any():
        raise ConfigurationError(f"{path.name}: duplicate wavenumbers")

    table = ParticleTable(
        wavenumber=df["wavenumber"].to_numpy(dtype=float),
        cross_section=df["cross_section"].to_numpy(dtype=float),
        ssa=df["ssa"].to_numpy(dtype=float),
        asymmetry=df["asymmetry"].to_numpy(dtype=float),
    )
    logger.info(f"Loaded particle table {path.name}: {table.wavenumber.size} wavenumbers")
    return table


# ============================================================================
# Photolysis cross sections (per product branch)
# ============================================================================

CROSS_SECTION_FORMATS = ["branches", "total"]


@dataclass(frozen=True)
class CrossSectionTable:
    """
    Photo-absorption cross sections split by product branch.

    Attributes
    ----------
    wavenumber : array, (nw,)
        Wavenumber in cm^-1, ascending
    branches : tuple of str
        Branch names
    cross_sections : array, (nbranch, nw)
        Branch cross sections in m^2; their sum is the total cross section
    """

    wavenumber: np.ndarray
    branches: Tuple[str, ...]
    cross_sections: np.ndarray

    @property
    def total(self) -> np.ndarray:
        return self.cross_sections.sum(axis=0)

    @property
    def spectral_range(self) -> Tuple[float, float]:
        return float(self.wavenumber.min()), float(self.wavenumber.max())


def load_cross_section_table(path: Union[str, Path], format: str = "branches") -> CrossSectionTable:
    """
    Load photolysis cross sections and normalize them to per-branch form.

    Parameters
    ----------
    path : str or Path
        CSV file with a ``wavenumber`` or ``wavelength_nm`` column
    format : str
        ``branches``: every other column is a branch cross section (m^2).
        ``total``: a ``total`` column and ``ratio_<branch>`` columns whose
        values sum to one wherever the total is non-zero.

    Returns
    -------
    CrossSectionTable
        Table sorted by ascending wavenumber
    """
    path = Path(path)
    if format not in CROSS_SECTION_FORMATS:
        raise ConfigurationError(
            f"Unknown cross-section format: {format}. Must be one of: {CROSS_SECTION_FORMATS}"
        )

    df = _read_csv(path, [])
    df = df.assign(wavenumber=_spectral_axis(df, path.name))
    df = df.drop(columns=[c for c in ["wavelength_nm"] if c in df.columns])
    df = df.sort_values("wavenumber").reset_index(drop=True)
    if df["wavenumber"].duplicated().any():
        raise ConfigurationError(f"{path.name}: duplicate spectral coordinates")

    if format == "branches":
        branches = [c for c in df.columns if c != "wavenumber"]
        if not branches:
            raise ConfigurationError(f"{path.name}: no branch columns")
        cross_sections = df[branches].to_numpy(dtype=float).T
    else:
        if "total" not in df.columns:
            raise ConfigurationError(f"{path.name}: 'total' format requires a 'total' column")
        ratio_columns = [c for c in df.columns if c.startswith("ratio_")]
        if not ratio_columns:
            raise ConfigurationError(f"{path.name}: no 'ratio_<branch>' columns")
        ratios = df[ratio_columns].to_numpy(dtype=float)
        total = df["total"].to_numpy(dtype=float)
        sums = ratios.sum(axis=1)
        active = total > 0
        if np.any(np.abs(sums[active] - 1.0) > FRACTION_SUM_TOL):
            raise ConfigurationError(f"{path.name}: branching ratios do not sum to 1")
        if np.any(ratios < 0):
            raise ConfigurationError(f"{path.name}: negative branching ratios")
        branches = [c[len("ratio_"):] for c in ratio_columns]
        cross_sections = (ratios * total[:, None]).T

    if np.any(cross_sections < 0):
        raise ConfigurationError(f"{path.name}: negative cross sections")

    table = CrossSectionTable(
        wavenumber=df["wavenumber"].to_numpy(dtype=float),
        branches=tuple(branches),
        cross_sections=cross_sections,
    )
    logger.info(
        f"Loaded cross sections {path.name} ({format}): {len(branches)} branches, "
        f"{table.wavenumber.size} points"
    )
    return table
