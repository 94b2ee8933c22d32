"""
Pytest configuration and shared fixtures for specrad tests.

This module provides:
- Small lookup tables written to temporary CSV files
- A sample atmospheric column
- Sample configuration dictionaries and files
"""

import os
import pytest
import pandas as pd
import tempfile
from pathlib import Path

from specrad.atmosphere.state import AtmosphericState, Column
from specrad.core.logging_config import reset_warnings

# Absorption table nodes
TABLE_WAVENUMBERS = [0.0, 1000.0, 2000.0, 3000.0]
TABLE_PRESSURES = [1.0e3, 1.0e4, 1.0e5]
TABLE_REFERENCE_T = [220.0, 250.0, 280.0]
TABLE_DT = [-50.0, 0.0, 50.0]


def absorption_cross_section(wavenumber, pressure, dT):
    """Cross section used to fill the test absorption table (m^2)."""
    return 1.0e-26 * (1.0 + wavenumber / 1000.0) * (1.0 + dT / 100.0)


@pytest.fixture(autouse=True)
def _fresh_warnings():
    """Forget one-time warnings between tests."""
    reset_warnings()
    yield
    reset_warnings()


@pytest.fixture
def absorption_table_csv(tmp_path):
    """Long-form CSV absorption table on a 4 x 3 x 3 grid."""
    rows = []
    for w in TABLE_WAVENUMBERS:
        for p, tref in zip(TABLE_PRESSURES, TABLE_REFERENCE_T):
            for dT in TABLE_DT:
                rows.append(
                    {
                        "wavenumber": w,
                        "pressure": p,
                        "temperature_anomaly": dT,
                        "reference_temperature": tref,
                        "cross_section": absorption_cross_section(w, p, dT),
                    }
                )
    path = tmp_path / "co2.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


@pytest.fixture
def continuum_table_csv(tmp_path):
    """Continuum table with a constant binary coefficient of 1e-50 m^5."""
    rows = [
        {"wavenumber": w, "temperature": t, "coefficient": 1.0e-50}
        for w in [0.0, 5000.0]
        for t in [150.0, 350.0]
    ]
    path = tmp_path / "n2n2.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


@pytest.fixture
def particle_table_csv(tmp_path):
    """Particle optics constant in wavenumber."""
    df = pd.DataFrame(
        {
            "wavenumber": [0.0, 2500.0, 5000.0],
            "cross_section": [1.0e-12, 1.0e-12, 1.0e-12],
            "ssa": [0.9, 0.9, 0.9],
            "asymmetry": [0.7, 0.7, 0.7],
        }
    )
    path = tmp_path / "cloud.csv"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def cross_section_csv(tmp_path):
    """Two-branch photolysis cross sections in the per-branch layout."""
    df = pd.DataFrame(
        {
            "wavenumber": [20000.0, 35000.0, 50000.0],
            "O1D": [1.0e-22, 1.0e-22, 1.0e-22],
            "O3P": [3.0e-22, 3.0e-22, 3.0e-22],
        }
    )
    path = tmp_path / "o3_branches.csv"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def sample_state():
    """Mid-troposphere air parcel."""
    return AtmosphericState(
        temperature=250.0,
        pressure=1.0e4,
        composition={"CO2": 4.0e-4, "N2": 0.78, "O2": 0.21},
    )


@pytest.fixture
def sample_column():
    """Three-layer column, top layer first, 1 km layers."""
    composition = {"CO2": 4.0e-4, "N2": 0.78, "O2": 0.21}
    layers = [
        AtmosphericState(220.0, 1.0e4, composition),
        AtmosphericState(250.0, 5.0e4, composition),
        AtmosphericState(280.0, 9.0e4, composition),
    ]
    return Column(layers, [1000.0, 1000.0, 1000.0])


@pytest.fixture
def column_csv(tmp_path):
    """Column file matching ``sample_column``."""
    df = pd.DataFrame(
        {
            "pressure": [1.0e4, 5.0e4, 9.0e4],
            "temperature": [220.0, 250.0, 280.0],
            "thickness": [1000.0, 1000.0, 1000.0],
            "CO2": [4.0e-4, 4.0e-4, 4.0e-4],
            "N2": [0.78, 0.78, 0.78],
            "O2": [0.21, 0.21, 0.21],
        }
    )
    path = tmp_path / "column.csv"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def sample_config_dict():
    """Configuration with two bands built only from constant absorbers."""
    return {
        "radiation": {
            "nlayer": 3,
            "ncol": 2,
            "directions": [[1.0, 0.0], [0.5, 0.0]],
            "interpolation": "clamp",
        },
        "bands": [
            {
                "name": "sw",
                "npmom": 2,
                "grid": {"type": "regular", "wmin": 10000.0, "wmax": 20000.0, "dw": 5000.0},
                "solver": {"type": "beer_lambert", "fbeam": 0.1, "umu0": 1.0, "albedo": 0.2},
                "absorbers": [
                    {
                        "type": "constant",
                        "name": "haze",
                        "attenuation": 1.0e-4,
                        "ssa": 0.5,
                        "pmom": [1.0, 0.5],
                    },
                ],
            },
            {
                "name": "lw",
                "npmom": 2,
                "grid": {"type": "custom", "edges": [500.0, 700.0, 1000.0]},
                "solver": {
                    "type": "beer_lambert",
                    "planck": True,
                    "btemp": 280.0,
                    "albedo": 0.0,
                },
                "absorbers": [
                    {"type": "constant", "name": "gray", "attenuation": 5.0e-4},
                ],
            },
        ],
    }


@pytest.fixture
def temp_config_file(sample_config_dict):
    """Create a temporary YAML config file."""
    import yaml

    config_fd, config_path = tempfile.mkstemp(suffix=".yaml")
    os.close(config_fd)  # Close file descriptor to prevent leaks

    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)

    yield config_path

    Path(config_path).unlink()


@pytest.fixture
def table_config_file(tmp_path, absorption_table_csv, particle_table_csv):
    """YAML config in ``tmp_path`` referencing tables by relative path."""
    import yaml

    config = {
        "radiation": {"nlayer": 3, "ncol": 1},
        "bands": [
            {
                "name": "ir",
                "grid": {"type": "regular", "wmin": 500.0, "wmax": 2500.0, "dw": 500.0},
                "solver": {"type": "beer_lambert", "planck": True, "btemp": 280.0},
                "absorbers": [
                    {
                        "type": "tabulated",
                        "name": "CO2",
                        "table": absorption_table_csv.name,
                        "n_samples": 2,
                    },
                    {"type": "particle", "name": "cloud", "table": particle_table_csv.name},
                ],
            }
        ],
    }
    path = tmp_path / "config.yaml"
    with open(path, "w") as f:
        yaml.dump(config, f)
    return path


@pytest.fixture
def uniform_column():
    """Factory for uniform columns of a given layer count and thickness."""

    def _create(nlayer=3, thickness=100.0, temperature=250.0, pressure=5.0e4, composition=None):
        state = AtmosphericState(temperature, pressure, composition or {})
        return Column.uniform(state, nlayer, thickness)

    return _create

