"""
Tests for atmospheric state and column containers.
"""

import pytest
import numpy as np

from specrad.atmosphere.state import AtmosphericState, Column
from specrad.core.constants import KB


def test_number_density(sample_state):
    assert sample_state.number_density == pytest.approx(1.0e4 / (KB * 250.0))
    assert sample_state.species_number_density("CO2") == pytest.approx(
        4.0e-4 * sample_state.number_density
    )
    assert sample_state.mole_fraction("CH4") == 0.0


def test_mass_density():
    state = AtmosphericState(273.15, 101325.0)
    assert state.mass_density == pytest.approx(1.2922, rel=1e-3)


def test_mixing_ratio_round_trip():
    state = AtmosphericState.from_mixing_ratios(250.0, 1.0e4, {"H2O": 0.01, "CO2": 4.0e-4})
    assert state.composition["H2O"] == pytest.approx(0.01 / 1.0104)
    ratios = state.mixing_ratios()
    assert ratios["H2O"] == pytest.approx(0.01)
    assert ratios["CO2"] == pytest.approx(4.0e-4)


def test_mixing_ratios_need_background():
    state = AtmosphericState(250.0, 1.0e4, {"N2": 0.8, "O2": 0.2})
    with pytest.raises(ValueError, match="background"):
        state.mixing_ratios()


def test_state_is_immutable(sample_state):
    with pytest.raises(AttributeError):
        sample_state.temperature = 300.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"temperature": 0.0, "pressure": 1.0e4},
        {"temperature": 250.0, "pressure": -1.0},
        {"temperature": 250.0, "pressure": 1.0e4, "composition": {"X": 1.5}},
        {"temperature": 250.0, "pressure": 1.0e4, "composition": {"A": 0.7, "B": 0.7}},
    ],
)
def test_state_validation(kwargs):
    with pytest.raises(ValueError):
        AtmosphericState(**kwargs).validate()


def test_column_accessors(sample_column):
    assert sample_column.nlayer == 3
    assert sample_column.nlevel == 4
    assert len(sample_column) == 3
    assert np.array_equal(sample_column.temperatures, [220.0, 250.0, 280.0])
    assert np.array_equal(sample_column.pressures, [1.0e4, 5.0e4, 9.0e4])
    assert np.allclose(sample_column.mole_fractions("N2"), 0.78)
    assert sample_column[0].temperature == 220.0
    assert sample_column.validate()


def test_column_thickness_read_only(sample_column):
    with pytest.raises(ValueError):
        sample_column.thickness[0] = 5.0


def test_column_number_densities(sample_column):
    total = sample_column.number_densities()
    assert np.allclose(sample_column.number_densities("O2"), 0.21 * total)


def test_level_temperatures(sample_column):
    levels = sample_column.level_temperatures()
    assert np.allclose(levels, [205.0, 235.0, 265.0, 295.0])


def test_level_temperatures_single_layer():
    column = Column([AtmosphericState(250.0, 1.0e4)], [10.0])
    assert np.array_equal(column.level_temperatures(), [250.0, 250.0])


def test_uniform_column():
    state = AtmosphericState(250.0, 1.0e4)
    column = Column.uniform(state, 4, 50.0)
    assert column.nlayer == 4
    assert np.array_equal(column.thickness, [50.0] * 4)


@pytest.mark.parametrize(
    "layers,thickness",
    [([], []), ([AtmosphericState(250.0, 1.0e4)], [1.0, 2.0])],
)
def test_column_construction_errors(layers, thickness):
    with pytest.raises(ValueError):
        Column(layers, thickness)


def test_column_negative_thickness():
    column = Column([AtmosphericState(250.0, 1.0e4)], [-1.0])
    with pytest.raises(ValueError, match="thickness"):
        column.validate()


def test_column_reports_bad_layer():
    column = Column([AtmosphericState(250.0, 1.0e4), AtmosphericState(-5.0, 1.0e4)], [1.0, 1.0])
    with pytest.raises(ValueError, match="Layer 1"):
        column.validate()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
