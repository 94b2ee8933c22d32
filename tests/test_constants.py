"""
Tests for physical constants module.
"""

import pytest
from specrad.core import constants


def test_constants_exist():
    """Test that all expected constants are defined."""
    for name in ["KB", "H_PLANCK", "C_LIGHT", "C1_WAVENUMBER", "C2_WAVENUMBER", "CP_DRY_AIR"]:
        assert hasattr(constants, name)


def test_second_radiation_constant():
    """c2 = hc/k is about 1.4388 cm K."""
    assert constants.C2_WAVENUMBER == pytest.approx(1.4388, rel=1e-4)


def test_first_radiation_constant():
    """2hc^2 in W m^-2 sr^-1 (cm^-1)^-4."""
    assert constants.C1_WAVENUMBER == pytest.approx(1.191e-8, rel=1e-3)


def test_gas_constant():
    assert constants.R_GAS == pytest.approx(8.314462, rel=1e-6)


def test_diffusivity():
    assert constants.DIFFUSIVITY == 1.66


if __name__ == "__main__":
    pytest.main([__file__])
