"""
Tests for spectral bins, grids and the Planck function.
"""

import pytest
import numpy as np

from specrad.core.constants import SIGMA_SB
from specrad.core.exceptions import ConfigurationError
from specrad.spectral.bins import SpectralBin
from specrad.spectral.grid import CorrelatedKGrid, CustomGrid, RegularGrid, grid_from_bins
from specrad.spectral.planck import planck_bin_average, planck_wavenumber


class TestSpectralBin:
    def test_geometry(self):
        b = SpectralBin(100.0, 300.0)
        assert b.center == 200.0
        assert b.width == 200.0
        assert b.contains(100.0)
        assert not b.contains(300.0)

    def test_overlaps(self):
        b = SpectralBin(100.0, 200.0)
        assert b.overlaps(SpectralBin(150.0, 250.0))
        assert not b.overlaps(SpectralBin(200.0, 300.0))

    def test_sample(self):
        b = SpectralBin(0.0, 4.0)
        assert np.array_equal(b.sample(), [2.0])
        assert np.array_equal(b.sample(4), [0.5, 1.5, 2.5, 3.5])
        with pytest.raises(ValueError):
            b.sample(0)

    @pytest.mark.parametrize("edges", [(200.0, 100.0), (100.0, 100.0), (-1.0, 5.0), (0.0, np.inf)])
    def test_invalid(self, edges):
        with pytest.raises(ValueError):
            SpectralBin(*edges)

    def test_hashable(self):
        assert len({SpectralBin(1.0, 2.0), SpectralBin(1.0, 2.0)}) == 1


class TestGrids:
    def test_custom_grid_weights(self):
        grid = CustomGrid([500.0, 700.0, 1000.0])
        assert len(grid) == 2
        assert np.array_equal(grid.weights, [200.0, 300.0])
        assert np.allclose(grid.normalized_weights, [0.4, 0.6])
        assert (grid.wmin, grid.wmax) == (500.0, 1000.0)
        assert np.array_equal(grid.centers, [600.0, 850.0])

    def test_weights_read_only(self):
        grid = CustomGrid([0.0, 1.0, 2.0])
        with pytest.raises(ValueError):
            grid.weights[0] = 5.0

    def test_custom_grid_requires_ascending(self):
        with pytest.raises(ConfigurationError):
            CustomGrid([100.0, 50.0])
        with pytest.raises(ConfigurationError):
            CustomGrid([100.0])

    def test_regular_grid(self):
        grid = RegularGrid(500.0, 1000.0, 100.0)
        assert len(grid) == 5
        assert np.allclose(grid.weights, 100.0)

    def test_regular_grid_partial_last_bin(self):
        grid = RegularGrid(0.0, 250.0, 100.0)
        assert len(grid) == 3
        assert grid[-1].width == pytest.approx(50.0)
        assert grid.wmax == 250.0

    @pytest.mark.parametrize("args", [(0.0, 100.0, 0.0), (100.0, 100.0, 10.0)])
    def test_regular_grid_invalid(self, args):
        with pytest.raises(ConfigurationError):
            RegularGrid(*args)

    def test_correlated_k_grid(self):
        grid = CorrelatedKGrid(1000.0, 1500.0, [0.25, 0.75])
        assert len(grid) == 2
        assert grid[0] == grid[1]
        assert np.allclose(grid.weights, [125.0, 375.0])
        assert np.allclose(grid.normalized_weights, [0.25, 0.75])

    def test_correlated_k_weights_sum(self):
        with pytest.raises(ConfigurationError, match="sum"):
            CorrelatedKGrid(1000.0, 1500.0, [0.5, 0.2])

    def test_integrate_and_average(self):
        grid = CustomGrid([0.0, 1.0, 3.0])
        values = np.array([[1.0, 2.0], [4.0, 8.0]])
        assert np.allclose(grid.integrate(values), [9.0, 18.0])
        assert np.allclose(grid.average(values), [3.0, 6.0])

    def test_grid_from_bins(self):
        grid = grid_from_bins([(0.0, 1.0), (1.0, 3.0)])
        assert np.array_equal(grid.edges, [0.0, 1.0, 3.0])
        with pytest.raises(ConfigurationError):
            grid_from_bins([(0.0, 1.0), (2.0, 3.0)])


class TestPlanck:
    def test_zero_temperature(self):
        assert planck_wavenumber(1000.0, 0.0) == 0.0
        assert planck_bin_average(SpectralBin(500.0, 600.0), 0.0) == 0.0

    def test_array_input(self):
        values = planck_wavenumber(np.array([0.0, 500.0, 1000.0]), 300.0)
        assert values.shape == (3,)
        assert values[0] == 0.0
        assert np.all(values[1:] > 0)

    def test_stefan_boltzmann(self):
        """pi * integral of B over wavenumber equals sigma T^4."""
        temperature = 300.0
        total = planck_bin_average(SpectralBin(1.0e-3, 1.0e4), temperature) * 1.0e4
        assert np.pi * total == pytest.approx(SIGMA_SB * temperature**4, rel=1e-3)

    def test_bin_average_of_narrow_bin(self):
        b = SpectralBin(999.5, 1000.5)
        assert planck_bin_average(b, 250.0) == pytest.approx(planck_wavenumber(1000.0, 250.0), rel=1e-5)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
