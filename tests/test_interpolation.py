"""
Tests for multi-linear table interpolation.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest
import numpy as np

from specrad.core.exceptions import ConfigurationError, InterpolationRangeError
from specrad.core.interpolation import MultilinearTable, OutOfRangePolicy


@pytest.fixture
def plane():
    """f(x, y) = 2x + 3y on a 3 x 4 grid."""
    x = np.array([0.0, 1.0, 2.0])
    y = np.array([0.0, 10.0, 20.0, 30.0])
    values = 2.0 * x[:, None] + 3.0 * y[None, :]
    return x, y, values


def test_exact_for_linear_function(plane):
    x, y, values = plane
    table = MultilinearTable([x, y], values, names=["x", "y"])
    points = np.array([[0.5, 5.0], [1.7, 22.0], [2.0, 30.0]])
    assert np.allclose(table(points), 2.0 * points[:, 0] + 3.0 * points[:, 1])


def test_batch_shape_preserved(plane):
    x, y, values = plane
    table = MultilinearTable([x, y], values)
    points = np.zeros((4, 5, 2))
    assert table(points).shape == (4, 5)


def test_descending_axis(plane):
    x, y, values = plane
    table = MultilinearTable([x[::-1], y], values[::-1])
    assert table(np.array([[0.5, 5.0]]))[0] == pytest.approx(16.0)
    assert table.bounds(0) == (0.0, 2.0)


def test_degenerate_axis():
    table = MultilinearTable([[5.0], [0.0, 1.0]], [[1.0, 3.0]], names=["p", "w"])
    assert table(np.array([[100.0, 0.5]]))[0] == pytest.approx(2.0)
    assert table.out_of_range_count == 0


def test_constant_table():
    table = MultilinearTable([[1.0]], [7.0])
    assert np.array_equal(table(np.array([[3.0], [4.0]])), [7.0, 7.0])


def test_clamp_counts_and_warns_once(plane, caplog):
    x, y, values = plane
    table = MultilinearTable([x, y], values, names=["x", "y"], name="plane")

    with caplog.at_level(logging.WARNING, logger="specrad"):
        first = table(np.array([[5.0, 5.0]]))
        table(np.array([[-1.0, 40.0]]))

    assert first[0] == pytest.approx(2.0 * 2.0 + 3.0 * 5.0)
    assert table.out_of_range_count == 2
    warnings = [r for r in caplog.records if "outside" in r.getMessage()]
    assert len(warnings) == 1


def test_clamp_count_exact_across_threads(plane):
    x, y, values = plane
    table = MultilinearTable([x, y], values, name="shared")
    points = np.array([[5.0, 5.0], [1.0, 5.0], [-2.0, 50.0]])

    def lookup(_):
        for _ in range(50):
            table(points)

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(lookup, range(16)))

    assert table.out_of_range_count == 16 * 50 * 2


def test_extrapolate(plane):
    x, y, values = plane
    table = MultilinearTable([x, y], values, policy="extrapolate")
    assert table(np.array([[3.0, 0.0]]))[0] == pytest.approx(6.0)
    assert table.out_of_range_count == 1


def test_error_policy(plane):
    x, y, values = plane
    table = MultilinearTable([x, y], values, names=["x", "y"], policy=OutOfRangePolicy.ERROR)
    with pytest.raises(InterpolationRangeError) as exc_info:
        table(np.array([[1.0, 31.0]]))
    assert exc_info.value.axis == "y"
    assert exc_info.value.bounds == (0.0, 30.0)


def test_policy_parse():
    assert OutOfRangePolicy.parse("CLAMP") is OutOfRangePolicy.CLAMP
    assert OutOfRangePolicy.parse(OutOfRangePolicy.ERROR) is OutOfRangePolicy.ERROR
    with pytest.raises(ConfigurationError, match="Unknown interpolation policy"):
        OutOfRangePolicy.parse("nearest")


@pytest.mark.parametrize(
    "axes,values",
    [
        ([[0.0, 1.0]], [[1.0, 2.0]]),
        ([[0.0, 1.0, 2.0]], [1.0, 2.0]),
        ([[0.0, 0.0, 1.0]], [1.0, 2.0, 3.0]),
        ([[0.0, 1.0]], [1.0, np.nan]),
    ],
)
def test_invalid_tables(axes, values):
    with pytest.raises(ConfigurationError):
        MultilinearTable(axes, values)


def test_wrong_point_dimension(plane):
    x, y, values = plane
    table = MultilinearTable([x, y], values)
    with pytest.raises(ValueError):
        table(np.array([1.0, 2.0, 3.0]))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
