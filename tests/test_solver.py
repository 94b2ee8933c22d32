"""
Tests for solver adapter types and the Beer-Lambert solver.
"""

import pytest
import numpy as np

from specrad.atmosphere.state import AtmosphericState, Column
from specrad.core.exceptions import ConfigurationError, SolverError, SolverErrorCode
from specrad.radiation.solver import (
    BandOptics,
    BeerLambertSolver,
    BoundaryConditions,
    LayerRange,
    SolverOutputs,
)
from specrad.spectral.bins import SpectralBin
from specrad.spectral.planck import planck_bin_average


def make_optics(tau, ssa=None, npmom=1, bins=None):
    tau = np.atleast_2d(np.asarray(tau, dtype=float))
    nbin, nlayer = tau.shape
    if ssa is None:
        ssa = np.zeros_like(tau)
    pmom = np.zeros((nbin, nlayer, npmom + 1))
    pmom[..., 0] = 1.0
    if bins is None:
        bins = tuple(SpectralBin(500.0 + 100.0 * i, 600.0 + 100.0 * i) for i in range(nbin))
    weights = np.array([b.width for b in bins])
    return BandOptics(tau=tau, ssa=np.asarray(ssa, dtype=float), pmom=pmom, bins=bins, weights=weights)


def isothermal_column(nlayer, temperature=260.0):
    return Column.uniform(AtmosphericState(temperature, 5.0e4), nlayer, 100.0)


class TestLayerRange:
    def test_full(self):
        r = LayerRange.full(4)
        assert (r.start, r.stop) == (0, 4)
        assert r.nlayer == 4
        assert r.level_slice == slice(0, 5)

    def test_from_inclusive(self):
        assert LayerRange.from_inclusive(1, 3) == LayerRange(0, 3)
        assert LayerRange.from_inclusive(2, 2).level_slice == slice(1, 3)

    @pytest.mark.parametrize("start,stop", [(-1, 2), (2, 2), (3, 1)])
    def test_invalid(self, start, stop):
        with pytest.raises(ValueError):
            LayerRange(start, stop)

    def test_check_against_column(self):
        with pytest.raises(SolverError) as exc_info:
            LayerRange(0, 5).check(3)
        assert exc_info.value.code is SolverErrorCode.INVALID_RANGE


class TestBoundaryConditions:
    def test_defaults(self):
        bc = BoundaryConditions()
        assert bc.fbeam == 0.0
        assert bc.umu0 == 1.0
        assert not bc.planck

    @pytest.mark.parametrize(
        "kwargs",
        [{"umu0": 0.0}, {"umu0": 1.5}, {"albedo": -0.1}, {"albedo": 1.1}, {"btemp": -1.0}],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            BoundaryConditions(**kwargs)

    def test_solver_builds_from_kwargs(self):
        solver = BeerLambertSolver(fbeam=3.0, albedo=0.5)
        assert solver.boundary.fbeam == 3.0
        assert solver.boundary.albedo == 0.5


def test_compute_before_prepare():
    solver = BeerLambertSolver()
    with pytest.raises(SolverError) as exc_info:
        solver.compute(LayerRange(0, 1), SolverOutputs(flxdn=np.zeros(2)))
    assert exc_info.value.code is SolverErrorCode.NOT_PREPARED


def test_prepare_dimension_mismatch():
    solver = BeerLambertSolver()
    optics = make_optics(np.zeros((1, 2)))
    with pytest.raises(SolverError) as exc_info:
        solver.prepare(optics, isothermal_column(3))
    assert exc_info.value.code is SolverErrorCode.DIMENSION_MISMATCH
    assert not solver.is_prepared


def test_prepare_rejects_bad_albedo():
    solver = BeerLambertSolver()
    optics = make_optics([[1.0, 1.0]], ssa=[[0.5, 1.5]])
    with pytest.raises(SolverError) as exc_info:
        solver.prepare(optics, isothermal_column(2))
    assert exc_info.value.code is SolverErrorCode.INVALID_ALBEDO


def test_prepare_rejects_non_finite():
    solver = BeerLambertSolver()
    optics = make_optics([[1.0, np.nan]])
    with pytest.raises(SolverError) as exc_info:
        solver.prepare(optics, isothermal_column(2))
    assert exc_info.value.code is SolverErrorCode.NON_FINITE


def test_output_view_shape_checked():
    solver = BeerLambertSolver(fbeam=1.0)
    solver.prepare(make_optics(np.zeros((1, 2))), isothermal_column(2))
    with pytest.raises(SolverError) as exc_info:
        solver.compute(LayerRange(0, 2), SolverOutputs(flxdn=np.zeros(5)))
    assert exc_info.value.code is SolverErrorCode.DIMENSION_MISMATCH


def test_reset_drops_prepared_state():
    solver = BeerLambertSolver()
    solver.prepare(make_optics(np.zeros((1, 2))), isothermal_column(2))
    assert solver.is_prepared
    solver.reset()
    assert not solver.is_prepared


def test_vacuum_with_reflecting_surface():
    solver = BeerLambertSolver(fbeam=2.0, umu0=0.5, albedo=0.3)
    optics = make_optics(np.zeros((2, 3)))
    solver.prepare(optics, isothermal_column(3))

    flxup, flxdn = np.zeros(4), np.zeros(4)
    solver.compute(LayerRange.full(3), SolverOutputs(flxup=flxup, flxdn=flxdn))

    beam = 2.0 * 0.5 * optics.weights.sum()
    assert np.allclose(flxdn, beam)
    assert np.allclose(flxup, 0.3 * beam)


def test_partial_range_writes_only_its_levels():
    solver = BeerLambertSolver(fbeam=1.0)
    solver.prepare(make_optics(np.full((1, 4), 0.1)), isothermal_column(4))

    flxdn = np.full(5, -1.0)
    solver.compute(LayerRange(1, 3), SolverOutputs(flxdn=flxdn))

    assert flxdn[0] == -1.0
    assert flxdn[4] == -1.0
    assert np.allclose(flxdn[1:4], 100.0 * np.exp(-0.1 * np.arange(1, 4)))


def test_isothermal_equilibrium():
    """Isothermal black column over an equally warm surface: no net flux."""
    temperature = 260.0
    tau = np.array([[0.5, 2.0, 1.0], [0.1, 0.1, 0.1]])
    optics = make_optics(tau)
    solver = BeerLambertSolver(planck=True, btemp=temperature, ttemp=temperature)
    solver.prepare(optics, isothermal_column(3, temperature))

    flxup, flxdn = np.zeros(4), np.zeros(4)
    toa = np.zeros(2)
    solver.compute(
        LayerRange.full(3),
        SolverOutputs(
            flxup=flxup, flxdn=flxdn, toa=toa, directions=np.array([[1.0, 0.0], [0.4, 90.0]])
        ),
    )

    radiance = sum(w * planck_bin_average(b, temperature) for b, w in zip(optics.bins, optics.weights))
    assert np.allclose(flxup, np.pi * radiance)
    assert np.allclose(flxdn, np.pi * radiance)
    assert np.allclose(toa, radiance)


def test_thermal_emission_cold_space():
    """Emission escapes to space, so TOA upward flux exceeds downward."""
    optics = make_optics(np.full((1, 3), 0.5))
    solver = BeerLambertSolver(planck=True, btemp=290.0)
    solver.prepare(optics, isothermal_column(3, 250.0))

    flxup, flxdn = np.zeros(4), np.zeros(4)
    solver.compute(LayerRange.full(3), SolverOutputs(flxup=flxup, flxdn=flxdn))

    assert flxdn[0] == 0.0
    assert flxup[0] > 0.0
    assert np.all(np.diff(flxdn) > 0)


def test_radiance_requires_valid_directions():
    solver = BeerLambertSolver(planck=True, btemp=280.0)
    solver.prepare(make_optics(np.full((1, 2), 0.1)), isothermal_column(2))
    with pytest.raises(SolverError) as exc_info:
        solver.compute(
            LayerRange.full(2),
            SolverOutputs(toa=np.zeros(1), directions=np.array([[-0.5, 0.0]])),
        )
    assert exc_info.value.code is SolverErrorCode.INVALID_RANGE


def test_transparent_radiance_is_surface_emission():
    temperature = 300.0
    optics = make_optics(np.zeros((1, 2)))
    solver = BeerLambertSolver(planck=True, btemp=temperature)
    solver.prepare(optics, isothermal_column(2, 200.0))

    toa = np.zeros(1)
    solver.compute(LayerRange.full(2), SolverOutputs(toa=toa))

    expected = optics.weights[0] * planck_bin_average(optics.bins[0], temperature)
    assert toa[0] == pytest.approx(expected)


def test_planck_cache_does_not_grow_across_columns():
    """Planck sources are cached per column, not for the whole run."""
    nbin, nlayer = 3, 10
    optics = make_optics(np.full((nbin, nlayer), 0.5))
    solver = BeerLambertSolver(planck=True, btemp=280.0)

    for k in range(50):
        temperatures = 250.0 + 0.01 * k + np.arange(nlayer)
        column = Column(
            [AtmosphericState(t, 5.0e4) for t in temperatures], np.full(nlayer, 100.0)
        )
        solver.prepare(optics, column, k)
        solver.compute(
            LayerRange.full(nlayer),
            SolverOutputs(flxup=np.zeros(nlayer + 1), flxdn=np.zeros(nlayer + 1)),
        )

    assert 0 < len(solver._planck_cache) <= nbin * (nlayer + 2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
