"""Tests for boundary conditions on the padded grid."""

import numpy as np
import pytest

from heat2d.boundary import (
    DirichletBoundary,
    FixedBoundary,
    NeumannBoundary,
    PeriodicBoundary,
    create_boundary,
    halo_cells,
)
from heat2d.datastructures import Parameters
from heat2d.kernels import cpu, get_backend


def interior_mask(params):
    b = params.border
    mask = np.zeros((params.gy, params.gx), dtype=bool)
    mask[b : b + params.ny, b : b + params.nx] = True
    return mask


@pytest.fixture(params=[2, 4, 8])
def params(request):
    return Parameters(nx=7, ny=5, order=request.param)


@pytest.fixture
def current(params, rng):
    return rng.uniform(size=params.gx * params.gy)


class TestHaloCells:
    def test_covers_everything_but_interior(self, params):
        rows, cols = halo_cells(params)
        assert rows.size == params.gx * params.gy - params.nx * params.ny
        mask = interior_mask(params)
        assert not mask[rows, cols].any()

    def test_unsupported_order_padding(self):
        # Order 3: one halo cell on the left/top, two on the right/bottom
        params = Parameters(nx=4, ny=4, order=3)
        rows, cols = halo_cells(params)
        assert rows.size == 7 * 7 - 16


class TestDirichlet:
    def test_sets_halo_to_value(self, params, current):
        bc = DirichletBoundary(2.5).bind(params, cpu)
        nxt = np.zeros_like(current)
        bc.update(nxt, current)
        nxt_2d = nxt.reshape(params.gy, params.gx)
        mask = interior_mask(params)
        assert np.all(nxt_2d[~mask] == 2.5)
        assert np.all(nxt_2d[mask] == 0.0)


class TestFixed:
    def test_copies_halo_from_current(self, params, current):
        bc = FixedBoundary().bind(params, cpu)
        nxt = np.zeros_like(current)
        bc.update(nxt, current)
        mask = interior_mask(params).ravel()
        assert np.array_equal(nxt[~mask], current[~mask])
        assert np.all(nxt[mask] == 0.0)


class TestNeumann:
    def test_copies_nearest_interior_cell(self, params, current):
        bc = NeumannBoundary().bind(params, cpu)
        nxt = current.copy()
        bc.update(nxt, current)
        b = params.border
        cur_2d = current.reshape(params.gy, params.gx)
        nxt_2d = nxt.reshape(params.gy, params.gx)
        # West edge rows copy the first interior column, corners the corner cell
        assert np.array_equal(nxt_2d[b : b + params.ny, 0], cur_2d[b : b + params.ny, b])
        assert nxt_2d[0, 0] == cur_2d[b, b]
        assert nxt_2d[-1, -1] == cur_2d[b + params.ny - 1, b + params.nx - 1]


class TestPeriodic:
    def test_wraps_around(self, params, current):
        bc = PeriodicBoundary().bind(params, cpu)
        nxt = current.copy()
        bc.update(nxt, current)
        b = params.border
        cur_2d = current.reshape(params.gy, params.gx)
        nxt_2d = nxt.reshape(params.gy, params.gx)
        # Left halo column b-1 holds the last interior column
        assert np.array_equal(
            nxt_2d[b : b + params.ny, b - 1], cur_2d[b : b + params.ny, b + params.nx - 1]
        )
        # Bottom halo row holds the first interior row
        assert np.array_equal(
            nxt_2d[b + params.ny, b : b + params.nx], cur_2d[b, b : b + params.nx]
        )


class TestCudaBackend:
    @pytest.mark.parametrize("name", ["dirichlet", "fixed", "neumann", "periodic"])
    def test_matches_cpu(self, name, rng):
        params = Parameters(nx=6, ny=5, order=4)
        backend = get_backend("cuda")
        current = rng.uniform(size=params.gx * params.gy)

        expected = np.zeros_like(current)
        create_boundary(name, 1.5).bind(params, cpu).update(expected, current)

        d_next = backend.to_device(np.zeros_like(current))
        d_curr = backend.to_device(current)
        create_boundary(name, 1.5).bind(params, backend).update(d_next, d_curr)
        assert np.array_equal(backend.to_host(d_next), expected)


class TestBind:
    def test_returns_bound_copy(self):
        bc = DirichletBoundary(1.0)
        bound = bc.bind(Parameters(nx=6, ny=5, order=2), cpu)
        assert bound is not bc
        assert bound.value == 1.0
        assert not hasattr(bc, "indices")

    def test_one_instance_two_grids(self, rng):
        bc = NeumannBoundary()
        big_params = Parameters(nx=12, ny=10, order=4)
        small_params = Parameters(nx=3, ny=3, order=4)
        big = bc.bind(big_params, cpu)
        small = bc.bind(small_params, cpu)
        assert big.indices.size == big_params.gx * big_params.gy - 12 * 10
        assert small.indices.size == small_params.gx * small_params.gy - 3 * 3
        assert big.indices.max() < big_params.gx * big_params.gy

        current = rng.uniform(size=big_params.gx * big_params.gy)
        nxt = np.zeros_like(current)
        big.update(nxt, current)
        assert np.all(nxt.reshape(big_params.gy, big_params.gx)[interior_mask(big_params)] == 0.0)


class TestFactory:
    @pytest.mark.parametrize(
        "name,cls",
        [
            ("dirichlet", DirichletBoundary),
            ("Fixed", FixedBoundary),
            ("neumann", NeumannBoundary),
            ("periodic", PeriodicBoundary),
        ],
    )
    def test_creates_by_name(self, name, cls):
        assert isinstance(create_boundary(name), cls)

    def test_dirichlet_value(self):
        assert create_boundary("dirichlet", 3.0).value == 3.0

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown boundary"):
            create_boundary("robin")
