"""Tests for parameters and the double-buffered grid."""

import dataclasses

import numpy as np
import pytest

from heat2d.datastructures import (
    Grid,
    Metrics,
    NaiveParameters,
    Parameters,
    RowBlockedParameters,
    TimeSeries,
)
from heat2d.kernels import cpu, get_backend


class TestParameters:
    @pytest.mark.parametrize("order", [2, 4, 8])
    def test_padding_consistent(self, order):
        params = Parameters(nx=30, ny=20, order=order)
        assert params.gx - params.nx == params.gy - params.ny == order
        assert params.border == order // 2

    def test_immutable(self):
        params = NaiveParameters()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.nx = 10

    def test_variant_defaults(self):
        assert NaiveParameters().method == "naive"
        assert RowBlockedParameters().rows_per_worker == 4

    def test_to_mlflow_includes_padded_extents(self):
        logged = Parameters(nx=10, ny=12, order=4).to_mlflow()
        assert logged["gx"] == 14
        assert logged["gy"] == 16
        assert "num_threads" not in logged  # None values are dropped

    def test_to_dataframe(self):
        df = RowBlockedParameters(nx=8).to_dataframe()
        assert df.shape[0] == 1
        assert df["rows_per_worker"].iloc[0] == 4


class TestGrid:
    @pytest.fixture
    def params(self):
        return Parameters(nx=6, ny=4, order=2)

    def test_from_interior_field(self, params):
        field = np.arange(24, dtype=float).reshape(4, 6)
        grid = Grid.from_field(field, params, cpu)
        assert grid.current.shape == (params.gx * params.gy,)
        assert np.array_equal(grid.interior(), field)
        padded = grid.padded()
        assert padded.shape == (6, 8)
        assert np.all(padded[0, :] == 0.0)
        assert np.all(padded[:, -1] == 0.0)

    def test_from_padded_field(self, params):
        field = np.ones((params.gy, params.gx))
        grid = Grid.from_field(field, params, cpu)
        assert np.array_equal(grid.padded(), field)

    def test_rejects_wrong_shape(self, params):
        with pytest.raises(ValueError, match="Initial field has shape"):
            Grid.from_field(np.zeros((5, 5)), params, cpu)

    def test_buffers_are_distinct(self, params):
        grid = Grid.from_field(np.zeros((4, 6)), params, cpu)
        assert grid.current is not grid.next
        grid.next[0] = 5.0
        assert grid.current[0] == 0.0

    def test_swap_exchanges_roles(self, params):
        grid = Grid.from_field(np.zeros((4, 6)), params, cpu)
        a, b = grid.current, grid.next
        grid.swap()
        assert grid.current is b
        assert grid.next is a

    def test_double_swap_is_identity(self, params):
        grid = Grid.from_field(np.zeros((4, 6)), params, cpu)
        a, b = grid.current, grid.next
        grid.swap()
        grid.swap()
        assert grid.current is a
        assert grid.next is b

    def test_swap_does_not_copy(self, params):
        grid = Grid.from_field(np.zeros((4, 6)), params, cpu)
        grid.next[:] = 7.0
        grid.swap()
        assert np.all(grid.current == 7.0)
        assert np.all(grid.next == 0.0)

    def test_cuda_buffers_roundtrip(self, params):
        backend = get_backend("cuda")
        field = np.arange(24, dtype=float).reshape(4, 6)
        grid = Grid.from_field(field, params, backend)
        grid.swap()
        grid.swap()
        assert np.array_equal(grid.interior(), field)


class TestResults:
    def test_metrics_to_mlflow(self):
        metrics = Metrics(iterations=3, wall_time_seconds=0.5)
        logged = metrics.to_mlflow()
        assert logged["iterations"] == 3.0
        assert all(isinstance(v, float) for v in logged.values())

    def test_time_series_dataframe(self):
        ts = TimeSeries(elapsed_seconds=[0.1, 0.2, 0.3], steps=[1, 2, 3])
        df = ts.to_dataframe()
        assert list(df["step"]) == [1, 2, 3]
        assert list(df["elapsed_seconds"]) == [0.1, 0.2, 0.3]

    def test_time_series_batch(self):
        batch = TimeSeries(elapsed_seconds=[0.1, 0.2]).to_mlflow_batch()
        assert [m.step for m in batch] == [0, 1]
        assert all(m.key == "elapsed_seconds" for m in batch)


def test_unknown_backend():
    with pytest.raises(ValueError, match="Unknown backend"):
        get_backend("opencl")
