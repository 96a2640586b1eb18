"""Pytest configuration and fixtures for heat diffusion solver tests."""

import os
import sys
from pathlib import Path

# CUDA kernels run on numba's simulator unless a real device is requested
# with NUMBA_ENABLE_CUDASIM=0. Must be set before numba is imported.
os.environ.setdefault("NUMBA_ENABLE_CUDASIM", "1")

import numpy as np  # noqa: E402
import pytest  # noqa: E402

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def small_grid_params():
    """Parameters for a small, non-square grid that does not divide the block shape."""
    return {
        "nx": 21,
        "ny": 18,
        "order": 2,
        "xcfl": 0.1,
        "ycfl": 0.15,
        "iters": 3,
        "block_x": 8,
        "block_y": 8,
        "boundary": "fixed",
        "log_every": 1,
    }


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


def padded_random_field(rng, nx, ny, order):
    """Random field over the whole padded grid, halo included."""
    return rng.uniform(-1.0, 1.0, size=(ny + order, nx + order))


@pytest.fixture
def padded_field(rng):
    """Factory: ``padded_field(nx, ny, order)``."""
    return lambda nx, ny, order: padded_random_field(rng, nx, ny, order)
