"""CPU stencil kernels (numba ``parallel=True``).

Workers are ``prange`` iterations over the same launch geometry the CUDA
kernels use, so a worker with flat id ``w`` sits at column
``w % workers_x`` and worker-row ``w // workers_x``. Workers outside the
interior idle. The tiled kernel is the explicit cache-blocking form of the
shared-memory kernel: one ``prange`` iteration per group stages a halo-padded
tile into a local buffer and computes the group's outputs from it.

Kernels are specialized per stencil operator (and per compile-time constant
such as the row count or tile shape) by the factories below.
"""

import logging
from functools import lru_cache

import numba
import numpy as np
from numba import njit, prange

log = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def compile_stencil(stencil):
    """CPU instance of a stencil operator from ``heat2d.stencils``."""
    return njit(inline="always", nogil=True)(stencil)


# =============================================================================
# Kernel factories
# =============================================================================


@lru_cache(maxsize=None)
def naive_kernel(stencil):
    op = compile_stencil(stencil)

    @njit(parallel=True, nogil=True)
    def kernel(curr, nxt, nx, ny, gx, border, xcfl, ycfl, workers_x, workers_y):
        for worker in prange(workers_x * workers_y):
            row = worker // workers_x
            col = worker - row * workers_x
            if col < nx and row < ny:
                idx = gx * (row + border) + col + border
                nxt[idx] = op(curr, idx, gx, xcfl, ycfl)

    return kernel


@lru_cache(maxsize=None)
def row_blocked_kernel(stencil, rows_per_worker):
    op = compile_stencil(stencil)

    @njit(parallel=True, nogil=True)
    def kernel(curr, nxt, nx, ny, gx, border, xcfl, ycfl, workers_x, workers_y):
        for worker in prange(workers_x * workers_y):
            worker_row = worker // workers_x
            col = worker - worker_row * workers_x
            first_row = worker_row * rows_per_worker
            for j in range(rows_per_worker):
                row = first_row + j
                if col < nx and row < ny:
                    idx = gx * (row + border) + col + border
                    nxt[idx] = op(curr, idx, gx, xcfl, ycfl)

    return kernel


@lru_cache(maxsize=None)
def tiled_kernel(stencil, block_x, block_y, halo):
    op = compile_stencil(stencil)
    tile_w = block_x + 2 * halo
    tile_h = block_y + 2 * halo

    @njit(parallel=True, nogil=True)
    def kernel(curr, nxt, nx, ny, gx, gy, xcfl, ycfl, groups_x, groups_y):
        for group in prange(groups_x * groups_y):
            group_row = group // groups_x
            group_col = group - group_row * groups_x
            # Padded-buffer origin of the tile: interior (row0, col0) minus halo.
            row0 = group_row * block_y
            col0 = group_col * block_x

            tile = np.empty(tile_w * tile_h, dtype=np.float64)
            for ly in range(tile_h):
                grow = row0 + ly
                for lx in range(tile_w):
                    gcol = col0 + lx
                    if grow < gy and gcol < gx:
                        tile[ly * tile_w + lx] = curr[grow * gx + gcol]
                    else:
                        tile[ly * tile_w + lx] = 0.0

            for ty in range(block_y):
                row = row0 + ty
                for tx in range(block_x):
                    col = col0 + tx
                    if col < nx and row < ny:
                        lidx = (ty + halo) * tile_w + tx + halo
                        nxt[gx * (row + halo) + col + halo] = op(
                            tile, lidx, tile_w, xcfl, ycfl
                        )

    return kernel


# =============================================================================
# Boundary helpers
# =============================================================================


@njit(parallel=True, cache=True, nogil=True)
def _fill(nxt, indices, values):
    for i in prange(indices.shape[0]):
        nxt[indices[i]] = values[i]


@njit(parallel=True, cache=True, nogil=True)
def _gather(nxt, curr, dst, src):
    for i in prange(dst.shape[0]):
        nxt[dst[i]] = curr[src[i]]


def fill_cells(nxt, indices, values):
    """``nxt[indices] = values``."""
    if indices.shape[0]:
        _fill(nxt, indices, values)


def gather_cells(nxt, curr, dst, src):
    """``nxt[dst] = curr[src]``."""
    if dst.shape[0]:
        _gather(nxt, curr, dst, src)


# =============================================================================
# Launchers
# =============================================================================


def run_naive(stencil, config, curr, nxt, params):
    naive_kernel(stencil)(
        curr, nxt,
        params.nx, params.ny, params.gx, params.border,
        params.xcfl, params.ycfl,
        config.workers_x, config.workers_y,
    )


def run_row_blocked(stencil, rows_per_worker, config, curr, nxt, params):
    row_blocked_kernel(stencil, rows_per_worker)(
        curr, nxt,
        params.nx, params.ny, params.gx, params.border,
        params.xcfl, params.ycfl,
        config.workers_x, config.workers_y,
    )


def run_tiled(stencil, config, curr, nxt, params):
    block_x, block_y = config.block
    tiled_kernel(stencil, block_x, block_y, params.border)(
        curr, nxt,
        params.nx, params.ny, params.gx, params.gy,
        params.xcfl, params.ycfl,
        config.grid[0], config.grid[1],
    )


# =============================================================================
# Memory and device management
# =============================================================================


def configure(params):
    if params.num_threads:
        numba.set_num_threads(params.num_threads)
        log.info(f"Using {params.num_threads} CPU worker threads")


def to_device(arr: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(arr)


def to_host(arr: np.ndarray) -> np.ndarray:
    return np.array(arr)


def synchronize():
    pass
