"""CUDA stencil kernels (numba.cuda).

One thread per worker, one block per worker group. The tiled kernel stages a
``(block_y + 2*halo) x (block_x + 2*halo)`` tile in shared memory, then
computes from shared memory only.

Runs on numba's CUDA simulator when ``NUMBA_ENABLE_CUDASIM=1``.
"""

import logging
from functools import lru_cache

import numpy as np
from numba import cuda, float64

from ..exceptions import LaunchError
from ..launch import cdiv

log = logging.getLogger(__name__)

THREADS_PER_BLOCK_1D = 128


@lru_cache(maxsize=None)
def compile_stencil(stencil):
    """Device-function instance of a stencil operator from ``heat2d.stencils``."""
    return cuda.jit(device=True)(stencil)


# =============================================================================
# Kernel factories
# =============================================================================


@lru_cache(maxsize=None)
def naive_kernel(stencil):
    op = compile_stencil(stencil)

    @cuda.jit
    def kernel(curr, nxt, nx, ny, gx, border, xcfl, ycfl):
        col, row = cuda.grid(2)
        if col < nx and row < ny:
            idx = gx * (row + border) + col + border
            nxt[idx] = op(curr, idx, gx, xcfl, ycfl)

    return kernel


@lru_cache(maxsize=None)
def row_blocked_kernel(stencil, rows_per_worker):
    op = compile_stencil(stencil)

    @cuda.jit
    def kernel(curr, nxt, nx, ny, gx, border, xcfl, ycfl):
        col, worker_row = cuda.grid(2)
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
    tile_size = tile_w * tile_h

    @cuda.jit
    def kernel(curr, nxt, nx, ny, gx, gy, xcfl, ycfl):
        tile = cuda.shared.array(tile_size, dtype=float64)

        tx = cuda.threadIdx.x
        ty = cuda.threadIdx.y
        row0 = cuda.blockIdx.y * block_y
        col0 = cuda.blockIdx.x * block_x

        # Cooperative load: the block strides over the tile, halo included.
        for ly in range(ty, tile_h, block_y):
            grow = row0 + ly
            for lx in range(tx, tile_w, block_x):
                gcol = col0 + lx
                if grow < gy and gcol < gx:
                    tile[ly * tile_w + lx] = curr[grow * gx + gcol]
                else:
                    tile[ly * tile_w + lx] = 0.0

        cuda.syncthreads()

        col = col0 + tx
        row = row0 + ty
        if col < nx and row < ny:
            lidx = (ty + halo) * tile_w + tx + halo
            nxt[gx * (row + halo) + col + halo] = op(tile, lidx, tile_w, xcfl, ycfl)

    return kernel


# =============================================================================
# Boundary helpers
# =============================================================================


@cuda.jit
def _fill(nxt, indices, values):
    i = cuda.grid(1)
    if i < indices.shape[0]:
        nxt[indices[i]] = values[i]


@cuda.jit
def _gather(nxt, curr, dst, src):
    i = cuda.grid(1)
    if i < dst.shape[0]:
        nxt[dst[i]] = curr[src[i]]


def fill_cells(nxt, indices, values):
    """``nxt[indices] = values``."""
    n = indices.shape[0]
    if n:
        _fill[cdiv(n, THREADS_PER_BLOCK_1D), THREADS_PER_BLOCK_1D](nxt, indices, values)


def gather_cells(nxt, curr, dst, src):
    """``nxt[dst] = curr[src]``."""
    n = dst.shape[0]
    if n:
        _gather[cdiv(n, THREADS_PER_BLOCK_1D), THREADS_PER_BLOCK_1D](nxt, curr, dst, src)


# =============================================================================
# Launchers
# =============================================================================


def run_naive(stencil, config, curr, nxt, params):
    naive_kernel(stencil)[config.grid, config.block](
        curr, nxt,
        params.nx, params.ny, params.gx, params.border,
        params.xcfl, params.ycfl,
    )


def run_row_blocked(stencil, rows_per_worker, config, curr, nxt, params):
    row_blocked_kernel(stencil, rows_per_worker)[config.grid, config.block](
        curr, nxt,
        params.nx, params.ny, params.gx, params.border,
        params.xcfl, params.ycfl,
    )


def run_tiled(stencil, config, curr, nxt, params):
    block_x, block_y = config.block
    tiled_kernel(stencil, block_x, block_y, params.border)[config.grid, config.block](
        curr, nxt,
        params.nx, params.ny, params.gx, params.gy,
        params.xcfl, params.ycfl,
    )


# =============================================================================
# Memory and device management
# =============================================================================


def configure(params):
    if not cuda.is_available():
        raise LaunchError("CUDA backend requested but no CUDA device is available")


def to_device(arr: np.ndarray):
    return cuda.to_device(np.ascontiguousarray(arr))


def to_host(arr) -> np.ndarray:
    return arr.copy_to_host()


def synchronize():
    cuda.synchronize()
