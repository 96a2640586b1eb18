"""Launch geometry for the stencil kernels.

A launch is a 2D grid of worker groups (blocks); each group is a 2D shape of
workers (threads). Both backends use the same geometry: on CUDA it is passed
straight to ``kernel[grid, block]``, on CPU the kernels iterate over the same
worker index space with ``prange``.
"""

from dataclasses import dataclass
from typing import Tuple


def cdiv(a: int, b: int) -> int:
    return (a + b - 1) // b


@dataclass(frozen=True)
class LaunchConfig:
    """Group count (``grid``) and group shape (``block``), both as (x, y)."""

    grid: Tuple[int, int]
    block: Tuple[int, int]

    @property
    def workers_x(self) -> int:
        return self.grid[0] * self.block[0]

    @property
    def workers_y(self) -> int:
        return self.grid[1] * self.block[1]

    @property
    def num_workers(self) -> int:
        return self.workers_x * self.workers_y


def naive_launch(nx: int, ny: int, block_x: int, block_y: int) -> LaunchConfig:
    """One worker per interior point."""
    return LaunchConfig(
        grid=(cdiv(nx, block_x), cdiv(ny, block_y)),
        block=(block_x, block_y),
    )


def row_blocked_launch(
    nx: int, ny: int, block_x: int, block_y: int, rows_per_worker: int
) -> LaunchConfig:
    """Each worker covers ``rows_per_worker`` consecutive rows.

    A group still covers a ``block_x x block_y`` output tile, so only its row
    count of workers shrinks by ``rows_per_worker``.
    """
    if rows_per_worker < 1:
        raise ValueError(f"rows_per_worker must be positive, got {rows_per_worker}")
    if block_y % rows_per_worker != 0:
        raise ValueError(
            f"block_y ({block_y}) must be a multiple of rows_per_worker ({rows_per_worker})"
        )
    return LaunchConfig(
        grid=(cdiv(nx, block_x), cdiv(ny, block_y)),
        block=(block_x, block_y // rows_per_worker),
    )


def tiled_launch(nx: int, ny: int, block_x: int, block_y: int) -> LaunchConfig:
    """One group per output tile, one worker per tile cell."""
    return naive_launch(nx, ny, block_x, block_y)


def tile_shape(block_x: int, block_y: int, order: int) -> Tuple[int, int]:
    """Scratch tile (width, height): the group's output tile plus ``order // 2`` halo per side."""
    halo = order // 2
    return block_x + 2 * halo, block_y + 2 * halo
