"""Boundary conditions for the halo-padded grid.

A boundary condition owns one operation, ``update(next, current)``, called
by the driver once per iteration before the interior kernel. Afterwards every
non-interior cell of ``next`` (everything within ``order // 2`` of the edge)
holds a valid boundary value.

All implementations are precomputed index tables applied with the backend's
``fill_cells`` / ``gather_cells`` helpers, so they run unchanged on host
arrays and on device arrays.
"""

import copy
import logging
from abc import ABC, abstractmethod

import numpy as np

log = logging.getLogger(__name__)


def halo_cells(params):
    """Row and column (padded coordinates) of every non-interior cell."""
    b = params.border
    rows, cols = np.meshgrid(np.arange(params.gy), np.arange(params.gx), indexing="ij")
    interior = (rows >= b) & (rows < b + params.ny) & (cols >= b) & (cols < b + params.nx)
    return rows[~interior], cols[~interior]


class BoundaryConditions(ABC):
    """Base class: subclasses build index tables in :meth:`_build`."""

    name = ""

    def bind(self, params, backend):
        """Bound copy with the tables for a grid of ``params`` on ``backend``.

        ``self`` is left unchanged, so one instance can configure several
        solvers of different sizes.
        """
        bound = copy.copy(self)
        bound.backend = backend
        rows, cols = halo_cells(params)
        bound.indices = (rows * params.gx + cols).astype(np.int64)
        bound._build(params, rows, cols)
        log.info(f"{type(self).__name__}: {bound.indices.shape[0]} halo cells")
        return bound

    @abstractmethod
    def _build(self, params, rows, cols):
        pass

    @abstractmethod
    def update(self, nxt, curr):
        """Write the halo of ``nxt`` using ``curr``."""
        pass


class DirichletBoundary(BoundaryConditions):
    """Every halo cell held at a constant value."""

    name = "dirichlet"

    def __init__(self, value: float = 0.0):
        self.value = float(value)

    def _build(self, params, rows, cols):
        self._dst = self.backend.to_device(self.indices)
        self._values = self.backend.to_device(
            np.full(self.indices.shape[0], self.value, dtype=np.float64)
        )

    def update(self, nxt, curr):
        self.backend.fill_cells(nxt, self._dst, self._values)


class _GatherBoundary(BoundaryConditions):
    """Halo cell ``i`` copies cell ``_source(...)[i]`` of the current buffer."""

    def _build(self, params, rows, cols):
        src = self._source(params, rows, cols).astype(np.int64)
        self._dst = self.backend.to_device(self.indices)
        self._src = self.backend.to_device(src)

    @abstractmethod
    def _source(self, params, rows, cols):
        pass

    def update(self, nxt, curr):
        self.backend.gather_cells(nxt, curr, self._dst, self._src)


class FixedBoundary(_GatherBoundary):
    """Halo keeps the values of the initial field."""

    name = "fixed"

    def _source(self, params, rows, cols):
        return self.indices


class NeumannBoundary(_GatherBoundary):
    """Zero-gradient: each halo cell copies the nearest interior cell."""

    name = "neumann"

    def _source(self, params, rows, cols):
        b = params.border
        src_rows = np.clip(rows, b, b + params.ny - 1)
        src_cols = np.clip(cols, b, b + params.nx - 1)
        return src_rows * params.gx + src_cols


class PeriodicBoundary(_GatherBoundary):
    """Halo cells wrap around to the opposite side of the interior."""

    name = "periodic"

    def _source(self, params, rows, cols):
        b = params.border
        src_rows = b + (rows - b) % params.ny
        src_cols = b + (cols - b) % params.nx
        return src_rows * params.gx + src_cols


BOUNDARIES = {
    cls.name: cls
    for cls in (DirichletBoundary, FixedBoundary, NeumannBoundary, PeriodicBoundary)
}


def create_boundary(name: str, value: float = 0.0) -> BoundaryConditions:
    """Create a boundary condition by name."""
    key = name.lower()
    if key not in BOUNDARIES:
        raise ValueError(f"Unknown boundary: {name}. Use one of {sorted(BOUNDARIES)}")
    if key == "dirichlet":
        return DirichletBoundary(value)
    return BOUNDARIES[key]()
