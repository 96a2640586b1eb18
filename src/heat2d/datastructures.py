"""Data structures for solver configuration, state and results.

This module defines the configuration and result data structures
for the heat diffusion stencil solvers (naive, row-blocked and tiled).

Structure:
- Parameters: Input configuration (logged to MLflow at start)
- Metrics: Output results (logged to MLflow at end)
- TimeSeries: Elapsed-time history
- Grid: Double-buffered, halo-padded temperature field
"""

from dataclasses import dataclass, asdict
from typing import Optional, List

import numpy as np
import pandas as pd


# ========================================================
# Parameters (Input Configuration)
# ========================================================


@dataclass(frozen=True)
class Parameters:
    """Base solver parameters - input configuration for all kernel variants.

    The padded extents follow from the interior extents and the stencil
    order: ``gx = nx + order`` and ``gy = ny + order``, i.e. ``order // 2``
    halo cells on every side. Courant numbers are trusted as given.
    """

    nx: int = 64
    ny: int = 64
    order: int = 2
    xcfl: float = 0.1
    ycfl: float = 0.1
    iters: int = 100
    backend: str = "cpu"  # "cpu" or "cuda"
    block_x: int = 16  # worker-group shape
    block_y: int = 16
    boundary: str = "dirichlet"
    boundary_value: float = 0.0
    log_every: int = 100
    num_threads: Optional[int] = None  # CPU worker threads, None = numba default
    method: str = ""

    @property
    def gx(self) -> int:
        return self.nx + self.order

    @property
    def gy(self) -> int:
        return self.ny + self.order

    @property
    def border(self) -> int:
        return self.order // 2

    def to_dict(self):
        return {**asdict(self), "gx": self.gx, "gy": self.gy}

    def to_dataframe(self):
        return pd.DataFrame([self.to_dict()])

    def to_mlflow(self):
        return {k: v for k, v in self.to_dict().items() if v is not None}


@dataclass(frozen=True)
class NaiveParameters(Parameters):
    method: str = "naive"


@dataclass(frozen=True)
class RowBlockedParameters(Parameters):
    """Row-blocked kernel parameters (each worker updates ``rows_per_worker`` rows)."""

    rows_per_worker: int = 4
    method: str = "rowblocked"


@dataclass(frozen=True)
class TiledParameters(Parameters):
    """Tiled kernel parameters (tile = block_x x block_y plus halo)."""

    method: str = "tiled"


# ========================================================
# Metrics (Output Results)
# ========================================================


@dataclass
class Metrics:
    """Solver metrics - output results computed after solving."""

    iterations: int = 0
    wall_time_seconds: float = 0.0
    cell_updates_per_second: float = 0.0
    final_mean: float = 0.0
    final_max: float = 0.0

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])

    def to_mlflow(self):
        return {k: float(v) for k, v in asdict(self).items()}


# ========================================================
# Time Series (Elapsed Time History)
# ========================================================


@dataclass
class TimeSeries:
    """Cumulative elapsed computation time after each iteration."""

    elapsed_seconds: List[float]
    steps: Optional[List[int]] = None

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per recorded iteration."""
        steps = self.steps if self.steps is not None else list(range(len(self.elapsed_seconds)))
        return pd.DataFrame({"step": steps, "elapsed_seconds": self.elapsed_seconds})

    def to_mlflow_batch(self):
        """Metric entities for ``MlflowClient.log_batch``."""
        import time

        from mlflow.entities import Metric

        timestamp = int(time.time() * 1000)
        df = self.to_dataframe()
        return [
            Metric(key="elapsed_seconds", value=float(t), timestamp=timestamp, step=int(s))
            for s, t in zip(df["step"], df["elapsed_seconds"])
        ]


# ========================================================
# Grid (Double-Buffered Field)
# ========================================================


class Grid:
    """Two halo-padded buffers of ``gx * gy`` cells in two named slots.

    Buffers are flat and row-major with row stride ``gx``. A single bit
    records which slot is ``current``; :meth:`swap` flips it without touching
    any cell, so swapping twice restores the original roles.
    """

    def __init__(self, slot_a, slot_b, params: Parameters, backend):
        self._slots = (slot_a, slot_b)
        self._current = 0
        self.nx, self.ny = params.nx, params.ny
        self.gx, self.gy = params.gx, params.gy
        self.border = params.border
        self.backend = backend

    @classmethod
    def from_field(cls, field: np.ndarray, params: Parameters, backend):
        """Allocate both buffers from an initial field.

        Parameters
        ----------
        field : np.ndarray
            Either the interior, shape ``(ny, nx)``, whose halo is zero-filled,
            or the full padded field, shape ``(gy, gx)``.
        params : Parameters
            Grid extents and stencil order.
        backend : module
            Kernel backend owning the buffers (``heat2d.kernels.cpu`` or
            ``heat2d.kernels.cuda``).
        """
        field = np.asarray(field, dtype=np.float64)
        b = params.border
        if field.shape == (params.ny, params.nx):
            padded = np.zeros((params.gy, params.gx), dtype=np.float64)
            padded[b : b + params.ny, b : b + params.nx] = field
        elif field.shape == (params.gy, params.gx):
            padded = field.copy()
        else:
            raise ValueError(
                f"Initial field has shape {field.shape}; expected interior "
                f"{(params.ny, params.nx)} or padded {(params.gy, params.gx)}"
            )
        flat = padded.ravel()
        return cls(backend.to_device(flat), backend.to_device(flat.copy()), params, backend)

    @property
    def current(self):
        return self._slots[self._current]

    @property
    def next(self):
        return self._slots[1 - self._current]

    def swap(self):
        self._current = 1 - self._current

    def padded(self) -> np.ndarray:
        """Host copy of the current buffer, shape ``(gy, gx)``."""
        return self.backend.to_host(self.current).reshape(self.gy, self.gx)

    def interior(self) -> np.ndarray:
        """Host copy of the current interior, shape ``(ny, nx)``."""
        b = self.border
        return self.padded()[b : b + self.ny, b : b + self.nx].copy()
