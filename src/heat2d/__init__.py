"""2D heat diffusion with finite-difference stencils on parallel kernels.

Solver Hierarchy:
-----------------
HeatDiffusionSolver (abstract base - time-stepping driver)
├── NaiveSolver (one worker per interior point)
├── RowBlockedSolver (each worker updates several rows)
└── TiledSolver (halo-padded tiles in block-local memory)
"""

from .base import HeatDiffusionSolver, DriverState
from .datastructures import (
    # Base classes (shared by all solvers)
    Parameters,
    Metrics,
    TimeSeries,
    Grid,
    # Variant-specific
    NaiveParameters,
    RowBlockedParameters,
    TiledParameters,
)
from .boundary import (
    BoundaryConditions,
    DirichletBoundary,
    FixedBoundary,
    NeumannBoundary,
    PeriodicBoundary,
    create_boundary,
)
from .exceptions import LaunchError
from .stencils import StencilOrder, courant_numbers, select_stencil
from .naive import NaiveSolver
from .rowblocked import RowBlockedSolver
from .tiled import TiledSolver


SOLVERS = {
    "naive": NaiveSolver,
    "rowblocked": RowBlockedSolver,
    "tiled": TiledSolver,
}


__all__ = [
    # Base solver
    "HeatDiffusionSolver",
    "DriverState",
    # Shared data structures
    "Parameters",
    "Metrics",
    "TimeSeries",
    "Grid",
    # Solvers
    "NaiveSolver",
    "NaiveParameters",
    "RowBlockedSolver",
    "RowBlockedParameters",
    "TiledSolver",
    "TiledParameters",
    "SOLVERS",
    # Boundary conditions
    "BoundaryConditions",
    "DirichletBoundary",
    "FixedBoundary",
    "NeumannBoundary",
    "PeriodicBoundary",
    "create_boundary",
    # Stencils and errors
    "StencilOrder",
    "courant_numbers",
    "select_stencil",
    "LaunchError",
]
