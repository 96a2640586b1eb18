"""Naive stencil solver: one worker per interior point, global memory only."""

from .base import HeatDiffusionSolver
from .datastructures import NaiveParameters
from .launch import naive_launch


class NaiveSolver(HeatDiffusionSolver):
    """Explicit heat diffusion with the per-point kernel.

    Every worker reads its neighbours straight from the current buffer.
    Serves as the reference the other variants are checked against.
    """

    Parameters = NaiveParameters

    def _launch_config(self):
        p = self.params
        return naive_launch(p.nx, p.ny, p.block_x, p.block_y)

    def _launch(self, curr, nxt):
        self.backend.run_naive(self.stencil, self.launch_config, curr, nxt, self.params)
