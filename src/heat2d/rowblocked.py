"""Row-blocked stencil solver: each worker updates several consecutive rows."""

import logging

from .base import HeatDiffusionSolver
from .datastructures import RowBlockedParameters
from .launch import row_blocked_launch

log = logging.getLogger(__name__)


class RowBlockedSolver(HeatDiffusionSolver):
    """Explicit heat diffusion with the multi-row kernel.

    Same arithmetic as NaiveSolver; only the work per worker changes. A worker
    group of ``block_x x (block_y // rows_per_worker)`` workers covers a
    ``block_x x block_y`` output tile.

    Parameters
    ----------
    params : RowBlockedParameters
        Grid, stencil and launch settings, plus ``rows_per_worker``.
    """

    Parameters = RowBlockedParameters

    def _launch_config(self):
        p = self.params
        config = row_blocked_launch(p.nx, p.ny, p.block_x, p.block_y, p.rows_per_worker)
        log.debug(f"{p.rows_per_worker} rows per worker, {config.num_workers} workers")
        return config

    def _launch(self, curr, nxt):
        self.backend.run_row_blocked(
            self.stencil, self.params.rows_per_worker, self.launch_config, curr, nxt, self.params
        )
