"""Abstract time-stepping driver for the heat diffusion stencil solvers."""

from abc import ABC, abstractmethod
from enum import Enum
import logging

import numpy as np
import mlflow

from .boundary import create_boundary
from .datastructures import Grid, Metrics, TimeSeries
from .exceptions import LaunchError
from .kernels import get_backend
from .stencils import select_stencil
from .timing import Timer

log = logging.getLogger(__name__)


class DriverState(Enum):
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"  # a launch failed; the grid must not be trusted


class HeatDiffusionSolver(ABC):
    """Abstract time-stepping driver.

    Handles:
    - Parameter management (input configuration)
    - Grid allocation and boundary priming
    - Iteration loop: boundary update -> kernel launch -> buffer swap
    - Timing, metrics and MLflow live logging

    Subclasses must:
    - Set Parameters class attribute (e.g., RowBlockedParameters)
    - Implement _launch_config() - worker-group geometry for the kernel
    - Implement _launch(curr, nxt) - launch the kernel for one step
    """

    Parameters = None  # Subclasses set this to NaiveParameters, ...

    def __init__(self, params=None, initial_field=None, boundary_conditions=None, **kwargs):
        """Initialize solver with parameters.

        Parameters
        ----------
        params : Parameters, optional
            Parameters object. If not provided, kwargs are used to create params.
        initial_field : np.ndarray, optional
            Interior ``(ny, nx)`` or padded ``(gy, gx)`` initial temperature.
            Defaults to all zeros.
        boundary_conditions : BoundaryConditions, optional
            Boundary collaborator, bound to this grid as a copy. Defaults to
            ``create_boundary(params.boundary, params.boundary_value)``.
        **kwargs
            Configuration parameters passed to Parameters class if params is None.
        """
        if params is None:
            if self.Parameters is None:
                raise ValueError("Subclass must define Parameters class attribute")
            params = self.Parameters(**kwargs)

        self.params = params
        self.backend = get_backend(params.backend)
        self.backend.configure(params)

        # Logs the diagnostic for unsupported orders
        self.stencil = select_stencil(params.order)

        if initial_field is None:
            initial_field = np.zeros((params.ny, params.nx))
        self.grid = Grid.from_field(initial_field, params, self.backend)

        if boundary_conditions is None:
            boundary_conditions = create_boundary(params.boundary, params.boundary_value)
        self.boundary = boundary_conditions.bind(params, self.backend)

        # Halo of both buffers valid before the first kernel reads it
        self.boundary.update(self.grid.current, self.grid.current)
        self.boundary.update(self.grid.next, self.grid.current)

        self.launch_config = self._launch_config()
        log.info(
            f"{type(self).__name__}: {params.nx}x{params.ny} interior, order {params.order}, "
            f"backend {params.backend}, grid {self.launch_config.grid}, "
            f"block {self.launch_config.block}"
        )

        self.state = DriverState.RUNNING
        self.iteration = 0
        self.metrics = Metrics()
        self.time_series = None  # Populated after solve()

    @abstractmethod
    def _launch_config(self):
        """Return the LaunchConfig for this kernel variant."""
        pass

    @abstractmethod
    def _launch(self, curr, nxt):
        """Launch the stencil kernel reading ``curr`` and writing ``nxt``."""
        pass

    def step(self):
        """Perform one time step.

        Raises
        ------
        LaunchError
            If the kernel could not be launched or faulted. The buffers are
            not swapped and the grid must not be trusted afterwards.
        RuntimeError
            If the solver is not running (finished or failed).
        """
        if self.state is not DriverState.RUNNING:
            raise RuntimeError(f"Cannot step a solver in state {self.state.value}")
        curr, nxt = self.grid.current, self.grid.next
        self.boundary.update(nxt, curr)
        try:
            self._launch(curr, nxt)
            self.backend.synchronize()
        except Exception as exc:
            log.error(f"Kernel launch failed at iteration {self.iteration}: {exc}")
            self.state = DriverState.FAILED
            raise LaunchError(
                f"{type(self).__name__} kernel launch failed at iteration {self.iteration}",
                iteration=self.iteration,
            ) from exc
        self.grid.swap()
        self.iteration += 1

    def _store_results(self, wall_time, elapsed_history, max_timeseries_points: int = 1000):
        """Store solve results in self.time_series and self.metrics."""
        steps = list(range(1, len(elapsed_history) + 1))
        if len(elapsed_history) > max_timeseries_points:
            indices = np.linspace(0, len(elapsed_history) - 1, max_timeseries_points, dtype=int)
            elapsed_history = [elapsed_history[i] for i in indices]
            steps = [steps[i] for i in indices]
        self.time_series = TimeSeries(elapsed_seconds=elapsed_history, steps=steps)

        field = self.grid.interior()
        updates = self.params.nx * self.params.ny * self.iteration
        self.metrics = Metrics(
            iterations=self.iteration,
            wall_time_seconds=wall_time,
            cell_updates_per_second=updates / wall_time if wall_time > 0 else 0.0,
            final_mean=float(np.mean(field)) if field.size else 0.0,
            final_max=float(np.max(field)) if field.size else 0.0,
        )

    def solve(self, iters: int = None):
        """Run the time loop.

        Stores results in solver attributes:
        - self.grid : current buffer holds the final field
        - self.time_series : TimeSeries with cumulative elapsed time
        - self.metrics : Metrics dataclass with solver metrics

        Parameters
        ----------
        iters : int, optional
            Number of iterations. If None, uses params.iters.
        """
        if self.state is DriverState.DONE:
            raise RuntimeError("Solver already finished; create a new solver to run again")
        if self.state is DriverState.FAILED:
            raise RuntimeError("Solver failed at a kernel launch; create a new solver to run again")
        if iters is None:
            iters = self.params.iters

        log_every = max(1, self.params.log_every)
        elapsed_history = []

        with Timer(self.backend.synchronize) as timer:
            for i in range(iters):
                self.step()
                elapsed_history.append(timer.elapsed)

                if i % log_every == 0 or i == iters - 1:
                    with timer.pause():
                        log.info(f"Iteration {i}: elapsed={elapsed_history[-1]:.4f}s")
                        if mlflow.active_run():
                            mlflow.log_metrics({"elapsed_seconds": elapsed_history[-1]}, step=i)

        wall_time = timer.elapsed
        self.state = DriverState.DONE
        log.info(
            f"Solver finished {self.iteration} iterations in {wall_time:.4f} seconds "
            f"(excl. {timer.paused:.2f}s logging)."
        )

        self._store_results(wall_time, elapsed_history)
