"""Exceptions raised by the heat diffusion solvers."""


class LaunchError(RuntimeError):
    """A stencil kernel could not be launched or faulted while running.

    Fatal for the run: the driver aborts the remaining iterations and the
    partially advanced grid must not be trusted.
    """

    def __init__(self, message: str, iteration: int = None):
        super().__init__(message)
        self.iteration = iteration
