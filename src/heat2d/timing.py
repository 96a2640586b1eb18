"""Wall-clock timing around the iteration loop."""

import time
from contextlib import contextmanager


class Timer:
    """Scoped timer: ``with Timer() as t: ...`` then read ``t.elapsed``.

    ``synchronize`` (e.g. ``cuda.synchronize``) is called before the clock is
    read at start and stop, so asynchronous device work is included. Time spent
    inside :meth:`pause` is excluded.
    """

    def __init__(self, synchronize=None):
        self._synchronize = synchronize
        self._start = None
        self._stop = None
        self.paused = 0.0

    def _sync(self):
        if self._synchronize is not None:
            self._synchronize()

    def __enter__(self):
        self._sync()
        self._start = time.perf_counter()
        self._stop = None
        self.paused = 0.0
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self._sync()
        self._stop = time.perf_counter()

    @contextmanager
    def pause(self):
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.paused += time.perf_counter() - t0

    @property
    def elapsed(self) -> float:
        if self._start is None:
            return 0.0
        end = self._stop if self._stop is not None else time.perf_counter()
        return end - self._start - self.paused
