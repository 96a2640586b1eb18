"""Kernel backends.

Each backend module exposes the same interface:

- ``run_naive``, ``run_row_blocked``, ``run_tiled``: launch one stencil step
- ``fill_cells``, ``gather_cells``: boundary scatter/gather
- ``configure``, ``to_device``, ``to_host``, ``synchronize``
"""

BACKENDS = ("cpu", "cuda")


def get_backend(name: str):
    """Import and return the backend module called ``name``."""
    if name == "cpu":
        from . import cpu

        return cpu
    if name == "cuda":
        from . import cuda

        return cuda
    raise ValueError(f"Unknown backend: {name}. Use one of {BACKENDS}")
