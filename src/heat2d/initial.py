"""Initial temperature fields (interior only, shape ``(ny, nx)``)."""

import numpy as np


def constant_field(nx: int, ny: int, value: float = 0.0) -> np.ndarray:
    return np.full((ny, nx), float(value))


def point_source(nx: int, ny: int, value: float = 1.0, row: int = None, col: int = None) -> np.ndarray:
    """Zero field with a single cell set to ``value`` (centre by default)."""
    field = np.zeros((ny, nx))
    field[ny // 2 if row is None else row, nx // 2 if col is None else col] = value
    return field


def gaussian_bump(nx: int, ny: int, amplitude: float = 1.0, width: float = 0.1) -> np.ndarray:
    """Gaussian centred in the unit square, ``width`` as a fraction of the side."""
    x = (np.arange(nx) + 0.5) / nx
    y = (np.arange(ny) + 0.5) / ny
    X, Y = np.meshgrid(x, y)
    return amplitude * np.exp(-((X - 0.5) ** 2 + (Y - 0.5) ** 2) / (2 * width**2))


def linear_ramp(nx: int, ny: int, slope: float = 1.0, offset: float = 0.0, axis: str = "x") -> np.ndarray:
    """Field linear along ``axis`` ("x" = columns, "y" = rows), constant along the other."""
    if axis == "x":
        return np.tile(offset + slope * np.arange(nx, dtype=float), (ny, 1))
    if axis == "y":
        return np.tile((offset + slope * np.arange(ny, dtype=float))[:, None], (1, nx))
    raise ValueError(f"Unknown axis: {axis}. Use 'x' or 'y'")


INITIAL_CONDITIONS = {
    "constant": constant_field,
    "point": point_source,
    "gaussian": gaussian_bump,
    "ramp": linear_ramp,
}


def create_initial_field(name: str, nx: int, ny: int, **kwargs) -> np.ndarray:
    """Build an initial field by name; kwargs go to the builder."""
    if name not in INITIAL_CONDITIONS:
        raise ValueError(f"Unknown initial condition: {name}. Use one of {sorted(INITIAL_CONDITIONS)}")
    return INITIAL_CONDITIONS[name](nx, ny, **kwargs)
