"""Finite-difference stencil operators for the 2D heat equation.

Each operator takes a flat, row-major buffer ``u``, the linear offset ``idx``
of one cell and the row ``stride`` of the buffer, and returns the value of
that cell after one explicit time step:

    next = c + xcfl * D_xx(u) + ycfl * D_yy(u)

where ``D_xx`` / ``D_yy`` are central second differences with *unnormalized*
integer weights. The normalization (1, 12 or 5040) is folded into the Courant
numbers, see :func:`courant_numbers`.

The same Python source is compiled for both backends: with ``numba.njit`` for
the CPU kernels and with ``numba.cuda.jit(device=True)`` for the CUDA kernels
(see ``heat2d.kernels``). The operators only use stride arithmetic, so they
work unchanged on the global padded buffer and on a local scratch tile.
"""

import logging
from enum import IntEnum

import numpy as np

log = logging.getLogger(__name__)


class StencilOrder(IntEnum):
    """Supported stencil orders (number of neighbours per axis)."""

    TWO = 2
    FOUR = 4
    EIGHT = 8


# Denominator of the central second-difference weights for each order.
STENCIL_NORMALIZATION = {
    StencilOrder.TWO: 1.0,
    StencilOrder.FOUR: 12.0,
    StencilOrder.EIGHT: 5040.0,
}


# =============================================================================
# Per-order operators
# =============================================================================


def stencil_order2(u, idx, stride, xcfl, ycfl):
    c = u[idx]
    return (
        c
        + xcfl * (u[idx - 1] + u[idx + 1] - 2.0 * c)
        + ycfl * (u[idx - stride] + u[idx + stride] - 2.0 * c)
    )


def stencil_order4(u, idx, stride, xcfl, ycfl):
    c = u[idx]
    xterm = (
        -u[idx - 2] + 16.0 * u[idx - 1] - 30.0 * c + 16.0 * u[idx + 1] - u[idx + 2]
    )
    yterm = (
        -u[idx - 2 * stride]
        + 16.0 * u[idx - stride]
        - 30.0 * c
        + 16.0 * u[idx + stride]
        - u[idx + 2 * stride]
    )
    return c + xcfl * xterm + ycfl * yterm


def stencil_order8(u, idx, stride, xcfl, ycfl):
    """8th order: weights (-9, 128, -1008, 8064, -14350, ...) / 5040."""
    c = u[idx]
    xterm = (
        -9.0 * (u[idx - 4] + u[idx + 4])
        + 128.0 * (u[idx - 3] + u[idx + 3])
        - 1008.0 * (u[idx - 2] + u[idx + 2])
        + 8064.0 * (u[idx - 1] + u[idx + 1])
        - 14350.0 * c
    )
    s2 = 2 * stride
    s3 = 3 * stride
    s4 = 4 * stride
    yterm = (
        -9.0 * (u[idx - s4] + u[idx + s4])
        + 128.0 * (u[idx - s3] + u[idx + s3])
        - 1008.0 * (u[idx - s2] + u[idx + s2])
        + 8064.0 * (u[idx - stride] + u[idx + stride])
        - 14350.0 * c
    )
    return c + xcfl * xterm + ycfl * yterm


def stencil_unsupported(u, idx, stride, xcfl, ycfl):
    """Sentinel operator for orders outside {2, 4, 8}: always NaN."""
    return np.nan


STENCILS = {
    StencilOrder.TWO: stencil_order2,
    StencilOrder.FOUR: stencil_order4,
    StencilOrder.EIGHT: stencil_order8,
}


def is_supported_order(order: int) -> bool:
    return order in STENCILS


def select_stencil(order: int):
    """Return the pure-Python operator for ``order``.

    Unsupported orders are a fatal configuration error: an ERROR record is
    logged and the NaN sentinel operator is returned, so every cell touched
    by the run becomes NaN.
    """
    if not is_supported_order(order):
        log.error(
            f"Unsupported stencil order {order}; supported orders are "
            f"{[int(o) for o in StencilOrder]}. Output will be NaN."
        )
        return stencil_unsupported
    return STENCILS[StencilOrder(order)]


# =============================================================================
# Parameter derivation
# =============================================================================


def courant_numbers(alpha: float, dt: float, dx: float, dy: float, order: int):
    """Courant numbers for the unnormalized stencil weights.

    Parameters
    ----------
    alpha : float
        Thermal diffusivity.
    dt : float
        Time step.
    dx, dy : float
        Grid spacing along x (columns) and y (rows).
    order : int
        Stencil order, one of 2, 4, 8.

    Returns
    -------
    xcfl, ycfl : float
        ``alpha*dt/dx**2`` and ``alpha*dt/dy**2`` divided by the weight
        normalization of ``order``. Stability is not checked.
    """
    try:
        norm = STENCIL_NORMALIZATION[StencilOrder(order)]
    except ValueError:
        raise ValueError(f"Unknown stencil order: {order}. Use 2, 4 or 8")
    return alpha * dt / (dx * dx * norm), alpha * dt / (dy * dy * norm)
