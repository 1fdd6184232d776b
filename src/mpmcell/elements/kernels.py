"""Compiled basis polynomials for the quadrilateral element family.

Each kernel takes the reference coordinates ``(xi, eta)`` as floats and returns
either the shape function values (length ``n``) or their derivatives with respect
to the reference coordinates (``n x 2``). Kernels are compiled with ``nogil`` so
that worker threads may evaluate them concurrently.
"""

from __future__ import annotations

import numpy as np
from numba import njit


# reference coordinates of the nodes, counter-clockwise from (-1, -1), then the
# mid-side nodes, then the centre node
QUAD_NODES = np.array(
    [
        [-1.0, -1.0],  # node 0
        [1.0, -1.0],  # node 1
        [1.0, 1.0],  # node 2
        [-1.0, 1.0],  # node 3
        [0.0, -1.0],  # node 4
        [1.0, 0.0],  # node 5
        [0.0, 1.0],  # node 6
        [-1.0, 0.0],  # node 7
        [0.0, 0.0],  # node 8
    ]
)


@njit(cache=True, nogil=True)  # type: ignore
def quad4_shape_functions(xi: float, eta: float) -> np.ndarray:
    """Bilinear Lagrange shape functions of a Quad4 element."""
    n = np.empty(4)

    for i in range(4):
        xi_i = QUAD_NODES[i, 0]
        eta_i = QUAD_NODES[i, 1]
        n[i] = 0.25 * (1.0 + xi * xi_i) * (1.0 + eta * eta_i)

    return n


@njit(cache=True, nogil=True)  # type: ignore
def quad4_shape_functions_derivatives(xi: float, eta: float) -> np.ndarray:
    """Derivatives of the Quad4 shape functions, columns ``d/d(xi)``, ``d/d(eta)``."""
    dn = np.empty((4, 2))

    for i in range(4):
        xi_i = QUAD_NODES[i, 0]
        eta_i = QUAD_NODES[i, 1]
        dn[i, 0] = 0.25 * xi_i * (1.0 + eta * eta_i)
        dn[i, 1] = 0.25 * eta_i * (1.0 + xi * xi_i)

    return dn


@njit(cache=True, nogil=True)  # type: ignore
def quad8_shape_functions(xi: float, eta: float) -> np.ndarray:
    """Serendipity shape functions of a Quad8 element."""
    n = np.empty(8)

    # corner nodes
    for i in range(4):
        xi_i = QUAD_NODES[i, 0]
        eta_i = QUAD_NODES[i, 1]
        n[i] = (
            0.25
            * (1.0 + xi * xi_i)
            * (1.0 + eta * eta_i)
            * (xi * xi_i + eta * eta_i - 1.0)
        )

    # mid-side nodes
    for i in range(4, 8):
        xi_i = QUAD_NODES[i, 0]
        eta_i = QUAD_NODES[i, 1]

        if xi_i == 0.0:
            n[i] = 0.5 * (1.0 - xi**2) * (1.0 + eta * eta_i)
        else:
            n[i] = 0.5 * (1.0 + xi * xi_i) * (1.0 - eta**2)

    return n


@njit(cache=True, nogil=True)  # type: ignore
def quad8_shape_functions_derivatives(xi: float, eta: float) -> np.ndarray:
    """Derivatives of the Quad8 shape functions, columns ``d/d(xi)``, ``d/d(eta)``."""
    dn = np.empty((8, 2))

    # corner nodes
    for i in range(4):
        xi_i = QUAD_NODES[i, 0]
        eta_i = QUAD_NODES[i, 1]
        dn[i, 0] = 0.25 * xi_i * (1.0 + eta * eta_i) * (2.0 * xi * xi_i + eta * eta_i)
        dn[i, 1] = 0.25 * eta_i * (1.0 + xi * xi_i) * (xi * xi_i + 2.0 * eta * eta_i)

    # mid-side nodes
    for i in range(4, 8):
        xi_i = QUAD_NODES[i, 0]
        eta_i = QUAD_NODES[i, 1]

        if xi_i == 0.0:
            dn[i, 0] = -xi * (1.0 + eta * eta_i)
            dn[i, 1] = 0.5 * eta_i * (1.0 - xi**2)
        else:
            dn[i, 0] = 0.5 * xi_i * (1.0 - eta**2)
            dn[i, 1] = -eta * (1.0 + xi * xi_i)

    return dn


@njit(cache=True, nogil=True)  # type: ignore
def _lagrange_quadratic(s: float, s_i: float) -> float:
    """1D quadratic Lagrange polynomial through -1, 0, 1 that is one at ``s_i``."""
    if s_i < 0.0:
        return 0.5 * s * (s - 1.0)

    if s_i > 0.0:
        return 0.5 * s * (s + 1.0)

    return 1.0 - s**2


@njit(cache=True, nogil=True)  # type: ignore
def _lagrange_quadratic_derivative(s: float, s_i: float) -> float:
    """Derivative of :func:`_lagrange_quadratic`."""
    if s_i < 0.0:
        return s - 0.5

    if s_i > 0.0:
        return s + 0.5

    return -2.0 * s


@njit(cache=True, nogil=True)  # type: ignore
def quad9_shape_functions(xi: float, eta: float) -> np.ndarray:
    """Biquadratic Lagrange shape functions of a Quad9 element."""
    n = np.empty(9)

    for i in range(9):
        n[i] = _lagrange_quadratic(xi, QUAD_NODES[i, 0]) * _lagrange_quadratic(
            eta, QUAD_NODES[i, 1]
        )

    return n


@njit(cache=True, nogil=True)  # type: ignore
def quad9_shape_functions_derivatives(xi: float, eta: float) -> np.ndarray:
    """Derivatives of the Quad9 shape functions, columns ``d/d(xi)``, ``d/d(eta)``."""
    dn = np.empty((9, 2))

    for i in range(9):
        xi_i = QUAD_NODES[i, 0]
        eta_i = QUAD_NODES[i, 1]
        dn[i, 0] = _lagrange_quadratic_derivative(xi, xi_i) * _lagrange_quadratic(
            eta, eta_i
        )
        dn[i, 1] = _lagrange_quadratic(xi, xi_i) * _lagrange_quadratic_derivative(
            eta, eta_i
        )

    return dn
