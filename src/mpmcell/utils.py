"""mpmcell utility functions."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cache

import numpy as np
import numpy.typing as npt


@dataclass(eq=False, frozen=True)
class QuadratureRule:
    """Class describing a quadrature rule on the reference element.

    Args:
        points: A ``n x dim`` :class:`numpy.ndarray` of quadrature point locations
            in reference coordinates.
        weights: A length ``n`` :class:`numpy.ndarray` of quadrature weights.
    """

    points: npt.NDArray[np.float64]
    weights: npt.NDArray[np.float64]

    def __len__(self) -> int:
        """Returns the number of quadrature points.

        Returns:
            Number of quadrature points.
        """
        return len(self.weights)


@cache
def gauss_points_line(n_points: int) -> list[tuple[float, float]]:
    """Gaussian weights and locations for 1D line Gaussian integration.

    Args:
        n_points: Number of gauss points.

    Raises:
        ValueError: If ``n_points`` is not 1, 2 or 3.

    Returns:
        Gaussian weights and location. For each gauss point - ``(weight, xi)``.
    """
    # one point gaussian integration
    if n_points == 1:
        return [(2.0, 0.0)]

    # two point gaussian integration
    if n_points == 2:
        return [
            (1.0, -1.0 / np.sqrt(3)),
            (1.0, 1.0 / np.sqrt(3)),
        ]

    # three point gaussian integration
    if n_points == 3:
        return [
            (5.0 / 9.0, -np.sqrt(3.0 / 5.0)),
            (8.0 / 9.0, 0.0),
            (5.0 / 9.0, np.sqrt(3.0 / 5.0)),
        ]

    msg = f"'n_points' must be 1, 2 or 3, not {n_points}."
    raise ValueError(msg)


@cache
def gauss_points_quad(n_points: int) -> QuadratureRule:
    """Gaussian weights and locations for 2D quadrangle Gaussian integration.

    The rule is the tensor product of :func:`gauss_points_line`, ordered with the
    ``xi`` coordinate varying fastest.

    Args:
        n_points: Number of gauss points in each direction.

    Raises:
        ValueError: If ``n_points`` is not 1, 2 or 3.

    Returns:
        Quadrature rule with ``n_points**2`` points.
    """
    line = gauss_points_line(n_points=n_points)

    points = np.array([[xi, eta] for _, eta in line for _, xi in line])
    weights = np.array([w_xi * w_eta for w_eta, _ in line for w_xi, _ in line])

    # cached rules are shared, so lock them
    points.setflags(write=False)
    weights.setflags(write=False)

    return QuadratureRule(points=points, weights=weights)


def as_reference_point(
    xi: npt.ArrayLike,
    dim: int,
) -> npt.NDArray[np.float64]:
    """Converts ``xi`` to a float vector of length ``dim``.

    Args:
        xi: Reference coordinates.
        dim: Spatial dimension.

    Raises:
        ValueError: If ``xi`` does not have ``dim`` entries.

    Returns:
        Reference coordinates as a 1D :class:`numpy.ndarray`.
    """
    xi_arr = np.asarray(xi, dtype=np.float64).ravel()

    if xi_arr.shape != (dim,):
        raise ValueError(
            f"Reference coordinates must have {dim} entries, not {xi_arr.size}."
        )

    return xi_arr


def as_nodal_coordinates(
    nodal_coordinates: npt.ArrayLike,
    num_nodes: int,
    dim: int,
) -> npt.NDArray[np.float64]:
    """Converts ``nodal_coordinates`` to a ``num_nodes x dim`` float array.

    Args:
        nodal_coordinates: Physical coordinates of the nodes, one row per node.
        num_nodes: Expected number of nodes.
        dim: Spatial dimension.

    Raises:
        ValueError: If the array does not have shape ``(num_nodes, dim)``.

    Returns:
        Nodal coordinates as a 2D :class:`numpy.ndarray`.
    """
    coords = np.asarray(nodal_coordinates, dtype=np.float64)

    if coords.shape != (num_nodes, dim):
        raise ValueError(
            f"Nodal coordinates must have shape ({num_nodes}, {dim}), not "
            f"{coords.shape}."
        )

    return coords
