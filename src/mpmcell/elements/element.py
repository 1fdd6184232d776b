"""Element abstract class describing a shape function on a reference cell."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

import mpmcell.utils as utils


if TYPE_CHECKING:
    import numpy.typing as npt


logger = logging.getLogger(__name__)


class ElementDegree(Enum):
    """Polynomial degree of an element's shape functions."""

    LINEAR = 1
    QUADRATIC = 2


class ShapefnType(Enum):
    """Type of shape function used for particle-node interaction."""

    NORMAL_MPM = "normal_mpm"


class Element:
    """Abstract base class for an element shape function.

    An element is stateless after construction: it holds the spatial dimension and
    the number of shape functions, and every query takes the reference coordinates
    (and, where required, the physical nodal coordinates) as arguments. A single
    instance may therefore be shared by every cell of the same arity and queried
    from several threads at once.

    Nodal coordinates are always passed as a ``num_functions x dim`` array, i.e. one
    row per node in local node order.
    """

    def __init__(
        self,
        dim: int,
        num_functions: int,
    ) -> None:
        """Inits the Element class.

        Args:
            dim: Spatial dimension of the element.
            num_functions: Number of shape functions (i.e. number of nodes).
        """
        self._dim = dim
        self._num_functions = num_functions

        logger.debug(f"Created {self!r}.")

    def __repr__(self) -> str:
        """Override __repr__ method.

        Returns:
            String representation of the object.
        """
        return (
            f"{self.__class__.__name__} - dim: {self._dim}, "
            f"functions: {self._num_functions}"
        )

    @property
    def dim(self) -> int:
        """Spatial dimension of the element."""
        return self._dim

    def num_functions(self) -> int:
        """Returns the number of shape functions.

        Returns:
            Number of shape functions, equal to the number of nodes of a cell that
            uses this element.
        """
        return self._num_functions

    def shape_functions(
        self,
        xi: npt.ArrayLike,
        number_of_particles: int | None = None,
        deformation_gradient: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float64]:
        """Returns the shape functions at a point.

        Args:
            xi: Location of the point in reference coordinates.
            number_of_particles: Number of particles in the cell, used by particle
                size aware shape functions. Defaults to ``None``.
            deformation_gradient: Deformation gradient of the particle, used by
                particle size aware shape functions. Defaults to ``None``.

        Raises:
            NotImplementedError: If this method hasn't been implemented for an element.
        """
        raise NotImplementedError

    def shape_functions_derivatives(
        self,
        xi: npt.ArrayLike,
        number_of_particles: int | None = None,
        deformation_gradient: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float64]:
        """Returns the derivatives of the shape functions at a point.

        Args:
            xi: Location of the point in reference coordinates.
            number_of_particles: Number of particles in the cell. Defaults to
                ``None``.
            deformation_gradient: Deformation gradient of the particle. Defaults to
                ``None``.

        Raises:
            NotImplementedError: If this method hasn't been implemented for an element.
        """
        raise NotImplementedError

    def degree(self) -> ElementDegree:
        """Returns the degree of the shape functions.

        Raises:
            NotImplementedError: If this method hasn't been implemented for an element.
        """
        raise NotImplementedError

    def shapefn_type(self) -> ShapefnType:
        """Returns the type of shape function.

        Returns:
            Shape function type.
        """
        return ShapefnType.NORMAL_MPM

    def unit_cell_coordinates(self) -> npt.NDArray[np.float64]:
        """Returns the reference coordinates of the nodes.

        Raises:
            NotImplementedError: If this method hasn't been implemented for an element.
        """
        raise NotImplementedError

    def sides_indices(self) -> npt.NDArray[np.int64]:
        """Returns the node pairs that form the sides of the cell.

        Raises:
            NotImplementedError: If this method hasn't been implemented for an element.
        """
        raise NotImplementedError

    def corner_indices(self) -> npt.NDArray[np.int64]:
        """Returns the corner nodes that bound the cell.

        Raises:
            NotImplementedError: If this method hasn't been implemented for an element.
        """
        raise NotImplementedError

    def inhedron_indices(self) -> npt.NDArray[np.int64]:
        """Returns the node groups forming the sub-simplices that tile the cell.

        Raises:
            NotImplementedError: If this method hasn't been implemented for an element.
        """
        raise NotImplementedError

    def quadrature(self, num_points: int) -> utils.QuadratureRule:
        """Returns a quadrature rule on the reference cell.

        Args:
            num_points: Number of quadrature points in each direction.

        Raises:
            NotImplementedError: If this method hasn't been implemented for an element.
        """
        raise NotImplementedError

    def b_matrix(
        self,
        xi: npt.ArrayLike,
        nodal_coordinates: npt.ArrayLike | None = None,
        number_of_particles: int | None = None,
        deformation_gradient: npt.ArrayLike | None = None,
    ) -> list[npt.NDArray[np.float64]]:
        """Returns the strain-displacement matrix of every node at a point.

        Args:
            xi: Location of the point in reference coordinates.
            nodal_coordinates: Physical coordinates of the nodes. Defaults to
                ``None``.
            number_of_particles: Number of particles in the cell. Defaults to
                ``None``.
            deformation_gradient: Deformation gradient of the particle. Defaults to
                ``None``.

        Raises:
            NotImplementedError: If this method hasn't been implemented for an element.
        """
        raise NotImplementedError

    def jacobian_determinant(
        self,
        xi: npt.ArrayLike,
        nodal_coordinates: npt.ArrayLike,
    ) -> float:
        """Returns the signed determinant of the Jacobian at a point.

        No sign check is performed, use :meth:`jacobian` to guard against degenerate
        elements.

        Args:
            xi: Location of the point in reference coordinates.
            nodal_coordinates: Physical coordinates of the nodes.

        Returns:
            Determinant of the Jacobian.
        """
        return float(np.linalg.det(self._jacobian(xi, nodal_coordinates)))

    def jacobian(
        self,
        xi: npt.ArrayLike,
        nodal_coordinates: npt.ArrayLike,
        number_of_particles: int | None = None,
        deformation_gradient: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float64]:
        r"""Calculates the Jacobian at a point.

        The Jacobian is :math:`J_{ij} = \partial x_j / \partial \xi_i`, i.e. the
        transpose of the reference derivatives contracted with the nodal coordinates.

        Args:
            xi: Location of the point in reference coordinates.
            nodal_coordinates: Physical coordinates of the nodes.
            number_of_particles: Number of particles in the cell. Defaults to
                ``None``.
            deformation_gradient: Deformation gradient of the particle. Defaults to
                ``None``.

        Raises:
            RuntimeError: If the determinant of the Jacobian is not positive.

        Returns:
            ``dim x dim`` Jacobian matrix.
        """
        j = self._jacobian(
            xi,
            nodal_coordinates,
            number_of_particles=number_of_particles,
            deformation_gradient=deformation_gradient,
        )

        # check sign of jacobian
        jacobian = np.linalg.det(j)

        if jacobian <= 0:
            raise RuntimeError(
                f"Jacobian of element is not positive ({jacobian:.4e}), the element "
                f"is degenerate or inverted."
            )

        return j

    def shape_functions_derivatives_physical(
        self,
        xi: npt.ArrayLike,
        nodal_coordinates: npt.ArrayLike,
        number_of_particles: int | None = None,
        deformation_gradient: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float64]:
        """Returns the derivatives of the shape functions wrt. physical coordinates.

        Args:
            xi: Location of the point in reference coordinates.
            nodal_coordinates: Physical coordinates of the nodes.
            number_of_particles: Number of particles in the cell. Defaults to
                ``None``.
            deformation_gradient: Deformation gradient of the particle. Defaults to
                ``None``.

        Raises:
            RuntimeError: If the determinant of the Jacobian is not positive.

        Returns:
            ``num_functions x dim`` matrix of physical derivatives.
        """
        dn_dxi = self.shape_functions_derivatives(
            xi,
            number_of_particles=number_of_particles,
            deformation_gradient=deformation_gradient,
        )
        j = self.jacobian(xi, nodal_coordinates)

        # dN/dxi = J dN/dx, so dN/dx = J^-1 dN/dxi
        return np.linalg.solve(j, dn_dxi.transpose()).transpose()

    def mass_matrix(
        self,
        xi_s: npt.ArrayLike,
        weights: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float64]:
        """Assembles the mass matrix over a set of points.

        Args:
            xi_s: A ``n x dim`` array of points in reference coordinates.
            weights: Weight of each point. Defaults to ``None``, which weights each
                point by one.

        Returns:
            Symmetric ``num_functions x num_functions`` mass matrix.
        """
        points, weights_arr = self._integration_points(xi_s, weights)

        # allocate mass matrix
        m_el = np.zeros((self._num_functions, self._num_functions))

        # loop through each point
        for weight, xi in zip(weights_arr, points):
            n = self.shape_functions(xi)
            m_el += np.outer(n, n) * weight

        return m_el

    def laplace_matrix(
        self,
        xi_s: npt.ArrayLike,
        nodal_coordinates: npt.ArrayLike,
        weights: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float64]:
        """Assembles the Laplace matrix over a set of points.

        Args:
            xi_s: A ``n x dim`` array of points in reference coordinates.
            nodal_coordinates: Physical coordinates of the nodes.
            weights: Weight of each point. Defaults to ``None``, which weights each
                point by one.

        Raises:
            RuntimeError: If the determinant of the Jacobian is not positive at any of
                the points.

        Returns:
            Symmetric ``num_functions x num_functions`` Laplace matrix.
        """
        points, weights_arr = self._integration_points(xi_s, weights)

        # allocate laplace matrix
        l_el = np.zeros((self._num_functions, self._num_functions))

        # loop through each point
        for weight, xi in zip(weights_arr, points):
            b_mat = self.shape_functions_derivatives_physical(xi, nodal_coordinates)
            l_el += b_mat @ b_mat.transpose() * weight

        return l_el

    def natural_coordinates(
        self,
        point: npt.ArrayLike,
        nodal_coordinates: npt.ArrayLike,
        tolerance: float = 1.0e-10,
        max_iterations: int = 100,
    ) -> npt.NDArray[np.float64]:
        r"""Maps a physical point to reference coordinates.

        Solves :math:`x(\xi) = x_p` with Newton-Raphson iterations, starting from the
        reference origin.

        Args:
            point: Physical coordinates of the point.
            nodal_coordinates: Physical coordinates of the nodes.
            tolerance: Convergence tolerance on the reference coordinate increment.
                Defaults to ``1.0e-10``.
            max_iterations: Maximum number of iterations. Defaults to ``100``.

        Raises:
            RuntimeError: If the iterations do not converge or the element is
                degenerate.

        Returns:
            Reference coordinates of the point.
        """
        x_p = utils.as_reference_point(point, self._dim)
        coords = utils.as_nodal_coordinates(
            nodal_coordinates, self._num_functions, self._dim
        )
        xi = np.zeros(self._dim)

        for _ in range(max_iterations):
            # residual in physical space
            residual = x_p - self.shape_functions(xi) @ coords

            # dx = J^T dxi
            j = self.jacobian(xi, coords)
            dxi = np.linalg.solve(j.transpose(), residual)
            xi += dxi

            if np.linalg.norm(dxi) < tolerance:
                return xi

        raise RuntimeError(
            f"Mapping of point {x_p} to reference coordinates did not converge after "
            f"{max_iterations} iterations."
        )

    def _jacobian(
        self,
        xi: npt.ArrayLike,
        nodal_coordinates: npt.ArrayLike,
        number_of_particles: int | None = None,
        deformation_gradient: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float64]:
        """Forms the Jacobian matrix without checking its determinant.

        Args:
            xi: Location of the point in reference coordinates.
            nodal_coordinates: Physical coordinates of the nodes.
            number_of_particles: Number of particles in the cell. Defaults to
                ``None``.
            deformation_gradient: Deformation gradient of the particle. Defaults to
                ``None``.

        Returns:
            ``dim x dim`` Jacobian matrix.
        """
        coords = utils.as_nodal_coordinates(
            nodal_coordinates, self._num_functions, self._dim
        )
        dn_dxi = self.shape_functions_derivatives(
            xi,
            number_of_particles=number_of_particles,
            deformation_gradient=deformation_gradient,
        )

        return dn_dxi.transpose() @ coords

    def _integration_points(
        self,
        xi_s: npt.ArrayLike,
        weights: npt.ArrayLike | None,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Validates a set of integration points and their weights.

        Args:
            xi_s: A ``n x dim`` array of points in reference coordinates.
            weights: Weight of each point, ``None`` for unit weights.

        Raises:
            ValueError: If the points or weights have the wrong shape.

        Returns:
            Points and weights as arrays.
        """
        points = np.asarray(xi_s, dtype=np.float64)

        # a single point may be given as a vector
        if points.shape == (self._dim,):
            points = points.reshape(1, self._dim)

        if points.ndim != 2 or points.shape[1] != self._dim:
            raise ValueError(
                f"Points must have shape (n, {self._dim}), not {points.shape}."
            )

        if weights is None:
            return points, np.ones(len(points))

        weights_arr = np.asarray(weights, dtype=np.float64).ravel()

        if len(weights_arr) != len(points):
            raise ValueError(
                f"Number of weights ({len(weights_arr)}) does not match the number of "
                f"points ({len(points)})."
            )

        return points, weights_arr
