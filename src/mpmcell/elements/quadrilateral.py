"""Quadrilateral elements: 4-noded, 8-noded and 9-noded shape functions.

Node numbering is counter-clockwise from ``(-1, -1)``, corner nodes first, then the
mid-side nodes, then the centre node::

    3       6       2
      o-----o-----o
      |           |
    7 o     o 8   o 5
      |           |
      o-----o-----o
    0       4       1
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import numpy as np

import mpmcell.utils as utils
from mpmcell.elements import kernels
from mpmcell.elements.element import Element, ElementDegree


if TYPE_CHECKING:
    import numpy.typing as npt


QUAD_DIM = 2
QUAD_NUM_FUNCTIONS = (4, 8, 9)

# side node pairs and corner nodes are shared by the whole family
QUAD_SIDES = np.array([[0, 1], [1, 2], [2, 3], [3, 0]])
QUAD_CORNERS = np.array([0, 1, 2, 3])


class QuadrilateralElement(Element):
    """Abstract base class for a quadrilateral element.

    Subclasses fix the number of shape functions and provide the compiled basis
    kernels. The dimension and number of functions are validated on construction.
    """

    def __init__(
        self,
        dim: int,
        num_functions: int,
        shape_functions_kernel: Callable[[float, float], np.ndarray],
        shape_functions_derivatives_kernel: Callable[[float, float], np.ndarray],
    ) -> None:
        """Inits the QuadrilateralElement class.

        Args:
            dim: Spatial dimension, must be ``2``.
            num_functions: Number of shape functions, must be ``4``, ``8`` or ``9``.
            shape_functions_kernel: Compiled kernel returning the shape functions.
            shape_functions_derivatives_kernel: Compiled kernel returning the shape
                function derivatives.

        Raises:
            ValueError: If ``dim`` or ``num_functions`` are invalid for a
                quadrilateral element.
        """
        if dim != QUAD_DIM:
            raise ValueError(
                f"Invalid dimension for a quadrilateral element: {dim}, must be "
                f"{QUAD_DIM}."
            )

        if num_functions not in QUAD_NUM_FUNCTIONS:
            raise ValueError(
                f"Number of shape functions {num_functions} is not defined for a "
                f"quadrilateral element, must be one of {QUAD_NUM_FUNCTIONS}."
            )

        self._shape_functions_kernel = shape_functions_kernel
        self._shape_functions_derivatives_kernel = shape_functions_derivatives_kernel

        super().__init__(dim=dim, num_functions=num_functions)

    def shape_functions(
        self,
        xi: npt.ArrayLike,
        number_of_particles: int | None = None,
        deformation_gradient: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float64]:
        """Returns the shape functions at a point.

        ``number_of_particles`` and ``deformation_gradient`` have no effect for
        standard quadrilateral shape functions.

        Args:
            xi: Location of the point in reference coordinates.
            number_of_particles: Number of particles in the cell. Defaults to
                ``None``.
            deformation_gradient: Deformation gradient of the particle. Defaults to
                ``None``.

        Returns:
            The values of the shape functions ``[N0, N1, ...]``.
        """
        xi_arr = utils.as_reference_point(xi, QUAD_DIM)

        return self._shape_functions_kernel(float(xi_arr[0]), float(xi_arr[1]))

    def shape_functions_derivatives(
        self,
        xi: npt.ArrayLike,
        number_of_particles: int | None = None,
        deformation_gradient: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.float64]:
        """Returns the derivatives of the shape functions at a point.

        ``number_of_particles`` and ``deformation_gradient`` have no effect for
        standard quadrilateral shape functions.

        Args:
            xi: Location of the point in reference coordinates.
            number_of_particles: Number of particles in the cell. Defaults to
                ``None``.
            deformation_gradient: Deformation gradient of the particle. Defaults to
                ``None``.

        Returns:
            ``num_functions x 2`` matrix, columns ``d/d(xi)`` and ``d/d(eta)``.
        """
        xi_arr = utils.as_reference_point(xi, QUAD_DIM)

        return self._shape_functions_derivatives_kernel(
            float(xi_arr[0]), float(xi_arr[1])
        )

    def b_matrix(
        self,
        xi: npt.ArrayLike,
        nodal_coordinates: npt.ArrayLike | None = None,
        number_of_particles: int | None = None,
        deformation_gradient: npt.ArrayLike | None = None,
    ) -> list[npt.NDArray[np.float64]]:
        """Returns the strain-displacement matrix of every node at a point.

        Each nodal matrix maps the nodal displacement ``(u_x, u_y)`` to the strain
        components ``(eps_xx, eps_yy, gamma_xy)``. If ``nodal_coordinates`` is not
        provided, the derivatives wrt. the reference coordinates are used, i.e. the
        B matrix of the unit cell.

        Args:
            xi: Location of the point in reference coordinates.
            nodal_coordinates: Physical coordinates of the nodes. Defaults to
                ``None``.
            number_of_particles: Number of particles in the cell. Defaults to
                ``None``.
            deformation_gradient: Deformation gradient of the particle. Defaults to
                ``None``.

        Raises:
            RuntimeError: If the determinant of the Jacobian is not positive.

        Returns:
            List of ``3 x 2`` B matrices, one per node.
        """
        if nodal_coordinates is None:
            b_mat = self.shape_functions_derivatives(xi)
        else:
            b_mat = self.shape_functions_derivatives_physical(xi, nodal_coordinates)

        b_matrices = []

        for dn_dx, dn_dy in b_mat:
            b_i = np.zeros((3, 2))
            b_i[0, 0] = dn_dx
            b_i[1, 1] = dn_dy
            b_i[2, 0] = dn_dy
            b_i[2, 1] = dn_dx
            b_matrices.append(b_i)

        return b_matrices

    def unit_cell_coordinates(self) -> npt.NDArray[np.float64]:
        """Returns the reference coordinates of the nodes.

        Returns:
            ``num_functions x 2`` array of nodal reference coordinates.
        """
        return kernels.QUAD_NODES[: self._num_functions].copy()

    def sides_indices(self) -> npt.NDArray[np.int64]:
        """Returns the node pairs that form the sides of the cell.

        The sides connect the corner nodes, mid-side nodes do not split a side.

        Returns:
            ``4 x 2`` array of node indices.
        """
        return QUAD_SIDES.copy()

    def corner_indices(self) -> npt.NDArray[np.int64]:
        """Returns the corner nodes that bound the cell, counter-clockwise.

        Returns:
            Array of corner node indices.
        """
        return QUAD_CORNERS.copy()

    def quadrature(self, num_points: int) -> utils.QuadratureRule:
        """Returns a tensor product Gauss rule on the reference square.

        Args:
            num_points: Number of quadrature points in each direction.

        Returns:
            Quadrature rule.
        """
        return utils.gauss_points_quad(n_points=num_points)


class Quad4Element(QuadrilateralElement):
    """Class for a four-noded bilinear quadrilateral element."""

    def __init__(
        self,
        dim: int = QUAD_DIM,
    ) -> None:
        """Inits the Quad4Element class.

        Args:
            dim: Spatial dimension. Defaults to ``2``.
        """
        super().__init__(
            dim=dim,
            num_functions=4,
            shape_functions_kernel=kernels.quad4_shape_functions,
            shape_functions_derivatives_kernel=(
                kernels.quad4_shape_functions_derivatives
            ),
        )

    def degree(self) -> ElementDegree:
        """Returns the degree of the shape functions.

        Returns:
            ``ElementDegree.LINEAR``
        """
        return ElementDegree.LINEAR

    def inhedron_indices(self) -> npt.NDArray[np.int64]:
        """Returns the node triples of the sub-triangles that tile a Quad4.

        Returns:
            ``2 x 3`` array of node indices.
        """
        return np.array(
            [
                [0, 1, 2],
                [0, 2, 3],
            ]
        )


class Quad8Element(QuadrilateralElement):
    """Class for an eight-noded serendipity quadrilateral element."""

    def __init__(
        self,
        dim: int = QUAD_DIM,
    ) -> None:
        """Inits the Quad8Element class.

        Args:
            dim: Spatial dimension. Defaults to ``2``.
        """
        super().__init__(
            dim=dim,
            num_functions=8,
            shape_functions_kernel=kernels.quad8_shape_functions,
            shape_functions_derivatives_kernel=(
                kernels.quad8_shape_functions_derivatives
            ),
        )

    def degree(self) -> ElementDegree:
        """Returns the degree of the shape functions.

        Returns:
            ``ElementDegree.QUADRATIC``
        """
        return ElementDegree.QUADRATIC

    def inhedron_indices(self) -> npt.NDArray[np.int64]:
        """Returns the node triples of the sub-triangles that tile a Quad8.

        Returns:
            ``6 x 3`` array of node indices.
        """
        return np.array(
            [
                [0, 4, 7],
                [4, 1, 5],
                [4, 5, 7],
                [5, 2, 6],
                [6, 3, 7],
                [7, 5, 6],
            ]
        )


class Quad9Element(QuadrilateralElement):
    """Class for a nine-noded biquadratic quadrilateral element."""

    def __init__(
        self,
        dim: int = QUAD_DIM,
    ) -> None:
        """Inits the Quad9Element class.

        Args:
            dim: Spatial dimension. Defaults to ``2``.
        """
        super().__init__(
            dim=dim,
            num_functions=9,
            shape_functions_kernel=kernels.quad9_shape_functions,
            shape_functions_derivatives_kernel=(
                kernels.quad9_shape_functions_derivatives
            ),
        )

    def degree(self) -> ElementDegree:
        """Returns the degree of the shape functions.

        Returns:
            ``ElementDegree.QUADRATIC``
        """
        return ElementDegree.QUADRATIC

    def inhedron_indices(self) -> npt.NDArray[np.int64]:
        """Returns the node triples of the sub-triangles that tile a Quad9.

        Returns:
            ``8 x 3`` array of node indices.
        """
        return np.array(
            [
                [0, 4, 8],
                [4, 1, 8],
                [1, 5, 8],
                [5, 2, 8],
                [2, 6, 8],
                [6, 3, 8],
                [3, 7, 8],
                [7, 0, 8],
            ]
        )
