"""Class describing a background grid cell."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import numpy as np
import shapely

from mpmcell.mesh.handler import Handler, is_local_index


if TYPE_CHECKING:
    import numpy.typing as npt

    from mpmcell.elements.element import Element


logger = logging.getLogger(__name__)

# largest unsigned 64 bit index, marks an unassigned cell id
MAX_INDEX = 2**64 - 1


class NodeLike(Protocol):
    """Protocol for the node entities referenced by a cell."""

    def coordinates(self) -> npt.NDArray[np.float64]:
        """Returns the physical coordinates of the node."""
        ...


class Cell:
    """Class describing a cell of the background grid.

    A cell owns references to its nodes and neighbouring cells and to a single
    element, which provides the shape functions. The element is shared with other
    cells of the same arity and is never modified by the cell.

    Nodes and neighbours are added once per local index and cannot be removed. The
    element may be assigned once; assigning the same element again is accepted,
    assigning a different element is rejected.
    """

    def __init__(
        self,
        cell_id: int,
        num_nodes: int,
        shape_function: Element | None = None,
    ) -> None:
        """Inits the Cell class.

        Args:
            cell_id: Unique cell index, pass ``MAX_INDEX`` for an unassigned id.
            num_nodes: Number of nodes the cell is made of.
            shape_function: Element providing the shape functions. Defaults to
                ``None``, in which case it is assigned later with
                :meth:`assign_shape_function`.

        Raises:
            ValueError: If ``cell_id`` is not a valid unsigned 64 bit index,
                ``num_nodes`` is not positive, or ``shape_function`` does not have
                ``num_nodes`` shape functions.
        """
        if not 0 <= cell_id <= MAX_INDEX:
            raise ValueError(f"Cell id {cell_id} is not in [0, {MAX_INDEX}].")

        if num_nodes <= 0:
            raise ValueError(f"Number of nodes must be positive, not {num_nodes}.")

        self._cell_id = int(cell_id)
        self._num_nodes = num_nodes
        self._nodes: Handler[NodeLike] = Handler()
        self._neighbours: Handler[Cell] = Handler()
        self._shape_function: Element | None = None

        if shape_function is not None and not self.assign_shape_function(
            shape_function
        ):
            raise ValueError(
                f"{shape_function!r} does not have {num_nodes} shape functions."
            )

    def __repr__(self) -> str:
        """Override __repr__ method.

        Returns:
            String representation of the object.
        """
        return (
            f"{self.__class__.__name__} - id: {self._cell_id}, "
            f"nodes: {len(self._nodes)}/{self._num_nodes}, "
            f"neighbours: {len(self._neighbours)}"
        )

    @property
    def cell_id(self) -> int:
        """Cell index."""
        return self._cell_id

    @property
    def num_nodes_expected(self) -> int:
        """Number of nodes the cell is made of."""
        return self._num_nodes

    @property
    def shape_function(self) -> Element | None:
        """Element assigned to the cell, ``None`` if unassigned."""
        return self._shape_function

    @property
    def nodes(self) -> Handler[NodeLike]:
        """Nodes of the cell, keyed by local node index."""
        return self._nodes

    @property
    def neighbours(self) -> Handler[Cell]:
        """Neighbouring cells, keyed by local neighbour index."""
        return self._neighbours

    def num_nodes(self) -> int:
        """Returns the number of nodes added to the cell.

        Returns:
            Number of nodes currently referenced.
        """
        return len(self._nodes)

    def num_neighbours(self) -> int:
        """Returns the number of neighbouring cells.

        Returns:
            Number of neighbours.
        """
        return len(self._neighbours)

    def assign_shape_function(self, shape_function: Element) -> bool:
        """Assigns the element providing the shape functions.

        Args:
            shape_function: Element to assign.

        Returns:
            ``True`` if the element is assigned, ``False`` if its number of shape
            functions does not match the number of nodes of the cell or if a
            different element has already been assigned.
        """
        if shape_function.num_functions() != self._num_nodes:
            logger.warning(
                f"Cell {self._cell_id}: {shape_function!r} does not match the "
                f"{self._num_nodes} nodes of the cell."
            )
            return False

        if self._shape_function is not None:
            if self._shape_function is shape_function:
                return True

            logger.warning(
                f"Cell {self._cell_id}: shape function already assigned "
                f"({self._shape_function!r})."
            )
            return False

        self._shape_function = shape_function

        return True

    def num_functions(self) -> int:
        """Returns the number of shape functions of the assigned element.

        Raises:
            RuntimeError: If no element has been assigned.

        Returns:
            Number of shape functions.
        """
        return self._get_shape_function().num_functions()

    def add_node(self, local_id: int, node: NodeLike) -> bool:
        """Adds a node to the cell.

        Args:
            local_id: Local node index, ``0 <= local_id < num_nodes_expected``.
            node: Node to reference.

        Returns:
            ``True`` if added, ``False`` if ``local_id`` is out of range or already
            occupied.
        """
        if not is_local_index(local_id):
            logger.warning(
                f"Cell {self._cell_id}: local node index {local_id!r} is not a "
                f"non-negative integer."
            )
            return False

        if local_id >= self._num_nodes:
            logger.warning(
                f"Cell {self._cell_id}: local node index {local_id} is out of range "
                f"[0, {self._num_nodes})."
            )
            return False

        if not self._nodes.insert(local_id, node):
            logger.warning(
                f"Cell {self._cell_id}: local node index {local_id} is already "
                f"occupied."
            )
            return False

        return True

    def add_neighbour(self, local_id: int, neighbour: Cell) -> bool:
        """Adds a neighbouring cell.

        Args:
            local_id: Local neighbour index.
            neighbour: Neighbouring cell.

        Returns:
            ``True`` if added, ``False`` if ``local_id`` is invalid or already
            occupied, or if ``neighbour`` is this cell.
        """
        if neighbour is self:
            logger.warning(f"Cell {self._cell_id}: a cell cannot neighbour itself.")
            return False

        if not self._neighbours.insert(local_id, neighbour):
            logger.warning(
                f"Cell {self._cell_id}: local neighbour index {local_id} is invalid "
                f"or already occupied."
            )
            return False

        return True

    def is_initialised(self) -> bool:
        """Checks whether the cell can be used for interpolation.

        Returns:
            ``True`` if an element is assigned and all nodes have been added.
        """
        return (
            self._shape_function is not None and len(self._nodes) == self._num_nodes
        )

    def nodal_coordinates(self) -> npt.NDArray[np.float64]:
        """Returns the physical coordinates of the nodes in local node order.

        Raises:
            RuntimeError: If the cell is not initialised.

        Returns:
            ``num_nodes x dim`` array of coordinates.
        """
        self._check_initialised()

        return np.array([node.coordinates() for node in self._nodes.values()])

    def volume(self) -> float:
        """Calculates the volume (area) of the cell from its corner nodes.

        Raises:
            RuntimeError: If the cell is not initialised, degenerate or inverted.

        Returns:
            Volume of the cell.
        """
        return self.to_shapely_polygon().area

    def centroid(self) -> npt.NDArray[np.float64]:
        """Calculates the centroid of the cell, i.e. the image of the reference origin.

        Raises:
            RuntimeError: If the cell is not initialised.

        Returns:
            Physical coordinates of the centroid.
        """
        coords = self.nodal_coordinates()
        element = self._get_shape_function()

        return element.shape_functions(np.zeros(element.dim)) @ coords

    def mean_length(self) -> float:
        """Calculates the mean length of the sides of the cell.

        Raises:
            RuntimeError: If the cell is not initialised.

        Returns:
            Mean side length.
        """
        coords = self.nodal_coordinates()
        sides = self._get_shape_function().sides_indices()

        lengths = np.linalg.norm(coords[sides[:, 0]] - coords[sides[:, 1]], axis=1)

        return float(np.mean(lengths))

    def is_point_in_cell(
        self,
        point: npt.ArrayLike,
        tolerance: float = 1.0e-10,
    ) -> bool:
        """Checks whether a physical point lies within the cell.

        The cell is tiled by the sub-triangles of the element's inhedron indices; a
        point on the boundary is considered inside.

        Args:
            point: Physical coordinates of the point.
            tolerance: Distance tolerance to the cell. Defaults to ``1.0e-10``.

        Raises:
            RuntimeError: If the cell is not initialised.

        Returns:
            ``True`` if the point is inside the cell.
        """
        coords = self.nodal_coordinates()
        inhedron = self._get_shape_function().inhedron_indices()

        sub_triangles = shapely.MultiPolygon(
            [shapely.Polygon(coords[tri]) for tri in inhedron]
        )

        return bool(sub_triangles.distance(shapely.Point(point)) <= tolerance)

    def local_coordinates_point(
        self,
        point: npt.ArrayLike,
    ) -> npt.NDArray[np.float64]:
        """Maps a physical point to the reference coordinates of the cell.

        Args:
            point: Physical coordinates of the point.

        Raises:
            RuntimeError: If the cell is not initialised, is degenerate, or the
                mapping does not converge.

        Returns:
            Reference coordinates of the point.
        """
        coords = self.nodal_coordinates()

        return self._get_shape_function().natural_coordinates(point, coords)

    def shape_functions_at(
        self,
        point: npt.ArrayLike,
    ) -> npt.NDArray[np.float64]:
        """Returns the shape functions of the cell at a physical point.

        Args:
            point: Physical coordinates of the point.

        Returns:
            Values of the shape functions.
        """
        xi = self.local_coordinates_point(point)

        return self._get_shape_function().shape_functions(xi)

    def interpolate(
        self,
        point: npt.ArrayLike,
        nodal_values: npt.ArrayLike,
    ) -> npt.NDArray[np.float64]:
        """Interpolates nodal values to a physical point.

        Args:
            point: Physical coordinates of the point.
            nodal_values: Values at the nodes, one row per node in local node order.

        Raises:
            ValueError: If ``nodal_values`` does not have one row per node.

        Returns:
            Interpolated value at the point.
        """
        values = np.asarray(nodal_values, dtype=np.float64)

        num_values = values.shape[0] if values.ndim > 0 else 0

        if num_values != self._num_nodes:
            raise ValueError(
                f"Expected {self._num_nodes} nodal values, not {num_values}."
            )

        return self.shape_functions_at(point) @ values

    def _get_shape_function(self) -> Element:
        """Returns the assigned element.

        Raises:
            RuntimeError: If no element has been assigned.

        Returns:
            Assigned element.
        """
        if self._shape_function is None:
            raise RuntimeError(f"No shape function assigned to cell {self._cell_id}.")

        return self._shape_function

    def _check_initialised(self) -> None:
        """Checks that the cell is initialised.

        Raises:
            RuntimeError: If the cell is not initialised.
        """
        if not self.is_initialised():
            raise RuntimeError(
                f"Cell {self._cell_id} is not initialised: {len(self._nodes)} of "
                f"{self._num_nodes} nodes added, shape function "
                f"{'not ' if self._shape_function is None else ''}assigned."
            )

    def to_shapely_polygon(self) -> shapely.Polygon:
        """Converts the corner nodes of the cell to a ``shapely`` ``Polygon`` object.

        Raises:
            RuntimeError: If the cell is not initialised, or if its corner polygon is
                degenerate or ordered clockwise.

        Returns:
            Cell as a :class:`shapely.Polygon`.
        """
        coords = self.nodal_coordinates()
        corners = self._get_shape_function().corner_indices()
        polygon = shapely.Polygon(coords[corners])

        if not shapely.is_valid(polygon):
            raise RuntimeError(
                f"Cell {self._cell_id} is degenerate: "
                f"{shapely.is_valid_reason(polygon)}."
            )

        if not polygon.exterior.is_ccw:
            raise RuntimeError(
                f"Cell {self._cell_id} is inverted, its corner nodes are ordered "
                f"clockwise."
            )

        return polygon

