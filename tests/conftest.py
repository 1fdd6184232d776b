"""pytest configurations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pytest

from mpmcell.elements.factory import get_element
from mpmcell.mesh.cell import Cell
from mpmcell.mesh.node import Node

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture
def rectangle_cell() -> Callable:
    """Creates an initialised cell covering the rectangle ``[0, 2] x [0, 1]``.

    Returns:
        Generator function, returning a ``Cell`` object.
    """

    def _generate(
        element_name: str,
        cell_id: int = 0,
        offset: tuple[float, float] = (0.0, 0.0),
    ) -> Cell:
        """Generates the rectangular cell.

        Args:
            element_name: Element name, can be ``"ED2Q4"``, ``"ED2Q8"`` or
                ``"ED2Q9"``.
            cell_id: Cell id. Defaults to ``0``.
            offset: Translation of the rectangle. Defaults to ``(0.0, 0.0)``.

        Returns:
            Cell object.
        """
        element = get_element(element_name)
        cell = Cell(
            cell_id=cell_id,
            num_nodes=element.num_functions(),
            shape_function=element,
        )

        # affine map of the unit cell onto the rectangle
        unit = element.unit_cell_coordinates()
        coords = np.column_stack([1.0 + unit[:, 0], 0.5 + 0.5 * unit[:, 1]])
        coords += np.array(offset)

        for idx, xy in enumerate(coords):
            assert cell.add_node(idx, Node(node_id=100 * cell_id + idx, coords=xy))

        return cell

    return _generate
