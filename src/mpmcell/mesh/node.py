"""Class describing a background grid node."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt


@dataclass(eq=False)
class Node:
    """Class describing a grid node.

    Cells only query the physical coordinates of a node, any object with a
    ``coordinates()`` method may be used in its place.

    Args:
        node_id: Node index.
        coords: Physical coordinates of the node.
    """

    node_id: int
    coords: npt.NDArray[np.float64] = field(repr=False)

    def __post_init__(self) -> None:
        """Post init method to store the coordinates as a float array."""
        self.coords = np.asarray(self.coords, dtype=np.float64).ravel()

    def coordinates(self) -> npt.NDArray[np.float64]:
        """Returns the physical coordinates of the node.

        Returns:
            Coordinates of the node.
        """
        return self.coords

