"""Plots of background grid cells and the points located in them."""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np
from matplotlib import collections


if TYPE_CHECKING:
    import matplotlib.axes
    import numpy.typing as npt

    from mpmcell.mesh.cell import Cell


def plot_cells(
    cells: list[Cell],
    points: npt.ArrayLike | None = None,
    ax: matplotlib.axes.Axes | None = None,
    title: str = "Cells",
    node_indexes: bool = False,
    cell_indexes: bool = False,
    sub_triangles: bool = False,
    filename: str = "",
) -> matplotlib.axes.Axes:
    """Plots the outlines of initialised cells and, optionally, a set of points.

    Points that lie in at least one of the cells are drawn in green, points outside
    every cell in grey.

    Args:
        cells: List of cells to plot, each cell must be initialised.
        points: A ``n x 2`` array of physical points, e.g. particle locations.
            Defaults to ``None``.
        ax: Axes object on which to plot. Defaults to ``None``, in which case a new
            figure is created.
        title: Plot title. Defaults to ``"Cells"``.
        node_indexes: If set to ``True``, plots the local index of each node at its
            location. Defaults to ``False``.
        cell_indexes: If set to ``True``, plots the id of each cell at its centroid.
            Defaults to ``False``.
        sub_triangles: If set to ``True``, plots the sub-triangles used to locate
            points in the cells. Defaults to ``False``.
        filename: Pass a non-empty string or path to save the image, the figure is
            closed after saving. Defaults to ``""``.

    Raises:
        RuntimeError: If any of the cells is not initialised, degenerate or
            inverted.

    Returns:
        Matplotlib axes object.
    """
    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.get_figure()

    # cell outlines from the corner nodes
    outlines = [np.array(cell.to_shapely_polygon().exterior.coords) for cell in cells]
    ax.add_collection(
        collections.PolyCollection(
            outlines, edgecolors="k", facecolors="none", linewidth=1.0
        )
    )

    if sub_triangles:
        triangles = []

        for cell in cells:
            coords = cell.nodal_coordinates()
            inhedron = cell.shape_function.inhedron_indices()  # type: ignore
            triangles.extend(coords[tri] for tri in inhedron)

        ax.add_collection(
            collections.PolyCollection(
                triangles,
                edgecolors="0.6",
                facecolors="none",
                linestyles="dashed",
                linewidth=0.5,
            )
        )

    if points is not None:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        inside = [any(cell.is_point_in_cell(pt) for cell in cells) for pt in pts]
        ax.scatter(
            pts[:, 0],
            pts[:, 1],
            c=["g" if flag else "0.5" for flag in inside],
            s=10,
            zorder=3,
        )

    if node_indexes:
        for cell in cells:
            for local_id, node in cell.nodes:
                x, y = node.coordinates()[:2]
                ax.annotate(str(local_id), xy=(x, y), color="r", ha="center")

    if cell_indexes:
        for cell in cells:
            x, y = cell.centroid()[:2]
            ax.annotate(str(cell.cell_id), xy=(x, y), color="b", ha="center")

    ax.autoscale_view()
    ax.set_title(title)
    ax.set_aspect("equal", anchor="C")

    if filename:
        fig.savefig(filename)  # type: ignore
        plt.close(fig)  # type: ignore

    return ax
