"""mpmcell background grid entities."""

from mpmcell.mesh.cell import MAX_INDEX, Cell
from mpmcell.mesh.handler import Handler
from mpmcell.mesh.node import Node
