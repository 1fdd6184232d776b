"""mpmcell - element shape functions and cells of a material point method grid."""

from mpmcell.elements import (
    Element,
    ElementDegree,
    Quad4Element,
    Quad8Element,
    Quad9Element,
    QuadrilateralElement,
    ShapefnType,
    get_element,
    quadrilateral_element,
)
from mpmcell.io import PARTICLE_DTYPE, ParticleRecord
from mpmcell.mesh import MAX_INDEX, Cell, Handler, Node
