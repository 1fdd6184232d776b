"""mpmcell element shape functions."""

from mpmcell.elements.element import Element, ElementDegree, ShapefnType
from mpmcell.elements.factory import get_element, quadrilateral_element
from mpmcell.elements.quadrilateral import (
    Quad4Element,
    Quad8Element,
    Quad9Element,
    QuadrilateralElement,
)
