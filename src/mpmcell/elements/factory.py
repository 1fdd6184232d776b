"""Named element registry returning shared element instances."""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING

from mpmcell.elements.quadrilateral import Quad4Element, Quad8Element, Quad9Element


if TYPE_CHECKING:
    from mpmcell.elements.element import Element


ELEMENTS: dict[str, type[Element]] = {
    "ED2Q4": Quad4Element,
    "ED2Q8": Quad8Element,
    "ED2Q9": Quad9Element,
}

QUADRILATERAL_ELEMENTS: dict[int, str] = {
    4: "ED2Q4",
    8: "ED2Q8",
    9: "ED2Q9",
}


def get_element(name: str) -> Element:
    """Returns the shared element instance registered under ``name``.

    Repeated calls with the same name return the same object, so that every cell
    of a given type references one element.

    Args:
        name: Element name, ``"ED2Q4"``, ``"ED2Q8"`` or ``"ED2Q9"``.

    Raises:
        ValueError: If ``name`` is not a registered element.

    Returns:
        Element instance.
    """
    if not isinstance(name, str) or name not in ELEMENTS:
        raise ValueError(
            f"{name!r} is not a valid element, must be one of {list(ELEMENTS)}."
        )

    return _create_element(name)


@cache
def _create_element(name: str) -> Element:
    """Creates the element registered under ``name`` once.

    Args:
        name: Registered element name.

    Returns:
        Element instance.
    """
    return ELEMENTS[name]()


def quadrilateral_element(dim: int, num_functions: int) -> Element:
    """Returns the shared quadrilateral element for a dimension and arity.

    Args:
        dim: Spatial dimension, must be ``2``.
        num_functions: Number of shape functions, ``4``, ``8`` or ``9``.

    Raises:
        ValueError: If there is no quadrilateral element with this dimension and
            number of shape functions.

    Returns:
        Element instance.
    """
    if dim != 2:
        raise ValueError(
            f"Invalid dimension for a quadrilateral element: {dim}, must be 2."
        )

    try:
        name = QUADRILATERAL_ELEMENTS[num_functions]
    except KeyError as exc:
        raise ValueError(
            f"Number of shape functions {num_functions} is not defined for a "
            f"quadrilateral element, must be one of {list(QUADRILATERAL_ELEMENTS)}."
        ) from exc

    return get_element(name)
