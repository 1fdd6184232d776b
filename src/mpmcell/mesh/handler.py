"""Container mapping local indexes to shared entity references."""

from __future__ import annotations

from collections.abc import Iterator
from numbers import Integral
from typing import Generic, TypeVar


T = TypeVar("T")


def is_local_index(local_id: object) -> bool:
    """Checks whether ``local_id`` is a valid local index.

    Args:
        local_id: Candidate local index.

    Returns:
        ``True`` if ``local_id`` is a non-negative integer (booleans excluded).
    """
    if isinstance(local_id, bool) or not isinstance(local_id, Integral):
        return False

    return local_id >= 0


class Handler(Generic[T]):
    """Add-only mapping of local index to an entity reference.

    Entities (nodes, neighbouring cells) are owned elsewhere, the handler only keeps
    references. A local index may be occupied once and there is no removal.
    Iteration yields ``(local_id, entity)`` pairs in ascending local index order.
    """

    def __init__(self) -> None:
        """Inits the Handler class."""
        self._items: dict[int, T] = {}

    def __repr__(self) -> str:
        """Override __repr__ method.

        Returns:
            String representation of the object.
        """
        return f"{self.__class__.__name__} - size: {len(self._items)}"

    def insert(self, local_id: int, item: T) -> bool:
        """Inserts an entity reference at a local index.

        Args:
            local_id: Local index, a non-negative integer.
            item: Entity to reference.

        Returns:
            ``True`` if the entity was inserted, ``False`` if ``local_id`` is invalid
            or already occupied.
        """
        if not is_local_index(local_id) or local_id in self._items:
            return False

        self._items[int(local_id)] = item

        return True

    def size(self) -> int:
        """Returns the number of occupied local indexes.

        Returns:
            Number of entities.
        """
        return len(self._items)

    def __len__(self) -> int:
        """Returns the number of occupied local indexes.

        Returns:
            Number of entities.
        """
        return len(self._items)

    def __contains__(self, local_id: object) -> bool:
        """Checks whether a local index is occupied.

        Args:
            local_id: Local index.

        Returns:
            ``True`` if occupied.
        """
        return local_id in self._items

    def __getitem__(self, local_id: int) -> T:
        """Returns the entity at a local index.

        Args:
            local_id: Local index.

        Raises:
            KeyError: If ``local_id`` is not occupied.

        Returns:
            Entity at ``local_id``.
        """
        return self._items[local_id]

    def __iter__(self) -> Iterator[tuple[int, T]]:
        """Iterates over ``(local_id, entity)`` pairs in ascending index order.

        Returns:
            Iterator of pairs.
        """
        return iter(self.items())

    def items(self) -> list[tuple[int, T]]:
        """Returns the ``(local_id, entity)`` pairs in ascending index order.

        Returns:
            List of pairs.
        """
        return sorted(self._items.items(), key=lambda pair: pair[0])

    def values(self) -> list[T]:
        """Returns the entities in ascending index order.

        Returns:
            List of entities.
        """
        return [item for _, item in self.items()]
