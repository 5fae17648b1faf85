"""Protocols for the collection record store the tree talks to."""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from library_collections.core.tree.builder import build_tree
from library_collections.models.collection import CollectionRecord


class CollectionStoreError(RuntimeError):
    """A persistence call was rejected or could not be completed."""


@runtime_checkable
class CollectionStoreProtocol(Protocol):
    """Protocol for collection record stores.

    Implementations raise CollectionStoreError on failure.
    """

    def list_collections(self) -> list[CollectionRecord]:
        """Return every collection record."""
        ...

    def reorder_siblings(self, parent_id: str | None, ordered_ids: list[str]) -> None:
        """Persist the order of the children of ``parent_id`` (None = root level)."""
        ...

    def move_to_parent(self, collection_id: str, new_parent_id: str | None) -> None:
        """Move a collection under a new parent, appending it after the last sibling."""
        ...

    def create_collection(
        self,
        name: str,
        *,
        parent_id: str | None = None,
        display_order: int = 0,
        color: str | None = None,
    ) -> str:
        """Create a collection and return its new id."""
        ...

    def rename_collection(self, collection_id: str, new_name: str) -> None:
        """Change a collection's display name."""
        ...

    def delete_collection(self, collection_id: str) -> None:
        """Delete a collection."""
        ...

    def toggle_favorite(self, collection_id: str, is_favorite: bool) -> None:
        """Set a collection's favorite flag."""
        ...


def check_sibling_order(
    records: Iterable[CollectionRecord], parent_id: str | None, ordered_ids: list[str]
) -> None:
    """Raise unless ``ordered_ids`` is exactly the current children of ``parent_id``.

    Children are grouped the way the tree is built, so records whose parent
    no longer exists count as root-level.
    """
    current = build_tree(records).children_of(parent_id)
    if sorted(ordered_ids) != sorted(current):
        msg = f"Reorder under {parent_id!r} does not match its current children"
        raise CollectionStoreError(msg)
