"""Expanded/collapsed state of tree nodes, independent of tree shape."""

from collections.abc import Iterable
from dataclasses import dataclass

from library_collections.models.collection import CollectionTree


@dataclass(frozen=True)
class ExpansionState:
    """Set of expanded collection ids.

    Ids of deleted collections may linger; lookups against a rebuilt tree
    simply never ask for them.
    """

    expanded: frozenset[str] = frozenset()

    def is_expanded(self, collection_id: str) -> bool:
        return collection_id in self.expanded

    def toggle(self, collection_id: str) -> "ExpansionState":
        if collection_id in self.expanded:
            return ExpansionState(self.expanded - {collection_id})
        return ExpansionState(self.expanded | {collection_id})

    def expand_path(self, collection_ids: Iterable[str]) -> "ExpansionState":
        """Expand every id given, e.g. the ancestors of a selected node."""
        return ExpansionState(self.expanded | frozenset(collection_ids))

    def relevant_to(self, tree: CollectionTree) -> frozenset[str]:
        """Expanded ids that still exist in the given tree."""
        return frozenset(i for i in self.expanded if i in tree.nodes)
