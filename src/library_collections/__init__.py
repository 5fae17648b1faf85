"""Collection tree with drag-and-drop reordering for a reading library."""

from library_collections.api import CollectionApi
from library_collections.core.database.store import SqliteCollectionStore
from library_collections.core.navigator import CollectionNavigator
from library_collections.core.reorder.engine import compute_reorder
from library_collections.core.tree.builder import build_tree
from library_collections.models.collection import CollectionRecord, CollectionTree
from library_collections.protocols import CollectionStoreError, CollectionStoreProtocol

__all__ = [
    "CollectionApi",
    "CollectionNavigator",
    "CollectionRecord",
    "CollectionStoreError",
    "CollectionStoreProtocol",
    "CollectionTree",
    "SqliteCollectionStore",
    "build_tree",
    "compute_reorder",
]
