"""Collection commands: validated against the current tree, then sent to the store."""

from typing import Any

from loguru import logger

from library_collections.core.tree.builder import descendant_ids
from library_collections.models.collection import CollectionTree
from library_collections.protocols import CollectionStoreError, CollectionStoreProtocol


def move_collection(
    store: CollectionStoreProtocol,
    tree: CollectionTree,
    *,
    collection_id: str,
    new_parent_id: str | None,
) -> dict[str, Any]:
    """Move a collection under a new parent (None = root level).

    Args:
        store: Collection record store.
        tree: Current tree, used to reject moves into the collection's own subtree.
        collection_id: ID of the collection to move.
        new_parent_id: ID of the new parent, or None for root level.
    """
    if collection_id not in tree:
        return {"success": False, "error": f"Collection '{collection_id}' not found."}
    if new_parent_id is not None:
        if new_parent_id not in tree:
            return {"success": False, "error": f"Collection '{new_parent_id}' not found."}
        if new_parent_id == collection_id or new_parent_id in descendant_ids(tree, collection_id):
            return {"success": False, "error": "Cannot move collection into its own subcollection."}

    if tree.parent_of[collection_id] == new_parent_id:
        return {"success": True, "collection_id": collection_id, "unchanged": True}

    try:
        store.move_to_parent(collection_id, new_parent_id)
    except CollectionStoreError as e:
        logger.warning("Moving collection {} failed: {}", collection_id, e)
        return {"success": False, "error": str(e)}

    logger.info("Moved collection {} under {}", collection_id, new_parent_id or "root")
    return {"success": True, "collection_id": collection_id}


def create_collection(
    store: CollectionStoreProtocol,
    tree: CollectionTree,
    *,
    name: str,
    parent_id: str | None = None,
    color: str | None = None,
) -> dict[str, Any]:
    """Create a collection after the last existing sibling.

    Args:
        store: Collection record store.
        tree: Current tree, used to pick the next display order.
        name: Display name for the new collection.
        parent_id: Parent collection ID, or None for root level.
        color: Optional display color.
    """
    name = name.strip()
    if not name:
        return {"success": False, "error": "Collection name cannot be empty."}
    if parent_id is not None and parent_id not in tree:
        return {"success": False, "error": f"Collection '{parent_id}' not found."}

    orders = [
        tree.nodes[s].record.display_order for s in tree.children_of(parent_id) if s in tree.nodes
    ]
    display_order = max(orders) + 1 if orders else 0

    try:
        new_id = store.create_collection(
            name, parent_id=parent_id, display_order=display_order, color=color
        )
    except CollectionStoreError as e:
        logger.warning("Creating collection {!r} failed: {}", name, e)
        return {"success": False, "error": str(e)}

    logger.info("Created collection {} ({!r})", new_id, name)
    return {"success": True, "collection_id": new_id}


def rename_collection(
    store: CollectionStoreProtocol,
    *,
    collection_id: str,
    new_name: str,
) -> dict[str, Any]:
    """Rename a collection."""
    new_name = new_name.strip()
    if not new_name:
        return {"success": False, "error": "Collection name cannot be empty."}

    try:
        store.rename_collection(collection_id, new_name)
    except CollectionStoreError as e:
        logger.warning("Renaming collection {} failed: {}", collection_id, e)
        return {"success": False, "error": str(e)}

    return {"success": True, "collection_id": collection_id}


def delete_collection(
    store: CollectionStoreProtocol,
    tree: CollectionTree,
    *,
    collection_id: str,
) -> dict[str, Any]:
    """Delete a collection that has no subcollections."""
    if tree.children_of(collection_id):
        return {
            "success": False,
            "error": "Cannot delete collection with subcollections. "
            "Please move or delete subcollections first.",
        }

    try:
        store.delete_collection(collection_id)
    except CollectionStoreError as e:
        logger.warning("Deleting collection {} failed: {}", collection_id, e)
        return {"success": False, "error": str(e)}

    logger.info("Deleted collection {}", collection_id)
    return {"success": True, "collection_id": collection_id}


def toggle_favorite(
    store: CollectionStoreProtocol,
    *,
    collection_id: str,
    is_favorite: bool,
) -> dict[str, Any]:
    try:
        store.toggle_favorite(collection_id, is_favorite)
    except CollectionStoreError as e:
        logger.warning("Updating favorite on {} failed: {}", collection_id, e)
        return {"success": False, "error": str(e)}

    return {"success": True, "collection_id": collection_id, "is_favorite": is_favorite}
