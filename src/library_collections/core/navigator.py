"""Wire the record store, tree, expansion, selection and drag reordering together."""

from typing import Any

from loguru import logger

from library_collections.core.drag.session import DragSessionController
from library_collections.core.reorder.engine import compute_reorder, submit_reorder
from library_collections.core.selection import SelectionState
from library_collections.core.tree.builder import ancestor_ids, build_tree, visible_rows
from library_collections.core.tree.expansion import ExpansionState
from library_collections.core.write import client
from library_collections.models.collection import (
    CollectionTree,
    DropOutcome,
    NoOp,
    TreeNode,
)
from library_collections.protocols import CollectionStoreError, CollectionStoreProtocol


class CollectionNavigator:
    """Collection sidebar state for one library view.

    The tree is always rebuilt from the store; drops and commands never patch
    it locally.
    """

    def __init__(
        self,
        store: CollectionStoreProtocol,
        *,
        expansion: ExpansionState | None = None,
    ) -> None:
        self.store = store
        self.expansion = expansion or ExpansionState()
        self.selection = SelectionState()
        self.drag: DragSessionController[DropOutcome] = DragSessionController(self._drop)
        self.tree = CollectionTree()

    def refresh(self) -> CollectionTree:
        """Rebuild the tree from the store; keeps the previous tree if loading fails."""
        try:
            records = self.store.list_collections()
        except CollectionStoreError:
            logger.exception("Failed to load collections, keeping previous tree")
            return self.tree
        self.tree = build_tree(records)
        return self.tree

    # --- Expansion and selection ---

    def toggle_expanded(self, collection_id: str) -> ExpansionState:
        self.expansion = self.expansion.toggle(collection_id)
        return self.expansion

    def visible_nodes(self) -> list[TreeNode]:
        return list(visible_rows(self.tree, self.expansion))

    def select_node(self, collection_id: str | None, *, reveal: bool = False) -> None:
        """Select a collection (None selects all items), optionally expanding its ancestors."""
        self.selection.select_node(collection_id)
        if reveal and collection_id is not None:
            self.expansion = self.expansion.expand_path(ancestor_ids(self.tree, collection_id))

    def select_all(self) -> None:
        self.selection.select_all()

    # --- Drag reordering ---

    def _drop(self, active_id: str, over_id: str | None) -> DropOutcome:
        result = compute_reorder(active_id, over_id, self.tree.parent_of, self.tree.siblings_of)
        if isinstance(result, NoOp):
            logger.debug("Drop of {} on {} ignored: {}", active_id, over_id, result.reason.value)
            return DropOutcome(result=result, success=True)

        submitted = submit_reorder(self.store, result)
        self.refresh()
        return DropOutcome(result=result, success=submitted["success"], error=submitted.get("error"))

    # --- Commands ---

    def _after_write(self, result: dict[str, Any]) -> dict[str, Any]:
        if result["success"]:
            self.refresh()
        return result

    def move_collection(self, collection_id: str, new_parent_id: str | None) -> dict[str, Any]:
        return self._after_write(
            client.move_collection(
                self.store, self.tree, collection_id=collection_id, new_parent_id=new_parent_id
            )
        )

    def create_collection(
        self, name: str, *, parent_id: str | None = None, color: str | None = None
    ) -> dict[str, Any]:
        result = self._after_write(
            client.create_collection(
                self.store, self.tree, name=name, parent_id=parent_id, color=color
            )
        )
        if result["success"] and parent_id is not None:
            self.expansion = self.expansion.expand_path([parent_id])
        return result

    def rename_collection(self, collection_id: str, new_name: str) -> dict[str, Any]:
        return self._after_write(
            client.rename_collection(self.store, collection_id=collection_id, new_name=new_name)
        )

    def delete_collection(self, collection_id: str) -> dict[str, Any]:
        result = self._after_write(
            client.delete_collection(self.store, self.tree, collection_id=collection_id)
        )
        if result["success"] and self.selection.is_selected(collection_id):
            self.selection.select_all()
        return result

    def toggle_favorite(self, collection_id: str, is_favorite: bool) -> dict[str, Any]:
        return self._after_write(
            client.toggle_favorite(self.store, collection_id=collection_id, is_favorite=is_favorite)
        )
