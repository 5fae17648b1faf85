"""Tests for collection commands."""

from library_collections.core.write.client import (
    create_collection,
    delete_collection,
    move_collection,
    rename_collection,
    toggle_favorite,
)
from library_collections.models.collection import CollectionTree
from tests.unit.fakes import FakeCollectionStore


def test_move_calls_store(fake_store: FakeCollectionStore, sample_tree: CollectionTree) -> None:
    result = move_collection(
        fake_store, sample_tree, collection_id="papers", new_parent_id="archive"
    )
    assert result["success"] is True
    assert fake_store.calls == [("move_to_parent", ("papers", "archive"))]


def test_move_to_root(fake_store: FakeCollectionStore, sample_tree: CollectionTree) -> None:
    result = move_collection(fake_store, sample_tree, collection_id="scifi", new_parent_id=None)
    assert result["success"] is True
    assert fake_store.calls == [("move_to_parent", ("scifi", None))]


def test_move_into_own_subtree_is_rejected(
    fake_store: FakeCollectionStore, sample_tree: CollectionTree
) -> None:
    result = move_collection(
        fake_store, sample_tree, collection_id="reading", new_parent_id="scifi"
    )
    assert result["success"] is False
    assert "own subcollection" in result["error"]
    assert fake_store.calls == []


def test_move_into_itself_is_rejected(
    fake_store: FakeCollectionStore, sample_tree: CollectionTree
) -> None:
    result = move_collection(
        fake_store, sample_tree, collection_id="fiction", new_parent_id="fiction"
    )
    assert result["success"] is False
    assert fake_store.calls == []


def test_move_to_same_parent_is_unchanged(
    fake_store: FakeCollectionStore, sample_tree: CollectionTree
) -> None:
    result = move_collection(
        fake_store, sample_tree, collection_id="scifi", new_parent_id="fiction"
    )
    assert result == {"success": True, "collection_id": "scifi", "unchanged": True}
    assert fake_store.calls == []


def test_move_unknown_collection(
    fake_store: FakeCollectionStore, sample_tree: CollectionTree
) -> None:
    result = move_collection(fake_store, sample_tree, collection_id="nope", new_parent_id=None)
    assert result["success"] is False
    assert "not found" in result["error"]


def test_create_appends_after_last_sibling(
    fake_store: FakeCollectionStore, sample_tree: CollectionTree
) -> None:
    result = create_collection(fake_store, sample_tree, name="  Poetry ", parent_id="reading")
    assert result == {"success": True, "collection_id": "new1"}
    assert fake_store.calls == [("create_collection", ("Poetry", "reading", 2, None))]


def test_create_first_child_gets_order_zero(
    fake_store: FakeCollectionStore, sample_tree: CollectionTree
) -> None:
    create_collection(fake_store, sample_tree, name="Old", parent_id="archive", color="#fff")
    assert fake_store.calls == [("create_collection", ("Old", "archive", 0, "#fff"))]


def test_create_rejects_blank_name(
    fake_store: FakeCollectionStore, sample_tree: CollectionTree
) -> None:
    result = create_collection(fake_store, sample_tree, name="   ")
    assert result["success"] is False
    assert fake_store.calls == []


def test_rename_strips_and_calls_store(fake_store: FakeCollectionStore) -> None:
    result = rename_collection(fake_store, collection_id="papers", new_name=" Articles ")
    assert result["success"] is True
    assert fake_store.records["papers"].name == "Articles"


def test_rename_rejects_blank_name(fake_store: FakeCollectionStore) -> None:
    result = rename_collection(fake_store, collection_id="papers", new_name="")
    assert result["success"] is False
    assert fake_store.calls == []


def test_delete_refuses_collection_with_subcollections(
    fake_store: FakeCollectionStore, sample_tree: CollectionTree
) -> None:
    result = delete_collection(fake_store, sample_tree, collection_id="fiction")
    assert result["success"] is False
    assert "subcollections" in result["error"]
    assert fake_store.calls == []


def test_delete_leaf(fake_store: FakeCollectionStore, sample_tree: CollectionTree) -> None:
    result = delete_collection(fake_store, sample_tree, collection_id="scifi")
    assert result["success"] is True
    assert "scifi" not in fake_store.records


def test_toggle_favorite(fake_store: FakeCollectionStore) -> None:
    result = toggle_favorite(fake_store, collection_id="archive", is_favorite=True)
    assert result["is_favorite"] is True
    assert fake_store.records["archive"].is_favorite is True


def test_store_failures_are_reported(
    fake_store: FakeCollectionStore, sample_tree: CollectionTree
) -> None:
    fake_store.failing.update({"move_to_parent", "delete_collection", "toggle_favorite"})
    moved = move_collection(fake_store, sample_tree, collection_id="papers", new_parent_id=None)
    deleted = delete_collection(fake_store, sample_tree, collection_id="papers")
    favored = toggle_favorite(fake_store, collection_id="papers", is_favorite=True)
    assert moved["success"] is False
    assert deleted["success"] is False
    assert favored["success"] is False
    assert "failed" in moved["error"]
