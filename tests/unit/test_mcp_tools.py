"""Tests for MCP tool core functions."""

from library_collections.core.navigator import CollectionNavigator
from library_collections.mcp.server import (
    collections_list_tree,
    collections_reorder,
    collections_select,
    collections_toggle_expanded,
    collections_visible_rows,
)


def test_list_tree_collapsed_shows_roots_only(navigator: CollectionNavigator) -> None:
    result = collections_list_tree(navigator)
    assert result["count"] == 6
    assert result["all_items"] == {"book_count": 15, "selected": True}
    assert [c["id"] for c in result["collections"]] == ["reading", "archive"]
    reading = result["collections"][0]
    assert reading["child_count"] == 2
    assert "children" not in reading


def test_list_tree_expand_all_nests_children(navigator: CollectionNavigator) -> None:
    result = collections_list_tree(navigator, expand_all=True)
    reading = result["collections"][0]
    fiction = reading["children"][0]
    assert fiction["id"] == "fiction"
    assert [c["id"] for c in fiction["children"]] == ["scifi", "fantasy"]
    assert fiction["children"][0]["depth"] == 2


def test_toggle_expanded_and_visible_rows(navigator: CollectionNavigator) -> None:
    result = collections_toggle_expanded(navigator, collection_id="reading")
    assert result == {"collection_id": "reading", "expanded": True}
    rows = collections_visible_rows(navigator)
    assert [r["id"] for r in rows["rows"]] == ["reading", "fiction", "papers", "archive"]


def test_toggle_unknown_collection(navigator: CollectionNavigator) -> None:
    assert "error" in collections_toggle_expanded(navigator, collection_id="nope")


def test_select_returns_breadcrumbs(navigator: CollectionNavigator) -> None:
    result = collections_select(navigator, collection_id="scifi")
    assert result == {"selected": "scifi", "breadcrumbs": "Reading > Fiction"}
    assert collections_select(navigator)["selected"] is None


def test_reorder_same_parent(navigator: CollectionNavigator) -> None:
    result = collections_reorder(navigator, active_id="papers", over_id="fiction")
    assert result["success"] is True
    assert result["changed"] is True
    assert result["parent_id"] == "reading"
    assert result["order"] == ["papers", "fiction"]


def test_reorder_cross_parent_returns_hint(navigator: CollectionNavigator) -> None:
    result = collections_reorder(navigator, active_id="scifi", over_id="archive")
    assert result["changed"] is False
    assert result["reason"] == "cross_parent"
    assert "collections_move" in result["hint"]


def test_reorder_onto_self_is_noop(navigator: CollectionNavigator) -> None:
    result = collections_reorder(navigator, active_id="papers", over_id="papers")
    assert result == {"success": True, "changed": False, "reason": "same_node"}


def test_expanded_ids_of_deleted_collections_are_dropped(navigator: CollectionNavigator) -> None:
    navigator.toggle_expanded("reading")
    navigator.toggle_expanded("archive")
    assert navigator.delete_collection("archive")["success"] is True

    result = collections_list_tree(navigator)
    assert result["expanded"] == ["reading"]
    assert navigator.expansion.is_expanded("archive")
    rows = collections_visible_rows(navigator)
    assert [r["id"] for r in rows["rows"] if r["expanded"]] == ["reading"]
