"""MCP server exposing the collection tree and its reorder/move commands."""

import asyncio
import os
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from library_collections.config import API_URL_ENV, resolve_db_path
from library_collections.core.database.schema import migrate_schema
from library_collections.core.database.store import SqliteCollectionStore
from library_collections.core.navigator import CollectionNavigator
from library_collections.core.tree.builder import ancestor_ids, total_book_count
from library_collections.models.collection import NoOp, NoOpReason, TreeNode


def _node_entry(
    node: TreeNode, navigator: CollectionNavigator, expanded: frozenset[str]
) -> dict[str, Any]:
    record = node.record
    return {
        "id": record.id,
        "name": record.name,
        "book_count": record.book_count,
        "color": record.color,
        "is_favorite": record.is_favorite,
        "depth": node.depth,
        "child_count": len(node.children),
        "expanded": record.id in expanded,
        "selected": navigator.selection.is_selected(record.id),
    }


# --- Core functions (testable without MCP context) ---


def collections_list_tree(
    navigator: CollectionNavigator,
    *,
    expand_all: bool = False,
) -> dict[str, Any]:
    """List collections as a nested tree.

    Args:
        expand_all: Include children of collapsed collections too.
    """
    def _build(nodes: tuple[TreeNode, ...]) -> list[dict[str, Any]]:
        entries = []
        for node in nodes:
            entry = _node_entry(node, navigator, expanded)
            if node.children and (expand_all or node.id in expanded):
                entry["children"] = _build(node.children)
            entries.append(entry)
        return entries

    tree = navigator.tree
    # Ids of deleted collections may linger in the expansion state.
    expanded = navigator.expansion.relevant_to(tree)
    return {
        "all_items": {
            "book_count": total_book_count(tree),
            "selected": navigator.selection.is_selected(None),
        },
        "collections": _build(tree.roots),
        "expanded": sorted(expanded),
        "count": len(tree.nodes),
    }


def collections_visible_rows(navigator: CollectionNavigator) -> dict[str, Any]:
    """List collections in display order as flat rows, honoring expansion."""
    expanded = navigator.expansion.relevant_to(navigator.tree)
    rows = [_node_entry(node, navigator, expanded) for node in navigator.visible_nodes()]
    return {"rows": rows, "count": len(rows)}


def collections_toggle_expanded(
    navigator: CollectionNavigator, *, collection_id: str
) -> dict[str, Any]:
    """Expand or collapse a collection."""
    if collection_id not in navigator.tree.nodes:
        return {"error": f"Collection '{collection_id}' not found."}
    state = navigator.toggle_expanded(collection_id)
    return {"collection_id": collection_id, "expanded": state.is_expanded(collection_id)}


def collections_select(
    navigator: CollectionNavigator, *, collection_id: str | None = None
) -> dict[str, Any]:
    """Select a collection, or all items when collection_id is None."""
    if collection_id is not None and collection_id not in navigator.tree.nodes:
        return {"error": f"Collection '{collection_id}' not found."}
    navigator.select_node(collection_id, reveal=True)
    breadcrumbs = (
        [navigator.tree.nodes[a].record.name for a in ancestor_ids(navigator.tree, collection_id)]
        if collection_id is not None
        else []
    )
    return {"selected": collection_id, "breadcrumbs": " > ".join(breadcrumbs)}


def collections_reorder(
    navigator: CollectionNavigator,
    *,
    active_id: str,
    over_id: str | None,
) -> dict[str, Any]:
    """Drop ``active_id`` onto ``over_id`` as a completed drag gesture.

    Only reorders within the same parent; use collections_move to reparent.
    """
    navigator.drag.on_drag_start(active_id)
    navigator.drag.on_drag_over(over_id)
    outcome = navigator.drag.on_drag_end()
    if outcome is None:
        return {"success": False, "error": "No drag session was active."}

    if isinstance(outcome.result, NoOp):
        output: dict[str, Any] = {
            "success": True,
            "changed": False,
            "reason": outcome.result.reason.value,
        }
        if outcome.result.reason is NoOpReason.CROSS_PARENT:
            output["hint"] = "Collections have different parents; use collections_move instead."
        return output

    output = {
        "success": outcome.success,
        "changed": outcome.changed,
        "parent_id": outcome.result.parent_id,
        "order": list(navigator.tree.children_of(outcome.result.parent_id)),
    }
    if outcome.error:
        output["error"] = outcome.error
    return output


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    navigator: CollectionNavigator
    conn: sqlite3.Connection | None = None
    write_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def _open_navigator() -> tuple[CollectionNavigator, sqlite3.Connection | None]:
    if os.environ.get(API_URL_ENV):
        from library_collections.api import CollectionApi

        return CollectionNavigator(CollectionApi()), None

    db_path = resolve_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    migrate_schema(conn)
    return CollectionNavigator(SqliteCollectionStore(conn)), conn


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open the collection store on startup, close on shutdown."""
    navigator, conn = _open_navigator()
    try:
        tree = navigator.refresh()
        logger.info("Loaded {} collections", len(tree.nodes))
        yield ServerContext(navigator=navigator, conn=conn)
    finally:
        if conn is not None:
            conn.close()


mcp_server = FastMCP(
    "library-collections",
    instructions="""\
Collections are folders in a reading library, nested via parent collections.

- collections_list_tree_tool shows the hierarchy; expand_all=true shows everything.
- collections_reorder_tool reorders siblings: the dragged collection takes the
  slot of the one it is dropped on. It never changes parents.
- collections_move_tool changes a collection's parent.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def collections_list_tree_tool(ctx: Context, expand_all: bool = False) -> dict[str, Any]:
    """List collections as a nested tree.

    Args:
        expand_all: Include children of collapsed collections too.
    """
    return collections_list_tree(_ctx(ctx).navigator, expand_all=expand_all)


@mcp_server.tool()
async def collections_visible_rows_tool(ctx: Context) -> dict[str, Any]:
    """List collections as flat rows in display order, honoring expansion."""
    return collections_visible_rows(_ctx(ctx).navigator)


@mcp_server.tool()
async def collections_toggle_expanded_tool(ctx: Context, collection_id: str) -> dict[str, Any]:
    """Expand or collapse a collection."""
    return collections_toggle_expanded(_ctx(ctx).navigator, collection_id=collection_id)


@mcp_server.tool()
async def collections_select_tool(
    ctx: Context, collection_id: str | None = None
) -> dict[str, Any]:
    """Select a collection, or all items when collection_id is omitted."""
    return collections_select(_ctx(ctx).navigator, collection_id=collection_id)


@mcp_server.tool()
async def collections_reorder_tool(
    ctx: Context, active_id: str, over_id: str | None = None
) -> dict[str, Any]:
    """Move a collection into the slot of a sibling.

    Args:
        active_id: Collection being moved.
        over_id: Sibling whose slot it takes.
    """
    server = _ctx(ctx)
    async with server.write_lock:
        return collections_reorder(server.navigator, active_id=active_id, over_id=over_id)


@mcp_server.tool()
async def collections_move_tool(
    ctx: Context, collection_id: str, new_parent_id: str | None = None
) -> dict[str, Any]:
    """Move a collection under another parent (omit new_parent_id for root level)."""
    server = _ctx(ctx)
    async with server.write_lock:
        return server.navigator.move_collection(collection_id, new_parent_id)


@mcp_server.tool()
async def collections_create_tool(
    ctx: Context, name: str, parent_id: str | None = None, color: str | None = None
) -> dict[str, Any]:
    """Create a collection at the end of its parent's children."""
    server = _ctx(ctx)
    async with server.write_lock:
        return server.navigator.create_collection(name, parent_id=parent_id, color=color)


@mcp_server.tool()
async def collections_rename_tool(ctx: Context, collection_id: str, name: str) -> dict[str, Any]:
    """Rename a collection."""
    server = _ctx(ctx)
    async with server.write_lock:
        return server.navigator.rename_collection(collection_id, name)


@mcp_server.tool()
async def collections_delete_tool(ctx: Context, collection_id: str) -> dict[str, Any]:
    """Delete a collection without subcollections."""
    server = _ctx(ctx)
    async with server.write_lock:
        return server.navigator.delete_collection(collection_id)


@mcp_server.tool()
async def collections_toggle_favorite_tool(
    ctx: Context, collection_id: str, is_favorite: bool
) -> dict[str, Any]:
    """Mark or unmark a collection as favorite."""
    server = _ctx(ctx)
    async with server.write_lock:
        return server.navigator.toggle_favorite(collection_id, is_favorite)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from library_collections.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
