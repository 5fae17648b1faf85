"""Build the collection forest and sibling index from flat records."""

from collections.abc import Iterable, Iterator

from loguru import logger

from library_collections.core.tree.expansion import ExpansionState
from library_collections.models.collection import ROOT, CollectionRecord, CollectionTree, TreeNode


def _dedupe(records: Iterable[CollectionRecord]) -> dict[str, CollectionRecord]:
    by_id: dict[str, CollectionRecord] = {}
    for record in records:
        if record.id in by_id:
            logger.debug("Duplicate collection id {}, keeping the later record", record.id)
        by_id[record.id] = record
    return by_id


def build_tree(records: Iterable[CollectionRecord]) -> CollectionTree:
    """Convert a flat list of collection records into a forest.

    Siblings are ordered by ``(display_order, id)`` so the result does not
    depend on input order. Records whose parent is not in the input are
    treated as root-level. Duplicate ids resolve to the last record seen.

    Args:
        records: Collection records, in any order.

    Returns:
        CollectionTree with roots, node lookup, parent map and sibling map.
    """
    by_id = _dedupe(records)

    effective_parent: dict[str, str | None] = {}
    for record in by_id.values():
        parent = record.parent_id
        if parent is not None and parent not in by_id:
            logger.debug("Collection {} references missing parent {}", record.id, parent)
            parent = ROOT
        effective_parent[record.id] = parent

    ordered = sorted(
        by_id.values(),
        key=lambda r: (
            effective_parent[r.id] is not None,
            effective_parent[r.id] or "",
            r.display_order,
            r.id,
        ),
    )

    parent_of: dict[str, str | None] = {}
    siblings: dict[str | None, list[str]] = {}
    for record in ordered:
        parent = effective_parent[record.id]
        parent_of[record.id] = parent
        siblings.setdefault(parent, []).append(record.id)

    siblings_of = {parent: tuple(ids) for parent, ids in siblings.items()}

    nodes: dict[str, TreeNode] = {}

    def freeze(collection_id: str, depth: int, path: tuple[str, ...]) -> TreeNode:
        own_path = (*path, collection_id)
        children = tuple(
            freeze(child_id, depth + 1, own_path) for child_id in siblings_of.get(collection_id, ())
        )
        node = TreeNode(record=by_id[collection_id], children=children, depth=depth, path=own_path)
        nodes[collection_id] = node
        return node

    roots = tuple(freeze(root_id, 0, ()) for root_id in siblings_of.get(ROOT, ()))

    if len(nodes) != len(by_id):
        unreachable = sorted(set(by_id) - set(nodes))
        logger.warning("Collections on a parent cycle are not reachable: {}", unreachable)

    return CollectionTree(roots=roots, nodes=nodes, parent_of=parent_of, siblings_of=siblings_of)


def descendant_ids(tree: CollectionTree, collection_id: str) -> set[str]:
    """Return ids of every collection below the given one."""
    found: set[str] = set()
    todo = list(tree.children_of(collection_id))
    while todo:
        current = todo.pop()
        if current in found:
            continue
        found.add(current)
        todo.extend(tree.children_of(current))
    return found


def ancestor_ids(tree: CollectionTree, collection_id: str) -> tuple[str, ...]:
    """Return ancestor ids from the root down to the immediate parent."""
    chain: list[str] = []
    seen = {collection_id}
    parent = tree.parent_of.get(collection_id)
    while parent is not None and parent not in seen:
        chain.append(parent)
        seen.add(parent)
        parent = tree.parent_of.get(parent)
    return tuple(reversed(chain))


def visible_rows(tree: CollectionTree, expansion: ExpansionState) -> Iterator[TreeNode]:
    """Yield nodes in display order, descending only into expanded nodes."""
    stack = list(reversed(tree.roots))
    while stack:
        node = stack.pop()
        yield node
        if node.children and expansion.is_expanded(node.id):
            stack.extend(reversed(node.children))


def total_book_count(tree: CollectionTree) -> int:
    """Sum of book counts across all collections, for the "all items" entry."""
    return sum(node.record.book_count or 0 for node in tree.nodes.values())
