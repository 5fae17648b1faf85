"""Compute new sibling orders from a finished drag and submit them."""

from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger

from library_collections.models.collection import NoOp, NoOpReason, ReorderRequest
from library_collections.protocols import CollectionStoreError, CollectionStoreProtocol


def compute_reorder(
    active_id: str,
    over_id: str | None,
    parent_of: Mapping[str, str | None],
    siblings_of: Mapping[str | None, Sequence[str]],
) -> ReorderRequest | NoOp:
    """Work out the sibling order after dropping ``active_id`` onto ``over_id``.

    The moved collection takes the target's slot and everything in between
    shifts by one. Drops onto a collection under a different parent are
    rejected; reparenting goes through the explicit move command.

    Args:
        active_id: The collection being dragged.
        over_id: The collection it was dropped on, or None.
        parent_of: Collection id to parent id (None for root-level).
        siblings_of: Parent id to ordered child ids.

    Returns:
        ReorderRequest with the full new order, or NoOp with the reason.
    """
    if over_id is None:
        return NoOp(NoOpReason.NO_TARGET)
    if over_id == active_id:
        return NoOp(NoOpReason.SAME_NODE)
    if active_id not in parent_of or over_id not in parent_of:
        return NoOp(NoOpReason.UNKNOWN_NODE)

    parent_id = parent_of[active_id]
    if parent_of[over_id] != parent_id:
        return NoOp(NoOpReason.CROSS_PARENT)

    order = list(siblings_of.get(parent_id, ()))
    old_index = order.index(active_id)
    new_index = order.index(over_id)
    order.insert(new_index, order.pop(old_index))

    return ReorderRequest(parent_id=parent_id, ordered_sibling_ids=tuple(order))


def submit_reorder(store: CollectionStoreProtocol, request: ReorderRequest) -> dict[str, Any]:
    """Persist a reorder request through the record store.

    Local state is left alone; the caller rebuilds from the store afterwards
    whether or not this succeeded.
    """
    try:
        store.reorder_siblings(request.parent_id, list(request.ordered_sibling_ids))
    except CollectionStoreError as e:
        logger.warning("Reorder under {} failed: {}", request.parent_id or "root", e)
        return {"success": False, "error": str(e)}

    logger.info(
        "Reordered {} collections under {}",
        len(request.ordered_sibling_ids),
        request.parent_id or "root",
    )
    return {"success": True, "parent_id": request.parent_id}
