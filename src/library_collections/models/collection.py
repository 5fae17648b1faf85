"""Domain models for the collection tree."""

from dataclasses import dataclass, field
from enum import Enum

# Parent key for root-level collections in parent_of / siblings_of.
ROOT = None


@dataclass(frozen=True)
class CollectionRecord:
    """A single collection row as supplied by the record store."""

    id: str
    name: str
    parent_id: str | None = None
    display_order: int = 0
    book_count: int = 0
    color: str = "#3b82f6"
    is_favorite: bool = False
    description: str = ""
    icon: str = "folder"


@dataclass(frozen=True)
class TreeNode:
    """A collection with its ordered children."""

    record: CollectionRecord
    children: tuple["TreeNode", ...] = ()
    depth: int = 0
    path: tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.record.id


@dataclass(frozen=True)
class CollectionTree:
    """The forest plus its sibling index, rebuilt wholesale on every change."""

    roots: tuple[TreeNode, ...] = ()
    nodes: dict[str, TreeNode] = field(default_factory=dict)
    parent_of: dict[str, str | None] = field(default_factory=dict)
    siblings_of: dict[str | None, tuple[str, ...]] = field(default_factory=dict)

    def __contains__(self, collection_id: object) -> bool:
        return collection_id in self.parent_of

    def children_of(self, parent_id: str | None) -> tuple[str, ...]:
        return self.siblings_of.get(parent_id, ())


@dataclass(frozen=True)
class DragSession:
    """An in-progress reorder gesture."""

    active_id: str
    over_id: str | None = None


@dataclass(frozen=True)
class ReorderRequest:
    """New sibling order to be persisted for one parent."""

    parent_id: str | None
    ordered_sibling_ids: tuple[str, ...]


class NoOpReason(Enum):
    NO_TARGET = "no_target"
    SAME_NODE = "same_node"
    UNKNOWN_NODE = "unknown_node"
    CROSS_PARENT = "cross_parent"


@dataclass(frozen=True)
class NoOp:
    """A drop that leaves the order unchanged."""

    reason: NoOpReason


@dataclass(frozen=True)
class DropOutcome:
    """What happened when a drag session was dropped."""

    result: ReorderRequest | NoOp
    success: bool
    error: str | None = None

    @property
    def changed(self) -> bool:
        return self.success and isinstance(self.result, ReorderRequest)
