"""Which collection is selected; None means the synthetic "all items" root."""

from dataclasses import dataclass


@dataclass
class SelectionState:
    selected_id: str | None = None

    def select_node(self, collection_id: str | None) -> None:
        self.selected_id = collection_id

    def select_all(self) -> None:
        self.selected_id = None

    def is_selected(self, collection_id: str | None) -> bool:
        return self.selected_id == collection_id
