"""Hosted collection store over a PostgREST endpoint."""

import os
from typing import Any

import requests
from loguru import logger

from library_collections.config import (
    API_TABLE,
    API_TIMEOUT_SECONDS,
    API_TOKEN_FILES,
    API_URL_ENV,
)
from library_collections.models.collection import CollectionRecord
from library_collections.protocols import CollectionStoreError, check_sibling_order

_SELECT = "id,name,parent_id,display_order,book_count,color,is_favorite,description,icon"


def _parent_filter(parent_id: str | None) -> str:
    return "is.null" if parent_id is None else f"eq.{parent_id}"


def _to_record(row: dict[str, Any]) -> CollectionRecord:
    return CollectionRecord(
        id=str(row["id"]),
        name=row.get("name", ""),
        parent_id=row.get("parent_id"),
        display_order=row.get("display_order") or 0,
        book_count=row.get("book_count") or 0,
        color=row.get("color") or "#3b82f6",
        is_favorite=bool(row.get("is_favorite")),
        description=row.get("description") or "",
        icon=row.get("icon") or "folder",
    )


class CollectionApi:
    """Collection store backed by the hosted ``user_collections`` table."""

    def __init__(self, *, base_url: str | None = None) -> None:
        base_url = base_url or os.environ.get(API_URL_ENV)
        if not base_url:
            msg = f"No collection API URL configured, set {API_URL_ENV}"
            raise RuntimeError(msg)
        self.endpoint = f"{base_url.rstrip('/')}/rest/v1/{API_TABLE}"
        self.sess = requests.Session()

        api_token_name: str | None = None
        for token_path in API_TOKEN_FILES:
            try:
                self.api_token = token_path.read_text(encoding="utf-8").strip()
                api_token_name = str(token_path)
                break
            except FileNotFoundError:
                pass
        else:
            msg = f"Cannot find collection API token file, was looking at {API_TOKEN_FILES!r}"
            raise RuntimeError(msg)

        self.sess.headers.update(
            {
                "apikey": self.api_token,
                "Authorization": f"Bearer {self.api_token}",
                "Content-Type": "application/json",
            }
        )
        logger.debug("API ready: {} with token from {!r}", self.endpoint, api_token_name)

    def call(
        self,
        method: str,
        *,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
        returning: bool = False,
    ) -> list[dict[str, Any]]:
        """Invoke the table endpoint, return decoded rows."""
        headers = {"Prefer": "return=representation"} if returning else {}
        logger.debug("Making request: {} {!r}", method, params)
        try:
            r = self.sess.request(
                method,
                self.endpoint,
                params=params,
                json=payload,
                headers=headers,
                timeout=API_TIMEOUT_SECONDS,
            )
            r.raise_for_status()
        except requests.RequestException as e:
            msg = f"API call failed: ({method}, {params!r}) -> {e}"
            raise CollectionStoreError(msg) from e

        if not r.content:
            return []
        rv: list[dict[str, Any]] = r.json()
        return rv

    def list_collections(self) -> list[CollectionRecord]:
        rows = self.call("GET", params={"select": _SELECT, "order": "display_order.asc"})
        return [_to_record(row) for row in rows]

    def reorder_siblings(self, parent_id: str | None, ordered_ids: list[str]) -> None:
        """Write the new order, one PATCH per child.

        The table has no multi-row update, so rows already written are put
        back to their previous values if a later PATCH fails.
        """
        records = self.list_collections()
        check_sibling_order(records, parent_id, ordered_ids)
        previous = {r.id: r for r in records}

        written: list[str] = []
        try:
            for index, collection_id in enumerate(ordered_ids):
                payload: dict[str, Any] = {"display_order": index}
                # Dangling parents are reset so the row stays in the group it was ordered in.
                if previous[collection_id].parent_id != parent_id:
                    payload["parent_id"] = parent_id
                self._update(collection_id, payload)
                written.append(collection_id)
        except CollectionStoreError:
            self._restore(written, previous)
            raise

    def _restore(self, collection_ids: list[str], previous: dict[str, CollectionRecord]) -> None:
        for collection_id in collection_ids:
            record = previous[collection_id]
            try:
                self._update(
                    collection_id,
                    {"display_order": record.display_order, "parent_id": record.parent_id},
                )
            except CollectionStoreError:
                logger.exception("Could not restore order of collection {}", collection_id)

    def move_to_parent(self, collection_id: str, new_parent_id: str | None) -> None:
        last = self.call(
            "GET",
            params={
                "select": "display_order",
                "parent_id": _parent_filter(new_parent_id),
                "id": f"neq.{collection_id}",
                "order": "display_order.desc",
                "limit": "1",
            },
        )
        display_order = last[0]["display_order"] + 1 if last else 0
        self._update(
            collection_id, {"parent_id": new_parent_id, "display_order": display_order}
        )

    def create_collection(
        self,
        name: str,
        *,
        parent_id: str | None = None,
        display_order: int = 0,
        color: str | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "name": name,
            "parent_id": parent_id,
            "display_order": display_order,
        }
        if color is not None:
            payload["color"] = color
        rows = self.call("POST", payload=payload, returning=True)
        if not rows:
            msg = f"API did not return the created collection {name!r}"
            raise CollectionStoreError(msg)
        return str(rows[0]["id"])

    def rename_collection(self, collection_id: str, new_name: str) -> None:
        self._update(collection_id, {"name": new_name})

    def delete_collection(self, collection_id: str) -> None:
        self.call("DELETE", params={"id": f"eq.{collection_id}"})

    def toggle_favorite(self, collection_id: str, is_favorite: bool) -> None:
        self._update(collection_id, {"is_favorite": is_favorite})

    def _update(self, collection_id: str, payload: dict[str, Any]) -> None:
        rows = self.call(
            "PATCH", params={"id": f"eq.{collection_id}"}, payload=payload, returning=True
        )
        if not rows:
            msg = f"Collection {collection_id!r} does not exist"
            raise CollectionStoreError(msg)
