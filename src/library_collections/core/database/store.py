"""SQLite-backed collection record store."""

import sqlite3
import time
import uuid

from loguru import logger

from library_collections.models.collection import CollectionRecord
from library_collections.protocols import CollectionStoreError, check_sibling_order

_COLUMNS = (
    "id, name, parent_id, display_order, book_count, color, is_favorite, description, icon"
)


def _to_record(row: tuple) -> CollectionRecord:
    return CollectionRecord(
        id=row[0], name=row[1], parent_id=row[2], display_order=row[3],
        book_count=row[4], color=row[5], is_favorite=bool(row[6]),
        description=row[7], icon=row[8],
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


class SqliteCollectionStore:
    """Collection store on a SQLite connection (schema must already exist)."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def list_collections(self) -> list[CollectionRecord]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM collections ORDER BY display_order, id"
        ).fetchall()
        return [_to_record(r) for r in rows]

    def get_collection(self, collection_id: str) -> CollectionRecord | None:
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM collections WHERE id = ?", (collection_id,)
        ).fetchone()
        return _to_record(row) if row else None

    def _require(self, collection_id: str) -> CollectionRecord:
        record = self.get_collection(collection_id)
        if record is None:
            msg = f"Collection {collection_id!r} does not exist"
            raise CollectionStoreError(msg)
        return record

    def _write(self, sql: str, params: tuple | list) -> None:
        try:
            self.conn.execute(sql, params)
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise CollectionStoreError(str(e)) from e

    def reorder_siblings(self, parent_id: str | None, ordered_ids: list[str]) -> None:
        # Rows with a dangling parent belong to the root group and get parent_id reset.
        check_sibling_order(self.list_collections(), parent_id, ordered_ids)

        now_ms = _now_ms()
        try:
            self.conn.executemany(
                "UPDATE collections SET display_order = ?, parent_id = ?, updated_at = ? "
                "WHERE id = ?",
                [(index, parent_id, now_ms, cid) for index, cid in enumerate(ordered_ids)],
            )
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise CollectionStoreError(str(e)) from e
        logger.debug("Stored order for {} children of {}", len(ordered_ids), parent_id)

    def move_to_parent(self, collection_id: str, new_parent_id: str | None) -> None:
        self._require(collection_id)
        if new_parent_id is not None:
            self._require(new_parent_id)
        row = self.conn.execute(
            "SELECT MAX(display_order) FROM collections WHERE parent_id IS ? AND id != ?",
            (new_parent_id, collection_id),
        ).fetchone()
        display_order = 0 if row[0] is None else row[0] + 1
        self._write(
            "UPDATE collections SET parent_id = ?, display_order = ?, updated_at = ? WHERE id = ?",
            (new_parent_id, display_order, _now_ms(), collection_id),
        )

    def create_collection(
        self,
        name: str,
        *,
        parent_id: str | None = None,
        display_order: int = 0,
        color: str | None = None,
    ) -> str:
        if parent_id is not None:
            self._require(parent_id)
        new_id = uuid.uuid4().hex
        now_ms = _now_ms()
        self._write(
            """INSERT INTO collections
               (id, name, parent_id, display_order, color, created_at, updated_at)
               VALUES (?, ?, ?, ?, COALESCE(?, '#3b82f6'), ?, ?)""",
            (new_id, name, parent_id, display_order, color, now_ms, now_ms),
        )
        return new_id

    def rename_collection(self, collection_id: str, new_name: str) -> None:
        self._require(collection_id)
        self._write(
            "UPDATE collections SET name = ?, updated_at = ? WHERE id = ?",
            (new_name, _now_ms(), collection_id),
        )

    def delete_collection(self, collection_id: str) -> None:
        self._require(collection_id)
        self._write("DELETE FROM collections WHERE id = ?", (collection_id,))

    def toggle_favorite(self, collection_id: str, is_favorite: bool) -> None:
        self._require(collection_id)
        self._write(
            "UPDATE collections SET is_favorite = ?, updated_at = ? WHERE id = ?",
            (int(is_favorite), _now_ms(), collection_id),
        )


def insert_collections(conn: sqlite3.Connection, records: list[CollectionRecord]) -> None:
    """Bulk insert records, replacing rows with the same id."""
    now_ms = _now_ms()
    conn.executemany(
        """INSERT OR REPLACE INTO collections
           (id, name, parent_id, display_order, book_count, color, is_favorite,
            description, icon, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        [
            (
                r.id, r.name, r.parent_id, r.display_order, r.book_count, r.color,
                int(r.is_favorite), r.description, r.icon, now_ms, now_ms,
            )
            for r in records
        ],
    )
    conn.commit()
