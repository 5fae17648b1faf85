"""Shared test fixtures."""

import sqlite3

import pytest

from library_collections.core.database.schema import create_schema
from library_collections.core.database.store import SqliteCollectionStore, insert_collections
from library_collections.core.navigator import CollectionNavigator
from library_collections.core.tree.builder import build_tree
from library_collections.models.collection import CollectionRecord, CollectionTree

from tests.unit.fakes import FakeCollectionStore

# Reading
#   Fiction
#     Sci-Fi
#     Fantasy
#   Papers
# Archive
SAMPLE_RECORDS = [
    CollectionRecord(id="archive", name="Archive", display_order=1, book_count=5),
    CollectionRecord(id="fantasy", name="Fantasy", parent_id="fiction", display_order=1),
    CollectionRecord(id="papers", name="Papers", parent_id="reading", display_order=1, book_count=4),
    CollectionRecord(id="reading", name="Reading", display_order=0, book_count=2),
    CollectionRecord(id="scifi", name="Sci-Fi", parent_id="fiction", display_order=0, book_count=1),
    CollectionRecord(
        id="fiction", name="Fiction", parent_id="reading", display_order=0, book_count=3
    ),
]


@pytest.fixture
def sample_tree() -> CollectionTree:
    return build_tree(SAMPLE_RECORDS)


@pytest.fixture
def fake_store() -> FakeCollectionStore:
    return FakeCollectionStore(SAMPLE_RECORDS)


@pytest.fixture
def navigator(fake_store: FakeCollectionStore) -> CollectionNavigator:
    nav = CollectionNavigator(fake_store)
    nav.refresh()
    return nav


@pytest.fixture
def populated_db() -> sqlite3.Connection:
    """Return an in-memory DB holding the sample collections."""
    conn = sqlite3.connect(":memory:")
    create_schema(conn)
    insert_collections(conn, SAMPLE_RECORDS)
    return conn


@pytest.fixture
def sqlite_store(populated_db: sqlite3.Connection) -> SqliteCollectionStore:
    return SqliteCollectionStore(populated_db)


@pytest.fixture
def sample_records() -> list[CollectionRecord]:
    return list(SAMPLE_RECORDS)
