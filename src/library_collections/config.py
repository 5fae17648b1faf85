"""Configuration constants for library-collections."""

import os
from pathlib import Path

# Local SQLite database, overridable with LIBRARY_COLLECTIONS_DB.
DEFAULT_DATA_DIR: Path = Path("~/.local/share/library-collections").expanduser()
DB_FILENAME: str = "collections.db"

# Base URL of the hosted collection API (PostgREST), e.g. https://xyz.supabase.co
API_URL_ENV: str = "LIBRARY_COLLECTIONS_API_URL"
API_TABLE: str = "user_collections"

# API token location. First file found is used.
API_TOKEN_FILES: list[Path] = [
    Path("~/.config/library-collections-token.txt").expanduser(),
    Path("~/.config/secret/library-collections-token.txt").expanduser(),
    Path(f"/run/user/{os.getuid()}/library-collections-token"),
]

API_TIMEOUT_SECONDS: float = 10.0


def resolve_db_path() -> Path:
    """Return the database path from the environment, or the default location."""
    db_env = os.environ.get("LIBRARY_COLLECTIONS_DB")
    if db_env:
        return Path(db_env).expanduser()
    return DEFAULT_DATA_DIR / DB_FILENAME
