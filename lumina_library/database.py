import json
import logging
import sqlite3
from typing import List, Optional

from lumina_library.book import Book
from lumina_library.config import settings

logger = logging.getLogger(__name__)

# Default storage file, overridable per store instance
DATABASE_FILE = settings.data_file


def get_db_connection(db_file: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection to the local storage database."""
    conn = sqlite3.connect(db_file or DATABASE_FILE)
    conn.row_factory = sqlite3.Row
    return conn


def initialize_database(db_file: Optional[str] = None) -> None:
    """Create the key/value table if it does not exist yet."""
    conn = get_db_connection(db_file)
    try:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        conn.commit()
    finally:
        conn.close()


class KeyValueStore:
    """String key/value storage persisted in SQLite, the local-storage analogue."""

    def __init__(self, db_file: Optional[str] = None) -> None:
        self.db_file = db_file or DATABASE_FILE
        initialize_database(self.db_file)

    def get_item(self, key: str) -> Optional[str]:
        conn = get_db_connection(self.db_file)
        try:
            row = conn.execute("SELECT value FROM storage WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_item(self, key: str, value: str) -> None:
        conn = get_db_connection(self.db_file)
        try:
            conn.execute(
                "INSERT INTO storage (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = get_db_connection(self.db_file)
        try:
            conn.execute("DELETE FROM storage WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


class BookStore:
    """Mirrors the whole book list to a single key of a KeyValueStore."""

    def __init__(self, store: KeyValueStore, key: Optional[str] = None) -> None:
        self.store = store
        self.key = key or settings.storage_key

    def load(self) -> List[Book]:
        """Return the stored list, or an empty one when absent or unreadable."""
        raw = self.store.get_item(self.key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise TypeError(f"Expected a list, got {type(data).__name__}")
            return [Book.from_dict(item) for item in data]
        except (ValueError, TypeError, KeyError, OverflowError) as e:
            logger.error(f"Failed to parse stored books under '{self.key}': {e}")
            return []

    def save(self, books: List[Book]) -> None:
        """Overwrite the stored blob with the full list."""
        payload = json.dumps([book.to_dict() for book in books], ensure_ascii=False)
        self.store.set_item(self.key, payload)
        logger.debug(f"Saved {len(books)} book(s) under '{self.key}'")
