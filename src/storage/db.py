"""SQLite database connection and schema bootstrap."""
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from src.app.config import get_settings

logger = logging.getLogger("readshelf.storage.db")

_SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def get_connection() -> sqlite3.Connection:
    settings = get_settings()
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(settings.db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


@contextmanager
def connection(commit: bool = False) -> Iterator[sqlite3.Connection]:
    """Open a connection for one DAO call; commit on success when asked."""
    conn = get_connection()
    try:
        yield conn
        if commit:
            conn.commit()
    finally:
        conn.close()


def init_db() -> None:
    schema_sql = _SCHEMA_PATH.read_text(encoding="utf-8")
    with connection(commit=True) as conn:
        conn.executescript(schema_sql)
    logger.debug("Schema ready at %s", get_settings().db_path)
