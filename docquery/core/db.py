"""
SQLite record source.
Reads precomputed document embeddings from the ``file_info`` table; never writes.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterator, Tuple

from .exceptions import RecordSourceError

DEFAULT_TABLE = "file_info"


@contextmanager
def get_db(db_path: str) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection to an existing database file."""
    if not Path(db_path).exists():
        raise RecordSourceError(f"Database file not found: {db_path}")

    try:
        conn = sqlite3.connect(db_path)
    except sqlite3.Error as e:
        raise RecordSourceError(f"Cannot open database {db_path}: {e}") from e
    try:
        yield conn
    finally:
        conn.close()


def _check_table_name(table: str) -> str:
    if not table.isidentifier():
        raise RecordSourceError(f"Invalid table name: {table!r}")
    return table


def iter_document_rows(db_path: str, table: str = DEFAULT_TABLE) -> Iterator[Tuple[str, str, str]]:
    """
    Yield ``(nombre, embedding, original_content)`` rows in rowid order.

    Raises:
        RecordSourceError: if the database or table cannot be read
    """
    table = _check_table_name(table)
    with get_db(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(f"SELECT nombre, embedding, original_content FROM {table} ORDER BY rowid")
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise RecordSourceError(f"Cannot read documents from {table}: {e}") from e

    for name, embedding, content in rows:
        yield name, embedding, content


def health_check(db_path: str, table: str = DEFAULT_TABLE) -> bool:
    """Check that the database exists and holds the document table."""
    try:
        table = _check_table_name(table)
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name = ?", (table,))
            return cursor.fetchone() is not None
    except (RecordSourceError, sqlite3.Error):
        return False
