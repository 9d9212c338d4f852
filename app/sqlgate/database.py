"""
SQLite connection factory used by the MCP tools.

Read connections are opened with ``PRAGMA query_only`` so the engine itself
refuses writes even if a statement slips past validation.
"""

import sqlite3
from contextlib import closing, contextmanager
from typing import Any, Iterator

from sqlgate.config import get_settings

# Messages that name a missing table or column. They carry no internals and
# are passed through to the caller.
OBJECT_NOT_FOUND_MARKERS = (
    "no such table",
    "no such column",
    "invalid object name",
    "invalid column name",
)

GENERIC_QUERY_ERROR = "Database query execution failed"
GENERIC_OPERATION_ERROR = "Database operation failed"


def safe_error_message(exc: BaseException, fallback: str = GENERIC_QUERY_ERROR) -> str:
    """Return the exception text if it only reports a missing object, else ``fallback``."""
    text = str(exc)
    if any(marker in text.lower() for marker in OBJECT_NOT_FOUND_MARKERS):
        return text
    return fallback


def _database_path(database_path: str | None) -> str:
    return database_path if database_path is not None else get_settings().database_path


def get_connection(database_path: str | None = None, read_only: bool = True) -> sqlite3.Connection:
    """Open a SQLite connection.

    Args:
        database_path: File to open; the configured DATABASE_PATH by default.
        read_only: Enforce read-only at the database level.
    """
    conn = sqlite3.connect(_database_path(database_path))
    conn.row_factory = sqlite3.Row
    if read_only:
        conn.execute("PRAGMA query_only = ON")
    return conn


def _json_safe(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return value


@contextmanager
def open_row_source(query: str, database_path: str | None = None) -> Iterator[Iterator[dict[str, Any]]]:
    """Execute a read query and yield a lazy iterator over its rows.

    The cursor is consumed one row at a time. The connection is closed when
    the context exits, whether or not the rows were fully read.
    """
    with closing(get_connection(database_path, read_only=True)) as conn:
        cursor = conn.execute(query)
        columns = [description[0] for description in cursor.description] if cursor.description else []

        def rows() -> Iterator[dict[str, Any]]:
            for row in cursor:
                yield {name: _json_safe(value) for name, value in zip(columns, row)}

        try:
            yield rows()
        finally:
            cursor.close()


def execute_write(sql: str, database_path: str | None = None) -> int:
    """Run one write statement in its own transaction and return the affected row count."""
    with closing(get_connection(database_path, read_only=False)) as conn:
        with conn:
            cursor = conn.execute(sql)
            return cursor.rowcount


def list_table_names(database_path: str | None = None) -> list[str]:
    """Return user table names, sorted."""
    with closing(get_connection(database_path)) as conn:
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [row[0] for row in cursor.fetchall()]


def table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table_name,))
    return cursor.fetchone() is not None


def describe_table_schema(table_name: str, database_path: str | None = None) -> dict[str, Any] | None:
    """Return columns, indexes and foreign keys for a table, or None if it does not exist."""
    with closing(get_connection(database_path)) as conn:
        # The name is checked against sqlite_master before it is interpolated
        if not table_exists(conn, table_name):
            return None

        quoted = table_name.replace('"', '""')
        columns = [
            {
                "column_name": row["name"],
                "column_type": row["type"],
                "not_null": bool(row["notnull"]),
                "default": row["dflt_value"],
                "primary_key": bool(row["pk"]),
            }
            for row in conn.execute(f'PRAGMA table_info("{quoted}")')  # noqa: S608
        ]
        indexes = [
            {
                "name": row["name"],
                "unique": bool(row["unique"]),
                "origin": row["origin"],
            }
            for row in conn.execute(f'PRAGMA index_list("{quoted}")')  # noqa: S608
        ]
        foreign_keys = [
            {
                "column": row["from"],
                "references_table": row["table"],
                "references_column": row["to"],
                "on_update": row["on_update"],
                "on_delete": row["on_delete"],
            }
            for row in conn.execute(f'PRAGMA foreign_key_list("{quoted}")')  # noqa: S608
        ]
        return {
            "table": table_name,
            "columns": columns,
            "indexes": indexes,
            "foreign_keys": foreign_keys,
        }
