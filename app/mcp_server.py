"""
MCP Server for a SQLite database.

Uses the FastMCP framework from the official MCP SDK to expose database tools
to AI agents. Ad hoc reads go through the query validator and the bounded
reader; write tools are only registered when the server is not in read-only
mode.
"""

import logging
import sys
from functools import partial

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from sqlgate.bounded_reader import read_bounded
from sqlgate.config import get_settings
from sqlgate.database import (
    GENERIC_OPERATION_ERROR,
    describe_table_schema,
    execute_write,
    list_table_names,
    open_row_source,
    safe_error_message,
)
from sqlgate.query_validator import validate_query
from sqlgate.results import DbOperationResult

logger = logging.getLogger(__name__)

SERVER_NAME = "SQL Database MCP Server"
READ_ONLY_ERROR = "This operation is not allowed in read-only mode. Set READONLY=false to enable write operations."

READ_TOOL = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
WRITE_TOOL = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=False)
DESTRUCTIVE_TOOL = ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=False, openWorldHint=False)


def ensure_writable() -> DbOperationResult | None:
    """Return a failure result when the server is in read-only mode."""
    if get_settings().read_only:
        return DbOperationResult(success=False, error=READ_ONLY_ERROR)
    return None


def list_tables() -> DbOperationResult:
    """Returns a list of all table names in the database."""
    try:
        return DbOperationResult(success=True, data=list_table_names())
    except Exception as e:
        logger.exception("ListTables failed: %s", e)
        return DbOperationResult(success=False, error=safe_error_message(e, GENERIC_OPERATION_ERROR))


def describe_table(name: str) -> DbOperationResult:
    """Returns the schema of a table: columns, indexes and foreign keys.

    Args:
        name: The name of the table to describe.
    """
    try:
        schema = describe_table_schema(name)
    except Exception as e:
        logger.exception("DescribeTable failed for %r: %s", name, e)
        return DbOperationResult(success=False, error=safe_error_message(e, GENERIC_OPERATION_ERROR))
    if schema is None:
        return DbOperationResult(success=False, error=f"Table '{name}' does not exist in the database.")
    return DbOperationResult(success=True, data=schema)


def read_data(sql: str) -> DbOperationResult:
    """Executes a SELECT query against the database.

    The query must start with SELECT (or WITH for CTEs) and cannot contain
    any destructive SQL operations. Results are capped at the configured
    maximum record count; a message reports when rows were left out.

    Args:
        sql: A single SQL SELECT query to execute.
    """
    verdict = validate_query(sql)
    if not verdict.accepted:
        preview = sql[:100] if isinstance(sql, str) else repr(sql)
        logger.warning("Security validation failed (%s) for query: %s", verdict.rule, preview)
        return DbOperationResult(success=False, error=f"Security validation failed: {verdict.reason}")

    settings = get_settings()
    result = read_bounded(
        sql,
        partial(open_row_source, database_path=settings.database_path),
        settings.max_record_count,
    )
    if not result.success:
        return DbOperationResult(success=False, error=result.error)
    return DbOperationResult(success=True, data=result.rows, message=result.message)


def _run_write(operation: str, sql: str, message: str, report_rows: bool = True) -> DbOperationResult:
    refused = ensure_writable()
    if refused is not None:
        return refused
    try:
        affected = execute_write(sql)
    except Exception as e:
        logger.exception("%s failed: %s", operation, e)
        return DbOperationResult(success=False, error=safe_error_message(e, GENERIC_OPERATION_ERROR))
    return DbOperationResult(success=True, message=message, rows_affected=affected if report_rows else None)


def create_table(sql: str) -> DbOperationResult:
    """Creates a new table by executing a CREATE TABLE statement.

    Args:
        sql: The CREATE TABLE statement to execute.
    """
    return _run_write("CreateTable", sql, "Table created successfully.", report_rows=False)


def drop_table(sql: str) -> DbOperationResult:
    """Drops a table by executing a DROP TABLE statement.

    Args:
        sql: The DROP TABLE statement to execute.
    """
    return _run_write("DropTable", sql, "Table dropped successfully.", report_rows=False)


def insert_data(sql: str) -> DbOperationResult:
    """Inserts rows by executing an INSERT statement.

    Args:
        sql: The INSERT statement to execute.
    """
    return _run_write("InsertData", sql, "Data inserted successfully.")


def update_data(sql: str) -> DbOperationResult:
    """Updates rows by executing an UPDATE statement.

    Args:
        sql: The UPDATE statement to execute.
    """
    return _run_write("UpdateData", sql, "Data updated successfully.")


READ_TOOLS = (
    (list_tables, READ_TOOL),
    (describe_table, READ_TOOL),
    (read_data, READ_TOOL),
)
WRITE_TOOLS = (
    (create_table, WRITE_TOOL),
    (insert_data, WRITE_TOOL),
    (update_data, WRITE_TOOL),
    (drop_table, DESTRUCTIVE_TOOL),
)


def build_server(read_only: bool) -> FastMCP:
    """Create the FastMCP server; write tools are left out in read-only mode."""
    server = FastMCP(SERVER_NAME)
    tools = READ_TOOLS if read_only else READ_TOOLS + WRITE_TOOLS
    for fn, annotations in tools:
        server.add_tool(fn, annotations=annotations)
    return server


def configure_logging(level: str) -> None:
    # stdout carries the stdio transport
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Initialize the FastMCP server
mcp = build_server(get_settings().read_only)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "Starting %s (database=%s, read_only=%s, max_records=%d)",
        SERVER_NAME,
        settings.database_path,
        settings.read_only,
        settings.max_record_count,
    )
    mcp.run()


# Allow running the MCP server standalone for testing with MCP Inspector
if __name__ == "__main__":
    main()
