"""
Materialize rows from an accepted read query with a hard cap.

Rows are pulled lazily from the row source. Only the first ``max_rows`` are
kept, but the source is read to the end so the true row count is reported.
"""

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Iterator

from sqlgate.database import GENERIC_QUERY_ERROR, safe_error_message
from sqlgate.results import ReadResult

logger = logging.getLogger(__name__)

RowSourceFactory = Callable[[str], AbstractContextManager[Iterator[dict[str, Any]]]]


def truncation_message(total: int, limit: int) -> str:
    return f"Query returned {total:,} records, limited to {limit:,}"


def read_bounded(query: str, open_rows: RowSourceFactory, max_rows: int) -> ReadResult:
    """Run an already-validated query and collect at most ``max_rows`` rows.

    Args:
        query: SQL text, passed to the row source unchanged.
        open_rows: Callable returning a context manager that yields a lazy
            iterator of column-name to value mappings.
        max_rows: Maximum number of rows kept in the result.

    Returns:
        A ReadResult. On failure ``success`` is False and ``error`` holds a
        message that is safe to return to the caller.
    """
    rows: list[dict[str, Any]] = []
    total = 0
    try:
        with open_rows(query) as source:
            for row in source:
                total += 1
                if len(rows) < max_rows:
                    rows.append(dict(row))
    except Exception as e:
        logger.exception("Read query failed after %d rows: %s", total, e)
        return ReadResult(success=False, total_observed=total, error=safe_error_message(e, GENERIC_QUERY_ERROR))

    truncated = total > max_rows
    message = truncation_message(total, max_rows) if truncated else None
    if truncated:
        logger.info("Read query truncated: %d rows observed, %d returned", total, max_rows)
    return ReadResult(success=True, rows=rows, truncated=truncated, total_observed=total, message=message)
