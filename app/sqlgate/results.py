"""Result types shared by the validator, the reader and the MCP tools."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class ValidationVerdict:
    """Outcome of validating one query.

    ``reason`` is meant for the caller; ``rule`` is an internal tag for logs.
    """

    accepted: bool
    reason: str | None = None
    rule: str | None = None


@dataclass
class ReadResult:
    """Rows materialized from one accepted query."""

    success: bool
    rows: list[dict[str, Any]] = field(default_factory=list)
    truncated: bool = False
    total_observed: int = 0
    message: str | None = None
    error: str | None = None


class DbOperationResult(BaseModel):
    """Envelope returned by every MCP tool."""

    success: bool = Field(description="Whether the operation completed.")
    data: Any = Field(default=None, description="Rows, table names or schema details.")
    message: str | None = Field(default=None, description="Informational note, e.g. result truncation.")
    error: str | None = Field(default=None, description="Failure reason, safe to show to the agent.")
    rows_affected: int | None = Field(default=None, description="Row count for write operations.")
