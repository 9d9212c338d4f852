"""Query-safety gate and bounded reader behind the database MCP server."""
