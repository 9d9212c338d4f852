"""
Static safety check for free-text read queries.

This is a denylist gate, not a SQL parser. A query is accepted only when it
looks like a single read-only SELECT (or WITH ... SELECT) statement and none
of the known write, admin or obfuscation shapes appear in it.

Some checks run on a cleaned copy of the query (comments removed, whitespace
collapsed) and some on the original text. Comment-smuggled keywords, for
example, are only visible before cleaning.
"""

import re
from dataclasses import dataclass

from sqlgate.results import ValidationVerdict

MAX_QUERY_LENGTH = 10000

DANGEROUS_KEYWORDS = (
    "DELETE", "DROP", "UPDATE", "INSERT", "ALTER", "CREATE",
    "TRUNCATE", "EXEC", "EXECUTE", "MERGE", "REPLACE",
    "GRANT", "REVOKE", "COMMIT", "ROLLBACK", "TRANSACTION",
    "BEGIN", "DECLARE", "SET", "USE", "BACKUP",
    "RESTORE", "KILL", "SHUTDOWN", "WAITFOR", "OPENROWSET",
    "OPENDATASOURCE", "OPENQUERY", "OPENXML", "BULK", "INTO",
)

# A keyword counts only when it is not glued to an identifier character.
_NOT_IDENT_BEFORE = r"(?<![A-Za-z0-9_])"
_NOT_IDENT_AFTER = r"(?![A-Za-z0-9_])"

_WRITE_VERBS = "DELETE|DROP|UPDATE|INSERT|ALTER|CREATE|TRUNCATE|EXEC|EXECUTE"
_CHAR_FUNCTIONS = "CHAR|NCHAR|ASCII|CHR"
# Whitespace or comments may sit between a function name and its parenthesis
_CALL_GAP = r"(?:\s|/\*[\s\S]*?\*/|--[^\n]*\n)*\("

EMPTY_QUERY = "Query must be a non-empty string"
EMPTY_AFTER_COMMENTS = "Query cannot be empty after removing comments"
NOT_SELECT = "Query must start with SELECT (or WITH for CTEs) for security reasons"
MALICIOUS_PATTERN = "Potentially malicious SQL pattern detected. Only simple SELECT queries are allowed."
MULTIPLE_STATEMENTS = "Multiple SQL statements are not allowed. Use only a single SELECT statement."
CHAR_CONVERSION = "Character conversion functions are not allowed as they may be used for obfuscation."


@dataclass(frozen=True)
class PatternTable:
    """Compiled matchers shared by every validation call."""

    keywords: tuple[tuple[str, re.Pattern], ...]
    structural: tuple[tuple[str, re.Pattern], ...]
    line_comment: re.Pattern
    block_comment: re.Pattern
    whitespace: re.Pattern
    leading_verb: re.Pattern
    char_conversion: re.Pattern


def _keyword(word: str) -> re.Pattern:
    return re.compile(_NOT_IDENT_BEFORE + word + _NOT_IDENT_AFTER, re.IGNORECASE)


def build_pattern_table() -> PatternTable:
    """Compile the denylist and structural patterns."""
    i = re.IGNORECASE
    structural = (
        # SELECT ... INTO creates a table
        ("select_into", re.compile(r"SELECT\s+.*?\s+INTO\s+", i)),
        ("separator_keyword", re.compile(
            r";\s*(DELETE|DROP|UPDATE|INSERT|ALTER|CREATE|TRUNCATE|EXEC|EXECUTE|MERGE|REPLACE|GRANT|REVOKE)", i)),
        ("union_injection", re.compile(rf"UNION\s+(?:ALL\s+)?SELECT.*?({_WRITE_VERBS})", i)),
        ("line_comment_keyword", re.compile(rf"--.*?({_WRITE_VERBS})", i)),
        ("block_comment_keyword", re.compile(rf"/\*.*?({_WRITE_VERBS}).*?\*/", i | re.DOTALL)),
        ("exec_call", re.compile(r"EXEC(?:UTE)?\s*\(", i)),
        ("procedure_prefix", re.compile(r"\b(?:sp|xp)_", i)),
        ("bulk_insert", re.compile(r"BULK\s+INSERT", i)),
        ("openrowset", re.compile(r"OPENROWSET", i)),
        ("opendatasource", re.compile(r"OPENDATASOURCE", i)),
        ("system_variable", re.compile(r"@@")),
        ("identity_function", re.compile(
            _NOT_IDENT_BEFORE
            + r"(?:(?:SYSTEM_USER|SESSION_USER|CURRENT_USER)" + _NOT_IDENT_AFTER
            + r"|(?:USER_NAME|USER_ID|SUSER_NAME|SUSER_SNAME|SUSER_ID|DB_NAME|HOST_NAME)" + _CALL_GAP + ")", i)),
        ("waitfor_delay", re.compile(r"WAITFOR\s+(?:DELAY|TIME)", i)),
        ("multiple_statements", re.compile(r";\s*\w")),
        ("char_concat", re.compile(rf"(?:\+|\|\|)\s*(?:{_CHAR_FUNCTIONS})" + _CALL_GAP, i)),
    )
    return PatternTable(
        keywords=tuple((word, _keyword(word)) for word in DANGEROUS_KEYWORDS),
        structural=structural,
        line_comment=re.compile(r"--.*$", re.MULTILINE),
        block_comment=re.compile(r"/\*[\s\S]*?\*/"),
        whitespace=re.compile(r"\s+"),
        leading_verb=re.compile(r"^(?:SELECT|WITH)" + _NOT_IDENT_AFTER, i),
        char_conversion=re.compile(_NOT_IDENT_BEFORE + rf"(?:{_CHAR_FUNCTIONS})" + _CALL_GAP, i),
    )


PATTERNS = build_pattern_table()


def clean_query(query: str, patterns: PatternTable = PATTERNS) -> str:
    """Strip comments and collapse whitespace."""
    cleaned = patterns.line_comment.sub("", query)
    cleaned = patterns.block_comment.sub("", cleaned)
    return patterns.whitespace.sub(" ", cleaned).strip()


def _reject(reason: str, rule: str) -> ValidationVerdict:
    return ValidationVerdict(accepted=False, reason=reason, rule=rule)


def validate_query(query: str | None, patterns: PatternTable = PATTERNS) -> ValidationVerdict:
    """Decide whether a query is safe to run as a single read.

    Checks run in a fixed order and the first failure wins: emptiness,
    length, cleaning, leading verb, keyword denylist, structural patterns,
    statement count, character conversion functions.

    Args:
        query: Raw SQL text submitted by the caller.
        patterns: Compiled matchers; the module-level table by default.

    Returns:
        A ValidationVerdict. ``reason`` names the violated rule category and
        never includes the matching regex.
    """
    if not isinstance(query, str) or not query.strip():
        return _reject(EMPTY_QUERY, "empty")

    if len(query) > MAX_QUERY_LENGTH:
        return _reject(
            f"Query is too long. Maximum allowed length is {MAX_QUERY_LENGTH:,} characters.",
            "length",
        )

    cleaned = clean_query(query, patterns)
    if not cleaned:
        return _reject(EMPTY_AFTER_COMMENTS, "comment_only")

    if not patterns.leading_verb.match(cleaned):
        return _reject(NOT_SELECT, "leading_verb")

    for keyword, pattern in patterns.keywords:
        if pattern.search(cleaned):
            return _reject(
                f"Dangerous keyword '{keyword}' detected in query. Only SELECT operations are allowed.",
                "keyword",
            )

    for tag, pattern in patterns.structural:
        if pattern.search(query):
            return _reject(MALICIOUS_PATTERN, f"pattern:{tag}")

    statements = [part for part in cleaned.split(";") if part.strip()]
    if len(statements) > 1:
        return _reject(MULTIPLE_STATEMENTS, "multi_statement")

    if patterns.char_conversion.search(query):
        return _reject(CHAR_CONVERSION, "char_conversion")

    return ValidationVerdict(accepted=True)
