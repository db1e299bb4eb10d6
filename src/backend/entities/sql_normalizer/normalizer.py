"""SQL normalizer.

Rewrites LLM-generated T-SQL so it matches the live UltiSales schema.
The model was taught a legacy naming scheme (``tblAudit``, ``DebtorNumber``)
that the real database no longer uses. Nothing here parses SQL; each rule
is an ordered regex substitution, and the order matters: casing runs after
prefix rewriting so rewritten names come out uppercase.

Rewrites apply to code only. Single-quoted literals and comments pass
through untouched.
"""

from __future__ import annotations

import re
from collections.abc import Callable

# Literals ('it''s') and comments (-- ... / /* ... */) are protected segments.
_PROTECTED = re.compile(r"('(?:[^']|'')*'|--[^\n]*|/\*.*?\*/)", re.DOTALL)

# Optional ``dbo.`` / ``[dbo].`` qualifier, not continuing another name.
_SCHEMA = r"(?<![\w.\[\]])(?:(?:\[dbo\]|dbo)\.)?"
_PLAIN_NAME = re.compile(r"[A-Za-z_]\w*")
_WORD_CHAR = re.compile(r"\w")

# Passes are repeated until the text is stable; a rewrite can expose a
# name another rule recognizes (tblDebtorNumber -> dbo.DEBTORNUMBER).
_MAX_PASSES = 8

_Rule = tuple[re.Pattern[str], Callable[[re.Match[str]], str]]


def _qualified(name: str, match: re.Match[str]) -> str:
    """Render ``dbo.<name>``, keeping brackets unless ``name`` is a plain identifier.

    Brackets also stay when a word character follows the match, so
    ``[Audit]a`` cannot fuse with its alias.
    """
    following = match.string[match.end() : match.end() + 1]
    if _PLAIN_NAME.fullmatch(name) and not _WORD_CHAR.match(following):
        return f"dbo.{name}"
    return f"dbo.[{name}]"


def _renamed(table: str) -> Callable[[re.Match[str]], str]:
    return lambda match: _qualified(table, match)


def _strip_prefix(match: re.Match[str]) -> str:
    return _qualified(match.group(1) or match.group(2), match)


def _upper_table(match: re.Match[str]) -> str:
    return _qualified((match.group(1) or match.group(2)).upper(), match)


def _legacy_alias(name: str) -> re.Pattern[str]:
    return re.compile(_SCHEMA + rf"(?:\[{name}\]|{name}(?!\w))", re.IGNORECASE)


_RULES: tuple[_Rule, ...] = (
    # 1. Outdated customer-link columns.
    (
        re.compile(r"\b(?:DebtorNumber|ClientCode)\b", re.IGNORECASE),
        lambda match: "DebtorOrCreditorNumber",
    ),
    # 2. Legacy tables whose real name is not just the de-prefixed one.
    (_legacy_alias("tblClients"), _renamed("DEBTOR")),
    (_legacy_alias("tblInvoices"), _renamed("TRANSACTIONS")),
    # 3. Legacy ``tbl`` prefix -> ``dbo.`` schema prefix. A bracketed name
    # only matches with both brackets present.
    (
        re.compile(
            _SCHEMA + r"(?:\[(?:tbl_?)+([^\]]+)\]|(?:tbl_?)+(\w+))",
            re.IGNORECASE,
        ),
        _strip_prefix,
    ),
    # 4. Uppercase the table segment of every dbo-qualified reference.
    (
        re.compile(
            r"(?<![\w.\[\]])(?:\[dbo\]|dbo)\.(?:\[([^\]]+)\]|([A-Za-z_]\w*))",
            re.IGNORECASE,
        ),
        _upper_table,
    ),
)


def _rewrite_code(segment: str) -> str:
    for pattern, replacement in _RULES:
        segment = pattern.sub(replacement, segment)
    return segment


def _rewrite_pass(sql: str) -> str:
    parts = _PROTECTED.split(sql)
    # re.split with one capturing group alternates code / protected segments.
    return "".join(
        _rewrite_code(part) if index % 2 == 0 else part for index, part in enumerate(parts)
    )


def normalize(raw_sql: str) -> str:
    """Apply the schema-drift rewrites to a SQL string.

    Pure and total: text the rules do not recognize is returned as is,
    and ``normalize(normalize(s)) == normalize(s)``. Bracketed names keep
    their brackets unless they are plain identifiers
    (``[dbo].[Audit Items]`` -> ``dbo.[AUDIT ITEMS]``).

    Args:
        raw_sql: SQL text as produced by the planner.

    Returns:
        The rewritten SQL.
    """
    if not raw_sql:
        return ""
    sql = raw_sql
    for _ in range(_MAX_PASSES):
        rewritten = _rewrite_pass(sql)
        if rewritten == sql:
            break
        sql = rewritten
    return sql


_ISOLATION = "SET TRANSACTION ISOLATION LEVEL READ UNCOMMITTED;"


def apply_session_preamble(sql: str, database: str) -> str:
    """Prefix a statement with the database context and dirty-read isolation.

    The bridge runs every statement on a pooled connection, so each one
    must select its database and avoid blocking writers. Idempotent.

    Args:
        sql: Normalized SQL.
        database: Target database name for ``USE``.

    Returns:
        ``USE [database]; SET TRANSACTION ...; <sql>`` with missing parts added.
    """
    statement = sql.strip()
    if statement.upper().startswith("USE ") and ";" in statement:
        use_clause, _, statement = statement.partition(";")
        use_clause = f"{use_clause};"
        statement = statement.strip()
    else:
        use_clause = f"USE [{database}];"
    if "SET TRANSACTION ISOLATION" not in statement.upper():
        statement = f"{_ISOLATION} {statement}"
    return f"{use_clause} {statement}"
