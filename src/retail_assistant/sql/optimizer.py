"""Cost-control rewrite for statements that touch known large tables.

Adds a recency filter and a row cap when they are missing. Target tables
and selected columns are never changed. Clause positions are found from
sqlparse tokens at parenthesis depth zero, so window specifications,
aggregate ``ORDER BY`` arguments, string literals and subqueries are never
mistaken for the statement's own clauses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import sqlparse
from sqlparse import tokens as T

from retail_assistant.config.constants import RECENCY_EXPRESSIONS
from retail_assistant.observability.logger import get_logger

logger = get_logger("sql_optimizer")

TRAILING_CLAUSES = frozenset({"GROUP BY", "HAVING", "QUALIFY", "WINDOW", "ORDER BY", "LIMIT"})
SET_OPERATORS = frozenset({"UNION", "UNION ALL", "INTERSECT", "EXCEPT"})
FROM_LIST_END = TRAILING_CLAUSES | SET_OPERATORS | {"WHERE"}


@dataclass(frozen=True)
class TighteningResult:
    sql: str
    changes: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


@dataclass(frozen=True)
class _Token:
    offset: int
    depth: int
    ttype: object
    value: str

    @property
    def word(self) -> str:
        """Upper-cased keyword or bare name, whitespace collapsed; '' otherwise."""
        if self.ttype in T.Keyword or self.ttype in T.Name:
            return " ".join(self.value.upper().split())
        return ""

    @property
    def is_keyword(self) -> bool:
        return self.ttype in T.Keyword

    def is_punctuation(self, char: str) -> bool:
        return self.ttype in T.Punctuation and self.value == char

    @property
    def significant(self) -> bool:
        return not (self.ttype in T.Whitespace or self.ttype in T.Newline or self.ttype in T.Comment)


def _lex(sql: str) -> list[_Token]:
    """Flatten the statement into tokens annotated with offset and paren depth."""
    statements = sqlparse.parse(sql)
    if not statements:
        return []
    lexed: list[_Token] = []
    offset = 0
    depth = 0
    for tok in statements[0].flatten():
        if tok.ttype in T.Punctuation and tok.value == ")":
            depth = max(0, depth - 1)
        lexed.append(_Token(offset=offset, depth=depth, ttype=tok.ttype, value=tok.value))
        if tok.ttype in T.Punctuation and tok.value == "(":
            depth += 1
        offset += len(tok.value)
    return lexed


def referenced_large_tables(sql: str, large_tables: list[str]) -> list[str]:
    """Large tables named after FROM or JOIN, optionally project/dataset qualified."""
    if not large_tables:
        return []
    names = "|".join(re.escape(t) for t in large_tables)
    pattern = re.compile(
        r"\b(?:FROM|JOIN)\s+[`\"]?(?:[\w-]+\.)*(" + names + r")[`\"]?(?=[\s,)]|$)",
        re.IGNORECASE,
    )
    found: list[str] = []
    for match in pattern.finditer(sql):
        name = match.group(1).lower()
        if name not in found:
            found.append(name)
    return found


def tighten_for_large_tables(
    sql: str,
    dialect: str,
    large_tables: list[str],
    recency_column: str,
    recency_days: int,
    max_rows: int,
    known_columns: dict[str, set[str]] | None = None,
) -> TighteningResult:
    tables = referenced_large_tables(sql, large_tables)
    if not tables:
        return TighteningResult(sql=sql)

    changes: list[str] = []
    rewritten = sql

    if _can_inject_recency(_lex(rewritten), tables, recency_column, known_columns):
        expression = RECENCY_EXPRESSIONS.get(dialect)
        if expression is not None:
            condition = f"WHERE {recency_column} >= {expression.format(days=recency_days)}"
            rewritten = _insert_before_trailing_clauses(rewritten, condition)
            changes.append(f"recency_filter:{recency_days}d")

    rewritten, limit_change = _cap_rows(rewritten, max_rows)
    if limit_change:
        changes.append(limit_change)

    if changes:
        logger.info("sql_tightened", tables=tables, changes=changes)
    return TighteningResult(sql=rewritten, changes=changes)


def _can_inject_recency(
    lexed: list[_Token],
    tables: list[str],
    recency_column: str,
    known_columns: dict[str, set[str]] | None,
) -> bool:
    # Only simple single-table statements: a join, subquery or set operation
    # makes the unqualified recency column ambiguous or misplaced.
    if any(t.word == "WHERE" for t in lexed):
        return False
    if any(t.word == "SELECT" and t.depth > 0 for t in lexed):
        return False
    if any(t.depth == 0 and t.word in SET_OPERATORS for t in lexed):
        return False
    if _joins_tables(lexed):
        return False
    if known_columns is not None:
        columns = known_columns.get(tables[0])
        if columns is not None and recency_column.lower() not in columns:
            return False
    return True


def _joins_tables(lexed: list[_Token]) -> bool:
    """True for an explicit JOIN or a comma-separated FROM list."""
    in_from = False
    for t in lexed:
        if t.is_keyword and t.word.endswith("JOIN"):
            return True
        if t.depth > 0:
            continue
        if t.word == "FROM":
            in_from = True
        elif t.word in FROM_LIST_END:
            in_from = False
        elif in_from and t.is_punctuation(","):
            return True
    return False


def _insert_before_trailing_clauses(sql: str, condition: str) -> str:
    for t in _lex(sql):
        if t.depth == 0 and t.word in TRAILING_CLAUSES:
            return f"{sql[:t.offset].rstrip()} {condition} {sql[t.offset:]}"
    return f"{sql} {condition}"


def _cap_rows(sql: str, max_rows: int) -> tuple[str, str | None]:
    lexed = _lex(sql)
    limits = [i for i, t in enumerate(lexed) if t.depth == 0 and t.word == "LIMIT"]
    if not limits:
        return f"{sql} LIMIT {max_rows}", f"row_cap:{max_rows}"

    value = next((t for t in lexed[limits[-1] + 1:] if t.significant), None)
    # A parameter or expression limit is left alone.
    if value is None or value.ttype not in T.Literal.Number.Integer:
        return sql, None
    current = int(value.value)
    if current <= max_rows:
        return sql, None
    end = value.offset + len(value.value)
    return f"{sql[:value.offset]}{max_rows}{sql[end:]}", f"row_cap:{current}->{max_rows}"
