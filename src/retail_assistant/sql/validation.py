"""Read-only validation of generated SQL."""

from __future__ import annotations

import re
from dataclasses import dataclass

from retail_assistant.config.constants import (
    DISALLOWED_SQL_KEYWORDS,
    DISALLOWED_SQL_REFERENCES,
)
from retail_assistant.sql.parsing import first_statement

_DISALLOWED_KEYWORD_RE = re.compile(
    r"\b(" + "|".join(DISALLOWED_SQL_KEYWORDS) + r")\b", re.IGNORECASE
)


@dataclass(frozen=True)
class SqlValidation:
    sql: str | None
    reason: str | None = None

    @property
    def accepted(self) -> bool:
        return self.sql is not None


def validate_read_only(candidate: str | None) -> SqlValidation:
    """Accept a single SELECT statement, reject everything else.

    Disallowed keywords anywhere in the text reject the whole candidate,
    even when it starts with SELECT. Keyword matching is whole-word, so
    identifiers such as ``created_at`` or ``update_time`` pass.
    """
    if candidate is None or not candidate.strip():
        return SqlValidation(sql=None, reason="no SQL statement produced")

    text = candidate.strip()
    if not text.upper().startswith("SELECT"):
        return SqlValidation(sql=None, reason=f"not a SELECT statement: {text[:50]!r}")

    keyword = _DISALLOWED_KEYWORD_RE.search(text)
    if keyword:
        return SqlValidation(
            sql=None,
            reason=f"contains disallowed operation: {keyword.group(1).upper()}",
        )

    upper = text.upper()
    for reference in DISALLOWED_SQL_REFERENCES:
        if reference in upper:
            return SqlValidation(sql=None, reason=f"references {reference.rstrip('.')}")

    statement = first_statement(text)
    if not statement.upper().startswith("SELECT"):
        return SqlValidation(sql=None, reason="first statement is not a SELECT")
    return SqlValidation(sql=statement)
