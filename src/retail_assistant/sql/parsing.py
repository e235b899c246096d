"""Tolerant extraction of SQL and narrative sections from model output."""

from __future__ import annotations

import re

import sqlparse

SECTION_NAMES = ("SQL_QUERY", "ANALYSIS", "INSIGHTS", "RECOMMENDATION", "EXPLANATION")

_SECTION_RE = re.compile(
    r"^\s*(?:\*\*|#+\s*)?(" + "|".join(SECTION_NAMES) + r")(?:\*\*)?\s*:(?:\*\*)?\s*",
    re.IGNORECASE | re.MULTILINE,
)
_FENCED_BLOCK_RE = re.compile(r"```(?:sqlite|googlesql|bigquery|sql)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_FENCE_MARKER_RE = re.compile(r"```(?:sqlite|googlesql|bigquery|sql)?", re.IGNORECASE)
_BARE_STATEMENT_RE = re.compile(
    r"^(SELECT|WITH|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|TRUNCATE)\b", re.IGNORECASE
)


def split_sections(text: str) -> dict[str, str]:
    """Split 'NAME: body' sections. Keys are upper-cased section names."""
    matches = list(_SECTION_RE.finditer(text))
    sections: dict[str, str] = {}
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        name = match.group(1).upper()
        body = text[match.end():end].strip()
        if name not in sections:
            sections[name] = body
    return sections


def clean_statement(candidate: str) -> str:
    """Strip fences and comments, collapse whitespace, drop trailing separators."""
    text = _FENCE_MARKER_RE.sub(" ", candidate)
    text = sqlparse.format(text, strip_comments=True)
    text = re.sub(r"\s+", " ", text).strip()
    return text.rstrip(";").strip()


def extract_sql(model_output: str) -> str | None:
    """Return the candidate statement from a model answer, or None if there is none.

    Preference order: the SQL_QUERY section, the first fenced block, the
    whole answer. The candidate is not validated here.
    """
    if not model_output or not model_output.strip():
        return None

    sections = split_sections(model_output)
    if "SQL_QUERY" in sections:
        candidate = sections["SQL_QUERY"]
    else:
        fenced = _FENCED_BLOCK_RE.search(model_output)
        candidate = fenced.group(1) if fenced else model_output

    cleaned = clean_statement(candidate)
    return cleaned or None


def first_statement(sql: str) -> str:
    """Keep only the first statement of a multi-statement string."""
    statements = [s.strip().rstrip(";").strip() for s in sqlparse.split(sql) if s.strip()]
    return statements[0] if statements else ""


def split_narrative(model_output: str) -> str:
    """Collect the narrative sections (everything except the SQL) as plain text."""
    sections = split_sections(model_output)
    parts = []
    for name in ("ANALYSIS", "EXPLANATION", "INSIGHTS", "RECOMMENDATION"):
        body = sections.get(name)
        if body:
            body = _FENCED_BLOCK_RE.sub("", body).strip()
            parts.append(f"{name.title()}: {body}")
    if parts:
        return "\n\n".join(parts)
    if sections:
        return ""
    # No recognizable sections: keep the prose, drop fenced code.
    prose = _FENCED_BLOCK_RE.sub("", model_output).strip()
    if _BARE_STATEMENT_RE.match(prose):
        return ""
    return prose
