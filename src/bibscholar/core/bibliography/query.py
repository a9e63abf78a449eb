"""Boolean query matching over cached entries.

A query is a ``;``-separated list of clauses that must all hold. ``field:text``
clauses look inside a single field, bare clauses look inside every value.
Matching is a case-insensitive substring test without ranking.
"""

from __future__ import annotations

from dataclasses import dataclass

from .records import Entry


@dataclass(frozen=True, slots=True)
class QueryClause:
    needle: str
    field: str | None = None

    def matches(self, values: dict[str, str]) -> bool:
        if self.field is not None:
            value = values.get(self.field)
            return value is not None and self.needle in value.lower()
        return any(self.needle in value.lower() for value in values.values())


def parse_query(query: str) -> list[QueryClause]:
    """Split ``query`` into clauses, ignoring empty ones."""
    clauses: list[QueryClause] = []
    for raw in query.split(";"):
        text = raw.strip()
        if not text:
            continue
        if ":" in text:
            field, _, needle = text.partition(":")
            clauses.append(QueryClause(needle=needle.strip().lower(), field=field.strip().lower()))
        else:
            clauses.append(QueryClause(needle=text.lower()))
    return clauses


def match_query(entry: Entry, query: str) -> bool:
    """Return whether ``entry`` satisfies every clause of ``query``."""
    values = entry.fields.as_dict()
    return all(clause.matches(values) for clause in parse_query(query))


__all__ = ["QueryClause", "match_query", "parse_query"]
