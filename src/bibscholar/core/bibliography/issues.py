"""Shared data structures for reporting ingestion problems."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class BibliographyIssue:
    """Represents a problem encountered while ingesting bibliography entries."""

    message: str
    key: str | None = None
    source: str | None = None


__all__ = ["BibliographyIssue"]
