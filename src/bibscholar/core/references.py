"""Inline citation references and the snippets offered for copying.

Notes cite entries with inline code spans: `` `{id}` `` renders a collapsed
reference and `` `[id]` `` an expanded one.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
import re

from .bibliography import Entry, EntryIndex


REFERENCE_PATTERN = re.compile(r"`(?:\{(?P<collapsed>[^}\]`]+)\}|\[(?P<expanded>[^}\]`]+)\])`")
_BARE_REFERENCE = re.compile(r"^`?(?:\{(?P<collapsed>[^}\]`]+)\}|\[(?P<expanded>[^}\]`]+)\])`?$")


class CitationStyle(str, Enum):
    """Snippet flavours offered next to a rendered entry."""

    ID = "id"
    COLLAPSED = "collapsed"
    EXPANDED = "expanded"
    LATEX = "latex"


@dataclass(frozen=True, slots=True)
class InlineReference:
    """One citation reference found in a document."""

    id: str
    expanded: bool
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class ResolvedReference:
    """Lookup result for a reference; ``entry`` is ``None`` when not cached."""

    id: str
    expanded: bool
    entry: Entry | None

    @property
    def found(self) -> bool:
        return self.entry is not None


@dataclass(frozen=True, slots=True)
class LinkedPaths:
    note: str
    pdf: str
    source: str


def _reference_from_match(match: re.Match[str]) -> tuple[str, bool]:
    collapsed = match.group("collapsed")
    if collapsed is not None:
        return collapsed, False
    return match.group("expanded"), True


def find_references(text: str) -> Iterator[InlineReference]:
    """Yield every inline reference of ``text`` in document order."""
    for match in REFERENCE_PATTERN.finditer(text):
        key, expanded = _reference_from_match(match)
        yield InlineReference(id=key, expanded=expanded, start=match.start(), end=match.end())


def resolve_reference(index: EntryIndex, token: str) -> ResolvedReference | None:
    """Resolve a ``{id}`` / ``[id]`` token, with or without backticks.

    Returns ``None`` when ``token`` is not reference syntax at all.
    """
    match = _BARE_REFERENCE.match(token.strip())
    if match is None:
        return None
    key, expanded = _reference_from_match(match)
    return ResolvedReference(id=key, expanded=expanded, entry=index.get(key))


def missing_references(index: EntryIndex, text: str) -> list[InlineReference]:
    """Return references of ``text`` whose id is not cached."""
    return [reference for reference in find_references(text) if reference.id not in index]


def citation_snippet(
    key: str,
    style: CitationStyle | str = CitationStyle.ID,
    *,
    command: str = "autocite",
) -> str:
    """Return the clipboard text citing ``key`` in the requested style."""
    style = CitationStyle(style)
    if style is CitationStyle.COLLAPSED:
        return f"`{{{key}}}`"
    if style is CitationStyle.EXPANDED:
        return f"`[{key}]`"
    if style is CitationStyle.LATEX:
        return f"\\{command}{{{key}}}"
    return key


def linked_paths(entry: Entry, *, note_suffix: str = ".md", pdf_suffix: str = ".pdf") -> LinkedPaths:
    """Return the note, PDF and source document linked to ``entry``."""
    return LinkedPaths(
        note=f"{entry.id}{note_suffix}",
        pdf=f"{entry.id}{pdf_suffix}",
        source=entry.source_path,
    )


__all__ = [
    "REFERENCE_PATTERN",
    "CitationStyle",
    "InlineReference",
    "LinkedPaths",
    "ResolvedReference",
    "citation_snippet",
    "find_references",
    "linked_paths",
    "missing_references",
    "resolve_reference",
]
