"""Canonical BibTeX rendering for parsed records."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import re

from .records import Entry, FieldRecord


_AMPERSAND = re.compile(r"(?<!\\)&")


def escape_latex_ampersand(value: str) -> str:
    """Escape bare ``&`` characters so LaTeX does not read them as alignment tabs."""
    return _AMPERSAND.sub(r"\\&", value)


def make_bibtex(record: FieldRecord, include_abstract: bool = True) -> str:
    """Render ``record`` as a canonical BibTeX entry.

    Abstracts are dropped when ``include_abstract`` is false; raw abstract text
    often contains characters that break LaTeX compilation.
    """
    lines = [f"@{record.type}{{{record.id},\n"]
    for key, value in record.fields.items():
        if key in ("type", "id"):
            continue
        if key == "abstract" and not include_abstract:
            continue
        lines.append(f"  {key} = {{{escape_latex_ampersand(value)}}},\n")
    lines.append("}\n")
    return "".join(lines)


def export_bibliography(entries: Iterable[Entry], include_abstract: bool = True) -> str:
    """Serialize every entry and join them with a blank line."""
    return "\n".join(make_bibtex(entry.fields, include_abstract) for entry in entries)


def concatenate_sources(entries: Iterable[Entry]) -> str:
    """Join the cached sources verbatim, one blank line after each."""
    return "".join(f"{entry.source}\n\n" for entry in entries)


def write_bibtex(
    target: Path | str,
    entries: Iterable[Entry],
    *,
    include_abstract: bool = True,
) -> Path:
    """Persist the serialized entries to a ``.bib`` file."""
    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_bibliography(entries, include_abstract), encoding="utf-8")
    return path


__all__ = [
    "concatenate_sources",
    "escape_latex_ampersand",
    "export_bibliography",
    "make_bibtex",
    "write_bibtex",
]
