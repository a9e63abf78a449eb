"""Bibliography-related CLI helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bibscholar.core.bibliography import BibliographyIssue, Entry
from bibscholar.core.references import linked_paths
from bibscholar.core.session import ScanReport


def format_bibliography_person(person: Mapping[str, object]) -> str:
    """Render a bibliography person dictionary into a readable string."""
    parts: list[str] = []
    for field in ("first", "middle", "prelast", "last", "lineage"):
        value = person.get(field)
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
            parts.extend(str(segment) for segment in value if segment)
        elif isinstance(value, str) and value.strip():
            parts.append(value.strip())

    text = " ".join(part for part in parts if part)
    if text:
        return text
    fallback = person.get("text")
    return str(fallback).strip() if isinstance(fallback, str) else ""


def format_person_list(persons: Iterable[Mapping[str, object]]) -> str:
    names = [format_bibliography_person(person) for person in persons]
    return ", ".join(name for name in names if name)


def build_reference_panel(
    entry: Entry,
    *,
    duplicate: bool = False,
    note_suffix: str = ".md",
    pdf_suffix: str = ".pdf",
) -> Panel:
    """Create a Rich panel that visualises a single cached entry."""
    reference = entry.to_portable()
    fields = dict(reference["fields"])
    grid = Table.grid(padding=(0, 1))
    grid.add_column(style="bold green", no_wrap=True)
    grid.add_column()

    def _pop_field(*keys: str) -> str | None:
        for key in keys:
            value = fields.pop(key, None)
            if value:
                return value
        return None

    def _add_field(label: str, value: object) -> None:
        if value is None:
            return
        if isinstance(value, str) and not value.strip():
            return
        grid.add_row(label, Text(str(value)))

    _add_field("Title", _pop_field("title"))
    _add_field("Year", _pop_field("year"))
    _add_field("Journal", _pop_field("journal", "booktitle"))

    authors = reference["persons"].get("author")
    if authors:
        fields.pop("author", None)
        _add_field("Authors", format_person_list(authors))

    links = linked_paths(entry, note_suffix=note_suffix, pdf_suffix=pdf_suffix)
    _add_field("Source", links.source)
    _add_field("Note", links.note)
    _add_field("PDF", links.pdf)

    for key, value in sorted(fields.items()):
        _add_field(key.title(), value)

    title = f"{reference['key']} ({reference['type']})"
    if duplicate:
        title = f"{title} (duplicate id)"
    return Panel(
        grid,
        title=Text(title),
        box=box.SIMPLE,
        border_style="red" if duplicate else "none",
    )


def print_entries(
    console: Console,
    entries: Sequence[Entry],
    *,
    note_suffix: str = ".md",
    pdf_suffix: str = ".pdf",
) -> None:
    if not entries:
        console.print("[dim]No references found.[/]")
        return

    for entry in entries:
        console.print(
            build_reference_panel(entry, note_suffix=note_suffix, pdf_suffix=pdf_suffix)
        )
        console.print()


def print_issues(console: Console, issues: Sequence[BibliographyIssue]) -> None:
    if not issues:
        return
    issue_table = Table(
        title="Warnings",
        box=box.SIMPLE,
        header_style="bold yellow",
        show_edge=True,
    )
    issue_table.add_column("Key", style="yellow", no_wrap=True)
    issue_table.add_column("Message", style="yellow")
    issue_table.add_column("Source", style="yellow")
    for issue in issues:
        issue_table.add_row(
            Text(issue.key or "-"), Text(issue.message), Text(issue.source or "-")
        )
    console.print(issue_table)


def print_scan_report(
    console: Console,
    report: ScanReport,
    issues: Sequence[BibliographyIssue],
) -> None:
    """Print per-document entry counts, warnings and a summary line."""
    documents = [(path, count) for path, count in report.documents if count]
    if documents:
        stats_table = Table(
            title="Bibliography Documents",
            box=box.SIMPLE,
            show_edge=True,
            header_style="bold cyan",
        )
        stats_table.add_column("Document", overflow="fold")
        stats_table.add_column("Entries", justify="right")
        for source_path, count in documents:
            stats_table.add_row(source_path, str(count))
        console.print(stats_table)

    print_issues(console, issues)

    for source_path in report.pruned:
        console.print(f"[dim]Pruned entries from missing document {source_path}[/]")

    console.print(
        f"Scanned {len(report.documents)} documents: "
        f"{report.cached} cached, {report.duplicates} duplicates."
    )


def print_search_results(console: Console, entries: Sequence[Entry]) -> None:
    if not entries:
        console.print("[dim]No matching references.[/]")
        return

    table = Table(box=box.SIMPLE, header_style="bold cyan", show_edge=True)
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Title", overflow="fold")
    table.add_column("Authors", overflow="fold")
    table.add_column("Year", justify="right")
    for entry in entries:
        record = entry.fields
        table.add_row(
            Text(record.id),
            Text(record.fields.get("title", "")),
            Text(record.fields.get("author", "")),
            Text(record.fields.get("year", "")),
        )
    console.print(table)


__all__ = [
    "build_reference_panel",
    "format_bibliography_person",
    "format_person_list",
    "print_entries",
    "print_issues",
    "print_scan_report",
    "print_search_results",
]
