"""Typer application wiring for the bibscholar CLI."""

from __future__ import annotations

from pathlib import Path

from rich.traceback import Traceback
import typer

from bibscholar.core.bibliography import (
    Entry,
    concatenate_sources,
    export_bibliography,
    make_bibtex,
    parse_bibtex,
    write_bibtex,
)
from bibscholar.core.config import DEFAULT_CONFIG_NAME, load_config
from bibscholar.core.exceptions import BibScholarError, ReferenceNotFoundError
from bibscholar.core.references import CitationStyle, citation_snippet, resolve_reference
from bibscholar.core.session import ScholarSession
from bibscholar.core.storage import JsonIndexStore
from bibscholar.version import get_version

from .bibliography import (
    build_reference_panel,
    print_entries,
    print_scan_report,
    print_search_results,
)
from .diagnostics import CliEmitter
from .state import debug_enabled, emit_error, emit_warning, get_cli_state, set_cli_state


app = typer.Typer(
    help="Maintain the BibTeX bibliography embedded in a Markdown vault.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit(code=0)


@app.callback()
def _app_root(
    vault: Path = typer.Option(
        Path("."),
        "--vault",
        help="Root directory of the Markdown vault.",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    index_file: Path | None = typer.Option(
        None,
        "--index",
        help="Index file to use instead of the configured location.",
        dir_okay=False,
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        help=f"Configuration file (defaults to {DEFAULT_CONFIG_NAME} in the vault).",
        dir_okay=False,
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        help="Show full tracebacks when an unexpected error occurs.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the installed version and exit.",
    ),
) -> None:
    set_cli_state(
        verbosity=verbose,
        debug=debug,
        vault=vault,
        index_file=index_file,
        config_file=config_file,
    )


def _open_session() -> ScholarSession:
    state = get_cli_state()
    try:
        config = load_config(state.config_file or state.vault / DEFAULT_CONFIG_NAME)
        index_path = state.index_file or config.resolve_index_file(state.vault)
        session = ScholarSession(
            store=JsonIndexStore(index_path),
            emitter=CliEmitter(state),
            config=config,
        )
        session.load()
    except BibScholarError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc
    return session


def _require(session: ScholarSession, key: str) -> Entry:
    resolved = resolve_reference(session.index, key)
    lookup = resolved.id if resolved is not None else key
    try:
        return session.require(lookup)
    except ReferenceNotFoundError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


def _report_unchanged() -> None:
    get_cli_state().console.print("[dim]Nothing changed.[/]")


@app.command()
def scan(
    prune: bool = typer.Option(
        False,
        "--prune",
        help="Forget entries whose source document no longer exists.",
    ),
) -> None:
    """Ingest every BibTeX block found in the vault documents."""
    state = get_cli_state()
    session = _open_session()
    report = session.process_vault(state.vault, prune=prune)
    print_scan_report(state.console, report, session.issues)


@app.command(name="list")
def list_entries() -> None:
    """Print every cached entry."""
    session = _open_session()
    print_entries(
        get_cli_state().console,
        session.index.entries(),
        note_suffix=session.config.note_suffix,
        pdf_suffix=session.config.pdf_suffix,
    )


@app.command()
def search(
    query: str = typer.Argument(
        ...,
        help="Clauses separated by ';'. Use 'field:text' to search one field.",
    ),
    ids_only: bool = typer.Option(False, "--ids", help="Print matching ids only."),
) -> None:
    """Search the cached entries."""
    session = _open_session()
    ids = session.search(query)
    if ids_only:
        for key in ids:
            typer.echo(key)
        return
    entries = [entry for entry in (session.lookup(key) for key in ids) if entry is not None]
    print_search_results(get_cli_state().console, entries)


@app.command()
def show(
    key: str = typer.Argument(..., help="Citation id, or a {id} / [id] reference."),
    source: bool = typer.Option(False, "--source", help="Print the cached BibTeX source."),
) -> None:
    """Show a single cached entry."""
    session = _open_session()
    entry = _require(session, key)
    if source:
        typer.echo(entry.source, nl=False)
        return
    get_cli_state().console.print(
        build_reference_panel(
            entry,
            note_suffix=session.config.note_suffix,
            pdf_suffix=session.config.pdf_suffix,
        )
    )


@app.command()
def cite(
    key: str = typer.Argument(..., help="Citation id to cite."),
    style: CitationStyle = typer.Option(
        CitationStyle.COLLAPSED,
        "--style",
        "-s",
        case_sensitive=False,
        help="Snippet flavour to print.",
    ),
) -> None:
    """Print a citation snippet for a cached entry."""
    session = _open_session()
    entry = _require(session, key)
    typer.echo(citation_snippet(entry.id, style, command=session.config.citation_command))


@app.command()
def export(
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the bibliography to this file instead of stdout.",
        dir_okay=False,
    ),
    no_abstract: bool = typer.Option(
        False,
        "--no-abstract",
        help="Drop abstract fields even when the configuration keeps them.",
    ),
    raw: bool = typer.Option(
        False,
        "--raw",
        help="Concatenate the cached sources instead of re-serializing entries.",
    ),
) -> None:
    """Export the cached entries as BibTeX."""
    session = _open_session()
    entries = session.index.entries()
    include_abstract = session.config.include_abstract and not no_abstract
    if output is not None:
        if raw:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(concatenate_sources(entries), encoding="utf-8")
        else:
            write_bibtex(output, entries, include_abstract=include_abstract)
        get_cli_state().console.print(f"Exported {len(entries)} entries to {output}")
        return
    if raw:
        typer.echo(concatenate_sources(entries), nl=False)
    else:
        typer.echo(export_bibliography(entries, include_abstract), nl=False)


@app.command()
def parse(
    bib_file: Path = typer.Argument(
        ...,
        metavar="BIBFILE",
        help="BibTeX file to parse without touching the index.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Parse a BibTeX file and preview its entries."""
    session = _open_session()
    text = bib_file.read_text(encoding="utf-8")
    records = parse_bibtex(text, session.config.lowercase_type, strict=session.config.strict)
    if not records:
        emit_warning(f"No BibTeX entries found in '{bib_file}'.")
        raise typer.Exit(code=1)

    source_path = bib_file.name
    console = get_cli_state().console
    for record in records:
        verdict = session.index.is_duplicate(record, source_path, text)
        entry = Entry(fields=record, source=make_bibtex(record), source_path=source_path)
        console.print(
            build_reference_panel(
                entry,
                duplicate=verdict is not None,
                note_suffix=session.config.note_suffix,
                pdf_suffix=session.config.pdf_suffix,
            )
        )


@app.command()
def uncache(key: str = typer.Argument(..., help="Citation id to forget.")) -> None:
    """Remove a single entry from the index."""
    session = _open_session()
    if session.uncache(key):
        get_cli_state().console.print(f"Uncached {key}")
    else:
        _report_unchanged()


@app.command()
def forget(
    document: str = typer.Argument(..., help="Vault-relative path of a deleted document."),
) -> None:
    """Remove every entry contributed by a document."""
    session = _open_session()
    if session.document_deleted(document):
        get_cli_state().console.print(f"Forgot entries from {document}")
    else:
        _report_unchanged()


@app.command()
def move(
    old_path: str = typer.Argument(..., help="Previous vault-relative document path."),
    new_path: str = typer.Argument(..., help="New vault-relative document path."),
) -> None:
    """Follow a document rename."""
    session = _open_session()
    if session.document_renamed(old_path, new_path):
        get_cli_state().console.print(f"Moved entries from {old_path} to {new_path}")
    else:
        _report_unchanged()


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Remove every entry from the index."""
    if not yes:
        typer.confirm("Remove every cached entry?", abort=True)
    session = _open_session()
    if session.clear():
        get_cli_state().console.print("Cleared the index.")
    else:
        _report_unchanged()


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except BibScholarError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc
    except Exception as exc:  # pragma: no cover - defensive catch-all
        state = get_cli_state()
        if state.show_tracebacks:
            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
