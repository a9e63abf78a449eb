import json
from pathlib import Path
import textwrap

from typer.testing import CliRunner

from bibscholar.cli import app


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).strip() + "\n", encoding="utf-8")
    return path


def _vault(tmp_path: Path) -> Path:
    _write(
        tmp_path / "notes" / "doe.md",
        """
        # Doe

        ```bibtex
        @article{Doe2021,
          title = {Graph Methods},
          author = {Doe, Jane},
          abstract = {Long text.},
          year = {2021}
        }
        ```
        """,
    )
    _write(
        tmp_path / "notes" / "roe.md",
        """
        ```bibtex
        @book{Roe2019,
          title = {Field Notes},
          author = {Roe, Richard},
          year = {2019}
        }
        ```
        """,
    )
    return tmp_path


def _invoke(vault: Path, *args: str):
    return CliRunner().invoke(app, ["--vault", str(vault), *args])


def _scanned(tmp_path: Path) -> Path:
    vault = _vault(tmp_path)
    result = _invoke(vault, "scan")
    assert result.exit_code == 0, result.output
    return vault


def test_scan_caches_entries_and_writes_index(tmp_path: Path) -> None:
    vault = _vault(tmp_path)

    result = _invoke(vault, "scan")

    assert result.exit_code == 0, result.output
    assert "Bibliography Documents" in result.output
    assert "Scanned 2 documents: 2 cached, 0 duplicates." in result.output
    payload = json.loads((vault / ".bibscholar" / "index.json").read_text(encoding="utf-8"))
    assert list(payload["bibtex_dict"]) == ["Doe2021", "Roe2019"]
    assert payload["bibtex_dict"]["Doe2021"]["source_path"] == "notes/doe.md"


def test_scan_reports_cross_document_duplicates(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)
    _write(vault / "later.md", "```bibtex\n@misc{Doe2021, note = {Copy}}\n```")

    result = _invoke(vault, "scan")

    assert result.exit_code == 0, result.output
    assert "1 duplicates" in result.output
    assert "Warnings" in result.output


def test_search_ids_prints_matches(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)

    result = _invoke(vault, "search", "author:doe;year:2021", "--ids")

    assert result.exit_code == 0, result.output
    assert result.output.split() == ["Doe2021"]


def test_search_table_and_empty_result(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)

    found = _invoke(vault, "search", "field notes")
    missing = _invoke(vault, "search", "year:1850")

    assert "Roe2019" in found.output
    assert "Doe2021" not in found.output
    assert "No matching references." in missing.output


def test_show_renders_entry_panel(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)

    result = _invoke(vault, "show", "`{Doe2021}`")

    assert result.exit_code == 0, result.output
    assert "Doe2021 (article)" in result.output
    assert "Graph Methods" in result.output
    assert "Jane Doe" in result.output
    assert "Doe2021.pdf" in result.output


def test_show_source_prints_cached_bibtex(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)

    result = _invoke(vault, "show", "Roe2019", "--source")

    assert result.exit_code == 0, result.output
    assert result.output.startswith("@book{Roe2019,\n")


def test_show_unknown_id_fails(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)

    result = _invoke(vault, "show", "Nope")

    assert result.exit_code == 1
    assert "No cached entry for 'Nope'." in result.output


def test_cite_styles(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)

    collapsed = _invoke(vault, "cite", "Doe2021")
    latex = _invoke(vault, "cite", "Doe2021", "--style", "latex")

    assert collapsed.output.strip() == "`{Doe2021}`"
    assert latex.output.strip() == "\\autocite{Doe2021}"


def test_export_without_abstract(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)

    result = _invoke(vault, "export", "--no-abstract")

    assert result.exit_code == 0, result.output
    assert "@article{Doe2021,\n" in result.output
    assert "@book{Roe2019,\n" in result.output
    assert "abstract" not in result.output


def test_export_to_file(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)
    target = tmp_path / "out" / "refs.bib"

    result = _invoke(vault, "export", "--output", str(target))

    assert result.exit_code == 0, result.output
    assert "Exported 2 entries" in result.output
    assert "abstract = {Long text.}," in target.read_text(encoding="utf-8")


def test_parse_previews_entries_and_flags_duplicates(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)
    bib_file = _write(
        tmp_path / "incoming.bib",
        """
        @article{Doe2021, title = {Clash}}
        @misc{Fresh, title = {New}}
        """,
    )

    result = _invoke(vault, "parse", str(bib_file))

    assert result.exit_code == 0, result.output
    assert "Doe2021 (article) (duplicate id)" in result.output
    assert "Fresh (misc)" in result.output
    assert "Fresh (misc) (duplicate id)" not in result.output


def test_parse_without_entries_fails(tmp_path: Path) -> None:
    bib_file = _write(tmp_path / "empty.bib", "nothing to see")

    result = _invoke(tmp_path, "parse", str(bib_file))

    assert result.exit_code == 1
    assert "No BibTeX entries found" in result.output


def test_index_maintenance_commands(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)

    assert "Uncached Doe2021" in _invoke(vault, "uncache", "Doe2021").output
    assert "Nothing changed." in _invoke(vault, "uncache", "Doe2021").output

    moved = _invoke(vault, "move", "notes/roe.md", "archive/roe.md")
    assert "Moved entries" in moved.output
    assert "Forgot entries" in _invoke(vault, "forget", "archive/roe.md").output

    assert "Nothing changed." in _invoke(vault, "clear", "--yes").output
    assert "No references found." in _invoke(vault, "list").output


def test_clear_after_confirmation(tmp_path: Path) -> None:
    vault = _scanned(tmp_path)

    declined = CliRunner().invoke(app, ["--vault", str(vault), "clear"], input="n\n")
    assert declined.exit_code == 1
    assert "Roe2019" in _invoke(vault, "list").output

    result = _invoke(vault, "clear", "--yes")
    assert "Cleared the index." in result.output


def test_index_and_config_options(tmp_path: Path) -> None:
    vault = _vault(tmp_path)
    _write(vault / "settings.yml", "document_suffixes: [.txt]")
    _write(vault / "extra.txt", "```bibtex\n@misc{Txt, note = {x}}\n```")
    index_file = tmp_path / "custom.json"

    result = CliRunner().invoke(
        app,
        [
            "--vault",
            str(vault),
            "--index",
            str(index_file),
            "--config",
            str(vault / "settings.yml"),
            "scan",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(index_file.read_text(encoding="utf-8"))
    assert list(payload["bibtex_dict"]) == ["Txt"]


def test_invalid_config_fails(tmp_path: Path) -> None:
    _write(tmp_path / "bibscholar.yml", "no_such_option: true")

    result = _invoke(tmp_path, "list")

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
