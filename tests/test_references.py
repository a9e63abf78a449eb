import pytest

from bibscholar.core.bibliography import EntryIndex, FieldRecord
from bibscholar.core.references import (
    CitationStyle,
    citation_snippet,
    find_references,
    linked_paths,
    missing_references,
    resolve_reference,
)


@pytest.fixture
def index() -> EntryIndex:
    index = EntryIndex()
    index.upsert(FieldRecord(type="article", id="Doe2021", fields={"title": "T"}), "papers/doe.md")
    return index


def test_find_references_reports_both_styles() -> None:
    text = "See `{Doe2021}` and `[Roe2019]`, but not {Plain} or `code`."

    references = list(find_references(text))

    assert [(ref.id, ref.expanded) for ref in references] == [
        ("Doe2021", False),
        ("Roe2019", True),
    ]
    first = references[0]
    assert text[first.start : first.end] == "`{Doe2021}`"


def test_resolve_reference_distinguishes_found_and_missing(index: EntryIndex) -> None:
    found = resolve_reference(index, "`{Doe2021}`")
    assert found is not None
    assert found.found
    assert found.entry is index.get("Doe2021")
    assert not found.expanded

    missing = resolve_reference(index, "[Unknown]")
    assert missing is not None
    assert not missing.found
    assert missing.expanded
    assert missing.id == "Unknown"

    assert resolve_reference(index, "Doe2021") is None


def test_missing_references_lists_unknown_ids(index: EntryIndex) -> None:
    text = "`{Doe2021}` `{Ghost}` `[Phantom]`"

    assert [ref.id for ref in missing_references(index, text)] == ["Ghost", "Phantom"]


@pytest.mark.parametrize(
    ("style", "expected"),
    [
        (CitationStyle.ID, "Doe2021"),
        (CitationStyle.COLLAPSED, "`{Doe2021}`"),
        (CitationStyle.EXPANDED, "`[Doe2021]`"),
        (CitationStyle.LATEX, "\\autocite{Doe2021}"),
        ("latex", "\\autocite{Doe2021}"),
    ],
)
def test_citation_snippet_styles(style: CitationStyle | str, expected: str) -> None:
    assert citation_snippet("Doe2021", style) == expected


def test_citation_snippet_uses_custom_command() -> None:
    assert citation_snippet("Doe2021", CitationStyle.LATEX, command="citep") == "\\citep{Doe2021}"


def test_linked_paths_follow_the_id(index: EntryIndex) -> None:
    entry = index.get("Doe2021")
    assert entry is not None

    links = linked_paths(entry)

    assert links.note == "Doe2021.md"
    assert links.pdf == "Doe2021.pdf"
    assert links.source == "papers/doe.md"
