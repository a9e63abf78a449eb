from pathlib import Path

from bibscholar.core.bibliography import (
    Entry,
    FieldRecord,
    concatenate_sources,
    escape_latex_ampersand,
    export_bibliography,
    make_bibtex,
    parse_bibtex,
    write_bibtex,
)


def _record() -> FieldRecord:
    return FieldRecord(
        type="article",
        id="Doe2021",
        fields={
            "title": "A {Great} Study",
            "author": "Jane Doe",
            "abstract": "We study things.",
            "year": "2021",
        },
    )


def test_make_bibtex_renders_canonical_layout() -> None:
    assert make_bibtex(_record()) == (
        "@article{Doe2021,\n"
        "  title = {A {Great} Study},\n"
        "  author = {Jane Doe},\n"
        "  abstract = {We study things.},\n"
        "  year = {2021},\n"
        "}\n"
    )


def test_make_bibtex_can_drop_abstract() -> None:
    rendered = make_bibtex(_record(), include_abstract=False)

    assert "abstract" not in rendered
    assert "  year = {2021},\n" in rendered


def test_make_bibtex_escapes_ampersands_once() -> None:
    record = FieldRecord(
        type="book",
        id="Key",
        fields={"publisher": "Smith & Sons", "journal": "Already \\& escaped"},
    )

    rendered = make_bibtex(record)

    assert "  publisher = {Smith \\& Sons},\n" in rendered
    assert "  journal = {Already \\& escaped},\n" in rendered
    assert escape_latex_ampersand("a & b & c") == "a \\& b \\& c"


def test_parse_of_serialized_record_round_trips() -> None:
    record = _record()

    assert parse_bibtex(make_bibtex(record)) == [record]


def test_round_trip_is_stable_for_quoted_values() -> None:
    [first] = parse_bibtex("@misc{Key, title = {{NASA} rockets}}")

    assert parse_bibtex(make_bibtex(first)) == [first]


def test_export_and_concatenate_entries() -> None:
    first = Entry(fields=_record(), source="@article{Doe2021, cached}", source_path="a.md")
    second = Entry(
        fields=FieldRecord(type="misc", id="Other", fields={"note": "x"}),
        source="@misc{Other, cached}",
        source_path="b.md",
    )

    exported = export_bibliography([first, second], include_abstract=False)
    assert exported == (
        make_bibtex(first.fields, include_abstract=False)
        + "\n"
        + make_bibtex(second.fields, include_abstract=False)
    )
    assert [record.id for record in parse_bibtex(exported)] == ["Doe2021", "Other"]

    assert concatenate_sources([first, second]) == (
        "@article{Doe2021, cached}\n\n@misc{Other, cached}\n\n"
    )


def test_write_bibtex_creates_parent_directories(tmp_path: Path) -> None:
    entry = Entry(fields=_record(), source="", source_path="a.md")
    target = tmp_path / "out" / "refs.bib"

    written = write_bibtex(target, [entry], include_abstract=False)

    assert written == target
    assert target.read_text(encoding="utf-8") == make_bibtex(entry.fields, False)
