import pytest

from bibscholar.core.bibliography import Entry, FieldRecord, match_query, parse_query
from bibscholar.core.bibliography.query import QueryClause


def _entry(**fields: str) -> Entry:
    record = FieldRecord(type="article", id="Smith2020", fields=dict(fields))
    return Entry(fields=record, source="", source_path="notes/a.md")


@pytest.mark.parametrize(
    ("fields", "expected"),
    [
        ({"author": "John Smith", "year": "2020"}, True),
        ({"author": "JOHN SMITH", "year": "2020"}, True),
        ({"author": "John Smith", "year": "2021"}, False),
        ({"author": "Jane Doe", "year": "2020"}, False),
        ({"author": "John Smith"}, False),
        ({"year": "2020"}, False),
    ],
)
def test_field_clauses_are_anded(fields: dict[str, str], expected: bool) -> None:
    assert match_query(_entry(**fields), "author:Smith;year:2020") is expected


def test_bare_clause_searches_every_value() -> None:
    entry = _entry(title="Deep Learning", journal="Nature")

    assert match_query(entry, "nature")
    assert match_query(entry, "smith2020")
    assert match_query(entry, "ARTICLE")
    assert not match_query(entry, "science")


def test_empty_clauses_are_ignored() -> None:
    entry = _entry(title="Deep Learning")

    assert match_query(entry, "")
    assert match_query(entry, ";;")
    assert match_query(entry, ";deep; ;")


def test_field_name_is_case_insensitive_and_split_on_first_colon() -> None:
    entry = _entry(url="https://example.org/paper")

    assert match_query(entry, "URL:https://example.org")
    assert match_query(entry, " url : example.org ")
    assert not match_query(entry, "doi:example")


def test_parse_query_builds_clauses() -> None:
    assert parse_query("Author: Smith ; 2020;") == [
        QueryClause(needle="smith", field="author"),
        QueryClause(needle="2020"),
    ]
