from bibscholar.core.bibliography import Entry, FieldRecord, persons_from_fields, split_persons


def test_split_persons_handles_both_name_orders() -> None:
    persons = split_persons("Doe, Jane and John {van} Smith")

    assert [person["last"] for person in persons] == [["Doe"], ["Smith"]]
    assert persons[0]["first"] == ["Jane"]


def test_persons_from_fields_only_reports_present_roles() -> None:
    persons = persons_from_fields({"author": "Doe, Jane", "title": "Ignored"})

    assert list(persons) == ["author"]
    assert persons["author"][0]["text"] == "Doe, Jane"


def test_entry_portable_representation() -> None:
    record = FieldRecord(type="book", id="Key", fields={"editor": "Roe, Richard"})
    entry = Entry(fields=record, source="@book{Key,\n}\n", source_path="notes/key.md")

    portable = entry.to_portable()

    assert portable["key"] == "Key"
    assert portable["type"] == "book"
    assert portable["source_files"] == ["notes/key.md"]
    assert portable["persons"]["editor"][0]["last"] == ["Roe"]
