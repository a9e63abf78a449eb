"""Person name helpers built on pybtex's BibTeX name grammar."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from pybtex.bibtex.utils import split_name_list
from pybtex.database import Person
from pybtex.exceptions import PybtexError


logger = logging.getLogger(__name__)

PERSON_FIELDS = ("author", "editor")

_NAME_PARTS = (
    ("first_names", "first"),
    ("middle_names", "middle"),
    ("prelast_names", "prelast"),
    ("last_names", "last"),
    ("lineage_names", "lineage"),
)


def person_payload(person: Person) -> dict[str, Any]:
    """Return a JSON-friendly dictionary describing ``person``."""
    payload: dict[str, Any] = {}
    for attribute, key in _NAME_PARTS:
        value = getattr(person, attribute, ())
        payload[key] = [str(part) for part in value]

    payload["text"] = str(person)
    return payload


def split_persons(value: str) -> list[dict[str, Any]]:
    """Split an ``and``-separated name list into person dictionaries."""
    persons: list[dict[str, Any]] = []
    for chunk in split_name_list(value):
        try:
            persons.append(person_payload(Person(chunk)))
        except PybtexError as exc:
            logger.debug("Keeping unparsable name %r verbatim: %s", chunk, exc)
            persons.append({key: [] for _, key in _NAME_PARTS} | {"text": chunk})
    return persons


def persons_from_fields(fields: Mapping[str, str]) -> dict[str, list[dict[str, Any]]]:
    """Return split person lists for every person-valued field present."""
    return {
        role: split_persons(fields[role])
        for role in PERSON_FIELDS
        if fields.get(role)
    }


__all__ = ["PERSON_FIELDS", "person_payload", "persons_from_fields", "split_persons"]
