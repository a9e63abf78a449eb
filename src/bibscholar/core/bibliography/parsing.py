"""Parsing helpers for BibTeX payloads embedded in notes.

The scanner follows the lenient behaviour of the note plugin that
produced the persisted indexes: entries are bounded by the next ``@``, the
citation id is kept verbatim and field bodies are read by a two-state machine
that understands nested braces but not quoted values.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
import logging
import re

from .records import FieldRecord


logger = logging.getLogger(__name__)

# A literal "@" inside a field value ends the entry early.
ENTRY_PATTERN = re.compile(r"@([a-zA-Z]+)\{([^,]+),([^@]*)\}")

_NEWLINES = re.compile(r"\r?\n")
_KEY_TRIM = re.compile(r"^[, ]+|[, ]+$")
_VALUE_LEAD = re.compile(r"^[ ]+")
_VALUE_TRAIL = re.compile(r"[, ]+$")
_STRICT_BLANK = " \t\r\f\v"


class _Mode(Enum):
    KEY = "key"
    VALUE = "value"


def strip_newlines(text: str) -> str:
    """Remove line breaks so multi-line entries form a single scanning unit."""
    return _NEWLINES.sub("", text)


def _finish_value(buffer: str, *, strict: bool) -> str:
    if strict:
        value = buffer.strip(_STRICT_BLANK).rstrip(f",{_STRICT_BLANK}")
    else:
        value = _VALUE_TRAIL.sub("", _VALUE_LEAD.sub("", buffer))
    if value.startswith("{") or (strict and value.endswith("}")):
        value = f'"{value}"'
    return value


def _finish_key(buffer: str, *, strict: bool) -> str:
    if strict:
        return buffer.strip(f",{_STRICT_BLANK}").lower()
    return _KEY_TRIM.sub("", buffer).lower()


def scan_fields(body: str, *, strict: bool = False) -> list[tuple[str, str]]:
    """Split an entry body into ``(key, value)`` pairs in source order.

    Keys accumulate until ``=``. Values accumulate until the braces opened for
    the field are balanced again or, for bare values, until a ``,`` or ``}`` or
    the end of the body. Keys that never receive a value are dropped.
    """
    pairs: list[tuple[str, str]] = []
    mode = _Mode.KEY
    buffer = ""
    pending_key = ""
    depth = 0
    opened = 0
    last_index = len(body) - 1

    for index, char in enumerate(body):
        if mode is _Mode.KEY:
            if char == "=":
                pending_key = _finish_key(buffer, strict=strict)
                buffer = ""
                mode = _Mode.VALUE
            else:
                buffer += char
            continue

        buffer += char
        if char == "{":
            depth += 1
            opened += 1
            # The wrapping brace is not part of the value.
            if opened == 1:
                buffer = ""
        elif char == "}":
            depth = max(depth - 1, 0)
            if depth == 0:
                buffer = buffer[:-1]

        braced_done = opened > 0 and depth == 0
        bare_done = opened == 0 and (char in ",}" or index == last_index)
        if braced_done or bare_done:
            pairs.append((pending_key, _finish_value(buffer, strict=strict)))
            buffer = ""
            depth = 0
            opened = 0
            mode = _Mode.KEY

    return pairs


def iter_bibtex(
    source: str,
    lowercase_type: bool = True,
    *,
    strict: bool = False,
) -> Iterator[FieldRecord]:
    """Yield one record per entry found in ``source``, in document order."""
    for match in ENTRY_PATTERN.finditer(strip_newlines(source)):
        entry_type, entry_id, body = match.groups()
        if strict:
            entry_id = entry_id.strip()
        record = FieldRecord(type=entry_type, id=entry_id)

        for key, value in scan_fields(body, strict=strict):
            if key == "type":
                if not strict:
                    record.type = value
            elif key == "id":
                if not strict:
                    record.id = value
            else:
                record.fields[key] = value

        if lowercase_type:
            record.type = record.type.lower()
        yield record


def parse_bibtex(
    source: str,
    lowercase_type: bool = True,
    *,
    strict: bool = False,
) -> list[FieldRecord]:
    """Parse every ``@type{id, ...}`` entry of ``source``.

    Text without any recognisable entry yields an empty list.
    """
    records = list(iter_bibtex(source, lowercase_type, strict=strict))
    if not records:
        logger.debug("No BibTeX entries found in %d characters of input.", len(source))
    return records


__all__ = [
    "ENTRY_PATTERN",
    "iter_bibtex",
    "parse_bibtex",
    "scan_fields",
    "strip_newlines",
]
