"""Citation index keyed by BibTeX id, with duplicate detection."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
import logging
import re
from threading import RLock
from typing import Any

from .parsing import strip_newlines
from .query import match_query
from .records import Entry, FieldRecord
from .serializer import make_bibtex


logger = logging.getLogger(__name__)


class DuplicateReason(str, Enum):
    """Why an incoming record was refused."""

    SAME_DOCUMENT = "same-document"
    OTHER_DOCUMENT = "other-document"


@dataclass(frozen=True, slots=True)
class UpsertResult:
    """Outcome of offering one parsed record to the index."""

    id: str
    duplicate: bool = False
    changed: bool = False
    reason: DuplicateReason | None = None
    existing_source_path: str | None = None


def count_entry_occurrences(record: FieldRecord, document_text: str) -> int:
    """Count ``@<type>{<id>,`` headers for ``record`` in a document.

    Any entry type counts, since a ``type`` field in the body may have replaced
    the header type on the record; the id is compared verbatim.
    """
    pattern = re.compile(rf"@[A-Za-z]+\{{{re.escape(record.id)},")
    return len(pattern.findall(strip_newlines(document_text)))


class EntryIndex:
    """Own the ``id -> Entry`` mapping shared by every collaborator."""

    def __init__(self, entries: Mapping[str, Entry] | None = None) -> None:
        self._entries: dict[str, Entry] = dict(entries or {})
        self._lock = RLock()
        self._dirty = False

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    @property
    def dirty(self) -> bool:
        """Return whether the index changed since the last save."""
        return self._dirty

    def mark_clean(self) -> None:
        self._dirty = False

    def get(self, key: str) -> Entry | None:
        """Return the entry cached under ``key`` or ``None``."""
        return self._entries.get(key)

    def ids(self) -> list[str]:
        return list(self._entries)

    def entries(self) -> list[Entry]:
        return list(self._entries.values())

    def is_duplicate(
        self,
        record: FieldRecord,
        source_path: str,
        document_text: str | None = None,
    ) -> UpsertResult | None:
        """Return a duplicate verdict for ``record`` or ``None`` when it may be stored."""
        if document_text is not None and count_entry_occurrences(record, document_text) > 1:
            return UpsertResult(
                id=record.id,
                duplicate=True,
                reason=DuplicateReason.SAME_DOCUMENT,
                existing_source_path=source_path,
            )
        existing = self._entries.get(record.id)
        if existing is not None and existing.source_path != source_path:
            return UpsertResult(
                id=record.id,
                duplicate=True,
                reason=DuplicateReason.OTHER_DOCUMENT,
                existing_source_path=existing.source_path,
            )
        return None

    def upsert(
        self,
        record: FieldRecord,
        source_path: str,
        document_text: str | None = None,
    ) -> UpsertResult:
        """Store ``record`` unless it collides with another definition of its id."""
        with self._lock:
            verdict = self.is_duplicate(record, source_path, document_text)
            if verdict is not None:
                logger.debug(
                    "Refusing duplicate id %r from %s (%s).",
                    record.id,
                    source_path,
                    verdict.reason.value if verdict.reason else "unknown",
                )
                return verdict

            source = make_bibtex(record)
            existing = self._entries.get(record.id)
            if existing is not None and existing.source == source:
                return UpsertResult(id=record.id)

            self._entries[record.id] = Entry(fields=record, source=source, source_path=source_path)
            self._dirty = True
            return UpsertResult(id=record.id, changed=True)

    def remove(self, key: str) -> bool:
        """Drop the entry cached under ``key``."""
        with self._lock:
            if self._entries.pop(key, None) is None:
                return False
            self._dirty = True
            return True

    def remove_source_path(self, source_path: str) -> bool:
        """Drop every entry contributed by ``source_path``."""
        with self._lock:
            doomed = [key for key, entry in self._entries.items() if entry.source_path == source_path]
            for key in doomed:
                del self._entries[key]
            if doomed:
                self._dirty = True
            return bool(doomed)

    def rename_source_path(self, old_path: str, new_path: str) -> bool:
        """Point entries owned by ``old_path`` at ``new_path``."""
        if old_path == new_path:
            return False
        with self._lock:
            changed = False
            for entry in self._entries.values():
                if entry.source_path == old_path:
                    entry.source_path = new_path
                    changed = True
            if changed:
                self._dirty = True
            return changed

    def clear(self) -> bool:
        """Drop every entry."""
        with self._lock:
            if not self._entries:
                return False
            self._entries.clear()
            self._dirty = True
            return True

    def search(self, query: str) -> list[str]:
        """Return the ids of entries matching ``query`` in insertion order."""
        return [key for key, entry in list(self._entries.items()) if match_query(entry, query)]

    def source_paths(self) -> set[str]:
        return {entry.source_path for entry in self._entries.values()}

    def to_payload(self) -> dict[str, Any]:
        """Return the persisted blob for the whole index."""
        return {
            "bibtex_dict": {key: entry.to_payload() for key, entry in self._entries.items()}
        }

    def load_payload(self, payload: Mapping[str, Any] | None) -> None:
        """Replace the cached entries with a persisted blob, defaulting missing keys."""
        raw = (payload or {}).get("bibtex_dict")
        if not isinstance(raw, Mapping):
            raw = {}
        entries: dict[str, Entry] = {}
        for key, value in raw.items():
            if not isinstance(value, Mapping):
                continue
            entry = Entry.from_payload(value)
            # The mapping key is authoritative for the cached id.
            entry.fields.id = str(key)
            entries[str(key)] = entry
        with self._lock:
            self._entries = entries
            self._dirty = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> EntryIndex:
        index = cls()
        index.load_payload(payload)
        return index


__all__ = ["DuplicateReason", "EntryIndex", "UpsertResult", "count_entry_occurrences"]
