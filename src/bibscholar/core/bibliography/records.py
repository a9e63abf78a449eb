"""Record shapes shared by the parser, the serializer and the index."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .persons import persons_from_fields


RESERVED_KEYS = ("type", "id")


@dataclass(slots=True)
class FieldRecord:
    """One parsed BibTeX entry: its type, citation id and free-form fields."""

    type: str
    id: str
    fields: dict[str, str] = field(default_factory=dict)

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return a field value, treating ``type`` and ``id`` as fields."""
        if name == "type":
            return self.type
        if name == "id":
            return self.id
        return self.fields.get(name, default)

    def as_dict(self) -> dict[str, str]:
        """Return the flat ``{"type", "id", **fields}`` mapping."""
        payload = {"type": self.type, "id": self.id}
        for key, value in self.fields.items():
            if key not in RESERVED_KEYS:
                payload[key] = value
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> FieldRecord:
        """Rebuild a record from its flat mapping, defaulting absent keys."""
        fields = {
            str(key): str(value)
            for key, value in payload.items()
            if key not in RESERVED_KEYS and value is not None
        }
        return cls(
            type=str(payload.get("type") or ""),
            id=str(payload.get("id") or ""),
            fields=fields,
        )


@dataclass(slots=True)
class Entry:
    """A record stored in the index together with its provenance."""

    fields: FieldRecord
    source: str
    source_path: str

    @property
    def id(self) -> str:
        return self.fields.id

    def to_payload(self) -> dict[str, Any]:
        """Return the persisted representation of the entry."""
        return {
            "fields": self.fields.as_dict(),
            "source": self.source,
            "source_path": self.source_path,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Entry:
        raw_fields = payload.get("fields")
        record = FieldRecord.from_dict(raw_fields if isinstance(raw_fields, Mapping) else {})
        return cls(
            fields=record,
            source=str(payload.get("source") or ""),
            source_path=str(payload.get("source_path") or ""),
        )

    def to_portable(self) -> dict[str, Any]:
        """Return a display-oriented dictionary with split person names."""
        return {
            "key": self.fields.id,
            "type": self.fields.type,
            "fields": dict(self.fields.fields),
            "persons": persons_from_fields(self.fields.fields),
            "source_files": [self.source_path] if self.source_path else [],
        }


__all__ = ["RESERVED_KEYS", "Entry", "FieldRecord"]
