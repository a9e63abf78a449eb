"""Persistence backends for the citation index.

The index is saved wholesale as one JSON blob shaped like the note plugin's
data file: ``{"bibtex_dict": {id: {"fields": ..., "source": ..., "source_path": ...}}}``.
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Protocol, runtime_checkable

from .exceptions import IndexStoreError


logger = logging.getLogger(__name__)


@runtime_checkable
class IndexStore(Protocol):
    """Load and save the serialized index."""

    def load(self) -> dict[str, Any]: ...

    def save(self, payload: Mapping[str, Any]) -> None: ...


class MemoryIndexStore:
    """Keep the serialized index in memory; useful for tests and embedding."""

    def __init__(self, payload: Mapping[str, Any] | None = None) -> None:
        self.payload: dict[str, Any] = copy.deepcopy(dict(payload or {}))
        self.saves = 0

    def load(self) -> dict[str, Any]:
        return copy.deepcopy(self.payload)

    def save(self, payload: Mapping[str, Any]) -> None:
        self.payload = copy.deepcopy(dict(payload))
        self.saves += 1


class JsonIndexStore:
    """Store the index in a JSON file, replacing it atomically on save."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"JsonIndexStore({str(self.path)!r})"

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            logger.debug("Index file %s does not exist yet.", self.path)
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise IndexStoreError(f"Failed to read index file '{self.path}': {exc}") from exc
        if not isinstance(payload, dict):
            raise IndexStoreError(f"Index file '{self.path}' does not contain a JSON object.")
        return payload

    def save(self, payload: Mapping[str, Any]) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
                handle.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise IndexStoreError(f"Failed to write index file '{self.path}': {exc}") from exc


__all__ = ["IndexStore", "JsonIndexStore", "MemoryIndexStore"]
