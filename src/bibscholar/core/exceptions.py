"""Custom exception hierarchy for the bibliography index."""

from __future__ import annotations


class BibScholarError(RuntimeError):
    """Base exception for bibliography index failures."""


class IndexStoreError(BibScholarError):
    """Raised when the persisted index cannot be read or written."""


class ConfigError(BibScholarError):
    """Raised when a configuration file is missing required structure."""


class ReferenceNotFoundError(BibScholarError, LookupError):
    """Raised when a citation id is not present in the index."""

    def __init__(self, key: str) -> None:
        super().__init__(f"No cached entry for '{key}'.")
        self.key = key


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


__all__ = [
    "BibScholarError",
    "ConfigError",
    "IndexStoreError",
    "ReferenceNotFoundError",
    "exception_messages",
]
