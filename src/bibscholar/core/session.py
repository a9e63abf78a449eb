"""Session wiring between documents, the citation index and its store."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path

from .bibliography import BibliographyIssue, Entry, EntryIndex, UpsertResult, parse_bibtex
from .config import ScholarConfig
from .diagnostics import DiagnosticEmitter, NullEmitter
from .documents import find_bibtex_blocks, iter_documents
from .exceptions import IndexStoreError, ReferenceNotFoundError
from .storage import IndexStore, MemoryIndexStore


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanReport:
    """Summary of a vault scan."""

    documents: list[tuple[str, int]] = field(default_factory=list)
    cached: int = 0
    duplicates: int = 0
    pruned: list[str] = field(default_factory=list)


class ScholarSession:
    """Own the index for one vault and persist it after every change."""

    def __init__(
        self,
        *,
        index: EntryIndex | None = None,
        store: IndexStore | None = None,
        emitter: DiagnosticEmitter | None = None,
        config: ScholarConfig | None = None,
    ) -> None:
        self.index = index if index is not None else EntryIndex()
        self.store = store if store is not None else MemoryIndexStore()
        self.emitter = emitter or NullEmitter()
        self.config = config or ScholarConfig()
        self._issues: list[BibliographyIssue] = []

    @property
    def issues(self) -> Sequence[BibliographyIssue]:
        """Return the problems reported while ingesting documents."""
        return tuple(self._issues)

    def load(self) -> None:
        """Fill the index from the store; called once at session start."""
        self.index.load_payload(self.store.load())
        logger.debug("Loaded %d cached entries from %r.", len(self.index), self.store)

    def request_save(self) -> bool:
        """Persist the index, reporting failures instead of raising them."""
        try:
            self.store.save(self.index.to_payload())
        except (IndexStoreError, OSError) as exc:
            self.emitter.warning(
                f"Failed to save the bibliography index: {exc}",
                exc if self.emitter.debug_enabled else None,
            )
            return False
        self.index.mark_clean()
        self.emitter.event(
            "index_saved",
            {"entries": len(self.index), "target": getattr(self.store, "path", None)},
        )
        return True

    def _report(self, message: str, *, key: str | None, source: str) -> None:
        self._issues.append(BibliographyIssue(message=message, key=key, source=source))
        self.emitter.warning(message)

    def _ingest_block(
        self,
        block: str,
        source_path: str,
        document_text: str | None,
    ) -> list[UpsertResult]:
        records = parse_bibtex(
            block,
            self.config.lowercase_type,
            strict=self.config.strict,
        )
        if not records:
            self._report("No BibTeX entries found in block.", key=None, source=source_path)
            return []

        results: list[UpsertResult] = []
        for record in records:
            result = self.index.upsert(record, source_path, document_text)
            results.append(result)
            if result.duplicate:
                reason = result.reason.value if result.reason else None
                self._report(
                    f"BibTeX ID has been used: '{result.id}'. Revise for successful import.",
                    key=result.id,
                    source=source_path,
                )
                self.emitter.event("entry_duplicate", {"id": result.id, "reason": reason})
            elif result.changed:
                self.emitter.event("entry_cached", {"id": result.id, "source_path": source_path})
        return results

    def process_block(
        self,
        block: str,
        source_path: str,
        document_text: str | None = None,
    ) -> list[UpsertResult]:
        """Parse one BibTeX block and offer each entry to the index."""
        results = self._ingest_block(block, source_path, document_text)
        if any(result.changed for result in results):
            self.request_save()
        return results

    def process_document(self, source_path: str, text: str) -> list[UpsertResult]:
        """Ingest every BibTeX block embedded in a document."""
        results: list[UpsertResult] = []
        for block in find_bibtex_blocks(text, self.config.code_block_language):
            results.extend(self._ingest_block(block.content, source_path, text))
        if any(result.changed for result in results):
            self.request_save()
        return results

    def process_vault(self, vault: Path | str, *, prune: bool = False) -> ScanReport:
        """Ingest every document of ``vault`` and save once at the end."""
        report = ScanReport()
        seen: set[str] = set()
        for document in iter_documents(vault, self.config.document_suffixes):
            seen.add(document.source_path)
            text = document.read_text()
            results: list[UpsertResult] = []
            for block in find_bibtex_blocks(text, self.config.code_block_language):
                results.extend(self._ingest_block(block.content, document.source_path, text))
            report.documents.append((document.source_path, len(results)))
            report.cached += sum(1 for result in results if result.changed)
            report.duplicates += sum(1 for result in results if result.duplicate)

        if prune:
            for source_path in sorted(self.index.source_paths() - seen):
                if self.index.remove_source_path(source_path):
                    report.pruned.append(source_path)

        if self.index.dirty:
            self.request_save()
        return report

    def lookup(self, key: str) -> Entry | None:
        return self.index.get(key)

    def require(self, key: str) -> Entry:
        """Return the entry cached under ``key`` or raise ``ReferenceNotFoundError``."""
        entry = self.index.get(key)
        if entry is None:
            raise ReferenceNotFoundError(key)
        return entry

    def search(self, query: str) -> list[str]:
        return self.index.search(query)

    def _save_if(self, changed: bool) -> bool:
        if changed:
            self.request_save()
        return changed

    def uncache(self, key: str) -> bool:
        """Forget a single entry."""
        return self._save_if(self.index.remove(key))

    def document_deleted(self, source_path: str) -> bool:
        """Forget the entries contributed by a deleted document."""
        return self._save_if(self.index.remove_source_path(source_path))

    def document_renamed(self, old_path: str, new_path: str) -> bool:
        """Follow a document rename."""
        return self._save_if(self.index.rename_source_path(old_path, new_path))

    def clear(self) -> bool:
        """Forget every entry."""
        return self._save_if(self.index.clear())


__all__ = ["ScanReport", "ScholarSession"]
