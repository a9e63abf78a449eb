"""Primary public API for bibscholar."""

from __future__ import annotations

from bibscholar.core.bibliography import (
    BibliographyIssue,
    DuplicateReason,
    Entry,
    EntryIndex,
    FieldRecord,
    UpsertResult,
    export_bibliography,
    make_bibtex,
    match_query,
    parse_bibtex,
)
from bibscholar.core.config import ScholarConfig, load_config
from bibscholar.core.diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from bibscholar.core.exceptions import (
    BibScholarError,
    ConfigError,
    IndexStoreError,
    ReferenceNotFoundError,
)
from bibscholar.core.references import CitationStyle, citation_snippet, resolve_reference
from bibscholar.core.session import ScanReport, ScholarSession
from bibscholar.core.storage import IndexStore, JsonIndexStore, MemoryIndexStore
from bibscholar.version import get_version


__version__ = get_version()

__all__ = [
    "BibScholarError",
    "BibliographyIssue",
    "CitationStyle",
    "ConfigError",
    "DiagnosticEmitter",
    "DuplicateReason",
    "Entry",
    "EntryIndex",
    "FieldRecord",
    "IndexStore",
    "IndexStoreError",
    "JsonIndexStore",
    "LoggingEmitter",
    "MemoryIndexStore",
    "NullEmitter",
    "ReferenceNotFoundError",
    "ScanReport",
    "ScholarConfig",
    "ScholarSession",
    "UpsertResult",
    "__version__",
    "citation_snippet",
    "export_bibliography",
    "get_version",
    "load_config",
    "make_bibtex",
    "match_query",
    "parse_bibtex",
    "resolve_reference",
]
