"""Bibliography facade exposed through the bibscholar public API.

Architecture
: `parse_bibtex` turns BibTeX source found in notes into `FieldRecord` objects.
  It never raises on malformed input; text without entries yields an empty
  list that callers report themselves.
: `make_bibtex` renders a record back into canonical BibTeX. The index caches
  that text as the entry `source` and compares it to decide whether an upsert
  changes anything.
: `EntryIndex` owns the `id -> Entry` mapping, refuses ids defined twice in the
  same document or in two different documents, and answers `;`-separated
  queries through `match_query`.

Usage Example

```pycon
>>> from bibscholar.core.bibliography import EntryIndex, parse_bibtex
>>> index = EntryIndex()
>>> payload = \"\"\"@article{doe2023,
...   author = {Doe, Jane},
...   title = {A Minimal Example},
...   year = {2023},
... }\"\"\"
>>> [record] = parse_bibtex(payload)
>>> index.upsert(record, "notes/doe.md").changed
True
>>> index.search("year:2023")
['doe2023']
```
"""

from __future__ import annotations

from .index import DuplicateReason, EntryIndex, UpsertResult, count_entry_occurrences
from .issues import BibliographyIssue
from .parsing import iter_bibtex, parse_bibtex, scan_fields
from .persons import persons_from_fields, split_persons
from .query import QueryClause, match_query, parse_query
from .records import Entry, FieldRecord
from .serializer import (
    concatenate_sources,
    escape_latex_ampersand,
    export_bibliography,
    make_bibtex,
    write_bibtex,
)


__all__ = [
    "BibliographyIssue",
    "DuplicateReason",
    "Entry",
    "EntryIndex",
    "FieldRecord",
    "QueryClause",
    "UpsertResult",
    "concatenate_sources",
    "count_entry_occurrences",
    "escape_latex_ampersand",
    "export_bibliography",
    "iter_bibtex",
    "make_bibtex",
    "match_query",
    "parse_bibtex",
    "parse_query",
    "persons_from_fields",
    "scan_fields",
    "split_persons",
    "write_bibtex",
]
