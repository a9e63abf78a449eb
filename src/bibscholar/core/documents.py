"""Discovery of vault documents and the BibTeX blocks they embed."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import logging
from pathlib import Path
import re


logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})\s*(?P<info>[^`]*)$")


@dataclass(frozen=True, slots=True)
class CodeBlock:
    """A fenced code block extracted from a Markdown document."""

    language: str
    content: str
    line: int


@dataclass(frozen=True, slots=True)
class VaultDocument:
    """A Markdown document addressed by its vault-relative POSIX path."""

    source_path: str
    path: Path

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8")


def iter_code_blocks(text: str) -> Iterator[CodeBlock]:
    """Yield every fenced code block of ``text`` in document order.

    An unterminated fence runs to the end of the document.
    """
    lines = text.splitlines()
    index = 0
    while index < len(lines):
        match = _FENCE_OPEN.match(lines[index])
        if match is None:
            index += 1
            continue

        fence = match.group("fence")
        info = match.group("info").strip()
        language = info.split()[0].lower() if info else ""
        start = index + 1
        closing = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}\s*$")
        index = start
        while index < len(lines) and not closing.match(lines[index]):
            index += 1
        yield CodeBlock(language=language, content="\n".join(lines[start:index]), line=start)
        index += 1


def find_bibtex_blocks(text: str, language: str = "bibtex") -> list[CodeBlock]:
    """Return the fenced blocks tagged with ``language``."""
    wanted = language.lower()
    return [block for block in iter_code_blocks(text) if block.language == wanted]


def iter_documents(
    vault: Path | str,
    suffixes: Iterable[str] = (".md",),
) -> Iterator[VaultDocument]:
    """Yield vault documents sorted by path, skipping hidden directories."""
    root = Path(vault)
    allowed = {suffix.lower() for suffix in suffixes}
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in allowed:
            continue
        relative = path.relative_to(root)
        if any(part.startswith(".") for part in relative.parts):
            continue
        yield VaultDocument(source_path=relative.as_posix(), path=path)


__all__ = [
    "CodeBlock",
    "VaultDocument",
    "find_bibtex_blocks",
    "iter_code_blocks",
    "iter_documents",
]
