"""Configuration model for a bibliography vault.

ScholarConfig

`index_file` (`Path | None`)
: Location of the persisted index. Relative paths resolve against the vault
  root. Defaults to `.bibscholar/index.json` inside the vault.

`code_block_language` (`str`)
: Info string of the fenced code blocks holding BibTeX source.

`document_suffixes` (`list[str]`)
: File suffixes scanned as vault documents.

`lowercase_type` (`bool`)
: Lower-case entry types such as `@Article` while parsing.

`strict` (`bool`)
: Strip whitespace around citation ids, keys and values while parsing.
  Off by default so existing indexes keep matching.

`include_abstract` (`bool`)
: Keep `abstract` fields when exporting a `.bib` file.

`citation_command` (`str`)
: LaTeX command used by LaTeX citation snippets, without the backslash.

`note_suffix` / `pdf_suffix` (`str`)
: Suffixes appended to a citation id to locate its linked note and PDF.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .exceptions import ConfigError


DEFAULT_CONFIG_NAME = "bibscholar.yml"
DEFAULT_INDEX_FILE = Path(".bibscholar") / "index.json"


class ScholarConfig(BaseModel):
    """Settings shared by the session and the CLI."""

    model_config = ConfigDict(extra="forbid")

    index_file: Path | None = None
    code_block_language: str = "bibtex"
    document_suffixes: list[str] = Field(default_factory=lambda: [".md"])
    lowercase_type: bool = True
    strict: bool = False
    include_abstract: bool = True
    citation_command: str = "autocite"
    note_suffix: str = ".md"
    pdf_suffix: str = ".pdf"

    @field_validator("document_suffixes")
    @classmethod
    def normalise_suffixes(cls, value: list[str]) -> list[str]:
        """Ensure each suffix starts with a dot."""
        return [suffix if suffix.startswith(".") else f".{suffix}" for suffix in value]

    @field_validator("citation_command")
    @classmethod
    def strip_backslash(cls, value: str) -> str:
        return value.lstrip("\\")

    def resolve_index_file(self, vault: Path | str) -> Path:
        """Return the absolute index location for ``vault``."""
        target = self.index_file or DEFAULT_INDEX_FILE
        if target.is_absolute():
            return target
        return Path(vault) / target


def load_config(path: Path | str | None) -> ScholarConfig:
    """Load a YAML configuration file, falling back to defaults when absent."""
    if path is None:
        return ScholarConfig()
    config_path = Path(path)
    if not config_path.exists():
        return ScholarConfig()

    try:
        raw: Any = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read configuration '{config_path}': {exc}") from exc

    if raw is None:
        return ScholarConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration '{config_path}' must be a mapping.")

    try:
        return ScholarConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration '{config_path}': {exc}") from exc


__all__ = ["DEFAULT_CONFIG_NAME", "DEFAULT_INDEX_FILE", "ScholarConfig", "load_config"]
