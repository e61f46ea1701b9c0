"""Root-level guide documents (README.md, ARCHITECTURE.md)."""

from __future__ import annotations

import dataclasses as _dataclasses
import pathlib as _pathlib
import typing as _typing

import promptshelf.documents.base as base
import promptshelf.frontmatter as frontmatter


@_dataclasses.dataclass
class Guide(base.MarkdownDocument):
    """A guide has no schema; any frontmatter is kept as raw metadata."""

    body: str
    path: _pathlib.Path
    body_start_line: int = 1
    has_frontmatter: bool = False
    metadata: dict[str, _typing.Any] = _dataclasses.field(default_factory=dict)
    key_lines: frontmatter.KeyLines = _dataclasses.field(default_factory=dict)

    kind = "guide"

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def description(self) -> str:
        value = self.metadata.get("description", "")
        return value if isinstance(value, str) else str(value)


def load_guide(path: _pathlib.Path) -> Guide:
    """
    Load a guide document.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        DocumentError: If the frontmatter is malformed.
    """
    parsed = base.read_markdown(path)
    return Guide(
        body=parsed.body,
        path=path,
        body_start_line=parsed.body_start_line,
        has_frontmatter=parsed.has_frontmatter,
        metadata=parsed.metadata,
        key_lines=parsed.key_lines,
    )
