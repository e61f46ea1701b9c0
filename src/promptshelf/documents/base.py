"""
Shared pieces of every corpus document.

Each document kind pairs a pydantic front-matter model with a dataclass
holding the body and its location. The dataclasses inherit the read-only
helpers defined here.
"""

from __future__ import annotations

import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic

import promptshelf.constants as constants
import promptshelf.frontmatter as frontmatter
import promptshelf.markdown as markdown

# Diagnostic code for front-matter that fails its document model
SCHEMA_ERROR = "SCH001"

# Diagnostic code for files that cannot be read as UTF-8 text
UNREADABLE = "IO001"


class DocumentError(ValueError):
    """A corpus document could not be loaded."""

    def __init__(
        self,
        message: str,
        *,
        path: _pathlib.Path | None = None,
        line: int | None = None,
        code: str = SCHEMA_ERROR,
    ) -> None:
        self.message = message
        self.path = path
        self.line = line
        self.code = code
        location = ""
        if path is not None:
            location = f"{path}:" + (f"{line}:" if line is not None else "") + " "
        super().__init__(f"{location}{message}")


class FrontmatterModel(_pydantic.BaseModel):
    """
    Base for front-matter models.

    Unknown keys are preserved: corpus front-matter is descriptive and
    routinely carries fields nobody has a schema for.
    """

    model_config = _pydantic.ConfigDict(extra="allow", populate_by_name=True)

    @property
    def extra_fields(self) -> dict[str, _typing.Any]:
        """Fields present in the file but not in the model."""
        return dict(self.model_extra) if self.model_extra else {}


def as_string_list(value: _typing.Any, *, split_commas: bool = False) -> list[str]:
    """
    Coerce a loosely written YAML value into a list of strings.

    ``None`` becomes an empty list, a scalar becomes a one-item list (or a
    comma split list when ``split_commas``), and mapping items collapse to
    their first key.
    """
    if value is None:
        return []
    if isinstance(value, str):
        if split_commas:
            return [part.strip() for part in value.split(",") if part.strip()]
        return [value] if value.strip() else []
    if isinstance(value, dict):
        return [str(k) for k in value]
    if isinstance(value, (list, tuple, set)):
        items: list[str] = []
        for item in value:
            if isinstance(item, dict) and item:
                items.append(str(next(iter(item))))
            elif item is not None:
                items.append(str(item))
        return items
    return [str(value)]


class MarkdownDocument:
    """
    Read-only helpers shared by the document dataclasses.

    Subclasses provide ``path``, ``body``, ``body_start_line``,
    ``has_frontmatter``, ``metadata`` and ``key_lines`` attributes.
    """

    kind: _typing.ClassVar[str] = "document"

    path: _pathlib.Path
    body: str
    body_start_line: int
    has_frontmatter: bool
    metadata: dict[str, _typing.Any]
    key_lines: frontmatter.KeyLines

    @property
    def name(self) -> str:
        return self.path.stem

    @property
    def description(self) -> str:
        return ""

    @property
    def body_line_count(self) -> int:
        """Number of lines in the body, ignoring surrounding blank lines."""
        stripped = self.body.strip()
        return len(stripped.splitlines()) if stripped else 0

    def exceeds_soft_limit(self, limit: int = constants.BODY_SOFT_LIMIT) -> bool:
        """Whether the body is longer than ``limit`` lines."""
        return self.body_line_count > limit

    @property
    def code_blocks(self) -> list[markdown.CodeBlock]:
        return markdown.extract_code_blocks(self.body, self.body_start_line)

    @property
    def headings(self) -> list[markdown.Heading]:
        return markdown.extract_headings(self.body, self.body_start_line)

    @property
    def links(self) -> list[markdown.Link]:
        return markdown.extract_links(self.body, self.body_start_line)

    @property
    def title(self) -> str | None:
        """Text of the first level-1 heading."""
        for heading in self.headings:
            if heading.level == 1:
                return heading.title
        return None

    @property
    def snippet_languages(self) -> list[str]:
        """Sorted languages of the embedded code blocks."""
        return sorted({b.language for b in self.code_blocks if b.language})

    def line_for(self, *keys: str) -> int | None:
        """File line of a front-matter key, if known."""
        return self.key_lines.get(tuple(keys))

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind,
            "name": self.name,
            "description": self.description,
            "path": str(self.path),
            "title": self.title,
            "has_frontmatter": self.has_frontmatter,
            "body_lines": self.body_line_count,
            "code_blocks": len(self.code_blocks),
            "snippet_languages": self.snippet_languages,
        }


def read_markdown(path: _pathlib.Path) -> frontmatter.ParsedMarkdown:
    """
    Read and split a Markdown file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        DocumentError: If the front-matter is malformed or unreadable.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Document not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DocumentError(f"file is not valid UTF-8: {e}", path=path, code=UNREADABLE) from e
    except OSError as e:
        raise DocumentError(f"cannot read file: {e}", path=path, code=UNREADABLE) from e

    try:
        return frontmatter.parse_markdown(content)
    except frontmatter.FrontmatterError as e:
        raise DocumentError(e.message, path=path, line=e.line, code=e.code) from e


M = _typing.TypeVar("M", bound=FrontmatterModel)


def validate_frontmatter(
    model: type[M],
    parsed: frontmatter.ParsedMarkdown,
    path: _pathlib.Path,
    label: str,
) -> M:
    """
    Validate parsed front-matter against a model.

    Raises:
        DocumentError: With the line of the first offending key.
    """
    try:
        return model.model_validate(parsed.metadata)
    except _pydantic.ValidationError as e:
        problems: list[str] = []
        line: int | None = None
        for error in e.errors():
            loc = [str(part) for part in error.get("loc", ())]
            field = ".".join(loc) or "(root)"
            problems.append(f"{field}: {error.get('msg', 'invalid')}")
            if line is None and loc:
                line = parsed.key_lines.get((loc[0],))
        if line is None:
            line = 2 if parsed.has_frontmatter else 1
        raise DocumentError(
            f"Invalid {label} frontmatter: " + "; ".join(problems),
            path=path,
            line=line,
        ) from e
