"""
YAML front-matter parsing for Markdown documents.

A document has front-matter when its first line is ``---``. The block runs
to the next ``---`` (or ``...``) line and is parsed as a YAML mapping. The
rest of the file is the body. Line numbers reported here are 1-indexed
file lines so they can be shown next to editor positions.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import typing as _typing

import yaml as _yaml

# Maps key paths to 1-indexed file lines
KeyLines = dict[tuple[str, ...], int]

_OPEN_DELIMITER = "---"
_CLOSE_DELIMITERS = ("---", "...")

# Diagnostic codes carried by FrontmatterError
INVALID_YAML = "FM001"
UNTERMINATED = "FM002"
NOT_A_MAPPING = "FM004"


class FrontmatterError(ValueError):
    """Front-matter could not be parsed."""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        code: str = INVALID_YAML,
        path: _typing.Any = None,
    ) -> None:
        self.message = message
        self.line = line
        self.code = code
        self.path = path
        super().__init__(self._format())

    def _format(self) -> str:
        location = ""
        if self.path is not None:
            location = f"{self.path}:"
            if self.line is not None:
                location += f"{self.line}:"
            location += " "
        elif self.line is not None:
            location = f"line {self.line}: "
        return f"{location}{self.message}"

    def with_path(self, path: _typing.Any) -> FrontmatterError:
        """Return a copy of this error annotated with the file path."""
        return FrontmatterError(self.message, line=self.line, code=self.code, path=path)


class _LineTrackingLoader(_yaml.SafeLoader):
    """YAML loader that records the line of every mapping key."""

    def __init__(self, stream: _typing.Any) -> None:
        super().__init__(stream)
        self._line_registry: dict[tuple[str, ...], int] = {}
        self._path_stack: list[str] = []

    def construct_mapping(
        self, node: _yaml.MappingNode, deep: bool = False
    ) -> dict[_typing.Any, _typing.Any]:
        self.flatten_mapping(node)
        result: dict[_typing.Any, _typing.Any] = {}
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=True)

            self._path_stack.append(str(key))
            self._line_registry[tuple(self._path_stack)] = key_node.start_mark.line + 1

            # deep=True so nested mappings are built while the path prefix is pushed
            value = self.construct_object(value_node, deep=True)
            self._path_stack.pop()

            try:
                result[key] = value
            except TypeError as e:
                raise _yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found unhashable key: {e}",
                    key_node.start_mark,
                ) from e
        return result


@_dataclasses.dataclass
class ParsedMarkdown:
    """A Markdown document split into front-matter and body."""

    metadata: dict[str, _typing.Any]
    """Parsed front-matter mapping (empty when absent)."""

    body: str
    """Everything after the closing delimiter."""

    body_start_line: int = 1
    """File line on which the body starts."""

    has_frontmatter: bool = False
    """Whether the file opened with a front-matter block."""

    key_lines: KeyLines = _dataclasses.field(default_factory=dict)
    """File line for each key path in the front-matter."""

    def line_for(self, *keys: str) -> int | None:
        """File line of a (possibly nested) front-matter key."""
        return self.key_lines.get(tuple(keys))


def _load_yaml(text: str) -> tuple[_typing.Any, dict[tuple[str, ...], int]]:
    loader = _LineTrackingLoader(text)
    try:
        data = loader.get_single_data()
    finally:
        loader.dispose()
    return data, loader._line_registry


def _yaml_error_line(error: _yaml.YAMLError, offset: int) -> int | None:
    mark = getattr(error, "problem_mark", None) or getattr(error, "context_mark", None)
    if mark is None:
        return None
    return mark.line + 1 + offset


def _describe_yaml_error(error: _yaml.YAMLError) -> str:
    if isinstance(error, _yaml.MarkedYAMLError):
        parts = [p for p in (error.context, error.problem) if p]
        if parts:
            return "invalid YAML in front-matter: " + ", ".join(parts)
    return f"invalid YAML in front-matter: {error}"


def parse_markdown(content: str) -> ParsedMarkdown:
    """
    Split a Markdown document into front-matter and body.

    Args:
        content: Raw file content.

    Returns:
        ParsedMarkdown with the metadata mapping and body.

    Raises:
        FrontmatterError: If the block is unterminated, the YAML is
            malformed, or the YAML is not a mapping.
    """
    if content.startswith("\ufeff"):
        content = content[1:]

    lines = content.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != _OPEN_DELIMITER:
        return ParsedMarkdown(metadata={}, body=content)

    closing: int | None = None
    for index in range(1, len(lines)):
        if lines[index].rstrip() in _CLOSE_DELIMITERS:
            closing = index
            break

    if closing is None:
        raise FrontmatterError(
            "front-matter block is not terminated (missing closing ---)",
            line=1,
            code=UNTERMINATED,
        )

    yaml_text = "".join(lines[1:closing])
    body = "".join(lines[closing + 1 :])
    # Line 1 is the opening delimiter, so YAML line 1 is file line 2
    offset = 1

    try:
        data, registry = _load_yaml(yaml_text)
    except _yaml.YAMLError as e:
        raise FrontmatterError(
            _describe_yaml_error(e),
            line=_yaml_error_line(e, offset),
            code=INVALID_YAML,
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"front-matter must be a YAML mapping, got {type(data).__name__}",
            line=2,
            code=NOT_A_MAPPING,
        )

    return ParsedMarkdown(
        metadata=data,
        body=body,
        body_start_line=closing + 2,
        has_frontmatter=True,
        key_lines={path: line + offset for path, line in registry.items()},
    )
