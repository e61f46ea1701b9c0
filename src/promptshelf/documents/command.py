"""
Slash command documents (commands/*.md).

The frontmatter describes the command; the body is a prompt template a
user would send by typing /name. Rendering fills in the template and
nothing more.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import os as _os
import pathlib as _pathlib
import re as _re
import typing as _typing

import pydantic as _pydantic

import promptshelf.constants as constants
import promptshelf.documents.base as base
import promptshelf.frontmatter as frontmatter

# One alternation so substituted text is never scanned again
_PLACEHOLDER_RE = _re.compile(
    r"\$ARGUMENTS|\$(?P<pos>[1-9])|\{\{env\.(?P<env>[^}]+)\}\}|\{\{(?P<key>\w+)\}\}"
)


class CommandFrontmatter(base.FrontmatterModel):
    """
    Frontmatter parsed from a command markdown file.

    All fields are optional; the command name falls back to the file stem.
    """

    name: str | None = _pydantic.Field(
        default=None,
        min_length=1,
        max_length=constants.NAME_MAX_LENGTH,
        description="Command name (user types /name)",
    )

    description: str = _pydantic.Field(
        default="",
        max_length=constants.DESCRIPTION_MAX_LENGTH,
        description="Short description shown in help",
    )

    argument_hint: str = _pydantic.Field(
        default="",
        validation_alias=_pydantic.AliasChoices(
            "argument-hint", "argument_hint", "args"
        ),
        description="Argument hint shown in help (e.g., '<target>')",
    )

    allowed_tools: list[str] = _pydantic.Field(
        default_factory=list,
        validation_alias=_pydantic.AliasChoices("allowed-tools", "allowed_tools"),
    )

    aliases: list[str] = _pydantic.Field(
        default_factory=list,
        description="Alternative names for the command",
    )

    model: str | None = None

    @_pydantic.field_validator("allowed_tools", mode="before")
    @classmethod
    def _coerce_tools(cls, value: _typing.Any) -> list[str]:
        return base.as_string_list(value, split_commas=True)

    @_pydantic.field_validator("aliases", mode="before")
    @classmethod
    def _coerce_aliases(cls, value: _typing.Any) -> list[str]:
        return [a.lstrip("/") for a in base.as_string_list(value, split_commas=True)]

    @_pydantic.field_validator("name", mode="before")
    @classmethod
    def _strip_slash(cls, value: _typing.Any) -> _typing.Any:
        if isinstance(value, str):
            return value.lstrip("/")
        return value

    @_pydantic.field_validator("argument_hint", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: _typing.Any) -> str:
        # A blank YAML value ("description:") loads as None
        if value is None:
            return ""
        if isinstance(value, list):
            return " ".join(str(v) for v in value)
        return str(value)

    @_pydantic.field_validator("model", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: _typing.Any) -> _typing.Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


@_dataclasses.dataclass
class Command(base.MarkdownDocument):
    """
    A parsed slash command.

    The body is a template that can reference $ARGUMENTS, positional
    $1..$9, {{args}}, {{env.VAR}} and any {{key}} passed to render().
    """

    frontmatter: CommandFrontmatter
    """Parsed frontmatter metadata."""

    body: str
    """Command template (markdown body after frontmatter)."""

    path: _pathlib.Path
    """Path to the source .md file."""

    body_start_line: int = 1
    has_frontmatter: bool = True
    metadata: dict[str, _typing.Any] = _dataclasses.field(default_factory=dict)
    key_lines: frontmatter.KeyLines = _dataclasses.field(default_factory=dict)

    kind = "command"

    @property
    def name(self) -> str:
        """Command name from frontmatter, else the file stem."""
        return self.frontmatter.name or self.path.stem

    @property
    def description(self) -> str:
        return self.frontmatter.description

    @property
    def aliases(self) -> list[str]:
        return self.frontmatter.aliases

    @property
    def argument_hint(self) -> str:
        return self.frontmatter.argument_hint

    def render(
        self,
        arguments: str = "",
        **context: _typing.Any,
    ) -> str:
        """
        Render the command template with variable substitution.

        Args:
            arguments: Argument string as typed after the command.
            **context: Additional {{key}} variables.

        Returns:
            Rendered command body.
        """
        render_context = {
            "args": arguments,
            "cwd": str(_pathlib.Path.cwd()),
            **context,
        }
        positional = arguments.split()

        def _substitute(match: _re.Match[str]) -> str:
            if match.group("pos"):
                index = int(match.group("pos")) - 1
                return positional[index] if index < len(positional) else ""
            if match.group("env"):
                return _os.environ.get(match.group("env"), "")
            key = match.group("key")
            if key is not None:
                if key not in render_context:
                    return match.group(0)
                return str(render_context[key])
            return arguments

        return _PLACEHOLDER_RE.sub(_substitute, self.body.strip())

    def to_dict(self) -> dict[str, _typing.Any]:
        data = super().to_dict()
        data.update(
            {
                "aliases": self.aliases,
                "argument_hint": self.argument_hint,
                "allowed_tools": self.frontmatter.allowed_tools,
                "model": self.frontmatter.model,
            }
        )
        return data


def load_command(path: _pathlib.Path) -> Command:
    """
    Load a command from a markdown file.

    Raises:
        FileNotFoundError: If file doesn't exist.
        DocumentError: If file is invalid.
    """
    parsed = base.read_markdown(path)
    fm = base.validate_frontmatter(CommandFrontmatter, parsed, path, "command")
    return Command(
        frontmatter=fm,
        body=parsed.body,
        path=path,
        body_start_line=parsed.body_start_line,
        has_frontmatter=parsed.has_frontmatter,
        metadata=parsed.metadata,
        key_lines=parsed.key_lines,
    )
