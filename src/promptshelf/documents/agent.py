"""
Agent documents (agents/*.md).

An agent document describes an AI persona: what it can do, the phrases
that should bring it in, and usually a long tail of example code. The
schema-like blocks some agents carry (input_schema, retry_policy, ...)
are kept verbatim as data.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic

import promptshelf.constants as constants
import promptshelf.documents.base as base
import promptshelf.frontmatter as frontmatter

INERT_BLOCKS = (
    "input_schema",
    "output_schema",
    "retry_policy",
    "error_handling",
    "fallback_strategies",
)
"""Front-matter blocks that describe a runtime this corpus does not have."""


class AgentFrontmatter(base.FrontmatterModel):
    """
    Frontmatter parsed from an agent document.

    Every field is optional; the name falls back to the file stem.
    """

    name: str | None = _pydantic.Field(
        default=None,
        min_length=1,
        max_length=constants.NAME_MAX_LENGTH,
        description="Agent name (defaults to the file stem)",
    )

    description: str = _pydantic.Field(
        default="",
        max_length=constants.DESCRIPTION_MAX_LENGTH,
        description="What the agent does",
    )

    capabilities: list[str] = _pydantic.Field(default_factory=list)

    triggers: list[str] = _pydantic.Field(
        default_factory=list,
        validation_alias=_pydantic.AliasChoices(
            "triggers", "trigger_phrases", "trigger-phrases"
        ),
        description="Phrases that should activate the agent",
    )

    tools: list[str] = _pydantic.Field(default_factory=list)

    model: str | None = None

    skills: list[str] = _pydantic.Field(default_factory=list)

    # Inert blocks, kept as written
    input_schema: _typing.Any = None
    output_schema: _typing.Any = None
    retry_policy: _typing.Any = None
    error_handling: _typing.Any = None
    fallback_strategies: _typing.Any = None

    @_pydantic.field_validator("capabilities", "triggers", "skills", mode="before")
    @classmethod
    def _coerce_list(cls, value: _typing.Any) -> list[str]:
        return base.as_string_list(value)

    @_pydantic.field_validator("tools", mode="before")
    @classmethod
    def _coerce_tools(cls, value: _typing.Any) -> list[str]:
        return base.as_string_list(value, split_commas=True)

    @_pydantic.field_validator("name", "model", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: _typing.Any) -> _typing.Any:
        # YAML turns bare numbers and dates into non-strings
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @_pydantic.field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: _typing.Any) -> str:
        # A blank YAML value ("description:") loads as None
        return "" if value is None else str(value)

    def inert_blocks(self) -> dict[str, _typing.Any]:
        """The runtime-looking blocks that were present."""
        return {
            key: getattr(self, key)
            for key in INERT_BLOCKS
            if getattr(self, key) is not None
        }


@_dataclasses.dataclass
class Agent(base.MarkdownDocument):
    """A parsed agent document."""

    frontmatter: AgentFrontmatter
    """Parsed frontmatter metadata."""

    body: str
    """Prompt text after the frontmatter."""

    path: _pathlib.Path
    """Path to the .md file."""

    body_start_line: int = 1
    has_frontmatter: bool = True
    metadata: dict[str, _typing.Any] = _dataclasses.field(default_factory=dict)
    key_lines: frontmatter.KeyLines = _dataclasses.field(default_factory=dict)

    ordinal: int | None = None
    """1-based position among agent files, for "See Agent N" references."""

    kind = "agent"

    @property
    def name(self) -> str:
        return self.frontmatter.name or self.path.stem

    @property
    def description(self) -> str:
        return self.frontmatter.description

    @property
    def capabilities(self) -> list[str]:
        return self.frontmatter.capabilities

    @property
    def triggers(self) -> list[str]:
        return self.frontmatter.triggers

    def to_dict(self) -> dict[str, _typing.Any]:
        data = super().to_dict()
        data.update(
            {
                "ordinal": self.ordinal,
                "capabilities": self.capabilities,
                "triggers": self.triggers,
                "tools": self.frontmatter.tools,
                "model": self.frontmatter.model,
                "skills": self.frontmatter.skills,
                "inert_blocks": sorted(self.frontmatter.inert_blocks()),
            }
        )
        return data


def load_agent(path: _pathlib.Path, ordinal: int | None = None) -> Agent:
    """
    Load an agent document.

    Args:
        path: Path to the .md file.
        ordinal: Position among the corpus's agent files.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        DocumentError: If the file is invalid.
    """
    parsed = base.read_markdown(path)
    fm = base.validate_frontmatter(AgentFrontmatter, parsed, path, "agent")
    return Agent(
        frontmatter=fm,
        body=parsed.body,
        path=path,
        body_start_line=parsed.body_start_line,
        has_frontmatter=parsed.has_frontmatter,
        metadata=parsed.metadata,
        key_lines=parsed.key_lines,
        ordinal=ordinal,
    )
