"""
Skill definition and SKILL.md parsing.

Skills are defined by a SKILL.md file with YAML frontmatter inside their
own directory (skills/<name>/SKILL.md). The frontmatter contains metadata,
including the agent the skill is bonded to; the body contains reference
material.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic

import promptshelf.constants as constants
import promptshelf.documents.base as base
import promptshelf.frontmatter as frontmatter


class SkillFrontmatter(base.FrontmatterModel):
    """
    Frontmatter parsed from a SKILL.md file.

    Required fields:
    - name: Skill identifier (should match directory name)
    - description: What the skill covers

    The bond to an agent is a plain text field; several spellings are
    accepted because corpora disagree on it.
    """

    # Required fields
    name: str = _pydantic.Field(
        ...,
        min_length=1,
        max_length=constants.NAME_MAX_LENGTH,
        pattern=constants.NAME_PATTERN,
        description="Skill name (lowercase, hyphens allowed)",
    )

    description: str = _pydantic.Field(
        ...,
        min_length=1,
        max_length=constants.DESCRIPTION_MAX_LENGTH,
        description="What the skill covers",
    )

    # Optional fields
    agent: str | None = _pydantic.Field(
        default=None,
        validation_alias=_pydantic.AliasChoices(
            "agent", "bonded_agent", "bonded-agent", "bonded_to", "bonded-to"
        ),
        description="Name of the agent this skill is bonded to",
    )

    license: str | None = None

    allowed_tools: list[str] = _pydantic.Field(
        default_factory=list,
        validation_alias=_pydantic.AliasChoices("allowed-tools", "allowed_tools"),
        description="Tools pre-approved for use with this skill",
    )

    tags: list[str] = _pydantic.Field(default_factory=list)

    version: str | None = None

    metadata: dict[str, _typing.Any] = _pydantic.Field(
        default_factory=dict,
        description="Custom metadata for client-specific data",
    )

    @_pydantic.field_validator("allowed_tools", mode="before")
    @classmethod
    def _coerce_tools(cls, value: _typing.Any) -> list[str]:
        return base.as_string_list(value, split_commas=True)

    @_pydantic.field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: _typing.Any) -> list[str]:
        return base.as_string_list(value, split_commas=True)

    @_pydantic.field_validator("version", "agent", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: _typing.Any) -> _typing.Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


@_dataclasses.dataclass
class Skill(base.MarkdownDocument):
    """A parsed skill."""

    frontmatter: SkillFrontmatter
    """Parsed frontmatter metadata."""

    body: str
    """Skill content (markdown body after frontmatter)."""

    path: _pathlib.Path
    """Path to the SKILL.md file."""

    body_start_line: int = 1
    has_frontmatter: bool = True
    metadata: dict[str, _typing.Any] = _dataclasses.field(default_factory=dict)
    key_lines: frontmatter.KeyLines = _dataclasses.field(default_factory=dict)

    kind = "skill"

    @property
    def name(self) -> str:
        """Skill name from frontmatter."""
        return self.frontmatter.name

    @property
    def description(self) -> str:
        """Skill description from frontmatter."""
        return self.frontmatter.description

    @property
    def bonded_agent(self) -> str | None:
        """Name of the agent this skill is bonded to."""
        return self.frontmatter.agent

    @property
    def directory(self) -> _pathlib.Path:
        """The skill's own directory."""
        return self.path.parent

    def list_reference_files(self) -> list[_pathlib.Path]:
        """
        List reference files that ship with the skill.

        Returns files in references/ plus any top-level .md files other
        than the skill file itself.
        """
        refs: list[_pathlib.Path] = []

        refs_dir = self.directory / "references"
        if refs_dir.is_dir():
            for ref_file in sorted(refs_dir.iterdir()):
                if ref_file.is_file() and not ref_file.name.startswith("."):
                    refs.append(ref_file)

        for md_file in sorted(self.directory.glob("*.md")):
            if md_file.name != self.path.name:
                refs.append(md_file)

        return refs

    def list_scripts(self) -> list[_pathlib.Path]:
        """List files in the skill's scripts/ directory."""
        scripts_dir = self.directory / "scripts"
        if not scripts_dir.is_dir():
            return []
        return [
            script
            for script in sorted(scripts_dir.iterdir())
            if script.is_file() and not script.name.startswith(".")
        ]

    def to_dict(self) -> dict[str, _typing.Any]:
        data = super().to_dict()
        data.update(
            {
                "bonded_agent": self.bonded_agent,
                "license": self.frontmatter.license,
                "allowed_tools": self.frontmatter.allowed_tools,
                "tags": self.frontmatter.tags,
                "version": self.frontmatter.version,
                "reference_files": [str(f) for f in self.list_reference_files()],
                "scripts": [str(s) for s in self.list_scripts()],
            }
        )
        return data


def load_skill(path: _pathlib.Path) -> Skill:
    """
    Load a skill from its SKILL.md file or its directory.

    Args:
        path: The SKILL.md file, or a directory containing one.

    Returns:
        Parsed Skill instance.

    Raises:
        FileNotFoundError: If SKILL.md doesn't exist.
        DocumentError: If SKILL.md is invalid.
    """
    if path.is_dir():
        path = path / constants.DEFAULT_SKILL_FILE
    if not path.is_file():
        raise FileNotFoundError(f"{constants.DEFAULT_SKILL_FILE} not found: {path}")

    parsed = base.read_markdown(path)
    if not parsed.has_frontmatter:
        raise base.DocumentError(
            f"{path.name} must have YAML frontmatter (---)",
            path=path,
            line=1,
        )
    fm = base.validate_frontmatter(SkillFrontmatter, parsed, path, "skill")

    return Skill(
        frontmatter=fm,
        body=parsed.body,
        path=path,
        body_start_line=parsed.body_start_line,
        has_frontmatter=True,
        metadata=parsed.metadata,
        key_lines=parsed.key_lines,
    )
