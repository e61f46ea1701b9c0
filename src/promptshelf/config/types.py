"""Configuration section types for promptshelf settings.

Each section is a pydantic model nested in Settings:

- CorpusConfig: directory convention of the corpus
- LintConfigSection: which rules run and the failure threshold
- OutputConfig: output format and colour
- LoggingConfig: log level

All sections use `extra="allow"` so unknown keys are preserved and can be
reported instead of silently dropped.
"""

import typing as _typing

import pydantic as _pydantic

import promptshelf.constants as constants


class ConfigBase(_pydantic.BaseModel):
    """Base class for all config sections."""

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Fields that were provided but are not in the schema."""
        return dict(self.model_extra) if self.model_extra else {}


class CorpusConfig(ConfigBase):
    """Where each document kind lives, relative to the corpus root."""

    agents_dir: str = constants.DEFAULT_AGENTS_DIR
    skills_dir: str = constants.DEFAULT_SKILLS_DIR
    commands_dir: str = constants.DEFAULT_COMMANDS_DIR
    skill_file: str = constants.DEFAULT_SKILL_FILE
    guides: list[str] = _pydantic.Field(default_factory=lambda: list(constants.DEFAULT_GUIDES))


class LintConfigSection(ConfigBase):
    """Lint behaviour."""

    disabled: list[str] = _pydantic.Field(default_factory=list)
    severity_overrides: dict[str, _typing.Literal["error", "warning", "info"]] = _pydantic.Field(
        default_factory=dict
    )
    fail_on: _typing.Literal["error", "warning", "info"] = "error"
    body_soft_limit: int = _pydantic.Field(default=constants.BODY_SOFT_LIMIT, ge=1)
    require_bond: bool = False

    @_pydantic.field_validator("disabled", mode="before")
    @classmethod
    def _split_codes(cls, value: _typing.Any) -> _typing.Any:
        # Also accepts a comma-separated string: "FM003, LEN001"
        if isinstance(value, str):
            return [code.strip() for code in value.split(",") if code.strip()]
        return value


class OutputConfig(ConfigBase):
    """Output settings."""

    format: _typing.Literal["text", "json"] = "text"
    color: bool | None = None
    """None means auto-detect (colour when writing to a terminal)."""


class LoggingConfig(ConfigBase):
    """Logging settings."""

    level: str = "WARNING"

    @_pydantic.field_validator("level")
    @classmethod
    def _valid_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level
