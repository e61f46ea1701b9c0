"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with PROMPTSHELF_ prefix
3. .env file (if PROMPTSHELF_ENV_FILE points at one)
4. Layered YAML config files:
   - Project config: <corpus root>/.promptshelf.yaml (highest)
   - User config: ~/.config/promptshelf/config.yaml
   - Built-in defaults: bundled defaults/config.yaml (lowest)

Nested config uses double underscore delimiter:
  PROMPTSHELF_LINT__FAIL_ON=warning
  PROMPTSHELF_CORPUS__AGENTS_DIR=personas
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import promptshelf.config.sources as sources
import promptshelf.config.types as types
import promptshelf.discovery as discovery
import promptshelf.lint as lint_module

ENV_ROOT = "PROMPTSHELF_ROOT"


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    Only an explicit PROMPTSHELF_ENV_FILE is honoured; without it settings
    come from the environment and config files alone.
    """
    if env_file := _os.environ.get("PROMPTSHELF_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


def resolve_corpus_root(root: _typing.Any = None) -> _pathlib.Path:
    """
    Pick the corpus root.

    Tries (in order): the explicit value, PROMPTSHELF_ROOT, the current
    directory.
    """
    if root:
        return _pathlib.Path(root).expanduser().resolve()
    if env_root := _os.environ.get(ENV_ROOT):
        return _pathlib.Path(env_root).expanduser().resolve()
    return _pathlib.Path.cwd().resolve()


class Settings(_pydantic_settings.BaseSettings):
    """
    Promptshelf configuration settings.

    All settings can be overridden via environment variables with the
    PROMPTSHELF_ prefix. For nested config, use double underscore:
    PROMPTSHELF_LINT__BODY_SOFT_LIMIT=800

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (PROMPTSHELF_*)
    3. .env file
    4. Project config (<root>/.promptshelf.yaml)
    5. User config (~/.config/promptshelf/config.yaml)
    6. Built-in defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="PROMPTSHELF_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args) - highest
        2. env_settings (PROMPTSHELF_* env vars)
        3. dotenv_settings (.env file)
        4. layered YAML config files
        5. (defaults via Field definitions) - lowest
        """
        init_kwargs = getattr(init_settings, "init_kwargs", {}) or {}
        corpus_root = resolve_corpus_root(init_kwargs.get("root"))

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.LayeredYamlSettingsSource(settings_cls, corpus_root),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings without loading any .env file (useful for tests)."""
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    version: int = _pydantic.Field(default=1, description="Config schema version")

    root: _pathlib.Path | None = _pydantic.Field(
        default=None,
        description="Corpus root (defaults to PROMPTSHELF_ROOT or the current directory)",
    )

    corpus: types.CorpusConfig = _pydantic.Field(default_factory=types.CorpusConfig)
    """Directory convention."""

    lint: types.LintConfigSection = _pydantic.Field(default_factory=types.LintConfigSection)
    """Lint rules and thresholds."""

    output: types.OutputConfig = _pydantic.Field(default_factory=types.OutputConfig)
    """Output format."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)
    """Log level."""

    @property
    def corpus_root(self) -> _pathlib.Path:
        """Resolved corpus root."""
        return resolve_corpus_root(self.root)

    def layout(self) -> discovery.CorpusLayout:
        """The corpus layout described by the corpus section."""
        return discovery.CorpusLayout(
            agents_dir=self.corpus.agents_dir,
            skills_dir=self.corpus.skills_dir,
            commands_dir=self.corpus.commands_dir,
            skill_file=self.corpus.skill_file,
            guides=tuple(self.corpus.guides),
        )

    def lint_config(self) -> lint_module.LintConfig:
        """
        Build the linter configuration.

        Raises:
            ValueError: If the config names unknown rule codes.
        """
        return lint_module.LintConfig(
            disabled=frozenset(self.lint.disabled),
            severity_overrides={
                code: lint_module.Severity(level) for code, level in self.lint.severity_overrides.items()
            },
            fail_on=lint_module.Severity(self.lint.fail_on),
            body_soft_limit=self.lint.body_soft_limit,
            require_bond=self.lint.require_bond,
        )

    def config_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """YAML layers that contributed to these settings, lowest first."""
        source = sources.LayeredYamlSettingsSource(type(self), self.corpus_root)
        return source.get_loaded_layers()

    def collect_extra_fields(self) -> dict[str, _typing.Any]:
        """Unknown keys anywhere in the config, as dotted paths."""
        extras: dict[str, _typing.Any] = {}
        if self.model_extra:
            extras.update(self.model_extra)
        for section_name in ("corpus", "lint", "output", "logging"):
            section: types.ConfigBase = getattr(self, section_name)
            for key, value in section.get_extra_fields().items():
                extras[f"{section_name}.{key}"] = value
        return extras
