"""Custom pydantic-settings source for promptshelf configuration.

Configuration layers (in precedence order, highest first):
1. Constructor arguments and environment variables (pydantic-settings)
2. Project config: .promptshelf.yaml in the corpus root
3. User config: ~/.config/promptshelf/config.yaml (or PROMPTSHELF_CONFIG_DIR)
4. Built-in defaults: bundled defaults/config.yaml

Layers 2-4 are merged here: nested mappings merge key by key, any other
value from a higher layer replaces the lower one.

Environment variables:
- PROMPTSHELF_CONFIG_DIR: Override user config directory
"""

import copy as _copy
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "PROMPTSHELF_CONFIG_DIR"

PROJECT_CONFIG_NAME = ".promptshelf.yaml"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def deep_merge(
    base: dict[str, _typing.Any],
    override: _typing.Mapping[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Merge ``override`` into a copy of ``base``.

    Nested mappings merge recursively; everything else (lists included)
    is replaced.
    """
    merged = _copy.deepcopy(base)
    for key, value in override.items():
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, _typing.Mapping):
            merged[key] = deep_merge(existing, value)
        else:
            merged[key] = _copy.deepcopy(value)
    return merged


def get_builtin_defaults_path() -> _pathlib.Path:
    """Get the path to the built-in defaults config file."""
    return _pathlib.Path(__file__).parent / "defaults" / "config.yaml"


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Respects PROMPTSHELF_CONFIG_DIR if set, otherwise uses the XDG path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return _pathlib.Path.home() / ".config" / "promptshelf"


def get_user_config_path() -> _pathlib.Path:
    """Get the path to the user config file."""
    return get_user_config_dir() / "config.yaml"


def get_project_config_path(corpus_root: _pathlib.Path) -> _pathlib.Path:
    """Get the path to a corpus's own config file."""
    return corpus_root / PROJECT_CONFIG_NAME


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Load a YAML config file.

    Returns:
        Parsed contents, or None if the file is empty.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or is not a mapping at the top level.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError as e:
        raise ConfigFileError(path, f"permission denied: {e}") from e
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e}") from e

    try:
        parsed = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if parsed is None:
        return None

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise ConfigFileError(
            path,
            f"config must be a YAML mapping (dict), got {type_name}",
        )

    return parsed


class LayeredYamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that merges the YAML config layers.

    Layers (lowest to highest precedence):
    1. Built-in defaults (required)
    2. User config (optional)
    3. Project config in the corpus root (optional)
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        corpus_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
        builtin_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            corpus_root: Corpus root for the project-level config.
            user_config_path: Override path for the user config (for testing).
            builtin_config_path: Override path for built-in defaults (for testing).
        """
        super().__init__(settings_cls)
        self._corpus_root = corpus_root
        self._user_config_path = user_config_path or get_user_config_path()
        self._builtin_config_path = builtin_config_path or get_builtin_defaults_path()
        # Layers actually loaded, lowest precedence first
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._merged = self._load_config_layers()

    def _load_config_layers(self) -> dict[str, _typing.Any]:
        builtin_content = (
            load_yaml_file(self._builtin_config_path)
            if self._builtin_config_path.exists()
            else None
        )
        # Missing or empty built-in defaults is an installation problem
        if not builtin_content:
            raise ConfigFileError(
                self._builtin_config_path,
                "built-in defaults missing or empty (possible installation problem)",
            )
        merged = builtin_content
        self._loaded_layers.append(("built-in", self._builtin_config_path))

        optional_layers: list[tuple[str, _pathlib.Path]] = [("user", self._user_config_path)]
        if self._corpus_root is not None:
            optional_layers.append(("project", get_project_config_path(self._corpus_root)))

        for layer_name, path in optional_layers:
            if not path.exists():
                continue
            content = load_yaml_file(path)
            if content:
                merged = deep_merge(merged, content)
                self._loaded_layers.append((layer_name, path))

        return merged

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """Layers that were loaded, lowest precedence first."""
        return list(self._loaded_layers)

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        value = self._merged.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return the merged config as a plain dict for validation."""
        return _copy.deepcopy(self._merged)
