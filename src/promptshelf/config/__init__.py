"""
Configuration module for promptshelf.

Uses pydantic-settings for environment variable loading.
"""

from promptshelf.config.settings import Settings, resolve_corpus_root
from promptshelf.config.sources import ConfigFileError

__all__ = ["ConfigFileError", "Settings", "resolve_corpus_root"]
