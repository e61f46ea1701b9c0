"""
Shared constants for Promptshelf.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Corpus layout defaults
DEFAULT_AGENTS_DIR = "agents"
"""Directory holding agent documents (agents/*.md)."""

DEFAULT_SKILLS_DIR = "skills"
"""Directory holding skill directories (skills/<name>/SKILL.md)."""

DEFAULT_COMMANDS_DIR = "commands"
"""Directory holding command documents (commands/*.md)."""

DEFAULT_SKILL_FILE = "SKILL.md"
"""File name of the document inside each skill directory."""

DEFAULT_GUIDES = ("README.md", "ARCHITECTURE.md")
"""Root-level guide documents."""

# Lint defaults
BODY_SOFT_LIMIT = 500
"""Soft limit for document bodies (lines)."""

NAME_MAX_LENGTH = 64
"""Maximum length of a document name."""

DESCRIPTION_MAX_LENGTH = 1024
"""Maximum length of a description field."""

NAME_PATTERN = r"^[a-z0-9][a-z0-9-]*[a-z0-9]$|^[a-z0-9]$"
"""Lowercase slug with hyphens, shared by every document kind."""

# Search scoring
SEARCH_NAME_SCORE = 10
SEARCH_TRIGGER_SCORE = 5
SEARCH_WORD_SCORE = 1
