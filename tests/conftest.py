"""
Shared pytest fixtures for Promptshelf tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import logging as _logging
import pathlib as _pathlib
import textwrap as _textwrap
import typing as _typing

import pytest as _pytest

import promptshelf.catalog as catalog

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "PROMPTSHELF_ROOT",
    "PROMPTSHELF_ENV_FILE",
    "PROMPTSHELF_OUTPUT__FORMAT",
    "PROMPTSHELF_OUTPUT__COLOR",
    "PROMPTSHELF_LINT__FAIL_ON",
    "PROMPTSHELF_LINT__DISABLED",
    "PROMPTSHELF_LOGGING__LEVEL",
    "NO_COLOR",
]

API_ARCHITECT = """\
---
name: api-architect
description: Designs REST and GraphQL APIs for backend services
capabilities:
  - API design
  - Versioning strategy
triggers:
  - design an api
  - review my endpoints
tools: Read, Write, Grep
input_schema:
  type: object
---
# API Architect

See Skill 1 for conventions. Hand reviews to See Agent 2.

```python
def handler(request):
    return {"ok": True}
```
"""

CODE_REVIEWER = """\
---
description: Reviews pull requests for correctness
trigger_phrases: [review my code]
---
# Code Reviewer

Check the [API conventions](../skills/api-design/SKILL.md) first.
"""

API_DESIGN_SKILL = """\
---
name: api-design
description: REST API design conventions and patterns
agent: api-architect
tags: [api, rest]
---
# API Design

Use nouns for resources.
"""

TESTING_SKILL = """\
---
name: testing
description: Testing strategies for services
---
# Testing

Write the test first.
"""

REVIEW_COMMAND = """\
---
description: Review the given file
argument-hint: <file>
aliases: [/cr]
---
Review $1 carefully.

Arguments: $ARGUMENTS
"""

README = """\
# Example Corpus

Start with [the architect](agents/api-architect.md).
"""


def write_file(path: _pathlib.Path, content: str) -> _pathlib.Path:
    """Write dedented content, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_textwrap.dedent(content), encoding="utf-8")
    return path


@_pytest.fixture(autouse=True)
def isolated_env(
    monkeypatch: _pytest.MonkeyPatch,
    tmp_path_factory: _pytest.TempPathFactory,
) -> _typing.Iterator[None]:
    """
    Isolate every test from the user's environment and config directory.

    Also undoes the log handler the CLI installs, so caplog keeps working.
    """
    for key in ENV_KEYS_TO_CLEAR:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("PROMPTSHELF_CONFIG_DIR", str(tmp_path_factory.mktemp("user-config")))
    yield
    logger = _logging.getLogger("promptshelf")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(_logging.NOTSET)


@_pytest.fixture
def make_file() -> _typing.Callable[[_pathlib.Path, str], _pathlib.Path]:
    """Factory that writes a (dedented) file and returns its path."""
    return write_file


@_pytest.fixture
def corpus_root(tmp_path: _pathlib.Path) -> _pathlib.Path:
    """
    A small, clean corpus.

    Two agents, two skills (one bonded), one command and a README. Linting
    it reports only the unbonded skill, as info.
    """
    root = tmp_path / "corpus"
    write_file(root / "agents" / "api-architect.md", API_ARCHITECT)
    write_file(root / "agents" / "code-reviewer.md", CODE_REVIEWER)
    write_file(root / "skills" / "api-design" / "SKILL.md", API_DESIGN_SKILL)
    write_file(root / "skills" / "api-design" / "references" / "patterns.md", "# Patterns\n")
    write_file(root / "skills" / "api-design" / "scripts" / "check.sh", "echo ok\n")
    write_file(root / "skills" / "testing" / "SKILL.md", TESTING_SKILL)
    write_file(root / "commands" / "review.md", REVIEW_COMMAND)
    write_file(root / "README.md", README)
    return root


@_pytest.fixture
def corpus_catalog(corpus_root: _pathlib.Path) -> catalog.Catalog:
    """Catalog over the sample corpus."""
    return catalog.Catalog(corpus_root)
