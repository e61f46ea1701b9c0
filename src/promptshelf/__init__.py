"""
Promptshelf - catalogue and lint for prompt-document corpora.

A corpus is a directory of Markdown files describing agents, skills and
slash commands, each optionally carrying YAML front-matter. Promptshelf
reads those files as data: it never executes what they describe.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("promptshelf")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "Promptshelf Contributors"

from promptshelf.catalog import Catalog  # noqa: E402
from promptshelf.config import Settings  # noqa: E402

__all__ = ["__version__", "__version_info__", "Catalog", "Settings"]
