"""
Document discovery within a corpus root.

A corpus follows a directory convention:
- agents/*.md - agent documents
- skills/<name>/SKILL.md - skill documents
- commands/*.md - command documents
- README.md, ARCHITECTURE.md - guides at the root

Directory names come from CorpusLayout so a corpus can rename them.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import promptshelf.constants as constants
import promptshelf.documents as documents

_logger = _logging.getLogger(__name__)

Failure = tuple[_pathlib.Path, documents.DocumentError]


@_dataclasses.dataclass(frozen=True)
class CorpusLayout:
    """Where each document kind lives, relative to the corpus root."""

    agents_dir: str = constants.DEFAULT_AGENTS_DIR
    skills_dir: str = constants.DEFAULT_SKILLS_DIR
    commands_dir: str = constants.DEFAULT_COMMANDS_DIR
    skill_file: str = constants.DEFAULT_SKILL_FILE
    guides: tuple[str, ...] = constants.DEFAULT_GUIDES

    def kind_for_path(self, path: _pathlib.Path) -> str:
        """
        Infer the document kind of a file from its location.

        SKILL.md files are skills, files directly in the commands directory
        are commands, root guides are guides, anything else is an agent.
        """
        if path.name == self.skill_file:
            return "skill"
        if path.parent.name == self.commands_dir:
            return "command"
        if path.name in self.guides and path.parent.name not in (
            self.agents_dir,
            self.commands_dir,
        ):
            return "guide"
        return "agent"


@_dataclasses.dataclass
class LoadedCorpus:
    """Result of a full discovery pass."""

    agents: list[documents.Agent] = _dataclasses.field(default_factory=list)
    skills: list[documents.Skill] = _dataclasses.field(default_factory=list)
    commands: list[documents.Command] = _dataclasses.field(default_factory=list)
    guides: list[documents.Guide] = _dataclasses.field(default_factory=list)
    failures: list[Failure] = _dataclasses.field(default_factory=list)

    def all_documents(self) -> list[documents.Document]:
        return [*self.agents, *self.skills, *self.commands, *self.guides]


def _visible(path: _pathlib.Path) -> bool:
    return not path.name.startswith(".")


def load_document(
    path: _pathlib.Path,
    layout: CorpusLayout | None = None,
    *,
    kind: str | None = None,
) -> documents.Document:
    """
    Load a single file as the document kind its location implies.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        DocumentError: If the file is invalid.
    """
    layout = layout or CorpusLayout()
    kind = kind or layout.kind_for_path(path)
    if kind == "skill":
        return documents.load_skill(path)
    if kind == "command":
        return documents.load_command(path)
    if kind == "guide":
        return documents.load_guide(path)
    return documents.load_agent(path)


class CorpusDiscovery:
    """
    Discovers documents under a corpus root.

    Invalid documents never stop discovery: they are either skipped with
    a warning or reported as (path, error) pairs.
    """

    def __init__(
        self,
        root: _pathlib.Path,
        layout: CorpusLayout | None = None,
    ) -> None:
        """
        Initialize discovery.

        Args:
            root: Corpus root directory.
            layout: Directory convention (defaults to the standard one).

        Raises:
            FileNotFoundError: If root is not a directory.
        """
        if not root.is_dir():
            raise FileNotFoundError(f"Corpus root not found: {root}")
        self._root = root.resolve()
        self._layout = layout or CorpusLayout()

    @property
    def root(self) -> _pathlib.Path:
        return self._root

    @property
    def layout(self) -> CorpusLayout:
        return self._layout

    def agent_paths(self) -> list[_pathlib.Path]:
        agents_dir = self._root / self._layout.agents_dir
        if not agents_dir.is_dir():
            return []
        return [p for p in sorted(agents_dir.glob("*.md")) if p.is_file() and _visible(p)]

    def skill_paths(self) -> list[_pathlib.Path]:
        skills_dir = self._root / self._layout.skills_dir
        if not skills_dir.is_dir():
            return []
        paths: list[_pathlib.Path] = []
        for skill_dir in sorted(skills_dir.iterdir()):
            if not skill_dir.is_dir() or not _visible(skill_dir):
                continue
            skill_file = skill_dir / self._layout.skill_file
            if skill_file.is_file():
                paths.append(skill_file)
        return paths

    def command_paths(self) -> list[_pathlib.Path]:
        commands_dir = self._root / self._layout.commands_dir
        if not commands_dir.is_dir():
            return []
        return [p for p in sorted(commands_dir.glob("*.md")) if p.is_file() and _visible(p)]

    def guide_paths(self) -> list[_pathlib.Path]:
        return [
            self._root / name
            for name in self._layout.guides
            if (self._root / name).is_file()
        ]

    def _iter_targets(self) -> _typing.Iterator[tuple[str, _pathlib.Path, int | None]]:
        for ordinal, path in enumerate(self.agent_paths(), start=1):
            yield "agent", path, ordinal
        for path in self.skill_paths():
            yield "skill", path, None
        for path in self.command_paths():
            yield "command", path, None
        for path in self.guide_paths():
            yield "guide", path, None

    def discover_all(
        self,
        *,
        include_errors: bool = False,
    ) -> _typing.Iterator[documents.Document | Failure]:
        """
        Discover all documents, optionally including errors.

        Agent ordinals count every agent file, loadable or not, so they
        match the directory listing.

        Args:
            include_errors: If True, yield (path, error) for failures.

        Yields:
            Documents, or (path, DocumentError) tuples if include_errors.
        """
        for kind, path, ordinal in self._iter_targets():
            try:
                if kind == "agent":
                    yield documents.load_agent(path, ordinal=ordinal)
                else:
                    yield load_document(path, self._layout, kind=kind)
            except documents.DocumentError as e:
                if include_errors:
                    yield (path, e)
            except OSError as e:
                if include_errors:
                    yield (
                        path,
                        documents.DocumentError(
                            f"cannot read file: {e}", path=path, code=documents.UNREADABLE
                        ),
                    )

    def discover(self) -> LoadedCorpus:
        """
        Load every document in the corpus.

        Returns:
            LoadedCorpus with valid documents and the failures.
        """
        corpus = LoadedCorpus()
        for item in self.discover_all(include_errors=True):
            if isinstance(item, tuple):
                path, error = item
                _logger.warning("Skipping %s: %s", path, error.message)
                corpus.failures.append(item)
            elif isinstance(item, documents.Agent):
                corpus.agents.append(item)
            elif isinstance(item, documents.Skill):
                corpus.skills.append(item)
            elif isinstance(item, documents.Command):
                corpus.commands.append(item)
            else:
                corpus.guides.append(item)

        _logger.debug(
            "Loaded %d agents, %d skills, %d commands, %d guides from %s (%d failed)",
            len(corpus.agents),
            len(corpus.skills),
            len(corpus.commands),
            len(corpus.guides),
            self._root,
            len(corpus.failures),
        )
        return corpus
