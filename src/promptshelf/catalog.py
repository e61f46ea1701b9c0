"""
Catalog of a corpus's documents.

The catalog discovers lazily, indexes documents by kind and name, and
answers the questions the corpus only answers informally: which skills
belong to an agent, which agent is "Agent 3", what matches a request.
"""

from __future__ import annotations

import collections as _collections
import pathlib as _pathlib
import re as _re
import typing as _typing

import promptshelf.constants as constants
import promptshelf.discovery as discovery
import promptshelf.documents as documents

KINDS = ("agent", "skill", "command")


def _mentions(text: str, phrase: str) -> bool:
    """Whether ``phrase`` appears in ``text`` as whole words."""
    return _re.search(rf"(?<![\w-]){_re.escape(phrase)}(?![\w-])", text) is not None


def _index(items: _typing.Sequence[_typing.Any]) -> dict[str, _typing.Any]:
    """Map names to documents, keeping the first of any duplicates."""
    index: dict[str, _typing.Any] = {}
    for item in items:
        index.setdefault(item.name, item)
    return index


class Catalog:
    """
    Indexed view of a corpus.

    Handles:
    - Lazy discovery and reload
    - Lookup by kind and name (commands also by alias)
    - Skill/agent bonds
    - Keyword search
    """

    def __init__(
        self,
        root: _pathlib.Path,
        layout: discovery.CorpusLayout | None = None,
    ) -> None:
        """
        Initialize the catalog.

        Args:
            root: Corpus root directory.
            layout: Directory convention.

        Raises:
            FileNotFoundError: If root is not a directory.
        """
        self._discovery = discovery.CorpusDiscovery(root, layout)
        self._corpus: discovery.LoadedCorpus | None = None
        self._agents: dict[str, documents.Agent] = {}
        self._skills: dict[str, documents.Skill] = {}
        self._commands: dict[str, documents.Command] = {}

    @property
    def root(self) -> _pathlib.Path:
        return self._discovery.root

    @property
    def layout(self) -> discovery.CorpusLayout:
        return self._discovery.layout

    def _ensure_discovered(self) -> discovery.LoadedCorpus:
        if self._corpus is None:
            corpus = self._discovery.discover()
            self._agents = _index(corpus.agents)
            self._skills = _index(corpus.skills)
            # Names and aliases share one namespace, first file wins
            self._commands = {}
            for command in corpus.commands:
                for key in (command.name, *command.aliases):
                    self._commands.setdefault(key, command)
            self._corpus = corpus
        return self._corpus

    def reload(self) -> None:
        """Force re-discovery of the corpus."""
        self._corpus = None
        self._ensure_discovered()

    @property
    def corpus(self) -> discovery.LoadedCorpus:
        return self._ensure_discovered()

    @property
    def failures(self) -> list[discovery.Failure]:
        """Files that could not be loaded."""
        return list(self._ensure_discovered().failures)

    # Listing
    def list_agents(self) -> list[documents.Agent]:
        return list(self._ensure_discovered().agents)

    def list_skills(self) -> list[documents.Skill]:
        return list(self._ensure_discovered().skills)

    def list_commands(self) -> list[documents.Command]:
        return list(self._ensure_discovered().commands)

    def list_guides(self) -> list[documents.Guide]:
        return list(self._ensure_discovered().guides)

    def list_kind(self, kind: str) -> list[_typing.Any]:
        """List documents of one kind ("agent", "skill", "command", "guide")."""
        listers = {
            "agent": self.list_agents,
            "skill": self.list_skills,
            "command": self.list_commands,
            "guide": self.list_guides,
        }
        if kind not in listers:
            raise ValueError(f"Unknown document kind: {kind}")
        return listers[kind]()

    # Lookup
    def get_agent(self, name: str) -> documents.Agent | None:
        self._ensure_discovered()
        return self._agents.get(name)

    def get_skill(self, name: str) -> documents.Skill | None:
        self._ensure_discovered()
        return self._skills.get(name)

    def get_command(self, name: str) -> documents.Command | None:
        """Get a command by name or alias (a leading / is ignored)."""
        self._ensure_discovered()
        return self._commands.get(name.lstrip("/"))

    def get_agent_by_ordinal(self, ordinal: int) -> documents.Agent | None:
        """Get the agent whose file is at 1-based position ``ordinal``."""
        for agent in self.list_agents():
            if agent.ordinal == ordinal:
                return agent
        return None

    def agent_path_by_ordinal(self, ordinal: int) -> _pathlib.Path | None:
        """File at 1-based position ``ordinal``, whether or not it loaded."""
        paths = self._discovery.agent_paths()
        if 1 <= ordinal <= len(paths):
            return paths[ordinal - 1]
        return None

    def get_by_position(self, kind: str, position: int) -> _typing.Any | None:
        """
        Resolve an informal "<Kind> N" reference.

        Agents resolve by file ordinal, other kinds by sorted position.
        """
        if kind == "agent":
            return self.get_agent_by_ordinal(position)
        items = self.list_kind(kind)
        if 1 <= position <= len(items):
            return items[position - 1]
        return None

    # Bonds
    def skills_for_agent(self, name: str) -> list[documents.Skill]:
        """Skills bonded to the named agent, sorted by name."""
        bonded = [s for s in self.list_skills() if s.bonded_agent == name]
        return sorted(bonded, key=lambda s: s.name)

    def agent_for_skill(self, name: str) -> documents.Agent | None:
        skill = self.get_skill(name)
        if skill is None or skill.bonded_agent is None:
            return None
        return self.get_agent(skill.bonded_agent)

    def unbonded_skills(self) -> list[documents.Skill]:
        return [s for s in self.list_skills() if not s.bonded_agent]

    # Search
    def search(
        self,
        query: str,
        *,
        kind: str | None = None,
        max_results: int = 10,
    ) -> list[tuple[_typing.Any, int]]:
        """
        Find documents that might match a request.

        This is simple keyword scoring: the name appearing in the query as
        whole words scores highest, then each trigger phrase the query
        contains, then each longer description word that appears in the
        query.

        Args:
            query: Free text, e.g. a user's request.
            kind: Restrict to one kind.
            max_results: Maximum number of results.

        Returns:
            List of (document, score), best first.
        """
        query_lower = query.lower()
        kinds = [kind] if kind else list(KINDS)
        matches: list[tuple[_typing.Any, int]] = []

        for k in kinds:
            for doc in self.list_kind(k):
                score = 0
                name = doc.name.lower()
                if _mentions(query_lower, name) or _mentions(query_lower, name.replace("-", " ")):
                    score += constants.SEARCH_NAME_SCORE

                for trigger in getattr(doc, "triggers", []):
                    if trigger and trigger.lower() in query_lower:
                        score += constants.SEARCH_TRIGGER_SCORE

                for word in set(doc.description.lower().split()):
                    word = word.strip(".,;:!?()\"'")
                    if len(word) > 3 and word in query_lower:
                        score += constants.SEARCH_WORD_SCORE

                if score > 0:
                    matches.append((doc, score))

        matches.sort(key=lambda m: (-m[1], m[0].kind, m[0].name))
        return matches[:max_results]

    # Reporting
    def stats(self) -> dict[str, _typing.Any]:
        """Counts across the corpus."""
        corpus = self._ensure_discovered()
        languages: _collections.Counter[str] = _collections.Counter()
        body_lines = 0
        for doc in corpus.all_documents():
            body_lines += doc.body_line_count
            for block in doc.code_blocks:
                languages[block.language or "(none)"] += 1

        return {
            "root": str(self.root),
            "agents": len(corpus.agents),
            "skills": len(corpus.skills),
            "commands": len(corpus.commands),
            "guides": len(corpus.guides),
            "failures": len(corpus.failures),
            "bonded_skills": len(corpus.skills) - len(self.unbonded_skills()),
            "unbonded_skills": len(self.unbonded_skills()),
            "body_lines": body_lines,
            "code_blocks": dict(sorted(languages.items())),
        }

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        corpus = self._ensure_discovered()
        return {
            "root": str(self.root),
            "agents": [a.to_dict() for a in corpus.agents],
            "skills": [s.to_dict() for s in corpus.skills],
            "commands": [c.to_dict() for c in corpus.commands],
            "guides": [g.to_dict() for g in corpus.guides],
            "failures": [
                {"path": str(path), "line": error.line, "code": error.code, "error": error.message}
                for path, error in corpus.failures
            ],
        }
