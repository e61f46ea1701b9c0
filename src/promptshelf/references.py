"""
Cross-references between corpus documents.

Three kinds are recognised:
- link: a relative Markdown link to another file
- ordinal: prose such as "See Agent 3"
- bond: a skill's bonded agent
"""

from __future__ import annotations

import dataclasses as _dataclasses
import pathlib as _pathlib
import re as _re
import typing as _typing
import urllib.parse as _urlparse

import promptshelf.markdown as markdown

if _typing.TYPE_CHECKING:
    import promptshelf.catalog as _catalog

_ORDINAL_RE = _re.compile(r"\bsee\s+(?P<kind>agent|skill|command)\s+#?(?P<num>\d+)\b", _re.IGNORECASE)
_SCHEME_RE = _re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


@_dataclasses.dataclass(frozen=True)
class Reference:
    """One reference from a document to something else in the corpus."""

    source: _pathlib.Path
    line: int | None
    kind: str
    target: str
    resolved: _pathlib.Path | None = None

    @property
    def is_broken(self) -> bool:
        return self.resolved is None

    def to_dict(self) -> dict[str, _typing.Any]:
        return {
            "source": str(self.source),
            "line": self.line,
            "kind": self.kind,
            "target": self.target,
            "resolved": str(self.resolved) if self.resolved else None,
        }


def is_local_link(target: str) -> bool:
    """Whether a link target points at a file rather than a URL or anchor."""
    if not target or target.startswith("#"):
        return False
    return not _SCHEME_RE.match(target)


def resolve_link(source: _pathlib.Path, target: str) -> _pathlib.Path | None:
    """
    Resolve a relative link against the file that contains it.

    Returns:
        The existing target path, or None if nothing is there.
    """
    path_part = _urlparse.unquote(target.split("#", 1)[0].split("?", 1)[0])
    if not path_part:
        return source
    candidate = (source.parent / path_part).resolve()
    if candidate.exists():
        return candidate
    return None


def link_references(document: _typing.Any) -> list[Reference]:
    """Relative Markdown links in one document."""
    refs: list[Reference] = []
    for link in document.links:
        if not is_local_link(link.target):
            continue
        refs.append(
            Reference(
                source=document.path,
                line=link.line,
                kind="link",
                target=link.target,
                resolved=resolve_link(document.path, link.target),
            )
        )
    return refs


def ordinal_references(
    document: _typing.Any,
    catalog: _catalog.Catalog,
) -> list[Reference]:
    """Informal "See Agent N" references in one document's prose."""
    refs: list[Reference] = []
    for line_no, line in markdown.prose_text(document.body, document.body_start_line):
        for match in _ORDINAL_RE.finditer(line):
            kind = match.group("kind").lower()
            number = int(match.group("num"))
            if kind == "agent":
                # Agent numbering includes files that failed to load
                resolved = catalog.agent_path_by_ordinal(number)
            else:
                target_doc = catalog.get_by_position(kind, number)
                resolved = target_doc.path if target_doc is not None else None
            refs.append(
                Reference(
                    source=document.path,
                    line=line_no,
                    kind="ordinal",
                    target=f"{kind.capitalize()} {number}",
                    resolved=resolved,
                )
            )
    return refs


def bond_references(catalog: _catalog.Catalog) -> list[Reference]:
    """One reference per skill that names a bonded agent."""
    refs: list[Reference] = []
    for skill in catalog.list_skills():
        if not skill.bonded_agent:
            continue
        agent = catalog.get_agent(skill.bonded_agent)
        refs.append(
            Reference(
                source=skill.path,
                line=skill.line_for("agent") or _first_bond_line(skill),
                kind="bond",
                target=skill.bonded_agent,
                resolved=agent.path if agent is not None else None,
            )
        )
    return refs


def _first_bond_line(skill: _typing.Any) -> int | None:
    for key in ("bonded_agent", "bonded-agent", "bonded_to", "bonded-to"):
        line = skill.line_for(key)
        if line is not None:
            return line
    return None


def collect_references(catalog: _catalog.Catalog) -> list[Reference]:
    """Every reference in the corpus, ordered by source and line."""
    refs: list[Reference] = []
    for document in catalog.corpus.all_documents():
        refs.extend(link_references(document))
        refs.extend(ordinal_references(document, catalog))
    refs.extend(bond_references(catalog))
    refs.sort(key=lambda r: (str(r.source), r.line or 0, r.kind, r.target))
    return refs


def broken_references(catalog: _catalog.Catalog) -> list[Reference]:
    return [r for r in collect_references(catalog) if r.is_broken]


def reference_graph(catalog: _catalog.Catalog) -> dict[_pathlib.Path, set[_pathlib.Path]]:
    """Map each source document to the documents it resolves to."""
    graph: dict[_pathlib.Path, set[_pathlib.Path]] = {}
    for ref in collect_references(catalog):
        if ref.resolved is None or ref.resolved == ref.source:
            continue
        graph.setdefault(ref.source, set()).add(ref.resolved)
    return graph
