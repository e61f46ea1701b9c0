"""Tests for cross-reference extraction and resolution."""

import pathlib as _pathlib

import pytest as _pytest

import promptshelf.catalog as catalog
import promptshelf.references as references


class TestLinks:
    @_pytest.mark.parametrize(
        "target,expected",
        [
            ("docs/guide.md", True),
            ("../skills/x/SKILL.md#usage", True),
            ("#section", False),
            ("https://example.com", False),
            ("mailto:someone@example.com", False),
            ("", False),
        ],
    )
    def test_is_local_link(self, target: str, expected: bool) -> None:
        assert references.is_local_link(target) is expected

    def test_resolve_link_strips_anchor_and_unquotes(
        self, tmp_path: _pathlib.Path, make_file
    ) -> None:
        source = make_file(tmp_path / "agents" / "a.md", "x\n")
        target = make_file(tmp_path / "docs" / "my guide.md", "y\n")
        assert references.resolve_link(source, "../docs/my%20guide.md#top") == target.resolve()
        assert references.resolve_link(source, "../docs/missing.md") is None

    def test_link_references_in_corpus(self, corpus_catalog: catalog.Catalog) -> None:
        reviewer = corpus_catalog.get_agent("code-reviewer")
        refs = references.link_references(reviewer)
        assert len(refs) == 1
        assert refs[0].kind == "link"
        assert refs[0].line == 7
        assert not refs[0].is_broken


class TestOrdinals:
    def test_resolves_informal_references(self, corpus_catalog: catalog.Catalog) -> None:
        architect = corpus_catalog.get_agent("api-architect")
        refs = references.ordinal_references(architect, corpus_catalog)
        assert [(r.target, r.line) for r in refs] == [("Skill 1", 16), ("Agent 2", 16)]
        assert refs[0].resolved == corpus_catalog.get_skill("api-design").path
        assert refs[1].resolved == corpus_catalog.get_agent("code-reviewer").path

    def test_missing_target_is_broken(self, corpus_root: _pathlib.Path, make_file) -> None:
        make_file(corpus_root / "agents" / "zz-router.md", "# Router\n\nsee agent #9 first.\n")
        cat = catalog.Catalog(corpus_root)
        refs = references.ordinal_references(cat.get_agent("zz-router"), cat)
        assert len(refs) == 1
        assert refs[0].target == "Agent 9"
        assert refs[0].is_broken

    def test_unloadable_agent_still_resolves(self, corpus_root: _pathlib.Path, make_file) -> None:
        bad = make_file(corpus_root / "agents" / "bad.md", "---\nname: [x\n---\n")
        cat = catalog.Catalog(corpus_root)
        refs = references.ordinal_references(cat.get_agent("api-architect"), cat)
        agent_ref = [r for r in refs if r.target == "Agent 2"][0]
        assert agent_ref.resolved == bad.resolve()
        assert not agent_ref.is_broken

    def test_code_blocks_are_ignored(self, corpus_root: _pathlib.Path, make_file) -> None:
        make_file(corpus_root / "agents" / "zz-code.md", "```\nSee Agent 9\n```\n")
        cat = catalog.Catalog(corpus_root)
        assert references.ordinal_references(cat.get_agent("zz-code"), cat) == []


class TestCorpusReferences:
    def test_bond_references(self, corpus_root: _pathlib.Path, make_file) -> None:
        make_file(
            corpus_root / "skills" / "orphan" / "SKILL.md",
            "---\nname: orphan\ndescription: d\nbonded-to: ghost\n---\n",
        )
        cat = catalog.Catalog(corpus_root)
        refs = {r.target: r for r in references.bond_references(cat)}
        assert not refs["api-architect"].is_broken
        assert refs["ghost"].is_broken
        assert refs["ghost"].line == 4

    def test_collect_and_broken(self, corpus_catalog: catalog.Catalog) -> None:
        refs = references.collect_references(corpus_catalog)
        assert {r.kind for r in refs} == {"link", "ordinal", "bond"}
        assert references.broken_references(corpus_catalog) == []

    def test_reference_graph(self, corpus_catalog: catalog.Catalog) -> None:
        graph = references.reference_graph(corpus_catalog)
        architect = corpus_catalog.get_agent("api-architect").path
        skill = corpus_catalog.get_skill("api-design").path
        assert skill in graph[architect]
        assert architect in graph[skill]
