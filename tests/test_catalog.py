"""
Tests for the Catalog.

Tests verify that:
- Discovery is lazy and reloadable
- Lookups work by name, alias and ordinal
- Bonds resolve in both directions
- Search scores names, triggers and description words
"""

import pathlib as _pathlib

import pytest as _pytest

import promptshelf.catalog as catalog


class TestCatalogLookup:
    def test_discovery_is_lazy(self, corpus_root: _pathlib.Path, make_file) -> None:
        cat = catalog.Catalog(corpus_root)
        # Files written before the first query are still seen
        make_file(corpus_root / "agents" / "zeta.md", "# Zeta\n")
        assert cat.get_agent("zeta") is not None

    def test_reload_picks_up_changes(self, corpus_catalog: catalog.Catalog, make_file) -> None:
        assert corpus_catalog.get_agent("zeta") is None
        make_file(corpus_catalog.root / "agents" / "zeta.md", "# Zeta\n")
        assert corpus_catalog.get_agent("zeta") is None
        corpus_catalog.reload()
        assert corpus_catalog.get_agent("zeta") is not None

    def test_get_by_name(self, corpus_catalog: catalog.Catalog) -> None:
        assert corpus_catalog.get_agent("api-architect") is not None
        assert corpus_catalog.get_skill("testing") is not None
        assert corpus_catalog.get_agent("missing") is None

    def test_get_command_by_alias_and_slash(self, corpus_catalog: catalog.Catalog) -> None:
        review = corpus_catalog.get_command("review")
        assert review is not None
        assert corpus_catalog.get_command("/review") is review
        assert corpus_catalog.get_command("cr") is review
        assert corpus_catalog.get_command("/cr") is review

    def test_get_by_position(self, corpus_catalog: catalog.Catalog) -> None:
        assert corpus_catalog.get_agent_by_ordinal(2).name == "code-reviewer"
        assert corpus_catalog.get_by_position("agent", 1).name == "api-architect"
        assert corpus_catalog.get_by_position("skill", 2).name == "testing"
        assert corpus_catalog.get_by_position("command", 1).name == "review"
        assert corpus_catalog.get_by_position("skill", 3) is None
        assert corpus_catalog.get_by_position("skill", 0) is None

    def test_list_kind_rejects_unknown(self, corpus_catalog: catalog.Catalog) -> None:
        assert len(corpus_catalog.list_kind("guide")) == 1
        with _pytest.raises(ValueError, match="Unknown document kind"):
            corpus_catalog.list_kind("plugin")

    def test_duplicate_names_keep_first(self, corpus_root: _pathlib.Path, make_file) -> None:
        make_file(corpus_root / "agents" / "zz-copy.md", "---\nname: api-architect\n---\nCopy\n")
        cat = catalog.Catalog(corpus_root)
        assert cat.get_agent("api-architect").path.name == "api-architect.md"
        assert len(cat.list_agents()) == 3

    def test_agent_path_counts_unloadable_files(self, corpus_root: _pathlib.Path, make_file) -> None:
        bad = make_file(corpus_root / "agents" / "bad.md", "---\nname: [x\n---\n")
        cat = catalog.Catalog(corpus_root)
        assert cat.get_agent_by_ordinal(2) is None
        assert cat.agent_path_by_ordinal(2) == bad.resolve()
        assert cat.agent_path_by_ordinal(3).name == "code-reviewer.md"
        assert cat.agent_path_by_ordinal(4) is None

    def test_alias_claims_later_command_name(self, corpus_root: _pathlib.Path, make_file) -> None:
        first = make_file(corpus_root / "commands" / "a.md", "---\naliases: [zz]\n---\nA\n")
        make_file(corpus_root / "commands" / "zz.md", "Z\n")
        cat = catalog.Catalog(corpus_root)
        assert cat.get_command("zz").path == first.resolve()
        assert len(cat.list_commands()) == 3


class TestBonds:
    def test_skills_for_agent(self, corpus_catalog: catalog.Catalog) -> None:
        skills = corpus_catalog.skills_for_agent("api-architect")
        assert [s.name for s in skills] == ["api-design"]
        assert corpus_catalog.skills_for_agent("code-reviewer") == []

    def test_agent_for_skill(self, corpus_catalog: catalog.Catalog) -> None:
        assert corpus_catalog.agent_for_skill("api-design").name == "api-architect"
        assert corpus_catalog.agent_for_skill("testing") is None
        assert corpus_catalog.agent_for_skill("missing") is None

    def test_unbonded_skills(self, corpus_catalog: catalog.Catalog) -> None:
        assert [s.name for s in corpus_catalog.unbonded_skills()] == ["testing"]


class TestSearch:
    def test_trigger_outranks_description(self, corpus_catalog: catalog.Catalog) -> None:
        results = corpus_catalog.search("please design an api for payments")
        assert [(doc.name, score) for doc, score in results] == [
            ("api-architect", 5),
            ("api-design", 1),
        ]

    def test_name_match_scores_highest(self, corpus_catalog: catalog.Catalog) -> None:
        results = corpus_catalog.search("use the testing skill")
        assert results[0][0].name == "testing"
        assert results[0][1] >= 10

    def test_name_must_match_whole_words(self, corpus_root: _pathlib.Path, make_file) -> None:
        make_file(corpus_root / "agents" / "api.md", "# API\n")
        cat = catalog.Catalog(corpus_root)
        assert "api" not in [doc.name for doc, _ in cat.search("a rapid rollout")]
        assert ("api", 10) in [(doc.name, score) for doc, score in cat.search("call the api now")]

    def test_kind_filter_and_limit(self, corpus_catalog: catalog.Catalog) -> None:
        results = corpus_catalog.search("design an api", kind="skill")
        assert all(doc.kind == "skill" for doc, _ in results)
        assert len(corpus_catalog.search("design an api review", max_results=1)) == 1

    def test_no_match(self, corpus_catalog: catalog.Catalog) -> None:
        assert corpus_catalog.search("zzz") == []


class TestReporting:
    def test_stats(self, corpus_catalog: catalog.Catalog) -> None:
        stats = corpus_catalog.stats()
        assert stats["agents"] == 2
        assert stats["skills"] == 2
        assert stats["commands"] == 1
        assert stats["guides"] == 1
        assert stats["failures"] == 0
        assert stats["bonded_skills"] == 1
        assert stats["unbonded_skills"] == 1
        assert stats["code_blocks"] == {"python": 1}
        assert stats["body_lines"] > 0

    def test_to_dict_includes_failures(self, corpus_root: _pathlib.Path, make_file) -> None:
        make_file(corpus_root / "skills" / "broken" / "SKILL.md", "# no frontmatter\n")
        data = catalog.Catalog(corpus_root).to_dict()
        assert len(data["skills"]) == 2
        assert data["failures"][0]["code"] == "SCH001"
        assert data["failures"][0]["line"] == 1
