"""
Tests for slash command parsing and template rendering.
"""

import os as _os
import pathlib as _pathlib
import unittest.mock as _mock

import pytest as _pytest

import promptshelf.documents.command as command


def _command(body: str, **fm: object) -> command.Command:
    return command.Command(
        frontmatter=command.CommandFrontmatter.model_validate(fm),
        body=body,
        path=_pathlib.Path("/corpus/commands/test.md"),
    )


class TestCommandFrontmatter:
    def test_all_fields_optional(self) -> None:
        fm = command.CommandFrontmatter()
        assert fm.name is None
        assert fm.argument_hint == ""
        assert fm.aliases == []

    @_pytest.mark.parametrize("key", ["argument-hint", "argument_hint", "args"])
    def test_argument_hint_spellings(self, key: str) -> None:
        fm = command.CommandFrontmatter.model_validate({key: "<file>"})
        assert fm.argument_hint == "<file>"

    def test_leading_slashes_are_stripped(self) -> None:
        fm = command.CommandFrontmatter.model_validate({"name": "/review", "aliases": "/cr, rv"})
        assert fm.name == "review"
        assert fm.aliases == ["cr", "rv"]

    def test_blank_values_become_empty_strings(self) -> None:
        fm = command.CommandFrontmatter.model_validate({"description": None, "argument-hint": None})
        assert fm.description == ""
        assert fm.argument_hint == ""
        assert fm.model is None

    def test_list_argument_hint_is_joined(self) -> None:
        fm = command.CommandFrontmatter.model_validate({"argument-hint": ["<a>", "<b>"]})
        assert fm.argument_hint == "<a> <b>"


class TestLoadCommand:
    def test_loads_command(self, corpus_root: _pathlib.Path) -> None:
        cmd = command.load_command(corpus_root / "commands" / "review.md")
        assert cmd.name == "review"
        assert cmd.kind == "command"
        assert cmd.description == "Review the given file"
        assert cmd.argument_hint == "<file>"
        assert cmd.aliases == ["cr"]

    def test_frontmatter_name_wins_over_stem(
        self, tmp_path: _pathlib.Path, make_file
    ) -> None:
        path = make_file(tmp_path / "commands" / "x.md", "---\nname: deploy\n---\nGo\n")
        assert command.load_command(path).name == "deploy"

    def test_blank_description_loads(self, tmp_path: _pathlib.Path, make_file) -> None:
        path = make_file(tmp_path / "commands" / "r.md", "---\ndescription:\nargument-hint:\n---\nGo\n")
        cmd = command.load_command(path)
        assert cmd.description == ""
        assert cmd.argument_hint == ""

    def test_to_dict(self, corpus_root: _pathlib.Path) -> None:
        data = command.load_command(corpus_root / "commands" / "review.md").to_dict()
        assert data["aliases"] == ["cr"]
        assert data["argument_hint"] == "<file>"


class TestRender:
    """Tests for Command.render()."""

    def test_arguments_placeholder(self) -> None:
        cmd = _command("Fix: $ARGUMENTS\n")
        assert cmd.render("the login bug") == "Fix: the login bug"

    def test_positional_arguments(self) -> None:
        cmd = _command("Compare $1 with $2 ($3)")
        assert cmd.render("old.py new.py") == "Compare old.py with new.py ()"

    def test_args_and_context_variables(self) -> None:
        cmd = _command("{{args}} for {{team}}")
        assert cmd.render("review", team="platform") == "review for platform"

    def test_cwd_variable(self) -> None:
        cmd = _command("in {{cwd}}")
        assert cmd.render() == f"in {_pathlib.Path.cwd()}"

    def test_env_variables(self) -> None:
        cmd = _command("user={{env.PS_TEST_USER}} missing={{env.PS_TEST_MISSING}}")
        with _mock.patch.dict(_os.environ, {"PS_TEST_USER": "ada"}):
            _os.environ.pop("PS_TEST_MISSING", None)
            assert cmd.render() == "user=ada missing="

    def test_unknown_placeholders_left_alone(self) -> None:
        cmd = _command("keep {{unknown}}")
        assert cmd.render() == "keep {{unknown}}"

    def test_body_is_stripped(self) -> None:
        cmd = _command("\n\n  Hello $ARGUMENTS  \n\n")
        assert cmd.render("world") == "Hello world"

    def test_inserted_text_is_not_expanded_again(self) -> None:
        assert _command("Say: $ARGUMENTS").render("cost $1") == "Say: cost $1"
        assert _command("{{args}}").render("literal {{cwd}}") == "literal {{cwd}}"
        assert _command("$1 and {{note}}").render("$ARGUMENTS", note="{{args}}") == (
            "$ARGUMENTS and {{args}}"
        )
