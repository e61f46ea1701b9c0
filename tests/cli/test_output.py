"""Tests for CLI output helpers."""

import logging as _logging

import pytest as _pytest

import promptshelf.cli.output as output


class TestShouldUseColor:
    def test_flag_wins(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert output.should_use_color(True, False) == (True, True)
        assert output.should_use_color(False, True) == (False, False)

    def test_config_before_environment(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        assert output.should_use_color(None, True) == (True, True)

    def test_no_color_env(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "")
        assert output.should_use_color(None, None) == (False, False)


class TestFormatting:
    def test_truncate(self) -> None:
        assert output.truncate("short", 10) == "short"
        assert output.truncate("a  multi\nline   text", 40) == "a multi line text"
        assert output.truncate("abcdefghij", 5) == "abcd…"

    def test_format_row(self) -> None:
        assert output.format_row(["a", "bb", "last"], (3, 4)) == "a   bb   last"
        assert output.format_row(["a", ""], (3,)) == "a"


class TestSetupLogging:
    def test_replaces_previous_handler(self) -> None:
        output.setup_logging("INFO")
        output.setup_logging("DEBUG")
        logger = _logging.getLogger("promptshelf")
        assert len(logger.handlers) == 1
        assert logger.level == _logging.DEBUG
        assert logger.propagate is False
