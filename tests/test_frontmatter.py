"""
Tests for front-matter parsing.

Tests verify that:
- Documents with and without front-matter split correctly
- Body start lines and key lines are file lines
- Malformed blocks raise FrontmatterError with the right code and line
"""

import pytest as _pytest

import promptshelf.frontmatter as frontmatter


class TestParseMarkdown:
    """Tests for parse_markdown()."""

    def test_no_frontmatter_returns_whole_content_as_body(self) -> None:
        parsed = frontmatter.parse_markdown("# Title\n\nText\n")
        assert parsed.has_frontmatter is False
        assert parsed.metadata == {}
        assert parsed.body == "# Title\n\nText\n"
        assert parsed.body_start_line == 1

    def test_splits_metadata_and_body(self) -> None:
        content = "---\nname: test\ndescription: A test\n---\n# Body\n"
        parsed = frontmatter.parse_markdown(content)
        assert parsed.has_frontmatter is True
        assert parsed.metadata == {"name": "test", "description": "A test"}
        assert parsed.body == "# Body\n"
        assert parsed.body_start_line == 5

    def test_empty_block_gives_empty_mapping(self) -> None:
        parsed = frontmatter.parse_markdown("---\n---\nbody\n")
        assert parsed.has_frontmatter is True
        assert parsed.metadata == {}
        assert parsed.body == "body\n"

    def test_dots_close_block(self) -> None:
        parsed = frontmatter.parse_markdown("---\nname: x\n...\nbody\n")
        assert parsed.metadata == {"name": "x"}
        assert parsed.body == "body\n"

    def test_byte_order_mark_is_ignored(self) -> None:
        parsed = frontmatter.parse_markdown("\ufeff---\nname: x\n---\n")
        assert parsed.metadata == {"name": "x"}

    def test_dashes_later_in_file_are_not_frontmatter(self) -> None:
        content = "# Title\n---\nname: x\n---\n"
        parsed = frontmatter.parse_markdown(content)
        assert parsed.has_frontmatter is False
        assert parsed.body == content

    def test_windows_line_endings(self) -> None:
        parsed = frontmatter.parse_markdown("---\r\nname: x\r\n---\r\nbody\r\n")
        assert parsed.metadata == {"name": "x"}
        assert parsed.body_start_line == 4

    def test_key_lines_are_file_lines(self) -> None:
        content = "---\nname: test\nretry_policy:\n  max_attempts: 3\n---\n"
        parsed = frontmatter.parse_markdown(content)
        assert parsed.line_for("name") == 2
        assert parsed.line_for("retry_policy") == 3
        assert parsed.line_for("retry_policy", "max_attempts") == 4
        assert parsed.line_for("missing") is None

    def test_merge_keys_are_supported(self) -> None:
        content = "---\nbase: &b\n  a: 1\nchild:\n  <<: *b\n  c: 2\n---\n"
        parsed = frontmatter.parse_markdown(content)
        assert parsed.metadata["child"] == {"a": 1, "c": 2}


class TestFrontmatterErrors:
    """Tests for malformed front-matter."""

    def test_unterminated_block(self) -> None:
        with _pytest.raises(frontmatter.FrontmatterError) as exc_info:
            frontmatter.parse_markdown("---\nname: test\n# no closing\n")
        assert exc_info.value.code == frontmatter.UNTERMINATED
        assert exc_info.value.line == 1
        assert "not terminated" in exc_info.value.message

    def test_invalid_yaml_reports_file_line(self) -> None:
        content = "---\nname: test\ndescription: [unclosed\n---\n"
        with _pytest.raises(frontmatter.FrontmatterError) as exc_info:
            frontmatter.parse_markdown(content)
        assert exc_info.value.code == frontmatter.INVALID_YAML
        assert exc_info.value.line is not None
        assert exc_info.value.line >= 3

    def test_bad_indentation_is_invalid_yaml(self) -> None:
        content = "---\nname: test\n  description: oops\n---\n"
        with _pytest.raises(frontmatter.FrontmatterError) as exc_info:
            frontmatter.parse_markdown(content)
        assert exc_info.value.code == frontmatter.INVALID_YAML

    def test_list_is_not_a_mapping(self) -> None:
        with _pytest.raises(frontmatter.FrontmatterError) as exc_info:
            frontmatter.parse_markdown("---\n- a\n- b\n---\n")
        assert exc_info.value.code == frontmatter.NOT_A_MAPPING
        assert exc_info.value.line == 2
        assert "list" in exc_info.value.message

    def test_scalar_is_not_a_mapping(self) -> None:
        with _pytest.raises(frontmatter.FrontmatterError, match="must be a YAML mapping"):
            frontmatter.parse_markdown("---\njust text\n---\n")

    def test_error_string_includes_location(self) -> None:
        error = frontmatter.FrontmatterError("bad", line=3)
        assert str(error) == "line 3: bad"
        with_path = error.with_path("agents/x.md")
        assert str(with_path) == "agents/x.md:3: bad"
        assert with_path.code == error.code
