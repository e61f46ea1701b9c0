"""Tests for Markdown body scanning."""

import promptshelf.markdown as markdown


class TestCodeBlocks:
    """Tests for extract_code_blocks()."""

    def test_finds_fenced_blocks_with_language(self) -> None:
        body = "Intro\n\n```python\nx = 1\n```\n\n~~~\nplain\n~~~\n"
        blocks = markdown.extract_code_blocks(body)
        assert [b.language for b in blocks] == ["python", ""]
        assert blocks[0].content == "x = 1"
        assert (blocks[0].start_line, blocks[0].end_line) == (3, 5)
        assert all(b.closed for b in blocks)

    def test_line_offset_shifts_lines(self) -> None:
        blocks = markdown.extract_code_blocks("```sh\nls\n```\n", line_offset=10)
        assert blocks[0].start_line == 10
        assert blocks[0].end_line == 12

    def test_longer_fence_needs_longer_close(self) -> None:
        body = "````md\n```python\nx\n```\n````\n"
        blocks = markdown.extract_code_blocks(body)
        assert len(blocks) == 1
        assert blocks[0].language == "md"
        assert "```python" in blocks[0].content

    def test_tilde_fence_not_closed_by_backticks(self) -> None:
        body = "~~~\n```\n~~~\n"
        blocks = markdown.extract_code_blocks(body)
        assert len(blocks) == 1
        assert blocks[0].content == "```"

    def test_unclosed_fence_is_reported(self) -> None:
        body = "text\n```yaml\nkey: value\n"
        blocks = markdown.extract_code_blocks(body)
        assert len(blocks) == 1
        assert blocks[0].closed is False
        assert blocks[0].language == "yaml"
        assert blocks[0].start_line == 2

    def test_info_string_keeps_first_word(self) -> None:
        blocks = markdown.extract_code_blocks("```ts title=app.ts\n```\n")
        assert blocks[0].language == "ts"


class TestHeadings:
    """Tests for extract_headings()."""

    def test_levels_and_titles(self) -> None:
        body = "# Title\n\n## Section ##\n### C#\n"
        headings = markdown.extract_headings(body)
        assert [(h.level, h.title) for h in headings] == [
            (1, "Title"),
            (2, "Section"),
            (3, "C#"),
        ]

    def test_requires_space_after_hashes(self) -> None:
        assert markdown.extract_headings("#hashtag\n") == []

    def test_headings_in_code_are_ignored(self) -> None:
        body = "```bash\n# comment\n```\n# Real\n"
        headings = markdown.extract_headings(body)
        assert [h.title for h in headings] == ["Real"]
        assert headings[0].line == 4


class TestLinks:
    """Tests for extract_links()."""

    def test_inline_links(self) -> None:
        body = "See [guide](docs/guide.md) and [site](https://example.com \"Site\").\n"
        links = markdown.extract_links(body)
        assert [(link.text, link.target) for link in links] == [
            ("guide", "docs/guide.md"),
            ("site", "https://example.com"),
        ]

    def test_images_and_code_are_skipped(self) -> None:
        body = "![logo](logo.png) `[x](y.md)`\n```\n[z](z.md)\n```\n[ok](ok.md)\n"
        links = markdown.extract_links(body, line_offset=5)
        assert [link.target for link in links] == ["ok.md"]
        assert links[0].line == 9


class TestProseText:
    def test_excludes_fenced_lines(self) -> None:
        body = "one\n```\ntwo\n```\nthree\n"
        assert markdown.prose_text(body) == [(1, "one"), (5, "three")]
