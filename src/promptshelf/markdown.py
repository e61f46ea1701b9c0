"""
Structural scanning of Markdown bodies.

Only the pieces the catalogue and linter need are extracted: fenced code
blocks, ATX headings and inline links. Line numbers are file lines when a
``line_offset`` (the body's first file line) is supplied.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import re as _re

_FENCE_RE = _re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_HEADING_RE = _re.compile(r"^ {0,3}(?P<hashes>#{1,6})(?:[ \t]+(?P<title>.*?))?(?:[ \t]+#+)?[ \t]*$")
# Inline links; images are excluded by the negative lookbehind
_LINK_RE = _re.compile(r"(?<!!)\[(?P<text>[^\]]*)\]\((?P<target>[^)\s]+)(?:\s+\"[^\"]*\")?\)")
_INLINE_CODE_RE = _re.compile(r"`[^`]*`")


@_dataclasses.dataclass(frozen=True)
class CodeBlock:
    """A fenced code block."""

    language: str
    content: str
    start_line: int
    end_line: int
    closed: bool = True


@_dataclasses.dataclass(frozen=True)
class Heading:
    """An ATX heading (``#`` .. ``######``)."""

    level: int
    title: str
    line: int


@_dataclasses.dataclass(frozen=True)
class Link:
    """An inline Markdown link."""

    text: str
    target: str
    line: int


def _iter_lines(body: str, line_offset: int) -> list[tuple[int, str]]:
    return [(line_offset + i, line) for i, line in enumerate(body.splitlines())]


def extract_code_blocks(body: str, line_offset: int = 1) -> list[CodeBlock]:
    """
    Find fenced code blocks.

    A fence closes only with the same character and at least the same
    length. A fence still open at the end of the body is returned with
    ``closed=False``.
    """
    blocks: list[CodeBlock] = []
    open_fence: str | None = None
    language = ""
    start = 0
    content: list[str] = []

    for line_no, line in _iter_lines(body, line_offset):
        match = _FENCE_RE.match(line)
        if open_fence is None:
            if match:
                fence = match.group("fence")
                info = match.group("info").strip()
                # Backtick fences cannot carry backticks in their info string
                if fence[0] == "`" and "`" in info:
                    continue
                open_fence = fence
                language = info.split()[0] if info else ""
                start = line_no
                content = []
            continue

        if (
            match
            and match.group("fence")[0] == open_fence[0]
            and len(match.group("fence")) >= len(open_fence)
            and not match.group("info").strip()
        ):
            blocks.append(
                CodeBlock(
                    language=language,
                    content="\n".join(content),
                    start_line=start,
                    end_line=line_no,
                )
            )
            open_fence = None
        else:
            content.append(line)

    if open_fence is not None:
        last_line = line_offset + max(len(body.splitlines()) - 1, 0)
        blocks.append(
            CodeBlock(
                language=language,
                content="\n".join(content),
                start_line=start,
                end_line=last_line,
                closed=False,
            )
        )

    return blocks


def _prose_lines(body: str, line_offset: int) -> list[tuple[int, str]]:
    """Lines outside fenced code blocks."""
    covered: set[int] = set()
    for block in extract_code_blocks(body, line_offset):
        covered.update(range(block.start_line, block.end_line + 1))
    return [(n, line) for n, line in _iter_lines(body, line_offset) if n not in covered]


def extract_headings(body: str, line_offset: int = 1) -> list[Heading]:
    """Find ATX headings outside code blocks."""
    headings: list[Heading] = []
    for line_no, line in _prose_lines(body, line_offset):
        match = _HEADING_RE.match(line)
        if match:
            headings.append(
                Heading(
                    level=len(match.group("hashes")),
                    title=(match.group("title") or "").strip(),
                    line=line_no,
                )
            )
    return headings


def extract_links(body: str, line_offset: int = 1) -> list[Link]:
    """Find inline links outside code blocks and code spans."""
    links: list[Link] = []
    for line_no, line in _prose_lines(body, line_offset):
        stripped = _INLINE_CODE_RE.sub("", line)
        for match in _LINK_RE.finditer(stripped):
            links.append(
                Link(
                    text=match.group("text"),
                    target=match.group("target").strip("<>"),
                    line=line_no,
                )
            )
    return links


def prose_text(body: str, line_offset: int = 1) -> list[tuple[int, str]]:
    """Body lines that are not inside fenced code, with their file lines."""
    return _prose_lines(body, line_offset)
