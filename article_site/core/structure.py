"""
Structural outline of a Markdown article body.

Fenced code blocks come from the markdown-it-py token stream, which
applies the CommonMark indentation rules inside lists and block quotes.
markdown-it-py silently closes an unterminated fence at the end of its
container, so each fence's last line is checked for a real closing fence.
Malformed ATX headings are found with a line scanner that skips code.
"""

from __future__ import annotations

import re
import unicodedata

from markdown_it import MarkdownIt
from markdown_it.token import Token

from .types import BodyOutline, CodeBlock, Heading, Link


ATX_OK_RE = re.compile(r"^ {0,3}#{1,6}(?:[ \t]|$)")
ATX_TOO_DEEP_RE = re.compile(r"^ {0,3}#{7,}")
ATX_NO_SPACE_RE = re.compile(r"^ {0,3}#{1,6}[^\s#\d!]")
_ANCHOR_STRIP_RE = re.compile(r"[^\w\- ]")
_CONTAINER_PREFIX = " \t>"


def new_parser() -> MarkdownIt:
    """Return the markdown-it-py parser used across the package."""
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


def _is_closing_fence(opening: str, closing: str, markup: str) -> bool:
    stripped = closing.lstrip(_CONTAINER_PREFIX)
    if not re.fullmatch(re.escape(markup[0]) + "{" + str(len(markup)) + r",}\s*", stripped):
        return False
    # at most three columns deeper than the opening fence
    return len(closing) - len(stripped) <= opening.find(markup) + 3


def scan_fences(
    lines: list[str], tokens: list[Token], line_offset: int = 0
) -> tuple[list[CodeBlock], set[int]]:
    """Find fenced code blocks.

    Args:
        lines: Body lines
        tokens: markdown-it-py block tokens of the same body
        line_offset: Added to 1-based body line numbers to get file lines

    Returns:
        The fenced blocks in order, and the set of body line indexes
        (0-based) that belong to any code block, fenced or indented.
    """
    blocks: list[CodeBlock] = []
    inside: set[int] = set()
    for token in tokens:
        if token.type not in ("fence", "code_block") or not token.map:
            continue
        start, end = token.map
        inside.update(range(start, end))
        if token.type == "code_block":
            continue
        info = token.info.strip()
        last = end - 1
        closed = last > start and last < len(lines) and _is_closing_fence(
            lines[start], lines[last], token.markup
        )
        blocks.append(
            CodeBlock(
                fence=token.markup,
                line=start + 1 + line_offset,
                language=info.split()[0] if info else None,
                closed=closed,
            )
        )
    return blocks, inside


def scan_malformed_headings(
    lines: list[str], skip: set[int], line_offset: int = 0
) -> list[tuple[int, str]]:
    """Return ``(line, raw)`` for heading-like lines that are not valid ATX headings."""
    malformed = []
    for index, line in enumerate(lines):
        if index in skip:
            continue
        if ATX_OK_RE.match(line):
            continue
        if ATX_TOO_DEEP_RE.match(line) or ATX_NO_SPACE_RE.match(line):
            malformed.append((index + 1 + line_offset, line.rstrip()))
    return malformed


def slugify_heading(text: str) -> str:
    """Turn heading text into an anchor the way GitHub does.

    Examples:
        >>> slugify_heading("What is a preflight request?")
        'what-is-a-preflight-request'
        >>> slugify_heading("CORS & API Gateway")
        'cors--api-gateway'
    """
    text = unicodedata.normalize("NFKC", text).strip().lower()
    text = _ANCHOR_STRIP_RE.sub("", text)
    return text.replace(" ", "-")


class AnchorRegistry:
    """Hands out unique anchors for one document (``a``, ``a-1``, ``a-2``)."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._used: set[str] = set()

    def claim(self, text: str) -> str:
        base = slugify_heading(text) or "section"
        count = self._counts.get(base, 0)
        candidate = f"{base}-{count}" if count else base
        while candidate in self._used:
            count += 1
            candidate = f"{base}-{count}"
        self._counts[base] = count + 1
        self._used.add(candidate)
        return candidate


def inline_text(token: Token) -> str:
    """Plain text of an inline token, without markup."""
    parts = []
    for child in token.children or []:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif child.type == "image":
            parts.append(child.content)
    return "".join(parts)


def collect_headings(tokens: list[Token], line_offset: int = 0) -> list[Heading]:
    headings = []
    registry = AnchorRegistry()
    for index, token in enumerate(tokens):
        if token.type != "heading_open":
            continue
        inline = tokens[index + 1]
        text = inline_text(inline).strip()
        line = token.map[0] + 1 + line_offset if token.map else line_offset + 1
        headings.append(
            Heading(level=int(token.tag[1]), text=text, anchor=registry.claim(text), line=line)
        )
    return headings


def collect_links(tokens: list[Token], line_offset: int = 0) -> list[Link]:
    links = []
    for token in tokens:
        if token.type != "inline" or not token.children:
            continue
        line = token.map[0] + 1 + line_offset if token.map else None
        current: Link | None = None
        text_parts: list[str] = []
        for child in token.children:
            if child.type == "link_open":
                current = Link(href=str(child.attrGet("href") or ""), line=line)
                text_parts = []
            elif child.type == "link_close" and current is not None:
                current.text = "".join(text_parts)
                links.append(current)
                current = None
            elif child.type == "image":
                links.append(Link(href=str(child.attrGet("src") or ""), text=child.content, line=line))
            elif current is not None and child.type in ("text", "code_inline"):
                text_parts.append(child.content)
    return links


def outline_body(body: str, line_offset: int = 0, parser: MarkdownIt | None = None) -> BodyOutline:
    """Build the structural outline of a Markdown body.

    Args:
        body: Markdown text
        line_offset: Number of file lines before the body (front matter)
        parser: Optional parser to reuse

    Returns:
        BodyOutline with code blocks, headings, links and malformed headings
    """
    lines = body.split("\n")
    tokens = (parser or new_parser()).parse(body)
    code_blocks, inside = scan_fences(lines, tokens, line_offset)
    return BodyOutline(
        code_blocks=code_blocks,
        headings=collect_headings(tokens, line_offset),
        links=collect_links(tokens, line_offset),
        malformed_headings=scan_malformed_headings(lines, inside, line_offset),
    )
