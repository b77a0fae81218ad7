"""
Core data types for article-site.

This module defines the data structures shared by the loader, the
structural checker and the renderer:
- ArticleMetadata / Article: a parsed source document
- CodeBlock, Heading, Link, BodyOutline: the structure of an article body
- Finding / CheckReport: results of the structural checks
- RenderedArticle: an article after its body was rendered to HTML
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any


SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


@dataclass
class ArticleMetadata:
    """Front-matter metadata of an article.

    Attributes:
        title: The article headline
        description: Short summary used for listings and SEO, may be empty
        date: Publication date
        extra: Any other front-matter keys, kept as parsed
    """
    title: str
    description: str
    date: date
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Article:
    """A source document loaded from the content directory.

    Attributes:
        path: Absolute path of the source file (the article's identity)
        slug: Public URL path derived from ``path``
        metadata: Parsed front-matter
        body: Markdown body text, without the front-matter block
        body_line: 1-based line in the file where the body starts
    """
    path: Path
    slug: str
    metadata: ArticleMetadata
    body: str
    body_line: int = 1

    @property
    def title(self) -> str:
        return self.metadata.title


@dataclass
class CodeBlock:
    fence: str
    line: int
    language: str | None = None
    closed: bool = True


@dataclass
class Heading:
    level: int
    text: str
    anchor: str
    line: int


@dataclass
class Link:
    href: str
    text: str = ""
    line: int | None = None


@dataclass
class BodyOutline:
    """Structural view of a Markdown body used by the checks."""
    code_blocks: list[CodeBlock] = field(default_factory=list)
    headings: list[Heading] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    malformed_headings: list[tuple[int, str]] = field(default_factory=list)

    @property
    def anchors(self) -> set[str]:
        return {heading.anchor for heading in self.headings}

    @property
    def unterminated(self) -> list[CodeBlock]:
        return [block for block in self.code_blocks if not block.closed]


@dataclass
class Finding:
    """One structural problem reported by the checker.

    Attributes:
        kind: Finding type, e.g. "MetadataMissing" or "BrokenLink"
        severity: "error" or "warning"
        message: Human readable description
        path: Source file the finding belongs to
        line: Optional 1-based file line number
        suggestion: Optional fix hint (e.g. the closest existing slug)
    """
    kind: str
    severity: str
    message: str
    path: Path
    line: int | None = None
    suggestion: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity == SEVERITY_ERROR

    def sort_key(self) -> tuple[str, int, str]:
        return (str(self.path), self.line or 0, self.kind)


@dataclass
class CheckReport:
    """Aggregate result of checking a content directory."""
    articles: int = 0
    findings: list[Finding] = field(default_factory=list)

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == SEVERITY_ERROR]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == SEVERITY_WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def by_kind(self, kind: str) -> list[Finding]:
        return [f for f in self.findings if f.kind == kind]

    def by_path(self) -> dict[Path, list[Finding]]:
        grouped: dict[Path, list[Finding]] = defaultdict(list)
        for finding in self.findings:
            grouped[finding.path].append(finding)
        return dict(grouped)


@dataclass
class RenderedArticle:
    """Article with its body rendered to HTML.

    This is the record handed to the page templates: the metadata fields
    plus ``rendered_body`` and the table of contents built from headings.
    """
    slug: str
    title: str
    description: str
    date: date
    rendered_body: str
    toc: list[Heading] = field(default_factory=list)
