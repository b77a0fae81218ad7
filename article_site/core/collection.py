"""
The article collection and link resolution.

An article's identity is its file path; its slug (the public URL path) is
the path relative to the content root without the extension. Links between
articles are soft references resolved against the set of known slugs.
"""

from __future__ import annotations

import posixpath
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator
from urllib.parse import unquote, urlsplit

from rapidfuzz import fuzz, process

from .types import Article


DEFAULT_EXTENSIONS = (".md", ".markdown")
PAGE_SUFFIX = ".html"


def article_slug(path: Path, root: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> str:
    """Derive the slug of an article from its path.

    Examples:
        >>> article_slug(Path("/c/cors/preflight.md"), Path("/c"))
        'cors/preflight'
        >>> article_slug(Path("/c/guides/index.md"), Path("/c"))
        'guides'
    """
    rel = PurePosixPath(path.resolve().relative_to(root.resolve()).as_posix())
    return _normalize_slug(str(rel), extensions)


def _normalize_slug(value: str, extensions: Iterable[str]) -> str:
    value = value.strip("/")
    suffixes = {ext.lower() for ext in extensions} | {PAGE_SUFFIX}
    suffix = PurePosixPath(value).suffix
    if suffix and suffix.lower() in suffixes:
        value = value[: -len(suffix)]
    if value == "index":
        return value
    if value.endswith("/index"):
        value = value[: -len("/index")]
    return value


def normalize_base_path(base_path: str) -> str:
    """Return ``base_path`` with exactly one leading and trailing slash."""
    stripped = base_path.strip("/")
    return f"/{stripped}/" if stripped else "/"


class ArticleCollection:
    """Ordered set of articles keyed by slug."""

    def __init__(
        self,
        root: Path,
        articles: Iterable[Article] = (),
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        base_path: str = "/",
    ):
        self.root = root
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.base_path = normalize_base_path(base_path)
        self._articles: dict[str, Article] = {}
        for article in articles:
            self.add(article)

    def add(self, article: Article) -> None:
        if article.slug in self._articles:
            raise ValueError(
                f"duplicate slug '{article.slug}': "
                f"{self._articles[article.slug].path} and {article.path}"
            )
        self._articles[article.slug] = article

    def get(self, slug: str) -> Article | None:
        return self._articles.get(slug)

    @property
    def slugs(self) -> list[str]:
        return sorted(self._articles)

    def __contains__(self, slug: object) -> bool:
        return slug in self._articles

    def __len__(self) -> int:
        return len(self._articles)

    def __iter__(self) -> Iterator[Article]:
        """Iterate newest first; ties are ordered by slug."""
        return iter(
            sorted(
                self._articles.values(),
                key=lambda a: (-a.metadata.date.toordinal(), a.slug),
            )
        )

    def url_for(self, slug: str, pretty_urls: bool = True) -> str:
        if pretty_urls:
            return f"{self.base_path}{slug}/"
        return f"{self.base_path}{slug}{PAGE_SUFFIX}"

    def resolve_link(self, article: Article, href: str) -> str | None:
        """Resolve an href found in ``article`` to the slug it points at.

        Returns None for links that are not article references: external
        URLs, ``mailto:`` and other schemes, pure ``#fragment`` links, links
        to the site root and links to assets such as images. The returned
        slug is not guaranteed to exist; check it with ``in``.
        """
        parts = urlsplit(href.strip())
        if parts.scheme or parts.netloc:
            return None
        path = unquote(parts.path)
        if not path:
            return None

        suffix = PurePosixPath(path.rstrip("/")).suffix.lower()
        if suffix and suffix not in self.extensions and suffix != PAGE_SUFFIX:
            return None

        if path.startswith("/"):
            if self.base_path != "/" and path.startswith(self.base_path):
                path = path[len(self.base_path):]
            joined = posixpath.normpath("/" + path.lstrip("/")).lstrip("/")
        else:
            source_dir = PurePosixPath(
                article.path.resolve().relative_to(self.root.resolve()).as_posix()
            ).parent
            joined = posixpath.normpath(posixpath.join(str(source_dir), path))

        if joined in ("", "."):
            return None
        return _normalize_slug(joined, self.extensions)

    def suggest(self, slug: str, score_cutoff: int = 70) -> str | None:
        """Return the existing slug most similar to ``slug``, if any is close enough."""
        if not self._articles:
            return None
        match = process.extractOne(
            slug, self.slugs, scorer=fuzz.ratio, score_cutoff=score_cutoff
        )
        if match is None:
            return None
        return match[0]
