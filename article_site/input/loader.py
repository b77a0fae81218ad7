"""
Loading article documents from a content directory.

Two entry points exist:
- ``scan_document`` / ``scan_documents`` never raise for a bad document;
  they record the problems so the checker can report all of them.
- ``load_article`` / ``load_collection`` are strict and raise the first
  ContentError, which is what the renderer wants.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..core.collection import ArticleCollection, article_slug
from ..core.errors import ContentError, InvalidDate, MalformedContent, MetadataMissing
from ..core.types import Article
from .frontmatter import (
    build_metadata,
    missing_fields,
    normalize_text,
    parse_date,
    parse_metadata_block,
    split_front_matter,
)

if TYPE_CHECKING:
    from ..config import ContentConfig


@dataclass
class SourceDocument:
    """A document as found on disk, loadable or not.

    Attributes:
        path: Source file
        slug: Slug derived from the path
        body: Body text (empty when the document could not be split)
        body_line: 1-based file line where the body starts
        raw_metadata: Parsed front-matter mapping, None if absent or invalid
        article: The loaded Article when no errors were found
        split: True once the body was separated from the front matter
        errors: Problems that prevent loading
    """
    path: Path
    slug: str
    body: str = ""
    body_line: int = 1
    raw_metadata: dict[str, Any] | None = None
    article: Article | None = None
    split: bool = False
    errors: list[ContentError] = field(default_factory=list)


def read_document(path: Path) -> str:
    return normalize_text(path.read_bytes().decode("utf-8"))


def discover_articles(root: Path, cfg: ContentConfig) -> list[Path]:
    """List article files under ``root``, sorted by relative path.

    Hidden files and directories (name starting with ".") are skipped, as
    are paths matching any ``cfg.exclude`` glob.
    """
    if not root.is_dir():
        raise FileNotFoundError(f"content directory not found: {root}")
    extensions = {ext.lower() for ext in cfg.extensions}
    found = []
    for path in root.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in extensions:
            continue
        rel = path.relative_to(root)
        if any(part.startswith(".") for part in rel.parts):
            continue
        rel_posix = rel.as_posix()
        if any(fnmatch.fnmatch(rel_posix, pattern) for pattern in cfg.exclude):
            continue
        found.append(path)
    return sorted(found, key=lambda p: p.relative_to(root).as_posix())


def scan_document(path: Path, root: Path, cfg: ContentConfig) -> SourceDocument:
    """Read and parse one document, collecting errors instead of raising."""
    doc = SourceDocument(path=path, slug=article_slug(path, root, cfg.extensions))
    try:
        text = read_document(path)
    except UnicodeDecodeError as exc:
        line = exc.object[: exc.start].count(b"\n") + 1
        doc.errors.append(MalformedContent(f"document is not valid UTF-8: {exc.reason}", path, line))
        return doc
    except OSError as exc:
        doc.errors.append(MalformedContent(f"document cannot be read: {exc}", path, line=1))
        return doc

    try:
        raw_meta, doc.body, doc.body_line = split_front_matter(text, path)
    except MalformedContent as exc:
        doc.errors.append(exc)
        return doc
    doc.split = True

    if raw_meta is None:
        doc.errors.append(
            MetadataMissing(
                list(dict.fromkeys([*cfg.required_fields, "title", "date"])),
                path,
                message="document has no front-matter block",
            )
        )
        return doc

    try:
        doc.raw_metadata = parse_metadata_block(raw_meta, path)
    except MalformedContent as exc:
        doc.errors.append(exc)
        return doc

    required = list(dict.fromkeys([*cfg.required_fields, "title", "date"]))
    missing = missing_fields(doc.raw_metadata, required)
    if missing:
        doc.errors.append(MetadataMissing(missing, path))
    if "date" not in missing:
        try:
            parse_date(doc.raw_metadata["date"], cfg.date_formats, path)
        except InvalidDate as exc:
            exc.line = _key_line(raw_meta, "date")
            doc.errors.append(exc)

    if not doc.errors:
        doc.article = Article(
            path=path,
            slug=doc.slug,
            metadata=build_metadata(doc.raw_metadata, path, required, cfg.date_formats),
            body=doc.body,
            body_line=doc.body_line,
        )
    return doc


def scan_documents(root: Path, cfg: ContentConfig) -> list[SourceDocument]:
    return [scan_document(path, root, cfg) for path in discover_articles(root, cfg)]


def load_article(path: Path, root: Path, cfg: ContentConfig) -> Article:
    """Load one article strictly.

    Raises:
        MetadataMissing, InvalidDate, MalformedContent: The document is not loadable
    """
    doc = scan_document(path, root, cfg)
    if doc.article is None:
        raise doc.errors[0]
    return doc.article


def load_collection(root: Path, cfg: ContentConfig, base_path: str = "/") -> ArticleCollection:
    """Load every article under ``root`` strictly."""
    collection = ArticleCollection(root, extensions=cfg.extensions, base_path=base_path)
    for path in discover_articles(root, cfg):
        collection.add(load_article(path, root, cfg))
    return collection


def _key_line(raw_meta: str, key: str) -> int:
    """File line of ``key`` inside the front-matter block (line 1 is ``---``)."""
    prefix = f"{key}:"
    for index, line in enumerate(raw_meta.split("\n")):
        if line.startswith(prefix):
            return index + 2
    return 1
