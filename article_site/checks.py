"""
Structural checks over a content directory.

Each check looks at one aspect of a document and returns findings:
- metadata: required keys present, date parseable, description recommended
- fences: every fenced code block is closed and (optionally) tagged
- headings: ATX headings are well formed
- links: internal links point at existing articles and anchors
- duplicates: no two articles carry (nearly) the same title

``check_collection`` runs all of them and returns a CheckReport.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlsplit

from markdown_it import MarkdownIt
from rapidfuzz import fuzz

from .config import AppConfig
from .core.collection import ArticleCollection
from .core.structure import new_parser, outline_body
from .core.types import (
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    Article,
    BodyOutline,
    CheckReport,
    Finding,
)
from .input.frontmatter import missing_fields
from .input.loader import SourceDocument, scan_documents


METADATA_MISSING = "MetadataMissing"
MISSING_DESCRIPTION = "MissingDescription"
INVALID_DATE = "InvalidDate"
MALFORMED_CONTENT = "MalformedContent"
MALFORMED_HEADING = "MalformedHeading"
MISSING_CODE_LANGUAGE = "MissingCodeLanguage"
BROKEN_LINK = "BrokenLink"
BROKEN_ANCHOR = "BrokenAnchor"
DUPLICATE_TITLE = "DuplicateTitle"
DUPLICATE_SLUG = "DuplicateSlug"


def check_metadata(doc: SourceDocument, cfg: AppConfig) -> list[Finding]:
    findings = [
        Finding(
            kind=err.kind,
            severity=SEVERITY_ERROR,
            message=err.message,
            path=doc.path,
            line=err.line,
        )
        for err in doc.errors
    ]
    if doc.raw_metadata is not None and "description" not in cfg.content.required_fields:
        if missing_fields(doc.raw_metadata, ["description"]):
            findings.append(
                Finding(
                    kind=MISSING_DESCRIPTION,
                    severity=SEVERITY_WARNING,
                    message="description is missing or empty",
                    path=doc.path,
                    line=1,
                )
            )
    return findings


def check_fences(doc: SourceDocument, outline: BodyOutline, cfg: AppConfig) -> list[Finding]:
    findings = []
    for block in outline.code_blocks:
        if not block.closed:
            findings.append(
                Finding(
                    kind=MALFORMED_CONTENT,
                    severity=SEVERITY_ERROR,
                    message=f"fenced code block opened with {block.fence} is never closed",
                    path=doc.path,
                    line=block.line,
                )
            )
        elif cfg.checks.require_code_language and not block.language:
            findings.append(
                Finding(
                    kind=MISSING_CODE_LANGUAGE,
                    severity=SEVERITY_WARNING,
                    message="fenced code block has no language tag",
                    path=doc.path,
                    line=block.line,
                )
            )
    return findings


def check_headings(doc: SourceDocument, outline: BodyOutline) -> list[Finding]:
    findings = []
    for line, raw in outline.malformed_headings:
        hashes = len(raw.lstrip()) - len(raw.lstrip().lstrip("#"))
        if hashes > 6:
            message = f"heading level {hashes} is deeper than 6"
        else:
            message = "heading marker must be followed by a space"
        findings.append(
            Finding(
                kind=MALFORMED_HEADING,
                severity=SEVERITY_WARNING,
                message=f"{message}: {raw.strip()}",
                path=doc.path,
                line=line,
            )
        )
    return findings


def check_links(
    article: Article,
    outline: BodyOutline,
    collection: ArticleCollection,
    outlines: dict[str, BodyOutline],
    cfg: AppConfig,
) -> list[Finding]:
    """Check internal links of ``article``.

    ``outlines`` maps slug to outline for every loaded article, used for
    anchor checks on links into other articles.
    """
    findings = []
    for link in outline.links:
        fragment = unquote(urlsplit(link.href).fragment)
        target = collection.resolve_link(article, link.href)

        if target is None:
            if link.href.startswith("#") and fragment and cfg.checks.check_anchors:
                if fragment not in outline.anchors:
                    findings.append(_broken_anchor(article, link.href, link.line))
            continue

        if target not in collection:
            suggestion = collection.suggest(target, cfg.checks.suggestion_cutoff)
            message = f"link target '{link.href}' does not match any article"
            if suggestion:
                message += f" (did you mean '{suggestion}'?)"
            findings.append(
                Finding(
                    kind=BROKEN_LINK,
                    severity=SEVERITY_ERROR,
                    message=message,
                    path=article.path,
                    line=link.line,
                    suggestion=suggestion,
                )
            )
            continue

        if fragment and cfg.checks.check_anchors:
            target_outline = outlines.get(target)
            if target_outline is not None and fragment not in target_outline.anchors:
                findings.append(_broken_anchor(article, link.href, link.line))
    return findings


def _broken_anchor(article: Article, href: str, line: int | None) -> Finding:
    return Finding(
        kind=BROKEN_ANCHOR,
        severity=SEVERITY_WARNING,
        message=f"anchor in '{href}' does not match any heading",
        path=article.path,
        line=line,
    )


def check_duplicate_titles(collection: ArticleCollection, cfg: AppConfig) -> list[Finding]:
    """Flag articles whose titles are near-identical to an earlier article's."""
    findings = []
    seen: list[Article] = []
    for article in sorted(collection, key=lambda a: a.slug):
        for existing in seen:
            score = fuzz.ratio(article.title.lower(), existing.title.lower())
            if score >= cfg.checks.duplicate_title_threshold:
                findings.append(
                    Finding(
                        kind=DUPLICATE_TITLE,
                        severity=SEVERITY_WARNING,
                        message=f"title is {score:.0f}% similar to '{existing.slug}'",
                        path=article.path,
                        line=1,
                        suggestion=existing.slug,
                    )
                )
                break
        seen.append(article)
    return findings


def check_document(
    doc: SourceDocument,
    collection: ArticleCollection,
    outlines: dict[str, BodyOutline],
    cfg: AppConfig,
    parser: MarkdownIt | None = None,
) -> list[Finding]:
    """Run the per-document checks on one scanned document."""
    findings = check_metadata(doc, cfg)
    if not doc.split:
        return findings

    outline = outlines.get(doc.slug) if doc.article is not None else None
    if outline is None:
        outline = outline_body(doc.body, doc.body_line - 1, parser)
    findings.extend(check_fences(doc, outline, cfg))
    findings.extend(check_headings(doc, outline))
    if doc.article is not None:
        findings.extend(check_links(doc.article, outline, collection, outlines, cfg))
    return findings


def check_collection(root: Path, cfg: AppConfig) -> CheckReport:
    """Check every document under ``root``.

    Documents that fail to load still get their fence and heading checks;
    links are only checked for loadable articles, against the collection
    of loadable articles.
    """
    documents = scan_documents(root, cfg.content)
    collection = ArticleCollection(
        root, extensions=cfg.content.extensions, base_path=cfg.output.base_path
    )
    parser = new_parser()
    outlines: dict[str, BodyOutline] = {}
    findings: list[Finding] = []
    for doc in documents:
        if doc.article is None:
            continue
        existing = collection.get(doc.slug)
        if existing is not None:
            findings.append(
                Finding(
                    kind=DUPLICATE_SLUG,
                    severity=SEVERITY_ERROR,
                    message=f"slug '{doc.slug}' is also used by {existing.path}",
                    path=doc.path,
                )
            )
            doc.article = None
        else:
            collection.add(doc.article)
            outlines[doc.slug] = outline_body(doc.body, doc.body_line - 1, parser)

    for doc in documents:
        findings.extend(check_document(doc, collection, outlines, cfg, parser))
    findings.extend(check_duplicate_titles(collection, cfg))

    findings.sort(key=lambda f: f.sort_key())
    return CheckReport(articles=len(documents), findings=findings)
