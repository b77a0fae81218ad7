"""
Pipeline orchestration for article-site.

``run_check`` scans a content directory and reports structural findings.
``run_build`` does the same, then:
1. Loads every article that passed loading
2. Renders each article page
3. Renders the index page and ``articles.json``

Supports both progress bar and quiet modes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

from .checks import MALFORMED_CONTENT, check_collection
from .config import AppConfig
from .core.collection import ArticleCollection
from .core.errors import ContentError
from .core.types import CheckReport, RenderedArticle
from .input.loader import scan_documents
from .output.index import write_article_index
from .output.renderer import (
    build_markdown,
    page_path,
    render_article,
    render_article_page,
    render_index_page,
    write_page,
)
from .utils.logging import log_event, setup_logging


class BuildAborted(Exception):
    """Raised when a build stops because the content has errors."""

    def __init__(self, message: str, report: CheckReport | None = None):
        super().__init__(message)
        self.report = report


@dataclass
class BuildStats:
    """Statistics collected during a build.

    Attributes:
        total: Number of documents found
        rendered: Pages written
        skipped: Documents that could not be loaded or rendered
    """
    total: int = 0
    rendered: int = 0
    skipped: int = 0


def run_check(root: Path, cfg: AppConfig, logger: logging.Logger | None = None) -> CheckReport:
    """Check a content directory and log one event per finding."""
    report = check_collection(root, cfg)
    for finding in report.findings:
        log_event(
            logger,
            f"{finding.path}:{finding.line or 0}: {finding.kind}: {finding.message}",
            level=logging.ERROR if finding.is_error else logging.WARNING,
            event="finding",
            kind=finding.kind,
            severity=finding.severity,
            path=str(finding.path),
            line=finding.line,
        )
    log_event(
        logger,
        "Check complete",
        event="check_complete",
        articles=report.articles,
        errors=len(report.errors),
        warnings=len(report.warnings),
    )
    return report


def run_build(
    root: Path,
    output_dir: Path,
    cfg: AppConfig,
    show_progress: bool = True,
    console: Console | None = None,
) -> Path:
    """Build the static site for ``root`` into ``output_dir``.

    Args:
        root: Content directory
        output_dir: Directory for the generated site
        cfg: Application configuration
        show_progress: Whether to display a progress bar
        console: Rich console for output (creates default if None)

    Returns:
        Path to the generated index page

    Raises:
        BuildAborted: The checks reported errors and ``build.fail_on_errors`` is set
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    logger = setup_logging(cfg.logging, output_dir)
    log_event(
        logger,
        "Build start",
        event="build_start",
        content=str(root),
        output=str(output_dir),
    )

    report = run_check(root, cfg, logger)
    if report.errors and cfg.build.fail_on_errors:
        raise BuildAborted(
            f"{len(report.errors)} error(s) found in {root}; fix them or build with --force",
            report,
        )

    documents = scan_documents(root, cfg.content)
    stats = BuildStats(total=len(documents))
    collection = ArticleCollection(
        root, extensions=cfg.content.extensions, base_path=cfg.output.base_path
    )
    # articles with unterminated fences cannot be rendered
    unrenderable = {f.path for f in report.findings if f.kind == MALFORMED_CONTENT}
    for doc in documents:
        if doc.article is None or doc.slug in collection or doc.path in unrenderable:
            stats.skipped += 1
            log_event(
                logger,
                f"Skipping {doc.path}",
                level=logging.WARNING,
                event="article_skipped",
                path=str(doc.path),
            )
            continue
        collection.add(doc.article)

    if not cfg.output.pretty_urls and "index" in collection:
        raise BuildAborted("an article with slug 'index' would overwrite the index page")

    md = build_markdown()
    rendered: list[RenderedArticle] = []

    def render_one(article) -> None:
        try:
            item = render_article(article, collection, cfg.output, md)
        except ContentError as exc:
            stats.skipped += 1
            log_event(
                logger,
                f"Skipping {exc}",
                level=logging.WARNING,
                event="render_failed",
                path=str(article.path),
            )
            return
        write_page(
            page_path(output_dir, item.slug, cfg.output.pretty_urls),
            render_article_page(item, cfg.output, collection.base_path),
        )
        rendered.append(item)
        stats.rendered += 1

    articles = list(collection)
    if show_progress:
        progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console or Console(),
        )
        with progress:
            task = progress.add_task("Render", total=len(articles))
            for article in articles:
                render_one(article)
                progress.advance(task, 1)
    else:
        for article in articles:
            render_one(article)

    index_path = output_dir / "index.html"
    write_page(index_path, render_index_page(rendered, cfg.output, collection))
    if cfg.output.write_index_json:
        write_article_index(rendered, collection, output_dir, cfg.output.pretty_urls)

    log_event(
        logger,
        "Build complete",
        event="build_complete",
        output=str(index_path),
        total=stats.total,
        rendered=stats.rendered,
        skipped=stats.skipped,
    )
    return index_path
