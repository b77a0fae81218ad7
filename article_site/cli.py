"""
Command-line interface for article-site.

Uses Typer to provide the ``check``, ``build``, ``list`` and ``show``
commands, and rich for tables and coloured output.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .config import AppConfig, ConfigError, load_config
from .core.errors import ContentError
from .core.types import CheckReport
from .input.loader import load_article, load_collection
from .output.renderer import human_date, render_article
from .runner import BuildAborted, run_build, run_check
from .utils.logging import setup_logging

app = typer.Typer(add_completion=False, help="Check and render front-matter articles.")
console = Console()

CONTENT_ARG = typer.Argument(..., exists=True, file_okay=False, dir_okay=True, readable=True)
CONFIG_OPT = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help="YAML config file.")


def _load(config: Path | None) -> AppConfig:
    try:
        return load_config(str(config) if config else None)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        raise typer.Exit(code=2) from exc


def _print_report(report: CheckReport, root: Path) -> None:
    if report.findings:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Location")
        table.add_column("Severity")
        table.add_column("Kind")
        table.add_column("Message")
        for finding in report.findings:
            try:
                location = finding.path.relative_to(root).as_posix()
            except ValueError:
                location = str(finding.path)
            if finding.line:
                location = f"{location}:{finding.line}"
            style = "red" if finding.is_error else "yellow"
            table.add_row(location, f"[{style}]{finding.severity}[/{style}]", finding.kind, finding.message)
        console.print(table)
    console.print(
        f"Checked {report.articles} article(s): "
        f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)"
    )


@app.command()
def check(
    content: Path = CONTENT_ARG,
    config: Path | None = CONFIG_OPT,
    strict: bool = typer.Option(False, "--strict", help="Treat warnings as errors."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Run structural checks over every article in CONTENT.

    Exits with code 1 when errors are found (or warnings, with --strict).
    """
    cfg = _load(config)
    if log_level:
        cfg.logging.level = log_level
    cfg.logging.console = False
    logger = setup_logging(cfg.logging, None)

    report = run_check(content, cfg, logger)
    _print_report(report, content)
    if report.errors or (strict and report.warnings):
        raise typer.Exit(code=1)


@app.command()
def build(
    content: Path = CONTENT_ARG,
    output: Path = typer.Option(Path("site"), "--output", "-o", help="Output directory."),
    config: Path | None = CONFIG_OPT,
    force: bool = typer.Option(False, "--force/--no-force", help="Build even when checks report errors."),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    base_path: str | None = typer.Option(None, "--base-path", help="URL prefix the site is served under."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Render every article in CONTENT to a static HTML site."""
    cfg = _load(config)

    # Override with CLI options
    if force:
        cfg.build.fail_on_errors = False
    if base_path:
        cfg.output.base_path = base_path
    if log_level:
        cfg.logging.level = log_level
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file

    try:
        index_path = run_build(content, output, cfg, show_progress=progress, console=console)
    except BuildAborted as exc:
        if exc.report is not None:
            _print_report(exc.report, content)
        console.print(f"[red]Build aborted:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    console.print(f"Site generated: {index_path}")


@app.command("list")
def list_articles(
    content: Path = CONTENT_ARG,
    config: Path | None = CONFIG_OPT,
):
    """List articles, newest first."""
    cfg = _load(config)
    try:
        collection = load_collection(content, cfg.content, cfg.output.base_path)
    except (ContentError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    table = Table(show_header=True, header_style="bold")
    table.add_column("Date")
    table.add_column("Slug")
    table.add_column("Title")
    for article in collection:
        table.add_row(human_date(article.metadata.date), article.slug, article.title)
    console.print(table)


@app.command()
def show(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    root: Path | None = typer.Option(
        None, "--root", help="Content root used to derive the slug (defaults to the file's directory)."
    ),
    config: Path | None = CONFIG_OPT,
):
    """Render one article and print its metadata and HTML body."""
    cfg = _load(config)
    root = root or path.parent
    try:
        article = load_article(path, root, cfg.content)
        rendered = render_article(article, None, cfg.output)
    except ContentError as exc:
        console.print(f"[red]{exc.kind}:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(f"[bold]title:[/bold] {rendered.title}")
    console.print(f"[bold]description:[/bold] {rendered.description}")
    console.print(f"[bold]date:[/bold] {rendered.date.isoformat()}")
    console.print(f"[bold]slug:[/bold] {rendered.slug}")
    console.print(rendered.rendered_body, markup=False, highlight=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
