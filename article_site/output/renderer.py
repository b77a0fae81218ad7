"""
Rendering articles to static HTML.

Bodies are rendered with markdown-it-py (CommonMark plus tables and
strikethrough). Two render rules are added on top of the defaults:
headings get GitHub-style ``id`` anchors, and links that resolve to another
article are rewritten to that article's public URL. Pages are produced from
Jinja2 templates.

Output is deterministic: no timestamps, stable ordering, LF newlines, so
rendering the same content twice yields byte-identical files.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Sequence
from urllib.parse import urlsplit

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markdown_it import MarkdownIt

from ..config import OutputConfig
from ..core.collection import ArticleCollection
from ..core.errors import MalformedContent
from ..core.structure import AnchorRegistry, inline_text, new_parser, outline_body
from ..core.types import Article, RenderedArticle


TOC_LEVELS = (2, 3)


def _heading_open(self, tokens, idx, options, env):
    registry = env.setdefault("anchors", AnchorRegistry())
    tokens[idx].attrSet("id", registry.claim(inline_text(tokens[idx + 1]).strip()))
    return self.renderToken(tokens, idx, options, env)


def _link_open(self, tokens, idx, options, env):
    collection: ArticleCollection | None = env.get("collection")
    article: Article | None = env.get("article")
    token = tokens[idx]
    href = str(token.attrGet("href") or "")
    if collection is not None and article is not None and href:
        target = collection.resolve_link(article, href)
        if target is not None and target in collection:
            fragment = urlsplit(href).fragment
            url = collection.url_for(target, env.get("pretty_urls", True))
            token.attrSet("href", f"{url}#{fragment}" if fragment else url)
    return self.renderToken(tokens, idx, options, env)


def build_markdown() -> MarkdownIt:
    """Return a parser configured with the site's render rules."""
    md = new_parser()
    md.add_render_rule("heading_open", _heading_open)
    md.add_render_rule("link_open", _link_open)
    return md


def render_body(
    body: str,
    collection: ArticleCollection | None = None,
    article: Article | None = None,
    pretty_urls: bool = True,
    md: MarkdownIt | None = None,
) -> str:
    """Render a Markdown body to an HTML fragment."""
    env: dict[str, Any] = {
        "collection": collection,
        "article": article,
        "pretty_urls": pretty_urls,
    }
    return (md or build_markdown()).render(body, env)


def render_article(
    article: Article,
    collection: ArticleCollection | None = None,
    cfg: OutputConfig | None = None,
    md: MarkdownIt | None = None,
) -> RenderedArticle:
    """Render one article into the record used by the page templates.

    Raises:
        MalformedContent: The body has an unterminated fenced code block
    """
    cfg = cfg or OutputConfig()
    outline = outline_body(article.body, article.body_line - 1)
    if outline.unterminated:
        block = outline.unterminated[0]
        raise MalformedContent(
            f"fenced code block opened with {block.fence} is never closed",
            article.path,
            block.line,
        )

    return RenderedArticle(
        slug=article.slug,
        title=article.metadata.title,
        description=article.metadata.description,
        date=article.metadata.date,
        rendered_body=render_body(article.body, collection, article, cfg.pretty_urls, md),
        toc=[h for h in outline.headings if h.level in TOC_LEVELS],
    )


_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def human_date(value: date) -> str:
    """Format a date the way articles write it, e.g. "Jan 19 2023"."""
    return f"{_MONTHS[value.month - 1]} {value.day} {value.year}"


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html"]),
        keep_trailing_newline=True,
    )
    env.filters["human_date"] = human_date
    return env


def page_path(output_dir: Path, slug: str, pretty_urls: bool = True) -> Path:
    """Where the page of ``slug`` is written inside ``output_dir``."""
    if pretty_urls:
        return output_dir / slug / "index.html"
    return output_dir / f"{slug}.html"


def render_article_page(
    rendered: RenderedArticle,
    cfg: OutputConfig,
    base_path: str = "/",
) -> str:
    template = _environment().get_template("article.html")
    return template.render(
        article=rendered,
        site_title=cfg.site_title,
        home_url=base_path,
    )


def render_index_page(
    rendered: Sequence[RenderedArticle],
    cfg: OutputConfig,
    collection: ArticleCollection,
) -> str:
    """Render the listing page, newest article first."""
    items = sorted(rendered, key=lambda r: (-r.date.toordinal(), r.slug))
    template = _environment().get_template("index.html")
    return template.render(
        site_title=cfg.site_title,
        home_url=collection.base_path,
        articles=[
            {"article": item, "url": collection.url_for(item.slug, cfg.pretty_urls)}
            for item in items
        ],
        total=len(items),
    )


def write_page(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if not content.endswith("\n"):
        content += "\n"
    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(content)
