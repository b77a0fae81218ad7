"""Tests for the articles.json index."""

import json
from datetime import date
from pathlib import Path

from article_site.core.collection import ArticleCollection
from article_site.core.types import RenderedArticle
from article_site.output.index import load_article_index, write_article_index


def _rendered(slug: str, day: date) -> RenderedArticle:
    return RenderedArticle(slug=slug, title=slug.title(), description="", date=day, rendered_body="")


def test_write_and_load_index(tmp_path: Path):
    collection = ArticleCollection(tmp_path, base_path="/blog/")
    rendered = [
        _rendered("b", date(2023, 1, 12)),
        _rendered("c", date(2023, 1, 19)),
        _rendered("a", date(2023, 1, 19)),
    ]

    index_path = write_article_index(rendered, collection, tmp_path)

    entries = load_article_index(index_path)
    assert [e["slug"] for e in entries] == ["a", "c", "b"]
    assert entries[0] == {
        "slug": "a",
        "title": "A",
        "description": "",
        "date": "2023-01-19",
        "path": "/blog/a/",
    }


def test_load_index_drops_malformed_entries(tmp_path: Path):
    index_path = tmp_path / "articles.json"
    index_path.write_text(
        json.dumps(
            [
                {"slug": "ok", "title": "Ok", "description": "", "date": "2023-01-19", "path": "/ok/"},
                {"slug": "bad-date", "title": "x", "description": "", "date": "Jan 19", "path": "/x/"},
                {"slug": "no-title", "description": "", "date": "2023-01-19", "path": "/y/"},
                "not a dict",
            ]
        ),
        encoding="utf-8",
    )

    assert [e["slug"] for e in load_article_index(index_path)] == ["ok"]


def test_load_index_missing_or_invalid(tmp_path: Path):
    assert load_article_index(tmp_path / "missing.json") == []

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert load_article_index(broken) == []
