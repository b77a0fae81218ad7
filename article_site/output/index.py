"""
Machine-readable article index (``articles.json``).

The index lists every rendered article, newest first, so other tools can
build listings without parsing HTML. Reading it back is forgiving: entries
that are not well-formed are dropped instead of failing the whole file.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Sequence

from ..core.collection import ArticleCollection
from ..core.types import RenderedArticle


INDEX_FILENAME = "articles.json"
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def build_index_entries(
    rendered: Sequence[RenderedArticle],
    collection: ArticleCollection,
    pretty_urls: bool = True,
) -> list[dict[str, str]]:
    entries = [
        {
            "slug": item.slug,
            "title": item.title,
            "description": item.description,
            "date": item.date.isoformat(),
            "path": collection.url_for(item.slug, pretty_urls),
        }
        for item in rendered
    ]
    entries.sort(key=lambda entry: entry["slug"])
    entries.sort(key=lambda entry: entry["date"], reverse=True)
    return entries


def write_article_index(
    rendered: Sequence[RenderedArticle],
    collection: ArticleCollection,
    output_dir: Path,
    pretty_urls: bool = True,
) -> Path:
    """Write ``articles.json`` into ``output_dir`` and return its path."""
    index_path = output_dir / INDEX_FILENAME
    entries = build_index_entries(rendered, collection, pretty_urls)
    index_path.parent.mkdir(parents=True, exist_ok=True)
    index_path.write_text(
        f"{json.dumps(entries, ensure_ascii=False, indent=2)}\n", encoding="utf-8"
    )
    return index_path


def load_article_index(index_path: Path) -> list[dict[str, str]]:
    if not index_path.exists():
        return []

    try:
        raw = json.loads(index_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return []

    if not isinstance(raw, list):
        return []

    entries: list[dict[str, str]] = []
    for item in raw:
        normalized = _normalize_entry(item)
        if normalized is not None:
            entries.append(normalized)
    return entries


def _normalize_entry(item: Any) -> dict[str, str] | None:
    if not isinstance(item, dict):
        return None

    values = {key: item.get(key) for key in ("slug", "title", "description", "date", "path")}
    if not all(isinstance(value, str) for value in values.values()):
        return None

    if DATE_PATTERN.fullmatch(values["date"]) is None:
        return None

    return values
