"""Tests for discovering and loading documents from disk."""

from datetime import date
from pathlib import Path

import pytest

from article_site.config import ContentConfig
from article_site.core.errors import InvalidDate, MalformedContent, MetadataMissing
from article_site.input.loader import (
    discover_articles,
    load_article,
    load_collection,
    scan_document,
)


def _write(root: Path, rel: str, text: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


GOOD = '---\ntitle: "Configuring CORS in AWS HTTP API"\ndescription: "d"\ndate: "Jan 19 2023"\n---\nBody\n'


def test_discover_skips_hidden_excluded_and_other_files(tmp_path: Path):
    _write(tmp_path, "a.md", GOOD)
    _write(tmp_path, "nested/b.markdown", GOOD)
    _write(tmp_path, ".hidden/c.md", GOOD)
    _write(tmp_path, "drafts/d.md", GOOD)
    _write(tmp_path, "notes.txt", "x")

    found = discover_articles(tmp_path, ContentConfig(exclude=["drafts/*"]))

    assert [p.relative_to(tmp_path).as_posix() for p in found] == ["a.md", "nested/b.markdown"]


def test_discover_missing_directory(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        discover_articles(tmp_path / "nope", ContentConfig())


def test_load_article_example_scenario(tmp_path: Path):
    path = _write(tmp_path, "configuring-cors-aws-http-api.md", GOOD)

    article = load_article(path, tmp_path, ContentConfig())

    assert article.slug == "configuring-cors-aws-http-api"
    assert article.metadata.title == "Configuring CORS in AWS HTTP API"
    assert article.metadata.date == date(2023, 1, 19)
    assert article.body == "Body\n"
    assert article.body_line == 6


def test_load_article_without_front_matter(tmp_path: Path):
    path = _write(tmp_path, "bare.md", "# No metadata\n")

    with pytest.raises(MetadataMissing) as excinfo:
        load_article(path, tmp_path, ContentConfig())

    assert excinfo.value.fields == ["title", "date"]


def test_load_article_unclosed_front_matter(tmp_path: Path):
    path = _write(tmp_path, "broken.md", "---\ntitle: x\n")

    with pytest.raises(MalformedContent):
        load_article(path, tmp_path, ContentConfig())


def test_scan_document_collects_missing_and_invalid_date(tmp_path: Path):
    path = _write(tmp_path, "bad.md", "---\ndescription: d\ndate: someday\n---\nBody\n")

    doc = scan_document(path, tmp_path, ContentConfig())

    assert doc.split
    assert doc.article is None
    assert [type(err) for err in doc.errors] == [MetadataMissing, InvalidDate]
    assert doc.errors[0].fields == ["title"]
    assert doc.errors[1].line == 3


def test_load_collection(tmp_path: Path):
    _write(tmp_path, "a.md", GOOD)
    _write(tmp_path, "sub/index.md", GOOD.replace("Jan 19 2023", "Feb 1 2023"))

    collection = load_collection(tmp_path, ContentConfig())

    assert [a.slug for a in collection] == ["sub", "a"]


def test_undecodable_document_is_recorded_not_raised(tmp_path: Path):
    path = tmp_path / "a.md"
    path.write_bytes(b"---\ntitle: A\n\xe9\n---\n")

    doc = scan_document(path, tmp_path, ContentConfig())

    assert doc.article is None
    assert not doc.split
    assert [(type(e), e.line) for e in doc.errors] == [(MalformedContent, 3)]
    with pytest.raises(MalformedContent, match="not valid UTF-8"):
        load_article(path, tmp_path, ContentConfig())
