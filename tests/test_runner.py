"""Tests for the check and build pipeline."""

import json
from pathlib import Path

import pytest

from article_site.config import AppConfig
from article_site.runner import BuildAborted, run_build, run_check


CONTENT_DIR = Path(__file__).resolve().parent.parent / "content"


def _quiet_config() -> AppConfig:
    cfg = AppConfig()
    cfg.logging.console = False
    cfg.logging.file = False
    return cfg


def _write(root: Path, rel: str, text: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_run_check_reference_content():
    report = run_check(CONTENT_DIR, _quiet_config())

    assert report.articles == 2
    assert report.ok


def test_build_reference_content(tmp_path: Path):
    out = tmp_path / "site"

    index_path = run_build(CONTENT_DIR, out, _quiet_config(), show_progress=False)

    assert index_path == out / "index.html"
    page = out / "configuring-cors-aws-http-api" / "index.html"
    assert page.exists()
    html = page.read_text(encoding="utf-8")
    assert "Configuring CORS in AWS HTTP API" in html
    assert 'href="/cors-preflight-requests/#when-does-the-browser-send-a-preflight"' in html
    assert '<code class="language-yaml">' in html

    entries = json.loads((out / "articles.json").read_text(encoding="utf-8"))
    assert [e["slug"] for e in entries] == ["configuring-cors-aws-http-api", "cors-preflight-requests"]
    assert entries[0]["date"] == "2023-01-19"


def test_build_is_byte_identical_across_runs(tmp_path: Path):
    first = tmp_path / "one"
    second = tmp_path / "two"

    run_build(CONTENT_DIR, first, _quiet_config(), show_progress=False)
    run_build(CONTENT_DIR, second, _quiet_config(), show_progress=False)

    files = sorted(p.relative_to(first) for p in first.rglob("*") if p.is_file())
    assert files
    for rel in files:
        assert (first / rel).read_bytes() == (second / rel).read_bytes()


def test_build_aborts_on_errors(tmp_path: Path):
    content = tmp_path / "content"
    _write(content, "broken.md", "---\ntitle: A\ndate: Jan 19 2023\n---\n```js\nopen\n")

    with pytest.raises(BuildAborted) as excinfo:
        run_build(content, tmp_path / "site", _quiet_config(), show_progress=False)

    assert excinfo.value.report is not None
    assert len(excinfo.value.report.by_kind("MalformedContent")) == 1


def test_build_with_errors_skips_broken_articles(tmp_path: Path):
    content = tmp_path / "content"
    _write(content, "good.md", "---\ntitle: Good\ndescription: d\ndate: Jan 19 2023\n---\nFine\n")
    _write(content, "broken.md", "---\ntitle: Broken\ndate: Jan 19 2023\n---\n```js\nopen\n")
    _write(content, "nodate.md", "---\ntitle: No date\n---\nBody\n")
    cfg = _quiet_config()
    cfg.build.fail_on_errors = False
    out = tmp_path / "site"

    run_build(content, out, cfg, show_progress=False)

    assert (out / "good" / "index.html").exists()
    assert not (out / "broken" / "index.html").exists()
    assert not (out / "nodate" / "index.html").exists()
    entries = json.loads((out / "articles.json").read_text(encoding="utf-8"))
    assert [e["slug"] for e in entries] == ["good"]


def test_build_flat_urls(tmp_path: Path):
    cfg = _quiet_config()
    cfg.output.pretty_urls = False
    cfg.output.write_index_json = False
    out = tmp_path / "site"

    run_build(CONTENT_DIR, out, cfg, show_progress=False)

    assert (out / "cors-preflight-requests.html").exists()
    assert not (out / "articles.json").exists()


def test_build_writes_jsonl_log(tmp_path: Path):
    cfg = AppConfig()
    cfg.logging.console = False
    out = tmp_path / "site"

    run_build(CONTENT_DIR, out, cfg, show_progress=False)

    lines = (out / "build.jsonl").read_text(encoding="utf-8").splitlines()
    events = [json.loads(line).get("event") for line in lines]
    assert events[0] == "build_start"
    assert events[-1] == "build_complete"


def test_build_with_errors_does_not_link_to_skipped_pages(tmp_path: Path):
    content = tmp_path / "content"
    _write(content, "good.md", "---\ntitle: Good\ndescription: d\ndate: Jan 19 2023\n---\nSee [it](broken.md).\n")
    _write(content, "broken.md", "---\ntitle: Broken\ndate: Jan 19 2023\n---\n```js\nopen\n")
    cfg = _quiet_config()
    cfg.build.fail_on_errors = False
    out = tmp_path / "site"

    run_build(content, out, cfg, show_progress=False)

    html = (out / "good" / "index.html").read_text(encoding="utf-8")
    assert 'href="broken.md"' in html
    assert 'href="/broken/"' not in html
