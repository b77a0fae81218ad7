"""Tests for YAML configuration loading."""

from pathlib import Path

import pytest

from article_site.config import AppConfig, ConfigError, load_config


def test_load_config_without_path_returns_defaults():
    cfg = load_config(None)

    assert cfg == AppConfig()
    assert cfg.content.required_fields == ["title", "date"]
    assert cfg.checks.duplicate_title_threshold == 92


def test_defaults_are_not_shared():
    first = load_config(None)
    first.output.site_title = "Changed"

    assert load_config(None).output.site_title == "Articles"


def test_load_config_merges_sections(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "output:\n  site_title: CORS notes\n  base_path: /blog/\n"
        "checks:\n  require_code_language: false\n"
        "unknown_section:\n  x: 1\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.output.site_title == "CORS notes"
    assert cfg.output.base_path == "/blog/"
    assert cfg.output.pretty_urls is True
    assert cfg.checks.require_code_language is False
    assert cfg.logging.level == "INFO"


def test_load_config_rejects_unknown_keys(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("output:\n  site_tilte: typo\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="site_tilte"):
        load_config(str(path))


def test_load_config_rejects_non_mapping(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(str(path))


def test_example_config_loads():
    example = Path(__file__).resolve().parent.parent / "config.example.yaml"

    cfg = load_config(str(example))

    assert cfg.content.exclude == ["drafts/*"]
