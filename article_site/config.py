"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ContentConfig: Where articles live and which metadata they must carry
- CheckConfig: Structural check behaviour
- OutputConfig: Rendered site layout
- BuildConfig: Build policy
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, fields
from typing import Any

import yaml

from .input.frontmatter import DEFAULT_DATE_FORMATS


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


@dataclass
class ContentConfig:
    """Configuration for locating and loading articles.

    Attributes:
        extensions: File suffixes treated as articles
        exclude: Glob patterns (relative to the content root) to skip
        required_fields: Front-matter keys that must be present and non-empty
        date_formats: strptime formats accepted for the ``date`` key
    """

    extensions: list[str] = field(default_factory=lambda: [".md", ".markdown"])
    exclude: list[str] = field(default_factory=list)
    required_fields: list[str] = field(default_factory=lambda: ["title", "date"])
    date_formats: list[str] = field(default_factory=lambda: list(DEFAULT_DATE_FORMATS))


@dataclass
class CheckConfig:
    """Configuration for structural checks.

    Attributes:
        require_code_language: Warn about fenced code blocks without a language tag
        duplicate_title_threshold: Fuzzy match threshold (0-100) for duplicate titles
        suggestion_cutoff: Minimum score (0-100) for a broken-link suggestion
        check_anchors: Verify ``#fragment`` links against heading anchors
    """

    require_code_language: bool = True
    duplicate_title_threshold: int = 92
    suggestion_cutoff: int = 70
    check_anchors: bool = True


@dataclass
class OutputConfig:
    """Configuration for the rendered site.

    Attributes:
        site_title: Title of the generated index page
        base_path: URL prefix the site is served under (e.g. "/blog/")
        pretty_urls: Write ``<slug>/index.html`` instead of ``<slug>.html``
        write_index_json: Also write ``articles.json`` next to the index page
    """

    site_title: str = "Articles"
    base_path: str = "/"
    pretty_urls: bool = True
    write_index_json: bool = True


@dataclass
class BuildConfig:
    """Configuration for the build command.

    Attributes:
        fail_on_errors: Abort the build when the checks report errors
    """

    fail_on_errors: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file (build output directory only)
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "build.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    content: ContentConfig = field(default_factory=ContentConfig)
    checks: CheckConfig = field(default_factory=CheckConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS = {
    "content": ContentConfig,
    "checks": CheckConfig,
    "output": OutputConfig,
    "build": BuildConfig,
    "logging": LoggingConfig,
}


def default_config() -> AppConfig:
    return AppConfig()


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return default_config()

    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"{path}: invalid YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return _merge_config(default_config(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown top-level sections are ignored; unknown keys inside a known
    section raise ConfigError.
    """
    data = copy.deepcopy(asdict(base))
    for key, value in raw.items():
        if key not in data:
            continue
        if value is None:
            continue
        if not isinstance(value, dict):
            raise ConfigError(f"section '{key}' must be a mapping")
        allowed = {f.name for f in fields(_SECTIONS[key])}
        unknown = sorted(set(value) - allowed)
        if unknown:
            raise ConfigError(f"unknown key(s) in section '{key}': {', '.join(unknown)}")
        data[key].update(value)
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        content=ContentConfig(**data["content"]),
        checks=CheckConfig(**data["checks"]),
        output=OutputConfig(**data["output"]),
        build=BuildConfig(**data["build"]),
        logging=LoggingConfig(**data["logging"]),
    )
