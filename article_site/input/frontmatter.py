"""
Front-matter parsing for article documents.

A document looks like::

    ---
    title: "Configuring CORS in AWS HTTP API"
    description: "How preflight requests reach your API"
    date: "Jan 19 2023"
    ---
    Body text in Markdown...

The block between the two ``---`` lines is YAML and is parsed with
a ``yaml.SafeLoader``. Everything after the closing delimiter is the body.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable

import yaml

from ..core.errors import InvalidDate, MalformedContent, MetadataMissing
from ..core.types import ArticleMetadata


OPEN_DELIMITER = "---"
CLOSE_DELIMITERS = ("---", "...")
KNOWN_FIELDS = ("title", "description", "date")

DEFAULT_DATE_FORMATS = (
    "%b %d %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%Y-%m-%d",
)

_WHITESPACE_RE = re.compile(r"\s+")


class MetadataLoader(yaml.SafeLoader):
    """SafeLoader that keeps impossible timestamps (``2023-02-30``) as strings."""


def _construct_timestamp(loader: MetadataLoader, node: yaml.ScalarNode) -> Any:
    try:
        return loader.construct_yaml_timestamp(node)
    except ValueError:
        return loader.construct_scalar(node)


MetadataLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp)


def normalize_text(text: str) -> str:
    """Strip a UTF-8 BOM and convert CRLF/CR line endings to LF."""
    if text.startswith("\ufeff"):
        text = text[1:]
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_front_matter(
    text: str, path: Path | None = None
) -> tuple[str | None, str, int]:
    """Split a document into its raw metadata block and body.

    Args:
        text: Full document text
        path: Source path, only used for error messages

    Returns:
        A tuple ``(raw_meta, body, body_line)``. ``raw_meta`` is None when
        the document has no front-matter block. ``body_line`` is the 1-based
        line number where the body starts in the file.

    Raises:
        MalformedContent: An opening delimiter has no closing delimiter
    """
    text = normalize_text(text)
    lines = text.split("\n")
    if not lines or lines[0].rstrip() != OPEN_DELIMITER:
        return None, text, 1

    for index in range(1, len(lines)):
        if lines[index].rstrip() in CLOSE_DELIMITERS:
            raw_meta = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1:])
            return raw_meta, body, index + 2

    raise MalformedContent("front-matter block is never closed", path, line=1)


def parse_metadata_block(raw: str, path: Path | None = None) -> dict[str, Any]:
    """Parse the YAML metadata block into a dictionary.

    Raises:
        MalformedContent: The block is not valid YAML or not a mapping
    """
    try:
        data = yaml.load(raw, Loader=MetadataLoader)
    except yaml.YAMLError as exc:
        line = None
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            # +2: the opening delimiter occupies file line 1
            line = mark.line + 2
        raise MalformedContent(f"front-matter is not valid YAML: {exc}", path, line) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedContent("front-matter must be a mapping of keys to values", path, line=2)
    return {str(key): value for key, value in data.items()}


def parse_date(
    value: Any,
    formats: Iterable[str] = DEFAULT_DATE_FORMATS,
    path: Path | None = None,
) -> date:
    """Parse a publication date.

    PyYAML turns unquoted ISO dates into ``date`` objects already (an
    impossible one such as ``2023-02-30`` is left as a string); strings
    are matched against each format in turn.

    Examples:
        >>> parse_date("Jan 19 2023")
        datetime.date(2023, 1, 19)
        >>> parse_date("2023-01-19")
        datetime.date(2023, 1, 19)

    Raises:
        InvalidDate: No format matches
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDate(value, path)

    cleaned = _WHITESPACE_RE.sub(" ", value.strip())
    for fmt in formats:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    raise InvalidDate(value, path)


def missing_fields(raw: dict[str, Any], fields: Iterable[str]) -> list[str]:
    """Return the keys of ``fields`` that are absent or blank in ``raw``."""
    missing = []
    for name in fields:
        value = raw.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def build_metadata(
    raw: dict[str, Any],
    path: Path | None = None,
    required_fields: Iterable[str] = ("title", "date"),
    date_formats: Iterable[str] = DEFAULT_DATE_FORMATS,
) -> ArticleMetadata:
    """Build ArticleMetadata from a parsed front-matter mapping.

    ``title`` and ``date`` are always required whatever ``required_fields``
    says; every missing key is reported in a single MetadataMissing.

    Raises:
        MetadataMissing: Required keys are absent or blank
        InvalidDate: The date cannot be parsed
    """
    required = list(dict.fromkeys([*required_fields, "title", "date"]))
    missing = missing_fields(raw, required)
    if missing:
        raise MetadataMissing(missing, path)

    description = raw.get("description")
    extra = {key: value for key, value in raw.items() if key not in KNOWN_FIELDS}
    return ArticleMetadata(
        title=str(raw["title"]).strip(),
        description=str(description).strip() if description is not None else "",
        date=parse_date(raw["date"], date_formats, path),
        extra=extra,
    )
