"""
Exceptions raised while loading and rendering articles.

The strict code paths (loading an article for rendering) raise these; the
checker catches them and turns them into findings of the same name.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ContentError(Exception):
    """Base class for problems found in a source document."""

    kind = "ContentError"

    def __init__(self, message: str, path: Path | None = None, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.line = line

    def __str__(self) -> str:
        location = ""
        if self.path is not None:
            location = f"{self.path}:{self.line}: " if self.line else f"{self.path}: "
        return f"{location}{self.message}"


class MetadataMissing(ContentError):
    """Required front-matter keys are absent or empty."""

    kind = "MetadataMissing"

    def __init__(
        self,
        fields: list[str],
        path: Path | None = None,
        message: str | None = None,
    ):
        self.fields = list(fields)
        if message is None:
            message = "missing required metadata: " + ", ".join(self.fields)
        super().__init__(message, path, line=1)


class InvalidDate(ContentError):
    """The ``date`` key cannot be parsed as a calendar date."""

    kind = "InvalidDate"

    def __init__(self, value: Any, path: Path | None = None, line: int | None = 1):
        self.value = value
        super().__init__(f"date {value!r} is not a recognised calendar date", path, line)


class MalformedContent(ContentError):
    """The document cannot be split or rendered safely.

    Raised for unterminated fenced code blocks and for front-matter blocks
    that are never closed or are not a YAML mapping.
    """

    kind = "MalformedContent"
