"""
Core domain models and business logic.

This package contains the article data types, the error hierarchy, the
body structure scanner and the article collection. None of it touches
the filesystem.
"""

from .collection import ArticleCollection, article_slug
from .errors import ContentError, InvalidDate, MalformedContent, MetadataMissing
from .structure import outline_body, slugify_heading
from .types import (
    Article,
    ArticleMetadata,
    BodyOutline,
    CheckReport,
    Finding,
    RenderedArticle,
)

__all__ = [
    "Article",
    "ArticleMetadata",
    "ArticleCollection",
    "BodyOutline",
    "CheckReport",
    "ContentError",
    "Finding",
    "InvalidDate",
    "MalformedContent",
    "MetadataMissing",
    "RenderedArticle",
    "article_slug",
    "outline_body",
    "slugify_heading",
]
