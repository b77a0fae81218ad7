"""
article-site - structural checker and static renderer for front-matter articles.

This package loads long-form articles written as Markdown with a YAML
front-matter block (title, description, date), checks them for authoring
mistakes (missing metadata, unterminated code fences, broken internal
links) and renders them to a deterministic static HTML site.

Main entry point is the CLI via the `article-site` command.

Example:
    $ article-site check content/
    $ article-site build content/ -o site/
"""

__all__ = [
    "__version__",
    "check_collection",
    "load_article",
    "load_collection",
    "render_article",
]
__version__ = "0.1.0"

from .checks import check_collection
from .input.loader import load_article, load_collection
from .output.renderer import render_article
