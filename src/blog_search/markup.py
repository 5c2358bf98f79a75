"""Rendering of post sources to HTML and of HTML to searchable plain text."""

import re

import docutils.core  # type: ignore[import-untyped]
import markdown
from bs4 import BeautifulSoup

MARKDOWN_EXTENSIONS = ("fenced_code", "tables")
NON_TEXT_ELEMENTS = ("script", "style", "template")

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces.

    Args:
        text: Text to normalise.

    Returns:
        Text with no leading, trailing or repeated whitespace.
    """
    return _WHITESPACE.sub(" ", text).strip()


def strip_html(html: str) -> str:
    """Strip HTML markup, keeping only the readable text.

    Script and style elements are dropped entirely and entities are decoded.

    Args:
        html: Rendered HTML fragment.

    Returns:
        Plain text suitable for substring search.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(NON_TEXT_ELEMENTS):
        element.decompose()
    return collapse_whitespace(soup.get_text())


def render_markdown(source: str) -> str:
    """Render a Markdown post body to HTML.

    Args:
        source: Markdown text without front matter.

    Returns:
        HTML fragment.
    """
    return markdown.markdown(source, extensions=list(MARKDOWN_EXTENSIONS))


def render_rst(source: str) -> str:
    """Render a reStructuredText post body to HTML.

    Args:
        source: RST text without front matter.

    Returns:
        HTML fragment of the document body.
    """
    parts = docutils.core.publish_parts(
        source=source,
        writer_name="html",
        settings_overrides={
            "report_level": 5,  # Suppress warnings
            "halt_level": 5,
            "file_insertion_enabled": False,
            "raw_enabled": False,
            "doctitle_xform": False,
        },
    )
    return str(parts["body"])


RENDERERS = {
    ".md": render_markdown,
    ".markdown": render_markdown,
    ".rst": render_rst,
    ".html": lambda source: source,
}
