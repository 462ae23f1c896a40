r"""Text helpers shared by the content transformers.

The functions here derive anchor slugs that keep Han characters intact,
map parsed tags back to source offsets, and reduce HTML fragments to plain
text (with entities decoded by the parser) for titles and excerpts.

Example
-------
>>> from newbie_pages.html_utils import generate_slug, strip_html
>>> strip_html("<b>Don&#8217;t</b> &amp; won&#x2019;t")
'Don’t & won’t'
>>> generate_slug("Hello, 世界  Again!")
'hello-世界-again'
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_SLUG_DISALLOWED = re.compile(r"[^A-Za-z0-9_\s\u4e00-\u9fff-]")
_WHITESPACE = re.compile(r"\s+")
_REPEATED_HYPHENS = re.compile(r"-+")
NBSP = "\xa0"


def generate_slug(text: str) -> str:
    """Return a URL-friendly anchor slug that preserves Han characters."""
    slug = _SLUG_DISALLOWED.sub("", text.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug.strip("-")


def line_start_offsets(text: str) -> list[int]:
    """Return the offset of the first character of every line in ``text``.

    Combined with a parsed tag's ``sourceline`` and ``sourcepos`` this gives
    the tag's position in the original string.
    """
    offsets = [0]
    offsets.extend(index + 1 for index, char in enumerate(text) if char == "\n")
    return offsets


def unique_id(base: str, used: set[str]) -> str:
    """Return ``base`` or the first ``base-N`` not in ``used``, recording it."""
    candidate = base
    suffix = 1
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def normalize_text(text: str) -> str:
    """Replace non-breaking spaces and trim surrounding whitespace."""
    return text.replace(NBSP, " ").strip()


def strip_html(html: str, *, max_length: int | None = None) -> str:
    """Reduce an HTML fragment to plain text, optionally truncated.

    Parameters
    ----------
    html : str
        Markup to flatten; entities are decoded by the parser.
    max_length : int, optional
        When provided and exceeded, the text is cut to ``max_length``
        characters, trimmed, and suffixed with ``...``.

    Returns
    -------
    str
        The stripped text content.
    """
    text = BeautifulSoup(html, "html.parser").get_text().strip()
    if max_length is not None and len(text) > max_length:
        return text[:max_length].strip() + "..."
    return text


def clean_excerpt(excerpt: str | None, *, max_length: int = 150) -> str:
    """Return the plain-text excerpt shown beneath titles in tag listings."""
    if not excerpt:
        return ""
    text = strip_html(excerpt.replace("&hellip;", "..."))
    text = normalize_text(text)
    if len(text) > max_length:
        return text[:max_length].strip() + "..."
    return text


__all__ = [
    "NBSP",
    "clean_excerpt",
    "generate_slug",
    "line_start_offsets",
    "normalize_text",
    "strip_html",
    "unique_id",
]
