r"""Extract table-of-contents headings and inject anchor ids into post HTML.

WordPress renders post bodies as HTML fragments. This module walks the
fragment's element tree, assigns stable ``id`` attributes to every non-empty
``<h2>``/``<h3>`` that lacks one, and returns the ordered heading descriptors
the post template uses for its in-page navigation.

Example
-------
>>> from newbie_pages.toc import process_content_with_toc
>>> processed = process_content_with_toc("<h2>Intro</h2><p>x</p><h2>Intro</h2>")
>>> [heading.id for heading in processed.headings]
['intro', 'intro-1']
>>> processed.html
'<h2 id="intro">Intro</h2><p>x</p><h2 id="intro-1">Intro</h2>'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from html import escape

from bs4 import BeautifulSoup, ParserRejectedMarkup

from ._constants import HEADING_LEVELS
from .html_utils import (
    generate_slug,
    line_start_offsets,
    normalize_text,
    unique_id,
)

if typ.TYPE_CHECKING:
    from bs4 import Tag

logger = logging.getLogger(__name__)

FALLBACK_SLUG = "section"


@dc.dataclass(frozen=True, slots=True)
class HeadingDescriptor:
    """A single table-of-contents entry.

    Attributes
    ----------
    id : str
        Anchor id, unique within the processed document.
    text : str
        Decoded plain-text label of the heading.
    level : int
        Heading level, ``2`` or ``3``.
    """

    id: str
    text: str
    level: int


@dc.dataclass(slots=True)
class ProcessedContent:
    """Post HTML with heading anchors plus the headings found, in order."""

    html: str
    headings: list[HeadingDescriptor] = dc.field(default_factory=list)


def process_content_with_toc(html: str) -> ProcessedContent:
    """Assign anchor ids to level-2/3 headings and collect them for the TOC.

    Parameters
    ----------
    html : str
        Rendered post content. Unclosed or nested markup is tolerated.

    Returns
    -------
    ProcessedContent
        ``html`` with an ``id`` added to every non-empty heading that lacked
        one, and one :class:`HeadingDescriptor` per non-empty heading in
        document order. Headings that already carry an ``id`` keep it. When
        no heading needed an id the input string is returned unchanged.

    Notes
    -----
    Every ``id`` already present in the fragment is reserved up front so a
    generated anchor never duplicates an existing one. Collisions between
    generated anchors are resolved with ``-1``, ``-2``, ... suffixes. Markup
    the parser rejects yields no headings rather than an error.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup:
        logger.warning("Could not parse post content; rendering without a TOC")
        return ProcessedContent(html=html)

    used_ids = {str(element["id"]) for element in soup.find_all(id=True)}
    headings: list[HeadingDescriptor] = []
    insertions: list[tuple[Tag, str]] = []
    for element in soup.find_all(list(HEADING_LEVELS)):
        text = normalize_text(element.get_text())
        if not text:
            continue
        heading_id = element.get("id")
        if not heading_id:
            heading_id = unique_id(generate_slug(text) or FALLBACK_SLUG, used_ids)
            insertions.append((element, heading_id))
        headings.append(
            HeadingDescriptor(
                id=str(heading_id), text=text, level=HEADING_LEVELS[element.name]
            )
        )

    if not insertions:
        return ProcessedContent(html=html, headings=headings)
    return ProcessedContent(html=_inject_ids(html, insertions), headings=headings)


def _inject_ids(html: str, insertions: list[tuple[Tag, str]]) -> str:
    """Splice ``id`` attributes into the heading start tags of ``html``.

    Only the start tags gain an attribute; every other character of the
    source is copied through, so markup the parser would have repaired on
    re-serialisation stays exactly as the author wrote it.
    """
    line_offsets = line_start_offsets(html)
    pieces: list[str] = []
    cursor = 0
    for element, heading_id in insertions:
        start = line_offsets[element.sourceline - 1] + element.sourcepos
        name_end = start + 1 + len(element.name)
        pieces.append(html[cursor:name_end])
        pieces.append(f' id="{escape(heading_id, quote=True)}"')
        cursor = name_end
    pieces.append(html[cursor:])
    return "".join(pieces)


__all__ = [
    "FALLBACK_SLUG",
    "HeadingDescriptor",
    "ProcessedContent",
    "process_content_with_toc",
]
