"""Utilities for rendering markdown and syntax-highlighted code snippets."""

from __future__ import annotations

import logging
import re
from html import escape

from bs4 import BeautifulSoup, Tag
from markdown import Markdown
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from newbie_pages.html_utils import line_start_offsets

LANGUAGE_CLASS_PATTERN = re.compile(r"^(?:language|lang)-([A-Za-z0-9_+#.-]+)$")
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
PRE_CLOSE_TAG = re.compile(r"</pre\s*>", re.IGNORECASE)
HIGHLIGHTED_CLASS = "codehilite"

logger = logging.getLogger(__name__)


class HtmlContentRenderer:
    """Render markdown and code snippets with consistent styling."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize a renderer with an optional pygments style.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(
            style=pygments_style, cssclass=HIGHLIGHTED_CLASS
        )

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(f".{HIGHLIGHTED_CLASS}")

    def markdown(self, text: str | None) -> str:
        """Render markdown (tag and site descriptions) into HTML."""
        if not text or not text.strip():
            return ""
        md = Markdown(
            extensions=["fenced_code", "codehilite", "tables", "sane_lists"],
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": HIGHLIGHTED_CLASS,
                    "pygments_style": self.pygments_style,
                }
            },
        )
        return md.convert(text)

    def code_block(self, code: str, language: str | None = None) -> str:
        """Highlight a WordPress code snippet as a ``div.codehilite`` block.

        Unknown languages fall back to the plain-text lexer; the requested
        name is still recorded in ``data-language`` so the template can label
        the block.
        """
        label = language or "text"
        try:
            lexer = get_lexer_by_name(label, stripnl=False)
        except ClassNotFound:
            logger.debug("No lexer for %r; highlighting as text", label)
            lexer = TextLexer(stripnl=False)
        return self._attach_language_attribute(
            highlight(code, lexer, self._formatter), label
        )

    def highlight_html(self, html: str) -> str:
        """Highlight plain ``<pre><code class="language-x">`` blocks in ``html``.

        WordPress stores code blocks as escaped text inside ``pre > code``.
        Blocks carrying a language class are replaced by Pygments output.
        Blocks without a language, blocks whose ``code`` already contains
        markup, and blocks inside an existing ``codehilite`` wrapper are left
        untouched. Each replaced block is spliced into the original string,
        so the markup around it is never re-serialised.
        """
        if "<pre" not in html:
            return html
        soup = BeautifulSoup(html, "html.parser")
        line_offsets = line_start_offsets(html)
        pieces: list[str] = []
        cursor = 0
        for pre in soup.find_all("pre"):
            code = pre.find("code", recursive=False)
            if code is None or code.find(True) is not None:
                continue
            if pre.find_parent(class_=HIGHLIGHTED_CLASS) is not None:
                continue
            language = _language_of(code) or _language_of(pre)
            if language is None:
                continue
            start = line_offsets[pre.sourceline - 1] + pre.sourcepos
            closing = PRE_CLOSE_TAG.search(html, start)
            if start < cursor or closing is None:
                continue
            pieces.append(html[cursor:start])
            pieces.append(self.code_block(code.get_text(), language))
            cursor = closing.end()
        if not pieces:
            return html
        pieces.append(html[cursor:])
        return "".join(pieces)

    @staticmethod
    def _attach_language_attribute(html: str, language: str) -> str:
        """Add a single language attribute to an already highlighted block."""
        safe_lang = escape(language or "text", quote=True)

        def _repl(match: re.Match[str]) -> str:
            return f'<div class="codehilite" data-language="{safe_lang}">'

        return CODEHILITE_OPEN_TAG.sub(_repl, html, 1)


def _language_of(element: Tag) -> str | None:
    for css_class in element.get("class") or []:
        match = LANGUAGE_CLASS_PATTERN.match(css_class)
        if match:
            return match.group(1).lower()
    return None


__all__ = ["HtmlContentRenderer"]
