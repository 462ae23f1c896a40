r"""Split post HTML around tables and parse them for responsive rendering.

Wide tables are unreadable on phones, so post templates render each table
twice: the original markup for desktop and a stack of cards built from the
parsed :class:`TableData` for small screens. :func:`split_tables` cuts a post
into alternating prose and table parts. Every part's ``content`` is an exact
slice of the input, so joining the parts reproduces the post byte for byte.
Tables inside a ``<details>`` disclosure stay embedded in the surrounding
prose.

Example
-------
>>> from newbie_pages.tables import split_tables
>>> parts = split_tables("<p>a</p><table><tr><td>1</td></tr></table><p>b</p>")
>>> [part.type for part in parts]
['html', 'table', 'html']
>>> parts[1].table_data.rows
[['1']]
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from html.parser import HTMLParser

from bs4 import BeautifulSoup

from ._constants import DISCLOSURE_TAGS
from .html_utils import normalize_text

if typ.TYPE_CHECKING:
    from bs4 import Tag

logger = logging.getLogger(__name__)

PartType = typ.Literal["html", "table"]


@dc.dataclass(slots=True)
class TableData:
    """Header labels and data rows extracted from one table.

    Attributes
    ----------
    headers : list[str]
        Header cell text from ``<thead>`` or the first row's ``<th>`` cells.
    rows : list[list[str]]
        Text of the ``<td>`` cells of each data row; row lengths may differ.
    """

    headers: list[str] = dc.field(default_factory=list)
    rows: list[list[str]] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class ContentPart:
    """A prose or table slice of a post body."""

    type: PartType
    content: str
    table_data: TableData | None = None


class _TableLocator(HTMLParser):
    """Record the source spans of top-level tables outside disclosures."""

    def __init__(self, source: str) -> None:
        super().__init__(convert_charrefs=True)
        self.source = source
        self.spans: list[tuple[int, int]] = []
        self._line_offsets = [0]
        self._line_offsets.extend(
            index + 1 for index, char in enumerate(source) if char == "\n"
        )
        self._disclosure_depth = 0
        self._table_depth = 0
        self._open_start: int | None = None

    def _offset(self) -> int:
        line, column = self.getpos()
        return self._line_offsets[line - 1] + column

    def _qualifies(self) -> bool:
        return self._table_depth == 0 and self._disclosure_depth == 0

    def handle_starttag(
        self, tag: str, attrs: list[tuple[str, str | None]]  # noqa: ARG002
    ) -> None:
        if tag in DISCLOSURE_TAGS:
            self._disclosure_depth += 1
        elif tag == "table":
            if self._qualifies():
                self._open_start = self._offset()
            self._table_depth += 1

    def handle_startendtag(
        self, tag: str, attrs: list[tuple[str, str | None]]  # noqa: ARG002
    ) -> None:
        if tag == "table" and self._qualifies():
            start = self._offset()
            self.spans.append((start, start + len(self.get_starttag_text() or "")))

    def handle_endtag(self, tag: str) -> None:
        if tag in DISCLOSURE_TAGS:
            self._disclosure_depth = max(self._disclosure_depth - 1, 0)
        elif tag == "table" and self._table_depth:
            self._table_depth -= 1
            if self._table_depth == 0 and self._open_start is not None:
                end_tag_start = self._offset()
                close = self.source.find(">", end_tag_start)
                end = len(self.source) if close == -1 else close + 1
                self.spans.append((self._open_start, end))
                self._open_start = None

    def close(self) -> None:
        """Flush the tokenizer; an unclosed table runs to the end of input."""
        super().close()
        if self._open_start is not None:
            self.spans.append((self._open_start, len(self.source)))
            self._open_start = None


def _locate_tables(html: str) -> list[tuple[int, int]]:
    locator = _TableLocator(html)
    locator.feed(html)
    locator.close()
    return locator.spans


def split_tables(html: str) -> list[ContentPart]:
    """Partition ``html`` into prose and table parts in document order.

    Parameters
    ----------
    html : str
        Rendered post content.

    Returns
    -------
    list[ContentPart]
        A single ``html`` part holding the whole input when no table
        qualifies; otherwise prose parts interleaved with ``table`` parts that
        carry parsed :class:`TableData`.

    Notes
    -----
    Whitespace-only gaps never become parts of their own. A blank gap is
    appended to the part before it, and a blank prefix is prepended to the
    first table part, so concatenating ``content`` in order always yields the
    original string.
    """
    try:
        spans = _locate_tables(html)
    except AssertionError:
        logger.warning("Could not tokenize post content; tables left inline")
        spans = []
    if not spans:
        return [ContentPart(type="html", content=html)]

    parts: list[ContentPart] = []
    cursor = 0
    leading = ""
    for start, end in spans:
        gap = html[cursor:start]
        if gap.strip():
            parts.append(ContentPart(type="html", content=gap))
        elif parts:
            parts[-1].content += gap
        else:
            leading = gap
        table_html = html[start:end]
        parts.append(
            ContentPart(
                type="table",
                content=leading + table_html,
                table_data=parse_table_html(table_html),
            )
        )
        leading = ""
        cursor = end

    tail = html[cursor:]
    if tail.strip():
        parts.append(ContentPart(type="html", content=tail))
    else:
        parts[-1].content += tail
    return parts


def parse_table_html(html: str) -> TableData:
    """Parse the first ``<table>`` in ``html``; empty data when there is none."""
    table = BeautifulSoup(html, "html.parser").find("table")
    if table is None:
        return TableData()
    return _parse_table_element(table)


def _owned(table: Tag, name: str | list[str]) -> list[Tag]:
    """Return descendants named ``name`` whose nearest table is ``table``."""
    return [
        element
        for element in table.find_all(name)
        if element.find_parent("table") is table
    ]


def _cell_text(cell: Tag) -> str:
    return normalize_text(cell.get_text())


def _parse_table_element(table: Tag) -> TableData:
    headers: list[str] = []
    thead = next(iter(_owned(table, "thead")), None)
    if thead is not None:
        headers = [
            _cell_text(cell)
            for cell in _owned(table, "th")
            if cell.find_parent("thead") is thead
        ]

    row_elements = _owned(table, "tr")
    header_row = None
    if not headers and row_elements:
        first_cells = row_elements[0].find_all("th", recursive=False)
        if first_cells:
            headers = [_cell_text(cell) for cell in first_cells]
            header_row = row_elements[0]

    bodies = _owned(table, "tbody")
    if bodies:
        row_elements = [
            row
            for row in row_elements
            if any(
                row.find_parent(["thead", "tbody", "tfoot"]) is body for body in bodies
            )
        ]

    rows: list[list[str]] = []
    for row in row_elements:
        if row is header_row:
            continue
        cells = row.find_all("td", recursive=False)
        if cells:
            rows.append([_cell_text(cell) for cell in cells])
    return TableData(headers=headers, rows=rows)


__all__ = [
    "ContentPart",
    "PartType",
    "TableData",
    "parse_table_html",
    "split_tables",
]
