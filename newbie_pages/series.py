r"""Compute series membership and previous/next navigation for posts.

A series is a tag whose posts carry an integer ``sortOrder`` custom field.
The first tag WordPress returns for a post is treated as its series; posts
without a parseable position are left out of the navigation sequence.

Example
-------
>>> from newbie_pages.series import parse_order
>>> parse_order("12"), parse_order(" 3rd"), parse_order("draft")
(12, 3, None)
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ

from .wordpress import WordPressAPIError

if typ.TYPE_CHECKING:
    from .models import SeriesMember, Tag

logger = logging.getLogger(__name__)

_LEADING_INTEGER = re.compile(r"\s*([+-]?[0-9]+)")


class SeriesSource(typ.Protocol):
    """The two lookups the sequencer needs from the content source."""

    def fetch_tags_for_item(self, item_id: int) -> list[Tag]:
        """Return the tags attached to ``item_id`` in source order."""
        ...

    def fetch_items_by_tag(self, tag_slug: str) -> list[SeriesMember]:
        """Return every post carrying ``tag_slug``."""
        ...


@dc.dataclass(slots=True)
class SeriesData:
    """Where a post sits within its series.

    Attributes
    ----------
    tag_name : str
        Display name of the series tag.
    tag_slug : str
        Slug of the series tag, used to link to the tag listing.
    current_sort_order : int
        The post's own position.
    prev_item : SeriesMember | None
        Closest member with a lower position, if any.
    next_item : SeriesMember | None
        Closest member with a higher position, if any.
    """

    tag_name: str
    tag_slug: str
    current_sort_order: int
    prev_item: SeriesMember | None = None
    next_item: SeriesMember | None = None


def parse_order(value: str | None) -> int | None:
    """Parse a ``sortOrder`` field as a base-10 integer.

    Leading whitespace and a sign are accepted and anything after the digits
    is ignored. Only ASCII digits count; values with no leading digits yield
    ``None``.
    """
    if not value:
        return None
    match = _LEADING_INTEGER.match(value)
    if match is None:
        return None
    return int(match.group(1))


def get_series_data(
    item_id: int, item_slug: str, *, source: SeriesSource
) -> SeriesData | None:
    """Return series position and neighbours for a post, or ``None``.

    Parameters
    ----------
    item_id : int
        WordPress id of the post.
    item_slug : str
        Slug of the post, used to find it among the tag's members.
    source : SeriesSource
        Content source used for the tag and member lookups.

    Returns
    -------
    SeriesData | None
        ``None`` when the post has no tags, its first tag has at most one
        post, or the post has no parseable sort position.

    Raises
    ------
    WordPressAPIError
        Propagated from ``source`` when either lookup fails.
    """
    tags = source.fetch_tags_for_item(item_id)
    if not tags:
        return None

    series_tag = tags[0]
    members = source.fetch_items_by_tag(series_tag.slug)
    if len(members) <= 1:
        return None

    current = next((member for member in members if member.slug == item_slug), None)
    current_order = parse_order(current.sort_position) if current else None
    if current_order is None:
        return None

    ranked = [
        (order, member)
        for member in members
        if (order := parse_order(member.sort_position)) is not None
    ]
    ranked.sort(key=lambda pair: pair[0])
    ordered = [member for _order, member in ranked]
    index = next(
        (idx for idx, member in enumerate(ordered) if member.slug == item_slug), None
    )
    if index is None:
        return None

    return SeriesData(
        tag_name=series_tag.name,
        tag_slug=series_tag.slug,
        current_sort_order=current_order,
        prev_item=ordered[index - 1] if index > 0 else None,
        next_item=ordered[index + 1] if index + 1 < len(ordered) else None,
    )


def resolve_series_data(
    item_id: int, item_slug: str, *, source: SeriesSource
) -> SeriesData | None:
    """Return :func:`get_series_data`, treating lookup failures as no series."""
    try:
        return get_series_data(item_id, item_slug, source=source)
    except WordPressAPIError as exc:
        logger.warning("Series lookup failed for post %s: %s", item_slug, exc)
        return None


def order_tag_listing(members: typ.Iterable[SeriesMember]) -> list[SeriesMember]:
    """Order tag members for the tag page.

    Members with a sort position come first in ascending order; the rest
    follow, newest first, with undated members last.
    """
    numbered: list[tuple[int, SeriesMember]] = []
    unnumbered: list[SeriesMember] = []
    for member in members:
        order = parse_order(member.sort_position)
        if order is None:
            unnumbered.append(member)
        else:
            numbered.append((order, member))
    numbered.sort(key=lambda pair: pair[0])
    unnumbered.sort(key=lambda member: member.date or "", reverse=True)
    return [member for _order, member in numbered] + unnumbered


__all__ = [
    "SeriesData",
    "SeriesSource",
    "get_series_data",
    "order_tag_listing",
    "parse_order",
    "resolve_series_data",
]
