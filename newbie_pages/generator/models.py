"""Shared dataclasses used by the page generation pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from newbie_pages.comments import ThreadedComment
    from newbie_pages.models import Tag
    from newbie_pages.series import SeriesData
    from newbie_pages.tables import ContentPart
    from newbie_pages.toc import HeadingDescriptor


@dc.dataclass(slots=True)
class PostPageModel:
    """Structured data passed to the post template.

    Attributes
    ----------
    title : str
        Plain-text post title with entities decoded.
    slug : str
        URL slug of the post.
    url : str
        Canonical URL on the public site.
    description : str
        Plain-text excerpt used for meta tags.
    date_display : str
        Publication date formatted for readers, empty when unknown.
    author_name : str
        Display name of the author, empty when unknown.
    author_id : int | None
        Author id used for the author filter link.
    category_name : str
        Name of the first category, empty when the post has none.
    category_id : int | None
        Category id used for the category filter link.
    headings : list[HeadingDescriptor]
        Table-of-contents entries in document order.
    parts : list[ContentPart]
        Post body split into HTML runs and standalone tables.
    series : SeriesData | None
        Series position and neighbours, when the post belongs to a series.
    post_id : int
        WordPress id, submitted with new comments.
    comments : list[ThreadedComment]
        Approved comments from the first page, threaded for display.
    comment_total : int
        Number of approved comments on the post.
    """

    title: str
    slug: str
    url: str
    description: str
    date_display: str
    author_name: str
    author_id: int | None
    category_name: str
    category_id: int | None
    headings: list[HeadingDescriptor]
    parts: list[ContentPart]
    series: SeriesData | None
    post_id: int = 0
    comments: list[ThreadedComment] = dc.field(default_factory=list)
    comment_total: int = 0


@dc.dataclass(slots=True)
class TagEntry:
    """One post row on a tag listing page."""

    slug: str
    title: str
    excerpt: str
    date_display: str
    position: int | None
    category: str


@dc.dataclass(slots=True)
class TagPageModel:
    """Structured data passed to the tag template."""

    name: str
    slug: str
    url: str
    description_html: str
    entries: list[TagEntry]


@dc.dataclass(slots=True)
class PostCard:
    """A post teaser on the home page."""

    slug: str
    title: str
    excerpt: str
    date_display: str
    category: str


@dc.dataclass(slots=True)
class HomePageModel:
    """Structured data passed to the home template."""

    url: str
    latest_posts: list[PostCard]
    popular_tags: list[Tag]


@dc.dataclass(slots=True)
class TagIndexModel:
    """Every tag that has posts, most used first."""

    url: str
    tags: list[Tag]


@dc.dataclass(slots=True)
class StaticPageModel:
    """Structured data passed to the static page template.

    ``headings`` is empty for pages rendered without a table of contents.
    """

    title: str
    slug: str
    url: str
    description: str
    headings: list[HeadingDescriptor]
    body_html: str


__all__ = [
    "HomePageModel",
    "PostCard",
    "PostPageModel",
    "StaticPageModel",
    "TagEntry",
    "TagIndexModel",
    "TagPageModel",
]
