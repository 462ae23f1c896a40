"""Typed records for the WordPress content the site generator consumes.

The REST and GraphQL payloads are normalised into these slotted dataclasses
by :mod:`newbie_pages.wordpress`, so the transformers, the series sequencer,
and the templates never touch raw JSON.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ


@dc.dataclass(slots=True)
class Tag:
    """A WordPress post tag."""

    id: int
    name: str
    slug: str
    description: str = ""
    count: int = 0


@dc.dataclass(slots=True)
class Category:
    """A WordPress post category."""

    id: int
    name: str
    slug: str


@dc.dataclass(slots=True)
class Author:
    """A WordPress user rendered as a post author."""

    id: int
    name: str
    slug: str = ""


@dc.dataclass(slots=True)
class Post:
    """A published post as returned by ``/wp-json/wp/v2/posts``.

    Attributes
    ----------
    id : int
        WordPress database id.
    slug : str
        URL slug of the post.
    title : str
        Rendered title; may contain HTML entities.
    content : str
        Rendered body HTML.
    excerpt : str
        Rendered excerpt HTML.
    date : str
        ISO-8601 publication timestamp (site local time).
    author : int | None
        Author user id.
    categories : list[int]
        Category ids in WordPress order.
    tags : list[int]
        Tag ids in WordPress order.
    """

    id: int
    slug: str
    title: str
    content: str
    excerpt: str = ""
    date: str = ""
    author: int | None = None
    categories: list[int] = dc.field(default_factory=list)
    tags: list[int] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class SeriesMember:
    """A post listed under a tag, with its optional series sort position.

    Attributes
    ----------
    slug : str
        URL slug of the post.
    title : str
        Rendered title; may contain HTML entities.
    excerpt : str | None
        Rendered excerpt HTML when the query returned one.
    date : str | None
        ISO-8601 publication timestamp.
    sort_position : str | None
        Raw ``sortOrder`` custom field; may or may not parse as an integer.
    database_id : int | None
        WordPress database id.
    category : str | None
        Name of the post's first category.
    """

    slug: str
    title: str
    excerpt: str | None = None
    date: str | None = None
    sort_position: str | None = None
    database_id: int | None = None
    category: str | None = None


@dc.dataclass(slots=True)
class TagListing:
    """A tag together with every post carrying it."""

    name: str
    slug: str
    description: str | None
    members: list[SeriesMember]


@dc.dataclass(slots=True)
class WordPressPage:
    """One page of a paginated REST collection."""

    items: list[typ.Any]
    total: int
    total_pages: int


@dc.dataclass(slots=True)
class Comment:
    """An approved comment shown beneath a post."""

    id: int
    post: int
    author_name: str
    content: str
    date: str
    parent: int = 0


@dc.dataclass(slots=True)
class CommentInput:
    """Payload submitted to ``/wp-json/wp/v2/comments``."""

    post: int
    author_name: str
    content: str
    author_email: str = ""
    author_url: str = ""


@dc.dataclass(slots=True)
class CommentResult:
    """Outcome of a comment submission."""

    success: bool
    comment: Comment | None = None
    error: str | None = None


__all__ = [
    "Author",
    "Category",
    "Comment",
    "CommentInput",
    "CommentResult",
    "Post",
    "SeriesMember",
    "Tag",
    "TagListing",
    "WordPressPage",
]
