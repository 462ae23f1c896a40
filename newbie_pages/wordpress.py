r"""Client for the headless WordPress REST and GraphQL APIs.

This module wraps the parts of WordPress the site generator reads: posts,
static pages, tags, categories, authors and comments over
``/wp-json/wp/v2``, and tag listings with their ``sortOrder`` custom field
over WPGraphQL. Responses are normalised into the dataclasses in
:mod:`newbie_pages.models`.

Example
-------
>>> from newbie_pages.wordpress import WordPressClient
>>> client = WordPressClient("https://realnewbie.com")  # doctest: +SKIP
>>> [tag.slug for tag in client.fetch_tags_for_item(42)]  # doctest: +SKIP
['python-basics']
"""

from __future__ import annotations

import logging
import typing as typ
from http import HTTPStatus

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ._constants import USER_AGENT
from .models import (
    Author,
    Category,
    Comment,
    CommentInput,
    CommentResult,
    Post,
    SeriesMember,
    Tag,
    TagListing,
    WordPressPage,
)

if typ.TYPE_CHECKING:
    from .config import WordPressConfig

logger = logging.getLogger(__name__)

REST_PREFIX = "/wp-json/wp/v2"
MAX_PER_PAGE = 100

GET_POSTS_BY_TAG_QUERY = """
query GetPostsByTag($tagSlug: String!, $tagId: ID!) {
  tag(id: $tagId, idType: SLUG) {
    name
    slug
    description
  }
  posts(where: { tag: $tagSlug }, first: 100) {
    nodes {
      databaseId
      slug
      title
      excerpt
      date
      seriesOrder {
        sortOrder
      }
      categories {
        nodes {
          name
        }
      }
    }
  }
}
"""


class WordPressAPIError(RuntimeError):
    """Raised when WordPress is unreachable or answers with an error.

    Attributes
    ----------
    status : int | None
        HTTP status code, when a response was received.
    endpoint : str
        URL that was requested.
    """

    def __init__(
        self, message: str, status: int | None = None, endpoint: str = ""
    ) -> None:
        super().__init__(message)
        self.status = status
        self.endpoint = endpoint


def _build_session() -> requests.Session:
    """Return a session that retries idempotent requests on server errors."""
    session = requests.Session()
    retry = Retry(
        total=5,
        read=5,
        connect=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class WordPressClient:
    """Thin wrapper around the WordPress REST and GraphQL endpoints.

    The client centralises the user agent, timeouts, and error handling. REST
    lookups that a page cannot render without raise
    :class:`WordPressAPIError`; listing lookups degrade to empty results with
    a logged warning.
    """

    def __init__(
        self,
        base_url: str,
        *,
        graphql_endpoint: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        user_agent: str = USER_AGENT,
    ) -> None:
        """Initialise the client for one WordPress site.

        Parameters
        ----------
        base_url : str
            Site root, for example ``https://realnewbie.com``.
        graphql_endpoint : str, optional
            WPGraphQL URL; defaults to ``<base_url>/graphql``.
        session : requests.Session, optional
            Preconfigured session. Defaults to one with a retry policy for
            ``GET`` requests.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``30.0``.
        user_agent : str, optional
            ``User-Agent`` header sent with every request.
        """
        normalized = base_url.strip().rstrip("/")
        if not normalized:
            msg = "WordPress base URL cannot be empty"
            raise ValueError(msg)
        self.base_url = normalized
        self.graphql_endpoint = graphql_endpoint or f"{normalized}/graphql"
        self._session = session or _build_session()
        self.timeout = timeout
        self._headers = {"User-Agent": user_agent, "Accept": "application/json"}

    @classmethod
    def from_config(
        cls, config: WordPressConfig, *, session: requests.Session | None = None
    ) -> WordPressClient:
        """Build a client from the ``wordpress`` section of the site config."""
        return cls(
            config.url,
            graphql_endpoint=config.graphql_endpoint,
            session=session,
            timeout=config.timeout,
            user_agent=config.user_agent,
        )

    # Transport

    def _check(self, response: requests.Response, url: str) -> typ.Any:
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = (
                f"WordPress request to '{url}' failed with status "
                f"{response.status_code}: {snippet}"
            )
            raise WordPressAPIError(msg, response.status_code, url)
        try:
            return response.json()
        except ValueError as exc:
            msg = f"WordPress response from '{url}' was not valid JSON"
            raise WordPressAPIError(msg, response.status_code, url) from exc

    def _get(
        self, path: str, params: typ.Mapping[str, typ.Any] | None = None
    ) -> tuple[typ.Any, typ.Mapping[str, str]]:
        url = f"{self.base_url}{REST_PREFIX}{path}"
        try:
            response = self._session.get(
                url, params=params, headers=self._headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach WordPress at '{url}': {exc}"
            raise WordPressAPIError(msg, endpoint=url) from exc
        return self._check(response, url), response.headers

    def _get_json(
        self, path: str, params: typ.Mapping[str, typ.Any] | None = None
    ) -> typ.Any:
        payload, _headers = self._get(path, params)
        return payload

    def _get_paginated(
        self, path: str, params: typ.Mapping[str, typ.Any]
    ) -> WordPressPage:
        payload, headers = self._get(path, params)
        return WordPressPage(
            items=list(payload or []),
            total=_header_int(headers, "X-WP-Total"),
            total_pages=_header_int(headers, "X-WP-TotalPages"),
        )

    def _paginated_or_empty(
        self, path: str, params: typ.Mapping[str, typ.Any]
    ) -> WordPressPage:
        try:
            return self._get_paginated(path, params)
        except WordPressAPIError as exc:
            logger.warning("WordPress paginated fetch failed for %s: %s", path, exc)
            return WordPressPage(items=[], total=0, total_pages=0)

    def _walk_pages(
        self, path: str, params: typ.Mapping[str, typ.Any]
    ) -> typ.Iterator[typ.Any]:
        """Yield raw items from every page of ``path``, stopping on failure."""
        page = 1
        total_pages = 1
        while page <= total_pages:
            result = self._paginated_or_empty(
                path, {**params, "per_page": MAX_PER_PAGE, "page": page}
            )
            yield from result.items
            total_pages = result.total_pages
            page += 1

    def _graphql(self, query: str, variables: typ.Mapping[str, typ.Any]) -> dict:
        url = self.graphql_endpoint
        try:
            response = self._session.post(
                url,
                json={"query": query, "variables": dict(variables)},
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach WordPress GraphQL at '{url}': {exc}"
            raise WordPressAPIError(msg, endpoint=url) from exc
        payload = self._check(response, url) or {}
        errors = payload.get("errors") or []
        data = payload.get("data")
        messages = "; ".join(str(error.get("message", error)) for error in errors)
        if errors and not data:
            msg = f"GraphQL query failed: {messages}"
            raise WordPressAPIError(msg, response.status_code, url)
        if errors:
            logger.warning("GraphQL query returned partial data: %s", messages)
        return data or {}

    # Posts

    def get_post_by_slug(self, slug: str) -> Post | None:
        """Return the published post with ``slug`` or None when absent."""
        posts = self._get_json("/posts", {"slug": slug})
        if not posts:
            return None
        return _parse_post(posts[0])

    def get_posts_paginated(
        self,
        page: int = 1,
        per_page: int = 9,
        *,
        tag: int | None = None,
        category: int | None = None,
        author: int | None = None,
        search: str | None = None,
    ) -> WordPressPage:
        """Return one page of posts, optionally filtered; empty on failure."""
        params: dict[str, typ.Any] = {"page": page, "per_page": per_page}
        filters = {
            "tags": tag,
            "categories": category,
            "author": author,
            "search": search,
        }
        params.update({key: value for key, value in filters.items() if value})
        result = self._paginated_or_empty("/posts", params)
        result.items = [_parse_post(item) for item in result.items]
        return result

    def get_all_post_slugs(self) -> list[str]:
        """Return the slug of every published post, walking all pages."""
        items = self._walk_pages("/posts", {"_fields": "slug,modified"})
        return [item["slug"] for item in items if item.get("slug")]

    # Static pages

    def get_page_by_slug(self, slug: str) -> Post | None:
        """Return the static page with ``slug``; None when absent or on failure.

        Pages share the post payload shape, so they are parsed as
        :class:`~newbie_pages.models.Post`.
        """
        result = self._paginated_or_empty("/pages", {"slug": slug})
        return _parse_post(result.items[0]) if result.items else None

    def get_all_page_slugs(self) -> list[str]:
        """Return the slug of every published static page; empty on failure."""
        items = self._walk_pages("/pages", {"_fields": "slug"})
        return [item["slug"] for item in items if item.get("slug")]

    # Taxonomies and authors

    def fetch_tags_for_item(self, item_id: int) -> list[Tag]:
        """Return the tags attached to post ``item_id`` in WordPress order."""
        payload = self._get_json("/tags", {"post": item_id})
        return [_parse_tag(item) for item in payload or []]

    def get_all_tags(self) -> list[Tag]:
        """Return every tag with its post count; empty on failure."""
        return [_parse_tag(item) for item in self._walk_pages("/tags", {})]

    def get_category_by_id(self, category_id: int) -> Category:
        """Return the category with ``category_id``."""
        payload = self._get_json(f"/categories/{category_id}")
        return Category(
            id=int(payload["id"]),
            name=str(payload.get("name", "")),
            slug=str(payload.get("slug", "")),
        )

    def get_author_by_id(self, author_id: int) -> Author:
        """Return the user with ``author_id``."""
        payload = self._get_json(f"/users/{author_id}")
        return Author(
            id=int(payload["id"]),
            name=str(payload.get("name", "")),
            slug=str(payload.get("slug", "")),
        )

    # GraphQL tag listings

    def fetch_tag_listing(self, tag_slug: str) -> TagListing | None:
        """Return a tag and all of its posts, or None when the tag is unknown."""
        data = self._graphql(
            GET_POSTS_BY_TAG_QUERY, {"tagSlug": tag_slug, "tagId": tag_slug}
        )
        tag = data.get("tag")
        if not tag:
            return None
        nodes = (data.get("posts") or {}).get("nodes") or []
        return TagListing(
            name=str(tag.get("name") or tag_slug),
            slug=str(tag.get("slug") or tag_slug),
            description=tag.get("description"),
            members=[_parse_series_member(node) for node in nodes if node.get("slug")],
        )

    def fetch_items_by_tag(self, tag_slug: str) -> list[SeriesMember]:
        """Return every post carrying ``tag_slug`` with its sort position."""
        listing = self.fetch_tag_listing(tag_slug)
        return listing.members if listing else []

    # Comments

    def get_comments_by_post_id(
        self, post_id: int, page: int = 1, per_page: int = 10
    ) -> WordPressPage:
        """Return approved comments for a post, newest first; empty on failure."""
        result = self._paginated_or_empty(
            "/comments",
            {
                "post": post_id,
                "page": page,
                "per_page": per_page,
                "status": "approve",
                "orderby": "date",
                "order": "desc",
            },
        )
        result.items = [_parse_comment(item) for item in result.items]
        return result

    def create_comment(self, comment: CommentInput) -> CommentResult:
        """Submit a comment for moderation, reporting failures in the result."""
        url = f"{self.base_url}{REST_PREFIX}/comments"
        body = {
            "post": comment.post,
            "author_name": comment.author_name,
            "author_email": comment.author_email,
            "author_url": comment.author_url,
            "content": comment.content,
        }
        try:
            response = self._session.post(
                url, json=body, headers=self._headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            return CommentResult(success=False, error=str(exc))

        if response.status_code >= HTTPStatus.BAD_REQUEST:
            try:
                message = (response.json() or {}).get("message")
            except ValueError:
                message = None
            return CommentResult(
                success=False,
                error=message or f"Failed to create comment: {response.reason}",
            )
        try:
            created = _parse_comment(response.json())
        except (ValueError, KeyError) as exc:
            return CommentResult(success=False, error=str(exc))
        return CommentResult(success=True, comment=created)


def _header_int(headers: typ.Mapping[str, str], name: str) -> int:
    """Return an integer pagination header, or 0 when missing or malformed."""
    try:
        return int(headers.get(name) or 0)
    except (TypeError, ValueError):
        return 0


def _rendered(payload: typ.Mapping[str, typ.Any], key: str) -> str:
    """Return ``payload[key]['rendered']`` as used by WordPress REST fields."""
    value = payload.get(key)
    if isinstance(value, dict):
        return str(value.get("rendered") or "")
    return str(value or "")


def _parse_post(payload: typ.Mapping[str, typ.Any]) -> Post:
    return Post(
        id=int(payload["id"]),
        slug=str(payload.get("slug", "")),
        title=_rendered(payload, "title"),
        content=_rendered(payload, "content"),
        excerpt=_rendered(payload, "excerpt"),
        date=str(payload.get("date") or ""),
        author=payload.get("author"),
        categories=[int(item) for item in payload.get("categories") or []],
        tags=[int(item) for item in payload.get("tags") or []],
    )


def _parse_tag(payload: typ.Mapping[str, typ.Any]) -> Tag:
    return Tag(
        id=int(payload["id"]),
        name=str(payload.get("name", "")),
        slug=str(payload.get("slug", "")),
        description=str(payload.get("description") or ""),
        count=int(payload.get("count") or 0),
    )


def _parse_series_member(node: typ.Mapping[str, typ.Any]) -> SeriesMember:
    sort_order = (node.get("seriesOrder") or {}).get("sortOrder")
    categories = (node.get("categories") or {}).get("nodes") or []
    return SeriesMember(
        slug=str(node["slug"]),
        title=str(node.get("title") or ""),
        excerpt=node.get("excerpt"),
        date=node.get("date"),
        sort_position=None if sort_order is None else str(sort_order),
        database_id=node.get("databaseId"),
        category=categories[0].get("name") if categories else None,
    )


def _parse_comment(payload: typ.Mapping[str, typ.Any]) -> Comment:
    return Comment(
        id=int(payload["id"]),
        post=int(payload.get("post") or 0),
        author_name=str(payload.get("author_name") or ""),
        content=_rendered(payload, "content"),
        date=str(payload.get("date") or ""),
        parent=int(payload.get("parent") or 0),
    )


__all__ = [
    "GET_POSTS_BY_TAG_QUERY",
    "WordPressAPIError",
    "WordPressClient",
]
