"""Generators for the pages that sit around the posts.

The home page (``public/index.html``) shows the most used tags and the latest
posts, the tag index (``public/posts/tags/index.html``) lists every tag that
has posts, and :class:`StaticPageGenerator` renders WordPress pages such as
``about-me`` into ``public/pages/<slug>.html``. All three reuse the Jinja
environment, highlighter, and manifest handling of the post generator.
"""

from __future__ import annotations

import datetime as dt
import logging
import typing as typ

from newbie_pages._constants import (
    HOME_POST_COUNT,
    HOME_TAG_COUNT,
    PAGES_DIR,
    POSTS_DIR,
    TAGS_DIR,
)
from newbie_pages.generator.models import (
    HomePageModel,
    PostCard,
    StaticPageModel,
    TagIndexModel,
)
from newbie_pages.generator.page_generator import (
    DEFAULT_TEMPLATES_DIR,
    _build_environment,
    _ManifestWriter,
    format_display_date,
)
from newbie_pages.generator.renderer import HtmlContentRenderer
from newbie_pages.html_utils import clean_excerpt, strip_html
from newbie_pages.toc import process_content_with_toc
from newbie_pages.wordpress import WordPressAPIError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from newbie_pages.config import SiteConfig
    from newbie_pages.models import Post, Tag
    from newbie_pages.wordpress import WordPressClient

logger = logging.getLogger(__name__)


def rank_tags(tags: typ.Iterable[Tag], limit: int | None = None) -> list[Tag]:
    """Return tags that have posts, most used first.

    Tags with equal counts keep their incoming order.

    Examples
    --------
    >>> from newbie_pages.models import Tag
    >>> tags = [Tag(1, "a", "a", count=2), Tag(2, "b", "b"), Tag(3, "c", "c", count=5)]
    >>> [tag.slug for tag in rank_tags(tags)]
    ['c', 'a']
    """
    ranked = sorted(
        (tag for tag in tags if tag.count > 0), key=lambda tag: -tag.count
    )
    return ranked if limit is None else ranked[:limit]


class _SitePageGenerator:
    """Shared template and manifest plumbing for the site-level pages."""

    template_name: typ.ClassVar[str]
    manifest_key: typ.ClassVar[str]

    def __init__(
        self,
        site_config: SiteConfig,
        client: WordPressClient,
        *,
        templates_dir: Path | None = None,
        renderer: HtmlContentRenderer | None = None,
    ) -> None:
        self.site = site_config
        self.client = client
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        self.renderer = renderer or HtmlContentRenderer(
            site_config.theme.pygments_style
        )
        self.env = _build_environment(self.templates_dir)
        self.template = self.env.get_template(self.template_name)
        self._manifest = _ManifestWriter(site_config.output_dir, self.manifest_key)

    def _write(self, output_path: Path, **context: typ.Any) -> Path:
        html = self.template.render(
            theme=self.site.theme,
            pygments_css=self.renderer.stylesheet,
            generated_at=dt.datetime.now(dt.UTC),
            **context,
        )
        if not html.endswith("\n"):
            html += "\n"
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
        return output_path


class HomePageGenerator(_SitePageGenerator):
    """Render the landing page with popular tags and the latest posts."""

    template_name = "home_page.jinja"
    manifest_key = "home"

    def run(self) -> list[Path]:
        """Write ``index.html`` and return its path in a one-item list."""
        written = [self._write(self.site.home_output_path(), home=self.build_model())]
        self._manifest.write(written)
        return written

    def build_model(self) -> HomePageModel:
        """Fetch the latest posts and tag counts for the home page."""
        latest = self.client.get_posts_paginated(1, HOME_POST_COUNT)
        return HomePageModel(
            url=f"{self.site.theme.site_domain}/",
            latest_posts=[self._card(post) for post in latest.items],
            popular_tags=rank_tags(self.client.get_all_tags(), HOME_TAG_COUNT),
        )

    def _card(self, post: Post) -> PostCard:
        return PostCard(
            slug=post.slug,
            title=strip_html(post.title),
            excerpt=clean_excerpt(post.excerpt, max_length=self.site.excerpt_length),
            date_display=format_display_date(post.date),
            category=self._category_name(post),
        )

    def _category_name(self, post: Post) -> str:
        if not post.categories:
            return ""
        try:
            return self.client.get_category_by_id(post.categories[0]).name
        except WordPressAPIError as exc:
            logger.warning("Category lookup failed for post %s: %s", post.slug, exc)
            return ""


class TagIndexGenerator(_SitePageGenerator):
    """Render the page listing every tag that has posts."""

    template_name = "tag_index.jinja"
    manifest_key = "tag-index"

    def run(self) -> list[Path]:
        """Write ``posts/tags/index.html`` and return its path."""
        model = TagIndexModel(
            url=f"{self.site.theme.site_domain}/{POSTS_DIR}/{TAGS_DIR}",
            tags=rank_tags(self.client.get_all_tags()),
        )
        written = [self._write(self.site.tag_index_output_path(), index=model)]
        self._manifest.write(written)
        return written


class StaticPageGenerator(_SitePageGenerator):
    """Render WordPress pages, with a table of contents where configured."""

    template_name = "static_page.jinja"
    manifest_key = PAGES_DIR

    def run(self, slug: str | None = None) -> list[Path]:
        """Render one page, or every published page, into HTML files.

        Parameters
        ----------
        slug : str, optional
            Generate only this page. When omitted, every page slug reported
            by WordPress is generated and vanished pages are skipped with a
            warning.

        Returns
        -------
        list[Path]
            Paths to the generated HTML documents.

        Raises
        ------
        LookupError
            Raised when ``slug`` is given and no such page exists.
        """
        slugs = [slug] if slug else self.client.get_all_page_slugs()
        written: list[Path] = []
        for current in slugs:
            page = self.client.get_page_by_slug(current)
            if page is None:
                if slug:
                    msg = f"No page with slug '{slug}' exists."
                    raise LookupError(msg)
                logger.warning("Skipping page '%s': not found", current)
                continue
            written.append(
                self._write(
                    self.site.page_output_path(page.slug), page=self.build_model(page)
                )
            )
        self._manifest.write(written)
        return written

    def build_model(self, page: Post) -> StaticPageModel:
        """Post-process ``page`` for the static page template."""
        if page.slug in self.site.pages_with_toc:
            processed = process_content_with_toc(page.content)
            body, headings = processed.html, processed.headings
        else:
            body, headings = page.content, []
        description = strip_html(page.excerpt) or strip_html(
            page.content, max_length=200
        )
        return StaticPageModel(
            title=strip_html(page.title),
            slug=page.slug,
            url=f"{self.site.theme.site_domain}/{PAGES_DIR}/{page.slug}",
            description=description,
            headings=headings,
            body_html=self.renderer.highlight_html(body),
        )


__all__ = [
    "HomePageGenerator",
    "StaticPageGenerator",
    "TagIndexGenerator",
    "rank_tags",
]
