"""High-level orchestration for blog page generation.

This module coordinates fetching posts and tag listings from WordPress,
post-processing the article HTML (heading anchors, code highlighting, table
splitting, series navigation), threading approved comments, and writing
themed HTML pages with the shared Jinja templates. It exposes
:class:`PostPageGenerator`, which writes ``public/posts/<slug>.html``, and
:class:`TagPageGenerator`, which writes ``public/posts/tags/<slug>.html``.
Each run records the files it wrote in a JSON manifest beside the output.

Example
-------
>>> from pathlib import Path
>>> from newbie_pages.config import load_site_config
>>> from newbie_pages.generator import PostPageGenerator
>>> from newbie_pages.wordpress import WordPressClient
>>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> client = WordPressClient.from_config(config.wordpress)  # doctest: +SKIP
>>> PostPageGenerator(config, client).run()  # doctest: +SKIP
[PosixPath('public/posts/hello-world.html'), ...]
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from newbie_pages._constants import MANIFEST_TEMPLATE, POSTS_DIR, TAGS_DIR
from newbie_pages.comments import thread_comments
from newbie_pages.generator.models import PostPageModel, TagEntry, TagPageModel
from newbie_pages.generator.renderer import HtmlContentRenderer
from newbie_pages.html_utils import clean_excerpt, strip_html
from newbie_pages.series import order_tag_listing, parse_order, resolve_series_data
from newbie_pages.tables import split_tables
from newbie_pages.toc import process_content_with_toc

if typ.TYPE_CHECKING:
    from newbie_pages.config import SiteConfig
    from newbie_pages.models import Post
    from newbie_pages.wordpress import WordPressClient

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def _build_environment(templates_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html", "xml", "jinja"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["plain"] = strip_html
    env.filters["display_date"] = format_display_date
    return env


def format_display_date(value: str | None) -> str:
    """Format an ISO-8601 timestamp as ``"January 5, 2024"``.

    Values that cannot be parsed yield an empty string.
    """
    if not value:
        return ""
    try:
        parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return ""
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


class _ManifestWriter:
    """Record the files a generator run wrote in a JSON manifest."""

    def __init__(self, output_dir: Path, key: str) -> None:
        self.path = output_dir / MANIFEST_TEMPLATE.format(key=key)
        self._output_dir = output_dir

    def write(self, written: list[Path]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "generated_at": dt.datetime.now(dt.UTC).isoformat(),
            "files": [
                path.relative_to(self._output_dir).as_posix() for path in written
            ],
        }
        self.path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8"
        )


class PostPageGenerator:
    """Fetch WordPress posts and emit themed HTML article pages."""

    def __init__(
        self,
        site_config: SiteConfig,
        client: WordPressClient,
        *,
        templates_dir: Path | None = None,
        renderer: HtmlContentRenderer | None = None,
    ) -> None:
        """Initialize the generator with configuration and template context.

        Parameters
        ----------
        site_config : SiteConfig
            Site identity, output location, and WordPress settings.
        client : WordPressClient
            Source of posts, tags, authors, and categories.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        renderer : HtmlContentRenderer, optional
            Code highlighter; defaults to one using the configured Pygments
            style.
        """
        self.site = site_config
        self.client = client
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        self.renderer = renderer or HtmlContentRenderer(
            site_config.theme.pygments_style
        )
        self.env = _build_environment(self.templates_dir)
        self.template = self.env.get_template("post_page.jinja")
        self._manifest = _ManifestWriter(site_config.output_dir, POSTS_DIR)

    def run(self, slug: str | None = None) -> list[Path]:
        """Render one post, or every published post, into HTML files on disk.

        Parameters
        ----------
        slug : str, optional
            Generate only this post. When omitted, every slug reported by
            WordPress is generated and slugs that no longer resolve to a post
            are skipped with a warning.

        Returns
        -------
        list[Path]
            Paths to the generated HTML documents.

        Raises
        ------
        LookupError
            Raised when ``slug`` is given and no such post exists.
        WordPressAPIError
            Raised when a post, author, or category lookup fails.
        """
        slugs = [slug] if slug else self.client.get_all_post_slugs()
        written: list[Path] = []
        for current in slugs:
            post = self.client.get_post_by_slug(current)
            if post is None:
                if slug:
                    msg = f"No post with slug '{slug}' exists."
                    raise LookupError(msg)
                logger.warning("Skipping '%s': post not found", current)
                continue
            written.append(self.write_post(post))
        self._manifest.write(written)
        return written

    def write_post(self, post: Post) -> Path:
        """Render ``post`` and write it to its output path."""
        output_path = self.site.post_output_path(post.slug)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render_post(post), encoding="utf-8")
        return output_path

    def render_post(self, post: Post) -> str:
        """Return the full HTML page for ``post``."""
        model = self.build_model(post)
        html = self.template.render(
            post=model,
            theme=self.site.theme,
            pygments_css=self.renderer.stylesheet,
            generated_at=dt.datetime.now(dt.UTC),
        )
        if not html.endswith("\n"):
            html += "\n"
        return html

    def build_model(self, post: Post) -> PostPageModel:
        """Post-process ``post`` into the data the post template renders."""
        processed = process_content_with_toc(post.content)
        body = self.renderer.highlight_html(processed.html)
        author = (
            self.client.get_author_by_id(post.author)
            if post.author is not None
            else None
        )
        category = (
            self.client.get_category_by_id(post.categories[0])
            if post.categories
            else None
        )
        comments = self.client.get_comments_by_post_id(
            post.id, per_page=self.site.comments.per_page
        )
        return PostPageModel(
            title=strip_html(post.title),
            slug=post.slug,
            url=f"{self.site.theme.site_domain}/{POSTS_DIR}/{post.slug}",
            description=strip_html(post.excerpt),
            date_display=format_display_date(post.date),
            author_name=author.name if author else "",
            author_id=author.id if author else None,
            category_name=category.name if category else "",
            category_id=category.id if category else None,
            headings=processed.headings,
            parts=split_tables(body),
            series=resolve_series_data(post.id, post.slug, source=self.client),
            post_id=post.id,
            comments=thread_comments(comments.items),
            comment_total=max(comments.total, len(comments.items)),
        )


class TagPageGenerator:
    """Render the listing page of every post carrying a tag."""

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
        self.template = self.env.get_template("tag_page.jinja")
        self._manifest = _ManifestWriter(site_config.output_dir, TAGS_DIR)

    def run(self, slugs: typ.Iterable[str]) -> list[Path]:
        """Render each tag in ``slugs``; unknown tags raise ``LookupError``."""
        written: list[Path] = []
        for slug in slugs:
            model = self.build_model(slug)
            output_path = self.site.tag_output_path(model.slug)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            html = self.template.render(
                tag=model,
                theme=self.site.theme,
                pygments_css=self.renderer.stylesheet,
                generated_at=dt.datetime.now(dt.UTC),
            )
            if not html.endswith("\n"):
                html += "\n"
            output_path.write_text(html, encoding="utf-8")
            written.append(output_path)
        self._manifest.write(written)
        return written

    def build_model(self, slug: str) -> TagPageModel:
        """Fetch the listing for ``slug`` and order it for display."""
        listing = self.client.fetch_tag_listing(slug)
        if listing is None:
            msg = f"No tag with slug '{slug}' exists."
            raise LookupError(msg)
        entries = [
            TagEntry(
                slug=member.slug,
                title=strip_html(member.title),
                excerpt=clean_excerpt(
                    member.excerpt, max_length=self.site.excerpt_length
                ),
                date_display=format_display_date(member.date),
                position=parse_order(member.sort_position),
                category=member.category or "",
            )
            for member in order_tag_listing(listing.members)
        ]
        return TagPageModel(
            name=strip_html(listing.name),
            slug=listing.slug,
            url=(
                f"{self.site.theme.site_domain}/{POSTS_DIR}/{TAGS_DIR}/{listing.slug}"
            ),
            description_html=self.renderer.markdown(listing.description),
            entries=entries,
        )


__all__ = ["PostPageGenerator", "TagPageGenerator", "format_display_date"]
