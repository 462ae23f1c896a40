"""Cyclopts CLI entrypoint for generating the blog's static pages.

The ``pages`` console script defined here renders the site from a headless
WordPress instance, reports where a post sits in its series, processes
WordPress change webhooks by regenerating the affected page, and submits
visitor comments.
Typical usage involves running ``pages generate`` locally or in CI to rebuild
the whole site, and ``pages revalidate`` from a webhook receiver.

Examples
--------
Generate every post plus the tag pages listed in the configuration:

>>> from newbie_pages.cli import main
>>> main()  # doctest: +SKIP

Regenerate a single post:

>>> from newbie_pages.cli import app
>>> app.run(["generate", "--post", "hello-world"])  # doctest: +SKIP
"""

from __future__ import annotations

import json
import logging
import os
import typing as typ
from http import HTTPStatus
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .comments import CommentService
from .config import load_site_config
from .generator import (
    HomePageGenerator,
    PostPageGenerator,
    StaticPageGenerator,
    TagIndexGenerator,
    TagPageGenerator,
)
from .revalidate import SECRET_HEADER, WebhookRevalidator
from .series import get_series_data
from .wordpress import WordPressClient

DEFAULT_CONFIG = Path("config/site.yaml")
LOG_LEVEL_ENV_VAR = "PAGES_LOG_LEVEL"

logger = logging.getLogger(__name__)

app = App(name="pages", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Generate static HTML pages for the site.")
def generate(
    *,
    post: typ.Annotated[
        str | None, Parameter(help="Post slug", env_var="INPUT_POST")
    ] = None,
    page: typ.Annotated[
        str | None, Parameter(help="Static page slug", env_var="INPUT_PAGE")
    ] = None,
    tag: typ.Annotated[
        list[str] | None,
        Parameter(help="Tag slug to render (repeatable)", env_var="INPUT_TAG"),
    ] = None,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
) -> None:
    """Generate the pages of the configured WordPress site.

    Without ``post`` or ``page`` every post and static page is rendered along
    with the home page and the tag index. Naming either limits the run to
    that item plus the requested tag pages.

    Parameters
    ----------
    post : str or None, optional
        Slug of the only post to render.
    page : str or None, optional
        Slug of the only static page to render.
    tag : list[str] or None, optional
        Tag slugs whose listing pages are rendered in addition to the
        ``output.tags`` entries of the configuration.
    config : Path, optional
        Path to the ``site.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    output_dir : Path or None, optional
        Override for ``output.dir``.

    Raises
    ------
    LookupError
        If ``post``, ``page``, or one of the tags does not exist in WordPress.
    """
    site_config = load_site_config(config)
    if output_dir is not None:
        site_config.output_dir = output_dir
    client = WordPressClient.from_config(site_config.wordpress)
    everything = post is None and page is None

    written: list[Path] = []
    if everything or post is not None:
        written.extend(PostPageGenerator(site_config, client).run(post))
    if everything or page is not None:
        written.extend(StaticPageGenerator(site_config, client).run(page))
    tag_slugs = list(dict.fromkeys([*site_config.tags, *(tag or [])]))
    if tag_slugs:
        written.extend(TagPageGenerator(site_config, client).run(tag_slugs))
    if everything:
        written.extend(TagIndexGenerator(site_config, client).run())
        written.extend(HomePageGenerator(site_config, client).run())

    for path in written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Show where a post sits within its series.")
def series(
    slug: str,
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
) -> None:
    """Print the series tag, position, and neighbours of the post ``slug``.

    Parameters
    ----------
    slug : str
        Slug of the post to inspect.
    config : Path, optional
        Path to the ``site.yaml`` configuration file.

    Raises
    ------
    LookupError
        If no post with ``slug`` exists.
    """
    site_config = load_site_config(config)
    client = WordPressClient.from_config(site_config.wordpress)
    item = client.get_post_by_slug(slug)
    if item is None:
        msg = f"No post with slug '{slug}' exists."
        raise LookupError(msg)

    data = get_series_data(item.id, item.slug, source=client)
    if data is None:
        print(f"{slug}: not part of a series")
        return
    print(f"{slug}: 「{data.tag_name}」系列 第 {data.current_sort_order} 篇")
    if data.prev_item:
        print(f"  上一篇: {data.prev_item.slug}")
    if data.next_item:
        print(f"  下一篇: {data.next_item.slug}")


@app.command(help="Process a WordPress change webhook and regenerate pages.")
def revalidate(
    payload: Path,
    *,
    secret: typ.Annotated[
        str | None,
        Parameter(help="Value of the webhook secret header", env_var="INPUT_SECRET"),
    ] = None,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
) -> None:
    """Validate a webhook payload file and regenerate the post or page it names.

    Content that no longer resolves, such as a deleted post, is logged and
    skipped; the webhook still succeeds.

    Parameters
    ----------
    payload : Path
        JSON file holding the webhook body sent by WordPress.
    secret : str or None, optional
        Secret sent with the webhook, compared with
        ``wordpress.webhook_secret``.
    config : Path, optional
        Path to the ``site.yaml`` configuration file.

    Raises
    ------
    SystemExit
        With status ``1`` when the webhook is rejected.
    """
    site_config = load_site_config(config)
    client = WordPressClient.from_config(site_config.wordpress)
    posts = PostPageGenerator(site_config, client)
    pages = StaticPageGenerator(site_config, client)

    def _regenerate(tags: list[str], body: typ.Mapping[str, typ.Any]) -> None:
        data = body.get("data")
        if body.get("type") != "post" or not isinstance(data, dict):
            return
        slug = data.get("slug")
        if not slug or "posts" not in tags:
            return
        content_type = data.get("type") or "post"
        match content_type:
            case "post":
                generator: PostPageGenerator | StaticPageGenerator = posts
            case "page":
                generator = pages
            case _:
                logger.info("Not regenerating %s '%s'", content_type, slug)
                return
        try:
            written = generator.run(slug)
        except LookupError:
            logger.warning(
                "Skipping %s '%s': it no longer resolves", content_type, slug
            )
            return
        for path in written:
            print(f"wrote {_format_path(path)}")

    revalidator = WebhookRevalidator(
        site_config.wordpress.webhook_secret, listeners=[_regenerate]
    )
    headers = {SECRET_HEADER: secret} if secret is not None else {}
    result = revalidator.handle(headers, payload.read_text(encoding="utf-8"))
    print(json.dumps(result.body, ensure_ascii=False))
    if result.status != HTTPStatus.OK:
        raise SystemExit(1)


@app.command(help="Validate a visitor comment and submit it to WordPress.")
def comment(
    payload: Path,
    *,
    client_id: typ.Annotated[
        str | None,
        Parameter(help="Submitting client, e.g. its IP", env_var="INPUT_CLIENT_ID"),
    ] = None,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
) -> None:
    """Run a comment submission file through :class:`CommentService`.

    The JSON response body is printed. Rate limiting only spans a single
    invocation here; a long-running host should keep one service instance.

    Parameters
    ----------
    payload : Path
        JSON file holding the submitted form fields.
    client_id : str or None, optional
        Identity used for rate limiting.
    config : Path, optional
        Path to the ``site.yaml`` configuration file.

    Raises
    ------
    SystemExit
        With status ``1`` when the submission is refused.
    """
    site_config = load_site_config(config)
    client = WordPressClient.from_config(site_config.wordpress)
    service = CommentService.from_config(client, site_config.comments)
    try:
        fields = json.loads(payload.read_text(encoding="utf-8"))
    except ValueError:
        fields = {}
    if not isinstance(fields, dict):
        fields = {}
    result = service.submit(fields, client_id)
    print(json.dumps(result.body, ensure_ascii=False))
    if result.status != HTTPStatus.OK:
        raise SystemExit(1)


def _configure_logging() -> None:
    level = os.getenv(LOG_LEVEL_ENV_VAR, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Invoke the Cyclopts application that powers the `pages` console command.

    Logging is configured from ``PAGES_LOG_LEVEL`` (default ``WARNING``)
    before the requested subcommand runs.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    _configure_logging()
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
