"""Tests for the ``pages`` console commands."""

from __future__ import annotations

import json
import logging
import typing as typ
from pathlib import Path

import pytest

from newbie_pages import cli
from newbie_pages.models import (
    Comment,
    CommentResult,
    Post,
    SeriesMember,
    Tag,
    WordPressPage,
)
from newbie_pages.wordpress import WordPressClient

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "site.yaml"
    path.write_text(
        f"""
wordpress:
  url: https://wp.example.invalid
  webhook_secret: hook-secret
output:
  dir: {tmp_path / "public"}
""".strip()
        + "\n",
        encoding="utf-8",
    )
    return path


def _write_payload(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _last_json(out: str) -> dict[str, typ.Any]:
    return json.loads(out.strip().splitlines()[-1])


@pytest.fixture
def client(mocker: MockerFixture) -> typ.Any:
    """Patch the client factory to return a mock serving one post and page."""
    client = mocker.Mock(spec=WordPressClient)
    client.get_post_by_slug.side_effect = lambda slug: (
        Post(id=1, slug=slug, title="Hello", content="<p>Hi</p>")
        if slug == "hello"
        else None
    )
    client.get_all_post_slugs.return_value = ["hello"]
    client.get_page_by_slug.side_effect = lambda slug: (
        Post(id=3, slug=slug, title="About", content="<h2>Me</h2>")
        if slug == "about-me"
        else None
    )
    client.get_all_page_slugs.return_value = ["about-me"]
    client.get_author_by_id.return_value = None
    client.get_comments_by_post_id.return_value = WordPressPage(
        items=[], total=0, total_pages=0
    )
    client.get_all_tags.return_value = [
        Tag(id=5, name="Python 入門", slug="python-basics", count=2)
    ]
    client.get_posts_paginated.return_value = WordPressPage(
        items=[Post(id=1, slug="hello", title="Hello", content="<p>Hi</p>")],
        total=1,
        total_pages=1,
    )
    client.fetch_tags_for_item.return_value = [
        Tag(id=5, name="Python 入門", slug="python-basics")
    ]
    client.fetch_items_by_tag.return_value = [
        SeriesMember(slug="intro", title="Intro", sort_position="1"),
        SeriesMember(slug="hello", title="Hello", sort_position="2"),
    ]
    mocker.patch.object(WordPressClient, "from_config", return_value=client)
    return client


def test_generate_renders_the_whole_site(
    tmp_path: Path, client: typ.Any, capsys: pytest.CaptureFixture[str]
) -> None:
    """Without a slug every post, page, and index page is written."""
    cli.generate(config=_write_config(tmp_path))

    public = tmp_path / "public"
    for relative in (
        "posts/hello.html",
        "pages/about-me.html",
        "posts/tags/index.html",
        "index.html",
    ):
        assert (public / relative).exists(), f"expected {relative} to be written"
    assert capsys.readouterr().out.count("wrote ") == 4, "expected four pages"


def test_generate_single_post_skips_site_pages(
    tmp_path: Path, client: typ.Any
) -> None:
    """Naming a post renders only that post."""
    cli.generate(post="hello", config=_write_config(tmp_path))

    public = tmp_path / "public"
    assert (public / "posts" / "hello.html").exists(), "expected the post"
    assert not (public / "index.html").exists(), "expected no home page"
    client.get_all_page_slugs.assert_not_called()


def test_series_command_prints_position(
    tmp_path: Path, client: typ.Any, capsys: pytest.CaptureFixture[str]
) -> None:
    """The series command reports the position and the previous part."""
    cli.series("hello", config=_write_config(tmp_path))
    out = capsys.readouterr().out
    assert "hello: 「Python 入門」系列 第 2 篇" in out, "expected the position line"
    assert "上一篇: intro" in out, "expected the previous part"
    assert "下一篇" not in out, "expected no next part for the last post"


def test_series_command_rejects_unknown_post(tmp_path: Path, client: typ.Any) -> None:
    """Unknown slugs are reported as lookup errors."""
    with pytest.raises(LookupError, match="missing"):
        cli.series("missing", config=_write_config(tmp_path))


def test_revalidate_regenerates_named_post(
    tmp_path: Path, client: typ.Any, capsys: pytest.CaptureFixture[str]
) -> None:
    """A post change rewrites that post's page and prints the response."""
    payload = _write_payload(
        tmp_path, {"type": "post", "data": {"id": 1, "slug": "hello"}}
    )

    cli.revalidate(payload, secret="hook-secret", config=_write_config(tmp_path))

    out = capsys.readouterr().out
    assert "wrote" in out, "expected the regenerated file to be reported"
    assert (tmp_path / "public" / "posts" / "hello.html").exists(), (
        "expected the post page on disk"
    )
    assert _last_json(out)["tags"] == ["wordpress", "posts", "post-1"], (
        "expected the invalidated tags"
    )


def test_revalidate_routes_page_changes_to_static_pages(
    tmp_path: Path, client: typ.Any, capsys: pytest.CaptureFixture[str]
) -> None:
    """A page change rewrites the static page, never a post page."""
    payload = _write_payload(
        tmp_path,
        {"type": "post", "data": {"id": 3, "slug": "about-me", "type": "page"}},
    )

    cli.revalidate(payload, secret="hook-secret", config=_write_config(tmp_path))

    public = tmp_path / "public"
    assert (public / "pages" / "about-me.html").exists(), "expected the page"
    assert not (public / "posts" / "about-me.html").exists(), (
        "expected no post page for a WordPress page"
    )
    client.get_post_by_slug.assert_not_called()
    body = _last_json(capsys.readouterr().out)
    assert body["tags"] == ["wordpress", "posts", "post-3", "pages", "page-3"], (
        f"unexpected tags {body['tags']!r}"
    )


def test_revalidate_skips_deleted_post(
    tmp_path: Path,
    client: typ.Any,
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A change for a post that no longer exists still succeeds."""
    payload = _write_payload(
        tmp_path,
        {
            "type": "post",
            "data": {"id": 9, "slug": "gone", "type": "post", "action": "delete"},
        },
    )

    with caplog.at_level(logging.WARNING, logger="newbie_pages.cli"):
        cli.revalidate(payload, secret="hook-secret", config=_write_config(tmp_path))

    out = capsys.readouterr().out
    assert "wrote" not in out, "expected nothing to be written"
    assert _last_json(out)["revalidated"] is True, "expected a successful response"
    assert "Skipping post 'gone'" in caplog.text, "expected a logged skip"


@pytest.mark.parametrize(
    "payload",
    [
        pytest.param({"type": "post", "data": "oops"}, id="scalar-data"),
        pytest.param({"type": "post", "data": {"id": 1}}, id="no-slug"),
        pytest.param(
            {"type": "post", "data": {"slug": "x", "type": "attachment"}},
            id="other-content-type",
        ),
        pytest.param({"type": "term", "data": {"slug": "hello"}}, id="term"),
    ],
)
def test_revalidate_without_a_renderable_target_writes_nothing(
    tmp_path: Path,
    client: typ.Any,
    capsys: pytest.CaptureFixture[str],
    payload: dict[str, typ.Any],
) -> None:
    """Changes that name no post or page are acknowledged without output."""
    path = _write_payload(tmp_path, payload)

    cli.revalidate(path, secret="hook-secret", config=_write_config(tmp_path))

    out = capsys.readouterr().out
    assert "wrote" not in out, "expected nothing to be written"
    assert _last_json(out)["revalidated"] is True, "expected a successful response"
    client.get_post_by_slug.assert_not_called()
    client.get_page_by_slug.assert_not_called()


def test_revalidate_exits_on_bad_secret(tmp_path: Path, client: typ.Any) -> None:
    """A wrong secret exits non-zero before anything is generated."""
    payload = _write_payload(tmp_path, {"type": "test"})
    with pytest.raises(SystemExit) as excinfo:
        cli.revalidate(payload, secret="wrong", config=_write_config(tmp_path))
    assert excinfo.value.code == 1, "expected exit status 1"
    assert not (tmp_path / "public").exists(), "expected no output directory"


def test_comment_command_submits_valid_comment(
    tmp_path: Path, client: typ.Any, capsys: pytest.CaptureFixture[str]
) -> None:
    """Accepted comments are forwarded and the success body printed."""
    client.create_comment.return_value = CommentResult(
        success=True,
        comment=Comment(id=9, post=1, author_name="Ann", content="Hello", date=""),
    )
    payload = _write_payload(
        tmp_path, {"post": 1, "author_name": "Ann", "content": "Hello there"}
    )

    cli.comment(payload, client_id="203.0.113.9", config=_write_config(tmp_path))

    body = _last_json(capsys.readouterr().out)
    assert body["success"] is True, f"unexpected body {body!r}"
    submitted = client.create_comment.call_args.args[0]
    assert (submitted.post, submitted.content) == (1, "Hello there"), (
        f"unexpected submission {submitted!r}"
    )


@pytest.mark.parametrize(
    "text",
    [
        pytest.param("not json", id="malformed"),
        pytest.param('["a list"]', id="not-an-object"),
        pytest.param('{"post": 1, "author_name": "Ann"}', id="missing-content"),
    ],
)
def test_comment_command_rejects_bad_submissions(
    tmp_path: Path, client: typ.Any, capsys: pytest.CaptureFixture[str], text: str
) -> None:
    """Unusable submissions exit non-zero with the missing-fields message."""
    payload = tmp_path / "payload.json"
    payload.write_text(text, encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.comment(payload, config=_write_config(tmp_path))

    assert excinfo.value.code == 1, "expected exit status 1"
    body = _last_json(capsys.readouterr().out)
    assert body == {"success": False, "error": "請填寫所有必填欄位"}, (
        f"unexpected body {body!r}"
    )
    client.create_comment.assert_not_called()
