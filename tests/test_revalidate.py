"""Unit tests for webhook driven revalidation."""

from __future__ import annotations

import json
import typing as typ

import pytest

from newbie_pages.revalidate import WebhookRevalidator, collect_revalidation_tags

SECRET = "hook-secret"


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        pytest.param(
            {"type": "post", "data": {"id": 7, "type": "post"}},
            ["wordpress", "posts", "post-7"],
            id="post",
        ),
        pytest.param(
            {"type": "post", "data": {"id": 3, "type": "page"}},
            ["wordpress", "posts", "post-3", "pages", "page-3"],
            id="page",
        ),
        pytest.param(
            {"type": "term", "data": {"id": 4, "type": "category"}},
            ["wordpress", "categories", "posts-category-4", "category-4"],
            id="category",
        ),
        pytest.param(
            {"type": "term", "data": {"id": 5, "type": "post_tag"}},
            ["wordpress", "tags", "posts-tag-5", "tag-5"],
            id="tag",
        ),
        pytest.param(
            {"type": "term", "data": {"id": 6, "type": "series"}},
            ["wordpress", "taxonomy-series", "term-6"],
            id="custom-taxonomy",
        ),
        pytest.param({"type": "media", "data": {}}, ["wordpress"], id="other"),
        pytest.param(
            {"type": "post", "data": "oops"},
            ["wordpress", "posts"],
            id="scalar-data",
        ),
    ],
)
def test_collect_revalidation_tags(
    payload: dict[str, typ.Any], expected: list[str]
) -> None:
    """Each change type invalidates its own tags plus the global one."""
    tags = collect_revalidation_tags(payload)
    assert tags == expected, f"expected {expected!r}, got {tags!r}"


def _handle(
    revalidator: WebhookRevalidator,
    payload: object,
    *,
    secret: str | None = SECRET,
) -> typ.Any:
    headers = {"X-Webhook-Secret": secret} if secret is not None else {}
    return revalidator.handle(headers, json.dumps(payload))


def test_valid_change_notifies_listeners() -> None:
    """Listeners receive the collected tags and the payload."""
    received: list[tuple[list[str], typ.Any]] = []
    revalidator = WebhookRevalidator(SECRET)
    revalidator.subscribe(lambda tags, body: received.append((tags, body)))
    payload = {"type": "post", "data": {"id": 7, "slug": "hello", "type": "post"}}

    result = _handle(revalidator, payload)

    assert result.status == 200, f"expected HTTP 200, got {result.status}"
    assert result.body["message"] == "Revalidated post (post) ID: 7", (
        f"unexpected message {result.body['message']!r}"
    )
    assert result.body["revalidated"] is True, "expected revalidated flag"
    assert received == [(["wordpress", "posts", "post-7"], payload)], (
        f"unexpected notifications {received!r}"
    )


@pytest.mark.parametrize("secret", [None, "wrong"])
def test_bad_secret_is_rejected(secret: str | None) -> None:
    """Requests without the shared secret are refused and nobody is notified."""
    received: list[list[str]] = []
    revalidator = WebhookRevalidator(
        SECRET, [lambda tags, _body: received.append(tags)]
    )
    result = _handle(revalidator, {"type": "post", "data": {"id": 1}}, secret=secret)
    assert result.status == 401, f"expected HTTP 401, got {result.status}"
    assert received == [], "expected no listener calls"


def test_unconfigured_secret_rejects_everything() -> None:
    """Without a configured secret no request is accepted."""
    result = _handle(WebhookRevalidator(None), {"type": "test"}, secret="")
    assert result.status == 401, f"expected HTTP 401, got {result.status}"


def test_test_ping_is_acknowledged_without_notification() -> None:
    """WordPress connection tests get a success reply only."""
    received: list[list[str]] = []
    revalidator = WebhookRevalidator(
        SECRET, [lambda tags, _body: received.append(tags)]
    )
    result = _handle(revalidator, {"type": "test"})
    assert result.status == 200, f"expected HTTP 200, got {result.status}"
    assert result.body["message"] == "Test request received successfully", (
        "expected the test acknowledgement"
    )
    assert received == [], "expected no listener calls for a test ping"


def test_missing_type_is_a_bad_request() -> None:
    """Payloads without a type are rejected."""
    result = _handle(WebhookRevalidator(SECRET), {"data": {"id": 1}})
    assert result.status == 400, f"expected HTTP 400, got {result.status}"
    assert result.body["message"] == "Missing type in request body", (
        "expected the missing type message"
    )


def test_malformed_json_is_a_bad_request() -> None:
    """Bodies that are not JSON are rejected before anything else."""
    result = WebhookRevalidator(SECRET).handle({"x-webhook-secret": SECRET}, "{nope")
    assert result.status == 400, f"expected HTTP 400, got {result.status}"


@pytest.mark.parametrize("data", ["oops", ["a"], 5, None])
def test_non_object_data_is_treated_as_empty(data: object) -> None:
    """A ``data`` field that is not an object still revalidates the kind."""
    received: list[list[str]] = []
    revalidator = WebhookRevalidator(
        SECRET, [lambda tags, _body: received.append(tags)]
    )
    result = _handle(revalidator, {"type": "post", "data": data})
    assert result.status == 200, f"expected HTTP 200, got {result.status}"
    assert result.body["tags"] == ["wordpress", "posts"], (
        f"unexpected tags {result.body['tags']!r}"
    )
    assert result.body["message"] == "Revalidated post", (
        "expected no content details in the message"
    )
    assert received == [["wordpress", "posts"]], "expected one listener call"
