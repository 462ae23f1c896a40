r"""Turn WordPress change webhooks into cache invalidation notifications.

WordPress posts a JSON payload whenever content changes. This module maps
that payload to the cache tags of the pages that depend on it and pushes the
tags to subscribed listeners (for example, a callback that regenerates the
affected post). Nothing is cached here; listeners own whatever they derive.

Example
-------
>>> from newbie_pages.revalidate import collect_revalidation_tags
>>> collect_revalidation_tags({"type": "post", "data": {"id": 7, "type": "post"}})
['wordpress', 'posts', 'post-7']
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import hmac
import json
import logging
import typing as typ
from http import HTTPStatus

logger = logging.getLogger(__name__)

SECRET_HEADER = "x-webhook-secret"

Listener = typ.Callable[[list[str], typ.Mapping[str, typ.Any]], None]


@dc.dataclass(slots=True)
class RevalidationResult:
    """HTTP status and JSON body answered to the webhook sender."""

    status: int
    body: dict[str, typ.Any]


def collect_revalidation_tags(payload: typ.Mapping[str, typ.Any]) -> list[str]:
    """Return the cache tags invalidated by a webhook ``payload``.

    Parameters
    ----------
    payload : Mapping[str, Any]
        Webhook body of the form ``{"type": "post" | "term", "data": {"id",
        "slug", "type", "action"}}``.

    Returns
    -------
    list[str]
        Always starts with ``wordpress``. Posts add ``posts`` and
        ``post-<id>`` (plus ``pages``/``page-<id>`` for pages); terms add
        category, tag or custom taxonomy tags.
    """
    kind = payload.get("type")
    data = payload.get("data")
    if not isinstance(data, dict):
        data = {}
    content_id = data.get("id")
    content_type = data.get("type")
    tags = ["wordpress"]

    if kind == "post":
        tags.append("posts")
        if content_id:
            tags.append(f"post-{content_id}")
        if content_type == "page":
            tags.append("pages")
            if content_id:
                tags.append(f"page-{content_id}")
    elif kind == "term":
        match content_type:
            case "category":
                tags.append("categories")
                if content_id:
                    tags.extend(
                        [f"posts-category-{content_id}", f"category-{content_id}"]
                    )
            case "post_tag":
                tags.append("tags")
                if content_id:
                    tags.extend([f"posts-tag-{content_id}", f"tag-{content_id}"])
            case _:
                if content_type:
                    tags.append(f"taxonomy-{content_type}")
                if content_id:
                    tags.append(f"term-{content_id}")
    return tags


def _timestamp() -> str:
    return dt.datetime.now(dt.UTC).isoformat()


class WebhookRevalidator:
    """Validate change webhooks and notify listeners with invalidated tags."""

    def __init__(
        self, secret: str | None, listeners: typ.Iterable[Listener] = ()
    ) -> None:
        """Create a revalidator.

        Parameters
        ----------
        secret : str or None
            Shared secret expected in the ``x-webhook-secret`` header. When
            ``None`` every request is rejected.
        listeners : Iterable[Listener], optional
            Callables invoked with ``(tags, payload)`` after a valid change.
        """
        self._secret = secret
        self._listeners: list[Listener] = list(listeners)

    def subscribe(self, listener: Listener) -> None:
        """Register ``listener`` for future change notifications."""
        self._listeners.append(listener)

    def _authorized(self, headers: typ.Mapping[str, str]) -> bool:
        provided = next(
            (
                value
                for key, value in headers.items()
                if key.lower() == SECRET_HEADER
            ),
            None,
        )
        if not self._secret or provided is None:
            return False
        return hmac.compare_digest(provided.encode(), self._secret.encode())

    def handle(
        self, headers: typ.Mapping[str, str], body: str | bytes
    ) -> RevalidationResult:
        """Process one webhook request.

        Returns
        -------
        RevalidationResult
            ``400`` for malformed JSON or a missing ``type``, ``401`` for a
            bad secret, ``200`` for test pings and processed changes.
        """
        try:
            payload = json.loads(body)
        except (TypeError, ValueError):
            return RevalidationResult(
                HTTPStatus.BAD_REQUEST,
                {"message": "Invalid JSON payload", "timestamp": _timestamp()},
            )
        if not isinstance(payload, dict):
            payload = {}

        if not self._authorized(headers):
            logger.error("Invalid webhook secret")
            return RevalidationResult(
                HTTPStatus.UNAUTHORIZED, {"message": "Invalid webhook secret"}
            )

        kind = payload.get("type")
        if kind == "test":
            return RevalidationResult(
                HTTPStatus.OK,
                {
                    "revalidated": True,
                    "message": "Test request received successfully",
                    "timestamp": _timestamp(),
                },
            )
        if not kind:
            return RevalidationResult(
                HTTPStatus.BAD_REQUEST, {"message": "Missing type in request body"}
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            data = {}
        content_id = data.get("id")
        content_type = data.get("type")
        logger.info(
            "Revalidating: type=%s, contentType=%s, id=%s",
            kind,
            content_type,
            content_id,
        )
        tags = collect_revalidation_tags(payload)
        for listener in self._listeners:
            listener(tags, payload)

        message = f"Revalidated {kind}"
        if content_type:
            message += f" ({content_type})"
        if content_id:
            message += f" ID: {content_id}"
        return RevalidationResult(
            HTTPStatus.OK,
            {
                "revalidated": True,
                "message": message,
                "tags": tags,
                "timestamp": _timestamp(),
            },
        )


__all__ = [
    "SECRET_HEADER",
    "Listener",
    "RevalidationResult",
    "WebhookRevalidator",
    "collect_revalidation_tags",
]
