r"""Validate and forward visitor comment submissions to WordPress.

The site is static, so comment submission is the one request-time surface.
:class:`CommentService` applies the acceptance rules (per-client rate
limiting, a honeypot field, required fields and length bounds) before handing
the comment to WordPress for moderation. Rate-limit counters live in an
injected :class:`CounterStore`; :class:`InMemoryCounterStore` suits a single
process, anything shared across processes can implement the same protocol.

Example
-------
>>> from newbie_pages.comments import InMemoryCounterStore, RateLimiter
>>> limiter = RateLimiter(InMemoryCounterStore(), max_requests=1, window=60)
>>> limiter.is_limited("203.0.113.9"), limiter.is_limited("203.0.113.9")
(False, True)
"""

from __future__ import annotations

import dataclasses as dc
import logging
import time
import typing as typ
from http import HTTPStatus

from .models import Comment, CommentInput, CommentResult

if typ.TYPE_CHECKING:
    from .config import CommentsConfig

logger = logging.getLogger(__name__)

ACCEPTED_MESSAGE = "留言已送出，審核後將會顯示"
RATE_LIMITED_MESSAGE = "請稍後再試"
MISSING_FIELDS_MESSAGE = "請填寫所有必填欄位"
TOO_SHORT_MESSAGE = "留言內容太短"
SUBMIT_FAILED_MESSAGE = "留言提交失敗"
UNKNOWN_CLIENT = "unknown"
MAX_THREAD_DEPTH = 3


def too_long_message(limit: int) -> str:
    """Return the message shown when a comment exceeds ``limit`` characters."""
    return f"留言內容過長（最多 {limit} 字）"


@dc.dataclass(slots=True)
class ThreadedComment:
    """A comment placed in display order with its indentation depth."""

    comment: Comment
    depth: int


def thread_comments(
    comments: typ.Sequence[Comment], *, max_depth: int = MAX_THREAD_DEPTH
) -> list[ThreadedComment]:
    """Arrange ``comments`` into reply threads, flattened for rendering.

    Top-level comments keep their incoming order and each is followed by its
    replies, depth first. Replies whose parent is not among ``comments`` are
    promoted to the top level.

    Parameters
    ----------
    comments : Sequence[Comment]
        Comments as returned by WordPress, usually newest first.
    max_depth : int, optional
        Deepest indentation reported; deeper replies are clamped to it.

    Returns
    -------
    list[ThreadedComment]
        Every comment exactly once, in display order.

    Examples
    --------
    >>> from newbie_pages.models import Comment
    >>> root = Comment(id=1, post=9, author_name="Ann", content="Hi", date="")
    >>> reply = Comment(id=2, post=9, author_name="Bo", content="Yo", date="", parent=1)
    >>> [(t.comment.id, t.depth) for t in thread_comments([reply, root])]
    [(1, 0), (2, 1)]
    """
    known = {comment.id for comment in comments}
    replies: dict[int, list[Comment]] = {}
    roots: list[Comment] = []
    for comment in comments:
        if comment.parent and comment.parent in known:
            replies.setdefault(comment.parent, []).append(comment)
        else:
            roots.append(comment)

    threaded: list[ThreadedComment] = []
    seen: set[int] = set()

    def visit(comment: Comment, depth: int) -> None:
        if comment.id in seen:
            return
        seen.add(comment.id)
        threaded.append(ThreadedComment(comment, min(depth, max_depth)))
        for reply in replies.get(comment.id, []):
            visit(reply, depth + 1)

    # Comments caught in a parent cycle are never reached from a root.
    for comment in [*roots, *comments]:
        visit(comment, 0)
    return threaded


@dc.dataclass(slots=True)
class RateWindow:
    """Submission count for one client within the current window."""

    count: int
    reset_at: float


class CounterStore(typ.Protocol):
    """Storage for per-client rate windows."""

    def get(self, key: str) -> RateWindow | None:
        """Return the window recorded for ``key``, if any."""
        ...

    def set(self, key: str, window: RateWindow) -> None:
        """Record ``window`` for ``key``."""
        ...


class InMemoryCounterStore:
    """Process-local counter store."""

    def __init__(self) -> None:
        self._windows: dict[str, RateWindow] = {}

    def get(self, key: str) -> RateWindow | None:
        """Return the window recorded for ``key``, if any."""
        return self._windows.get(key)

    def set(self, key: str, window: RateWindow) -> None:
        """Record ``window`` for ``key``."""
        self._windows[key] = window


class RateLimiter:
    """Fixed-window limiter allowing ``max_requests`` per ``window`` seconds."""

    def __init__(
        self,
        store: CounterStore | None = None,
        *,
        max_requests: int = 5,
        window: float = 60.0,
        clock: typ.Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store or InMemoryCounterStore()
        self.max_requests = max_requests
        self.window = window
        self._clock = clock

    def is_limited(self, key: str) -> bool:
        """Count a request from ``key`` and report whether it must be refused."""
        now = self._clock()
        record = self._store.get(key)
        if record is None or now > record.reset_at:
            self._store.set(key, RateWindow(count=1, reset_at=now + self.window))
            return False
        if record.count >= self.max_requests:
            return True
        record.count += 1
        self._store.set(key, record)
        return False


@dc.dataclass(slots=True)
class CommentResponse:
    """HTTP status and JSON body answered to the submitting browser."""

    status: int
    body: dict[str, typ.Any]


class CommentSink(typ.Protocol):
    """Anything that can create a comment in WordPress."""

    def create_comment(self, comment: CommentInput) -> CommentResult:
        """Submit ``comment`` and report the outcome."""
        ...


def _text_field(payload: typ.Mapping[str, typ.Any], key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def _post_id(value: object) -> int | None:
    match value:
        case bool():
            return None
        case int() if value > 0:
            return value
        case str() if value.strip().isdigit() and int(value) > 0:
            return int(value)
    return None


class CommentService:
    """Apply acceptance rules to comment submissions and forward them."""

    def __init__(
        self,
        client: CommentSink,
        rate_limiter: RateLimiter,
        *,
        min_length: int = 2,
        max_length: int = 5000,
        listeners: typ.Iterable[typ.Callable[[list[str]], None]] = (),
    ) -> None:
        """Create the service.

        Parameters
        ----------
        client : CommentSink
            Destination for accepted comments, usually a ``WordPressClient``.
        rate_limiter : RateLimiter
            Limiter keyed by client identity.
        min_length, max_length : int, optional
            Bounds on the trimmed comment length.
        listeners : Iterable[Callable[[list[str]], None]], optional
            Called with ``["post-<id>-comments"]`` after a successful
            submission so cached comment lists can be refreshed.
        """
        self._client = client
        self._rate_limiter = rate_limiter
        self.min_length = min_length
        self.max_length = max_length
        self._listeners = list(listeners)

    @classmethod
    def from_config(
        cls,
        client: CommentSink,
        config: CommentsConfig,
        *,
        store: CounterStore | None = None,
    ) -> CommentService:
        """Build a service using the limits from the ``comments`` config."""
        limiter = RateLimiter(
            store, max_requests=config.rate_limit_max, window=config.rate_limit_window
        )
        return cls(
            client,
            limiter,
            min_length=config.min_length,
            max_length=config.max_length,
        )

    def submit(
        self, payload: typ.Mapping[str, typ.Any], client_id: str | None
    ) -> CommentResponse:
        """Validate ``payload`` from ``client_id`` and forward it to WordPress.

        Parameters
        ----------
        payload : Mapping[str, Any]
            Submitted fields: ``post``, ``author_name``, ``content`` and the
            ``website`` honeypot.
        client_id : str or None
            Client identity for rate limiting, typically the forwarded IP.

        Returns
        -------
        CommentResponse
            ``429`` when rate limited, ``400`` for validation or WordPress
            failures, ``200`` otherwise. Honeypot hits get a ``200`` without
            anything being submitted.
        """
        if self._rate_limiter.is_limited(client_id or UNKNOWN_CLIENT):
            return CommentResponse(
                HTTPStatus.TOO_MANY_REQUESTS,
                {"success": False, "error": RATE_LIMITED_MESSAGE},
            )

        if payload.get("website"):
            logger.info("Discarding comment that filled the honeypot field")
            return CommentResponse(
                HTTPStatus.OK, {"success": True, "message": ACCEPTED_MESSAGE}
            )

        post_id = _post_id(payload.get("post"))
        author_name = _text_field(payload, "author_name")
        content = _text_field(payload, "content")
        if post_id is None or not author_name or not content:
            return self._rejected(MISSING_FIELDS_MESSAGE)
        if len(content) < self.min_length:
            return self._rejected(TOO_SHORT_MESSAGE)
        if len(content) > self.max_length:
            return self._rejected(too_long_message(self.max_length))

        result = self._client.create_comment(
            CommentInput(post=post_id, author_name=author_name, content=content)
        )
        if not result.success:
            logger.warning(
                "WordPress rejected comment on post %s: %s", post_id, result.error
            )
            return self._rejected(result.error or SUBMIT_FAILED_MESSAGE)

        for listener in self._listeners:
            listener([f"post-{post_id}-comments"])

        body: dict[str, typ.Any] = {"success": True, "message": ACCEPTED_MESSAGE}
        if result.comment is not None:
            body["comment"] = dc.asdict(result.comment)
        return CommentResponse(HTTPStatus.OK, body)

    @staticmethod
    def _rejected(message: str) -> CommentResponse:
        return CommentResponse(
            HTTPStatus.BAD_REQUEST, {"success": False, "error": message}
        )


__all__ = [
    "ACCEPTED_MESSAGE",
    "CommentResponse",
    "CommentService",
    "CommentSink",
    "CounterStore",
    "InMemoryCounterStore",
    "RateLimiter",
    "RateWindow",
    "ThreadedComment",
    "thread_comments",
]
