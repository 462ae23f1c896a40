"""Unit tests for the shared text helpers."""

from __future__ import annotations

import pytest

from newbie_pages.html_utils import (
    clean_excerpt,
    generate_slug,
    line_start_offsets,
    strip_html,
    unique_id,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Don&#8217;t", "Don’t"),
        ("won&#x2019;t", "won’t"),
        ("a &lt;b&gt; &quot;c&quot; &apos;d&apos;", "a <b> \"c\" 'd'"),
        ("&amp;lt;", "&lt;"),
    ],
)
def test_strip_html_decodes_entities(raw: str, expected: str) -> None:
    """Numeric references and the core named entities decode exactly once."""
    result = strip_html(raw)
    assert result == expected, f"expected {expected!r} for {raw!r}, got {result!r}"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Hello World", "hello-world"),
        ("Hello, 世界  Again!", "hello-世界-again"),
        ("什麼是 Python？", "什麼是-python"),
        ("C++ & Python", "c-python"),
        ("  -- padded --  ", "padded"),
        ("snake_case stays", "snake_case-stays"),
        ("!!!", ""),
    ],
)
def test_generate_slug(text: str, expected: str) -> None:
    """Slugs keep word characters, Han characters and single hyphens."""
    result = generate_slug(text)
    assert result == expected, f"expected slug {expected!r}, got {result!r}"


def test_unique_id_appends_incrementing_suffixes() -> None:
    """Repeated bases receive -1, -2 suffixes and are recorded as used."""
    used: set[str] = set()
    ids = [unique_id("intro", used) for _ in range(3)]
    assert ids == ["intro", "intro-1", "intro-2"], f"unexpected ids {ids!r}"
    assert used == {"intro", "intro-1", "intro-2"}, "expected every id to be reserved"


def test_unique_id_skips_reserved_values() -> None:
    """Ids already present in the document are never handed out again."""
    used = {"intro", "intro-1"}
    assert unique_id("intro", used) == "intro-2", "expected next free suffix"


def test_strip_html_decodes_and_truncates() -> None:
    """Tags are removed, entities decoded, and long text cut with an ellipsis."""
    assert strip_html("<p>Don&#8217;t <b>panic</b></p>") == "Don’t panic", (
        "expected tags stripped and entity decoded"
    )
    assert strip_html("<p>abcdefghij</p>", max_length=4) == "abcd...", (
        "expected truncation to four characters plus ellipsis"
    )
    assert strip_html("<p>short</p>", max_length=10) == "short", (
        "expected short text untouched"
    )


def test_clean_excerpt_handles_wordpress_markup() -> None:
    """Excerpts lose their paragraph tags and read-more ellipsis entity."""
    excerpt = "<p>Learn&nbsp;Python basics &hellip;</p>\n"
    assert clean_excerpt(excerpt) == "Learn Python basics ...", (
        "expected plain text with ASCII ellipsis"
    )
    assert clean_excerpt(None) == "", "expected empty excerpt for None"
    assert clean_excerpt("<p>" + "x" * 20 + "</p>", max_length=5) == "xxxxx...", (
        "expected excerpt truncated to max_length"
    )


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        pytest.param("", [0], id="empty"),
        pytest.param("one line", [0], id="single-line"),
        pytest.param("ab\ncd\n", [0, 3, 6], id="trailing-newline"),
        pytest.param("\n\nx", [0, 1, 2], id="blank-lines"),
    ],
)
def test_line_start_offsets(text: str, expected: list[int]) -> None:
    """Each entry is where a line starts in the original string."""
    assert line_start_offsets(text) == expected, f"unexpected offsets for {text!r}"
