"""Unit tests for code highlighting and markdown rendering."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from newbie_pages.generator import HtmlContentRenderer


@pytest.fixture
def renderer() -> HtmlContentRenderer:
    """Return a renderer using the default Pygments style."""
    return HtmlContentRenderer()


def test_language_blocks_are_highlighted(renderer: HtmlContentRenderer) -> None:
    """``language-x`` code blocks become codehilite blocks with metadata."""
    html = '<p>Run:</p><pre><code class="language-bash">echo &lt;hi&gt;</code></pre>'
    soup = BeautifulSoup(renderer.highlight_html(html), "html.parser")
    block = soup.select_one("div.codehilite")
    assert block is not None, "expected a highlighted block"
    assert block["data-language"] == "bash", "expected the bash language label"
    assert "echo <hi>" in block.get_text(), "expected the decoded source text"
    assert soup.p is not None, "expected surrounding prose to survive"


@pytest.mark.parametrize(
    "html",
    [
        pytest.param("<p>No code here.</p>", id="no-pre"),
        pytest.param("<pre><code>plain</code></pre>", id="no-language"),
        pytest.param(
            '<pre><code class="language-py"><span>x</span></code></pre>',
            id="already-marked-up",
        ),
        pytest.param(
            '<div class="codehilite">'
            '<pre><code class="language-py">x</code></pre></div>',
            id="already-highlighted",
        ),
    ],
)
def test_other_blocks_are_untouched(
    renderer: HtmlContentRenderer, html: str
) -> None:
    """Blocks that cannot or need not be highlighted are returned verbatim."""
    assert renderer.highlight_html(html) == html, "expected the input unchanged"


def test_unknown_language_falls_back_to_text(renderer: HtmlContentRenderer) -> None:
    """Unknown lexers still render, labelled with the requested language."""
    html = renderer.code_block("x = 1\n", "no-such-language")
    assert 'data-language="no-such-language"' in html, "expected the label kept"


def test_markdown_descriptions(renderer: HtmlContentRenderer) -> None:
    """Tag descriptions are rendered as markdown; blanks render nothing."""
    assert "<strong>bold</strong>" in renderer.markdown("Some **bold** text")
    assert renderer.markdown("   ") == "", "expected no markup for blank text"
    assert ".codehilite" in renderer.stylesheet, "expected scoped Pygments CSS"


def test_highlighting_keeps_surrounding_markup(renderer: HtmlContentRenderer) -> None:
    """Only the code block is replaced; unclosed prose markup is left alone."""
    before = "<p>one<p>two<ul><li>x<li>y</ul>\n"
    after = "\n<p>tail"
    block = '<PRE class="wp-block-code"><code class="lang-python">x = 1</code></PRE>'
    result = renderer.highlight_html(before + block + after)
    assert result.startswith(before), f"expected the prefix unchanged: {result!r}"
    assert result.endswith(after), f"expected the suffix unchanged: {result!r}"
    assert 'data-language="python"' in result, "expected the block highlighted"
