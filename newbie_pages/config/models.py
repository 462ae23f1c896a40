"""Typed dataclasses describing the blog site configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from newbie_pages._constants import PAGES_DIR, POSTS_DIR, TAGS_DIR, USER_AGENT


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ThemeConfig:
    """Site identity shared by every rendered page."""

    site_name: str = "新人日誌"
    site_description: str = ""
    site_domain: str = "https://next-wp.com"
    pygments_style: str = "monokai"
    language: str = "zh-Hant-TW"


@dc.dataclass(slots=True)
class WordPressConfig:
    """Where and how to reach the headless WordPress instance."""

    url: str
    graphql_endpoint: str
    timeout: float = 30.0
    user_agent: str = USER_AGENT
    webhook_secret: str | None = None


@dc.dataclass(slots=True)
class CommentsConfig:
    """Limits applied to visitor comment submissions."""

    rate_limit_max: int = 5
    rate_limit_window: float = 60.0
    min_length: int = 2
    max_length: int = 5000
    per_page: int = 10


@dc.dataclass(slots=True)
class SiteConfig:
    """A fully resolved site definition sourced from YAML config."""

    wordpress: WordPressConfig
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)
    comments: CommentsConfig = dc.field(default_factory=CommentsConfig)
    output_dir: Path = Path("public")
    excerpt_length: int = 150
    tags: list[str] = dc.field(default_factory=list)
    pages_with_toc: list[str] = dc.field(default_factory=lambda: ["about-me"])

    def post_output_path(self, slug: str) -> Path:
        """Return where the page for post ``slug`` is written."""
        return self.output_dir / POSTS_DIR / f"{slug}.html"

    def tag_output_path(self, slug: str) -> Path:
        """Return where the listing page for tag ``slug`` is written."""
        return self.output_dir / POSTS_DIR / TAGS_DIR / f"{slug}.html"

    def tag_index_output_path(self) -> Path:
        """Return where the page listing every tag is written."""
        return self.output_dir / POSTS_DIR / TAGS_DIR / "index.html"

    def page_output_path(self, slug: str) -> Path:
        """Return where the static page ``slug`` is written."""
        return self.output_dir / PAGES_DIR / f"{slug}.html"

    def home_output_path(self) -> Path:
        """Return where the home page is written."""
        return self.output_dir / "index.html"


__all__ = [
    "CommentsConfig",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
    "WordPressConfig",
]
