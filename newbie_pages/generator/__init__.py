"""Rendering helpers and page generators for the static blog."""

from .models import (
    HomePageModel,
    PostCard,
    PostPageModel,
    StaticPageModel,
    TagEntry,
    TagIndexModel,
    TagPageModel,
)
from .page_generator import PostPageGenerator, TagPageGenerator, format_display_date
from .renderer import HtmlContentRenderer
from .site_pages import (
    HomePageGenerator,
    StaticPageGenerator,
    TagIndexGenerator,
    rank_tags,
)

__all__ = [
    "HomePageGenerator",
    "HomePageModel",
    "HtmlContentRenderer",
    "PostCard",
    "PostPageGenerator",
    "PostPageModel",
    "StaticPageGenerator",
    "StaticPageModel",
    "TagEntry",
    "TagIndexGenerator",
    "TagIndexModel",
    "TagPageGenerator",
    "TagPageModel",
    "format_display_date",
    "rank_tags",
]
