"""Load and validate the blog site configuration YAML.

This subpackage parses the project's ``site.yaml`` file, applies defaults and
environment overrides, and produces typed dataclasses (:class:`SiteConfig`,
:class:`WordPressConfig`, etc.) that the WordPress client and page generators
consume. The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from newbie_pages.config import load_site_config
>>> site = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> site.post_output_path("hello-world")  # doctest: +SKIP
PosixPath('public/posts/hello-world.html')
"""

from .loader import SECRET_ENV_VAR, URL_ENV_VAR, load_site_config
from .models import (
    CommentsConfig,
    SiteConfig,
    SiteConfigError,
    ThemeConfig,
    WordPressConfig,
)

__all__ = [
    "SECRET_ENV_VAR",
    "URL_ENV_VAR",
    "CommentsConfig",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
    "WordPressConfig",
    "load_site_config",
]
