"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from newbie_pages._constants import USER_AGENT

from .helpers import (
    _build_comments_config,
    _build_graphql_endpoint,
    _build_theme_config,
    _coerce_number,
    _normalize_base_url,
    _optional_str,
    _string_list,
)
from .models import SiteConfig, SiteConfigError, WordPressConfig

URL_ENV_VAR = "WORDPRESS_URL"
SECRET_ENV_VAR = "WORDPRESS_WEBHOOK_SECRET"
DEFAULT_PAGES_WITH_TOC = ["about-me"]


def load_site_config(
    path: Path, *, environ: typ.Mapping[str, str] | None = None
) -> SiteConfig:
    """Load the YAML configuration describing the WordPress source and site.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/site.yaml``).
    environ : Mapping[str, str], optional
        Environment used for overrides; defaults to ``os.environ``.
        ``WORDPRESS_URL`` replaces ``wordpress.url`` and
        ``WORDPRESS_WEBHOOK_SECRET`` replaces ``wordpress.webhook_secret``.

    Returns
    -------
    SiteConfig
        Parsed configuration with defaults applied.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If the WordPress URL is missing or a numeric field is invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from newbie_pages.config import load_site_config
    >>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
    >>> config.wordpress.graphql_endpoint  # doctest: +SKIP
    'https://realnewbie.com/graphql'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    env = os.environ if environ is None else environ
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):  # pragma: no cover - config error guard
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    wordpress = _build_wordpress_config(raw.get("wordpress") or {}, env)
    site_raw = raw.get("site") or {}
    output_raw = raw.get("output") or {}

    return SiteConfig(
        wordpress=wordpress,
        theme=_build_theme_config(site_raw),
        comments=_build_comments_config(raw.get("comments") or {}),
        output_dir=Path(output_raw.get("dir", "public")),
        excerpt_length=int(
            _coerce_number(
                output_raw.get("excerpt_length", 150),
                field="output.excerpt_length",
                kind=int,
            )
        ),
        tags=_string_list(output_raw.get("tags")),
        pages_with_toc=_string_list(
            output_raw.get("pages_with_toc", DEFAULT_PAGES_WITH_TOC)
        ),
    )


def _build_wordpress_config(
    payload: typ.Mapping[str, typ.Any], env: typ.Mapping[str, str]
) -> WordPressConfig:
    """Build the WordPressConfig, letting environment variables win."""
    url = _optional_str(env.get(URL_ENV_VAR)) or _optional_str(payload.get("url"))
    if not url:
        msg = f"WordPress URL missing: set 'wordpress.url' or {URL_ENV_VAR}."
        raise SiteConfigError(msg)
    base_url = _normalize_base_url(url)
    secret = _optional_str(env.get(SECRET_ENV_VAR)) or _optional_str(
        payload.get("webhook_secret")
    )
    return WordPressConfig(
        url=base_url,
        graphql_endpoint=_build_graphql_endpoint(
            base_url, payload.get("graphql_endpoint")
        ),
        timeout=float(
            _coerce_number(
                payload.get("timeout", 30.0), field="wordpress.timeout", kind=float
            )
        ),
        user_agent=_optional_str(payload.get("user_agent")) or USER_AGENT,
        webhook_secret=secret,
    )


__all__ = ["SECRET_ENV_VAR", "URL_ENV_VAR", "load_site_config"]
