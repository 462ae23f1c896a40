"""Utility helpers shared by the site configuration loader."""

from __future__ import annotations

import typing as typ

from .models import CommentsConfig, SiteConfigError, ThemeConfig

DEFAULT_GRAPHQL_PATH = "/graphql"


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _normalize_base_url(url: str) -> str:
    """Strip whitespace and trailing slashes from a WordPress base URL."""
    return url.strip().rstrip("/")


def _build_graphql_endpoint(base_url: str, override: object | None = None) -> str:
    """Return the GraphQL endpoint, defaulting to ``<base_url>/graphql``."""
    explicit = _optional_str(override)
    if explicit:
        return explicit
    return f"{base_url}{DEFAULT_GRAPHQL_PATH}"


def _coerce_number(
    value: object, *, field: str, kind: type[int] | type[float]
) -> int | float:
    """Convert ``value`` to ``kind`` or raise a SiteConfigError naming ``field``."""
    match value:
        case bool():
            pass
        case int() | float():
            return kind(value)
        case str() as text if text.strip():
            try:
                return kind(text.strip())
            except ValueError:
                pass
    msg = f"Configuration field '{field}' must be a number, got {value!r}."
    raise SiteConfigError(msg)


def _build_theme_config(payload: typ.Mapping[str, typ.Any]) -> ThemeConfig:
    """Build a ThemeConfig instance from the provided mapping payload."""
    base = ThemeConfig()
    return ThemeConfig(
        site_name=payload.get("name", base.site_name),
        site_description=payload.get("description", base.site_description),
        site_domain=str(payload.get("domain", base.site_domain)).rstrip("/"),
        pygments_style=payload.get("pygments_style", base.pygments_style),
        language=payload.get("language", base.language),
    )


def _build_comments_config(payload: typ.Mapping[str, typ.Any]) -> CommentsConfig:
    """Build a CommentsConfig from the ``comments`` mapping."""
    base = CommentsConfig()
    return CommentsConfig(
        rate_limit_max=int(
            _coerce_number(
                payload.get("rate_limit_max", base.rate_limit_max),
                field="comments.rate_limit_max",
                kind=int,
            )
        ),
        rate_limit_window=float(
            _coerce_number(
                payload.get("rate_limit_window", base.rate_limit_window),
                field="comments.rate_limit_window",
                kind=float,
            )
        ),
        min_length=int(
            _coerce_number(
                payload.get("min_length", base.min_length),
                field="comments.min_length",
                kind=int,
            )
        ),
        max_length=int(
            _coerce_number(
                payload.get("max_length", base.max_length),
                field="comments.max_length",
                kind=int,
            )
        ),
        per_page=int(
            _coerce_number(
                payload.get("per_page", base.per_page),
                field="comments.per_page",
                kind=int,
            )
        ),
    )


def _string_list(value: object | None) -> list[str]:
    """Normalize a scalar or list into a list of non-empty strings."""
    if isinstance(value, str):
        return [segment for segment in value.split() if segment]
    if isinstance(value, list):
        normalized: list[str] = []
        for segment in value:
            text = str(segment).strip()
            if text:
                normalized.append(text)
        return normalized
    return []


__all__ = [
    "DEFAULT_GRAPHQL_PATH",
    "_build_comments_config",
    "_build_graphql_endpoint",
    "_build_theme_config",
    "_coerce_number",
    "_normalize_base_url",
    "_optional_str",
    "_string_list",
]
