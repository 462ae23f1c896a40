"""Static page generator for a headless WordPress blog.

This package fetches posts from WordPress, post-processes their HTML (heading
anchors, responsive tables, series navigation), and renders themed pages
through the ``pages`` console script.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from newbie_pages import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
