"""Build-time artifact compiler and request-time route gate for a marketing site.

This package exposes the CLI entry points used by ``uv run pages`` in CI to
discover routes, resolve their SEO settings, and write the page manifest,
sitemaps, and ``robots.txt``.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from cms_pages import main
>>> main(["build"])  # doctest: +SKIP
0
>>> from cms_pages import app
>>> callable(app)
True
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
