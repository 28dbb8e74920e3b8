"""Build and render the generated ``robots.txt`` document."""

from __future__ import annotations

import typing as typ

from .._constants import SITEMAP_DOCUMENTS
from .models import RobotsDocument
from .renderer import build_environment, render_template

if typ.TYPE_CHECKING:
    from jinja2 import Environment

    from ..config import GlobalSEOConfig


def build_robots(config: GlobalSEOConfig) -> RobotsDocument:
    """Return the robots rules from ``config`` plus the sitemap index URL."""
    return RobotsDocument(
        rules=tuple(config.robots.rules),
        sitemap_url=config.absolute_url(SITEMAP_DOCUMENTS["index"].path),
    )


def render_robots(document: RobotsDocument, env: Environment | None = None) -> str:
    return render_template(env or build_environment(), "robots.txt", document=document)


__all__ = ["build_robots", "render_robots"]
