"""Jinja environment shared by the sitemap and robots renderers."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def format_lastmod(value: dt.datetime) -> str:
    """Return ``value`` as a W3C datetime in UTC, to the second."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.UTC)
    return value.astimezone(dt.UTC).isoformat(timespec="seconds")


def format_priority(value: float) -> str:
    """Render a sitemap priority with one decimal, or two when needed."""
    if round(value, 1) == round(value, 2):
        return f"{value:.1f}"
    return f"{value:.2f}"


def build_environment(templates_dir: Path | None = None) -> Environment:
    """Return a Jinja environment with the sitemap filters installed.

    Templates ending in ``.xml`` are autoescaped; ``robots.txt`` is not.
    """
    env = Environment(
        loader=FileSystemLoader(str(templates_dir or DEFAULT_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    env.filters["lastmod"] = format_lastmod
    env.filters["priority"] = format_priority
    return env


def render_template(env: Environment, name: str, **context: object) -> str:
    """Render ``name`` and ensure the output ends with a newline."""
    text = env.get_template(name).render(**context)
    if not text.endswith("\n"):
        text += "\n"
    return text


__all__ = [
    "DEFAULT_TEMPLATES_DIR",
    "build_environment",
    "format_lastmod",
    "format_priority",
    "render_template",
]
