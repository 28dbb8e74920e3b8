"""Load the site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _build_robots_rules,
    _normalize_strings,
    _optional_str,
    _require_change_frequency,
    _require_unit_interval,
)
from .models import (
    DEFAULT_ROBOTS_RULES,
    BuildPaths,
    GlobalSEOConfig,
    ManagedRedirectConfig,
    RobotsDefaults,
    SiteConfig,
    SiteConfigError,
    SitemapDefaults,
)


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing SEO defaults and build paths.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/site.yaml``).

    Returns
    -------
    SiteConfig
        Immutable snapshot holding the :class:`GlobalSEOConfig`, the build
        paths, and any managed redirects.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If required fields are missing or a numeric/enum field is invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from cms_pages.config import load_site_config
    >>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
    >>> config.seo.site_name  # doctest: +SKIP
    'Valiance Media'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    return SiteConfig(
        seo=_build_seo_config(raw),
        paths=_build_paths(raw.get("paths") or {}),
        redirects=_build_redirects(raw.get("redirects") or []),
    )


def _build_seo_config(raw: typ.Mapping[str, typ.Any]) -> GlobalSEOConfig:
    """Build the global SEO record from the ``site``/``robots``/``sitemap`` blocks."""
    site = raw.get("site") or {}
    site_name = _optional_str(site.get("name"))
    site_url = _optional_str(site.get("url"))
    if not site_name or not site_url:
        msg = "Site configuration requires 'site.name' and 'site.url'."
        raise SiteConfigError(msg)
    if not site_url.startswith(("http://", "https://")):
        msg = f"'site.url' must be an absolute http(s) URL, got {site_url!r}."
        raise SiteConfigError(msg)

    template = site.get("title_template", "{page_name} | {site_name}")
    if not isinstance(template, str) or "{page_name}" not in template:
        msg = "'site.title_template' must contain '{page_name}'."
        raise SiteConfigError(msg)
    try:
        template.format(page_name="", site_name="")
    except (AttributeError, IndexError, KeyError, ValueError) as exc:
        msg = (
            "'site.title_template' may only use the '{page_name}' and "
            f"'{{site_name}}' placeholders, got {template!r}."
        )
        raise SiteConfigError(msg) from exc

    robots_raw = raw.get("robots") or {}
    robots = RobotsDefaults(
        index=bool(robots_raw.get("index", True)),
        follow=bool(robots_raw.get("follow", True)),
        rules=_build_robots_rules(robots_raw.get("rules"), DEFAULT_ROBOTS_RULES),
    )

    return GlobalSEOConfig(
        site_name=site_name,
        site_url=site_url.rstrip("/"),
        title_template=template,
        default_description=_optional_str(site.get("description")) or "",
        default_keywords=_normalize_strings(site.get("keywords")),
        robots=robots,
        sitemap=_build_sitemap_defaults(raw.get("sitemap") or {}),
    )


def _build_sitemap_defaults(payload: typ.Mapping[str, typ.Any]) -> SitemapDefaults:
    """Merge the ``sitemap`` block over the built-in sitemap defaults."""
    base = SitemapDefaults()
    values: dict[str, typ.Any] = {}
    for name in (
        "default_priority",
        "homepage_priority",
        "posts_priority",
        "categories_priority",
    ):
        if name in payload:
            values[name] = _require_unit_interval(payload[name], field=f"sitemap.{name}")
    for name in (
        "default_change_frequency",
        "homepage_change_frequency",
        "posts_change_frequency",
        "categories_change_frequency",
    ):
        if name in payload:
            values[name] = _require_change_frequency(
                payload[name], field=f"sitemap.{name}"
            )
    if "excluded_pages" in payload:
        values["excluded_pages"] = _normalize_strings(payload["excluded_pages"])
    if "excluded_blog_patterns" in payload:
        values["excluded_blog_patterns"] = tuple(
            pattern.lower()
            for pattern in _normalize_strings(payload["excluded_blog_patterns"])
        )
    return SitemapDefaults(
        default_priority=values.get("default_priority", base.default_priority),
        default_change_frequency=values.get(
            "default_change_frequency", base.default_change_frequency
        ),
        homepage_priority=values.get("homepage_priority", base.homepage_priority),
        homepage_change_frequency=values.get(
            "homepage_change_frequency", base.homepage_change_frequency
        ),
        posts_priority=values.get("posts_priority", base.posts_priority),
        posts_change_frequency=values.get(
            "posts_change_frequency", base.posts_change_frequency
        ),
        categories_priority=values.get("categories_priority", base.categories_priority),
        categories_change_frequency=values.get(
            "categories_change_frequency", base.categories_change_frequency
        ),
        excluded_pages=values.get("excluded_pages", base.excluded_pages),
        excluded_blog_patterns=values.get(
            "excluded_blog_patterns", base.excluded_blog_patterns
        ),
    )


def _build_paths(payload: typ.Mapping[str, typ.Any]) -> BuildPaths:
    base = BuildPaths()
    return BuildPaths(
        app_dir=Path(payload.get("app_dir", base.app_dir)),
        blog_content_dir=Path(payload.get("blog_content_dir", base.blog_content_dir)),
        output_dir=Path(payload.get("output_dir", base.output_dir)),
    )


def _build_redirects(payload: list[typ.Any]) -> tuple[ManagedRedirectConfig, ...]:
    redirects: list[ManagedRedirectConfig] = []
    for item in payload:
        match item:
            case {"from": str() as source, "to": str() as target}:
                redirects.append(
                    ManagedRedirectConfig(
                        source=source,
                        target=target,
                        permanent=bool(item.get("permanent", True)),
                    )
                )
            case _:
                msg = f"Redirect entries need 'from' and 'to' strings, got {item!r}."
                raise SiteConfigError(msg)
    return tuple(redirects)


__all__ = ["load_site_config"]
