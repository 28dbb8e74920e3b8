"""Typed dataclasses describing the global site configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(frozen=True, slots=True)
class RobotsRule:
    """One ``User-agent`` group of the generated robots document."""

    user_agent: str
    allow: tuple[str, ...] = ("/",)
    disallow: tuple[str, ...] = ()
    crawl_delay: int | None = None


DEFAULT_ROBOTS_RULES = (
    RobotsRule(
        user_agent="*",
        allow=("/",),
        disallow=("/api/", "/admin/", "/_next/", "/private/"),
    ),
)


@dc.dataclass(frozen=True, slots=True)
class RobotsDefaults:
    """Site-wide robots directives and robots.txt rules."""

    index: bool = True
    follow: bool = True
    rules: tuple[RobotsRule, ...] = DEFAULT_ROBOTS_RULES


@dc.dataclass(frozen=True, slots=True)
class SitemapDefaults:
    """Template defaults applied when a route or collection sets nothing."""

    default_priority: float = 0.5
    default_change_frequency: str = "monthly"
    homepage_priority: float = 1.0
    homepage_change_frequency: str = "weekly"
    posts_priority: float = 0.6
    posts_change_frequency: str = "weekly"
    categories_priority: float = 0.7
    categories_change_frequency: str = "monthly"
    excluded_pages: tuple[str, ...] = ("/admin", "/dashboard", "/api", "/test", "/dev")
    excluded_blog_patterns: tuple[str, ...] = ("example", "test", "demo", "sample")


@dc.dataclass(frozen=True, slots=True)
class GlobalSEOConfig:
    """Process-wide SEO defaults, loaded once per compiler run."""

    site_name: str
    site_url: str
    title_template: str = "{page_name} | {site_name}"
    default_description: str = ""
    default_keywords: tuple[str, ...] = ()
    robots: RobotsDefaults = dc.field(default_factory=RobotsDefaults)
    sitemap: SitemapDefaults = dc.field(default_factory=SitemapDefaults)

    def absolute_url(self, path: str) -> str:
        """Return ``path`` joined onto the configured site URL."""
        base = self.site_url.rstrip("/")
        return f"{base}/{path.lstrip('/')}"


@dc.dataclass(frozen=True, slots=True)
class ManagedRedirectConfig:
    """Admin-authored exact-path redirect."""

    source: str
    target: str
    permanent: bool = True


@dc.dataclass(frozen=True, slots=True)
class BuildPaths:
    """Filesystem locations read and written by the build commands."""

    app_dir: Path = Path("src/app")
    blog_content_dir: Path = Path("public/blog-content")
    output_dir: Path = Path("public")


@dc.dataclass(frozen=True, slots=True)
class SiteConfig:
    """Fully loaded site configuration snapshot."""

    seo: GlobalSEOConfig
    paths: BuildPaths = dc.field(default_factory=BuildPaths)
    redirects: tuple[ManagedRedirectConfig, ...] = ()


__all__ = [
    "DEFAULT_ROBOTS_RULES",
    "BuildPaths",
    "GlobalSEOConfig",
    "ManagedRedirectConfig",
    "RobotsDefaults",
    "RobotsRule",
    "SiteConfig",
    "SiteConfigError",
    "SitemapDefaults",
]
