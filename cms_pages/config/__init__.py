"""Load and validate the global site configuration for cms_pages builds.

This subpackage parses the project's ``site.yaml`` file into an immutable
:class:`SiteConfig` snapshot. The SEO resolver, artifact compiler, and CLI all
receive the same snapshot by reference; nothing mutates it mid-run. The primary
entry point is :func:`load_site_config`, which validates required fields,
applies sitemap and robots defaults, and rejects out-of-range priorities.

Examples
--------
>>> from pathlib import Path
>>> from cms_pages.config import load_site_config
>>> site = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> site.seo.absolute_url("/pricing")  # doctest: +SKIP
'https://example.com/pricing'
"""

from .loader import load_site_config
from .models import (
    BuildPaths,
    GlobalSEOConfig,
    ManagedRedirectConfig,
    RobotsDefaults,
    RobotsRule,
    SiteConfig,
    SiteConfigError,
    SitemapDefaults,
)

__all__ = [
    "BuildPaths",
    "GlobalSEOConfig",
    "ManagedRedirectConfig",
    "RobotsDefaults",
    "RobotsRule",
    "SiteConfig",
    "SiteConfigError",
    "SitemapDefaults",
    "load_site_config",
]
