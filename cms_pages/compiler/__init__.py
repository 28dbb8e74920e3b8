"""Compile resolved SEO descriptors into the site's build artifacts.

The compiler produces the portable page manifest (``pages-config.json``), a
sitemap index with one sub-sitemap per collection, and ``robots.txt``. The
usual flow is :func:`compile_artifacts` followed by :func:`write_artifacts`.

Examples
--------
>>> from cms_pages.compiler import compile_artifacts, write_artifacts
>>> artifacts = compile_artifacts(descriptors, collections, site)  # doctest: +SKIP
>>> write_artifacts(artifacts, site.paths.output_dir)  # doctest: +SKIP
"""

from .artifact_compiler import (
    compile_artifacts,
    render_artifacts,
    write_artifacts,
    write_atomic,
)
from .manifest import (
    build_manifest,
    decode_manifest,
    encode_manifest,
    is_administrative,
    read_manifest,
)
from .models import (
    CompiledArtifacts,
    ManagedRedirect,
    ManifestEntry,
    ManifestError,
    RobotsDocument,
    SiteManifest,
    SitemapDocument,
    SitemapEntry,
    SitemapKind,
)
from .robots import build_robots, render_robots
from .sitemaps import build_sitemaps, parse_sitemap, render_sitemap

__all__ = [
    "CompiledArtifacts",
    "ManagedRedirect",
    "ManifestEntry",
    "ManifestError",
    "RobotsDocument",
    "SiteManifest",
    "SitemapDocument",
    "SitemapEntry",
    "SitemapKind",
    "build_manifest",
    "build_robots",
    "build_sitemaps",
    "compile_artifacts",
    "decode_manifest",
    "encode_manifest",
    "is_administrative",
    "parse_sitemap",
    "read_manifest",
    "render_artifacts",
    "render_robots",
    "render_sitemap",
    "write_artifacts",
    "write_atomic",
]
