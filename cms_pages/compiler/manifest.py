"""Build, encode, and decode the portable page manifest.

The manifest lists every static page outside the admin and blog trees with the
display metadata the admin screens and the route gate need. Blog URLs enter
through ``routes``, taken from the content collections. The home page is always
first; the rest are ordered by title, then path. Encoding is deterministic so
unchanged inputs produce byte-identical JSON.

Examples
--------
>>> from cms_pages.compiler.manifest import decode_manifest
>>> manifest = decode_manifest(b'{"pages": [], "routes": ["/blog"]}')
>>> manifest.routes
['/blog']
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from urllib.parse import urlparse

import msgspec

from .._constants import ADMIN_PREFIX, API_PREFIX, BLOG_PREFIX, HOME_SLUG
from .models import ManagedRedirect, ManifestEntry, ManifestError, SiteManifest

if typ.TYPE_CHECKING:
    from pathlib import Path

    from ..config import ManagedRedirectConfig
    from ..content import ContentCollection
    from ..resolver import ResolvedSEODescriptor


def is_administrative(route_path: str) -> bool:
    """Return True for admin UI and API routes, which never enter artifacts."""
    for prefix in (ADMIN_PREFIX, API_PREFIX):
        if route_path == prefix or route_path.startswith(f"{prefix}/"):
            return True
    return False


def is_blog_route(route_path: str) -> bool:
    return route_path == BLOG_PREFIX or route_path.startswith(f"{BLOG_PREFIX}/")


def manifest_entry(descriptor: ResolvedSEODescriptor) -> ManifestEntry:
    node = descriptor.node
    slug = HOME_SLUG if node.is_home else node.route_path.lstrip("/")
    return ManifestEntry(
        slug=slug,
        title=descriptor.page_name,
        path=node.route_path,
        category=descriptor.metadata.category,
        featured=descriptor.metadata.featured,
        draft=descriptor.metadata.draft,
        is_home_page=node.is_home,
        render_mode=node.render_mode,
        last_modified=descriptor.metadata.last_modified,
    )


def _manifest_sort_key(entry: ManifestEntry) -> tuple[int, str, str]:
    return (0 if entry.is_home_page else 1, entry.title.casefold(), entry.path)


def content_routes(collections: cabc.Mapping[str, ContentCollection]) -> list[str]:
    """Return the sorted set of URL paths published by ``collections``."""
    paths: set[str] = set()
    for collection in collections.values():
        for entry in collection.entries:
            paths.add(urlparse(entry.url).path or "/")
    return sorted(paths)


def build_manifest(
    descriptors: cabc.Iterable[ResolvedSEODescriptor],
    collections: cabc.Mapping[str, ContentCollection],
    redirects: cabc.Iterable[ManagedRedirectConfig] = (),
) -> SiteManifest:
    """Assemble the manifest from resolved descriptors and content routes."""
    entries = [
        manifest_entry(descriptor)
        for descriptor in descriptors
        if not descriptor.node.is_dynamic
        and not is_administrative(descriptor.route_path)
        and not is_blog_route(descriptor.route_path)
    ]
    entries.sort(key=_manifest_sort_key)
    return SiteManifest(
        pages=entries,
        routes=content_routes(collections),
        redirects=[
            ManagedRedirect(
                source=redirect.source,
                target=redirect.target,
                permanent=redirect.permanent,
            )
            for redirect in sorted(redirects, key=lambda item: item.source)
        ],
    )


def encode_manifest(manifest: SiteManifest) -> bytes:
    """Serialize ``manifest`` as indented JSON with a trailing newline."""
    return msgspec.json.format(msgspec.json.encode(manifest), indent=2) + b"\n"


def decode_manifest(payload: bytes | str) -> SiteManifest:
    """Decode a serialized manifest.

    Raises
    ------
    ManifestError
        If ``payload`` is not a valid manifest document.
    """
    try:
        return msgspec.json.decode(payload, type=SiteManifest)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        msg = f"Invalid page manifest: {exc}"
        raise ManifestError(msg) from exc


def read_manifest(path: Path) -> SiteManifest:
    """Read and decode the manifest stored at ``path``."""
    return decode_manifest(path.read_bytes())


__all__ = [
    "build_manifest",
    "content_routes",
    "decode_manifest",
    "encode_manifest",
    "is_administrative",
    "is_blog_route",
    "manifest_entry",
    "read_manifest",
]
