"""Per-route sidecar override records stored beside page definitions.

The admin CRUD screens write one optional ``seo-config.json`` into a page's
directory. This module decodes those records into typed
:class:`SidecarOverride` structs and exposes them as a read-only key-value store
keyed by route path. A missing record is the common case and simply yields
``None``; a malformed record is logged against its route and treated as absent
so the compile falls back to global defaults.

Example
-------
.. code-block:: python

    from pathlib import Path
    from cms_pages.discovery import discover_routes
    from cms_pages.sidecar import SidecarStore

    routes = discover_routes(Path("src/app"))
    store = SidecarStore.load(routes)
    override = store.get("/pricing")
    if override and override.metadata:
        print(override.metadata.draft)
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ

import msgspec

from ._constants import SIDECAR_FILENAME
from .discovery import RenderMode

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .discovery import RouteNode

logger = logging.getLogger(__name__)


class SidecarError(ValueError):
    """Raised when a sidecar record cannot be decoded."""


class SeoOverride(msgspec.Struct, rename="camel", omit_defaults=True):
    """SEO fields an editor may override for one route."""

    title: str | None = None
    description: str | None = None
    keywords: list[str] | None = None
    image: str | None = None
    no_index: bool | None = None
    no_follow: bool | None = None


class SitemapOverride(msgspec.Struct, rename="camel", omit_defaults=True):
    """Sitemap controls for one route. Ranges are checked by the resolver."""

    exclude: bool | None = None
    priority: float | None = None
    change_frequency: str | None = None


class AlternatesOverride(msgspec.Struct, omit_defaults=True):
    """Canonical URL and language alternates for one route."""

    canonical: str | None = None
    languages: dict[str, str] | None = None


class MetadataOverride(msgspec.Struct, rename="camel", omit_defaults=True):
    """Display metadata shown in the admin page list."""

    category: str | None = None
    featured: bool | None = None
    draft: bool | None = None
    last_modified: str | None = None
    author: str | None = None
    tags: list[str] | None = None


class SidecarOverride(msgspec.Struct, rename="camel", omit_defaults=True):
    """A decoded ``seo-config.json`` record."""

    slug: str | None = None
    seo: SeoOverride | None = None
    sitemap: SitemapOverride | None = None
    metadata: MetadataOverride | None = None
    alternates: AlternatesOverride | None = None


def decode_sidecar(payload: bytes | str) -> SidecarOverride:
    """Decode a sidecar JSON document.

    Raises
    ------
    SidecarError
        If the payload is not valid JSON or a field has the wrong type.
    """
    try:
        return msgspec.json.decode(payload, type=SidecarOverride)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        msg = f"Malformed sidecar record: {exc}"
        raise SidecarError(msg) from exc


def encode_sidecar(override: SidecarOverride) -> bytes:
    """Encode ``override`` as indented JSON with a trailing newline."""
    return msgspec.json.format(msgspec.json.encode(override), indent=2) + b"\n"


def sidecar_path(node: RouteNode) -> Path:
    """Return where the sidecar for ``node`` lives."""
    return node.source_location.parent / SIDECAR_FILENAME


class SidecarStore(cabc.Mapping[str, SidecarOverride]):
    """Read-only mapping of route path to its sidecar override."""

    def __init__(self, records: cabc.Mapping[str, SidecarOverride] | None = None) -> None:
        self._records: dict[str, SidecarOverride] = dict(records or {})

    @classmethod
    def load(cls, routes: cabc.Iterable[RouteNode]) -> SidecarStore:
        """Read the sidecar beside every route that has one.

        Malformed records are logged and skipped; unreadable files likewise.
        """
        records: dict[str, SidecarOverride] = {}
        for node in sorted(routes, key=lambda item: item.route_path):
            path = sidecar_path(node)
            if not path.is_file():
                continue
            try:
                records[node.route_path] = decode_sidecar(path.read_bytes())
            except OSError as exc:
                logger.warning("Cannot read sidecar for %s: %s", node.route_path, exc)
            except SidecarError as exc:
                logger.warning("Ignoring sidecar for %s: %s", node.route_path, exc)
        return cls(records)

    def __getitem__(self, route_path: str) -> SidecarOverride:
        return self._records[route_path]

    def __iter__(self) -> cabc.Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)


def ensure_sidecars(routes: cabc.Iterable[RouteNode], store: SidecarStore) -> list[Path]:
    """Write a starter sidecar for every static server route that lacks one.

    Client-rendered and dynamic routes are skipped because their overrides are
    never applied. Existing files are left untouched.

    Returns
    -------
    list[Path]
        Paths of the sidecar files that were created.
    """
    written: list[Path] = []
    for node in sorted(routes, key=lambda item: item.route_path):
        if node.is_dynamic or node.render_mode is RenderMode.CLIENT:
            continue
        if node.route_path in store:
            continue
        path = sidecar_path(node)
        if path.exists():
            continue
        slug = "home" if node.is_home else node.segments[-1]
        starter = SidecarOverride(
            slug=slug,
            seo=SeoOverride(),
            sitemap=SitemapOverride(),
            metadata=MetadataOverride(),
        )
        path.write_bytes(encode_sidecar(starter))
        written.append(path)
    return written


__all__ = [
    "AlternatesOverride",
    "MetadataOverride",
    "SeoOverride",
    "SidecarError",
    "SidecarOverride",
    "SidecarStore",
    "SitemapOverride",
    "decode_sidecar",
    "encode_sidecar",
    "ensure_sidecars",
    "sidecar_path",
]
