"""Records produced by the artifact compiler."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import enum

import msgspec

from ..config import RobotsRule  # noqa: TC001 - used for runtime type metadata
from ..discovery import RenderMode


class ManifestError(ValueError):
    """Raised when a serialized manifest cannot be decoded."""


class ManifestEntry(msgspec.Struct, rename="camel", omit_defaults=True):
    """Display metadata for one static page.

    Attributes
    ----------
    slug : str
        Route path without the leading slash (``home`` for ``/``).
    title : str
        Admin-facing page title.
    path : str
        Route path, always starting with ``/``.
    category : str
        Editorial category, ``general`` unless a sidecar sets one.
    featured : bool
        Whether the page is featured in the admin list.
    draft : bool
        Whether the page is marked as a draft.
    is_home_page : bool
        True only for ``/``; serialized as ``isHomePage``.
    render_mode : RenderMode
        Heuristic render mode; serialized as ``renderMode``.
    last_modified : datetime or None
        Sidecar ``metadata.lastModified``; omitted when unset.
    """

    slug: str
    title: str
    path: str
    category: str
    featured: bool
    draft: bool
    is_home_page: bool
    render_mode: RenderMode
    last_modified: dt.datetime | None = None


class ManagedRedirect(msgspec.Struct):
    source: str = msgspec.field(name="from")
    target: str = msgspec.field(name="to")
    permanent: bool = True


class SiteManifest(msgspec.Struct):
    """Compiled snapshot read wherever the page tree is unavailable."""

    pages: list[ManifestEntry] = msgspec.field(default_factory=list)
    routes: list[str] = msgspec.field(default_factory=list)
    redirects: list[ManagedRedirect] = msgspec.field(default_factory=list)


class SitemapKind(enum.StrEnum):
    INDEX = "index"
    PAGES = "pages"
    POSTS = "posts"
    CATEGORIES = "categories"


@dc.dataclass(frozen=True, slots=True)
class SitemapEntry:
    """One ``<url>`` (or ``<sitemap>`` in an index) of a sitemap document."""

    url: str
    last_modified: dt.datetime
    change_frequency: str | None = None
    priority: float | None = None


@dc.dataclass(frozen=True, slots=True)
class SitemapDocument:
    """A sitemap index or one per-collection sub-document."""

    kind: SitemapKind
    url: str
    entries: tuple[SitemapEntry, ...] = ()
    message: str | None = None

    @property
    def latest_modified(self) -> dt.datetime | None:
        if not self.entries:
            return None
        return max(entry.last_modified for entry in self.entries)


@dc.dataclass(frozen=True, slots=True)
class RobotsDocument:
    rules: tuple[RobotsRule, ...]
    sitemap_url: str


@dc.dataclass(frozen=True, slots=True)
class CompiledArtifacts:
    """Everything one compile produces, before serialization."""

    manifest: SiteManifest
    sitemaps: dict[str, SitemapDocument]
    robots: RobotsDocument


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
]
