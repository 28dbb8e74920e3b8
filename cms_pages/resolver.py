"""Merge global SEO defaults with per-route overrides.

The resolver turns a :class:`~cms_pages.discovery.RouteNode`, its optional
:class:`~cms_pages.sidecar.SidecarOverride`, and the immutable
:class:`~cms_pages.config.GlobalSEOConfig` into one
:class:`ResolvedSEODescriptor`. Sidecar fields always win over derived
defaults; the global record only supplies templates and fallbacks.

Two rules keep the search-engine view safe:

* a page that must not be indexed is always excluded from the sitemap, even
  when its sidecar asks for inclusion;
* client-rendered pages have no resolvable metadata, so their SEO and sitemap
  overrides are ignored and they never appear in a sitemap.

Pages under ``/blog`` are left out of the pages sitemap; the blog content
collections publish those URLs instead.

Example
-------
>>> from cms_pages.resolver import resolve
>>> descriptor = resolve(node, store.get(node.route_path), config.seo)  # doctest: +SKIP
>>> descriptor.sitemap.priority  # doctest: +SKIP
0.5
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import datetime as dt
import logging
import typing as typ

import msgspec

from ._constants import BLOG_PREFIX, CHANGE_FREQUENCIES, HOME_TITLE
from .config.helpers import _parse_timestamp
from .discovery import RenderMode

if typ.TYPE_CHECKING:
    from .config import GlobalSEOConfig
    from .discovery import RouteNode
    from .sidecar import SidecarOverride

logger = logging.getLogger(__name__)


class SEOValidationError(ValueError):
    """Raised when an override carries an out-of-range or unknown value."""

    def __init__(self, route_path: str, message: str) -> None:
        super().__init__(f"{route_path}: {message}")
        self.route_path = route_path


@dc.dataclass(frozen=True, slots=True)
class RobotsDirectives:
    index: bool = True
    follow: bool = True


@dc.dataclass(frozen=True, slots=True)
class SitemapSettings:
    priority: float
    change_frequency: str
    excluded: bool = False


@dc.dataclass(frozen=True, slots=True)
class PageMetadata:
    """Admin-facing display metadata carried into the manifest."""

    category: str = "general"
    featured: bool = False
    draft: bool = False
    last_modified: dt.datetime | None = None


@dc.dataclass(frozen=True, slots=True)
class ResolvedSEODescriptor:
    """Fully resolved SEO view of one route."""

    node: RouteNode
    page_name: str
    title: str
    description: str
    keywords: frozenset[str]
    canonical: str
    robots: RobotsDirectives
    sitemap: SitemapSettings
    metadata: PageMetadata

    @property
    def route_path(self) -> str:
        return self.node.route_path

    @property
    def last_modified(self) -> dt.datetime:
        """Sidecar timestamp when present, otherwise the page file's mtime."""
        return self.metadata.last_modified or self.node.modified_at


def admin_title(node: RouteNode, override: SidecarOverride | None = None) -> str:
    """Return the title an editor sees for ``node`` in the admin page list.

    The home page is always ``Home``. Other routes use the sidecar SEO title
    when one is set, else their last path segment in title case.
    """
    if node.is_home:
        return HOME_TITLE
    if override is not None and override.seo is not None and override.seo.title:
        return override.seo.title
    segment = node.segments[-1]
    return " ".join(word.capitalize() for word in segment.replace("_", "-").split("-"))


def _is_listed(route_path: str, patterns: cabc.Iterable[str]) -> bool:
    for pattern in patterns:
        prefix = pattern.rstrip("/")
        if not prefix:
            continue
        if route_path == prefix or route_path.startswith(f"{prefix}/"):
            return True
    return False


def _validated_priority(route_path: str, value: float | None, default: float) -> float:
    if value is None:
        return default
    if not 0.0 <= value <= 1.0:
        raise SEOValidationError(
            route_path, f"sitemap priority must be between 0 and 1, got {value}"
        )
    return float(value)


def _validated_frequency(route_path: str, value: str | None, default: str) -> str:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized not in CHANGE_FREQUENCIES:
        raise SEOValidationError(
            route_path, f"unknown sitemap change frequency {value!r}"
        )
    return normalized


def _resolve_metadata(override: SidecarOverride | None, node: RouteNode) -> PageMetadata:
    meta = override.metadata if override is not None else None
    if meta is None:
        return PageMetadata(
            category="homepage" if node.is_home else "general",
            featured=node.is_home,
        )
    return PageMetadata(
        category=meta.category or ("homepage" if node.is_home else "general"),
        featured=node.is_home if meta.featured is None else meta.featured,
        draft=bool(meta.draft),
        last_modified=_parse_timestamp(meta.last_modified),
    )


def resolve(
    node: RouteNode,
    override: SidecarOverride | None,
    config: GlobalSEOConfig,
) -> ResolvedSEODescriptor:
    """Resolve the SEO descriptor for one route.

    Parameters
    ----------
    node : RouteNode
        Route produced by discovery.
    override : SidecarOverride or None
        The route's sidecar record; ``None`` when the route has none.
    config : GlobalSEOConfig
        Immutable global defaults for this run.

    Returns
    -------
    ResolvedSEODescriptor
        Descriptor honouring ``robots.index is False`` ⟹ ``sitemap.excluded``.

    Raises
    ------
    SEOValidationError
        If the override's sitemap priority lies outside [0, 1] or its change
        frequency is unknown.
    """
    is_client = node.render_mode is RenderMode.CLIENT
    seo_override = None if is_client or override is None else override.seo
    sitemap_override = None if is_client or override is None else override.sitemap
    alternates = None if is_client or override is None else override.alternates
    defaults = config.sitemap

    page_name = admin_title(node, None if is_client else override)
    if seo_override is not None and seo_override.title:
        title = seo_override.title
    else:
        title = config.title_template.format(
            page_name=page_name, site_name=config.site_name
        )

    description = config.default_description
    keywords = frozenset(config.default_keywords)
    canonical = config.absolute_url(node.route_path)
    no_index = no_follow = False
    if seo_override is not None:
        description = seo_override.description or description
        if seo_override.keywords:
            keywords = frozenset(k.strip() for k in seo_override.keywords if k.strip())
        no_index = bool(seo_override.no_index)
        no_follow = bool(seo_override.no_follow)
    if alternates is not None and alternates.canonical:
        canonical = alternates.canonical
    robots = RobotsDirectives(
        index=config.robots.index and not no_index,
        follow=config.robots.follow and not no_follow,
    )

    default_priority = (
        defaults.homepage_priority if node.is_home else defaults.default_priority
    )
    default_frequency = (
        defaults.homepage_change_frequency
        if node.is_home
        else defaults.default_change_frequency
    )
    priority = _validated_priority(
        node.route_path,
        sitemap_override.priority if sitemap_override else None,
        default_priority,
    )
    change_frequency = _validated_frequency(
        node.route_path,
        sitemap_override.change_frequency if sitemap_override else None,
        default_frequency,
    )
    excluded = (
        bool(sitemap_override and sitemap_override.exclude)
        or not robots.index
        or is_client
        or node.is_dynamic
        or _is_listed(node.route_path, (*defaults.excluded_pages, BLOG_PREFIX))
    )

    return ResolvedSEODescriptor(
        node=node,
        page_name=page_name,
        title=title,
        description=description,
        keywords=keywords,
        canonical=canonical,
        robots=robots,
        sitemap=SitemapSettings(
            priority=priority,
            change_frequency=change_frequency,
            excluded=excluded,
        ),
        metadata=_resolve_metadata(override, node),
    )


def _without_invalid_sitemap_values(
    override: SidecarOverride | None,
) -> SidecarOverride | None:
    """Clear an out-of-range priority or unknown frequency, keeping the rest."""
    if override is None or override.sitemap is None:
        return override
    sitemap = override.sitemap
    priority = sitemap.priority
    if priority is not None and not 0.0 <= priority <= 1.0:
        priority = None
    frequency = sitemap.change_frequency
    if frequency is not None and frequency.strip().lower() not in CHANGE_FREQUENCIES:
        frequency = None
    return msgspec.structs.replace(
        override,
        sitemap=msgspec.structs.replace(
            sitemap, priority=priority, change_frequency=frequency
        ),
    )


def resolve_all(
    routes: cabc.Iterable[RouteNode],
    overrides: cabc.Mapping[str, SidecarOverride],
    config: GlobalSEOConfig,
) -> tuple[list[ResolvedSEODescriptor], list[SEOValidationError]]:
    """Resolve every route, replacing invalid sitemap values with defaults.

    Only the offending priority or change frequency is dropped; robots and
    exclusion directives from the same sidecar still apply.

    Returns
    -------
    tuple[list[ResolvedSEODescriptor], list[SEOValidationError]]
        Descriptors ordered by route path, and the validation errors that
        caused a route to fall back to a default sitemap value.
    """
    descriptors: list[ResolvedSEODescriptor] = []
    problems: list[SEOValidationError] = []
    for node in sorted(routes, key=lambda item: item.route_path):
        override = overrides.get(node.route_path)
        try:
            descriptors.append(resolve(node, override, config))
        except SEOValidationError as exc:
            logger.warning("Invalid sitemap value, using the default: %s", exc)
            problems.append(exc)
            descriptors.append(
                resolve(node, _without_invalid_sitemap_values(override), config)
            )
    return descriptors, problems


__all__ = [
    "PageMetadata",
    "ResolvedSEODescriptor",
    "RobotsDirectives",
    "SEOValidationError",
    "SitemapSettings",
    "admin_title",
    "resolve",
    "resolve_all",
]
