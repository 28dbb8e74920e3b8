"""Unit tests for merging global SEO defaults with per-route overrides."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path

import pytest

from cms_pages.config import GlobalSEOConfig
from cms_pages.discovery import RenderMode, RouteKind, RouteNode
from cms_pages.resolver import SEOValidationError, resolve, resolve_all
from cms_pages.sidecar import (
    AlternatesOverride,
    MetadataOverride,
    SeoOverride,
    SidecarOverride,
    SitemapOverride,
)

MTIME = dt.datetime(2025, 1, 1, tzinfo=dt.UTC)


def _node(
    route_path: str,
    *,
    kind: RouteKind = RouteKind.STATIC,
    mode: RenderMode = RenderMode.SERVER,
) -> RouteNode:
    return RouteNode(
        route_path=route_path,
        kind=kind,
        render_mode=mode,
        source_location=Path("src/app") / route_path.lstrip("/") / "page.tsx",
        modified_at=MTIME,
    )


def test_defaults_for_plain_page(seo_config: GlobalSEOConfig) -> None:
    descriptor = resolve(_node("/terms-of-service"), None, seo_config)

    assert descriptor.page_name == "Terms Of Service"
    assert descriptor.title == "Terms Of Service | Valiance Media"
    assert descriptor.canonical == "https://example.com/terms-of-service"
    assert descriptor.sitemap.priority == 0.5
    assert descriptor.sitemap.change_frequency == "monthly"
    assert descriptor.sitemap.excluded is False
    assert descriptor.metadata.category == "general"
    assert descriptor.last_modified == MTIME


def test_home_page_defaults(seo_config: GlobalSEOConfig) -> None:
    descriptor = resolve(_node("/"), None, seo_config)

    assert descriptor.title == "Home | Valiance Media"
    assert descriptor.sitemap.priority == 1.0
    assert descriptor.sitemap.change_frequency == "weekly"
    assert descriptor.metadata.category == "homepage"
    assert descriptor.metadata.featured is True


def test_sidecar_fields_win(seo_config: GlobalSEOConfig) -> None:
    override = SidecarOverride(
        seo=SeoOverride(
            title="Plans and Pricing",
            description="Simple plans.",
            keywords=[" plans ", "", "pricing"],
        ),
        alternates=AlternatesOverride(canonical="https://example.com/plans"),
        sitemap=SitemapOverride(priority=0.9, change_frequency="Weekly"),
        metadata=MetadataOverride(
            category="sales", draft=True, featured=False, last_modified="2025-03-04"
        ),
    )

    descriptor = resolve(_node("/pricing"), override, seo_config)

    assert descriptor.page_name == "Plans and Pricing"
    assert descriptor.title == "Plans and Pricing"
    assert descriptor.description == "Simple plans."
    assert descriptor.keywords == frozenset({"plans", "pricing"})
    assert descriptor.canonical == "https://example.com/plans"
    assert descriptor.sitemap.priority == 0.9
    assert descriptor.sitemap.change_frequency == "weekly"
    assert descriptor.metadata.draft is True
    assert descriptor.last_modified == dt.datetime(2025, 3, 4, tzinfo=dt.UTC)


@pytest.mark.parametrize("exclude", [None, False, True])
def test_no_index_always_excludes_from_sitemap(
    seo_config: GlobalSEOConfig, exclude: bool | None
) -> None:
    override = SidecarOverride(
        seo=SeoOverride(no_index=True), sitemap=SitemapOverride(exclude=exclude)
    )

    descriptor = resolve(_node("/landing"), override, seo_config)

    assert descriptor.robots.index is False
    assert descriptor.sitemap.excluded is True


def test_client_route_ignores_seo_and_sitemap_overrides(
    seo_config: GlobalSEOConfig,
) -> None:
    override = SidecarOverride(
        seo=SeoOverride(title="Get in touch"),
        alternates=AlternatesOverride(canonical="https://example.com/get-in-touch"),
        sitemap=SitemapOverride(exclude=False, priority=0.9),
        metadata=MetadataOverride(draft=True),
    )

    descriptor = resolve(_node("/contact", mode=RenderMode.CLIENT), override, seo_config)

    assert descriptor.page_name == "Contact"
    assert descriptor.title == "Contact | Valiance Media"
    assert descriptor.canonical == "https://example.com/contact"
    assert descriptor.sitemap.priority == 0.5
    assert descriptor.sitemap.excluded is True
    assert descriptor.metadata.draft is True


@pytest.mark.parametrize(
    "route_path",
    ["/dashboard", "/dashboard/stats", "/test", "/blog", "/blog/news"],
)
def test_listed_prefixes_are_excluded(
    seo_config: GlobalSEOConfig, route_path: str
) -> None:
    assert resolve(_node(route_path), None, seo_config).sitemap.excluded is True


def test_similar_prefix_is_not_excluded(seo_config: GlobalSEOConfig) -> None:
    assert resolve(_node("/testimonials"), None, seo_config).sitemap.excluded is False


def test_dynamic_route_is_excluded(seo_config: GlobalSEOConfig) -> None:
    node = _node("/case-studies/[slug]", kind=RouteKind.DYNAMIC)

    assert resolve(node, None, seo_config).sitemap.excluded is True


@pytest.mark.parametrize(
    "sitemap",
    [
        SitemapOverride(priority=1.5),
        SitemapOverride(priority=-0.1),
        SitemapOverride(change_frequency="fortnightly"),
    ],
)
def test_invalid_sitemap_values_raise(
    seo_config: GlobalSEOConfig, sitemap: SitemapOverride
) -> None:
    with pytest.raises(SEOValidationError, match="/pricing"):
        resolve(_node("/pricing"), SidecarOverride(sitemap=sitemap), seo_config)


def test_resolve_all_falls_back_to_defaults(
    seo_config: GlobalSEOConfig, caplog: pytest.LogCaptureFixture
) -> None:
    routes = [_node("/pricing"), _node("/")]
    overrides = {
        "/pricing": SidecarOverride(
            seo=SeoOverride(title="Pricing Plans"),
            sitemap=SitemapOverride(priority=3.0, change_frequency="daily"),
        )
    }

    with caplog.at_level(logging.WARNING, logger="cms_pages.resolver"):
        descriptors, problems = resolve_all(routes, overrides, seo_config)

    assert [item.route_path for item in descriptors] == ["/", "/pricing"]
    pricing = descriptors[1]
    assert pricing.sitemap.priority == 0.5
    assert pricing.sitemap.change_frequency == "daily"
    assert pricing.page_name == "Pricing Plans"
    assert pricing.title == "Pricing Plans"
    assert [problem.route_path for problem in problems] == ["/pricing"]
    assert "Invalid sitemap value" in caplog.text


@pytest.mark.parametrize(
    "sitemap",
    [
        SitemapOverride(priority=1.5),
        SitemapOverride(exclude=False, change_frequency="fortnightly"),
    ],
)
def test_resolve_all_keeps_no_index_when_sitemap_value_is_invalid(
    seo_config: GlobalSEOConfig, sitemap: SitemapOverride
) -> None:
    overrides = {
        "/landing": SidecarOverride(seo=SeoOverride(no_index=True), sitemap=sitemap)
    }

    descriptors, problems = resolve_all([_node("/landing")], overrides, seo_config)

    (landing,) = descriptors
    assert landing.robots.index is False
    assert landing.sitemap.excluded is True
    assert landing.sitemap.priority == 0.5
    assert landing.sitemap.change_frequency == "monthly"
    assert len(problems) == 1


def test_resolve_all_keeps_sitemap_exclude_when_priority_is_invalid(
    seo_config: GlobalSEOConfig,
) -> None:
    overrides = {
        "/pricing": SidecarOverride(
            sitemap=SitemapOverride(exclude=True, priority=-1.0),
            alternates=AlternatesOverride(canonical="https://example.com/plans"),
        )
    }

    descriptors, _ = resolve_all([_node("/pricing")], overrides, seo_config)

    assert descriptors[0].sitemap.excluded is True
    assert descriptors[0].canonical == "https://example.com/plans"
