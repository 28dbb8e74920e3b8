"""Unit tests for sidecar decoding, the sidecar store, and scaffolding."""

from __future__ import annotations

import json
import logging
import typing as typ

import pytest

from cms_pages.discovery import discover_routes
from cms_pages.sidecar import (
    SidecarError,
    SidecarStore,
    decode_sidecar,
    ensure_sidecars,
)

if typ.TYPE_CHECKING:
    from conftest import PageTree


def test_decode_reads_camel_case_fields() -> None:
    payload = {
        "slug": "pricing",
        "seo": {"title": "Plans", "noIndex": True, "keywords": ["plans"]},
        "alternates": {
            "canonical": "https://example.com/plans",
            "languages": {"de": "https://example.com/de/plans"},
        },
        "sitemap": {"exclude": False, "priority": 0.8, "changeFrequency": "weekly"},
        "metadata": {"draft": True, "featured": False, "lastModified": "2025-02-01"},
    }

    override = decode_sidecar(json.dumps(payload))

    assert override.seo is not None
    assert override.seo.title == "Plans"
    assert override.seo.no_index is True
    assert override.sitemap is not None
    assert override.sitemap.change_frequency == "weekly"
    assert override.metadata is not None
    assert override.metadata.last_modified == "2025-02-01"
    assert override.alternates is not None
    assert override.alternates.canonical == "https://example.com/plans"
    assert override.alternates.languages == {"de": "https://example.com/de/plans"}


@pytest.mark.parametrize(
    "payload",
    ["{not json", '{"sitemap": {"priority": "high"}}', "[]"],
)
def test_decode_rejects_malformed_records(payload: str) -> None:
    with pytest.raises(SidecarError):
        decode_sidecar(payload)


def test_store_loads_valid_and_skips_malformed(
    page_tree: PageTree, caplog: pytest.LogCaptureFixture
) -> None:
    page_tree.add("pricing", sidecar={"metadata": {"draft": True}})
    broken = page_tree.add("contact")
    (broken.parent / "seo-config.json").write_text("{oops", encoding="utf-8")
    page_tree.add("privacy")

    with caplog.at_level(logging.WARNING, logger="cms_pages.sidecar"):
        store = SidecarStore.load(discover_routes(page_tree.root))

    assert list(store) == ["/pricing"]
    assert store.get("/privacy") is None
    assert "/contact" in caplog.text


def test_ensure_sidecars_only_creates_missing_static_server_records(
    page_tree: PageTree, client_source: str
) -> None:
    page_tree.add("")
    page_tree.add("pricing", sidecar={"slug": "pricing"})
    page_tree.add("contact", client_source)
    page_tree.add("blog/[slug]")
    page_tree.add("services/seo")
    routes = discover_routes(page_tree.root)

    created = ensure_sidecars(routes, SidecarStore.load(routes))

    assert created == [
        page_tree.root / "seo-config.json",
        page_tree.root / "services" / "seo" / "seo-config.json",
    ]
    starter = decode_sidecar(created[1].read_bytes())
    assert starter.slug == "seo"
    assert starter.seo is not None
    assert decode_sidecar(created[0].read_bytes()).slug == "home"

    assert ensure_sidecars(routes, SidecarStore.load(routes)) == []
