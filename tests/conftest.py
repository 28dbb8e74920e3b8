"""Shared fixtures for building page trees, blog content, and site configs."""

from __future__ import annotations

import datetime as dt
import json
import os
import typing as typ
from textwrap import dedent

import pytest

from cms_pages.config import GlobalSEOConfig, SiteConfig

if typ.TYPE_CHECKING:
    from pathlib import Path

# 2025-01-01T00:00:00Z
FIXED_MTIME = 1_735_689_600

SERVER_SOURCE = dedent(
    """
    export default function Page() {
      return <main>Static content</main>;
    }
    """
)

CLIENT_SOURCE = dedent(
    """
    'use client'
    import { useState } from 'react';

    export default function Page() {
      const [open, setOpen] = useState(false);
      return <button onClick={() => setOpen(!open)}>Toggle</button>;
    }
    """
)


class PageTree:
    """Write ``page.tsx`` files and sidecars beneath a temporary app root."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def add(
        self,
        relative: str,
        source: str = SERVER_SOURCE,
        *,
        sidecar: dict[str, typ.Any] | None = None,
        filename: str = "page.tsx",
        mtime: int = FIXED_MTIME,
    ) -> Path:
        directory = self.root / relative if relative else self.root
        directory.mkdir(parents=True, exist_ok=True)
        page = directory / filename
        page.write_text(source, encoding="utf-8")
        os.utime(page, (mtime, mtime))
        if sidecar is not None:
            (directory / "seo-config.json").write_text(
                json.dumps(sidecar), encoding="utf-8"
            )
        return page


class BlogTree:
    """Write blog post records in the ``categories/<category>/<slug>.json`` layout."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def post(self, category: str | None, slug: str, **fields: typ.Any) -> Path:
        directory = self.root / "categories" / category if category else self.root
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{slug}.json"
        record = {"slug": slug, "title": slug.replace("-", " ").title(), **fields}
        path.write_text(json.dumps(record), encoding="utf-8")
        os.utime(path, (FIXED_MTIME, FIXED_MTIME))
        return path


@pytest.fixture
def page_tree(tmp_path: Path) -> PageTree:
    return PageTree(tmp_path / "src" / "app")


@pytest.fixture
def blog_tree(tmp_path: Path) -> BlogTree:
    return BlogTree(tmp_path / "public" / "blog-content")


@pytest.fixture
def seo_config() -> GlobalSEOConfig:
    return GlobalSEOConfig(site_name="Valiance Media", site_url="https://example.com")


@pytest.fixture
def site_config(seo_config: GlobalSEOConfig) -> SiteConfig:
    return SiteConfig(seo=seo_config)


@pytest.fixture
def site_yaml(tmp_path: Path) -> Path:
    """Write a complete ``site.yaml`` whose paths point inside ``tmp_path``."""
    path = tmp_path / "config" / "site.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        dedent(
            f"""
            site:
              name: Valiance Media
              url: https://example.com/
              description: Websites that rank.
              keywords: [seo, web design]
            sitemap:
              default_priority: 0.5
              default_change_frequency: monthly
            paths:
              app_dir: {tmp_path / "src" / "app"}
              blog_content_dir: {tmp_path / "public" / "blog-content"}
              output_dir: {tmp_path / "public"}
            redirects:
              - from: /old-pricing
                to: /pricing
                permanent: true
              - from: /promo
                to: /pricing
                permanent: false
            """
        ).lstrip(),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def client_source() -> str:
    return CLIENT_SOURCE


@pytest.fixture
def fixed_mtime() -> dt.datetime:
    return dt.datetime.fromtimestamp(FIXED_MTIME, dt.UTC)
