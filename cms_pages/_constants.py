"""Common literal values used across cms_pages.

These constants keep filenames, URL prefixes, and cookie names centralized so
discovery, the compiler, the gate, and tests import the same values without
drifting. Intended for internal use within the cms_pages package.

Examples
--------
>>> from cms_pages import _constants
>>> _constants.PAGE_FILENAMES[0]
'page.tsx'
>>> _constants.SITEMAP_DOCUMENTS["pages"].path
'/sitemap/pages'
"""

from __future__ import annotations

import typing as typ

PAGE_FILENAMES = ("page.tsx", "page.jsx", "page.ts", "page.js")
SIDECAR_FILENAME = "seo-config.json"
MANIFEST_FILENAME = "pages-config.json"
ROBOTS_FILENAME = "robots.txt"

HOME_PATH = "/"
HOME_TITLE = "Home"
HOME_SLUG = "home"

ADMIN_PREFIX = "/admin"
ADMIN_API_PREFIX = "/api/admin"
API_PREFIX = "/api"
BLOG_PREFIX = "/blog"
CREDENTIAL_COOKIE = "admin-token"


class SitemapTarget(typ.NamedTuple):
    """Canonical URL path and output filename of one sitemap document."""

    path: str
    filename: str


SITEMAP_DOCUMENTS: dict[str, SitemapTarget] = {
    "index": SitemapTarget("/sitemap", "sitemap/index.xml"),
    "pages": SitemapTarget("/sitemap/pages", "sitemap/pages.xml"),
    "posts": SitemapTarget("/sitemap/blog-posts", "sitemap/blog-posts.xml"),
    "categories": SitemapTarget(
        "/sitemap/blog-categories", "sitemap/blog-categories.xml"
    ),
}

CONTENT_COLLECTIONS = ("posts", "categories")

CHANGE_FREQUENCIES = frozenset(
    {"always", "hourly", "daily", "weekly", "monthly", "yearly", "never"}
)
