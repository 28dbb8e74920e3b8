"""Unit tests for projecting blog content into sitemap collections."""

from __future__ import annotations

import datetime as dt
import json
import typing as typ

from cms_pages.content import load_blog_collections, load_blog_posts

if typ.TYPE_CHECKING:
    from pathlib import Path

    from conftest import BlogTree

    from cms_pages.config import GlobalSEOConfig


def _urls(collection: typ.Any) -> list[str]:
    return [entry.url for entry in collection.entries]


def test_published_posts_and_categories(
    blog_tree: BlogTree, seo_config: GlobalSEOConfig
) -> None:
    blog_tree.post("seo", "keyword-research", updatedAt="2025-02-10T09:00:00Z")
    blog_tree.post("seo", "site-speed", publishedAt="2025-01-20T00:00:00Z")
    blog_tree.post("design", "colour-theory", publishedAt="2025-03-01T12:00:00Z")
    blog_tree.post("design", "draft-post", draft=True)
    blog_tree.post("news", "hidden", excludeFromSearch=True)
    blog_tree.post("seo", "example-article")

    collections = load_blog_collections(blog_tree.root, seo_config)

    posts = collections["posts"]
    assert _urls(posts) == [
        "https://example.com/blog/design/colour-theory",
        "https://example.com/blog/seo/keyword-research",
        "https://example.com/blog/seo/site-speed",
    ]
    assert {entry.priority for entry in posts} == {0.6}
    assert {entry.change_frequency for entry in posts} == {"weekly"}

    categories = collections["categories"]
    assert _urls(categories) == [
        "https://example.com/blog",
        "https://example.com/blog/design",
        "https://example.com/blog/seo",
    ]
    blog_index, design, seo = categories.entries
    assert blog_index.last_modified == dt.datetime(2025, 3, 1, 12, tzinfo=dt.UTC)
    assert design.last_modified == dt.datetime(2025, 3, 1, 12, tzinfo=dt.UTC)
    assert seo.last_modified == dt.datetime(2025, 2, 10, 9, tzinfo=dt.UTC)
    assert seo.priority == 0.7


def test_missing_blog_root_yields_empty_collections(
    tmp_path: Path, seo_config: GlobalSEOConfig
) -> None:
    collections = load_blog_collections(tmp_path / "nothing-here", seo_config)

    assert len(collections["posts"]) == 0
    assert len(collections["categories"]) == 0
    assert collections["posts"].empty_message


def test_categories_index_without_posts_lists_nothing(
    blog_tree: BlogTree, seo_config: GlobalSEOConfig
) -> None:
    (blog_tree.root / "categories.json").write_text(
        json.dumps([{"slug": "seo", "name": "SEO"}]), encoding="utf-8"
    )

    collections = load_blog_collections(blog_tree.root, seo_config)

    assert collections["categories"].entries == ()


def test_malformed_post_is_skipped(blog_tree: BlogTree) -> None:
    blog_tree.post(None, "welcome", publishedAt="2025-01-05")
    (blog_tree.root / "broken.json").write_text("{", encoding="utf-8")

    posts = load_blog_posts(blog_tree.root)

    assert [post.path for post in posts] == ["/blog/welcome"]
