"""Content collections fed to the sitemap compiler.

Blog content lives outside the page tree as JSON records::

    blog-content/
        categories.json              # optional [{"slug": ..., "name": ...}]
        categories/<category>/<slug>.json
        <slug>.json                  # uncategorised posts

:func:`load_blog_collections` turns that tree into two
:class:`ContentCollection` objects, ``posts`` and ``categories``, whose entries
are already resolved (absolute URL, last-modified timestamp, priority, change
frequency). The compiler publishes them as given.

Drafts, posts flagged ``excludeFromSearch``, and posts whose slug contains one
of the configured example patterns are not published. A category is listed
only when it holds at least one published post, and the ``/blog`` index is
listed only when any post is published.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import datetime as dt
import logging
import typing as typ

import msgspec

from ._constants import BLOG_PREFIX
from .config.helpers import _parse_timestamp

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .config import GlobalSEOConfig

logger = logging.getLogger(__name__)

_SKIPPED_FILES = frozenset({"categories.json", "category-config.json"})


@dc.dataclass(frozen=True, slots=True)
class ContentCollectionEntry:
    """One already-resolved sitemap entry supplied by a content source."""

    url: str
    last_modified: dt.datetime
    priority: float
    change_frequency: str


@dc.dataclass(frozen=True, slots=True)
class ContentCollection:
    """Named, ordered sequence of content entries."""

    name: str
    entries: tuple[ContentCollectionEntry, ...] = ()
    empty_message: str = "No published content is available for this sitemap."

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> cabc.Iterator[ContentCollectionEntry]:
        return iter(self.entries)


class BlogPostRecord(msgspec.Struct, rename="camel"):
    """Fields of a stored blog post that matter to the sitemap."""

    slug: str | None = None
    title: str = ""
    category: str | None = None
    published_at: str | None = None
    updated_at: str | None = None
    draft: bool = False
    exclude_from_search: bool = False


class CategoryRecord(msgspec.Struct):
    slug: str
    name: str = ""


@dc.dataclass(frozen=True, slots=True)
class BlogPost:
    slug: str
    category: str | None
    last_modified: dt.datetime
    draft: bool
    exclude_from_search: bool

    @property
    def path(self) -> str:
        if self.category:
            return f"{BLOG_PREFIX}/{self.category}/{self.slug}"
        return f"{BLOG_PREFIX}/{self.slug}"


def is_published(post: BlogPost, excluded_patterns: cabc.Iterable[str]) -> bool:
    """Return True when ``post`` should be visible to search engines."""
    if post.draft or post.exclude_from_search:
        return False
    slug = post.slug.lower()
    return not any(pattern.lower() in slug for pattern in excluded_patterns)


def load_blog_posts(root: Path) -> list[BlogPost]:
    """Read every blog post record under ``root``.

    Malformed records are logged and skipped. A missing ``root`` yields an
    empty list because a site without a blog is valid.
    """
    if not root.is_dir():
        return []
    posts: list[BlogPost] = []
    for path in sorted(root.glob("*.json")):
        if path.name in _SKIPPED_FILES:
            continue
        post = _read_post(path, category=None)
        if post is not None:
            posts.append(post)
    categories_dir = root / "categories"
    if categories_dir.is_dir():
        for category_dir in sorted(p for p in categories_dir.iterdir() if p.is_dir()):
            for path in sorted(category_dir.glob("*.json")):
                if path.name in _SKIPPED_FILES or path.name.startswith("."):
                    continue
                post = _read_post(path, category=category_dir.name)
                if post is not None:
                    posts.append(post)
    return posts


def load_categories(root: Path) -> list[str]:
    """Return category slugs from ``categories.json`` and the categories tree."""
    slugs: set[str] = set()
    index = root / "categories.json"
    if index.is_file():
        try:
            records = msgspec.json.decode(index.read_bytes(), type=list[CategoryRecord])
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            logger.warning("Ignoring malformed %s: %s", index, exc)
        else:
            slugs.update(record.slug for record in records if record.slug)
    categories_dir = root / "categories"
    if categories_dir.is_dir():
        slugs.update(p.name for p in categories_dir.iterdir() if p.is_dir())
    return sorted(slugs)


def _read_post(path: Path, *, category: str | None) -> BlogPost | None:
    try:
        record = msgspec.json.decode(path.read_bytes(), type=BlogPostRecord)
        modified = path.stat().st_mtime
    except OSError as exc:
        logger.warning("Cannot read blog post %s: %s", path, exc)
        return None
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        logger.warning("Ignoring malformed blog post %s: %s", path, exc)
        return None
    last_modified = (
        _parse_timestamp(record.updated_at)
        or _parse_timestamp(record.published_at)
        or dt.datetime.fromtimestamp(int(modified), dt.UTC)
    )
    return BlogPost(
        slug=record.slug or path.stem,
        category=category or record.category,
        last_modified=last_modified,
        draft=record.draft,
        exclude_from_search=record.exclude_from_search,
    )


def build_blog_collections(
    posts: cabc.Iterable[BlogPost],
    categories: cabc.Iterable[str],
    config: GlobalSEOConfig,
) -> dict[str, ContentCollection]:
    """Project blog posts and categories into resolved content collections."""
    defaults = config.sitemap
    published = sorted(
        (post for post in posts if is_published(post, defaults.excluded_blog_patterns)),
        key=lambda post: post.path,
    )
    post_entries = tuple(
        ContentCollectionEntry(
            url=config.absolute_url(post.path),
            last_modified=post.last_modified,
            priority=defaults.posts_priority,
            change_frequency=defaults.posts_change_frequency,
        )
        for post in published
    )

    category_entries: list[ContentCollectionEntry] = []
    if published:
        category_entries.append(
            ContentCollectionEntry(
                url=config.absolute_url(BLOG_PREFIX),
                last_modified=max(post.last_modified for post in published),
                priority=defaults.categories_priority,
                change_frequency=defaults.categories_change_frequency,
            )
        )
        for slug in sorted(set(categories)):
            in_category = [post for post in published if post.category == slug]
            if not in_category:
                continue
            category_entries.append(
                ContentCollectionEntry(
                    url=config.absolute_url(f"{BLOG_PREFIX}/{slug}"),
                    last_modified=max(post.last_modified for post in in_category),
                    priority=defaults.categories_priority,
                    change_frequency=defaults.categories_change_frequency,
                )
            )

    return {
        "posts": ContentCollection(
            name="posts",
            entries=post_entries,
            empty_message="No published blog posts are available yet.",
        ),
        "categories": ContentCollection(
            name="categories",
            entries=tuple(category_entries),
            empty_message="No blog categories with published posts are available yet.",
        ),
    }


def load_blog_collections(
    root: Path, config: GlobalSEOConfig
) -> dict[str, ContentCollection]:
    """Load the blog content tree at ``root`` into ``posts``/``categories``."""
    posts = load_blog_posts(root)
    categories = load_categories(root) if root.is_dir() else []
    categories = sorted(set(categories) | {p.category for p in posts if p.category})
    return build_blog_collections(posts, categories, config)


__all__ = [
    "BlogPost",
    "ContentCollection",
    "ContentCollectionEntry",
    "build_blog_collections",
    "is_published",
    "load_blog_collections",
    "load_blog_posts",
    "load_categories",
]
