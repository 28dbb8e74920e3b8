"""Partition resolved routes and content into a two-tier sitemap.

The index document points at one sub-document per collection: static pages,
blog posts, and blog categories. Every sub-document is always produced; an
empty one carries an explanatory message instead of being omitted, so crawlers
never follow an index entry into a 404.

No wall-clock time is consulted. Page timestamps come from sidecars or page
file modification times, content timestamps from the content source, and the
index uses the newest timestamp of each sub-document.
"""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt
import typing as typ
from xml.etree import ElementTree

from .._constants import CONTENT_COLLECTIONS, SITEMAP_DOCUMENTS
from ..config.helpers import _parse_timestamp
from .manifest import is_administrative
from .models import SitemapDocument, SitemapEntry, SitemapKind
from .renderer import build_environment, render_template

if typ.TYPE_CHECKING:
    from jinja2 import Environment

    from ..config import GlobalSEOConfig
    from ..content import ContentCollection
    from ..resolver import ResolvedSEODescriptor

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.UTC)

_EMPTY_PAGES_MESSAGE = "No static pages are available for this sitemap."


def _document_url(config: GlobalSEOConfig, key: str) -> str:
    target = SITEMAP_DOCUMENTS.get(key)
    path = target.path if target else f"/sitemap/{key}"
    return config.absolute_url(path)


def _kind_for(key: str) -> SitemapKind:
    try:
        return SitemapKind(key)
    except ValueError:
        return SitemapKind.POSTS


def build_pages_document(
    descriptors: cabc.Iterable[ResolvedSEODescriptor], config: GlobalSEOConfig
) -> SitemapDocument:
    """Return the static-pages sub-document; excluded routes are omitted."""
    included = [
        descriptor
        for descriptor in descriptors
        if not descriptor.sitemap.excluded
        and not descriptor.node.is_dynamic
        and not is_administrative(descriptor.route_path)
    ]
    included.sort(key=lambda item: (0 if item.node.is_home else 1, item.route_path))
    entries = tuple(
        SitemapEntry(
            url=config.absolute_url(descriptor.route_path),
            last_modified=descriptor.last_modified,
            change_frequency=descriptor.sitemap.change_frequency,
            priority=descriptor.sitemap.priority,
        )
        for descriptor in included
    )
    return SitemapDocument(
        kind=SitemapKind.PAGES,
        url=_document_url(config, "pages"),
        entries=entries,
        message=None if entries else _EMPTY_PAGES_MESSAGE,
    )


def build_collection_document(
    key: str, collection: ContentCollection | None, config: GlobalSEOConfig
) -> SitemapDocument:
    """Return the sub-document for one content collection, possibly empty."""
    entries = tuple(
        SitemapEntry(
            url=entry.url,
            last_modified=entry.last_modified,
            change_frequency=entry.change_frequency,
            priority=entry.priority,
        )
        for entry in (collection.entries if collection is not None else ())
    )
    message = None
    if not entries:
        message = (
            collection.empty_message
            if collection is not None
            else f"No {key} content is available for this sitemap."
        )
    return SitemapDocument(
        kind=_kind_for(key),
        url=_document_url(config, key),
        entries=entries,
        message=message,
    )


def build_index_document(
    documents: cabc.Mapping[str, SitemapDocument], config: GlobalSEOConfig
) -> SitemapDocument:
    """Reference every sub-document with its newest timestamp."""
    known = [doc.latest_modified for doc in documents.values()]
    newest = max((stamp for stamp in known if stamp is not None), default=EPOCH)
    entries = tuple(
        SitemapEntry(url=document.url, last_modified=document.latest_modified or newest)
        for document in documents.values()
    )
    return SitemapDocument(
        kind=SitemapKind.INDEX,
        url=_document_url(config, "index"),
        entries=entries,
    )


def build_sitemaps(
    descriptors: cabc.Iterable[ResolvedSEODescriptor],
    collections: cabc.Mapping[str, ContentCollection],
    config: GlobalSEOConfig,
) -> dict[str, SitemapDocument]:
    """Build the index plus one sub-document per collection.

    Returns
    -------
    dict[str, SitemapDocument]
        Keys ``index``, ``pages``, ``posts``, ``categories`` and any extra
        collection names, in that order.
    """
    subdocuments: dict[str, SitemapDocument] = {
        "pages": build_pages_document(descriptors, config)
    }
    extra = sorted(key for key in collections if key not in CONTENT_COLLECTIONS)
    for key in (*CONTENT_COLLECTIONS, *extra):
        subdocuments[key] = build_collection_document(key, collections.get(key), config)
    return {"index": build_index_document(subdocuments, config), **subdocuments}


def render_sitemap(document: SitemapDocument, env: Environment | None = None) -> str:
    """Render ``document`` as sitemaps.org 0.9 XML."""
    environment = env or build_environment()
    template = "sitemapindex.xml" if document.kind is SitemapKind.INDEX else "urlset.xml"
    return render_template(environment, template, document=document)


def parse_sitemap(xml_text: str, *, url: str = "") -> SitemapDocument:
    """Parse sitemap XML back into a :class:`SitemapDocument`.

    ``<urlset>`` documents parse as ``pages`` documents; pass the result's
    fields to :func:`dataclasses.replace` to set a different kind.

    Raises
    ------
    xml.etree.ElementTree.ParseError
        If ``xml_text`` is not well-formed XML.
    """
    parser = ElementTree.XMLParser(target=ElementTree.TreeBuilder(insert_comments=True))
    root = ElementTree.fromstring(xml_text, parser=parser)
    ns = f"{{{SITEMAP_NAMESPACE}}}"
    is_index = root.tag == f"{ns}sitemapindex"
    item_tag = f"{ns}sitemap" if is_index else f"{ns}url"

    message = None
    entries: list[SitemapEntry] = []
    for child in root:
        if child.tag is ElementTree.Comment:
            message = (child.text or "").strip() or None
            continue
        if child.tag != item_tag:
            continue
        loc = (child.findtext(f"{ns}loc") or "").strip()
        lastmod = _parse_timestamp(child.findtext(f"{ns}lastmod")) or EPOCH
        changefreq = child.findtext(f"{ns}changefreq")
        priority = child.findtext(f"{ns}priority")
        entries.append(
            SitemapEntry(
                url=loc,
                last_modified=lastmod,
                change_frequency=changefreq.strip() if changefreq else None,
                priority=float(priority) if priority else None,
            )
        )
    return SitemapDocument(
        kind=SitemapKind.INDEX if is_index else SitemapKind.PAGES,
        url=url,
        entries=tuple(entries),
        message=message,
    )


__all__ = [
    "SITEMAP_NAMESPACE",
    "build_collection_document",
    "build_index_document",
    "build_pages_document",
    "build_sitemaps",
    "parse_sitemap",
    "render_sitemap",
]
