"""Compile resolved routes and content into the build artifacts.

:func:`compile_artifacts` is pure: it assembles the manifest, the sitemap
documents, and the robots document in memory. :func:`write_artifacts` renders
all of them first and only then replaces the files on disk, one atomic
``os.replace`` per file, so a rendering failure never leaves a partial set.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import os
import tempfile
import typing as typ
from pathlib import Path

from .._constants import MANIFEST_FILENAME, ROBOTS_FILENAME, SITEMAP_DOCUMENTS
from .manifest import build_manifest, encode_manifest
from .models import CompiledArtifacts
from .renderer import build_environment
from .robots import build_robots, render_robots
from .sitemaps import build_sitemaps, render_sitemap

if typ.TYPE_CHECKING:
    from jinja2 import Environment

    from ..config import SiteConfig
    from ..content import ContentCollection
    from ..resolver import ResolvedSEODescriptor

logger = logging.getLogger(__name__)


def compile_artifacts(
    descriptors: cabc.Iterable[ResolvedSEODescriptor],
    collections: cabc.Mapping[str, ContentCollection],
    config: SiteConfig,
) -> CompiledArtifacts:
    """Assemble every artifact for one build.

    Parameters
    ----------
    descriptors : Iterable[ResolvedSEODescriptor]
        Output of :func:`cms_pages.resolver.resolve_all`.
    collections : Mapping[str, ContentCollection]
        Content collections keyed by name (``posts``, ``categories``).
    config : SiteConfig
        Site configuration snapshot for this run.

    Returns
    -------
    CompiledArtifacts
        Manifest, sitemap documents keyed by kind, and robots document.
    """
    resolved = list(descriptors)
    return CompiledArtifacts(
        manifest=build_manifest(resolved, collections, config.redirects),
        sitemaps=build_sitemaps(resolved, collections, config.seo),
        robots=build_robots(config.seo),
    )


def sitemap_filename(key: str) -> str:
    target = SITEMAP_DOCUMENTS.get(key)
    return target.filename if target else f"sitemap/{key}.xml"


def render_artifacts(
    artifacts: CompiledArtifacts, env: Environment | None = None
) -> dict[str, bytes]:
    """Serialize ``artifacts`` to ``{relative filename: content}``."""
    environment = env or build_environment()
    rendered: dict[str, bytes] = {MANIFEST_FILENAME: encode_manifest(artifacts.manifest)}
    for key, document in artifacts.sitemaps.items():
        rendered[sitemap_filename(key)] = render_sitemap(document, environment).encode(
            "utf-8"
        )
    rendered[ROBOTS_FILENAME] = render_robots(artifacts.robots, environment).encode(
        "utf-8"
    )
    return rendered


def write_atomic(path: Path, content: bytes) -> None:
    """Replace ``path`` with ``content`` through a sibling temporary file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}-", suffix=".tmp", dir=path.parent
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(content)
        os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def write_artifacts(
    artifacts: CompiledArtifacts,
    output_dir: Path,
    env: Environment | None = None,
    *,
    only: cabc.Container[str] | None = None,
) -> list[Path]:
    """Write artifacts under ``output_dir`` and return the paths written.

    ``only`` limits the write to the named relative filenames; everything is
    still rendered first.
    """
    rendered = render_artifacts(artifacts, env)
    written: list[Path] = []
    for name, content in rendered.items():
        if only is not None and name not in only:
            continue
        path = output_dir / name
        write_atomic(path, content)
        logger.info("Wrote %s (%d bytes)", path, len(content))
        written.append(path)
    return written


__all__ = [
    "compile_artifacts",
    "render_artifacts",
    "sitemap_filename",
    "write_artifacts",
    "write_atomic",
]
