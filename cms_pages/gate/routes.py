"""Route membership table loaded from the compiled manifest."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import typing as typ

from ..compiler.manifest import read_manifest

if typ.TYPE_CHECKING:
    from pathlib import Path

    from ..compiler.models import SiteManifest

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Strip a trailing slash from every path except ``/``."""
    if len(path) > 1 and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path


@dc.dataclass(frozen=True, slots=True)
class RedirectTarget:
    target: str
    permanent: bool = True

    @property
    def status(self) -> int:
        return 308 if self.permanent else 307


@dc.dataclass(frozen=True, slots=True)
class RouteTable:
    """Immutable snapshot of the paths the site serves.

    Attributes
    ----------
    paths : frozenset[str]
        Static page paths and content-collection routes.
    redirects : Mapping[str, RedirectTarget]
        Admin-managed redirects keyed by exact source path.
    """

    paths: frozenset[str] = frozenset()
    redirects: cabc.Mapping[str, RedirectTarget] = dc.field(default_factory=dict)

    @classmethod
    def from_manifest(cls, manifest: SiteManifest) -> RouteTable:
        paths = {entry.path for entry in manifest.pages}
        paths.update(manifest.routes)
        redirects = {
            redirect.source: RedirectTarget(redirect.target, redirect.permanent)
            for redirect in manifest.redirects
        }
        return cls(
            paths=frozenset(normalize_path(path) for path in paths),
            redirects=redirects,
        )

    @classmethod
    def from_path(cls, path: Path) -> RouteTable:
        """Load the table from a manifest file written by the compiler."""
        table = cls.from_manifest(read_manifest(path))
        logger.debug(
            "Loaded %d routes and %d redirects from %s",
            len(table.paths),
            len(table.redirects),
            path,
        )
        return table

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self.paths

    def redirect_for(self, path: str) -> RedirectTarget | None:
        return self.redirects.get(path) or self.redirects.get(normalize_path(path))


__all__ = ["RedirectTarget", "RouteTable", "normalize_path"]
