"""Discover addressable routes from a page-definition tree.

The tree follows the file-system routing convention used by the site's
front-end: every directory that directly holds a ``page.tsx`` (or ``.jsx``,
``.ts``, ``.js``) file is a route. Directory names shape the URL:

* ``(marketing)`` is a grouping directory; it contributes no path segment but
  its children are still walked.
* ``_components`` is private; it is neither a route nor walked.
* ``[slug]``, ``[...slug]`` and ``[[...slug]]`` are parameter placeholders; the
  route and every descendant are dynamic and never enter static artifacts.

Each discovered page is also classified as server- or client-rendered by
:func:`classify_render_mode`, a best-effort heuristic over the page source.

Examples
--------
>>> from pathlib import Path
>>> from cms_pages.discovery import discover_routes
>>> routes = discover_routes(Path("src/app"))  # doctest: +SKIP
>>> sorted(node.route_path for node in routes)  # doctest: +SKIP
['/', '/privacy', '/terms-of-service']
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import enum
import logging
import re
from pathlib import Path

from ._constants import HOME_PATH, PAGE_FILENAMES

logger = logging.getLogger(__name__)


class RouteKind(enum.StrEnum):
    """Whether a route has a fixed path or contains parameter placeholders."""

    STATIC = "static"
    DYNAMIC = "dynamic"


class RenderMode(enum.StrEnum):
    """Where a route is rendered, as guessed from its source."""

    SERVER = "server"
    CLIENT = "client"


@dc.dataclass(frozen=True, slots=True)
class RouteNode:
    """One addressable path derived from the page-definition tree."""

    route_path: str
    kind: RouteKind
    render_mode: RenderMode
    source_location: Path
    modified_at: dt.datetime

    @property
    def is_home(self) -> bool:
        return self.route_path == HOME_PATH

    @property
    def is_dynamic(self) -> bool:
        return self.kind is RouteKind.DYNAMIC

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(part for part in self.route_path.split("/") if part)


_DIRECTIVE_PATTERN = re.compile(r"""^['"]use (client|server)['"]\s*;?\s*$""")

_CLIENT_PATTERNS = (
    # React state and lifecycle hooks, plus Next.js client navigation hooks.
    re.compile(
        r"\b(useState|useEffect|useCallback|useMemo|useReducer|useContext|useRef|"
        r"useLayoutEffect|useImperativeHandle|useDebugValue|useDeferredValue|"
        r"useTransition|useId|useSearchParams|useRouter|usePathname|useParams)\s*\("
    ),
    # Event-handler bindings such as onClick={...}.
    re.compile(r"\bon[A-Z]\w*\s*=\s*[{(]"),
    # Browser-only globals.
    re.compile(
        r"\b(window|document|localStorage|sessionStorage|navigator|location|history)\."
    ),
    # Form and state-setter handlers.
    re.compile(
        r"\b(handleSubmit|handleClick|handleChange|setLoading|setError|setData|"
        r"setValue)\s*[(=]"
    ),
    # Client-only libraries.
    re.compile(
        r"""from\s+['"](@supabase/supabase-js|firebase|axios|react-hook-form|"""
        r"""framer-motion|react-query|swr|react-spring)"""
    ),
    re.compile(r"""from\s+['"]next/(router|navigation)['"]"""),
)


def _leading_directive(text: str) -> str | None:
    """Return ``client``/``server`` when the file opens with a use directive."""
    in_block_comment = False
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if in_block_comment:
            if "*/" in line:
                in_block_comment = False
            continue
        if not line or line.startswith("//"):
            continue
        if line.startswith("/*"):
            in_block_comment = "*/" not in line
            continue
        match = _DIRECTIVE_PATTERN.match(line)
        return match.group(1) if match else None
    return None


def classify_render_mode(text: str) -> RenderMode:
    """Guess whether page source ``text`` renders on the client or the server.

    A ``"use client"`` or ``"use server"`` directive on the first code line
    always decides. Without one, any interactive-state primitive, browser
    global, event-handler binding, or client-only library import classifies
    the page as client-rendered; everything else is server-rendered.

    Parameters
    ----------
    text : str
        Full source of the page-definition file.

    Returns
    -------
    RenderMode
        ``RenderMode.CLIENT`` or ``RenderMode.SERVER``.

    Examples
    --------
    >>> classify_render_mode("'use client'\\nexport default function P() {}")
    <RenderMode.CLIENT: 'client'>
    >>> classify_render_mode("export default function P() { return null }")
    <RenderMode.SERVER: 'server'>
    """
    directive = _leading_directive(text)
    if directive == "client":
        return RenderMode.CLIENT
    if directive == "server":
        return RenderMode.SERVER
    if any(pattern.search(text) for pattern in _CLIENT_PATTERNS):
        return RenderMode.CLIENT
    return RenderMode.SERVER


def is_grouping_directory(name: str) -> bool:
    return name.startswith("(") and name.endswith(")")


def is_parameter_directory(name: str) -> bool:
    return name.startswith("[") and name.endswith("]")


def is_private_directory(name: str) -> bool:
    return name.startswith("_") or name.startswith(".")


def discover_routes(root: Path) -> frozenset[RouteNode]:
    """Walk ``root`` depth-first and return every addressable route.

    Parameters
    ----------
    root : Path
        Top of the page-definition tree (for example ``src/app``).

    Returns
    -------
    frozenset[RouteNode]
        One node per unique route path. When two directories map to the same
        path the first one in sorted walk order wins.

    Raises
    ------
    FileNotFoundError
        If ``root`` does not exist or is not a directory.
    """
    if not root.is_dir():
        msg = f"Page tree '{root}' not found."
        raise FileNotFoundError(msg)
    found: dict[str, RouteNode] = {}
    _walk(root, segments=(), dynamic=False, found=found)
    return frozenset(found.values())


def _walk(
    directory: Path,
    *,
    segments: tuple[str, ...],
    dynamic: bool,
    found: dict[str, RouteNode],
) -> None:
    try:
        entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("Skipping unreadable directory %s: %s", directory, exc)
        return

    page_file = _find_page_file(entries)
    if page_file is not None:
        node = _build_node(page_file, segments=segments, dynamic=dynamic)
        if node is not None:
            _record(node, found)

    for entry in entries:
        if not entry.is_dir() or entry.is_symlink():
            continue
        name = entry.name
        if is_private_directory(name):
            continue
        if is_grouping_directory(name):
            _walk(entry, segments=segments, dynamic=dynamic, found=found)
            continue
        _walk(
            entry,
            segments=(*segments, name),
            dynamic=dynamic or is_parameter_directory(name),
            found=found,
        )


def _find_page_file(entries: list[Path]) -> Path | None:
    files = {entry.name: entry for entry in entries if entry.is_file()}
    for filename in PAGE_FILENAMES:
        if filename in files:
            return files[filename]
    return None


def _build_node(
    page_file: Path, *, segments: tuple[str, ...], dynamic: bool
) -> RouteNode | None:
    try:
        text = page_file.read_text(encoding="utf-8")
        stat = page_file.stat()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping unreadable page file %s: %s", page_file, exc)
        return None
    route_path = "/" + "/".join(segments) if segments else HOME_PATH
    return RouteNode(
        route_path=route_path,
        kind=RouteKind.DYNAMIC if dynamic else RouteKind.STATIC,
        render_mode=classify_render_mode(text),
        source_location=page_file,
        modified_at=dt.datetime.fromtimestamp(int(stat.st_mtime), dt.UTC),
    )


def _record(node: RouteNode, found: dict[str, RouteNode]) -> None:
    existing = found.get(node.route_path)
    if existing is not None:
        logger.warning(
            "Route %s is defined by both %s and %s; keeping the first.",
            node.route_path,
            existing.source_location,
            node.source_location,
        )
        return
    found[node.route_path] = node


__all__ = [
    "RenderMode",
    "RouteKind",
    "RouteNode",
    "classify_render_mode",
    "discover_routes",
    "is_grouping_directory",
    "is_parameter_directory",
    "is_private_directory",
]
