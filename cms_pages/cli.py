"""Cyclopts CLI entrypoint for compiling marketing-site artifacts.

The ``pages`` console script defined here runs each build stage on its own:
``pages routes`` lists discovered routes, ``pages manifest``, ``pages
sitemaps`` and ``pages robots`` write one artifact family each, and ``pages
build`` writes them all. ``pages scaffold`` creates starter sidecars,
``pages credentials`` issues admin credentials, and ``pages gate`` shows what
the route gate decides for a request path.

Every option has a default, so each command runs bare; options can also be
set through ``PAGES_*`` environment variables.

Examples
--------
Compile every artifact for the default configuration:

>>> from cms_pages.cli import main
>>> main(["build"])  # doctest: +SKIP
0

Check how the gate treats a misspelled path:

>>> main(["gate", "/tos"])  # doctest: +SKIP
0
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import logging.config
import os
import secrets
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import (
    CREDENTIAL_COOKIE,
    MANIFEST_FILENAME,
    ROBOTS_FILENAME,
    SITEMAP_DOCUMENTS,
)
from .compiler import (
    CompiledArtifacts,
    SiteManifest,
    build_robots,
    compile_artifacts,
    write_artifacts,
)
from .config import load_site_config
from .content import load_blog_collections
from .credentials import (
    DEFAULT_CREDENTIALS_PATH,
    CredentialVerifier,
    RemoteTokenVerifier,
    issue_credentials,
    save_credentials,
)
from .discovery import discover_routes
from .gate import DenyAllVerifier, GateConfig, GateRequest, RouteGate, RouteTable
from .resolver import resolve_all
from .sidecar import SidecarStore, ensure_sidecars

if typ.TYPE_CHECKING:
    from .config import SiteConfig
    from .gate import TokenVerifier

DEFAULT_CONFIG = Path("config/site.yaml")

logger = logging.getLogger(__name__)

app = App(name="pages", config=cyclopts.config.Env("PAGES_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to site config", env_var="PAGES_CONFIG")
]
AppDirOption = typ.Annotated[
    Path | None,
    Parameter(help="Override the page tree root", env_var="PAGES_APP_DIR"),
]
BlogDirOption = typ.Annotated[
    Path | None,
    Parameter(help="Override the blog content root", env_var="PAGES_BLOG_DIR"),
]
OutputDirOption = typ.Annotated[
    Path | None,
    Parameter(help="Override the output folder", env_var="PAGES_OUTPUT_DIR"),
]


def configure_logging(level: str | None = None) -> None:
    """Send log records to stdout at ``level`` (``PAGES_LOG_LEVEL``)."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {"format": "%(levelname)s %(name)s: %(message)s"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {
                "level": (level or os.getenv("PAGES_LOG_LEVEL") or "INFO").upper(),
                "handlers": ["console"],
            },
        }
    )


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)
    return str(path)


def _compile(
    config: Path, app_dir: Path | None, blog_dir: Path | None
) -> tuple[SiteConfig, CompiledArtifacts]:
    site = load_site_config(config)
    routes = discover_routes(app_dir or site.paths.app_dir)
    store = SidecarStore.load(routes)
    descriptors, problems = resolve_all(routes, store, site.seo)
    if problems:
        logger.warning("%d route(s) fell back to default SEO settings", len(problems))
    collections = load_blog_collections(
        blog_dir or site.paths.blog_content_dir, site.seo
    )
    return site, compile_artifacts(descriptors, collections, site)


def _write(
    config: Path,
    app_dir: Path | None,
    blog_dir: Path | None,
    output_dir: Path | None,
    only: cabc.Container[str] | None = None,
) -> None:
    site, artifacts = _compile(config, app_dir, blog_dir)
    written = write_artifacts(artifacts, output_dir or site.paths.output_dir, only=only)
    for path in written:
        print(f"wrote {_format_path(path)}")


@app.command(help="List the routes discovered in the page tree.")
def routes(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    app_dir: AppDirOption = None,
) -> None:
    """Print one line per route: path, kind, and render mode."""
    site = load_site_config(config)
    for node in sorted(
        discover_routes(app_dir or site.paths.app_dir), key=lambda item: item.route_path
    ):
        print(f"{node.route_path}\t{node.kind}\t{node.render_mode}")


@app.command(help="Write the page manifest (pages-config.json).")
def manifest(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    app_dir: AppDirOption = None,
    blog_dir: BlogDirOption = None,
    output_dir: OutputDirOption = None,
) -> None:
    _write(config, app_dir, blog_dir, output_dir, only={MANIFEST_FILENAME})


@app.command(help="Write the sitemap index and its sub-sitemaps.")
def sitemaps(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    app_dir: AppDirOption = None,
    blog_dir: BlogDirOption = None,
    output_dir: OutputDirOption = None,
) -> None:
    names = {target.filename for target in SITEMAP_DOCUMENTS.values()}
    _write(config, app_dir, blog_dir, output_dir, only=names)


@app.command(help="Write robots.txt.")
def robots(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    output_dir: OutputDirOption = None,
) -> None:
    """Regenerate ``robots.txt``; any manual edits are overwritten."""
    site = load_site_config(config)
    artifacts = CompiledArtifacts(
        manifest=SiteManifest(), sitemaps={}, robots=build_robots(site.seo)
    )
    written = write_artifacts(
        artifacts, output_dir or site.paths.output_dir, only={ROBOTS_FILENAME}
    )
    for path in written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Compile and write every artifact.")
def build(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    app_dir: AppDirOption = None,
    blog_dir: BlogDirOption = None,
    output_dir: OutputDirOption = None,
) -> None:
    """Compile the manifest, sitemaps, and robots.txt in one pass.

    Parameters
    ----------
    config : Path, optional
        Path to the ``site.yaml`` configuration file (``PAGES_CONFIG``).
    app_dir : Path or None, optional
        Page tree root; defaults to ``paths.app_dir`` from the config.
    blog_dir : Path or None, optional
        Blog content root; defaults to ``paths.blog_content_dir``.
    output_dir : Path or None, optional
        Artifact folder; defaults to ``paths.output_dir``.

    Returns
    -------
    None
        Writes the artifacts atomically and prints each written path.
    """
    _write(config, app_dir, blog_dir, output_dir)


@app.command(help="Create starter seo-config.json sidecars for static pages.")
def scaffold(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    app_dir: AppDirOption = None,
) -> None:
    site = load_site_config(config)
    found = discover_routes(app_dir or site.paths.app_dir)
    created = ensure_sidecars(found, SidecarStore.load(found))
    for path in created:
        print(f"wrote {_format_path(path)}")
    if not created:
        print("every static page already has a sidecar")


@app.command(help="Issue admin credentials and store them as TOML.")
def credentials(
    *,
    username: typ.Annotated[
        str, Parameter(help="Admin username", env_var="PAGES_ADMIN_USERNAME")
    ] = "admin",
    password: typ.Annotated[
        str | None,
        Parameter(
            help="Admin password (generated when omitted)",
            env_var="PAGES_ADMIN_PASSWORD",
        ),
    ] = None,
    credentials_path: typ.Annotated[
        Path,
        Parameter(
            help="Where to store credentials (TOML)",
            env_var="PAGES_CREDENTIALS_FILE",
        ),
    ] = DEFAULT_CREDENTIALS_PATH,
) -> None:
    """Issue a username, password hash, secret, and bearer token.

    When no password is supplied a random one is generated and printed once.
    """
    generated = password is None
    secret_password = password if password is not None else secrets.token_urlsafe(18)
    creds = issue_credentials(secret_password, username=username)
    save_credentials(creds, path=credentials_path)
    print(f"wrote {_format_path(credentials_path)}")
    print(f"username: {creds.username}")
    if generated:
        print(f"password: {secret_password}")
    print(f"token: {creds.token}")


def _select_verifier(credentials_path: Path, verify_url: str | None) -> TokenVerifier:
    if verify_url:
        return RemoteTokenVerifier(verify_url)
    if credentials_path.exists():
        return CredentialVerifier.from_path(credentials_path)
    logger.info("No credentials at %s; every admin token is rejected", credentials_path)
    return DenyAllVerifier()


@app.command(help="Show the route gate decision for a request path.")
def gate(
    path: typ.Annotated[str, Parameter(help="Request path or URL")] = "/",
    *,
    token: typ.Annotated[
        str | None, Parameter(help="Value of the admin-token cookie")
    ] = None,
    manifest_path: typ.Annotated[
        Path | None,
        Parameter(help="Compiled manifest to load", env_var="PAGES_MANIFEST"),
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG,
    credentials_path: typ.Annotated[
        Path,
        Parameter(
            help="Stored credentials used to verify tokens",
            env_var="PAGES_CREDENTIALS_FILE",
        ),
    ] = DEFAULT_CREDENTIALS_PATH,
    verify_url: typ.Annotated[
        str | None,
        Parameter(help="Remote token verification endpoint", env_var="PAGES_VERIFY_URL"),
    ] = None,
) -> None:
    """Evaluate the gate rules for ``path`` and print the outcome."""
    if manifest_path is None:
        site = load_site_config(config)
        manifest_path = site.paths.output_dir / MANIFEST_FILENAME
    table = RouteTable.from_path(manifest_path)
    route_gate = RouteGate(
        table, _select_verifier(credentials_path, verify_url), GateConfig.from_env()
    )
    cookies = {CREDENTIAL_COOKIE: token} if token else {}
    decision = route_gate.decide(GateRequest.from_url(path, cookies=cookies))

    line = f"{decision.outcome} ({decision.rule})"
    if decision.status is not None:
        line = f"{line} {decision.status}"
    if decision.location:
        line = f"{line} -> {decision.location}"
    print(line)
    if decision.clear_credential:
        print("clear admin-token cookie")


def main(argv: cabc.Sequence[str] | None = None) -> int:
    """Invoke the Cyclopts application that powers the ``pages`` command.

    Parameters
    ----------
    argv : Sequence[str] or None, optional
        Arguments to parse; ``None`` reads ``sys.argv``.

    Returns
    -------
    int
        ``0`` on success, ``1`` when the command raised an error.
    """
    configure_logging()
    try:
        app(list(argv) if argv is not None else None)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else (0 if exc.code is None else 1)
    except Exception as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {exc}")
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
