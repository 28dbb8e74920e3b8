"""Ordered rule chain evaluated by :class:`~cms_pages.gate.RouteGate`.

Each :class:`GateRule` pairs a predicate with the decision it produces. The
chain is evaluated top to bottom and the first matching rule wins:

1. legacy sitemap aliases redirect to the sitemap route handlers;
2. framework assets, non-admin API routes, and dotted paths pass;
3. admin UI and admin API paths go through authentication;
4. admin-managed redirects from the manifest;
5. paths listed in the manifest pass;
6. other ``/blog`` paths are left to the not-found handler;
7. known misspellings redirect to their canonical page.

Sitemap aliases come first because ``/sitemap.xml`` looks like an asset.
Admin authentication precedes membership since admin paths are never in the
manifest.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from .._constants import ADMIN_API_PREFIX, ADMIN_PREFIX, API_PREFIX, BLOG_PREFIX
from .auth import verify_token
from .models import GateDecision
from .routes import normalize_path

if typ.TYPE_CHECKING:
    from .auth import TokenVerifier
    from .models import GateConfig, GateRequest
    from .routes import RouteTable

SITEMAP_ALIASES: typ.Final[dict[str, str]] = {
    "/sitemap.xml": "/sitemap",
    "/sitemap-pages.xml": "/sitemap/pages",
    "/sitemap-blog-posts.xml": "/sitemap/blog-posts",
    "/sitemap-blog-categories.xml": "/sitemap/blog-categories",
}
PASSTHROUGH_PREFIXES = ("/_next", "/favicon", "/images", "/logos", "/sitemap")
PUBLIC_ADMIN_PATHS = frozenset(
    {"/admin/login", "/api/admin/login", "/api/admin/auth/logout"}
)
LOGIN_PATH = "/admin/login"


@dc.dataclass(frozen=True, slots=True)
class GateContext:
    """Collaborators shared by every rule during one evaluation."""

    routes: RouteTable
    verifier: TokenVerifier
    config: GateConfig


Predicate = cabc.Callable[["GateRequest", GateContext], bool]
Decider = cabc.Callable[["GateRequest", GateContext], GateDecision]


@dc.dataclass(frozen=True, slots=True)
class GateRule:
    name: str
    matches: Predicate
    decide: Decider


def is_admin_path(path: str) -> bool:
    return path.startswith(ADMIN_PREFIX) or path.startswith(ADMIN_API_PREFIX)


def is_admin_api_path(path: str) -> bool:
    return path.startswith(ADMIN_API_PREFIX)


def _is_sitemap_alias(request: GateRequest, _ctx: GateContext) -> bool:
    return request.path in SITEMAP_ALIASES


def _redirect_sitemap_alias(request: GateRequest, _ctx: GateContext) -> GateDecision:
    return GateDecision.redirect("sitemap-alias", SITEMAP_ALIASES[request.path], 307)


def _is_passthrough(request: GateRequest, _ctx: GateContext) -> bool:
    path = request.path
    if is_admin_path(path):
        return False
    if path.startswith(API_PREFIX) or "." in path:
        return True
    return path.startswith(PASSTHROUGH_PREFIXES)


def _pass_asset(_request: GateRequest, _ctx: GateContext) -> GateDecision:
    return GateDecision.passed("passthrough")


def _is_admin(request: GateRequest, _ctx: GateContext) -> bool:
    return is_admin_path(request.path)


def _reject(path: str, *, clear_credential: bool) -> GateDecision:
    if is_admin_api_path(path):
        return GateDecision.unauthorized("admin-auth", clear_credential=clear_credential)
    return GateDecision.redirect(
        "admin-auth", LOGIN_PATH, 307, clear_credential=clear_credential
    )


def _authenticate_admin(request: GateRequest, ctx: GateContext) -> GateDecision:
    if ctx.config.auth_disabled:
        return GateDecision.passed("admin-auth-disabled")
    if normalize_path(request.path) in PUBLIC_ADMIN_PATHS:
        return GateDecision.passed("admin-public")
    token = request.credential
    if not token:
        return _reject(request.path, clear_credential=False)
    if not verify_token(ctx.verifier, token):
        return _reject(request.path, clear_credential=True)
    return GateDecision.passed("admin-auth")


def _has_managed_redirect(request: GateRequest, ctx: GateContext) -> bool:
    return ctx.routes.redirect_for(request.path) is not None


def _follow_managed_redirect(request: GateRequest, ctx: GateContext) -> GateDecision:
    redirect = ctx.routes.redirect_for(request.path)
    assert redirect is not None  # guarded by _has_managed_redirect
    return GateDecision.redirect("managed-redirect", redirect.target, redirect.status)


def _is_known_route(request: GateRequest, ctx: GateContext) -> bool:
    return request.path in ctx.routes


def _pass_known_route(_request: GateRequest, _ctx: GateContext) -> GateDecision:
    return GateDecision.passed("manifest")


def _is_blog(request: GateRequest, _ctx: GateContext) -> bool:
    return request.path.startswith(BLOG_PREFIX)


def _defer_blog(_request: GateRequest, _ctx: GateContext) -> GateDecision:
    return GateDecision.pass_through("blog")


def typo_target(path: str, config: GateConfig) -> str | None:
    """Return the canonical path for a misspelled ``path``, if any.

    Exact keys win; otherwise the first key whose leading
    ``config.typo_prefix_length`` characters prefix ``path`` is used. A path
    is never redirected to itself.
    """
    normalized = normalize_path(path.lower())
    table = config.typo_redirects
    exact = table.get(normalized)
    if exact is not None and exact != normalized:
        return exact
    for key, target in table.items():
        prefix = key[: config.typo_prefix_length]
        if normalized.startswith(prefix) and target != normalized:
            return target
    return None


def _is_typo(request: GateRequest, ctx: GateContext) -> bool:
    return typo_target(request.path, ctx.config) is not None


def _correct_typo(request: GateRequest, ctx: GateContext) -> GateDecision:
    target = typo_target(request.path, ctx.config)
    assert target is not None  # guarded by _is_typo
    return GateDecision.redirect("typo", target, 308)


DEFAULT_RULES: tuple[GateRule, ...] = (
    GateRule("sitemap-alias", _is_sitemap_alias, _redirect_sitemap_alias),
    GateRule("passthrough", _is_passthrough, _pass_asset),
    GateRule("admin-auth", _is_admin, _authenticate_admin),
    GateRule("managed-redirect", _has_managed_redirect, _follow_managed_redirect),
    GateRule("manifest", _is_known_route, _pass_known_route),
    GateRule("blog", _is_blog, _defer_blog),
    GateRule("typo", _is_typo, _correct_typo),
)


__all__ = [
    "DEFAULT_RULES",
    "LOGIN_PATH",
    "PASSTHROUGH_PREFIXES",
    "PUBLIC_ADMIN_PATHS",
    "SITEMAP_ALIASES",
    "GateContext",
    "GateRule",
    "is_admin_api_path",
    "is_admin_path",
    "typo_target",
]
