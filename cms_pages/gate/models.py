"""Request, decision, and configuration records used by the route gate."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import os
import typing as typ
from urllib.parse import urlsplit

from .._constants import CREDENTIAL_COOKIE

UNAUTHORIZED_BODY: typ.Final[dict[str, str]] = {"error": "Unauthorized"}

DEFAULT_TYPO_REDIRECTS: typ.Final[dict[str, str]] = {
    "/term": "/terms-of-service",
    "/tos": "/terms-of-service",
    "/terms": "/terms-of-service",
    "/policy": "/privacy",
    "/privacy-policy": "/privacy",
    "/about": "/",
    "/contact": "/",
    "/support": "/",
}
TYPO_PREFIX_LENGTH = 4

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class Outcome(enum.StrEnum):
    PASS = "pass"
    REDIRECT = "redirect"
    DENY = "deny"
    PASS_THROUGH = "pass-through"


@dc.dataclass(frozen=True, slots=True)
class GateRequest:
    """The parts of an incoming request the gate inspects.

    Attributes
    ----------
    path : str
        URL path, always starting with ``/``.
    cookies : Mapping[str, str]
        Request cookies by name.
    headers : Mapping[str, str]
        Request headers; names are matched case-insensitively.
    """

    path: str
    cookies: cabc.Mapping[str, str] = dc.field(default_factory=dict)
    headers: cabc.Mapping[str, str] = dc.field(default_factory=dict)

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        cookies: cabc.Mapping[str, str] | None = None,
        headers: cabc.Mapping[str, str] | None = None,
    ) -> GateRequest:
        """Build a request from a full URL or a bare path."""
        path = urlsplit(url).path or "/"
        if not path.startswith("/"):
            path = f"/{path}"
        return cls(path=path, cookies=dict(cookies or {}), headers=dict(headers or {}))

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def credential(self) -> str | None:
        """Return the admin token from the cookie or a bearer header."""
        token = self.cookies.get(CREDENTIAL_COOKIE)
        if token:
            return token
        authorization = self.header("Authorization") or ""
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()
        return None


@dc.dataclass(frozen=True, slots=True)
class GateDecision:
    """Terminal outcome of one gate evaluation.

    ``location`` and ``status`` are set for redirects and denials, ``body`` for
    denials. ``clear_credential`` asks the host to delete the admin cookie.
    """

    outcome: Outcome
    rule: str
    location: str | None = None
    status: int | None = None
    body: cabc.Mapping[str, str] | None = None
    clear_credential: bool = False

    @classmethod
    def passed(cls, rule: str) -> GateDecision:
        return cls(Outcome.PASS, rule)

    @classmethod
    def pass_through(cls, rule: str) -> GateDecision:
        return cls(Outcome.PASS_THROUGH, rule)

    @classmethod
    def redirect(
        cls,
        rule: str,
        location: str,
        status: int = 307,
        *,
        clear_credential: bool = False,
    ) -> GateDecision:
        return cls(
            Outcome.REDIRECT,
            rule,
            location=location,
            status=status,
            clear_credential=clear_credential,
        )

    @classmethod
    def unauthorized(cls, rule: str, *, clear_credential: bool = False) -> GateDecision:
        return cls(
            Outcome.DENY,
            rule,
            status=401,
            body=dict(UNAUTHORIZED_BODY),
            clear_credential=clear_credential,
        )


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUE_VALUES


@dc.dataclass(frozen=True, slots=True)
class GateConfig:
    """Operational toggles for the gate.

    Attributes
    ----------
    disable_admin_auth : bool
        Development escape hatch that skips admin authentication.
    site_env : str
        Deployment environment; ``production`` ignores ``disable_admin_auth``.
    typo_redirects : Mapping[str, str]
        Misspelled path to canonical path.
    typo_prefix_length : int
        Number of leading characters of a typo key used for prefix matches.
    """

    disable_admin_auth: bool = False
    site_env: str = "development"
    typo_redirects: cabc.Mapping[str, str] = dc.field(
        default_factory=lambda: dict(DEFAULT_TYPO_REDIRECTS)
    )
    typo_prefix_length: int = TYPO_PREFIX_LENGTH

    @property
    def auth_disabled(self) -> bool:
        return self.disable_admin_auth and self.site_env.lower() != "production"

    @classmethod
    def from_env(cls, environ: cabc.Mapping[str, str] | None = None) -> GateConfig:
        """Read ``DISABLE_ADMIN_AUTH`` and ``SITE_ENV`` from the environment."""
        env = os.environ if environ is None else environ
        return cls(
            disable_admin_auth=_flag(env.get("DISABLE_ADMIN_AUTH")),
            site_env=env.get("SITE_ENV", "development") or "development",
        )


__all__ = [
    "DEFAULT_TYPO_REDIRECTS",
    "TYPO_PREFIX_LENGTH",
    "UNAUTHORIZED_BODY",
    "GateConfig",
    "GateDecision",
    "GateRequest",
    "Outcome",
]
