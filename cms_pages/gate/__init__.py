"""Request-time routing decisions for the marketing site.

:class:`RouteGate` evaluates an ordered rule chain against a
:class:`GateRequest` and returns a :class:`GateDecision`: pass, redirect,
deny, or pass through to the not-found handler. Route membership and managed
redirects come from the compiled manifest via :class:`RouteTable`.

Examples
--------
>>> from cms_pages.gate import GateConfig, GateRequest, RouteGate, RouteTable
>>> gate = RouteGate(RouteTable(), config=GateConfig())
>>> gate.decide(GateRequest("/tos")).location
'/terms-of-service'
"""

from .auth import DenyAllVerifier, TokenVerifier, verify_token
from .gate import RouteGate
from .models import (
    DEFAULT_TYPO_REDIRECTS,
    GateConfig,
    GateDecision,
    GateRequest,
    Outcome,
)
from .routes import RedirectTarget, RouteTable
from .rules import DEFAULT_RULES, GateContext, GateRule, typo_target

__all__ = [
    "DEFAULT_RULES",
    "DEFAULT_TYPO_REDIRECTS",
    "DenyAllVerifier",
    "GateConfig",
    "GateContext",
    "GateDecision",
    "GateRequest",
    "GateRule",
    "Outcome",
    "RedirectTarget",
    "RouteGate",
    "RouteTable",
    "TokenVerifier",
    "typo_target",
    "verify_token",
]
