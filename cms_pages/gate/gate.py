"""Request-time route gate."""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ

from .auth import DenyAllVerifier
from .models import GateConfig, GateDecision
from .rules import DEFAULT_RULES, GateContext

if typ.TYPE_CHECKING:
    from .auth import TokenVerifier
    from .models import GateRequest
    from .routes import RouteTable
    from .rules import GateRule

logger = logging.getLogger(__name__)


class RouteGate:
    """Decide what happens to a request before any page handler runs.

    Parameters
    ----------
    route_table : RouteTable
        Membership snapshot loaded from the manifest.
    verifier : TokenVerifier, optional
        Admin token verifier; without one every admin token is rejected.
    config : GateConfig, optional
        Operational toggles; defaults to :meth:`GateConfig.from_env`.
    rules : Sequence[GateRule], optional
        Rule chain, :data:`~cms_pages.gate.rules.DEFAULT_RULES` by default.
    """

    def __init__(
        self,
        route_table: RouteTable,
        verifier: TokenVerifier | None = None,
        config: GateConfig | None = None,
        rules: cabc.Sequence[GateRule] = DEFAULT_RULES,
    ) -> None:
        self._context = GateContext(
            routes=route_table,
            verifier=verifier or DenyAllVerifier(),
            config=config or GateConfig.from_env(),
        )
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[GateRule, ...]:
        return self._rules

    def decide(self, request: GateRequest) -> GateDecision:
        """Return the decision of the first rule matching ``request``."""
        for rule in self._rules:
            if rule.matches(request, self._context):
                decision = rule.decide(request, self._context)
                logger.debug(
                    "%s -> %s via %s", request.path, decision.outcome, decision.rule
                )
                return decision
        return GateDecision.pass_through("not-found")


__all__ = ["RouteGate"]
