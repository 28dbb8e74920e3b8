"""Token verification seam used by the admin branch of the gate."""

from __future__ import annotations

import logging
import typing as typ

logger = logging.getLogger(__name__)


@typ.runtime_checkable
class TokenVerifier(typ.Protocol):
    """Anything that can tell whether an admin bearer token is valid."""

    def verify(self, token: str) -> bool: ...


class DenyAllVerifier:
    """Verifier used when no credential source is configured."""

    def verify(self, token: str) -> bool:
        return False


def verify_token(verifier: TokenVerifier, token: str) -> bool:
    """Call ``verifier`` once and treat any failure as an invalid token.

    Exceptions, including timeouts raised by remote verifiers, are logged and
    reported as ``False`` so one bad verification never breaks routing.
    """
    try:
        return verifier.verify(token) is True
    except Exception:
        logger.exception("Token verification failed; treating token as invalid")
        return False


__all__ = ["DenyAllVerifier", "TokenVerifier", "verify_token"]
