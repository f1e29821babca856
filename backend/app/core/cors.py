import logging
from collections.abc import Iterable
from typing import Final

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

WILDCARD: Final[str] = "*"
ALLOWED_METHODS: Final[tuple[str, ...]] = ("GET", "POST", "DELETE", "OPTIONS")
ALLOWED_HEADERS: Final[tuple[str, ...]] = ("Content-Type", "Authorization")


class OriginPolicy:
    """Decides whether a request origin may talk to the API from a browser.

    Requests without an ``Origin`` header come from non-browser clients and are
    always allowed. Otherwise the origin must match an allowlist entry exactly,
    unless the allowlist contains the wildcard.
    """

    def __init__(self, allowed_origins: Iterable[str]) -> None:
        self.allowed_origins: frozenset[str] = frozenset(allowed_origins)
        self.allow_all = WILDCARD in self.allowed_origins

    def is_allowed(self, origin: str | None) -> bool:
        if origin is None:
            allowed = True
        elif self.allow_all:
            allowed = True
        else:
            allowed = origin in self.allowed_origins
        logger.debug("Origin %r evaluated: %s", origin, "allow" if allowed else "deny")
        return allowed


class OriginPolicyMiddleware(CORSMiddleware):
    """Starlette CORS middleware whose origin check is delegated to an OriginPolicy."""

    def __init__(self, app: ASGIApp, policy: OriginPolicy) -> None:
        super().__init__(
            app,
            allow_origins=sorted(policy.allowed_origins),
            allow_methods=ALLOWED_METHODS,
            allow_headers=ALLOWED_HEADERS,
        )
        self.policy = policy

    def is_allowed_origin(self, origin: str) -> bool:
        return self.policy.is_allowed(origin)
