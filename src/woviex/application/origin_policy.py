"""Origin whitelist policy for the public API."""

from __future__ import annotations

from urllib.parse import urlsplit

import structlog

from woviex.domain.ports.record_store import RecordStorePort

log = structlog.get_logger(__name__)


def origin_host(origin: str | None, referer: str | None) -> str | None:
    """Hostname of the Origin header, falling back to the Referer."""
    for value in (origin, referer):
        if value and value != "null":
            host = urlsplit(value).hostname
            if host:
                return host
    return None


class OriginPolicy:
    """Checks request origins against the active domain whitelist.

    With ``enforce=False`` every request is allowed; the whitelist is still
    kept and editable so enforcement can be switched on by configuration.
    Requests without any Origin/Referer (same-origin navigations, curl)
    are allowed.
    """

    def __init__(self, store: RecordStorePort, *, enforce: bool = False) -> None:
        self._store = store
        self.enforce = enforce

    async def is_allowed(self, origin: str | None, referer: str | None = None) -> bool:
        if not self.enforce:
            return True
        host = origin_host(origin, referer)
        if host is None:
            return True
        allowed = await self._store.is_domain_whitelisted(host)
        if not allowed:
            log.warning("origin_rejected", host=host)
        return allowed
