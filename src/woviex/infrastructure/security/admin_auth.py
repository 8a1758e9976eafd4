"""Admin password check and bearer token issuance (Fernet)."""

from __future__ import annotations

import hashlib
import hmac
import json

import structlog
from cryptography.fernet import Fernet, InvalidToken as FernetInvalidToken

from woviex.domain.exceptions import Unauthorized

log = structlog.get_logger(__name__)


def hash_password(password: str) -> str:
    """Return the ``sha256:<hex>`` form accepted as a pre-hashed password."""
    return "sha256:" + hashlib.sha256(password.encode("utf-8")).hexdigest()


class AdminAuth:
    """Verifies the admin password and issues/validates bearer tokens.

    Exactly one of *password* (plaintext) or *password_hash*
    (``sha256:<hex>``) is normally configured; with neither, every login
    fails.
    """

    def __init__(
        self,
        *,
        password: str | None = None,
        password_hash: str | None = None,
        token_ttl_seconds: int = 24 * 3600,
        signing_key: bytes | None = None,
    ) -> None:
        self._password = password.strip() if password else None
        self._password_hash = password_hash.lower() if password_hash else None
        self._ttl = token_ttl_seconds
        self._fernet = Fernet(signing_key or Fernet.generate_key())
        if not (self._password or self._password_hash):
            log.warning("admin_password_not_configured")

    @property
    def configured(self) -> bool:
        return bool(self._password or self._password_hash)

    def check_password(self, candidate: str) -> bool:
        if self._password_hash:
            return hmac.compare_digest(hash_password(candidate), self._password_hash)
        if self._password:
            return hmac.compare_digest(
                candidate.strip().encode("utf-8"), self._password.encode("utf-8")
            )
        return False

    def issue_token(self) -> str:
        payload = json.dumps({"sub": "admin", "role": "admin"}).encode("utf-8")
        return self._fernet.encrypt(payload).decode("ascii")

    def verify_token(self, token: str) -> dict[str, str]:
        """Return the token claims or raise ``Unauthorized``."""
        try:
            raw = self._fernet.decrypt(token.encode("ascii"), ttl=self._ttl)
        except (FernetInvalidToken, UnicodeEncodeError) as exc:
            raise Unauthorized("invalid or expired token") from exc
        claims = json.loads(raw)
        if claims.get("role") != "admin":
            raise Unauthorized("insufficient role")
        return claims
