"""Stream token encryption (AES-256-GCM).

Tokens look like ``{nonceHex}:{ciphertextHex}`` where the ciphertext
carries the GCM tag, so any tampering fails authentication.
"""

from __future__ import annotations

import hashlib
import os

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from woviex.domain.exceptions import InvalidToken

log = structlog.get_logger(__name__)

_NONCE_BYTES = 12


def derive_key(secret: str) -> bytes:
    """Stretch an arbitrary configured secret to a 32-byte AES key."""
    return hashlib.sha256(secret.encode("utf-8")).digest()


class UrlVault:
    """Encrypts media URLs into opaque, server-only-decryptable tokens."""

    def __init__(self, key: bytes) -> None:
        if len(key) != 32:
            raise ValueError("UrlVault key must be 32 bytes")
        self._aead = AESGCM(key)

    @classmethod
    def from_secret(cls, secret: str | None) -> UrlVault:
        """Build from the configured secret, or an ephemeral key if unset."""
        if secret:
            return cls(derive_key(secret))
        log.warning(
            "stream_secret_missing",
            detail="generated ephemeral key; stream tokens will not survive a restart",
        )
        return cls(AESGCM.generate_key(bit_length=256))

    def encrypt(self, url: str) -> str:
        nonce = os.urandom(_NONCE_BYTES)
        ciphertext = self._aead.encrypt(nonce, url.encode("utf-8"), None)
        return f"{nonce.hex()}:{ciphertext.hex()}"

    def decrypt(self, token: str) -> str:
        nonce_hex, sep, cipher_hex = token.partition(":")
        if not sep or not nonce_hex or not cipher_hex:
            raise InvalidToken("malformed stream token")
        try:
            nonce = bytes.fromhex(nonce_hex)
            ciphertext = bytes.fromhex(cipher_hex)
        except ValueError as exc:
            raise InvalidToken("malformed stream token") from exc
        if len(nonce) != _NONCE_BYTES:
            raise InvalidToken("malformed stream token")
        try:
            plaintext = self._aead.decrypt(nonce, ciphertext, None)
        except InvalidTag as exc:
            raise InvalidToken("stream token failed authentication") from exc
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidToken("stream token payload is not text") from exc
