"""Tests for AdminAuth (password check + Fernet bearer tokens)."""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from woviex.domain.exceptions import Unauthorized
from woviex.infrastructure.security import AdminAuth, hash_password


class TestPasswordCheck:
    def test_plaintext_password(self) -> None:
        auth = AdminAuth(password="hunter2")
        assert auth.check_password("hunter2")
        assert not auth.check_password("hunter3")

    def test_plaintext_is_trimmed(self) -> None:
        auth = AdminAuth(password="  hunter2\n")
        assert auth.check_password(" hunter2 ")

    def test_hashed_password(self) -> None:
        auth = AdminAuth(password_hash=hash_password("hunter2"))
        assert auth.check_password("hunter2")
        assert not auth.check_password("Hunter2")

    def test_hash_takes_precedence(self) -> None:
        auth = AdminAuth(password="plain", password_hash=hash_password("hashed"))
        assert auth.check_password("hashed")
        assert not auth.check_password("plain")

    def test_unconfigured_always_fails(self) -> None:
        auth = AdminAuth()
        assert not auth.configured
        assert not auth.check_password("")
        assert not auth.check_password("anything")

    def test_hash_format(self) -> None:
        assert hash_password("x").startswith("sha256:")
        assert len(hash_password("x")) == len("sha256:") + 64


class TestTokens:
    def test_issued_token_verifies(self) -> None:
        auth = AdminAuth(password="pw")
        claims = auth.verify_token(auth.issue_token())
        assert claims == {"sub": "admin", "role": "admin"}

    def test_garbage_token_rejected(self) -> None:
        with pytest.raises(Unauthorized):
            AdminAuth(password="pw").verify_token("not-a-token")

    def test_token_from_other_key_rejected(self) -> None:
        token = AdminAuth(password="pw").issue_token()
        with pytest.raises(Unauthorized):
            AdminAuth(password="pw").verify_token(token)

    def test_shared_signing_key_survives_restart(self) -> None:
        key = Fernet.generate_key()
        token = AdminAuth(password="pw", signing_key=key).issue_token()
        assert AdminAuth(password="pw", signing_key=key).verify_token(token)

    def test_non_ascii_token_rejected(self) -> None:
        with pytest.raises(Unauthorized):
            AdminAuth(password="pw").verify_token("tökén")
