from __future__ import annotations

from .admin_auth import AdminAuth, hash_password
from .url_vault import UrlVault

__all__ = ["AdminAuth", "UrlVault", "hash_password"]
