"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "woviex",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "connect_timeout_seconds": 10.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "backend": "memory",
        "dir": "./.cache/woviex",
        "max_concurrent": 10,
    },
    "extraction": {
        "base_url": "https://dl.letsembed.cc/",
        "title_suffix": " - letsembed.cc",
    },
    "scraper": {
        "timeout": 30,
        "auto_retry": True,
        "cache_enabled": True,
        "cache_ttl": 3600,
    },
    "security": {
        "token_ttl_hours": 24,
        "enforce_origin_whitelist": False,
        "default_domains": ["localhost"],
    },
    "max_log_entries": 5000,
    "revalidate_expired_urls": True,
}
