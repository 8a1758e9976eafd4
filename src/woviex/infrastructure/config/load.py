"""Layered configuration loading.

Precedence (lowest first)::

    defaults < YAML file < bare env vars < WOVIEX_* env vars < CLI

Bare env vars (``ADMIN_PASSWORD``, ``TELEGRAM_BOT_TOKEN``, ...) are the
names common PaaS deployments already export; the prefixed ones win when
both are present.
"""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import structlog
import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

log = structlog.get_logger(__name__)

_SECTIONS = frozenset(
    {"http", "logging", "cache", "extraction", "scraper", "security", "telegram"}
)

_TOP_LEVEL = (
    "app_name",
    "environment",
    "public_base_url",
    "max_log_entries",
    "revalidate_expired_urls",
)

# flat key (env/CLI) -> (section, key inside section)
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_connect_timeout_seconds": ("http", "connect_timeout_seconds"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "cache_backend": ("cache", "backend"),
    "cache_dir": ("cache", "dir"),
    "extraction_base_url": ("extraction", "base_url"),
    "scraper_timeout": ("scraper", "timeout"),
    "scraper_auto_retry": ("scraper", "auto_retry"),
    "scraper_cache_enabled": ("scraper", "cache_enabled"),
    "scraper_cache_ttl": ("scraper", "cache_ttl"),
    "stream_secret": ("security", "stream_secret"),
    "admin_password": ("security", "admin_password"),
    "admin_password_hash": ("security", "admin_password_hash"),
    "token_ttl_hours": ("security", "token_ttl_hours"),
    "enforce_origin_whitelist": ("security", "enforce_origin_whitelist"),
    "telegram_bot_token": ("telegram", "bot_token"),
    "telegram_channel_id": ("telegram", "channel_id"),
}

# unprefixed env var -> flat key
_BARE_ENV: dict[str, str] = {
    "ADMIN_PASSWORD": "admin_password",
    "ADMIN_PASSWORD_HASH": "admin_password_hash",
    "TELEGRAM_BOT_TOKEN": "telegram_bot_token",
    "TELEGRAM_CHANNEL_ID": "telegram_channel_id",
    "PUBLIC_URL": "public_base_url",
}


def _merge_into(target: dict[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge *layer* into *target* (nested dicts merge, anything else replaces)."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = value
    return target


def _sectioned(data: Mapping[str, Any]) -> dict[str, Any]:
    """Bring a layer into the sectioned shape AppConfig validates."""
    out: dict[str, Any] = {
        name: dict(value)
        for name, value in data.items()
        if name in _SECTIONS and isinstance(value, Mapping)
    }
    out.update({key: data[key] for key in _TOP_LEVEL if key in data})
    for flat, (section, key) in _FLAT_KEYS.items():
        if flat in data:
            out.setdefault(section, {})[key] = data[flat]
    return out


def _yaml_layer(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def _bare_env_layer() -> dict[str, Any]:
    return {
        flat: os.environ[name]
        for name, flat in _BARE_ENV.items()
        if os.environ.get(name)
    }


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Merge all configuration layers and validate the result once.

    Has no filesystem side effects beyond reading the given files.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        # .env values join the environment without clobbering real vars
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = [deepcopy(DEFAULT_CONFIG)]
    if config_path is not None:
        layers.append(_yaml_layer(config_path))
    layers.append(_bare_env_layer())
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged: dict[str, Any] = {}
    for layer in layers:
        _merge_into(merged, _sectioned(layer))

    config = AppConfig.model_validate(merged)
    log.debug(
        "config_loaded",
        yaml=str(config_path) if config_path else None,
        environment=config.environment,
        cache_backend=config.cache.backend,
    )
    return config
