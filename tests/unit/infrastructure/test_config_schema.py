"""Tests for the pydantic configuration models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from woviex.infrastructure.config import AppConfig
from woviex.infrastructure.security import hash_password


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.app_name == "woviex"
        assert config.log_format == "console"
        assert config.cache.backend == "memory"
        assert config.scraper.cache_ttl == 3600
        assert config.security.enforce_origin_whitelist is False
        assert config.telegram.configured is False

    def test_prod_defaults_to_json_logs(self) -> None:
        assert AppConfig(environment="prod").log_format == "json"

    def test_sectioned_http_values(self) -> None:
        config = AppConfig.model_validate(
            {"http": {"timeout_seconds": 12.5, "user_agent": "UA/1"}}
        )
        assert config.http_timeout_seconds == 12.5
        assert config.http_user_agent == "UA/1"

    def test_public_base_url_trailing_slash(self) -> None:
        config = AppConfig(public_base_url="https://video.example.com/")
        assert config.public_base_url == "https://video.example.com"

    def test_cache_dir_alias(self) -> None:
        config = AppConfig.model_validate({"cache": {"dir": "/tmp/woviex-db"}})
        assert config.cache.directory == Path("/tmp/woviex-db")

    @pytest.mark.parametrize("ttl", [10, 100_000])
    def test_scraper_ttl_bounds(self, ttl: int) -> None:
        with pytest.raises(ValidationError):
            AppConfig.model_validate({"scraper": {"cache_ttl": ttl}})

    def test_password_hash_validated(self) -> None:
        good = hash_password("pw").upper().replace("SHA256", "sha256")
        config = AppConfig.model_validate({"security": {"admin_password_hash": good}})
        assert config.security.admin_password_hash == hash_password("pw")
        with pytest.raises(ValidationError):
            AppConfig.model_validate({"security": {"admin_password_hash": "md5:abc"}})

    def test_secrets_masked_in_dump(self) -> None:
        config = AppConfig.model_validate(
            {"security": {"stream_secret": "topsecret", "admin_password": "pw"}}
        )
        dumped = str(config.to_sectioned_dict())
        assert "topsecret" not in dumped
        assert "'pw'" not in dumped

    def test_telegram_configured(self) -> None:
        config = AppConfig.model_validate(
            {"telegram": {"bot_token": "123:abc", "channel_id": "@chan"}}
        )
        assert config.telegram.configured
