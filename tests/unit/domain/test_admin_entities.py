"""Tests for admin domain entities (settings, domains, log entries)."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from woviex.domain.entities import DomainRecord, LogEntry, ScraperSettings


class TestScraperSettings:
    def test_defaults(self) -> None:
        s = ScraperSettings()
        assert s.timeout == 30
        assert s.auto_retry is True
        assert s.cache_enabled is True
        assert s.cache_ttl == 3600

    @pytest.mark.parametrize("timeout", [5, 60, 120])
    def test_timeout_bounds_inclusive(self, timeout: int) -> None:
        assert ScraperSettings(timeout=timeout).timeout == timeout

    @pytest.mark.parametrize("timeout", [4, 121, 0, -1])
    def test_timeout_out_of_range(self, timeout: int) -> None:
        with pytest.raises(ValueError, match="timeout"):
            ScraperSettings(timeout=timeout)

    @pytest.mark.parametrize("ttl", [59, 86_401])
    def test_cache_ttl_out_of_range(self, ttl: int) -> None:
        with pytest.raises(ValueError, match="(?i)cache_?ttl"):
            ScraperSettings(cache_ttl=ttl)

    def test_rejects_bool_as_int(self) -> None:
        with pytest.raises(ValueError):
            ScraperSettings(timeout=True)  # type: ignore[arg-type]

    def test_rejects_non_bool_flag(self) -> None:
        with pytest.raises(ValueError, match="(?i)auto_?retry"):
            ScraperSettings(auto_retry="yes")  # type: ignore[arg-type]

    def test_merged_ignores_none(self) -> None:
        s = ScraperSettings().merged(timeout=60, auto_retry=None)
        assert s.timeout == 60
        assert s.auto_retry is True

    def test_merged_validates(self) -> None:
        with pytest.raises(ValueError):
            ScraperSettings().merged(cache_ttl=10)

    def test_dict_keys(self) -> None:
        data = ScraperSettings(cache_ttl=600).to_dict()
        assert data == {
            "timeout": 30,
            "autoRetry": True,
            "cacheEnabled": True,
            "cacheTTL": 600,
        }
        assert ScraperSettings.from_dict(data).cache_ttl == 600

    def test_field_names_and_aliases_both_accepted(self) -> None:
        by_alias = ScraperSettings.model_validate({"cacheTTL": 600, "autoRetry": False})
        by_name = ScraperSettings.model_validate({"cache_ttl": 600, "auto_retry": False})
        assert by_alias == by_name

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            ScraperSettings().timeout = 60  # type: ignore[misc]

    def test_merged_rejects_wrong_type(self) -> None:
        with pytest.raises(ValueError):
            ScraperSettings().merged(cache_enabled="no")


class TestDomainRecord:
    def test_dict_roundtrip(self) -> None:
        rec = DomainRecord(
            id=1,
            domain="example.com",
            active=True,
            added_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        assert rec.to_dict()["addedAt"] == "2025-01-01T00:00:00+00:00"
        assert DomainRecord.from_dict(rec.to_dict()) == rec


class TestLogEntry:
    def test_dict_has_iso_timestamp(self) -> None:
        entry = LogEntry(
            id=7,
            timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc),
            level="WARN",
            source="Auth",
            message="Failed admin login attempt",
        )
        data = entry.to_dict()
        assert data["timestamp"] == "2025-01-01T00:00:00+00:00"
        assert data["level"] == "WARN"
        assert LogEntry.from_dict(data) == entry
