"""Admin-side domain entities (settings, domain whitelist, activity log)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt

LogLevel = Literal["INFO", "WARN", "ERROR", "DEBUG"]
LOG_LEVELS: tuple[str, ...] = ("INFO", "WARN", "ERROR", "DEBUG")

TIMEOUT_BOUNDS = (5, 120)
CACHE_TTL_BOUNDS = (60, 86_400)


class ScraperSettings(BaseModel):
    """Runtime-tunable scraper behaviour.

    ``timeout`` and ``cache_ttl`` are both in seconds.  Field names are
    accepted as well as the camelCase aliases the admin API speaks, so the
    same model validates YAML defaults, persisted records and updates.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timeout: StrictInt = Field(
        default=30, ge=TIMEOUT_BOUNDS[0], le=TIMEOUT_BOUNDS[1]
    )
    auto_retry: StrictBool = Field(default=True, alias="autoRetry")
    cache_enabled: StrictBool = Field(default=True, alias="cacheEnabled")
    cache_ttl: StrictInt = Field(
        default=3600,
        ge=CACHE_TTL_BOUNDS[0],
        le=CACHE_TTL_BOUNDS[1],
        alias="cacheTTL",
    )

    def merged(self, **changes: Any) -> ScraperSettings:
        """Return a validated copy with the given fields replaced.

        ``None`` values are ignored.

        Raises:
            pydantic.ValidationError: (a ValueError) on out-of-range or
                wrongly typed values.
        """
        updates = {k: v for k, v in changes.items() if v is not None}
        return ScraperSettings.model_validate({**self.model_dump(), **updates})

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScraperSettings:
        return cls.model_validate(data)


@dataclass(frozen=True)
class DomainRecord:
    """A whitelisted origin domain."""

    id: int
    domain: str
    active: bool
    added_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "domain": self.domain,
            "active": self.active,
            "addedAt": self.added_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DomainRecord:
        return cls(
            id=int(data["id"]),
            domain=data["domain"],
            active=bool(data.get("active", True)),
            added_at=datetime.fromisoformat(data["addedAt"]),
        )


@dataclass(frozen=True)
class LogEntry:
    """One append-only activity log line."""

    id: int
    timestamp: datetime
    level: LogLevel
    source: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogEntry:
        return cls(
            id=int(data["id"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            level=data["level"],
            source=data["source"],
            message=data["message"],
        )
