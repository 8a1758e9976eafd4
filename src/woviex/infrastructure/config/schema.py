"""Configuration models: the validated AppConfig and the WOVIEX_* env layer."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from woviex.domain.entities.admin import ScraperSettings

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
CacheBackend = Literal["memory", "diskcache"]


def _normalize_path(value: Any) -> Path:
    """Expand ``~`` only; the directory is created later by diskcache."""
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class CacheConfig(BaseModel):
    """Backing store for the record store."""

    backend: CacheBackend = Field(
        default="memory",
        description="'memory' (process-local) or 'diskcache' (SQLite, durable).",
    )
    directory: Path = Field(
        default=Path("./.cache/woviex"),
        validation_alias=AliasChoices("directory", "dir"),
        description="Diskcache SQLite DB path (only when backend=diskcache).",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max parallel diskcache ops (semaphore limit).",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_directory(cls, v: Any) -> Path:
        return _normalize_path(v)


class ExtractionConfig(BaseModel):
    """Where and how embed pages are scraped."""

    base_url: str = Field(
        default="https://dl.letsembed.cc/",
        description="Embed source base URL; the video id is passed as ?id=.",
    )
    title_suffix: str = Field(
        default=" - letsembed.cc",
        description="Suffix stripped from the page <title>.",
    )


class SecurityConfig(BaseModel):
    """Secrets and access control toggles."""

    stream_secret: Optional[SecretStr] = Field(
        default=None,
        description="Key material for stream tokens. Ephemeral key if unset.",
    )
    admin_password: Optional[SecretStr] = Field(
        default=None,
        description="Plaintext admin password.",
    )
    admin_password_hash: Optional[str] = Field(
        default=None,
        description="Pre-hashed admin password, 'sha256:<hex>'.",
    )
    token_ttl_hours: int = Field(default=24, ge=1)
    enforce_origin_whitelist: bool = Field(
        default=False,
        description="Reject /api requests whose Origin is not whitelisted.",
    )
    default_domains: list[str] = Field(default_factory=lambda: ["localhost"])

    @field_validator("admin_password_hash")
    @classmethod
    def _validate_hash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        algo, _, digest = v.partition(":")
        if algo != "sha256" or len(digest) != 64:
            raise ValueError("admin_password_hash must look like 'sha256:<64 hex>'")
        int(digest, 16)
        return v.lower()


class TelegramConfig(BaseModel):
    """Bot API mirror of store mutations (optional)."""

    bot_token: Optional[SecretStr] = None
    channel_id: Optional[str] = None
    api_base: str = "https://api.telegram.org"
    active_on_startup: bool = True

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.channel_id)


class AppConfig(BaseModel):
    """Validated application configuration.

    YAML is sectioned (``http``, ``logging``, ``cache``, ``scraper``,
    ``security``, ...); flat aliases let env/CLI layers address the same
    fields.  Built only through ``load_config()``.
    """

    app_name: str = Field(default="woviex", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout for upstream HEAD probes in the stream proxy.",
    )
    http_connect_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "http_connect_timeout_seconds",
            AliasPath("http", "connect_timeout_seconds"),
        ),
        description="Connect timeout for the stream relay (reads are unbounded).",
    )
    http_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
        ),
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    public_base_url: Optional[str] = Field(
        default=None,
        description="Absolute base for /stream links (else taken from the request).",
    )
    max_log_entries: int = Field(
        default=5000,
        description="Activity log cap; oldest entries are dropped.",
    )
    revalidate_expired_urls: bool = Field(
        default=True,
        description="Re-extract stored records whose signed URL has expired.",
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    # initial runtime settings; admins may change them later
    scraper: ScraperSettings = Field(default_factory=ScraperSettings)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)

    @field_validator("http_timeout_seconds", "http_connect_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http timeouts must be > 0")
        return v

    @field_validator("max_log_entries")
    @classmethod
    def _validate_max_log_entries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_log_entries must be >= 1")
        return v

    @field_validator("public_base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip("/") if v else v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Sectioned dump mirroring config.yaml, with secrets masked."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "connect_timeout_seconds": self.http_connect_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "public_base_url": self.public_base_url,
            "max_log_entries": self.max_log_entries,
            "revalidate_expired_urls": self.revalidate_expired_urls,
            "cache": {
                "backend": self.cache.backend,
                "dir": str(self.cache.directory),
                "max_concurrent": self.cache.max_concurrent,
            },
            "extraction": self.extraction.model_dump(),
            "scraper": self.scraper.model_dump(),
            "security": self.security.model_dump(mode="json"),
            "telegram": self.telegram.model_dump(mode="json"),
        }


class EnvOverrides(BaseSettings):
    """Flat ``WOVIEX_*`` environment overrides; unset fields stay None.

    e.g. ``WOVIEX_STREAM_SECRET``, ``WOVIEX_ADMIN_PASSWORD_HASH``,
    ``WOVIEX_SCRAPER_CACHE_TTL``, ``WOVIEX_CACHE_BACKEND``.
    """

    model_config = SettingsConfigDict(
        env_prefix="WOVIEX_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_connect_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    public_base_url: Optional[str] = None
    max_log_entries: Optional[int] = None
    revalidate_expired_urls: Optional[bool] = None

    cache_backend: Optional[CacheBackend] = None
    cache_dir: Optional[Path] = None

    extraction_base_url: Optional[str] = None

    scraper_timeout: Optional[int] = None
    scraper_auto_retry: Optional[bool] = None
    scraper_cache_enabled: Optional[bool] = None
    scraper_cache_ttl: Optional[int] = None

    stream_secret: Optional[str] = None
    admin_password: Optional[str] = None
    admin_password_hash: Optional[str] = None
    token_ttl_hours: Optional[int] = None
    enforce_origin_whitelist: Optional[bool] = None

    telegram_bot_token: Optional[str] = None
    telegram_channel_id: Optional[str] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """Only the variables that are actually set."""
        return self.model_dump(exclude_none=True)
