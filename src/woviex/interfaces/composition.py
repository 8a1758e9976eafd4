"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

import base64
import hashlib
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from woviex.application.activity_log import ActivityLog
from woviex.application.origin_policy import OriginPolicy
from woviex.application.use_cases import VideoResolver
from woviex.domain.entities.admin import ScraperSettings
from woviex.domain.ports import MirrorPort
from woviex.infrastructure.cache import ResolutionCache, create_cache
from woviex.infrastructure.config.schema import AppConfig
from woviex.infrastructure.extraction import EmbedPageExtractor
from woviex.infrastructure.metrics import MetricsCollector
from woviex.infrastructure.mirror.telegram import NullMirror, TelegramChannelMirror
from woviex.infrastructure.persistence.record_store import CacheRecordStore
from woviex.infrastructure.security import AdminAuth, UrlVault
from woviex.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def _admin_signing_key(config: AppConfig) -> bytes | None:
    """Derive a stable Fernet key from the stream secret, if one is set."""
    secret = config.security.stream_secret
    if secret is None:
        return None
    digest = hashlib.sha256(b"admin:" + secret.get_secret_value().encode("utf-8"))
    return base64.urlsafe_b64encode(digest.digest())


def _build_mirror(config: AppConfig, http_client: httpx.AsyncClient) -> MirrorPort:
    tg = config.telegram
    if tg.bot_token is None or not tg.channel_id:
        log.info("telegram_mirror_disabled", reason="bot_token or channel_id missing")
        return NullMirror()
    log.info("telegram_mirror_configured", channel=tg.channel_id)
    return TelegramChannelMirror(
        http_client,
        bot_token=tg.bot_token.get_secret_value(),
        channel_id=tg.channel_id,
        api_base=tg.api_base,
        active=tg.active_on_startup,
    )


async def _initial_settings(store: CacheRecordStore, config: AppConfig) -> ScraperSettings:
    """Persisted settings win over the configured defaults."""
    persisted = await store.get_settings()
    if persisted is not None:
        log.info("scraper_settings_restored", **persisted.to_dict())
        return persisted
    return config.scraper


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Cache backend (record store persistence)
        2. HTTP client (stream relay + mirror)
        3. Mirror side channel
        4. Record store (cache + mirror)
        5. Extractor (owns its own session)
        6. Vault + admin auth
        7. Activity log, resolver, origin policy
    """
    state = cast(AppState, app.state)
    config = state.config
    log.debug("config_effective", config=config.to_sectioned_dict())

    # 0) Metrics collector (must exist before components that record)
    state.metrics = MetricsCollector()

    # 1) Cache backend
    cache = create_cache(
        backend=config.cache.backend,
        directory=str(config.cache.directory),
        max_concurrent=config.cache.max_concurrent,
    )
    await cache.__aenter__()
    state.cache = cache
    log.info("cache_initialized", backend=config.cache.backend)

    # 2) Shared HTTP client (stream relay reads are unbounded per request)
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(
            config.http_timeout_seconds,
            connect=config.http_connect_timeout_seconds,
        ),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=True,
    )
    log.info("http_client_initialized")

    # 3) Mirror side channel (optional)
    state.mirror = _build_mirror(config, state.http_client)

    # 4) Record store
    store = CacheRecordStore(
        cache=state.cache,
        mirror=state.mirror,
        max_log_entries=config.max_log_entries,
    )
    await store.seed_domains(config.security.default_domains)
    state.store = store
    log.info("record_store_initialized")

    # 5) Extractor
    state.extractor = EmbedPageExtractor(
        base_url=config.extraction.base_url,
        title_suffix=config.extraction.title_suffix,
        user_agent=config.http_user_agent,
    )
    log.info("extractor_initialized", base_url=config.extraction.base_url)

    # 6) Vault + admin auth
    secret = config.security.stream_secret
    state.vault = UrlVault.from_secret(
        secret.get_secret_value() if secret is not None else None
    )
    password = config.security.admin_password
    state.admin_auth = AdminAuth(
        password=password.get_secret_value() if password is not None else None,
        password_hash=config.security.admin_password_hash,
        token_ttl_seconds=config.security.token_ttl_hours * 3600,
        signing_key=_admin_signing_key(config),
    )

    # 7) Activity log, resolver, origin policy
    state.activity_log = ActivityLog(state.store)
    state.resolution_cache = ResolutionCache()
    state.resolver = VideoResolver(
        extractor=state.extractor,
        cache=state.resolution_cache,
        store=state.store,
        activity_log=state.activity_log,
        settings=await _initial_settings(store, config),
        metrics=state.metrics,
        revalidate_expired_urls=config.revalidate_expired_urls,
    )
    state.origin_policy = OriginPolicy(
        state.store,
        enforce=config.security.enforce_origin_whitelist,
    )
    log.info(
        "resolver_initialized",
        enforce_origin_whitelist=config.security.enforce_origin_whitelist,
        **state.resolver.settings.to_dict(),
    )

    await state.activity_log.info("System", "Server started")
    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.extractor.aclose()
        log.info("extractor_closed")

        await state.mirror.aclose()
        log.info("mirror_closed")

        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.cache.aclose()
        log.info("cache_closed")

        log.info("app_shutdown_complete")
