"""Telegram channel mirror: best-effort copy of store mutations.

Each ``publish`` schedules a Bot API ``sendMessage`` to the configured
channel in the background; callers never await it.  Messages look like::

    DATA:video:42
    {"videoId": "42", ...}

Failures are counted and kept in a small ring buffer for the admin status
endpoint; they are never raised.
"""

from __future__ import annotations

import asyncio
import json
from collections import deque
from contextlib import suppress
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

log = structlog.get_logger(__name__)

_MAX_MESSAGE_CHARS = 4096
_RECENT_ERRORS = 20


class NullMirror:
    """Mirror used when no bot token/channel is configured."""

    @property
    def enabled(self) -> bool:
        return False

    def publish(self, kind: str, payload: dict[str, Any]) -> None:
        return None

    def start(self) -> bool:
        return False

    def stop(self) -> bool:
        return False

    def status(self) -> dict[str, Any]:
        return {
            "active": False,
            "configured": False,
            "sent": 0,
            "failed": 0,
            "pending": 0,
            "recentErrors": [],
        }

    async def aclose(self) -> None:
        return None


class TelegramChannelMirror:
    """Posts ``DATA:{key}`` messages to a Telegram channel via the Bot API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        bot_token: str,
        channel_id: str,
        api_base: str = "https://api.telegram.org",
        active: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._endpoint = f"{api_base.rstrip('/')}/bot{bot_token}/sendMessage"
        self._channel_id = channel_id
        self._active = active
        self._timeout = timeout
        self._tasks: set[asyncio.Task[None]] = set()
        self._errors: deque[dict[str, str]] = deque(maxlen=_RECENT_ERRORS)
        self.sent = 0
        self.failed = 0

    @property
    def enabled(self) -> bool:
        return self._active

    def start(self) -> bool:
        """Resume mirroring. Returns False if it was already active."""
        if self._active:
            return False
        self._active = True
        log.info("telegram_mirror_started", channel=self._channel_id)
        return True

    def stop(self) -> bool:
        """Pause mirroring. Returns False if it was already stopped."""
        if not self._active:
            return False
        self._active = False
        log.info("telegram_mirror_stopped", channel=self._channel_id)
        return True

    def publish(self, kind: str, payload: dict[str, Any]) -> None:
        if not self._active:
            return
        text = f"DATA:{kind}\n{json.dumps(payload, indent=2, default=str)}"
        task = asyncio.get_running_loop().create_task(self._send(kind, text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send(self, kind: str, text: str) -> None:
        try:
            resp = await self._http.post(
                self._endpoint,
                json={"chat_id": self._channel_id, "text": text[:_MAX_MESSAGE_CHARS]},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            self._record_failure(kind, type(exc).__name__)
            return
        if resp.status_code != 200:
            self._record_failure(kind, f"HTTP {resp.status_code}")
            return
        self.sent += 1
        log.debug("telegram_mirror_sent", kind=kind)

    def _record_failure(self, kind: str, error: str) -> None:
        self.failed += 1
        self._errors.append(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "key": kind,
                "error": error,
            }
        )
        log.warning("telegram_mirror_failed", kind=kind, error=error)

    def status(self) -> dict[str, Any]:
        return {
            "active": self._active,
            "configured": True,
            "sent": self.sent,
            "failed": self.failed,
            "pending": len(self._tasks),
            "recentErrors": list(self._errors),
        }

    async def aclose(self) -> None:
        """Wait briefly for in-flight messages, then cancel the rest."""
        if not self._tasks:
            return
        _, pending = await asyncio.wait(set(self._tasks), timeout=self._timeout)
        for task in pending:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        log.info("telegram_mirror_closed", dropped=len(pending))
