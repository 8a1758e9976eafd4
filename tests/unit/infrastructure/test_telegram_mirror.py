"""Tests for the Telegram channel mirror."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from woviex.domain.ports import MirrorPort
from woviex.infrastructure.mirror.telegram import NullMirror, TelegramChannelMirror

_SEND_URL = "https://api.telegram.org/botTOKEN/sendMessage"


def _mirror(client: httpx.AsyncClient, active: bool = True) -> TelegramChannelMirror:
    return TelegramChannelMirror(
        client, bot_token="TOKEN", channel_id="@woviex", active=active, timeout=2.0
    )


class TestTelegramChannelMirror:
    def test_satisfies_port(self) -> None:
        assert isinstance(_mirror(httpx.AsyncClient()), MirrorPort)
        assert isinstance(NullMirror(), MirrorPort)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_publish_sends_data_message(self) -> None:
        route = respx.post(_SEND_URL).respond(200, json={"ok": True})
        async with httpx.AsyncClient() as client:
            mirror = _mirror(client)
            mirror.publish("video:42", {"videoId": "42"})
            await mirror.aclose()

        payload = json.loads(route.calls.last.request.content)
        assert payload["chat_id"] == "@woviex"
        assert payload["text"].startswith("DATA:video:42\n")
        assert json.loads(payload["text"].split("\n", 1)[1]) == {"videoId": "42"}
        assert mirror.sent == 1

    @respx.mock
    @pytest.mark.asyncio()
    async def test_failures_are_recorded_not_raised(self) -> None:
        respx.post(_SEND_URL).respond(403)
        async with httpx.AsyncClient() as client:
            mirror = _mirror(client)
            mirror.publish("settings", {"timeout": 30})
            await mirror.aclose()

        status = mirror.status()
        assert status["failed"] == 1
        assert status["recentErrors"][0]["error"] == "HTTP 403"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_stopped_mirror_sends_nothing(self) -> None:
        route = respx.post(_SEND_URL).respond(200)
        async with httpx.AsyncClient() as client:
            mirror = _mirror(client, active=False)
            mirror.publish("video:1", {})
            await mirror.aclose()
        assert not route.called

    def test_start_stop_toggle(self) -> None:
        mirror = _mirror(httpx.AsyncClient(), active=False)
        assert mirror.start() is True
        assert mirror.start() is False
        assert mirror.enabled
        assert mirror.stop() is True
        assert mirror.stop() is False
        assert not mirror.status()["active"]


class TestNullMirror:
    def test_inert(self) -> None:
        mirror = NullMirror()
        mirror.publish("video:1", {})
        assert not mirror.enabled
        assert mirror.start() is False
        assert mirror.status()["configured"] is False
