"""End-to-end tests for video resolution, redirect and player endpoints.

Endpoints covered:
    GET /api/video/{id}
    GET /api/video/{season}/{episode}/{id}
    GET /api/videos/recent
    GET /tahh/{id}
    GET /fulltaah/{id}
    GET /api/health
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from woviex import __version__
from woviex.domain.exceptions import ExtractionFailed, UpstreamError

pytestmark = pytest.mark.e2e


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}


class TestGetVideo:
    def test_success_returns_stream_link(
        self, client: TestClient, app: FastAPI
    ) -> None:
        resp = client.get("/api/video/42")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        data = body["data"]
        assert data["videoId"] == "42"
        assert data["title"] == "Big Buck Bunny"
        assert data["quality"] == "1080p"
        assert data["url"].startswith("http://testserver/stream/")
        token = data["url"].rsplit("/", 1)[1]
        assert app.state.vault.decrypt(token) == "https://media.example.com/films/42.mp4"

    def test_plaintext_url_never_exposed(self, client: TestClient) -> None:
        resp = client.get("/api/video/42")
        assert "media.example.com" not in resp.text

    def test_second_call_served_from_cache(
        self, client: TestClient, stream_extractor: AsyncMock
    ) -> None:
        client.get("/api/video/42")
        client.get("/api/video/42")
        assert stream_extractor.extract.await_count == 1

    def test_episode_route(
        self, client: TestClient, stream_extractor: AsyncMock
    ) -> None:
        resp = client.get("/api/video/2/5/42")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["season"] == "2"
        assert data["episode"] == "5"
        args = stream_extractor.extract.await_args
        assert args.args[:3] == ("42", "2", "5")

    def test_invalid_id_400(
        self, client: TestClient, stream_extractor: AsyncMock
    ) -> None:
        resp = client.get("/api/video/abc")
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        stream_extractor.extract.assert_not_awaited()

    def test_upstream_error_502(
        self, client: TestClient, stream_extractor: AsyncMock
    ) -> None:
        stream_extractor.extract.side_effect = UpstreamError("HTTP error! Status: 404")
        resp = client.get("/api/video/42")
        assert resp.status_code == 502
        assert "Status: 404" in resp.json()["error"]

    def test_extraction_failure_500(
        self, client: TestClient, stream_extractor: AsyncMock
    ) -> None:
        stream_extractor.extract.side_effect = ExtractionFailed("no video found")
        resp = client.get("/api/video/42")
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "no video found"}


class TestRecentVideos:
    def test_recent_after_resolve(self, client: TestClient) -> None:
        client.get("/api/video/42")
        client.get("/api/video/43")
        resp = client.get("/api/videos/recent", params={"limit": 5})
        assert resp.status_code == 200
        ids = [v["videoId"] for v in resp.json()["data"]]
        assert set(ids) == {"42", "43"}
        assert all("/stream/" in v["url"] for v in resp.json()["data"])

    def test_limit_out_of_range(self, client: TestClient) -> None:
        resp = client.get("/api/videos/recent", params={"limit": 0})
        assert resp.status_code == 400
        assert resp.json()["success"] is False


class TestRedirect:
    def test_redirects_to_stream(self, client: TestClient) -> None:
        resp = client.get("/tahh/42", follow_redirects=False)
        assert resp.status_code == 302
        assert "/stream/" in resp.headers["location"]
        assert "media.example.com" not in resp.headers["location"]

    def test_invalid_id(self, client: TestClient) -> None:
        resp = client.get("/tahh/x1", follow_redirects=False)
        assert resp.status_code == 400


class TestPlayer:
    def test_player_page(self, client: TestClient) -> None:
        resp = client.get("/fulltaah/42")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "Big Buck Bunny" in resp.text
        assert "/stream/" in resp.text
        assert "media.example.com" not in resp.text

    def test_player_episode(self, client: TestClient) -> None:
        assert client.get("/fulltaah/1/2/42").status_code == 200

    def test_player_error_page(
        self, client: TestClient, stream_extractor: AsyncMock
    ) -> None:
        stream_extractor.extract.side_effect = UpstreamError("HTTP error! Status: 500")
        resp = client.get("/fulltaah/42")
        assert resp.status_code == 502
        assert resp.headers["content-type"].startswith("text/html")
