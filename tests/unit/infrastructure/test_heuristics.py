"""Tests for the embed page media URL heuristics."""

from __future__ import annotations

from woviex.infrastructure.extraction.heuristics import (
    extract_quality,
    extract_title,
    find_media_url,
    unescape_js,
)
from woviex.infrastructure.extraction.html_selectors import parse_html

_BASE = "https://dl.letsembed.cc/"


def _page(body: str, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


class TestStrategies:
    def test_signed_download_button(self) -> None:
        page = _page(
            '<a class="download-btn" href="https://cdn.example.com/v.mp4?signature=abc">'
            "Download</a>"
        )
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "download_button"
        assert match.url == "https://cdn.example.com/v.mp4?signature=abc"
        assert match.needs_redirect_resolution

    def test_unsigned_download_button_is_not_followed(self) -> None:
        page = _page('<a class="download-btn" href="https://cdn.example.com/v.mp4">x</a>')
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "quoted_literal"
        assert not match.needs_redirect_resolution

    def test_source_tag_resolved_against_base(self) -> None:
        page = _page('<video><source src="/media/v.mp4" type="video/mp4"></video>')
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "source_tag"
        assert match.url == "https://dl.letsembed.cc/media/v.mp4"

    def test_quoted_literal_in_script(self) -> None:
        page = _page('<script>var u = "https://cdn.example.com/a.m3u8?x=1";</script>')
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "quoted_literal"
        assert match.url == "https://cdn.example.com/a.m3u8?x=1"

    def test_relative_signed_href(self) -> None:
        page = _page('<a href="/dl/v.mp4?signature=xyz&amp;t=1">get</a>')
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "signed_href"
        assert match.url == "https://dl.letsembed.cc/dl/v.mp4?signature=xyz&t=1"

    def test_script_assignment_with_expiry(self) -> None:
        page = _page(
            "<script>var videoUrl = 'https:\\/\\/cdn.example.com\\/stream?expires=123&s=1';"
            "</script>"
        )
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "script_assignment"
        assert match.url == "https://cdn.example.com/stream?expires=123&s=1"

    def test_cloudfront_signed_url(self) -> None:
        page = _page(
            '<script>player.load("https:\\/\\/d1.cloudfront.net\\/v.mp4'
            '?Expires=123&Signature=abc&Key-Pair-Id=K1");</script>'
        )
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "cloudfront_signed"
        assert match.url == (
            "https://d1.cloudfront.net/v.mp4?Expires=123&Signature=abc&Key-Pair-Id=K1"
        )

    def test_earlier_strategy_wins(self) -> None:
        page = _page(
            '<video><source src="https://cdn.example.com/first.mp4"></video>'
            '<script>var u = "https://cdn.example.com/second.mp4";</script>'
        )
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "source_tag"
        assert match.url.endswith("first.mp4")

    def test_signed_button_behind_unsigned_one(self) -> None:
        page = _page(
            '<a class="download-btn" href="https://cdn.example.com/preview.mp4">x</a>'
            '<div class="download-btn">'
            '<a href="https://cdn.example.com/v.mp4?signature=abc">Download</a>'
            "</div>"
        )
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "download_button"
        assert match.url == "https://cdn.example.com/v.mp4?signature=abc"

    def test_mp4_in_onclick_handler(self) -> None:
        page = _page(
            '<button onclick="window.open(https://cdn.example.com/v.mp4?t=1)">'
            "Play</button>"
        )
        match = find_media_url(page, _BASE)
        assert match is not None
        assert match.strategy == "media_attribute"
        assert match.url == "https://cdn.example.com/v.mp4?t=1"

    def test_no_media_url(self) -> None:
        assert find_media_url(_page("<p>Nothing to see</p>"), _BASE) is None


class TestMetadata:
    def test_title_suffix_stripped(self) -> None:
        soup = parse_html(_page("", head="<title>My Film - letsembed.cc</title>"))
        assert extract_title(soup, "42", " - letsembed.cc") == "My Film"

    def test_title_falls_back_to_id(self) -> None:
        soup = parse_html(_page(""))
        assert extract_title(soup, "42") == "Video 42"

    def test_quality_attribute(self) -> None:
        soup = parse_html(_page('<div data-quality="1080p"></div>'))
        assert extract_quality(soup) == "1080p"

    def test_quality_default(self) -> None:
        assert extract_quality(parse_html(_page(""))) == "HD"


class TestUnescapeJs:
    def test_slashes(self) -> None:
        assert unescape_js("https:\\/\\/a.b\\/c") == "https://a.b/c"

    def test_plain_string_unchanged(self) -> None:
        assert unescape_js("https://a.b/c") == "https://a.b/c"
