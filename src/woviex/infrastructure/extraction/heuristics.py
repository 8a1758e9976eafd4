"""Media URL extraction heuristics for embed pages.

Each strategy inspects the fetched page and returns a candidate URL or
``None``.  ``find_media_url`` applies them in priority order and stops at
the first hit:

1. download button whose href carries a media extension and a
   signature-like query parameter (needs a redirect-following HEAD)
2. ``<source src="...">`` tag
3. any quoted absolute URL with a media extension
4. signed download link (``href`` with extension and ``signature=``)
5. ``videoUrl = "...expires=..."`` assignment in inline script
6. CloudFront-style signed URL (Expires + Signature + Key-Pair-Id)
7. ``.mp4`` URL inside an ``onclick``, ``data-url`` or ``data-src``
   attribute, e.g. ``onclick="window.open(https://...)"``
"""

from __future__ import annotations

import html as html_lib
import re
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from woviex.infrastructure.extraction.html_selectors import (
    extract_all_attrs,
    extract_attr,
    extract_text,
    parse_html,
)

_MEDIA_EXT = r"\.(?:mp4|m3u8|webm|mkv)"

_MEDIA_EXT_RE = re.compile(_MEDIA_EXT, re.IGNORECASE)
_SIGNATURE_PARAM_RE = re.compile(
    r"[?&](?:signature|sig|token|expires)=", re.IGNORECASE
)
_QUOTED_MEDIA_RE = re.compile(
    r"""["'](https?://[^"'\s]+""" + _MEDIA_EXT + r"""[^"'\s]*)["']""",
    re.IGNORECASE,
)
_SIGNED_HREF_RE = re.compile(
    r'href="([^"]+' + _MEDIA_EXT + r'[^"]*signature=[^"&]+[^"]*)"',
    re.IGNORECASE,
)
_SCRIPT_ASSIGNMENT_RE = re.compile(
    r"""videoUrl\s*=\s*["']([^"']*?expires=[^"']+)["']""",
    re.IGNORECASE,
)
_CLOUDFRONT_SIGNED_RE = re.compile(
    r"""https?:(?:\\?/){2}[^"'\s]+?"""
    + _MEDIA_EXT
    + r"""\?(?:[^"'\s]*?)expires=\d+&signature=[^"'&\s]+&key-pair-id=[^"'&\s]+""",
    re.IGNORECASE,
)
_ATTR_MP4_RE = re.compile(r"""https?://[^"'\s)]+\.mp4[^"'\s)]*""", re.IGNORECASE)
_JS_ESCAPE_RE = re.compile(r"\\([/:~])")

_DOWNLOAD_BUTTON_SELECTORS = (
    "a.download-btn[href]",
    ".download-btn a[href]",
    "[class*=download-btn][href]",
)
_MEDIA_ATTRS = ("onclick", "data-url", "data-src")

DOWNLOAD_BUTTON = "download_button"


@dataclass(frozen=True)
class MediaMatch:
    """A candidate media URL and the strategy that produced it."""

    url: str
    strategy: str

    @property
    def needs_redirect_resolution(self) -> bool:
        return self.strategy == DOWNLOAD_BUTTON


def unescape_js(value: str) -> str:
    r"""Drop JS escape backslashes before ``/``, ``:`` and ``~``.

    >>> unescape_js("https:\\/\\/cdn.example.com\\/v.mp4")
    'https://cdn.example.com/v.mp4'
    """
    return _JS_ESCAPE_RE.sub(r"\1", value)


def _looks_signed_media(href: str) -> bool:
    return bool(_MEDIA_EXT_RE.search(href) and _SIGNATURE_PARAM_RE.search(href))


def _from_download_button(soup: BeautifulSoup, page: str, base_url: str) -> str | None:
    # every selector is tried: an unsigned button must not hide a signed one
    for selector in _DOWNLOAD_BUTTON_SELECTORS:
        for href in extract_all_attrs(soup, selector, "href"):
            if _looks_signed_media(href):
                return urljoin(base_url, href)
    return None


def _from_source_tag(soup: BeautifulSoup, page: str, base_url: str) -> str | None:
    src = extract_attr(soup, "video source[src]", "src", "source[src]")
    return urljoin(base_url, src) if src else None


def _from_quoted_literal(soup: BeautifulSoup, page: str, base_url: str) -> str | None:
    m = _QUOTED_MEDIA_RE.search(page)
    return html_lib.unescape(m.group(1)) if m else None


def _from_signed_href(soup: BeautifulSoup, page: str, base_url: str) -> str | None:
    m = _SIGNED_HREF_RE.search(page)
    return urljoin(base_url, html_lib.unescape(m.group(1))) if m else None


def _from_script_assignment(soup: BeautifulSoup, page: str, base_url: str) -> str | None:
    m = _SCRIPT_ASSIGNMENT_RE.search(page)
    return unescape_js(m.group(1)) if m else None


def _from_cloudfront_signed(soup: BeautifulSoup, page: str, base_url: str) -> str | None:
    m = _CLOUDFRONT_SIGNED_RE.search(page)
    return unescape_js(m.group(0)) if m else None


def _from_media_attribute(soup: BeautifulSoup, page: str, base_url: str) -> str | None:
    selector = ", ".join(f"[{attr}]" for attr in _MEDIA_ATTRS)
    for tag in soup.select(selector):
        for attr in _MEDIA_ATTRS:
            m = _ATTR_MP4_RE.search(str(tag.get(attr) or ""))
            if m:
                return m.group(0)
    return None


_Strategy = Callable[[BeautifulSoup, str, str], str | None]

STRATEGIES: tuple[tuple[str, _Strategy], ...] = (
    (DOWNLOAD_BUTTON, _from_download_button),
    ("source_tag", _from_source_tag),
    ("quoted_literal", _from_quoted_literal),
    ("signed_href", _from_signed_href),
    ("script_assignment", _from_script_assignment),
    ("cloudfront_signed", _from_cloudfront_signed),
    ("media_attribute", _from_media_attribute),
)


def find_media_url(
    page: str,
    base_url: str,
    soup: BeautifulSoup | None = None,
) -> MediaMatch | None:
    """Apply the strategies in order; first hit wins."""
    if soup is None:
        soup = parse_html(page)
    for name, strategy in STRATEGIES:
        url = strategy(soup, page, base_url)
        if url:
            return MediaMatch(url=url, strategy=name)
    return None


def extract_title(soup: BeautifulSoup, video_id: str, suffix: str = "") -> str:
    """Page ``<title>`` minus the site suffix, else ``Video {id}``."""
    title = extract_text(soup, "title")
    if suffix:
        title = title.replace(suffix, "").strip()
    return title or f"Video {video_id}"


def extract_quality(soup: BeautifulSoup, default: str = "HD") -> str:
    return extract_attr(soup, "[data-quality]", "data-quality") or default
