"""Range-aware upstream relay helpers for the stream endpoint.

The proxy learns size and type with a HEAD, then opens a streamed GET
(optionally with a single ``Range``) and hands back a byte iterator that
closes the upstream response when the consumer stops, including when the
client disconnects mid-stream.
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx
import structlog

from woviex.domain.exceptions import RangeNotSatisfiable

log = structlog.get_logger(__name__)

CHUNK_SIZE = 65536

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range within a resource of ``total`` bytes."""

    start: int
    end: int
    total: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"

    @property
    def header_value(self) -> str:
        return f"bytes={self.start}-{self.end}"


@dataclass(frozen=True)
class UpstreamInfo:
    status_code: int
    content_length: int | None
    content_type: str


def parse_range_header(header: str | None, total: int) -> ByteRange | None:
    """Parse a single-range ``Range`` header against a known length.

    Supports ``bytes=a-b``, open-ended ``bytes=a-`` and suffix
    ``bytes=-n``.  ``end`` is clamped to ``total - 1``.  Returns ``None``
    for a missing or malformed header (caller serves the full body) and
    raises ``RangeNotSatisfiable`` for a well-formed range outside the
    resource.

    >>> parse_range_header("bytes=10-19", 100)
    ByteRange(start=10, end=19, total=100)
    >>> parse_range_header("bytes=-10", 100)
    ByteRange(start=90, end=99, total=100)
    """
    if not header:
        return None
    m = _RANGE_RE.match(header.strip())
    if m is None:
        return None
    raw_start, raw_end = m.groups()
    if not raw_start and not raw_end:
        return None

    if not raw_start:
        suffix = int(raw_end)
        if suffix == 0 or total == 0:
            raise RangeNotSatisfiable(total)
        return ByteRange(start=max(total - suffix, 0), end=total - 1, total=total)

    start = int(raw_start)
    end = int(raw_end) if raw_end else total - 1
    end = min(end, total - 1)
    if start >= total or start > end:
        raise RangeNotSatisfiable(total)
    return ByteRange(start=start, end=end, total=total)


async def probe_upstream(
    http_client: httpx.AsyncClient,
    url: str,
    *,
    timeout: float,
) -> UpstreamInfo:
    """HEAD the media URL. Raises ``httpx.HTTPError`` on network failure."""
    resp = await http_client.head(url, follow_redirects=True, timeout=timeout)
    raw_length = resp.headers.get("content-length")
    try:
        length = int(raw_length) if raw_length is not None else None
    except ValueError:
        length = None
    return UpstreamInfo(
        status_code=resp.status_code,
        content_length=length,
        content_type=resp.headers.get("content-type", "video/mp4"),
    )


async def open_upstream(
    http_client: httpx.AsyncClient,
    url: str,
    byte_range: ByteRange | None = None,
    *,
    connect_timeout: float = 10.0,
) -> tuple[httpx.Response, AsyncIterator[bytes]]:
    """Open a streamed GET and return the response plus its body iterator.

    Reads are not time-limited; only the connect phase is bounded.
    The iterator closes the upstream response when exhausted or closed.
    """
    headers = {"Range": byte_range.header_value} if byte_range is not None else {}
    resp = await http_client.send(
        http_client.build_request(
            "GET",
            url,
            headers=headers,
            timeout=httpx.Timeout(None, connect=connect_timeout),
        ),
        stream=True,
        follow_redirects=True,
    )

    async def _iter() -> AsyncIterator[bytes]:
        try:
            async for chunk in resp.aiter_bytes(chunk_size=CHUNK_SIZE):
                yield chunk
        finally:
            await resp.aclose()
            log.debug("upstream_stream_closed", status=resp.status_code)

    return resp, _iter()
