"""Embed page scraping: source URL construction and media URL heuristics."""

from __future__ import annotations

from .embed_page import EmbedPageExtractor, build_source_url

__all__ = ["EmbedPageExtractor", "build_source_url"]
