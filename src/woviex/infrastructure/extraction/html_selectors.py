"""CSS-selector-based HTML helpers with fallback chains.

Every helper accepts a primary selector plus optional *fallback_selectors*;
the first selector that yields a usable match wins, which keeps the
extraction heuristics tolerant of small layout changes on the embed page.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string with lxml (lenient with broken markup)."""
    return BeautifulSoup(html, "lxml")


def extract_text(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    for sel in (selector, *fallback_selectors):
        match = root.select_one(sel)
        if match:
            text = match.get_text(strip=True)
            if text:
                return text
    return default


def extract_all_attrs(
    root: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
) -> list[str]:
    """Extract *attr* from all elements matched by the first hitting selector."""
    for sel in (selector, *fallback_selectors):
        matches = root.select(sel)
        values = [str(m[attr]) for m in matches if m.get(attr)]
        if values:
            return values
    return []


def extract_attr(
    root: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    values = extract_all_attrs(root, selector, attr, *fallback_selectors)
    return values[0] if values else default
