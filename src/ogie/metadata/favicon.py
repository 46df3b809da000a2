"""
Favicon and web app manifest discovery.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from ogie.metadata.models import FaviconData
from ogie.metadata.utils import Document, attr, resolve_url

# More specific relations first
FAVICON_RELS: Tuple[str, ...] = (
    "apple-touch-icon-precomposed",
    "apple-touch-icon",
    "shortcut icon",
    "mask-icon",
    "icon",
)

_INVALID_HREF = re.compile(r"^(?:javascript:|vbscript:|data:text/html|#|\s*$)", re.IGNORECASE)


def is_valid_href(href: Optional[str]) -> bool:
    return bool(href) and not _INVALID_HREF.match(href or "")


def _normalize_rel(rel: str) -> List[str]:
    return rel.lower().split()


def match_favicon_rel(rel: str) -> Optional[str]:
    """Return the favicon relation ``rel`` names, matching whole tokens only."""
    tokens = _normalize_rel(rel)
    for candidate in FAVICON_RELS:
        wanted = candidate.split(" ")
        span = len(wanted)
        if any(tokens[i : i + span] == wanted for i in range(len(tokens) - span + 1)):
            return candidate
    return None


class FaviconParser:
    """Collect icon links in document order plus the first manifest URL."""

    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> Tuple[List[FaviconData], Optional[str]]:
        favicons: List[FaviconData] = []
        manifest_url: Optional[str] = None

        for link in doc.find_all("link"):
            rel = attr(link, "rel")
            href = attr(link, "href")
            if not rel or not href:
                continue

            if _normalize_rel(rel) == ["manifest"]:
                if manifest_url is None and is_valid_href(href):
                    manifest_url = resolve_url(href, base_url)
                continue

            favicon_rel = match_favicon_rel(rel)
            if favicon_rel is None or not is_valid_href(href):
                continue
            favicons.append(
                FaviconData(
                    url=resolve_url(href, base_url),
                    rel=favicon_rel,
                    type=attr(link, "type"),
                    sizes=attr(link, "sizes"),
                    color=attr(link, "color"),
                )
            )

        return favicons, manifest_url


def parse_favicons(doc: Document, base_url: Optional[str] = None) -> Tuple[List[FaviconData], Optional[str]]:
    return FaviconParser.parse(doc, base_url)


def get_primary_favicon(favicons: List[FaviconData]) -> Optional[str]:
    return favicons[0].url if favicons else None
