"""
RSS / Atom / JSON Feed discovery from ``<link rel="alternate">``.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ogie.metadata.models import FeedLink
from ogie.metadata.utils import Document, attr, resolve_url

FEED_MIME_TYPES: Dict[str, str] = {
    "application/rss+xml": "rss",
    "application/x-rss+xml": "rss",
    "text/rss+xml": "rss",
    "application/atom+xml": "atom",
    "application/x-atom+xml": "atom",
    "text/atom+xml": "atom",
    "application/feed+json": "json",
}


class FeedParser:
    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> List[FeedLink]:
        feeds: List[FeedLink] = []
        seen = set()

        for link in doc.find_all("link"):
            if (attr(link, "rel") or "").lower() != "alternate":
                continue
            href = attr(link, "href")
            feed_type = FEED_MIME_TYPES.get((attr(link, "type") or "").lower())
            if not href or feed_type is None:
                continue

            url = resolve_url(href, base_url)
            if url in seen:
                continue
            seen.add(url)
            feeds.append(FeedLink(url=url, type=feed_type, title=attr(link, "title")))  # type: ignore[arg-type]

        return feeds


def parse_feeds(doc: Document, base_url: Optional[str] = None) -> List[FeedLink]:
    return FeedParser.parse(doc, base_url)
