"""
Basic HTML metadata: ``<title>``, standard meta names and canonical links.
"""

from __future__ import annotations

from typing import Optional

from ogie.encoding.charset import normalize_charset, parse_content_type_charset
from ogie.metadata.favicon import FaviconParser, get_primary_favicon
from ogie.metadata.models import BasicMetaData
from ogie.metadata.utils import Document, attr, get_meta_content, resolve_url


def _title(doc: Document) -> Optional[str]:
    tag = doc.find("title")
    if tag is None:
        return None
    text = tag.get_text().strip()
    return text or None


def _charset(doc: Document) -> Optional[str]:
    for meta in doc.find_all("meta"):
        charset = attr(meta, "charset")
        if charset:
            return normalize_charset(charset)
        if (attr(meta, "http-equiv") or "").lower() == "content-type":
            from_header = parse_content_type_charset(attr(meta, "content"))
            if from_header:
                return from_header
    return None


def _canonical(doc: Document, base_url: Optional[str]) -> Optional[str]:
    for link in doc.find_all("link"):
        rel = (attr(link, "rel") or "").lower().split()
        href = attr(link, "href")
        if "canonical" in rel and href:
            return resolve_url(href, base_url)
    return None


class BasicMetaParser:
    """Parser for plain HTML head metadata."""

    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> BasicMetaData:
        favicons, _ = FaviconParser.parse(doc, base_url)
        html = doc.find("html")
        return BasicMetaData(
            title=_title(doc),
            description=get_meta_content(doc, "description"),
            author=get_meta_content(doc, "author"),
            keywords=get_meta_content(doc, "keywords"),
            charset=_charset(doc),
            canonical=_canonical(doc, base_url),
            favicon=get_primary_favicon(favicons),
            generator=get_meta_content(doc, "generator"),
            application_name=get_meta_content(doc, "application-name"),
            referrer=get_meta_content(doc, "referrer"),
            theme_color=get_meta_content(doc, "theme-color"),
            viewport=get_meta_content(doc, "viewport"),
            robots=get_meta_content(doc, "robots"),
            language=attr(html, "lang") if html is not None else None,
        )


def parse_basic_meta(doc: Document, base_url: Optional[str] = None) -> BasicMetaData:
    return BasicMetaParser.parse(doc, base_url)
