"""
oEmbed discovery and response validation.

Discovery reads ``<link rel="alternate">`` tags for the JSON and XML endpoint
types. Responses are untyped JSON; :func:`parse_oembed_response` checks the
``type`` and the fields that type requires, returning ``None`` when the
payload does not qualify.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ogie.metadata.models import (
    OEmbedData,
    OEmbedDiscovery,
    OEmbedLink,
    OEmbedPhoto,
    OEmbedRich,
    OEmbedVideo,
)
from ogie.metadata.utils import Document, attr, parse_int, resolve_url

OEMBED_JSON_TYPE = "application/json+oembed"
OEMBED_XML_TYPES = frozenset({"text/xml+oembed", "application/xml+oembed"})
OEMBED_TYPES = frozenset({"photo", "video", "rich", "link"})


class OEmbedParser:
    """Finds oEmbed endpoints advertised by a page."""

    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> OEmbedDiscovery:
        discovery = OEmbedDiscovery()
        for link in doc.find_all("link"):
            if (attr(link, "rel") or "").lower() != "alternate":
                continue
            href = attr(link, "href")
            if not href:
                continue
            link_type = (attr(link, "type") or "").lower()
            if link_type == OEMBED_JSON_TYPE and discovery.json_url is None:
                discovery.json_url = resolve_url(href, base_url)
            elif link_type in OEMBED_XML_TYPES and discovery.xml_url is None:
                discovery.xml_url = resolve_url(href, base_url)
        return discovery


def parse_oembed_discovery(doc: Document, base_url: Optional[str] = None) -> OEmbedDiscovery:
    return OEmbedParser.parse(doc, base_url)


def _string(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _base_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "version": _string(payload.get("version")) or "1.0",
        "title": _string(payload.get("title")),
        "author_name": _string(payload.get("author_name")),
        "author_url": _string(payload.get("author_url")),
        "provider_name": _string(payload.get("provider_name")),
        "provider_url": _string(payload.get("provider_url")),
        "cache_age": parse_int(payload.get("cache_age")),
        "thumbnail_url": _string(payload.get("thumbnail_url")),
        "thumbnail_width": parse_int(payload.get("thumbnail_width")),
        "thumbnail_height": parse_int(payload.get("thumbnail_height")),
    }


def parse_oembed_response(payload: Any) -> Optional[OEmbedData]:
    """Validate a decoded oEmbed response into one of the tagged variants."""
    if not isinstance(payload, dict):
        return None
    kind = payload.get("type")
    if kind not in OEMBED_TYPES:
        return None

    base = _base_fields(payload)
    if kind == "link":
        return OEmbedLink(**base)

    width = parse_int(payload.get("width"))
    height = parse_int(payload.get("height"))
    if width is None or height is None:
        return None

    if kind == "photo":
        url = _string(payload.get("url"))
        return OEmbedPhoto(url=url, width=width, height=height, **base) if url else None

    html = _string(payload.get("html"))
    if not html:
        return None
    variant = OEmbedVideo if kind == "video" else OEmbedRich
    return variant(html=html, width=width, height=height, **base)
