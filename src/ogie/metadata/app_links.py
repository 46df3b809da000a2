"""
App Links (``al:*``) parser.

A platform may carry several entries. A bare ``<meta property="al:ios">``
starts a new entry, and so does a property repeating within the current one.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ogie.metadata.models import AppLinkPlatform, AppLinksData, AppLinksWeb
from ogie.metadata.utils import Document, attr

PLATFORMS: Tuple[str, ...] = (
    "ios",
    "iphone",
    "ipad",
    "android",
    "windows",
    "windows_phone",
    "windows_universal",
)

PROPERTY_MAP: Dict[str, str] = {
    "url": "url",
    "app_store_id": "app_store_id",
    "app_id": "app_id",
    "package": "package",
    "class": "class_name",
    "app_name": "app_name",
}


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return {"true": True, "false": False}.get(value.lower())


def _platform_tags(doc: Document, prefix: str) -> List[Tuple[Optional[str], Optional[str]]]:
    """``(sub_property, content)`` pairs; a ``None`` sub-property marks a bare boundary tag."""
    tags: List[Tuple[Optional[str], Optional[str]]] = []
    for meta in doc.find_all("meta"):
        prop = attr(meta, "property")
        if prop == prefix:
            tags.append((None, None))
        elif prop and prop.startswith(prefix + ":"):
            tags.append((prop[len(prefix) + 1 :], attr(meta, "content")))
    return tags


def _group(tags: List[Tuple[Optional[str], Optional[str]]], field_map: Dict[str, str], factory):
    entries = []
    current: Dict[str, object] = {}

    for sub_property, content in tags:
        if sub_property is None:
            if current:
                entries.append(factory(**current))
            current = {}
            continue
        field_name = field_map.get(sub_property)
        if field_name is None:
            continue
        value = _parse_bool(content) if field_name == "should_fallback" else content
        if value is None:
            continue
        if field_name in current:
            entries.append(factory(**current))
            current = {}
        current[field_name] = value

    if current:
        entries.append(factory(**current))
    return entries


class AppLinksParser:
    """Parser for App Links metadata."""

    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> AppLinksData:
        data = AppLinksData()
        for platform in PLATFORMS:
            setattr(data, platform, _group(_platform_tags(doc, f"al:{platform}"), PROPERTY_MAP, AppLinkPlatform))
        data.web = _group(
            _platform_tags(doc, "al:web"),
            {"url": "url", "should_fallback": "should_fallback"},
            AppLinksWeb,
        )
        return data


def parse_app_links(doc: Document, base_url: Optional[str] = None) -> AppLinksData:
    return AppLinksParser.parse(doc, base_url)
