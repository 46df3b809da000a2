"""
JSON-LD parser.

Each ``<script type="application/ld+json">`` block is decoded on its own;
blocks that are not valid JSON are skipped. ``@graph`` containers and
top-level arrays are flattened and only objects carrying ``@type`` become
items.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Union

from ogie.metadata.models import JsonLdData, JsonLdItem, JsonLdOrganization, JsonLdPerson
from ogie.metadata.utils import Document

logger = logging.getLogger(__name__)

SCHEMA_ORG_PREFIXES = ("https://schema.org/", "http://schema.org/", "schema:")

KNOWN_FIELDS = frozenset(
    {"name", "description", "image", "url", "datePublished", "dateModified", "author", "publisher"}
)


def _strip_schema_prefix(value: str) -> str:
    for prefix in SCHEMA_ORG_PREFIXES:
        if value.startswith(prefix):
            return value[len(prefix) :]
    return value


def _normalize_type(raw: Any) -> Union[str, List[str], None]:
    if not raw:
        return None
    if isinstance(raw, list):
        return [_strip_schema_prefix(item) for item in raw if isinstance(item, str)]
    if isinstance(raw, str):
        return _strip_schema_prefix(raw)
    return None


def _image_url(raw: Any) -> Optional[str]:
    if isinstance(raw, str):
        return raw or None
    if isinstance(raw, dict):
        value = raw.get("url") or raw.get("@id")
        return value if isinstance(value, str) and value else None
    return None


def _normalize_image(raw: Any) -> Union[str, List[str], None]:
    if not raw:
        return None
    if isinstance(raw, list):
        images = [url for url in (_image_url(item) for item in raw) if url]
        return images or None
    return _image_url(raw)


def _string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _normalize_person(raw: Any) -> Optional[JsonLdPerson]:
    if isinstance(raw, str):
        return JsonLdPerson(name=raw)
    if not isinstance(raw, dict):
        return None
    kind = raw.get("@type")
    if kind == "Organization":
        return None
    if kind == "Person" or (not kind and raw.get("name")):
        return JsonLdPerson(name=_string(raw.get("name")), url=_string(raw.get("url")))
    return None


def _normalize_author(raw: Any) -> Union[JsonLdPerson, List[JsonLdPerson], None]:
    if not raw:
        return None
    if isinstance(raw, list):
        persons = [person for person in (_normalize_person(item) for item in raw) if person is not None]
        return persons or None
    return _normalize_person(raw)


def _normalize_publisher(raw: Any) -> Union[JsonLdOrganization, JsonLdPerson, None]:
    if not isinstance(raw, dict) or not raw:
        return None
    if raw.get("@type") == "Person":
        return JsonLdPerson(name=_string(raw.get("name")), url=_string(raw.get("url")))
    return JsonLdOrganization(
        name=_string(raw.get("name")),
        url=_string(raw.get("url")),
        logo=_image_url(raw.get("logo")),
    )


def _normalize_item(raw: Dict[str, Any]) -> JsonLdItem:
    return JsonLdItem(
        type=_normalize_type(raw.get("@type")),
        name=_string(raw.get("name")) or _string(raw.get("headline")),
        description=_string(raw.get("description")),
        image=_normalize_image(raw.get("image")),
        url=_string(raw.get("url")),
        date_published=_string(raw.get("datePublished")),
        date_modified=_string(raw.get("dateModified")),
        author=_normalize_author(raw.get("author")),
        publisher=_normalize_publisher(raw.get("publisher")),
        extra={key: value for key, value in raw.items() if not key.startswith("@") and key not in KNOWN_FIELDS},
    )


def _extract_items(parsed: Any) -> List[Dict[str, Any]]:
    if isinstance(parsed, list):
        return [item for entry in parsed for item in _extract_items(entry)]
    if not isinstance(parsed, dict):
        return []
    graph = parsed.get("@graph")
    if isinstance(graph, list):
        return [item for entry in graph for item in _extract_items(entry)]
    return [parsed] if parsed.get("@type") else []


class JsonLdParser:
    """Parser for JSON-LD structured data."""

    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> JsonLdData:
        data = JsonLdData()
        for script in doc.find_all("script", attrs={"type": "application/ld+json"}):
            text = script.string if script.string is not None else script.get_text()
            if not text or not text.strip():
                continue
            try:
                parsed = json.loads(text)
            except ValueError as e:
                logger.debug("Skipping invalid JSON-LD block: %s", e)
                continue

            data.raw.append(parsed)
            data.items.extend(_normalize_item(item) for item in _extract_items(parsed))
        return data


def parse_json_ld(doc: Document, base_url: Optional[str] = None) -> JsonLdData:
    return JsonLdParser.parse(doc, base_url)
