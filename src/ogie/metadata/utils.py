"""
Shared helpers for the metadata parsers.
"""

from __future__ import annotations

import re
from typing import Any, Iterator, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

Document = BeautifulSoup

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def load_document(html: str) -> Document:
    """Parse HTML with the stdlib parser; ``rel`` and ``class`` stay plain strings."""
    return BeautifulSoup(html, "html.parser", multi_valued_attributes=None)


def attr(tag: Tag, name: str) -> Optional[str]:
    """Trimmed attribute value, or ``None`` when absent or blank."""
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        value = " ".join(value)
    value = str(value).strip()
    return value or None


def _first_content(doc: Document, attribute: str, name: str) -> Optional[str]:
    tag = doc.find("meta", attrs={attribute: name})
    if tag is None:
        return None
    return attr(tag, "content")


def get_meta_content(doc: Document, name: str) -> Optional[str]:
    """Content of the first ``<meta name=...>``."""
    return _first_content(doc, "name", name)


def get_meta_content_any(doc: Document, name: str) -> Optional[str]:
    """Content of ``<meta name=...>``, falling back to ``<meta property=...>``."""
    return _first_content(doc, "name", name) or _first_content(doc, "property", name)


def get_property_content(doc: Document, prop: str) -> Optional[str]:
    """Content of ``<meta property=...>``, falling back to ``<meta name=...>``."""
    return _first_content(doc, "property", prop) or _first_content(doc, "name", prop)


def iter_meta_tags(doc: Document, *prefixes: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(property, content)`` in document order for meta tags whose
    property (or name) starts with one of ``prefixes``."""
    for tag in doc.find_all("meta"):
        key = attr(tag, "property") or attr(tag, "name")
        if not key or not key.startswith(prefixes):
            continue
        content = attr(tag, "content")
        if content:
            yield key, content


def all_contents(doc: Document, *names: str) -> List[str]:
    """Unique contents across every meta tag whose property or name is in ``names``."""
    values: List[str] = []
    wanted = set(names)
    for tag in doc.find_all("meta"):
        if attr(tag, "property") not in wanted and attr(tag, "name") not in wanted:
            continue
        content = attr(tag, "content")
        if content and content not in values:
            values.append(content)
    return values


def resolve_url(url: str, base_url: Optional[str]) -> str:
    """Resolve ``url`` against ``base_url``; returns ``url`` unchanged when that fails."""
    if not base_url:
        return url
    try:
        return urljoin(base_url, url)
    except ValueError:
        return url


def parse_int(value: Any) -> Optional[int]:
    """Leading integer of a string (``"120px"`` gives 120), or the int itself."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if value != value else int(value)
    if not isinstance(value, str):
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_positive_int(value: Any) -> Optional[int]:
    number = parse_int(value)
    return number if number is not None and number >= 1 else None


def single_or_list(values: List[str]) -> Optional[str | List[str]]:
    if not values:
        return None
    return values[0] if len(values) == 1 else values
