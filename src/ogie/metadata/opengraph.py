"""
OpenGraph parser.

Structured properties (``og:image:width`` and friends) attach to the most
recent ``og:image`` / ``og:image:url``; each of those starts a new item.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from ogie.metadata.models import OpenGraphAudio, OpenGraphData, OpenGraphImage, OpenGraphVideo
from ogie.metadata.utils import Document, get_property_content, iter_meta_tags, parse_int, resolve_url

VALID_DETERMINERS = frozenset({"a", "an", "the", "", "auto"})

T = TypeVar("T")
MediaBuilder = Callable[[Dict[str, str], Optional[str]], T]


def _resolve_optional(url: Optional[str], base_url: Optional[str]) -> Optional[str]:
    return resolve_url(url, base_url) if url else None


def _build_image(props: Dict[str, str], base_url: Optional[str]) -> OpenGraphImage:
    return OpenGraphImage(
        url=props["url"],
        secure_url=_resolve_optional(props.get("secure_url"), base_url),
        type=props.get("type"),
        width=parse_int(props.get("width")),
        height=parse_int(props.get("height")),
        alt=props.get("alt"),
    )


def _build_video(props: Dict[str, str], base_url: Optional[str]) -> OpenGraphVideo:
    return OpenGraphVideo(
        url=props["url"],
        secure_url=_resolve_optional(props.get("secure_url"), base_url),
        type=props.get("type"),
        width=parse_int(props.get("width")),
        height=parse_int(props.get("height")),
    )


def _build_audio(props: Dict[str, str], base_url: Optional[str]) -> OpenGraphAudio:
    return OpenGraphAudio(
        url=props["url"],
        secure_url=_resolve_optional(props.get("secure_url"), base_url),
        type=props.get("type"),
    )


def _parse_media(
    tags: List[Tuple[str, str]], prefix: str, base_url: Optional[str], build: MediaBuilder[T]
) -> List[T]:
    items: List[T] = []
    current: Dict[str, str] = {}

    def flush() -> None:
        if current.get("url"):
            current["url"] = resolve_url(current["url"], base_url)
            items.append(build(current, base_url))

    for prop, content in tags:
        if not prop.startswith(prefix):
            continue
        suffix = prop[len(prefix) :]
        if suffix in ("", ":url"):
            flush()
            current = {"url": content}
        elif suffix.startswith(":"):
            current[suffix[1:]] = content
    flush()
    return items


class OpenGraphParser:
    """Parser for OpenGraph metadata."""

    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> OpenGraphData:
        """Parse OpenGraph metadata from a document."""
        tags = list(iter_meta_tags(doc, "og:"))
        raw_url = get_property_content(doc, "og:url")
        determiner = get_property_content(doc, "og:determiner")

        return OpenGraphData(
            title=get_property_content(doc, "og:title"),
            description=get_property_content(doc, "og:description"),
            type=get_property_content(doc, "og:type"),
            url=resolve_url(raw_url, base_url) if raw_url else None,
            site_name=get_property_content(doc, "og:site_name"),
            locale=get_property_content(doc, "og:locale"),
            locale_alternate=_locale_alternates(doc),
            determiner=determiner if determiner in VALID_DETERMINERS else None,
            images=_parse_media(tags, "og:image", base_url, _build_image),
            videos=_parse_media(tags, "og:video", base_url, _build_video),
            audio=_parse_media(tags, "og:audio", base_url, _build_audio),
        )


def _locale_alternates(doc: Document) -> List[str]:
    alternates: List[str] = []
    for tag in doc.find_all("meta"):
        if "og:locale:alternate" not in (tag.get("property"), tag.get("name")):
            continue
        content = (tag.get("content") or "").strip()
        if content:
            alternates.append(content)
    return alternates


def parse_open_graph(doc: Document, base_url: Optional[str] = None) -> OpenGraphData:
    return OpenGraphParser.parse(doc, base_url)
