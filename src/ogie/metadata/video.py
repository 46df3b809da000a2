"""
OpenGraph video parser (``video.movie``, ``video.episode``, ``video.tv_show``,
``video.other``).

``og:video:*`` spellings are folded onto ``video:*``. ``video:actor:role``
applies to the immediately preceding actor when it has no role yet.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ogie.metadata.models import VideoActor, VideoData
from ogie.metadata.utils import Document, get_meta_content_any, iter_meta_tags, parse_positive_int


def _video_tags(doc: Document) -> List[Tuple[str, str]]:
    return [
        (prop[3:] if prop.startswith("og:") else prop, content)
        for prop, content in iter_meta_tags(doc, "video:", "og:video:")
    ]


def _unique(tags: List[Tuple[str, str]], prop: str) -> List[str]:
    values: List[str] = []
    for key, content in tags:
        if key == prop and content not in values:
            values.append(content)
    return values


def _actors(tags: List[Tuple[str, str]]) -> List[VideoActor]:
    actors: List[VideoActor] = []
    for prop, content in tags:
        if prop == "video:actor":
            actors.append(VideoActor(url=content))
        elif prop == "video:actor:role" and actors and actors[-1].role is None:
            actors[-1].role = content
    return actors


def _content(doc: Document, name: str) -> Optional[str]:
    return get_meta_content_any(doc, f"video:{name}") or get_meta_content_any(doc, f"og:video:{name}")


class VideoParser:
    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> VideoData:
        tags = _video_tags(doc)
        return VideoData(
            actors=_actors(tags),
            directors=_unique(tags, "video:director"),
            writers=_unique(tags, "video:writer"),
            duration=parse_positive_int(_content(doc, "duration")),
            release_date=_content(doc, "release_date"),
            tags=_unique(tags, "video:tag"),
            series=_content(doc, "series"),
        )


def parse_video(doc: Document, base_url: Optional[str] = None) -> VideoData:
    return VideoParser.parse(doc, base_url)
