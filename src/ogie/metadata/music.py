"""
OpenGraph music parser (``music.song``, ``music.album``, ``music.playlist``,
``music.radio_station``).
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ogie.metadata.models import MusicData, MusicRef
from ogie.metadata.utils import Document, all_contents, get_meta_content_any, iter_meta_tags, parse_positive_int


def _parse_refs(tags: List[Tuple[str, str]], kind: str) -> List[MusicRef]:
    """Group ``music:{kind}`` references; ``:disc`` and ``:track`` attach to the preceding URL."""
    base = f"music:{kind}"
    refs: List[MusicRef] = []
    current: Optional[MusicRef] = None

    for prop, content in tags:
        if prop in (base, f"{base}:url"):
            if current is not None:
                refs.append(current)
            current = MusicRef(url=content)
        elif current is not None and prop in (f"{base}:disc", f"{base}:track"):
            number = parse_positive_int(content)
            if number is not None:
                setattr(current, prop.rsplit(":", 1)[1], number)

    if current is not None:
        refs.append(current)
    return refs


class MusicParser:
    """Parser for ``music:*`` properties."""

    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> MusicData:
        tags = list(iter_meta_tags(doc, "music:"))
        return MusicData(
            duration=parse_positive_int(get_meta_content_any(doc, "music:duration")),
            albums=_parse_refs(tags, "album"),
            musicians=all_contents(doc, "music:musician"),
            songs=_parse_refs(tags, "song"),
            creator=get_meta_content_any(doc, "music:creator"),
            release_date=get_meta_content_any(doc, "music:release_date"),
        )


def parse_music(doc: Document, base_url: Optional[str] = None) -> MusicData:
    return MusicParser.parse(doc, base_url)
