"""
Twitter Card parser.

Every lookup checks ``name`` first and ``property`` second, since many
sites publish Twitter tags with OpenGraph-style ``property`` attributes.
"""

from __future__ import annotations

from typing import Optional

from ogie.metadata.models import TwitterApp, TwitterAppPlatform, TwitterCardData, TwitterImage, TwitterPlayer
from ogie.metadata.utils import Document, get_meta_content_any, parse_int, resolve_url

VALID_CARD_TYPES = frozenset({"summary", "summary_large_image", "app", "player"})


class TwitterCardParser:
    """Parser for Twitter Card metadata."""

    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> TwitterCardData:
        card = get_meta_content_any(doc, "twitter:card")
        return TwitterCardData(
            card=card if card in VALID_CARD_TYPES else None,
            site=get_meta_content_any(doc, "twitter:site"),
            site_id=get_meta_content_any(doc, "twitter:site:id"),
            creator=get_meta_content_any(doc, "twitter:creator"),
            creator_id=get_meta_content_any(doc, "twitter:creator:id"),
            title=get_meta_content_any(doc, "twitter:title"),
            description=get_meta_content_any(doc, "twitter:description"),
            image=TwitterCardParser._parse_image(doc, base_url),
            player=TwitterCardParser._parse_player(doc, base_url),
            app=TwitterCardParser._parse_app(doc),
        )

    @staticmethod
    def _parse_image(doc: Document, base_url: Optional[str]) -> Optional[TwitterImage]:
        image_url = get_meta_content_any(doc, "twitter:image")
        if not image_url:
            return None
        return TwitterImage(
            url=resolve_url(image_url, base_url),
            alt=get_meta_content_any(doc, "twitter:image:alt"),
        )

    @staticmethod
    def _parse_player(doc: Document, base_url: Optional[str]) -> Optional[TwitterPlayer]:
        player_url = get_meta_content_any(doc, "twitter:player")
        if not player_url:
            return None
        stream = get_meta_content_any(doc, "twitter:player:stream")
        return TwitterPlayer(
            url=resolve_url(player_url, base_url),
            width=parse_int(get_meta_content_any(doc, "twitter:player:width")),
            height=parse_int(get_meta_content_any(doc, "twitter:player:height")),
            stream=resolve_url(stream, base_url) if stream else None,
            stream_content_type=get_meta_content_any(doc, "twitter:player:stream:content_type"),
        )

    @staticmethod
    def _parse_app_platform(doc: Document, platform: str) -> Optional[TwitterAppPlatform]:
        app_id = get_meta_content_any(doc, f"twitter:app:id:{platform}")
        url = get_meta_content_any(doc, f"twitter:app:url:{platform}")
        name = get_meta_content_any(doc, f"twitter:app:name:{platform}")
        if not (app_id or url or name):
            return None
        return TwitterAppPlatform(id=app_id, url=url, name=name)

    @staticmethod
    def _parse_app(doc: Document) -> Optional[TwitterApp]:
        app = TwitterApp(
            iphone=TwitterCardParser._parse_app_platform(doc, "iphone"),
            ipad=TwitterCardParser._parse_app_platform(doc, "ipad"),
            googleplay=TwitterCardParser._parse_app_platform(doc, "googleplay"),
            country=get_meta_content_any(doc, "twitter:app:country"),
        )
        if not (app.iphone or app.ipad or app.googleplay or app.country):
            return None
        return app


def parse_twitter_card(doc: Document, base_url: Optional[str] = None) -> TwitterCardData:
    return TwitterCardParser.parse(doc, base_url)
