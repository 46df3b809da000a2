"""
Metadata parsers.

Every parser is a stateless class with ``parse(doc, base_url)`` returning a
dataclass from :mod:`ogie.metadata.models`. :func:`parse_all` runs them over
one document and applies the basic-to-OpenGraph fallbacks.
"""

from __future__ import annotations

from typing import Optional

from ogie.metadata.app_links import AppLinksParser, parse_app_links
from ogie.metadata.article import (
    ArticleParser,
    BookParser,
    ProfileParser,
    parse_article,
    parse_book,
    parse_profile,
)
from ogie.metadata.basic import BasicMetaParser, parse_basic_meta
from ogie.metadata.dublin_core import DublinCoreParser, parse_dublin_core
from ogie.metadata.favicon import FaviconParser, get_primary_favicon, parse_favicons
from ogie.metadata.feeds import FeedParser, parse_feeds
from ogie.metadata.jsonld import JsonLdParser, parse_json_ld
from ogie.metadata.models import Metadata, OpenGraphData, is_empty
from ogie.metadata.music import MusicParser, parse_music
from ogie.metadata.oembed import OEmbedParser, parse_oembed_discovery, parse_oembed_response
from ogie.metadata.opengraph import OpenGraphParser, parse_open_graph
from ogie.metadata.twitter import TwitterCardParser, parse_twitter_card
from ogie.metadata.utils import Document, load_document
from ogie.metadata.video import VideoParser, parse_video
from ogie.protocols import ExtractOptions


def _or_none(data):
    return None if is_empty(data) else data


def _apply_fallbacks(metadata: Metadata) -> None:
    og: OpenGraphData = metadata.og
    basic = metadata.basic
    if og.title is None:
        og.title = basic.title
    if og.description is None:
        og.description = basic.description
    if og.url is None:
        og.url = basic.canonical


def parse_all(doc: Document, base_url: Optional[str] = None, options: Optional[ExtractOptions] = None) -> Metadata:
    """Run the parsers over ``doc``; with ``only_open_graph`` set, OpenGraph alone."""
    options = options or ExtractOptions()
    metadata = Metadata(og=OpenGraphParser.parse(doc, base_url))
    if options.only_open_graph:
        return metadata

    favicons, manifest_url = FaviconParser.parse(doc, base_url)
    discovery = OEmbedParser.parse(doc, base_url)

    metadata.twitter = TwitterCardParser.parse(doc, base_url)
    metadata.basic = BasicMetaParser.parse(doc, base_url)
    metadata.jsonld = _or_none(JsonLdParser.parse(doc, base_url))
    metadata.dublin_core = _or_none(DublinCoreParser.parse(doc, base_url))
    metadata.article = _or_none(ArticleParser.parse(doc, base_url))
    metadata.book = _or_none(BookParser.parse(doc, base_url))
    metadata.music = _or_none(MusicParser.parse(doc, base_url))
    metadata.video = _or_none(VideoParser.parse(doc, base_url))
    metadata.profile = _or_none(ProfileParser.parse(doc, base_url))
    metadata.app_links = _or_none(AppLinksParser.parse(doc, base_url))
    metadata.favicons = favicons
    metadata.manifest_url = manifest_url
    metadata.feeds = FeedParser.parse(doc, base_url)
    metadata.oembed_discovery = discovery if discovery else None

    _apply_fallbacks(metadata)
    return metadata


__all__ = [
    "AppLinksParser",
    "ArticleParser",
    "BasicMetaParser",
    "BookParser",
    "Document",
    "DublinCoreParser",
    "FaviconParser",
    "FeedParser",
    "JsonLdParser",
    "Metadata",
    "MusicParser",
    "OEmbedParser",
    "OpenGraphParser",
    "ProfileParser",
    "TwitterCardParser",
    "VideoParser",
    "get_primary_favicon",
    "load_document",
    "parse_all",
    "parse_app_links",
    "parse_article",
    "parse_basic_meta",
    "parse_book",
    "parse_dublin_core",
    "parse_favicons",
    "parse_feeds",
    "parse_json_ld",
    "parse_music",
    "parse_oembed_discovery",
    "parse_oembed_response",
    "parse_open_graph",
    "parse_twitter_card",
    "parse_video",
]
