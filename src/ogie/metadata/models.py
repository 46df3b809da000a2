"""
Result dataclasses produced by the metadata parsers.

Optional scalar fields default to ``None`` and repeated fields to empty
lists, so a parser that finds nothing returns an empty instance rather
than ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, List, Literal, Optional, Union

# ============================================================================
# OpenGraph
# ============================================================================


@dataclass
class OpenGraphImage:
    url: str
    secure_url: Optional[str] = None
    type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    alt: Optional[str] = None


@dataclass
class OpenGraphVideo:
    url: str
    secure_url: Optional[str] = None
    type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass
class OpenGraphAudio:
    url: str
    secure_url: Optional[str] = None
    type: Optional[str] = None


@dataclass
class OpenGraphData:
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    url: Optional[str] = None
    site_name: Optional[str] = None
    locale: Optional[str] = None
    locale_alternate: List[str] = field(default_factory=list)
    determiner: Optional[str] = None
    images: List[OpenGraphImage] = field(default_factory=list)
    videos: List[OpenGraphVideo] = field(default_factory=list)
    audio: List[OpenGraphAudio] = field(default_factory=list)


# ============================================================================
# Twitter Card
# ============================================================================


@dataclass
class TwitterImage:
    url: str
    alt: Optional[str] = None


@dataclass
class TwitterPlayer:
    url: str
    width: Optional[int] = None
    height: Optional[int] = None
    stream: Optional[str] = None
    stream_content_type: Optional[str] = None


@dataclass
class TwitterAppPlatform:
    id: Optional[str] = None
    url: Optional[str] = None
    name: Optional[str] = None


@dataclass
class TwitterApp:
    iphone: Optional[TwitterAppPlatform] = None
    ipad: Optional[TwitterAppPlatform] = None
    googleplay: Optional[TwitterAppPlatform] = None
    country: Optional[str] = None


@dataclass
class TwitterCardData:
    card: Optional[str] = None
    site: Optional[str] = None
    site_id: Optional[str] = None
    creator: Optional[str] = None
    creator_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[TwitterImage] = None
    player: Optional[TwitterPlayer] = None
    app: Optional[TwitterApp] = None


# ============================================================================
# Basic HTML meta
# ============================================================================


@dataclass
class BasicMetaData:
    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    keywords: Optional[str] = None
    charset: Optional[str] = None
    canonical: Optional[str] = None
    favicon: Optional[str] = None
    generator: Optional[str] = None
    application_name: Optional[str] = None
    referrer: Optional[str] = None
    theme_color: Optional[str] = None
    viewport: Optional[str] = None
    robots: Optional[str] = None
    language: Optional[str] = None


# ============================================================================
# JSON-LD
# ============================================================================


@dataclass
class JsonLdPerson:
    name: Optional[str] = None
    url: Optional[str] = None
    type: Literal["Person"] = "Person"


@dataclass
class JsonLdOrganization:
    name: Optional[str] = None
    url: Optional[str] = None
    logo: Optional[str] = None
    type: Literal["Organization"] = "Organization"


@dataclass
class JsonLdItem:
    type: Union[str, List[str], None] = None
    name: Optional[str] = None
    description: Optional[str] = None
    image: Union[str, List[str], None] = None
    url: Optional[str] = None
    date_published: Optional[str] = None
    date_modified: Optional[str] = None
    author: Union[JsonLdPerson, List[JsonLdPerson], None] = None
    publisher: Union[JsonLdOrganization, JsonLdPerson, None] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class JsonLdData:
    items: List[JsonLdItem] = field(default_factory=list)
    raw: List[Any] = field(default_factory=list)


# ============================================================================
# Dublin Core
# ============================================================================

MultiValue = Union[str, List[str], None]


@dataclass
class DublinCoreData:
    title: Optional[str] = None
    creator: MultiValue = None
    subject: MultiValue = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    contributor: MultiValue = None
    date: Optional[str] = None
    type: Optional[str] = None
    format: Optional[str] = None
    identifier: MultiValue = None
    source: Optional[str] = None
    language: Optional[str] = None
    relation: MultiValue = None
    coverage: Optional[str] = None
    rights: Optional[str] = None
    audience: Optional[str] = None


# ============================================================================
# OpenGraph object types
# ============================================================================


@dataclass
class ArticleData:
    published_time: Optional[str] = None
    modified_time: Optional[str] = None
    expiration_time: Optional[str] = None
    author: MultiValue = None
    section: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    publisher: Optional[str] = None


@dataclass
class BookData:
    authors: List[str] = field(default_factory=list)
    isbn: Optional[str] = None
    release_date: Optional[str] = None
    tags: List[str] = field(default_factory=list)


@dataclass
class ProfileData:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    gender: Optional[Literal["male", "female"]] = None


@dataclass
class MusicRef:
    """Album or song reference; disc and track attach to the preceding URL."""

    url: str
    disc: Optional[int] = None
    track: Optional[int] = None


@dataclass
class MusicData:
    duration: Optional[int] = None
    albums: List[MusicRef] = field(default_factory=list)
    musicians: List[str] = field(default_factory=list)
    songs: List[MusicRef] = field(default_factory=list)
    creator: Optional[str] = None
    release_date: Optional[str] = None


@dataclass
class VideoActor:
    url: str
    role: Optional[str] = None


@dataclass
class VideoData:
    actors: List[VideoActor] = field(default_factory=list)
    directors: List[str] = field(default_factory=list)
    writers: List[str] = field(default_factory=list)
    duration: Optional[int] = None
    release_date: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    series: Optional[str] = None


# ============================================================================
# App Links
# ============================================================================


@dataclass
class AppLinkPlatform:
    url: Optional[str] = None
    app_store_id: Optional[str] = None
    app_id: Optional[str] = None
    package: Optional[str] = None
    class_name: Optional[str] = None
    app_name: Optional[str] = None


@dataclass
class AppLinksWeb:
    url: Optional[str] = None
    should_fallback: Optional[bool] = None


@dataclass
class AppLinksData:
    ios: List[AppLinkPlatform] = field(default_factory=list)
    iphone: List[AppLinkPlatform] = field(default_factory=list)
    ipad: List[AppLinkPlatform] = field(default_factory=list)
    android: List[AppLinkPlatform] = field(default_factory=list)
    windows: List[AppLinkPlatform] = field(default_factory=list)
    windows_phone: List[AppLinkPlatform] = field(default_factory=list)
    windows_universal: List[AppLinkPlatform] = field(default_factory=list)
    web: List[AppLinksWeb] = field(default_factory=list)


# ============================================================================
# Links: favicons, feeds, oEmbed
# ============================================================================


@dataclass
class FaviconData:
    url: str
    rel: str
    type: Optional[str] = None
    sizes: Optional[str] = None
    color: Optional[str] = None


@dataclass
class FeedLink:
    url: str
    type: Literal["rss", "atom", "json"]
    title: Optional[str] = None


@dataclass
class OEmbedDiscovery:
    json_url: Optional[str] = None
    xml_url: Optional[str] = None

    def __bool__(self) -> bool:
        return bool(self.json_url or self.xml_url)


@dataclass
class OEmbedBase:
    version: str = "1.0"
    title: Optional[str] = None
    author_name: Optional[str] = None
    author_url: Optional[str] = None
    provider_name: Optional[str] = None
    provider_url: Optional[str] = None
    cache_age: Optional[int] = None
    thumbnail_url: Optional[str] = None
    thumbnail_width: Optional[int] = None
    thumbnail_height: Optional[int] = None


@dataclass
class OEmbedPhoto(OEmbedBase):
    url: str = ""
    width: int = 0
    height: int = 0
    type: Literal["photo"] = "photo"


@dataclass
class OEmbedVideo(OEmbedBase):
    html: str = ""
    width: int = 0
    height: int = 0
    type: Literal["video"] = "video"


@dataclass
class OEmbedRich(OEmbedBase):
    html: str = ""
    width: int = 0
    height: int = 0
    type: Literal["rich"] = "rich"


@dataclass
class OEmbedLink(OEmbedBase):
    type: Literal["link"] = "link"


OEmbedData = Union[OEmbedPhoto, OEmbedVideo, OEmbedRich, OEmbedLink]

# ============================================================================
# Aggregate
# ============================================================================


@dataclass
class Metadata:
    """Everything extracted from one document."""

    og: OpenGraphData = field(default_factory=OpenGraphData)
    twitter: TwitterCardData = field(default_factory=TwitterCardData)
    basic: BasicMetaData = field(default_factory=BasicMetaData)
    jsonld: Optional[JsonLdData] = None
    dublin_core: Optional[DublinCoreData] = None
    article: Optional[ArticleData] = None
    book: Optional[BookData] = None
    music: Optional[MusicData] = None
    video: Optional[VideoData] = None
    profile: Optional[ProfileData] = None
    app_links: Optional[AppLinksData] = None
    favicons: List[FaviconData] = field(default_factory=list)
    manifest_url: Optional[str] = None
    feeds: List[FeedLink] = field(default_factory=list)
    oembed_discovery: Optional[OEmbedDiscovery] = None
    oembed: Optional[OEmbedData] = None
    request_url: Optional[str] = None
    final_url: Optional[str] = None
    charset: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict view with unset fields and empty collections dropped."""
        return _prune(self)


def is_empty(data: Any) -> bool:
    """True when a parser result carries no values."""
    if data is None:
        return True
    if is_dataclass(data):
        return all(is_empty(getattr(data, f.name)) for f in fields(data) if f.name != "type")
    if isinstance(data, (list, dict, str)):
        return len(data) == 0
    return False


def _prune(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        result: Dict[str, Any] = {}
        for f in fields(value):
            if f.name == "extra":
                result.update(_prune(getattr(value, f.name)) or {})
                continue
            pruned = _prune(getattr(value, f.name))
            if pruned is None or pruned == [] or pruned == {}:
                continue
            result[f.name] = pruned
        return result
    if isinstance(value, list):
        return [_prune(item) for item in value]
    if isinstance(value, dict):
        return {key: _prune(item) for key, item in value.items()}
    return value
