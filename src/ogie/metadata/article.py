"""
OpenGraph object types: ``article:*``, ``book:*`` and ``profile:*``.

Each property is also read under its ``og:``-prefixed spelling.
"""

from __future__ import annotations

from typing import List, Optional

from ogie.metadata.models import ArticleData, BookData, ProfileData
from ogie.metadata.utils import Document, all_contents, get_meta_content_any, single_or_list

PROFILE_GENDERS = frozenset({"male", "female"})


def _content(doc: Document, namespace: str, name: str) -> Optional[str]:
    return get_meta_content_any(doc, f"{namespace}:{name}") or get_meta_content_any(
        doc, f"og:{namespace}:{name}"
    )


def _contents(doc: Document, namespace: str, name: str) -> List[str]:
    return all_contents(doc, f"{namespace}:{name}", f"og:{namespace}:{name}")


class ArticleParser:
    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> ArticleData:
        return ArticleData(
            published_time=_content(doc, "article", "published_time"),
            modified_time=_content(doc, "article", "modified_time"),
            expiration_time=_content(doc, "article", "expiration_time"),
            author=single_or_list(_contents(doc, "article", "author")),
            section=_content(doc, "article", "section"),
            tags=_contents(doc, "article", "tag"),
            publisher=_content(doc, "article", "publisher"),
        )


class BookParser:
    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> BookData:
        return BookData(
            authors=_contents(doc, "book", "author"),
            isbn=_content(doc, "book", "isbn"),
            release_date=_content(doc, "book", "release_date"),
            tags=_contents(doc, "book", "tag"),
        )


class ProfileParser:
    @staticmethod
    def parse(doc: Document, base_url: Optional[str] = None) -> ProfileData:
        gender = _content(doc, "profile", "gender")
        return ProfileData(
            first_name=_content(doc, "profile", "first_name"),
            last_name=_content(doc, "profile", "last_name"),
            username=_content(doc, "profile", "username"),
            gender=gender if gender in PROFILE_GENDERS else None,  # type: ignore[arg-type]
        )


def parse_article(doc: Document, base_url: Optional[str] = None) -> ArticleData:
    return ArticleParser.parse(doc, base_url)


def parse_book(doc: Document, base_url: Optional[str] = None) -> BookData:
    return BookParser.parse(doc, base_url)


def parse_profile(doc: Document, base_url: Optional[str] = None) -> ProfileData:
    return ProfileParser.parse(doc, base_url)
