"""
Tests for the OpenGraph object type parsers and App Links.
"""

import pytest

from ogie.metadata.app_links import AppLinksParser
from ogie.metadata.article import ArticleParser, BookParser, ProfileParser
from ogie.metadata.models import AppLinkPlatform, AppLinksWeb, MusicRef, VideoActor
from ogie.metadata.music import MusicParser
from ogie.metadata.video import VideoParser


@pytest.mark.unit
class TestArticleBookProfile:
    def test_article(self, make_doc):
        doc = make_doc(
            """
            <meta property="article:published_time" content="2024-03-01T10:00:00Z">
            <meta property="article:modified_time" content="2024-03-02T10:00:00Z">
            <meta property="article:section" content="Tech">
            <meta property="article:author" content="https://example.com/ann">
            <meta property="og:article:author" content="https://example.com/bob">
            <meta property="article:author" content="https://example.com/ann">
            <meta property="article:tag" content="python">
            <meta property="article:tag" content="asyncio">
            <meta property="og:article:publisher" content="https://example.com">
            """
        )
        article = ArticleParser.parse(doc)

        assert article.published_time == "2024-03-01T10:00:00Z"
        assert article.modified_time == "2024-03-02T10:00:00Z"
        assert article.expiration_time is None
        assert article.section == "Tech"
        assert article.author == ["https://example.com/ann", "https://example.com/bob"]
        assert article.tags == ["python", "asyncio"]
        assert article.publisher == "https://example.com"

    def test_single_author_is_scalar(self, make_doc):
        article = ArticleParser.parse(make_doc('<meta property="article:author" content="Ann">'))
        assert article.author == "Ann"

    def test_book(self, make_doc):
        doc = make_doc(
            """
            <meta property="book:author" content="Ann">
            <meta property="book:author" content="Bob">
            <meta property="book:isbn" content="978-3-16-148410-0">
            <meta property="book:release_date" content="2011-01-01">
            <meta property="book:tag" content="fiction">
            """
        )
        book = BookParser.parse(doc)

        assert book.authors == ["Ann", "Bob"]
        assert book.isbn == "978-3-16-148410-0"
        assert book.release_date == "2011-01-01"
        assert book.tags == ["fiction"]

    @pytest.mark.parametrize("gender,expected", [("male", "male"), ("female", "female"), ("other", None)])
    def test_profile(self, make_doc, gender, expected):
        doc = make_doc(
            f"""
            <meta property="profile:first_name" content="Ann">
            <meta property="profile:last_name" content="Lee">
            <meta property="profile:username" content="alee">
            <meta property="profile:gender" content="{gender}">
            """
        )
        profile = ProfileParser.parse(doc)

        assert (profile.first_name, profile.last_name, profile.username) == ("Ann", "Lee", "alee")
        assert profile.gender == expected


@pytest.mark.unit
class TestMusicParser:
    def test_song_and_album_references(self, make_doc):
        doc = make_doc(
            """
            <meta property="music:duration" content="245">
            <meta property="music:album" content="https://example.com/album/1">
            <meta property="music:album:disc" content="1">
            <meta property="music:album:track" content="4">
            <meta property="music:album" content="https://example.com/album/2">
            <meta property="music:album:track" content="0">
            <meta property="music:musician" content="https://example.com/band">
            <meta property="music:song:track" content="9">
            <meta property="music:song" content="https://example.com/song/1">
            <meta property="music:song:url" content="https://example.com/song/2">
            <meta property="music:song:track" content="2">
            <meta property="music:creator" content="https://example.com/dj">
            <meta property="music:release_date" content="2019-07-01">
            """
        )
        music = MusicParser.parse(doc)

        assert music.duration == 245
        assert music.albums == [
            MusicRef(url="https://example.com/album/1", disc=1, track=4),
            MusicRef(url="https://example.com/album/2"),
        ]
        assert music.songs == [
            MusicRef(url="https://example.com/song/1"),
            MusicRef(url="https://example.com/song/2", track=2),
        ]
        assert music.musicians == ["https://example.com/band"]
        assert music.creator == "https://example.com/dj"
        assert music.release_date == "2019-07-01"

    def test_non_positive_duration(self, make_doc):
        assert MusicParser.parse(make_doc('<meta property="music:duration" content="-5">')).duration is None


@pytest.mark.unit
class TestVideoParser:
    def test_movie(self, make_doc):
        doc = make_doc(
            """
            <meta property="video:actor" content="https://example.com/actor/1">
            <meta property="video:actor:role" content="Hero">
            <meta property="video:actor:role" content="Ignored">
            <meta property="og:video:actor" content="https://example.com/actor/2">
            <meta property="video:director" content="https://example.com/dir">
            <meta property="video:director" content="https://example.com/dir">
            <meta property="video:writer" content="https://example.com/writer">
            <meta property="video:duration" content="7200">
            <meta property="video:release_date" content="2001-12-19">
            <meta property="video:tag" content="fantasy">
            <meta property="video:series" content="https://example.com/show">
            """
        )
        video = VideoParser.parse(doc)

        assert video.actors == [
            VideoActor(url="https://example.com/actor/1", role="Hero"),
            VideoActor(url="https://example.com/actor/2"),
        ]
        assert video.directors == ["https://example.com/dir"]
        assert video.writers == ["https://example.com/writer"]
        assert video.duration == 7200
        assert video.release_date == "2001-12-19"
        assert video.tags == ["fantasy"]
        assert video.series == "https://example.com/show"

    def test_role_without_actor_is_dropped(self, make_doc):
        video = VideoParser.parse(make_doc('<meta property="video:actor:role" content="Nobody">'))
        assert video.actors == []


@pytest.mark.unit
class TestAppLinksParser:
    def test_platforms(self, make_doc):
        doc = make_doc(
            """
            <meta property="al:ios:url" content="example://ios">
            <meta property="al:ios:app_store_id" content="12345">
            <meta property="al:ios:app_name" content="Example">
            <meta property="al:android:url" content="example://android">
            <meta property="al:android:package" content="com.example">
            <meta property="al:android:class" content="com.example.Main">
            <meta property="al:web:url" content="https://example.com/web">
            <meta property="al:web:should_fallback" content="false">
            """
        )
        links = AppLinksParser.parse(doc)

        assert links.ios == [AppLinkPlatform(url="example://ios", app_store_id="12345", app_name="Example")]
        assert links.android == [
            AppLinkPlatform(url="example://android", package="com.example", class_name="com.example.Main")
        ]
        assert links.web == [AppLinksWeb(url="https://example.com/web", should_fallback=False)]
        assert links.iphone == []

    def test_multiple_entries_per_platform(self, make_doc):
        doc = make_doc(
            """
            <meta property="al:android">
            <meta property="al:android:package" content="com.example.one">
            <meta property="al:android">
            <meta property="al:android:package" content="com.example.two">
            <meta property="al:ios:url" content="example://a">
            <meta property="al:ios:url" content="example://b">
            """
        )
        links = AppLinksParser.parse(doc)

        assert [entry.package for entry in links.android] == ["com.example.one", "com.example.two"]
        assert [entry.url for entry in links.ios] == ["example://a", "example://b"]

    def test_invalid_should_fallback_is_ignored(self, make_doc):
        links = AppLinksParser.parse(make_doc('<meta property="al:web:should_fallback" content="maybe">'))
        assert links.web == []
