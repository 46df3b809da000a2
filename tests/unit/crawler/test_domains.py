"""Tests for registrable domain grouping."""

import pytest

from ogie.crawler.domains import registrable_domain


@pytest.mark.unit
class TestRegistrableDomain:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://example.com/page", "example.com"),
            ("https://www.example.com/", "example.com"),
            ("https://a.b.example.com/", "example.com"),
            ("https://news.bbc.co.uk/story", "bbc.co.uk"),
            ("https://EXAMPLE.org/", "example.org"),
            ("http://192.168.1.10:8080/", "192.168.1.10"),
            ("http://localhost/", "localhost"),
        ],
    )
    def test_grouping(self, url, expected):
        assert registrable_domain(url) == expected

    def test_unparseable_input(self):
        assert registrable_domain("  Not A URL ") == "not a url"
