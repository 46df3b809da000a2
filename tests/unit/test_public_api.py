"""
Tests for the public entry points: extract, extract_from_html and
extract_bulk. Every failure must come back as an ExtractFailure.
"""

import asyncio

import pytest
from aioresponses import aioresponses
from yarl import URL

import ogie.extractor
from ogie import (
    BulkOptions,
    ErrorCode,
    ExtractFailure,
    ExtractOptions,
    ExtractSuccess,
    create_cache,
    extract,
    extract_bulk,
    extract_from_html,
    generate_cache_key,
)
from ogie.crawler.http_client import SecureFetcher
from ogie.metadata.models import OEmbedVideo
from ogie.security.validation import URLGuard, URLGuardRules

HTML_TYPE = "text/html; charset=utf-8"
PAGE = """
<html><head>
  <title>Page</title>
  <meta property="og:title" content="OG Page">
  <link rel="alternate" type="application/json+oembed" href="https://example.com/oembed?url=x">
</head><body></body></html>
"""


def request_count(m, url):
    return len(m.requests.get(("GET", URL(url)), []))


@pytest.mark.unit
class TestExtract:
    @pytest.mark.asyncio
    async def test_success_records_urls(self, public_options):
        with aioresponses() as m:
            m.get("https://example.com/old", status=301, headers={"Location": "/new"})
            m.get("https://example.com/new", status=200, body=PAGE, content_type=HTML_TYPE)
            result = await extract("https://example.com/old", public_options)

        assert isinstance(result, ExtractSuccess)
        assert result.success is True
        assert result.data.og.title == "OG Page"
        assert result.data.request_url == "https://example.com/old"
        assert result.data.final_url == "https://example.com/new"
        assert result.data.oembed_discovery.json_url == "https://example.com/oembed?url=x"
        assert result.data.oembed is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "url",
        ["not a url", "ftp://example.com/file", "http://127.0.0.1/admin", "http://localhost:8080/", "http://[::1]/"],
    )
    async def test_rejected_urls(self, url):
        result = await extract(url)

        assert isinstance(result, ExtractFailure)
        assert result.success is False
        assert result.error.code is ErrorCode.INVALID_URL

    @pytest.mark.asyncio
    async def test_fetcher_guard_is_the_only_url_check(self):
        guard = URLGuard(URLGuardRules(blocked_hostnames=[], blocked_suffixes=[]))
        with aioresponses() as m:
            m.get("http://intranet.local/", status=200, body=PAGE, content_type=HTML_TYPE)
            async with SecureFetcher(guard=guard) as fetcher:
                result = await extract("http://intranet.local/", fetcher=fetcher, cache=False)

        assert result.success
        assert result.data.og.title == "OG Page"

    @pytest.mark.asyncio
    async def test_private_url_allowed_when_opted_in(self):
        with aioresponses() as m:
            m.get("http://127.0.0.1/", status=200, body=PAGE, content_type=HTML_TYPE)
            result = await extract("http://127.0.0.1/", allow_private_urls=True)

        assert result.success

    @pytest.mark.asyncio
    async def test_timeout(self):
        with aioresponses() as m:
            m.get("https://example.com/slow", timeout=True)
            result = await extract("https://example.com/slow", timeout=100)

        assert result.error.code is ErrorCode.TIMEOUT

    @pytest.mark.asyncio
    async def test_non_html_response(self):
        with aioresponses() as m:
            m.get("https://example.com/data", status=200, payload={"a": 1})
            result = await extract("https://example.com/data")

        assert result.error.code is ErrorCode.FETCH_ERROR

    @pytest.mark.asyncio
    async def test_parse_errors_are_wrapped(self, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(ogie.extractor, "parse_all", broken)
        with aioresponses() as m:
            m.get("https://example.com/", status=200, body=PAGE, content_type=HTML_TYPE)
            result = await extract("https://example.com/")

        assert result.error.code is ErrorCode.PARSE_ERROR
        assert result.error.message == "Failed to parse HTML: boom"


@pytest.mark.unit
class TestExtractCaching:
    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self):
        cache = create_cache()
        options = ExtractOptions(cache=cache)
        with aioresponses() as m:
            m.get("https://example.com/", status=200, body=PAGE, content_type=HTML_TYPE)
            first = await extract("https://example.com/", options)
            second = await extract("https://example.com/", options)
            assert request_count(m, "https://example.com/") == 1

        assert first.success and second.success
        assert second.data is first.data
        assert cache.has(generate_cache_key("https://example.com/", options))

    @pytest.mark.asyncio
    async def test_bypass_cache_refetches_and_stores(self):
        cache = create_cache()
        options = ExtractOptions(cache=cache)
        with aioresponses() as m:
            m.get("https://example.com/", status=200, body=PAGE, content_type=HTML_TYPE, repeat=True)
            first = await extract("https://example.com/", options)
            second = await extract("https://example.com/", options, bypass_cache=True)
            assert request_count(m, "https://example.com/") == 2

        key = generate_cache_key("https://example.com/", options)
        assert cache.get(key) is second.data
        assert second.data is not first.data

    @pytest.mark.asyncio
    async def test_cache_false_disables_caching(self):
        options = ExtractOptions(cache=False)
        with aioresponses() as m:
            m.get("https://example.com/", status=200, body=PAGE, content_type=HTML_TYPE, repeat=True)
            await extract("https://example.com/", options)
            await extract("https://example.com/", options)
            assert request_count(m, "https://example.com/") == 2

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self):
        cache = create_cache()
        with aioresponses() as m:
            m.get("https://example.com/", status=500, body="err", content_type=HTML_TYPE)
            result = await extract("https://example.com/", cache=cache)

        assert not result.success
        assert cache.size() == 0


@pytest.mark.unit
class TestExtractOEmbed:
    @pytest.mark.asyncio
    async def test_fetches_discovered_endpoint(self):
        with aioresponses() as m:
            m.get("https://example.com/", status=200, body=PAGE, content_type=HTML_TYPE)
            m.get(
                "https://example.com/oembed?url=x",
                status=200,
                payload={"type": "video", "version": "1.0", "html": "<iframe></iframe>", "width": 480, "height": 270},
            )
            result = await extract("https://example.com/", fetch_oembed=True)

        assert isinstance(result.data.oembed, OEmbedVideo)
        assert result.data.oembed.width == 480

    @pytest.mark.asyncio
    async def test_endpoint_failure_keeps_page_result(self):
        with aioresponses() as m:
            m.get("https://example.com/", status=200, body=PAGE, content_type=HTML_TYPE)
            m.get("https://example.com/oembed?url=x", status=404, body="missing")
            result = await extract("https://example.com/", fetch_oembed=True)

        assert result.success
        assert result.data.oembed is None

    @pytest.mark.asyncio
    async def test_skipped_with_only_open_graph(self):
        with aioresponses() as m:
            m.get("https://example.com/", status=200, body=PAGE, content_type=HTML_TYPE)
            result = await extract("https://example.com/", fetch_oembed=True, only_open_graph=True)
            assert request_count(m, "https://example.com/oembed?url=x") == 0

        assert result.data.oembed is None
        assert result.data.oembed_discovery is None


@pytest.mark.unit
class TestExtractFromHtml:
    @pytest.mark.parametrize("html", ["", "   \n"])
    def test_no_html(self, html):
        result = extract_from_html(html)

        assert isinstance(result, ExtractFailure)
        assert result.error.code is ErrorCode.NO_HTML
        assert result.error.message == "No HTML content provided"

    def test_fallbacks(self, fallback_html):
        result = extract_from_html(fallback_html)

        assert result.success
        assert result.data.og.title == "Basic Title"
        assert result.data.og.description == "Basic Description"

    def test_only_open_graph_skips_fallbacks(self, fallback_html):
        result = extract_from_html(fallback_html, only_open_graph=True)

        assert result.success
        assert result.data.og.title is None

    def test_base_url_resolves_links(self, sample_html):
        result = extract_from_html(sample_html, base_url="https://example.com/articles/test")

        assert result.data.og.images[0].url == "https://example.com/images/cover.png"
        assert result.data.final_url == "https://example.com/articles/test"
        assert result.data.request_url is None


@pytest.mark.unit
class TestExtractBulk:
    @pytest.mark.asyncio
    async def test_results_in_input_order(self):
        urls = ["https://a.example.com/", "https://b.example.org/", "http://10.0.0.1/"]
        options = BulkOptions(min_delay_per_domain=0)
        with aioresponses() as m:
            m.get("https://a.example.com/", status=200, body=PAGE, content_type=HTML_TYPE)
            m.get("https://b.example.org/", status=404, body="missing", content_type=HTML_TYPE)
            result = await extract_bulk(urls, options)

        assert [item.url for item in result.results] == urls
        assert result.results[0].result.success
        assert result.results[1].result.error.code is ErrorCode.FETCH_ERROR
        assert result.results[2].result.error.code is ErrorCode.INVALID_URL
        assert (result.stats.total, result.stats.succeeded, result.stats.failed) == (3, 1, 2)

    @pytest.mark.asyncio
    async def test_keyword_overrides(self):
        with aioresponses() as m:
            m.get("https://example.com/1", status=500, body="err", content_type=HTML_TYPE)
            m.get("https://example.com/2", status=200, body=PAGE, content_type=HTML_TYPE)
            result = await extract_bulk(
                ["https://example.com/1", "https://example.com/2"],
                concurrency=1,
                min_delay_per_domain=0,
                continue_on_error=False,
            )

        assert not result.results[0].result.success
        assert result.results[1].skipped
        assert result.stats.skipped == 1

    @pytest.mark.asyncio
    async def test_extract_option_overrides_reach_each_url(self):
        with aioresponses() as m:
            m.get("http://127.0.0.1:8081/bulk", status=200, body=PAGE, content_type=HTML_TYPE)
            m.get("https://example.com/slow-bulk", timeout=True)
            result = await extract_bulk(
                ["http://127.0.0.1:8081/bulk", "https://example.com/slow-bulk", "ftp://example.com/file"],
                min_delay_per_domain=0,
                allow_private_urls=True,
                timeout=100,
                only_open_graph=True,
            )

        private, slow, ftp = (item.result for item in result.results)
        assert private.success
        assert private.data.og.title == "OG Page"
        assert private.data.oembed_discovery is None
        assert slow.error.code is ErrorCode.TIMEOUT
        assert ftp.error.code is ErrorCode.INVALID_URL

    @pytest.mark.asyncio
    async def test_extract_option_overrides_merge_into_given_options(self):
        options = BulkOptions(extract_options=ExtractOptions(allow_private_urls=True, timeout=5000))
        result = await extract_bulk(["http://10.0.0.1/"], options, allow_private_urls=False, min_delay_per_domain=0)

        assert result.results[0].result.error.code is ErrorCode.INVALID_URL
        assert options.extract_options.allow_private_urls is True

    @pytest.mark.asyncio
    async def test_unknown_override_is_rejected(self):
        with pytest.raises(TypeError, match="no_such_option"):
            await extract_bulk(["https://example.com/"], no_such_option=1)

    @pytest.mark.asyncio
    async def test_cancel_event_stops_admission(self):
        cancel_event = asyncio.Event()
        urls = [f"https://example.com/{i}" for i in range(4)]

        def on_progress(update):
            cancel_event.set()

        options = BulkOptions(concurrency=1, min_delay_per_domain=0, on_progress=on_progress)
        with aioresponses() as m:
            for url in urls:
                m.get(url, status=200, body=PAGE, content_type=HTML_TYPE)
            result = await extract_bulk(urls, options, cancel_event=cancel_event)

        assert result.results[0].result.success
        assert result.results[-1].skipped
        assert result.stats.skipped >= 1
        assert result.stats.succeeded + result.stats.skipped == len(urls)
