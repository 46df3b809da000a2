"""
Secure HTTP fetcher with per-hop SSRF validation, timeouts, and observability.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.parse import urljoin

import aiohttp
import structlog

from ogie.encoding.charset import DEFAULT_CHARSET, decode_html, detect_charset
from ogie.errors import FetchError, FetchTimeoutError, OgieError, ParseError, RedirectLimitError
from ogie.observability.metrics import METRICS
from ogie.protocols import DEFAULT_ACCEPT, ExtractOptions, FetchResult
from ogie.security.validation import URLGuard

logger = structlog.get_logger(__name__)

JSON_ACCEPT = "application/json"


def is_html_content_type(content_type: str) -> bool:
    value = content_type.lower()
    return "text/html" in value or "application/xhtml+xml" in value


def is_json_content_type(content_type: str) -> bool:
    return "json" in content_type.lower()


@dataclass
class _Response:
    """Terminal response of a redirect chain, body already read."""

    status: int
    content_type: str
    body: bytes
    final_url: str
    redirects: int


class SecureFetcher:
    """HTTP GET with manual redirect handling.

    Every URL, including every ``Location`` target, is checked by the URL
    guard before a request is sent. Each attempt runs under its own
    ``asyncio.timeout`` scope and a timeout ends the whole fetch.

    The fetcher owns an ``aiohttp.ClientSession`` unless one is passed in.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, guard: Optional[URLGuard] = None):
        self.guard = guard or URLGuard()
        self.session = session
        self._owns_session = session is None

    async def initialize(self) -> None:
        """Create the HTTP session if none was supplied."""
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
            logger.debug("HTTP session created")

    async def close(self) -> None:
        """Close the session if this fetcher created it."""
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None
            logger.debug("HTTP session closed")

    async def __aenter__(self) -> "SecureFetcher":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @staticmethod
    def build_headers(options: ExtractOptions, accept: str = DEFAULT_ACCEPT) -> Dict[str, str]:
        """Default Accept and User-Agent, overridden by caller supplied headers."""
        headers = {"Accept": accept, "User-Agent": options.user_agent}
        lowered = {name.lower(): name for name in headers}
        for name, value in options.headers.items():
            existing = lowered.get(name.lower())
            if existing is not None:
                del headers[existing]
            headers[name] = value
        return headers

    async def fetch(self, url: str, options: Optional[ExtractOptions] = None) -> FetchResult:
        """
        Fetch an HTML document.

        Args:
            url: Absolute http(s) URL
            options: Timeout, redirect, header and charset settings

        Returns:
            FetchResult with the decoded document and the final URL

        Raises:
            InvalidUrlError: If the URL or a redirect target fails validation
            FetchTimeoutError: If any attempt exceeds ``options.timeout``
            RedirectLimitError: If more than ``options.max_redirects`` hops are needed
            FetchError: On network errors, non-2xx status or non-HTML content
        """
        options = options or ExtractOptions()
        response = await self._fetch_terminal(url, options, DEFAULT_ACCEPT, is_html_content_type, "HTML")

        charset: Optional[str] = None
        if options.convert_charset:
            info = detect_charset(response.body, response.content_type)
            charset = info.charset
            html = decode_html(response.body, charset)
            logger.debug("Charset detected", url=response.final_url, charset=charset, source=info.source.value)
        else:
            html = decode_html(response.body, DEFAULT_CHARSET)

        logger.info(
            "Fetched document",
            url=url,
            final_url=response.final_url,
            status=response.status,
            redirects=response.redirects,
        )
        return FetchResult(
            html=html,
            final_url=response.final_url,
            status_code=response.status,
            content_type=response.content_type,
            charset=charset,
            redirects=response.redirects,
        )

    async def fetch_json(self, url: str, options: Optional[ExtractOptions] = None) -> Any:
        """Fetch and decode a JSON document under the same guard, redirect and timeout rules."""
        options = options or ExtractOptions()
        response = await self._fetch_terminal(url, options, JSON_ACCEPT, is_json_content_type, "JSON")
        try:
            return json.loads(decode_html(response.body, DEFAULT_CHARSET))
        except ValueError as e:
            raise ParseError(f"Invalid JSON response: {e}", response.final_url, cause=e) from e

    async def _fetch_terminal(
        self,
        url: str,
        options: ExtractOptions,
        accept: str,
        content_check: Callable[[str], bool],
        expected: str,
    ) -> _Response:
        target = self.guard.validate_url(url, allow_private_urls=options.allow_private_urls)
        if self.session is None:
            await self.initialize()

        start_ts = time.time()
        headers = self.build_headers(options, accept)
        try:
            response = await self._follow_redirects(target, options, headers, content_check, expected)
        except OgieError as e:
            METRICS["fetch_errors_total"].labels(code=e.code.value).inc()
            logger.warning("Fetch failed", url=url, code=e.code.value, error=e.message)
            raise
        finally:
            METRICS["fetch_latency_seconds"].observe(time.time() - start_ts)
        return response

    async def _follow_redirects(
        self,
        start_url: str,
        options: ExtractOptions,
        headers: Dict[str, str],
        content_check: Callable[[str], bool],
        expected: str,
    ) -> _Response:
        current_url = start_url
        for hop in range(options.max_redirects + 1):
            location, response = await self._attempt(current_url, options, headers, content_check, expected)
            if response is not None:
                response.redirects = hop
                return response

            if not location:
                raise FetchError("Redirect response without Location header", current_url)
            redirect_url = urljoin(current_url, location)
            # Validate redirect URL before following; the normalized form is what gets requested
            redirect_url = self.guard.validate_url(redirect_url, allow_private_urls=options.allow_private_urls)
            METRICS["fetch_redirects_total"].inc()
            logger.debug("Following redirect", url=current_url, location=redirect_url, hop=hop + 1)
            current_url = redirect_url

        raise RedirectLimitError(f"Maximum redirects ({options.max_redirects}) exceeded", start_url)

    async def _attempt(
        self,
        url: str,
        options: ExtractOptions,
        headers: Dict[str, str],
        content_check: Callable[[str], bool],
        expected: str,
    ) -> tuple[Optional[str], Optional[_Response]]:
        """Perform one request; returns ``(location, None)`` for a redirect or ``(None, response)``."""
        assert self.session is not None
        try:
            async with asyncio.timeout(options.timeout_seconds):
                async with self.session.get(url, headers=headers, allow_redirects=False) as response:
                    status = response.status
                    METRICS["fetch_responses_total"].labels(status_class=f"{status // 100}xx").inc()

                    if 300 <= status < 400:
                        return response.headers.get("Location", ""), None

                    if not 200 <= status < 300:
                        raise FetchError(f"HTTP {status}: {response.reason or ''}".rstrip(), url, status)

                    content_type = response.headers.get("Content-Type", "")
                    if not content_check(content_type):
                        raise FetchError(f"Expected {expected} content, received: {content_type}", url, status)

                    body = await response.read()
                    return None, _Response(status, content_type, body, url, 0)
        except TimeoutError as e:
            raise FetchTimeoutError(f"Request timeout after {options.timeout}ms", url, cause=e) from e
        except (aiohttp.ClientError, OSError) as e:
            raise FetchError(str(e) or "Network request failed", url, cause=e) from e


async def fetch_url(
    url: str, options: Optional[ExtractOptions] = None, session: Optional[aiohttp.ClientSession] = None
) -> FetchResult:
    """Fetch one document with a short-lived fetcher."""
    async with SecureFetcher(session=session) as fetcher:
        return await fetcher.fetch(url, options)
