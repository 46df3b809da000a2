"""
Public extraction entry points.

``extract`` fetches one URL through the URL guard and secure fetcher, parses
the document and stores the metadata in the caller's cache. ``extract_bulk``
runs many ``extract`` calls through the bulk scheduler over one shared HTTP
session. Every entry point returns an :class:`ExtractSuccess` or an
:class:`ExtractFailure`; errors never propagate to the caller.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Any, Optional, Sequence

import aiohttp
import structlog
from structlog.contextvars import bound_contextvars

from ogie.cache.metadata_cache import MetadataCache, generate_cache_key
from ogie.crawler.bulk import BulkScheduler
from ogie.crawler.http_client import SecureFetcher
from ogie.errors import ErrorCode, OgieError, ParseError
from ogie.metadata import Metadata, load_document, parse_all, parse_oembed_response
from ogie.protocols import (
    BulkOptions,
    BulkResult,
    ExtractFailure,
    ExtractOptions,
    ExtractResult,
    ExtractSuccess,
)

logger = structlog.get_logger(__name__)


def _resolve_cache(options: ExtractOptions) -> Optional[MetadataCache]:
    cache = options.cache
    return cache if isinstance(cache, MetadataCache) else None


def _parse(html: str, base_url: Optional[str], options: ExtractOptions, url: Optional[str] = None) -> Metadata:
    try:
        return parse_all(load_document(html), base_url, options)
    except Exception as e:
        logger.error("Failed to parse document", url=url, error=str(e))
        raise ParseError(f"Failed to parse HTML: {e}", url, cause=e) from e


async def _attach_oembed(metadata: Metadata, fetcher: SecureFetcher, options: ExtractOptions) -> None:
    """Fetch the discovered JSON oEmbed endpoint; failures leave ``metadata.oembed`` unset."""
    discovery = metadata.oembed_discovery
    if discovery is None or not discovery.json_url:
        return
    try:
        payload = await fetcher.fetch_json(discovery.json_url, options)
    except OgieError as e:
        logger.info("oEmbed fetch failed", endpoint=discovery.json_url, code=e.code.value, error=e.message)
        return
    metadata.oembed = parse_oembed_response(payload)
    if metadata.oembed is None:
        logger.info("oEmbed response rejected", endpoint=discovery.json_url)


async def _extract(url: str, options: ExtractOptions, fetcher: SecureFetcher) -> ExtractResult:
    cache = _resolve_cache(options)
    cache_key = generate_cache_key(url, options) if cache is not None else None

    if cache is not None and not options.bypass_cache:
        cached = cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit", key=cache_key)
            return ExtractSuccess(cached)

    fetched = await fetcher.fetch(url, options)

    metadata = _parse(fetched.html, options.base_url or fetched.final_url, options, url)
    metadata.request_url = url
    metadata.final_url = fetched.final_url
    metadata.charset = fetched.charset

    if options.fetch_oembed and not options.only_open_graph:
        await _attach_oembed(metadata, fetcher, options)

    if cache is not None:
        cache.set(cache_key, metadata)
    return ExtractSuccess(metadata)


async def extract(
    url: str,
    options: Optional[ExtractOptions] = None,
    *,
    fetcher: Optional[SecureFetcher] = None,
    **overrides: Any,
) -> ExtractResult:
    """
    Fetch ``url`` and extract its metadata.

    Args:
        url: Absolute http(s) URL
        options: Extraction options; keyword ``overrides`` are applied on top
        fetcher: Shared fetcher (and its session); a private one is opened otherwise

    Returns:
        ExtractSuccess with the metadata, or ExtractFailure carrying an OgieError
    """
    options = (options or ExtractOptions()).merge(**overrides)

    with bound_contextvars(request_url=url):
        owns_fetcher = fetcher is None
        active = fetcher or SecureFetcher()
        try:
            return await _extract(url, options, active)
        except OgieError as e:
            return ExtractFailure(e)
        except Exception as e:
            logger.error("Unexpected extraction error", error=str(e), exc_info=True)
            return ExtractFailure(ParseError(str(e) or type(e).__name__, url, cause=e))
        finally:
            if owns_fetcher:
                await active.close()


def extract_from_html(html: str, options: Optional[ExtractOptions] = None, **overrides: Any) -> ExtractResult:
    """Extract metadata from an HTML string. No network access and no caching."""
    options = (options or ExtractOptions()).merge(**overrides)

    if not html or not html.strip():
        return ExtractFailure(OgieError("No HTML content provided", ErrorCode.NO_HTML))

    try:
        metadata = _parse(html, options.base_url, options)
    except OgieError as e:
        return ExtractFailure(e)
    metadata.final_url = options.base_url
    return ExtractSuccess(metadata)


_BULK_FIELDS = frozenset(f.name for f in dataclasses.fields(BulkOptions))
_EXTRACT_FIELDS = frozenset(f.name for f in dataclasses.fields(ExtractOptions))


def _apply_bulk_overrides(options: BulkOptions, overrides: dict) -> BulkOptions:
    bulk_changes = {}
    extract_changes = {}
    for name, value in overrides.items():
        if name in _BULK_FIELDS:
            if value is not None:
                bulk_changes[name] = value
        elif name in _EXTRACT_FIELDS:
            extract_changes[name] = value
        else:
            raise TypeError(f"extract_bulk() got an unexpected keyword argument {name!r}")

    if extract_changes:
        base = bulk_changes.get("extract_options", options.extract_options)
        bulk_changes["extract_options"] = base.merge(**extract_changes)
    if bulk_changes:
        options = dataclasses.replace(options, **bulk_changes)
    return options


async def extract_bulk(
    urls: Sequence[str],
    options: Optional[BulkOptions] = None,
    *,
    session: Optional[aiohttp.ClientSession] = None,
    cancel_event: Optional[asyncio.Event] = None,
    **overrides: Any,
) -> BulkResult:
    """
    Extract metadata for many URLs under global and per-domain limits.

    Keyword ``overrides`` replace :class:`BulkOptions` fields or, for names
    of :class:`ExtractOptions` fields, the per-URL extraction options.
    Setting ``cancel_event`` stops admission of new URLs; extractions
    already started finish and the rest are reported as skipped.
    """
    options = _apply_bulk_overrides(options or BulkOptions(), overrides)

    async with SecureFetcher(session=session) as fetcher:

        async def run_one(url: str, extract_options: ExtractOptions) -> ExtractResult:
            return await extract(url, extract_options, fetcher=fetcher)

        scheduler = BulkScheduler(options, run_one)
        watcher: Optional[asyncio.Task] = None
        if cancel_event is not None:

            async def watch() -> None:
                await cancel_event.wait()
                scheduler.cancel()

            watcher = asyncio.create_task(watch())
        try:
            return await scheduler.run(list(urls))
        finally:
            if watcher is not None:
                watcher.cancel()
