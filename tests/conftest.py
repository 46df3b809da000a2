"""
Shared test configuration for ogie.

Provides markers, task cleanup, and small HTML fixtures.
"""

import asyncio
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from ogie.metadata.utils import load_document
from ogie.protocols import ExtractOptions

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")
    config.addinivalue_line("markers", "security: Security and vulnerability tests")
    config.addinivalue_line("markers", "slow: Tests that take >10 seconds")


# ============================================================================
# Core Test Fixtures
# ============================================================================


@pytest_asyncio.fixture(autouse=True)
async def cleanup_tasks() -> AsyncGenerator[None, None]:
    """
    Cancel any asyncio tasks a test leaves behind so one hanging
    scheduler cannot leak into the next test.
    """
    tasks_before = asyncio.all_tasks()
    yield
    tasks_after = asyncio.all_tasks()
    new_tasks = tasks_after - tasks_before

    for task in new_tasks:
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                print(f"Unexpected error during task cleanup: {e}")


# ============================================================================
# HTML Fixtures
# ============================================================================


@pytest.fixture
def sample_html():
    """A page carrying most of the metadata formats."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <title>Test Article</title>
        <meta name="description" content="Sample article for testing">
        <meta name="author" content="Jane Doe">
        <link rel="canonical" href="/articles/test">
        <link rel="icon" href="/favicon.ico">
        <meta property="og:title" content="OG Test Article">
        <meta property="og:type" content="article">
        <meta property="og:image" content="/images/cover.png">
        <meta property="og:image:width" content="1200">
        <meta property="og:image:height" content="630">
        <meta property="article:author" content="https://example.com/jane">
        <meta property="article:tag" content="python">
        <meta name="twitter:card" content="summary_large_image">
        <meta name="twitter:site" content="@example">
        <link rel="alternate" type="application/rss+xml" href="/feed.xml" title="RSS">
        <script type="application/ld+json">
            {"@context": "https://schema.org", "@type": "Article", "headline": "LD Headline"}
        </script>
    </head>
    <body><h1>Test Article</h1></body>
    </html>
    """


@pytest.fixture
def fallback_html():
    """A page with basic meta tags only, no OpenGraph."""
    return """
    <html><head>
        <title>Basic Title</title>
        <meta name="description" content="Basic Description">
        <link rel="canonical" href="https://example.com/canonical">
    </head><body></body></html>
    """


@pytest.fixture
def make_doc():
    """Build a parsed document from a head fragment."""

    def _make(head: str, body: str = ""):
        return load_document(f"<html><head>{head}</head><body>{body}</body></html>")

    return _make


@pytest.fixture
def public_options():
    """Extract options with short timeouts for mocked HTTP."""
    return ExtractOptions(timeout=2000)
