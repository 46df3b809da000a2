"""
ogie - secure OpenGraph and web metadata extraction.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .cache import MetadataCache, create_cache, generate_cache_key
from .config import Config
from .errors import (
    ErrorCode,
    FetchError,
    FetchTimeoutError,
    InvalidUrlError,
    OgieError,
    ParseError,
    RedirectLimitError,
    is_ogie_error,
)
from .extractor import extract, extract_bulk, extract_from_html
from .metadata import Metadata, load_document, parse_all
from .observability import configure_logging
from .protocols import (
    BulkOptions,
    BulkProgress,
    BulkResult,
    ExtractFailure,
    ExtractOptions,
    ExtractResult,
    ExtractSuccess,
)

__all__ = [
    "__version__",
    "BulkOptions",
    "BulkProgress",
    "BulkResult",
    "Config",
    "ErrorCode",
    "ExtractFailure",
    "ExtractOptions",
    "ExtractResult",
    "ExtractSuccess",
    "FetchError",
    "FetchTimeoutError",
    "InvalidUrlError",
    "Metadata",
    "MetadataCache",
    "OgieError",
    "ParseError",
    "RedirectLimitError",
    "configure_logging",
    "create_cache",
    "extract",
    "extract_bulk",
    "extract_from_html",
    "generate_cache_key",
    "is_ogie_error",
    "load_document",
    "parse_all",
]
