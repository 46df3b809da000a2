"""Charset detection and decoding."""

from .charset import (
    DEFAULT_CHARSET,
    decode_html,
    detect_charset,
    is_charset_supported,
    normalize_charset,
    parse_content_type_charset,
)

__all__ = [
    "DEFAULT_CHARSET",
    "decode_html",
    "detect_charset",
    "is_charset_supported",
    "normalize_charset",
    "parse_content_type_charset",
]
