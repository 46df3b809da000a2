"""
Charset detection and decoding for fetched documents.

Detection is ranked: Content-Type header, byte order mark, ``<meta charset>``,
``<meta http-equiv="Content-Type">``, then a UTF-8 default. Decoding goes
through the Python codec registry and never raises for an unknown name.
"""

from __future__ import annotations

import codecs
import re
from typing import Dict, Optional, Tuple

import structlog

from ogie.protocols import CharsetInfo, CharsetSource

logger = structlog.get_logger(__name__)

DEFAULT_CHARSET = "utf8"
META_SCAN_BYTES = 1024

# Longest BOM first so UTF-32LE wins over UTF-16LE
_BOMS: Tuple[Tuple[bytes, str], ...] = (
    (b"\x00\x00\xfe\xff", "utf-32be"),
    (b"\xff\xfe\x00\x00", "utf-32le"),
    (b"\xef\xbb\xbf", "utf8"),
    (b"\xff\xfe", "utf-16le"),
    (b"\xfe\xff", "utf-16be"),
)

# Labels seen on the web that the codec registry does not know
_CODEC_ALIASES: Dict[str, str] = {
    "utf8": "utf-8",
    "x-sjis": "shift_jis",
    "windows-31j": "cp932",
    "ms932": "cp932",
    "gb2312": "gbk",
    "x-gbk": "gbk",
    "ks_c_5601-1987": "cp949",
    "x-euc-jp": "euc_jp",
    "unicode-1-1-utf-8": "utf-8",
}

_CONTENT_TYPE_CHARSET = re.compile(r"charset\s*=\s*([^;]+)", re.IGNORECASE)
_META_TAG = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
_ATTRIBUTE = re.compile(r"""([a-zA-Z_:][-\w:.]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""")


def normalize_charset(name: str) -> str:
    """Lower-case, strip quotes and whitespace, and spell UTF-8 as ``utf8``."""
    charset = name.strip().strip("\"'").strip().lower()
    if charset in ("utf-8", "utf_8"):
        return "utf8"
    return charset


def parse_content_type_charset(content_type: Optional[str]) -> Optional[str]:
    """Return the normalized ``charset=`` parameter of a Content-Type value, if any."""
    if not content_type:
        return None
    match = _CONTENT_TYPE_CHARSET.search(content_type)
    if not match:
        return None
    charset = normalize_charset(match.group(1))
    return charset or None


def _detect_bom(data: bytes) -> Optional[str]:
    for bom, charset in _BOMS:
        if data.startswith(bom):
            return charset
    return None


def _meta_attributes(tag: str) -> Dict[str, str]:
    attributes: Dict[str, str] = {}
    # Skip the tag name itself
    for match in _ATTRIBUTE.finditer(tag, 5):
        name = match.group(1).lower()
        value = next((group for group in match.groups()[1:] if group is not None), "")
        attributes.setdefault(name, value)
    return attributes


def _detect_meta(data: bytes) -> Optional[CharsetInfo]:
    head = data[:META_SCAN_BYTES].decode("ascii", errors="ignore")
    for tag_match in _META_TAG.finditer(head):
        attributes = _meta_attributes(tag_match.group(0))
        if attributes.get("charset"):
            charset = normalize_charset(attributes["charset"])
            if charset:
                return CharsetInfo(charset, CharsetSource.META_CHARSET)
        if attributes.get("http-equiv", "").strip().lower() == "content-type":
            charset = parse_content_type_charset(attributes.get("content"))
            if charset:
                return CharsetInfo(charset, CharsetSource.META_HTTP_EQUIV)
    return None


def detect_charset(data: bytes, content_type: Optional[str] = None) -> CharsetInfo:
    """Decide the charset of ``data``; the first matching source wins."""
    header_charset = parse_content_type_charset(content_type)
    if header_charset:
        return CharsetInfo(header_charset, CharsetSource.HTTP_HEADER)

    if len(data) >= 2:
        bom_charset = _detect_bom(data)
        if bom_charset:
            return CharsetInfo(bom_charset, CharsetSource.BOM)

        meta = _detect_meta(data)
        if meta is not None:
            return meta

    return CharsetInfo(DEFAULT_CHARSET, CharsetSource.DEFAULT)


def _codec_name(charset: str) -> Optional[str]:
    name = normalize_charset(charset)
    name = _CODEC_ALIASES.get(name, name)
    try:
        return codecs.lookup(name).name
    except LookupError:
        return None


def is_charset_supported(charset: str) -> bool:
    return _codec_name(charset) is not None


def decode_html(data: bytes, charset: str) -> str:
    """Decode ``data`` with ``charset``, falling back to UTF-8 for unknown names."""
    codec = _codec_name(charset)
    if codec is None:
        logger.debug("Unsupported charset, decoding as UTF-8", charset=charset)
        codec = "utf-8"
    text = bytes(data).decode(codec, errors="replace")
    if text.startswith("\ufeff"):
        text = text[1:]
    return text
