"""
Registrable domain lookup used to group per-domain limits.
"""

from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlsplit

import tldextract

# Bundled public suffix snapshot only; never fetched over the network
_extractor = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)


@lru_cache(maxsize=4096)
def registrable_domain(url: str) -> str:
    """
    Return the registrable domain (eTLD+1) of ``url``.

    Falls back to the lower-cased host for IP literals and single-label
    names, and to the raw input when no host can be parsed.
    """
    try:
        host = urlsplit(url.strip()).hostname
    except ValueError:
        host = None
    if not host:
        return url.strip().lower()

    ext = _extractor(host)
    top = getattr(ext, "top_domain_under_public_suffix", None)
    if top:
        return top
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    return host
