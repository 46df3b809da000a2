"""
Bounded LRU + TTL cache for extraction results.

Entries expire lazily: a read past the TTL is a miss and drops the entry.
Capacity is enforced on every insert by evicting the least recently used
entry, and ``on_eviction`` is told about each one exactly once.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit, urlunsplit

import structlog

from ogie.observability.metrics import METRICS
from ogie.protocols import ExtractOptions

logger = structlog.get_logger(__name__)

DEFAULT_MAX_SIZE = 100
DEFAULT_TTL_MS = 300_000

EvictionCallback = Callable[[str, Any], None]

# Options that change the shape of the extracted metadata
CACHE_RELEVANT_OPTIONS: Tuple[str, ...] = ("convert_charset", "fetch_oembed", "only_open_graph")

_CAMEL_CASE_OPTIONS: Dict[str, str] = {
    "convertCharset": "convert_charset",
    "fetchOEmbed": "fetch_oembed",
    "onlyOpenGraph": "only_open_graph",
}

_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass
class _CacheEntry:
    value: Any
    inserted_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now - self.inserted_at > self.ttl


class MetadataCache:
    """Thread-safe LRU cache with per-entry time-to-live.

    ``ttl`` values are milliseconds. All mutations happen under a single
    lock; the eviction observer runs after the lock is released.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        ttl: int = DEFAULT_TTL_MS,
        on_eviction: Optional[EvictionCallback] = None,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.max_size = max_size
        self.max_age = ttl
        self.on_eviction = on_eviction
        self._entries: "OrderedDict[str, _CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()

    @staticmethod
    def _now() -> float:
        return time.monotonic()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value and mark it most recently used, or ``None``."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expired(self._now()):
                del self._entries[key]
                entry = None
            if entry is None:
                METRICS["cache_misses_total"].inc()
                return None
            self._entries.move_to_end(key)
            METRICS["cache_hits_total"].inc()
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Insert or replace ``key``; ``ttl`` overrides the cache default for this entry."""
        entry_ttl = (ttl if ttl is not None else self.max_age) / 1000.0
        with self._lock:
            self._entries[key] = _CacheEntry(value, self._now(), entry_ttl)
            self._entries.move_to_end(key)
            evicted = self._enforce_capacity()
        self._notify(evicted)

    def has(self, key: str) -> bool:
        """True when ``key`` holds a live entry; does not change recency."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if entry.expired(self._now()):
                del self._entries[key]
                return False
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def expires_in(self, key: str) -> Optional[int]:
        """Milliseconds until ``key`` expires, or ``None`` if it is absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            remaining = entry.ttl - (self._now() - entry.inserted_at)
            if remaining < 0:
                del self._entries[key]
                return None
            return round(remaining * 1000)

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def __len__(self) -> int:
        return self.size

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def _enforce_capacity(self) -> List[Tuple[str, Any]]:
        """Drop expired entries, then least recently used ones, until within ``max_size``."""
        if len(self._entries) <= self.max_size:
            return []
        now = self._now()
        for stale_key in [k for k, entry in self._entries.items() if entry.expired(now)]:
            del self._entries[stale_key]

        evicted: List[Tuple[str, Any]] = []
        while len(self._entries) > self.max_size:
            key, entry = self._entries.popitem(last=False)
            evicted.append((key, entry.value))
        return evicted

    def _notify(self, evicted: List[Tuple[str, Any]]) -> None:
        for key, value in evicted:
            METRICS["cache_evictions_total"].inc()
            logger.debug("Cache entry evicted", key=key)
            if self.on_eviction is None:
                continue
            try:
                self.on_eviction(key, value)
            except Exception as e:
                logger.warning("Cache eviction callback failed", key=key, error=str(e))


def create_cache(
    max_size: int = DEFAULT_MAX_SIZE,
    ttl: int = DEFAULT_TTL_MS,
    on_eviction: Optional[EvictionCallback] = None,
) -> MetadataCache:
    """Create a result cache to pass as ``ExtractOptions.cache``."""
    return MetadataCache(max_size=max_size, ttl=ttl, on_eviction=on_eviction)


def normalize_url(url: str) -> str:
    """Canonical form used for cache keys.

    Lower-cases scheme and host, drops default ports and fragments, and
    treats a bare ``/`` path as empty.
    """
    raw = url.strip()
    try:
        parts = urlsplit(raw)
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return raw
    if not parts.scheme or not hostname:
        return raw

    scheme = parts.scheme.lower()
    netloc = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{netloc}:{port}"
    if parts.username:
        credentials = parts.username + (f":{parts.password}" if parts.password else "")
        netloc = f"{credentials}@{netloc}"
    path = "" if parts.path == "/" else parts.path
    return urlunsplit((scheme, netloc, path, parts.query, ""))


def _relevant_options(options: Union[ExtractOptions, Mapping[str, Any], None]) -> Dict[str, bool]:
    if options is None:
        return {}
    if isinstance(options, ExtractOptions):
        values = {name: getattr(options, name) for name in CACHE_RELEVANT_OPTIONS}
    else:
        values = {}
        for key, value in options.items():
            name = _CAMEL_CASE_OPTIONS.get(key, key)
            if name in CACHE_RELEVANT_OPTIONS:
                values[name] = value
    # Disabled flags produce the same metadata as absent ones
    return {name: True for name, value in values.items() if value}


def generate_cache_key(url: str, options: Union[ExtractOptions, Mapping[str, Any], None] = None) -> str:
    """Build the cache key for ``url`` under ``options``.

    Only ``convert_charset``, ``fetch_oembed`` and ``only_open_graph`` take
    part; they are appended in name order after ``::``.
    """
    key = normalize_url(url)
    relevant = _relevant_options(options)
    if not relevant:
        return key
    suffix = "|".join(f"{name}=true" for name in sorted(relevant))
    return f"{key}::{suffix}"
