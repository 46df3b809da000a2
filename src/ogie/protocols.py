"""
Shared dataclasses and enums for ogie.

This module defines the value objects that flow between the URL guard, the
secure fetcher, the charset resolver, the result cache and the bulk
scheduler, plus the tagged results returned by the public entry points.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Union

if TYPE_CHECKING:
    from ogie.cache.metadata_cache import MetadataCache
    from ogie.errors import OgieError
    from ogie.metadata.models import Metadata

# ============================================================================
# Constants
# ============================================================================

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_USER_AGENT = "ogie/1.0 (+https://github.com/dobroslavradosavljevic/ogie)"
DEFAULT_ACCEPT = "text/html,application/xhtml+xml"

DEFAULT_BULK_CONCURRENCY = 10
DEFAULT_BULK_CONCURRENCY_PER_DOMAIN = 3
DEFAULT_REQUESTS_PER_MINUTE = 600
DEFAULT_MIN_DELAY_PER_DOMAIN_MS = 200

# ============================================================================
# Enums
# ============================================================================


class CharsetSource(Enum):
    """Where a charset decision came from, in ranking order."""

    HTTP_HEADER = "http-header"
    BOM = "bom"
    META_CHARSET = "meta-charset"
    META_HTTP_EQUIV = "meta-http-equiv"
    DEFAULT = "default"


class TaskState(Enum):
    """Lifecycle of a URL inside a bulk run."""

    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"


# ============================================================================
# Extraction
# ============================================================================


@dataclass(frozen=True)
class ExtractOptions:
    """Per-call options for ``extract`` and ``extract_from_html``.

    ``timeout`` is in milliseconds and applies to each HTTP attempt.
    ``cache`` is a :class:`MetadataCache`, ``False`` to disable caching, or
    ``None`` for no cache at all.
    """

    timeout: int = DEFAULT_TIMEOUT_MS
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    user_agent: str = DEFAULT_USER_AGENT
    headers: Mapping[str, str] = field(default_factory=dict)
    base_url: Optional[str] = None
    only_open_graph: bool = False
    allow_private_urls: bool = False
    fetch_oembed: bool = False
    convert_charset: bool = False
    cache: Union["MetadataCache", bool, None] = None
    bypass_cache: bool = False

    def merge(self, **overrides: Any) -> "ExtractOptions":
        """Return a copy with ``overrides`` applied, ignoring ``None`` values."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return replace(self, **changes)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0


@dataclass
class FetchResult:
    """Terminal response of a secure fetch."""

    html: str
    final_url: str
    status_code: int
    content_type: str
    charset: Optional[str] = None
    redirects: int = 0


@dataclass(frozen=True)
class CharsetInfo:
    """Charset decision for a single document."""

    charset: str
    source: CharsetSource


@dataclass
class ExtractSuccess:
    data: "Metadata"
    success: bool = field(default=True, init=False)


@dataclass
class ExtractFailure:
    error: "OgieError"
    success: bool = field(default=False, init=False)


ExtractResult = Union[ExtractSuccess, ExtractFailure]

# ============================================================================
# Bulk extraction
# ============================================================================


@dataclass
class BulkProgress:
    """Snapshot passed to ``on_progress`` after each URL completes."""

    completed: int
    total: int
    succeeded: int
    failed: int
    url: str


@dataclass(frozen=True)
class BulkOptions:
    """Scheduling limits for ``extract_bulk``.

    ``min_delay_per_domain`` is in milliseconds.
    """

    concurrency: int = DEFAULT_BULK_CONCURRENCY
    concurrency_per_domain: int = DEFAULT_BULK_CONCURRENCY_PER_DOMAIN
    requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE
    min_delay_per_domain: int = DEFAULT_MIN_DELAY_PER_DOMAIN_MS
    continue_on_error: bool = True
    on_progress: Optional[Callable[[BulkProgress], Any]] = None
    extract_options: ExtractOptions = field(default_factory=ExtractOptions)

    def __post_init__(self) -> None:
        for name in ("concurrency", "concurrency_per_domain", "requests_per_minute"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.min_delay_per_domain < 0:
            raise ValueError("min_delay_per_domain must not be negative")


@dataclass
class BulkTask:
    """One URL scheduled by the bulk scheduler."""

    index: int
    url: str
    domain: str
    state: TaskState = TaskState.PENDING


@dataclass
class BulkItemResult:
    """Outcome for one input URL.

    ``result`` is ``None`` when the URL was never started because the run was
    short-circuited or cancelled.
    """

    url: str
    result: Optional[ExtractResult]
    duration_ms: float = 0.0

    @property
    def skipped(self) -> bool:
        return self.result is None


@dataclass
class BulkStats:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    duration_ms: float = 0.0


@dataclass
class BulkResult:
    """Results in input order plus aggregate statistics."""

    results: List[BulkItemResult] = field(default_factory=list)
    stats: BulkStats = field(default_factory=BulkStats)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.stats.total,
            "succeeded": self.stats.succeeded,
            "failed": self.stats.failed,
            "skipped": self.stats.skipped,
            "duration_ms": self.stats.duration_ms,
        }
