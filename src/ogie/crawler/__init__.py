"""Secure fetching and bulk scheduling."""

from .bulk import BulkScheduler
from .domains import registrable_domain
from .http_client import SecureFetcher, fetch_url, is_html_content_type
from .rate_limiter import DomainThrottle, RollingWindowLimiter

__all__ = [
    "BulkScheduler",
    "DomainThrottle",
    "RollingWindowLimiter",
    "SecureFetcher",
    "fetch_url",
    "is_html_content_type",
    "registrable_domain",
]
