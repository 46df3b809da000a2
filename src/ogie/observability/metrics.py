"""
Defines Prometheus metrics for ogie.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Gauge as _OrigGauge
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test reloads, multiple interpreters sharing the
# default registry) must hand back the already registered collectors.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race; reuse the collector that won.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Gauge = _duplicate_safe_factory(_OrigGauge)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    """Create (or look up) every ogie collector."""
    return {
        "fetch_latency_seconds": Histogram(
            "ogie_fetch_latency_seconds",
            "Time taken by a secure fetch including redirects",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
        ),
        "fetch_responses_total": Counter(
            "ogie_fetch_responses_total",
            "Total number of HTTP responses by status class",
            ["status_class"],
        ),
        "fetch_redirects_total": Counter(
            "ogie_fetch_redirects_total",
            "Total number of redirect hops followed",
        ),
        "fetch_errors_total": Counter(
            "ogie_fetch_errors_total",
            "Total number of failed fetches by error code",
            ["code"],
        ),
        "cache_hits_total": Counter(
            "ogie_cache_hits_total",
            "Total number of result cache hits",
        ),
        "cache_misses_total": Counter(
            "ogie_cache_misses_total",
            "Total number of result cache misses",
        ),
        "cache_evictions_total": Counter(
            "ogie_cache_evictions_total",
            "Total number of entries evicted for capacity",
        ),
        "bulk_in_flight": Gauge(
            "ogie_bulk_in_flight",
            "Number of bulk extractions currently running",
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()
