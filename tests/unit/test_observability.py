"""
Tests for logging setup and metrics export.
"""

import logging

import pytest
import structlog

from ogie.config import MonitoringConfig
from ogie.observability import METRICS, configure_logging, export_prometheus
from ogie.observability.logging import add_request_url
from tests.helpers.metric_delta import metric_delta


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.mark.unit
class TestLogging:
    def test_console_logging(self, restore_logging):
        configure_logging(MonitoringConfig(log_level="debug"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_file_logging_writes_json(self, restore_logging, tmp_path):
        log_file = tmp_path / "ogie.log"
        configure_logging(MonitoringConfig(log_file=str(log_file)))
        structlog.get_logger("ogie.test").info("hello", answer=42)
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert '"event": "hello"' in content
        assert '"answer": 42' in content

    def test_request_url_is_copied_from_context(self):
        with structlog.contextvars.bound_contextvars(request_url="https://example.com/"):
            event = add_request_url(None, "info", {"event": "x"})
            explicit = add_request_url(None, "info", {"event": "x", "url": "https://other.example/"})

        assert event["url"] == "https://example.com/"
        assert explicit["url"] == "https://other.example/"
        assert "url" not in add_request_url(None, "info", {"event": "x"})


@pytest.mark.unit
class TestMetricsExport:
    def test_export(self):
        text = export_prometheus()
        assert "ogie_fetch_latency_seconds" in text
        assert "ogie_cache_hits_total" in text

    def test_export_reflects_counter_updates(self):
        with metric_delta(METRICS["cache_hits_total"]):
            METRICS["cache_hits_total"].inc()
        assert "ogie_cache_hits_total" in export_prometheus()
