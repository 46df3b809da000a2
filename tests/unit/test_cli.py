"""
Tests for the command-line interface, driven through click's CliRunner.
"""

import json
import logging

import pytest
import structlog
from click.testing import CliRunner

from ogie.cli import cli


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield CliRunner()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.mark.unit
class TestCli:
    def test_html_from_file(self, runner, tmp_path, sample_html):
        page = tmp_path / "page.html"
        page.write_text(sample_html, encoding="utf-8")

        result = runner.invoke(
            cli, ["--log-level", "ERROR", "html", str(page), "--base-url", "https://example.com/articles/test"]
        )

        assert result.exit_code == 0, result.output
        assert "OG Test Article" in result.output
        assert "https://example.com/images/cover.png" in result.output

    def test_html_from_stdin_only_open_graph(self, runner, fallback_html):
        result = runner.invoke(cli, ["html", "-", "--only-open-graph"], input=fallback_html)

        assert result.exit_code == 0, result.output
        assert "Basic Title" not in result.output

    def test_html_empty_input_fails(self, runner):
        result = runner.invoke(cli, ["html", "-"], input="")

        assert result.exit_code == 1

    def test_show_config_with_file(self, runner, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("fetch:\n  timeout_ms: 4321\n")

        result = runner.invoke(cli, ["--log-level", "ERROR", "--config", str(config_file), "show-config"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["fetch"]["timeout_ms"] == 4321

    def test_extract_rejects_private_url(self, runner):
        result = runner.invoke(cli, ["extract", "http://127.0.0.1/"])

        assert result.exit_code == 1

    def test_bulk_requires_urls(self, runner):
        result = runner.invoke(cli, ["bulk"])

        assert result.exit_code == 1

    def test_metrics(self, runner):
        result = runner.invoke(cli, ["metrics"])

        assert result.exit_code == 0
        assert "ogie_fetch_latency_seconds" in result.output
