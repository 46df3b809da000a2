"""Command-line interface for ogie."""

from __future__ import annotations

import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Any, List, Optional

import click
import structlog
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from ogie import __version__
from ogie.config import Config, load_config
from ogie.extractor import extract, extract_bulk, extract_from_html
from ogie.observability import configure_logging, export_prometheus
from ogie.protocols import BulkProgress, ExtractResult

console = Console()
err_console = Console(stderr=True)
logger = structlog.get_logger(__name__)


def _print_result(result: ExtractResult) -> None:
    if result.success:
        console.print_json(json.dumps(result.data.to_dict(), default=str))
    else:
        error = result.error
        err_console.print(f"[red]{error.code.value}: {error.message}[/red]")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """ogie - extract OpenGraph and web metadata."""
    ctx.ensure_object(dict)
    settings = Config.from_yaml(Path(config)) if config else load_config()
    if log_level:
        settings.monitoring.log_level = log_level
    configure_logging(settings.monitoring)
    ctx.obj["config"] = settings


@cli.command("extract")
@click.argument("url")
@click.option("--only-open-graph", is_flag=True, help="Parse OpenGraph tags only")
@click.option("--fetch-oembed", is_flag=True, help="Fetch the discovered oEmbed endpoint")
@click.option("--convert-charset", is_flag=True, help="Detect and convert the document charset")
@click.option("--timeout", type=int, default=None, help="Per-request timeout in milliseconds")
@click.pass_context
def extract_command(
    ctx: click.Context,
    url: str,
    only_open_graph: bool,
    fetch_oembed: bool,
    convert_charset: bool,
    timeout: Optional[int],
) -> None:
    """Fetch URL and print its metadata as JSON."""
    settings: Config = ctx.obj["config"]
    options = settings.extract_options().merge(
        only_open_graph=only_open_graph or None,
        fetch_oembed=fetch_oembed or None,
        convert_charset=convert_charset or None,
        timeout=timeout,
    )
    _print_result(asyncio.run(extract(url, options)))


@cli.command("html")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("--base-url", default=None, help="Base URL for resolving relative links")
@click.option("--only-open-graph", is_flag=True, help="Parse OpenGraph tags only")
@click.pass_context
def html_command(ctx: click.Context, source: Any, base_url: Optional[str], only_open_graph: bool) -> None:
    """Extract metadata from a local HTML file (use - for stdin)."""
    settings: Config = ctx.obj["config"]
    options = settings.extract_options().merge(base_url=base_url, only_open_graph=only_open_graph or None)
    _print_result(extract_from_html(source.read(), options))


@cli.command("bulk")
@click.argument("urls_file", type=click.File("r"), required=False)
@click.option("--url", "extra_urls", multiple=True, help="URL to extract (can be used multiple times)")
@click.option("--concurrency", type=int, default=None, help="Global in-flight extractions")
@click.option("--per-domain", type=int, default=None, help="In-flight extractions per domain")
@click.option("--rpm", type=int, default=None, help="Extraction starts per minute")
@click.option("--fail-fast", is_flag=True, help="Stop admitting URLs after the first failure")
@click.option("--output", "-o", type=click.Path(), help="Write results as JSON lines")
@click.pass_context
def bulk_command(
    ctx: click.Context,
    urls_file: Any,
    extra_urls: List[str],
    concurrency: Optional[int],
    per_domain: Optional[int],
    rpm: Optional[int],
    fail_fast: bool,
    output: Optional[str],
) -> None:
    """Extract metadata for many URLs under rate and per-domain limits."""
    settings: Config = ctx.obj["config"]
    urls = [line.strip() for line in urls_file if line.strip() and not line.startswith("#")] if urls_file else []
    urls.extend(extra_urls)
    if not urls:
        err_console.print("[red]Error: No URLs provided[/red]")
        sys.exit(1)

    async def run_bulk() -> Any:
        cancel_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, cancel_event.set)
            except NotImplementedError:
                logger.debug("Signal handlers not supported on this platform")

        with Progress(
            TextColumn("[cyan]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            console=err_console,
        ) as progress:
            bar = progress.add_task("Extracting", total=len(urls))

            def on_progress(update: BulkProgress) -> None:
                progress.update(bar, completed=update.completed)

            options = settings.bulk_options(cache=settings.create_cache(), on_progress=on_progress)
            return await extract_bulk(
                urls,
                options,
                cancel_event=cancel_event,
                concurrency=concurrency,
                concurrency_per_domain=per_domain,
                requests_per_minute=rpm,
                continue_on_error=False if fail_fast else None,
            )

    result = asyncio.run(run_bulk())

    if output:
        with open(output, "w", encoding="utf-8") as f:
            for item in result.results:
                record: dict[str, Any] = {"url": item.url, "duration_ms": item.duration_ms}
                if item.result is None:
                    record["skipped"] = True
                elif item.result.success:
                    record["data"] = item.result.data.to_dict()
                else:
                    record["error"] = {"code": item.result.error.code.value, "message": item.result.error.message}
                f.write(json.dumps(record, default=str) + "\n")
        console.print(f"[green]Results saved to {output}[/green]")

    table = Table(title="Bulk Extraction")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")
    for key, value in result.as_dict().items():
        table.add_row(key, str(value))
    console.print(table)

    if result.stats.failed:
        sys.exit(1)


@cli.command("show-config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the effective configuration."""
    settings: Config = ctx.obj["config"]
    console.print_json(settings.model_dump_json())


@cli.command("metrics")
def metrics_command() -> None:
    """Print Prometheus metrics for this process."""
    click.echo(export_prometheus())


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
