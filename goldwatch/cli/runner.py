# goldwatch/cli/runner.py

"""Headless CLI commands: one-shot fetch, health probe, API server."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from goldwatch.config.settings import Settings
from goldwatch.models.price_record import PriceRecord
from goldwatch.scrapers.errors import GoldwatchError
from goldwatch.scrapers.extractor import extract_price_record
from goldwatch.scrapers.fetcher import PageFetcher
from goldwatch.services.health_checker import probe_source

logger = logging.getLogger("goldwatch.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _print_table(record: PriceRecord) -> None:
    """Render the headline prices as a Rich table on stdout."""
    release = record.release
    when = " ".join(
        part
        for part in (
            release.date_be,
            release.time,
            f"(round {release.round})" if release.round else None,
        )
        if part
    ) or record.released_at
    table = Table(
        title=f"GTA Gold Price {when}",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("96.5% gold", style="bold")
    table.add_column("Sell", justify="right", style="green")
    table.add_column("Buy", justify="right", style="magenta")

    table.add_row(
        "Bar", f"{record.bar_sell:,.2f}", f"{record.bar_buy:,.2f}",
    )
    # The page's jewelry "buy" column is the tax base price
    table.add_row(
        "Jewelry",
        f"{record.jewelry_sell:,.2f}",
        f"{record.jewelry_buy:,.2f}",
    )
    Console().print(table)


def run_once(url: str | None, output_format: str) -> int:
    """Fetch and print one record; return an exit code (0=ok, 1=fail)."""
    url = url or Settings.SOURCE_URL
    fetcher = PageFetcher()
    _err.print(f"[bold]Fetching:[/bold] {url}")
    try:
        record = extract_price_record(fetcher.fetch(url), url)
    except GoldwatchError as exc:
        logger.error("One-shot fetch failed: %s", exc)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1
    finally:
        fetcher.close()

    if output_format == "table":
        _print_table(record)
    else:
        json.dump(
            record.to_dict(), sys.stdout, ensure_ascii=False, indent=2,
        )
        sys.stdout.write("\n")
    return 0


def run_health_check(url: str | None) -> int:
    """Probe the source page and report connectivity."""
    _err.print("[bold]Running source health check...[/bold]")
    result = probe_source(url)

    table = Table(
        title="Source Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Source", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Anchors", justify="center")
    table.add_column("Notes", style="dim")

    if result.status == "ok":
        status = "[green]✅ OK[/green]"
    elif result.status == "slow":
        status = "[yellow]⚠️  SLOW[/yellow]"
    else:
        status = "[red]❌ DOWN[/red]"

    table.add_row(
        result.url,
        status,
        f"{result.latency_ms:.0f}ms",
        "[green]parsed[/green]" if result.parsed else "[red]missing[/red]",
        result.message,
    )
    Console().print(table)
    return 0 if result.status != "down" and result.parsed else 1


def serve(
    host: str | None,
    port: int | None,
    url: str | None,
    interval: float | None,
) -> int:
    """Compose cache, poller and API, then serve until interrupted."""
    import uvicorn

    from goldwatch.api.app import create_app
    from goldwatch.services.poller import PricePoller
    from goldwatch.storage.price_cache import PriceCache

    cache = PriceCache()
    try:
        poller = PricePoller(cache, url=url, interval=interval)
    except ValueError as exc:
        logger.error("Cannot start poller: %s", exc)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1
    app = create_app(cache, poller)

    host = host or Settings.API_HOST
    port = port or Settings.API_PORT
    _err.print(
        f"[bold]Serving[/bold] http://{host}:{port}  "
        f"[dim]source={poller.url} every {poller.interval:g}s[/dim]"
    )
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0
