#!/usr/bin/env python3
"""
Demonstration script for the configuration watcher.

Watches a configuration file and prints every settled change with its
previous and current content, or prints a YAML template of the watcher's
own settings.

Usage:
    python examples/config_watch_demo.py watch PATH [--debounce SECONDS] [--duration SECONDS]
    python examples/config_watch_demo.py template
"""

import asyncio
import logging
import logging.config
from pathlib import Path

import click
from config_watcher import ConfigFileWatcher, WatchOptions, generate_yaml_template
from config_watcher.config import WatcherSettings, get_config
from config_watcher.models import BaseError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

logger = logging.getLogger(__name__)

console = Console()


def create_stats_table(stats: dict) -> Table:
    """Create a rich table for watch session statistics."""
    table = Table(title="📊 Watch Session Statistics", show_header=True)
    table.add_column("Metric", style="cyan", width=22)
    table.add_column("Value", style="white", width=12)

    table.add_row("State", stats["state"])
    table.add_row("Signals received", str(stats["signals"]["received"]))
    table.add_row("Signals filtered", str(stats["signals"]["filtered"]))
    table.add_row("Signals superseded", str(stats["signals"]["superseded"]))
    table.add_row("Settle cycles", str(stats["settle"]["cycles"]))
    table.add_row("Events emitted", str(stats["settle"]["events_emitted"]))
    table.add_row("Reader failures", str(stats["settle"]["reader_failures"]))
    table.add_row("Source errors", str(stats["source_errors"]))

    return table


def report_error(error: Exception) -> None:
    console.print(f"⚠️  [red]{error}[/red]")


async def watch_file(path: Path, options: WatchOptions, duration: float | None) -> None:
    """
    Watch a file and print every change until the duration elapses.

    Args:
        path: Configuration file to watch
        options: Options for the watch session
        duration: Seconds to watch for, or None to watch until interrupted
    """
    cancellation = asyncio.Event()
    watcher = ConfigFileWatcher(path, path.read_text, options, cancellation=cancellation)
    stream = await watcher.start()

    console.print(
        Panel.fit(
            f"👀 Watching [cyan]{watcher.path}[/cyan]\n"
            f"Debounce: [yellow]{options.debounce_seconds}s[/yellow] | "
            f"Duration: [yellow]{f'{duration}s' if duration else 'until Ctrl+C'}[/yellow]",
            title="Config Watcher Demo",
            border_style="blue",
        )
    )

    if duration:
        asyncio.get_running_loop().call_later(duration, cancellation.set)

    count = 0
    async with stream:
        async for event in stream:
            count += 1
            table = Table(title=f"✏️  Change #{count}", show_header=True)
            table.add_column("Previous", style="dim")
            table.add_column("Current", style="green")
            table.add_row(event.previous, event.current)
            console.print(table)

    console.print(create_stats_table(watcher.get_watch_stats()))


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def cli(verbose: bool):
    """Configuration watcher demonstration."""
    settings = get_config()
    logging.config.dictConfig(settings.get_log_config())
    if verbose:
        logging.getLogger("config_watcher").setLevel(logging.DEBUG)


@cli.command()
@click.argument('path', type=click.Path(path_type=Path))
@click.option('--debounce', '-d', type=float, default=None, help='Debounce window in seconds')
@click.option('--duration', '-t', type=float, default=None, help='Seconds to watch for (default: until interrupted)')
@click.option('--log-changes', is_flag=True, help='Log every delivered change')
def watch(path: Path, debounce: float | None, duration: float | None, log_changes: bool):
    """
    Watch PATH and print each settled change.

    Example usage:

        # Watch until Ctrl+C with the configured debounce
        python examples/config_watch_demo.py watch ./app.yaml

        # Watch for 30 seconds with a half-second debounce
        python examples/config_watch_demo.py watch ./app.yaml -d 0.5 -t 30
    """
    options = WatchOptions.from_settings(error_handler=report_error, logger=logging.getLogger("config_watcher.demo"))
    if debounce is not None:
        options = options.with_debounce(debounce)
    if log_changes:
        options = options.with_change_logging()

    try:
        asyncio.run(watch_file(path, options, duration))
    except KeyboardInterrupt:
        console.print("\n⚡ [yellow]Watching interrupted by user[/yellow]")
    except BaseError as e:
        console.print(f"❌ [red]Watch failed:[/red] {e}")
        logger.debug("Full error details: %r", e)
        raise SystemExit(1) from e

    console.print("✅ [bold green]Watch session closed[/bold green]")


@cli.command()
def template():
    """Print a commented YAML template of the watcher settings."""
    console.print(generate_yaml_template(WatcherSettings), highlight=False, markup=False)


if __name__ == '__main__':
    cli()
