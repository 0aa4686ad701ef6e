"""``zipcollector sweep`` — remove expired files from the collector cache."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import typer
from rich.console import Console

from zipcollector.config import CollectorSettings
from zipcollector.core.cache_sweeper import CACHE_RETENTION, collector_cache_dir, sweep_cache

console = Console()


def sweep_cmd(
    cache_dir: Path = typer.Option(
        None, "--cache-dir", "-c", help="Override the cache directory."
    ),
    days: int = typer.Option(
        CACHE_RETENTION.days, "--days", "-d", min=0, help="Retention window in days."
    ),
) -> None:
    """Delete cache files not modified within the retention window."""
    settings = CollectorSettings()
    cache_root = collector_cache_dir(cache_dir or settings.cache_dir)
    removed = sweep_cache(cache_root, timedelta(days=days))
    for path in removed:
        console.print(f"[dim]removed[/dim] {path}")
    console.print(f"[bold]{len(removed)}[/bold] file(s) removed from {cache_root}")
