"""``zipcollector collect`` — run every phase against local sources.

Loads the collector file, runs the content-aggregated, content-classified
and UI-loaded phases, and prints the resulting buckets.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from zipcollector.cli._loading import load_buckets, load_collector_config
from zipcollector.config import CollectorSettings
from zipcollector.core.collector import ZipContentsCollector
from zipcollector.core.pipeline import PipelineDriver
from zipcollector.models.cache import DownloadEvent

console = Console()


def collect_cmd(
    collector_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="YAML file with 'collector' and 'sources' blocks.",
    ),
    cache_dir: Path = typer.Option(
        None,
        "--cache-dir",
        "-c",
        help="Override the cache directory.",
    ),
) -> None:
    """Collect zip contents for every source in COLLECTOR_FILE."""
    settings = CollectorSettings()
    if cache_dir is not None:
        settings = settings.model_copy(update={"cache_dir": cache_dir})

    config = load_collector_config(collector_file)
    buckets = load_buckets(collector_file)
    download_log: list[DownloadEvent] = []

    collector = ZipContentsCollector(
        config,
        settings=settings,
        download_log=download_log,
        playbook_dir=collector_file.parent,
    )
    driver = PipelineDriver()
    collector.register(driver)
    try:
        buckets, catalog, _ = driver.run(buckets)
    finally:
        collector.fetcher.close()

    table = Table(title="Collected Buckets")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Title")
    table.add_column("Files", justify="right")
    for bucket in buckets:
        table.add_row(bucket.name, bucket.version or "", bucket.title or "", str(len(bucket.files)))
    console.print(table)

    catalog_only = len(catalog.files) - sum(len(bucket.files) for bucket in buckets)
    console.print(f"[bold]Catalog files:[/bold] {len(catalog.files)} ({catalog_only} from catalog includes)")
    for event in download_log:
        style = "green" if event.status_code in (200, 304) else "yellow"
        console.print(f"[{style}]{event.status_code}[/{style}] {event.url}")
