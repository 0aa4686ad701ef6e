"""``zipcollector fetch`` — resolve a single include to a cached archive."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from zipcollector.cli._loading import load_collector_config
from zipcollector.config import CollectorSettings
from zipcollector.core.cache_sweeper import collector_cache_dir
from zipcollector.core.errors import CollectorError
from zipcollector.core.fetcher import CachedFetcher
from zipcollector.core.locations import eligible_locations
from zipcollector.core.version_classifier import classify_version

console = Console()


def fetch_cmd(
    name: str = typer.Argument(..., help="Include (archive) name."),
    collector_file: Path = typer.Option(
        ...,
        "--config",
        "-f",
        exists=True,
        dir_okay=False,
        help="YAML file with a 'collector' block.",
    ),
    version: str = typer.Option(None, "--version", "-v", help="Version used for templates."),
    classifier: str = typer.Option(None, "--classifier", help="Archive classifier."),
    worktree: Path = typer.Option(None, "--worktree", "-w", help="Worktree for local locations."),
    reftype: str = typer.Option("branch", help="Origin ref type used in the cache layout."),
    refname: str = typer.Option("main", help="Origin ref name used in the cache layout."),
) -> None:
    """Fetch the archive for NAME and print its local path."""
    settings = CollectorSettings()
    config = load_collector_config(collector_file)
    cache_root = collector_cache_dir(
        settings.cache_dir or config.cache_dir, collector_file.parent
    )
    download_dir = cache_root / reftype / refname
    download_dir.mkdir(parents=True, exist_ok=True)

    variables = {"name": name, "version": version, "classifier": classifier}
    with CachedFetcher(
        config, timeout=settings.http_timeout_seconds, user_agent=settings.user_agent
    ) as fetcher:
        try:
            path = fetcher.resolve(
                name,
                eligible_locations(config.locations, classify_version(version)),
                variables,
                download_dir,
                worktree,
            )
        except CollectorError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1) from exc

    if path is None:
        console.print(f"[yellow]No location provided '{name}'.[/yellow]")
        raise typer.Exit(code=1)
    console.print(str(path))
