"""Main Typer application — imports and registers all CLI commands.

Entry point: ``zipcollector`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from zipcollector.cli.commands.collect import collect_cmd
from zipcollector.cli.commands.fetch import fetch_cmd
from zipcollector.cli.commands.sweep import sweep_cmd
from zipcollector.config import CollectorSettings
from zipcollector.core.version_classifier import classify_version

app = typer.Typer(
    name="zipcollector",
    help="Zipcollector: collect documentation contents from zip archives.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to ZIPCOLLECTOR_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging for every command."""
    level = (log_level or CollectorSettings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="collect", help="Run all phases against local sources.")(collect_cmd)
app.command(name="fetch", help="Fetch a single include archive into the cache.")(fetch_cmd)
app.command(name="sweep", help="Remove expired files from the cache.")(sweep_cmd)


@app.command(name="classify", help="Print the version type of a version string.")
def classify_cmd(
    version: str = typer.Argument(..., help="Version string, e.g. 1.2.3-RC1."),
) -> None:
    """Classify VERSION as snapshot, milestone, rc or release."""
    typer.echo(classify_version(version).value)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
