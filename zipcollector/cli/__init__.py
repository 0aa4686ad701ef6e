"""Zipcollector CLI — Typer-based command-line interface.

Provides the ``zipcollector`` command with subcommands for collecting
contents from local sources, fetching a single archive, classifying a
version string and sweeping the cache.

All output uses Rich for formatted terminal display.
"""
