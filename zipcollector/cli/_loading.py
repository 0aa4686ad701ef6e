"""YAML loading for CLI commands.

A collector file holds the collector configuration block and the local
sources to collect for::

    collector:
      versionFile: gradle.properties
      locations:
        - url: https://repo.example.org/${name}/${version}/${name}.zip
    sources:
      - name: docs
        version: main
        worktree: ../project
        include: [api-docs]
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from zipcollector.models.config import CollectorConfig
from zipcollector.models.content import ComponentVersionBucket, Origin


def _read_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {path}")
    return data


def load_collector_config(path: Path) -> CollectorConfig:
    """Load the ``collector`` block of *path*."""
    return CollectorConfig.model_validate(_read_yaml(path).get("collector") or {})


def load_buckets(path: Path) -> list[ComponentVersionBucket]:
    """Build one bucket per entry of the ``sources`` list of *path*.

    Relative worktrees resolve against the file's directory.
    """
    buckets: list[ComponentVersionBucket] = []
    for source in _read_yaml(path).get("sources") or []:
        version = source.get("version")
        version = None if version is None else str(version)
        worktree = source.get("worktree")
        if worktree:
            worktree = str((path.parent / Path(worktree).expanduser()).resolve())
        descriptor: dict[str, Any] = {"name": source["name"], "version": version}
        if source.get("include"):
            descriptor["ext"] = {"zip_contents_collector": {"include": source["include"]}}
        origin = Origin(
            url=source.get("url", ""),
            reftype=source.get("reftype", "branch"),
            refname=source.get("refname", "main"),
            worktree=worktree,
            descriptor=descriptor,
        )
        buckets.append(
            ComponentVersionBucket(
                name=source["name"],
                version=version,
                title=source.get("title"),
                origins=[origin],
            )
        )
    return buckets
