"""Extension configuration models.

Mirrors the collector's YAML configuration block, so field aliases follow
its camelCase keys (``versionFile``, ``alwaysInclude``...).  Python names
can be used too.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DROP_CONTENT = "drop_content"


def as_list(value: Any) -> list[Any]:
    """Wrap a scalar in a list; ``None`` and empty values become ``[]``."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class LocationConfig(BaseModel):
    """A candidate download location.

    ``url``, ``username``, ``password`` and header values are templates
    resolved at fetch time.  ``for_version_type`` restricts the location to
    the listed version types; empty means any.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    username: str | None = None
    password: str | None = None
    http_headers: dict[str, str] = Field(default_factory=dict, alias="httpHeaders")
    for_version_type: list[str] = Field(default_factory=list, alias="forVersionType")

    @field_validator("for_version_type", mode="before")
    @classmethod
    def _normalize_version_types(cls, value: Any) -> list[str]:
        return [str(item) for item in as_list(value)]


class CollectorConfig(BaseModel):
    """Global configuration for the zip contents collector."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version_file: str | None = Field(default=None, alias="versionFile")
    locations: list[LocationConfig] = Field(default_factory=list)
    username: str | None = None
    password: str | None = None
    http_headers: dict[str, str] = Field(default_factory=dict, alias="httpHeaders")
    always_include: list[Any] = Field(default_factory=list, alias="alwaysInclude")
    on_missing_snapshot_zip: str | None = Field(
        default=None, alias="onMissingSnapshotZip"
    )
    cache_dir: Path | None = Field(default=None, alias="cacheDir")

    @field_validator("locations", mode="before")
    @classmethod
    def _normalize_locations(cls, value: Any) -> list[Any]:
        return [
            {"url": location} if isinstance(location, str) else location
            for location in as_list(value)
        ]

    @field_validator("always_include", mode="before")
    @classmethod
    def _normalize_always_include(cls, value: Any) -> list[Any]:
        return as_list(value)

    @property
    def drops_missing_snapshots(self) -> bool:
        """Whether a 404 for a snapshot branch drops the bucket instead of failing."""
        return self.on_missing_snapshot_zip == DROP_CONTENT
