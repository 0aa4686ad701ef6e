"""Download cache models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CacheRecord(BaseModel):
    """Sidecar stored beside each cached archive.

    Only valid while ``url`` matches the URL currently being requested.
    """

    url: str
    etag: str | None = None


class DownloadEvent(BaseModel):
    """One completed HTTP attempt, as recorded in a download log."""

    model_config = ConfigDict(frozen=True)

    url: str
    status_code: int
