"""Cached archive fetcher — conditional GET with an ETag sidecar cache.

Cache layout for an include named ``<name>``::

    {cache_dir}/{name}.zip     the archive bytes
    {cache_dir}/{name}.cache   JSON ``CacheRecord`` {url, etag}

Candidate locations are tried strictly in order.  HTTP(S) candidates are
downloaded (or revalidated) through the cache; anything else is treated as
a path inside the origin's worktree and returned uncached.
"""

from __future__ import annotations

import base64
import contextlib
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from zipcollector.core.errors import (
    CollectorError,
    HTTPStatusError,
    NetworkError,
    raise_if_necessary,
)
from zipcollector.core.placeholders import (
    resolve_header_placeholders,
    resolve_placeholders,
)
from zipcollector.models.cache import CacheRecord, DownloadEvent
from zipcollector.models.config import CollectorConfig, LocationConfig

logger = logging.getLogger(__name__)

_HTTP_PREFIXES = ("http:", "https:")


def basic_auth_header(username: str | None, password: str | None) -> str:
    """Build an HTTP Basic ``Authorization`` value; absent sides are empty."""
    credentials = f"{username or ''}:{password or ''}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


class CachedFetcher:
    """Resolves an include name to a local archive file.

    Parameters
    ----------
    config:
        Collector configuration, supplying default credentials and headers.
    client:
        HTTP client used for downloads.  One is created (and owned) if not
        given.
    download_log:
        Optional list receiving a ``DownloadEvent`` per HTTP attempt.
    timeout:
        Timeout in seconds for an owned client.
    """

    def __init__(
        self,
        config: CollectorConfig,
        *,
        client: httpx.Client | None = None,
        download_log: list[DownloadEvent] | None = None,
        timeout: float = 60.0,
        user_agent: str | None = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        headers = {"User-Agent": user_agent} if user_agent else None
        self._client = client or httpx.Client(
            timeout=timeout, follow_redirects=True, headers=headers
        )
        self.download_log = download_log

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> CachedFetcher:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Resolve
    # ------------------------------------------------------------------

    def resolve(
        self,
        name: str,
        candidates: Iterable[LocationConfig],
        variables: Mapping[str, Any],
        cache_dir: Path,
        worktree: str | os.PathLike[str] | None = None,
    ) -> Path | None:
        """Return the archive for *name* from the first candidate that has it.

        Failed HTTP candidates are collected and raised once every candidate
        has been tried: directly when there is one, bundled in an
        ``AggregateDownloadError`` otherwise.  Returns ``None`` when every
        candidate was skipped without error.
        """
        errors: list[CollectorError] = []
        for location in candidates:
            url = resolve_placeholders(location.url, variables) or ""
            headers = self._resolve_headers(location, variables)

            if url.lower().startswith(_HTTP_PREFIXES):
                try:
                    return self.download(name, url, headers, cache_dir)
                except NetworkError as exc:
                    errors.append(exc)
                continue

            if not worktree:
                logger.debug("Skipping local file URL %s due to missing worktree", url)
                continue
            local_file = Path(worktree, *url.split("/"))
            if local_file.exists():
                logger.debug("Using local file %s for '%s'", local_file, name)
                return local_file

        raise_if_necessary(f"Unable to download '{name}' from any location", errors)
        return None

    def _resolve_headers(
        self, location: LocationConfig, variables: Mapping[str, Any]
    ) -> dict[str, str]:
        username = resolve_placeholders(
            location.username or self._config.username, variables
        )
        password = resolve_placeholders(
            location.password or self._config.password, variables
        )
        headers = resolve_header_placeholders(
            {**self._config.http_headers, **location.http_headers}, variables
        )
        if username or password:
            headers["Authorization"] = basic_auth_header(username, password)
        return headers

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def download(
        self, name: str, url: str, headers: Mapping[str, str], cache_dir: Path
    ) -> Path:
        """Download *url* into the cache, revalidating with the stored ETag.

        Raises ``HTTPStatusError`` for any response other than 200 or 304,
        and ``NetworkError`` for transport failures.
        """
        archive = cache_dir / f"{name}.zip"
        sidecar = cache_dir / f"{name}.cache"
        logger.debug("Attempting download of '%s' to '%s'", url, archive)

        record = self._load_record(archive, sidecar, url)
        request_headers = dict(headers)
        if record.etag:
            request_headers["If-None-Match"] = record.etag

        try:
            response = self._client.get(url, headers=request_headers)
        except httpx.HTTPError as exc:
            message = f"Unable to download '{url}' {exc}"
            logger.debug(message)
            raise NetworkError(message, url=url) from exc

        if self.download_log is not None:
            self.download_log.append(
                DownloadEvent(url=url, status_code=response.status_code)
            )

        if response.status_code == 304:
            logger.debug("Existing cache used for download of '%s' to '%s'", url, archive)
            for path in (archive, sidecar):
                with contextlib.suppress(OSError):
                    os.utime(path)
            return archive

        if response.status_code != 200:
            message = (
                f"Unable to download '{url}' due to HTTP response code "
                f"{response.status_code} ({response.reason_phrase})"
            )
            logger.debug(message)
            raise HTTPStatusError(message, url=url, status_code=response.status_code)

        cache_dir.mkdir(parents=True, exist_ok=True)
        archive.write_bytes(response.content)
        record = CacheRecord(url=url, etag=response.headers.get("etag"))
        sidecar.write_text(record.model_dump_json(), encoding="utf-8")
        logger.debug("Downloaded '%s' to '%s'", url, archive)
        return archive

    @staticmethod
    def _load_record(archive: Path, sidecar: Path, url: str) -> CacheRecord:
        """Load the sidecar for *archive*; a fresh record if absent or stale."""
        if archive.is_file() and sidecar.is_file():
            try:
                record = CacheRecord.model_validate_json(
                    sidecar.read_text(encoding="utf-8")
                )
            except (OSError, ValidationError) as exc:
                logger.debug("Ignoring unreadable cache record %s: %s", sidecar, exc)
            else:
                if record.url == url:
                    return record
        return CacheRecord(url=url)
