"""Shared test fixtures for Zipcollector."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable, Mapping
from pathlib import Path

import httpx
import pytest

from zipcollector.config import CollectorSettings
from zipcollector.core.collector import ZipContentsCollector
from zipcollector.core.fetcher import CachedFetcher
from zipcollector.models.cache import DownloadEvent
from zipcollector.models.config import CollectorConfig
from zipcollector.models.content import ComponentVersionBucket, Origin


def zip_bytes(members: Mapping[str, bytes | str], directories: tuple[str, ...] = ()) -> bytes:
    """Build an in-memory zip with the given file members and directory markers."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for directory in directories:
            archive.writestr(directory.rstrip("/") + "/", b"")
        for name, data in members.items():
            archive.writestr(name, data.encode("utf-8") if isinstance(data, str) else data)
    return buffer.getvalue()


class FakeArchiveServer:
    """Serves zip archives through ``httpx.MockTransport``.

    Archives are registered per URL with an optional ETag; a request whose
    ``If-None-Match`` matches the ETag gets a 304.  Unknown URLs get a 404.
    """

    def __init__(self) -> None:
        self.archives: dict[str, tuple[bytes, str | None]] = {}
        self.statuses: dict[str, int] = {}
        self.failures: set[str] = set()
        self.requests: list[httpx.Request] = []

    def add(self, url: str, data: bytes, etag: str | None = None) -> None:
        self.archives[url] = (data, etag)

    def respond_with(self, url: str, status_code: int) -> None:
        self.statuses[url] = status_code

    def fail(self, url: str) -> None:
        self.failures.add(url)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url in self.failures:
            raise httpx.ConnectError("connection refused", request=request)
        if url in self.statuses:
            return httpx.Response(self.statuses[url])
        if url not in self.archives:
            return httpx.Response(404)
        data, etag = self.archives[url]
        if etag and request.headers.get("if-none-match") == etag:
            return httpx.Response(304)
        headers = {"ETag": etag} if etag else {}
        return httpx.Response(200, content=data, headers=headers)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def urls_requested(self) -> list[str]:
        return [str(request.url) for request in self.requests]


@pytest.fixture
def server() -> FakeArchiveServer:
    """Provide a fresh fake archive server."""
    return FakeArchiveServer()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Provide a download directory inside a temp cache root."""
    path = tmp_path / "cache" / "branch" / "main"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def settings(tmp_path: Path) -> CollectorSettings:
    """Provide settings whose cache dir lives in the temp directory."""
    return CollectorSettings(cache_dir=tmp_path / "cache-root")


@pytest.fixture
def download_log() -> list[DownloadEvent]:
    return []


@pytest.fixture
def make_fetcher(
    server: FakeArchiveServer, download_log: list[DownloadEvent]
) -> Callable[..., CachedFetcher]:
    """Factory fixture: a CachedFetcher wired to the fake server."""

    def _factory(config: CollectorConfig | None = None) -> CachedFetcher:
        return CachedFetcher(
            config or CollectorConfig(),
            client=server.client(),
            download_log=download_log,
        )

    return _factory


@pytest.fixture
def make_collector(
    make_fetcher: Callable[..., CachedFetcher],
    settings: CollectorSettings,
) -> Callable[..., ZipContentsCollector]:
    """Factory fixture: a ZipContentsCollector using the fake server."""

    def _factory(config: CollectorConfig | dict, **kwargs) -> ZipContentsCollector:
        if isinstance(config, dict):
            config = CollectorConfig.model_validate(config)
        return ZipContentsCollector(
            config, settings=settings, fetcher=make_fetcher(config), **kwargs
        )

    return _factory


@pytest.fixture
def make_bucket() -> Callable[..., ComponentVersionBucket]:
    """Factory fixture: a bucket with a single origin declaring *include*."""

    def _factory(
        include: list | str | None = None,
        *,
        name: str = "test",
        version: str | None = "main",
        reftype: str = "branch",
        refname: str = "main",
        worktree: Path | None = None,
        **overrides,
    ) -> ComponentVersionBucket:
        descriptor: dict = {"name": name, "version": version}
        if include is not None:
            descriptor["ext"] = {"zip_contents_collector": {"include": include}}
        origin = Origin(
            url="https://git.example.org/test.git",
            reftype=reftype,
            refname=refname,
            worktree=str(worktree) if worktree else None,
            descriptor=descriptor,
        )
        return ComponentVersionBucket(
            name=name, version=version, origins=[origin], **overrides
        )

    return _factory


@pytest.fixture
def make_zip() -> Callable[..., bytes]:
    """Factory fixture: zip archive bytes built from a member mapping."""
    return zip_bytes


@pytest.fixture
def write_zip(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write a zip archive below the temp directory."""

    def _factory(relative: str, members: Mapping[str, bytes | str], **kwargs) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(zip_bytes(members, **kwargs))
        return path

    return _factory
