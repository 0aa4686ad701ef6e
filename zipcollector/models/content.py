"""Content models shared by the aggregate and catalog phases.

Buckets and files are mutable: the collector merges archive members into
them in place.  Descriptor-driven bucket fields that are not declared here
are accepted as extra attributes.
"""

from __future__ import annotations

import posixpath
import stat as stat_module
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Origin(BaseModel):
    """One versioned source location contributing files to a bucket."""

    model_config = ConfigDict(extra="allow")

    type: str = "git"
    url: str = ""
    reftype: str = "branch"
    refname: str = "main"
    refhash: str | None = None
    gitdir: str | None = None
    worktree: str | None = None
    descriptor: dict[str, Any] = Field(default_factory=dict)

    @property
    def collector_config(self) -> dict[str, Any] | None:
        """The origin's ``ext.zip_contents_collector`` descriptor block."""
        ext = self.descriptor.get("ext") or {}
        return ext.get("zip_contents_collector")


class FileStat(BaseModel):
    """File mode, modification time and size."""

    model_config = ConfigDict(frozen=True)

    mode: int = 0o100644
    mtime: datetime = Field(default_factory=datetime.now)
    size: int = 0

    @property
    def is_directory(self) -> bool:
        return stat_module.S_ISDIR(self.mode)

    @property
    def is_file(self) -> bool:
        return stat_module.S_ISREG(self.mode)


class FileSrc(BaseModel):
    """Source metadata of a collected file.

    Catalog merges add ``component``, ``version``, ``module`` and ``family``
    as extra attributes.
    """

    model_config = ConfigDict(extra="allow")

    path: str
    relative: str
    abspath: str
    basename: str
    stem: str
    extname: str
    media_type: str | None = None
    origin: Origin | None = Field(default=None, repr=False)
    zip_file: str | None = None

    @classmethod
    def for_path(cls, path: str, **extra: Any) -> FileSrc:
        """Build source metadata for a posix *path*, deriving its name parts."""
        basename = posixpath.basename(path)
        extname = posixpath.splitext(basename)[1]
        stem = basename[: len(basename) - len(extname)]
        return cls(
            path=path,
            relative=path,
            abspath=path,
            basename=basename,
            stem=stem,
            extname=extname,
            **extra,
        )


class CatalogFile(BaseModel):
    """A file destined for a bucket or a content catalog."""

    model_config = ConfigDict(extra="allow")

    path: str
    contents: bytes = b""
    stat: FileStat = Field(default_factory=FileStat)
    src: FileSrc
    type: str | None = None
    asciidoc: dict[str, Any] | None = None


class ComponentVersionBucket(BaseModel):
    """Per-component-version file accumulator, before classification."""

    model_config = ConfigDict(extra="allow")

    name: str
    version: str | None = None
    title: str | None = None
    display_version: str | None = None
    prerelease: bool | str | None = None
    start_page: str | None = None
    asciidoc: dict[str, Any] | None = None
    nav: list[str] | None = None
    origins: list[Origin] = Field(default_factory=list)
    files: list[CatalogFile] = Field(default_factory=list)

    @property
    def key(self) -> str:
        """Lookup key ``<version>@<name>`` used to match catalog versions."""
        return f"{self.version or ''}@{self.name}"

    def find_file(self, path: str) -> CatalogFile | None:
        """Return the bucket file whose ``src.path`` equals *path*."""
        for candidate in self.files:
            if candidate.src.path == path:
                return candidate
        return None
