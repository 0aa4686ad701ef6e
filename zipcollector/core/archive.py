"""Streaming zip extraction.

``iter_entries`` yields one ``ArchiveEntry`` per member, reading each
member's bytes lazily as a chunk iterator.  The sequence is one-shot: the
archive handle closes when the generator is exhausted, so every entry must
be drained before the next one is requested.  ``buffered`` is the adapter
that does this, materializing each entry's contents as ``bytes``.
"""

from __future__ import annotations

import logging
import os
import stat
import zipfile
import zlib
from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from zipcollector.core.errors import ArchiveCorruptError
from zipcollector.models.content import FileStat

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
DEFAULT_FILE_MODE = 0o100644

_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError)

# Earliest DOS timestamp; used for members with an unset or invalid date
DOS_EPOCH = datetime(1980, 1, 1)


class ArchiveEntry(BaseModel):
    """A single archive member.

    ``chunks`` is the unread content stream; ``contents`` is populated once
    the entry has been buffered.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str
    stat: FileStat
    contents: bytes | None = None
    chunks: Any = Field(default=None, exclude=True, repr=False)

    @property
    def is_directory(self) -> bool:
        return self.stat.is_directory


def _mode_from(info: zipfile.ZipInfo) -> int:
    attr = (info.external_attr >> 16) or DEFAULT_FILE_MODE
    mode = stat.S_IFMT(attr) | (attr & 0o777)
    if info.is_dir():
        mode = (mode & ~stat.S_IFMT(mode)) | stat.S_IFDIR
    elif not stat.S_IFMT(mode):
        mode |= stat.S_IFREG
    return mode


def _mtime_from(info: zipfile.ZipInfo) -> datetime:
    try:
        return datetime(*info.date_time)
    except ValueError:
        return DOS_EPOCH


def _read_chunks(
    archive: zipfile.ZipFile, info: zipfile.ZipInfo, zip_path: str
) -> Iterator[bytes]:
    try:
        with archive.open(info) as member:
            while chunk := member.read(CHUNK_SIZE):
                yield chunk
    except _READ_ERRORS as exc:
        raise ArchiveCorruptError(f"Error unzipping {zip_path}: {exc}") from exc


def iter_entries(zip_path: str | os.PathLike[str]) -> Iterator[ArchiveEntry]:
    """Lazily yield the members of the zip at *zip_path*.

    Raises ``FileNotFoundError`` if the archive does not exist and
    ``ArchiveCorruptError`` if it cannot be read.
    """
    zip_path = os.fspath(zip_path)
    try:
        archive = zipfile.ZipFile(zip_path)
    except FileNotFoundError:
        raise
    except (zipfile.BadZipFile, OSError) as exc:
        raise ArchiveCorruptError(f"Error unzipping {zip_path}: {exc}") from exc

    with archive:
        for info in archive.infolist():
            entry_stat = FileStat(
                mode=_mode_from(info),
                mtime=_mtime_from(info),
                size=0 if info.is_dir() else info.file_size,
            )
            entry = ArchiveEntry(path=info.filename, stat=entry_stat)
            if not info.is_dir():
                entry.chunks = _read_chunks(archive, info, zip_path)
            yield entry


def buffered(entries: Iterable[ArchiveEntry]) -> Iterator[ArchiveEntry]:
    """Drain each entry's chunk stream into ``contents`` before yielding it."""
    for entry in entries:
        if entry.chunks is not None:
            entry.contents = b"".join(entry.chunks)
            entry.chunks = None
        elif entry.contents is None and not entry.is_directory:
            entry.contents = b""
        yield entry


def read_archive(zip_path: str | os.PathLike[str]) -> Iterator[ArchiveEntry]:
    """Buffered file entries of *zip_path*; directory markers are skipped."""
    for entry in buffered(iter_entries(zip_path)):
        if not entry.is_directory:
            yield entry
