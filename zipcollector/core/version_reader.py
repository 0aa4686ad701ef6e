"""Version discovery from a build descriptor.

The version is read from ``versionFile`` either in the origin's worktree or,
for remote origins, from the commit the origin points at.  Two descriptor
formats are understood, chosen by file name suffix:

* ``gradle.properties`` — the first ``version=<value>`` line.
* ``pom.xml`` — the ``<project><version>`` element.
"""

from __future__ import annotations

import logging
import re
import subprocess
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from zipcollector.core.errors import ConfigError
from zipcollector.models.content import Origin

logger = logging.getLogger(__name__)

_GRADLE_VERSION = re.compile(r"^version\s*=\s*(.*)$", re.MULTILINE)


# ---------------------------------------------------------------------------
# Version store
# ---------------------------------------------------------------------------


class TreeEntry(BaseModel):
    """One entry of a tree object."""

    model_config = ConfigDict(frozen=True)

    path: str
    oid: str
    type: str  # "tree" or "blob"


@runtime_checkable
class VersionStore(Protocol):
    """Read-only access to immutable tree and blob objects."""

    def read_tree(self, gitdir: str, oid: str) -> list[TreeEntry]:
        """Return the entries of the tree (or commit's root tree) *oid*."""
        ...

    def read_blob(self, gitdir: str, oid: str) -> bytes:
        """Return the raw bytes of blob *oid*."""
        ...


class GitCommandStore:
    """``VersionStore`` backed by the ``git`` command line."""

    def __init__(self, executable: str = "git") -> None:
        self._git = executable

    def _run(self, gitdir: str, *args: str) -> bytes:
        completed = subprocess.run(
            [self._git, f"--git-dir={gitdir}", *args],
            capture_output=True,
            check=False,
        )
        if completed.returncode != 0:
            raise ConfigError(
                f"git {' '.join(args)} failed in '{gitdir}': "
                f"{completed.stderr.decode('utf-8', 'replace').strip()}"
            )
        return completed.stdout

    def read_tree(self, gitdir: str, oid: str) -> list[TreeEntry]:
        output = self._run(gitdir, "ls-tree", "-z", oid)
        entries: list[TreeEntry] = []
        for record in output.split(b"\0"):
            if not record:
                continue
            meta, _, name = record.partition(b"\t")
            _mode, kind, entry_oid = meta.decode("ascii").split(" ")
            entries.append(
                TreeEntry(path=name.decode("utf-8"), oid=entry_oid, type=kind)
            )
        return entries

    def read_blob(self, gitdir: str, oid: str) -> bytes:
        return self._run(gitdir, "cat-file", "blob", oid)


def resolve_blob(store: VersionStore, gitdir: str, root_oid: str, path: str) -> str:
    """Walk *path* segment by segment from *root_oid*; return the blob oid."""
    oid = root_oid
    segments = [segment for segment in path.split("/") if segment]
    for index, segment in enumerate(segments):
        entries = store.read_tree(gitdir, oid)
        match = next((entry for entry in entries if entry.path == segment), None)
        if match is None:
            raise ConfigError(
                f"Unable to find '{'/'.join(segments[: index + 1])}' in {root_oid}"
            )
        oid = match.oid
    return oid


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_version(version_file: str, contents: str) -> str:
    """Extract the version from *contents* of *version_file*.

    Raises ``ConfigError`` for unsupported files or missing versions.
    """
    logger.debug("Extracting version from '%s'", version_file)
    lowered = version_file.lower()
    if lowered.endswith("gradle.properties"):
        match = _GRADLE_VERSION.search(contents)
        version = match.group(1).strip() if match else ""
        if not version:
            raise ConfigError(
                f"Unable to find 'version=<value>' in Gradle file '{version_file}'"
            )
        return version
    if lowered.endswith("pom.xml"):
        version = _pom_version(contents)
        if not version:
            raise ConfigError(f"Unable to find 'version' in Maven file '{version_file}'")
        return version
    raise ConfigError(
        f"Unable to extract 'version' from unsupported file type '{version_file}'"
    )


def _pom_version(contents: str) -> str | None:
    try:
        project = ET.fromstring(contents)
    except ET.ParseError as exc:
        raise ConfigError(f"Unable to parse Maven file: {exc}") from exc
    if _local_name(project.tag) != "project":
        return None
    for child in project:
        if _local_name(child.tag) == "version":
            return (child.text or "").strip() or None
    return None


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def read_version(
    origin: Origin, version_file: str | None, store: VersionStore | None = None
) -> str | None:
    """Read the version of *origin*; ``None`` when no version file is set."""
    if not version_file:
        return None
    logger.debug("Reading version information from %s", version_file)
    if origin.worktree:
        path = Path(origin.worktree, *version_file.split("/"))
        return extract_version(version_file, path.read_text(encoding="utf-8"))

    if not origin.gitdir or not origin.refhash:
        raise ConfigError(
            f"Unable to read '{version_file}' from {origin.reftype} "
            f"'{origin.refname}' without a worktree or commit"
        )
    store = store or GitCommandStore()
    blob_oid = resolve_blob(store, origin.gitdir, origin.refhash, version_file)
    contents = store.read_blob(origin.gitdir, blob_oid).decode("utf-8")
    return extract_version(version_file, contents)
