"""Version classification — maps a version string to its release type."""

from __future__ import annotations

import re

from zipcollector.models.versioning import VersionType

_SNAPSHOT = re.compile(r"-SNAPSHOT$", re.MULTILINE)
_MILESTONE = re.compile(r"-M\d+$", re.MULTILINE)
_RC = re.compile(r"-RC\d+$", re.MULTILINE)


def classify_version(version: str | None) -> VersionType:
    """Classify *version*; the first matching suffix rule wins.

    ``None`` (no version file configured) classifies as a release.
    """
    if version:
        if _SNAPSHOT.search(version):
            return VersionType.SNAPSHOT
        if _MILESTONE.search(version):
            return VersionType.MILESTONE
        if _RC.search(version):
            return VersionType.RC
    return VersionType.RELEASE
