"""Version classification model."""

from enum import Enum


class VersionType(str, Enum):
    """Release type of a component version, as used by ``forVersionType``."""

    SNAPSHOT = "snapshot"
    MILESTONE = "milestone"
    RC = "rc"
    RELEASE = "release"
