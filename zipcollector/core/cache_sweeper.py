"""Cache directory resolution and retention sweeping.

The collector cache lives at ``<base>/zip-contents-collector`` where the
base is, in order of preference, the configured cache dir, the platform
user cache dir for ``antora``, or ``<playbook dir>/.cache/antora``.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import timedelta
from pathlib import Path

import platformdirs

logger = logging.getLogger(__name__)

CACHE_RETENTION = timedelta(days=60)
COLLECTOR_CACHE_NAME = "zip-contents-collector"


def base_cache_dir(
    cache_dir: str | os.PathLike[str] | None = None,
    playbook_dir: str | os.PathLike[str] | None = None,
    *,
    app_name: str = "antora",
) -> Path:
    """Return the base cache dir, expanding ``~`` and relative paths."""
    start = Path(playbook_dir) if playbook_dir else Path.cwd()
    if cache_dir:
        path = Path(cache_dir).expanduser()
        return path if path.is_absolute() else (start / path).resolve()
    user_cache = platformdirs.user_cache_dir(app_name)
    if user_cache:
        return Path(user_cache)
    return start / ".cache" / app_name


def collector_cache_dir(
    cache_dir: str | os.PathLike[str] | None = None,
    playbook_dir: str | os.PathLike[str] | None = None,
) -> Path:
    """Return (and create) the collector's cache root."""
    path = base_cache_dir(cache_dir, playbook_dir) / COLLECTOR_CACHE_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


def sweep_cache(
    cache_root: str | os.PathLike[str],
    retention: timedelta = CACHE_RETENTION,
    *,
    now: float | None = None,
) -> list[Path]:
    """Delete regular files under *cache_root* older than *retention*.

    Returns the removed paths.
    """
    current = int(now if now is not None else time.time())
    limit = retention.total_seconds()
    removed: list[Path] = []
    for path in sorted(Path(cache_root).rglob("*")):
        if not path.is_file():
            continue
        if current - int(path.stat().st_mtime) > limit:
            logger.debug("Removing cache file %s", path)
            path.unlink()
            removed.append(path)
    return removed
