"""Zip contents collector — the phase handlers wired into the host pipeline.

Phase sequence
--------------
1. ``content_aggregated(buckets)`` — for every bucket and origin, read the
   origin version and merge ``content_aggregate`` includes into the bucket.
   Descriptor members may change the bucket version, so catalog includes are
   only collected (and keyed by ``<version>@<name>``) in a second pass.
2. ``content_classified(catalog)`` — merge the stored catalog includes into
   each matching component version, then sweep the cache.
3. ``ui_loaded(ui_catalog)`` — make sure the ``bare`` page layout exists.

A 404 for a snapshot branch under the ``drop_content`` policy drops the
bucket from the returned list instead of failing the run.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from zipcollector.config import CollectorSettings
from zipcollector.core.archive import ArchiveEntry, read_archive
from zipcollector.core.cache_sweeper import collector_cache_dir, sweep_cache
from zipcollector.core.errors import CollectorError, is_http_not_found
from zipcollector.core.fetcher import CachedFetcher
from zipcollector.core.includes import build_includes
from zipcollector.core.locations import eligible_locations
from zipcollector.core.merge import add_to_bucket, add_to_catalog
from zipcollector.core.version_classifier import classify_version
from zipcollector.core.version_reader import VersionStore, read_version
from zipcollector.models.cache import DownloadEvent
from zipcollector.models.catalog import ContentCatalog, UiCatalog
from zipcollector.models.config import CollectorConfig
from zipcollector.models.content import (
    CatalogFile,
    ComponentVersionBucket,
    FileSrc,
    Origin,
)
from zipcollector.models.includes import Destination, IncludeSpec
from zipcollector.models.phases import Phase

if TYPE_CHECKING:
    from zipcollector.core.pipeline import PipelineDriver

logger = logging.getLogger(__name__)

BARE_LAYOUT_PATH = "layouts/bare.hbs"
BARE_LAYOUT_CONTENTS = b"{{{page.contents}}}"

IncludeAction = Callable[[IncludeSpec, str, ArchiveEntry], object]


class ZipContentsCollector:
    """Collects zip archive contents into buckets and content catalogs.

    Parameters
    ----------
    config:
        The collector configuration block.
    settings:
        Process-level settings (cache dir override, HTTP timeout).
    fetcher:
        Archive fetcher.  Built from *config* and *settings* if not given.
    version_store:
        Store used to read version files of origins without a worktree.
    download_log:
        Optional list receiving one ``DownloadEvent`` per HTTP attempt.
    playbook_dir:
        Directory relative cache dirs are resolved against.
    """

    def __init__(
        self,
        config: CollectorConfig,
        *,
        settings: CollectorSettings | None = None,
        fetcher: CachedFetcher | None = None,
        version_store: VersionStore | None = None,
        download_log: list[DownloadEvent] | None = None,
        playbook_dir: str | os.PathLike[str] | None = None,
    ) -> None:
        self.config = config
        self._settings = settings or CollectorSettings()
        self.fetcher = fetcher or CachedFetcher(
            config,
            download_log=download_log,
            timeout=self._settings.http_timeout_seconds,
            user_agent=self._settings.user_agent,
        )
        self._version_store = version_store
        self._playbook_dir = playbook_dir
        self._catalog_includes: dict[str, list[IncludeSpec]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, driver: PipelineDriver) -> None:
        """Register this collector's phase handlers on a ``PipelineDriver``."""
        driver.register_phase_handler(Phase.CONTENT_AGGREGATED, self.content_aggregated)
        driver.register_phase_handler(Phase.CONTENT_CLASSIFIED, self.content_classified)
        driver.register_phase_handler(Phase.UI_LOADED, self.ui_loaded)

    @property
    def cache_dir(self) -> Path:
        """The collector cache root, created on first access."""
        override = self._settings.cache_dir or self.config.cache_dir
        return collector_cache_dir(override, self._playbook_dir)

    @property
    def catalog_includes(self) -> dict[str, list[IncludeSpec]]:
        """Catalog includes collected so far, keyed by ``<version>@<name>``."""
        return {key: list(value) for key, value in self._catalog_includes.items()}

    # ------------------------------------------------------------------
    # Phase: content aggregated
    # ------------------------------------------------------------------

    def content_aggregated(
        self, buckets: list[ComponentVersionBucket]
    ) -> list[ComponentVersionBucket]:
        """Merge aggregate includes and collect catalog includes.

        Returns *buckets* unchanged, or a filtered copy when snapshot
        buckets were dropped.
        """
        logger.debug("Checking content aggregate for zip contents collector includes")
        cache_root = self.cache_dir
        logger.debug("Using cache dir %s", cache_root)
        dropped: list[ComponentVersionBucket] = []

        for bucket in buckets:
            for origin in bucket.origins:
                version = self._read_version(origin)
                try:
                    self._add_aggregate_includes(origin, version, cache_root, bucket)
                except CollectorError as exc:
                    self._drop_or_raise(origin, version, bucket, exc, dropped)

        for bucket in buckets:
            key = bucket.key
            for origin in bucket.origins:
                version = self._read_version(origin)
                try:
                    self._collect_catalog_includes(origin, version, cache_root, key)
                except CollectorError as exc:
                    self._drop_or_raise(origin, version, bucket, exc, dropped)

        if not dropped:
            return buckets
        return [bucket for bucket in buckets if not any(bucket is d for d in dropped)]

    def _read_version(self, origin: Origin) -> str | None:
        return read_version(origin, self.config.version_file, self._version_store)

    def _add_aggregate_includes(
        self,
        origin: Origin,
        version: str | None,
        cache_root: Path,
        bucket: ComponentVersionBucket,
    ) -> None:
        includes = build_includes(self.config, origin, Destination.CONTENT_AGGREGATE)
        if not includes:
            return
        logger.debug(
            "Adding '%s' aggregate includes %s",
            origin.refname,
            [include.name for include in includes],
        )
        self._with_includes(
            cache_root,
            version,
            includes,
            lambda include, zip_file, entry: add_to_bucket(bucket, include, zip_file, entry),
        )

    def _collect_catalog_includes(
        self, origin: Origin, version: str | None, cache_root: Path, key: str
    ) -> None:
        includes = build_includes(self.config, origin, Destination.CONTENT_CATALOG)
        if not includes:
            return
        logger.debug(
            "Collecting '%s' content catalog includes %s",
            origin.refname,
            [include.name for include in includes],
        )
        self._with_includes(
            cache_root,
            version,
            includes,
            lambda include, zip_file, entry: logger.debug(
                "Prepared %s for addition to content catalog", entry.path
            ),
        )
        logger.debug("Storing '%s' content includes under '%s'", origin.refname, key)
        self._catalog_includes.setdefault(key, []).extend(includes)

    def _drop_or_raise(
        self,
        origin: Origin,
        version: str | None,
        bucket: ComponentVersionBucket,
        error: CollectorError,
        dropped: list[ComponentVersionBucket],
    ) -> None:
        if self.config.drops_missing_snapshots:
            logger.debug("Considering if '%s' content can be dropped", origin.refname)
            if (
                origin.reftype == "branch"
                and version
                and version.endswith("-SNAPSHOT")
                and is_http_not_found(error)
            ):
                logger.info(
                    "Dropping '%s' content due to HTTP not found error", origin.refname
                )
                if not any(bucket is candidate for candidate in dropped):
                    dropped.append(bucket)
                return
        raise error

    # ------------------------------------------------------------------
    # Phase: content classified
    # ------------------------------------------------------------------

    def content_classified(self, catalog: ContentCatalog) -> None:
        """Merge stored catalog includes into matching component versions."""
        cache_root = self.cache_dir
        for component in catalog.get_components():
            for version in component.versions:
                key = version.key
                includes = self._catalog_includes.get(key)
                if not includes:
                    logger.debug(
                        "Content catalog component %s did not match any includes", key
                    )
                    continue
                logger.debug(
                    "Adding '%s' content includes %s",
                    key,
                    [include.name for include in includes],
                )
                self._with_includes(
                    cache_root,
                    version.display_version,
                    includes,
                    lambda include, zip_file, entry: add_to_catalog(
                        catalog, component, version, include, zip_file, entry
                    ),
                )
        removed = sweep_cache(cache_root)
        if removed:
            logger.info("Removed %d expired cache file(s)", len(removed))

    # ------------------------------------------------------------------
    # Phase: UI loaded
    # ------------------------------------------------------------------

    def ui_loaded(self, ui_catalog: UiCatalog) -> None:
        """Add the ``bare`` page layout unless the UI already provides one."""
        layouts = ui_catalog.find_by_type("layout")
        if any(layout.path.replace("\\", "/") == BARE_LAYOUT_PATH for layout in layouts):
            return
        logger.debug("Adding 'bare' layout to UI catalog")
        ui_catalog.add_file(
            CatalogFile(
                path=BARE_LAYOUT_PATH,
                contents=BARE_LAYOUT_CONTENTS,
                src=FileSrc.for_path(BARE_LAYOUT_PATH),
                type="layout",
            )
        )

    # ------------------------------------------------------------------
    # Include processing
    # ------------------------------------------------------------------

    def _with_includes(
        self,
        cache_root: Path,
        version: str | None,
        includes: list[IncludeSpec],
        action: IncludeAction,
    ) -> None:
        """Fetch each include's archive and apply *action* to every file."""
        version_type = classify_version(version)
        for include in includes:
            origin = include.origin or Origin()
            logger.debug(
                "Processing zip contents include '%s' to %s '%s'%s",
                include.name,
                origin.reftype,
                origin.refname,
                f" ({version})" if version else "",
            )
            download_dir = cache_root / origin.reftype / origin.refname
            download_dir.mkdir(parents=True, exist_ok=True)
            variables = {
                "name": include.name,
                "version": version,
                "classifier": include.classifier,
            }
            zip_file = self.fetcher.resolve(
                include.name,
                eligible_locations(self.config.locations, version_type),
                variables,
                download_dir,
                origin.worktree,
            )
            if zip_file is None:
                continue
            for entry in read_archive(zip_file):
                action(include, str(zip_file), entry)
