"""Merge engine — lands archive members in a bucket or a content catalog.

Aggregate merges (before classification) either update the bucket's
component metadata, when the member is a component descriptor, or add the
member to the bucket's files, replacing any file at the same path.  Catalog
merges (after classification) always append a page with its page
attributes; duplicate handling belongs to the catalog.
"""

from __future__ import annotations

import logging
import mimetypes
import posixpath
from typing import Any

import yaml

from zipcollector.core.archive import ArchiveEntry
from zipcollector.core.errors import ConfigError
from zipcollector.models.catalog import Component, ComponentVersion, ContentCatalog
from zipcollector.models.content import (
    CatalogFile,
    ComponentVersionBucket,
    FileSrc,
)
from zipcollector.models.includes import IncludeSpec

logger = logging.getLogger(__name__)

DESCRIPTOR_PATHS = frozenset({"antora.yml", "modules/antora.yml"})
DEFAULT_MODULE = "ROOT"
DEFAULT_LAYOUT = "bare"
CATALOG_FALLBACK_MEDIA_TYPE = "application/octet-stream"

_MEDIA_TYPES = {
    ".adoc": "text/asciidoc",
    ".asciidoc": "text/asciidoc",
    ".hbs": "text/x-handlebars-template",
}


def media_type_for(extname: str, fallback: str | None = None) -> str | None:
    """Look up the media type for a file extension such as ``.html``."""
    if not extname:
        return fallback
    media_type = _MEDIA_TYPES.get(extname.lower())
    if media_type is None:
        media_type, _ = mimetypes.guess_type(f"file{extname}", strict=False)
    return media_type or fallback


def join_destination(*segments: str | None) -> str | None:
    """Join the non-empty *segments* into a posix prefix, or ``None``."""
    parts = [segment for segment in segments if segment]
    return posixpath.join(*parts) if parts else None


def as_catalog_file(
    include: IncludeSpec,
    zip_file: str,
    entry: ArchiveEntry,
    destination: str | None,
    fallback_media_type: str | None = None,
    **src_extra: Any,
) -> CatalogFile:
    """Build a ``CatalogFile`` for *entry* placed under *destination*."""
    member_path = entry.path.replace("\\", "/")
    path = posixpath.normpath(
        posixpath.join(destination, member_path) if destination else member_path
    )
    src = FileSrc.for_path(
        path,
        origin=include.origin,
        zip_file=zip_file,
        **src_extra,
    )
    src.media_type = media_type_for(src.extname, fallback_media_type)
    return CatalogFile(path=path, contents=entry.contents or b"", stat=entry.stat, src=src)


# ---------------------------------------------------------------------------
# Aggregate merge
# ---------------------------------------------------------------------------


def merge_descriptor(bucket: ComponentVersionBucket, descriptor: dict[str, Any]) -> None:
    """Merge component descriptor fields into *bucket*.

    The bucket keeps its own name, and loses its ``prerelease`` flag when
    the descriptor does not set one.  A non-null ``version`` is stored as a
    string.
    """
    descriptor = dict(descriptor)
    if descriptor.get("version") is not None:
        descriptor["version"] = str(descriptor["version"])
    if descriptor.get("name") and descriptor["name"] != bucket.name:
        logger.debug(
            "Ignoring descriptor name '%s' for bucket '%s'", descriptor["name"], bucket.name
        )
        del descriptor["name"]
    for key, value in descriptor.items():
        setattr(bucket, key, value)
    if "prerelease" not in descriptor:
        bucket.prerelease = None


def _load_descriptor(path: str, zip_file: str, contents: bytes) -> dict[str, Any]:
    try:
        descriptor = yaml.safe_load(contents)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse {path} in {zip_file}: {exc}") from exc
    if descriptor is None:
        return {}
    if not isinstance(descriptor, dict):
        raise ConfigError(f"Component descriptor {path} in {zip_file} must be a mapping")
    return descriptor


def add_to_bucket(
    bucket: ComponentVersionBucket,
    include: IncludeSpec,
    zip_file: str,
    entry: ArchiveEntry,
) -> None:
    """Merge one buffered archive *entry* into *bucket*.

    Members land under ``modules/<module>/<path>`` when the include has a
    ``path``; without one, member paths are used as they are.
    """
    destination = include.path and join_destination(
        include.module and posixpath.join("modules", include.module), include.path
    )
    file = as_catalog_file(include, zip_file, entry, destination)
    logger.debug("Adding %s to content aggregate", file.path)

    if file.src.path in DESCRIPTOR_PATHS:
        merge_descriptor(bucket, _load_descriptor(file.src.path, zip_file, file.contents))
        return

    existing = bucket.find_file(file.src.path)
    if existing is not None:
        existing.contents = file.contents
        existing.stat = file.stat
    else:
        bucket.files.append(file)


# ---------------------------------------------------------------------------
# Catalog merge
# ---------------------------------------------------------------------------


def add_to_catalog(
    catalog: ContentCatalog,
    component: Component,
    version: ComponentVersion,
    include: IncludeSpec,
    zip_file: str,
    entry: ArchiveEntry,
) -> CatalogFile:
    """Add one buffered archive *entry* to *catalog* as a page."""
    module_name = include.module or DEFAULT_MODULE
    page_layout = include.layout or DEFAULT_LAYOUT
    file = as_catalog_file(
        include,
        zip_file,
        entry,
        include.path,
        CATALOG_FALLBACK_MEDIA_TYPE,
        component=component.name,
        version=version.version,
        module=module_name,
        family="page",
    )
    origin = file.src.origin
    file.asciidoc = {
        "attributes": {
            "page-layout": page_layout,
            "page-component-name": component.name,
            "page-component-version": version.version,
            "page-version": version.version,
            "page-component-display-version": version.display_version,
            "page-component-title": component.title,
            "page-module": module_name,
            "page-relative": file.src.path,
            "page-origin-type": origin.type if origin else None,
            "page-origin-url": origin.url if origin else None,
        }
    }
    logger.debug("Adding %s to content catalog", file.path)
    return catalog.add_file(file)
