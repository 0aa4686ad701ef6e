"""Zipcollector data models — all Pydantic v2."""

from zipcollector.models.cache import CacheRecord, DownloadEvent
from zipcollector.models.catalog import (
    Component,
    ComponentVersion,
    ContentCatalog,
    InMemoryContentCatalog,
    InMemoryUiCatalog,
    UiCatalog,
)
from zipcollector.models.config import CollectorConfig, LocationConfig
from zipcollector.models.content import (
    CatalogFile,
    ComponentVersionBucket,
    FileSrc,
    FileStat,
    Origin,
)
from zipcollector.models.includes import Destination, IncludeSpec
from zipcollector.models.phases import PHASE_ORDER, Phase
from zipcollector.models.versioning import VersionType

__all__ = [
    # cache
    "CacheRecord",
    "DownloadEvent",
    # catalog
    "Component",
    "ComponentVersion",
    "ContentCatalog",
    "InMemoryContentCatalog",
    "InMemoryUiCatalog",
    "UiCatalog",
    # config
    "CollectorConfig",
    "LocationConfig",
    # content
    "CatalogFile",
    "ComponentVersionBucket",
    "FileSrc",
    "FileStat",
    "Origin",
    # includes
    "Destination",
    "IncludeSpec",
    # phases
    "PHASE_ORDER",
    "Phase",
    # versioning
    "VersionType",
]
