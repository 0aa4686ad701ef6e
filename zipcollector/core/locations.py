"""Location selection — which candidate locations apply to a version type."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from zipcollector.models.config import LocationConfig
from zipcollector.models.versioning import VersionType

logger = logging.getLogger(__name__)


def consider_location(location: LocationConfig, version_type: VersionType) -> bool:
    """Return ``True`` if *location* applies to *version_type*.

    A location without ``for_version_type`` applies to every version.
    """
    version_types = [item.lower().strip() for item in location.for_version_type]
    result = not version_types or version_type.value in version_types
    logger.debug(
        "Evaluated '%s' version types %s to %s", location.url, version_types, result
    )
    return result


def eligible_locations(
    locations: Iterable[LocationConfig], version_type: VersionType
) -> Iterator[LocationConfig]:
    """Yield the applicable *locations* in their configured order."""
    for location in locations:
        if consider_location(location, version_type):
            yield location
