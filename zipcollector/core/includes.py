"""Include builder — normalizes configured includes into ``IncludeSpec``s.

Includes come from two places: the global ``alwaysInclude`` list and the
origin descriptor's ``ext.zip_contents_collector.include`` key.  Each entry
is either a bare archive name or a mapping.
"""

from __future__ import annotations

import logging
from typing import Any

from zipcollector.core.errors import ConfigError
from zipcollector.models.config import CollectorConfig, as_list
from zipcollector.models.content import Origin
from zipcollector.models.includes import Destination, IncludeSpec

logger = logging.getLogger(__name__)


def _normalize(entry: Any) -> dict[str, Any]:
    if isinstance(entry, dict):
        return dict(entry)
    return {"name": entry}


def build_includes(
    config: CollectorConfig, origin: Origin, destination: Destination
) -> list[IncludeSpec]:
    """Return the includes of *origin* that target *destination*.

    Raises ``ConfigError`` before any network activity if any include, for
    either destination, has no name.
    """
    entries = list(config.always_include)
    origin_config = origin.collector_config
    if origin_config:
        entries.extend(as_list(origin_config.get("include")))
    if not entries:
        return []

    raws = [_normalize(entry) for entry in entries]
    if not all(raw.get("name") for raw in raws):
        raise ConfigError("Zip contents extension include must include a 'name'")

    includes: list[IncludeSpec] = []
    for raw in raws:
        if Destination.parse(raw.get("destination")) is not destination:
            continue
        includes.append(IncludeSpec(**{**raw, "name": str(raw["name"]), "origin": origin}))

    logger.debug(
        "Found %d %s include(s) for %s '%s'",
        len(includes),
        destination.value,
        origin.reftype,
        origin.refname,
    )
    return includes
