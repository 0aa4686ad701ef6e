"""Host pipeline phases, in the order they run."""

from __future__ import annotations

from enum import Enum


class Phase(str, Enum):
    """Lifecycle phases exposed to collector extensions."""

    CONTENT_AGGREGATED = "content_aggregated"
    CONTENT_CLASSIFIED = "content_classified"
    UI_LOADED = "ui_loaded"


PHASE_ORDER: list[Phase] = [
    Phase.CONTENT_AGGREGATED,
    Phase.CONTENT_CLASSIFIED,
    Phase.UI_LOADED,
]
