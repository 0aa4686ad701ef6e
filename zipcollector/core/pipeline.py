"""Pipeline driver — runs registered phase handlers in lifecycle order.

The host pipeline calls ``run_phase`` for each phase in ``PHASE_ORDER``.
Handlers for ``CONTENT_AGGREGATED`` may return a replacement bucket list,
which becomes the input for later handlers and the phase result.  A phase
cannot run before every earlier phase has completed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from zipcollector.core.errors import CollectorError
from zipcollector.models.catalog import InMemoryContentCatalog, InMemoryUiCatalog
from zipcollector.models.content import ComponentVersionBucket
from zipcollector.models.phases import PHASE_ORDER, Phase

logger = logging.getLogger(__name__)

PhaseHandler = Callable[[Any], Any]


class PhaseOrderError(CollectorError):
    """Raised when a phase runs before the phases preceding it."""


class PipelineDriver:
    """Ordered phase runner for collector extensions."""

    def __init__(self) -> None:
        self._handlers: dict[Phase, list[PhaseHandler]] = {phase: [] for phase in PHASE_ORDER}
        self.completed: list[Phase] = []

    def register_phase_handler(self, phase: Phase, handler: PhaseHandler) -> None:
        """Register *handler* to run when *phase* fires.

        Handlers run in registration order.
        """
        self._handlers[phase].append(handler)

    def run_phase(self, phase: Phase, subject: Any) -> Any:
        """Run every handler registered for *phase* against *subject*.

        Returns the (possibly replaced) subject.
        """
        expected = PHASE_ORDER[: PHASE_ORDER.index(phase)]
        missing = [p.value for p in expected if p not in self.completed]
        if missing:
            raise PhaseOrderError(
                f"Cannot run {phase.value}: earlier phases not completed: "
                + ", ".join(missing)
            )

        for handler in self._handlers[phase]:
            result = handler(subject)
            if phase is Phase.CONTENT_AGGREGATED and result is not None:
                subject = result

        self.completed.append(phase)
        logger.debug("Phase %s completed (%d handler(s))", phase.value, len(self._handlers[phase]))
        return subject

    def run(
        self,
        buckets: list[ComponentVersionBucket],
        *,
        ui_catalog: InMemoryUiCatalog | None = None,
    ) -> tuple[list[ComponentVersionBucket], InMemoryContentCatalog, InMemoryUiCatalog]:
        """Run all phases, classifying buckets into an in-memory catalog."""
        buckets = self.run_phase(Phase.CONTENT_AGGREGATED, buckets)
        catalog = classify_buckets(buckets)
        self.run_phase(Phase.CONTENT_CLASSIFIED, catalog)
        ui_catalog = ui_catalog if ui_catalog is not None else InMemoryUiCatalog()
        self.run_phase(Phase.UI_LOADED, ui_catalog)
        return buckets, catalog, ui_catalog


def classify_buckets(buckets: list[ComponentVersionBucket]) -> InMemoryContentCatalog:
    """Minimal classification: one component version and its files per bucket."""
    catalog = InMemoryContentCatalog()
    for bucket in buckets:
        version = catalog.register_version(
            bucket.name,
            bucket.version or "",
            title=bucket.title,
            display_version=bucket.display_version,
        )
        for file in bucket.files:
            src = file.src.model_copy(
                update={"component": bucket.name, "version": version.version}
            )
            catalog.add_file(file.model_copy(update={"src": src}))
    return catalog
