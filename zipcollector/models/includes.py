"""Include spec model — names one archive and where its members land."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from zipcollector.models.content import Origin


class Destination(str, Enum):
    """Model an include's extracted files are merged into."""

    CONTENT_AGGREGATE = "content_aggregate"
    CONTENT_CATALOG = "content_catalog"

    @classmethod
    def parse(cls, value: str | None) -> Destination | None:
        """Parse a configured destination; ``None`` means the aggregate.

        Hyphenated spellings and any casing are accepted.  Unknown values
        return ``None`` so the include is picked up by neither phase.
        """
        if not value:
            return cls.CONTENT_AGGREGATE
        try:
            return cls(value.strip().lower().replace("-", "_"))
        except ValueError:
            return None


class IncludeSpec(BaseModel):
    """A single archive include, bound to the origin that declared it."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    module: str | None = None
    path: str | None = None
    classifier: str | None = None
    layout: str | None = None
    destination: str | None = None
    origin: Origin | None = Field(default=None, repr=False, exclude=True)

    @property
    def target(self) -> Destination | None:
        return Destination.parse(self.destination)
