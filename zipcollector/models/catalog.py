"""Catalog protocols consumed by the classified and UI phases.

The site generator owns the real catalogs; the collector only enumerates
component versions, looks files up by type, and adds files.  The in-memory
implementations below satisfy the protocols for standalone runs and tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from zipcollector.models.content import CatalogFile


class ComponentVersion(BaseModel):
    """One classified version of a component."""

    model_config = ConfigDict(extra="allow")

    name: str
    version: str
    display_version: str | None = None
    title: str | None = None

    @property
    def key(self) -> str:
        """Lookup key ``<version>@<name>``, matching ``ComponentVersionBucket.key``."""
        return f"{self.version}@{self.name}"


class Component(BaseModel):
    """A component and its classified versions."""

    model_config = ConfigDict(extra="allow")

    name: str
    title: str | None = None
    versions: list[ComponentVersion] = Field(default_factory=list)


@runtime_checkable
class ContentCatalog(Protocol):
    """Post-classification catalog supporting enumeration and insertion."""

    def get_components(self) -> list[Component]:
        """Return every component known to the catalog."""
        ...

    def add_file(self, file: CatalogFile) -> CatalogFile:
        """Insert *file* into the catalog."""
        ...


@runtime_checkable
class UiCatalog(Protocol):
    """UI asset catalog supporting type lookup and insertion."""

    def find_by_type(self, type: str) -> list[CatalogFile]:
        """Return every UI file of the given type."""
        ...

    def add_file(self, file: CatalogFile) -> CatalogFile:
        """Insert *file* into the catalog."""
        ...


class InMemoryContentCatalog:
    """List-backed ``ContentCatalog``."""

    def __init__(self) -> None:
        self._components: dict[str, Component] = {}
        self.files: list[CatalogFile] = []

    def register_version(
        self,
        name: str,
        version: str,
        *,
        title: str | None = None,
        display_version: str | None = None,
    ) -> ComponentVersion:
        """Register a component version, creating the component if needed."""
        component = self._components.setdefault(
            name, Component(name=name, title=title or name)
        )
        component_version = ComponentVersion(
            name=name,
            version=version,
            display_version=display_version or version,
            title=component.title,
        )
        component.versions.append(component_version)
        return component_version

    def get_components(self) -> list[Component]:
        return list(self._components.values())

    def add_file(self, file: CatalogFile) -> CatalogFile:
        self.files.append(file)
        return file

    def find_by_path(self, path: str) -> list[CatalogFile]:
        """Return catalog files whose ``src.path`` equals *path*."""
        return [file for file in self.files if file.src.path == path]


class InMemoryUiCatalog:
    """List-backed ``UiCatalog``."""

    def __init__(self, files: list[CatalogFile] | None = None) -> None:
        self.files: list[CatalogFile] = list(files or [])

    def find_by_type(self, type: str) -> list[CatalogFile]:
        return [file for file in self.files if file.type == type]

    def add_file(self, file: CatalogFile) -> CatalogFile:
        self.files.append(file)
        return file
