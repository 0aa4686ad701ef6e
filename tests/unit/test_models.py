"""Tests for content and catalog models."""

from __future__ import annotations

import json

from zipcollector.models import (
    CacheRecord,
    CatalogFile,
    ComponentVersionBucket,
    ContentCatalog,
    FileSrc,
    FileStat,
    InMemoryContentCatalog,
    InMemoryUiCatalog,
    Origin,
    UiCatalog,
)


class TestFileSrc:
    def test_for_path_derives_name_parts(self):
        src = FileSrc.for_path("modules/ROOT/pages/index.adoc")
        assert src.basename == "index.adoc"
        assert src.stem == "index"
        assert src.extname == ".adoc"
        assert src.relative == src.abspath == src.path

    def test_for_path_without_extension(self):
        src = FileSrc.for_path("docs/README")
        assert src.stem == "README"
        assert src.extname == ""

    def test_extra_fields(self):
        src = FileSrc.for_path("a.adoc", component="docs")
        assert src.component == "docs"


class TestFileStat:
    def test_default_is_regular_file(self):
        stat = FileStat()
        assert stat.is_file
        assert not stat.is_directory

    def test_directory_mode(self):
        assert FileStat(mode=0o040755).is_directory


class TestOrigin:
    def test_collector_config(self):
        origin = Origin(descriptor={"ext": {"zip_contents_collector": {"include": ["a"]}}})
        assert origin.collector_config == {"include": ["a"]}

    def test_collector_config_absent(self):
        assert Origin().collector_config is None
        assert Origin(descriptor={"ext": None}).collector_config is None


class TestComponentVersionBucket:
    def test_key(self):
        assert ComponentVersionBucket(name="docs", version="1.0").key == "1.0@docs"
        assert ComponentVersionBucket(name="docs").key == "@docs"

    def test_find_file(self):
        file = CatalogFile(path="a.adoc", src=FileSrc.for_path("a.adoc"))
        bucket = ComponentVersionBucket(name="docs", files=[file])
        assert bucket.find_file("a.adoc") is file
        assert bucket.find_file("b.adoc") is None


class TestCacheRecord:
    def test_json_shape(self):
        record = CacheRecord(url="https://x", etag='"abc"')
        assert json.loads(record.model_dump_json()) == {"url": "https://x", "etag": '"abc"'}

    def test_etag_optional(self):
        assert CacheRecord.model_validate_json('{"url": "https://x"}').etag is None


class TestCatalogs:
    def test_in_memory_catalogs_satisfy_protocols(self):
        assert isinstance(InMemoryContentCatalog(), ContentCatalog)
        assert isinstance(InMemoryUiCatalog(), UiCatalog)

    def test_register_version_reuses_component(self):
        catalog = InMemoryContentCatalog()
        catalog.register_version("docs", "1.0", title="Docs")
        version = catalog.register_version("docs", "2.0", title="Ignored")
        (component,) = catalog.get_components()
        assert component.title == "Docs"
        assert len(component.versions) == 2
        assert version.display_version == "2.0"
        assert version.key == "2.0@docs"

    def test_ui_find_by_type(self):
        layout = CatalogFile(path="layouts/x.hbs", src=FileSrc.for_path("layouts/x.hbs"), type="layout")
        partial = CatalogFile(path="partials/y.hbs", src=FileSrc.for_path("partials/y.hbs"), type="partial")
        ui = InMemoryUiCatalog([layout, partial])
        assert ui.find_by_type("layout") == [layout]
