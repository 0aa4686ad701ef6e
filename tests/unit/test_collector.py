"""Tests for the collector phase handlers."""

from __future__ import annotations

import pytest

from zipcollector.core.collector import BARE_LAYOUT_CONTENTS, BARE_LAYOUT_PATH
from zipcollector.core.errors import ConfigError, HTTPStatusError
from zipcollector.core.pipeline import PipelineDriver
from zipcollector.models.catalog import InMemoryContentCatalog, InMemoryUiCatalog
from zipcollector.models.content import CatalogFile, FileSrc
from zipcollector.models.phases import Phase

REPO = "https://repo.example.org"
LOCATION = f"{REPO}/${{name}}.zip"


def _config(**extra) -> dict:
    return {"locations": [LOCATION], **extra}


class TestRegistration:
    def test_registers_all_phases(self, make_collector):
        driver = PipelineDriver()
        make_collector(_config()).register(driver)
        for phase in Phase:
            assert len(driver._handlers[phase]) == 1

    def test_cache_dir_from_settings(self, make_collector, settings):
        collector = make_collector(_config())
        assert collector.cache_dir == settings.cache_dir / "zip-contents-collector"
        assert collector.cache_dir.is_dir()


class TestContentAggregated:
    def test_no_includes_makes_no_requests(self, make_collector, make_bucket, server):
        buckets = [make_bucket()]
        result = make_collector(_config()).content_aggregated(buckets)
        assert result is buckets
        assert server.requests == []

    def test_adds_archive_files_to_bucket(self, make_collector, make_bucket, make_zip, server, settings):
        server.add(f"{REPO}/docs.zip", make_zip({"modules/ROOT/pages/index.adoc": "= Hi"}))
        bucket = make_bucket("docs")
        make_collector(_config()).content_aggregated([bucket])

        assert [f.path for f in bucket.files] == ["modules/ROOT/pages/index.adoc"]
        cached = settings.cache_dir / "zip-contents-collector" / "branch" / "main" / "docs.zip"
        assert cached.is_file()
        assert bucket.files[0].src.zip_file == str(cached)

    def test_always_include_applies_to_every_origin(self, make_collector, make_bucket, make_zip, server):
        server.add(f"{REPO}/common.zip", make_zip({"pages/common.adoc": "c"}))
        buckets = [make_bucket(name="a"), make_bucket(name="b")]
        make_collector(_config(alwaysInclude="common")).content_aggregated(buckets)
        assert all(b.files[0].path == "pages/common.adoc" for b in buckets)

    def test_version_file_drives_location_and_template(
        self, make_collector, make_bucket, make_zip, server, tmp_path
    ):
        (tmp_path / "gradle.properties").write_text("version=1.0.0-SNAPSHOT\n")
        server.add(f"{REPO}/snapshot/docs-1.0.0-SNAPSHOT.zip", make_zip({"a.adoc": "a"}))
        config = {
            "versionFile": "gradle.properties",
            "locations": [
                {"url": f"{REPO}/release/${{name}}-${{version}}.zip", "forVersionType": "release"},
                {"url": f"{REPO}/snapshot/${{name}}-${{version}}.zip", "forVersionType": "snapshot"},
            ],
        }
        bucket = make_bucket("docs", worktree=tmp_path)
        make_collector(config).content_aggregated([bucket])

        assert server.urls_requested() == [f"{REPO}/snapshot/docs-1.0.0-SNAPSHOT.zip"]
        assert bucket.files[0].path == "a.adoc"

    def test_classifier_in_template(self, make_collector, make_bucket, make_zip, server):
        server.add(f"{REPO}/docs-html.zip", make_zip({"a.html": "<p/>"}))
        config = {"locations": [f"{REPO}/${{name}}-${{classifier}}.zip"]}
        bucket = make_bucket([{"name": "docs", "classifier": "html"}])
        make_collector(config).content_aggregated([bucket])
        assert bucket.files[0].src.media_type == "text/html"

    def test_include_without_name_fails_before_download(self, make_collector, make_bucket, server):
        with pytest.raises(ConfigError):
            make_collector(_config()).content_aggregated([make_bucket([{"path": "x"}])])
        assert server.requests == []

    def test_nameless_catalog_include_fails_before_aggregate_download(
        self, make_collector, make_bucket, make_zip, server
    ):
        server.add(f"{REPO}/docs.zip", make_zip({"a.adoc": "a"}))
        bucket = make_bucket([{"name": "docs"}, {"destination": "content-catalog"}])
        with pytest.raises(ConfigError, match="must include a 'name'"):
            make_collector(_config()).content_aggregated([bucket])
        assert server.requests == []
        assert bucket.files == []

    def test_missing_archive_raises(self, make_collector, make_bucket):
        with pytest.raises(HTTPStatusError):
            make_collector(_config()).content_aggregated([make_bucket("docs")])

    def test_include_skipped_when_nothing_resolves(self, make_collector, make_bucket):
        bucket = make_bucket("docs")
        make_collector({"locations": ["build/${name}.zip"]}).content_aggregated([bucket])
        assert bucket.files == []

    def test_local_worktree_archive(self, make_collector, make_bucket, write_zip, tmp_path, server):
        write_zip("build/docs.zip", {"pages/a.adoc": "a"})
        bucket = make_bucket("docs", worktree=tmp_path)
        make_collector({"locations": ["build/${name}.zip"]}).content_aggregated([bucket])
        assert bucket.files[0].path == "pages/a.adoc"
        assert server.requests == []


class TestSnapshotDrop:
    def _snapshot_bucket(self, make_bucket, tmp_path, **kwargs):
        (tmp_path / "gradle.properties").write_text("version=2.0.0-SNAPSHOT\n")
        return make_bucket("docs", worktree=tmp_path, **kwargs)

    def test_drops_bucket_on_404(self, make_collector, make_bucket, tmp_path):
        dropped = self._snapshot_bucket(make_bucket, tmp_path)
        kept = make_bucket(name="other", worktree=tmp_path)
        buckets = [dropped, kept]
        config = _config(versionFile="gradle.properties", onMissingSnapshotZip="drop_content")

        result = make_collector(config).content_aggregated(buckets)

        assert result == [kept]
        assert result is not buckets
        assert buckets == [dropped, kept]

    def test_raises_without_drop_policy(self, make_collector, make_bucket, tmp_path):
        bucket = self._snapshot_bucket(make_bucket, tmp_path)
        with pytest.raises(HTTPStatusError):
            make_collector(_config(versionFile="gradle.properties")).content_aggregated([bucket])

    def test_tags_are_never_dropped(self, make_collector, make_bucket, tmp_path):
        bucket = self._snapshot_bucket(make_bucket, tmp_path, reftype="tag", refname="v2")
        config = _config(versionFile="gradle.properties", onMissingSnapshotZip="drop_content")
        with pytest.raises(HTTPStatusError):
            make_collector(config).content_aggregated([bucket])

    def test_release_versions_are_never_dropped(self, make_collector, make_bucket, tmp_path):
        (tmp_path / "gradle.properties").write_text("version=2.0.0\n")
        bucket = make_bucket("docs", worktree=tmp_path)
        config = _config(versionFile="gradle.properties", onMissingSnapshotZip="drop_content")
        with pytest.raises(HTTPStatusError):
            make_collector(config).content_aggregated([bucket])

    def test_server_errors_are_never_dropped(self, make_collector, make_bucket, tmp_path, server):
        server.respond_with(f"{REPO}/docs.zip", 500)
        bucket = self._snapshot_bucket(make_bucket, tmp_path)
        config = _config(versionFile="gradle.properties", onMissingSnapshotZip="drop_content")
        with pytest.raises(HTTPStatusError) as excinfo:
            make_collector(config).content_aggregated([bucket])
        assert excinfo.value.status_code == 500


class TestCatalogIncludes:
    def test_stored_under_bucket_key(self, make_collector, make_bucket, make_zip, server):
        server.add(f"{REPO}/api.zip", make_zip({"index.adoc": "= API"}))
        bucket = make_bucket([{"name": "api", "destination": "content-catalog"}])
        collector = make_collector(_config())
        collector.content_aggregated([bucket])

        assert bucket.files == []
        assert list(collector.catalog_includes) == ["main@test"]
        assert collector.catalog_includes["main@test"][0].name == "api"

    def test_key_reflects_descriptor_from_aggregate(self, make_collector, make_bucket, make_zip, server):
        server.add(f"{REPO}/meta.zip", make_zip({"antora.yml": "version: '3.0'\n"}))
        server.add(f"{REPO}/api.zip", make_zip({"index.adoc": "= API"}))
        bucket = make_bucket(["meta", {"name": "api", "destination": "content_catalog"}])
        collector = make_collector(_config())
        collector.content_aggregated([bucket])
        assert list(collector.catalog_includes) == ["3.0@test"]

    def test_content_classified_adds_pages(self, make_collector, make_bucket, make_zip, server):
        server.add(f"{REPO}/api.zip", make_zip({"index.adoc": "= API"}, directories=("sub",)))
        bucket = make_bucket([{"name": "api", "destination": "content-catalog", "path": "api"}])
        collector = make_collector(_config())
        collector.content_aggregated([bucket])

        catalog = InMemoryContentCatalog()
        catalog.register_version("test", "main", title="Test")
        catalog.register_version("test", "other")
        collector.content_classified(catalog)

        (page,) = catalog.files
        assert page.path == "api/index.adoc"
        assert page.contents == b"= API"
        assert page.asciidoc["attributes"]["page-component-version"] == "main"

    def test_unmatched_versions_untouched(self, make_collector, server):
        catalog = InMemoryContentCatalog()
        catalog.register_version("test", "main")
        make_collector(_config()).content_classified(catalog)
        assert catalog.files == []
        assert server.requests == []


class TestUiLoaded:
    def test_adds_bare_layout(self, make_collector):
        ui = InMemoryUiCatalog()
        make_collector(_config()).ui_loaded(ui)
        (layout,) = ui.find_by_type("layout")
        assert layout.path == BARE_LAYOUT_PATH
        assert layout.contents == BARE_LAYOUT_CONTENTS
        assert layout.src.stem == "bare"

    def test_existing_layout_kept(self, make_collector):
        existing = CatalogFile(
            path="layouts/bare.hbs",
            contents=b"custom",
            src=FileSrc.for_path("layouts/bare.hbs"),
            type="layout",
        )
        ui = InMemoryUiCatalog([existing])
        make_collector(_config()).ui_loaded(ui)
        assert ui.files == [existing]

    def test_other_layouts_do_not_count(self, make_collector):
        other = CatalogFile(
            path="layouts/default.hbs",
            src=FileSrc.for_path("layouts/default.hbs"),
            type="layout",
        )
        ui = InMemoryUiCatalog([other])
        make_collector(_config()).ui_loaded(ui)
        assert [f.path for f in ui.files] == ["layouts/default.hbs", "layouts/bare.hbs"]
