"""Tests for core/manifest.py - Catalog and sources manifests."""

from unittest.mock import patch

import pytest
import yaml

from codekit.core.errors import (
    InvalidManifestError,
    ManifestNotFoundError,
    ManifestVersionError,
)
from codekit.core.manifest import (
    content_hash,
    get_manifest_entry,
    load_resource_manifest,
    load_sources_manifest,
    remove_entry,
    replace_entry,
    resource_manifest_path,
    save_resource_manifest,
    save_sources_manifest,
)
from codekit.core.types import (
    ArtifactKind,
    ManifestEntry,
    ResourceManifest,
    SourceConfig,
    SourcesManifest,
)


def _write_index(templates_dir, kind, data):
    path = resource_manifest_path(templates_dir, kind)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data))


# ===========================================================================
# content_hash
# ===========================================================================
class TestContentHash:

    def test_hashes_file(self, tmp_path):
        f = tmp_path / "a.md"
        f.write_text("hello")
        assert len(content_hash(f)) == 64  # SHA-256 hex

    def test_directory_hash_tracks_contents(self, tmp_path):
        d = tmp_path / "skill"
        d.mkdir()
        (d / "SKILL.md").write_text("one")
        before = content_hash(d)

        (d / "SKILL.md").write_text("two")
        assert content_hash(d) != before

    def test_directory_hash_tracks_renames(self, tmp_path):
        d = tmp_path / "skill"
        d.mkdir()
        (d / "a.txt").write_text("same")
        before = content_hash(d)

        (d / "a.txt").rename(d / "b.txt")
        assert content_hash(d) != before

    def test_directory_hash_limited_to_listed_files(self, tmp_path):
        d = tmp_path / "skill"
        d.mkdir()
        (d / "SKILL.md").write_text("x")
        before = content_hash(d, ["SKILL.md"])

        (d / "README.md").write_text("ignored")
        assert content_hash(d, ["SKILL.md"]) == before


# ===========================================================================
# Loading
# ===========================================================================
class TestLoadResourceManifest:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestNotFoundError):
            load_resource_manifest(tmp_path, ArtifactKind.AGENT)

    def test_loads_entries(self, tmp_path):
        _write_index(tmp_path, ArtifactKind.AGENT, {
            "version": "1.0.0",
            "resources": [
                {"name": "a", "path": "a.md", "description": "A", "dependencies": ["b"]},
                {"name": "b", "path": "b.md"},
            ],
        })

        manifest = load_resource_manifest(tmp_path, ArtifactKind.AGENT)
        assert manifest.version == "1.0.0"
        assert manifest.names() == ["a", "b"]
        assert manifest.resources[0].dependencies == ("b",)

    @pytest.mark.parametrize("version", ["1", "1.0", "1.2.3"])
    def test_accepts_major_version_one(self, tmp_path, version):
        _write_index(tmp_path, ArtifactKind.SKILL, {"version": version, "resources": []})
        assert load_resource_manifest(tmp_path, ArtifactKind.SKILL).resources == ()

    @pytest.mark.parametrize("version", ["2.0.0", "0.9", None, ""])
    def test_rejects_other_versions(self, tmp_path, version):
        _write_index(tmp_path, ArtifactKind.SKILL, {"version": version, "resources": []})
        with pytest.raises(ManifestVersionError):
            load_resource_manifest(tmp_path, ArtifactKind.SKILL)

    def test_collects_all_structural_problems(self, tmp_path):
        _write_index(tmp_path, ArtifactKind.AGENT, {
            "version": "1.0.0",
            "resources": [
                {"name": "a", "path": "a.md"},
                {"name": "a", "path": "a2.md"},
                {"path": "nameless.md"},
                "not-a-mapping",
            ],
        })

        with pytest.raises(InvalidManifestError) as exc_info:
            load_resource_manifest(tmp_path, ArtifactKind.AGENT)
        errors = exc_info.value.errors
        assert len(errors) == 3
        assert any("duplicate name 'a'" in e for e in errors)
        assert any("missing 'name'" in e for e in errors)

    def test_invalid_yaml(self, tmp_path):
        path = resource_manifest_path(tmp_path, ArtifactKind.AGENT)
        path.parent.mkdir(parents=True)
        path.write_text("version: [1\n")

        with pytest.raises(InvalidManifestError):
            load_resource_manifest(tmp_path, ArtifactKind.AGENT)


class TestLoadSourcesManifest:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestNotFoundError):
            load_sources_manifest(tmp_path)

    def test_loads_sources(self, tmp_path):
        (tmp_path / "sources.yaml").write_text(yaml.dump({
            "version": "1.0.0",
            "sources": [{"name": "s", "url": "https://github.com/o/s.git", "exclude": ["legacy"]}],
        }))

        manifest = load_sources_manifest(tmp_path)
        assert manifest.get("s").exclude == ("legacy",)
        assert manifest.get("missing") is None

    def test_rejects_unknown_kind(self, tmp_path):
        (tmp_path / "sources.yaml").write_text(yaml.dump({
            "version": "1.0.0",
            "sources": [{"name": "s", "url": "u", "kind": "widget"}],
        }))

        with pytest.raises(InvalidManifestError, match="Unknown artifact kind"):
            load_sources_manifest(tmp_path)


# ===========================================================================
# Saving
# ===========================================================================
class TestSaveManifests:

    def test_round_trip(self, tmp_path):
        manifest = ResourceManifest(
            version="1.0.0",
            resources=(ManifestEntry(name="a", path="a.md", tags=("x",), source="s", hash="abc"),),
        )
        save_resource_manifest(tmp_path, ArtifactKind.AGENT, manifest)

        assert load_resource_manifest(tmp_path, ArtifactKind.AGENT) == manifest

    def test_sources_round_trip(self, tmp_path):
        manifest = SourcesManifest(version="1.0.0", sources=(SourceConfig(name="s", url="/tmp/s"),))
        save_sources_manifest(tmp_path, manifest)

        assert load_sources_manifest(tmp_path) == manifest

    def test_failed_write_keeps_previous_file(self, tmp_path):
        original = ResourceManifest(version="1.0.0", resources=(ManifestEntry(name="a", path="a.md"),))
        save_resource_manifest(tmp_path, ArtifactKind.AGENT, original)
        before = resource_manifest_path(tmp_path, ArtifactKind.AGENT).read_text()

        replacement = replace_entry(original, ManifestEntry(name="b", path="b.md"))
        with (
            patch("codekit.core.manifest.yaml.safe_dump", side_effect=OSError("disk full")),
            pytest.raises(OSError),
        ):
            save_resource_manifest(tmp_path, ArtifactKind.AGENT, replacement)

        assert resource_manifest_path(tmp_path, ArtifactKind.AGENT).read_text() == before
        leftovers = [p.name for p in resource_manifest_path(tmp_path, ArtifactKind.AGENT).parent.iterdir()]
        assert leftovers == ["index.yaml"]

    def test_no_temp_files_left_behind(self, tmp_path):
        save_resource_manifest(tmp_path, ArtifactKind.SKILL, ResourceManifest(version="1.0.0"))
        assert [p.name for p in (tmp_path / "skills").iterdir()] == ["index.yaml"]


# ===========================================================================
# Lookup / update helpers
# ===========================================================================
class TestEntryHelpers:

    def _manifest(self):
        return ResourceManifest(
            version="1.0.0",
            resources=(ManifestEntry(name="a", path="a.md"), ManifestEntry(name="b", path="b.md")),
        )

    def test_get_manifest_entry(self):
        assert get_manifest_entry(self._manifest(), "b").path == "b.md"
        assert get_manifest_entry(self._manifest(), "zzz") is None

    def test_replace_entry_in_place(self):
        manifest = self._manifest()
        updated = replace_entry(manifest, ManifestEntry(name="a", path="a.md", description="new"))

        assert updated.names() == ["a", "b"]
        assert updated.resources[0].description == "new"
        assert manifest.resources[0].description == ""

    def test_replace_entry_appends(self):
        updated = replace_entry(self._manifest(), ManifestEntry(name="c", path="c.md"))
        assert updated.names() == ["a", "b", "c"]

    def test_remove_entry(self):
        assert remove_entry(self._manifest(), "a").names() == ["b"]
