"""Tests for core/sync.py - Importing artifacts from external sources."""

import shutil

import pytest

from conftest import write_template

from codekit.core.errors import SourceFetchError
from codekit.core.manifest import get_manifest_entry, replace_entry
from codekit.core.sync import (
    SyncEngine,
    display_name_for,
    filtered_files,
    find_candidates,
    is_excluded,
    is_safe_name,
    map_category,
)
from codekit.core.types import ArtifactKind, ManifestEntry, SourceConfig


def write_skill(root, name, frontmatter=None, body="Body text.", files=None):
    """Write a skill directory under *root*."""
    skill = root / name
    write_template(skill / "SKILL.md", frontmatter or {"name": skill.name, "description": f"{skill.name} skill"}, body)
    for relative, content in (files or {}).items():
        target = skill / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    return skill


@pytest.fixture
def upstream(tmp_path):
    """An upstream repository with a skills/ subdirectory."""
    root = tmp_path / "upstream"
    (root / "skills").mkdir(parents=True)
    return root


@pytest.fixture
def engine(catalog, tmp_path):
    return SyncEngine(catalog, tmp_path / "sources")


def _source(upstream, **kwargs):
    return SourceConfig(name=kwargs.pop("name", "acme"), url=str(upstream), **kwargs)


# ===========================================================================
# Helpers
# ===========================================================================
class TestHelpers:

    def test_display_name(self):
        assert display_name_for("pdf-tools") == "Pdf Tools"
        assert display_name_for("api") == "Api"

    def test_map_category_translates_raw_category(self):
        source = SourceConfig(name="s", url="u", category_mapping={"frontend": "ui"})
        assert map_category(source, "x", "frontend") == "ui"
        assert map_category(source, "x", "backend") == "backend"

    def test_map_category_by_name_then_default(self):
        source = SourceConfig(name="s", url="u", category_mapping={"pdf-tools": "docs"}, default_category="misc")
        assert map_category(source, "pdf-tools", None) == "docs"
        assert map_category(source, "other", None) == "misc"

    @pytest.mark.parametrize(
        "path, patterns, expected",
        [
            ("legacy/old", ("legacy",), True),
            ("experimental-x", ("experimental-*",), True),
            ("pdf-tools", ("legacy",), False),
            ("pdf-tools", (), False),
        ],
    )
    def test_is_excluded(self, path, patterns, expected):
        assert is_excluded(path, patterns) is expected

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("pdf-tools", True),
            ("v1.2", True),
            ("", False),
            ("..", False),
            ("../../escaped", False),
            ("nested/writer", False),
            ("nested\\writer", False),
        ],
    )
    def test_is_safe_name(self, name, expected):
        assert is_safe_name(name) is expected

    def test_filtered_files(self, tmp_path):
        skill = write_skill(tmp_path, "pdf-tools", files={
            "README.md": "readme",
            "metadata.json": "{}",
            "bundle.zip": "zip",
            "agents/helper.md": "agent",
            "scripts/run.py": "print()",
        })
        assert filtered_files(skill) == ["SKILL.md", "scripts/run.py"]


class TestFindCandidates:

    def test_nested_skills(self, upstream):
        write_skill(upstream / "skills", "pdf-tools")
        write_skill(upstream / "skills" / "design", "web-design")
        (upstream / "skills" / "empty").mkdir()

        candidates = find_candidates(_source(upstream), upstream / "skills")
        assert [p.name for p in candidates] == ["web-design", "pdf-tools"]

    def test_skill_inside_agents_directory_ignored(self, upstream):
        write_skill(upstream / "skills" / "agents", "hidden")
        assert find_candidates(_source(upstream), upstream / "skills") == []

    def test_exclusion(self, upstream):
        write_skill(upstream / "skills", "pdf-tools")
        write_skill(upstream / "skills" / "legacy", "old-skill")

        candidates = find_candidates(_source(upstream, exclude=("legacy",)), upstream / "skills")
        assert [p.name for p in candidates] == ["pdf-tools"]

    def test_agent_files(self, upstream):
        agents = upstream / "agents"
        write_template(agents / "writer.md", {"name": "writer", "description": "d"})
        (agents / "README.md").write_text("readme")
        (agents / "notes.txt").write_text("notes")

        source = _source(upstream, kind=ArtifactKind.AGENT, subdirectory="agents")
        assert [p.name for p in find_candidates(source, agents)] == ["writer.md"]


# ===========================================================================
# SyncEngine.sync
# ===========================================================================
class TestSync:

    def test_first_sync_adds_everything(self, engine, catalog, upstream):
        write_skill(upstream / "skills", "pdf-tools", files={"scripts/run.py": "print()", "README.md": "r"})
        write_skill(upstream / "skills", "web-design")

        result = engine.sync(_source(upstream))

        assert result.added == ("pdf-tools", "web-design")
        assert result.total == 2
        entry = catalog.find(ArtifactKind.SKILL, "pdf-tools")
        assert entry.source == "acme"
        assert entry.display_name == "Pdf Tools"
        assert entry.hash
        copied = catalog.kind_directory(ArtifactKind.SKILL) / "pdf-tools"
        assert (copied / "scripts" / "run.py").read_text() == "print()"
        assert not (copied / "README.md").exists()

    def test_second_sync_skips_everything(self, engine, catalog, upstream):
        write_skill(upstream / "skills", "pdf-tools")
        write_skill(upstream / "skills", "web-design")
        engine.sync(_source(upstream))
        manifest = catalog.manifest(ArtifactKind.SKILL)

        result = engine.sync(_source(upstream))

        assert result.added == result.updated == result.removed == ()
        assert result.skipped == ("pdf-tools", "web-design")
        assert catalog.manifest(ArtifactKind.SKILL) == manifest

    def test_changed_content_is_updated(self, engine, catalog, upstream):
        write_skill(upstream / "skills", "pdf-tools")
        engine.sync(_source(upstream))
        write_skill(upstream / "skills", "pdf-tools", body="New body")

        result = engine.sync(_source(upstream))

        assert result.updated == ("pdf-tools",)
        copied = catalog.kind_directory(ArtifactKind.SKILL) / "pdf-tools" / "SKILL.md"
        assert "New body" in copied.read_text()

    def test_category_mapping(self, engine, catalog, upstream):
        write_skill(upstream / "skills", "web-design", {
            "name": "web-design", "description": "d", "metadata": {"category": "frontend"},
        })

        engine.sync(_source(upstream, category_mapping={"frontend": "ui"}))

        assert catalog.find(ArtifactKind.SKILL, "web-design").category == "ui"

    def test_removed_upstream(self, engine, catalog, upstream):
        write_skill(upstream / "skills", "pdf-tools")
        write_skill(upstream / "skills", "web-design")
        engine.sync(_source(upstream))

        shutil.rmtree(upstream / "skills" / "web-design")
        result = engine.sync(_source(upstream))

        assert result.removed == ("web-design",)
        assert catalog.find(ArtifactKind.SKILL, "web-design") is None
        assert not (catalog.kind_directory(ArtifactKind.SKILL) / "web-design").exists()

    def test_manual_entries_with_other_names_untouched(self, engine, catalog, upstream, add_bundled):
        add_bundled(ArtifactKind.SKILL, "curated")
        write_skill(upstream / "skills", "pdf-tools")

        engine.sync(_source(upstream))

        assert catalog.manifest(ArtifactKind.SKILL).names() == ["curated", "pdf-tools"]
        assert catalog.find(ArtifactKind.SKILL, "curated").source is None

    def test_curated_entry_with_same_name_is_taken_over(self, engine, catalog, upstream, add_bundled):
        add_bundled(ArtifactKind.SKILL, "curated", description="hand written")
        write_skill(upstream / "skills", "curated", {"name": "curated", "description": "upstream"})

        result = engine.sync(_source(upstream, name="ext"))

        assert result.updated == ("curated",)
        entry = catalog.find(ArtifactKind.SKILL, "curated")
        assert entry.source == "ext"
        assert entry.description == "upstream"
        assert "upstream" in (catalog.kind_directory(ArtifactKind.SKILL) / "curated" / "SKILL.md").read_text()

    def test_invalid_candidate_fails_alone(self, engine, catalog, upstream):
        write_skill(upstream / "skills", "pdf-tools")
        write_skill(upstream / "skills", "bad-skill", {"name": "bad-skill"})

        result = engine.sync(_source(upstream))

        assert result.added == ("pdf-tools",)
        [(candidate, reason)] = result.failed
        assert candidate == "bad-skill"
        assert "description" in reason
        assert result.total == 1

    def test_broken_candidate_keeps_existing_entry(self, engine, catalog, upstream):
        write_skill(upstream / "skills", "pdf-tools")
        engine.sync(_source(upstream))
        (upstream / "skills" / "pdf-tools" / "SKILL.md").write_text("no frontmatter")

        result = engine.sync(_source(upstream))

        assert result.removed == ()
        assert len(result.failed) == 1
        assert catalog.find(ArtifactKind.SKILL, "pdf-tools") is not None

    def test_name_owned_by_other_source(self, engine, catalog, upstream):
        entry = ManifestEntry(name="pdf-tools", path="pdf-tools", source="other")
        catalog.save(ArtifactKind.SKILL, replace_entry(catalog.manifest(ArtifactKind.SKILL), entry))
        write_skill(upstream / "skills", "pdf-tools")

        result = engine.sync(_source(upstream))

        assert result.added == ()
        assert "other" in result.failed[0][1]
        assert get_manifest_entry(catalog.manifest(ArtifactKind.SKILL), "pdf-tools").source == "other"

    def test_exclude(self, engine, catalog, upstream):
        write_skill(upstream / "skills", "pdf-tools")
        write_skill(upstream / "skills", "experimental-thing")

        result = engine.sync(_source(upstream, exclude=("experimental-*",)))

        assert result.added == ("pdf-tools",)
        assert catalog.manifest(ArtifactKind.SKILL).names() == ["pdf-tools"]

    def test_dry_run_changes_nothing(self, engine, catalog, upstream):
        write_skill(upstream / "skills", "pdf-tools")

        result = engine.sync(_source(upstream), dry_run=True)

        assert result.dry_run
        assert result.added == ("pdf-tools",)
        assert catalog.manifest(ArtifactKind.SKILL).resources == ()
        assert not (catalog.kind_directory(ArtifactKind.SKILL) / "pdf-tools").exists()

    def test_missing_subdirectory(self, engine, catalog, upstream):
        with pytest.raises(SourceFetchError, match="subdirectory 'prompts' not found"):
            engine.sync(_source(upstream, subdirectory="prompts"))
        assert catalog.manifest(ArtifactKind.SKILL).resources == ()

    def test_agent_source(self, engine, catalog, upstream):
        write_template(upstream / "agents" / "writer.md", {"name": "writer", "description": "Writes"})

        result = engine.sync(_source(upstream, kind=ArtifactKind.AGENT, subdirectory="agents"))

        assert result.added == ("writer",)
        entry = catalog.find(ArtifactKind.AGENT, "writer")
        assert entry.path == "writer.md"
        assert (catalog.kind_directory(ArtifactKind.AGENT) / "writer.md").is_file()

    def test_name_escaping_catalog_fails(self, engine, catalog, upstream, tmp_path):
        write_template(upstream / "agents" / "writer.md", {"name": "writer", "description": "Writes"})
        write_template(upstream / "agents" / "sneaky.md", {"name": "../../escaped", "description": "Escapes"})

        result = engine.sync(_source(upstream, kind=ArtifactKind.AGENT, subdirectory="agents"))

        assert result.added == ("writer",)
        [(candidate, reason)] = result.failed
        assert candidate == "sneaky.md"
        assert "not a valid file name" in reason
        assert catalog.manifest(ArtifactKind.AGENT).names() == ["writer"]
        assert not (tmp_path / "escaped.md").exists()

    def test_uses_repo_factory(self, catalog, tmp_path, upstream):
        write_skill(upstream / "skills", "pdf-tools")
        calls = []

        class FakeRepo:
            def __init__(self, source, sources_dir):
                calls.append((source.name, sources_dir))

            def fetch(self, timeout):
                calls.append(timeout)
                return upstream

        engine = SyncEngine(catalog, tmp_path / "sources", timeout=5, repo_factory=FakeRepo)
        engine.sync(SourceConfig(name="remote", url="https://github.com/acme/skills.git"))

        assert calls == [("remote", tmp_path / "sources"), 5]
        assert catalog.find(ArtifactKind.SKILL, "pdf-tools").source == "remote"


# ===========================================================================
# SyncEngine.sync_all
# ===========================================================================
class TestSyncAll:

    def test_failing_source_does_not_stop_others(self, engine, catalog, upstream, tmp_path):
        write_skill(upstream / "skills", "pdf-tools")
        sources = [
            SourceConfig(name="gone", url=str(tmp_path / "missing")),
            _source(upstream),
        ]

        report = engine.sync_all(sources)

        assert not report.ok
        assert list(report.errors) == ["gone"]
        assert report.results["acme"].added == ("pdf-tools",)
        assert report.to_dict()["errors"]["gone"]["timedOut"] is False
