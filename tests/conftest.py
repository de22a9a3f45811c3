"""Shared fixtures for building catalogs and tiers on temporary directories."""

from pathlib import Path

import pytest

from codekit.core.catalog import Catalog
from codekit.core.frontmatter import serialize_frontmatter
from codekit.core.installer import Installer
from codekit.core.manifest import (
    empty_resource_manifest,
    empty_sources_manifest,
    replace_entry,
    save_resource_manifest,
    save_sources_manifest,
)
from codekit.core.scanner import TierScanner
from codekit.core.types import ArtifactKind, ManifestEntry, ResourcePaths
from codekit.output import get_output


def write_template(path: Path, frontmatter: dict, body: str = "Body text.") -> Path:
    """Write a markdown template with YAML frontmatter."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_frontmatter(frontmatter, body))
    return path


@pytest.fixture(autouse=True)
def reset_output():
    """Keep CLI verbosity flags from leaking between tests."""
    output = get_output()
    yield output
    output.verbosity = 0
    output.use_color = False


@pytest.fixture
def templates_dir(tmp_path):
    """An empty bundled tree with a manifest for every kind."""
    root = tmp_path / "templates"
    for kind in ArtifactKind:
        save_resource_manifest(root, kind, empty_resource_manifest())
    save_sources_manifest(root, empty_sources_manifest())
    return root


@pytest.fixture
def catalog(templates_dir):
    return Catalog(templates_dir)


@pytest.fixture
def paths(tmp_path, templates_dir):
    return ResourcePaths(
        templates_root=templates_dir,
        project_root=tmp_path / "project" / ".claude",
        global_root=tmp_path / "home" / ".claude",
    )


@pytest.fixture
def scanner(catalog, paths):
    return TierScanner(catalog, paths)


@pytest.fixture
def installer(catalog, scanner, paths):
    return Installer(catalog, scanner, paths)


@pytest.fixture
def add_bundled(catalog):
    """Return a helper that adds a template to the bundled catalog.

    The helper writes the template file (or skill directory) and records a
    manifest entry for it.
    """

    def _add(
        kind: ArtifactKind,
        name: str,
        description: str = "",
        dependencies: tuple[str, ...] = (),
        category: str | None = None,
        tags: tuple[str, ...] = (),
        files: dict[str, str] | None = None,
        frontmatter: dict | None = None,
    ) -> ManifestEntry:
        description = description or f"The {name} {kind.value}"
        data = {"name": name, "description": description}
        if category:
            data["category"] = category
        if dependencies:
            data["dependencies"] = list(dependencies)
        if frontmatter is not None:
            data = frontmatter

        if kind.is_directory:
            relative = name
            skill_dir = catalog.kind_directory(kind) / name
            write_template(skill_dir / kind.entry_file, data)
            for file_name, content in (files or {}).items():
                target = skill_dir / file_name
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
        else:
            relative = f"{name}.md"
            write_template(catalog.kind_directory(kind) / relative, data)

        entry = ManifestEntry(
            name=name,
            path=relative,
            description=description,
            category=category,
            dependencies=tuple(dependencies),
            tags=tuple(tags),
        )
        catalog.save(kind, replace_entry(catalog.manifest(kind), entry))
        return entry

    return _add
