"""Loaded-once handle over the bundled template tree."""

from __future__ import annotations

import difflib
from pathlib import Path

from codekit.core.manifest import (
    get_manifest_entry,
    load_resource_manifest,
    save_resource_manifest,
)
from codekit.core.types import ArtifactKind, ManifestEntry, ResourceManifest
from codekit.output import MessageType, VerbosityLevel, message


class Catalog:
    """The bundled catalog of agents, skills and commands.

    Manifests are read from disk on first use and cached for the lifetime
    of the handle. Tests can pass *manifests* to skip the disk entirely.
    """

    def __init__(
        self,
        templates_dir: Path,
        manifests: dict[ArtifactKind, ResourceManifest] | None = None,
    ):
        self.templates_dir = Path(templates_dir)
        self._manifests: dict[ArtifactKind, ResourceManifest] = dict(manifests or {})

    def __repr__(self) -> str:
        return f"Catalog(templates_dir={str(self.templates_dir)!r})"

    def manifest(self, kind: ArtifactKind) -> ResourceManifest:
        """Return the manifest for *kind*, loading it on first access."""
        if kind not in self._manifests:
            self._manifests[kind] = load_resource_manifest(self.templates_dir, kind)
        return self._manifests[kind]

    def save(self, kind: ArtifactKind, manifest: ResourceManifest) -> None:
        """Persist *manifest* and make it the cached copy."""
        save_resource_manifest(self.templates_dir, kind, manifest)
        self._manifests[kind] = manifest

    def kind_directory(self, kind: ArtifactKind) -> Path:
        return self.templates_dir / kind.subdir

    def artifact_path(self, kind: ArtifactKind, entry: ManifestEntry) -> Path:
        """Absolute path of the file (or skill directory) behind *entry*."""
        path = self.kind_directory(kind) / entry.path
        if kind.is_directory and path.name == kind.entry_file:
            return path.parent
        return path

    def find(self, kind: ArtifactKind, name: str) -> ManifestEntry | None:
        return get_manifest_entry(self.manifest(kind), name)

    def search(self, kind: ArtifactKind, query: str) -> list[ManifestEntry]:
        """Case-insensitive search over names, descriptions and tags.

        Args:
            kind: Artifact kind to search
            query: Text to look for

        Returns:
            Matching entries in manifest order
        """
        needle = query.lower()
        matches = []
        for entry in self.manifest(kind).resources:
            haystack = [entry.name, entry.description, entry.display_name or "", *entry.tags]
            if any(needle in value.lower() for value in haystack):
                matches.append(entry)
        message(
            f"Search for '{query}' matched {len(matches)} {kind.subdir}",
            MessageType.DEBUG,
            VerbosityLevel.DEBUG,
        )
        return matches

    def categories(self, kind: ArtifactKind) -> list[str]:
        """Sorted distinct categories used by *kind*."""
        return sorted({entry.category for entry in self.manifest(kind).resources if entry.category})

    def suggest(self, kind: ArtifactKind, name: str, limit: int = 3) -> list[str]:
        """Names close to *name*, best match first."""
        names = self.manifest(kind).names()
        lowered = name.lower()
        containing = [n for n in names if lowered in n.lower() or n.lower() in lowered]
        close = difflib.get_close_matches(name, names, n=limit, cutoff=0.6)
        suggestions: list[str] = []
        for candidate in close + containing:
            if candidate not in suggestions and candidate != name:
                suggestions.append(candidate)
        return suggestions[:limit]
