"""Discovery of artifacts across the bundled, project and global tiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from codekit.core.catalog import Catalog
from codekit.core.errors import CodekitError
from codekit.core.frontmatter import parse_frontmatter
from codekit.core.types import Artifact, ArtifactKind, ListOptions, ResourcePaths, Tier
from codekit.output import MessageType, VerbosityLevel, message


def skill_files(directory: Path, entry_file: str = "SKILL.md") -> list[str]:
    """Relative POSIX paths of the auxiliary files in a skill directory."""
    files = [
        p.relative_to(directory).as_posix()
        for p in directory.rglob("*")
        if p.is_file()
    ]
    return sorted(f for f in files if f != entry_file)


def read_artifact(kind: ArtifactKind, path: Path, tier: Tier) -> Artifact:
    """Parse the artifact stored at *path*.

    Args:
        kind: Artifact kind
        path: Markdown file, or skill directory for skills
        tier: Tier the artifact is read from

    Returns:
        The parsed Artifact. Its name is the frontmatter ``name``, falling
        back to the file stem (or directory name for skills).

    Raises:
        OSError: If the file cannot be read
        MalformedFrontmatterError: If the frontmatter cannot be parsed
    """
    if kind.is_directory:
        document = path / kind.entry_file
        fallback_name = path.name
    else:
        document = path
        fallback_name = path.stem

    frontmatter, body = parse_frontmatter(document.read_text(encoding="utf-8"), str(document))
    files = skill_files(path, kind.entry_file) if kind.is_directory else []

    return Artifact(
        kind=kind,
        name=frontmatter.name or fallback_name,
        frontmatter=frontmatter,
        body=body,
        path=path,
        tier=tier,
        files=files,
    )


@dataclass
class ResourceListing:
    """Artifacts of one kind, split by tier."""

    bundled: list[Artifact] = field(default_factory=list)
    project: list[Artifact] = field(default_factory=list)
    global_: list[Artifact] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    installed_names: set[str] = field(default_factory=set)

    @property
    def available(self) -> list[Artifact]:
        """Bundled artifacts not installed in any scanned tier."""
        return [a for a in self.bundled if a.name not in self.installed_names]

    def to_dict(self) -> dict[str, Any]:
        return {
            "bundled": [a.to_dict() for a in self.bundled],
            "project": [a.to_dict() for a in self.project],
            "global": [a.to_dict() for a in self.global_],
            "available": [a.name for a in self.available],
            "installed": sorted(self.installed_names),
            "warnings": list(self.warnings),
        }


class TierScanner:
    """Reads artifacts out of each tier.

    Problems with individual artifacts never abort a scan; they are logged
    and collected in :attr:`warnings`.
    """

    def __init__(self, catalog: Catalog, paths: ResourcePaths):
        self.catalog = catalog
        self.paths = paths
        self.warnings: list[str] = []

    def _warn(self, text: str) -> None:
        self.warnings.append(text)
        message(f"Warning: {text}", MessageType.WARNING, VerbosityLevel.VERBOSE)

    def scan(self, kind: ArtifactKind, tier: Tier) -> list[Artifact]:
        """Return the valid artifacts of *kind* in *tier*."""
        if tier is Tier.BUNDLED:
            return self._scan_bundled(kind)
        return self._scan_directory(kind, tier)

    def _scan_bundled(self, kind: ArtifactKind) -> list[Artifact]:
        artifacts = []
        for entry in self.catalog.manifest(kind).resources:
            path = self.catalog.artifact_path(kind, entry)
            try:
                artifact = read_artifact(kind, path, Tier.BUNDLED)
            except (OSError, CodekitError) as e:
                self._warn(f"Skipping bundled {kind.value} '{entry.name}': {e}")
                continue

            if artifact.frontmatter.name and artifact.frontmatter.name != entry.name:
                self._warn(
                    f"Skipping bundled {kind.value} '{entry.name}': "
                    f"frontmatter name is '{artifact.frontmatter.name}'"
                )
                continue

            artifact.name = entry.name
            artifact.entry = entry
            artifacts.append(artifact)
        return artifacts

    def _scan_directory(self, kind: ArtifactKind, tier: Tier) -> list[Artifact]:
        directory = self.paths.resource_directory(kind, tier)
        if not directory.is_dir():
            message(f"No {tier.value} {kind.subdir} directory at {directory}", MessageType.DEBUG, VerbosityLevel.DEBUG)
            return []

        if kind.is_directory:
            candidates = sorted(p for p in directory.iterdir() if p.is_dir() and (p / kind.entry_file).is_file())
        else:
            candidates = sorted(p for p in directory.glob("*.md") if p.is_file())

        artifacts = []
        for path in candidates:
            try:
                artifacts.append(read_artifact(kind, path, tier))
            except (OSError, CodekitError) as e:
                self._warn(f"Skipping {tier.value} {kind.value} at {path}: {e}")
        message(
            f"Found {len(artifacts)} {tier.value} {kind.subdir} in {directory}",
            MessageType.DEBUG,
            VerbosityLevel.DEBUG,
        )
        return artifacts

    def list_artifacts(self, kind: ArtifactKind, options: ListOptions | None = None) -> ResourceListing:
        """Scan every tier and apply the listing filters.

        Args:
            kind: Artifact kind to list
            options: Filters; defaults to listing everything

        Returns:
            ResourceListing with installed names computed before filtering
        """
        options = options or ListOptions()
        first_warning = len(self.warnings)

        bundled = self.scan(kind, Tier.BUNDLED)
        project = [] if options.global_only else self.scan(kind, Tier.PROJECT)
        global_ = self.scan(kind, Tier.GLOBAL)
        installed_names = {a.name for a in project + global_}

        if options.category:
            wanted = options.category.lower()

            def matches(artifact: Artifact) -> bool:
                return (artifact.category or "").lower() == wanted

            bundled = [a for a in bundled if matches(a)]
            project = [a for a in project if matches(a)]
            global_ = [a for a in global_ if matches(a)]

        if options.installed_only:
            bundled = []
        elif options.available_only:
            bundled = [a for a in bundled if a.name not in installed_names]
            project = []
            global_ = []

        return ResourceListing(
            bundled=bundled,
            project=project,
            global_=global_,
            warnings=self.warnings[first_warning:],
            installed_names=installed_names,
        )

    def find_installed(self, kind: ArtifactKind, name: str, tier: Tier | None = None) -> Artifact | None:
        """Return the installed artifact named *name*, whatever its file is called.

        Args:
            kind: Artifact kind
            name: Artifact name as reported by ``list``
            tier: Tier to look in (project then global when None)

        Returns:
            The first matching Artifact, or None
        """
        tiers = [tier] if tier is not None else [Tier.PROJECT, Tier.GLOBAL]
        for candidate in tiers:
            for artifact in self._scan_directory(kind, candidate):
                if artifact.name == name:
                    return artifact
        return None

    def is_installed(self, kind: ArtifactKind, name: str, tier: Tier | None = None) -> bool:
        """Whether *name* is present in *tier* (or in project or global)."""
        return self.find_installed(kind, name, tier) is not None
