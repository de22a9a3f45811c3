"""Domain types shared by the codekit core."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from codekit.core.frontmatter import Frontmatter


class ArtifactKind(Enum):
    """The three kinds of managed artifacts."""

    AGENT = "agent"
    SKILL = "skill"
    COMMAND = "command"

    @property
    def subdir(self) -> str:
        """Directory name used for this kind in every tier."""
        return f"{self.value}s"

    @property
    def is_directory(self) -> bool:
        """Skills are directories; agents and commands are single files."""
        return self is ArtifactKind.SKILL

    @property
    def entry_file(self) -> str | None:
        return "SKILL.md" if self.is_directory else None

    @property
    def required_keys(self) -> tuple[str, ...]:
        if self is ArtifactKind.COMMAND:
            return ("description",)
        return ("name", "description")

    @classmethod
    def from_name(cls, value: str) -> ArtifactKind:
        """Parse ``agent``/``agents`` style names."""
        normalized = value.lower().rstrip("s")
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValueError(f"Unknown artifact kind: {value}")


class Tier(Enum):
    """Where an artifact lives."""

    BUNDLED = "bundled"
    PROJECT = "project"
    GLOBAL = "global"

    @property
    def writable(self) -> bool:
        return self is not Tier.BUNDLED


@dataclass(frozen=True)
class ResourcePaths:
    """Root directories of the three tiers."""

    templates_root: Path
    project_root: Path
    global_root: Path

    def tier_root(self, tier: Tier) -> Path:
        if tier is Tier.BUNDLED:
            return self.templates_root
        if tier is Tier.PROJECT:
            return self.project_root
        return self.global_root

    def resource_directory(self, kind: ArtifactKind, tier: Tier) -> Path:
        """Directory holding artifacts of *kind* in *tier*."""
        return self.tier_root(tier) / kind.subdir

    def artifact_location(self, kind: ArtifactKind, tier: Tier, name: str) -> Path:
        """Where an installed artifact named *name* lives in *tier*."""
        directory = self.resource_directory(kind, tier)
        if kind.is_directory:
            return directory / name
        return directory / f"{name}.md"


@dataclass
class Artifact:
    """A parsed agent, skill or command."""

    kind: ArtifactKind
    name: str
    frontmatter: Frontmatter
    body: str
    path: Path
    tier: Tier
    files: list[str] = field(default_factory=list)
    entry: ManifestEntry | None = None

    @property
    def category(self) -> str | None:
        if self.entry is not None and self.entry.category:
            return self.entry.category
        return self.frontmatter.category

    @property
    def description(self) -> str:
        return self.frontmatter.description or ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "tier": self.tier.value,
            "path": str(self.path),
            "frontmatter": self.frontmatter.to_dict(),
        }
        if self.files:
            data["files"] = list(self.files)
        return data


def _optional_str(value: Any) -> str | None:
    # YAML turns values like 2024 or yes into numbers and booleans
    return None if value is None else str(value)


@dataclass(frozen=True)
class ManifestEntry:
    """One bundled artifact as recorded in the catalog manifest."""

    name: str
    path: str
    description: str = ""
    display_name: str | None = None
    category: str | None = None
    dependencies: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    source: str | None = None
    hash: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ManifestEntry:
        return cls(
            name=data["name"],
            path=data["path"],
            description=str(data.get("description") or ""),
            display_name=_optional_str(data.get("displayName")),
            category=_optional_str(data.get("category")),
            dependencies=tuple(str(d) for d in data.get("dependencies") or ()),
            tags=tuple(str(t) for t in data.get("tags") or ()),
            source=data.get("source"),
            hash=data.get("hash"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "path": self.path}
        if self.display_name:
            data["displayName"] = self.display_name
        if self.category:
            data["category"] = self.category
        data["description"] = self.description
        data["dependencies"] = list(self.dependencies)
        data["tags"] = list(self.tags)
        if self.source:
            data["source"] = self.source
        if self.hash:
            data["hash"] = self.hash
        return data


@dataclass(frozen=True)
class ResourceManifest:
    """Versioned catalog of bundled artifacts of one kind."""

    version: str
    resources: tuple[ManifestEntry, ...] = ()

    def names(self) -> list[str]:
        return [entry.name for entry in self.resources]

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "resources": [entry.to_dict() for entry in self.resources],
        }


@dataclass(frozen=True)
class SourceConfig:
    """An external repository that artifacts are synced from."""

    name: str
    url: str
    branch: str = "main"
    subdirectory: str = "skills"
    kind: ArtifactKind = ArtifactKind.SKILL
    exclude: tuple[str, ...] = ()
    category_mapping: dict[str, str] = field(default_factory=dict)
    default_category: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SourceConfig:
        return cls(
            name=data["name"],
            url=data["url"],
            branch=data.get("branch") or "main",
            subdirectory=data.get("skillsDir") or data.get("subdirectory") or "skills",
            kind=ArtifactKind.from_name(data.get("kind") or "skill"),
            exclude=tuple(data.get("exclude") or ()),
            category_mapping=dict(data.get("categoryMapping") or {}),
            default_category=data.get("defaultCategory"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "url": self.url,
            "branch": self.branch,
            "subdirectory": self.subdirectory,
            "kind": self.kind.value,
            "exclude": list(self.exclude),
            "categoryMapping": dict(self.category_mapping),
        }
        if self.default_category:
            data["defaultCategory"] = self.default_category
        return data


@dataclass(frozen=True)
class SourcesManifest:
    """Versioned list of configured external sources."""

    version: str
    sources: tuple[SourceConfig, ...] = ()

    def get(self, name: str) -> SourceConfig | None:
        for source in self.sources:
            if source.name == name:
                return source
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "sources": [source.to_dict() for source in self.sources],
        }


@dataclass(frozen=True)
class SyncResult:
    """Outcome of syncing one source. Never persisted."""

    source: str
    added: tuple[str, ...] = ()
    updated: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    failed: tuple[tuple[str, str], ...] = ()
    dry_run: bool = False

    @property
    def total(self) -> int:
        """Number of candidates found upstream that parsed successfully."""
        return len(self.added) + len(self.updated) + len(self.skipped)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "added": list(self.added),
            "updated": list(self.updated),
            "skipped": list(self.skipped),
            "removed": list(self.removed),
            "failed": [{"candidate": c, "reason": r} for c, r in self.failed],
            "total": self.total,
            "dryRun": self.dry_run,
        }


# ------------------------------------------------------------------
# Option objects passed in by the CLI
# ------------------------------------------------------------------
@dataclass(frozen=True)
class ListOptions:
    category: str | None = None
    installed_only: bool = False
    available_only: bool = False
    global_only: bool = False


@dataclass(frozen=True)
class InstallOptions:
    force: bool = False
    dry_run: bool = False
    skip_deps: bool = False


@dataclass(frozen=True)
class RemoveOptions:
    force: bool = False
    dry_run: bool = False
