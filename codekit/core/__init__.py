"""Core resource resolution and sync machinery for codekit."""

from .catalog import Catalog
from .errors import (
    AlreadyInstalledError,
    ArtifactNotFoundError,
    CodekitError,
    CyclicDependencyError,
    DuplicateSourceError,
    InvalidArtifactError,
    InvalidManifestError,
    MalformedFrontmatterError,
    ManifestNotFoundError,
    ManifestVersionError,
    NotInstalledError,
    SourceFetchError,
    SourceNotFoundError,
    UnresolvedDependencyError,
)
from .frontmatter import Frontmatter, parse_frontmatter, serialize_frontmatter, validate_frontmatter
from .installer import Installer, InstallResult, RemoveResult
from .manifest import (
    content_hash,
    get_manifest_entry,
    load_resource_manifest,
    load_sources_manifest,
    remove_entry,
    replace_entry,
    save_resource_manifest,
    save_sources_manifest,
)
from .resolver import resolve
from .scanner import ResourceListing, TierScanner, read_artifact
from .types import (
    Artifact,
    ArtifactKind,
    InstallOptions,
    ListOptions,
    ManifestEntry,
    RemoveOptions,
    ResourceManifest,
    ResourcePaths,
    SourceConfig,
    SourcesManifest,
    SyncResult,
    Tier,
)

__all__ = [
    "AlreadyInstalledError",
    "Artifact",
    "ArtifactKind",
    "ArtifactNotFoundError",
    "Catalog",
    "CodekitError",
    "CyclicDependencyError",
    "DuplicateSourceError",
    "Frontmatter",
    "InstallOptions",
    "InstallResult",
    "Installer",
    "InvalidArtifactError",
    "InvalidManifestError",
    "ListOptions",
    "MalformedFrontmatterError",
    "ManifestEntry",
    "ManifestNotFoundError",
    "ManifestVersionError",
    "NotInstalledError",
    "RemoveOptions",
    "RemoveResult",
    "ResourceListing",
    "ResourceManifest",
    "ResourcePaths",
    "SourceConfig",
    "SourceFetchError",
    "SourceNotFoundError",
    "SourcesManifest",
    "SyncResult",
    "Tier",
    "TierScanner",
    "UnresolvedDependencyError",
    "content_hash",
    "get_manifest_entry",
    "load_resource_manifest",
    "load_sources_manifest",
    "parse_frontmatter",
    "read_artifact",
    "remove_entry",
    "replace_entry",
    "resolve",
    "save_resource_manifest",
    "save_sources_manifest",
    "serialize_frontmatter",
    "validate_frontmatter",
]
