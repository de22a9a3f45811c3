"""Manifest store for the bundled template catalog.

Each kind directory of the bundled tree holds an ``index.yaml`` listing
the templates it ships, and the tree root holds ``sources.yaml`` listing
the external repositories templates are synced from. These files are
only ever written through the atomic save helpers in this module.
"""

from __future__ import annotations

import hashlib
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from codekit.core.errors import (
    InvalidManifestError,
    ManifestNotFoundError,
    ManifestVersionError,
)
from codekit.core.types import (
    ArtifactKind,
    ManifestEntry,
    ResourceManifest,
    SourceConfig,
    SourcesManifest,
)
from codekit.output import MessageType, VerbosityLevel, message

MANIFEST_VERSION = "1.0.0"
SUPPORTED_MAJOR_VERSION = "1"
INDEX_FILE = "index.yaml"
SOURCES_FILE = "sources.yaml"


def _file_hash(path: Path) -> str:
    """Compute a SHA-256 hex digest for a file."""
    return hashlib.sha256(path.read_bytes()).hexdigest()


def content_hash(path: Path, files: Iterable[str] | None = None) -> str:
    """Hash a template file or a template directory.

    Directories are hashed over their sorted relative POSIX paths and the
    bytes of each file, so renames change the digest as well as edits.

    Args:
        path: File or directory to hash
        files: Relative file paths to include for a directory
               (defaults to every file under *path*)

    Returns:
        Hex digest string
    """
    if path.is_file():
        return _file_hash(path)

    if files is None:
        files = [p.relative_to(path).as_posix() for p in path.rglob("*") if p.is_file()]

    digest = hashlib.sha256()
    for relative in sorted(files):
        digest.update(relative.encode("utf-8"))
        digest.update(b"\0")
        digest.update((path / relative).read_bytes())
        digest.update(b"\0")
    return digest.hexdigest()


# ------------------------------------------------------------------
# Path helpers
# ------------------------------------------------------------------
def resource_manifest_path(templates_dir: Path, kind: ArtifactKind) -> Path:
    """Return the path of the catalog file for *kind*."""
    return templates_dir / kind.subdir / INDEX_FILE


def sources_manifest_path(templates_dir: Path) -> Path:
    """Return the path of the sources file."""
    return templates_dir / SOURCES_FILE


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------
def _check_version(path: Path, data: dict[str, Any]) -> str:
    version = str(data.get("version", "")).strip()
    if version.split(".")[0] != SUPPORTED_MAJOR_VERSION:
        raise ManifestVersionError(path, data.get("version"))
    return version


def _read_document(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ManifestNotFoundError(path)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidManifestError(path, [f"not valid YAML: {e}"]) from e

    if not isinstance(data, dict):
        raise InvalidManifestError(path, ["top level must be a mapping"])
    return data


def _validate_entries(items: Any, key: str, required: tuple[str, ...]) -> list[str]:
    """Collect structural problems in the list stored under *key*."""
    errors: list[str] = []
    if items is None:
        return errors
    if not isinstance(items, list):
        return [f"'{key}' must be a list"]

    seen: set[str] = set()
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            errors.append(f"{key}[{index}] must be a mapping")
            continue
        for field_name in required:
            value = item.get(field_name)
            if not value or not isinstance(value, str):
                errors.append(f"{key}[{index}] is missing '{field_name}'")
        name = item.get("name")
        if isinstance(name, str) and name:
            if name in seen:
                errors.append(f"duplicate name '{name}'")
            seen.add(name)
        for list_field in ("dependencies", "tags", "exclude"):
            if list_field in item and not isinstance(item[list_field], (list, type(None))):
                errors.append(f"{key}[{index}].{list_field} must be a list")
    return errors


# ------------------------------------------------------------------
# Read
# ------------------------------------------------------------------
def load_resource_manifest(templates_dir: Path, kind: ArtifactKind) -> ResourceManifest:
    """Load the catalog manifest for *kind*.

    Args:
        templates_dir: Root of the bundled tree
        kind: Artifact kind

    Returns:
        The parsed ResourceManifest

    Raises:
        ManifestNotFoundError: If the file does not exist
        ManifestVersionError: If the version is not supported
        InvalidManifestError: If the document is structurally invalid
    """
    path = resource_manifest_path(templates_dir, kind)
    data = _read_document(path)
    version = _check_version(path, data)

    items = data.get("resources")
    errors = _validate_entries(items, "resources", ("name", "path"))
    if errors:
        raise InvalidManifestError(path, errors)

    entries = tuple(ManifestEntry.from_dict(item) for item in items or [])
    message(f"Loaded {len(entries)} {kind.subdir} from {path}", MessageType.DEBUG, VerbosityLevel.DEBUG)
    return ResourceManifest(version=version, resources=entries)


def load_sources_manifest(templates_dir: Path) -> SourcesManifest:
    """Load the sources manifest.

    Raises:
        ManifestNotFoundError: If the file does not exist
        ManifestVersionError: If the version is not supported
        InvalidManifestError: If the document is structurally invalid
    """
    path = sources_manifest_path(templates_dir)
    data = _read_document(path)
    version = _check_version(path, data)

    items = data.get("sources")
    errors = _validate_entries(items, "sources", ("name", "url"))
    sources: list[SourceConfig] = []
    for index, item in enumerate(items or []):
        if not isinstance(item, dict) or not item.get("name") or not item.get("url"):
            continue
        try:
            sources.append(SourceConfig.from_dict(item))
        except ValueError as e:
            errors.append(f"sources[{index}]: {e}")
    if errors:
        raise InvalidManifestError(path, errors)

    return SourcesManifest(version=version, sources=tuple(sources))


# ------------------------------------------------------------------
# Write
# ------------------------------------------------------------------
def _atomic_write_yaml(path: Path, data: dict[str, Any]) -> None:
    """Write *data* to a temp file beside *path*, then swap it in."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            yaml.safe_dump(data, handle, default_flow_style=False, sort_keys=False, allow_unicode=True)
        os.replace(temp_path, path)
        temp_path = None
    finally:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)

    message(f"Manifest written to {path}", MessageType.DEBUG, VerbosityLevel.DEBUG)


def save_resource_manifest(templates_dir: Path, kind: ArtifactKind, manifest: ResourceManifest) -> None:
    """Atomically persist the catalog manifest for *kind*."""
    _atomic_write_yaml(resource_manifest_path(templates_dir, kind), manifest.to_dict())


def save_sources_manifest(templates_dir: Path, manifest: SourcesManifest) -> None:
    """Atomically persist the sources manifest."""
    _atomic_write_yaml(sources_manifest_path(templates_dir), manifest.to_dict())


def empty_resource_manifest() -> ResourceManifest:
    return ResourceManifest(version=MANIFEST_VERSION)


def empty_sources_manifest() -> SourcesManifest:
    return SourcesManifest(version=MANIFEST_VERSION)


# ------------------------------------------------------------------
# Lookup / update helpers
# ------------------------------------------------------------------
def get_manifest_entry(manifest: ResourceManifest, name: str) -> ManifestEntry | None:
    """Find a manifest entry by name.

    Returns:
        The entry, or ``None`` if not found
    """
    for entry in manifest.resources:
        if entry.name == name:
            return entry
    return None


def replace_entry(manifest: ResourceManifest, entry: ManifestEntry) -> ResourceManifest:
    """Return a new manifest with *entry* replacing the one of the same name.

    The entry is appended when no entry of that name exists.
    """
    resources = list(manifest.resources)
    for index, existing in enumerate(resources):
        if existing.name == entry.name:
            resources[index] = entry
            break
    else:
        resources.append(entry)
    return ResourceManifest(version=manifest.version, resources=tuple(resources))


def remove_entry(manifest: ResourceManifest, name: str) -> ResourceManifest:
    """Return a new manifest without the entry named *name*."""
    resources = tuple(entry for entry in manifest.resources if entry.name != name)
    return ResourceManifest(version=manifest.version, resources=resources)
