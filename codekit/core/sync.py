"""Importing artifacts from external sources into the bundled catalog.

A sync fetches a source, finds the artifacts under its subdirectory, and
diffs them against the catalog manifest by name. Added and updated
artifacts are copied into the bundled tree and their entries are tagged
with the source name; entries the source no longer provides are removed.
Manually curated entries (those without a source) are never removed, but
an upstream artifact with the same name replaces one and takes it over.
Upstream names that are not a single file name are rejected.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import Any
from uuid import uuid4

from codekit.core.catalog import Catalog
from codekit.core.errors import CodekitError, ManifestNotFoundError, SourceFetchError
from codekit.core.frontmatter import Frontmatter, validate_frontmatter
from codekit.core.manifest import (
    content_hash,
    empty_resource_manifest,
    get_manifest_entry,
    remove_entry,
    replace_entry,
)
from codekit.core.scanner import read_artifact
from codekit.core.types import (
    ArtifactKind,
    ManifestEntry,
    ResourceManifest,
    SourceConfig,
    SyncResult,
    Tier,
)
from codekit.output import MessageType, VerbosityLevel, message
from codekit.repos import AbstractRepo, create_repo

# Never copied out of a source
EXCLUDED_FILES = frozenset({"AGENTS.md", "README.md", "metadata.json"})
EXCLUDED_DIRS = frozenset({"agents", ".git"})
EXCLUDED_SUFFIXES = frozenset({".zip"})

DEFAULT_TIMEOUT = 120.0

RepoFactory = Callable[[SourceConfig, Path], AbstractRepo]


def display_name_for(name: str) -> str:
    """``api-docs`` -> ``Api Docs``."""
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-"))


def is_safe_name(name: str) -> bool:
    """Whether *name* can be used as a single path component of the catalog."""
    return bool(name) and ".." not in name and not any(sep in name for sep in ("/", "\\"))


def map_category(source: SourceConfig, name: str, raw_category: str | None) -> str | None:
    """Apply the source's category mapping.

    A raw category is translated through ``categoryMapping`` (or kept as
    is); without one, a mapping keyed by the artifact name is used, then
    the source's default category.
    """
    if raw_category:
        return source.category_mapping.get(raw_category, raw_category)
    return source.category_mapping.get(name) or source.default_category


def is_excluded(relative_path: str, patterns: tuple[str, ...]) -> bool:
    """Match a candidate path against exclusion globs or path prefixes."""
    return any(relative_path.startswith(p) or fnmatch(relative_path, p) for p in patterns)


def filtered_files(directory: Path) -> list[str]:
    """Relative POSIX paths of the files in *directory* that get copied."""
    files = []
    for root, dirs, names in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if d not in EXCLUDED_DIRS)
        for file_name in sorted(names):
            if file_name in EXCLUDED_FILES or Path(file_name).suffix in EXCLUDED_SUFFIXES:
                continue
            files.append((Path(root) / file_name).relative_to(directory).as_posix())
    return files


def _walk_skills(directory: Path) -> Iterator[Path]:
    if (directory / ArtifactKind.SKILL.entry_file).is_file():
        yield directory
        return
    for child in sorted(directory.iterdir()):
        if child.is_dir() and child.name not in EXCLUDED_DIRS:
            yield from _walk_skills(child)


def find_candidates(source: SourceConfig, base: Path) -> list[Path]:
    """List candidate artifacts under *base*, minus excluded ones.

    Args:
        source: Source configuration (kind and exclusion globs)
        base: Subdirectory of the fetched tree

    Returns:
        Skill directories, or markdown files for agents and commands
    """
    if source.kind.is_directory:
        found = list(_walk_skills(base))
    else:
        found = sorted(
            p
            for p in base.rglob("*.md")
            if p.is_file()
            and p.name not in EXCLUDED_FILES
            and not EXCLUDED_DIRS.intersection(p.relative_to(base).parts[:-1])
        )

    candidates = []
    for path in found:
        relative = path.relative_to(base).as_posix()
        if is_excluded(relative, source.exclude):
            message(f"Skipping excluded: {relative}", MessageType.DEBUG, VerbosityLevel.DEBUG)
            continue
        candidates.append(path)
    return candidates


@dataclass
class SyncReport:
    """Results of syncing several sources.

    Fetch failures are recorded per source instead of aborting the run.
    """

    results: dict[str, SyncResult] = field(default_factory=dict)
    errors: dict[str, SourceFetchError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": {name: result.to_dict() for name, result in self.results.items()},
            "errors": {
                name: {"reason": error.reason, "timedOut": error.timed_out}
                for name, error in self.errors.items()
            },
        }


@dataclass
class _Candidate:
    entry: ManifestEntry
    path: Path
    files: list[str]


class SyncEngine:
    """Pulls artifact sets from external sources into a catalog."""

    def __init__(
        self,
        catalog: Catalog,
        sources_dir: Path,
        timeout: float | None = DEFAULT_TIMEOUT,
        repo_factory: RepoFactory = create_repo,
    ):
        self.catalog = catalog
        self.sources_dir = Path(sources_dir)
        self.timeout = timeout
        self.repo_factory = repo_factory

    def build_entry(
        self,
        source: SourceConfig,
        name: str,
        frontmatter: Frontmatter,
        path: Path,
        files: list[str],
    ) -> ManifestEntry:
        """Build the catalog entry for a candidate."""
        kind = source.kind
        return ManifestEntry(
            name=name,
            path=name if kind.is_directory else f"{name}.md",
            description=frontmatter.description or "",
            display_name=frontmatter.display_name or display_name_for(name),
            category=map_category(source, name, frontmatter.category),
            dependencies=tuple(frontmatter.dependencies),
            tags=tuple(frontmatter.tags),
            source=source.name,
            hash=content_hash(path, files) if kind.is_directory else content_hash(path),
        )

    # ------------------------------------------------------------------
    # Copying into the bundled tree
    # ------------------------------------------------------------------
    def _copy_into_catalog(self, kind: ArtifactKind, candidate: _Candidate) -> None:
        destination = self.catalog.kind_directory(kind) / candidate.entry.path
        destination.parent.mkdir(parents=True, exist_ok=True)

        if not kind.is_directory:
            with tempfile.NamedTemporaryFile(
                dir=destination.parent,
                prefix=f".{destination.name}.",
                suffix=".tmp",
                delete=False,
            ) as temp_file:
                temp_path = Path(temp_file.name)
            try:
                shutil.copyfile(candidate.path, temp_path)
                os.replace(temp_path, destination)
            finally:
                temp_path.unlink(missing_ok=True)
            return

        staged = Path(tempfile.mkdtemp(dir=destination.parent, prefix=f".{destination.name}.staged-"))
        try:
            for relative in candidate.files:
                target = staged / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(candidate.path / relative, target)

            if destination.exists():
                backup = destination.parent / f".{destination.name}.backup-{uuid4().hex}"
                os.replace(destination, backup)
                try:
                    os.replace(staged, destination)
                except OSError:
                    os.replace(backup, destination)
                    raise
                shutil.rmtree(backup)
            else:
                os.replace(staged, destination)
        finally:
            if staged.exists():
                shutil.rmtree(staged)

    def _delete_from_catalog(self, kind: ArtifactKind, entry: ManifestEntry) -> None:
        path = self.catalog.artifact_path(kind, entry)
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------
    def _current_manifest(self, kind: ArtifactKind) -> ResourceManifest:
        try:
            return self.catalog.manifest(kind)
        except ManifestNotFoundError:
            message(f"No {kind.subdir} manifest yet, starting a new one", MessageType.DEBUG, VerbosityLevel.DEBUG)
            return empty_resource_manifest()

    def sync(self, source: SourceConfig, dry_run: bool = False) -> SyncResult:
        """Sync one source into the catalog.

        Args:
            source: Source to sync
            dry_run: Compute the result without changing the catalog

        Returns:
            SyncResult naming what was added, updated, skipped, removed
            and which candidates failed

        Raises:
            SourceFetchError: If the source cannot be fetched or has no
                such subdirectory; the catalog is left unchanged
        """
        kind = source.kind
        repo = self.repo_factory(source, self.sources_dir)
        root = repo.fetch(self.timeout)

        base = root / source.subdirectory
        if not base.is_dir():
            raise SourceFetchError(source.name, f"subdirectory '{source.subdirectory}' not found in {root}")

        manifest = self._current_manifest(kind)
        candidates: dict[str, _Candidate] = {}
        failed: list[tuple[str, str]] = []
        # Names of candidates that failed, so their existing entries survive
        unreadable: set[str] = set()

        for path in find_candidates(source, base):
            relative = path.relative_to(base).as_posix()
            try:
                artifact = read_artifact(kind, path, Tier.BUNDLED)
            except (OSError, CodekitError) as e:
                failed.append((relative, str(e)))
                unreadable.add(path.name if kind.is_directory else path.stem)
                continue

            errors = validate_frontmatter(kind, artifact.frontmatter)
            if errors:
                failed.append((relative, ", ".join(errors)))
                unreadable.add(artifact.name)
                continue

            name = artifact.name
            if not is_safe_name(name):
                failed.append((relative, f"name '{name}' is not a valid file name"))
                continue

            if name in candidates:
                failed.append((relative, f"duplicate name '{name}'"))
                continue

            existing = get_manifest_entry(manifest, name)
            if existing is not None and existing.source and existing.source != source.name:
                failed.append((relative, f"'{name}' is already provided by source '{existing.source}'"))
                continue

            files = filtered_files(path) if kind.is_directory else [path.name]
            entry = self.build_entry(source, name, artifact.frontmatter, path, files)
            candidates[name] = _Candidate(entry=entry, path=path, files=files)

        added: list[str] = []
        updated: list[str] = []
        skipped: list[str] = []
        for name, candidate in candidates.items():
            existing = get_manifest_entry(manifest, name)
            if existing is None:
                added.append(name)
            elif existing != candidate.entry:
                updated.append(name)
            else:
                skipped.append(name)

        removed = [
            entry.name
            for entry in manifest.resources
            if entry.source == source.name and entry.name not in candidates and entry.name not in unreadable
        ]

        for relative, reason in failed:
            message(f"Skipping {relative} from '{source.name}': {reason}", MessageType.WARNING, VerbosityLevel.VERBOSE)

        result = SyncResult(
            source=source.name,
            added=tuple(added),
            updated=tuple(updated),
            skipped=tuple(skipped),
            removed=tuple(removed),
            failed=tuple(failed),
            dry_run=dry_run,
        )
        if dry_run or not (added or updated or removed):
            return result

        merged = manifest
        for name in added + updated:
            self._copy_into_catalog(kind, candidates[name])
            merged = replace_entry(merged, candidates[name].entry)
        for name in removed:
            self._delete_from_catalog(kind, get_manifest_entry(manifest, name))
            merged = remove_entry(merged, name)

        self.catalog.save(kind, merged)
        message(
            f"Synced '{source.name}': {len(added)} added, {len(updated)} updated, {len(removed)} removed",
            MessageType.DEBUG,
            VerbosityLevel.DEBUG,
        )
        return result

    def sync_all(self, sources: list[SourceConfig], dry_run: bool = False) -> SyncReport:
        """Sync every source, isolating fetch failures.

        Returns:
            SyncReport with a result or an error for each source
        """
        report = SyncReport()
        for source in sources:
            try:
                report.results[source.name] = self.sync(source, dry_run=dry_run)
            except SourceFetchError as e:
                message(str(e), MessageType.ERROR, VerbosityLevel.ALWAYS)
                report.errors[source.name] = e
        return report
