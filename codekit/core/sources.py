"""Management of the external sources listed in ``sources.yaml``."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from codekit.core.errors import (
    DuplicateSourceError,
    ManifestNotFoundError,
    SourceFetchError,
    SourceNotFoundError,
)
from codekit.core.manifest import (
    empty_sources_manifest,
    load_sources_manifest,
    save_sources_manifest,
)
from codekit.core.sync import RepoFactory, find_candidates
from codekit.core.types import ArtifactKind, SourceConfig, SourcesManifest
from codekit.output import MessageType, VerbosityLevel, message
from codekit.repos import create_repo
from codekit.utils.url import is_file_url, resolve_file_path, source_name_from_url


@dataclass
class SourceStatus:
    """A configured source and what its local checkout holds."""

    source: SourceConfig
    path: Path
    checked_out: bool
    display_url: str = ""
    candidates: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = self.source.to_dict()
        data.update(
            {
                "path": str(self.path),
                "checkedOut": self.checked_out,
                "candidates": list(self.candidates),
            }
        )
        return data


@dataclass
class PullReport:
    """Checkouts refreshed by a pull, and per-source failures."""

    paths: dict[str, Path] = field(default_factory=dict)
    errors: dict[str, SourceFetchError] = field(default_factory=dict)


class SourceManager:
    """Adds, removes, lists and fetches configured sources."""

    def __init__(self, templates_dir: Path, sources_dir: Path, repo_factory: RepoFactory = create_repo):
        self.templates_dir = Path(templates_dir)
        self.sources_dir = Path(sources_dir)
        self.repo_factory = repo_factory

    def load(self) -> SourcesManifest:
        """Load the sources manifest, treating a missing file as empty."""
        try:
            return load_sources_manifest(self.templates_dir)
        except ManifestNotFoundError:
            message("No sources configured yet", MessageType.DEBUG, VerbosityLevel.DEBUG)
            return empty_sources_manifest()

    def get(self, name: str) -> SourceConfig:
        """Return the source named *name*.

        Raises:
            SourceNotFoundError: If no such source is configured
        """
        source = self.load().get(name)
        if source is None:
            raise SourceNotFoundError(name)
        return source

    def select(self, name: str | None = None) -> list[SourceConfig]:
        """One named source, or all of them when *name* is None."""
        if name is not None:
            return [self.get(name)]
        return list(self.load().sources)

    def list_sources(self) -> list[SourceStatus]:
        """Every configured source with its checkout state."""
        statuses = []
        for source in self.load().sources:
            repo = self.repo_factory(source, self.sources_dir)
            status = SourceStatus(
                source=source,
                path=repo.get_path(),
                checked_out=repo.exists(),
                display_url=repo.get_display_url(),
            )
            base = repo.get_path() / source.subdirectory
            if status.checked_out and base.is_dir():
                status.candidates = [
                    path.name if source.kind.is_directory else path.stem
                    for path in find_candidates(source, base)
                ]
            statuses.append(status)
        return statuses

    def add_source(
        self,
        url: str,
        name: str | None = None,
        branch: str = "main",
        subdirectory: str = "skills",
        kind: ArtifactKind = ArtifactKind.SKILL,
    ) -> SourceConfig:
        """Register a new source.

        Args:
            url: Git URL or local directory
            name: Source name (derived from the URL when omitted)
            branch: Branch to fetch
            subdirectory: Directory inside the repository holding artifacts
            kind: Kind of artifact the source provides

        Returns:
            The stored SourceConfig

        Raises:
            DuplicateSourceError: If the name is already configured
        """
        if not name:
            name = resolve_file_path(url).name if is_file_url(url) else source_name_from_url(url)

        manifest = self.load()
        if manifest.get(name) is not None:
            raise DuplicateSourceError(name)

        source = SourceConfig(name=name, url=url, branch=branch, subdirectory=subdirectory, kind=kind)
        save_sources_manifest(
            self.templates_dir,
            SourcesManifest(version=manifest.version, sources=manifest.sources + (source,)),
        )
        message(f"Added source '{name}' ({url})", MessageType.DEBUG, VerbosityLevel.DEBUG)
        return source

    def remove_source(self, name: str, delete_checkout: bool = False) -> SourceConfig:
        """Unregister a source, optionally deleting its checkout.

        Checkouts of local directory sources are never deleted.

        Raises:
            SourceNotFoundError: If no such source is configured
        """
        manifest = self.load()
        source = manifest.get(name)
        if source is None:
            raise SourceNotFoundError(name)

        remaining = tuple(s for s in manifest.sources if s.name != name)
        save_sources_manifest(self.templates_dir, SourcesManifest(version=manifest.version, sources=remaining))

        if delete_checkout:
            repo = self.repo_factory(source, self.sources_dir)
            if repo.OWNS_CHECKOUT and repo.get_path().exists():
                shutil.rmtree(repo.get_path())
                message(f"Deleted checkout {repo.get_path()}", MessageType.DEBUG, VerbosityLevel.DEBUG)
        return source

    def pull(self, name: str | None = None, timeout: float | None = None) -> PullReport:
        """Clone or update one source, or all of them.

        A failure for one source does not stop the others.

        Raises:
            SourceNotFoundError: If *name* is given and not configured
        """
        report = PullReport()
        for source in self.select(name):
            repo = self.repo_factory(source, self.sources_dir)
            try:
                report.paths[source.name] = repo.fetch(timeout)
            except SourceFetchError as e:
                message(str(e), MessageType.ERROR, VerbosityLevel.ALWAYS)
                report.errors[source.name] = e
        return report
