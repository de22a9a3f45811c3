"""Installing bundled artifacts into the project and global tiers."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from codekit.core.catalog import Catalog
from codekit.core.errors import (
    AlreadyInstalledError,
    CodekitError,
    InvalidArtifactError,
    NotInstalledError,
)
from codekit.core.frontmatter import validate_frontmatter
from codekit.core.resolver import resolve
from codekit.core.scanner import TierScanner, read_artifact
from codekit.core.types import (
    ArtifactKind,
    InstallOptions,
    RemoveOptions,
    ResourcePaths,
    Tier,
)
from codekit.output import MessageType, VerbosityLevel, message


@dataclass(frozen=True)
class InstallAction:
    """One planned step of an install."""

    name: str
    action: str  # "install", "overwrite" or "skip"
    source: Path
    destination: Path

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "action": self.action,
            "source": str(self.source),
            "destination": str(self.destination),
        }


@dataclass
class InstallResult:
    target: str
    installed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    dry_run: bool = False
    actions: list[InstallAction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "installed": list(self.installed),
            "skipped": list(self.skipped),
            "dryRun": self.dry_run,
            "actions": [a.to_dict() for a in self.actions],
        }


@dataclass
class RemoveResult:
    name: str
    path: Path
    removed: bool
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "removed": self.removed,
            "dryRun": self.dry_run,
        }


@dataclass
class InitResult:
    """Outcome of setting up a tier with the whole bundled catalog."""

    root: Path
    planned: dict[ArtifactKind, list[str]] = field(default_factory=dict)
    installed: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    dry_run: bool = False
    already_initialized: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": str(self.root),
            "planned": {kind.subdir: list(names) for kind, names in self.planned.items()},
            "installed": list(self.installed),
            "failed": [{"name": name, "reason": reason} for name, reason in self.failed],
            "dryRun": self.dry_run,
            "alreadyInitialized": self.already_initialized,
        }


def _check_writable(tier: Tier) -> None:
    if not tier.writable:
        raise ValueError(f"The {tier.value} tier is read-only")


class Installer:
    """Copies bundled artifacts into a tier and removes them again."""

    def __init__(self, catalog: Catalog, scanner: TierScanner, paths: ResourcePaths):
        self.catalog = catalog
        self.scanner = scanner
        self.paths = paths

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------
    def _plan(self, name: str, kind: ArtifactKind, target: str, tier: Tier, force: bool) -> InstallAction:
        entry = self.catalog.find(kind, name)
        source = self.catalog.artifact_path(kind, entry)

        try:
            artifact = read_artifact(kind, source, Tier.BUNDLED)
        except OSError as e:
            raise InvalidArtifactError(name, [f"cannot read {source}: {e.strerror or e}"]) from e
        except CodekitError as e:
            raise InvalidArtifactError(name, [str(e)]) from e

        errors = validate_frontmatter(kind, artifact.frontmatter)
        if artifact.frontmatter.name and artifact.frontmatter.name != name:
            errors.append(f"frontmatter name '{artifact.frontmatter.name}' does not match '{name}'")
        if errors:
            raise InvalidArtifactError(name, errors)

        installed = self.scanner.find_installed(kind, name, tier)
        destination = installed.path if installed is not None else self.paths.artifact_location(kind, tier, name)
        if installed is None and not destination.exists():
            return InstallAction(name, "install", source, destination)

        if force:
            return InstallAction(name, "overwrite", source, destination)
        if name == target:
            raise AlreadyInstalledError(name, destination)
        return InstallAction(name, "skip", source, destination)

    @staticmethod
    def _copy(kind: ArtifactKind, action: InstallAction) -> None:
        destination = action.destination
        destination.parent.mkdir(parents=True, exist_ok=True)
        if kind.is_directory:
            if destination.exists():
                shutil.rmtree(destination)
            shutil.copytree(action.source, destination)
        else:
            shutil.copyfile(action.source, destination)

    def install(
        self,
        name: str,
        kind: ArtifactKind,
        tier: Tier = Tier.PROJECT,
        options: InstallOptions | None = None,
    ) -> InstallResult:
        """Install *name* and its dependencies into *tier*.

        Every artifact is planned and validated before anything is written,
        so a failure leaves the tier untouched.

        Args:
            name: Catalog entry to install
            kind: Artifact kind
            tier: Target tier (project or global)
            options: Install options

        Returns:
            InstallResult describing what was (or would be) done

        Raises:
            ValueError: If *tier* is the bundled tier
            ArtifactNotFoundError: If *name* is not in the catalog
            CyclicDependencyError: If the dependencies form a cycle
            UnresolvedDependencyError: If a dependency is missing
            InvalidArtifactError: If a bundled artifact fails validation
            AlreadyInstalledError: If *name* exists and force is not set
        """
        _check_writable(tier)
        options = options or InstallOptions()

        order = resolve(name, self.catalog.manifest(kind), kind=kind.value)
        if options.skip_deps:
            order = [name]

        actions = [self._plan(n, kind, name, tier, options.force) for n in order]
        result = InstallResult(target=name, dry_run=options.dry_run, actions=actions)

        for action in actions:
            if action.action == "skip":
                result.skipped.append(action.name)
                message(
                    f"{action.name} already installed at {action.destination}",
                    MessageType.INFO,
                    VerbosityLevel.VERBOSE,
                )
                continue

            if not options.dry_run:
                if action.action == "overwrite":
                    message(
                        f"Overwriting existing {kind.value} at {action.destination}",
                        MessageType.WARNING,
                        VerbosityLevel.VERBOSE,
                    )
                self._copy(kind, action)
                message(f"Installed {action.name} to {action.destination}", MessageType.DEBUG, VerbosityLevel.DEBUG)
            result.installed.append(action.name)

        return result

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------
    def remove(
        self,
        name: str,
        kind: ArtifactKind,
        tier: Tier = Tier.PROJECT,
        options: RemoveOptions | None = None,
    ) -> RemoveResult:
        """Remove a single installed artifact.

        Dependencies and dependents are left alone.

        Raises:
            ValueError: If *tier* is the bundled tier
            NotInstalledError: If *name* is not installed in *tier*
        """
        _check_writable(tier)
        options = options or RemoveOptions()

        installed = self.scanner.find_installed(kind, name, tier)
        if installed is None:
            raise NotInstalledError(name, tier.value)
        location = installed.path

        if options.dry_run:
            return RemoveResult(name=name, path=location, removed=False, dry_run=True)

        if kind.is_directory:
            shutil.rmtree(location)
        else:
            location.unlink()

        directory = self.paths.resource_directory(kind, tier)
        if directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()
            message(f"Removed empty directory {directory}", MessageType.DEBUG, VerbosityLevel.DEBUG)

        return RemoveResult(name=name, path=location, removed=True)

    # ------------------------------------------------------------------
    # Init
    # ------------------------------------------------------------------
    def initialize(
        self,
        tier: Tier = Tier.PROJECT,
        kinds: tuple[ArtifactKind, ...] = (ArtifactKind.AGENT, ArtifactKind.COMMAND),
        force: bool = False,
        dry_run: bool = False,
    ) -> InitResult:
        """Create the tier's directories and install every bundled artifact of *kinds*.

        An existing tier root is left alone unless *force* is set. Failures
        are collected per artifact and never stop the rest of the batch.

        Args:
            tier: Target tier (project or global)
            kinds: Kinds to set up
            force: Initialize an existing tier and overwrite installed artifacts
            dry_run: Only report what would be installed

        Returns:
            InitResult, with ``already_initialized`` set when nothing was done
            because the tier root exists

        Raises:
            ValueError: If *tier* is the bundled tier
        """
        _check_writable(tier)
        root = self.paths.tier_root(tier)
        result = InitResult(root=root, dry_run=dry_run)

        if root.exists() and not force:
            result.already_initialized = True
            return result

        for kind in kinds:
            names = self.catalog.manifest(kind).names()
            if not names:
                message(f"No {kind.subdir} templates available", MessageType.WARNING, VerbosityLevel.ALWAYS)
                continue
            result.planned[kind] = names

        if dry_run:
            return result

        root.mkdir(parents=True, exist_ok=True)
        for kind in kinds:
            self.paths.resource_directory(kind, tier).mkdir(parents=True, exist_ok=True)

        for kind, names in result.planned.items():
            done: set[str] = set()
            for name in names:
                label = f"{kind.subdir}/{name}"
                if name in done:
                    continue
                try:
                    outcome = self.install(name, kind, tier, InstallOptions(force=force))
                except CodekitError as e:
                    message(f"Failed to install {label}: {e}", MessageType.WARNING, VerbosityLevel.ALWAYS)
                    result.failed.append((label, str(e)))
                    continue
                done.update(outcome.installed)
                result.installed.extend(f"{kind.subdir}/{n}" for n in outcome.installed)
        return result
