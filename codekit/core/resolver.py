"""Dependency resolution for catalog entries."""

from __future__ import annotations

import difflib

from codekit.core.errors import (
    ArtifactNotFoundError,
    CyclicDependencyError,
    UnresolvedDependencyError,
)
from codekit.core.manifest import get_manifest_entry
from codekit.core.types import ResourceManifest
from codekit.output import MessageType, VerbosityLevel, message


def resolve(
    name: str,
    manifest: ResourceManifest,
    include_dependencies: bool = True,
    kind: str = "template",
) -> list[str]:
    """Compute the install order for *name*.

    Dependencies are visited depth first and emitted in postorder, so every
    dependency comes before the entries that need it and each name appears
    once.

    Args:
        name: Entry to resolve
        manifest: Catalog manifest holding *name* and its dependencies
        include_dependencies: When False only the target is returned
        kind: Label used in the not-found error message

    Returns:
        Names in install order, ending with *name*

    Raises:
        ArtifactNotFoundError: If *name* is not in the manifest
        CyclicDependencyError: If the dependency graph has a cycle
        UnresolvedDependencyError: If a dependency is not in the manifest
    """
    if get_manifest_entry(manifest, name) is None:
        suggestions = difflib.get_close_matches(name, manifest.names(), n=3)
        raise ArtifactNotFoundError(kind, name, suggestions)

    if not include_dependencies:
        return [name]

    order: list[str] = []
    done: set[str] = set()
    path: list[str] = []

    def visit(current: str, requester: str | None) -> None:
        if current in done:
            return
        if current in path:
            start = path.index(current)
            raise CyclicDependencyError(path[start:] + [current])

        entry = get_manifest_entry(manifest, current)
        if entry is None:
            raise UnresolvedDependencyError(current, requester or name)

        path.append(current)
        for dependency in entry.dependencies:
            visit(dependency, current)
        path.pop()

        done.add(current)
        order.append(current)

    visit(name, None)
    message(f"Resolved '{name}': {' -> '.join(order)}", MessageType.DEBUG, VerbosityLevel.DEBUG)
    return order
