"""Tests for core/resolver.py - Dependency resolution."""

import pytest

from codekit.core.errors import (
    ArtifactNotFoundError,
    CyclicDependencyError,
    UnresolvedDependencyError,
)
from codekit.core.resolver import resolve
from codekit.core.types import ManifestEntry, ResourceManifest


def _manifest(graph: dict[str, list[str]]) -> ResourceManifest:
    return ResourceManifest(
        version="1.0.0",
        resources=tuple(
            ManifestEntry(name=name, path=f"{name}.md", dependencies=tuple(deps))
            for name, deps in graph.items()
        ),
    )


class TestResolve:

    def test_no_dependencies(self):
        assert resolve("a", _manifest({"a": []})) == ["a"]

    def test_dependencies_come_first_and_once(self):
        manifest = _manifest({"a": ["b", "c"], "b": ["c"], "c": []})
        assert resolve("a", manifest) == ["c", "b", "a"]

    def test_diamond(self):
        manifest = _manifest({"top": ["left", "right"], "left": ["base"], "right": ["base"], "base": []})
        order = resolve("top", manifest)

        assert order[0] == "base"
        assert order[-1] == "top"
        assert sorted(order) == ["base", "left", "right", "top"]

    @pytest.mark.parametrize("start", ["a", "b"])
    def test_two_node_cycle(self, start):
        manifest = _manifest({"a": ["b"], "b": ["a"]})
        with pytest.raises(CyclicDependencyError) as exc_info:
            resolve(start, manifest)

        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1] == start
        assert set(cycle) == {"a", "b"}

    def test_self_cycle(self):
        with pytest.raises(CyclicDependencyError) as exc_info:
            resolve("a", _manifest({"a": ["a"]}))
        assert exc_info.value.cycle == ["a", "a"]

    def test_cycle_below_target(self):
        manifest = _manifest({"top": ["a"], "a": ["b"], "b": ["a"]})
        with pytest.raises(CyclicDependencyError) as exc_info:
            resolve("top", manifest)
        assert exc_info.value.cycle == ["a", "b", "a"]
        assert "a -> b -> a" in str(exc_info.value)

    def test_missing_dependency(self):
        manifest = _manifest({"a": ["b"], "b": ["ghost"]})
        with pytest.raises(UnresolvedDependencyError) as exc_info:
            resolve("a", manifest)

        assert exc_info.value.dependency == "ghost"
        assert exc_info.value.requester == "b"

    def test_missing_target_suggests(self):
        with pytest.raises(ArtifactNotFoundError) as exc_info:
            resolve("api-doc", _manifest({"api-docs": []}), kind="agent")

        assert exc_info.value.suggestions == ["api-docs"]
        assert "Did you mean: api-docs?" in str(exc_info.value)

    def test_without_dependencies(self):
        manifest = _manifest({"a": ["b"], "b": []})
        assert resolve("a", manifest, include_dependencies=False) == ["a"]

    def test_without_dependencies_still_checks_target(self):
        with pytest.raises(ArtifactNotFoundError):
            resolve("zzz", _manifest({"a": []}), include_dependencies=False)
