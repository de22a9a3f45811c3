"""YAML frontmatter parsing for markdown templates.

A template looks like::

    ---
    name: api-docs
    description: Writes API documentation
    ---
    Body text...

The frontmatter schema is open: known keys get typed accessors, every
other key is kept as-is so that documents round-trip unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

import yaml

from codekit.core.errors import MalformedFrontmatterError

if TYPE_CHECKING:
    from codekit.core.types import ArtifactKind

FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\n(?P<yaml>.*?)^---[ \t]*(?:\n|\Z)(?P<body>.*)\Z",
    re.DOTALL | re.MULTILINE,
)

KNOWN_KEYS = ("name", "description", "category", "displayName", "dependencies", "tags")

SKILL_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")
SKILL_NAME_MAX_LENGTH = 64
SKILL_DESCRIPTION_MAX_LENGTH = 1024
RESERVED_WORDS = ("anthropic", "claude")


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


class Frontmatter(Mapping):
    """Read-only mapping over a frontmatter block with typed accessors."""

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data: dict[str, Any] = dict(data or {})

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Frontmatter({self._data!r})"

    def _string(self, key: str) -> str | None:
        value = self._data.get(key)
        if value is None:
            return None
        return str(value)

    def _metadata(self) -> Mapping[str, Any]:
        metadata = self._data.get("metadata")
        return metadata if isinstance(metadata, Mapping) else {}

    @property
    def name(self) -> str | None:
        return self._string("name")

    @property
    def description(self) -> str | None:
        return self._string("description")

    @property
    def category(self) -> str | None:
        category = self._string("category")
        if category is None and "category" in self._metadata():
            category = str(self._metadata()["category"])
        return category

    @property
    def display_name(self) -> str | None:
        return self._string("displayName")

    @property
    def dependencies(self) -> list[str]:
        return _as_list(self._data.get("dependencies"))

    @property
    def tags(self) -> list[str]:
        if "tags" in self._data:
            return _as_list(self._data["tags"])
        return _as_list(self._metadata().get("tags"))

    @property
    def extra(self) -> dict[str, Any]:
        """Keys outside the known schema, in document order."""
        return {k: v for k, v in self._data.items() if k not in KNOWN_KEYS}

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


def parse_frontmatter(text: str, path: str | None = None) -> tuple[Frontmatter, str]:
    """Split *text* into its frontmatter and body.

    Args:
        text: Raw file content
        path: Optional file path, only used in error messages

    Returns:
        Tuple of (frontmatter, body) with the body stripped

    Raises:
        MalformedFrontmatterError: If the block is missing, is not valid
            YAML, or does not contain a key/value mapping
    """
    normalized = text.replace("\r\n", "\n").lstrip("\ufeff")
    match = FRONTMATTER_PATTERN.match(normalized)
    if not match:
        raise MalformedFrontmatterError("missing YAML frontmatter", path)

    try:
        data = yaml.safe_load(match.group("yaml"))
    except yaml.YAMLError as e:
        raise MalformedFrontmatterError(f"failed to parse YAML frontmatter: {e}", path) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedFrontmatterError("frontmatter is not a key/value mapping", path)

    return Frontmatter({str(k): v for k, v in data.items()}), match.group("body").strip()


def serialize_frontmatter(frontmatter: Mapping[str, Any], body: str) -> str:
    """Render frontmatter and body back into a markdown document."""
    yaml_content = yaml.safe_dump(
        dict(frontmatter), default_flow_style=False, sort_keys=False, allow_unicode=True,
    ).strip()
    return f"---\n{yaml_content}\n---\n\n{body}\n"


def validate_frontmatter(kind: ArtifactKind, frontmatter: Frontmatter) -> list[str]:
    """Check *frontmatter* against the rules for *kind*.

    Args:
        kind: ArtifactKind of the template
        frontmatter: Parsed frontmatter

    Returns:
        List of problems, empty when valid
    """
    errors: list[str] = []

    for key in kind.required_keys:
        value = frontmatter.get(key)
        if not value or not isinstance(value, str):
            errors.append(f"Missing required field: {key}")

    if kind.is_directory:
        name = frontmatter.get("name")
        if isinstance(name, str) and name:
            if len(name) > SKILL_NAME_MAX_LENGTH:
                errors.append(f"name must be {SKILL_NAME_MAX_LENGTH} characters or less")
            if not SKILL_NAME_PATTERN.match(name):
                errors.append("name must contain only lowercase letters, numbers, and hyphens")
            if any(word in name for word in RESERVED_WORDS):
                errors.append("name cannot contain reserved words: 'anthropic', 'claude'")

        description = frontmatter.get("description")
        if isinstance(description, str) and len(description) > SKILL_DESCRIPTION_MAX_LENGTH:
            errors.append(
                f"description must be {SKILL_DESCRIPTION_MAX_LENGTH} characters or less"
            )

    return errors
