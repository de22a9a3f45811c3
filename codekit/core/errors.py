"""Error types raised by the codekit core."""


class CodekitError(Exception):
    """Base class for all codekit errors."""


class MalformedFrontmatterError(CodekitError):
    """Raised when a template has no parseable frontmatter block."""

    def __init__(self, reason: str, path: str | None = None):
        self.reason = reason
        self.path = path
        location = f"{path}: " if path else ""
        super().__init__(f"{location}{reason}")


class ManifestNotFoundError(CodekitError):
    """Raised when a manifest file does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Manifest not found: {path}")


class ManifestVersionError(CodekitError):
    """Raised when a manifest declares a version we do not understand."""

    def __init__(self, path, version):
        self.path = path
        self.version = version
        super().__init__(f"Unsupported manifest version {version!r} in {path}")


class InvalidManifestError(CodekitError):
    """Raised when a manifest is structurally invalid.

    Collects every problem found rather than stopping at the first one.
    """

    def __init__(self, path, errors: list[str]):
        self.path = path
        self.errors = errors
        error_list = "\n".join(f"  - {err}" for err in errors)
        super().__init__(f"Invalid manifest {path}:\n{error_list}")


class CyclicDependencyError(CodekitError):
    """Raised when dependency resolution runs into a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")


class UnresolvedDependencyError(CodekitError):
    """Raised when a declared dependency is missing from the manifest."""

    def __init__(self, dependency: str, requester: str):
        self.dependency = dependency
        self.requester = requester
        super().__init__(
            f"'{requester}' depends on '{dependency}', which is not in the manifest"
        )


class ArtifactNotFoundError(CodekitError):
    """Raised when a requested artifact is not in the bundled catalog."""

    def __init__(self, kind: str, name: str, suggestions: list[str] | None = None):
        self.kind = kind
        self.name = name
        self.suggestions = suggestions or []
        text = f"{kind.capitalize()} '{name}' not found"
        if self.suggestions:
            text += f". Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(text)


class InvalidArtifactError(CodekitError):
    """Raised when an artifact fails frontmatter validation."""

    def __init__(self, name: str, errors: list[str]):
        self.name = name
        self.errors = errors
        super().__init__(f"Invalid template '{name}': {', '.join(errors)}")


class AlreadyInstalledError(CodekitError):
    """Raised when installing over an existing artifact without force."""

    def __init__(self, name: str, location):
        self.name = name
        self.location = location
        super().__init__(f"'{name}' is already installed at {location}")


class NotInstalledError(CodekitError):
    """Raised when removing an artifact that is not installed."""

    def __init__(self, name: str, tier: str):
        self.name = name
        self.tier = tier
        super().__init__(f"'{name}' is not installed in the {tier} tier")


class SourceFetchError(CodekitError):
    """Raised when an external source cannot be fetched."""

    def __init__(self, source: str, reason: str, timed_out: bool = False):
        self.source = source
        self.reason = reason
        self.timed_out = timed_out
        prefix = "Timed out fetching" if timed_out else "Failed to fetch"
        super().__init__(f"{prefix} source '{source}': {reason}")


class DuplicateSourceError(CodekitError):
    """Raised when adding a source whose name is already configured."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Source '{name}' already exists")


class SourceNotFoundError(CodekitError):
    """Raised when a named source is not configured."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Source '{name}' not found")
