"""URL utilities for codekit sources."""

from pathlib import Path


def is_file_url(url: str) -> bool:
    """Check if a URL is a file:// URL or a plain filesystem path.

    Args:
        url: The URL to check

    Returns:
        True if it's a file:// URL or plain path, False otherwise
    """
    # Reject URLs with leading/trailing whitespace
    if url != url.strip():
        return False

    if url.startswith("file://"):
        return True

    # Absolute, home-relative or explicitly relative paths
    if url.startswith(("/", "~", "./", "../")):
        return True

    return url in (".", "..")


def resolve_file_path(url: str) -> Path:
    """Resolve a file:// URL (or plain path) to an absolute path."""
    path_str = url[7:] if url.startswith("file://") else url
    return Path(path_str).expanduser().resolve()


def source_name_from_url(url: str) -> str:
    """Derive a source name from the last segment of its URL.

    ``https://github.com/acme/skills.git`` becomes ``skills`` and
    ``git@github.com:acme/tools.git`` becomes ``tools``.

    Args:
        url: Repository URL or path

    Returns:
        The derived name, or ``"unknown"`` when nothing usable remains
    """
    trimmed = url.strip().rstrip("/")
    if trimmed.endswith(".git"):
        trimmed = trimmed[: -len(".git")]
    segment = trimmed.replace(":", "/").split("/")[-1]
    return segment or "unknown"
