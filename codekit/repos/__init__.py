"""Source repository implementations."""

from pathlib import Path

from codekit.core.types import SourceConfig
from codekit.output import MessageType, VerbosityLevel, message

from .abstract_repo import AbstractRepo
from .git_repo import GitRepo
from .local_repo import LocalRepo

# Checked in order; LocalRepo first so paths containing "github.com" stay local
REPO_TYPES: list[type[AbstractRepo]] = [LocalRepo, GitRepo]


def get_repo_type_map() -> dict[str, type[AbstractRepo]]:
    """Map repo type names to their classes."""
    return {repo_class.REPO_TYPE: repo_class for repo_class in REPO_TYPES}


def create_repo(source: SourceConfig, sources_dir: Path) -> AbstractRepo:
    """Create the repository object for *source*.

    URLs no registered type claims are treated as git remotes.

    Args:
        source: Source configuration
        sources_dir: Directory that holds source checkouts

    Returns:
        Repository instance for the source URL
    """
    for repo_class in REPO_TYPES:
        if repo_class.can_handle_url(source.url):
            repo_class_found = repo_class
            break
    else:
        repo_class_found = GitRepo

    message(
        f"Using {repo_class_found.REPO_TYPE} repo for source '{source.name}'",
        MessageType.DEBUG,
        VerbosityLevel.DEBUG,
    )
    return repo_class_found(source.name, source.url, sources_dir, source.branch)


__all__ = [
    "REPO_TYPES",
    "AbstractRepo",
    "GitRepo",
    "LocalRepo",
    "create_repo",
    "get_repo_type_map",
]
