"""Abstract base class for source repository implementations."""

from abc import ABC, abstractmethod
from pathlib import Path


class AbstractRepo(ABC):
    """A place artifacts are synced from.

    Subclasses decide from the URL whether they apply (``can_handle_url``)
    and know how to bring their working tree up to date (``fetch``).
    """

    # Type name, as returned by get_repo_type_map()
    REPO_TYPE: str = "unknown"

    # Whether local_path is a checkout codekit created (and may delete)
    OWNS_CHECKOUT: bool = False

    def __init__(self, name: str, url: str, repos_dir: Path, branch: str = "main"):
        """Set up a source repository without touching the filesystem.

        Args:
            name: Source name
            url: Source URL or local path
            repos_dir: Directory holding source checkouts
            branch: Branch to fetch
        """
        self.name = name
        self.url = url
        self.repos_dir = repos_dir
        self.branch = branch
        self.local_path: Path

    @classmethod
    @abstractmethod
    def can_handle_url(cls, url: str) -> bool:
        """Whether *url* looks like a source of this type."""

    @abstractmethod
    def fetch(self, timeout: float | None = None) -> Path:
        """Bring the local copy up to date with the configured branch.

        Args:
            timeout: Seconds to wait before giving up (None waits forever)

        Returns:
            Path to the up to date working tree

        Raises:
            SourceFetchError: If the repository cannot be fetched
        """

    def get_path(self) -> Path:
        return self.local_path

    def exists(self) -> bool:
        """Whether a working tree is present locally."""
        return self.local_path.exists()

    def get_display_url(self) -> str:
        return self.url

    def __str__(self) -> str:
        return f"Repo(name='{self.name}', type={self.REPO_TYPE}, path={self.local_path})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name='{self.name}', "
            f"url='{self.url}', branch='{self.branch}', local_path={self.local_path})"
        )
