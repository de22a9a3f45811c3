"""Local directory repository implementation."""

from pathlib import Path

from codekit.core.errors import SourceFetchError
from codekit.output import MessageType, VerbosityLevel, message
from codekit.repos.abstract_repo import AbstractRepo
from codekit.utils.url import is_file_url, resolve_file_path


class LocalRepo(AbstractRepo):
    """A source that is a directory on this machine, read in place.

    The branch is ignored; whatever is on disk is synced.
    """

    REPO_TYPE = "file"

    @classmethod
    def can_handle_url(cls, url: str) -> bool:
        return is_file_url(url)

    def __init__(self, name: str, url: str, repos_dir: Path, branch: str = "main"):
        super().__init__(name, url, repos_dir, branch)
        self.local_path = resolve_file_path(url)

    def fetch(self, timeout: float | None = None) -> Path:
        if not self.local_path.is_dir():
            raise SourceFetchError(self.name, f"directory does not exist: {self.local_path}")
        message(f"Using local source '{self.name}' at {self.local_path}", MessageType.DEBUG, VerbosityLevel.DEBUG)
        return self.local_path

    def get_display_url(self) -> str:
        return str(self.local_path)
