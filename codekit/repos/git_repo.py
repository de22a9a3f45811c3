"""Git repository implementation."""

import time
from pathlib import Path

import git

from codekit.core.errors import SourceFetchError
from codekit.output import MessageType, VerbosityLevel, message
from codekit.repos.abstract_repo import AbstractRepo


class GitRepo(AbstractRepo):
    """A source hosted in a git repository, checked out shallowly."""

    REPO_TYPE = "git"
    OWNS_CHECKOUT = True

    @classmethod
    def can_handle_url(cls, url: str) -> bool:
        """Recognize git remotes by scheme, a .git suffix or a known host."""
        git_patterns = [
            url.startswith("git@"),
            url.startswith("git://"),
            url.startswith("ssh://"),
            url.startswith("http://") and ".git" in url,
            url.startswith("https://") and ".git" in url,
            # Common git hosting services
            "github.com" in url,
            "gitlab.com" in url,
            "bitbucket.org" in url,
        ]
        return any(git_patterns)

    def __init__(self, name: str, url: str, repos_dir: Path, branch: str = "main"):
        """Initialize a git repository.

        Note: Does not clone the repository. Call fetch() for that.
        """
        super().__init__(name, url, repos_dir, branch)
        self.local_path = repos_dir / name

    def exists(self) -> bool:
        return (self.local_path / ".git").exists()

    def _open(self) -> git.Repo:
        if self.exists():
            repo = git.Repo(self.local_path)
            origin = repo.remotes.origin
            if origin.url != self.url:
                message(
                    f"Source '{self.name}' remote URL changed to {self.url}",
                    MessageType.WARNING,
                    VerbosityLevel.VERBOSE,
                )
                origin.set_url(self.url)
            return repo

        message(f"Cloning '{self.name}' from {self.url}...", MessageType.INFO, VerbosityLevel.EXTRA_VERBOSE)
        self.local_path.mkdir(parents=True, exist_ok=True)
        repo = git.Repo.init(self.local_path)
        repo.create_remote("origin", self.url)
        return repo

    def fetch(self, timeout: float | None = None) -> Path:
        """Shallow fetch the configured branch and check it out.

        Local modifications in the checkout are discarded.

        Raises:
            SourceFetchError: If git fails or the timeout expires
        """
        started = time.monotonic()
        try:
            repo = self._open()
            message(
                f"Fetching '{self.name}' (branch: {self.branch})...",
                MessageType.DEBUG,
                VerbosityLevel.DEBUG,
            )
            repo.remotes.origin.fetch(self.branch, depth=1, kill_after_timeout=timeout)
            repo.git.checkout("--force", "-B", self.branch, "FETCH_HEAD")
            repo.git.clean("-f", "-d")
        except (git.exc.GitCommandError, git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            timed_out = timeout is not None and time.monotonic() - started >= timeout
            reason = f"no response after {timeout:g}s" if timed_out else str(e).strip()
            raise SourceFetchError(self.name, reason, timed_out=timed_out) from e
        except OSError as e:
            raise SourceFetchError(self.name, str(e)) from e

        message(f"Fetched '{self.name}'", MessageType.SUCCESS, VerbosityLevel.VERBOSE)
        return self.local_path
