"""Abstract base for the remote registry repository client."""

from abc import ABC, abstractmethod

from vulcan_prd.models import PR, AccessReport


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PermissionDenied(GitPlatformError):
    """Token lacks read or write access for the requested operation."""

    pass


class RepoAccessError(GitPlatformError):
    """Repository or base ref not found, or access to it is forbidden."""

    pass


class RemoteRepositoryClient(ABC):
    """Operations the publisher needs from a hosted repository.

    Every method takes the repository full name ("owner/repo") first.
    """

    @abstractmethod
    def get_default_branch(self, repo: str) -> str:
        """Return default branch name (e.g. main)."""
        ...

    @abstractmethod
    def get_file_content(self, repo: str, path: str, ref: str | None = None) -> str | None:
        """Return decoded file content, or None if the file does not exist.

        Raises UnicodeDecodeError (or binascii.Error) when the stored bytes are
        not UTF-8 text.
        """
        ...

    @abstractmethod
    def create_branch(self, repo: str, branch_name: str, base_branch: str) -> None:
        """Create branch_name pointing at the current tip of base_branch."""
        ...

    @abstractmethod
    def create_or_update_file(
        self,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str,
    ) -> None:
        """Commit content to path on branch, replacing the file if present."""
        ...

    @abstractmethod
    def create_pr(
        self,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> PR:
        """Create a pull request."""
        ...

    def verify_access(self, repo: str) -> AccessReport:
        """Preflight read/write check. Override if needed."""
        return AccessReport(has_read=True, has_write=True)
