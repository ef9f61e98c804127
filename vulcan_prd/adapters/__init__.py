"""Remote repository adapters (base and implementations)."""

from vulcan_prd.adapters.base import (
    GitPlatformError,
    PermissionDenied,
    RemoteRepositoryClient,
    RepoAccessError,
)
from vulcan_prd.adapters.github import GitHubAdapter

__all__ = [
    "GitHubAdapter",
    "GitPlatformError",
    "PermissionDenied",
    "RemoteRepositoryClient",
    "RepoAccessError",
]
