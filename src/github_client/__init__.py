"""GitHub client library for project synchronization.

This package provides Python abstractions over the GitHub REST API,
covering the repository and git data endpoints the sync engine relies on.
"""

from .errors import (
    SyncError,
    GitHubError,
    InvalidCredentialsError,
    NotFoundError,
    RepositoryNotFoundError,
    BranchNotFoundError,
    RemoteUnavailableError,
    RepositoryAlreadyExistsError,
    APIAccessError,
    BinaryContentError,
)

__all__ = [
    "SyncError",
    "GitHubError",
    "InvalidCredentialsError",
    "NotFoundError",
    "RepositoryNotFoundError",
    "BranchNotFoundError",
    "RemoteUnavailableError",
    "RepositoryAlreadyExistsError",
    "APIAccessError",
    "BinaryContentError",
]
