"""Typed exception hierarchy for GitHub-related errors.

This module defines all custom exceptions used by the GitHub client library.
All exceptions inherit from the SyncError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all sandbox-git-sync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class GitHubError(SyncError):
    """Base exception for all GitHub-related errors."""
    pass


class InvalidCredentialsError(GitHubError):
    """Raised when the GitHub token is missing, invalid or lacks a scope."""

    def __init__(self, endpoint: str, reason: Optional[str] = None):
        message = f"GitHub token is invalid (endpoint: {endpoint})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.endpoint = endpoint
        self.reason = reason


class NotFoundError(GitHubError):
    """Raised when a requested GitHub object does not exist."""

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class RepositoryNotFoundError(NotFoundError):
    """Raised when a repository id or name does not resolve remotely."""

    def __init__(self, repository: str):
        super().__init__(f"Repository {repository}")
        self.repository = repository


class BranchNotFoundError(GitHubError):
    """Raised when the default branch has no commits yet (empty repository)."""

    def __init__(self, repository: str, branch: str = "main"):
        super().__init__(
            f"Branch '{branch}' not found in {repository} "
            f"(the repository may have no commits yet)"
        )
        self.repository = repository
        self.branch = branch


class RemoteUnavailableError(GitHubError):
    """Raised on transient host failures: network errors, 5xx, rate limiting."""

    def __init__(self, endpoint: str, reason: Optional[str] = None):
        message = f"GitHub API is not available at {endpoint}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.endpoint = endpoint
        self.reason = reason


class RepositoryAlreadyExistsError(GitHubError):
    """Raised when creating a repository whose name is already taken."""

    def __init__(self, name: str):
        super().__init__(f"Repository '{name}' already exists")
        self.name = name


class APIAccessError(GitHubError):
    """Raised when an API call fails for any reason not covered above."""

    def __init__(self, message: str = "GitHub API failure", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BinaryContentError(GitHubError):
    """Raised when a blob cannot be decoded as UTF-8 text."""

    def __init__(self, blob_sha: str):
        super().__init__(f"Blob {blob_sha} is not valid UTF-8 text")
        self.blob_sha = blob_sha
