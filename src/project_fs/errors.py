"""Typed exceptions for project filesystem operations."""

from typing import Optional

from src.github_client.errors import SyncError


class FilesystemError(SyncError):
    """Raised when a project file cannot be written or deleted."""

    def __init__(self, path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.path = path
        self.operation = operation
        self.reason = reason


class PermissionFixFailedError(SyncError):
    """Raised when ownership of the project tree cannot be restored.

    Callers treat this as non-fatal: file contents are already in place.
    """

    def __init__(self, root: str, owner: str, reason: Optional[str] = None):
        message = f"Could not set owner '{owner}' on {root}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.root = root
        self.owner = owner
        self.reason = reason
