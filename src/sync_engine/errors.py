"""Typed exceptions raised while pushing local changes to GitHub."""

from typing import Optional

from src.github_client.errors import SyncError


class CommitFailedError(SyncError):
    """Raised when a commit cannot be completed.

    The branch ref only moves in the last stage, so a failure at any stage
    leaves the remote HEAD unchanged (at worst an unreferenced commit object
    remains on the host).

    Attributes:
        stage: Step that failed ("blob", "tree", "commit" or "ref")
        reason: Underlying error message
    """

    def __init__(self, stage: str, reason: Optional[str] = None):
        message = f"Commit failed at stage '{stage}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.stage = stage
        self.reason = reason


class BlobUploadFailedError(CommitFailedError):
    """Raised when uploading one file's blob fails; the commit is aborted."""

    def __init__(self, path: str, reason: Optional[str] = None):
        super().__init__("blob", f"{path}: {reason}" if reason else path)
        self.path = path
