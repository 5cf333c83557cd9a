"""Remote repository capability and typed records."""

from .models import CommitRecord, RepositoryRef, TreeEntry
from .remote_repository import GitHubRepository, RemoteRepository

__all__ = [
    "CommitRecord",
    "RepositoryRef",
    "TreeEntry",
    "GitHubRepository",
    "RemoteRepository",
]
