"""Typed records returned by the remote repository capability.

These dataclasses are the only shapes the sync engine sees from the remote
host; all JSON decoding happens in the GitHub adapter.
"""

from dataclasses import dataclass


@dataclass
class RepositoryRef:
    """Handle to a remote repository.

    The numeric id is authoritative: repositories can be renamed, so the
    persisted project record only stores the id. The name is used to avoid
    collisions when creating new repositories.

    Attributes:
        id: Host-assigned repository id (as a string)
        owner: Login of the owning account
        name: Repository name
        default_branch: Branch synchronized with the project
        html_url: Browser URL of the repository

    Example:
        >>> ref = RepositoryRef(id="42", owner="octo", name="demo")
        >>> ref.full_name
        'octo/demo'
    """
    id: str
    owner: str
    name: str
    default_branch: str = "main"
    html_url: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class CommitRecord:
    """A commit on the remote host.

    Attributes:
        sha: Commit SHA
        message: Commit message
        author_date: ISO 8601 author timestamp
        tree_sha: SHA of the root tree of the commit
    """
    sha: str
    message: str
    author_date: str
    tree_sha: str


@dataclass
class TreeEntry:
    """One item of a recursive tree listing."""
    path: str
    blob_sha: str
    is_file: bool = True
