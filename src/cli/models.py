"""Data models for CLI operations.

This module defines the data models used by the CLI and the sync service.
All models use dataclasses for clean, type-safe data structures, following
the patterns established in src/sync_engine/models.py.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional

from src.repository.models import RepositoryRef
from src.sync_engine.models import Conflict


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (config issues, validation failures)
    - CONFLICTS (2): Conflicts are waiting for a resolution
    - AUTH_ERROR (3): Authentication or authorization failure
    - NETWORK_ERROR (4): Network connectivity, API availability or rate limiting
    - NOT_FOUND (5): Project, repository or branch not found

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFLICTS = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
    NOT_FOUND = 5


@dataclass
class SyncConfig:
    """Tool configuration from .sandbox-sync/config.yaml.

    Attributes:
        batch_size: Blobs uploaded per batch when committing
        batch_delay: Seconds to wait between blob batches
        default_commit_message: Message used when none is given
        keep_empty_files: Commit zero-length files instead of dropping them
        include_hidden: Sync dot-files and dot-directories
        respect_gitignore: Apply the project's .gitignore
        file_owner: "user[:group]" to chown the project to after writes
        lock_timeout: Seconds to wait for the per-project lock
        api_url: GitHub API base URL (empty: GITHUB_API_URL or api.github.com)
    """
    batch_size: int = 7
    batch_delay: float = 1.0
    default_commit_message: str = "commit from sandbox-sync"
    keep_empty_files: bool = False
    include_hidden: bool = False
    respect_gitignore: bool = True
    file_owner: Optional[str] = None
    lock_timeout: float = 30.0
    api_url: str = ""


@dataclass
class PendingConflicts:
    """Conflicts returned by a pull that still wait for a resolution.

    Attributes:
        commit_sha: Commit the conflicting pull was computed against
        conflicts: Unresolved conflicts
    """
    commit_sha: Optional[str] = None
    conflicts: List[Conflict] = field(default_factory=list)


@dataclass
class ProjectRecord:
    """A project tracked in .sandbox-sync/state.yaml.

    Attributes:
        name: Project name (basis of the repository name)
        local_path: Directory holding the project files
        repository_id: Linked GitHub repository id (None if not linked)
        last_commit: SHA of the last commit pulled or pushed
        pending: Conflicts waiting for a resolution, if any
    """
    name: str
    local_path: str
    repository_id: Optional[str] = None
    last_commit: Optional[str] = None
    pending: Optional[PendingConflicts] = None


@dataclass
class RepoStatus:
    """Whether a project's repository is linked and still exists remotely."""
    exists_in_db: bool
    exists_in_github: bool
    repo: Optional[RepositoryRef] = None

    def to_dict(self) -> Dict[str, Any]:
        repo = None
        if self.repo is not None:
            repo = {
                "id": self.repo.id,
                "fullName": self.repo.full_name,
                "defaultBranch": self.repo.default_branch,
                "url": self.repo.html_url,
            }
        return {
            "existsInDB": self.exists_in_db,
            "existsInGitHub": self.exists_in_github,
            "repo": repo,
        }
