"""Command-line interface and project-level sync service.

This package provides the `sandbox-sync` CLI tool and the GitHubSyncService
it drives: project records and locking, configuration, and the project-id
operations (check, pull, resolve, commit, create and remove repository).
"""

from .sync_service import GitHubSyncService
from .project_store import ProjectStore
from .config import ConfigLoader
from .models import ExitCode, SyncConfig, ProjectRecord, PendingConflicts, RepoStatus
from .errors import (
    CLIError,
    ConfigError,
    LockTimeoutError,
    NothingToCommitError,
    ProjectNotFoundError,
    RepositoryNotLinkedError,
    StateError,
    StateFilesystemError,
)

__all__ = [
    'GitHubSyncService',
    'ProjectStore',
    'ConfigLoader',
    'ExitCode',
    'SyncConfig',
    'ProjectRecord',
    'PendingConflicts',
    'RepoStatus',
    'CLIError',
    'ConfigError',
    'LockTimeoutError',
    'NothingToCommitError',
    'ProjectNotFoundError',
    'RepositoryNotLinkedError',
    'StateError',
    'StateFilesystemError',
]
