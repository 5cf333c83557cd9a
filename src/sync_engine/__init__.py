"""Sync engine: pull, conflict staging and push between GitHub and a project."""

from .commit_collector import CommitCollector
from .conflict_stager import ConflictStager
from .errors import BlobUploadFailedError, CommitFailedError
from .models import (
    ChangedFiles,
    Conflict,
    ConflictResolution,
    FileEntry,
    PullCheck,
    PullResult,
    Resolution,
    SyncPhase,
    SyncPlan,
    SyncState,
)
from .orchestrator import SyncOrchestrator
from .sync_planner import SyncPlanner

__all__ = [
    "CommitCollector",
    "ConflictStager",
    "BlobUploadFailedError",
    "CommitFailedError",
    "ChangedFiles",
    "Conflict",
    "ConflictResolution",
    "FileEntry",
    "PullCheck",
    "PullResult",
    "Resolution",
    "SyncPhase",
    "SyncPlan",
    "SyncState",
    "SyncOrchestrator",
    "SyncPlanner",
]
