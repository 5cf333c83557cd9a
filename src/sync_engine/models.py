"""Data models for the sync engine.

All models use dataclasses. The to_dict() helpers produce the camelCase
payloads expected by the route handlers that consume this library.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from src.repository.models import CommitRecord


class SyncPhase(Enum):
    """Phase of the current sync cycle.

    IDLE -> CHECKING -> PULL_READY -> PULLING -> PULL_COMPLETE
    PULLING -> AWAITING_RESOLUTION -> PULL_COMPLETE
    IDLE -> COMMITTING -> COMMIT_COMPLETE | COMMIT_FAILED
    """
    IDLE = "idle"
    CHECKING = "checking"
    PULL_READY = "pull_ready"
    PULLING = "pulling"
    PULL_COMPLETE = "pull_complete"
    AWAITING_RESOLUTION = "awaiting_resolution"
    COMMITTING = "committing"
    COMMIT_COMPLETE = "commit_complete"
    COMMIT_FAILED = "commit_failed"


class Resolution(str, Enum):
    """Version chosen for a conflicting file.

    MERGED writes content the user assembled from both sides.
    """
    LOCAL = "local"
    INCOMING = "incoming"
    MERGED = "merged"


@dataclass
class FileEntry:
    """A project file: relative posix path and UTF-8 text content."""
    path: str
    content: str


@dataclass
class SyncState:
    """Sync bookkeeping persisted by the caller between cycles.

    Attributes:
        last_synced_commit_sha: SHA of the last commit pulled or pushed
            (None if the project was never synced)
    """
    last_synced_commit_sha: Optional[str] = None


@dataclass
class Conflict:
    """A file whose local and incoming contents differ.

    Both contents are kept verbatim; the local file is left untouched until
    a resolution is applied.

    Attributes:
        path: Project-relative path
        local_content: Content currently on disk
        incoming_content: Content of the remote blob
        resolved: Whether a resolution has been applied
    """
    path: str
    local_content: str
    incoming_content: str
    resolved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "localContent": self.local_content,
            "incomingContent": self.incoming_content,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Conflict":
        return cls(
            path=data["path"],
            local_content=data.get("localContent", ""),
            incoming_content=data.get("incomingContent", ""),
            resolved=bool(data.get("resolved", False)),
        )


@dataclass
class ConflictResolution:
    """The caller's decision for one conflict.

    The resolution is kept as given (enum member or raw string) and only
    validated when applied, so bad input from a request body is rejected
    by ConflictStager before any file is written.

    Example:
        >>> ConflictResolution("a.txt", Resolution.INCOMING, incoming_content="A2")
        >>> ConflictResolution("a.txt", Resolution.MERGED, merged_content="A1 + A2")
    """
    path: str
    resolution: Union[Resolution, str]
    incoming_content: str = ""
    local_content: str = ""
    merged_content: Optional[str] = None

    @classmethod
    def for_conflict(
        cls,
        conflict: Conflict,
        resolution: Union[Resolution, str],
        merged_content: Optional[str] = None,
    ) -> "ConflictResolution":
        return cls(
            path=conflict.path,
            resolution=resolution,
            incoming_content=conflict.incoming_content,
            local_content=conflict.local_content,
            merged_content=merged_content,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConflictResolution":
        return cls(
            path=data["path"],
            resolution=data["resolution"],
            incoming_content=data.get("incomingContent", ""),
            local_content=data.get("localContent", ""),
            merged_content=data.get("mergedContent"),
        )


@dataclass
class SyncPlan:
    """Classification of remote files against the local project.

    Attributes:
        new_files: Remote files missing locally (to be written)
        deleted_paths: Local files missing remotely (to be deleted)
        conflicts: Files present on both sides with different content
        unchanged_paths: Files with identical content on both sides
        skipped_paths: Remote files whose local copy exists but is unreadable
    """
    new_files: List[FileEntry] = field(default_factory=list)
    deleted_paths: List[str] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    unchanged_paths: List[str] = field(default_factory=list)
    skipped_paths: List[str] = field(default_factory=list)


@dataclass
class PullResult:
    """Outcome of a pull.

    New and deleted files have already been applied when this is returned;
    conflicts have not.

    Attributes:
        success: Whether the pull ran to completion
        conflicts: Files awaiting a resolution
        new_files: Paths written from the remote
        deleted_files: Paths removed locally
        updated_files: Always empty; differing files are reported as conflicts
        commit_sha: Commit the pull was computed against
        skipped_files: Remote files left alone (binary, or local copy unreadable)
    """
    success: bool = True
    conflicts: List[Conflict] = field(default_factory=list)
    new_files: List[str] = field(default_factory=list)
    deleted_files: List[str] = field(default_factory=list)
    updated_files: List[str] = field(default_factory=list)
    commit_sha: Optional[str] = None
    skipped_files: List[str] = field(default_factory=list)

    @property
    def phase(self) -> SyncPhase:
        if self.conflicts:
            return SyncPhase.AWAITING_RESOLUTION
        return SyncPhase.PULL_COMPLETE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
            "newFiles": list(self.new_files),
            "deletedFiles": list(self.deleted_files),
            "updatedFiles": list(self.updated_files),
            "commitSha": self.commit_sha,
            "skippedFiles": list(self.skipped_files),
        }


@dataclass
class PullCheck:
    """Answer to "is the project behind the remote?"."""
    needs_pull: bool
    latest_commit: Optional[CommitRecord] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"needsPull": self.needs_pull}
        if self.latest_commit is not None:
            result["latestCommit"] = {
                "sha": self.latest_commit.sha,
                "message": self.latest_commit.message,
                "date": self.latest_commit.author_date,
            }
        return result


@dataclass
class ChangedFiles:
    """Local changes relative to a remote commit.

    Attributes:
        modified: Present on both sides with different content
        created: Present locally only
        deleted: Present remotely only
    """
    modified: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.modified or self.created or self.deleted)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "modified": list(self.modified),
            "created": list(self.created),
            "deleted": list(self.deleted),
        }
