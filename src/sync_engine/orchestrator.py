"""Sync orchestrator: pull and push cycles between GitHub and a project.

The orchestrator drives one sync cycle at a time:

Pull:
1. Compare the caller's last synced SHA with the remote HEAD
2. Fetch the remote tree, downloading only blobs that differ locally
3. Classify files with SyncPlanner; apply deletions and new files at once
4. Return conflicts to the caller, who later submits resolutions

Push:
1. Collect project files with CommitCollector
2. Upload blobs in fixed-size batches with a pause between batches
3. Create one tree on top of HEAD's tree, one commit, then move the ref

It holds no state across cycles; the caller persists the synced SHA and
any pending conflicts.
"""

import logging
import time
from typing import Callable, List, Optional, Tuple

from src.github_client.errors import (
    BinaryContentError,
    GitHubError,
    RepositoryNotFoundError,
)
from src.project_fs.errors import PermissionFixFailedError
from src.project_fs.filesystem import ProjectFilesystem
from src.project_fs.ignore import IgnoreRules
from src.project_fs.models import FileTreeNode
from src.repository.models import CommitRecord, RepositoryRef
from src.repository.remote_repository import RemoteRepository
from .blob_hash import git_blob_sha
from .commit_collector import CommitCollector, normalize_path
from .conflict_stager import ConflictStager
from .errors import BlobUploadFailedError, CommitFailedError
from .models import (
    ChangedFiles,
    ConflictResolution,
    FileEntry,
    PullCheck,
    PullResult,
    SyncPhase,
)
from .sync_planner import SyncPlanner

logger = logging.getLogger(__name__)

# Blob upload throttling
DEFAULT_BATCH_SIZE = 7
DEFAULT_BATCH_DELAY = 1.0


class SyncOrchestrator:
    """Coordinates RemoteRepository and ProjectFilesystem for sync cycles.

    Repositories are addressed by their id, which is re-resolved on every
    operation so renamed repositories keep working.

    Attributes:
        remote: Remote Git host
        filesystem: Project files
        batch_size: Blobs uploaded per batch
        batch_delay: Seconds slept between blob batches
        ignore_rules: Paths excluded from commits and from local deletion
        phase: Phase of the current cycle

    Example:
        >>> orchestrator = SyncOrchestrator(GitHubRepository(api), LocalProjectFilesystem(root))
        >>> check = orchestrator.check_if_pull_needed("123456", state.last_synced_commit_sha)
        >>> if check.needs_pull:
        ...     result = orchestrator.pull("123456", check.latest_commit.sha)
    """

    def __init__(
        self,
        remote: RemoteRepository,
        filesystem: ProjectFilesystem,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        ignore_rules: Optional[IgnoreRules] = None,
        keep_empty_files: bool = False,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        self.remote = remote
        self.filesystem = filesystem
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._sleep = sleep
        self.ignore_rules = ignore_rules if ignore_rules is not None else IgnoreRules()
        self.collector = CommitCollector(filesystem, self.ignore_rules, keep_empty_files)
        self.planner = SyncPlanner()
        self.stager = ConflictStager(filesystem)
        self.phase = SyncPhase.IDLE

    def _set_phase(self, phase: SyncPhase) -> None:
        logger.debug(f"Sync phase: {self.phase.value} -> {phase.value}")
        self.phase = phase

    def _resolve(self, repo_id: str) -> RepositoryRef:
        ref = self.remote.resolve_by_id(repo_id)
        if ref is None:
            raise RepositoryNotFoundError(repo_id)
        return ref

    def _fix_permissions(self) -> None:
        try:
            self.filesystem.fix_permissions()
        except PermissionFixFailedError as e:
            logger.warning(f"Permission fix failed: {e}")

    def _local_paths(self) -> List[str]:
        """Local paths that take part in sync (hidden and ignored left out)."""
        return self.ignore_rules.filter(self.filesystem.list_paths())

    # === Pull ===

    def check_if_pull_needed(self, repo_id: str, local_sha: Optional[str]) -> PullCheck:
        """Check whether the remote HEAD moved past the last synced commit.

        Args:
            repo_id: Repository id
            local_sha: Last synced commit SHA (None if never synced)

        Returns:
            PullCheck with the remote HEAD commit

        Raises:
            RepositoryNotFoundError: If the id does not resolve
            BranchNotFoundError: If the repository has no commits
        """
        self._set_phase(SyncPhase.CHECKING)
        try:
            ref = self._resolve(repo_id)
            head = self.remote.get_head_commit(ref)
        except Exception:
            self._set_phase(SyncPhase.IDLE)
            raise
        needs_pull = local_sha is None or local_sha != head.sha

        logger.info(
            f"{ref.full_name}: HEAD {head.sha[:7]}, last synced "
            f"{local_sha[:7] if local_sha else 'never'} -> "
            f"{'pull needed' if needs_pull else 'up to date'}"
        )
        self._set_phase(SyncPhase.PULL_READY if needs_pull else SyncPhase.IDLE)
        return PullCheck(needs_pull=needs_pull, latest_commit=head)

    def fetch_remote_files(
        self,
        repo_id: str,
        commit_sha: Optional[str] = None,
    ) -> Tuple[CommitRecord, List[FileEntry], List[str]]:
        """Fetch the files of a commit (HEAD by default).

        Blobs whose SHA matches the git blob SHA of the local file are not
        downloaded; the local content is identical and is reused.

        Returns:
            Tuple of (commit, files, skipped paths of non-text blobs)
        """
        return self._fetch(self._resolve(repo_id), commit_sha)

    def _fetch(
        self,
        ref: RepositoryRef,
        commit_sha: Optional[str],
    ) -> Tuple[CommitRecord, List[FileEntry], List[str]]:
        if commit_sha:
            commit = self.remote.get_commit(ref, commit_sha)
        else:
            commit = self.remote.get_head_commit(ref)

        entries = [entry for entry in self.remote.get_tree_recursive(ref, commit.tree_sha) if entry.is_file]
        files: List[FileEntry] = []
        skipped: List[str] = []
        downloaded = 0

        for entry in entries:
            path = normalize_path(entry.path)
            local_content = self.filesystem.read_file(path)
            if local_content is not None and git_blob_sha(local_content) == entry.blob_sha:
                files.append(FileEntry(path=path, content=local_content))
                continue

            try:
                content = self.remote.read_blob(ref, entry.blob_sha)
            except BinaryContentError:
                logger.warning(f"Skipping non-text file {path}")
                skipped.append(path)
                continue
            downloaded += 1
            files.append(FileEntry(path=path, content=content))

        logger.info(
            f"Fetched {len(files)} files from {ref.full_name}@{commit.sha[:7]} "
            f"({downloaded} downloaded, {len(skipped)} skipped)"
        )
        return commit, files, skipped

    def pull_from_github(
        self,
        remote_files: List[FileEntry],
        commit_sha: Optional[str] = None,
        skipped_files: Optional[List[str]] = None,
    ) -> PullResult:
        """Apply a remote file set to the project.

        Deletions and new files are written immediately; conflicting files
        are left exactly as found and returned for resolution.

        Args:
            remote_files: Files of the remote commit
            commit_sha: Commit the files belong to (reported back)
            skipped_files: Remote paths that could not be fetched; their
                local copies are neither deleted nor overwritten

        Returns:
            PullResult
        """
        self._set_phase(SyncPhase.PULLING)
        skipped_remote = list(skipped_files or [])
        local_paths = [path for path in self._local_paths() if path not in skipped_remote]

        plan = self.planner.plan(remote_files, local_paths, self.filesystem.read_file)

        for path in plan.deleted_paths:
            self.filesystem.delete_file(path)
        for entry in plan.new_files:
            self.filesystem.write_file(entry.path, entry.content)
        self._fix_permissions()

        result = PullResult(
            success=True,
            conflicts=plan.conflicts,
            new_files=[entry.path for entry in plan.new_files],
            deleted_files=plan.deleted_paths,
            updated_files=[],
            commit_sha=commit_sha,
            skipped_files=skipped_remote + plan.skipped_paths,
        )
        logger.info(
            f"Pull applied: {len(result.new_files)} new, {len(result.deleted_files)} deleted, "
            f"{len(result.conflicts)} conflicts"
        )
        self._set_phase(result.phase)
        return result

    def pull(self, repo_id: str, commit_sha: Optional[str] = None) -> PullResult:
        """Fetch a commit (HEAD by default) and apply it to the project."""
        commit, files, skipped = self._fetch(self._resolve(repo_id), commit_sha)
        return self.pull_from_github(files, commit.sha, skipped)

    def resolve_conflicts(self, resolutions: List[ConflictResolution]) -> List[str]:
        """Apply resolutions for conflicts returned by a pull.

        Returns:
            Paths overwritten with incoming content

        Raises:
            ValueError: If a resolution value is invalid (nothing is written)
        """
        written = self.stager.apply_resolutions(resolutions)
        self._set_phase(SyncPhase.PULL_COMPLETE)
        return written

    # === Push ===

    def collect_files(self, file_tree: Optional[List[FileTreeNode]] = None) -> List[FileEntry]:
        """Collect committable files (from the filesystem tree by default)."""
        if file_tree is None:
            file_tree = self.filesystem.get_file_tree()
        return self.collector.collect(file_tree)

    def commit_and_push(self, repo_id: str, files: List[FileEntry], message: str) -> CommitRecord:
        """Commit files on top of the remote HEAD and move the branch.

        Args:
            repo_id: Repository id
            files: Files to write; paths not listed keep their HEAD content
            message: Commit message

        Returns:
            The new CommitRecord (to be persisted as the synced SHA)

        Raises:
            RepositoryNotFoundError: If the id does not resolve
            BlobUploadFailedError: If a blob upload fails; nothing else is
                sent to the host afterwards
            CommitFailedError: If tree, commit or ref creation fails
        """
        self._set_phase(SyncPhase.COMMITTING)
        try:
            ref = self._resolve(repo_id)
            head = self.remote.get_head_commit(ref)
            entries = self._upload_blobs(ref, files)

            try:
                tree_sha = self.remote.create_tree(ref, head.tree_sha, entries)
            except GitHubError as e:
                raise CommitFailedError("tree", str(e)) from e

            try:
                commit = self.remote.create_commit(ref, tree_sha, head.sha, message)
            except GitHubError as e:
                raise CommitFailedError("commit", str(e)) from e

            try:
                self.remote.update_ref(ref, commit.sha)
            except GitHubError as e:
                logger.error(f"Commit {commit.sha[:7]} created but {ref.full_name} was not updated")
                raise CommitFailedError("ref", str(e)) from e
        except Exception:
            self._set_phase(SyncPhase.COMMIT_FAILED)
            raise

        logger.info(f"Pushed {len(files)} files to {ref.full_name} as {commit.sha[:7]}")
        self._set_phase(SyncPhase.COMMIT_COMPLETE)
        return commit

    def _upload_blobs(self, ref: RepositoryRef, files: List[FileEntry]) -> List[Tuple[str, str]]:
        """Upload blobs sequentially in batches, pausing between batches."""
        entries: List[Tuple[str, str]] = []
        batches = [files[i:i + self.batch_size] for i in range(0, len(files), self.batch_size)]

        for index, batch in enumerate(batches):
            if index > 0:
                self._sleep(self.batch_delay)
            logger.debug(f"Uploading blob batch {index + 1}/{len(batches)} ({len(batch)} files)")
            for entry in batch:
                try:
                    blob_sha = self.remote.create_blob(ref, entry.content)
                except GitHubError as e:
                    raise BlobUploadFailedError(entry.path, str(e)) from e
                entries.append((entry.path, blob_sha))

        return entries

    # === Read-only comparison ===

    def get_changed_files(self, repo_id: str, commit_sha: Optional[str] = None) -> ChangedFiles:
        """Compare the committable local files with a commit (HEAD by default)."""
        ref = self._resolve(repo_id)
        _, remote_files, skipped = self._fetch(ref, commit_sha)
        remote = {
            entry.path: entry.content
            for entry in remote_files
            if not self.ignore_rules.is_ignored(entry.path)
        }
        local = {entry.path: entry.content for entry in self.collect_files()}

        return ChangedFiles(
            modified=sorted(path for path in local if path in remote and remote[path] != local[path]),
            created=sorted(path for path in local if path not in remote and path not in skipped),
            deleted=sorted(path for path in remote if path not in local),
        )
