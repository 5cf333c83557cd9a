"""Project-level sync operations.

GitHubSyncService is the surface route handlers (and the CLI) call with a
project id. It loads the project record, builds a SyncOrchestrator for the
project directory, runs one operation under the project's lock and writes
back the repository id, last synced commit and pending conflicts.
"""

import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional

from src.github_client.errors import RepositoryAlreadyExistsError, RepositoryNotFoundError
from src.project_fs.filesystem import LocalProjectFilesystem, ProjectFilesystem
from src.project_fs.ignore import GITIGNORE_FILE, IgnoreRules
from src.repository.models import RepositoryRef
from src.repository.remote_repository import RemoteRepository
from src.sync_engine.models import ChangedFiles, Conflict, ConflictResolution, PullCheck, PullResult
from src.sync_engine.orchestrator import SyncOrchestrator
from .errors import NothingToCommitError, RepositoryNotLinkedError
from .models import PendingConflicts, ProjectRecord, RepoStatus, SyncConfig
from .project_store import ProjectStore

logger = logging.getLogger(__name__)

INITIAL_COMMIT_MESSAGE = "initial commit from sandbox-sync"
README_FILE = "README.md"


def repository_name_for(project_name: str) -> str:
    """Derive a valid repository name from a project name.

    Example:
        >>> repository_name_for("My App!")
        'My-App'
    """
    name = re.sub(r'[^A-Za-z0-9._-]+', '-', project_name).strip('-.')
    return name or "project"


class GitHubSyncService:
    """Runs sync operations for registered projects.

    Attributes:
        store: Project record persistence
        remote: Remote repository capability
        config: Tool configuration

    Example:
        >>> service = GitHubSyncService(ProjectStore(), GitHubRepository(api), SyncConfig())
        >>> check = service.check_pull("42")
        >>> if check.needs_pull:
        ...     result = service.pull("42")
    """

    def __init__(
        self,
        store: ProjectStore,
        remote: RemoteRepository,
        config: Optional[SyncConfig] = None,
        filesystem_factory: Optional[Callable[[ProjectRecord], ProjectFilesystem]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.remote = remote
        self.config = config or SyncConfig()
        self._filesystem_factory = filesystem_factory or self._local_filesystem
        self._sleep = sleep

    def _local_filesystem(self, record: ProjectRecord) -> ProjectFilesystem:
        return LocalProjectFilesystem(record.local_path, owner=self.config.file_owner)

    def _orchestrator(self, record: ProjectRecord) -> SyncOrchestrator:
        filesystem = self._filesystem_factory(record)
        gitignore = filesystem.read_file(GITIGNORE_FILE) if self.config.respect_gitignore else None
        ignore_rules = IgnoreRules.from_gitignore(gitignore, include_hidden=self.config.include_hidden)
        return SyncOrchestrator(
            self.remote,
            filesystem,
            batch_size=self.config.batch_size,
            batch_delay=self.config.batch_delay,
            sleep=self._sleep,
            ignore_rules=ignore_rules,
            keep_empty_files=self.config.keep_empty_files,
        )

    def _lock(self, project_id: str):
        return self.store.lock(project_id, timeout=self.config.lock_timeout)

    @staticmethod
    def _require_repository_id(project_id: str, record: ProjectRecord) -> str:
        if not record.repository_id:
            raise RepositoryNotLinkedError(project_id)
        return record.repository_id

    def _unlink(self, project_id: str, record: ProjectRecord) -> None:
        logger.warning(
            f"Repository {record.repository_id} of project {project_id} no longer exists; unlinking"
        )
        record.repository_id = None
        record.last_commit = None
        record.pending = None
        self.store.put(project_id, record)

    def _resolve_linked(self, project_id: str, record: ProjectRecord) -> RepositoryRef:
        """Resolve the linked repository, unlinking it if it is gone."""
        repo_id = self._require_repository_id(project_id, record)
        ref = self.remote.resolve_by_id(repo_id)
        if ref is None:
            self._unlink(project_id, record)
            raise RepositoryNotFoundError(repo_id)
        return ref

    # === Status ===

    def repo_status(self, project_id: str) -> RepoStatus:
        """Report whether a repository is linked and still exists."""
        record = self.store.get(project_id)
        if not record.repository_id:
            return RepoStatus(exists_in_db=False, exists_in_github=False)
        ref = self.remote.resolve_by_id(record.repository_id)
        return RepoStatus(exists_in_db=True, exists_in_github=ref is not None, repo=ref)

    def get_pending_conflicts(self, project_id: str) -> List[Conflict]:
        """Conflicts from the last pull that still wait for a resolution."""
        record = self.store.get(project_id)
        return list(record.pending.conflicts) if record.pending else []

    # === Pull ===

    def check_pull(self, project_id: str) -> PullCheck:
        """Check whether the remote moved past the last synced commit.

        Raises:
            RepositoryNotLinkedError: If no repository is linked
        """
        with self._lock(project_id):
            record = self.store.get(project_id)
            repo_id = self._require_repository_id(project_id, record)
            return self._orchestrator(record).check_if_pull_needed(repo_id, record.last_commit)

    def pull(self, project_id: str, commit_sha: Optional[str] = None) -> PullResult:
        """Pull a commit (HEAD by default) into the project.

        Without conflicts the pulled SHA becomes the last synced commit. With
        conflicts the SHA is kept with the pending conflicts and only recorded
        once they are resolved.
        """
        with self._lock(project_id):
            record = self.store.get(project_id)
            repo_id = self._require_repository_id(project_id, record)
            result = self._orchestrator(record).pull(repo_id, commit_sha)

            if result.conflicts:
                record.pending = PendingConflicts(commit_sha=result.commit_sha, conflicts=result.conflicts)
                logger.info(f"Project {project_id}: {len(result.conflicts)} conflicts pending")
            else:
                record.last_commit = result.commit_sha
                record.pending = None
            self.store.put(project_id, record)
            return result

    def resolve_conflicts(
        self,
        project_id: str,
        resolutions: List[ConflictResolution],
        commit_sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Apply resolutions and record the synced commit.

        The synced SHA is commit_sha if given, else the SHA stored with the
        pending conflicts, else the current remote HEAD. It is only recorded
        once no pending conflict is left.

        Raises:
            ValueError: If a resolution value is invalid (nothing is written)
        """
        with self._lock(project_id):
            record = self.store.get(project_id)
            orchestrator = self._orchestrator(record)
            orchestrator.resolve_conflicts(resolutions)

            resolved_paths = {item.path for item in resolutions}
            remaining: List[Conflict] = []
            pending_sha = None
            if record.pending:
                pending_sha = record.pending.commit_sha
                remaining = [c for c in record.pending.conflicts if c.path not in resolved_paths]

            if remaining:
                record.pending.conflicts = remaining
                logger.info(f"Project {project_id}: {len(remaining)} conflicts still pending")
            else:
                sha = commit_sha or pending_sha
                if sha is None and record.repository_id:
                    sha = self.remote.get_head_commit(self._resolve_linked(project_id, record)).sha
                record.last_commit = sha
                record.pending = None

            self.store.put(project_id, record)
            return {
                "success": True,
                "remainingConflicts": [conflict.path for conflict in remaining],
            }

    # === Push ===

    def commit(self, project_id: str, message: Optional[str] = None) -> Dict[str, Any]:
        """Commit all project files and push them.

        Raises:
            RepositoryNotLinkedError: If no repository is linked
            RepositoryNotFoundError: If the linked repository is gone (it is
                unlinked first)
            NothingToCommitError: If no file qualifies for the commit
        """
        with self._lock(project_id):
            record = self.store.get(project_id)
            ref = self._resolve_linked(project_id, record)
            orchestrator = self._orchestrator(record)

            if record.pending and record.pending.conflicts:
                logger.warning(
                    f"Project {project_id} has {len(record.pending.conflicts)} unresolved "
                    f"conflicts; committing local versions"
                )

            files = orchestrator.collect_files()
            if not files:
                raise NothingToCommitError(project_id)

            try:
                commit = orchestrator.commit_and_push(
                    ref.id, files, message or self.config.default_commit_message
                )
            except RepositoryNotFoundError:
                self._unlink(project_id, record)
                raise

            record.last_commit = commit.sha
            # The pushed local versions supersede any pending conflicts
            record.pending = None
            self.store.put(project_id, record)
            return {"repoUrl": ref.html_url, "commitSha": commit.sha}

    # === Repository lifecycle ===

    def create_repo(self, project_id: str) -> Dict[str, Any]:
        """Create a repository for the project and push the initial commit.

        Raises:
            RepositoryAlreadyExistsError: If a linked repository still exists
        """
        with self._lock(project_id):
            record = self.store.get(project_id)
            if record.repository_id:
                existing = self.remote.resolve_by_id(record.repository_id)
                if existing is not None:
                    raise RepositoryAlreadyExistsError(existing.full_name)
                self._unlink(project_id, record)

            owner = self.remote.get_owner()
            name = self._available_name(owner, repository_name_for(record.name))
            ref = self.remote.create_repository(name)
            record.repository_id = ref.id
            self.store.put(project_id, record)

            orchestrator = self._orchestrator(record)
            self._copy_readme(orchestrator, ref)

            files = orchestrator.collect_files()
            commit = orchestrator.commit_and_push(ref.id, files, INITIAL_COMMIT_MESSAGE)
            record.last_commit = commit.sha
            self.store.put(project_id, record)

            logger.info(f"Project {project_id} linked to {ref.full_name}")
            return {"repoUrl": ref.html_url, "commitSha": commit.sha}

    def _available_name(self, owner: str, base: str) -> str:
        """First of base, base-1, base-2, ... not taken under owner."""
        candidate = base
        suffix = 0
        while self.remote.resolve_by_name(owner, candidate) is not None:
            suffix += 1
            candidate = f"{base}-{suffix}"
        return candidate

    @staticmethod
    def _copy_readme(orchestrator: SyncOrchestrator, ref: RepositoryRef) -> None:
        """Bring the host-generated README.md into the project if it has none."""
        if orchestrator.filesystem.read_file(README_FILE) is not None:
            return
        _, files, _ = orchestrator.fetch_remote_files(ref.id)
        for entry in files:
            if entry.path == README_FILE:
                orchestrator.filesystem.write_file(entry.path, entry.content)
                logger.debug(f"Copied {README_FILE} from {ref.full_name}")
                return

    def remove_repo(self, project_id: str) -> Dict[str, Any]:
        """Delete the linked repository and unlink it.

        A repository that is already gone is tolerated.
        """
        with self._lock(project_id):
            record = self.store.get(project_id)
            repo_id = self._require_repository_id(project_id, record)
            ref = self.remote.resolve_by_id(repo_id)
            if ref is not None:
                try:
                    self.remote.delete_repository(ref)
                except RepositoryNotFoundError:
                    logger.info(f"Repository {ref.full_name} was already deleted")
            else:
                logger.info(f"Repository {repo_id} was already deleted")

            record.repository_id = None
            record.last_commit = None
            record.pending = None
            self.store.put(project_id, record)
            return {"success": True}

    # === Read-only ===

    def changed_files(self, project_id: str) -> ChangedFiles:
        """List local changes since the last synced commit (HEAD if never synced)."""
        with self._lock(project_id):
            record = self.store.get(project_id)
            repo_id = self._require_repository_id(project_id, record)
            return self._orchestrator(record).get_changed_files(repo_id, record.last_commit)
