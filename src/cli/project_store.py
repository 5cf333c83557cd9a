"""Project state persistence and per-project locking.

This module stores the project records the sync service reads and writes
around every operation (linked repository id, last synced commit, pending
conflicts) in .sandbox-sync/state.yaml, and provides the advisory lock that
serialises sync cycles on the same project.

State file structure:
    projects:
      "42":
        name: my-app
        local_path: /workspace/my-app
        repository_id: "123456"
        last_commit: 9fceb02...
        pending:
          commit_sha: 1a2b3c...
          conflicts:
            - path: src/app.py
              localContent: "..."
              incomingContent: "..."
"""

import logging
import os
import re
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

# Import fcntl for POSIX file locking (not available on Windows)
try:
    import fcntl
    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False

import yaml

from src.sync_engine.models import Conflict
from .errors import LockTimeoutError, ProjectNotFoundError, StateError, StateFilesystemError
from .models import PendingConflicts, ProjectRecord

logger = logging.getLogger(__name__)

# Seconds between lock attempts
LOCK_POLL_INTERVAL = 0.1
# Seconds to wait for the state file lock
STATE_LOCK_TIMEOUT = 10.0


class ProjectStore:
    """Loads, validates and saves project records.

    Every mutation is a load-modify-save of the whole file under a store-wide
    lock; callers additionally hold the project lock for a whole sync cycle.

    Attributes:
        state_path: Path of the YAML state file
        lock_dir: Directory holding the per-project lock files
        state_lock_path: Lock file guarding writes to the state file

    Example:
        >>> store = ProjectStore(".sandbox-sync/state.yaml")
        >>> store.add_project("42", "my-app", "/workspace/my-app")
        >>> with store.lock("42"):
        ...     record = store.get("42")
    """

    DEFAULT_STATE_DIR = '.sandbox-sync'
    DEFAULT_STATE_FILE = 'state.yaml'

    def __init__(self, state_path: Optional[str] = None):
        self.state_path = state_path or os.path.join(self.DEFAULT_STATE_DIR, self.DEFAULT_STATE_FILE)
        self.lock_dir = Path(os.path.dirname(os.path.abspath(self.state_path))) / "locks"
        self.state_lock_path = Path(os.path.abspath(self.state_path) + ".lock")

    # === Loading and saving ===

    def load(self) -> Dict[str, ProjectRecord]:
        """Load all project records.

        Returns:
            Dict mapping project id to ProjectRecord (empty if no file)

        Raises:
            StateFilesystemError: If the file cannot be read
            StateError: If the file is malformed
        """
        try:
            with open(self.state_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return {}
        except PermissionError:
            raise StateFilesystemError(self.state_path, 'read', 'Permission denied')
        except OSError as e:
            raise StateFilesystemError(self.state_path, 'read', str(e))

        if not content.strip():
            return {}

        try:
            state_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise StateError(f"Invalid YAML syntax: {str(e)}")

        if state_dict is None:
            return {}
        if not isinstance(state_dict, dict):
            raise StateError(
                f"State must be a YAML dictionary, got {type(state_dict).__name__}"
            )

        projects = state_dict.get('projects') or {}
        if not isinstance(projects, dict):
            raise StateError(
                f"Field 'projects' must be a dictionary, got {type(projects).__name__}",
                'projects'
            )

        return {
            str(project_id): self._parse_record(str(project_id), raw)
            for project_id, raw in projects.items()
        }

    def save(self, projects: Dict[str, ProjectRecord]) -> None:
        """Write all project records.

        Raises:
            StateFilesystemError: If the file cannot be written
        """
        state_dict = {
            'projects': {
                project_id: self._dump_record(record)
                for project_id, record in projects.items()
            }
        }

        yaml_str = yaml.safe_dump(
            state_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        state_dir = os.path.dirname(self.state_path)
        if state_dir:
            try:
                os.makedirs(state_dir, exist_ok=True)
            except OSError as e:
                raise StateFilesystemError(state_dir, 'create_directory', str(e))

        # Atomic replace: readers never see a partial file
        tmp_path = f"{self.state_path}.tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
            os.replace(tmp_path, self.state_path)
        except PermissionError:
            raise StateFilesystemError(self.state_path, 'write', 'Permission denied')
        except OSError as e:
            raise StateFilesystemError(self.state_path, 'write', str(e))

    @classmethod
    def _parse_record(cls, project_id: str, raw: Any) -> ProjectRecord:
        field_prefix = f"projects.{project_id}"
        if not isinstance(raw, dict):
            raise StateError("Project entry must be a dictionary", field_prefix)

        for name in ('name', 'local_path'):
            if not isinstance(raw.get(name), str) or not raw[name].strip():
                raise StateError("Missing or empty string", f"{field_prefix}.{name}")

        for name in ('repository_id', 'last_commit'):
            value = raw.get(name)
            if value is not None and not isinstance(value, (str, int)):
                raise StateError(
                    f"Must be a string, got {type(value).__name__}",
                    f"{field_prefix}.{name}"
                )

        pending = None
        raw_pending = raw.get('pending')
        if raw_pending is not None:
            if not isinstance(raw_pending, dict) or not isinstance(raw_pending.get('conflicts', []), list):
                raise StateError("Must contain a 'conflicts' list", f"{field_prefix}.pending")
            try:
                conflicts = [Conflict.from_dict(item) for item in raw_pending.get('conflicts', [])]
            except (KeyError, TypeError, AttributeError) as e:
                raise StateError(f"Invalid conflict entry: {e}", f"{field_prefix}.pending")
            pending = PendingConflicts(
                commit_sha=raw_pending.get('commit_sha'),
                conflicts=conflicts,
            )

        repository_id = raw.get('repository_id')
        last_commit = raw.get('last_commit')
        return ProjectRecord(
            name=raw['name'],
            local_path=raw['local_path'],
            repository_id=str(repository_id) if repository_id is not None else None,
            last_commit=str(last_commit) if last_commit is not None else None,
            pending=pending,
        )

    @staticmethod
    def _dump_record(record: ProjectRecord) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'name': record.name,
            'local_path': record.local_path,
            'repository_id': record.repository_id,
            'last_commit': record.last_commit,
        }
        if record.pending is not None:
            data['pending'] = {
                'commit_sha': record.pending.commit_sha,
                'conflicts': [conflict.to_dict() for conflict in record.pending.conflicts],
            }
        return data

    # === Record access ===

    def get(self, project_id: str) -> ProjectRecord:
        """Get a project record.

        Raises:
            ProjectNotFoundError: If the project is not registered
        """
        projects = self.load()
        if project_id not in projects:
            raise ProjectNotFoundError(project_id)
        return projects[project_id]

    def put(self, project_id: str, record: ProjectRecord) -> None:
        """Insert or replace a project record.

        Records of other projects are re-read under the state lock, so
        concurrent writers for different projects do not overwrite each other.
        """
        with self._state_lock():
            projects = self.load()
            projects[project_id] = record
            self.save(projects)

    def add_project(
        self,
        project_id: str,
        name: str,
        local_path: str,
        repository_id: Optional[str] = None,
    ) -> ProjectRecord:
        """Register a project, keeping sync fields of an existing record."""
        with self._state_lock():
            projects = self.load()
            existing = projects.get(project_id)
            record = ProjectRecord(
                name=name,
                local_path=os.path.abspath(local_path),
                repository_id=repository_id or (existing.repository_id if existing else None),
                last_commit=existing.last_commit if existing else None,
                pending=existing.pending if existing else None,
            )
            projects[project_id] = record
            self.save(projects)
        logger.info(f"Registered project {project_id} at {record.local_path}")
        return record

    # === Locking ===

    def lock(self, project_id: str, timeout: float = 30.0):
        """Hold the exclusive advisory lock of a project.

        Args:
            project_id: Project to lock
            timeout: Maximum time to wait for the lock (seconds)

        Raises:
            LockTimeoutError: If the lock is not acquired within timeout
        """
        safe_id = re.sub(r'[^A-Za-z0-9._-]', '_', project_id)
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        return self._flock(self.lock_dir / f"{safe_id}.lock", project_id, timeout)

    def _state_lock(self, timeout: float = STATE_LOCK_TIMEOUT):
        """Hold the lock guarding load-modify-save of the whole state file."""
        self.state_lock_path.parent.mkdir(parents=True, exist_ok=True)
        return self._flock(self.state_lock_path, 'state file', timeout)

    @staticmethod
    @contextmanager
    def _flock(lock_file_path: Path, label: str, timeout: float) -> Iterator[None]:
        lock_acquired = False

        with open(lock_file_path, 'w') as lock_file:
            try:
                if HAS_FCNTL:
                    start_time = time.monotonic()
                    while True:
                        try:
                            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                            lock_acquired = True
                            logger.debug(f"Lock acquired for {label}")
                            break
                        except OSError:
                            if time.monotonic() - start_time > timeout:
                                raise LockTimeoutError(label, timeout)
                            time.sleep(LOCK_POLL_INTERVAL)
                else:
                    logger.warning(
                        "File locking not available on this platform. "
                        "Concurrent syncs may lose updates."
                    )

                yield

            finally:
                if HAS_FCNTL and lock_acquired:
                    try:
                        fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
                        logger.debug(f"Lock released for {label}")
                    except OSError as e:
                        logger.warning(f"Failed to release lock: {e}")
