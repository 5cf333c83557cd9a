"""Pytest configuration and fixtures for integration tests.

Integration tests run the sync engine end to end against the in-memory Git
host (FakeRemoteRepository) and either the in-memory or the on-disk project
filesystem. No network access is needed.
"""

from pathlib import Path
from typing import List

import pytest

from src.cli.models import SyncConfig
from src.cli.project_store import ProjectStore
from src.cli.sync_service import GitHubSyncService
from src.project_fs.filesystem import LocalProjectFilesystem
from src.sync_engine.orchestrator import SyncOrchestrator
from tests.helpers import FakeRemoteRepository, InMemoryFilesystem


class RecordingSleep:
    """Stand-in for time.sleep that records requested delays."""

    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def remote() -> FakeRemoteRepository:
    return FakeRemoteRepository()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_orchestrator(remote, sleep):
    """Factory for an orchestrator over the shared fake remote."""
    def _make(fs: InMemoryFilesystem, **kwargs) -> SyncOrchestrator:
        return SyncOrchestrator(remote, fs, sleep=sleep, **kwargs)
    return _make


@pytest.fixture
def project_dir(tmp_path) -> Path:
    path = tmp_path / "workspace" / "project"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def local_fs(project_dir) -> LocalProjectFilesystem:
    return LocalProjectFilesystem(str(project_dir))


@pytest.fixture
def service(tmp_path, remote, sleep, project_dir) -> GitHubSyncService:
    """Sync service over a real state file and the on-disk project."""
    store = ProjectStore(str(tmp_path / ".sandbox-sync" / "state.yaml"))
    store.add_project("42", "demo", str(project_dir))
    return GitHubSyncService(store, remote, SyncConfig(lock_timeout=5.0), sleep=sleep)
