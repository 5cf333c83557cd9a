"""Integration tests for GitHub project sync.

These tests run whole sync cycles (check, pull, resolve, commit) through
SyncOrchestrator and GitHubSyncService against the in-memory remote and
either the in-memory or the real local filesystem.

Test Coverage:
- Sync properties: idempotent re-pull, conflict symmetry, no auto-merge,
  deletion safety, commit atomicity, batch sizing
- Service round trips: state.yaml persistence, CRLF content, binary files,
  deleted repositories
"""
