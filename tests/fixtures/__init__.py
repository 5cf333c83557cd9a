"""Test fixtures for the sync tests.

This module provides test fixtures for:
- GitHub REST API payloads (repositories, refs, commits, trees, blobs)
- Sample state.yaml and config.yaml documents
"""

from .github_payloads import (
    SAMPLE_COMMIT,
    SAMPLE_REF,
    SAMPLE_REPOSITORY,
    SAMPLE_TREE,
    SAMPLE_USER,
    get_blob_payload,
    get_commit_payload,
    get_tree_payload,
)
from .state_samples import (
    SAMPLE_CONFIG_FULL,
    SAMPLE_CONFIG_INVALID_YAML,
    SAMPLE_CONFIG_UNKNOWN_FIELD,
    SAMPLE_STATE_BAD_CONFLICT,
    SAMPLE_STATE_EMPTY,
    SAMPLE_STATE_INVALID_YAML,
    SAMPLE_STATE_LINKED,
    SAMPLE_STATE_MISSING_PATH,
    SAMPLE_STATE_NUMERIC_IDS,
    SAMPLE_STATE_PENDING,
    write_sample,
)

__all__ = [
    # GitHub payloads
    "SAMPLE_COMMIT",
    "SAMPLE_REF",
    "SAMPLE_REPOSITORY",
    "SAMPLE_TREE",
    "SAMPLE_USER",
    "get_blob_payload",
    "get_commit_payload",
    "get_tree_payload",
    # State and config samples
    "SAMPLE_CONFIG_FULL",
    "SAMPLE_CONFIG_INVALID_YAML",
    "SAMPLE_CONFIG_UNKNOWN_FIELD",
    "SAMPLE_STATE_BAD_CONFLICT",
    "SAMPLE_STATE_EMPTY",
    "SAMPLE_STATE_INVALID_YAML",
    "SAMPLE_STATE_LINKED",
    "SAMPLE_STATE_MISSING_PATH",
    "SAMPLE_STATE_NUMERIC_IDS",
    "SAMPLE_STATE_PENDING",
    "write_sample",
]
