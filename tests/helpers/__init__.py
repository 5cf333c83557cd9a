"""Test helper modules.

This package provides in-memory stand-ins for the sync engine's collaborators:
- fake_remote: FakeRemoteRepository, a dictionary-backed Git host
- memory_fs: InMemoryFilesystem, a dictionary-backed project filesystem
"""

from .fake_remote import FakeRemoteRepository, blob_sha
from .memory_fs import InMemoryFilesystem

__all__ = [
    'FakeRemoteRepository',
    'InMemoryFilesystem',
    'blob_sha',
]
