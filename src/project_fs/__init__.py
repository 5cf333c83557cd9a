"""Project filesystem capability, file tree model and ignore rules."""

from .errors import FilesystemError, PermissionFixFailedError
from .filesystem import LocalProjectFilesystem, ProjectFilesystem
from .ignore import IgnoreRules
from .models import FileTreeNode

__all__ = [
    "FilesystemError",
    "PermissionFixFailedError",
    "LocalProjectFilesystem",
    "ProjectFilesystem",
    "IgnoreRules",
    "FileTreeNode",
]
