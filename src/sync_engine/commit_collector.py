"""Gathers the project files that go into a commit."""

import logging
from typing import List, Optional, Union

from src.project_fs.filesystem import ProjectFilesystem
from src.project_fs.ignore import IgnoreRules
from src.project_fs.models import FileTreeNode
from .models import FileEntry

logger = logging.getLogger(__name__)

PROJECT_PREFIX = "project/"


def normalize_path(path: str) -> str:
    """Turn a tree id or remote path into a project-relative path.

    Example:
        >>> normalize_path("/project/src/app.py")
        'src/app.py'
    """
    path = path.lstrip("/")
    if path.startswith(PROJECT_PREFIX):
        path = path[len(PROJECT_PREFIX):]
    return path


class CommitCollector:
    """Flattens the project file tree into (path, content) entries.

    Folders are walked depth-first; each file is read through the project
    filesystem. Files that read as absent are always skipped; files that
    read as empty are skipped unless keep_empty_files is set.

    Attributes:
        filesystem: Source of file contents
        ignore_rules: Optional hidden/.gitignore filter applied before reading
        keep_empty_files: Commit zero-length files (e.g. .gitkeep)

    Example:
        >>> collector = CommitCollector(fs, IgnoreRules())
        >>> entries = collector.collect(fs.get_file_tree())
    """

    def __init__(
        self,
        filesystem: ProjectFilesystem,
        ignore_rules: Optional[IgnoreRules] = None,
        keep_empty_files: bool = False,
    ):
        self.filesystem = filesystem
        self.ignore_rules = ignore_rules
        self.keep_empty_files = keep_empty_files

    def collect(self, project_root: Union[FileTreeNode, List[FileTreeNode]]) -> List[FileEntry]:
        """Collect every committable file under the given node(s).

        Args:
            project_root: Root folder node, or the list of top-level nodes

        Returns:
            List of FileEntry in depth-first traversal order
        """
        nodes = project_root if isinstance(project_root, list) else [project_root]
        entries: List[FileEntry] = []
        for node in nodes:
            self._visit(node, entries)
        logger.debug(f"Collected {len(entries)} files for commit")
        return entries

    def _visit(self, node: FileTreeNode, entries: List[FileEntry]) -> None:
        path = normalize_path(node.id)

        if node.is_folder:
            if path and self.ignore_rules and self.ignore_rules.is_ignored(f"{path}/"):
                return
            for child in node.children:
                self._visit(child, entries)
            return

        if self.ignore_rules and self.ignore_rules.is_ignored(path):
            return

        content = self.filesystem.read_file(path)
        if content is None:
            logger.debug(f"Skipping unreadable file {path}")
            return
        if content == "" and not self.keep_empty_files:
            logger.debug(f"Skipping empty file {path}")
            return
        entries.append(FileEntry(path=path, content=content))
