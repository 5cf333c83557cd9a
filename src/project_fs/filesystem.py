"""Project filesystem capability and its local-directory implementation.

The sync engine never touches disk directly; every read and write goes
through a ProjectFilesystem passed in by the caller. Paths are always
posix-style and relative to the project root, without a leading slash.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol

from .errors import FilesystemError, PermissionFixFailedError
from .models import FileTreeNode

logger = logging.getLogger(__name__)

# chown timeout in seconds
CHOWN_TIMEOUT = 30


class ProjectFilesystem(Protocol):
    """Operations the sync engine performs on the project files."""

    def list_paths(self) -> List[str]:
        """List every path; directories carry a trailing '/'."""
        ...

    def read_file(self, path: str) -> Optional[str]:
        """Read a file, None when it is missing or not text."""
        ...

    def write_file(self, path: str, content: str) -> None:
        ...

    def delete_file(self, path: str) -> None:
        ...

    def fix_permissions(self) -> None:
        ...

    def get_file_tree(self) -> List[FileTreeNode]:
        ...


class LocalProjectFilesystem:
    """ProjectFilesystem over a directory on the local disk.

    Content is read and written as UTF-8 with newlines preserved exactly,
    so a pulled file compares equal to its blob on the next pull.

    Attributes:
        root: Absolute project directory
        owner: Optional "user[:group]" restored recursively by fix_permissions

    Example:
        >>> fs = LocalProjectFilesystem("/workspace/project", owner="1000:1000")
        >>> fs.write_file("src/app.py", "print('hi')\\n")
        >>> fs.read_file("src/app.py")
        "print('hi')\\n"
    """

    def __init__(self, root: str, owner: Optional[str] = None):
        self.root = Path(root).resolve()
        self.owner = owner

    def _resolve(self, path: str) -> Path:
        """Map a project path to disk, refusing paths outside the root."""
        relative = path.strip("/")
        if not relative:
            raise FilesystemError(path, "resolve", "empty path")
        target = (self.root / relative).resolve()
        if target != self.root and self.root not in target.parents:
            raise FilesystemError(path, "resolve", "path escapes the project root")
        return target

    def list_paths(self) -> List[str]:
        paths: List[str] = []
        if not self.root.is_dir():
            return paths

        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames.sort()
            rel_dir = Path(dirpath).relative_to(self.root).as_posix()
            prefix = "" if rel_dir == "." else f"{rel_dir}/"
            for dirname in dirnames:
                paths.append(f"{prefix}{dirname}/")
            for filename in sorted(filenames):
                paths.append(f"{prefix}{filename}")
        return paths

    def read_file(self, path: str) -> Optional[str]:
        try:
            target = self._resolve(path)
        except FilesystemError:
            return None
        if not target.is_file():
            return None

        try:
            with open(target, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except UnicodeDecodeError:
            logger.debug(f"Not a UTF-8 text file: {path}")
            return None
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    def write_file(self, path: str, content: str) -> None:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise FilesystemError(path, "write", str(e)) from e
        logger.debug(f"Wrote {path} ({len(content)} chars)")

    def delete_file(self, path: str) -> None:
        """Delete a file; a missing file is not an error."""
        target = self._resolve(path)
        try:
            target.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise FilesystemError(path, "delete", str(e)) from e
        logger.debug(f"Deleted {path}")

    def fix_permissions(self) -> None:
        """Restore ownership of the whole project tree.

        No-op when no owner is configured.

        Raises:
            PermissionFixFailedError: If chown fails
        """
        if not self.owner:
            return

        try:
            subprocess.run(
                ["chown", "-R", self.owner, str(self.root)],
                check=True,
                capture_output=True,
                text=True,
                timeout=CHOWN_TIMEOUT,
            )
        except subprocess.CalledProcessError as e:
            raise PermissionFixFailedError(str(self.root), self.owner, e.stderr.strip()) from e
        except (OSError, subprocess.TimeoutExpired) as e:
            raise PermissionFixFailedError(str(self.root), self.owner, str(e)) from e
        logger.debug(f"Restored owner {self.owner} on {self.root}")

    def get_file_tree(self) -> List[FileTreeNode]:
        """Build the nested file tree of the project."""
        return self._build_nodes(self.root)

    def _build_nodes(self, directory: Path) -> List[FileTreeNode]:
        nodes: List[FileTreeNode] = []
        if not directory.is_dir():
            return nodes

        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            node_id = "/" + entry.relative_to(self.root).as_posix()
            if entry.is_dir():
                nodes.append(FileTreeNode(
                    id=node_id,
                    name=entry.name,
                    type="folder",
                    children=self._build_nodes(entry),
                ))
            elif entry.is_file():
                nodes.append(FileTreeNode(id=node_id, name=entry.name))
        return nodes
