"""In-memory project file tree."""

from dataclasses import dataclass, field
from typing import List, Literal


@dataclass
class FileTreeNode:
    """A file or folder in the project tree.

    File ids double as paths ("/src/app.py"); the commit collector strips
    the leading slash.

    Attributes:
        id: Path of the node relative to the project root, with leading '/'
        name: Base name
        type: "file" or "folder"
        children: Child nodes (folders only)

    Example:
        >>> FileTreeNode(id="/src", name="src", type="folder", children=[
        ...     FileTreeNode(id="/src/app.py", name="app.py"),
        ... ])
    """
    id: str
    name: str
    type: Literal["file", "folder"] = "file"
    children: List["FileTreeNode"] = field(default_factory=list)

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"
