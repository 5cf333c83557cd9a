"""Hidden-file and .gitignore filtering for project paths.

Files whose path has a dot-prefixed segment are never synchronized, and a
root-level .gitignore is honoured with full gitignore semantics (anchoring,
directory patterns, '**', negation) through pathspec's gitwildmatch patterns.
"""

import logging
from typing import Iterable, List, Optional

import pathspec

logger = logging.getLogger(__name__)

GITIGNORE_FILE = ".gitignore"


class IgnoreRules:
    """Decides which project paths are left out of synchronization.

    Attributes:
        include_hidden: Keep dot-files and dot-directories
        patterns: .gitignore lines in effect (comments and blanks removed)

    Example:
        >>> rules = IgnoreRules.from_gitignore("node_modules/\\n*.log\\n!keep.log\\n")
        >>> rules.is_ignored("node_modules/react/index.js")
        True
        >>> rules.is_ignored("keep.log")
        False
        >>> rules.is_ignored(".env")
        True
    """

    def __init__(self, patterns: Optional[Iterable[str]] = None, include_hidden: bool = False):
        self.include_hidden = include_hidden
        self.patterns: List[str] = []
        for line in patterns or []:
            line = line.strip()
            if line and not line.startswith("#"):
                self.patterns.append(line)
        self._spec = pathspec.PathSpec.from_lines("gitwildmatch", self.patterns)

    @classmethod
    def from_gitignore(cls, text: Optional[str], include_hidden: bool = False) -> "IgnoreRules":
        """Build rules from .gitignore content (None means no file)."""
        rules = cls((text or "").splitlines(), include_hidden=include_hidden)
        logger.debug(f"Loaded {len(rules.patterns)} ignore patterns")
        return rules

    def add_pattern(self, line: str) -> None:
        """Add one .gitignore line after the existing ones."""
        line = line.strip()
        if not line or line.startswith("#"):
            return
        self.patterns.append(line)
        self._spec = pathspec.PathSpec.from_lines("gitwildmatch", self.patterns)

    @staticmethod
    def is_hidden(path: str) -> bool:
        return any(part.startswith(".") for part in path.strip("/").split("/") if part)

    def is_ignored(self, path: str) -> bool:
        """Check if a relative project path is excluded from sync.

        A trailing '/' marks the path itself as a directory.
        """
        is_dir = path.endswith("/")
        path = path.strip("/")
        if not path:
            return False
        if not self.include_hidden and self.is_hidden(path):
            return True
        return self._spec.match_file(path + "/" if is_dir else path)

    def filter(self, paths: Iterable[str]) -> List[str]:
        return [path for path in paths if not self.is_ignored(path)]
