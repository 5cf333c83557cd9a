"""Applies caller-chosen resolutions to conflicting files."""

import logging
from typing import List

from src.project_fs.errors import PermissionFixFailedError
from src.project_fs.filesystem import ProjectFilesystem
from .models import ConflictResolution, Resolution

logger = logging.getLogger(__name__)


class ConflictStager:
    """Writes resolved conflicts to the project.

    The stager keeps no state between calls: the pending conflict set is
    held by the caller and handed back together with the resolutions.
    "incoming" overwrites the file with the remote content, "merged" with the
    content the user assembled (the remote content when none was given) and
    "local" leaves it as it is. Applying the same resolutions twice is
    harmless.
    """

    def __init__(self, filesystem: ProjectFilesystem):
        self.filesystem = filesystem

    def apply_resolutions(self, resolutions: List[ConflictResolution]) -> List[str]:
        """Apply resolutions, then fix permissions once.

        Args:
            resolutions: One entry per conflict

        Returns:
            Paths that were overwritten with incoming or merged content

        Raises:
            ValueError: If a resolution is not "local", "incoming" or
                "merged"; raised before any file is written
        """
        validated = []
        for item in resolutions:
            try:
                validated.append((item, Resolution(item.resolution)))
            except ValueError as e:
                raise ValueError(
                    f"Invalid resolution '{item.resolution}' for {item.path}: "
                    f"expected 'local', 'incoming' or 'merged'"
                ) from e

        written: List[str] = []
        for item, resolution in validated:
            if resolution is Resolution.INCOMING:
                self.filesystem.write_file(item.path, item.incoming_content)
                written.append(item.path)
                logger.info(f"Resolved {item.path}: took incoming version")
            elif resolution is Resolution.MERGED:
                self.filesystem.write_file(item.path, item.merged_content or item.incoming_content)
                written.append(item.path)
                logger.info(f"Resolved {item.path}: wrote merged version")
            else:
                logger.info(f"Resolved {item.path}: kept local version")

        try:
            self.filesystem.fix_permissions()
        except PermissionFixFailedError as e:
            logger.warning(f"Permission fix failed after resolving conflicts: {e}")

        return written
