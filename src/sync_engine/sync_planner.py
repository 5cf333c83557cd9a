"""Classification of remote files against the local project.

The planner is pure: it only reads local content through the callback it
is given and never writes. Content equality is exact string comparison,
with no whitespace or line-ending normalization, so a differing file is
always surfaced as a conflict rather than merged.
"""

import logging
from typing import Callable, Iterable, List, Optional

from .models import Conflict, FileEntry, SyncPlan

logger = logging.getLogger(__name__)


class SyncPlanner:
    """Computes new, deleted, unchanged and conflicting files.

    Example:
        >>> plan = SyncPlanner().plan(remote_files, fs.list_paths(), fs.read_file)
        >>> [entry.path for entry in plan.new_files]
        ['b.txt']
    """

    def plan(
        self,
        remote_files: List[FileEntry],
        local_paths: Iterable[str],
        read_local: Callable[[str], Optional[str]],
    ) -> SyncPlan:
        """Classify every remote and local file.

        Args:
            remote_files: Files of the remote commit
            local_paths: Local paths; directories end with '/' and are ignored
            read_local: Returns local content for a path, None if absent

        Returns:
            SyncPlan describing what a pull has to do
        """
        local_paths = list(local_paths)
        local_set = set(local_paths)
        remote_set = {entry.path for entry in remote_files}
        plan = SyncPlan()

        for path in local_paths:
            if path.endswith("/") or path in remote_set:
                continue
            # Unreadable files are never pushed and never deleted
            if read_local(path) is None:
                logger.debug(f"Keeping unreadable local file {path}")
                continue
            plan.deleted_paths.append(path)

        for entry in remote_files:
            local_content = read_local(entry.path)

            if local_content is None:
                if entry.path in local_set:
                    # Exists but is not readable text; never overwrite it
                    logger.warning(f"Local file {entry.path} is unreadable, leaving it untouched")
                    plan.skipped_paths.append(entry.path)
                else:
                    plan.new_files.append(entry)
            elif local_content == entry.content:
                plan.unchanged_paths.append(entry.path)
            else:
                plan.conflicts.append(Conflict(
                    path=entry.path,
                    local_content=local_content,
                    incoming_content=entry.content,
                ))

        logger.debug(
            f"Plan: {len(plan.new_files)} new, {len(plan.deleted_paths)} deleted, "
            f"{len(plan.conflicts)} conflicts, {len(plan.unchanged_paths)} unchanged"
        )
        return plan
