"""Unit tests for sync_engine.sync_planner module."""

from src.sync_engine.models import Conflict, FileEntry
from src.sync_engine.sync_planner import SyncPlanner


def plan_against(remote, local, listed_only=()):
    """Plan remote files against a dict of local contents.

    Paths in listed_only appear in the listing but read as None.
    """
    paths = sorted(set(local) | set(listed_only))
    remote_files = [FileEntry(path, content) for path, content in remote.items()]
    return SyncPlanner().plan(remote_files, paths, local.get)


class TestClassification:
    """Each remote and local file lands in exactly one bucket."""

    def test_mixed_changes(self):
        plan = plan_against(
            remote={"a.txt": "A", "b.txt": "B", "c.txt": "C2"},
            local={"a.txt": "A", "c.txt": "C1", "d.txt": "D"},
        )

        assert [entry.path for entry in plan.new_files] == ["b.txt"]
        assert plan.deleted_paths == ["d.txt"]
        assert plan.unchanged_paths == ["a.txt"]
        assert plan.conflicts == [Conflict("c.txt", local_content="C1", incoming_content="C2")]
        assert plan.skipped_paths == []

    def test_identical_sides_produce_no_work(self):
        files = {"a.txt": "A", "src/b.py": "B"}

        plan = plan_against(remote=files, local=dict(files))

        assert plan.new_files == []
        assert plan.deleted_paths == []
        assert plan.conflicts == []
        assert sorted(plan.unchanged_paths) == ["a.txt", "src/b.py"]

    def test_empty_local_project_takes_everything(self):
        plan = plan_against(remote={"a.txt": "A", "b.txt": "B"}, local={})

        assert [entry.path for entry in plan.new_files] == ["a.txt", "b.txt"]
        assert plan.deleted_paths == []

    def test_empty_remote_deletes_everything(self):
        plan = plan_against(remote={}, local={"a.txt": "A"})

        assert plan.deleted_paths == ["a.txt"]

    def test_directory_markers_are_not_deleted(self):
        plan = SyncPlanner().plan([], ["src/", "src/a.py"], {"src/a.py": "x"}.get)

        assert plan.deleted_paths == ["src/a.py"]


class TestConflicts:
    """Content comparison is exact."""

    def test_line_endings_conflict(self):
        plan = plan_against(remote={"a.txt": "x\n"}, local={"a.txt": "x\r\n"})

        assert [conflict.path for conflict in plan.conflicts] == ["a.txt"]

    def test_trailing_whitespace_conflicts(self):
        plan = plan_against(remote={"a.txt": "x"}, local={"a.txt": "x "})

        assert len(plan.conflicts) == 1

    def test_conflict_keeps_both_contents_verbatim(self):
        plan = plan_against(remote={"a.txt": "remote\n"}, local={"a.txt": "local\n"})

        conflict = plan.conflicts[0]
        assert conflict.local_content == "local\n"
        assert conflict.incoming_content == "remote\n"
        assert not conflict.resolved

    def test_empty_local_file_conflicts_with_content(self):
        plan = plan_against(remote={"a.txt": "A"}, local={"a.txt": ""})

        assert len(plan.conflicts) == 1
        assert plan.new_files == []


class TestUnreadableLocalFiles:
    """A listed file that reads as None is never overwritten."""

    def test_listed_but_unreadable_is_skipped(self):
        plan = plan_against(remote={"logo.png": "not really"}, local={}, listed_only=["logo.png"])

        assert plan.skipped_paths == ["logo.png"]
        assert plan.new_files == []
        assert plan.conflicts == []

    def test_unreadable_local_only_file_is_kept(self):
        plan = plan_against(remote={"a.txt": "A"}, local={"a.txt": "A"}, listed_only=["logo.png"])

        assert plan.deleted_paths == []
        assert plan.skipped_paths == []

    def test_reads_are_the_only_side_effect(self):
        reads = []

        def read_local(path):
            reads.append(path)
            return None

        SyncPlanner().plan([FileEntry("a.txt", "A")], [], read_local)

        assert reads == ["a.txt"]
