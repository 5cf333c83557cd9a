"""Unit tests for sync_engine.conflict_stager module."""

import pytest

from src.sync_engine.conflict_stager import ConflictStager
from src.sync_engine.models import Conflict, ConflictResolution, Resolution
from tests.helpers import InMemoryFilesystem


@pytest.fixture
def fs():
    return InMemoryFilesystem({"a.txt": "local A\n", "b.txt": "local B\n"})


class TestApplyResolutions:
    """Incoming overwrites, local leaves the file alone."""

    def test_incoming_overwrites_file(self, fs):
        written = ConflictStager(fs).apply_resolutions([
            ConflictResolution("a.txt", Resolution.INCOMING, incoming_content="remote A\n"),
        ])

        assert written == ["a.txt"]
        assert fs.files["a.txt"] == "remote A\n"

    def test_local_keeps_file_untouched(self, fs):
        written = ConflictStager(fs).apply_resolutions([
            ConflictResolution("b.txt", Resolution.LOCAL, incoming_content="remote B\n"),
        ])

        assert written == []
        assert fs.writes == []
        assert fs.files["b.txt"] == "local B\n"

    def test_merged_writes_merged_content(self, fs):
        written = ConflictStager(fs).apply_resolutions([
            ConflictResolution(
                "a.txt",
                Resolution.MERGED,
                incoming_content="remote A\n",
                merged_content="local A\nremote A\n",
            ),
        ])

        assert written == ["a.txt"]
        assert fs.files["a.txt"] == "local A\nremote A\n"

    def test_merged_without_content_takes_incoming(self, fs):
        written = ConflictStager(fs).apply_resolutions([
            ConflictResolution("a.txt", "merged", incoming_content="remote A\n"),
        ])

        assert written == ["a.txt"]
        assert fs.files["a.txt"] == "remote A\n"

    def test_plain_strings_are_accepted(self, fs):
        ConflictStager(fs).apply_resolutions([
            ConflictResolution("a.txt", "incoming", incoming_content="remote A\n"),
            ConflictResolution("b.txt", "local"),
        ])

        assert fs.writes == ["a.txt"]

    def test_for_conflict_copies_both_contents(self, fs):
        conflict = Conflict("a.txt", local_content="local A\n", incoming_content="remote A\n")

        ConflictStager(fs).apply_resolutions([ConflictResolution.for_conflict(conflict, "incoming")])

        assert fs.files["a.txt"] == "remote A\n"

    def test_reapplying_is_harmless(self, fs):
        stager = ConflictStager(fs)
        resolutions = [ConflictResolution("a.txt", Resolution.INCOMING, incoming_content="remote A\n")]

        stager.apply_resolutions(resolutions)
        stager.apply_resolutions(resolutions)

        assert fs.files["a.txt"] == "remote A\n"


class TestValidation:
    """Bad resolution values are rejected before any write."""

    def test_unknown_value_raises_before_writing(self, fs):
        stager = ConflictStager(fs)

        with pytest.raises(ValueError) as exc_info:
            stager.apply_resolutions([
                ConflictResolution("a.txt", "incoming", incoming_content="remote A\n"),
                ConflictResolution("b.txt", "merge"),
            ])

        assert "merge" in str(exc_info.value)
        assert fs.writes == []
        assert fs.permission_fixes == 0

    def test_values_are_case_sensitive(self, fs):
        with pytest.raises(ValueError):
            ConflictStager(fs).apply_resolutions([ConflictResolution("a.txt", "INCOMING")])


class TestPermissions:
    """fix_permissions runs once per call and its failure is not fatal."""

    def test_fixes_permissions_once(self, fs):
        ConflictStager(fs).apply_resolutions([
            ConflictResolution("a.txt", "incoming", incoming_content="1"),
            ConflictResolution("b.txt", "incoming", incoming_content="2"),
        ])

        assert fs.permission_fixes == 1

    def test_permission_failure_is_logged_not_raised(self, fs, caplog):
        fs.fail_permissions = True

        written = ConflictStager(fs).apply_resolutions([
            ConflictResolution("a.txt", "incoming", incoming_content="remote A\n"),
        ])

        assert written == ["a.txt"]
        assert fs.files["a.txt"] == "remote A\n"
        assert "Permission fix failed" in caplog.text
