"""Unit tests for sync_engine.commit_collector module."""

from src.project_fs.ignore import IgnoreRules
from src.project_fs.models import FileTreeNode
from src.sync_engine.commit_collector import CommitCollector, normalize_path
from src.sync_engine.models import FileEntry
from tests.helpers import InMemoryFilesystem


def create_fs():
    return InMemoryFilesystem(
        files={
            "README.md": "# demo\n",
            "src/app.py": "print('hi')\n",
            "empty.txt": "",
            ".env": "SECRET=1\n",
            "node_modules/lib.js": "module.exports = {}\n",
        },
        unreadable={"logo.png"},
    )


class TestNormalizePath:
    """Tree ids and remote paths become project-relative paths."""

    def test_strips_leading_slash(self):
        assert normalize_path("/src/app.py") == "src/app.py"

    def test_strips_project_prefix(self):
        assert normalize_path("/project/src/app.py") == "src/app.py"
        assert normalize_path("project/README.md") == "README.md"

    def test_keeps_similar_prefixes(self):
        assert normalize_path("projects/notes.md") == "projects/notes.md"

    def test_relative_path_unchanged(self):
        assert normalize_path("a/b/c.txt") == "a/b/c.txt"


class TestCollect:
    """CommitCollector.collect walks the tree depth-first."""

    def test_collects_readable_non_empty_files(self):
        fs = create_fs()
        collector = CommitCollector(fs)

        entries = collector.collect(fs.get_file_tree())

        assert [entry.path for entry in entries] == [
            ".env",
            "README.md",
            "node_modules/lib.js",
            "src/app.py",
        ]
        assert entries[1] == FileEntry("README.md", "# demo\n")

    def test_empty_files_kept_when_configured(self):
        fs = create_fs()
        collector = CommitCollector(fs, keep_empty_files=True)

        paths = [entry.path for entry in collector.collect(fs.get_file_tree())]

        assert "empty.txt" in paths
        assert "logo.png" not in paths

    def test_empty_files_skipped_by_default(self):
        fs = create_fs()

        paths = [entry.path for entry in CommitCollector(fs).collect(fs.get_file_tree())]

        assert "empty.txt" not in paths

    def test_ignore_rules_skip_hidden_and_ignored(self):
        fs = create_fs()
        rules = IgnoreRules.from_gitignore("node_modules/\n")
        collector = CommitCollector(fs, rules)

        entries = collector.collect(fs.get_file_tree())

        assert [entry.path for entry in entries] == ["README.md", "src/app.py"]

    def test_ignored_folder_is_not_read(self):
        fs = create_fs()
        reads = []
        original_read = fs.read_file

        def tracking_read(path):
            reads.append(path)
            return original_read(path)

        fs.read_file = tracking_read
        CommitCollector(fs, IgnoreRules.from_gitignore("node_modules/\n")).collect(fs.get_file_tree())

        assert "node_modules/lib.js" not in reads
        assert ".env" not in reads

    def test_accepts_single_root_node(self):
        fs = InMemoryFilesystem({"a.txt": "A", "docs/b.md": "B"})
        root = FileTreeNode(
            id="/project",
            name="project",
            type="folder",
            children=[
                FileTreeNode(id="/project/a.txt", name="a.txt"),
                FileTreeNode(
                    id="/project/docs",
                    name="docs",
                    type="folder",
                    children=[FileTreeNode(id="/project/docs/b.md", name="b.md")],
                ),
            ],
        )

        entries = CommitCollector(fs).collect(root)

        assert entries == [FileEntry("a.txt", "A"), FileEntry("docs/b.md", "B")]

    def test_empty_tree(self):
        assert CommitCollector(InMemoryFilesystem()).collect([]) == []
