import pytest

from src.core.exceptions import DiffParseError
from src.services.review.diff_parser import DEV_NULL, DiffParser, LineType
from tests.fixtures.sample_diffs import DELETED_FILE, MULTIPLE_FILES, NEW_FILE, SINGLE_HUNK


class TestDiffParser:
    """Tests for the diff parser."""

    @pytest.fixture
    def parser(self) -> DiffParser:
        return DiffParser()

    def test_parse_simple_modification(self, parser: DiffParser) -> None:
        """Test parsing a simple file modification."""
        diff = """diff --git a/src/main.py b/src/main.py
--- a/src/main.py
+++ b/src/main.py
@@ -1,4 +1,5 @@
 def hello():
-    print("Hello")
+    print("Hello, World!")
+    return True

 hello()"""

        files = parser.parse(diff)

        assert len(files) == 1
        assert files[0].path == "src/main.py"
        assert files[0].status == "modified"
        assert len(files[0].hunks) == 1

        hunk = files[0].hunks[0]
        assert hunk.old_start == 1
        assert hunk.new_start == 1
        assert hunk.new_lines == 5
        assert hunk.content == "@@ -1,4 +1,5 @@"

        additions = [line for line in hunk.changes if line.type == LineType.ADDITION]
        deletions = [line for line in hunk.changes if line.type == LineType.DELETION]

        assert len(additions) == 2
        assert len(deletions) == 1
        assert additions[0].content == '    print("Hello, World!")'
        assert additions[0].new_line_no == 2
        assert additions[0].relative_line == 2
        assert deletions[0].relative_line is None

    def test_blank_context_line_inside_hunk(self, parser: DiffParser) -> None:
        """A bare empty line inside a hunk counts as context."""
        files = parser.parse(
            "diff --git a/src/main.py b/src/main.py\n"
            "--- a/src/main.py\n"
            "+++ b/src/main.py\n"
            "@@ -1,4 +1,5 @@\n"
            " def hello():\n"
            '-    print("Hello")\n'
            '+    print("Hello, World!")\n'
            "+    return True\n"
            "\n"
            " hello()\n"
        )

        changes = files[0].hunks[0].changes
        assert [c.position for c in changes] == [1, 2, 3, 4, 5, 6]
        assert changes[4].type == LineType.CONTEXT
        assert changes[5].new_line_no == 5

    def test_parse_new_file(self, parser: DiffParser) -> None:
        """Test parsing a newly added file."""
        files = parser.parse(NEW_FILE)

        assert len(files) == 1
        assert files[0].path == "src/utils.py"
        assert files[0].status == "added"
        assert files[0].hunks[0].new_start == 1
        assert files[0].additions == 4

    def test_parse_deleted_file_uses_dev_null_path(self, parser: DiffParser) -> None:
        """Deleted files carry the /dev/null sentinel as their path."""
        files = parser.parse(DELETED_FILE)

        assert len(files) == 1
        assert files[0].path == DEV_NULL
        assert files[0].is_deleted
        assert files[0].old_path == "old_file.py"
        assert files[0].status == "deleted"
        assert files[0].deletions == 3

    def test_parse_renamed_file(self, parser: DiffParser) -> None:
        diff = """diff --git a/old_name.py b/new_name.py
similarity index 90%
rename from old_name.py
rename to new_name.py
--- a/old_name.py
+++ b/new_name.py
@@ -1 +1 @@
-a = 1
+a = 2"""

        files = parser.parse(diff)

        assert files[0].path == "new_name.py"
        assert files[0].old_path == "old_name.py"
        assert files[0].status == "renamed"

    def test_parse_multiple_files_and_hunks(self, parser: DiffParser) -> None:
        """Test parsing diff with multiple files, preserving order."""
        files = parser.parse(MULTIPLE_FILES)

        assert [f.path for f in files] == ["src/main.py", "src/utils.py", "docs/guide.md"]
        assert len(files[0].hunks) == 2
        assert files[0].hunks[1].new_start == 11
        assert files[0].hunks[1].old_start == 10

    def test_parse_plain_unified_diff_without_git_headers(self, parser: DiffParser) -> None:
        diff = """--- a/one.py\t2024-01-01 00:00:00
+++ b/one.py\t2024-01-01 00:00:01
@@ -1,2 +1,2 @@
-old
+new
 same
--- a/two.py
+++ b/two.py
@@ -3 +3 @@
-x
+y"""

        files = parser.parse(diff)

        assert [f.path for f in files] == ["one.py", "two.py"]
        assert files[1].hunks[0].new_start == 3
        assert files[1].hunks[0].new_lines == 1

    def test_deleted_line_that_looks_like_header(self, parser: DiffParser) -> None:
        """A removed line starting with '--' stays inside the hunk."""
        diff = """diff --git a/schema.sql b/schema.sql
--- a/schema.sql
+++ b/schema.sql
@@ -1,2 +1,1 @@
--- drop me
 SELECT 1;"""

        files = parser.parse(diff)

        assert len(files) == 1
        changes = files[0].hunks[0].changes
        assert changes[0].type == LineType.DELETION
        assert changes[0].content == "-- drop me"

    def test_no_newline_marker_is_ignored(self, parser: DiffParser) -> None:
        diff = """diff --git a/a.txt b/a.txt
--- a/a.txt
+++ b/a.txt
@@ -1 +1 @@
-old
\\ No newline at end of file
+new
\\ No newline at end of file"""

        files = parser.parse(diff)

        assert len(files[0].hunks[0].changes) == 2

    def test_header_only_file_has_no_hunks(self, parser: DiffParser) -> None:
        files = parser.parse("diff --git a/file.txt b/file.txt")

        assert len(files) == 1
        assert files[0].path == "file.txt"
        assert files[0].hunks == []

    def test_hunk_absolute_line_mapping(self, parser: DiffParser) -> None:
        hunk = parser.parse(SINGLE_HUNK)[0].hunks[0]

        assert hunk.to_absolute_line(1) == 1
        assert hunk.contains_relative_line(5)
        assert not hunk.contains_relative_line(6)
        assert not hunk.contains_relative_line(0)

    def test_empty_diff(self, parser: DiffParser) -> None:
        """Test parsing empty diff."""
        assert parser.parse("") == []
        assert parser.parse("   \n\n  ") == []

    def test_text_that_is_not_a_diff(self, parser: DiffParser) -> None:
        with pytest.raises(DiffParseError):
            parser.parse("this is just some prose\nwith two lines")

    def test_malformed_hunk_header(self, parser: DiffParser) -> None:
        diff = """diff --git a/a.py b/a.py
--- a/a.py
+++ b/a.py
@@ -x,1 +1 @@
+new"""

        with pytest.raises(DiffParseError):
            parser.parse(diff)

    def test_hunk_without_file_header(self, parser: DiffParser) -> None:
        with pytest.raises(DiffParseError):
            parser.parse("@@ -1 +1 @@\n-a\n+b")
