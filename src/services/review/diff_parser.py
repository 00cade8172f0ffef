import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from src.core.exceptions import DiffParseError

DEV_NULL = "/dev/null"


class LineType(str, Enum):
    CONTEXT = "normal"
    ADDITION = "add"
    DELETION = "del"


@dataclass
class LineChange:
    """A single line in a hunk."""

    type: LineType
    content: str
    position: int  # 1-based index of this line inside its hunk
    old_line_no: int | None = None
    new_line_no: int | None = None
    relative_line: int | None = None  # 1 == hunk.new_start; None for deletions

    def __str__(self) -> str:
        prefix = {
            LineType.CONTEXT: " ",
            LineType.ADDITION: "+",
            LineType.DELETION: "-",
        }[self.type]
        return f"{prefix}{self.content}"


@dataclass
class Hunk:
    """A hunk (section) of changes in a diff."""

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    content: str  # The @@ line
    changes: list[LineChange] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)

    def contains_relative_line(self, line_number: int) -> bool:
        """Whether a hunk-relative line number addresses a line of the new file."""
        return 1 <= line_number <= self.new_lines

    def to_absolute_line(self, line_number: int) -> int:
        """Map a hunk-relative line number to the new file's line number."""
        return self.new_start + line_number - 1


@dataclass
class FileChange:
    """Parsed diff for a single file.

    ``path`` is the new-side path; deleted files carry ``/dev/null``.
    """

    path: str
    status: Literal["added", "modified", "deleted", "renamed"] = "modified"
    old_path: str | None = None
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def is_deleted(self) -> bool:
        return self.path == DEV_NULL

    @property
    def additions(self) -> int:
        """Count of added lines."""
        return sum(
            1 for hunk in self.hunks for line in hunk.changes if line.type == LineType.ADDITION
        )

    @property
    def deletions(self) -> int:
        """Count of deleted lines."""
        return sum(
            1 for hunk in self.hunks for line in hunk.changes if line.type == LineType.DELETION
        )


class DiffParser:
    """Parser for unified diff format (git and plain ``diff -u`` output)."""

    # Regex patterns
    FILE_HEADER_PATTERN = re.compile(r"^diff --git a/(.*) b/(.*)$")
    OLD_FILE_PATTERN = re.compile(r"^--- (?:a/)?([^\t]*)")
    NEW_FILE_PATTERN = re.compile(r"^\+\+\+ (?:b/)?([^\t]*)")
    HUNK_HEADER_PATTERN = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")

    def parse(self, diff_text: str) -> list[FileChange]:
        """Parse a unified diff into structured FileChange objects.

        Raises:
            DiffParseError: If non-empty text contains no file sections or a
                hunk header is malformed.
        """
        if not diff_text.strip():
            return []

        files: list[FileChange] = []
        current_file: FileChange | None = None
        current_hunk: Hunk | None = None
        seen_old_header = False
        old_remaining = 0
        new_remaining = 0
        old_line_no = 0
        new_line_no = 0

        for line_index, line in enumerate(diff_text.splitlines(), start=1):
            # Body of the current hunk, bounded by the counts in its header
            if current_hunk is not None and (old_remaining > 0 or new_remaining > 0):
                position = len(current_hunk.changes) + 1
                if line.startswith("+"):
                    current_hunk.changes.append(
                        LineChange(
                            type=LineType.ADDITION,
                            content=line[1:],
                            position=position,
                            new_line_no=new_line_no,
                            relative_line=new_line_no - current_hunk.new_start + 1,
                        )
                    )
                    new_line_no += 1
                    new_remaining -= 1
                    continue
                if line.startswith("-"):
                    current_hunk.changes.append(
                        LineChange(
                            type=LineType.DELETION,
                            content=line[1:],
                            position=position,
                            old_line_no=old_line_no,
                        )
                    )
                    old_line_no += 1
                    old_remaining -= 1
                    continue
                if line.startswith(" ") or line == "":
                    current_hunk.changes.append(
                        LineChange(
                            type=LineType.CONTEXT,
                            content=line[1:],
                            position=position,
                            old_line_no=old_line_no,
                            new_line_no=new_line_no,
                            relative_line=new_line_no - current_hunk.new_start + 1,
                        )
                    )
                    old_line_no += 1
                    new_line_no += 1
                    old_remaining -= 1
                    new_remaining -= 1
                    continue
                if line.startswith("\\"):
                    # "\ No newline at end of file"
                    continue
                # Hunk shorter than its header claims; treat the line as a header
                old_remaining = new_remaining = 0

            # New file diff starting
            file_match = self.FILE_HEADER_PATTERN.match(line)
            if file_match:
                old_path, new_path = file_match.group(1), file_match.group(2)
                current_file = FileChange(
                    path=new_path,
                    old_path=old_path if old_path != new_path else None,
                    status="renamed" if old_path != new_path else "modified",
                )
                files.append(current_file)
                current_hunk = None
                seen_old_header = False
                continue

            # Old file line (--- a/file); starts a new section in plain diffs
            old_match = self.OLD_FILE_PATTERN.match(line)
            if old_match:
                old_path = old_match.group(1).strip()
                if current_file is None or seen_old_header or current_file.hunks:
                    current_file = FileChange(path=old_path)
                    files.append(current_file)
                    current_hunk = None
                seen_old_header = True
                if old_path == DEV_NULL:
                    current_file.status = "added"
                    current_file.old_path = None
                elif current_file.old_path is None and old_path != current_file.path:
                    current_file.old_path = old_path
                continue

            # New file line (+++ b/file)
            new_match = self.NEW_FILE_PATTERN.match(line)
            if new_match and current_file is not None:
                new_path = new_match.group(1).strip()
                if new_path == DEV_NULL:
                    current_file.old_path = current_file.old_path or current_file.path
                    current_file.path = DEV_NULL
                    current_file.status = "deleted"
                else:
                    current_file.path = new_path
                    if current_file.old_path and current_file.old_path != new_path:
                        current_file.status = "renamed"
                continue

            # Hunk header
            if line.startswith("@@"):
                hunk_match = self.HUNK_HEADER_PATTERN.match(line)
                if hunk_match is None:
                    raise DiffParseError(
                        f"Malformed hunk header on line {line_index}",
                        details={"line": line},
                    )
                if current_file is None:
                    raise DiffParseError(
                        f"Hunk header without a file header on line {line_index}",
                        details={"line": line},
                    )

                old_start = int(hunk_match.group(1))
                old_count = int(hunk_match.group(2) or 1)
                new_start = int(hunk_match.group(3))
                new_count = int(hunk_match.group(4) or 1)

                current_hunk = Hunk(
                    old_start=old_start,
                    old_lines=old_count,
                    new_start=new_start,
                    new_lines=new_count,
                    content=line,
                )
                current_file.hunks.append(current_hunk)

                old_line_no = old_start
                new_line_no = new_start
                old_remaining = old_count
                new_remaining = new_count
                continue

            # index/mode/rename/"Binary files" lines carry nothing we need

        if not files:
            raise DiffParseError("Text is not a unified diff: no file sections found")

        return files
