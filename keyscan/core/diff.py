"""
KeyScan Patch Parser

Turns unified diff text into per-file reconstructed content: the added
lines of each file concatenated together, plus a map from each added
line's position in that content to its real line number in the new
version of the file.

Only lines starting with "+" produce content. Context lines advance the
new-file line counter; removed lines do not exist in the new version and
leave it untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

OLD_FILE_MARKER = "--- a/"
NEW_FILE_MARKER = "+++ b/"
NULL_FILE_MARKER = "--- /dev/null"
DELETED_FILE_MARKER = "+++ /dev/null"

HUNK_HEADER_RE = re.compile(r"@@\s+-\d+(?:,\d+)?\s+\+(\d+)(?:,\d+)?\s+@@")


@dataclass
class DiffHunk:
    """One hunk of a file diff, with its starting line in the new file."""

    new_start: int
    lines: list[tuple[str, str]] = field(default_factory=list)

    def added(self) -> list[tuple[int, str]]:
        """Return (new_line_number, text) for every added line."""
        result = []
        line_no = self.new_start
        for kind, text in self.lines:
            if kind == "added":
                result.append((line_no, text))
                line_no += 1
            elif kind == "context":
                line_no += 1
        return result


@dataclass
class ReconstructedFile:
    """Added content of one file, addressable by new-file line number."""

    path: str
    content: str = ""
    line_map: dict[int, int] = field(default_factory=dict)

    def lines(self) -> list[str]:
        return self.content.split("\n")

    def line_number(self, index: int) -> int:
        """
        Real line number for a content line.

        Falls back to the 1-based position when the index is unmapped or
        mapped to 0 (an added line seen before any hunk header).
        """
        return self.line_map.get(index) or index + 1


@dataclass
class _ParserState:
    path: Optional[str] = None
    hunks: list[DiffHunk] = field(default_factory=list)
    awaiting_path: bool = False

    def add_line(self, kind: str, text: str) -> None:
        if not self.hunks:
            # Lines before any hunk header count from 0.
            self.hunks.append(DiffHunk(new_start=0))
        self.hunks[-1].lines.append((kind, text))

    def to_file(self) -> Optional[ReconstructedFile]:
        if not self.path:
            return None

        content: list[str] = []
        line_map: dict[int, int] = {}
        for hunk in self.hunks:
            for line_no, text in hunk.added():
                line_map[len(content)] = line_no
                content.append(text + "\n")

        if not content:
            return None
        return ReconstructedFile(path=self.path, content="".join(content), line_map=line_map)


def parse_hunk_header(line: str) -> Optional[int]:
    """Return the new-file start line of a hunk header, or None if malformed."""
    match = HUNK_HEADER_RE.search(line)
    if not match:
        return None
    return int(match.group(1))


def parse_diff(diff_text: str) -> dict[str, ReconstructedFile]:
    """
    Parse unified diff text covering any number of files.

    Each file section starts at a "--- a/<path>" line, or at a
    "--- /dev/null" line directly followed by "+++ " for a newly created
    file, in which case the path comes from that "+++ b/<path>" line.
    Files whose diff contains no added lines are left out of the result.

    Args:
        diff_text: Concatenated per-file patches.

    Returns:
        Mapping of file path to its ReconstructedFile, in diff order.
    """
    files: dict[str, ReconstructedFile] = {}
    state = _ParserState()

    def flush() -> None:
        reconstructed = state.to_file()
        if reconstructed is not None:
            files[reconstructed.path] = reconstructed

    lines = diff_text.split("\n")
    previous = ""
    for index, line in enumerate(lines):
        following = lines[index + 1] if index + 1 < len(lines) else ""
        new_file_header = line.startswith(NULL_FILE_MARKER) and following.startswith("+++ ")
        deleted_file_header = (
            line.startswith(DELETED_FILE_MARKER)
            and (previous.startswith(OLD_FILE_MARKER) or previous.startswith(NULL_FILE_MARKER))
        )

        if line.startswith(OLD_FILE_MARKER) or new_file_header:
            flush()
            state = _ParserState()
            if new_file_header:
                # New file: the path only shows up on the "+++ b/" line.
                state.awaiting_path = True
            else:
                state.path = line[len(OLD_FILE_MARKER):]
        elif line.startswith(NEW_FILE_MARKER) or deleted_file_header:
            if state.awaiting_path and line.startswith(NEW_FILE_MARKER):
                state.path = line[len(NEW_FILE_MARKER):]
                state.awaiting_path = False
        elif line.startswith("@@"):
            new_start = parse_hunk_header(line)
            if new_start is not None and state.path:
                state.hunks.append(DiffHunk(new_start=new_start))
        elif state.path:
            marker = line[:1]
            if marker == "+":
                state.add_line("added", line[1:])
            elif marker == " ":
                state.add_line("context", line[1:])
            elif marker == "-":
                state.add_line("removed", line[1:])
        previous = line

    flush()
    return files
