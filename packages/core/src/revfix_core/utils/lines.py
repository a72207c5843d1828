"""Line-oriented extraction and splicing of file content.

All functions split on "\\n" only and rejoin with "\\n", so a file read and
written through them keeps its exact bytes outside the touched range.
"""

from __future__ import annotations

from revfix_core.exceptions import OutOfBoundsError
from revfix_core.models import LineRange


def split_lines(text: str) -> list[str]:
    return text.split("\n")


def extract_lines(content: str, line_range: LineRange, file_name: str | None = None) -> str:
    """Return the text covered by ``line_range``.

    Raises OutOfBoundsError when the range starts past the end of the file.
    An end past the end of the file is clamped.
    """
    lines = split_lines(content)
    start = max(0, line_range.start_line - 1)
    end = min(len(lines), line_range.end_line - 1)
    if start >= len(lines):
        raise OutOfBoundsError(line_range.start_line, len(lines), file_name)
    return "\n".join(lines[start:end])


def apply_fix(original_content: str, replacement_text: str, start_line: int, end_line: int) -> str:
    """Replace lines ``[start_line, end_line)`` (0-based) with ``replacement_text``.

    Indices outside the file behave like ordinary slicing and never raise.
    """
    lines = split_lines(original_content)
    replacement = split_lines(replacement_text)
    return "\n".join(lines[:start_line] + replacement + lines[end_line:])


def window_lines(content: str, target_line: int) -> str:
    """Return two lines before through two lines after ``target_line`` (1-based)."""
    lines = split_lines(content)
    start = max(0, target_line - 3)
    end = min(len(lines), target_line + 2)
    return "\n".join(lines[start:end])


def read_text(path) -> str:
    """Read a file without newline translation."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
