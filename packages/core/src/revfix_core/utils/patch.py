"""Unified-diff helpers: map a line number to a window of raw patch lines."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# Counts are optional: "@@ -3 +3 @@" is a valid single-line hunk header.
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def parse_hunk_header(line: str) -> tuple[int, int, int, int] | None:
    """Return (old_start, old_count, new_start, new_count), or None if unparsable."""
    match = _HUNK_HEADER_RE.match(line)
    if not match:
        return None
    old_start, old_count, new_start, new_count = match.groups()
    return (
        int(old_start),
        int(old_count) if old_count is not None else 1,
        int(new_start),
        int(new_count) if new_count is not None else 1,
    )


def _is_header(line: str) -> bool:
    return line.startswith("@@") or line.startswith("---") or line.startswith("+++")


def _strip_marker(line: str) -> str:
    if line[:1] in ("+", "-", " "):
        return line[1:]
    return line


def extract_patch_context(patch: str | None, target_line: int, context_radius: int = 2) -> str | None:
    """Return the patch lines around ``target_line``, or None when no hunk covers it.

    The caller does not know whether ``target_line`` is an old-file or a
    new-file line number, so both counters are checked. When both sides of a
    hunk happen to carry the same number, the first line in scan order wins.

    The window spans ``context_radius`` raw patch lines either side of the
    match. Hunk and file header lines inside the window are dropped and the
    leading diff marker is stripped from the rest.
    """
    if not patch:
        return None

    lines = patch.split("\n")
    old_line: int | None = None
    new_line: int | None = None

    for i, line in enumerate(lines):
        if line.startswith("@@"):
            header = parse_hunk_header(line)
            if header is None:
                logger.debug("Unparsable hunk header: %r", line)
                old_line = new_line = None
            else:
                old_line, _, new_line, _ = header
            continue
        if line.startswith("---") or line.startswith("+++"):
            continue
        if old_line is None or new_line is None:
            # Outside any hunk.
            continue

        if new_line == target_line or old_line == target_line:
            start = max(0, i - context_radius)
            end = min(len(lines), i + context_radius + 1)
            window = [_strip_marker(ln) for ln in lines[start:end] if not _is_header(ln)]
            return "\n".join(window)

        if line.startswith("-"):
            old_line += 1
        elif line.startswith("+"):
            new_line += 1
        else:
            old_line += 1
            new_line += 1

    return None


def looks_like_diff(text: str) -> bool:
    return "@@" in text or text.startswith("+") or text.startswith("-")


def strip_diff_markers(text: str) -> str:
    """Drop header lines and leading diff markers from diff-shaped text."""
    if not looks_like_diff(text):
        return text
    cleaned = [_strip_marker(line) for line in text.split("\n") if not _is_header(line)]
    return "\n".join(cleaned).strip()
