"""Tests for mapping a line number onto a window of unified-diff lines."""

from revfix_core.utils.patch import (
    extract_patch_context,
    looks_like_diff,
    parse_hunk_header,
    strip_diff_markers,
)

HUNK = """\
@@ -10,3 +10,4 @@
 const a = 1;
+const b = 2;
 const c = 3;
 const d = 4;"""

LONG_HUNK = """\
@@ -10,6 +10,7 @@
 line ten
 line eleven
 line twelve
+inserted
 line thirteen
 line fourteen
 line fifteen"""


class TestParseHunkHeader:
    def test_full_header(self):
        assert parse_hunk_header("@@ -10,3 +10,4 @@") == (10, 3, 10, 4)

    def test_counts_default_to_one(self):
        assert parse_hunk_header("@@ -3 +3 @@ def foo():") == (3, 1, 3, 1)

    def test_unparsable_returns_none(self):
        assert parse_hunk_header("@@ bad header @@") is None


class TestExtractPatchContext:
    def test_target_line_maps_to_second_body_line(self):
        # First body line is old/new line 10, so line 11 is the added line.
        window = extract_patch_context(HUNK, 11, context_radius=2)
        assert window is not None
        lines = window.split("\n")
        assert "const b = 2;" in lines
        # The hunk header falls inside the window and is dropped.
        assert lines == ["const a = 1;", "const b = 2;", "const c = 3;", "const d = 4;"]

    def test_window_has_radius_lines_either_side(self):
        window = extract_patch_context(LONG_HUNK, 12, context_radius=2)
        assert window.split("\n") == [
            "line ten",
            "line eleven",
            "line twelve",
            "inserted",
            "line thirteen",
        ]

    def test_window_truncated_at_patch_end(self):
        window = extract_patch_context(LONG_HUNK, 16, context_radius=2)
        # New line 16 is the last body line.
        assert window.split("\n") == ["line thirteen", "line fourteen", "line fifteen"]

    def test_markers_are_stripped(self):
        window = extract_patch_context(HUNK, 10, context_radius=0)
        assert window == "const a = 1;"

    def test_removed_line_matches_old_number(self):
        patch = "@@ -5,2 +5,1 @@\n-removed\n kept"
        assert extract_patch_context(patch, 5, context_radius=0) == "removed"

    def test_either_counter_matches_and_first_hit_wins(self):
        # The old counter reaches 6 at "+one", before the new counter does at "+two".
        patch = "@@ -5,2 +5,3 @@\n-gone\n+one\n+two\n ctx"
        assert extract_patch_context(patch, 6, context_radius=0) == "one"

    def test_line_not_in_patch_returns_none(self):
        assert extract_patch_context(HUNK, 99) is None

    def test_file_headers_excluded_from_window(self):
        patch = "--- a/app.js\n+++ b/app.js\n@@ -1,1 +1,1 @@\n only"
        assert extract_patch_context(patch, 1, context_radius=5) == "only"

    def test_malformed_header_stops_matching_until_next_hunk(self):
        patch = "@@ bad header @@\n line\n@@ -1,1 +1,1 @@\n good"
        assert extract_patch_context(patch, 1, context_radius=0) == "good"

    def test_empty_patch(self):
        assert extract_patch_context("", 1) is None
        assert extract_patch_context(None, 1) is None

    def test_later_hunk_resets_counters(self):
        patch = "@@ -1,2 +1,2 @@\n a\n b\n@@ -40,2 +40,2 @@\n x\n y"
        assert extract_patch_context(patch, 41, context_radius=0) == "y"


class TestStripDiffMarkers:
    def test_plain_code_untouched(self):
        code = "def f():\n    return 1"
        assert strip_diff_markers(code) == code

    def test_diff_text_cleaned(self):
        assert strip_diff_markers("@@ -1,2 +1,2 @@\n-old\n+new\n same") == "old\nnew\nsame"

    def test_looks_like_diff(self):
        assert looks_like_diff("+added")
        assert not looks_like_diff("x = 1")
