"""
Unit tests for anchoring LLM line content to diff hunks.
"""

import pytest

from code_reviewer_bot.diff.locator import LineLocator, LineLocationError
from code_reviewer_bot.models.pr_diff import DiffChunk
from code_reviewer_bot.models.review import CandidateComment, AnchoredComment


def make_chunk(body_lines, start_line_new=10, header="@@ -10,4 +10,5 @@ func main() {", path="main.go"):
    return DiffChunk(
        file_path=path,
        code_snippet='\n'.join([header] + list(body_lines)),
        start_line_new=start_line_new,
    )


class TestLineLocator:
    """Unit tests for LineLocator.locate and anchor."""

    def setup_method(self):
        self.locator = LineLocator()

    def test_added_line_after_two_context_lines(self):
        """Two context lines then an added line: file line 12, position 3."""
        chunk = make_chunk([
            " package main",
            " import \"fmt\"",
            "+  fmt.Println(\"hi\")",
        ])

        position, file_line = self.locator.locate(chunk, "+  fmt.Println(\"hi\")")

        assert file_line == 12
        assert position == 3

    def test_whitespace_drift_is_tolerated(self):
        """Whitespace runs are collapsed on both sides before comparing."""
        chunk = make_chunk([" a := 1", "+\tb  :=   compute(a)"])

        position, file_line = self.locator.locate(chunk, "  +\tb := compute(a)  ")

        assert (position, file_line) == (2, 11)

    def test_deleted_lines_do_not_advance_file_line(self):
        chunk = make_chunk([
            " keep()",
            "-old()",
            "-older()",
            "+replacement()",
        ])

        position, file_line = self.locator.locate(chunk, "+replacement()")

        assert position == 4
        assert file_line == 11

    def test_no_newline_marker_does_not_advance_file_line(self):
        chunk = make_chunk([
            "-last()",
            "\\ No newline at end of file",
            "+last()",
        ])

        assert self.locator.locate(chunk, "+last()") == (3, 10)

    def test_blank_context_line_advances_file_line(self):
        """A context line whose single space was stripped still counts."""
        chunk = make_chunk([" a()", "", "+b()"])

        assert self.locator.locate(chunk, "+b()") == (3, 12)

    def test_context_line_is_rejected(self):
        """Pointing at unchanged code fails instead of anchoring silently."""
        chunk = make_chunk([" unchanged()", "+added()"])

        with pytest.raises(LineLocationError, match="not an added line"):
            self.locator.locate(chunk, "unchanged()")

    def test_removed_line_is_rejected(self):
        chunk = make_chunk(["-gone()", "+added()"])

        with pytest.raises(LineLocationError, match="not an added line"):
            self.locator.locate(chunk, "-gone()")

    def test_first_match_wins(self):
        """When context and added lines normalize alike, the earlier line decides."""
        chunk = make_chunk([" +x", "+x"])

        # ' +x' normalizes to '+x' and comes first
        with pytest.raises(LineLocationError, match="not an added line"):
            self.locator.locate(chunk, "+x")

    def test_missing_content(self):
        chunk = make_chunk([" a()", "+b()"])

        with pytest.raises(LineLocationError, match="not found") as exc_info:
            self.locator.locate(chunk, "+c()")
        assert exc_info.value.line_content == "+c()"

    @pytest.mark.parametrize("content", ["", "   ", "\t\n"])
    def test_empty_content(self, content):
        chunk = make_chunk(["+b()"])

        with pytest.raises(LineLocationError, match="empty"):
            self.locator.locate(chunk, content)

    def test_anchor_builds_comment(self):
        """anchor() carries path, body, position and file line."""
        chunk = make_chunk([" a()", "+b()"], path="svc/handler.go")
        candidate = CandidateComment(line_content="+b()", message="Handle the error returned by b().")

        anchored = self.locator.anchor(chunk, candidate)

        assert isinstance(anchored, AnchoredComment)
        assert anchored.file_path == "svc/handler.go"
        assert anchored.body == "Handle the error returned by b()."
        assert anchored.hunk_position == 2
        assert anchored.file_line == 11

    def test_normalize(self):
        assert self.locator.normalize("  a \t b\n c  ") == "a b c"
