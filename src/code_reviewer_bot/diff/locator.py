"""
Line Locator

Resolves free-text line content reported by the LLM back to an exact
position inside a diff hunk and the corresponding new-file line number.
"""

import re
import logging
from typing import Tuple

from ..models.pr_diff import DiffChunk
from ..models.review import AnchoredComment, CandidateComment


logger = logging.getLogger(__name__)


class LineLocationError(Exception):
    """Line content could not be anchored to an added line of the hunk"""
    def __init__(self, message: str, line_content: str = ""):
        super().__init__(message)
        self.line_content = line_content


class LineLocator:
    """
    Anchors LLM-reported line content to a hunk.

    Hunk positions count every line of the hunk with the '@@' header at 0,
    so the first body line is position 1. File lines start at the hunk's
    new-file start and advance only past context and added lines.
    """

    def __init__(self):
        """Initialize line locator."""
        self.whitespace_pattern = re.compile(r'\s+')

    def normalize(self, text: str) -> str:
        """Collapse whitespace runs to single spaces and trim the ends."""
        return self.whitespace_pattern.sub(' ', text).strip()

    def locate(self, chunk: DiffChunk, line_content: str) -> Tuple[int, int]:
        """
        Find the hunk position and file line of the given content.

        Args:
            chunk: DiffChunk the content was reported against
            line_content: Line text as emitted by the LLM (with its '+' prefix)

        Returns:
            Tuple of (hunk_position, file_line)

        Raises:
            LineLocationError: If the content is empty, not found, or the
                first matching line is not an added line
        """
        target = self.normalize(line_content)
        if not target:
            raise LineLocationError("LLM provided empty line content", line_content)

        file_line = chunk.start_line_new

        for hunk_position, line in enumerate(chunk.lines):
            if self.normalize(line) == target:
                if not line.startswith('+'):
                    raise LineLocationError(
                        f"matched line is not an added line ('+'): '{line}'",
                        line_content,
                    )
                return hunk_position, file_line

            if hunk_position > 0 and self._advances_file_line(line):
                file_line += 1

        raise LineLocationError(f"line content not found in diff hunk: '{line_content}'", line_content)

    def _advances_file_line(self, line: str) -> bool:
        # Context, added, or a blank context line whose leading space was stripped
        return line == '' or line[0] in (' ', '+')

    def anchor(self, chunk: DiffChunk, candidate: CandidateComment) -> AnchoredComment:
        """
        Resolve a candidate comment into an anchored comment.

        Raises:
            LineLocationError: If the candidate cannot be located
        """
        hunk_position, file_line = self.locate(chunk, candidate.line_content)
        logger.debug(f"Anchored comment at {chunk.file_path}:{file_line} (position {hunk_position})")

        return AnchoredComment(
            body=candidate.message,
            file_path=chunk.file_path,
            hunk_position=hunk_position,
            file_line=file_line,
        )
