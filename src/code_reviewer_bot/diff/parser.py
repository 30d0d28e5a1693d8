"""
Unified Diff Parser

Parses full unified diff text (as returned by the VCS diff endpoints)
into per-hunk DiffChunk objects for review.
"""

import re
import logging
from typing import Iterator, List, Optional, Tuple

from ..models.pr_diff import DiffChunk


logger = logging.getLogger(__name__)

_LINE_BREAK_PATTERN = re.compile(r'\r?\n')


def split_diff_lines(diff_text: str) -> List[str]:
    """
    Split diff text on LF or CRLF only.

    Form feeds and Unicode line separators stay inside the line they
    belong to, unlike str.splitlines().
    """
    lines = _LINE_BREAK_PATTERN.split(diff_text)
    if lines and lines[-1] == '':
        lines.pop()
    return lines


class DiffParser:
    """
    Parser for unified diff text spanning zero or more files.

    Emits one DiffChunk per hunk, in file order then hunk order.
    Sections without hunks (binary files, mode changes, pure renames)
    produce no chunks.
    """

    FILE_MARKER = 'diff --git '

    def __init__(self):
        """Initialize diff parser."""
        self.diff_header_pattern = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')
        self.git_header_pattern = re.compile(r'^diff --git (?:"?a/)?(.+?)"? (?:"?b/)?(.+?)"?$')
        self.binary_file_pattern = re.compile(r'^(Binary files? .* differ|GIT binary patch)')

    def parse(self, diff_text: str) -> List[DiffChunk]:
        """
        Parse unified diff text into chunks.

        Args:
            diff_text: Raw unified diff

        Returns:
            Ordered list of DiffChunk objects (empty when there are no hunks)
        """
        if not diff_text or not diff_text.strip():
            logger.debug("Empty diff, nothing to parse")
            return []

        chunks = []
        file_count = 0

        for section in self._split_file_sections(split_diff_lines(diff_text)):
            file_count += 1
            section_chunks = self._parse_file_section(section)
            chunks.extend(section_chunks)

        logger.debug(f"Parsed {len(chunks)} diff chunks from {file_count} file sections")
        return chunks

    def _split_file_sections(self, lines: List[str]) -> Iterator[List[str]]:
        """Split diff lines into per-file sections."""
        has_git_markers = any(line.startswith(self.FILE_MARKER) for line in lines)

        section: List[str] = []
        for index, line in enumerate(lines):
            if self._starts_file_section(lines, index, has_git_markers) and section:
                yield section
                section = []
            section.append(line)

        if section:
            yield section

    def _starts_file_section(self, lines: List[str], index: int, has_git_markers: bool) -> bool:
        line = lines[index]
        if has_git_markers:
            return line.startswith(self.FILE_MARKER)

        # Plain unified diff: a '---' line directly followed by '+++'
        next_line = lines[index + 1] if index + 1 < len(lines) else ''
        return line.startswith('--- ') and next_line.startswith('+++ ')

    def _parse_file_section(self, section: List[str]) -> List[DiffChunk]:
        """
        Parse the hunks of a single file section.

        Args:
            section: Lines of one file's diff, starting at its marker

        Returns:
            List of DiffChunk objects for this file
        """
        first_hunk = next(
            (i for i, line in enumerate(section) if self.diff_header_pattern.match(line)),
            None,
        )
        if first_hunk is None:
            if any(self.binary_file_pattern.match(line) for line in section):
                logger.debug("Skipping binary file diff")
            return []

        file_path = self._extract_file_path(section[:first_hunk])
        if not file_path:
            logger.warning("Skipping hunks without a resolvable file path")
            return []

        chunks = []
        hunk_lines: List[str] = []
        start_line_new = 0

        for line in section[first_hunk:]:
            header_match = self.diff_header_pattern.match(line)
            if header_match:
                if hunk_lines:
                    chunks.append(self._build_chunk(file_path, hunk_lines, start_line_new))
                hunk_lines = [line]
                start_line_new = int(header_match.group(3))
            else:
                hunk_lines.append(line)

        if hunk_lines:
            chunks.append(self._build_chunk(file_path, hunk_lines, start_line_new))

        return chunks

    def _build_chunk(self, file_path: str, hunk_lines: List[str], start_line_new: int) -> DiffChunk:
        # Drop blank separator lines trailing the hunk
        while len(hunk_lines) > 1 and not hunk_lines[-1]:
            hunk_lines.pop()

        return DiffChunk(
            file_path=file_path,
            code_snippet='\n'.join(hunk_lines),
            start_line_new=start_line_new,
        )

    def _extract_file_path(self, header_lines: List[str]) -> Optional[str]:
        """
        Resolve the file path from a section's header lines.

        Prefers the new path ('+++ b/...'), then the old path for deletions,
        then the rename target, then the 'diff --git' line.
        """
        new_path = None
        old_path = None
        rename_to = None
        git_path = None

        for line in header_lines:
            if line.startswith('+++ '):
                new_path = self._strip_path_prefix(line[4:], 'b/')
            elif line.startswith('--- '):
                old_path = self._strip_path_prefix(line[4:], 'a/')
            elif line.startswith('rename to '):
                rename_to = line[len('rename to '):].strip()
            elif line.startswith(self.FILE_MARKER):
                git_match = self.git_header_pattern.match(line)
                if git_match:
                    git_path = git_match.group(2)

        return new_path or old_path or rename_to or git_path

    def _strip_path_prefix(self, raw_path: str, prefix: str) -> Optional[str]:
        path = raw_path.split('\t')[0].strip().strip('"')
        if path == '/dev/null':
            return None
        if path.startswith(prefix):
            path = path[len(prefix):]
        return path or None

    def count_line_changes(self, diff_text: str) -> Tuple[int, int]:
        """
        Count added and removed lines, ignoring file header markers.

        Args:
            diff_text: Raw unified diff

        Returns:
            Tuple of (additions, deletions)
        """
        additions = 0
        deletions = 0

        for line in split_diff_lines(diff_text):
            if line.startswith('+') and not line.startswith('+++'):
                additions += 1
            elif line.startswith('-') and not line.startswith('---'):
                deletions += 1

        return additions, deletions
