"""
PR Diff Data Models

Pull Request diff 관련 데이터 모델들
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class DiffChunk:
    """PR diff의 개별 청크 (hunk 단위)"""
    file_path: str
    code_snippet: str  # header line + every body line of the hunk
    start_line_new: int

    def __post_init__(self):
        """데이터 검증"""
        if not self.file_path:
            raise ValueError("file_path cannot be empty")
        if self.start_line_new < 0:
            raise ValueError("Line numbers must be non-negative")

    @property
    def lines(self) -> List[str]:
        """Hunk lines with the header at index 0."""
        return self.code_snippet.split('\n')

    @property
    def added_lines(self) -> List[str]:
        """Added lines without their leading '+'."""
        return [line[1:] for line in self.lines[1:] if line.startswith('+')]

    @property
    def removed_lines(self) -> List[str]:
        """Removed lines without their leading '-'."""
        return [line[1:] for line in self.lines[1:] if line.startswith('-')]


@dataclass(frozen=True)
class PullRequestRef:
    """Identity of the pull request being reviewed."""
    owner: str
    repo: str
    number: int
    title: str = ""
    branch: str = ""
    url: str = ""

    def __post_init__(self):
        """데이터 검증"""
        if not self.owner or not self.repo:
            raise ValueError("Repository owner and name are required")
        if self.number <= 0:
            raise ValueError("PR number must be positive")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"

    @classmethod
    def from_slug(cls, slug: str, number: int, title: Optional[str] = None) -> "PullRequestRef":
        """Build a reference from an 'owner/repo' slug."""
        parts = slug.split('/')
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Repository must be in format 'owner/repo': {slug}")
        return cls(owner=parts[0], repo=parts[1], number=number, title=title or "")
