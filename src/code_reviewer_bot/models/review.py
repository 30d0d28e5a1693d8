"""
Review Data Models

코드 리뷰 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING
from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from .analysis import ArchitectureReview, TestCoverageReview


@dataclass(frozen=True)
class CandidateComment:
    """Unanchored finding emitted by the oracle for one chunk."""
    line_content: str
    message: str


@dataclass(frozen=True)
class AnchoredComment:
    """A finding resolved to an exact hunk position and new-file line."""
    body: str
    file_path: str
    hunk_position: int
    file_line: int

    def __post_init__(self):
        """데이터 검증"""
        if self.hunk_position <= 0:
            raise ValueError("Hunk position must be positive")
        if self.file_line <= 0:
            raise ValueError("Line number must be positive")
        if not self.body.strip():
            raise ValueError("Comment body cannot be empty")


@dataclass
class ReviewOutcome:
    """전체 리뷰 결과"""
    status: str
    message: str
    comments: List[AnchoredComment] = field(default_factory=list)
    chunks_reviewed: int = 0
    architecture: Optional["ArchitectureReview"] = None
    test_coverage: Optional["TestCoverageReview"] = None
    processing_time: float = 0.0

    def __post_init__(self):
        """데이터 검증"""
        valid_statuses = {'completed', 'no_changes'}
        if self.status not in valid_statuses:
            raise ValueError(f"Invalid status: {self.status}")
        if self.processing_time < 0:
            raise ValueError("Processing time must be non-negative")

    @property
    def total_comments(self) -> int:
        return len(self.comments)


# Pydantic models for oracle output validation
class CandidateCommentPayload(BaseModel):
    """One element of the oracle's per-chunk JSON array."""
    line_content: str
    message: str

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        if not v.strip():
            raise ValueError('Comment message cannot be empty')
        return v.strip()

    def to_candidate(self) -> CandidateComment:
        return CandidateComment(line_content=self.line_content, message=self.message)


class FeedbackComment(BaseModel):
    """Single advisory entry of the architecture feedback object."""
    body: str

    @field_validator('body')
    @classmethod
    def validate_body(cls, v):
        if not v.strip():
            raise ValueError('Comment body cannot be empty')
        return v


class ArchitectureFeedback(BaseModel):
    """Oracle response shape for architecture feedback: {"comments": [{"body": ...}]}."""
    comments: List[FeedbackComment] = Field(min_length=1)
