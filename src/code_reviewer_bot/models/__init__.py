"""
Data Models

코드 리뷰 봇의 핵심 데이터 모델들
"""

from .pr_diff import DiffChunk, PullRequestRef
from .review import (
    CandidateComment,
    AnchoredComment,
    ReviewOutcome,
    CandidateCommentPayload,
    ArchitectureFeedback,
)
from .analysis import ArchitectureReview, TestCoverageReview
from .events import PullRequestEvent

__all__ = [
    "DiffChunk",
    "PullRequestRef",
    "CandidateComment",
    "AnchoredComment",
    "ReviewOutcome",
    "CandidateCommentPayload",
    "ArchitectureFeedback",
    "ArchitectureReview",
    "TestCoverageReview",
    "PullRequestEvent",
]
