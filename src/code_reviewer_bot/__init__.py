"""
Code Reviewer Bot

Pull request review automation: unified diffs are split into hunks,
reviewed by an LLM, anchored back to exact lines and posted to GitHub
or Gitea.
"""

__version__ = "1.0.0"

from .api import CodeReviewerAPI
from .config import AppConfig
from .models import PullRequestRef, ReviewOutcome
from .review import ReviewOrchestrator, ReviewDispatcher, ReviewAbortedError

__all__ = [
    "CodeReviewerAPI",
    "AppConfig",
    "PullRequestRef",
    "ReviewOutcome",
    "ReviewOrchestrator",
    "ReviewDispatcher",
    "ReviewAbortedError",
]
