"""
Webhook Event Models

GitHub/Gitea pull_request 이벤트 페이로드 모델
"""

from typing import Optional
from pydantic import BaseModel, field_validator

from .pr_diff import PullRequestRef


class RepositoryOwner(BaseModel):
    login: str


class EventRepository(BaseModel):
    name: str
    owner: RepositoryOwner


class BranchRef(BaseModel):
    ref: str = ""
    sha: Optional[str] = None
    repo: Optional[EventRepository] = None


class EventPullRequest(BaseModel):
    state: str
    title: str = ""
    html_url: str = ""
    head: BranchRef
    base: BranchRef


class PullRequestEvent(BaseModel):
    """pull_request webhook payload (only the fields the reviewer reads)."""
    action: str
    number: int
    pull_request: EventPullRequest

    @field_validator('number')
    @classmethod
    def validate_number(cls, v):
        if v <= 0:
            raise ValueError('PR number must be positive')
        return v

    @property
    def is_open(self) -> bool:
        return self.pull_request.state == "open"

    def to_ref(self) -> PullRequestRef:
        """Convert to the reference consumed by the orchestrator."""
        base_repo = self.pull_request.base.repo
        if base_repo is None:
            raise ValueError("Event is missing the base repository")
        return PullRequestRef(
            owner=base_repo.owner.login,
            repo=base_repo.name,
            number=self.number,
            title=self.pull_request.title,
            branch=self.pull_request.head.ref,
            url=self.pull_request.html_url,
        )
