"""
GitHub API Client

Handles GitHub API authentication, rate limit tracking, and the
pull request calls used by the reviewer.
"""

import time
import logging
from typing import List, Optional
from datetime import datetime

import requests

from ..models.review import AnchoredComment
from .base import HttpVcsClient, VcsAPIError


logger = logging.getLogger(__name__)


class RateLimitExceeded(VcsAPIError):
    """GitHub API rate limit exceeded"""
    def __init__(self, reset_time: datetime):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}", status_code=429)
        self.reset_time = reset_time


class GitHubClient(HttpVcsClient):
    """
    GitHub API client.

    Review comments are anchored by diff position (the hunk-relative
    line index), which is what the pull request review API expects.
    """

    DIFF_MEDIA_TYPE = 'application/vnd.github.v3.diff'

    def __init__(self, token: str, base_url: str = "https://api.github.com", timeout_seconds: int = 30):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token
            base_url: GitHub API base URL (default: https://api.github.com)
            timeout_seconds: Per-request timeout
        """
        super().__init__(token, base_url, timeout_seconds)
        self.session.headers['Accept'] = 'application/vnd.github.v3+json'
        self.rate_limit_remaining = 5000
        self.rate_limit_reset = datetime.now()

    def _check_rate_limit(self) -> None:
        """Fail fast when the remaining quota is exhausted."""
        if self.rate_limit_remaining <= 10 and datetime.now() < self.rate_limit_reset:
            logger.warning(f"Rate limit low ({self.rate_limit_remaining}), resets at {self.rate_limit_reset}")
            raise RateLimitExceeded(self.rate_limit_reset)

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        self._check_rate_limit()
        return super()._make_request(method, endpoint, **kwargs)

    def _inspect_response(self, response: requests.Response) -> None:
        """Update rate limit information from response headers."""
        if 'X-RateLimit-Remaining' in response.headers:
            self.rate_limit_remaining = int(response.headers['X-RateLimit-Remaining'])

        if 'X-RateLimit-Reset' in response.headers:
            reset_timestamp = int(response.headers['X-RateLimit-Reset'])
            self.rate_limit_reset = datetime.fromtimestamp(reset_timestamp)

        if response.status_code == 429:
            reset_time = datetime.fromtimestamp(int(response.headers.get('X-RateLimit-Reset', time.time() + 3600)))
            raise RateLimitExceeded(reset_time)

    def get_diff(self, owner: str, repo: str, pr_number: int) -> str:
        """
        Get the pull request as a unified diff.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            Unified diff text
        """
        logger.info(f"Fetching PR diff for {owner}/{repo}#{pr_number}")

        response = self._make_request(
            'GET',
            f'/repos/{owner}/{repo}/pulls/{pr_number}',
            headers={'Accept': self.DIFF_MEDIA_TYPE}
        )
        return response.text

    def get_head_commit(self, owner: str, repo: str, pr_number: int) -> str:
        logger.info(f"Fetching PR {owner}/{repo}#{pr_number}")

        response = self._make_request('GET', f'/repos/{owner}/{repo}/pulls/{pr_number}')
        sha = (response.json().get('head') or {}).get('sha')
        if not sha:
            raise VcsAPIError(f"Pull request {owner}/{repo}#{pr_number} has no head commit")
        return sha

    def post_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        comments: List[AnchoredComment],
        commit_id: Optional[str]
    ) -> None:
        payload = {
            'event': 'COMMENT',
            'comments': [
                {'path': c.file_path, 'position': c.hunk_position, 'body': c.body}
                for c in comments
            ],
        }
        # Without commit_id GitHub anchors to the latest commit
        if commit_id:
            payload['commit_id'] = commit_id

        logger.info(f"Submitting review with {len(comments)} comments to {owner}/{repo}#{pr_number}")
        self._post_review_payload(f'/repos/{owner}/{repo}/pulls/{pr_number}/reviews', payload)
