"""
Gitea API Client

Pull request access for self-hosted Gitea instances.
"""

import logging
from typing import List, Optional

from ..models.review import AnchoredComment
from .base import HttpVcsClient, VcsAPIError


logger = logging.getLogger(__name__)


class GiteaClient(HttpVcsClient):
    """
    Gitea API client.

    Review comments are anchored by new-file line number. Older Gitea
    releases lack the batched review endpoint; submit_review() then
    falls back to a single summary comment.
    """

    def __init__(self, token: str, base_url: str = "https://gitea.com", timeout_seconds: int = 30):
        """
        Initialize Gitea client.

        Args:
            token: Gitea access token
            base_url: Instance URL (the /api/v1 suffix is added here)
            timeout_seconds: Per-request timeout
        """
        api_url = base_url.rstrip('/')
        if not api_url.endswith('/api/v1'):
            api_url = f"{api_url}/api/v1"
        super().__init__(token, api_url, timeout_seconds)

    def get_diff(self, owner: str, repo: str, pr_number: int) -> str:
        logger.info(f"Fetching PR diff for {owner}/{repo}#{pr_number}")

        response = self._make_request(
            'GET',
            f'/repos/{owner}/{repo}/pulls/{pr_number}.diff',
            headers={'Accept': 'text/plain'}
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
            'body': '',
            'comments': [
                {'path': c.file_path, 'body': c.body, 'new_position': c.file_line}
                for c in comments
            ],
        }
        if commit_id:
            payload['commit_id'] = commit_id

        logger.info(f"Submitting review with {len(comments)} comments to {owner}/{repo}#{pr_number}")
        self._post_review_payload(f'/repos/{owner}/{repo}/pulls/{pr_number}/reviews', payload)
