"""
VCS Sink Interface

Common interface and HTTP plumbing for the VCS providers the reviewer
reads diffs from and posts comments to.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import requests

from ..models.review import AnchoredComment
from ..formatting.markdown import format_review_summary


logger = logging.getLogger(__name__)


class VcsAPIError(Exception):
    """VCS API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class ReviewNotSupportedError(VcsAPIError):
    """The server does not support batched pull request reviews"""


class VcsSink(ABC):
    """
    Read/write access to a pull request on a VCS provider.

    submit_review() is what the orchestrator calls: it posts a batched
    review and, if the server rejects the review endpoint as unsupported,
    downgrades to a single summary comment with the same content.
    """

    @abstractmethod
    def get_diff(self, owner: str, repo: str, pr_number: int) -> str:
        """Fetch the pull request as unified diff text."""

    @abstractmethod
    def get_head_commit(self, owner: str, repo: str, pr_number: int) -> str:
        """Fetch the SHA of the pull request's head commit."""

    @abstractmethod
    def post_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        comments: List[AnchoredComment],
        commit_id: Optional[str]
    ) -> None:
        """
        Post all comments as one batched review.

        Raises:
            ReviewNotSupportedError: If the server has no batched review support
            VcsAPIError: For any other API error
        """

    @abstractmethod
    def post_general_comment(self, owner: str, repo: str, pr_number: int, body: str) -> None:
        """Post a top-level comment on the pull request conversation."""

    def submit_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        comments: List[AnchoredComment],
        commit_id: Optional[str]
    ) -> None:
        """
        Post a batched review, falling back to a summary comment.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            comments: Anchored comments in diff order
            commit_id: Head commit SHA, if known
        """
        try:
            self.post_review(owner, repo, pr_number, comments, commit_id)
        except ReviewNotSupportedError as e:
            logger.warning(
                f"Batched reviews not supported for {owner}/{repo} ({e}). "
                "Falling back to a summary comment."
            )
            self.post_general_comment(owner, repo, pr_number, format_review_summary(comments))


class HttpVcsClient(VcsSink):
    """Shared requests-based transport for token-authenticated VCS APIs."""

    UNSUPPORTED_REVIEW_STATUSES = {404, 405, 501}

    def __init__(self, token: str, base_url: str, timeout_seconds: int = 30):
        """
        Initialize HTTP client.

        Args:
            token: API access token
            base_url: API base URL
            timeout_seconds: Per-request timeout
        """
        self.token = token
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with authentication."""
        session = requests.Session()
        session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/json',
            'User-Agent': 'Code-Reviewer-Bot/1.0'
        })
        return session

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Make authenticated request to the VCS API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            VcsAPIError: For API errors
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault('timeout', self.timeout_seconds)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise VcsAPIError(f"Request failed: {str(e)}")

        self._inspect_response(response)

        if not response.ok:
            error_data = self._error_payload(response)
            raise VcsAPIError(
                f"VCS API error: {response.status_code} - {error_data.get('message', 'Unknown error')}",
                status_code=response.status_code,
                response_data=error_data
            )

        return response

    def _inspect_response(self, response: requests.Response) -> None:
        """Hook for provider-specific response handling (rate limits)."""

    def _error_payload(self, response: requests.Response) -> Dict:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {'message': response.text[:200]}
        return data if isinstance(data, dict) else {'message': str(data)}

    def _post_review_payload(self, endpoint: str, payload: Dict) -> None:
        """POST a review, translating endpoint rejections into ReviewNotSupportedError."""
        try:
            self._make_request('POST', endpoint, json=payload)
        except VcsAPIError as e:
            if e.status_code in self.UNSUPPORTED_REVIEW_STATUSES:
                raise ReviewNotSupportedError(str(e), e.status_code, e.response_data)
            raise

    def post_general_comment(self, owner: str, repo: str, pr_number: int, body: str) -> None:
        logger.info(f"Posting general comment on {owner}/{repo}#{pr_number}")
        self._make_request(
            'POST',
            f'/repos/{owner}/{repo}/issues/{pr_number}/comments',
            json={'body': body}
        )
