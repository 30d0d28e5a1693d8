"""
Code Reviewer API

Main interface that wires configuration into the review pipeline and
exposes synchronous and event-driven entry points.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .config import AppConfig, get_config
from .llm.oracle import Oracle, create_oracle
from .llm.prompts import PromptBuilder
from .vcs import VcsSink, create_vcs_sink
from .workspace import GitWorkspaceProvider
from .models.events import PullRequestEvent
from .models.pr_diff import PullRequestRef
from .models.review import ReviewOutcome
from .review.orchestrator import ReviewOrchestrator
from .review.dispatcher import ReviewDispatcher


logger = logging.getLogger(__name__)


class CodeReviewerAPI:
    """
    Code Reviewer API interface.

    Builds the oracle, VCS client and workspace provider selected by
    configuration (any of them can be injected instead), then offers:
    1. review_pr: review one pull request and wait for the result
    2. handle_event: schedule a review for a pull_request webhook payload
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        oracle: Optional[Oracle] = None,
        vcs_sink: Optional[VcsSink] = None,
        workspace_provider: Optional[GitWorkspaceProvider] = None
    ):
        """
        Initialize Code Reviewer API.

        Args:
            config: Optional configuration object (environment if omitted)
            oracle: Optional LLM override
            vcs_sink: Optional VCS client override
            workspace_provider: Optional workspace provider override
        """
        self.config = config or get_config()

        logger.info("Initializing Code Reviewer API components...")

        self.oracle = oracle or create_oracle(self.config.llm)
        self.vcs_sink = vcs_sink or create_vcs_sink(self.config.vcs)
        self.workspace_provider = workspace_provider or GitWorkspaceProvider(
            root_dir=self.config.workspace.root_dir,
            git_binary=self.config.workspace.git_binary,
        )

        self.orchestrator = ReviewOrchestrator(
            vcs_sink=self.vcs_sink,
            oracle=self.oracle,
            workspace_provider=self.workspace_provider,
            host=self.config.vcs.host,
            token=self.config.vcs.token,
            config=self.config.review,
            prompt_builder=PromptBuilder(
                review_template=self.config.review.review_prompt,
                architecture_template=self.config.review.architecture_prompt,
            ),
        )
        self.dispatcher = ReviewDispatcher(
            self.orchestrator,
            max_workers=self.config.dispatch.max_workers,
            max_pending=self.config.dispatch.max_pending,
        )

        logger.info(f"Code Reviewer API initialized (vcs={self.config.vcs.provider}, llm={self.config.llm.provider})")
        logger.debug(f"Effective configuration: {self.config.to_dict()}")

    def review_pr(self, repository: str, pr_number: int) -> ReviewOutcome:
        """
        Review a pull request synchronously.

        Args:
            repository: Repository slug (owner/repo)
            pr_number: Pull request number

        Returns:
            ReviewOutcome of the run

        Raises:
            ReviewAbortedError: If the workspace or the diff is unavailable
        """
        pr = PullRequestRef.from_slug(repository, pr_number)
        return self.orchestrator.process_pull_request(pr)

    def handle_event(self, payload: Dict[str, Any]) -> bool:
        """
        Schedule a review for a pull_request webhook payload.

        Returns:
            True if a review was scheduled
        """
        try:
            event = PullRequestEvent.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Ignoring unparsable pull_request payload: {e.error_count()} validation errors")
            return False

        return self.dispatcher.submit(event)

    def get_system_health(self) -> Dict:
        """Get dispatcher status and recent failures."""
        dead_letters = self.dispatcher.dead_letters
        return {
            'status': 'degraded' if dead_letters else 'healthy',
            'components': {
                'dispatcher': {
                    'pending': self.dispatcher.pending,
                    'max_pending': self.dispatcher.max_pending,
                    'failed_reviews': len(dead_letters),
                },
                'vcs': {'provider': self.config.vcs.provider},
                'llm': {'provider': self.config.llm.provider, 'model': self.config.llm.model_name},
            },
            'recent_failures': [
                {'pr': str(letter.pr), 'error': letter.error, 'failed_at': letter.failed_at.isoformat()}
                for letter in dead_letters[-10:]
            ],
            'timestamp': datetime.now().isoformat(),
        }

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting events and wait for running reviews."""
        self.dispatcher.shutdown(wait=wait)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with shutdown."""
        self.shutdown()
