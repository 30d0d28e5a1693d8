"""
Review Dispatcher

Runs pull request reviews in the background on a bounded worker pool,
keeping a record of every review that failed.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Deque, List, Optional

from ..models.events import PullRequestEvent
from ..models.pr_diff import PullRequestRef
from ..models.review import ReviewOutcome
from .orchestrator import ReviewOrchestrator


logger = logging.getLogger(__name__)
dead_letter_logger = logging.getLogger("code_reviewer_bot.dead_letter")


@dataclass(frozen=True)
class DeadLetter:
    """A background review that ended with an exception."""
    pr: PullRequestRef
    error: str
    failed_at: datetime


class ReviewDispatcher:
    """
    Accepts review requests without waiting for them to finish.

    At most `max_pending` reviews are queued or running at once; further
    requests are rejected until a slot frees up. Failures never reach the
    submitter: they are logged to the dead-letter logger and kept in
    `dead_letters`.
    """

    REVIEW_ACTIONS = frozenset({'opened', 'synchronize', 'reopened'})

    def __init__(
        self,
        orchestrator: ReviewOrchestrator,
        max_workers: int = 4,
        max_pending: int = 16,
        dead_letter_capacity: int = 100
    ):
        """
        Initialize review dispatcher.

        Args:
            orchestrator: Runs a single review
            max_workers: Reviews running at the same time
            max_pending: Reviews queued or running at the same time
            dead_letter_capacity: Failed reviews kept in memory
        """
        if max_workers < 1 or max_pending < max_workers:
            raise ValueError("max_workers must be >= 1 and max_pending >= max_workers")

        self.orchestrator = orchestrator
        self.max_workers = max_workers
        self.max_pending = max_pending

        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="review_worker")
        self._lock = threading.Lock()
        self._pending = 0
        self._dead_letters: Deque[DeadLetter] = deque(maxlen=dead_letter_capacity)

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending

    @property
    def dead_letters(self) -> List[DeadLetter]:
        with self._lock:
            return list(self._dead_letters)

    def should_review(self, event: PullRequestEvent) -> bool:
        """Only newly opened, updated or reopened pull requests that are still open."""
        return event.action in self.REVIEW_ACTIONS and event.is_open

    def submit(self, event: PullRequestEvent) -> bool:
        """
        Schedule a review for a webhook event.

        Returns:
            True if a review was scheduled, False if the event is ignored
            or the pool is full
        """
        if not self.should_review(event):
            logger.debug(f"Ignoring pull_request event action={event.action} state={event.pull_request.state}")
            return False

        try:
            pr = event.to_ref()
        except ValueError as e:
            logger.warning(f"Ignoring malformed pull_request event: {e}")
            return False

        return self.submit_pr(pr) is not None

    def submit_pr(self, pr: PullRequestRef) -> Optional[Future]:
        """Schedule a review for a pull request; None if the pool is full."""
        with self._lock:
            if self._pending >= self.max_pending:
                logger.warning(f"Review queue full ({self.max_pending}), rejecting {pr}")
                return None
            self._pending += 1

        try:
            future = self.executor.submit(self._run, pr)
        except RuntimeError as e:
            with self._lock:
                self._pending -= 1
            logger.warning(f"Dispatcher is shut down, rejecting {pr}: {e}")
            return None

        logger.info(f"Queued review of {pr} (pending: {self.pending}/{self.max_pending})")
        return future

    def shutdown(self, wait: bool = True) -> None:
        logger.info("Shutting down review dispatcher")
        self.executor.shutdown(wait=wait)

    def _run(self, pr: PullRequestRef) -> Optional[ReviewOutcome]:
        try:
            outcome = self.orchestrator.process_pull_request(pr)
            logger.info(f"Review of {pr} finished: {outcome.message}")
            return outcome
        except Exception as e:
            self._record_failure(pr, e)
            return None
        finally:
            with self._lock:
                self._pending -= 1

    def _record_failure(self, pr: PullRequestRef, error: Exception) -> None:
        letter = DeadLetter(pr=pr, error=f"{type(error).__name__}: {error}", failed_at=datetime.now())
        with self._lock:
            self._dead_letters.append(letter)
        dead_letter_logger.error(f"Review of {pr} failed: {letter.error}", exc_info=error)
