"""
Review Orchestrator

Runs the complete review of one pull request: repository analysis,
diff parsing, per-chunk LLM review, line anchoring and posting.
"""

import time
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ..config import ReviewConfig
from ..models.pr_diff import DiffChunk, PullRequestRef
from ..models.review import AnchoredComment, ReviewOutcome
from ..models.analysis import ArchitectureReview, TestCoverageReview
from ..diff.parser import DiffParser
from ..diff.locator import LineLocator
from ..llm.oracle import Oracle
from ..llm.prompts import PromptBuilder
from ..llm.sanitizer import ResponseSanitizer
from ..analysis.architecture import ArchitectureAnalyzer
from ..analysis.test_coverage import TestCoverageAnalyzer
from ..formatting.markdown import format_architecture_comment
from ..vcs.base import VcsSink
from ..workspace import GitWorkspaceProvider


logger = logging.getLogger(__name__)


class ReviewAbortedError(Exception):
    """A pull request review could not be carried out"""

    def __init__(self, message: str, pr: Optional[PullRequestRef] = None):
        super().__init__(message)
        self.pr = pr


class ReviewOrchestrator:
    """
    Sequences one pull request review.

    Failures are handled at three levels:
    - workspace acquisition and diff retrieval abort the run
      (ReviewAbortedError)
    - architecture, test coverage and head commit lookups are logged and
      the run continues without them
    - a failing oracle call, unparsable response or unlocatable line only
      drops that chunk or comment

    The workspace is always released, whatever happened before.
    """

    def __init__(
        self,
        vcs_sink: VcsSink,
        oracle: Oracle,
        workspace_provider: GitWorkspaceProvider,
        host: str,
        token: Optional[str] = None,
        config: Optional[ReviewConfig] = None,
        diff_parser: Optional[DiffParser] = None,
        locator: Optional[LineLocator] = None,
        sanitizer: Optional[ResponseSanitizer] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        architecture_analyzer: Optional[ArchitectureAnalyzer] = None,
        test_coverage_analyzer: Optional[TestCoverageAnalyzer] = None
    ):
        """
        Initialize review orchestrator.

        Args:
            vcs_sink: Source of diffs and destination of comments
            oracle: LLM used for chunk review and architecture advice
            workspace_provider: Supplies local repository checkouts
            host: VCS host used for cloning
            token: Access token used for cloning
            config: Review settings (prompts, concurrency, messages)
        """
        self.vcs_sink = vcs_sink
        self.oracle = oracle
        self.workspace_provider = workspace_provider
        self.host = host
        self.token = token
        self.config = config or ReviewConfig()

        self.diff_parser = diff_parser or DiffParser()
        self.locator = locator or LineLocator()
        self.sanitizer = sanitizer or ResponseSanitizer()
        self.prompt_builder = prompt_builder or PromptBuilder(
            review_template=self.config.review_prompt,
            architecture_template=self.config.architecture_prompt,
        )
        self.architecture_analyzer = architecture_analyzer or ArchitectureAnalyzer(
            oracle=oracle,
            prompt_builder=self.prompt_builder,
        )
        self.test_coverage_analyzer = test_coverage_analyzer or TestCoverageAnalyzer()

    def process_pull_request(self, pr: PullRequestRef) -> ReviewOutcome:
        """
        Review a pull request and post the results.

        Args:
            pr: Pull request to review

        Returns:
            ReviewOutcome describing what was posted

        Raises:
            ReviewAbortedError: If the workspace or the diff is unavailable
            VcsAPIError: If the final review cannot be posted
        """
        start_time = time.time()
        logger.info(f"Starting review of {pr}")

        try:
            repo_path = self.workspace_provider.acquire(self.host, self.token, pr.owner, pr.repo)
        except Exception as e:
            logger.error(f"Failed to acquire workspace for {pr}: {e}")
            raise ReviewAbortedError(f"Failed to acquire workspace for {pr}: {e}", pr) from e
        logger.debug(f"Workspace for {pr.full_name} at {repo_path}")

        try:
            outcome = self._review(pr, repo_path)
        finally:
            self.workspace_provider.release(repo_path)

        outcome.processing_time = time.time() - start_time
        logger.info(
            f"Finished review of {pr} in {outcome.processing_time:.2f}s "
            f"({outcome.status}, {outcome.total_comments} comments)"
        )
        return outcome

    def _review(self, pr: PullRequestRef, repo_path: str) -> ReviewOutcome:
        architecture = self._review_architecture(pr, repo_path)
        commit_id = self._resolve_head_commit(pr)

        try:
            diff_text = self.vcs_sink.get_diff(pr.owner, pr.repo, pr.number)
        except Exception as e:
            logger.error(f"Failed to fetch diff for {pr}: {e}")
            raise ReviewAbortedError(f"Failed to fetch diff for {pr}: {e}", pr) from e

        test_coverage = self._review_test_coverage(pr, diff_text, repo_path)

        chunks = self.diff_parser.parse(diff_text)
        if not chunks:
            logger.info(f"No reviewable changes in {pr}")
            return ReviewOutcome(
                status='no_changes',
                message="No reviewable changes found.",
                architecture=architecture,
                test_coverage=test_coverage,
            )

        comments = self.review_chunks(chunks)

        if comments:
            self.vcs_sink.submit_review(pr.owner, pr.repo, pr.number, comments, commit_id)
        else:
            self.vcs_sink.post_general_comment(pr.owner, pr.repo, pr.number, self.config.no_issues_message)

        return ReviewOutcome(
            status='completed',
            message=f"Review complete. Submitted {len(comments)} comments.",
            comments=comments,
            chunks_reviewed=len(chunks),
            architecture=architecture,
            test_coverage=test_coverage,
        )

    def review_chunks(self, chunks: List[DiffChunk]) -> List[AnchoredComment]:
        """
        Review every chunk and collect anchored comments in diff order.

        Up to `max_concurrent_oracle_calls` chunks are reviewed at once.
        """
        workers = min(max(1, self.config.max_concurrent_oracle_calls), len(chunks))
        logger.info(f"Reviewing {len(chunks)} chunks ({workers} at a time)")

        if workers <= 1:
            results = [self.review_chunk(chunk) for chunk in chunks]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="oracle") as executor:
                # map() yields in submission order
                results = list(executor.map(self.review_chunk, chunks))

        return [comment for chunk_comments in results for comment in chunk_comments]

    def review_chunk(self, chunk: DiffChunk) -> List[AnchoredComment]:
        """Ask the oracle about one chunk and anchor what it reports."""
        logger.debug(
            f"Reviewing {chunk.file_path}:{chunk.start_line_new} "
            f"(+{len(chunk.added_lines)}/-{len(chunk.removed_lines)} lines)"
        )
        try:
            prompt = self.prompt_builder.build_review_prompt(chunk.file_path, chunk.code_snippet)
            response = self.oracle.generate(prompt)
        except Exception as e:
            logger.warning(f"Oracle call failed for {chunk.file_path}:{chunk.start_line_new}: {e}")
            return []

        try:
            candidates = self.sanitizer.parse_candidates(response)
        except Exception as e:
            logger.warning(f"Unparsable oracle response for {chunk.file_path}:{chunk.start_line_new}: {e}")
            return []

        anchored = []
        for candidate in candidates:
            try:
                anchored.append(self.locator.anchor(chunk, candidate))
            except Exception as e:
                logger.warning(f"Dropping comment on {chunk.file_path}: {e}")

        logger.debug(f"{chunk.file_path}:{chunk.start_line_new}: {len(anchored)}/{len(candidates)} comments anchored")
        return anchored

    def _review_architecture(self, pr: PullRequestRef, repo_path: str) -> Optional[ArchitectureReview]:
        try:
            review = self.architecture_analyzer.analyze(repo_path)
        except Exception as e:
            logger.warning(f"Architecture analysis failed for {pr}: {e}")
            return None

        if review.needs_comment:
            try:
                self.vcs_sink.post_general_comment(pr.owner, pr.repo, pr.number, format_architecture_comment(review))
            except Exception as e:
                logger.warning(f"Failed to post architecture review on {pr}: {e}")

        return review

    def _resolve_head_commit(self, pr: PullRequestRef) -> Optional[str]:
        try:
            return self.vcs_sink.get_head_commit(pr.owner, pr.repo, pr.number)
        except Exception as e:
            logger.warning(f"Could not resolve head commit of {pr}, continuing without it: {e}")
            return None

    def _review_test_coverage(
        self,
        pr: PullRequestRef,
        diff_text: str,
        repo_path: str
    ) -> Optional[TestCoverageReview]:
        try:
            review = self.test_coverage_analyzer.analyze(diff_text, repo_path)
        except Exception as e:
            logger.warning(f"Test coverage analysis failed for {pr}: {e}")
            return None

        for comment in review.comments:
            try:
                self.vcs_sink.post_general_comment(pr.owner, pr.repo, pr.number, comment)
            except Exception as e:
                logger.warning(f"Failed to post test coverage review on {pr}: {e}")

        return review
