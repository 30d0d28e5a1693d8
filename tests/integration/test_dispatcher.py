"""
Integration tests for background review dispatching and the API facade.
"""

import logging
import threading
from unittest.mock import Mock

import pytest

from code_reviewer_bot.api import CodeReviewerAPI
from code_reviewer_bot.config import (
    AppConfig, DispatchConfig, GitHubConfig, LLMConfig, VCSConfig, WorkspaceConfig,
)
from code_reviewer_bot.models.events import PullRequestEvent
from code_reviewer_bot.models.pr_diff import PullRequestRef
from code_reviewer_bot.models.review import ReviewOutcome
from code_reviewer_bot.review.dispatcher import ReviewDispatcher
from code_reviewer_bot.review.orchestrator import ReviewAbortedError


def event_payload(action="opened", state="open", number=5):
    return {
        "action": action,
        "number": number,
        "pull_request": {
            "state": state,
            "title": "Add listener",
            "html_url": f"https://github.com/acme/shop/pull/{number}",
            "head": {"ref": "feature/listen", "sha": "abc123"},
            "base": {"ref": "main", "repo": {"name": "shop", "owner": {"login": "acme"}}},
        },
    }


def completed(message="Review complete. Submitted 0 comments."):
    return ReviewOutcome(status="completed", message=message)


class BlockingOrchestrator:
    """Holds every review until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.reviewed = []

    def process_pull_request(self, pr):
        self.started.set()
        self.release.wait(timeout=5)
        self.reviewed.append(pr)
        return completed()


class TestReviewDispatcher:
    """Integration tests for ReviewDispatcher."""

    @pytest.mark.parametrize("action,state,expected", [
        ("opened", "open", True),
        ("synchronize", "open", True),
        ("reopened", "open", True),
        ("closed", "closed", False),
        ("edited", "open", False),
        ("opened", "closed", False),
    ])
    def test_should_review(self, action, state, expected):
        dispatcher = ReviewDispatcher(Mock())
        event = PullRequestEvent.model_validate(event_payload(action=action, state=state))

        assert dispatcher.should_review(event) is expected
        dispatcher.shutdown()

    def test_submit_runs_review_in_background(self):
        orchestrator = Mock()
        orchestrator.process_pull_request.return_value = completed()
        dispatcher = ReviewDispatcher(orchestrator, max_workers=2, max_pending=4)

        accepted = dispatcher.submit(PullRequestEvent.model_validate(event_payload(number=8)))
        dispatcher.shutdown(wait=True)

        assert accepted is True
        orchestrator.process_pull_request.assert_called_once()
        pr = orchestrator.process_pull_request.call_args[0][0]
        assert (pr.owner, pr.repo, pr.number, pr.branch) == ("acme", "shop", 8, "feature/listen")
        assert dispatcher.pending == 0
        assert dispatcher.dead_letters == []

    def test_ignored_event_is_not_scheduled(self):
        orchestrator = Mock()
        dispatcher = ReviewDispatcher(orchestrator)

        assert dispatcher.submit(PullRequestEvent.model_validate(event_payload(action="labeled"))) is False
        dispatcher.shutdown()

        orchestrator.process_pull_request.assert_not_called()

    def test_event_without_base_repository_is_ignored(self):
        payload = event_payload()
        del payload["pull_request"]["base"]["repo"]
        orchestrator = Mock()
        dispatcher = ReviewDispatcher(orchestrator)

        assert dispatcher.submit(PullRequestEvent.model_validate(payload)) is False
        dispatcher.shutdown()

        orchestrator.process_pull_request.assert_not_called()

    def test_failed_review_becomes_dead_letter(self, caplog):
        orchestrator = Mock()
        orchestrator.process_pull_request.side_effect = ReviewAbortedError("diff unavailable")
        dispatcher = ReviewDispatcher(orchestrator)

        with caplog.at_level(logging.ERROR, logger="code_reviewer_bot.dead_letter"):
            future = dispatcher.submit_pr(PullRequestRef("acme", "shop", 3))
            assert future.result(timeout=5) is None
            dispatcher.shutdown()

        letters = dispatcher.dead_letters
        assert len(letters) == 1
        assert letters[0].pr == PullRequestRef("acme", "shop", 3)
        assert letters[0].error == "ReviewAbortedError: diff unavailable"
        assert any(record.name == "code_reviewer_bot.dead_letter" for record in caplog.records)
        assert dispatcher.pending == 0

    def test_full_queue_rejects(self):
        orchestrator = BlockingOrchestrator()
        dispatcher = ReviewDispatcher(orchestrator, max_workers=1, max_pending=1)

        first = dispatcher.submit_pr(PullRequestRef("acme", "shop", 1))
        assert orchestrator.started.wait(timeout=5)
        second = dispatcher.submit_pr(PullRequestRef("acme", "shop", 2))

        assert first is not None
        assert second is None
        assert dispatcher.pending == 1

        orchestrator.release.set()
        first.result(timeout=5)
        dispatcher.shutdown()

        assert orchestrator.reviewed == [PullRequestRef("acme", "shop", 1)]

    def test_submit_after_shutdown_is_rejected(self):
        dispatcher = ReviewDispatcher(Mock())
        dispatcher.shutdown()

        assert dispatcher.submit_pr(PullRequestRef("acme", "shop", 1)) is None
        assert dispatcher.pending == 0

    @pytest.mark.parametrize("max_workers,max_pending", [(0, 4), (4, 2)])
    def test_invalid_limits(self, max_workers, max_pending):
        with pytest.raises(ValueError):
            ReviewDispatcher(Mock(), max_workers=max_workers, max_pending=max_pending)


def make_config(tmp_path):
    return AppConfig(
        llm=LLMConfig(api_key="sk-test"),
        vcs=VCSConfig(provider="github", github=GitHubConfig(token="ghp_test")),
        workspace=WorkspaceConfig(root_dir=str(tmp_path / "repos")),
        dispatch=DispatchConfig(max_workers=1, max_pending=2),
    )


class TestCodeReviewerAPI:
    """Integration tests for the API facade with injected collaborators."""

    def make_api(self, tmp_path):
        vcs_sink = Mock()
        vcs_sink.get_diff.return_value = ""
        workspace = Mock()
        workspace.acquire.return_value = str(tmp_path)
        api = CodeReviewerAPI(
            config=make_config(tmp_path),
            oracle=Mock(),
            vcs_sink=vcs_sink,
            workspace_provider=workspace,
        )
        return api, vcs_sink, workspace

    def test_review_pr(self, tmp_path):
        api, vcs_sink, workspace = self.make_api(tmp_path)

        with api:
            outcome = api.review_pr("acme/shop", 4)

        assert outcome.status == "no_changes"
        workspace.acquire.assert_called_once_with("github.com", "ghp_test", "acme", "shop")
        workspace.release.assert_called_once_with(str(tmp_path))
        vcs_sink.get_diff.assert_called_once_with("acme", "shop", 4)

    def test_review_pr_rejects_bad_slug(self, tmp_path):
        api, _, _ = self.make_api(tmp_path)

        with api, pytest.raises(ValueError):
            api.review_pr("acme", 4)

    def test_handle_event(self, tmp_path):
        api, vcs_sink, workspace = self.make_api(tmp_path)

        accepted = api.handle_event(event_payload(number=11))
        api.shutdown(wait=True)

        assert accepted is True
        vcs_sink.get_diff.assert_called_once_with("acme", "shop", 11)
        workspace.release.assert_called_once()

    def test_handle_invalid_payload(self, tmp_path):
        api, vcs_sink, _ = self.make_api(tmp_path)

        with api:
            assert api.handle_event({"action": "opened"}) is False

        vcs_sink.get_diff.assert_not_called()

    def test_system_health_reports_failures(self, tmp_path):
        api, _, workspace = self.make_api(tmp_path)
        workspace.acquire.side_effect = OSError("disk full")

        api.handle_event(event_payload())
        api.shutdown(wait=True)
        health = api.get_system_health()

        assert health["status"] == "degraded"
        assert health["components"]["dispatcher"]["failed_reviews"] == 1
        assert health["components"]["vcs"] == {"provider": "github"}
        assert health["recent_failures"][0]["pr"] == "acme/shop#5"
        assert health["recent_failures"][0]["error"].startswith("ReviewAbortedError:")

    def test_configuration_is_logged_without_secrets(self, tmp_path, caplog):
        with caplog.at_level(logging.DEBUG, logger="code_reviewer_bot.api"):
            api, _, _ = self.make_api(tmp_path)
            api.shutdown()

        logged = "\n".join(record.getMessage() for record in caplog.records)
        assert "Effective configuration" in logged
        assert "ghp_test" not in logged
        assert "sk-test" not in logged
