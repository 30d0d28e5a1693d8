"""
Command Line Entry Point

Reviews a single pull request, e.g. from a CI job:

    code-reviewer-bot --config config.yaml --repo-owner acme --repo-name shop --pr-number 42
"""

import os
import sys
import logging
import argparse
from typing import List, Mapping, Optional

import yaml

from .api import CodeReviewerAPI
from .config import AppConfig, ConfigManager, ConfigurationError
from .models.pr_diff import PullRequestRef
from .review.orchestrator import ReviewAbortedError
from .vcs.base import VcsAPIError


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="code-reviewer-bot",
        description="Review a pull request with an LLM and post the findings",
    )
    parser.add_argument("--config", type=str, help="YAML configuration file (environment variables if omitted)")
    parser.add_argument("--repo-owner", type=str, help="Repository owner")
    parser.add_argument("--repo-name", type=str, help="Repository name")
    parser.add_argument("--pr-number", type=int, help="Pull request number")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def resolve_pull_request(args: argparse.Namespace, environ: Mapping[str, str] = os.environ) -> PullRequestRef:
    """
    Determine the pull request from flags, falling back to CI variables.

    Raises:
        ConfigurationError: If the repository or PR number is unknown
    """
    owner, repo = args.repo_owner, args.repo_name

    slug = environ.get("GITHUB_REPOSITORY") or environ.get("GITEA_REPOSITORY")
    if slug and not (owner and repo):
        parts = slug.split('/')
        if len(parts) != 2 or not all(parts):
            raise ConfigurationError(f"Repository must be in format 'owner/repo': {slug}")
        owner, repo = owner or parts[0], repo or parts[1]

    owner = owner or environ.get("REPO_OWNER")
    repo = repo or environ.get("REPO_NAME")
    if not owner or not repo:
        raise ConfigurationError("Repository is required (--repo-owner/--repo-name or GITHUB_REPOSITORY)")

    pr_number = args.pr_number
    if pr_number is None:
        raw = environ.get("PR_NUMBER")
        if not raw:
            raise ConfigurationError("Pull request number is required (--pr-number or PR_NUMBER)")
        try:
            pr_number = int(raw)
        except ValueError:
            raise ConfigurationError(f"PR_NUMBER must be an integer: {raw}")

    try:
        return PullRequestRef(owner=owner, repo=repo, number=pr_number)
    except ValueError as e:
        raise ConfigurationError(str(e))


def load_config(config_path: Optional[str], debug: bool = False) -> AppConfig:
    """Load, validate and apply configuration (logging included)."""
    config = AppConfig.from_yaml(config_path) if config_path else AppConfig.from_env()
    if debug:
        config.debug = True
        config.logging.level = "DEBUG"
    return ConfigManager(config).config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, debug=args.debug)
        pr = resolve_pull_request(args)
    except (ValueError, TypeError, OSError, yaml.YAMLError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        api = CodeReviewerAPI(config)
    except (ValueError, ImportError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        outcome = api.orchestrator.process_pull_request(pr)
    except (ReviewAbortedError, VcsAPIError) as e:
        logger.error(f"Review of {pr} failed: {e}")
        print(f"Review failed: {e}", file=sys.stderr)
        return 1
    finally:
        api.shutdown()

    print(outcome.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
