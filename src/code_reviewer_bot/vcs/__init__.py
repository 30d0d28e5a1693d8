"""
VCS Integration Layer

GitHub and Gitea clients implementing the VcsSink interface used
by the review orchestrator.
"""

from ..config import VCSConfig
from .base import VcsSink, VcsAPIError, ReviewNotSupportedError
from .github import GitHubClient, RateLimitExceeded
from .gitea import GiteaClient


def create_vcs_sink(config: VCSConfig) -> VcsSink:
    """
    Create the VCS client selected by configuration.

    Raises:
        ValueError: If the provider is unknown or its token is missing
    """
    provider = config.provider.lower()

    if provider == 'github':
        if not config.github.token:
            raise ValueError("github provider selected but GITHUB_TOKEN is not configured")
        return GitHubClient(
            config.github.token,
            base_url=config.github.api_base_url,
            timeout_seconds=config.github.timeout_seconds,
        )

    if provider == 'gitea':
        if not config.gitea.token:
            raise ValueError("gitea provider selected but GITEA_TOKEN is not configured")
        return GiteaClient(
            config.gitea.token,
            base_url=config.gitea.base_url,
            timeout_seconds=config.gitea.timeout_seconds,
        )

    raise ValueError(f"Unsupported VCS provider in config: '{config.provider}'")


__all__ = [
    'VcsSink',
    'VcsAPIError',
    'ReviewNotSupportedError',
    'RateLimitExceeded',
    'GitHubClient',
    'GiteaClient',
    'create_vcs_sink',
]
