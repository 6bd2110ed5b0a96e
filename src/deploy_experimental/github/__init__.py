"""GitHub REST API access."""

from deploy_experimental.github.client import GitHubClient, PullRequest, Workflow

__all__ = ["GitHubClient", "PullRequest", "Workflow"]
