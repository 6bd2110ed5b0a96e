"""Error taxonomy for the deploy pipeline.

Every failure raised by the pipeline is a `DeployError`. The CLI maps each
subclass to its own exit code and reports the step that failed.
"""

from __future__ import annotations


class DeployError(Exception):
    """Base class for all pipeline failures."""

    exit_code = 1

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step

    def __str__(self) -> str:
        if self.step:
            return f"{self.step}: {self.message}"
        return self.message


class ConfigError(DeployError):
    """A required setting is missing or invalid."""

    exit_code = 2


class GitHubApiError(DeployError):
    """GitHub answered with an error we don't classify any further."""

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, step=step)
        self.status_code = status_code


class AuthError(GitHubApiError):
    """The token is invalid or expired (401)."""

    exit_code = 3


class NotFoundError(GitHubApiError):
    """The org, repo, pull request or workflow does not exist (404)."""

    exit_code = 4


class PermissionDeniedError(GitHubApiError):
    """The token lacks a scope required for the call (403)."""

    exit_code = 5


class ValidationError(GitHubApiError):
    """Bad user input or a request GitHub rejected as unprocessable (422)."""

    exit_code = 6


class TransientError(GitHubApiError):
    """Network failure, rate limit or a 5xx from GitHub. Never retried."""

    exit_code = 7


class UserCancelled(DeployError):
    """The user aborted an interactive prompt."""

    exit_code = 130
