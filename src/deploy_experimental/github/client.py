"""GitHub API client wrapper.

Keeps GitHub calls out of CLI code and makes tests easy. REST calls go through
a single `requests.Session`; the authenticated-user lookup uses PyGithub.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests
from github import Auth, Github, GithubException

from deploy_experimental.errors import (
    AuthError,
    GitHubApiError,
    NotFoundError,
    PermissionDeniedError,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 30


@dataclass(frozen=True, slots=True)
class PullRequest:
    """Minimal pull request metadata needed to pick a deploy target."""

    number: int
    title: str
    head_ref: str
    head_sha: str
    author: str

    @property
    def label(self) -> str:
        return f"#{self.number} - {self.title}"


@dataclass(frozen=True, slots=True)
class Workflow:
    """A GitHub Actions workflow defined in the repository."""

    id: int
    name: str
    path: str
    state: str = "active"

    @property
    def label(self) -> str:
        return f"{self.name} ({self.path})"


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message.strip():
            return message
    text = resp.text.strip()
    return text or resp.reason or f"HTTP {resp.status_code}"


def raise_for_github_status(resp: requests.Response, *, step: str) -> None:
    """Translate an error response into the matching `GitHubApiError`."""

    status = resp.status_code
    if 200 <= status < 300:
        return

    message = _error_message(resp)
    if status == 401:
        raise AuthError(
            f"Bad or expired token ({message}). Please check GITHUB_TOKEN",
            step=step,
            status_code=status,
        )
    if status == 403:
        if resp.headers.get("X-RateLimit-Remaining") == "0":
            raise TransientError(
                f"Rate limit exceeded ({message})", step=step, status_code=status
            )
        raise PermissionDeniedError(
            f"Permission denied ({message}). Please check the token scopes",
            step=step,
            status_code=status,
        )
    if status == 404:
        raise NotFoundError(f"Not found ({message})", step=step, status_code=status)
    if status == 422:
        raise ValidationError(
            f"Request rejected ({message})", step=step, status_code=status
        )
    if status >= 500:
        raise TransientError(
            f"GitHub server error {status} ({message})", step=step, status_code=status
        )
    raise GitHubApiError(
        f"Unexpected status {status} ({message})", step=step, status_code=status
    )


class GitHubClient:
    """Small wrapper around the GitHub REST API for one repository."""

    def __init__(
        self,
        *,
        token: str,
        org: str,
        repo: str,
        base_url: str = "https://api.github.com",
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not org or not repo:
            raise ValueError("GitHub org and repo are required")

        self._org = org.strip().strip("/")
        self._repo = repo.strip().strip("/")
        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "deploy-experimental",
            }
        )

        if github_api is not None:
            self._github = github_api
            logger.debug("Using injected Github instance")
        else:
            # Single-shot, same as the REST calls: no PyGithub retry or backoff.
            self._github = Github(
                auth=Auth.Token(token),
                base_url=self._rest_base_url,
                timeout=REQUEST_TIMEOUT_SECONDS,
                retry=None,
            )

    @property
    def repository(self) -> str:
        """Return the configured repository name ("org/repo")."""

        return f"{self._org}/{self._repo}"

    def _repo_url(self, path: str) -> str:
        path = path.strip("/")
        base = f"{self._rest_base_url}/repos/{self.repository}"
        return f"{base}/{path}" if path else base

    def _request(
        self,
        method: str,
        url: str,
        *,
        step: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> requests.Response:
        try:
            resp = self._session.request(
                method, url, params=params, json=json, timeout=REQUEST_TIMEOUT_SECONDS
            )
        except requests.RequestException as e:
            raise TransientError(f"Network error: {e}", step=step) from e
        raise_for_github_status(resp, step=step)
        return resp

    def _get_json(
        self, url: str, *, step: str, params: dict[str, Any] | None = None
    ) -> Any:
        resp = self._request("GET", url, step=step, params=params)
        try:
            return resp.json()
        except ValueError as e:
            raise GitHubApiError(
                "Response was not valid JSON", step=step, status_code=resp.status_code
            ) from e

    def get_authenticated_login(self) -> str:
        """Return the login of the user that owns the token."""

        step = "fetch current user"
        try:
            login = self._github.get_user().login
        except GithubException as e:
            if e.status == 401:
                raise AuthError(
                    "Failed to fetch current user. Please check your GitHub token",
                    step=step,
                    status_code=e.status,
                ) from e
            if e.status == 403:
                raise PermissionDeniedError(
                    "Failed to fetch current user. Please check your GitHub token has "
                    "correct permissions",
                    step=step,
                    status_code=e.status,
                ) from e
            if e.status is not None and e.status >= 500:
                raise TransientError(
                    f"GitHub server error {e.status}", step=step, status_code=e.status
                ) from e
            raise GitHubApiError(str(e), step=step, status_code=e.status) from e
        except requests.RequestException as e:
            raise TransientError(f"Network error: {e}", step=step) from e

        logger.info("Authenticated with GitHub", extra={"login": login})
        return login

    def list_open_pull_requests(self, *, author: str | None = None) -> list[PullRequest]:
        """List open pull requests, optionally only those opened by `author`.

        Only the first page (100 items) is fetched.
        """

        logger.debug(
            "Listing open pull requests",
            extra={"repo": self.repository, "author": author},
        )
        payload = self._get_json(
            self._repo_url("pulls"),
            step="list pull requests",
            params={"state": "open", "per_page": 100},
        )
        if not isinstance(payload, list):
            raise GitHubApiError(
                "Unexpected pulls response: expected a list", step="list pull requests"
            )

        pulls: list[PullRequest] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            pr = self._parse_pull_request(item)
            if pr is None:
                continue
            if author is not None and pr.author != author:
                continue
            pulls.append(pr)
        return pulls

    def get_latest_commit_sha(self, pr_number: int) -> str:
        """Return the full head commit SHA of a pull request.

        The PR's own `head.sha` is treated as authoritative, so a force-push
        is picked up as long as this is called right before dispatching.
        """

        if pr_number <= 0:
            raise ValueError("pr_number must be a positive integer")

        step = f"fetch head commit of PR #{pr_number}"
        data = self._get_json(self._repo_url(f"pulls/{pr_number}"), step=step)
        head = data.get("head") if isinstance(data, dict) else None
        sha = head.get("sha") if isinstance(head, dict) else None
        if not isinstance(sha, str) or not sha.strip():
            raise GitHubApiError("Unexpected pull response: missing head sha", step=step)
        return sha.strip()

    def list_workflows(self) -> list[Workflow]:
        """List the repository's GitHub Actions workflows."""

        step = "list workflows"
        data = self._get_json(
            self._repo_url("actions/workflows"), step=step, params={"per_page": 100}
        )
        raw = data.get("workflows") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            raise GitHubApiError("Unexpected workflows response: missing workflows", step=step)

        workflows: list[Workflow] = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            workflow_id = item.get("id")
            if not isinstance(workflow_id, int):
                continue
            workflows.append(
                Workflow(
                    id=workflow_id,
                    name=str(item.get("name") or workflow_id),
                    path=str(item.get("path") or ""),
                    state=str(item.get("state") or "active"),
                )
            )
        return workflows

    def dispatch_workflow(
        self,
        *,
        workflow_id: int | str,
        ref: str,
        inputs: dict[str, str],
    ) -> None:
        """Trigger a `workflow_dispatch` run. GitHub returns no payload."""

        if not ref.strip():
            raise ValueError("ref is required")

        url = self._repo_url(f"actions/workflows/{workflow_id}/dispatches")
        self._request(
            "POST",
            url,
            step=f"dispatch workflow {workflow_id}",
            json={"ref": ref, "inputs": dict(inputs)},
        )
        logger.info(
            "Workflow dispatched",
            extra={"repo": self.repository, "workflow_id": workflow_id, "ref": ref},
        )

    @staticmethod
    def _parse_pull_request(item: dict[str, Any]) -> PullRequest | None:
        number = item.get("number")
        head = item.get("head")
        if not isinstance(number, int) or not isinstance(head, dict):
            return None

        user = item.get("user")
        author = ""
        if isinstance(user, dict):
            login = user.get("login")
            if isinstance(login, str):
                author = login

        return PullRequest(
            number=number,
            title=str(item.get("title") or ""),
            head_ref=str(head.get("ref") or ""),
            head_sha=str(head.get("sha") or ""),
            author=author,
        )

    def close(self) -> None:
        """Close the underlying HTTP connections."""

        self._session.close()
        self._github.close()
