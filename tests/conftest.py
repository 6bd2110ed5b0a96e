"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import Mock

import pytest

from deploy_experimental.github.client import GitHubClient
from deploy_experimental.logging import JsonFormatter

_SETTINGS_VARIABLES = (
    "GITHUB_TOKEN",
    "GITHUB_ORG",
    "GITHUB_REPO",
    "DEPLOY_EXPERIMENTAL_WORKFLOW_ID",
    "GITHUB_BASE_URL",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the developer's real environment and `.env` out of every test."""
    for name in _SETTINGS_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """Undo handlers installed by `configure_logging` during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JsonFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def github_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide a complete set of required variables."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("GITHUB_ORG", "octo-org")
    monkeypatch.setenv("GITHUB_REPO", "octo-repo")


@pytest.fixture
def session() -> Mock:
    """Provide a mocked HTTP session."""
    mock_session = Mock()
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def github_api() -> Mock:
    """Provide a mocked PyGithub instance."""
    api = Mock()
    api.get_user.return_value.login = "octocat"
    return api


@pytest.fixture
def client(session: Mock, github_api: Mock) -> GitHubClient:
    """Provide a client wired to mocks so no network calls happen."""
    return GitHubClient(
        token="test-token",
        org="octo-org",
        repo="octo-repo",
        base_url="https://api.github.com/",
        github_api=github_api,
        session=session,
    )
