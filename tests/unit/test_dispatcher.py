"""Unit tests for building and submitting dispatch requests."""

from __future__ import annotations

import logging
from unittest.mock import Mock

import pytest

from deploy_experimental.dispatcher import (
    Dispatcher,
    DispatchRequest,
    build_dispatch_request,
    short_sha,
    target_for,
    validate_environment,
)
from deploy_experimental.errors import PermissionDeniedError, ValidationError
from deploy_experimental.github.client import GitHubClient


@pytest.mark.parametrize("value", ["1", "6", " 3 ", 4])
def test_validate_environment_accepts_range(value: str | int) -> None:
    assert validate_environment(value) == int(str(value).strip())


@pytest.mark.parametrize("value", ["0", "7", "-1", "100", 0, 7])
def test_validate_environment_rejects_out_of_range(value: str | int) -> None:
    with pytest.raises(ValidationError, match="between 1 and 6"):
        validate_environment(value)


@pytest.mark.parametrize("value", ["", "three", "2.5", True])
def test_validate_environment_rejects_non_numbers(value: str | bool) -> None:
    with pytest.raises(ValidationError, match="must be a number"):
        validate_environment(value)


def test_target_for_every_environment() -> None:
    assert [target_for(n) for n in range(1, 7)] == [f"experimental{n}" for n in range(1, 7)]


def test_short_sha_takes_first_seven_lowercase() -> None:
    assert short_sha("ABCDEF1234567890ABCDEF1234567890ABCDEF12") == "abcdef1"


@pytest.mark.parametrize("sha", ["", "abc", "zzzzzzzzzz", "abcdef1-not-hex"])
def test_short_sha_rejects_malformed(sha: str) -> None:
    with pytest.raises(ValidationError):
        short_sha(sha)


def test_build_dispatch_request_payload() -> None:
    request = build_dispatch_request(
        workflow_id=12,
        ref="feature-a",
        head_sha="abcdef1234567890abcdef1234567890abcdef12",
        environment=2,
    )

    assert request.payload() == {
        "ref": "feature-a",
        "inputs": {"commit_sha": "abcdef1", "target": "experimental2"},
    }


def test_build_dispatch_request_requires_branch() -> None:
    with pytest.raises(ValidationError):
        build_dispatch_request(workflow_id=12, ref=" ", head_sha="a" * 40, environment=1)


def test_dispatcher_trigger_calls_client() -> None:
    github = Mock(spec=GitHubClient)
    request = DispatchRequest(
        workflow_id="deploy.yml",
        ref="feature-a",
        inputs={"commit_sha": "abcdef1", "target": "experimental1"},
    )

    Dispatcher(github).trigger(request)

    github.dispatch_workflow.assert_called_once_with(
        workflow_id="deploy.yml",
        ref="feature-a",
        inputs={"commit_sha": "abcdef1", "target": "experimental1"},
    )


def test_dispatcher_propagates_failure_without_retry() -> None:
    github = Mock(spec=GitHubClient)
    github.dispatch_workflow.side_effect = PermissionDeniedError("denied", status_code=403)
    request = DispatchRequest(workflow_id=1, ref="b", inputs={})

    with pytest.raises(PermissionDeniedError):
        Dispatcher(github).trigger(request)

    assert github.dispatch_workflow.call_count == 1


def test_dispatcher_leaves_failure_reporting_to_caller(caplog: pytest.LogCaptureFixture) -> None:
    github = Mock(spec=GitHubClient)
    github.dispatch_workflow.side_effect = PermissionDeniedError("denied", status_code=403)

    with caplog.at_level(logging.DEBUG, logger="deploy_experimental.dispatcher"):
        with pytest.raises(PermissionDeniedError):
            Dispatcher(github).trigger(DispatchRequest(workflow_id=1, ref="b", inputs={}))

    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
