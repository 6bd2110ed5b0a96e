"""Build and submit the workflow dispatch for an experimental environment."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from deploy_experimental.errors import ValidationError
from deploy_experimental.github.client import GitHubClient

logger = logging.getLogger(__name__)

MIN_ENVIRONMENT = 1
MAX_ENVIRONMENT = 6
SHORT_SHA_LENGTH = 7

_HEX_SHA = re.compile(r"^[0-9a-f]+$")


def validate_environment(value: str | int) -> int:
    """Parse an experimental environment number (1-6)."""

    if isinstance(value, bool):
        raise ValidationError("Environment must be a number")
    if isinstance(value, int):
        environment = value
    else:
        try:
            environment = int(str(value).strip())
        except ValueError:
            raise ValidationError("Environment must be a number") from None

    if not MIN_ENVIRONMENT <= environment <= MAX_ENVIRONMENT:
        raise ValidationError(
            f"Environment must be between {MIN_ENVIRONMENT} and {MAX_ENVIRONMENT}"
        )
    return environment


def target_for(environment: int) -> str:
    return f"experimental{validate_environment(environment)}"


def short_sha(sha: str) -> str:
    """Return the 7-character lowercase prefix of a commit SHA."""

    normalized = sha.strip().lower()
    if len(normalized) < SHORT_SHA_LENGTH or not _HEX_SHA.match(normalized):
        raise ValidationError(f"Not a commit SHA: {sha!r}")
    return normalized[:SHORT_SHA_LENGTH]


@dataclass(frozen=True, slots=True)
class DispatchRequest:
    """Everything needed for one `workflow_dispatch` call."""

    workflow_id: int | str
    ref: str
    inputs: dict[str, str] = field(default_factory=dict)

    def payload(self) -> dict[str, Any]:
        return {"ref": self.ref, "inputs": dict(self.inputs)}


def build_dispatch_request(
    *,
    workflow_id: int | str,
    ref: str,
    head_sha: str,
    environment: int,
) -> DispatchRequest:
    if not ref.strip():
        raise ValidationError("Pull request has no head branch")
    return DispatchRequest(
        workflow_id=workflow_id,
        ref=ref,
        inputs={
            "commit_sha": short_sha(head_sha),
            "target": target_for(environment),
        },
    )


class Dispatcher:
    """Submits dispatch requests. Failures propagate to the caller unretried."""

    def __init__(self, github: GitHubClient) -> None:
        self._github = github

    def trigger(self, request: DispatchRequest) -> None:
        logger.info(
            "Triggering workflow",
            extra={"workflow_id": request.workflow_id, "payload": request.payload()},
        )
        self._github.dispatch_workflow(
            workflow_id=request.workflow_id,
            ref=request.ref,
            inputs=request.inputs,
        )
