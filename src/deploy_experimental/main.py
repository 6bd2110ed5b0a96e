"""CLI entrypoint: deploy one of your open pull requests to an experimental environment."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable

from deploy_experimental import __version__
from deploy_experimental.config import Settings, load_settings
from deploy_experimental.dispatcher import (
    Dispatcher,
    build_dispatch_request,
    target_for,
    validate_environment,
)
from deploy_experimental.errors import DeployError, NotFoundError, ValidationError
from deploy_experimental.github.client import GitHubClient
from deploy_experimental.logging import configure_logging
from deploy_experimental.selector import Selector

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], GitHubClient]


def _environment_arg(value: str) -> int:
    try:
        return validate_environment(value)
    except ValidationError as e:
        raise argparse.ArgumentTypeError(e.message) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deploy-experimental",
        description=(
            "Trigger a GitHub Actions workflow for one of your open pull requests "
            "on an experimental environment"
        ),
    )
    parser.add_argument(
        "--version", action="version", version=f"deploy-experimental {__version__}"
    )
    parser.add_argument(
        "environment",
        type=_environment_arg,
        help="Environment number (1-6)",
    )
    parser.add_argument(
        "--workflow-id",
        default=None,
        help="Workflow id or file name (overrides DEPLOY_EXPERIMENTAL_WORKFLOW_ID)",
    )
    return parser


def _default_client(settings: Settings) -> GitHubClient:
    return GitHubClient(
        token=settings.github_token,
        org=settings.github_org,
        repo=settings.github_repo,
        base_url=settings.github_base_url,
    )


def _choose_workflow(github: GitHubClient, selector: Selector) -> int:
    workflows = github.list_workflows()
    if not workflows:
        raise NotFoundError(
            f"No workflows found in {github.repository}", step="list workflows"
        )

    print("\nAvailable workflows:")
    for workflow in workflows:
        print(f"ID: {workflow.id}, Name: {workflow.name}, File: {workflow.path}")

    index = selector.select("Select workflow to run", [w.label for w in workflows])
    selected = workflows[index]
    print(f"\nTriggering workflow: {selected.name} (ID: {selected.id})")
    return selected.id


def run(
    *,
    environment: int,
    settings: Settings,
    github: GitHubClient,
    selector: Selector,
    workflow_id: str | None = None,
) -> int:
    """Run the deploy pipeline against an already-connected client."""

    print("Authenticating with GitHub...")
    login = github.get_authenticated_login()
    print(f"Authenticated as: {login}")

    print(f"Fetching PRs from {github.repository}...")
    pulls = github.list_open_pull_requests(author=login)
    if not pulls:
        print("No open pull requests found for your user")
        return 0

    index = selector.select("Select a PR", [pr.label for pr in pulls])
    selected_pr = pulls[index]
    logger.info(
        "Pull request selected",
        extra={"number": selected_pr.number, "branch": selected_pr.head_ref},
    )

    chosen_workflow = workflow_id or settings.default_workflow_id
    if chosen_workflow is None:
        chosen_workflow = str(_choose_workflow(github, selector))

    head_sha = github.get_latest_commit_sha(selected_pr.number)
    request = build_dispatch_request(
        workflow_id=chosen_workflow,
        ref=selected_pr.head_ref,
        head_sha=head_sha,
        environment=environment,
    )

    print(f"Branch: {request.ref}")
    print(f"Commit: {request.inputs['commit_sha']}")
    print(f"Environment: {target_for(environment)}")
    print(f"Sending request with payload: {json.dumps(request.payload(), indent=2)}")

    Dispatcher(github).trigger(request)

    print("Successfully triggered GitHub Action:")
    print(f"Branch: {request.ref}")
    print(f"Commit: {request.inputs['commit_sha']}")
    print(f"Environment: {target_for(environment)}")
    return 0


def main(
    argv: list[str] | None = None,
    *,
    client_factory: ClientFactory = _default_client,
    selector: Selector | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except DeployError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return e.exit_code

    configure_logging(settings.log_level, secrets=(settings.github_token,))

    try:
        github = client_factory(settings)
        try:
            return run(
                environment=args.environment,
                settings=settings,
                github=github,
                selector=selector or Selector(),
                workflow_id=args.workflow_id,
            )
        finally:
            github.close()

    except DeployError as e:
        logger.error(
            str(e),
            extra={"step": e.step, "error": type(e).__name__, "exit_code": e.exit_code},
        )
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
