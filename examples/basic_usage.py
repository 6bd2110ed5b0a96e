#!/usr/bin/env python3
"""Programmatic usage example.

This demonstrates using the components directly, without prompts:

* load settings from `.env`
* list your open pull requests and the repository's workflows
* optionally dispatch one workflow for one PR

Nothing is dispatched unless both `--pr` and `--workflow-id` are passed.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from deploy_experimental.config import load_settings
from deploy_experimental.dispatcher import Dispatcher, build_dispatch_request
from deploy_experimental.github.client import GitHubClient
from deploy_experimental.logging import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List or dispatch (programmatic example).")
    parser.add_argument("--environment", type=int, default=1, help="Environment number (1-6)")
    parser.add_argument("--pr", type=int, default=None, help="Pull request number to deploy")
    parser.add_argument("--workflow-id", default=None, help="Workflow id or file name")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level, secrets=(settings.github_token,))

    github = GitHubClient(
        token=settings.github_token,
        org=settings.github_org,
        repo=settings.github_repo,
        base_url=settings.github_base_url,
    )
    try:
        login = github.get_authenticated_login()
        own_pulls = github.list_open_pull_requests(author=login)
        for pr in own_pulls:
            print(f"{pr.label} [{pr.head_ref} @ {pr.head_sha[:7]}]")
        for workflow in github.list_workflows():
            print(f"workflow {workflow.id}: {workflow.label}")

        if args.pr is None or args.workflow_id is None:
            return 0

        selected = next((pr for pr in own_pulls if pr.number == args.pr), None)
        if selected is None:
            print(f"PR #{args.pr} is not one of your open pull requests")
            return 4

        request = build_dispatch_request(
            workflow_id=args.workflow_id,
            ref=selected.head_ref,
            head_sha=github.get_latest_commit_sha(selected.number),
            environment=args.environment,
        )
        Dispatcher(github).trigger(request)
        print(f"Dispatched: {request.payload()}")
        return 0
    finally:
        github.close()


if __name__ == "__main__":
    raise SystemExit(main())
