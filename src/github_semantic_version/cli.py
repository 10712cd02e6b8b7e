"""Command-line entry point for inspecting what the GitHub API layer returns."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel

from .auth import resolve_credential
from .github import GithubClient
from .models import RepositoryCoordinates
from .pagination import PaginationLimitError

MISSING_TOKEN_MESSAGE = (
    "Either a GITHUB_TOKEN or GH_TOKEN environment variable is required "
    "to interact with the Github API."
)


def _positive_int(value: str) -> int:
    try:
        ivalue = int(value)
    except ValueError as exc:  # pragma: no cover - argparse handles messaging
        raise argparse.ArgumentTypeError("must be an integer") from exc
    if ivalue <= 0:
        raise argparse.ArgumentTypeError("must be positive")
    return ivalue


def _search_term(value: str) -> tuple[str, str]:
    key, sep, term = value.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError("search terms must look like key=value")
    return key.strip(), term


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="github-semantic-version-api",
        description="Query the GitHub API the way github-semantic-version does.",
    )
    parser.add_argument(
        "--repo",
        help="Repository as owner/repo (default: detected from the git remote).",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Optional path to a .env file to load before running.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log requests and pagination to stderr.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    commit = sub.add_parser("commit", help="Show one commit.")
    commit.add_argument("sha")

    pr = sub.add_parser("pr", help="Show one pull request.")
    pr.add_argument("number", type=_positive_int)

    labels = sub.add_parser("labels", help="List labels on an issue or PR.")
    labels.add_argument("number", type=_positive_int)

    add_label = sub.add_parser("add-label", help="Add a label to an issue or PR.")
    add_label.add_argument("number", type=_positive_int)
    add_label.add_argument("label")

    search = sub.add_parser("search", help="Search issues, e.g. state=closed type=pr.")
    search.add_argument("terms", nargs="*", type=_search_term, metavar="KEY=VALUE")

    pr_commits = sub.add_parser("pr-commits", help="List commit SHAs of a PR.")
    pr_commits.add_argument("number", type=_positive_int)

    commits = sub.add_parser("commits", help="List repository commits.")
    commits.add_argument("--since", help="ISO-8601 timestamp lower bound.")
    commits.add_argument("--until", help="ISO-8601 timestamp upper bound.")
    commits.add_argument("--sha", help="Branch name or SHA to list from.")
    commits.add_argument("--path", help="Only commits touching this path.")
    commits.add_argument("--author", help="GitHub login or email of the author.")

    return parser.parse_args(argv)


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


async def _run(args: argparse.Namespace) -> Any:
    if args.repo:
        client = GithubClient(RepositoryCoordinates.parse(args.repo))
    else:
        client = GithubClient.from_environment()

    async with client as gh:
        if args.command == "commit":
            return await gh.get_commit(args.sha)
        if args.command == "pr":
            return await gh.get_pull_request(args.number)
        if args.command == "labels":
            return await gh.list_labels_on_issue(args.number)
        if args.command == "add-label":
            await gh.add_label_to_issue(args.number, args.label)
            return None
        if args.command == "search":
            return await gh.search_issues(dict(args.terms))
        if args.command == "pr-commits":
            return await gh.get_commits_from_pull_request(args.number)

        filters = {
            name: getattr(args, name)
            for name in ("since", "until", "sha", "path", "author")
            if getattr(args, name) is not None
        }
        return await gh.get_commits_from_repo(filters)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.env_file:
        load_dotenv(args.env_file, override=True)
    else:
        load_dotenv(override=False)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    # Anonymous access is rate limited far too tightly for a release run
    if resolve_credential() is None:
        print(MISSING_TOKEN_MESSAGE, file=sys.stderr)
        return 1

    try:
        result = asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 130
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except httpx.HTTPStatusError as e:
        print(
            f"GitHub API error {e.response.status_code} for {e.request.url}",
            file=sys.stderr,
        )
        return 1
    except (httpx.RequestError, PaginationLimitError) as e:
        print(f"Error talking to GitHub: {e}", file=sys.stderr)
        return 1

    print(json.dumps(_jsonable(result), indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
