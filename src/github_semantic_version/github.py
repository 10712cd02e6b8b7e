"""GitHub operations used by the version and changelog logic.

``GithubClient`` is the only surface the rest of the release tool calls.
It composes the credential lookup, the repository-bound request client,
search query formatting, pagination and record normalization; callers only
ever see canonical records.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from .auth import Credential, resolve_credential
from .config import ClientSettings, get_settings
from .git_remote import detect_repository
from .github_api_constants import GITHUB_MAX_PER_PAGE
from .models import (
    CommitRecord,
    IssueRecord,
    LabelRecord,
    PullRequestRecord,
    RepositoryCoordinates,
    SearchQuery,
)
from .query import format_search_query
from .request_client import RequestClient

logger = logging.getLogger(__name__)


def _issues_from_search(page: httpx.Response) -> list[IssueRecord]:
    return [IssueRecord.from_rest(issue) for issue in page.json()["items"]]


def _shas_from_commit_list(page: httpx.Response) -> list[str]:
    return [commit["sha"] for commit in page.json()]


def _commits_from_commit_list(page: httpx.Response) -> list[CommitRecord]:
    return [CommitRecord.from_rest(commit) for commit in page.json()]


class GithubClient:
    """Async GitHub client bound to one repository.

    When no credential is passed, one is looked up in ``environ`` (default:
    the process environment) via ``GH_TOKEN`` then ``GITHUB_TOKEN``. Without
    one the client works anonymously at GitHub's lower rate limits. Pass
    ``anonymous=True`` to skip the lookup even when a token is set.

    Example:
        >>> async with GithubClient(RepositoryCoordinates(owner="acme", repo="widgets")) as gh:
        ...     pr = await gh.get_pull_request(42)
    """

    def __init__(
        self,
        coords: RepositoryCoordinates,
        *,
        credential: Credential | None = None,
        anonymous: bool = False,
        environ: Mapping[str, str] | None = None,
        settings: ClientSettings | None = None,
        request_client: RequestClient | None = None,
        **client_options: Any,
    ) -> None:
        logger.info("Creating GitHub API client for %s", coords)
        if anonymous and credential is not None:
            raise ValueError("anonymous=True cannot be combined with a credential")
        if request_client is None:
            if credential is None and not anonymous:
                credential = resolve_credential(environ)
            request_client = RequestClient(
                coords, credential, settings=settings, **client_options
            )
        self._requests = request_client

    @classmethod
    def from_environment(
        cls,
        cwd: str | None = None,
        *,
        settings: ClientSettings | None = None,
        **kwargs: Any,
    ) -> GithubClient:
        """Build a client for the repository checked out at ``cwd``."""
        host, coords = detect_repository(cwd)
        settings = settings or get_settings()
        if host != settings.gh_host:
            settings = settings.model_copy(update={"gh_host": host})
        return cls(coords, settings=settings, **kwargs)

    @property
    def coords(self) -> RepositoryCoordinates:
        return self._requests.coords

    @property
    def is_authenticated(self) -> bool:
        return self._requests.credential is not None

    async def get_commit(self, sha: str) -> CommitRecord:
        logger.info("Getting commit %s via GitHub API", sha)
        response = await self._requests.get(self._requests.repo_path("commits", sha))
        return CommitRecord.from_rest(response.json())

    async def get_pull_request(self, number: int) -> PullRequestRecord:
        logger.info("Getting PR %s via GitHub API", number)
        response = await self._requests.get(self._requests.repo_path("pulls", number))
        return PullRequestRecord.from_rest(response.json())

    async def list_labels_on_issue(self, number: int) -> list[LabelRecord]:
        """Return the labels on an issue or pull request.

        Only the first page is read; an issue carries at most a handful of
        labels.
        """
        logger.info("Getting labels on issue %s via GitHub API", number)
        response = await self._requests.get(
            self._requests.repo_path("issues", number, "labels")
        )
        labels: list[LabelRecord] = response.json()
        return labels

    async def add_label_to_issue(self, number: int, label: str) -> None:
        logger.info("Adding label %s on issue %s via GitHub API", label, number)
        await self._requests.post(
            self._requests.repo_path("issues", number, "labels"),
            json={"labels": [label]},
        )

    async def search_issues(self, query: SearchQuery) -> list[IssueRecord]:
        """Search issues and pull requests in this repository.

        Args:
            query: Search qualifiers, e.g. ``{"type": "pr", "state": "closed"}``

        Returns:
            Every matching issue across all result pages, in result order
        """
        q = format_search_query(query, self.coords)
        logger.info("Searching issues via GitHub API: %s", q)
        return await self._requests.paginate(
            "/search/issues",
            {"q": q, "per_page": GITHUB_MAX_PER_PAGE},
            _issues_from_search,
        )

    async def get_commits_from_pull_request(self, number: int) -> list[str]:
        logger.info("Getting commits from PR %s via GitHub API", number)
        return await self._requests.paginate(
            self._requests.repo_path("pulls", number, "commits"),
            {"per_page": GITHUB_MAX_PER_PAGE},
            _shas_from_commit_list,
        )

    async def get_commits_from_repo(
        self, query: Mapping[str, Any] | None = None
    ) -> list[CommitRecord]:
        """List repository commits across all pages.

        Args:
            query: Optional filters passed straight to the commits endpoint
                (``since``, ``until``, ``sha``, ``path``, ``author``...)

        Returns:
            Every matching commit, newest first as GitHub orders them
        """
        logger.info("Getting commits from repo via GitHub API")
        params: dict[str, Any] = {"per_page": self._requests.settings.http_per_page}
        params.update(query or {})
        return await self._requests.paginate(
            self._requests.repo_path("commits"),
            params,
            _commits_from_commit_list,
        )

    async def aclose(self) -> None:
        await self._requests.aclose()

    async def __aenter__(self) -> GithubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
