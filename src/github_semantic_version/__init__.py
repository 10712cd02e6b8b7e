"""GitHub REST API layer for the github-semantic-version release tool."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

from .auth import Credential, resolve_credential
from .github import GithubClient
from .models import (
    CommitRecord,
    IssueRecord,
    LabelRecord,
    PullRequestRecord,
    RepositoryCoordinates,
    SearchQuery,
)
from .pagination import PaginationLimitError

try:
    __version__ = _version("github-semantic-version")
except PackageNotFoundError:  # dev/editable fallback
    __version__ = "0"

__all__ = [
    "CommitRecord",
    "Credential",
    "GithubClient",
    "IssueRecord",
    "LabelRecord",
    "PaginationLimitError",
    "PullRequestRecord",
    "RepositoryCoordinates",
    "SearchQuery",
    "__version__",
    "resolve_credential",
]
