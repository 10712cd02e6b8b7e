"""Pydantic models for the records returned by the GitHub API layer.

This module provides:
- RepositoryCoordinates, the owner/name pair every request is bound to
- Canonical records (commits, pull requests, issues) built from REST payloads
- Type aliases for label passthrough records and search queries

Every record is frozen; the ``from_rest`` constructors are the only place
that knows the shape of GitHub's raw payloads.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

# Labels are relayed exactly as GitHub returns them (name, color, ...)
LabelRecord = dict[str, Any]

# Search field -> value, emitted in the mapping's iteration order
SearchQuery = Mapping[str, str]


class RepositoryCoordinates(BaseModel):
    """Identifies the target repository.

    Attributes:
        owner: Repository owner or organization
        repo: Repository name
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)

    @field_validator("owner", "repo", mode="before")
    @classmethod
    def strip_whitespace(cls, v: Any) -> Any:
        """Strip leading/trailing whitespace before length validation."""
        if isinstance(v, str):
            return v.strip()
        return v

    @classmethod
    def parse(cls, slug: str) -> RepositoryCoordinates:
        """Build coordinates from an ``owner/repo`` slug.

        Raises:
            ValueError: If the slug is not exactly two non-empty segments
        """
        parts = slug.strip().split("/")
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise ValueError(f"Expected repository in the form owner/repo, got {slug!r}")
        return cls(owner=parts[0], repo=parts[1])

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


class CommitRecord(BaseModel):
    """A commit, normalized from either the single-commit or list endpoint.

    Attributes:
        date: Author timestamp (ISO-8601, as sent by GitHub)
        sha: Full commit hash
        user: Login of the linked GitHub account, None when the author
            email does not resolve to an account
        user_name: Free-text author name from the git commit
        message: Full commit message
        url: HTML URL of the commit
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    date: str
    sha: str
    user: str | None = None
    user_name: str
    message: str
    url: str

    @classmethod
    def from_rest(cls, data: dict[str, Any]) -> CommitRecord:
        """Create a CommitRecord from a REST commit payload.

        Args:
            data: Raw commit dict from ``/commits/{sha}`` or ``/commits``

        Returns:
            Validated CommitRecord instance
        """
        git_commit = data["commit"]
        # author is null when the commit email matches no GitHub account
        account = data.get("author")

        return cls(
            date=git_commit["author"]["date"],
            sha=data["sha"],
            user=account["login"] if account else None,
            user_name=git_commit["author"]["name"],
            message=git_commit["message"],
            url=data["html_url"],
        )


class PullRequestRecord(BaseModel):
    """A pull request.

    Attributes:
        date: Merge timestamp, None for unmerged pull requests
        user: Login of the account that opened the pull request
        title: Pull request title
        number: Pull request number
        url: HTML URL of the pull request
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    date: str | None = None
    user: str
    title: str
    number: int
    url: str

    @classmethod
    def from_rest(cls, data: dict[str, Any]) -> PullRequestRecord:
        return cls(
            date=data.get("merged_at"),
            user=data["user"]["login"],
            title=data["title"],
            number=data["number"],
            url=data["html_url"],
        )


class IssueRecord(BaseModel):
    """An issue (or pull request) returned by issue search.

    Labels are kept as read-only views of GitHub's label payloads. They
    compare equal to the original dicts, are excluded from the hash and
    serialize back to plain dicts.

    Attributes:
        date: Close timestamp, None for open issues
        user: Login of the issue author
        title: Issue title
        labels: Label payloads in the order GitHub returned them
        number: Issue number
        url: HTML URL of the issue
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    date: str | None = None
    user: str
    title: str
    labels: tuple[Mapping[str, Any], ...] = ()
    number: int
    url: str

    @field_validator("labels", mode="after")
    @classmethod
    def freeze_labels(
        cls, v: tuple[Mapping[str, Any], ...]
    ) -> tuple[Mapping[str, Any], ...]:
        """Copy each label into a read-only mapping."""
        return tuple(MappingProxyType(dict(label)) for label in v)

    @field_serializer("labels")
    def serialize_labels(self, labels: tuple[Mapping[str, Any], ...]) -> list[LabelRecord]:
        return [dict(label) for label in labels]

    def __hash__(self) -> int:
        return hash((self.date, self.user, self.title, self.number, self.url))

    @classmethod
    def from_rest(cls, data: dict[str, Any]) -> IssueRecord:
        return cls(
            date=data.get("closed_at"),
            user=data["user"]["login"],
            title=data["title"],
            labels=tuple(data["labels"]),
            number=data["number"],
            url=data["html_url"],
        )
