"""
Shared test configuration and fixtures for the GitHub API layer.

This module provides:
- A per-test timeout so a runaway pagination loop fails fast
- Environment isolation (no real tokens or settings leak into tests)
- Builders for raw GitHub REST payloads
- A responder that serves a paginated endpoint with Link headers
"""

import faulthandler
import os
import signal
import sys
import threading
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest

from github_semantic_version.config import get_settings
from github_semantic_version.models import RepositoryCoordinates

# Enable faulthandler for debugging hanging tests
faulthandler.enable(file=sys.stderr)

API = "https://api.github.com"

# Environment variables the package reads; cleared before every test
_PACKAGE_ENV_VARS = (
    "GH_TOKEN",
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
    "GH_HOST",
    "HTTP_PER_PAGE",
    "HTTP_TIMEOUT",
    "HTTP_CONNECT_TIMEOUT",
    "GSV_MAX_PAGES",
    "GSV_OWNER",
    "GSV_REPO",
)


def _get_timeout_seconds() -> int:
    """Get timeout configuration from environment variables."""
    try:
        return int(
            os.getenv(
                "PYTEST_PER_TEST_TIMEOUT",
                os.getenv("PYTEST_TIMEOUT", "5"),
            )
        )
    except ValueError:
        return 5


@pytest.fixture(autouse=True)
def per_test_timeout(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """
    Enforce a per-test timeout without external plugins.

    Uses SIGALRM on Unix main thread to fail fast after N seconds.
    Configure via PYTEST_PER_TEST_TIMEOUT environment variable.
    """
    timeout = _get_timeout_seconds()
    if timeout <= 0:
        yield
        return

    if request.config.pluginmanager.hasplugin("timeout"):
        faulthandler.dump_traceback_later(timeout, repeat=False)
        try:
            yield
        finally:
            faulthandler.cancel_dump_traceback_later()
        return

    use_alarm = hasattr(signal, "SIGALRM") and (
        threading.current_thread() is threading.main_thread()
    )
    if not use_alarm:
        faulthandler.dump_traceback_later(timeout, repeat=False)
        try:
            yield
        finally:
            faulthandler.cancel_dump_traceback_later()
        return

    def _on_timeout(signum: int, frame: Any) -> None:  # noqa: ARG001
        faulthandler.dump_traceback(file=sys.stderr)
        pytest.fail(f"Test timed out after {timeout}s", pytrace=False)

    old_handler = signal.getsignal(signal.SIGALRM)
    signal.signal(signal.SIGALRM, _on_timeout)
    signal.setitimer(signal.ITIMER_REAL, float(timeout))
    try:
        yield
    finally:
        signal.setitimer(signal.ITIMER_REAL, 0.0)
        signal.signal(signal.SIGALRM, old_handler)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Strip tokens and settings overrides and reset the settings cache."""
    for name in _PACKAGE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def github_token(monkeypatch: pytest.MonkeyPatch) -> str:
    """Provide a GitHub token via the fallback GITHUB_TOKEN variable."""
    token = "test-token-12345"  # noqa: S105
    monkeypatch.setenv("GITHUB_TOKEN", token)
    return token


@pytest.fixture
def coords() -> RepositoryCoordinates:
    return RepositoryCoordinates(owner="acme", repo="widgets")


# Payload builders


def make_commit_payload(
    sha: str,
    *,
    login: str | None = "octocat",
    name: str = "The Octocat",
    message: str = "fix: handle empty input",
    date: str = "2024-03-01T12:00:00Z",
) -> dict[str, Any]:
    """Build a commit as returned by GET /repos/{owner}/{repo}/commits."""
    return {
        "sha": sha,
        "commit": {
            "author": {"name": name, "email": f"{name}@example.com", "date": date},
            "committer": {"name": name, "email": f"{name}@example.com", "date": date},
            "message": message,
        },
        "author": {"login": login, "id": 1} if login else None,
        "html_url": f"https://github.com/acme/widgets/commit/{sha}",
    }


def make_pull_payload(
    number: int,
    *,
    merged_at: str | None = "2024-03-02T08:30:00Z",
    login: str = "octocat",
    title: str = "Add widget frobnicator",
) -> dict[str, Any]:
    """Build a pull request as returned by GET /repos/{owner}/{repo}/pulls/{n}."""
    return {
        "number": number,
        "title": title,
        "state": "closed" if merged_at else "open",
        "merged_at": merged_at,
        "user": {"login": login, "id": 1},
        "html_url": f"https://github.com/acme/widgets/pull/{number}",
    }


def make_issue_payload(
    number: int,
    *,
    closed_at: str | None = "2024-03-03T10:00:00Z",
    login: str = "octocat",
    title: str = "Widgets wobble",
    labels: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build an item of GET /search/issues."""
    return {
        "number": number,
        "title": title,
        "state": "closed" if closed_at else "open",
        "closed_at": closed_at,
        "user": {"login": login, "id": 1},
        "labels": labels if labels is not None else [],
        "html_url": f"https://github.com/acme/widgets/issues/{number}",
    }


def make_label(name: str, color: str = "d73a4a") -> dict[str, Any]:
    return {"id": abs(hash(name)) % 10_000, "name": name, "color": color, "default": False}


def paged_responder(
    pages: list[Any], next_url: str
) -> Callable[[httpx.Request], httpx.Response]:
    """
    Serve ``pages`` for a paginated endpoint.

    The requested page comes from the ``page`` query parameter (default 1).
    Every page but the last advertises ``<next_url>?page=N+1`` in its Link
    header, the way GitHub does.
    """

    def _respond(request: httpx.Request) -> httpx.Response:
        index = int(request.url.params.get("page", "1")) - 1
        headers: dict[str, str] = {}
        if index + 1 < len(pages):
            headers["Link"] = (
                f'<{next_url}?page={index + 2}>; rel="next", '
                f'<{next_url}?page={len(pages)}>; rel="last"'
            )
        return httpx.Response(200, json=pages[index], headers=headers)

    return _respond
