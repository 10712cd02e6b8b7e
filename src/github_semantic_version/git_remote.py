import logging
import os
import re
from typing import Any
from urllib.parse import urlparse

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from .github_api_constants import GITHUB_DOTCOM_API_URL, GITHUB_DOTCOM_HOST
from .models import RepositoryCoordinates

logger = logging.getLogger(__name__)

REMOTE_REGEXES = [
    # SSH: git@github.com:owner/repo.git
    re.compile(
        r"^(?:git@)(?P<host>[^:]+):(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?$"
    ),
    # SSH scheme: ssh://git@github.com/owner/repo(.git)
    re.compile(
        r"^ssh://(?:git@)?(?P<host>[^/]+)/(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
    ),
    # HTTPS: https://github.com/owner/repo(.git), optionally with credentials
    re.compile(
        r"^https?://(?:[^@/]+@)?(?P<host>[^/]+)/(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
    ),
]


def _normalize_github_hosts_match(target_host: str, env_api_host: str) -> bool:
    """
    Check if target_host and env_api_host are equivalent.

    Treats api.github.com and github.com as the same for dotcom.
    """
    target_lower = target_host.lower()
    env_lower = env_api_host.lower()

    if target_lower == GITHUB_DOTCOM_HOST:
        return env_lower in {"api.github.com", GITHUB_DOTCOM_HOST}
    return env_lower == target_lower


def parse_remote_url(url: str) -> tuple[str, str, str]:
    """Split a git remote URL into (host, owner, repo).

    Raises:
        ValueError: If the URL is not an SSH or HTTP(S) GitHub-style remote
    """
    url = url.strip()
    for rx in REMOTE_REGEXES:
        m = rx.match(url)
        if m:
            return m.group("host"), m.group("owner"), m.group("repo")
    raise ValueError(f"Unsupported remote URL: {url}")


def api_base_for_host(host: str, override: str | None = None) -> str:
    """
    Determine the REST API base URL for a given GitHub host.

    An explicit override (GITHUB_API_URL) only applies when its host matches
    the target host, so a github.com override set by CI does not leak onto
    an enterprise host.

    Parameters:
        host (str): The GitHub host name (e.g., "github.com" or an
            enterprise hostname).
        override (str | None): Explicit REST API base URL.

    Returns:
        str: The REST API base URL for the provided host.
    """
    if override:
        parsed = urlparse(override)
        api_host = (parsed.netloc or "").lower()

        if api_host and _normalize_github_hosts_match(host, api_host):
            return override.rstrip("/")

    if host.lower() == GITHUB_DOTCOM_HOST:
        return GITHUB_DOTCOM_API_URL
    # GitHub Enterprise default pattern
    return f"https://{host}/api/v3"


def _get_repo(cwd: str | None = None) -> Repo:
    path = cwd or os.getcwd()
    try:
        repo: Repo = Repo.discover(path)  # type: ignore[no-untyped-call]
        return repo
    except NotGitRepository as e:
        raise ValueError("Not a git repository (dulwich discover failed)") from e


def _origin_url(repo_obj: Repo) -> str:
    cfg: Any = repo_obj.get_config()
    remote_url_b: bytes | None = None
    try:
        remote_url_b = cfg.get((b"remote", b"origin"), b"url")
    except KeyError:
        # Fallback: first remote
        for sect in cfg.sections():
            if sect and sect[0] == b"remote" and len(sect) > 1:
                try:
                    remote_url_b = cfg.get(sect, b"url")
                    break
                except KeyError:
                    continue
    if not remote_url_b:
        raise ValueError("No git remote configured")
    return remote_url_b.decode("utf-8", errors="ignore")


def detect_repository(cwd: str | None = None) -> tuple[str, RepositoryCoordinates]:
    """Work out which GitHub repository the current checkout belongs to.

    ``GSV_OWNER`` and ``GSV_REPO`` (with ``GH_HOST``) take precedence, which
    is useful in CI. Otherwise the ``origin`` remote, or the first remote
    configured, of the enclosing git repository is parsed.

    Returns:
        Tuple of (host, coordinates)

    Raises:
        ValueError: If no repository, remote or parsable remote URL is found
    """
    env_owner = os.getenv("GSV_OWNER")
    env_repo = os.getenv("GSV_REPO")
    if env_owner and env_repo:
        host = os.getenv("GH_HOST") or GITHUB_DOTCOM_HOST
        return host.lower(), RepositoryCoordinates(owner=env_owner, repo=env_repo)

    remote_url = _origin_url(_get_repo(cwd))
    host, owner, repo = parse_remote_url(remote_url)
    logger.debug("Detected repository %s/%s on %s", owner, repo, host)
    return host.lower(), RepositoryCoordinates(owner=owner, repo=repo)
