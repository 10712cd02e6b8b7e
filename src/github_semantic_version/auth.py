"""Credential resolution for GitHub API requests.

A token buys 5000 requests an hour on the REST API (30 a minute on search)
instead of the anonymous 60. Running without one is a supported degraded
mode: requests go out unauthenticated and nothing raises here. Refusing to
run without a token is left to the command line layer.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .github_api_constants import TOKEN_ENV_VARS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """An OAuth-style token sent as a bearer credential."""

    token: str = field(repr=False)
    scheme: str = "oauth"

    def authorization_header(self) -> str:
        # GitHub accepts OAuth and fine-grained tokens with the Bearer prefix
        return f"Bearer {self.token}"


def resolve_credential(environ: Mapping[str, str] | None = None) -> Credential | None:
    """Find a GitHub token in the environment.

    Checks ``GH_TOKEN`` first and ``GITHUB_TOKEN`` second; the first
    non-empty value wins.

    Args:
        environ: Environment mapping to read, defaults to ``os.environ``

    Returns:
        Credential for the token, or None when neither variable is set
    """
    env = os.environ if environ is None else environ
    for name in TOKEN_ENV_VARS:
        token = (env.get(name) or "").strip()
        if token:
            logger.debug("Using GitHub token from %s", name)
            return Credential(token=token)
    return None


def apply_credential(
    headers: dict[str, str], credential: Credential | None
) -> dict[str, str]:
    """Return a copy of ``headers`` carrying the credential, if any."""
    authed = dict(headers)
    if credential is None:
        logger.debug("No GitHub token found; requests will be unauthenticated")
        return authed
    authed["Authorization"] = credential.authorization_header()
    logger.info("Authenticated GitHub API client")
    return authed
