"""GitHub API constants shared across modules."""

import os
from importlib.metadata import PackageNotFoundError, version

# GitHub API headers (modern, versioned format)
GITHUB_ACCEPT_HEADER = "application/vnd.github+json"
GITHUB_API_VERSION = "2022-11-28"

GITHUB_DOTCOM_HOST = "github.com"
GITHUB_DOTCOM_API_URL = "https://api.github.com"

# Search and list endpoints accept at most 100 items per page
GITHUB_MAX_PER_PAGE = 100

# Credential lookup order: the first non-empty variable wins
TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")

# Dynamic User-Agent with package version
_UA_NAME = "github-semantic-version"
try:
    _pkg_ver = version("github-semantic-version")
except PackageNotFoundError:
    _pkg_ver = os.getenv("PACKAGE_VERSION", "0")
GITHUB_USER_AGENT = f"{_UA_NAME}/{_pkg_ver}"
