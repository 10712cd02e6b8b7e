"""Search query formatting for the GitHub issue search endpoint."""

from __future__ import annotations

from .models import RepositoryCoordinates, SearchQuery


def format_search_query(query: SearchQuery, coords: RepositoryCoordinates) -> str:
    """Convert a search mapping into a GitHub search string.

    The result takes the form ``repo:owner/repo key1:"value1" key2:"value2"``.
    The repository scope always comes first; entries follow in the mapping's
    iteration order. GitHub parses this string server-side, so quoting and
    spacing must be exact.

    Args:
        query: Search field -> value mapping
        coords: Repository the search is scoped to

    Returns:
        Search string with single spaces and no surrounding whitespace
    """
    q = f"repo:{coords.owner}/{coords.repo}"

    for key, value in query.items():
        q += f' {key}:"{value}"'

    return q.strip()
