"""Sequential traversal of paginated GitHub responses.

GitHub advertises further pages through the ``Link`` response header. The
URL of page N+1 is only known once page N has arrived, so pages are always
fetched one after another.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import TypeVar

import httpx

logger = logging.getLogger(__name__)

P = TypeVar("P")
T = TypeVar("T")

NEXT_LINK_RE = re.compile(r"<([^>]+)>;\s*rel=\"next\"")


class PaginationLimitError(RuntimeError):
    """Raised when a traversal exceeds its configured page ceiling."""

    def __init__(self, max_pages: int) -> None:
        self.max_pages = max_pages
        super().__init__(
            f"Upstream still reported a next page after {max_pages} pages; "
            "raise GSV_MAX_PAGES or narrow the query"
        )


def next_page_url(response: httpx.Response) -> str | None:
    """Return the ``rel="next"`` URL from the response's Link header."""
    link_header = response.headers.get("Link")
    if not link_header:
        return None
    match = NEXT_LINK_RE.search(link_header)
    return match.group(1) if match else None


def has_next_link(response: httpx.Response) -> bool:
    return next_page_url(response) is not None


async def iter_pages(
    first_page: P,
    has_next: Callable[[P], bool],
    get_next: Callable[[P], Awaitable[P]],
    *,
    max_pages: int | None = None,
) -> AsyncIterator[P]:
    """Yield ``first_page`` and every page after it.

    ``get_next`` is awaited once for each page ``has_next`` accepts, and
    never again after ``has_next`` returns False. There is no internal bound
    unless ``max_pages`` is given.

    Raises:
        PaginationLimitError: If ``max_pages`` pages were yielded and the
            last one still reports a next page
    """
    page = first_page
    page_count = 1
    while True:
        yield page
        if not has_next(page):
            return
        if max_pages is not None and page_count >= max_pages:
            raise PaginationLimitError(max_pages)
        page = await get_next(page)
        page_count += 1
        logger.debug("Fetched page %d", page_count)


async def aggregate(
    first_page: P,
    has_next: Callable[[P], bool],
    get_next: Callable[[P], Awaitable[P]],
    extract_items: Callable[[P], Iterable[T]],
    *,
    max_pages: int | None = None,
) -> list[T]:
    """Concatenate the items of every page, earliest page first.

    Within-page order is preserved; nothing is deduplicated.
    """
    items: list[T] = []
    async for page in iter_pages(first_page, has_next, get_next, max_pages=max_pages):
        items.extend(extract_items(page))
    return items
