"""Thin async wrapper around httpx bound to one GitHub repository."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Iterable
from types import TracebackType
from typing import Any, TypeVar
from urllib.parse import quote

import httpx

from .auth import Credential, apply_credential
from .config import ClientSettings, get_settings
from .github_api_constants import (
    GITHUB_ACCEPT_HEADER,
    GITHUB_API_VERSION,
    GITHUB_USER_AGENT,
)
from .models import RepositoryCoordinates
from .pagination import aggregate, has_next_link, iter_pages, next_page_url

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestClient:
    """Issues GitHub REST requests on behalf of one repository.

    Every response is checked with ``raise_for_status()``; transport and
    status errors propagate to the caller untouched. Extra keyword options
    are handed to ``httpx.AsyncClient`` as-is (``transport=``, ``verify=``,
    ``proxy=`` ...).
    """

    def __init__(
        self,
        coords: RepositoryCoordinates,
        credential: Credential | None = None,
        *,
        settings: ClientSettings | None = None,
        **client_options: Any,
    ) -> None:
        self._coords = coords
        self._credential = credential
        self._settings = settings or get_settings()

        headers = apply_credential(
            {
                "Accept": GITHUB_ACCEPT_HEADER,
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "User-Agent": GITHUB_USER_AGENT,
            },
            credential,
        )
        timeout = httpx.Timeout(
            timeout=self._settings.http_timeout,
            connect=self._settings.http_connect_timeout,
        )
        options: dict[str, Any] = {
            "base_url": self._settings.api_base_url,
            "headers": headers,
            "timeout": timeout,
            "follow_redirects": True,
        }
        options.update(client_options)
        self._client = httpx.AsyncClient(**options)

    @property
    def coords(self) -> RepositoryCoordinates:
        return self._coords

    @property
    def credential(self) -> Credential | None:
        return self._credential

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    def repo_path(self, *parts: str | int) -> str:
        """Build ``/repos/<owner>/<repo>/<parts...>`` with each segment quoted."""
        segments = [self._coords.owner, self._coords.repo, *(str(p) for p in parts)]
        return "/repos/" + "/".join(quote(s, safe="") for s in segments)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        logger.debug("GET %s %s", path, params or "")
        response = await self._client.get(path, params=params)
        response.raise_for_status()
        return response

    async def get_url(self, url: str) -> httpx.Response:
        """GET an absolute URL, such as a pagination ``next`` link."""
        logger.debug("GET %s", url)
        response = await self._client.get(url)
        response.raise_for_status()
        return response

    async def post(self, path: str, json: Any = None) -> httpx.Response:
        logger.debug("POST %s", path)
        response = await self._client.post(path, json=json)
        response.raise_for_status()
        return response

    async def _get_next_page(self, response: httpx.Response) -> httpx.Response:
        url = next_page_url(response)
        if url is None:
            raise RuntimeError("Response has no next page link")
        return await self.get_url(url)

    async def iter_pages(
        self, path: str, params: dict[str, Any] | None = None
    ) -> AsyncIterator[httpx.Response]:
        """Lazily yield every page of a paginated endpoint.

        Each call starts over from the first page.
        """
        first_page = await self.get(path, params)
        async for page in iter_pages(
            first_page,
            has_next_link,
            self._get_next_page,
            max_pages=self._settings.max_pages,
        ):
            yield page

    async def paginate(
        self,
        path: str,
        params: dict[str, Any] | None,
        extract_items: Callable[[httpx.Response], Iterable[T]],
    ) -> list[T]:
        """Fetch every page of ``path`` and concatenate their items."""
        first_page = await self.get(path, params)
        return await aggregate(
            first_page,
            has_next_link,
            self._get_next_page,
            extract_items,
            max_pages=self._settings.max_pages,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RequestClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
