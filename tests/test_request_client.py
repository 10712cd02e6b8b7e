"""Tests for the repository-bound request client."""

import httpx
import pytest
from conftest import API, paged_responder

from github_semantic_version.auth import Credential
from github_semantic_version.config import ClientSettings
from github_semantic_version.github_api_constants import (
    GITHUB_ACCEPT_HEADER,
    GITHUB_API_VERSION,
    GITHUB_USER_AGENT,
)
from github_semantic_version.models import RepositoryCoordinates
from github_semantic_version.pagination import PaginationLimitError
from github_semantic_version.request_client import RequestClient


@pytest.mark.asyncio
async def test_requests_use_modern_headers_and_bearer_token(respx_mock, coords) -> None:
    route = respx_mock.get(f"{API}/repos/acme/widgets/pulls/1").mock(
        return_value=httpx.Response(200, json={})
    )

    async with RequestClient(coords, Credential(token="abc")) as client:
        await client.get(client.repo_path("pulls", 1))

    request = route.calls[0].request
    assert request.headers.get("Accept") == GITHUB_ACCEPT_HEADER
    assert request.headers.get("X-GitHub-Api-Version") == GITHUB_API_VERSION
    assert request.headers.get("User-Agent") == GITHUB_USER_AGENT
    assert request.headers.get("Authorization") == "Bearer abc"


@pytest.mark.asyncio
async def test_anonymous_requests_have_no_authorization(respx_mock, coords) -> None:
    route = respx_mock.get(f"{API}/repos/acme/widgets/pulls/1").mock(
        return_value=httpx.Response(200, json={})
    )

    async with RequestClient(coords) as client:
        await client.get(client.repo_path("pulls", 1))

    assert "Authorization" not in route.calls[0].request.headers


def test_repo_path_quotes_segments() -> None:
    client = RequestClient(RepositoryCoordinates(owner="acme", repo="we/ird"))
    assert client.repo_path("commits", "abc") == "/repos/acme/we%2Fird/commits/abc"
    assert client.repo_path("issues", 3, "labels") == "/repos/acme/we%2Fird/issues/3/labels"


@pytest.mark.asyncio
async def test_enterprise_base_url_is_prefixed(respx_mock, coords) -> None:
    route = respx_mock.get("https://ghe.example.com/api/v3/repos/acme/widgets/commits/abc").mock(
        return_value=httpx.Response(200, json={})
    )

    settings = ClientSettings(gh_host="ghe.example.com")
    async with RequestClient(coords, settings=settings) as client:
        await client.get(client.repo_path("commits", "abc"))

    assert route.called


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 404, 422, 500, 502])
async def test_status_errors_propagate_unchanged(respx_mock, coords, status: int) -> None:
    respx_mock.get(f"{API}/repos/acme/widgets/commits/abc").mock(
        return_value=httpx.Response(status, json={"message": "nope"})
    )

    async with RequestClient(coords) as client:
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await client.get(client.repo_path("commits", "abc"))

    assert exc_info.value.response.status_code == status


@pytest.mark.asyncio
async def test_status_errors_are_not_retried(respx_mock, coords) -> None:
    route = respx_mock.get(f"{API}/repos/acme/widgets/commits/abc").mock(
        return_value=httpx.Response(503)
    )

    async with RequestClient(coords) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.get(client.repo_path("commits", "abc"))

    assert route.call_count == 1


@pytest.mark.asyncio
async def test_network_errors_propagate(respx_mock, coords) -> None:
    respx_mock.get(f"{API}/repos/acme/widgets/commits/abc").mock(
        side_effect=httpx.ConnectError("boom")
    )

    async with RequestClient(coords) as client:
        with pytest.raises(httpx.ConnectError):
            await client.get(client.repo_path("commits", "abc"))


@pytest.mark.asyncio
async def test_client_options_are_passed_through(coords) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"name": "bug"}])

    async with RequestClient(coords, transport=httpx.MockTransport(handler)) as client:
        response = await client.get(client.repo_path("issues", 5, "labels"))

    assert response.json() == [{"name": "bug"}]
    assert str(seen[0].url) == f"{API}/repos/acme/widgets/issues/5/labels"


@pytest.mark.asyncio
async def test_iter_pages_restarts_from_first_page(respx_mock, coords) -> None:
    url = f"{API}/repos/acme/widgets/commits"
    route = respx_mock.get(url__startswith=url).mock(
        side_effect=paged_responder([["a"], ["b"], ["c"]], url)
    )

    async with RequestClient(coords) as client:
        first_run = [page.json() async for page in client.iter_pages(client.repo_path("commits"))]
        second_run = [page.json() async for page in client.iter_pages(client.repo_path("commits"))]

    assert first_run == [["a"], ["b"], ["c"]]
    assert second_run == first_run
    assert route.call_count == 6


@pytest.mark.asyncio
async def test_paginate_honours_page_ceiling(respx_mock, coords) -> None:
    url = f"{API}/repos/acme/widgets/commits"
    route = respx_mock.get(url__startswith=url).mock(
        side_effect=paged_responder([[1], [2], [3], [4]], url)
    )

    settings = ClientSettings(gsv_max_pages=2)
    async with RequestClient(coords, settings=settings) as client:
        with pytest.raises(PaginationLimitError):
            await client.paginate(client.repo_path("commits"), None, lambda page: page.json())

    assert route.call_count == 2
