from typing import Any, Callable

import httpx
import pytest
from room_reservation.domain.errors import IdentityLookupError
from room_reservation.domain.repositories import User
from room_reservation.infrastructure.identity import HttpUserDirectory


def _directory(handler: Callable[[httpx.Request], httpx.Response]) -> HttpUserDirectory:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="https://identity.test")
    return HttpUserDirectory(client, api_key="sk_test")


def _user(uid: str, first: Any = "Alice", last: Any = "Sato") -> dict[str, Any]:
    return {"id": uid, "first_name": first, "last_name": last}


@pytest.mark.asyncio
async def test_find_by_ids_sends_one_deduplicated_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[_user("user_a1"), _user("user_b2", "Bob", None)])

    users = await _directory(handler).find_by_ids(["user_a1", "user_b2", "user_a1"])

    assert users == [
        User(user_id="user_a1", first_name="Alice", last_name="Sato"),
        User(user_id="user_b2", first_name="Bob", last_name=""),
    ]
    assert len(seen) == 1
    request = seen[0]
    assert request.url.path == "/v1/users"
    assert request.url.params.get_list("user_id") == ["user_a1", "user_b2"]
    assert request.url.params["limit"] == "2"
    assert request.headers["Authorization"] == "Bearer sk_test"


@pytest.mark.asyncio
async def test_find_by_ids_accepts_paginated_envelope() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [_user("user_a1")], "total_count": 1})

    users = await _directory(handler).find_by_ids(["user_a1"])
    assert [u.display_name for u in users] == ["Alice Sato"]


@pytest.mark.asyncio
async def test_find_by_ids_skips_request_for_empty_input() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("no request expected")

    assert await _directory(handler).find_by_ids([]) == []


@pytest.mark.asyncio
async def test_unresolved_user_is_an_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[_user("user_a1")])

    with pytest.raises(IdentityLookupError, match="user_b2"):
        await _directory(handler).find_by_ids(["user_a1", "user_b2"])


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"errors": []}),
        httpx.Response(200, content=b"<html>"),
        httpx.Response(200, json={"data": "nope"}),
        httpx.Response(200, json=[{"first_name": "No Id"}]),
    ],
)
async def test_provider_failures_become_lookup_errors(response: httpx.Response) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(IdentityLookupError):
        await _directory(handler).find_by_ids(["user_a1"])


@pytest.mark.asyncio
async def test_transport_error_becomes_lookup_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(IdentityLookupError):
        await _directory(handler).find_by_ids(["user_a1"])
