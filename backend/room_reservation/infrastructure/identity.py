from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from ..domain.errors import IdentityLookupError
from ..domain.repositories import User, UserDirectory

logger = logging.getLogger(__name__)


class HttpUserDirectory(UserDirectory):
    """Resolves user ids against the identity provider's user list endpoint."""

    def __init__(self, client: httpx.AsyncClient, *, api_key: str) -> None:
        self.client = client
        self.api_key = api_key

    async def find_by_ids(self, user_ids: Iterable[str]) -> list[User]:
        wanted = list(dict.fromkeys(user_ids))
        if not wanted:
            return []

        try:
            resp = await self.client.get(
                "/v1/users",
                params=[("user_id", uid) for uid in wanted] + [("limit", str(len(wanted)))],
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("identity lookup failed for %d users: %s", len(wanted), exc)
            raise IdentityLookupError("failed to fetch users") from exc

        users = [_to_user(item) for item in _items(payload)]
        found = {user.user_id for user in users}
        missing = [uid for uid in wanted if uid not in found]
        if missing:
            raise IdentityLookupError(f"unresolved users: {', '.join(missing)}")
        return [user for user in users if user.user_id in wanted]


def _items(payload: Any) -> list[dict[str, Any]]:
    # The endpoint answers with either a bare list or {"data": [...], "total_count": n}.
    if isinstance(payload, dict):
        payload = payload.get("data", [])
    if not isinstance(payload, list):
        raise IdentityLookupError("unexpected identity response")
    return payload


def _to_user(item: dict[str, Any]) -> User:
    user_id = item.get("id")
    if not user_id:
        raise IdentityLookupError("identity response is missing a user id")
    # Names are optional on the provider side.
    return User(
        user_id=user_id,
        first_name=item.get("first_name") or "",
        last_name=item.get("last_name") or "",
    )
