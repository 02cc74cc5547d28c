from datetime import datetime
from typing import AsyncIterator
from zoneinfo import ZoneInfo

import httpx
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .database import get_sessionmaker
from .domain.values import UserId
from .infrastructure.identity import HttpUserDirectory
from .utils.auth import TokenClaims, decode_access_token
from .utils.time import now_local


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_sessionmaker()() as session:
        yield session


def get_now(settings: Settings = Depends(get_settings)) -> datetime:
    return now_local(ZoneInfo(settings.app_timezone))


async def get_user_directory(settings: Settings = Depends(get_settings)) -> AsyncIterator[HttpUserDirectory]:
    async with httpx.AsyncClient(base_url=settings.identity_api_url, timeout=settings.identity_timeout) as client:
        yield HttpUserDirectory(client, api_key=settings.identity_api_key)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token_claims(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> TokenClaims:
    if authorization is None:
        raise _unauthorized("Authorization header required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("Bearer token required")
    try:
        return decode_access_token(token, secret=settings.auth_secret, algorithms=[settings.auth_algorithm])
    except ValueError as exc:
        raise _unauthorized("Invalid token") from exc


async def get_current_user_id(claims: TokenClaims = Depends(get_token_claims)) -> UserId:
    return claims.user_id


async def get_admin_user_id(claims: TokenClaims = Depends(get_token_claims)) -> UserId:
    if not claims.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin role required")
    return claims.user_id
