from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import jwt
from jwt import InvalidTokenError

from ..domain.errors import ValidationError
from ..domain.values import UserId, parse_user_id

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class TokenClaims:
    user_id: UserId
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def create_access_token(
    *,
    user_id: str,
    secret: str,
    algorithm: str = "HS256",
    role: Optional[str] = None,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=30))
    payload = {"sub": user_id, "iat": now, "exp": exp}
    if role is not None:
        payload["role"] = role
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(
    token: str,
    *,
    secret: str,
    algorithms: Sequence[str],
) -> TokenClaims:
    try:
        payload = jwt.decode(token, secret, algorithms=list(algorithms))
    except InvalidTokenError as exc:  # includes ExpiredSignatureError
        raise ValueError("invalid token") from exc

    sub = payload.get("sub")
    if sub is None:
        raise ValueError("token missing sub")
    try:
        user_id = parse_user_id(sub)
    except ValidationError as exc:
        raise ValueError("token sub is not a user id") from exc
    role = payload.get("role")
    return TokenClaims(user_id=user_id, role=role if isinstance(role, str) else None)
