"""Per-request correlation id, carried in the X-Request-ID header and a context variable."""

from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Optional

REQUEST_ID_HEADER = "X-Request-ID"

_current: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_SAFE_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def generate_request_id() -> str:
    return uuid.uuid4().hex


def resolve_request_id(incoming: Optional[str]) -> str:
    """Reuse the caller's id when it is short and printable, otherwise mint one."""
    if incoming and _SAFE_ID.fullmatch(incoming):
        return incoming
    return generate_request_id()


def set_request_id(request_id: Optional[str]) -> None:
    _current.set(request_id)


def get_request_id() -> Optional[str]:
    return _current.get()
