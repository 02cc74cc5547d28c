from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional
from uuid import UUID

from .request_id import get_request_id

AuditAction = Literal["reservation.created", "reservation.cancelled", "slot.disabled"]
AuditInitiator = Literal["user", "admin"]


def _build_logger() -> logging.Logger:
    logger = logging.getLogger("audit")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    if not logger.handlers:
        handler = logging.StreamHandler()
        # One JSON document per line.
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger


_audit_logger = _build_logger()


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def emit_audit_log(
    *,
    action: AuditAction,
    initiator: AuditInitiator,
    record_id: UUID,
    room_id: Optional[UUID],
    day: Optional[date],
    slot: Optional[str],
    user_id: Optional[str],
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """
    Write one audit event for a change to a slot record.
    `user_id` is the acting user: the owner for reservations, the admin for disabled slots.
    Raises RuntimeError if the event cannot be written.
    """
    fields: dict[str, Any] = {
        "record_id": record_id,
        "room_id": room_id,
        "date": day,
        "slot": slot,
        "user_id": user_id,
        "message": message,
        **(extra or {}),
    }
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "info",
        "action": action,
        "initiator": initiator,
        "request_id": get_request_id(),
    }
    event.update({key: _jsonable(value) for key, value in fields.items()})

    try:
        _audit_logger.info(json.dumps({k: v for k, v in event.items() if v is not None}, ensure_ascii=True))
    except Exception as exc:
        raise RuntimeError("failed to emit audit log") from exc
