import re
from typing import NewType
from uuid import UUID

from uuid6 import uuid7

from ..models import Slot
from .errors import ValidationError

UserId = NewType("UserId", str)
RoomName = NewType("RoomName", str)

_UUID7_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-7[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)
_USER_ID_RE = re.compile(r"^user_[A-Za-z0-9]+$")

ROOM_NAME_MIN = 3
ROOM_NAME_MAX = 20


def new_uuid() -> UUID:
    """Return a fresh time-ordered UUIDv7."""
    return UUID(str(uuid7()))


def parse_uuid(raw: str) -> UUID:
    if not isinstance(raw, str) or not _UUID7_RE.fullmatch(raw):
        raise ValidationError("invalid uuid: expected a version 7 UUID")
    return UUID(raw)


def parse_slot(raw: str) -> Slot:
    try:
        return Slot(raw)
    except ValueError as exc:
        allowed = ", ".join(s.value for s in Slot)
        raise ValidationError(f"invalid slot: must be one of {allowed}") from exc


def parse_user_id(raw: str) -> UserId:
    if not isinstance(raw, str) or not _USER_ID_RE.fullmatch(raw):
        raise ValidationError("invalid user id")
    return UserId(raw)


def parse_room_name(raw: str) -> RoomName:
    if len(raw) < ROOM_NAME_MIN:
        raise ValidationError(f"room name must be at least {ROOM_NAME_MIN} characters long")
    if len(raw) > ROOM_NAME_MAX:
        raise ValidationError(f"room name must be at most {ROOM_NAME_MAX} characters long")
    return RoomName(raw)
