from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from .domain.repositories import User
from .domain.values import parse_slot, parse_uuid
from .models import RecordStatus, Room, Slot, SlotRecord, SlotRecordView


class RoomRead(BaseModel):
    room_id: UUID
    name: str

    @classmethod
    def from_db(cls, *, room: Room) -> "RoomRead":
        return cls(room_id=room.id, name=room.name)


class ReservationCreate(BaseModel):
    room_id: UUID
    date: date
    slot: Slot

    @field_validator("room_id", mode="before")
    @classmethod
    def _check_room_id(cls, value: object) -> object:
        return parse_uuid(value) if isinstance(value, str) else value

    @field_validator("slot", mode="before")
    @classmethod
    def _check_slot(cls, value: object) -> object:
        return parse_slot(value) if isinstance(value, str) else value


class DisableRequest(BaseModel):
    date: date
    # Omitted slot disables the whole day.
    slot: Optional[Slot] = None

    @field_validator("slot", mode="before")
    @classmethod
    def _check_slot(cls, value: object) -> object:
        return parse_slot(value) if isinstance(value, str) else value


class SlotRecordRead(BaseModel):
    record_id: UUID
    room_id: UUID
    date: date
    slot: Slot
    status: RecordStatus

    @classmethod
    def from_db(cls, *, record: SlotRecord) -> "SlotRecordRead":
        return cls(
            record_id=record.id,
            room_id=record.room_id,
            date=record.date,
            slot=record.slot,
            status=record.status,
        )


class UserRead(BaseModel):
    user_id: str
    name: str


class ReservationRead(BaseModel):
    record_id: UUID
    room: RoomRead
    date: date
    slot: Slot
    status: RecordStatus
    user: Optional[UserRead]

    @classmethod
    def from_view(cls, *, view: SlotRecordView, user: Optional[User]) -> "ReservationRead":
        return cls(
            record_id=view.record_id,
            room=RoomRead(room_id=view.room_id, name=view.room_name),
            date=view.date,
            slot=view.slot,
            status=view.status,
            user=UserRead(user_id=user.user_id, name=user.display_name) if user is not None else None,
        )


class ReservationList(BaseModel):
    start_date: date
    end_date: date
    reservations: list[ReservationRead]
