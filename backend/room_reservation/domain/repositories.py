from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Protocol
from uuid import UUID

from ..models import Room, Slot, SlotRecord, SlotRecordView


@dataclass(frozen=True)
class User:
    user_id: str
    first_name: str
    last_name: str

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class RoomRepository(Protocol):
    async def exists(self, room_id: UUID) -> bool: ...

    async def list_all(self) -> list[Room]: ...

    async def list_available(self, day: date, slot: Slot) -> list[Room]: ...


class SlotRecordRepository(Protocol):
    async def count_by_triple(self, room_id: UUID, day: date, slot: Slot) -> int: ...

    async def count_reserved_by_user_between(self, user_id: str, start: date, end: date) -> int: ...

    async def get_view_for_update(self, record_id: UUID) -> SlotRecordView | None: ...

    async def list_views_between(
        self,
        start: date,
        end: date,
        user_id: str | None = None,
    ) -> list[SlotRecordView]: ...

    async def create_reservation(
        self,
        *,
        record_id: UUID,
        reservation_id: UUID,
        user_id: str,
        room_id: UUID,
        day: date,
        slot: Slot,
        week_start: date,
    ) -> SlotRecord:
        """Insert the reservation and its reserved slot record as one unit."""
        ...

    async def create_disabled(
        self,
        *,
        room_id: UUID,
        day: date,
        entries: Iterable[tuple[UUID, Slot]],
    ) -> list[SlotRecord]: ...

    async def delete_reservation(self, record_id: UUID) -> None:
        """Delete the slot record and its reservation as one unit."""
        ...


class UserDirectory(Protocol):
    async def find_by_ids(self, user_ids: Iterable[str]) -> list[User]: ...
