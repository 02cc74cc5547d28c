import asyncio
from datetime import date, datetime
from typing import Iterable, List, Optional
from uuid import UUID

import pytest
from room_reservation.domain.errors import NotFoundError, SlotTakenError, WeeklyQuotaExceededError
from room_reservation.domain.repositories import User
from room_reservation.domain.services import ReservationPolicy
from room_reservation.domain.values import new_uuid
from room_reservation.models import RecordStatus, Reservation, Room, Slot, SlotRecord, SlotRecordView
from room_reservation.utils.time import JST


class InMemoryStore:
    """Room and slot record repository that enforces the same unique keys as the database."""

    def __init__(self) -> None:
        self.rooms: dict[UUID, Room] = {}
        self.records: dict[UUID, SlotRecord] = {}
        self.reservations: dict[UUID, Reservation] = {}
        # Yield to the event loop inside reads so concurrent callers interleave.
        self.yield_on_read = False

    def add_room(self, name: str = "Room A") -> Room:
        room = Room(id=new_uuid(), name=name)
        self.rooms[room.id] = room
        return room

    def add_disabled(self, room: Room, day: date, slot: Slot) -> SlotRecord:
        record = SlotRecord(
            id=new_uuid(), room_id=room.id, date=day, slot=slot, status=RecordStatus.DISABLED, reservation_id=None
        )
        self.records[record.id] = record
        return record

    async def _pause(self) -> None:
        if self.yield_on_read:
            await asyncio.sleep(0)

    async def exists(self, room_id: UUID) -> bool:
        return room_id in self.rooms

    async def list_all(self) -> List[Room]:
        return sorted(self.rooms.values(), key=lambda r: r.id)

    async def list_available(self, day: date, slot: Slot) -> List[Room]:
        taken = {r.room_id for r in self.records.values() if r.date == day and r.slot == slot}
        return [room for room in await self.list_all() if room.id not in taken]

    async def count_by_triple(self, room_id: UUID, day: date, slot: Slot) -> int:
        await self._pause()
        return sum(1 for r in self.records.values() if (r.room_id, r.date, r.slot) == (room_id, day, slot))

    async def count_reserved_by_user_between(self, user_id: str, start: date, end: date) -> int:
        await self._pause()
        return sum(
            1
            for r in self.records.values()
            if r.status == RecordStatus.RESERVED
            and self.reservations[r.reservation_id].user_id == user_id
            and start <= r.date <= end
        )

    def _view(self, record: SlotRecord) -> SlotRecordView:
        reservation = self.reservations.get(record.reservation_id) if record.reservation_id else None
        return SlotRecordView(
            record_id=record.id,
            room_id=record.room_id,
            room_name=self.rooms[record.room_id].name,
            date=record.date,
            slot=record.slot,
            status=record.status,
            user_id=reservation.user_id if reservation else None,
        )

    async def get_view_for_update(self, record_id: UUID) -> Optional[SlotRecordView]:
        record = self.records.get(record_id)
        return self._view(record) if record is not None else None

    async def list_views_between(self, start: date, end: date, user_id: Optional[str] = None) -> List[SlotRecordView]:
        views = [self._view(r) for r in self.records.values() if start <= r.date <= end]
        if user_id is not None:
            views = [v for v in views if v.status == RecordStatus.DISABLED or v.user_id == user_id]
        return sorted(views, key=lambda v: (v.date, v.slot.ordinal, v.room_name))

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
        if any(r.user_id == user_id and r.week_start == week_start for r in self.reservations.values()):
            raise WeeklyQuotaExceededError("duplicate user/week")
        if any((r.room_id, r.date, r.slot) == (room_id, day, slot) for r in self.records.values()):
            raise SlotTakenError("duplicate triple")
        self.reservations[reservation_id] = Reservation(id=reservation_id, user_id=user_id, week_start=week_start)
        record = SlotRecord(
            id=record_id,
            room_id=room_id,
            date=day,
            slot=slot,
            status=RecordStatus.RESERVED,
            reservation_id=reservation_id,
        )
        self.records[record_id] = record
        return record

    async def create_disabled(
        self,
        *,
        room_id: UUID,
        day: date,
        entries: Iterable[tuple[UUID, Slot]],
    ) -> List[SlotRecord]:
        entries = list(entries)
        for _, slot in entries:
            if any((r.room_id, r.date, r.slot) == (room_id, day, slot) for r in self.records.values()):
                raise SlotTakenError("duplicate triple")
        created = [
            SlotRecord(id=rid, room_id=room_id, date=day, slot=slot, status=RecordStatus.DISABLED, reservation_id=None)
            for rid, slot in entries
        ]
        for record in created:
            self.records[record.id] = record
        return created

    async def delete_reservation(self, record_id: UUID) -> None:
        record = self.records.get(record_id)
        if record is None or record.reservation_id is None:
            raise NotFoundError("reservation not found")
        del self.records[record_id]
        del self.reservations[record.reservation_id]


class FakeUserDirectory:
    def __init__(self, users: Iterable[User]) -> None:
        self.users = {u.user_id: u for u in users}
        self.requested: list[list[str]] = []

    async def find_by_ids(self, user_ids: Iterable[str]) -> List[User]:
        ids = list(user_ids)
        self.requested.append(ids)
        return [self.users[uid] for uid in ids if uid in self.users]


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def room(store: InMemoryStore) -> Room:
    return store.add_room("Room A")


@pytest.fixture
def policy() -> ReservationPolicy:
    return ReservationPolicy(allow_same_day_booking=True, cancel_lead_days=3)


@pytest.fixture
def now() -> datetime:
    # Monday 2026-10-19, 09:00 local
    return datetime(2026, 10, 19, 9, 0, tzinfo=JST)


@pytest.fixture
def directory() -> FakeUserDirectory:
    return FakeUserDirectory(
        [
            User(user_id="user_alice01", first_name="Alice", last_name="Sato"),
            User(user_id="user_bob02", first_name="Bob", last_name=""),
        ]
    )
