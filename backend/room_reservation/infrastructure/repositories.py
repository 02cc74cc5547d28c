from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Any, Iterable, Iterator, List, Optional
from uuid import UUID

from sqlalchemy import Row, Select, delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.errors import (
    IntegrityViolationError,
    NotFoundError,
    SlotTakenError,
    StorageError,
    WeeklyQuotaExceededError,
)
from ..domain.repositories import RoomRepository, SlotRecordRepository
from ..models import RecordStatus, Reservation, Room, Slot, SlotRecord, SlotRecordView


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageError(f"failed to {action}") from exc


class SqlAlchemyRoomRepository(RoomRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def exists(self, room_id: UUID) -> bool:
        with _storage_errors("look up room"):
            count = await self.session.scalar(select(func.count()).select_from(Room).where(Room.id == room_id))
        return bool(count)

    async def list_all(self) -> List[Room]:
        with _storage_errors("list rooms"):
            rows = await self.session.scalars(select(Room).order_by(Room.id))
        return list(rows.all())

    async def list_available(self, day: date, slot: Slot) -> List[Room]:
        occupied = select(SlotRecord.room_id).where(SlotRecord.date == day, SlotRecord.slot == slot)
        stmt = select(Room).where(Room.id.not_in(occupied)).order_by(Room.id)
        with _storage_errors("list available rooms"):
            rows = await self.session.scalars(stmt)
        return list(rows.all())


class SqlAlchemySlotRecordRepository(SlotRecordRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def count_by_triple(self, room_id: UUID, day: date, slot: Slot) -> int:
        stmt = (
            select(func.count())
            .select_from(SlotRecord)
            .where(SlotRecord.room_id == room_id, SlotRecord.date == day, SlotRecord.slot == slot)
        )
        with _storage_errors("count slot records"):
            return int(await self.session.scalar(stmt) or 0)

    async def count_reserved_by_user_between(self, user_id: str, start: date, end: date) -> int:
        stmt = (
            select(func.count())
            .select_from(SlotRecord)
            .join(Reservation, SlotRecord.reservation_id == Reservation.id)
            .where(
                Reservation.user_id == user_id,
                SlotRecord.status == RecordStatus.RESERVED,
                SlotRecord.date >= start,
                SlotRecord.date <= end,
            )
        )
        with _storage_errors("count user reservations"):
            return int(await self.session.scalar(stmt) or 0)

    async def get_view_for_update(self, record_id: UUID) -> Optional[SlotRecordView]:
        stmt = _view_select().where(SlotRecord.id == record_id).with_for_update()
        with _storage_errors("load slot record"):
            row = (await self.session.execute(stmt)).first()
        return _to_view(row) if row is not None else None

    async def list_views_between(
        self,
        start: date,
        end: date,
        user_id: Optional[str] = None,
    ) -> List[SlotRecordView]:
        stmt = _view_select().where(SlotRecord.date >= start, SlotRecord.date <= end)
        if user_id is not None:
            stmt = stmt.where(or_(SlotRecord.status == RecordStatus.DISABLED, Reservation.user_id == user_id))
        with _storage_errors("list slot records"):
            rows = (await self.session.execute(stmt)).all()
        views = [_to_view(row) for row in rows]
        # Slots are stored by name, so order by period in Python.
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
        with _storage_errors("create reservation"):
            self.session.add(Reservation(id=reservation_id, user_id=user_id, week_start=week_start))
            try:
                await self.session.flush()
            except IntegrityError as exc:
                raise WeeklyQuotaExceededError("user already has a reservation this week") from exc

            record = SlotRecord(
                id=record_id,
                room_id=room_id,
                date=day,
                slot=slot,
                status=RecordStatus.RESERVED,
                reservation_id=reservation_id,
            )
            self.session.add(record)
            try:
                await self.session.flush()
            except IntegrityError as exc:
                raise SlotTakenError("slot is already reserved or disabled") from exc
        return record

    async def create_disabled(
        self,
        *,
        room_id: UUID,
        day: date,
        entries: Iterable[tuple[UUID, Slot]],
    ) -> List[SlotRecord]:
        records = [
            SlotRecord(
                id=record_id,
                room_id=room_id,
                date=day,
                slot=slot,
                status=RecordStatus.DISABLED,
                reservation_id=None,
            )
            for record_id, slot in entries
        ]
        with _storage_errors("disable slot"):
            self.session.add_all(records)
            try:
                await self.session.flush()
            except IntegrityError as exc:
                raise SlotTakenError("slot is already reserved or disabled") from exc
        return records

    async def delete_reservation(self, record_id: UUID) -> None:
        with _storage_errors("delete reservation"):
            reservation_id = await self.session.scalar(
                select(SlotRecord.reservation_id).where(
                    SlotRecord.id == record_id,
                    SlotRecord.status == RecordStatus.RESERVED,
                )
            )
            if reservation_id is None:
                raise NotFoundError("reservation not found")

            # The slot record references the reservation, so it goes first.
            deleted_records = await self.session.execute(delete(SlotRecord).where(SlotRecord.id == record_id))
            deleted_reservations = await self.session.execute(
                delete(Reservation).where(Reservation.id == reservation_id)
            )
        if deleted_records.rowcount != 1 or deleted_reservations.rowcount != 1:
            raise IntegrityViolationError(f"reservation delete for slot record {record_id} touched unexpected rows")


def _view_select() -> Select[Any]:
    return (
        select(
            SlotRecord.id,
            SlotRecord.room_id,
            Room.name,
            SlotRecord.date,
            SlotRecord.slot,
            SlotRecord.status,
            Reservation.user_id,
        )
        .join(Room, SlotRecord.room_id == Room.id)
        .outerjoin(Reservation, SlotRecord.reservation_id == Reservation.id)
    )


def _to_view(row: Row[Any]) -> SlotRecordView:
    record_id, room_id, room_name, day, slot, status, user_id = row
    return SlotRecordView(
        record_id=record_id,
        room_id=room_id,
        room_name=room_name,
        date=day,
        slot=Slot(slot),
        status=RecordStatus(status),
        user_id=user_id if status == RecordStatus.RESERVED else None,
    )
