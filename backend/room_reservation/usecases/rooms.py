import logging
from datetime import date
from uuid import UUID

from ..domain.errors import RoomNotFoundError, SlotTakenError
from ..domain.repositories import RoomRepository, SlotRecordRepository
from ..domain.values import new_uuid
from ..models import Room, Slot, SlotRecord
from .availability import is_slot_occupied

logger = logging.getLogger(__name__)


async def list_rooms(room_repo: RoomRepository) -> list[Room]:
    return await room_repo.list_all()


async def list_available_rooms(room_repo: RoomRepository, *, day: date, slot: Slot) -> list[Room]:
    return await room_repo.list_available(day, slot)


async def disable_slot(
    room_repo: RoomRepository,
    record_repo: SlotRecordRepository,
    *,
    room_id: UUID,
    day: date,
    slot: Slot,
) -> SlotRecord:
    records = await _disable(room_repo, record_repo, room_id=room_id, day=day, slots=[slot])
    return records[0]


async def disable_day(
    room_repo: RoomRepository,
    record_repo: SlotRecordRepository,
    *,
    room_id: UUID,
    day: date,
) -> list[SlotRecord]:
    """Disable every slot of `day`. Nothing is written if any slot is occupied."""
    return await _disable(room_repo, record_repo, room_id=room_id, day=day, slots=list(Slot))


async def _disable(
    room_repo: RoomRepository,
    record_repo: SlotRecordRepository,
    *,
    room_id: UUID,
    day: date,
    slots: list[Slot],
) -> list[SlotRecord]:
    if not await room_repo.exists(room_id):
        raise RoomNotFoundError("room not found")
    for slot in slots:
        if await is_slot_occupied(record_repo, room_id=room_id, day=day, slot=slot):
            raise SlotTakenError(f"slot {slot.value} is already reserved or disabled")

    records = await record_repo.create_disabled(
        room_id=room_id,
        day=day,
        entries=[(new_uuid(), slot) for slot in slots],
    )
    logger.info("room %s disabled on %s for %s", room_id, day, ", ".join(s.value for s in slots))
    return records
