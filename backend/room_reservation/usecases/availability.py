import logging
from datetime import date
from uuid import UUID

from ..domain.errors import IntegrityViolationError
from ..domain.repositories import SlotRecordRepository
from ..models import Slot
from ..utils.time import week_window

logger = logging.getLogger(__name__)


def _exactly_zero_or_one(count: int, *, what: str, **context: object) -> bool:
    if count == 0:
        return False
    if count == 1:
        return True
    logger.error("integrity violation: %d %s found %s", count, what, context)
    raise IntegrityViolationError(f"unexpected count of {what}: {count}")


async def is_slot_occupied(
    records: SlotRecordRepository,
    *,
    room_id: UUID,
    day: date,
    slot: Slot,
) -> bool:
    """Return True when the triple is reserved or disabled."""
    count = await records.count_by_triple(room_id, day, slot)
    return _exactly_zero_or_one(count, what="slot records", room_id=str(room_id), date=day.isoformat(), slot=slot.value)


async def has_reservation_in_week(
    records: SlotRecordRepository,
    *,
    user_id: str,
    day: date,
) -> bool:
    """Return True when the user holds a reservation in the Monday-Friday window containing `day`."""
    monday, friday = week_window(day)
    count = await records.count_reserved_by_user_between(user_id, monday, friday)
    return _exactly_zero_or_one(
        count,
        what="weekly reservations",
        user_id=user_id,
        week_start=monday.isoformat(),
    )
