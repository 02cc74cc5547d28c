import logging
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from ..domain.errors import (
    IdentityLookupError,
    NotFoundError,
    RoomNotFoundError,
    SlotTakenError,
    ValidationError,
    WeeklyQuotaExceededError,
)
from ..domain.repositories import RoomRepository, SlotRecordRepository, User, UserDirectory
from ..domain.services import ReservationPolicy, check_booking_date, check_cancellation
from ..domain.values import new_uuid
from ..models import RecordStatus, Slot, SlotRecord, SlotRecordView
from ..utils.time import week_window
from .availability import has_reservation_in_week, is_slot_occupied

logger = logging.getLogger(__name__)


async def book_reservation(
    room_repo: RoomRepository,
    record_repo: SlotRecordRepository,
    *,
    room_id: UUID,
    day: date,
    slot: Slot,
    user_id: str,
    now: datetime,
    policy: ReservationPolicy,
) -> SlotRecord:
    check_booking_date(day, now=now, policy=policy)

    if not await room_repo.exists(room_id):
        raise RoomNotFoundError("room not found")
    if await is_slot_occupied(record_repo, room_id=room_id, day=day, slot=slot):
        raise SlotTakenError("slot is already reserved or disabled")
    if await has_reservation_in_week(record_repo, user_id=user_id, day=day):
        raise WeeklyQuotaExceededError("user already has a reservation this week")

    # Commit-time conflicts from a concurrent booking surface from here as the same errors.
    week_start, _ = week_window(day)
    record = await record_repo.create_reservation(
        record_id=new_uuid(),
        reservation_id=new_uuid(),
        user_id=user_id,
        room_id=room_id,
        day=day,
        slot=slot,
        week_start=week_start,
    )
    logger.info("reservation %s created for %s on %s %s", record.id, user_id, day, slot.value)
    return record


async def cancel_reservation(
    record_repo: SlotRecordRepository,
    *,
    record_id: UUID,
    user_id: str,
    now: datetime,
    policy: ReservationPolicy,
) -> SlotRecordView:
    view = await record_repo.get_view_for_update(record_id)
    if view is None:
        raise NotFoundError("reservation not found")
    check_cancellation(view, user_id=user_id, now=now, policy=policy)

    await record_repo.delete_reservation(record_id)
    logger.info("reservation %s cancelled by %s", record_id, user_id)
    return view


async def list_reservations(
    record_repo: SlotRecordRepository,
    users: UserDirectory,
    *,
    start: date,
    end: date,
    user_id: Optional[str] = None,
) -> list[tuple[SlotRecordView, Optional[User]]]:
    """
    Slot records dated within [start, end], ordered by date then slot, each
    paired with the owning user (None for disabled markers). When `user_id`
    is given only that user's reservations and the disabled markers are kept.
    """
    if start > end:
        raise ValidationError("start date must not be after end date")

    views = await record_repo.list_views_between(start, end, user_id=user_id)
    owner_ids = sorted({v.user_id for v in views if v.status == RecordStatus.RESERVED and v.user_id})
    found = {user.user_id: user for user in await users.find_by_ids(owner_ids)}
    missing = [uid for uid in owner_ids if uid not in found]
    if missing:
        raise IdentityLookupError(f"unresolved users: {', '.join(missing)}")

    return [(view, found[view.user_id] if view.user_id else None) for view in views]
