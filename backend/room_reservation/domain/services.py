from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..models import RecordStatus, SlotRecordView
from ..utils.time import is_weekday, start_of_day
from .errors import ForbiddenError, NotAReservationError, NotWeekdayError, PastDateError, TooCloseToDateError


@dataclass(frozen=True)
class ReservationPolicy:
    allow_same_day_booking: bool = True
    cancel_lead_days: int = 3


def check_booking_date(day: date, *, now: datetime, policy: ReservationPolicy) -> None:
    """
    Pure validation of the requested reservation date against `now`.
    The past-date rule is checked before the weekday rule.
    """
    today = now.date()
    if day < today or (day == today and not policy.allow_same_day_booking):
        raise PastDateError("cannot reserve a past date")
    if not is_weekday(day):
        raise NotWeekdayError("reservations are only available on weekdays")


def check_cancellation(
    view: SlotRecordView,
    *,
    user_id: str,
    now: datetime,
    policy: ReservationPolicy,
) -> None:
    """
    Pure validation: the record must be a reservation owned by `user_id`
    whose date starts at least `policy.cancel_lead_days` days after `now`.
    Exactly the lead time is still cancellable.
    """
    if view.status != RecordStatus.RESERVED or view.user_id is None:
        raise NotAReservationError("slot is disabled, not reserved")
    if view.user_id != user_id:
        raise ForbiddenError("cannot cancel another user's reservation")

    lead = start_of_day(view.date, now.tzinfo) - now
    if lead < timedelta(days=policy.cancel_lead_days):
        raise TooCloseToDateError(
            f"reservations can only be cancelled {policy.cancel_lead_days} or more days in advance"
        )
