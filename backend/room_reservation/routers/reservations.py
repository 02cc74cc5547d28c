from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..deps import get_current_user_id, get_now, get_session, get_user_directory
from ..domain.errors import (
    ForbiddenError,
    IdentityLookupError,
    IntegrityViolationError,
    NotAReservationError,
    NotFoundError,
    NotWeekdayError,
    PastDateError,
    RoomNotFoundError,
    SlotTakenError,
    StorageError,
    TooCloseToDateError,
    ValidationError,
    WeeklyQuotaExceededError,
)
from ..domain.repositories import UserDirectory
from ..domain.values import UserId, parse_uuid
from ..infrastructure.repositories import SqlAlchemyRoomRepository, SqlAlchemySlotRecordRepository
from ..schemas import ReservationCreate, ReservationList, ReservationRead, SlotRecordRead
from ..usecases import reservations as reservation_usecase
from ..utils.audit_log import emit_audit_log

router = APIRouter(prefix="", tags=["reservations"])


@router.get("/reservations", response_model=ReservationList)
async def list_reservations(
    start: date = Query(..., description="first date, inclusive"),
    end: date = Query(..., description="last date, inclusive"),
    session: AsyncSession = Depends(get_session),
    users: UserDirectory = Depends(get_user_directory),
    user_id: UserId = Depends(get_current_user_id),
) -> ReservationList:
    return await _list(session, users, start=start, end=end, owner=None)


@router.get("/me/reservations", response_model=ReservationList)
async def list_my_reservations(
    start: date = Query(..., description="first date, inclusive"),
    end: date = Query(..., description="last date, inclusive"),
    session: AsyncSession = Depends(get_session),
    users: UserDirectory = Depends(get_user_directory),
    user_id: UserId = Depends(get_current_user_id),
) -> ReservationList:
    return await _list(session, users, start=start, end=end, owner=user_id)


async def _list(
    session: AsyncSession,
    users: UserDirectory,
    *,
    start: date,
    end: date,
    owner: str | None,
) -> ReservationList:
    record_repo = SqlAlchemySlotRecordRepository(session)
    try:
        rows = await reservation_usecase.list_reservations(record_repo, users, start=start, end=end, user_id=owner)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except (StorageError, IdentityLookupError) as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))

    return ReservationList(
        start_date=start,
        end_date=end,
        reservations=[ReservationRead.from_view(view=view, user=user) for view, user in rows],
    )


@router.post("/reservations", response_model=SlotRecordRead, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    session: AsyncSession = Depends(get_session),
    user_id: UserId = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
) -> SlotRecordRead:
    room_repo = SqlAlchemyRoomRepository(session)
    record_repo = SqlAlchemySlotRecordRepository(session)
    async with session.begin():
        try:
            record = await reservation_usecase.book_reservation(
                room_repo,
                record_repo,
                room_id=payload.room_id,
                day=payload.date,
                slot=payload.slot,
                user_id=user_id,
                now=now,
                policy=settings.policy(),
            )
        except (PastDateError, NotWeekdayError) as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
        except RoomNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="room not found")
        except SlotTakenError:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="slot already taken")
        except WeeklyQuotaExceededError:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="already reserved this week")
        except StorageError:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")
        except IntegrityViolationError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="data integrity error")

    emit_audit_log(
        action="reservation.created",
        initiator="user",
        record_id=record.id,
        room_id=record.room_id,
        day=record.date,
        slot=record.slot,
        user_id=user_id,
    )
    return SlotRecordRead.from_db(record=record)


@router.delete("/reservations/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_reservation(
    record_id: str,
    session: AsyncSession = Depends(get_session),
    user_id: UserId = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
) -> Response:
    try:
        parsed_id = parse_uuid(record_id)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    record_repo = SqlAlchemySlotRecordRepository(session)
    async with session.begin():
        try:
            view = await reservation_usecase.cancel_reservation(
                record_repo,
                record_id=parsed_id,
                user_id=user_id,
                now=now,
                policy=settings.policy(),
            )
        except NotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
        except NotAReservationError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="slot is disabled, not reserved")
        except ForbiddenError:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="not your reservation")
        except TooCloseToDateError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
        except StorageError:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")
        except IntegrityViolationError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="data integrity error")

    emit_audit_log(
        action="reservation.cancelled",
        initiator="user",
        record_id=view.record_id,
        room_id=view.room_id,
        day=view.date,
        slot=view.slot,
        user_id=user_id,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
