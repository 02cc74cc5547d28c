from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_admin_user_id, get_current_user_id, get_session
from ..domain.errors import IntegrityViolationError, RoomNotFoundError, SlotTakenError, StorageError, ValidationError
from ..domain.values import UserId, parse_slot, parse_uuid
from ..infrastructure.repositories import SqlAlchemyRoomRepository, SqlAlchemySlotRecordRepository
from ..schemas import DisableRequest, RoomRead, SlotRecordRead
from ..usecases import rooms as room_usecase
from ..utils.audit_log import emit_audit_log

router = APIRouter(prefix="/rooms", tags=["rooms"], dependencies=[Depends(get_current_user_id)])


@router.get("", response_model=List[RoomRead])
async def list_rooms(session: AsyncSession = Depends(get_session)) -> list[RoomRead]:
    room_repo = SqlAlchemyRoomRepository(session)
    try:
        rooms = await room_usecase.list_rooms(room_repo)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")
    return [RoomRead.from_db(room=room) for room in rooms]


@router.get("/available", response_model=List[RoomRead])
async def list_available_rooms(
    day: date = Query(..., alias="date"),
    slot: str = Query(...),
    session: AsyncSession = Depends(get_session),
) -> list[RoomRead]:
    try:
        parsed_slot = parse_slot(slot)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    room_repo = SqlAlchemyRoomRepository(session)
    try:
        rooms = await room_usecase.list_available_rooms(room_repo, day=day, slot=parsed_slot)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")
    return [RoomRead.from_db(room=room) for room in rooms]


@router.post("/{room_id}/disabled", response_model=List[SlotRecordRead], status_code=status.HTTP_201_CREATED)
async def disable_room_slots(
    room_id: str,
    payload: DisableRequest,
    session: AsyncSession = Depends(get_session),
    admin_id: UserId = Depends(get_admin_user_id),
) -> list[SlotRecordRead]:
    try:
        parsed_room_id = parse_uuid(room_id)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    room_repo = SqlAlchemyRoomRepository(session)
    record_repo = SqlAlchemySlotRecordRepository(session)
    async with session.begin():
        try:
            if payload.slot is None:
                records = await room_usecase.disable_day(room_repo, record_repo, room_id=parsed_room_id, day=payload.date)
            else:
                record = await room_usecase.disable_slot(
                    room_repo,
                    record_repo,
                    room_id=parsed_room_id,
                    day=payload.date,
                    slot=payload.slot,
                )
                records = [record]
        except RoomNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="room not found")
        except SlotTakenError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
        except StorageError:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")
        except IntegrityViolationError:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="data integrity error")

    for record in records:
        emit_audit_log(
            action="slot.disabled",
            initiator="admin",
            record_id=record.id,
            room_id=record.room_id,
            day=record.date,
            slot=record.slot,
            user_id=admin_id,
        )
    return [SlotRecordRead.from_db(record=record) for record in records]
