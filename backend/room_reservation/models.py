from __future__ import annotations

from dataclasses import dataclass
import datetime
from enum import StrEnum
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import Date, String, Uuid


class Base(DeclarativeBase):
    pass


class Slot(StrEnum):
    """Class periods of a weekday, in order."""

    FIRST = "first"
    SECOND = "second"
    THIRD = "third"
    FOURTH = "fourth"
    FIFTH = "fifth"

    @property
    def ordinal(self) -> int:
        return list(Slot).index(self) + 1


class RecordStatus(StrEnum):
    RESERVED = "reserved"
    DISABLED = "disabled"


def _str_enum(enum_cls: type[StrEnum], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda e: [member.value for member in e],
        native_enum=False,
        length=16,
    )


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(20), nullable=False)

    slot_records: Mapped[list["SlotRecord"]] = relationship(back_populates="room")


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        # One reservation per user per Monday-Friday window, enforced at commit time.
        UniqueConstraint("user_id", "week_start", name="uq_reservations_user_week"),
        Index("idx_reservations_user", "user_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    week_start: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    slot_record: Mapped[Optional["SlotRecord"]] = relationship(back_populates="reservation")


class SlotRecord(Base):
    __tablename__ = "slot_records"
    __table_args__ = (
        UniqueConstraint("room_id", "date", "slot", name="uq_slot_records_room_date_slot"),
        UniqueConstraint("reservation_id", name="uq_slot_records_reservation"),
        CheckConstraint(
            "(status = 'reserved' AND reservation_id IS NOT NULL)"
            " OR (status = 'disabled' AND reservation_id IS NULL)",
            name="chk_slot_records_status_reservation",
        ),
        Index("idx_slot_records_date", "date"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    room_id: Mapped[UUID] = mapped_column(ForeignKey("rooms.id"), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    slot: Mapped[Slot] = mapped_column(_str_enum(Slot, "slot"), nullable=False)
    status: Mapped[RecordStatus] = mapped_column(_str_enum(RecordStatus, "record_status"), nullable=False)
    reservation_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("reservations.id"), nullable=True)

    room: Mapped["Room"] = relationship(back_populates="slot_records")
    reservation: Mapped[Optional["Reservation"]] = relationship(back_populates="slot_record")


@dataclass(frozen=True)
class SlotRecordView:
    """A slot record joined with its room name and, when reserved, its owner."""

    record_id: UUID
    room_id: UUID
    room_name: str
    date: datetime.date
    slot: Slot
    status: RecordStatus
    user_id: Optional[str]
