from __future__ import annotations

import enum
from datetime import datetime, timedelta
from typing import Any, Iterable
from uuid import uuid4

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, update
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, Stream, UTCDateTime, db, select
from ..exceptions.bookings import (
    BookingInPastError,
    BookingNotFoundError,
    ForbiddenError,
    InvalidTransitionError,
    NotConnectedError,
    NotesTooLongError,
    OutsideAvailabilityError,
    SlotConflictError,
)
from ..exceptions.slots import InvalidRangeError
from ..logger import get_logger
from ..settings import settings
from ..utils.utc import localnow, utcnow
from .availability_slots import AvailabilitySlot
from .connection_requests import ConnectionRequest, ConnectionStatus
from .schedule_locks import ScheduleLock


logger = get_logger(__name__)


class BookingStatus(enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"

    @property
    def terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class Role(enum.Enum):
    MENTOR = "mentor"
    MENTEE = "mentee"


ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW})

# (from, to) -> sides allowed to apply the transition
TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[Role]] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): frozenset({Role.MENTOR}),
    (BookingStatus.PENDING, BookingStatus.CANCELLED): frozenset({Role.MENTOR, Role.MENTEE}),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): frozenset({Role.MENTOR, Role.MENTEE}),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): frozenset({Role.MENTOR}),
    (BookingStatus.CONFIRMED, BookingStatus.NO_SHOW): frozenset({Role.MENTOR}),
}


class Booking(Base):
    __tablename__ = "mentoring_bookings"
    __table_args__ = (Index("ix_mentoring_bookings_mentor_start", "mentor_id", "start"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    mentor_id: Mapped[str] = mapped_column(String(36))
    mentee_id: Mapped[str] = mapped_column(String(36), index=True)
    slot_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("mentoring_availability_slots.id", ondelete="SET NULL"), nullable=True
    )
    start: Mapped[datetime] = mapped_column(DateTime)
    end: Mapped[datetime] = mapped_column(DateTime)
    status: Mapped[BookingStatus] = mapped_column(Enum(BookingStatus))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime)

    @property
    def duration(self) -> int:
        return int((self.end - self.start).total_seconds()) // 60

    @property
    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "mentor_id": self.mentor_id,
            "mentee_id": self.mentee_id,
            "slot_id": self.slot_id,
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
            "status": self.status,
            "notes": self.notes,
            "created_at": self.created_at,
        }

    def role_of(self, user_id: str) -> Role | None:
        if user_id == self.mentor_id:
            return Role.MENTOR
        if user_id == self.mentee_id:
            return Role.MENTEE
        return None

    def allowed_actions(self, user_id: str) -> list[BookingStatus]:
        """Return the statuses the given participant may move this booking to."""

        role = self.role_of(user_id)
        return [new for (old, new), roles in TRANSITIONS.items() if old == self.status and role in roles]

    @classmethod
    async def create(
        cls,
        mentee_id: str,
        mentor_id: str,
        start: datetime,
        end: datetime | None = None,
        notes: str | None = None,
        slot_id: str | None = None,
    ) -> Booking:
        """
        Book a session with a mentor.

        The mentee needs an accepted connection to the mentor and the session has to fit into one active slot
        of the mentor. Without `end` the session lasts until the end of that slot. The availability and
        conflict checks run while holding the mentor's schedule lock, so the insert cannot race another
        booking of the same mentor. The lock is taken before the first read of the transaction.
        """

        if notes is not None and len(notes) > settings.booking_notes_max_length:
            raise NotesTooLongError

        if end is not None and end <= start:
            raise InvalidRangeError("end must be after start")

        if start < localnow() + timedelta(minutes=settings.booking_min_lead_minutes):
            raise BookingInPastError

        await ScheduleLock.acquire(mentor_id)

        if await ConnectionRequest.get_status(mentee_id, mentor_id) != ConnectionStatus.ACCEPTED:
            raise NotConnectedError

        slot = await AvailabilitySlot.find_containing(mentor_id, start, end, slot_id)
        if slot is None:
            raise OutsideAvailabilityError
        if end is None:
            end = datetime.combine(start.date(), slot.end)

        conflict: Booking | None = await db.first(
            select(cls)
            .where(cls.mentor_id == mentor_id, cls.status.in_([*ACTIVE_STATUSES]))
            .where(cls.start < end, cls.end > start)
            .limit(1)
        )
        if conflict:
            logger.info(f"booking of mentor {mentor_id} at {start} conflicts with booking {conflict.id}")
            raise SlotConflictError(conflict.id)

        now = utcnow()
        booking = await db.add(
            cls(
                id=str(uuid4()),
                mentor_id=mentor_id,
                mentee_id=mentee_id,
                slot_id=slot.id,
                start=start,
                end=end,
                status=BookingStatus.PENDING,
                notes=notes,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(f"user {mentee_id} booked mentor {mentor_id} from {start} to {end} ({booking.id})")
        return booking

    @classmethod
    async def update_status(cls, actor_id: str, booking_id: str, status: BookingStatus | str) -> Booking:
        booking = await db.get(cls, id=booking_id)
        if booking is None or (role := booking.role_of(actor_id)) is None:
            raise BookingNotFoundError

        await booking.transition(role, BookingStatus(status))
        return booking

    async def transition(self, role: Role, status: BookingStatus) -> None:
        current = self.status
        if current.terminal or (current, status) not in TRANSITIONS:
            raise InvalidTransitionError(current.value, status.value)
        if role not in TRANSITIONS[(current, status)]:
            raise ForbiddenError

        # compare-and-set on the prior status, a concurrent transition from the same state loses
        result = await db.exec(
            update(Booking)
            .where(Booking.id == self.id, Booking.status == current)
            .values(status=status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:  # type: ignore[attr-defined]
            raise InvalidTransitionError(current.value, status.value)

        await db.refresh(self)
        logger.info(f"{role.value} moved booking {self.id} from {current.value} to {status.value}")

    @classmethod
    def list_for(
        cls,
        user_id: str,
        role: Role | str,
        statuses: Iterable[BookingStatus] | None = None,
        start_after: datetime | None = None,
        start_before: datetime | None = None,
    ) -> Stream[Booking]:
        column = cls.mentor_id if Role(role) == Role.MENTOR else cls.mentee_id
        query = select(cls).where(column == user_id)
        if statuses is not None:
            query = query.where(cls.status.in_([*statuses]))
        if start_after is not None:
            query = query.where(cls.start >= start_after)
        if start_before is not None:
            query = query.where(cls.start < start_before)
        return Stream(query.order_by(cls.start, cls.created_at))
