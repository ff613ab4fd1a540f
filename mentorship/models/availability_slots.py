from __future__ import annotations

import enum
from datetime import date, datetime, time
from typing import Any, Iterable, NamedTuple
from uuid import uuid4

from sqlalchemy import Boolean, SmallInteger, String, Time, update
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, Stream, UTCDateTime, db, filter_by
from ..exceptions.slots import InvalidRangeError, InvalidWeekdayError, OverlapError, SlotNotFoundError
from ..logger import get_logger
from ..utils.utc import utcnow
from .schedule_locks import ScheduleLock


logger = get_logger(__name__)


class Weekday(enum.IntEnum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


class SlotWindow(NamedTuple):
    weekday: Weekday | int | str
    start: time
    end: time


class AvailabilitySlot(Base):
    __tablename__ = "mentoring_availability_slots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    mentor_id: Mapped[str] = mapped_column(String(36), index=True)
    weekday: Mapped[int] = mapped_column(SmallInteger)
    start: Mapped[time] = mapped_column(Time)
    end: Mapped[time] = mapped_column(Time)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime)

    @property
    def duration(self) -> int:
        return minutes(self.end) - minutes(self.start)

    @property
    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "mentor_id": self.mentor_id,
            "weekday": self.weekday,
            "day": Weekday(self.weekday).name.lower(),
            "start": self.start,
            "end": self.end,
            "active": self.active,
        }

    def window(self, day: date) -> tuple[datetime, datetime]:
        """Return the concrete window of this slot on the given date."""

        return datetime.combine(day, self.start), datetime.combine(day, self.end)

    def contains(self, start: datetime, end: datetime) -> bool:
        if start.weekday() != self.weekday or start.date() != end.date():
            return False
        return self.start <= start.time() and end.time() <= self.end

    @classmethod
    async def create(cls, mentor_id: str, weekday: Weekday | int | str, start: time, end: time) -> AvailabilitySlot:
        weekday = parse_weekday(weekday)
        check_range(start, end)

        await ScheduleLock.acquire(mentor_id)
        if other := await cls.find_overlap(mentor_id, weekday, start, end):
            raise OverlapError(other.id)

        slot = await db.add(
            cls(
                id=str(uuid4()),
                mentor_id=mentor_id,
                weekday=int(weekday),
                start=start,
                end=end,
                active=True,
                created_at=utcnow(),
            )
        )
        logger.info(f"mentor {mentor_id} added slot {slot.id} ({weekday.name.lower()} {start}-{end})")
        return slot

    @classmethod
    async def remove(cls, mentor_id: str, slot_id: str) -> bool:
        slot = await db.get(cls, id=slot_id, mentor_id=mentor_id)
        if slot is None:
            return False

        await slot._delete()
        logger.info(f"mentor {mentor_id} removed slot {slot_id}")
        return True

    @classmethod
    def list_slots(
        cls, mentor_id: str, weekday: Weekday | int | str | None = None, include_inactive: bool = False
    ) -> Stream[AvailabilitySlot]:
        query = filter_by(cls, mentor_id=mentor_id)
        if not include_inactive:
            query = query.filter_by(active=True)
        if weekday is not None:
            query = query.filter_by(weekday=int(parse_weekday(weekday)))
        return Stream(query.order_by(cls.weekday, cls.start))

    @classmethod
    async def replace_week(cls, mentor_id: str, windows: Iterable[SlotWindow]) -> list[AvailabilitySlot]:
        """Replace the complete weekly template of a mentor. Nothing is changed if the new set is invalid."""

        new = [SlotWindow(parse_weekday(w.weekday), w.start, w.end) for w in windows]
        for i, window in enumerate(new):
            check_range(window.start, window.end)
            for other in new[i + 1 :]:
                if window.weekday == other.weekday and overlaps(window.start, window.end, other.start, other.end):
                    raise OverlapError

        await ScheduleLock.acquire(mentor_id)
        for old in await db.all(filter_by(cls, mentor_id=mentor_id)):
            await old._delete()

        now = utcnow()
        slots = [
            await db.add(
                cls(
                    id=str(uuid4()),
                    mentor_id=mentor_id,
                    weekday=int(window.weekday),
                    start=window.start,
                    end=window.end,
                    active=True,
                    created_at=now,
                )
            )
            for window in sorted(new, key=lambda w: (w.weekday, w.start))
        ]
        logger.info(f"mentor {mentor_id} replaced weekly availability with {len(slots)} slots")
        return slots

    @classmethod
    async def set_active(cls, mentor_id: str, slot_id: str, active: bool) -> AvailabilitySlot:
        await ScheduleLock.acquire(mentor_id)
        slot = await db.get(cls, id=slot_id, mentor_id=mentor_id)
        if slot is None:
            raise SlotNotFoundError

        if active and not slot.active:
            if other := await cls.find_overlap(mentor_id, slot.weekday, slot.start, slot.end, exclude=slot.id):
                raise OverlapError(other.id)

        slot.active = active
        return slot

    @classmethod
    async def find_overlap(
        cls, mentor_id: str, weekday: int, start: time, end: time, exclude: str | None = None
    ) -> AvailabilitySlot | None:
        query = filter_by(cls, mentor_id=mentor_id, weekday=int(weekday), active=True).where(
            cls.start < end, cls.end > start
        )
        if exclude:
            query = query.where(cls.id != exclude)
        return await db.first(query.limit(1))

    @classmethod
    async def find_containing(
        cls, mentor_id: str, start: datetime, end: datetime | None = None, slot_id: str | None = None
    ) -> AvailabilitySlot | None:
        """
        Find the active slot of the mentor covering a concrete time range.

        Without `end` only the start has to lie inside the window, the range then runs until the end of the slot.
        """

        query = filter_by(cls, mentor_id=mentor_id, weekday=start.weekday(), active=True).where(
            cls.start <= start.time()
        )
        if end is None:
            query = query.where(cls.end > start.time())
        elif start.date() != end.date():
            return None
        else:
            query = query.where(cls.end >= end.time())
        if slot_id:
            query = query.filter_by(id=slot_id)
        return await db.first(query.order_by(cls.start).limit(1))

    async def _delete(self) -> None:
        from .bookings import Booking

        # bookings carry their own date and time and stay valid without the slot
        await db.exec(
            update(Booking)
            .where(Booking.slot_id == self.id)
            .values(slot_id=None)
            .execution_options(synchronize_session="fetch")
        )
        await db.delete(self)


def parse_weekday(value: Weekday | int | str) -> Weekday:
    """Accept a weekday as number (0=Monday) or as (case-insensitive) day name."""

    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            try:
                return Weekday[value.upper()]
            except KeyError:
                raise InvalidWeekdayError
        value = int(value)

    try:
        return Weekday(value)
    except ValueError:
        raise InvalidWeekdayError


def minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def overlaps(a_start: Any, a_end: Any, b_start: Any, b_end: Any) -> bool:
    """Two half-open ranges overlap if they intersect by more than zero duration."""

    return bool(a_start < b_end and b_start < a_end)


def check_range(start: time, end: time) -> None:
    if start.second or start.microsecond or end.second or end.microsecond:
        raise InvalidRangeError("times must be given with minute precision")
    if start >= end:
        raise InvalidRangeError("start must be before end")
