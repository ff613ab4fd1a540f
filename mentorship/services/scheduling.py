"""Read models for the calendar, the session lists and the connection inbox."""

from datetime import date, datetime, time, timedelta

from .. import models
from ..models import ACTIVE_STATUSES, BookingStatus, ConnectionStatus, Role
from ..schemas.bookings import Booking
from ..schemas.calendar import GridDay, GridSlot, TimeRange, WeeklyGrid
from ..schemas.connections import ConnectionRequest
from ..schemas.slots import AvailabilitySlot


def week_start_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def free_ranges(start: datetime, end: datetime, occupied: list[tuple[datetime, datetime]]) -> list[TimeRange]:
    """Return the parts of [start, end) not covered by any of the occupied ranges."""

    free = []
    cursor = start
    for busy_start, busy_end in sorted(occupied):
        if busy_start > cursor:
            free.append(TimeRange(start=cursor, end=min(busy_start, end)))
        cursor = max(cursor, busy_end)
        if cursor >= end:
            break
    if cursor < end:
        free.append(TimeRange(start=cursor, end=end))
    return free


async def get_weekly_grid(mentor_id: str, week_start: date) -> WeeklyGrid:
    monday = week_start_of(week_start)
    first = datetime.combine(monday, time())

    slots = await models.AvailabilitySlot.list_slots(mentor_id).all()
    bookings = [
        booking
        async for booking in models.Booking.list_for(
            mentor_id, Role.MENTOR, start_after=first, start_before=first + timedelta(days=7)
        )
        if booking.status != BookingStatus.CANCELLED
    ]

    days = []
    for offset in range(7):
        day = monday + timedelta(days=offset)
        todays = [b for b in bookings if b.start.date() == day]
        placed: set[str] = set()
        grid_slots = []
        for slot in slots:
            if slot.weekday != day.weekday():
                continue

            start, end = slot.window(day)
            inside = [b for b in todays if start <= b.start and b.end <= end]
            placed.update(b.id for b in inside)
            grid_slots.append(
                GridSlot(
                    slot=AvailabilitySlot(**slot.serialize),
                    start=start,
                    end=end,
                    bookings=[Booking(**b.serialize) for b in inside],
                    free=free_ranges(start, end, [(b.start, b.end) for b in inside if b.status in ACTIVE_STATUSES]),
                )
            )

        days.append(
            GridDay(
                day=day,
                weekday=day.weekday(),
                slots=grid_slots,
                unassigned=[Booking(**b.serialize) for b in todays if b.id not in placed],
            )
        )

    return WeeklyGrid(mentor_id=mentor_id, week_start=monday, days=days)


async def _upcoming(user_id: str, role: Role, after: datetime | None) -> list[Booking]:
    return [
        Booking(**booking.serialize)
        async for booking in models.Booking.list_for(user_id, role, statuses=ACTIVE_STATUSES, start_after=after)
    ]


async def get_upcoming_for_mentor(mentor_id: str, after: datetime | None = None) -> list[Booking]:
    return await _upcoming(mentor_id, Role.MENTOR, after)


async def get_upcoming_for_mentee(mentee_id: str, after: datetime | None = None) -> list[Booking]:
    return await _upcoming(mentee_id, Role.MENTEE, after)


async def get_pending_connections_for_mentor(mentor_id: str) -> list[ConnectionRequest]:
    """Pending requests, oldest first."""

    return [
        ConnectionRequest(**request.serialize)
        async for request in models.ConnectionRequest.list_for_mentor(mentor_id, ConnectionStatus.PENDING)
    ]


async def get_connected_mentees(mentor_id: str) -> list[str]:
    return [mentee_id async for mentee_id in models.ConnectionRequest.connected_mentees(mentor_id)]
