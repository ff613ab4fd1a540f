"""Endpoints related to mentoring sessions"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Query

from mentorship import models
from mentorship.auth import user_auth
from mentorship.database import db
from mentorship.exceptions.auth import user_responses
from mentorship.exceptions.bookings import (
    BookingInPastError,
    BookingNotFoundError,
    ForbiddenError,
    InvalidTransitionError,
    NotConnectedError,
    NotesTooLongError,
    OutsideAvailabilityError,
    SlotConflictError,
)
from mentorship.exceptions.slots import InvalidRangeError
from mentorship.models import BookingStatus, Role
from mentorship.schemas.bookings import Booking, CreateBooking, SessionBooking, UpdateBooking
from mentorship.schemas.user import User
from mentorship.services import scheduling
from mentorship.services.auth import get_userinfo
from mentorship.utils.cache import clear_cache
from mentorship.utils.utc import localnow


router = APIRouter()


async def session_of(booking: models.Booking, user_id: str) -> SessionBooking:
    """Return the booking as seen by one of its participants."""

    other = booking.mentee_id if booking.role_of(user_id) == Role.MENTOR else booking.mentor_id
    info = await get_userinfo(other)
    return SessionBooking(
        **booking.serialize,
        allowed_actions=booking.allowed_actions(user_id),
        counterpart_name=info.display_name if info else None,
    )


@router.get("/mentor-bookings", responses=user_responses(list[SessionBooking]))
async def list_bookings(
    role: Role | None = Query(None, description="List sessions as mentor or as mentee"),
    status: list[BookingStatus] | None = Query(None, description="Return only sessions with one of these statuses"),
    start_after: datetime | None = Query(None, description="Return only sessions starting at or after this time"),
    start_before: datetime | None = Query(None, description="Return only sessions starting before this time"),
    user: User = user_auth,
) -> Any:
    """
    Return the sessions of the user, ordered by start time.

    Mentors get the sessions booked with them, everybody else the sessions they booked, unless `role` is given.

    *Requirements:* **AUTHENTICATED**
    """

    role = role or (Role.MENTOR if user.is_mentor else Role.MENTEE)
    return [
        await session_of(booking, user.id)
        async for booking in models.Booking.list_for(
            user.id,
            role,
            statuses=status or None,
            start_after=start_after and start_after.replace(tzinfo=None),
            start_before=start_before and start_before.replace(tzinfo=None),
        )
    ]


@router.get("/mentor-bookings/upcoming", responses=user_responses(list[Booking]))
async def list_upcoming_bookings(
    role: Role | None = Query(None, description="List sessions as mentor or as mentee"), user: User = user_auth
) -> Any:
    """
    Return the pending and confirmed sessions of the user that have not started yet.

    *Requirements:* **AUTHENTICATED**
    """

    if (role or (Role.MENTOR if user.is_mentor else Role.MENTEE)) == Role.MENTOR:
        return await scheduling.get_upcoming_for_mentor(user.id, localnow())
    return await scheduling.get_upcoming_for_mentee(user.id, localnow())


@router.post(
    "/mentor-bookings",
    responses=user_responses(
        SessionBooking,
        NotConnectedError,
        InvalidRangeError,
        BookingInPastError,
        NotesTooLongError,
        OutsideAvailabilityError,
        SlotConflictError,
    ),
)
async def book_session(data: CreateBooking, user: User = user_auth) -> Any:
    """
    Book a session with a mentor the user is connected to.

    The session has to fit into an active slot of the mentor and must not overlap with another pending or
    confirmed session. Without `end` or `duration` the session lasts until the end of the slot.

    *Requirements:* **AUTHENTICATED**
    """

    booking = await models.Booking.create(
        user.id, data.mentor_id, data.start, data.computed_end, notes=data.notes, slot_id=data.slot_id
    )
    db.after_commit(clear_cache, "calendar")
    return await session_of(booking, user.id)


@router.patch(
    "/mentor-bookings/{booking_id}",
    responses=user_responses(SessionBooking, BookingNotFoundError, InvalidTransitionError, ForbiddenError),
)
async def update_booking(booking_id: str, data: UpdateBooking, user: User = user_auth) -> Any:
    """
    Change the status of a session.

    Only the mentor can confirm a session or mark it as completed or no-show, both participants can cancel it.

    *Requirements:* **PARTICIPANT**
    """

    booking = await models.Booking.update_status(user.id, booking_id, data.status)
    db.after_commit(clear_cache, "calendar")
    return await session_of(booking, user.id)
