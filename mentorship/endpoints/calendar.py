"""Endpoints related to the calendar of mentors and the iCalendar feed"""

import hmac
from datetime import date
from typing import Any

from fastapi import APIRouter, Path, Query, Response

from mentorship import models
from mentorship.auth import user_auth
from mentorship.exceptions.auth import user_responses
from mentorship.models import ACTIVE_STATUSES, Role
from mentorship.schemas.calendar import WeeklyGrid
from mentorship.schemas.user import User
from mentorship.services import scheduling
from mentorship.services.ics import create_ics
from mentorship.settings import settings
from mentorship.utils.cache import redis_cached
from mentorship.utils.utc import localnow

from .bookings import session_of


router = APIRouter()


def ics_token(user_id: str) -> str:
    return f"{user_id}_" + hmac.digest(settings.calendar_secret.encode(), user_id.encode(), "sha256").hex()


@redis_cached("calendar", "mentor_id", "week_start")
async def _weekly_grid(mentor_id: str, week_start: date) -> WeeklyGrid:
    return await scheduling.get_weekly_grid(mentor_id, week_start)


@router.get("/calendar/ics-token", responses=user_responses(str))
async def get_ics_token(user: User = user_auth) -> Any:
    """
    Return the token of the user for the iCalendar feed at `/calendar/{token}/sessions.ics`.

    *Requirements:* **AUTHENTICATED**
    """

    return ics_token(user.id)


@router.get("/calendar/{mentor_id}", responses=user_responses(WeeklyGrid))
async def get_weekly_grid(
    mentor_id: str,
    week_start: date | None = Query(None, description="Any day of the week to show, defaults to the current week"),
    user: User = user_auth,
) -> Any:
    """
    Return the availability and the sessions of a mentor for one week, starting on Monday.

    Only the mentor (and admins) can see all sessions, other users only see their own sessions. The free
    ranges always take every pending and confirmed session into account.

    *Requirements:* **AUTHENTICATED**
    """

    grid = await _weekly_grid(mentor_id, scheduling.week_start_of(week_start or localnow().date()))
    if user.id == mentor_id or user.admin:
        return grid

    for day in grid.days:
        day.unassigned = [b for b in day.unassigned if b.mentee_id == user.id]
        for slot in day.slots:
            slot.bookings = [b for b in slot.bookings if b.mentee_id == user.id]
    return grid


@router.get("/calendar/{token}/sessions.ics")
async def download_ics(token: str = Path(pattern=r"^[^_]+_[^_]+$")) -> Any:
    """Return the pending and confirmed sessions of the owner of the token as an iCalendar file."""

    user_id, _ = token.split("_")
    if not hmac.compare_digest(token, ics_token(user_id)):
        return Response(status_code=401)

    sessions = []
    for role in Role:
        async for booking in models.Booking.list_for(user_id, role, statuses=ACTIVE_STATUSES):
            sessions.append(await session_of(booking, user_id))
    sessions.sort(key=lambda s: s.start)

    return Response(create_ics(sessions), media_type="text/calendar")
