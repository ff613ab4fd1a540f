"""Endpoints related to the weekly availability of mentors"""

from typing import Any

from fastapi import APIRouter, Query

from mentorship import models
from mentorship.auth import mentor_auth, user_auth
from mentorship.database import db
from mentorship.exceptions.auth import PermissionDeniedError, mentor_responses, user_responses
from mentorship.exceptions.slots import InvalidRangeError, InvalidWeekdayError, OverlapError, SlotNotFoundError
from mentorship.schemas.slots import AvailabilitySlot, CreateSlot, ReplaceWeek, UpdateSlot
from mentorship.schemas.user import User
from mentorship.utils.cache import clear_cache, redis_cached


router = APIRouter()


@redis_cached("slots", "mentor_id", "weekday", "include_inactive")
async def _list_slots(mentor_id: str, weekday: str | None, include_inactive: bool) -> list[AvailabilitySlot]:
    return [
        AvailabilitySlot(**slot.serialize)
        async for slot in models.AvailabilitySlot.list_slots(mentor_id, weekday, include_inactive)
    ]


def _clear_caches() -> None:
    db.after_commit(clear_cache, "slots")
    db.after_commit(clear_cache, "calendar")


@router.get(
    "/mentor-slots/{mentor_id}",
    responses=user_responses(list[AvailabilitySlot], InvalidWeekdayError, PermissionDeniedError),
)
async def list_slots(
    mentor_id: str,
    weekday: str | None = Query(None, description="Return only slots on this weekday (0-6 or name of the day)"),
    include_inactive: bool = Query(False, description="Also return deactivated slots (owner only)"),
    user: User = user_auth,
) -> Any:
    """
    Return the weekly availability of a mentor, ordered by weekday and start time.

    *Requirements:* **AUTHENTICATED** (**SELF** or **ADMIN** for `include_inactive`)
    """

    if include_inactive and user.id != mentor_id and not user.admin:
        raise PermissionDeniedError

    return await _list_slots(mentor_id, weekday, include_inactive)


@router.post(
    "/mentor-slots",
    responses=mentor_responses(AvailabilitySlot, InvalidRangeError, InvalidWeekdayError, OverlapError),
)
async def add_slot(data: CreateSlot, user: User = mentor_auth) -> Any:
    """
    Add a weekly slot for the mentor.

    *Requirements:* **MENTOR**
    """

    slot = await models.AvailabilitySlot.create(user.id, data.weekday, data.start, data.end)
    _clear_caches()
    return slot.serialize


@router.put(
    "/mentor-slots",
    responses=mentor_responses(list[AvailabilitySlot], InvalidRangeError, InvalidWeekdayError, OverlapError),
)
async def replace_week(data: ReplaceWeek, user: User = mentor_auth) -> Any:
    """
    Replace the complete weekly availability of the mentor.

    Existing bookings are kept even if their slot disappears.

    *Requirements:* **MENTOR**
    """

    slots = await models.AvailabilitySlot.replace_week(
        user.id, [models.SlotWindow(slot.weekday, slot.start, slot.end) for slot in data.slots]
    )
    _clear_caches()
    return [slot.serialize for slot in slots]


@router.patch(
    "/mentor-slots/{slot_id}", responses=mentor_responses(AvailabilitySlot, SlotNotFoundError, OverlapError)
)
async def update_slot(slot_id: str, data: UpdateSlot, user: User = mentor_auth) -> Any:
    """
    Activate or deactivate a slot of the mentor.

    *Requirements:* **MENTOR**
    """

    slot = await models.AvailabilitySlot.set_active(user.id, slot_id, data.active)
    _clear_caches()
    return slot.serialize


@router.delete("/mentor-slots/{slot_id}", responses=mentor_responses(bool))
async def delete_slot(slot_id: str, user: User = mentor_auth) -> Any:
    """
    Delete a slot of the mentor. Returns whether a slot was deleted.

    Bookings made in this slot are not affected.

    *Requirements:* **MENTOR**
    """

    if deleted := await models.AvailabilitySlot.remove(user.id, slot_id):
        _clear_caches()
    return deleted
