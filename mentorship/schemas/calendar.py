from datetime import date, datetime

from pydantic import BaseModel, Field

from .bookings import Booking
from .slots import AvailabilitySlot


class TimeRange(BaseModel):
    start: datetime = Field(description="Start of the range")
    end: datetime = Field(description="End of the range")


class GridSlot(BaseModel):
    slot: AvailabilitySlot = Field(description="The weekly slot")
    start: datetime = Field(description="Start of the slot on this day")
    end: datetime = Field(description="End of the slot on this day")
    bookings: list[Booking] = Field(description="Bookings inside the slot, cancelled ones excluded")
    free: list[TimeRange] = Field(description="Parts of the slot not taken by pending or confirmed bookings")


class GridDay(BaseModel):
    day: date = Field(description="The day")
    weekday: int = Field(description="Weekday (0=Monday, 1=Tuesday, ...)")
    slots: list[GridSlot] = Field(description="Active slots of the day")
    unassigned: list[Booking] = Field(description="Bookings on this day outside of all current slots")


class WeeklyGrid(BaseModel):
    mentor_id: str = Field(description="ID of the mentor")
    week_start: date = Field(description="Monday of the week")
    days: list[GridDay] = Field(description="The seven days of the week")
