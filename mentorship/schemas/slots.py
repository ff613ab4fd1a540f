import json
from datetime import time
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ..exceptions.slots import InvalidWeekdayError
from ..models.availability_slots import parse_weekday


class AvailabilitySlot(BaseModel):
    id: str = Field(description="Slot ID")
    mentor_id: str = Field(description="ID of the mentor who owns the slot")
    weekday: int = Field(description="Weekday of the slot (0=Monday, 1=Tuesday, ...)")
    day: str = Field(description="Name of the weekday")
    start: time = Field(description="Start time of the slot (wall-clock)")
    end: time = Field(description="End time of the slot (wall-clock)")
    active: bool = Field(description="Whether the slot can be booked")


class CreateSlot(BaseModel):
    weekday: int = Field(
        validation_alias=AliasChoices("weekday", "day_of_week", "dayOfWeek"),
        description="Weekday of the slot (0=Monday, 1=Tuesday, ...) or the name of the day",
    )
    start: time = Field(
        validation_alias=AliasChoices("start", "start_time", "startTime"), description="Start time of the slot"
    )
    end: time = Field(validation_alias=AliasChoices("end", "end_time", "endTime"), description="End time of the slot")

    @field_validator("weekday", mode="before")
    @classmethod
    def _parse_weekday(cls, value: Any) -> int:
        try:
            return int(parse_weekday(value))
        except InvalidWeekdayError:
            raise ValueError("weekday must be 0-6 or the name of a day")


class ReplaceWeek(BaseModel):
    slots: list[CreateSlot] = Field(description="The complete weekly availability")

    @field_validator("slots", mode="before")
    @classmethod
    def _parse_slots(cls, value: Any) -> Any:
        # some clients send the availability as a json encoded string
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                raise ValueError("slots must be a list or a json encoded list")
        return value


class UpdateSlot(BaseModel):
    active: bool = Field(description="Whether the slot can be booked")
