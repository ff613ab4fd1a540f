from datetime import datetime, timedelta
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from ..models.bookings import BookingStatus
from ..settings import settings


class Booking(BaseModel):
    id: str = Field(description="Booking ID")
    mentor_id: str = Field(description="ID of the mentor")
    mentee_id: str = Field(description="ID of the mentee")
    slot_id: str | None = Field(description="ID of the slot the booking was made in")
    start: datetime = Field(description="Start of the session (wall-clock)")
    end: datetime = Field(description="End of the session (wall-clock)")
    duration: int = Field(description="Duration of the session in minutes")
    status: BookingStatus = Field(description="Status of the booking")
    notes: str | None = Field(description="Notes of the mentee")
    created_at: datetime = Field(description="Time the booking was created")


class SessionBooking(Booking):
    allowed_actions: list[BookingStatus] = Field(description="Statuses the user may move this booking to")
    counterpart_name: str | None = Field(None, description="Display name of the other participant")


class CreateBooking(BaseModel):
    mentor_id: str = Field(
        validation_alias=AliasChoices("mentor_id", "mentorId", "mentorUserId"), description="ID of the mentor"
    )
    start: datetime = Field(
        validation_alias=AliasChoices("start", "scheduled_date", "scheduledDate"),
        description="Start of the session (wall-clock, a timezone offset is ignored)",
    )
    end: datetime | None = Field(None, description="End of the session, defaults to the end of the slot")
    duration: int | None = Field(None, gt=0, lt=24 * 60, description="Duration of the session in minutes")
    slot_id: str | None = Field(
        None, validation_alias=AliasChoices("slot_id", "slotId"), description="Book inside this slot only"
    )
    notes: str | None = Field(None, max_length=settings.booking_notes_max_length, description="Notes for the mentor")

    @field_validator("start", "end")
    @classmethod
    def _wall_clock(cls, value: datetime | None) -> datetime | None:
        return value.replace(tzinfo=None) if value else value

    @model_validator(mode="before")
    @classmethod
    def _check_end(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("end") is not None and data.get("duration") is not None:
            raise ValueError("end and duration are mutually exclusive")
        return data

    @property
    def computed_end(self) -> datetime | None:
        if self.duration is not None:
            return self.start + timedelta(minutes=self.duration)
        return self.end


class UpdateBooking(BaseModel):
    status: BookingStatus = Field(description="New status of the booking")
