from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ..models.connection_requests import ConnectionStatus, Decision
from ..settings import settings


class ConnectionRequest(BaseModel):
    id: str = Field(description="Connection request ID")
    requester_id: str = Field(description="ID of the user who sent the request")
    mentor_id: str = Field(description="ID of the mentor")
    message: str = Field(description="Message to the mentor")
    status: ConnectionStatus = Field(description="Status of the request")
    created_at: datetime = Field(description="Time the request was sent")
    responded_at: datetime | None = Field(description="Time the mentor responded")


class CreateConnectionRequest(BaseModel):
    mentor_id: str = Field(
        validation_alias=AliasChoices("mentor_id", "mentorId", "mentor"), description="ID of the mentor"
    )
    message: str = Field("", max_length=settings.connection_message_max_length, description="Message to the mentor")


class RespondToRequest(BaseModel):
    decision: Decision = Field(
        validation_alias=AliasChoices("decision", "status"), description="Accept or reject the request"
    )

    @field_validator("decision", mode="before")
    @classmethod
    def _parse_decision(cls, value: Any) -> Any:
        return {"accepted": "accept", "rejected": "reject"}.get(value, value)


class ConnectionState(BaseModel):
    mentor_id: str = Field(description="ID of the mentor")
    status: ConnectionStatus | None = Field(description="Status of the connection, null if never requested")
