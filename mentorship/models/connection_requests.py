from __future__ import annotations

import enum
from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import Enum, String, Text, update
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, Stream, UTCDateTime, db, filter_by, select
from ..exceptions.connections import (
    AlreadyRespondedError,
    CannotConnectToSelfError,
    ConnectionRequestNotFoundError,
    DuplicateRequestError,
    MessageTooLongError,
    RequestRejectedError,
)
from ..logger import get_logger
from ..settings import settings
from ..utils.utc import utcnow
from .schedule_locks import ScheduleLock


logger = get_logger(__name__)


class ConnectionStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Decision(enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class ConnectionRequest(Base):
    __tablename__ = "mentoring_connection_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    requester_id: Mapped[str] = mapped_column(String(36), index=True)
    mentor_id: Mapped[str] = mapped_column(String(36), index=True)
    message: Mapped[str] = mapped_column(Text)
    status: Mapped[ConnectionStatus] = mapped_column(Enum(ConnectionStatus))
    created_at: Mapped[datetime] = mapped_column(UTCDateTime)
    responded_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    @property
    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "requester_id": self.requester_id,
            "mentor_id": self.mentor_id,
            "message": self.message,
            "status": self.status,
            "created_at": self.created_at,
            "responded_at": self.responded_at,
        }

    @classmethod
    async def create(cls, requester_id: str, mentor_id: str, message: str = "") -> ConnectionRequest:
        if requester_id == mentor_id:
            raise CannotConnectToSelfError
        if len(message) > settings.connection_message_max_length:
            raise MessageTooLongError

        await ScheduleLock.acquire(mentor_id)

        if active := await cls.find_active(requester_id, mentor_id):
            raise DuplicateRequestError(active.id, active.status.value)

        if not settings.allow_rerequest_after_rejection:
            rejected = await db.get(
                cls, requester_id=requester_id, mentor_id=mentor_id, status=ConnectionStatus.REJECTED
            )
            if rejected:
                raise RequestRejectedError(rejected.id, rejected.status.value)

        request = await db.add(
            cls(
                id=str(uuid4()),
                requester_id=requester_id,
                mentor_id=mentor_id,
                message=message,
                status=ConnectionStatus.PENDING,
                created_at=utcnow(),
                responded_at=None,
            )
        )
        logger.info(f"user {requester_id} requested a connection to mentor {mentor_id}")
        return request

    @classmethod
    async def respond(cls, mentor_id: str, request_id: str, decision: Decision | str) -> ConnectionRequest:
        decision = Decision(decision)
        request = await db.get(cls, id=request_id, mentor_id=mentor_id)
        if request is None:
            raise ConnectionRequestNotFoundError
        if request.status != ConnectionStatus.PENDING:
            raise AlreadyRespondedError

        status = ConnectionStatus.ACCEPTED if decision == Decision.ACCEPT else ConnectionStatus.REJECTED
        result = await db.exec(
            update(cls)
            .where(cls.id == request.id, cls.status == ConnectionStatus.PENDING)
            .values(status=status, responded_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:  # type: ignore[attr-defined]
            raise AlreadyRespondedError

        await db.refresh(request)
        logger.info(f"mentor {mentor_id} {status.value} connection request {request_id}")
        return request

    @classmethod
    async def find_active(cls, requester_id: str, mentor_id: str) -> ConnectionRequest | None:
        """Return the pending or accepted request of the pair. There is at most one."""

        return await db.first(
            filter_by(cls, requester_id=requester_id, mentor_id=mentor_id)
            .where(cls.status != ConnectionStatus.REJECTED)
            .limit(1)
        )

    @classmethod
    async def get_status(cls, requester_id: str, mentor_id: str) -> ConnectionStatus | None:
        if active := await cls.find_active(requester_id, mentor_id):
            return active.status
        if await db.exists(filter_by(cls, requester_id=requester_id, mentor_id=mentor_id)):
            return ConnectionStatus.REJECTED
        return None

    @classmethod
    def list_for_mentor(cls, mentor_id: str, status: ConnectionStatus | None = None) -> Stream[ConnectionRequest]:
        query = filter_by(cls, mentor_id=mentor_id)
        if status is not None:
            query = query.filter_by(status=status)
        return Stream(query.order_by(cls.created_at, cls.id))

    @classmethod
    def list_for_requester(
        cls, requester_id: str, status: ConnectionStatus | None = None
    ) -> Stream[ConnectionRequest]:
        query = filter_by(cls, requester_id=requester_id)
        if status is not None:
            query = query.filter_by(status=status)
        return Stream(query.order_by(cls.created_at, cls.id))

    @classmethod
    def connected_mentees(cls, mentor_id: str) -> Stream[str]:
        return Stream(
            select(cls.requester_id)
            .where(cls.mentor_id == mentor_id, cls.status == ConnectionStatus.ACCEPTED)
            .order_by(cls.responded_at, cls.requester_id)
        )
