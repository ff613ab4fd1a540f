"""Endpoints related to connection requests between mentees and mentors"""

from typing import Any

from fastapi import APIRouter, Query

from mentorship import models
from mentorship.auth import mentor_auth, user_auth
from mentorship.exceptions.auth import mentor_responses, user_responses
from mentorship.exceptions.connections import (
    AlreadyRespondedError,
    CannotConnectToSelfError,
    ConnectionRequestNotFoundError,
    DuplicateRequestError,
    MentorNotFoundError,
    MessageTooLongError,
    RequestRejectedError,
)
from mentorship.models import ConnectionStatus, Role
from mentorship.schemas.connections import (
    ConnectionRequest,
    ConnectionState,
    CreateConnectionRequest,
    RespondToRequest,
)
from mentorship.schemas.user import User
from mentorship.services import scheduling
from mentorship.services.auth import get_userinfo


router = APIRouter()


@router.get("/mentor-connections", responses=user_responses(list[ConnectionRequest]))
async def list_connection_requests(
    role: Role | None = Query(None, description="List requests received as mentor or sent as mentee"),
    status: ConnectionStatus | None = Query(None, description="Return only requests with this status"),
    user: User = user_auth,
) -> Any:
    """
    Return the connection requests of the user, oldest first.

    Mentors get the requests they received, everybody else the requests they sent, unless `role` is given.

    *Requirements:* **AUTHENTICATED**
    """

    role = role or (Role.MENTOR if user.is_mentor else Role.MENTEE)
    if role == Role.MENTOR:
        requests = models.ConnectionRequest.list_for_mentor(user.id, status)
    else:
        requests = models.ConnectionRequest.list_for_requester(user.id, status)
    return [request.serialize async for request in requests]


@router.get("/mentor-connections/pending", responses=mentor_responses(list[ConnectionRequest]))
async def list_pending_requests(user: User = mentor_auth) -> Any:
    """
    Return the pending connection requests of the mentor, oldest first.

    *Requirements:* **MENTOR**
    """

    return await scheduling.get_pending_connections_for_mentor(user.id)


@router.get("/mentor-connections/mentees", responses=mentor_responses(list[str]))
async def list_mentees(user: User = mentor_auth) -> Any:
    """
    Return the IDs of all users the mentor has accepted.

    *Requirements:* **MENTOR**
    """

    return await scheduling.get_connected_mentees(user.id)


@router.get("/mentor-connections/status/{mentor_id}", responses=user_responses(ConnectionState))
async def get_connection_status(mentor_id: str, user: User = user_auth) -> Any:
    """
    Return the status of the connection between the user and a mentor.

    *Requirements:* **AUTHENTICATED**
    """

    return ConnectionState(mentor_id=mentor_id, status=await models.ConnectionRequest.get_status(user.id, mentor_id))


@router.post(
    "/mentor-connections",
    responses=user_responses(
        ConnectionRequest,
        MentorNotFoundError,
        CannotConnectToSelfError,
        MessageTooLongError,
        DuplicateRequestError,
        RequestRejectedError,
    ),
)
async def request_connection(data: CreateConnectionRequest, user: User = user_auth) -> Any:
    """
    Send a connection request to a mentor.

    A second request while one is pending or accepted fails with `409 Already requested`, the response contains
    the ID and status of the existing request.

    The target has to be a mentor, requests to other users fail with `404 Mentor not found`.

    *Requirements:* **AUTHENTICATED**
    """

    if data.mentor_id != user.id:
        mentor = await get_userinfo(data.mentor_id)
        if mentor is None or not mentor.is_mentor:
            raise MentorNotFoundError

    request = await models.ConnectionRequest.create(user.id, data.mentor_id, data.message)
    return request.serialize


@router.patch(
    "/mentor-connections/{request_id}",
    responses=mentor_responses(ConnectionRequest, ConnectionRequestNotFoundError, AlreadyRespondedError),
)
async def respond_to_request(request_id: str, data: RespondToRequest, user: User = mentor_auth) -> Any:
    """
    Accept or reject a connection request.

    *Requirements:* **MENTOR**
    """

    request = await models.ConnectionRequest.respond(user.id, request_id, data.decision)
    return request.serialize
