from starlette import status

from .api_exception import APIException


class ConnectionRequestNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Connection request not found"
    description = "The requested connection request does not exist."


class MentorNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Mentor not found"
    description = "The requested mentor does not exist."


class CannotConnectToSelfError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Cannot connect to self"
    description = "The user cannot send a connection request to themselves."


class MessageTooLongError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Message too long"
    description = "The message of the connection request is too long."


class DuplicateRequestError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Already requested"
    description = "A pending or accepted connection request already exists for this mentor."

    def __init__(self, request_id: str, request_status: str):
        super().__init__()

        self.request_id = request_id
        self.request_status = request_status
        self.detail = {"msg": self.detail, "request_id": request_id, "status": request_status}


class RequestRejectedError(DuplicateRequestError):
    detail = "Request rejected"
    description = "The mentor has rejected the previous connection request."


class AlreadyRespondedError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Already responded"
    description = "The connection request has already been accepted or rejected."
