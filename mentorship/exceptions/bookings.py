from starlette import status

from .api_exception import APIException


class BookingNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Booking not found"
    description = "The requested booking does not exist."


class NotConnectedError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Not connected"
    description = "The mentor has not accepted a connection request from this user."


class OutsideAvailabilityError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Outside availability"
    description = "The requested time is not covered by an active slot of the mentor."


class SlotConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Slot conflict"
    description = "The requested time overlaps with another booking of the mentor."

    def __init__(self, booking_id: str | None = None):
        super().__init__()

        if booking_id:
            self.detail = {"msg": self.detail, "booking_id": booking_id}


class BookingInPastError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Cannot book in the past"
    description = "The session cannot start in the past."


class NotesTooLongError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Notes too long"
    description = "The notes of the booking are too long."


class InvalidTransitionError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Invalid status transition"
    description = "The booking cannot change from its current status to the requested one."

    def __init__(self, current: str | None = None, requested: str | None = None):
        super().__init__()

        if current and requested:
            self.detail = {"msg": self.detail, "current": current, "requested": requested}


class ForbiddenError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Forbidden"
    description = "The user is not allowed to apply this status change to the booking."
