from starlette import status

from .api_exception import APIException


class SlotNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Slot not found"
    description = "The requested slot does not exist."


class InvalidRangeError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid time range"
    description = "The start must be before the end and both must be given with minute precision."

    def __init__(self, reason: str | None = None):
        super().__init__()

        if reason:
            self.detail = {"msg": self.detail, "reason": reason}


class InvalidWeekdayError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid weekday"
    description = "The weekday must be a number from 0 (Monday) to 6 (Sunday) or the name of the day."


class OverlapError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Slot overlaps"
    description = "The slot overlaps with another active slot on the same day."

    def __init__(self, slot_id: str | None = None):
        super().__init__()

        if slot_id:
            self.detail = {"msg": self.detail, "slot_id": slot_id}
