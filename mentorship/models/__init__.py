from .availability_slots import AvailabilitySlot, SlotWindow, Weekday
from .bookings import ACTIVE_STATUSES, TERMINAL_STATUSES, TRANSITIONS, Booking, BookingStatus, Role
from .connection_requests import ConnectionRequest, ConnectionStatus, Decision
from .schedule_locks import ScheduleLock


__all__ = [
    "ACTIVE_STATUSES",
    "AvailabilitySlot",
    "Booking",
    "BookingStatus",
    "ConnectionRequest",
    "ConnectionStatus",
    "Decision",
    "Role",
    "ScheduleLock",
    "SlotWindow",
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "Weekday",
]
