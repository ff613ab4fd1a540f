from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def localnow() -> datetime:
    """Naive wall-clock time, the reference frame of slots and bookings."""

    return datetime.now().replace(second=0, microsecond=0)
