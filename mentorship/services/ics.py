from typing import cast

import icalendar

from ..schemas.bookings import SessionBooking


def create_ics(sessions: list[SessionBooking]) -> bytes:
    cal = icalendar.Calendar()
    cal.add("prodid", "-//mentorship//sessions//EN")
    cal.add("version", "2.0")

    for s in sessions:
        event = icalendar.Event()
        summary = f"Mentoring session with {s.counterpart_name}" if s.counterpart_name else "Mentoring session"
        event.add("uid", f"{s.id}@mentorship")
        event.add("summary", f"{summary} ({s.status.value})")
        if s.notes:
            event.add("description", s.notes)
        # wall-clock times, exported as floating events
        event.add("dtstart", s.start)
        event.add("dtend", s.end)
        cal.add_component(event)

    return cast(bytes, cal.to_ical())
