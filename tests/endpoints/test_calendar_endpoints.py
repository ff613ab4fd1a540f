from typing import Callable

import icalendar
import pytest
from httpx import AsyncClient


MENTOR = "mentor-1"

Headers = Callable[[str], dict[str, str]]


@pytest.fixture
def headers(make_token: Callable[..., str]) -> Headers:
    def make(user_id: str) -> dict[str, str]:
        role = "mentor" if user_id.startswith("mentor") else "user"
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}

    return make


@pytest.fixture
async def bookings(client: AsyncClient, headers: Headers) -> dict[str, str]:
    for weekday, start, end in [("monday", "09:00", "10:00"), ("thursday", "18:00", "19:00")]:
        slot = {"weekday": weekday, "start": start, "end": end}
        await client.post("/mentor-slots", json=slot, headers=headers(MENTOR))

    ids = {}
    for mentee, start in [("user-a", "2030-01-07T09:00:00"), ("user-b", "2030-01-07T09:30:00")]:
        request = await client.post("/mentor-connections", json={"mentor_id": MENTOR}, headers=headers(mentee))
        await client.patch(
            f"/mentor-connections/{request.json()['id']}", json={"status": "accepted"}, headers=headers(MENTOR)
        )
        booking = await client.post(
            "/mentor-bookings", json={"mentor_id": MENTOR, "start": start, "duration": 30}, headers=headers(mentee)
        )
        ids[mentee] = booking.json()["id"]
    return ids


async def test__weekly_grid(client: AsyncClient, headers: Headers, bookings: dict[str, str]) -> None:
    response = await client.get(f"/calendar/{MENTOR}", params={"week_start": "2030-01-10"}, headers=headers(MENTOR))

    assert response.status_code == 200
    grid = response.json()
    assert grid["week_start"] == "2030-01-07"
    assert [day["day"] for day in grid["days"]][:2] == ["2030-01-07", "2030-01-08"]
    assert [len(day["slots"]) for day in grid["days"]] == [1, 0, 0, 1, 0, 0, 0]

    monday = grid["days"][0]["slots"][0]
    assert [b["id"] for b in monday["bookings"]] == [bookings["user-a"], bookings["user-b"]]
    assert monday["free"] == []

    thursday = grid["days"][3]["slots"][0]
    assert (thursday["start"], thursday["end"]) == ("2030-01-10T18:00:00", "2030-01-10T19:00:00")
    assert thursday["free"] == [{"start": "2030-01-10T18:00:00", "end": "2030-01-10T19:00:00"}]


async def test__weekly_grid__other_users(client: AsyncClient, headers: Headers, bookings: dict[str, str]) -> None:
    params = {"week_start": "2030-01-07"}

    response = await client.get(f"/calendar/{MENTOR}", params=params, headers=headers("user-a"))
    monday = response.json()["days"][0]["slots"][0]
    assert [b["id"] for b in monday["bookings"]] == [bookings["user-a"]]
    assert monday["free"] == []

    response = await client.get(f"/calendar/{MENTOR}", params=params, headers=headers("user-c"))
    assert response.json()["days"][0]["slots"][0]["bookings"] == []

    response = await client.get(f"/calendar/{MENTOR}", params=params, headers=headers(MENTOR))
    assert len(response.json()["days"][0]["slots"][0]["bookings"]) == 2


async def test__weekly_grid__cache_is_cleared(client: AsyncClient, headers: Headers, bookings: dict[str, str]) -> None:
    params = {"week_start": "2030-01-07"}
    await client.get(f"/calendar/{MENTOR}", params=params, headers=headers(MENTOR))

    await client.patch(f"/mentor-bookings/{bookings['user-b']}", json={"status": "cancelled"}, headers=headers(MENTOR))

    response = await client.get(f"/calendar/{MENTOR}", params=params, headers=headers(MENTOR))
    monday = response.json()["days"][0]["slots"][0]
    assert [b["id"] for b in monday["bookings"]] == [bookings["user-a"]]
    assert monday["free"] == [{"start": "2030-01-07T09:30:00", "end": "2030-01-07T10:00:00"}]


async def test__ics(client: AsyncClient, headers: Headers, bookings: dict[str, str]) -> None:
    token = (await client.get("/calendar/ics-token", headers=headers("user-a"))).json()
    assert token.startswith("user-a_")

    response = await client.get(f"/calendar/{token}/sessions.ics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/calendar")
    events = icalendar.Calendar.from_ical(response.content).walk("VEVENT")
    assert [str(e["uid"]) for e in events] == [f"{bookings['user-a']}@mentorship"]
    assert str(events[0]["summary"]) == "Mentoring session with Mentor-1 (pending)"


async def test__ics__mentor(client: AsyncClient, headers: Headers, bookings: dict[str, str]) -> None:
    token = (await client.get("/calendar/ics-token", headers=headers(MENTOR))).json()
    await client.patch(f"/mentor-bookings/{bookings['user-a']}", json={"status": "cancelled"}, headers=headers(MENTOR))

    response = await client.get(f"/calendar/{token}/sessions.ics")

    events = icalendar.Calendar.from_ical(response.content).walk("VEVENT")
    assert [str(e["uid"]) for e in events] == [f"{bookings['user-b']}@mentorship"]


@pytest.mark.parametrize("token", ["user-a_0000", "mentor-1_deadbeef"])
async def test__ics__invalid_token(client: AsyncClient, token: str) -> None:
    assert (await client.get(f"/calendar/{token}/sessions.ics")).status_code == 401


async def test__ics_token__requires_auth(client: AsyncClient) -> None:
    assert (await client.get("/calendar/ics-token")).status_code == 401
