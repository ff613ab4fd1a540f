from typing import Any, Callable

import pytest
from httpx import AsyncClient


MENTOR = "mentor-1"


@pytest.fixture
def headers(make_token: Callable[..., str]) -> Callable[[str], dict[str, str]]:
    def make(user_id: str) -> dict[str, str]:
        role = "mentor" if user_id.startswith("mentor") else "user"
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}

    return make


async def test__request_and_accept(client: AsyncClient, headers: Callable[[str], dict[str, str]]) -> None:
    response = await client.get(f"/mentor-connections/status/{MENTOR}", headers=headers("user-1"))
    assert response.json() == {"mentor_id": MENTOR, "status": None}

    response = await client.post(
        "/mentor-connections", json={"mentorId": MENTOR, "message": "Hello!"}, headers=headers("user-1")
    )
    assert response.status_code == 200
    request = response.json()
    assert (request["requester_id"], request["mentor_id"], request["status"]) == ("user-1", MENTOR, "pending")
    assert request["message"] == "Hello!"
    assert request["responded_at"] is None

    response = await client.get("/mentor-connections/pending", headers=headers(MENTOR))
    assert [r["id"] for r in response.json()] == [request["id"]]

    response = await client.patch(
        f"/mentor-connections/{request['id']}", json={"status": "accepted"}, headers=headers(MENTOR)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"
    assert response.json()["responded_at"] is not None

    response = await client.get(f"/mentor-connections/status/{MENTOR}", headers=headers("user-1"))
    assert response.json() == {"mentor_id": MENTOR, "status": "accepted"}
    assert (await client.get("/mentor-connections/pending", headers=headers(MENTOR))).json() == []
    assert (await client.get("/mentor-connections/mentees", headers=headers(MENTOR))).json() == ["user-1"]

    response = await client.patch(
        f"/mentor-connections/{request['id']}", json={"decision": "reject"}, headers=headers(MENTOR)
    )
    assert response.status_code == 409
    assert response.json() == {"detail": "Already responded"}


async def test__duplicate(client: AsyncClient, headers: Callable[[str], dict[str, str]]) -> None:
    first = (await client.post("/mentor-connections", json={"mentor_id": MENTOR}, headers=headers("user-1"))).json()

    response = await client.post("/mentor-connections", json={"mentor_id": MENTOR}, headers=headers("user-1"))

    assert response.status_code == 409
    assert response.json() == {"detail": {"msg": "Already requested", "request_id": first["id"], "status": "pending"}}


async def test__rejected(client: AsyncClient, headers: Callable[[str], dict[str, str]]) -> None:
    first = (await client.post("/mentor-connections", json={"mentor": MENTOR}, headers=headers("user-1"))).json()
    await client.patch(f"/mentor-connections/{first['id']}", json={"decision": "reject"}, headers=headers(MENTOR))

    response = await client.post("/mentor-connections", json={"mentor": MENTOR}, headers=headers("user-1"))

    assert response.status_code == 409
    assert response.json()["detail"] == {"msg": "Request rejected", "request_id": first["id"], "status": "rejected"}
    response = await client.get(f"/mentor-connections/status/{MENTOR}", headers=headers("user-1"))
    assert response.json()["status"] == "rejected"


@pytest.mark.parametrize(
    "user_id,body,status,detail",
    [
        ("user-1", {"mentor_id": "ghost"}, 404, "Mentor not found"),
        ("user-1", {"mentor_id": "mentor-2"}, 404, "Mentor not found"),
        ("user-1", {"mentor_id": "user-2"}, 404, "Mentor not found"),
        ("mentor-3", {"mentor_id": "user-1"}, 404, "Mentor not found"),
        (MENTOR, {"mentor_id": MENTOR}, 403, "Cannot connect to self"),
        ("user-1", {"mentor_id": MENTOR, "message": "x" * 1001}, 422, None),
        ("user-1", {"message": "hi"}, 422, None),
    ],
)
async def test__request__invalid(
    client: AsyncClient,
    headers: Callable[[str], dict[str, str]],
    auth_service: set[str],
    user_id: str,
    body: dict[str, Any],
    status: int,
    detail: str | None,
) -> None:
    auth_service.add("mentor-2")

    response = await client.post("/mentor-connections", json=body, headers=headers(user_id))

    assert response.status_code == status
    if detail:
        assert response.json() == {"detail": detail}


async def test__respond__permissions(client: AsyncClient, headers: Callable[[str], dict[str, str]]) -> None:
    request = (await client.post("/mentor-connections", json={"mentor_id": MENTOR}, headers=headers("user-1"))).json()

    response = await client.patch(f"/mentor-connections/{request['id']}", json={"status": "accepted"})
    assert response.status_code == 401
    response = await client.patch(
        f"/mentor-connections/{request['id']}", json={"status": "accepted"}, headers=headers("user-1")
    )
    assert response.status_code == 403
    response = await client.patch(
        f"/mentor-connections/{request['id']}", json={"status": "accepted"}, headers=headers("mentor-2")
    )
    assert response.status_code == 404
    response = await client.patch(
        f"/mentor-connections/{request['id']}", json={"status": "maybe"}, headers=headers(MENTOR)
    )
    assert response.status_code == 422


async def test__list(client: AsyncClient, headers: Callable[[str], dict[str, str]]) -> None:
    for user_id, mentor_id in [("user-1", MENTOR), ("user-2", MENTOR), ("user-1", "mentor-2"), ("mentor-2", MENTOR)]:
        await client.post("/mentor-connections", json={"mentor_id": mentor_id}, headers=headers(user_id))

    incoming = (await client.get("/mentor-connections", headers=headers(MENTOR))).json()
    assert [r["requester_id"] for r in incoming] == ["user-1", "user-2", "mentor-2"]

    outgoing = (await client.get("/mentor-connections", headers=headers("user-1"))).json()
    assert [r["mentor_id"] for r in outgoing] == [MENTOR, "mentor-2"]

    sent = (await client.get("/mentor-connections", params={"role": "mentee"}, headers=headers("mentor-2"))).json()
    assert [r["mentor_id"] for r in sent] == [MENTOR]

    await client.patch(f"/mentor-connections/{incoming[1]['id']}", json={"status": "rejected"}, headers=headers(MENTOR))
    response = await client.get("/mentor-connections", params={"status": "pending"}, headers=headers(MENTOR))
    assert [r["requester_id"] for r in response.json()] == ["user-1", "mentor-2"]

    assert (await client.get("/mentor-connections/pending", headers=headers("user-1"))).status_code == 403
