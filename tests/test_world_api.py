from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from pixelbuddy.domain.world_code import is_valid_world_code


class _SameCodeRng:
    """Draws the same character every time, so every candidate is AAAA-AA."""

    def choice(self, seq):
        return seq[0]


def _open(client: TestClient, pet_id: str) -> dict:
    resp = client.post(f"/api/pet/{pet_id}/world", json={"open": True})
    assert resp.status_code == 200
    return resp.json()


def test_open_world_returns_code(client: TestClient, pet: dict) -> None:
    data = _open(client, pet["id"])
    assert data["world_open"] is True
    assert is_valid_world_code(data["world_code"])
    assert data["visits_count"] == 0


def test_visit_counts_and_returns_public_view(client: TestClient, pet: dict) -> None:
    code = _open(client, pet["id"])["world_code"]
    resp = client.get(f"/api/world/{code}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == pet["id"]
    assert data["name"] == "Buddy"
    assert data["visits_count"] == 1
    assert "user_id" not in data

    assert client.get(f"/api/world/{code.lower()}").json()["visits_count"] == 2

    memories = client.get(f"/api/pet/{pet['id']}/memories").json()
    assert memories[0]["memory_type"] == "visit"


def test_reopen_regenerates_code(client: TestClient, pet: dict) -> None:
    first = _open(client, pet["id"])["world_code"]
    second = _open(client, pet["id"])["world_code"]
    assert first != second
    assert client.get(f"/api/world/{first}").status_code == 404
    assert client.get(f"/api/world/{second}").status_code == 200


def test_close_world_clears_code(client: TestClient, pet: dict) -> None:
    code = _open(client, pet["id"])["world_code"]
    resp = client.post(f"/api/pet/{pet['id']}/world", json={"open": False})
    assert resp.status_code == 200
    assert resp.json()["world_open"] is False
    assert resp.json()["world_code"] is None
    resp = client.get(f"/api/world/{code}")
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"


def test_unknown_code_is_404(client: TestClient) -> None:
    assert client.get("/api/world/ZZZZ-ZZ").status_code == 404


def test_open_worlds_are_unique_and_listed(client: TestClient) -> None:
    codes = []
    for i in range(5):
        pet = client.get(f"/api/pet/owner-{i}").json()
        codes.append(_open(client, pet["id"])["world_code"])
    assert len(set(codes)) == len(codes)

    client.get(f"/api/world/{codes[3]}")
    worlds = client.get("/api/worlds").json()
    assert len(worlds) == 5
    assert worlds[0]["world_code"] == codes[3]
    assert {w["world_code"] for w in worlds} == set(codes)


def test_closed_worlds_are_not_listed(client: TestClient, pet: dict) -> None:
    _open(client, pet["id"])
    client.post(f"/api/pet/{pet['id']}/world", json={"open": False})
    assert client.get("/api/worlds").json() == []


def test_collisions_exhaust_generation(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    from pixelbuddy.services import pet_db

    monkeypatch.setattr(pet_db, "_rng", _SameCodeRng())
    first = client.get("/api/pet/first").json()
    second = client.get("/api/pet/second").json()
    assert _open(client, first["id"])["world_code"] == "AAAA-AA"

    resp = client.post(f"/api/pet/{second['id']}/world", json={"open": True})
    assert resp.status_code == 500
    assert resp.json()["error"] == "GenerationExhausted"

    world = client.get("/api/pet/second").json()
    assert world["world_open"] is False


def test_concurrent_code_collision_is_rejected_by_the_database(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    from pixelbuddy.crud import ReadData
    from pixelbuddy.services import pet_db

    async def never_taken(world_code, session):
        return False

    monkeypatch.setattr(pet_db, "_rng", _SameCodeRng())
    monkeypatch.setattr(ReadData, "world_code_exists", staticmethod(never_taken))
    first = client.get("/api/pet/first").json()
    second = client.get("/api/pet/second").json()
    assert _open(client, first["id"])["world_code"] == "AAAA-AA"

    resp = client.post(f"/api/pet/{second['id']}/world", json={"open": True})
    assert resp.status_code == 500
    assert resp.json()["error"] == "GenerationExhausted"

    assert client.get("/api/pet/second").json()["world_open"] is False
    assert client.get("/api/world/AAAA-AA").json()["id"] == first["id"]


def test_world_toggle_missing_pet_is_404(client: TestClient) -> None:
    resp = client.post(f"/api/pet/{uuid4()}/world", json={"open": True})
    assert resp.status_code == 404
