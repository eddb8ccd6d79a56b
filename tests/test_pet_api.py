from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from pixelbuddy.exceptions import ExternalServiceUnavailable


def _sync(client: TestClient, pet_id: str, value: float) -> None:
    resp = client.post(
        f"/api/pet/{pet_id}/sync",
        json={"hunger": value, "happiness": value, "energy": value, "hygiene": value},
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True}


def test_get_creates_pet_with_defaults_and_birth_memory(client: TestClient) -> None:
    resp = client.get("/api/pet/new-user")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Buddy"
    assert data["user_id"] == "new-user"
    assert [data[s] for s in ("hunger", "happiness", "energy", "hygiene", "health")] == [50, 50, 50, 50, 100]
    assert data["is_alive"] is True
    assert data["generation"] == 1
    assert data["world_open"] is False
    assert data["world_code"] is None

    memories = client.get(f"/api/pet/{data['id']}/memories").json()
    assert [m["content"] for m in memories] == ["Born into this world!"]


def test_get_returns_the_same_pet_twice(client: TestClient) -> None:
    first = client.get("/api/pet/same-user").json()
    second = client.get("/api/pet/same-user").json()
    assert first["id"] == second["id"]
    memories = client.get(f"/api/pet/{first['id']}/memories").json()
    assert len(memories) == 1


def test_feed_at_90_clamps_to_100(client: TestClient, pet: dict) -> None:
    _sync(client, pet["id"], 90)
    resp = client.post(f"/api/pet/{pet['id']}/action", json={"action": "feed"})
    assert resp.status_code == 200
    assert resp.json()["hunger"] == 100


def test_each_action_applies_its_deltas(client: TestClient, pet: dict) -> None:
    pet_id = pet["id"]
    data = client.post(f"/api/pet/{pet_id}/action", json={"action": "play"}).json()
    assert (data["happiness"], data["energy"]) == (70, 40)
    data = client.post(f"/api/pet/{pet_id}/action", json={"action": "clean"}).json()
    assert data["hygiene"] == 90
    data = client.post(f"/api/pet/{pet_id}/action", json={"action": "sleep"}).json()
    assert data["energy"] == 70
    assert data["last_slept"] >= pet["last_slept"]


def test_repeated_actions_stay_in_range(client: TestClient, pet: dict) -> None:
    for action in ["feed", "play", "clean", "sleep"] * 6:
        data = client.post(f"/api/pet/{pet['id']}/action", json={"action": action}).json()
        for stat in ("hunger", "happiness", "energy", "hygiene", "health"):
            assert 0 <= data[stat] <= 100


def test_action_appends_memory_newest_first(client: TestClient, pet: dict) -> None:
    client.post(f"/api/pet/{pet['id']}/action", json={"action": "feed"})
    client.post(f"/api/pet/{pet['id']}/action", json={"action": "sleep"})
    memories = client.get(f"/api/pet/{pet['id']}/memories").json()
    assert [m["content"] for m in memories] == [
        "Owner put me to sleep!",
        "Owner fed me!",
        "Born into this world!",
    ]
    assert all(m["memory_type"] == "action" for m in memories)

    limited = client.get(f"/api/pet/{pet['id']}/memories", params={"limit": 1}).json()
    assert [m["content"] for m in limited] == ["Owner put me to sleep!"]


def test_unknown_action_is_400(client: TestClient, pet: dict) -> None:
    resp = client.post(f"/api/pet/{pet['id']}/action", json={"action": "dance"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"


def test_action_on_missing_pet_is_404(client: TestClient) -> None:
    resp = client.post(f"/api/pet/{uuid4()}/action", json={"action": "feed"})
    assert resp.status_code == 404
    body = resp.json()
    assert body["error"] == "NotFound"
    assert "message" in body


def test_rename(client: TestClient, pet: dict) -> None:
    resp = client.post(f"/api/pet/{pet['id']}/rename", json={"name": "Mochi"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Mochi"


def test_rename_rejects_bad_lengths(client: TestClient, pet: dict) -> None:
    assert client.post(f"/api/pet/{pet['id']}/rename", json={"name": ""}).status_code == 400
    assert client.post(f"/api/pet/{pet['id']}/rename", json={"name": "x" * 21}).status_code == 400


def test_sync_clamps_and_is_idempotent(client: TestClient, pet: dict) -> None:
    payload = {"hunger": 130, "happiness": -5, "energy": 42.5, "hygiene": 7}
    for _ in range(3):
        resp = client.post(f"/api/pet/{pet['id']}/sync", json=payload)
        assert resp.status_code == 200
        stored = client.get("/api/pet/user-1").json()
        assert (stored["hunger"], stored["happiness"], stored["energy"], stored["hygiene"]) == (100, 0, 43, 7)


def test_sync_missing_pet_is_404(client: TestClient) -> None:
    resp = client.post(
        f"/api/pet/{uuid4()}/sync",
        json={"hunger": 1, "happiness": 1, "energy": 1, "hygiene": 1},
    )
    assert resp.status_code == 404


def test_bad_body_is_400(client: TestClient, pet: dict) -> None:
    resp = client.post(f"/api/pet/{pet['id']}/sync", json={"hunger": "lots"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"


def test_sync_rejects_booleans(client: TestClient, pet: dict) -> None:
    resp = client.post(
        f"/api/pet/{pet['id']}/sync",
        json={"hunger": True, "happiness": 1, "energy": 1, "hygiene": 1},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"
    assert client.get("/api/pet/user-1").json()["hunger"] == 50


@pytest.mark.parametrize("path", ["action", "rename", "sync", "memories", "world", "talk"])
def test_malformed_pet_id_is_404(client: TestClient, path: str) -> None:
    bodies = {
        "action": {"action": "feed"},
        "rename": {"name": "Mochi"},
        "sync": {"hunger": 1, "happiness": 1, "energy": 1, "hygiene": 1},
        "world": {"open": True},
        "talk": {"message": "hi"},
    }
    if path == "memories":
        resp = client.get("/api/pet/123/memories")
    else:
        resp = client.post(f"/api/pet/123/{path}", json=bodies[path])
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"


def test_actions_and_talk_share_a_rate_limit(
    client: TestClient, pet: dict, monkeypatch: pytest.MonkeyPatch
) -> None:
    from pixelbuddy.services import chat

    async def unavailable(prompt, **kwargs):
        raise ExternalServiceUnavailable("down")

    monkeypatch.setattr(chat, "generate_reply", unavailable)
    for _ in range(20):
        assert client.post(f"/api/pet/{pet['id']}/action", json={"action": "feed"}).status_code == 200
    for _ in range(10):
        assert client.post(f"/api/pet/{pet['id']}/talk", json={"message": "hi"}).status_code == 200

    resp = client.post(f"/api/pet/{pet['id']}/action", json={"action": "feed"})
    assert resp.status_code == 429
    assert resp.json() == {"error": "RateLimitExceeded", "message": "Too many actions, please slow down!"}
    assert client.post(f"/api/pet/{pet['id']}/talk", json={"message": "hi"}).status_code == 429
    assert client.post(f"/api/pet/{pet['id']}/rename", json={"name": "Mochi"}).status_code == 200


def test_memories_limit_bounds(client: TestClient, pet: dict) -> None:
    assert client.get(f"/api/pet/{pet['id']}/memories", params={"limit": 0}).status_code == 400
    assert client.get(f"/api/pet/{pet['id']}/memories", params={"limit": 51}).status_code == 400
    assert client.get(f"/api/pet/{uuid4()}/memories").status_code == 404


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


def test_health_reports_unreachable_database(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    from pixelbuddy import main

    async def down():
        return {"healthy": False, "error": "down"}

    monkeypatch.setattr(main, "health_check", down)
    resp = client.get("/health")
    assert resp.status_code == 503
    assert resp.json() == {"status": "unhealthy", "database": "disconnected", "error": "down"}
