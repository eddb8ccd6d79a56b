import os
import tempfile
from pathlib import Path

import pytest

# Point the app at a throwaway SQLite file before pixelbuddy is imported.
_db_dir = Path(tempfile.mkdtemp(prefix="pixelbuddy-tests-"))
_db_path = _db_dir / "test.sqlite3"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_path}"
os.environ["OLLAMA_URL"] = "http://127.0.0.1:9"
os.environ["OLLAMA_TIMEOUT"] = "1"


@pytest.fixture()
def client():
    """TestClient on a fresh database. The lifespan recreates the tables."""
    from fastapi.testclient import TestClient

    from pixelbuddy.main import app
    from pixelbuddy.routers.pet import limiter

    if _db_path.exists():
        _db_path.unlink()
    limiter.reset()
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def pet(client) -> dict:
    resp = client.get("/api/pet/user-1")
    assert resp.status_code == 200
    return resp.json()
