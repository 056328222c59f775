# tests/test_health.py
from fastapi.testclient import TestClient

from ishanya.main import app


def test_health():
    c = TestClient(app)
    for path in ("/api/health", "/health"):
        r = c.get(path)
        assert r.status_code == 200
        assert r.json()["ok"] is True
