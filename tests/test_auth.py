# tests/test_auth.py
import time

import pytest
from fastapi.testclient import TestClient

from ishanya.core.security import hash_password, verify_password
from ishanya.main import app
from ishanya.models import User
from ishanya.routers import auth

from conftest import make_user


@pytest.fixture
def anon_client(db):
    app.dependency_overrides.clear()
    return TestClient(app)


@pytest.fixture
def admin(db):
    u = User(username="admin", password_hash=hash_password("admin123"), role="administrator",
             full_name="Administrator", email="admin@ishanya.local", is_active=True)
    db.add(u)
    db.commit()
    return u


def test_password_hashing():
    h = hash_password("s3cret")
    assert h != "s3cret"
    assert verify_password("s3cret", h)
    assert not verify_password("wrong", h)
    assert not verify_password("s3cret", "not-a-hash")


def test_login_me_logout(anon_client, admin):
    r = anon_client.post("/api/login", data={"username": "admin", "password": "admin123"})
    assert r.status_code == 200, r.text
    assert r.json()["user"]["role"] == "administrator"

    me = anon_client.get("/api/me")
    assert me.status_code == 200
    assert me.json()["username"] == "admin"

    assert anon_client.post("/api/logout").status_code == 200
    assert anon_client.get("/api/me").status_code == 401


def test_login_by_email(anon_client, admin):
    r = anon_client.post("/api/login", data={"username": "admin@ishanya.local", "password": "admin123"})
    assert r.status_code == 200


def test_bad_credentials(anon_client, admin):
    r = anon_client.post("/api/login", data={"username": "admin", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"


def test_disabled_user(anon_client, db, admin):
    admin.is_active = False
    db.commit()
    r = anon_client.post("/api/login", data={"username": "admin", "password": "admin123"})
    assert r.status_code == 403


def test_protected_endpoint_needs_login(anon_client):
    assert anon_client.get("/api/centers").status_code == 401


def test_idle_timeout(anon_client, admin, monkeypatch):
    anon_client.post("/api/login", data={"username": "admin", "password": "admin123"})
    real = time.time
    monkeypatch.setattr(auth.time, "time", lambda: real() + auth.IDLE_TIMEOUT_SEC + 5)
    assert anon_client.get("/api/me").status_code == 401


def test_roles_are_enforced(db):
    app.dependency_overrides[auth.get_current_user] = lambda: make_user("parent")
    try:
        c = TestClient(app)
        assert c.get("/api/centers").status_code == 403
        assert c.get("/api/overview/stats").status_code == 403
    finally:
        app.dependency_overrides.clear()


def test_teacher_cannot_create_employees(db):
    app.dependency_overrides[auth.get_current_user] = lambda: make_user("teacher")
    try:
        c = TestClient(app)
        assert c.get("/api/centers").status_code == 200
        r = c.post("/api/employees", json={
            "name": "Jane Smith", "employee_id": 1, "email": "j@example.com",
            "designation": "Manager", "department": "Admin", "date_of_joining": "2022-01-01",
            "contact_number": "9876543210", "center_id": 1,
        })
        assert r.status_code == 403
    finally:
        app.dependency_overrides.clear()
