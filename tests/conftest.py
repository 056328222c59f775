# tests/conftest.py
import os

# must be set before ishanya is imported
os.environ["DB_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("SESSION_SECRET", "test-session-secret")

import pytest
from fastapi.testclient import TestClient

from ishanya.db.base import Base
from ishanya.db.session import SessionLocal, engine
from ishanya.main import app
from ishanya.models import User
from ishanya.routers.auth import get_current_user
from ishanya.services.sheets import MockSheetsClient, get_sheets
from ishanya.services.storage import LocalObjectStorage, get_storage


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    return LocalObjectStorage(tmp_path, "test-bucket", "test-secret")


@pytest.fixture
def sheets():
    return MockSheetsClient()


def make_user(role="administrator", **kw):
    data = dict(id=1, username=role, password_hash="x", role=role,
                full_name=f"Test {role}", email=f"{role}@example.com", is_active=True)
    data.update(kw)
    return User(**data)


@pytest.fixture
def current_user():
    return make_user("administrator")


@pytest.fixture
def client(db, storage, sheets, current_user):
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_sheets] = lambda: sheets
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


STUDENT_FORM = {
    "first_name": "Meera",
    "last_name": "Nair",
    "dob": "2012-03-04",
    "contact_number": "9876543210",
    "parents_email": "parent@example.com",
    "address": "12 Lake Rd",
    "program_id": 1,
    "center_id": 1,
}


@pytest.fixture
def student_form():
    return dict(STUDENT_FORM)
