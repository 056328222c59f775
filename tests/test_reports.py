# tests/test_reports.py
import re

import pytest

from ishanya.models import Student
from ishanya.services.storage import (
    LocalObjectStorage,
    ObjectNotFound,
    StorageError,
    report_key,
    safe_filename,
)

PDF = b"%PDF-1.4\n% progress report\n"


@pytest.fixture
def student(db):
    db.add(Student(student_id=1001, first_name="Meera", last_name="Nair"))
    db.commit()


def test_report_key_layout():
    assert report_key(1001, "Term 1.pdf", now_ms=1700000000000) == "student-reports/1001/1700000000000-Term_1.pdf"


def test_safe_filename_strips_directories():
    assert safe_filename("../../etc/passwd") == "passwd"
    assert safe_filename("a\\b\\c.pdf") == "c.pdf"


def test_upload_refuses_overwrite(storage):
    storage.upload("student-reports/1/a.pdf", PDF)
    with pytest.raises(StorageError, match="already exists"):
        storage.upload("student-reports/1/a.pdf", PDF)


def test_invalid_keys(storage):
    for key in ("../escape.pdf", "/abs.pdf", "a/../../b.pdf"):
        with pytest.raises(StorageError):
            storage.upload(key, PDF)


def test_list_metadata(storage):
    storage.upload("student-reports/7/1-a.pdf", PDF)
    storage.upload("student-reports/7/2-b.pdf", b"%PDF-2")
    items = storage.list("student-reports/7")
    assert [i["name"] for i in items] == ["1-a.pdf", "2-b.pdf"]
    assert items[0]["size"] == len(PDF)
    assert items[0]["id"] and items[0]["created_at"]
    assert storage.list("student-reports/8") == []


def test_signed_url_roundtrip(storage):
    storage.upload("student-reports/7/a.pdf", PDF)
    url = storage.create_signed_url("student-reports/7/a.pdf", 60)
    token = url.rsplit("/", 1)[-1]
    assert storage.read_signed(token) == ("student-reports/7/a.pdf", PDF)


def test_signed_url_expires(storage):
    storage.upload("student-reports/7/a.pdf", PDF)
    token = storage.create_signed_url("student-reports/7/a.pdf", -1).rsplit("/", 1)[-1]
    with pytest.raises(StorageError, match="expired"):
        storage.read_signed(token)


def test_signed_url_cannot_be_forged(storage, tmp_path):
    storage.upload("student-reports/7/a.pdf", PDF)
    other = LocalObjectStorage(tmp_path, "test-bucket", "someone-elses-secret")
    token = other.create_signed_url("student-reports/7/a.pdf", 60).rsplit("/", 1)[-1]
    with pytest.raises(StorageError, match="Invalid signature"):
        storage.read_signed(token)


def test_sign_missing_object(storage):
    with pytest.raises(ObjectNotFound):
        storage.create_signed_url("student-reports/7/none.pdf", 60)


# ---------- HTTP ----------
def test_upload_list_sign_download(client, student):
    files = {"file": ("progress.pdf", PDF, "application/pdf")}
    r = client.post("/api/students/1001/reports", files=files)
    assert r.status_code == 201, r.text
    assert re.fullmatch(r"student-reports/1001/\d+-progress\.pdf", r.json()["path"])

    reports = client.get("/api/students/1001/reports").json()
    assert len(reports) == 1
    name = reports[0]["name"]

    r = client.get(f"/api/students/1001/reports/{name}/url")
    assert r.status_code == 200
    assert r.json()["expires_in"] == 60
    signed = r.json()["signed_url"]

    r = client.get(signed)
    assert r.status_code == 200
    assert r.content == PDF
    assert r.headers["content-type"] == "application/pdf"


def test_upload_rejects_non_pdf(client, student):
    files = {"file": ("notes.txt", b"hello", "text/plain")}
    assert client.post("/api/students/1001/reports", files=files).status_code == 400


def test_upload_unknown_student(client, db):
    files = {"file": ("progress.pdf", PDF, "application/pdf")}
    assert client.post("/api/students/4242/reports", files=files).status_code == 404


def test_url_for_missing_report(client, student):
    assert client.get("/api/students/1001/reports/nope.pdf/url").status_code == 404


def test_tampered_token_is_forbidden(client, student):
    client.post("/api/students/1001/reports", files={"file": ("p.pdf", PDF, "application/pdf")})
    name = client.get("/api/students/1001/reports").json()[0]["name"]
    signed = client.get(f"/api/students/1001/reports/{name}/url").json()["signed_url"]
    assert client.get(signed + "x").status_code == 403
