# tests/test_centers.py
from ishanya.models import AuditLog


def test_create_and_list_centers(client, db):
    r = client.post("/api/centers", json={"center_id": 1, "name": "Bangalore Center", "location": "Bangalore"})
    assert r.status_code == 201, r.text
    client.post("/api/centers", json={"center_id": 2, "name": "Pune Center"})

    centers = client.get("/api/centers").json()
    assert [c["center_id"] for c in centers] == [1, 2]
    assert client.get("/api/centers/1").json()["location"] == "Bangalore"
    assert client.get("/api/centers/3").status_code == 404


def test_duplicate_center_is_a_conflict(client, db):
    client.post("/api/centers", json={"center_id": 1, "name": "Bangalore Center"})
    r = client.post("/api/centers", json={"center_id": 1, "name": "Again"})
    assert r.status_code == 409
    failures = db.query(AuditLog).filter(AuditLog.status == "FAILURE").all()
    assert len(failures) == 1


def test_programs_carry_center_name(client, db):
    client.post("/api/centers", json={"center_id": 1, "name": "Bangalore Center"})
    r = client.post("/api/programs", json={"program_id": 10, "name": "Special Education", "center_id": 1})
    assert r.status_code == 201, r.text

    programs = client.get("/api/programs").json()
    assert programs[0]["center_name"] == "Bangalore Center"

    by_center = client.get("/api/centers/1/programs").json()
    assert [p["program_id"] for p in by_center] == [10]


def test_program_needs_existing_center(client, db):
    r = client.post("/api/programs", json={"program_id": 10, "name": "Special Education", "center_id": 5})
    assert r.status_code == 404
