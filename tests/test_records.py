# tests/test_records.py
from datetime import date

from ishanya.core.security import verify_password
from ishanya.models import Center, Educator, Employee, Program, Student
from ishanya.services.records import DEFAULT_LAST_STUDENT_ID


def test_student_form_creates_one_row_with_defaults(client, db, student_form):
    r = client.post("/api/students", json=student_form)
    assert r.status_code == 201, r.text
    body = r.json()

    assert db.query(Student).count() == 1
    s = db.query(Student).one()
    assert s.first_name == "Meera" and s.last_name == "Nair"
    assert s.dob == date(2012, 3, 4)
    assert s.gender == "Not Specified"
    assert s.status == "Active"
    assert s.educator_employee_id == 1
    assert s.enrollment_year == date.today().year
    assert 0 <= s.student_id <= 9999
    assert body["student_id"] == s.student_id


def test_student_form_keeps_overrides(client, db, student_form):
    student_form.update(student_id=1200, gender="Female", status="Inactive")
    r = client.post("/api/students", json=student_form)
    assert r.status_code == 201
    s = db.query(Student).one()
    assert (s.student_id, s.gender, s.status) == (1200, "Female", "Inactive")


def test_student_form_validation(client, db, student_form):
    bad = [
        {"first_name": "M"},
        {"dob": "04/03/2012"},
        {"contact_number": "12345"},
        {"parents_email": "not-an-email"},
        {"center_id": 0},
    ]
    for change in bad:
        r = client.post("/api/students", json={**student_form, **change})
        assert r.status_code == 422, change
    assert db.query(Student).count() == 0


def test_blank_optional_email_is_accepted(client, db, student_form):
    student_form["student_email"] = ""
    r = client.post("/api/students", json=student_form)
    assert r.status_code == 201
    assert db.query(Student).one().student_email is None


def test_duplicate_student_id_is_a_conflict(client, db, student_form):
    student_form["student_id"] = 1500
    assert client.post("/api/students", json=student_form).status_code == 201
    r = client.post("/api/students", json=student_form)
    assert r.status_code == 409
    assert db.query(Student).count() == 1


def test_employee_form(client, db):
    payload = {
        "name": "Jane Smith",
        "employee_id": 1001,
        "email": "jane@example.com",
        "designation": "Manager",
        "department": "Administration",
        "date_of_joining": "2022-01-01",
        "contact_number": "9876543210",
        "center_id": 1,
    }
    r = client.post("/api/employees", json=payload)
    assert r.status_code == 201, r.text
    assert "password" not in r.json()

    e = db.query(Employee).one()
    assert e.phone == "9876543210"
    assert e.date_of_birth == date(1980, 1, 1)
    assert e.emergency_contact == "0000000000"
    assert e.employment_type == "Full-Time"
    assert e.password != "defaultpassword"
    assert verify_password("defaultpassword", e.password)


def test_educator_form_maps_fields(client, db):
    payload = {
        "name": "Alice Johnson",
        "educator_id": 2001,
        "email": "alice@example.com",
        "designation": "Teacher",
        "date_of_joining": "2022-06-01",
        "contact_number": "5555555555",
        "center_id": 1,
        "subject": "Art",
        "program_id": 3,
    }
    r = client.post("/api/educators", json=payload)
    assert r.status_code == 201, r.text
    ed = db.query(Educator).one()
    assert ed.employee_id == 2001
    assert ed.phone == "5555555555"
    assert ed.work_location == "Main Campus"
    assert "subject" not in r.json()


def test_quick_create_fills_defaults(client, db):
    r = client.post("/api/quick/students", json={"first_name": "Asha", "last_name": "Rao"})
    assert r.status_code == 201, r.text
    s = db.query(Student).one()
    assert s.contact_number == "0000000000"
    assert s.center_id == 1 and s.program_id == 1
    assert s.dob == date(2000, 1, 1)


def test_quick_create_educator(client, db):
    r = client.post("/api/quick/educators", json={})
    assert r.status_code == 201
    ed = db.query(Educator).one()
    assert ed.name == "Unknown"
    assert ed.email.endswith("@example.com")


def test_quick_create_unknown_table(client):
    assert client.post("/api/quick/centers", json={}).status_code == 404


def test_last_id_defaults_then_follows_max(client, db, student_form):
    r = client.get("/api/students/last-id")
    assert r.json() == {"last_id": DEFAULT_LAST_STUDENT_ID, "next_id": DEFAULT_LAST_STUDENT_ID + 1}

    student_form["student_id"] = 1042
    client.post("/api/students", json=student_form)
    assert client.get("/api/students/last-id").json()["last_id"] == 1042


def test_student_detail(client, db, student_form):
    db.add(Center(center_id=1, name="Bangalore Center"))
    db.add(Program(program_id=1, name="Special Education", center_id=1))
    db.add(Educator(employee_id=1, name="Ravi Teacher"))
    db.commit()

    student_form["student_id"] = 1001
    client.post("/api/students", json=student_form)

    r = client.get("/api/students/1001")
    assert r.status_code == 200
    body = r.json()
    assert body["center_name"] == "Bangalore Center"
    assert body["program_name"] == "Special Education"
    assert body["educator"]["name"] == "Ravi Teacher"

    assert client.get("/api/students/9999").status_code == 404


def test_quick_create_oversized_id_is_rejected(client, db):
    r = client.post("/api/quick/students", json={"first_name": "Asha", "last_name": "Rao",
                                                  "student_id": 99999999999999999999})
    assert r.status_code == 409
    assert "out of range" in r.json()["detail"]
    assert db.query(Student).count() == 0
