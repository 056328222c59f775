# tests/test_csv_import.py
import json
from datetime import date, datetime, timezone

import pytest

from ishanya.models import Student
from ishanya.services.csv_import import (
    CsvFormatError,
    build_records,
    bulk_insert,
    coerce_value,
    default_mappings,
    import_csv,
    mapping_options,
    parse_csv,
)

EXAMPLE = "first_name,last_name,gender,dob\nJohn,Doe,Male,2000-01-01\n"
NOW = datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)


def test_parse_trims_and_skips_blank_lines():
    parsed = parse_csv(" first_name , last_name \n John , Doe \n\n  Asha ,Rao\n")
    assert parsed.headers == ["first_name", "last_name"]
    assert parsed.records == [
        {"first_name": "John", "last_name": "Doe"},
        {"first_name": "Asha", "last_name": "Rao"},
    ]


def test_parse_pads_short_rows():
    parsed = parse_csv("a,b,c\n1,2\n")
    assert parsed.records == [{"a": "1", "b": "2", "c": ""}]


def test_parse_empty_file():
    with pytest.raises(CsvFormatError):
        parse_csv("   \n")


@pytest.mark.parametrize("raw, expected", [
    ("", None),
    (None, None),
    ("42", 42),
    ("-7", -7),
    ("3.5", 3.5),
    ("2000-01-01", "2000-01-01"),
    ("12a", "12a"),
    ("John", "John"),
])
def test_coerce_value(raw, expected):
    assert coerce_value(raw) == expected


def test_example_row_maps_to_one_record():
    parsed = parse_csv(EXAMPLE)
    records = build_records(parsed.records, default_mappings(parsed.headers), now=NOW)
    assert records == [{
        "first_name": "John",
        "last_name": "Doe",
        "gender": "Male",
        "dob": "2000-01-01",
        "created_at": NOW.isoformat(),
    }]


def test_unmapped_headers_are_omitted():
    parsed = parse_csv("First Name,Notes,Age\nJohn,likes art,9\n")
    mappings = {"First Name": "first_name", "Notes": "", "Age": "age"}
    records = build_records(parsed.records, mappings, now=NOW)
    assert records == [{"first_name": "John", "age": 9, "created_at": NOW.isoformat()}]


def test_n_rows_give_n_records():
    rows = "\n".join(f"S{i},Last{i}" for i in range(7))
    parsed = parse_csv("first_name,last_name\n" + rows)
    assert len(build_records(parsed.records, default_mappings(parsed.headers))) == 7


def test_mapping_options_include_columns_and_headers():
    opts = mapping_options("students", ["First_Name", "Hobby"])
    assert opts[0] == ""
    assert "first_name" in opts and "center_id" in opts
    assert "hobby" in opts


def test_bulk_insert_rejects_table_outside_allow_list(db):
    result = bulk_insert(db, "tasks", [{"description": "x"}])
    assert result.success is False
    assert result.message.startswith("Invalid table name: tasks. Allowed tables are: students")
    assert result.count == 0


def test_import_example_into_students(db):
    result = import_csv(db, "students", EXAMPLE)
    assert result.success, result.message
    assert result.message == "Successfully inserted 1 records into students"

    s = db.query(Student).one()
    assert (s.first_name, s.last_name, s.gender) == ("John", "Doe", "Male")
    assert s.dob == date(2000, 1, 1)
    assert s.created_at is not None


def test_failed_batch_writes_nothing(db):
    text = "student_id,first_name,last_name\n5,A1,B1\n6,A2,B2\n5,A3,B3\n"
    result = import_csv(db, "students", text)
    assert result.success is False
    assert result.message.startswith("Error inserting data:")
    assert db.query(Student).count() == 0


def test_unknown_column_fails_whole_batch(db):
    text = "first_name,last_name,favourite_colour\nJohn,Doe,blue\n"
    result = import_csv(db, "students", text)
    assert result.success is False
    assert "favourite_colour" in result.message
    assert db.query(Student).count() == 0


# ---------- HTTP ----------
def test_template_download(client):
    r = client.get("/api/import/students/template")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert r.text.splitlines()[0].startswith("first_name,last_name,gender,dob")


def test_template_missing_for_other_tables(client):
    r = client.get("/api/import/centers/template")
    assert r.status_code == 404
    assert r.json()["detail"] == "No template available for this table"


def test_preview(client):
    files = {"file": ("students.csv", EXAMPLE, "text/csv")}
    r = client.post("/api/import/students/preview", files=files)
    assert r.status_code == 200
    body = r.json()
    assert body["headers"] == ["first_name", "last_name", "gender", "dob"]
    assert body["mappings"]["first_name"] == "first_name"
    assert body["count"] == 1


def test_import_endpoint_with_mappings(client, db):
    text = "Given,Family,Skip me\nJohn,Doe,x\nAsha,Rao,y\n"
    files = {"file": ("students.csv", text, "text/csv")}
    data = {"mappings": json.dumps({"Given": "first_name", "Family": "last_name", "Skip me": ""})}
    r = client.post("/api/import/students", files=files, data=data)
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 2
    assert db.query(Student).count() == 2


def test_import_endpoint_reports_failure(client, db):
    files = {"file": ("x.csv", EXAMPLE, "text/csv")}
    r = client.post("/api/import/tasks", files=files)
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Invalid table name: tasks")


def test_import_endpoint_rejects_non_csv(client):
    files = {"file": ("x.txt", "hello", "text/plain")}
    r = client.post("/api/import/students", files=files)
    assert r.status_code == 400


def test_mapping_for_absent_header_adds_nothing():
    parsed = parse_csv("first_name\nJohn\n")
    mappings = {"first_name": "first_name", "Last Name": "last_name"}
    records = build_records(parsed.records, mappings, now=NOW)
    assert records == [{"first_name": "John", "created_at": NOW.isoformat()}]


def test_imported_employee_password_is_hashed(db):
    from ishanya.core.security import verify_password
    from ishanya.models import Employee

    result = import_csv(db, "employees", "name,password\nAsha,secret123\n")
    assert result.success, result.message
    stored = db.query(Employee).one().password
    assert stored != "secret123"
    assert verify_password("secret123", stored)


def test_oversized_integer_fails_batch(db):
    text = "student_id,first_name,last_name\n99999999999999999999,A,B\n"
    result = import_csv(db, "students", text)
    assert result.success is False
    assert result.message.startswith("Error inserting data:")
    assert "out of range" in result.message
    assert db.query(Student).count() == 0


def test_import_endpoint_oversized_integer(client, db):
    files = {"file": ("students.csv", "student_id,first_name,last_name\n99999999999999999999,A,B\n", "text/csv")}
    r = client.post("/api/import/students", files=files)
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Error inserting data:")
    assert db.query(Student).count() == 0
