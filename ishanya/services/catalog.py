# ishanya/services/catalog.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List

from sqlalchemy import Boolean, Date, DateTime, Integer, String

from ishanya.core.security import hash_password
from ishanya.models import TABLE_MODELS

ALLOWED_TABLES = list(TABLE_MODELS)

# Column metadata shown by the table views; tables not listed fall back to the model
TABLE_COLUMNS: Dict[str, List[Dict[str, Any]]] = {
    "students": [
        {"name": "id", "type": "string", "required": False},
        {"name": "student_id", "type": "number", "required": True},
        {"name": "first_name", "type": "string", "required": True},
        {"name": "last_name", "type": "string", "required": True},
        {"name": "gender", "type": "string", "required": True},
        {"name": "dob", "type": "date", "required": True},
        {"name": "enrollment_year", "type": "number", "required": True},
        {"name": "status", "type": "string", "required": True},
        {"name": "student_email", "type": "string", "required": True},
        {"name": "program_id", "type": "number", "required": True},
        {"name": "contact_number", "type": "string", "required": True},
        {"name": "center_id", "type": "number", "required": True},
    ],
    "educators": [
        {"name": "id", "type": "string", "required": False},
        {"name": "employee_id", "type": "number", "required": True},
        {"name": "name", "type": "string", "required": True},
        {"name": "designation", "type": "string", "required": True},
        {"name": "email", "type": "string", "required": True},
        {"name": "phone", "type": "string", "required": True},
        {"name": "date_of_birth", "type": "date", "required": True},
        {"name": "date_of_joining", "type": "date", "required": True},
        {"name": "center_id", "type": "number", "required": True},
    ],
    "employees": [
        {"name": "id", "type": "string", "required": False},
        {"name": "employee_id", "type": "number", "required": True},
        {"name": "name", "type": "string", "required": True},
        {"name": "gender", "type": "string", "required": True},
        {"name": "designation", "type": "string", "required": True},
        {"name": "department", "type": "string", "required": True},
        {"name": "email", "type": "string", "required": True},
        {"name": "phone", "type": "string", "required": True},
        {"name": "date_of_birth", "type": "date", "required": True},
        {"name": "date_of_joining", "type": "date", "required": True},
        {"name": "center_id", "type": "number", "required": True},
    ],
    "tasks": [
        {"name": "id", "type": "number", "required": False},
        {"name": "student_id", "type": "number", "required": True},
        {"name": "description", "type": "string", "required": True},
        {"name": "due_date", "type": "date", "required": True},
        {"name": "completed", "type": "boolean", "required": True},
        {"name": "created_at", "type": "date", "required": False},
    ],
}

# Downloadable CSV templates: header row + one example row
CSV_TEMPLATES: Dict[str, str] = {
    "students": (
        "first_name,last_name,gender,dob,student_email,contact_number,address,program_id,center_id\n"
        "John,Doe,Male,2000-01-01,john@example.com,1234567890,123 Main St,1,1\n"
    ),
    "employees": (
        "name,employee_id,email,designation,department,date_of_joining,phone,center_id\n"
        "Jane Smith,1001,jane@example.com,Manager,Administration,2022-01-01,9876543210,1\n"
    ),
    "educators": (
        "name,employee_id,email,designation,date_of_joining,phone,center_id\n"
        "Alice Johnson,2001,alice@example.com,Teacher,2022-01-01,5555555555,1\n"
    ),
}
NO_TEMPLATE = "No template available for this table"


class ColumnError(ValueError):
    """A value or key the target table cannot accept."""


def table_columns(table_name: str) -> List[Dict[str, Any]]:
    return TABLE_COLUMNS.get((table_name or "").lower(), [])


def tables_for_program(program_id: int) -> List[Dict[str, Any]]:
    # Fixed list; every program exposes the same two tables
    return [
        {
            "id": "students",
            "name": "students",
            "display_name": "Students",
            "description": "Manage students in this program",
            "program_id": program_id,
        },
        {
            "id": "educators",
            "name": "educators",
            "display_name": "Educators",
            "description": "Manage educators in this program",
            "program_id": program_id,
        },
    ]


def template_csv(table_name: str) -> str:
    return CSV_TEMPLATES.get((table_name or "").lower(), NO_TEMPLATE)


def model_for(table_name: str):
    return TABLE_MODELS.get(table_name)


def column_names(table_name: str) -> List[str]:
    model = model_for(table_name)
    if model is None:
        return []
    return [c.key for c in model.__table__.columns if c.key not in model._hidden]


# ==================== value binding ====================

_TRUE = {"true", "t", "1", "yes", "y"}
_FALSE = {"false", "f", "0", "no", "n"}

INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1

# stored as passlib hashes whichever path writes them
HASHED_COLUMNS = {"employees": ("password",)}


def to_date(v: Any) -> date:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v).strip()[:10])
    except ValueError:
        raise ColumnError(f'invalid input syntax for type date: "{v}"')


def to_datetime(v: Any) -> datetime:
    if isinstance(v, datetime):
        return v
    if isinstance(v, date):
        return datetime.combine(v, datetime.min.time())
    s = str(v).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        raise ColumnError(f'invalid input syntax for type timestamp: "{v}"')


def to_int(v: Any) -> int:
    if isinstance(v, bool):
        return int(v)
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    if not isinstance(v, int):
        try:
            v = int(str(v).strip())
        except ValueError:
            raise ColumnError(f'invalid input syntax for type integer: "{v}"')
    if not INT64_MIN <= v <= INT64_MAX:
        raise ColumnError(f'value "{v}" is out of range for type bigint')
    return v


def to_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ColumnError(f'invalid input syntax for type boolean: "{v}"')


def bind_value(column, value: Any) -> Any:
    if value is None:
        return None
    t = column.type
    if isinstance(t, DateTime):
        return to_datetime(value)
    if isinstance(t, Date):
        return to_date(value)
    if isinstance(t, Boolean):
        return to_bool(value)
    if isinstance(t, Integer):
        return to_int(value)
    if isinstance(t, String):
        return str(value)
    return value


def bind_row(table_name: str, data: Dict[str, Any], model=None) -> Dict[str, Any]:
    """
    Cast a loose record onto the table's column types. Unknown keys are
    rejected.
    """
    model = model or model_for(table_name)
    if model is None:
        raise ColumnError(f"Unknown table '{table_name}'")
    cols = {c.key: c for c in model.__table__.columns}
    hashed = HASHED_COLUMNS.get(model.__tablename__, ())
    out: Dict[str, Any] = {}
    for key, value in data.items():
        col = cols.get(key)
        if col is None:
            raise ColumnError(f"Could not find the '{key}' column of '{table_name}'")
        if key in hashed and value not in (None, ""):
            out[key] = hash_password(str(value))
            continue
        out[key] = bind_value(col, value)
    return out


def describe_columns(table_name: str) -> List[Dict[str, Any]]:
    """Hardcoded metadata when present, otherwise derived from the model."""
    cols = table_columns(table_name)
    if cols:
        return cols
    model = model_for(table_name)
    if model is None:
        return []
    out = []
    for c in model.__table__.columns:
        if c.key in model._hidden:
            continue
        if isinstance(c.type, (Date, DateTime)):
            kind = "date"
        elif isinstance(c.type, Boolean):
            kind = "boolean"
        elif isinstance(c.type, Integer):
            kind = "number"
        else:
            kind = "string"
        out.append({"name": c.key, "type": kind, "required": not c.nullable and not c.primary_key})
    return out
