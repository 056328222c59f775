# ishanya/services/records.py
from __future__ import annotations

import random
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ishanya.models import Student
from ishanya.schemas.records import EducatorIn, EmployeeIn, StudentIn
from ishanya.services.catalog import ColumnError, bind_row, model_for

log = logging.getLogger("records")

DEFAULT_LAST_STUDENT_ID = 1000
DEFAULT_PASSWORD = "defaultpassword"
PLACEHOLDER_PHONE = "0000000000"


class RecordError(Exception):
    """Insert/update rejected by the table constraints."""


def random_id() -> int:
    return random.randint(0, 9999)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _today() -> str:
    return date.today().isoformat()


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v) or default
    except (TypeError, ValueError):
        return default


# ==================== generic write ====================
def create_record(db: Session, table: str, values: Dict[str, Any]):
    model = model_for(table)
    try:
        obj = model(**bind_row(table, values, model=model))
        db.add(obj)
        db.commit()
    except ColumnError as e:
        db.rollback()
        raise RecordError(str(e))
    except IntegrityError as e:
        db.rollback()
        log.error("Error creating %s row: %s", table, e.orig)
        raise RecordError(str(e.orig))
    db.refresh(obj)
    return obj


def update_record(db: Session, table: str, obj, values: Dict[str, Any]):
    try:
        for k, v in bind_row(table, values, model=type(obj)).items():
            setattr(obj, k, v)
        db.commit()
    except ColumnError as e:
        db.rollback()
        raise RecordError(str(e))
    except IntegrityError as e:
        db.rollback()
        log.error("Error updating %s row: %s", table, e.orig)
        raise RecordError(str(e.orig))
    db.refresh(obj)
    return obj


def delete_record(db: Session, obj) -> None:
    try:
        db.delete(obj)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise RecordError(str(getattr(e, "orig", None) or e))


# ==================== form payloads ====================
def student_values(form: StudentIn) -> Dict[str, Any]:
    data = form.model_dump()
    data.update(
        created_at=_now_iso(),
        student_id=form.student_id or random_id(),
        enrollment_year=form.enrollment_year or date.today().year,
        gender=form.gender or "Not Specified",
        status=form.status or "Active",
        educator_employee_id=form.educator_employee_id or 1,
        student_email=str(form.student_email) if form.student_email else None,
        parents_email=str(form.parents_email) if form.parents_email else None,
    )
    return data


def employee_values(form: EmployeeIn) -> Dict[str, Any]:
    return {
        "name": form.name,
        "employee_id": form.employee_id,
        "email": str(form.email),
        "designation": form.designation,
        "department": form.department,
        "date_of_joining": form.date_of_joining,
        "phone": form.contact_number,
        "center_id": form.center_id,
        "date_of_birth": form.date_of_birth or "1980-01-01",
        "gender": form.gender or "Not Specified",
        "emergency_contact": form.emergency_contact or PLACEHOLDER_PHONE,
        "emergency_contact_name": form.emergency_contact_name or "Emergency Contact",
        "employment_type": form.employment_type or "Full-Time",
        "password": form.password or DEFAULT_PASSWORD,
        "created_at": _now_iso(),
    }


def educator_values(form: EducatorIn) -> Dict[str, Any]:
    # only columns of the educators table
    return {
        "name": form.name,
        "employee_id": form.educator_id,
        "email": str(form.email),
        "designation": form.designation,
        "date_of_joining": form.date_of_joining,
        "date_of_birth": form.date_of_birth or "1980-01-01",
        "phone": form.contact_number,
        "work_location": form.work_location or "Main Campus",
        "center_id": form.center_id,
        "created_at": _now_iso(),
    }


# ==================== quick create (loose payloads) ====================
def quick_student_values(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **data,
        "created_at": _now_iso(),
        "student_id": data.get("student_id") or random_id(),
        "enrollment_year": data.get("enrollment_year") or date.today().year,
        "gender": data.get("gender") or "Not Specified",
        "status": data.get("status") or "Active",
        "educator_employee_id": data.get("educator_employee_id") or 1,
        "center_id": _as_int(data.get("center_id"), 1),
        "program_id": _as_int(data.get("program_id"), 1),
        "contact_number": data.get("contact_number") or PLACEHOLDER_PHONE,
        "dob": data.get("dob") or "2000-01-01",
    }


def quick_educator_values(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **data,
        "created_at": _now_iso(),
        "employee_id": data.get("employee_id") or random_id(),
        "name": data.get("name") or "Unknown",
        "designation": data.get("designation") or "Teacher",
        "email": data.get("email") or f"educator{random_id()}@example.com",
        "phone": data.get("phone") or PLACEHOLDER_PHONE,
        "date_of_birth": data.get("date_of_birth") or "1980-01-01",
        "date_of_joining": data.get("date_of_joining") or _today(),
        "work_location": data.get("work_location") or "Main Campus",
        "center_id": _as_int(data.get("center_id"), 1),
    }


def quick_employee_values(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **data,
        "created_at": _now_iso(),
        "employee_id": data.get("employee_id") or random_id(),
        "name": data.get("name") or "Unknown",
        "gender": data.get("gender") or "Not Specified",
        "designation": data.get("designation") or "Staff",
        "department": data.get("department") or "Administration",
        "employment_type": data.get("employment_type") or "Full-Time",
        "email": data.get("email") or f"employee{random_id()}@example.com",
        "phone": data.get("phone") or PLACEHOLDER_PHONE,
        "date_of_birth": data.get("date_of_birth") or "1980-01-01",
        "date_of_joining": data.get("date_of_joining") or _today(),
        "emergency_contact_name": data.get("emergency_contact_name") or "Emergency Contact",
        "emergency_contact": data.get("emergency_contact") or PLACEHOLDER_PHONE,
        "center_id": _as_int(data.get("center_id"), 1),
        "password": data.get("password") or DEFAULT_PASSWORD,
    }


QUICK_BUILDERS = {
    "students": quick_student_values,
    "educators": quick_educator_values,
    "employees": quick_employee_values,
}


# ==================== lookups ====================
def last_student_id(db: Session) -> int:
    last: Optional[int] = db.query(func.max(Student.student_id)).scalar()
    return last if last is not None else DEFAULT_LAST_STUDENT_ID


def get_student(db: Session, student_id: int) -> Optional[Student]:
    return db.query(Student).filter(Student.student_id == student_id).first()
