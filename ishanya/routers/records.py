# ishanya/routers/records.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ishanya.db.session import get_db
from ishanya.models import Center, Educator, Program
from ishanya.routers.auth import require_admin, require_staff
from ishanya.schemas.records import EducatorIn, EmployeeIn, StudentIn
from ishanya.services.audit import write_audit
from ishanya.services.records import (
    QUICK_BUILDERS,
    RecordError,
    create_record,
    educator_values,
    employee_values,
    get_student,
    last_student_id,
    student_values,
)

router = APIRouter(tags=["Records"])
log = logging.getLogger("records")

TARGET_TYPES = {"students": "Student", "educators": "Educator", "employees": "Employee"}


def _create(db: Session, request: Request, table: str, values: Dict[str, Any]):
    """Insert one row and audit it; constraint failures come back as 409."""
    target_type = TARGET_TYPES[table]
    try:
        obj = create_record(db, table, values)
    except RecordError as e:
        log.error("Error creating %s: %s", target_type.lower(), e)
        write_audit(db, action="CREATE", target_type=target_type, status="FAILURE",
                    new_values={"error": str(e)}, request=request)
        db.commit()
        raise HTTPException(status_code=409, detail=str(e))

    data = obj.to_dict()
    write_audit(db, action="CREATE", target_type=target_type,
                target_id=data.get("student_id") or data.get("employee_id") or obj.id,
                new_values=data, request=request)
    db.commit()
    return data


# ================= Forms =================
@router.post("/students", status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentIn,
    request: Request,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    return _create(db, request, "students", student_values(payload))


@router.post("/educators", status_code=status.HTTP_201_CREATED)
def create_educator(
    payload: EducatorIn,
    request: Request,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    return _create(db, request, "educators", educator_values(payload))


@router.post("/employees", status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeeIn,
    request: Request,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    return _create(db, request, "employees", employee_values(payload))


@router.post("/quick/{table}", status_code=status.HTTP_201_CREATED)
def quick_create(
    table: str,
    request: Request,
    data: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    """Loose payload (dictation, partial forms); missing fields get defaults."""
    builder = QUICK_BUILDERS.get(table)
    if builder is None:
        raise HTTPException(status_code=404, detail=f"Quick create is not available for '{table}'")
    return _create(db, request, table, builder(data))


# ================= Students =================
@router.get("/students/last-id")
def get_last_student_id(db: Session = Depends(get_db), user=Depends(require_staff)):
    last = last_student_id(db)
    return {"last_id": last, "next_id": last + 1}


@router.get("/students/{student_id}")
def student_detail(student_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    student = get_student(db, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    center = db.query(Center).filter(Center.center_id == student.center_id).first()
    program = db.query(Program).filter(Program.program_id == student.program_id).first()
    educator = None
    if student.educator_employee_id is not None:
        educator = db.query(Educator).filter(Educator.employee_id == student.educator_employee_id).first()

    return {
        **student.to_dict(),
        "center_name": center.name if center else None,
        "program_name": program.name if program else None,
        "educator": educator.to_dict() if educator else None,
    }
