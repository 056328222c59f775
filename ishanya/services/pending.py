# ishanya/services/pending.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ishanya.core.config import settings
from ishanya.models import Center, Program, Student
from ishanya.schemas.records import PendingIntakeIn, StudentIn
from ishanya.services.records import create_record, last_student_id, student_values
from ishanya.services.sheets import SheetsClient

log = logging.getLogger("pending")

# sheet column order -> field name
FIELDS = (
    "first_name", "last_name", "dob", "gender", "program", "center",
    "contact_person", "contact_number", "email", "address",
)


@dataclass
class PendingStudent:
    row_index: int
    first_name: str = ""
    last_name: str = ""
    dob: str = ""
    gender: str = ""
    program: str = ""
    center: str = ""
    contact_person: str = ""
    contact_number: str = ""
    email: str = ""
    address: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


class PendingNotFound(LookupError):
    pass


def list_pending(sheets: SheetsClient) -> List[PendingStudent]:
    rows = sheets.fetch(settings.PENDING_SHEET_ID, settings.PENDING_SHEET_RANGE)
    out: List[PendingStudent] = []
    # rows[0] is the header; sheet rows are 1-based
    for i, row in enumerate(rows[1:], start=2):
        values = [("" if v is None else str(v)) for v in row] + [""] * len(FIELDS)
        out.append(PendingStudent(row_index=i, **dict(zip(FIELDS, values))))
    return out


def get_pending(sheets: SheetsClient, row_index: int) -> PendingStudent:
    for p in list_pending(sheets):
        if p.row_index == row_index:
            return p
    raise PendingNotFound(f"No pending review at row {row_index}")


def resolve_center_program(db: Session, center_name: str, program_name: str) -> Tuple[Optional[int], Optional[int]]:
    """Center by name substring, then program by name substring within that center."""
    center = (
        db.query(Center)
        .filter(Center.name.ilike(f"%{(center_name or '').strip()}%"))
        .order_by(Center.id.asc())
        .first()
    )
    if not center:
        return None, None
    program = (
        db.query(Program)
        .filter(Program.center_id == center.center_id)
        .filter(Program.name.ilike(f"%{(program_name or '').strip()}%"))
        .order_by(Program.id.asc())
        .first()
    )
    return center.center_id, (program.program_id if program else None)


def prefill(db: Session, sheets: SheetsClient, row_index: int) -> dict:
    p = get_pending(sheets, row_index)
    center_id, program_id = resolve_center_program(db, p.center, p.program)
    return {
        "pending": p.to_dict(),
        "center_id": center_id,
        "program_id": program_id,
        "initial_data": {
            "student_id": last_student_id(db) + 1,
            "first_name": p.first_name,
            "last_name": p.last_name,
            "dob": p.dob,
            "gender": p.gender,
            "contact_person": p.contact_person,
            "contact_number": p.contact_number,
            "parents_email": p.email,
            "address": p.address,
            "center_id": center_id,
            "program_id": program_id,
        },
    }


def reject(sheets: SheetsClient, row_index: int) -> PendingStudent:
    p = get_pending(sheets, row_index)
    sheets.delete_row(row_index)
    log.info("Rejected pending review row %s (%s %s)", row_index, p.first_name, p.last_name)
    return p


def accept(db: Session, sheets: SheetsClient, row_index: int, form: StudentIn) -> Student:
    """
    Create the student, then drop the source row. The two steps are not
    atomic: if the delete fails the student stays and the row remains.
    """
    get_pending(sheets, row_index)
    student = create_record(db, "students", student_values(form))
    sheets.delete_row(row_index)
    log.info("Accepted pending review row %s as student %s", row_index, student.student_id)
    return student


def append_pending(sheets: SheetsClient, data: PendingIntakeIn) -> None:
    values = [getattr(data, f) or "" for f in FIELDS]
    sheets.append(settings.PENDING_SHEET_ID, settings.PENDING_SHEET_RANGE, [values])
