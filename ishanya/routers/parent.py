# ishanya/routers/parent.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from ishanya.db.session import get_db
from ishanya.models import Educator, Parent, User
from ishanya.routers.auth import require_roles
from ishanya.routers.reports import sign_report
from ishanya.schemas.records import FeedbackIn
from ishanya.services.audit import write_audit
from ishanya.services.records import get_student
from ishanya.services.storage import LocalObjectStorage, get_storage, report_prefix

router = APIRouter(prefix="/parent", tags=["Parent"])

require_parent = require_roles("parent")


def _parent_or_404(db: Session, user: User) -> Parent:
    email = (user.email or user.username or "").strip().lower()
    parent = db.query(Parent).filter(func.lower(Parent.email) == email).first()
    if not parent:
        raise HTTPException(status_code=404, detail="No parent record for this account")
    return parent


@router.get("/me")
def parent_home(
    db: Session = Depends(get_db),
    storage: LocalObjectStorage = Depends(get_storage),
    user: User = Depends(require_parent),
):
    parent = _parent_or_404(db, user)
    student = get_student(db, parent.student_id) if parent.student_id is not None else None

    educator = None
    reports = []
    if student:
        if student.educator_employee_id is not None:
            educator = (
                db.query(Educator)
                .filter(Educator.employee_id == student.educator_employee_id)
                .first()
            )
        reports = storage.list(report_prefix(student.student_id))

    return {
        "parent": parent.to_dict(),
        "student": student.to_dict() if student else None,
        "educator": educator.to_dict() if educator else None,
        "reports": reports,
    }


@router.put("/feedback")
def save_feedback(
    payload: FeedbackIn,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_parent),
):
    parent = _parent_or_404(db, user)
    before = parent.feedback
    parent.feedback = payload.feedback
    write_audit(db, action="UPDATE", target_type="ParentFeedback", target_id=parent.id,
                prev_values={"feedback": before}, new_values={"feedback": payload.feedback},
                request=request)
    db.commit()
    return {"ok": True, "feedback": parent.feedback}


@router.get("/reports/{filename}/url")
def parent_report_url(
    filename: str,
    db: Session = Depends(get_db),
    storage: LocalObjectStorage = Depends(get_storage),
    user: User = Depends(require_parent),
):
    parent = _parent_or_404(db, user)
    if parent.student_id is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return sign_report(storage, parent.student_id, filename)
