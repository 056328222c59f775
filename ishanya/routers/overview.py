# ishanya/routers/overview.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from ishanya.db.session import get_db
from ishanya.models import AuditLog, Center, Educator, Employee, Program, Student
from ishanya.routers.auth import require_staff

router = APIRouter(prefix="/overview", tags=["Overview"])


@router.get("/stats")
def stats(db: Session = Depends(get_db), user=Depends(require_staff)):
    def count(model):
        return db.query(func.count(model.id)).scalar() or 0

    return {
        "students": count(Student),
        "educators": count(Educator),
        "employees": count(Employee),
        "centers": count(Center),
        "programs": count(Program),
    }


@router.get("/activity")
def activity(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    rows = (
        db.query(AuditLog)
        .order_by(AuditLog.occurred_at.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )
    return [r.to_dict() for r in rows]
