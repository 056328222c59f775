# ishanya/routers/centers.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ishanya.db.session import get_db
from ishanya.models import Center, Program
from ishanya.routers.auth import require_admin, require_staff
from ishanya.schemas.records import CenterIn, ProgramIn
from ishanya.services.audit import write_audit
from ishanya.services.catalog import tables_for_program
from ishanya.services.records import RecordError, create_record

router = APIRouter(tags=["Centers"])
log = logging.getLogger("records")


def _get_center(db: Session, center_id: int) -> Center:
    center = db.query(Center).filter(Center.center_id == center_id).first()
    if not center:
        raise HTTPException(status_code=404, detail="Center not found")
    return center


# ================= Centers =================
@router.get("/centers")
def list_centers(db: Session = Depends(get_db), user=Depends(require_staff)):
    rows = db.query(Center).order_by(Center.center_id.asc()).all()
    return [c.to_dict() for c in rows]


@router.get("/centers/{center_id}")
def get_center(center_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    return _get_center(db, center_id).to_dict()


@router.post("/centers", status_code=status.HTTP_201_CREATED)
def create_center(
    payload: CenterIn,
    request: Request,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    try:
        center = create_record(db, "centers", payload.model_dump(exclude_none=True))
    except RecordError as e:
        write_audit(db, action="CREATE", target_type="Center", target_id=payload.center_id,
                    status="FAILURE", new_values={"error": str(e)}, request=request)
        db.commit()
        raise HTTPException(status_code=409, detail=str(e))

    write_audit(db, action="CREATE", target_type="Center", target_id=center.center_id,
                new_values=center.to_dict(), request=request)
    db.commit()
    return center.to_dict()


@router.get("/centers/{center_id}/programs")
def list_center_programs(center_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    center = _get_center(db, center_id)
    return [p.to_dict() for p in sorted(center.programs, key=lambda p: p.program_id)]


# ================= Programs =================
@router.get("/programs")
def list_programs(db: Session = Depends(get_db), user=Depends(require_staff)):
    rows = db.query(Program).order_by(Program.program_id.asc()).all()
    return [
        {**p.to_dict(), "center_name": p.center.name if p.center else None}
        for p in rows
    ]


@router.post("/programs", status_code=status.HTTP_201_CREATED)
def create_program(
    payload: ProgramIn,
    request: Request,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    _get_center(db, payload.center_id)
    try:
        program = create_record(db, "programs", payload.model_dump(exclude_none=True))
    except RecordError as e:
        raise HTTPException(status_code=409, detail=str(e))

    write_audit(db, action="CREATE", target_type="Program", target_id=program.program_id,
                new_values=program.to_dict(), request=request)
    db.commit()
    return program.to_dict()


@router.get("/programs/{program_id}/tables")
def program_tables(program_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    if not db.query(Program).filter(Program.program_id == program_id).first():
        raise HTTPException(status_code=404, detail="Program not found")
    return tables_for_program(program_id)
