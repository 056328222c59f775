# ishanya/routers/pending.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ishanya.db.session import get_db
from ishanya.routers.auth import require_staff
from ishanya.schemas.records import PendingIntakeIn, StudentIn
from ishanya.services import pending as svc
from ishanya.services.audit import write_audit
from ishanya.services.records import RecordError
from ishanya.services.sheets import SheetError, SheetsClient, get_sheets

router = APIRouter(prefix="/pending-reviews", tags=["Pending reviews"])
log = logging.getLogger("pending")


def _not_found(e: Exception):
    return HTTPException(status_code=404, detail=str(e))


@router.get("")
def list_pending(sheets: SheetsClient = Depends(get_sheets), user=Depends(require_staff)):
    try:
        return [p.to_dict() for p in svc.list_pending(sheets)]
    except SheetError as e:
        log.error("Error fetching pending reviews: %s", e)
        raise HTTPException(status_code=502, detail="Failed to load pending reviews")


@router.post("", status_code=status.HTTP_201_CREATED)
def append_pending(
    payload: PendingIntakeIn,
    sheets: SheetsClient = Depends(get_sheets),
    user=Depends(require_staff),
):
    try:
        svc.append_pending(sheets, payload)
    except SheetError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"ok": True}


@router.get("/{row_index}")
def get_pending(row_index: int, sheets: SheetsClient = Depends(get_sheets), user=Depends(require_staff)):
    try:
        return svc.get_pending(sheets, row_index).to_dict()
    except svc.PendingNotFound as e:
        raise _not_found(e)


@router.get("/{row_index}/prefill")
def prefill(
    row_index: int,
    db: Session = Depends(get_db),
    sheets: SheetsClient = Depends(get_sheets),
    user=Depends(require_staff),
):
    try:
        return svc.prefill(db, sheets, row_index)
    except svc.PendingNotFound as e:
        raise _not_found(e)


@router.post("/{row_index}/reject")
def reject(
    row_index: int,
    request: Request,
    db: Session = Depends(get_db),
    sheets: SheetsClient = Depends(get_sheets),
    user=Depends(require_staff),
):
    try:
        p = svc.reject(sheets, row_index)
    except svc.PendingNotFound as e:
        raise _not_found(e)
    except SheetError as e:
        raise HTTPException(status_code=502, detail=str(e))

    write_audit(db, action="REJECT", target_type="PendingReview", target_id=row_index,
                prev_values=p.to_dict(), request=request)
    db.commit()
    return {"ok": True, "message": "Student application rejected"}


@router.post("/{row_index}/accept", status_code=status.HTTP_201_CREATED)
def accept(
    row_index: int,
    payload: StudentIn,
    request: Request,
    db: Session = Depends(get_db),
    sheets: SheetsClient = Depends(get_sheets),
    user=Depends(require_staff),
):
    try:
        student = svc.accept(db, sheets, row_index, payload)
    except svc.PendingNotFound as e:
        raise _not_found(e)
    except RecordError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SheetError as e:
        # student row is already in; the sheet row stays
        log.error("Accepted row %s but could not remove it: %s", row_index, e)
        raise HTTPException(status_code=502, detail=str(e))

    data = student.to_dict()
    write_audit(db, action="ACCEPT", target_type="PendingReview", target_id=row_index,
                new_values=data, request=request)
    db.commit()
    return {"ok": True, "message": "Student added successfully", "student": data}
