# ishanya/routers/tables.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from ishanya.db.session import get_db
from ishanya.routers.auth import require_admin, require_staff
from ishanya.services.audit import write_audit
from ishanya.services.catalog import ALLOWED_TABLES, describe_columns, model_for
from ishanya.services.export_service import build_table_xlsx
from ishanya.services.records import RecordError, delete_record, update_record

router = APIRouter(prefix="/tables", tags=["Tables"])
log = logging.getLogger("records")

PAGE_SIZE = 50
XLSX_MEDIA = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _model_or_404(table: str):
    if table not in ALLOWED_TABLES:
        raise HTTPException(status_code=404, detail=f"Unknown table '{table}'")
    return model_for(table)


def _query(db: Session, model, center_id: Optional[int], program_id: Optional[int]):
    q = db.query(model)
    if center_id is not None and hasattr(model, "center_id"):
        q = q.filter(model.center_id == center_id)
    if program_id is not None and hasattr(model, "program_id"):
        q = q.filter(model.program_id == program_id)
    return q.order_by(model.id.asc())


def _row_or_404(db: Session, model, row_id: int):
    obj = db.get(model, row_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Row not found")
    return obj


@router.get("/{table}")
def list_rows(
    table: str,
    center_id: Optional[int] = Query(None),
    program_id: Optional[int] = Query(None),
    limit: int = Query(PAGE_SIZE, ge=1, le=PAGE_SIZE),
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    model = _model_or_404(table)
    rows = _query(db, model, center_id, program_id).limit(limit).all()
    return {
        "table": table,
        "columns": describe_columns(table),
        "rows": [r.to_dict() for r in rows],
    }


@router.get("/{table}/export")
def export_rows(
    table: str,
    center_id: Optional[int] = Query(None),
    program_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    model = _model_or_404(table)
    rows = [r.to_dict() for r in _query(db, model, center_id, program_id).all()]
    content = build_table_xlsx(table, describe_columns(table), rows)
    filename = f"{table}_{datetime.now().strftime('%Y%m%d')}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch("/{table}/{row_id}")
def update_row(
    table: str,
    row_id: int,
    request: Request,
    changes: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    model = _model_or_404(table)
    obj = _row_or_404(db, model, row_id)
    changes = {k: v for k, v in changes.items() if k != "id"}
    if not changes:
        raise HTTPException(status_code=400, detail="Nothing to update")

    before = obj.to_dict()
    try:
        obj = update_record(db, table, obj, changes)
    except RecordError as e:
        write_audit(db, action="UPDATE", target_type=table, target_id=row_id, status="FAILURE",
                    prev_values=before, new_values={"error": str(e)}, request=request)
        db.commit()
        raise HTTPException(status_code=409, detail=str(e))

    after = obj.to_dict()
    write_audit(db, action="UPDATE", target_type=table, target_id=row_id,
                prev_values=before, new_values=after, request=request)
    db.commit()
    return after


@router.delete("/{table}/{row_id}")
def delete_row(
    table: str,
    row_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user=Depends(require_admin),
):
    model = _model_or_404(table)
    obj = _row_or_404(db, model, row_id)
    before = obj.to_dict()
    try:
        delete_record(db, obj)
    except RecordError as e:
        raise HTTPException(status_code=409, detail=str(e))

    write_audit(db, action="DELETE", target_type=table, target_id=row_id,
                prev_values=before, request=request)
    db.commit()
    log.info("Deleted %s row %s", table, row_id)
    return {"ok": True, "deleted": row_id}
