# ishanya/routers/imports.py
from __future__ import annotations

import json
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile
from sqlalchemy.orm import Session

from ishanya.db.session import get_db
from ishanya.routers.auth import require_staff
from ishanya.services.audit import write_audit
from ishanya.services.catalog import NO_TEMPLATE, template_csv
from ishanya.services.csv_import import (
    CsvFormatError,
    build_records,
    bulk_insert,
    default_mappings,
    mapping_options,
    parse_csv,
)

router = APIRouter(prefix="/import", tags=["Import"])
log = logging.getLogger("import")


async def _read_upload(file: UploadFile) -> str:
    fname = (file.filename or "").lower()
    if fname and not fname.endswith(".csv"):
        raise HTTPException(status_code=400, detail="Unsupported file type. Please upload a .csv file")
    raw = await file.read()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="The file is not valid UTF-8 text")


def _parse_mappings(raw: Optional[str]) -> Optional[Dict[str, str]]:
    if raw is None or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="mappings must be a JSON object")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="mappings must be a JSON object")
    return {str(k): ("" if v is None else str(v)) for k, v in data.items()}


@router.get("/{table}/template")
def download_template(table: str, user=Depends(require_staff)):
    body = template_csv(table)
    if body == NO_TEMPLATE:
        raise HTTPException(status_code=404, detail=NO_TEMPLATE)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{table}_template.csv"'},
    )


@router.post("/{table}/preview")
async def preview(table: str, file: UploadFile = File(...), user=Depends(require_staff)):
    text = await _read_upload(file)
    try:
        parsed = parse_csv(text)
    except CsvFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "table": table,
        "headers": parsed.headers,
        "mappings": default_mappings(parsed.headers),
        "options": mapping_options(table, parsed.headers),
        "count": len(parsed.records),
        "sample": parsed.records[:5],
    }


@router.post("/{table}")
async def import_table(
    table: str,
    request: Request,
    file: UploadFile = File(...),
    mappings: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    text = await _read_upload(file)
    mapping = _parse_mappings(mappings)
    try:
        parsed = parse_csv(text)
    except CsvFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    rows = build_records(parsed.records, mapping if mapping is not None else default_mappings(parsed.headers))
    if not rows:
        raise HTTPException(status_code=400, detail="No records to import")

    result = bulk_insert(db, table, rows)
    write_audit(
        db,
        action="IMPORT",
        target_type=table,
        status="SUCCESS" if result.success else "FAILURE",
        new_values={"file": file.filename, "rows": len(rows), "message": result.message},
        request=request,
    )
    db.commit()

    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return {"success": True, "message": result.message, "count": result.count}
