# ishanya/routers/reports.py
from __future__ import annotations

import logging
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status
from sqlalchemy.orm import Session

from ishanya.core.config import settings
from ishanya.db.session import get_db
from ishanya.routers.auth import require_staff
from ishanya.services.audit import write_audit
from ishanya.services.records import get_student
from ishanya.services.storage import (
    LocalObjectStorage,
    ObjectNotFound,
    StorageError,
    get_storage,
    report_key,
    report_prefix,
    safe_filename,
)

router = APIRouter(tags=["Reports"])
log = logging.getLogger("storage")

PDF_TYPES = {"application/pdf", "application/x-pdf"}


def _student_or_404(db: Session, student_id: int):
    student = get_student(db, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


def sign_report(storage: LocalObjectStorage, student_id: int, filename: str) -> dict:
    key = f"{report_prefix(student_id)}/{safe_filename(filename)}"
    try:
        url = storage.create_signed_url(key, settings.SIGNED_URL_TTL)
    except ObjectNotFound:
        raise HTTPException(status_code=404, detail="Report not found")
    except StorageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"signed_url": url, "expires_in": settings.SIGNED_URL_TTL}


@router.post("/students/{student_id}/reports", status_code=status.HTTP_201_CREATED)
async def upload_report(
    student_id: int,
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: LocalObjectStorage = Depends(get_storage),
    user=Depends(require_staff),
):
    _student_or_404(db, student_id)
    name = file.filename or ""
    if file.content_type not in PDF_TYPES and not name.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Please upload a PDF file")

    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="The file is empty.")

    key = report_key(student_id, name or "report.pdf")
    try:
        storage.upload(key, data)
    except StorageError as e:
        log.error("Error uploading report for student %s: %s", student_id, e)
        raise HTTPException(status_code=409, detail=str(e))

    write_audit(db, action="UPLOAD", target_type="Report", target_id=student_id,
                new_values={"path": key, "size": len(data)}, request=request)
    db.commit()
    return {"path": key, "name": PurePosixPath(key).name, "size": len(data)}


@router.get("/students/{student_id}/reports")
def list_reports(
    student_id: int,
    db: Session = Depends(get_db),
    storage: LocalObjectStorage = Depends(get_storage),
    user=Depends(require_staff),
):
    _student_or_404(db, student_id)
    return storage.list(report_prefix(student_id))


@router.get("/students/{student_id}/reports/{filename}/url")
def report_url(
    student_id: int,
    filename: str,
    db: Session = Depends(get_db),
    storage: LocalObjectStorage = Depends(get_storage),
    user=Depends(require_staff),
):
    _student_or_404(db, student_id)
    return sign_report(storage, student_id, filename)


@router.get("/storage/signed/{token}")
def download_signed(token: str, storage: LocalObjectStorage = Depends(get_storage)):
    try:
        key, data = storage.read_signed(token)
    except ObjectNotFound:
        raise HTTPException(status_code=404, detail="Report not found")
    except StorageError as e:
        raise HTTPException(status_code=403, detail=str(e))

    name = PurePosixPath(key).name
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{name}"'},
    )
