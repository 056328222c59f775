# ishanya/routers/tasks.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ishanya.db.session import get_db
from ishanya.routers.auth import require_staff
from ishanya.schemas.records import TaskIn
from ishanya.services import tasks as svc
from ishanya.services.records import get_student

router = APIRouter(tags=["Tasks"])


def _student_or_404(db: Session, student_id: int):
    if not get_student(db, student_id):
        raise HTTPException(status_code=404, detail="Student not found")


@router.post("/rpc/{function}")
def rpc(
    function: str,
    params: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    try:
        return svc.call_rpc(db, function, params or {})
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Could not find the function {function}")
    except svc.TaskNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/students/{student_id}/tasks")
def list_tasks(student_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    _student_or_404(db, student_id)
    return svc.get_student_tasks(db, student_id)


@router.post("/students/{student_id}/tasks", status_code=status.HTTP_201_CREATED)
def add_task(
    student_id: int,
    payload: TaskIn,
    db: Session = Depends(get_db),
    user=Depends(require_staff),
):
    _student_or_404(db, student_id)
    try:
        return svc.create_student_task(db, student_id, payload.description, payload.due_date, payload.completed)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/tasks/{task_id}/toggle")
def toggle(task_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    try:
        return svc.toggle_task(db, task_id)
    except svc.TaskNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
