# ishanya/services/tasks.py
"""
Task functions. Callers never touch the tasks table directly; the RPC
router and the student detail endpoints both go through here.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ishanya.models import Task
from ishanya.services.catalog import ColumnError, to_bool, to_datetime

log = logging.getLogger("tasks")


class TaskNotFound(LookupError):
    pass


def ensure_created_at(tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    now = datetime.now(timezone.utc).isoformat()
    return [{**t, "created_at": t.get("created_at") or now} for t in tasks]


def get_student_tasks(db: Session, student_id: int) -> List[Dict[str, Any]]:
    rows = (
        db.query(Task)
        .filter(Task.student_id == student_id)
        .order_by(Task.due_date.asc(), Task.id.asc())
        .all()
    )
    return ensure_created_at([t.to_dict() for t in rows])


def create_student_task(
    db: Session,
    student_id: int,
    description: str,
    due_date: Any,
    completed: Optional[bool] = False,
) -> Dict[str, Any]:
    if not (description or "").strip():
        raise ValueError("Please enter a description and due date for the task.")
    if due_date in (None, ""):
        raise ValueError("Please enter a description and due date for the task.")
    try:
        due = to_datetime(due_date)
    except ColumnError as e:
        raise ValueError(str(e))

    task = Task(
        student_id=int(student_id),
        description=description.strip(),
        due_date=due,
        completed=to_bool(completed) if completed is not None else False,
        created_at=datetime.now(timezone.utc),
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    log.info("Created task %s for student %s", task.id, student_id)
    return task.to_dict()


def update_task_completion(db: Session, task_id: int, completed: bool) -> Dict[str, Any]:
    task = db.get(Task, task_id)
    if not task:
        raise TaskNotFound(f"Task {task_id} not found")
    task.completed = to_bool(completed)
    db.commit()
    db.refresh(task)
    return task.to_dict()


def toggle_task(db: Session, task_id: int) -> Dict[str, Any]:
    task = db.get(Task, task_id)
    if not task:
        raise TaskNotFound(f"Task {task_id} not found")
    return update_task_completion(db, task_id, not task.completed)


# name -> (function, {param name: kwarg})
RPC_FUNCTIONS = {
    "get_student_tasks": (get_student_tasks, {"student_id_param": "student_id"}),
    "create_student_task": (
        create_student_task,
        {
            "student_id_param": "student_id",
            "description_param": "description",
            "due_date_param": "due_date",
            "completed_param": "completed",
        },
    ),
    "update_task_completion": (
        update_task_completion,
        {"task_id_param": "task_id", "completed_param": "completed"},
    ),
}
RPC_FUNCTIONS["add_student_task"] = RPC_FUNCTIONS["create_student_task"]


def call_rpc(db: Session, name: str, params: Dict[str, Any]) -> Any:
    entry = RPC_FUNCTIONS.get(name)
    if entry is None:
        raise KeyError(name)
    fn, arg_map = entry
    kwargs = {}
    for param, arg in arg_map.items():
        if param in params:
            kwargs[arg] = params[param]
    missing = [p for p, a in arg_map.items() if a not in kwargs and a != "completed"]
    if missing:
        raise ValueError(f"Missing parameter(s): {', '.join(missing)}")
    if "student_id" in kwargs:
        kwargs["student_id"] = int(kwargs["student_id"])
    if "task_id" in kwargs:
        kwargs["task_id"] = int(kwargs["task_id"])
    if fn is update_task_completion and "completed" not in kwargs:
        raise ValueError("Missing parameter(s): completed_param")
    return fn(db, **kwargs)
