# app/services/task_lifecycle.py
"""Task status transitions, edits and deletion.

Status moves are unrestricted (any column to any column) and the only derived
field is completed_at, which is set while a task sits in COMPLETED and cleared
as soon as it leaves. Soft deletion is a flag orthogonal to status.
"""
import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models.task import Task, TaskStatus, TaskPriority
from app.utils.permissions import DeleteMode, delete_mode

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "due_date", "priority")


class TaskLifecycleError(Exception):
    """Base error for task lifecycle operations"""


class TaskValidationError(TaskLifecycleError, ValueError):
    """Raised when task input fails validation before any mutation"""


def _clean_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise TaskValidationError("Title is required")
    return title.strip()


def _clean_priority(priority: Optional[int]) -> int:
    if priority is None:
        return TaskPriority.LOW.value
    try:
        return TaskPriority(int(priority)).value
    except (TypeError, ValueError):
        raise TaskValidationError("Priority must be 1, 2 or 3")


def new_task(
    project_id: int,
    title: str,
    description: Optional[str] = None,
    priority: Optional[int] = None,
    due_date: Optional[date] = None,
) -> Task:
    """Build an unsaved task in its initial state"""
    return Task(
        project_id=project_id,
        title=_clean_title(title),
        description=description,
        priority=_clean_priority(priority),
        due_date=due_date,
        status=TaskStatus.TO_START,
        completed_at=None,
        is_soft_deleted=False,
    )


def transition(task: Task, new_status: TaskStatus, now: Optional[datetime] = None) -> bool:
    """Move task to new_status and keep completed_at in step.

    Returns False when the status is unchanged and nothing was mutated.
    """
    new_status = TaskStatus(new_status)
    if task.status == new_status:
        return False

    if new_status == TaskStatus.COMPLETED:
        task.completed_at = now or datetime.utcnow()
    else:
        task.completed_at = None
    task.status = new_status
    return True


def apply_edits(task: Task, **fields) -> Task:
    """Update descriptive fields; status and deletion state are never touched here"""
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise TaskValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    if "title" in fields:
        fields["title"] = _clean_title(fields["title"])
    if "priority" in fields:
        # The default only applies at creation, an edit cannot clear it
        if fields["priority"] is None:
            raise TaskValidationError("Priority must be 1, 2 or 3")
        fields["priority"] = _clean_priority(fields["priority"])

    for field, value in fields.items():
        setattr(task, field, value)
    return task


def soft_delete(task: Task) -> Task:
    task.is_soft_deleted = True
    return task


def erase(db: Session, task: Task) -> None:
    db.delete(task)


def delete_task(db: Session, task: Task, actor) -> DeleteMode:
    """Delete task the way actor's tier dictates; the caller commits"""
    mode = delete_mode(actor)
    if mode == DeleteMode.ERASE:
        erase(db, task)
    else:
        soft_delete(task)
    logger.info(f"Task {task.id} {mode.value} by {actor.username}")
    return mode
