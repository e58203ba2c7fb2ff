# app/routers/task.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.task import Task
from app.schemas.task import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskOut, TaskDeleteOut
from app.services import task_lifecycle
from app.services.membership import get_visible_project, is_member
from app.utils.auth import get_current_user, ensure_allowed
from app.utils.permissions import Action
from app.utils.security import SessionIdentity

router = APIRouter(prefix="/tasks", tags=["tasks"])

logger = logging.getLogger(__name__)

def _get_task_for(db: Session, current_user: SessionIdentity, task_id: int, action: Action) -> Task:
    """Load a task the current user can see and check action against it"""
    task = db.query(Task).filter(Task.id == task_id).first()
    project = get_visible_project(db, current_user, task.project_id) if task else None
    if not task or not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )

    ensure_allowed(
        current_user,
        action,
        "This task is deleted and can no longer be changed" if task.is_soft_deleted
        else "You don't have permission to change this task",
        is_member=is_member(project, current_user.id),
        task_soft_deleted=task.is_soft_deleted,
    )
    return task

def _validation_error(e: task_lifecycle.TaskValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Get a specific task if its project is visible to the current user"""
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task or not get_visible_project(db, current_user, task.project_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found"
        )
    return task

@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Create a new task in the TO_START column"""
    project = get_visible_project(db, current_user, task_data.project_id)
    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    ensure_allowed(
        current_user,
        Action.CREATE_TASK,
        "You don't have permission to add tasks to this project",
        is_member=is_member(project, current_user.id),
    )

    try:
        db_task = task_lifecycle.new_task(
            project_id=project.id,
            title=task_data.title,
            description=task_data.description,
            priority=task_data.priority,
            due_date=task_data.due_date,
        )
    except task_lifecycle.TaskValidationError as e:
        raise _validation_error(e)

    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    logger.info(f"Task {db_task.id} created in project {project.id} by {current_user.username}")
    return db_task

@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Edit title, description, due date or priority"""
    task = _get_task_for(db, current_user, task_id, Action.UPDATE_TASK)

    try:
        task_lifecycle.apply_edits(task, **task_update.model_dump(exclude_unset=True))
    except task_lifecycle.TaskValidationError as e:
        db.rollback()
        raise _validation_error(e)

    db.commit()
    db.refresh(task)
    return task

@router.patch("/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: int,
    status_update: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Move a task to another column"""
    task = _get_task_for(db, current_user, task_id, Action.MOVE_TASK)

    previous = task.status
    if task_lifecycle.transition(task, status_update.status):
        db.commit()
        db.refresh(task)
        logger.info(f"Task {task_id} moved {previous.value} -> {task.status.value} by {current_user.username}")
    return task

@router.delete("/{task_id}", response_model=TaskDeleteOut)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Erase the task for the super-admin, soft-delete it for everyone else"""
    task = _get_task_for(db, current_user, task_id, Action.DELETE_TASK)

    mode = task_lifecycle.delete_task(db, task, current_user)
    db.commit()
    return {"task_id": task_id, "mode": mode.value}
