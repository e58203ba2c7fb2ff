# app/schemas/task.py
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional

from app.models.task import TaskStatus


class TaskCreate(BaseModel):
    project_id: int
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None  # ISO date string
    priority: Optional[int] = Field(default=None, ge=1, le=3)


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[int] = Field(default=None, ge=1, le=3)

    model_config = {
        "from_attributes": True
    }


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskOut(BaseModel):
    id: int
    project_id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: int
    due_date: Optional[date] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    is_soft_deleted: bool

    model_config = {
        "from_attributes": True
    }


class TaskDeleteOut(BaseModel):
    task_id: int
    mode: str
