from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime
from .user import UserBasic
from .task import TaskOut


class ProjectCreate(BaseModel):
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    user_ids: List[int] = []

    @field_validator('name')
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Project name is required")
        return v.strip()


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator('name')
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Project name cannot be blank")
        return v.strip() if v is not None else v

    model_config = {
        "from_attributes": True
    }


class ProjectBase(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime

    model_config = {
        "from_attributes": True
    }


class ProjectSummary(ProjectBase):
    task_count: int = 0


class ProjectOut(ProjectBase):
    users: List[UserBasic]
    tasks: List[TaskOut]


class ProjectMemberAdd(BaseModel):
    user_id: int
