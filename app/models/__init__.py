from app.models.user import User, UserRole
from app.models.project import Project, project_members
from app.models.task import Task, TaskStatus, TaskPriority

__all__ = [
    "User",
    "UserRole",
    "Project",
    "project_members",
    "Task",
    "TaskStatus",
    "TaskPriority",
]
