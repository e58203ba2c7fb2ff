# app/services/membership.py
import logging
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.project import Project, project_members
from app.models.task import Task
from app.models.user import User, UserRole
from app.utils.permissions import can_view_all_projects

logger = logging.getLogger(__name__)


def get_admins(db: Session) -> List[User]:
    return db.query(User).filter(User.role == UserRole.ADMIN.value).order_by(User.id).all()


def sync_admin_memberships(db: Session, projects: Optional[Iterable[Project]] = None) -> int:
    """Make every ADMIN-role user an explicit member of the given projects.

    Defaults to all projects. Returns the number of memberships added; the
    caller commits.
    """
    admins = get_admins(db)
    if projects is None:
        projects = db.query(Project).all()

    added = 0
    for project in projects:
        member_ids = {user.id for user in project.users}
        for admin in admins:
            if admin.id not in member_ids:
                project.users.append(admin)
                added += 1

    if added:
        logger.info(f"Added {added} admin project memberships")
    return added


def is_member(project: Project, user_id: int) -> bool:
    return any(user.id == user_id for user in project.users)


def visible_projects(db: Session, actor) -> List[Project]:
    """Projects actor can see, newest first"""
    query = db.query(Project)
    if not can_view_all_projects(actor):
        query = query.join(project_members, project_members.c.project_id == Project.id).filter(
            project_members.c.user_id == actor.id
        )
    return query.order_by(Project.created_at.desc(), Project.id.desc()).all()


def get_visible_project(db: Session, actor, project_id: int) -> Optional[Project]:
    """The project if it exists and actor can see it, otherwise None"""
    project = db.query(Project).filter(Project.id == project_id).first()
    if project is None:
        return None
    if can_view_all_projects(actor) or is_member(project, actor.id):
        return project
    return None


def task_counts(db: Session, project_ids: List[int]) -> dict:
    """Stored task count per project, soft-deleted tasks included"""
    if not project_ids:
        return {}
    rows = (
        db.query(Task.project_id, func.count(Task.id))
        .filter(Task.project_id.in_(project_ids))
        .group_by(Task.project_id)
        .all()
    )
    return {project_id: count for project_id, count in rows}


def board_tasks(db: Session, project_id: int) -> List[Task]:
    """All stored tasks of a project, newest first"""
    return (
        db.query(Task)
        .filter(Task.project_id == project_id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )
