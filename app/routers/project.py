# app/routers/project.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.models.project import Project
from app.models.user import User, UserRole
from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectBase, ProjectSummary, ProjectOut, ProjectMemberAdd
from app.schemas.user import UserBasic
from app.services.membership import (
    board_tasks,
    get_visible_project,
    sync_admin_memberships,
    task_counts,
    visible_projects,
)
from app.utils.auth import get_current_user, ensure_allowed
from app.utils.permissions import Action
from app.utils.security import SessionIdentity

router = APIRouter()

logger = logging.getLogger(__name__)

def _get_project_or_404(db: Session, project_id: int) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project

def _serialize_board(db: Session, project: Project) -> dict:
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "image_url": project.image_url,
        "created_at": project.created_at,
        "users": sorted(project.users, key=lambda u: u.id),
        "tasks": board_tasks(db, project.id),
    }

@router.get("/", response_model=List[ProjectSummary])
def get_all_projects(
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Get the projects the current user can see, newest first"""
    projects = visible_projects(db, current_user)
    counts = task_counts(db, [p.id for p in projects])
    return [
        {
            "id": p.id,
            "name": p.name,
            "description": p.description,
            "image_url": p.image_url,
            "created_at": p.created_at,
            "task_count": counts.get(p.id, 0),
        }
        for p in projects
    ]

@router.get("/{project_id}", response_model=ProjectOut)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Get a project board: members and tasks, newest task first"""
    project = get_visible_project(db, current_user, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return _serialize_board(db, project)

@router.post("/", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    ensure_allowed(current_user, Action.CREATE_PROJECT, "Only the super-admin can create projects")

    members = []
    if project_data.user_ids:
        members = db.query(User).filter(User.id.in_(project_data.user_ids)).all()
        missing = set(project_data.user_ids) - {u.id for u in members}
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Users not found: {', '.join(str(i) for i in sorted(missing))}"
            )

    db_project = Project(
        name=project_data.name,
        description=project_data.description,
        image_url=project_data.image_url,
    )
    db_project.users = members
    db.add(db_project)
    sync_admin_memberships(db, [db_project])
    db.commit()
    db.refresh(db_project)

    logger.info(f"Project {db_project.id} '{db_project.name}' created by {current_user.username}")
    return _serialize_board(db, db_project)

@router.put("/{project_id}", response_model=ProjectBase)
def update_project(
    project_id: int,
    project_update: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    ensure_allowed(current_user, Action.UPDATE_PROJECT, "Only the super-admin can update projects")
    db_project = _get_project_or_404(db, project_id)

    update_data = project_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field == "name" and value is None:
            continue
        setattr(db_project, field, value)

    db.commit()
    db.refresh(db_project)
    return db_project

@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    ensure_allowed(current_user, Action.DELETE_PROJECT, "Only the super-admin can delete projects")
    db_project = _get_project_or_404(db, project_id)

    db_project.users = []
    db.delete(db_project)
    db.commit()
    logger.info(f"Project {project_id} deleted by {current_user.username}")
    return None

@router.get("/{project_id}/members", response_model=List[UserBasic])
def get_project_members(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    project = get_visible_project(db, current_user, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return sorted(project.users, key=lambda u: u.id)

@router.post("/{project_id}/members", response_model=List[UserBasic])
def add_project_member(
    project_id: int,
    member: ProjectMemberAdd,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    ensure_allowed(current_user, Action.ASSIGN_MEMBER, "Only the super-admin can assign project members")
    project = _get_project_or_404(db, project_id)

    user = db.query(User).filter(User.id == member.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if user not in project.users:
        project.users.append(user)
        db.commit()
        db.refresh(project)
    return sorted(project.users, key=lambda u: u.id)

@router.delete("/{project_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_project_member(
    project_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    ensure_allowed(current_user, Action.UNASSIGN_MEMBER, "Only the super-admin can unassign project members")
    project = _get_project_or_404(db, project_id)

    user = next((u for u in project.users if u.id == user_id), None)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User is not a member of this project")
    if user.role == UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins are members of every project"
        )

    project.users.remove(user)
    db.commit()
    return None
