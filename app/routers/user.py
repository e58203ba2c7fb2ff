# app/routers/user.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.user import UserBasic, UserCreate, UserOut, UserUpdate
from app.services.membership import get_admins, sync_admin_memberships
from app.utils.auth import get_current_user, ensure_allowed
from app.utils.permissions import Action, Tier, tier_for
from app.utils.security import SessionIdentity, hash_password

router = APIRouter()

logger = logging.getLogger(__name__)

def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user

def _ensure_username_free(db: Session, username: str, exclude_id: int = None):
    query = db.query(User).filter(User.username == username)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=400, detail="Username already taken")

@router.get("/me", response_model=UserOut)
def get_current_user_info(
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Get current user information"""
    return _get_user_or_404(db, current_user.id)

@router.get("/", response_model=List[UserOut])
def get_all_users(
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Get all users - super-admin only"""
    ensure_allowed(current_user, Action.LIST_USERS, "Only the super-admin can manage users")
    return db.query(User).order_by(User.id).all()

@router.get("/admins", response_model=List[UserBasic])
def get_admin_users(
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """List ADMIN-role users and make sure each one is a member of every project"""
    ensure_allowed(current_user, Action.LIST_USERS, "Only the super-admin can manage users")
    if sync_admin_memberships(db):
        db.commit()
    return get_admins(db)

@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Create a new user - super-admin only"""
    ensure_allowed(current_user, Action.CREATE_USER, "Only the super-admin can create users")
    _ensure_username_free(db, user.username)

    db_user = User(
        username=user.username,
        name=user.name,
        email=user.email,
        hashed_password=hash_password(user.password),
        role=user.role,
    )
    db.add(db_user)
    db.flush()

    if db_user.role == UserRole.ADMIN.value:
        sync_admin_memberships(db)

    db.commit()
    db.refresh(db_user)
    logger.info(f"User {db_user.username} created by {current_user.username}")
    return db_user

@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Update a user - super-admin only, password changes are optional"""
    ensure_allowed(current_user, Action.UPDATE_USER, "Only the super-admin can update users", target_user_id=user_id)
    db_user = _get_user_or_404(db, user_id)

    update_data = user_update.model_dump(exclude_unset=True)
    update_data.pop("repeat_password", None)
    password = update_data.pop("password", None)

    if "username" in update_data and update_data["username"] != db_user.username:
        if tier_for(db_user.username, db_user.role) == Tier.SUPER_ADMIN:
            raise HTTPException(status_code=400, detail="The super-admin login cannot be renamed")
        _ensure_username_free(db, update_data["username"], exclude_id=user_id)
    if password:
        db_user.hashed_password = hash_password(password)
    for field, value in update_data.items():
        if value is not None:
            setattr(db_user, field, value)

    if db_user.role == UserRole.ADMIN.value:
        db.flush()
        sync_admin_memberships(db)

    db.commit()
    db.refresh(db_user)
    return db_user

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: SessionIdentity = Depends(get_current_user)
):
    """Delete a user - super-admin only, never itself"""
    ensure_allowed(current_user, Action.DELETE_USER, "You cannot delete this user", target_user_id=user_id)
    db_user = _get_user_or_404(db, user_id)

    # Memberships go with the user
    db_user.projects = []
    db.delete(db_user)
    db.commit()
    logger.info(f"User {user_id} deleted by {current_user.username}")
    return None
