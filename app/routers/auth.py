import logging

from fastapi import APIRouter, HTTPException, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.user import UserLogin
from app.schemas.tokens import LoginResponse, SessionOut
from app.utils.auth import resolve_current, set_session_cookie, clear_session_cookie
from app.utils.security import SessionIdentity, verify_password

router = APIRouter()

logger = logging.getLogger(__name__)

@router.post("/login", response_model=LoginResponse)
def login(credentials: UserLogin, response: Response, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.username == credentials.username).first()
    if not db_user or not verify_password(credentials.password, db_user.hashed_password):
        logger.info(f"Failed login for '{credentials.username}'")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    set_session_cookie(response, SessionIdentity.for_user(db_user))
    logger.info(f"User {db_user.username} logged in")
    return {"success": True, "user": db_user}

@router.post("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"success": True}

@router.get("/session", response_model=SessionOut)
def get_session(request: Request):
    """Probe the current credential without being redirected"""
    identity = resolve_current(request)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return {
        "id": identity.id,
        "username": identity.username,
        "role": identity.role,
        "tier": identity.tier.value,
    }
