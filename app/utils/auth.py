# app/utils/auth.py
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.config.security import SecurityConfig
from app.database import get_db
from app.models.user import User
from app.utils.permissions import Action, is_allowed
from app.utils.security import SessionIdentity, create_session_token, verify_session_token

logger = logging.getLogger(__name__)


def resolve_current(request: Request) -> Optional[SessionIdentity]:
    """Read the session cookie from the request and verify it"""
    token = request.cookies.get(SecurityConfig.SESSION['cookie_name'])
    return verify_session_token(token)


def set_session_cookie(response: Response, identity: SessionIdentity) -> str:
    """Issue a fresh credential for identity and attach it to the response"""
    token = create_session_token(identity)
    response.set_cookie(
        key=SecurityConfig.SESSION['cookie_name'],
        value=token,
        max_age=SecurityConfig.session_max_age(),
        path=SecurityConfig.SESSION['cookie_path'],
        httponly=True,
        samesite=SecurityConfig.SESSION['cookie_samesite'],
        secure=SecurityConfig.is_production(),
    )
    return token


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SecurityConfig.SESSION['cookie_name'],
        path=SecurityConfig.SESSION['cookie_path'],
        httponly=True,
        samesite=SecurityConfig.SESSION['cookie_samesite'],
        secure=SecurityConfig.is_production(),
    )


def get_current_user(request: Request, db: Session = Depends(get_db)) -> SessionIdentity:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )
    identity = resolve_current(request)
    if identity is None:
        raise credentials_exception

    user = db.query(User).filter(User.id == identity.id).first()
    if user is None:
        logger.info(f"Session for deleted user {identity.id} rejected")
        raise credentials_exception

    # Role changes take effect without waiting for the credential to roll over
    return SessionIdentity.for_user(user)


def ensure_allowed(actor: SessionIdentity, action: Action, detail: str, **facts) -> None:
    """Raise 403 unless the authorization policy allows action"""
    if not is_allowed(actor, action, **facts):
        logger.warning(f"User {actor.username} denied {action.value}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
