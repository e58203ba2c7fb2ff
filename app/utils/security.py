# app/utils/security.py
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config.security import SecurityConfig, DEFAULT_SECRET_KEY
from app.models.user import UserRole
from app.utils.permissions import Tier, tier_for

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=SecurityConfig.ACCOUNTS['password_schemes'], deprecated="auto")

if SecurityConfig.SESSION['secret_key'] == DEFAULT_SECRET_KEY:
    logger.warning("SECRET_KEY is not set, session tokens are signed with the development key")


@dataclass(frozen=True)
class SessionIdentity:
    """The acting identity carried by a session credential"""
    id: int
    username: str
    role: str
    tier: Tier

    @classmethod
    def for_user(cls, user) -> "SessionIdentity":
        return cls(
            id=user.id,
            username=user.username,
            role=user.role,
            tier=tier_for(user.username, user.role),
        )


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_session_token(identity: SessionIdentity, now: Optional[datetime] = None) -> str:
    """Sign a credential for identity that expires SESSION ttl_hours from now"""
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + timedelta(hours=SecurityConfig.SESSION['ttl_hours'])
    payload = {
        "sub": str(identity.id),
        "username": identity.username,
        "role": identity.role,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, SecurityConfig.SESSION['secret_key'], algorithm=SecurityConfig.SESSION['algorithm'])


def verify_session_token(token: Optional[str]) -> Optional[SessionIdentity]:
    """Verify a credential and return its identity without raising exceptions"""
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            SecurityConfig.SESSION['secret_key'],
            algorithms=[SecurityConfig.SESSION['algorithm']],
        )
    except JWTError:
        return None

    subject = payload.get("sub")
    username = payload.get("username")
    role = payload.get("role")
    if subject is None or not username or role not in (UserRole.ADMIN.value, UserRole.USER.value):
        return None
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return None

    return SessionIdentity(id=user_id, username=username, role=role, tier=tier_for(username, role))
