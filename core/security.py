# core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import logging

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlmodel import Session

from core.config import settings
from core.database import get_session
from core.errors import Forbidden, Unauthorized
from models.models import User

logger = logging.getLogger(__name__)


# ========================================
# 🔑 JWT / APP CONFIG
# ========================================
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM or "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

# auto_error=False: the session cookie is an accepted fallback
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


# ========================================
# 🔐 Password Hashing (Argon2)
# ========================================
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash password using Argon2."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password using Argon2."""
    return pwd_context.verify(plain_password, hashed_password)


# ========================================
# 🔑 Token Helpers
# ========================================
def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode JWT and return payload, or None when invalid or expired."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def create_token_for_user(user: User) -> str:
    return create_access_token(
        {
            "sub": user.email,
            "user_id": user.id,
            "role": user.role,
        }
    )


def token_from_request(request: Request, bearer: Optional[str]) -> Optional[str]:
    """Bearer header wins; otherwise the session cookie."""
    if bearer:
        return bearer
    return request.cookies.get(settings.session_cookie_name)


def resolve_user(token: Optional[str], session: Session) -> Optional[User]:
    if not token:
        return None
    payload = decode_token(token)
    if not payload or not payload.get("user_id"):
        return None
    return session.get(User, payload["user_id"])


# ========================================
# 👤 Authentication & Role Checks
# ========================================
def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> User:
    """Resolve the principal from bearer token or session cookie; 401 otherwise."""
    user = resolve_user(token_from_request(request, token), session)
    if not user:
        logger.info("Unauthorized request to %s", request.url.path)
        raise Unauthorized()
    return user


def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> Optional[User]:
    """Same as get_current_user but yields None for anonymous callers."""
    return resolve_user(token_from_request(request, token), session)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require the ADMIN role."""
    if not current_user.is_admin:
        raise Forbidden("Admin privileges required")
    return current_user
