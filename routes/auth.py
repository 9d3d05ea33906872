from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

import logging

from core.config import settings
from core.database import get_session
from core.errors import Internal, Unauthorized, ValidationFailed
from core.security import (
    create_token_for_user,
    get_current_user,
    hash_password,
    verify_password,
)
from core.tenancy import find_organization
from models.models import Organization, User, UserRole, MemberStatus, utcnow
from schemas.user_schema import LoginRequest, SignupRequest, TokenResponse, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


# ==========================================================
# ✅ Helper: attach the session cookie
# ==========================================================
def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


def token_response(user: User, organization: Organization, token: str) -> TokenResponse:
    return TokenResponse(
        access_token=token,
        user=UserRead.model_validate(user),
        organization_id=organization.id if organization else None,
    )


# ==========================================================
# ✅ Signup — creates the admin principal and its organization
# ==========================================================
@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(data: SignupRequest, response: Response, session: Session = Depends(get_session)):
    """Every signup administers exactly one organization."""
    existing = session.exec(select(User).where(User.email == data.email)).first()
    if existing:
        raise ValidationFailed(
            "An account with this email already exists. Please log in instead.",
            errors={"email": ["Already registered"]},
        )

    now = utcnow()
    user = User(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        role=UserRole.ADMIN.value,
        status=MemberStatus.ACTIVE.value,
        join_date=now,
        created_at=now,
        updated_at=now,
    )
    try:
        session.add(user)
        session.flush()

        organization = Organization(
            name=data.organization_name or f"{data.name}'s Organization",
            admin_id=user.id,
            created_at=now,
            updated_at=now,
        )
        session.add(organization)
        session.commit()
        session.refresh(user)
        session.refresh(organization)
    except IntegrityError:
        session.rollback()
        raise ValidationFailed("An account with this email already exists. Please log in instead.")
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Database error during signup for %s", data.email)
        raise Internal("Something went wrong while creating your account. Please try again later.")

    logger.info("Signup completed for %s (organization %s)", user.email, organization.id)
    token = create_token_for_user(user)
    set_session_cookie(response, token)
    return token_response(user, organization, token)


# ==========================================================
# ✅ Login — bearer token in the body plus httpOnly cookie
# ==========================================================
@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginRequest, response: Response, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == credentials.email)).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info("Failed login for %s", credentials.email)
        raise Unauthorized("Invalid email or password.")

    token = create_token_for_user(user)
    set_session_cookie(response, token)
    logger.info("Login successful for %s", user.email)
    return token_response(user, find_organization(session, user.id), token)


# ==========================================================
# ✅ Logout — clears the session cookie
# ==========================================================
@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return {"message": "Logged out"}


# ==========================================================
# ✅ Current principal
# ==========================================================
@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
