# workforce/routers/auth.py
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from workforce.config import get_settings
from workforce.database import get_db, utcnow
from workforce.exceptions import AuthError, ConflictError
from workforce.models import Notification, User, UserStatus
from workforce.schemas import (
    AuthResponse,
    LoginResponse,
    LogoutRequest,
    MeResponse,
    MessageOut,
    RefreshRequest,
    RefreshResponse,
    UserCreate,
    UserLogin,
    UserOut,
)
from workforce.services.token_service import token_service
from workforce.utils.auth import get_current_user
from workforce.utils.limiter import limit_auth
from workforce.utils.security import burn_password_check, create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_tokens(db: Session, user: User) -> Dict[str, Any]:
    refresh = token_service.issue(db, user)
    return {
        "access_token": create_access_token(user),
        "refresh_token": refresh.token,
        "expires_in": get_settings().access_token_expire_minutes * 60,
    }


def user_profile(db: Session, user: User) -> Dict[str, Any]:
    """Profile plus team memberships and unread notification count"""
    unread = (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user.id, Notification.is_read.is_(False))
        .scalar()
    )
    teams = sorted(user.teams, key=lambda team: team.id)
    profile = UserOut.model_validate(user).model_dump()
    profile.update(
        teams=[{"id": team.id, "name": team.name} for team in teams],
        team_ids=[team.id for team in teams],
        unread_notifications=unread or 0,
    )
    return profile


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limit_auth
def register(request: Request, payload: UserCreate, db: Session = Depends(get_db)):
    """Create an account and sign it in"""
    if db.query(User.id).filter(User.email == payload.email).first():
        raise ConflictError("User with this email already exists", code="EMAIL_EXISTS")

    user = User(
        email=payload.email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
        phone=payload.phone,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role.value)

    return {
        "message": "User registered successfully",
        "user": user,
        "tokens": _issue_tokens(db, user),
    }


@router.post("/login", response_model=LoginResponse)
@limit_auth
def login(request: Request, payload: UserLogin, db: Session = Depends(get_db)):
    """Exchange credentials for an access/refresh token pair"""
    invalid = AuthError("Invalid email or password", code="INVALID_CREDENTIALS")

    user = db.query(User).filter(User.email == payload.email).first()
    if user is None:
        burn_password_check(payload.password)
        raise invalid
    if not verify_password(payload.password, user.password_hash):
        raise invalid
    if user.status != UserStatus.ACTIVE:
        logger.warning("Login attempt for %s account %s", user.status.value, user.id)
        raise invalid

    user.last_login = utcnow()
    db.commit()
    db.refresh(user)

    return {
        "message": "Login successful",
        "user": user_profile(db, user),
        "tokens": _issue_tokens(db, user),
    }


@router.post("/refresh", response_model=RefreshResponse)
@limit_auth
def refresh(request: Request, payload: RefreshRequest, db: Session = Depends(get_db)):
    """Rotate a refresh token; the presented token cannot be used again"""
    user, successor = token_service.rotate(db, payload.refresh_token)
    return {
        "message": "Token refreshed successfully",
        "tokens": {
            "access_token": create_access_token(user),
            "refresh_token": successor.token,
            "expires_in": get_settings().access_token_expire_minutes * 60,
        },
    }


@router.post("/logout", response_model=MessageOut)
def logout(
    payload: Optional[LogoutRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Revoke the given refresh token, or every token of the caller"""
    if payload is not None and payload.refresh_token:
        token_service.revoke(db, payload.refresh_token, user_id=current_user.id)
        return {"message": "Logged out successfully"}

    revoked = token_service.revoke_all(db, current_user.id)
    logger.info("User %s logged out everywhere (%d tokens revoked)", current_user.id, revoked)
    return {"message": "Logged out from all sessions"}


@router.post("/logout-token", response_model=MessageOut)
def logout_token(payload: RefreshRequest, db: Session = Depends(get_db)):
    """Revoke a refresh token without an access token"""
    token_service.revoke(db, payload.refresh_token)
    return {"message": "Refresh token revoked"}


@router.get("/me", response_model=MeResponse)
def me(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Get the current user's profile"""
    return {"user": user_profile(db, current_user)}
