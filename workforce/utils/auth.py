# workforce/utils/auth.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from workforce.database import get_db
from workforce.exceptions import AuthError, ForbiddenError
from workforce.models import User, UserStatus
from workforce.utils.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity attached to request.state for logging"""

    id: int
    email: str
    role: str
    name: str

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(id=user.id, email=user.email, role=getattr(user.role, "value", user.role), name=user.name)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user

    The user row is reloaded on every request so a deactivated account is
    refused even while its token signature is still valid.
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required", code="TOKEN_REQUIRED")

    payload = decode_access_token(credentials.credentials)

    user = db.query(User).filter(User.id == payload["userId"]).first()
    if user is None:
        raise AuthError("User not found", code="USER_NOT_FOUND")
    if user.status != UserStatus.ACTIVE:
        raise AuthError("Account is not active", code="ACCOUNT_INACTIVE")

    request.state.user = CurrentUser.from_user(user)
    return user


def require_roles(*roles):
    """Dependency factory: the current user must hold one of roles"""
    allowed = {getattr(role, "value", role) for role in roles}

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if getattr(current_user.role, "value", current_user.role) not in allowed:
            raise ForbiddenError("Insufficient permissions", code="INSUFFICIENT_PERMISSIONS")
        return current_user

    return dependency
