# workforce/routers/users.py
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workforce.database import get_db
from workforce.exceptions import ForbiddenError, NotFoundError, ValidationError
from workforce.models import Role, User, UserStatus
from workforce.schemas import UserBasic, UserOut, UserUpdate
from workforce.services.token_service import token_service
from workforce.utils.auth import get_current_user, require_roles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserBasic])
def list_active_users(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Active users, for assignee pickers"""
    return (
        db.query(User)
        .filter(User.status == UserStatus.ACTIVE)
        .order_by(User.first_name, User.last_name, User.id)
        .all()
    )


@router.patch("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    """Change another user's role or status (admin only)"""
    if payload.role is None and payload.status is None:
        raise ValidationError("Nothing to update: provide role and/or status")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found", code="USER_NOT_FOUND")

    if user.id == current_user.id and payload.role is not None and payload.role != user.role:
        raise ForbiddenError("You cannot change your own role", code="SELF_ROLE_CHANGE")
    if user.id == current_user.id and payload.status not in (None, UserStatus.ACTIVE):
        raise ForbiddenError("You cannot deactivate your own account", code="SELF_DEACTIVATION")

    if payload.role is not None:
        user.role = payload.role
    deactivated = payload.status is not None and payload.status != UserStatus.ACTIVE and user.status == UserStatus.ACTIVE
    if payload.status is not None:
        user.status = payload.status
    db.commit()

    if deactivated:
        revoked = token_service.revoke_all(db, user.id)
        logger.info("User %s deactivated by %s; revoked %d refresh tokens", user.id, current_user.id, revoked)

    db.refresh(user)
    return UserOut.model_validate(user)
